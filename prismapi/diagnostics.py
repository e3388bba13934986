# File: prismapi/diagnostics.py
"""
prismapi - Diagnostics
========================
A structured side-channel for non-fatal conditions met while lowering the
schema or rendering code (unsupported field types, unknown enums, optional
identifiers).  Fatal conditions are exceptions (see ``prismapi.errors``);
everything here is collected, logged at WARNING and surfaced in the
generation report.

Known codes:
    unsupported-field-type   scalar type without a mapping, degraded to Any
    missing-enum             enum field whose enum is not declared
    missing-enum-name        enum field that carries no enum name
    optional-id              optional identifier rendered as required
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.diagnostics")

UNSUPPORTED_FIELD_TYPE: str = "unsupported-field-type"
MISSING_ENUM: str = "missing-enum"
MISSING_ENUM_NAME: str = "missing-enum-name"
OPTIONAL_ID: str = "optional-id"


class Diagnostic:
    """Lightweight diagnostic descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context", "category")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        category: Type[Warning] = UserWarning,
    ) -> None:
        self.level: str = level  # "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}
        self.category: Type[Warning] = category

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class Diagnostics:
    """
    Accumulates ``Diagnostic`` instances in the order they were raised.

    A single instance is threaded through one parse / generate run.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    # -- Mutation -----------------------------------------------------------

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        category: Type[Warning] = UserWarning,
    ) -> Diagnostic:
        item = Diagnostic("warning", code, message, context, category)
        self._items.append(item)
        logger.warning("%s", message)
        return item

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> Diagnostic:
        item = Diagnostic("info", code, message, context)
        self._items.append(item)
        logger.info("%s", message)
        return item

    def merge(self, other: "Diagnostics") -> None:
        """Append another container's items without re-logging them."""
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_warning]

    @property
    def all_items(self) -> List[Diagnostic]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [d.code for d in self._items]

    @property
    def has_warnings(self) -> bool:
        return any(d.is_warning for d in self._items)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self._items if d.is_warning)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self._items if d.code == code]

    def has(self, code: str, **context: Any) -> bool:
        """True when an item with *code* carries every given context value."""
        return any(
            d.code == code and all(d.context.get(k) == v for k, v in context.items())
            for d in self._items
        )

    def summary(self) -> str:
        return (
            f"Diagnostics: {self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<Diagnostics {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {"warning": "⚠️", "info": "ℹ️"}.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


__all__: List[str] = [
    "Diagnostic",
    "Diagnostics",
    "UNSUPPORTED_FIELD_TYPE",
    "MISSING_ENUM",
    "MISSING_ENUM_NAME",
    "OPTIONAL_ID",
]

logger.debug("prismapi.diagnostics loaded — %d public symbols.", len(__all__))
