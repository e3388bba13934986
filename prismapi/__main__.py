# File: prismapi/__main__.py
"""
prismapi — Module entry point.

Allows running the generator directly via::

    python -m prismapi generate -s prisma/schema.prisma -o ./src/generated

This module simply delegates to ``prismapi.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from prismapi.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
