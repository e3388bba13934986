"""
prismapi - FastAPI code generator for Prisma schemas
Install: pip install -e .[dev]
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="prismapi",
    version="0.1.0",
    author="prismapi contributors",
    author_email="",
    description="⚡ Generate FastAPI CRUD packages from a Prisma schema",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["prismapi", "prismapi.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0.0",
    ],
    extras_require={
        # Runtime stack of the generated package
        "server": [
            "fastapi>=0.100.0",
            "uvicorn>=0.20.0",
            "prisma>=0.11.0",
            "email-validator>=2.0.0",
        ],
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "pytest>=7.0",
            "httpx>=0.24.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "prismapi=prismapi.cli:cli_main",
        ],
    },
    keywords="fastapi, prisma, generator, api, code-generator, crud, pydantic",
)
