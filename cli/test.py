"""CLI wrapper: Run the test suite against an in-memory SQLite database."""

from __future__ import annotations

import os
import sys

from cli._runner import run


def main() -> None:
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
    run([sys.executable, "-m", "pytest", "-q", *sys.argv[1:]])
