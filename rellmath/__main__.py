from __future__ import annotations

"""`python -m rellmath` entry point."""

from .app.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
