"""Allow ``python -m filestats``."""

from filestats.adapters.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
