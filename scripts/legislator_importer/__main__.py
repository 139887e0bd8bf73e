"""Entry point for running the legislator importer as a module.

Usage:
    python -m scripts.legislator_importer init-db
    python -m scripts.legislator_importer run --start-congress 119 --end-congress 100
    python -m scripts.legislator_importer clear-stale-locks
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
