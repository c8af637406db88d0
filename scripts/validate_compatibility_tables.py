#!/usr/bin/env python3
"""
Validate a compatibility table file before deploying it.

Loads the file exactly as the API would and prints a summary. Exits with
status 1 when the table is rejected.

Usage:
    PYTHONPATH=src python scripts/validate_compatibility_tables.py
    PYTHONPATH=src python scripts/validate_compatibility_tables.py path/to/tables.json
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "src"))


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate compatibility tables")
    parser.add_argument("path", nargs="?", default=None, help="Table JSON (default: packaged)")
    args = parser.parse_args()

    from core.logging import configure_logging
    from scoring.tables import CompatibilityTableError, load_compatibility_tables

    configure_logging(json_logs=False, log_level="WARNING")

    try:
        tables = load_compatibility_tables(args.path)
    except CompatibilityTableError as e:
        print(f"INVALID: {e}", file=sys.stderr)
        return 1

    info = tables.describe()
    print(f"Version:   {info['version']}")
    print(f"Neutral:   {info['neutral_score']:g}")
    print(f"Colors:    {len(info['colors'])}")
    print(f"Types:     {len(info['types'])}")
    print(f"Patterns:  {len(info['patterns'])}")
    print(f"Weights:   {info['weights']}")
    print("OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
