#!/usr/bin/env python3
"""
Post today's Mensa and UKSH Bistro menus to the Webex room.

Meant to run once per weekday (e.g. from cron). Use --dry-run to print the
message instead of posting it.
"""

from __future__ import annotations

import argparse
from datetime import date
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.menubot.config import ConfigError, init_config
from src.menubot.log_setup import configure_logging
from src.menubot.runner import run


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--date",
        dest="day",
        type=date.fromisoformat,
        default=None,
        help="Menu date as YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the message instead of posting it",
    )
    args = parser.parse_args()

    try:
        config = init_config(require_webex=not args.dry_run)
    except ConfigError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level)

    return run(config, args.day or date.today(), dry_run=args.dry_run)


if __name__ == "__main__":
    raise SystemExit(main())
