#!/usr/bin/env python3
"""
Extract one day's menu from a saved source document.

Useful when a source changed its layout: save the page (or the pdftotext
output of the bulletin) and check what the extractor makes of it.

    python scripts/extract_menu.py mensa speiseplan.html --date 2024-10-14
    python scripts/extract_menu.py bistro bistro42.txt --date 2024-10-14
"""

from __future__ import annotations

import argparse
from dataclasses import asdict
from datetime import date
import json
import os
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.menubot.calendar_de import day_name
from src.menubot.config import get_config
from src.menubot.models import LayoutMismatch
from src.menubot.runner import bistro_extractor, mensa_extractor


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("source", choices=["mensa", "bistro"])
    parser.add_argument("input_path", help="Saved HTML page or pdftotext output")
    parser.add_argument(
        "--date",
        dest="day",
        type=date.fromisoformat,
        default=None,
        help="Menu date as YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--out",
        dest="output_path",
        default=None,
        help="Output JSON path (default: stdout)",
    )
    args = parser.parse_args()

    in_path = Path(args.input_path)
    if not in_path.exists():
        print(f"[ERR] Input file not found: {in_path}")
        return 1

    config = get_config()
    day = args.day or date.today()
    text = in_path.read_bytes().decode("utf-8", errors="replace")

    try:
        if args.source == "mensa":
            entries = mensa_extractor(config).extract(text, day)
        else:
            entries = bistro_extractor(config).extract(text, day, day_name(day))
    except LayoutMismatch as e:
        print(f"[ERR] {e}")
        return 1

    payload = {
        "source": args.source,
        "date": day.isoformat(),
        "num_entries": len(entries),
        "entries": [asdict(entry) for entry in entries],
    }
    rendered = json.dumps(payload, ensure_ascii=False, indent=2)

    if args.output_path:
        out_path = Path(args.output_path)
        out_path.write_text(rendered, encoding="utf-8")
        print(f"[OK] Wrote {out_path} ({payload['num_entries']} entries)")
    else:
        print(rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
