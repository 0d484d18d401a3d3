#!/usr/bin/env python3
"""
dashframe - Main Entry Point

Load frames from a JSON DTO file or a CSV file and print their display
values.

Usage:
    python main.py frames.json                  # last value of each numeric field
    python main.py data.csv --calcs mean,max    # reducers
    python main.py data.csv --values --limit 10 # raw values
    python main.py data.csv --unit ms --decimals 1
    python main.py --list-units                 # available unit ids
    python main.py --list-reducers              # available reducer ids
"""

import sys
import json
import argparse
from pathlib import Path

import pandas as pd


def load_frames(path: Path) -> list:
    """Load frames from ``.json`` (one DTO or a list of DTOs) or ``.csv``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or CSV.
    """
    from frames.dataframe import DataFrame, data_frames_from_dtos

    if path.suffix.lower() == ".csv":
        table = pd.read_csv(path, dtype=str, keep_default_na=False)
        frame = DataFrame({"name": path.stem, "fields": [{"name": c} for c in table.columns]})
        for row in table.itertuples(index=False):
            frame.append_row([None if cell == "" else cell for cell in row])
        return [frame]

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    return data_frames_from_dtos(data)


def print_units():
    from display.value_formats import get_value_formats

    for category in get_value_formats():
        print(category["text"])
        for item in category["submenu"]:
            print(f"  {item['value']:<24} {item['text']}")


def print_reducers():
    from display.reducers import get_field_reducers

    for info in get_field_reducers():
        aliases = f" (alias: {', '.join(info.alias_ids)})" if info.alias_ids else ""
        print(f"  {info.id:<16} {info.description}{aliases}")


def main():
    parser = argparse.ArgumentParser(description="dashframe - frame display values")
    parser.add_argument("path", nargs="?", help="JSON DTO file or CSV file")
    parser.add_argument("--calcs", default="", help="Comma-separated reducer ids (default: last)")
    parser.add_argument("--values", action="store_true", help="Show raw values instead of reducers")
    parser.add_argument("--limit", type=int, default=None, help="Maximum raw values to show")
    parser.add_argument("--unit", default=None, help="Unit id for every field (see --list-units)")
    parser.add_argument("--decimals", type=int, default=None, help="Fixed decimal count")
    parser.add_argument("--json", action="store_true", help="Print display values as JSON")
    parser.add_argument("--list-units", action="store_true", help="List unit ids and exit")
    parser.add_argument("--list-reducers", action="store_true", help="List reducer ids and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    args = parser.parse_args()

    from core.logging import setup_logging, log_error
    setup_logging(verbose=args.verbose)

    if args.list_units:
        print_units()
        return 0
    if args.list_reducers:
        print_reducers()
        return 0
    if not args.path:
        parser.print_usage()
        return 2

    from display.field_display import FieldDisplayOptions, get_field_display_values

    path = Path(args.path)
    try:
        frames = load_frames(path)
    except (OSError, ValueError) as e:
        log_error(f"Could not load frames from {path}", exc=e, context={"path": str(path)})
        print(f"Error: could not load {path}: {e}")
        return 1

    defaults = {"unit": args.unit, "decimals": args.decimals}
    options = FieldDisplayOptions(
        calcs=[c.strip() for c in args.calcs.split(",") if c.strip()],
        defaults=defaults,
        values=args.values,
        limit=args.limit,
    )
    displays = get_field_display_values(frames, options)

    if args.json:
        print(json.dumps(
            [{"name": d.name, "row": d.row, **d.display.to_dict()} for d in displays],
            indent=2,
            default=str,
        ))
    else:
        for d in displays:
            title = d.display.title or d.name
            print(f"{title}: {d.display.text}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
