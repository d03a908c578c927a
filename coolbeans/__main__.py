"""CLI entry point for Cool Beans."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from .engine import project
from .report import render_asset_classes, render_json, render_table, write_report
from .schema import SchemaError, load_prices, load_profile
from .validate import validate_profile

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cool Beans financial projections")
    parser.add_argument("profile", help="Path to profile JSON file")
    parser.add_argument("-o", "--output", help="Write projections to this path (.json for JSON, otherwise a text table)")
    parser.add_argument("--prices", help="Path to a price map JSON file ({symbol: {price, as_of}})")
    parser.add_argument("--start-year", type=int, help="Calendar year of the starting snapshot (default: this year)")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--expanded", action="store_true", help="Include one column per account in text output")
    parser.add_argument("--asset-classes", action="store_true", help="Print current value by asset class")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        profile = load_profile(args.profile)
        prices = load_prices(args.prices) if args.prices else None
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load profile: {exc}", file=sys.stderr)
        return 2

    validation = validate_profile(profile)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Profile is valid.")
        return 0

    snapshots = project(profile, prices, start_year=args.start_year)

    if args.output:
        if Path(args.output).suffix == ".json":
            content = render_json(snapshots)
        else:
            content = render_table(snapshots, expanded=args.expanded)
        path = write_report(args.output, content)
        print(f"Wrote projections to {path}")

    if args.summary:
        first = snapshots[0]
        last = snapshots[-1]
        print(render_table(snapshots, expanded=args.expanded), end="")
        print(f"Years: {first.year}-{last.year}")
        print(f"Ending assets: ${last.assets:,.0f}")
        print(f"Shortfall years: {sum(1 for snapshot in snapshots if snapshot.shortfall > 0)}")

    if args.asset_classes:
        print(render_asset_classes(profile, prices), end="")

    if not (args.output or args.summary or args.asset_classes):
        print(json.dumps({"years": len(snapshots), "ending_assets": round(snapshots[-1].assets, 2)}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
