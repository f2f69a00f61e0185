"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for the EI region lookup.

Usage:
  # Single postal code
  python -m ei_regions.interfaces.cli --postal-code "K1A 0A1"

  # Batch file (one postal code per line)
  python -m ei_regions.interfaces.cli --file codes.txt

  # JSON output
  python -m ei_regions.interfaces.cli --postal-code K1A0A1 --json

  # Create the cache tables only
  python -m ei_regions.interfaces.cli --init-db

  # Via installed entry-point (pyproject.toml [project.scripts])
  ei-regions --postal-code K1A0A1

Exit codes:
  0 — success
  1 — fatal error (DB, fetch, etc.)
  2 — argument error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ei_regions.domain.models import LookupRequest
from ei_regions.services.container import get_services

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ei-regions",
        description="Resolve Canadian postal codes to their EI economic region.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--postal-code", "-p",
        metavar="CODE",
        dest="postal_code",
        help="Single postal code to resolve.",
    )
    p.add_argument(
        "--file", "-f",
        metavar="FILE",
        type=Path,
        help="Path to a text file with one postal code per line.",
    )
    p.add_argument(
        "--init-db",
        action="store_true",
        dest="init_db",
        help="Create the cache tables if they do not exist.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_result_text(result) -> None:
    """Pretty-print a PostalResult to stdout."""
    region = result.economic_region_details
    print(f"\n{'─' * 60}")
    print(f"Postal code : {result.postal_code}")
    print(f"Subdivision : {result.census_subdivision_name} ({result.common_name})")
    print(f"Division    : {result.census_division_name}")
    print(f"EI region   : {region.economic_region_name} "
          f"[{region.economic_region_code}, {region.province}]")
    print(f"{'─' * 60}")
    print(f"  Unemployment rate      : {region.unemployment_rate}")
    print(f"  Insured hours required : {region.insured_hours_required}")
    print(f"  Weeks payable          : {region.min_weeks_payable}–{region.max_weeks_payable}")
    print(f"  Best weeks required    : {region.best_weeks_required}")
    print()


def _print_result_json(result) -> None:
    """Print a PostalResult as JSON to stdout."""
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


# ── Main logic ─────────────────────────────────────────────────────────────

def _load_codes_from_file(path: Path) -> list[str]:
    """Read postal codes from a text file, skipping blank/comment lines."""
    if not path.exists():
        print(f"ERROR: File not found: {path}", file=sys.stderr)
        sys.exit(2)
    lines = path.read_text(encoding="utf-8").splitlines()
    return [l.strip() for l in lines if l.strip() and not l.startswith("#")]


def run(args: argparse.Namespace) -> int:
    """Execute lookups for the given arguments.

    Returns:
        Exit code (0 = success, 1 = error, 2 = argument error).
    """
    if args.postal_code:
        codes = [args.postal_code]
    elif args.file:
        codes = _load_codes_from_file(args.file)
    elif args.init_db:
        codes = []
    else:
        print("ERROR: provide --postal-code, --file or --init-db", file=sys.stderr)
        return 2

    printer = _print_result_json if args.json_output else _print_result_text

    try:
        services = get_services()
        if args.init_db:
            services.store.init_schema()
    except Exception as exc:
        logger.exception("Failed to initialise services")
        print(f"ERROR: Initialisation failed: {exc}", file=sys.stderr)
        return 1

    exit_code = 0
    try:
        for code in codes:
            try:
                request = LookupRequest(postal_code=code)
                printer(services.postal_lookup.lookup(request.postal_code))
            except Exception as exc:
                logger.exception("Lookup failed for postal code %r", code)
                print(f"ERROR [{code!r}]: {exc}", file=sys.stderr)
                exit_code = 1
    finally:
        services.close()

    return exit_code


def main() -> None:
    """Entry point for the ei-regions console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if not (args.postal_code or args.file or args.init_db):
        parser.print_help()
        sys.exit(2)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
