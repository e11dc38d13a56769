"""Command-line interface for coffee-scan."""

import argparse
import asyncio
import json
import sys

from coffee_scan import __version__
from coffee_scan.config import Settings
from coffee_scan.core import extract_with_metadata
from coffee_scan.exceptions import CoffeeScanError
from coffee_scan.logging_utils import setup_logging
from coffee_scan.parsing import UNPARSEABLE
from coffee_scan.reviews import lookup_reviews


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="coffee-scan",
        description="Extract coffee info from a photo of a coffee bag",
    )
    parser.add_argument("image", help="Path to coffee bag image")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--provider",
        help="openai, gemini or ocr (default: COFFEE_SCAN_PROVIDER env var, then openai)",
    )
    parser.add_argument(
        "--depth",
        choices=["basic", "detailed"],
        help="Prompt depth (default: EXTRACTION_DEPTH env var, then detailed)",
    )
    parser.add_argument(
        "--api-key",
        help="API key for the selected provider (default: provider env var)",
    )
    parser.add_argument(
        "--reviews",
        action="store_true",
        help="Also look up reviews for the extracted roaster and product",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"coffee-scan {__version__}",
    )

    args = parser.parse_args()
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    try:
        result, metadata = extract_with_metadata(
            args.image,
            api_key=args.api_key,
            provider=args.provider,
            depth=args.depth,
            settings=settings,
        )
    except CoffeeScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    extraction = result.structured_data
    summary = None
    if args.reviews:
        names = (extraction.roaster, extraction.product_name)
        if all(names) and UNPARSEABLE not in names:
            lookup = asyncio.run(lookup_reviews(extraction.roaster, extraction.product_name, settings=settings))
            summary = lookup.summary
        else:
            print("Reviews skipped: roaster or product name not found", file=sys.stderr)

    if args.json:
        payload = {
            "extraction": extraction.model_dump(by_alias=True, exclude_none=True),
            "confidence": result.confidence,
            "processingMethod": metadata.get("processing_method"),
        }
        if summary is not None:
            payload["reviews"] = summary.model_dump(by_alias=True, exclude_none=True)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _print_formatted(extraction, result.confidence)
        if summary is not None:
            _print_reviews(summary)

    return 0


def _print_formatted(extraction, confidence: float) -> None:
    """Print result in human-readable format."""
    print()
    print("  coffee-scan")
    print()

    fields = [
        ("Roaster", extraction.roaster),
        ("Product", extraction.product_name),
        ("Origin", _format_origin(extraction)),
        ("Varietal", _format_list(extraction.varietal)),
        ("Process", extraction.processing_method),
        ("Roast Level", extraction.roast_level),
        ("Flavor Notes", _format_list(extraction.flavor_notes)),
        ("Altitude", f"{extraction.altitude}m" if extraction.altitude else None),
        ("Harvest", extraction.harvest_year),
        ("Weight", extraction.weight),
        ("Price", extraction.price),
        ("Brewing", _format_list(extraction.brew_recommendations)),
        ("Confidence", f"{round(confidence * 100)}%"),
    ]

    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<14} {display}")

    print()


def _print_reviews(summary) -> None:
    label = "estimated" if summary.estimated else "scraped"
    print(f"  {'Rating:':<14} {summary.average_rating}/5 from {summary.total_reviews} reviews ({label})")
    if summary.product_page:
        print(f"  {'Product Page:':<14} {summary.product_page.url}")
    if summary.consensus:
        print(f"  {summary.consensus}")
    print()


def _format_origin(extraction) -> str | None:
    """Format origin as a single string."""
    parts = [p for p in [extraction.origin, extraction.region, extraction.farm] if p]
    return " / ".join(parts) if parts else None


def _format_list(items: list[str] | None) -> str | None:
    """Format list as comma-separated string."""
    if not items:
        return None
    return ", ".join(items)


if __name__ == "__main__":
    sys.exit(main())
