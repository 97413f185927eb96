"""
Command-line entry point for roof measurement extraction.
"""

import argparse
import json
import sys
from pathlib import Path

from roof_measurements.config import configure_logging, get_logger, get_settings
from roof_measurements.pipeline.runner import MeasurementPipeline


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="roof-measurements",
        description="Extract roof measurements from an aerial roof report PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  roof-measurements report.pdf                    Text-pattern extraction
  roof-measurements report.pdf --vision           Vision extraction of pages 1, 9, 10
  roof-measurements report.pdf --vision --pages 2 3 --output out.json
        """,
    )

    parser.add_argument(
        "pdf",
        type=Path,
        help="Path to the roof report PDF",
    )
    parser.add_argument(
        "--vision",
        action="store_true",
        default=settings.extraction.prefer_vision,
        help="Render pages and extract with the vision model",
    )
    parser.add_argument(
        "--pages",
        type=int,
        nargs="+",
        help=f"One-indexed pages to render (default: {' '.join(map(str, settings.pdf.pages))})",
    )
    parser.add_argument(
        "--model",
        help=f"Vision model (default: {settings.vision.model})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help=f"Inference timeout in seconds (default: {settings.vision.timeout:g})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the outcome JSON to this file instead of stdout",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    configure_logging()
    logger = get_logger(__name__)

    pipeline = MeasurementPipeline()
    try:
        outcome = pipeline.extract_file(
            args.pdf,
            use_vision=args.vision,
            pages=args.pages,
            model=args.model,
            timeout=args.timeout,
        )
    except FileNotFoundError as e:
        logger.error("input_not_found", path=str(args.pdf))
        print(str(e), file=sys.stderr)
        return 2

    output = json.dumps(outcome.to_dict(), indent=2)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info("outcome_written", path=str(args.output), authentic=outcome.authentic)
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
