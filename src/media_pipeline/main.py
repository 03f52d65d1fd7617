"""Main module for the media pipeline CLI."""

import sys
import json
import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .core import ConfigurationError, MediaItem, MediaPipelineError, PipelineConfig, get_logger
from .core.logging_config import set_debug
from .core.factories import ProcessingPipelineFactory

VERSION = "0.1.0"


def load_media_items(path: Path) -> List[MediaItem]:
    """
    Load media items written by the media API client.

    Accepts either a bare JSON array or an API response of the form
    ``{"data": [...]}``.

    Raises:
        ConfigurationError: If the file is unreadable or malformed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read media items from {path}: {e}") from e

    records = payload.get("data", []) if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise ConfigurationError(f"Expected a list of media items in {path}")

    try:
        return [MediaItem.model_validate(record) for record in records]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid media item in {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``media-pipeline`` command."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="media-pipeline",
        description="Media Pipeline - fetch media items and derive resized image variants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Transcode the items saved by the API client
  media-pipeline process --items output/recent_media.json

  # Limit concurrency and keep items whose variants partly fail
  media-pipeline process --items media.json --max-concurrency 4 --partial-variants

  # Show version
  media-pipeline version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    process_parser: argparse.ArgumentParser = subparsers.add_parser(
        "process", help="Fetch media items and write variants plus a manifest"
    )
    process_parser.add_argument(
        "--items",
        type=Path,
        default=Path("output/recent_media.json"),
        help="JSON file with media items (default: output/recent_media.json)",
    )
    process_parser.add_argument(
        "--media-dir",
        type=Path,
        default=Path("output/media"),
        help="Directory to save media variants (default: output/media)",
    )
    process_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory to save the manifest (default: output)",
    )
    process_parser.add_argument(
        "--max-concurrency",
        type=int,
        default=8,
        help="Maximum media items processed at once (default: 8)",
    )
    process_parser.add_argument(
        "--partial-variants",
        action="store_true",
        help="Keep an item when some of its variants fail",
    )
    process_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser("version", help="Show version information")
    return parser


def run_process(args: argparse.Namespace) -> int:
    """Run the ``process`` command; returns the exit status."""
    logger = get_logger("media-pipeline")
    if args.debug:
        set_debug(logger)

    try:
        config = PipelineConfig(
            storage_root=args.media_dir,
            output_dir=args.output_dir,
            max_concurrency=args.max_concurrency,
            partial_variants=args.partial_variants,
            debug=args.debug,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        items = load_media_items(args.items)
        logger.info(f"Loaded {len(items)} media items from {args.items}")

        pipeline = ProcessingPipelineFactory.create_pipeline(config=config)
        outcome = pipeline.process_all(items, config)
    except MediaPipelineError as e:
        logger.error(f"Processing failed: {e}")
        return 1

    print(
        f"Image processing complete: {outcome.processed_count} processed, "
        f"{outcome.skipped_count} skipped, {outcome.failed_count} failed"
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Entry point for the ``media-pipeline`` command-line interface.

    A run that completes exits 0 even when some items failed; only invalid
    input, configuration or storage failures exit 1.
    """
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "process":
        try:
            status = run_process(args)
        except KeyboardInterrupt:
            get_logger("media-pipeline").warning("Processing interrupted by user.")
            status = 130
        sys.exit(status)

    elif args.command == "version":
        print("Media Pipeline CLI")
        print(f"Version {VERSION}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
