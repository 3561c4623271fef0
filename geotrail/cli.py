"""Command line entry point.

    geotrail access.log                     # human-readable listing
    geotrail -f kml access.log > hits.kml   # KML document
    geotrail -f chart -f kml -o kml=hits.kml access.log
    tail -n 1000 access.log | geotrail -f chart
"""
from __future__ import annotations

import sys
import logging
import argparse
from pathlib import Path
from collections.abc import Sequence
from contextlib import ExitStack

from maxminddb import InvalidDatabaseError
from pydantic import ValidationError

from geotrail import __version__
from geotrail.config import configure_logging, get_settings
from geotrail.exceptions import SharedOutputError, TimestampParseError, UnknownFormatterError
from geotrail.formatters import FormatterGroup, build_formatter
from geotrail.formatters.registry import check_outputs, formatter_names
from geotrail.services.geoip.resolver import GeoIP2Resolver
from geotrail.services.scanner.service import EventScanner


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG_ERROR = 2


def output_mapping(value: str) -> tuple[str, Path]:
    """Parse a ``NAME=PATH`` output argument."""
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        raise argparse.ArgumentTypeError(f"expected NAME=PATH, got '{value}'")
    return name, Path(path)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="geotrail",
        description="Geo-tag access log lines and render them as a listing, a KML document or a chart URL",
    )
    parser.add_argument(
        "log_file",
        nargs="?",
        help="Access log to scan. Reads standard input when omitted.",
    )
    parser.add_argument(
        "-f",
        "--formatter",
        dest="formatters",
        action="append",
        choices=formatter_names(),
        help="Output formatter, repeat to render several at once (default: from settings)",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="outputs",
        action="append",
        type=output_mapping,
        metavar="NAME=PATH",
        help="Write a formatter to its own file, e.g. kml=hits.kml (default: standard output)",
    )
    parser.add_argument("--geoip-db", help="Path to GeoLite2-City mmdb file")
    parser.add_argument(
        "--on-timestamp-error",
        choices=["abort", "skip"],
        help="Abort the scan or skip the line when a timestamp cannot be parsed",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level for messages on stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(args.log_level or settings.effective_log_level)

    formatter_selection = args.formatters or settings.scanner.formatters
    db_path = args.geoip_db or settings.geoip.db_path
    on_timestamp_error = args.on_timestamp_error or settings.scanner.on_timestamp_error
    log_file = args.log_file or settings.scanner.input_path

    outputs = {**settings.scanner.outputs, **dict(args.outputs or [])}
    try:
        check_outputs(formatter_selection, outputs)
    except (UnknownFormatterError, SharedOutputError) as e:
        logger.error("%s", e)
        return EXIT_CONFIG_ERROR
    for name in [name for name in outputs if name not in formatter_selection]:
        logger.warning("Ignoring output for formatter '%s', it is not selected", name)
        del outputs[name]

    with ExitStack() as stack:
        try:
            resolver = stack.enter_context(GeoIP2Resolver.from_path(db_path, settings.geoip.locales))
        except (OSError, InvalidDatabaseError) as e:
            logger.error("Could not open GeoIP database %s: %s", db_path, e)
            return EXIT_CONFIG_ERROR

        if log_file:
            try:
                lines = stack.enter_context(open(log_file, "r", encoding="utf-8", errors="replace"))
            except OSError as e:
                logger.error("Could not open log file %s: %s", log_file, e)
                return EXIT_CONFIG_ERROR
        else:
            lines = sys.stdin

        streams = {}
        for name, path in outputs.items():
            try:
                streams[name] = stack.enter_context(open(path, "w", encoding="utf-8"))
            except OSError as e:
                logger.error("Could not open output file %s for %s: %s", path, name, e)
                return EXIT_CONFIG_ERROR
        formatter = build_formatter(formatter_selection, settings, streams=streams)

        scanner = EventScanner(resolver, on_timestamp_error=on_timestamp_error)
        try:
            scanner.scan(lines, formatter)
        except TimestampParseError as e:
            logger.error("Scan aborted: %s", e)
            return EXIT_ABORTED

    if isinstance(formatter, FormatterGroup) and formatter.failures:
        logger.warning("Formatters failed during the scan: %s", ", ".join(formatter.failures))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
