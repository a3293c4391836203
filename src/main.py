"""
Command line entry point for an offline API responsiveness check.

Replays recorded monitoring backend responses through a single
gather-and-validate pass, writes the summary and reports the SLO verdict
through the exit code.
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from src.config.measurement_config import MeasurementConfig
from src.core.exceptions import MeasurementError
from src.monitoring.gatherer import APIResponsivenessGatherer, GatherResult
from src.monitoring.replay_executor import ReplayQueryExecutor
from src.utils.logger import MeasurementLogger

EXIT_OK = 0
EXIT_VIOLATION = 1
EXIT_ERROR = 2

DEFAULT_DURATION_SECONDS = 600


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Check API call latency against the API responsiveness SLO"
    )
    parser.add_argument("--config", help="Measurement YAML config")
    parser.add_argument("--responses", required=True, help="Replay responses YAML")
    parser.add_argument("--strict", action="store_true", help="Fail on queries without a replay response")

    window = parser.add_mutually_exclusive_group()
    window.add_argument("--start", help="Measurement start, ISO 8601 (naive values are UTC)")
    window.add_argument(
        "--duration",
        type=float,
        default=DEFAULT_DURATION_SECONDS,
        help=f"Measured period in seconds (default: {DEFAULT_DURATION_SECONDS})",
    )

    parser.add_argument("--report-dir", default=".", help="Directory for the summary file")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-dir", help="Directory for rotating log files")
    return parser.parse_args(argv)


def resolve_start_time(args: argparse.Namespace, now: datetime) -> datetime:
    if args.start:
        start = datetime.fromisoformat(args.start)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        return start
    return now - timedelta(seconds=args.duration)


def write_summary(result: GatherResult, report_dir: Path, now: datetime) -> Path:
    report_dir.mkdir(parents=True, exist_ok=True)
    path = report_dir / result.summary.file_name(now.strftime("%Y-%m-%dT%H:%M:%SZ"))
    path.write_text(result.summary.content, encoding="utf-8")
    return path


def run(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)
    now = datetime.now(timezone.utc)

    config = MeasurementConfig.from_yaml(args.config) if args.config else MeasurementConfig()
    executor = ReplayQueryExecutor.from_yaml(args.responses, strict=args.strict)
    start_time = resolve_start_time(args, now)

    gatherer = APIResponsivenessGatherer(clock=lambda: now)
    result = gatherer.gather(executor, start_time, config)

    path = write_summary(result, Path(args.report_dir), now)
    logger.info(f"Summary written to {path}")

    if result.violation is not None:
        logger.error(str(result.violation))
        return EXIT_VIOLATION
    logger.info(f"{config.identifier}: all {len(result.metrics)} API calls within SLO")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """
    Application entry point.

    Exit codes: 0 pass, 1 SLO violation, 2 configuration/query/sample error.
    """
    args = parse_args(argv)

    try:
        MeasurementLogger({"log_level": args.log_level, "log_dir": args.log_dir})
    except (ValueError, OSError) as e:
        print(f"Cannot set up logging: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        exit_code = run(args)
    except (MeasurementError, ValueError, OSError) as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(EXIT_ERROR)

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
