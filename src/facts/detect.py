"""
CLI for fleet fact anomaly detection.

Usage:
    python -m src.facts.detect [options]
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import LOG_LEVELS, level_from_env, setup_logging

from .models import DetectorConfig
from .pipeline import detect, run_scheduled

logger = structlog.get_logger(__name__)


def parse_arguments(argv: list[str] | None = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Detect rare or deviating attribute values across machine fact files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Single run with defaults
        python -m src.facts.detect --input-dir data/input --output data/output/anomalies.json

        # Stricter rules, bigger batches
        python -m src.facts.detect \\
            --threshold 10 \\
            --std-dev-threshold 1.5 \\
            --batch-size 50

        # Compare OS versions per OS family
        python -m src.facts.detect --group-by OSType

        # Re-run every minute
        python -m src.facts.detect --schedule 1
        """,
    )

    # Paths
    parser.add_argument(
        "--input-dir",
        default=os.getenv("FACTS_INPUT_DIR", "data/input"),
        help="Directory of per-machine JSON files (default: data/input or FACTS_INPUT_DIR)",
    )
    parser.add_argument(
        "--output",
        default=os.getenv("FACTS_OUTPUT_PATH", "data/output/anomalies.json"),
        help="Anomaly snapshot path (default: data/output/anomalies.json or FACTS_OUTPUT_PATH)",
    )

    # Ingestion
    parser.add_argument(
        "--batch-size",
        type=int,
        default=os.getenv("FACTS_BATCH_SIZE", "10"),
        help="Files per ingestion batch (default: 10)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=os.getenv("FACTS_MAX_WORKERS", "10"),
        help="Ingestion thread pool size (default: 10)",
    )
    parser.add_argument(
        "--excluded-field",
        default=os.getenv("FACTS_EXCLUDED_FIELD", "Serial"),
        help="Field ignored during aggregation (default: Serial)",
    )

    # Rules
    parser.add_argument(
        "--threshold",
        type=int,
        default=os.getenv("FACTS_RARITY_THRESHOLD", "5"),
        help="Values held by fewer machines are anomalies (default: 5)",
    )
    parser.add_argument(
        "--std-dev-threshold",
        type=float,
        default=os.getenv("FACTS_STD_DEV_THRESHOLD", "2.0"),
        help="Standard deviations from the mean before a version is flagged (default: 2.0)",
    )
    parser.add_argument(
        "--deviation-attribute",
        default=os.getenv("FACTS_DEVIATION_ATTRIBUTE", "OSVersion"),
        help="Attribute checked with the numeric deviation rule (default: OSVersion)",
    )
    parser.add_argument(
        "--group-by",
        default=os.getenv("FACTS_DEVIATION_GROUP_BY") or None,
        help="Compute deviation statistics per value of this attribute (default: whole fleet)",
    )

    # Scheduling
    parser.add_argument(
        "--schedule",
        type=float,
        help="Run detection periodically every N minutes (default: run once)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default=logging.getLevelName(level_from_env()),
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    return parser.parse_args(argv)


def build_config(args) -> DetectorConfig:
    """Build configuration from arguments"""
    config = DetectorConfig(
        batch_size=args.batch_size,
        max_workers=args.workers,
        excluded_field=args.excluded_field,
        rarity_threshold=args.threshold,
        std_dev_threshold=args.std_dev_threshold,
        deviation_attribute=args.deviation_attribute,
        deviation_group_by=args.group_by,
    )
    if args.schedule:
        config.detection_interval_minutes = args.schedule
    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)

    setup_logging(level=LOG_LEVELS[args.log_level], json_logs=args.json_logs)

    logger.info("Starting fact anomaly detection", input_dir=args.input_dir, output=args.output)

    try:
        config = build_config(args)

        if args.schedule:
            run_scheduled(args.input_dir, args.output, config, args.schedule)
        else:
            report = detect(args.input_dir, args.output, config)
            logger.info("Detection completed successfully", anomalies=len(report))

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Detection failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
