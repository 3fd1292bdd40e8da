"""
Driver for a detection run: enumerate -> aggregate -> detect -> report.

`detect()` is the single entry point collaborators call. Every call builds
its own FactTable, so back-to-back runs share no state.
"""

import time
from collections.abc import Callable
from pathlib import Path

import structlog

from .aggregator import FactAggregator
from .detector import AnomalyDetector
from .enumerator import list_files
from .fact_table import FactTable
from .models import AnomalyReport, DetectorConfig
from .reporter import report_anomalies

logger = structlog.get_logger(__name__)


def detect(
    input_dir: str | Path,
    output_path: str | Path,
    config: DetectorConfig | None = None,
) -> AnomalyReport:
    """Run one detection over `input_dir` and write the snapshot to `output_path`

    Args:
        input_dir: Directory of per-machine JSON fact files
        output_path: JSON file receiving the anomaly report
        config: Detection settings (defaults if omitted)

    Returns:
        The anomaly report that was written

    Raises:
        DirectoryError: Input directory missing or unreadable; nothing is written
        OutputWriteError: Snapshot could not be written
    """
    config = config or DetectorConfig()
    start_time = time.time()

    files = list_files(input_dir)

    aggregator = FactAggregator(config)
    facts = aggregator.aggregate(files, FactTable())

    report = AnomalyDetector(config).detect(facts)
    report_anomalies(report, output_path)

    logger.info(
        "Detection run completed",
        input_dir=str(input_dir),
        output_path=str(output_path),
        skipped_files=aggregator.stats.failed,
        **aggregator.stats.to_dict(),
        anomalies=len(report),
        elapsed_sec=round(time.time() - start_time, 3),
    )

    return report


def run_scheduled(
    input_dir: str | Path,
    output_path: str | Path,
    config: DetectorConfig,
    interval_minutes: float | None = None,
    iterations: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Re-run detection on a fixed interval

    A failed iteration is logged and the next tick tries again.

    Args:
        input_dir: Directory of fact files
        output_path: Snapshot destination
        config: Detection settings
        interval_minutes: Minutes between runs (defaults to the config value)
        iterations: Stop after this many runs (default: run forever)
        sleep: Sleep function, replaceable in tests

    Returns:
        Number of successful iterations
    """
    interval_minutes = interval_minutes or config.detection_interval_minutes
    logger.info("Starting scheduled detection", interval_minutes=interval_minutes)

    iteration = 0
    succeeded = 0
    while iterations is None or iteration < iterations:
        iteration += 1
        logger.info("Starting detection iteration", iteration=iteration)

        try:
            report = detect(input_dir, output_path, config)
            succeeded += 1
            logger.info("Detection iteration completed", iteration=iteration, anomalies=len(report))
        except Exception as e:
            logger.error("Detection iteration failed", iteration=iteration, error=str(e))

        if iterations is not None and iteration >= iterations:
            break

        sleep_seconds = interval_minutes * 60
        logger.info("Sleeping until next iteration", sleep_seconds=sleep_seconds)
        sleep(sleep_seconds)

    return succeeded
