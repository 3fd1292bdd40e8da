"""
Writes the anomaly report as a JSON snapshot.
"""

import json
from datetime import datetime
from pathlib import Path

import structlog

from .errors import OutputWriteError
from .models import AnomalyReport

logger = structlog.get_logger(__name__)


def report_anomalies(report: AnomalyReport, output_path: str | Path) -> Path:
    """Serialize `report` to `output_path`, replacing any previous snapshot

    Args:
        report: Anomalies to write
        output_path: Destination JSON file (its directory must exist)

    Returns:
        The path written

    Raises:
        OutputWriteError: If the destination cannot be opened or written
    """
    path = Path(output_path)

    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        logger.error("Failed to write anomaly report", output_path=str(path), error=str(e))
        raise OutputWriteError(path, e.strerror or str(e)) from e

    logger.info(
        "Anomalies reported",
        output_path=str(path),
        anomalies=len(report),
        written_at=datetime.now().isoformat(),
    )
    return path
