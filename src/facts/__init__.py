"""
Fleet Fact Anomaly Detection

Batch detection of unusual attribute values across a fleet of machines.

Architecture:
- Enumeration: every fact file under an input directory
- Aggregation: parallel batches fill a shared attribute -> value -> machines table
- Detection: rarity rule on every attribute, numeric deviation rule on OSVersion
- Reporting: one JSON snapshot of anomaly -> machines

Usage:
    # Single run
    python -m src.facts.detect --input-dir data/input --output data/output/anomalies.json

    # Periodic runs
    python -m src.facts.detect --schedule 1
"""

from .aggregator import FactAggregator
from .detector import AnomalyDetector
from .enumerator import list_files
from .errors import (
    DetectionError,
    DirectoryError,
    FactFileError,
    FileReadError,
    OutputWriteError,
    ParseError,
)
from .fact_table import FactTable
from .models import AggregationStats, AnomalyReport, DetectorConfig
from .pipeline import detect, run_scheduled
from .reporter import report_anomalies

__all__ = [
    "AggregationStats",
    "AnomalyDetector",
    "AnomalyReport",
    "DetectionError",
    "DetectorConfig",
    "DirectoryError",
    "FactAggregator",
    "FactFileError",
    "FactTable",
    "FileReadError",
    "OutputWriteError",
    "ParseError",
    "detect",
    "list_files",
    "report_anomalies",
    "run_scheduled",
]
