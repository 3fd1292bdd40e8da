"""
Configuration and run statistics for the fact anomaly detector.
"""

from dataclasses import asdict, dataclass


@dataclass
class DetectorConfig:
    """Configuration for a detection run"""

    # Ingestion
    batch_size: int = 10  # Files handed to one worker task
    max_workers: int = 10  # Thread pool size for batch ingestion
    excluded_field: str = "Serial"  # Unique per machine, never aggregated

    # Rarity rule
    rarity_threshold: int = 5  # Values held by fewer machines are anomalies

    # Numeric-deviation rule
    deviation_attribute: str = "OSVersion"
    std_dev_threshold: float = 2.0  # Flag when |x - mean| > k * std
    deviation_group_by: str | None = None  # e.g. "OSType" to compare versions per OS family

    # Scheduling (used by the CLI only)
    detection_interval_minutes: float = 1

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.rarity_threshold < 1:
            raise ValueError(f"rarity_threshold must be >= 1, got {self.rarity_threshold}")
        if self.std_dev_threshold < 0:
            raise ValueError(f"std_dev_threshold must be >= 0, got {self.std_dev_threshold}")
        if self.detection_interval_minutes <= 0:
            raise ValueError(
                f"detection_interval_minutes must be > 0, got {self.detection_interval_minutes}"
            )


@dataclass
class AggregationStats:
    """Counters collected while ingesting one directory"""

    files_total: int = 0
    files_read: int = 0
    read_errors: int = 0
    parse_errors: int = 0
    batches: int = 0

    @property
    def failed(self) -> int:
        return self.read_errors + self.parse_errors

    def merge(self, other: "AggregationStats") -> None:
        """Add another batch's counters into this one"""
        self.files_total += other.files_total
        self.files_read += other.files_read
        self.read_errors += other.read_errors
        self.parse_errors += other.parse_errors
        self.batches += other.batches

    def to_dict(self) -> dict:
        return asdict(self)


class AnomalyReport:
    """Anomaly key ("<attribute>: <value>") -> machines exhibiting it

    Adding the same key twice unions the machine sets, so a value flagged by
    both the rarity and the deviation rule is reported once.
    """

    def __init__(self):
        self._anomalies: dict[str, set[str]] = {}

    @staticmethod
    def make_key(attribute: str, value: str) -> str:
        return f"{attribute}: {value}"

    def add(self, attribute: str, value: str, machines) -> None:
        key = self.make_key(attribute, value)
        self._anomalies.setdefault(key, set()).update(machines)

    def keys(self) -> list[str]:
        return list(self._anomalies)

    def items(self):
        return self._anomalies.items()

    def to_dict(self) -> dict[str, list[str]]:
        """JSON-ready form with sorted keys and machine lists"""
        return {key: sorted(self._anomalies[key]) for key in sorted(self._anomalies)}

    def __getitem__(self, key: str) -> frozenset[str]:
        return frozenset(self._anomalies[key])

    def __contains__(self, key: object) -> bool:
        return key in self._anomalies

    def __len__(self) -> int:
        return len(self._anomalies)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnomalyReport):
            return NotImplemented
        return self._anomalies == other._anomalies

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(anomalies={len(self._anomalies)})"
