"""
Rarity and numeric-deviation anomaly rules over a completed FactTable.

Rarity applies to every attribute: a value held by fewer than
`rarity_threshold` machines is an anomaly. The deviation rule applies to one
attribute (OSVersion by default): numeric values further than
`std_dev_threshold` population standard deviations from the mean are
anomalies, and values that are not numeric at all are always anomalies.
"""

import re

import numpy as np
import structlog

from .fact_table import FactTable
from .models import AnomalyReport, DetectorConfig

logger = structlog.get_logger(__name__)

NUMERIC_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]+)?")


def is_numeric(value: str | None) -> bool:
    """True for optionally signed integers and decimals ("10", "-3", "12.5")"""
    return value is not None and NUMERIC_PATTERN.fullmatch(value) is not None


def calculate_mean(numbers: list[float]) -> float:
    if not numbers:
        return 0.0
    return float(np.mean(numbers))


def calculate_standard_deviation(numbers: list[float], mean: float | None = None) -> float:
    """Population standard deviation (divides by N, not N - 1)"""
    if not numbers:
        return 0.0
    if mean is None:
        mean = calculate_mean(numbers)
    deviations = np.asarray(numbers, dtype=float) - mean
    return float(np.sqrt(np.mean(deviations**2)))


class AnomalyDetector:
    """Applies the rarity and deviation rules to a FactTable"""

    def __init__(self, config: DetectorConfig):
        self.config = config

    def detect(self, facts: FactTable) -> AnomalyReport:
        """Compute the anomaly report for a completed table

        Args:
            facts: Table filled by the aggregator

        Returns:
            AnomalyReport with machine sets unioned per anomaly key
        """
        report = AnomalyReport()

        for attribute in sorted(facts.attributes()):
            values = facts.values(attribute)

            if attribute == self.config.deviation_attribute:
                self.detect_deviation_anomalies(attribute, values, report, facts)

            for value in sorted(values):
                machines = values[value]
                if len(machines) < self.config.rarity_threshold:
                    report.add(attribute, value, machines)

        logger.info(
            "Anomaly detection completed",
            attributes=len(facts),
            anomalies=len(report),
            rarity_threshold=self.config.rarity_threshold,
            std_dev_threshold=self.config.std_dev_threshold,
        )

        return report

    def detect_deviation_anomalies(
        self,
        attribute: str,
        values: dict[str, frozenset[str]],
        report: AnomalyReport,
        facts: FactTable | None = None,
    ) -> None:
        """Flag values of `attribute` that deviate from the mean or are not numeric

        With `deviation_group_by` unset, every value is compared against the
        whole fleet. When it names an attribute (e.g. OSType), statistics are
        computed per group value over the machines holding that group value.
        """
        group_by = self.config.deviation_group_by
        if group_by is None or facts is None:
            self._flag_deviations(attribute, values, report)
            return

        grouped_machines = set()
        for group_value, group_members in sorted(facts.values(group_by).items()):
            subset = _restrict(values, group_members)
            grouped_machines.update(group_members)
            logger.debug(
                "Checking deviation within group",
                attribute=attribute,
                group_by=group_by,
                group=group_value,
                values=len(subset),
            )
            self._flag_deviations(attribute, subset, report)

        # Machines that do not report the grouping attribute form their own group
        ungrouped = {
            value: machines - grouped_machines
            for value, machines in values.items()
            if machines - grouped_machines
        }
        if ungrouped:
            self._flag_deviations(attribute, ungrouped, report)

    def _flag_deviations(
        self, attribute: str, values: dict[str, frozenset[str]], report: AnomalyReport
    ) -> None:
        numbers = [float(value) for value in values if is_numeric(value)]
        mean = calculate_mean(numbers)
        std = calculate_standard_deviation(numbers, mean)
        limit = self.config.std_dev_threshold * std

        for value in sorted(values):
            if not is_numeric(value):
                report.add(attribute, value, values[value])
            elif abs(float(value) - mean) > limit:
                report.add(attribute, value, values[value])

        logger.debug(
            "Deviation statistics",
            attribute=attribute,
            samples=len(numbers),
            mean=round(mean, 4),
            std=round(std, 4),
        )


def _restrict(
    values: dict[str, frozenset[str]], members: frozenset[str]
) -> dict[str, frozenset[str]]:
    """Keep only the machines in `members`, dropping values left empty"""
    restricted = {}
    for value, machines in values.items():
        kept = machines & members
        if kept:
            restricted[value] = kept
    return restricted
