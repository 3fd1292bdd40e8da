"""
Pytest configuration and shared fixtures.
"""

import json

import pytest

from src.facts.fact_table import FactTable
from src.facts.models import DetectorConfig


@pytest.fixture
def detector_config():
    """Default detector configuration."""
    return DetectorConfig()


@pytest.fixture
def small_batch_config():
    """Configuration forcing many small batches and several workers."""
    return DetectorConfig(batch_size=2, max_workers=4)


@pytest.fixture
def input_dir(tmp_path):
    """Empty input directory for fact files."""
    directory = tmp_path / "input"
    directory.mkdir()
    return directory


@pytest.fixture
def output_path(tmp_path):
    """Destination for the anomaly snapshot."""
    directory = tmp_path / "output"
    directory.mkdir()
    return directory / "anomalies.json"


@pytest.fixture
def write_facts(input_dir):
    """Factory writing one machine record as JSON into the input directory."""

    def _write(name, record, directory=None):
        path = (directory or input_dir) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fleet(write_facts):
    """Twelve machines: a common model, one rare model, one odd OS version."""
    paths = []
    for i in range(1, 13):
        record = {
            "Model": "Dell XPS" if i != 12 else "Commodore 64",
            "OSType": "Windows",
            "OSVersion": 10 if i != 7 else 3,
            "Serial": f"ABCD{1000 + i}",
        }
        paths.append(write_facts(f"Machine{i}.json", record))
    return paths


def build_table(facts: dict[str, dict[str, list[str]]]) -> FactTable:
    """Build a FactTable from a nested attribute -> value -> machines dict."""
    table = FactTable()
    for attribute, values in facts.items():
        for value, machines in values.items():
            for machine in machines:
                table.add(attribute, value, machine)
    return table


@pytest.fixture
def make_table():
    """Expose build_table to tests as a fixture."""
    return build_table
