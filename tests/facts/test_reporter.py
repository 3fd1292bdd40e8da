"""
Tests for the JSON anomaly snapshot writer.
"""

import json

import pytest

from src.facts.errors import OutputWriteError
from src.facts.models import AnomalyReport
from src.facts.reporter import report_anomalies


@pytest.fixture
def sample_report():
    report = AnomalyReport()
    report.add("OSVersion", "10", ["machine1"])
    report.add("OSVersion", "11", ["machine2"])
    report.add("Attribute1", "Value1", ["machine1", "machine1"])
    return report


class TestReportAnomalies:
    """Tests for report_anomalies."""

    def test_writes_json_object(self, sample_report, output_path):
        written = report_anomalies(sample_report, output_path)

        assert written == output_path
        content = json.loads(output_path.read_text())
        assert content == {
            "Attribute1: Value1": ["machine1"],
            "OSVersion: 10": ["machine1"],
            "OSVersion: 11": ["machine2"],
        }

    def test_overwrites_previous_snapshot(self, sample_report, output_path):
        output_path.write_text('{"Stale: entry": ["old"], "padding": "' + "x" * 500 + '"}')

        report_anomalies(sample_report, output_path)

        content = json.loads(output_path.read_text())
        assert "Stale: entry" not in content
        assert len(content) == 3

    def test_empty_report(self, output_path):
        report_anomalies(AnomalyReport(), output_path)

        assert json.loads(output_path.read_text()) == {}

    def test_missing_parent_directory(self, sample_report, tmp_path):
        destination = tmp_path / "nowhere" / "anomalies.json"

        with pytest.raises(OutputWriteError) as exc_info:
            report_anomalies(sample_report, destination)

        assert exc_info.value.output_path == destination
        assert not destination.exists()

    def test_destination_is_directory(self, sample_report, tmp_path):
        with pytest.raises(OutputWriteError):
            report_anomalies(sample_report, tmp_path)
