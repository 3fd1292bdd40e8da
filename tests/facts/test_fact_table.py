"""
Tests for the concurrent FactTable.
"""

import threading

from src.facts.fact_table import FactTable


class TestFactTable:
    """Tests for FactTable."""

    def test_add_creates_both_levels(self):
        table = FactTable()
        table.add("OSVersion", "10", "machine1")

        assert "OSVersion" in table
        assert len(table) == 1
        assert table.values("OSVersion") == {"10": frozenset({"machine1"})}

    def test_add_is_idempotent(self):
        table = FactTable()
        table.add("Model", "XPS", "machine1")
        table.add("Model", "XPS", "machine1")

        assert table.values("Model")["XPS"] == {"machine1"}

    def test_add_record(self):
        table = FactTable()
        table.add_record("machine1", {"Model": "XPS", "OSType": "Linux"})
        table.add_record("machine2", {"Model": "XPS"})

        assert table.as_dict() == {
            "Model": {"XPS": {"machine1", "machine2"}},
            "OSType": {"Linux": {"machine1"}},
        }

    def test_unknown_attribute_is_empty(self):
        table = FactTable()

        assert table.values("Missing") == {}
        assert "Missing" not in table

    def test_values_returns_snapshot(self):
        table = FactTable()
        table.add("Model", "XPS", "machine1")
        snapshot = table.values("Model")

        table.add("Model", "XPS", "machine2")

        assert snapshot["XPS"] == {"machine1"}
        assert table.values("Model")["XPS"] == {"machine1", "machine2"}

    def test_concurrent_writers_lose_no_updates(self):
        """Many threads hammering the same keys end with every machine recorded."""
        table = FactTable()
        num_threads = 16
        per_thread = 200
        barrier = threading.Barrier(num_threads)

        def writer(thread_id):
            barrier.wait()
            for i in range(per_thread):
                table.add(f"attr{i % 3}", f"value{i % 5}", f"t{thread_id}-m{i}")

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(num_threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        total = sum(
            len(machines) for _, values in table.items() for machines in values.values()
        )
        assert total == num_threads * per_thread
        assert sorted(table.attributes()) == ["attr0", "attr1", "attr2"]
