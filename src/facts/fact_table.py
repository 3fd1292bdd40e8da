"""
Thread-safe attribute -> value -> machines index.

The table is written by many ingestion workers at once and read by the
detector only after every worker has finished. Both levels support atomic
get-or-create: the outer lock covers attribute creation, and each attribute
carries its own lock for its values so writers on different attributes
never contend.
"""

import threading
from collections.abc import Iterable, Mapping


class _ValueIndex:
    """Value -> machine set for a single attribute"""

    __slots__ = ("_lock", "_machines")

    def __init__(self):
        self._lock = threading.Lock()
        self._machines: dict[str, set[str]] = {}

    def add(self, value: str, machine: str) -> None:
        with self._lock:
            machines = self._machines.get(value)
            if machines is None:
                machines = self._machines[value] = set()
            machines.add(machine)

    def snapshot(self) -> dict[str, frozenset[str]]:
        with self._lock:
            return {value: frozenset(machines) for value, machines in self._machines.items()}


class FactTable:
    """Concurrent map of attribute name -> attribute value -> machine identifiers"""

    def __init__(self):
        self._lock = threading.Lock()
        self._attributes: dict[str, _ValueIndex] = {}

    def _index_for(self, attribute: str) -> _ValueIndex:
        index = self._attributes.get(attribute)
        if index is None:
            with self._lock:
                index = self._attributes.get(attribute)
                if index is None:
                    index = self._attributes[attribute] = _ValueIndex()
        return index

    def add(self, attribute: str, value: str, machine: str) -> None:
        """Record that `machine` reports `value` for `attribute`"""
        self._index_for(attribute).add(value, machine)

    def add_record(self, machine: str, facts: Mapping[str, str]) -> None:
        """Record every attribute/value pair of one machine"""
        for attribute, value in facts.items():
            self.add(attribute, value, machine)

    def attributes(self) -> list[str]:
        with self._lock:
            return list(self._attributes)

    def values(self, attribute: str) -> dict[str, frozenset[str]]:
        """Snapshot of value -> machines for one attribute (empty if unknown)"""
        index = self._attributes.get(attribute)
        return index.snapshot() if index is not None else {}

    def items(self) -> Iterable[tuple[str, dict[str, frozenset[str]]]]:
        for attribute in self.attributes():
            yield attribute, self.values(attribute)

    def as_dict(self) -> dict[str, dict[str, set[str]]]:
        """Plain nested copy, mostly useful for comparisons and debugging"""
        return {
            attribute: {value: set(machines) for value, machines in values.items()}
            for attribute, values in self.items()
        }

    def __contains__(self, attribute: object) -> bool:
        return attribute in self._attributes

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(attributes={sorted(self.attributes())})"
