"""
Concurrent ingestion of machine fact files into a FactTable.

Files are split into fixed-size batches, each batch is processed by one task
of a bounded thread pool, and `aggregate()` returns only once every batch has
completed, so the table is complete before anyone reads it.
"""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import structlog

from .errors import FactFileError, FileReadError, ParseError
from .fact_table import FactTable
from .models import AggregationStats, DetectorConfig

logger = structlog.get_logger(__name__)


def batched(items: list, size: int) -> list[list]:
    """Split `items` into consecutive chunks of at most `size` elements"""
    if size < 1:
        raise ValueError(f"Batch size must be >= 1, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


def stringify(value) -> str:
    """Render a parsed JSON leaf as the string stored in the fact table

    Numbers arrive as their source text (see `parse_fact_file`), so only
    strings and booleans need handling here.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    raise TypeError(f"unsupported value type {type(value).__name__}")


def parse_fact_file(path: Path, excluded_field: str | None = "Serial") -> dict[str, str]:
    """Read one machine record and return its aggregatable facts

    Args:
        path: JSON file holding a flat object
        excluded_field: Field to drop (unique per machine, carries no signal)

    Returns:
        Mapping of field name -> stringified value

    Raises:
        FileReadError: If the file cannot be read
        ParseError: If the content is not a flat JSON object of scalar values
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path, str(e)) from e

    try:
        # Keep numbers as written: 10 -> "10", 10.50 -> "10.50"
        record = json.loads(content, parse_int=str, parse_float=str, parse_constant=str)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ParseError(path, f"invalid JSON: {e}") from e

    if not isinstance(record, dict):
        raise ParseError(path, f"expected a JSON object, got {type(record).__name__}")

    facts = {}
    for field_name, value in record.items():
        if field_name == excluded_field:
            continue
        try:
            facts[field_name] = stringify(value)
        except TypeError as e:
            raise ParseError(path, f"field '{field_name}': {e}") from e

    return facts


class FactAggregator:
    """Reads fact files in parallel batches into a shared FactTable"""

    def __init__(self, config: DetectorConfig):
        self.config = config
        self.stats = AggregationStats()

    def read_files(self, files: list[Path], facts: FactTable) -> AggregationStats:
        """Ingest one batch of files

        A file that cannot be read or parsed is logged and skipped; the rest
        of the batch is still processed.

        Args:
            files: Paths in this batch
            facts: Shared table to insert into

        Returns:
            Counters for this batch
        """
        stats = AggregationStats(files_total=len(files), batches=1)

        for path in files:
            try:
                record = parse_fact_file(path, self.config.excluded_field)
            except FactFileError as e:
                if isinstance(e, FileReadError):
                    stats.read_errors += 1
                else:
                    stats.parse_errors += 1
                logger.warning(
                    "Skipping unreadable fact file",
                    path=str(path),
                    error_type=type(e).__name__,
                    error=e.reason,
                )
                continue

            facts.add_record(path.name, record)
            stats.files_read += 1

        return stats

    def aggregate(self, files: list[Path], facts: FactTable | None = None) -> FactTable:
        """Ingest all files and return the completed table

        Args:
            files: Fact files to read
            facts: Table to fill; a fresh one is created if omitted

        Returns:
            The filled FactTable, only after every batch has finished
        """
        if facts is None:
            facts = FactTable()

        batches = batched(list(files), self.config.batch_size)
        self.stats = AggregationStats()
        start_time = time.time()

        logger.debug(
            "Starting aggregation",
            files=len(files),
            batches=len(batches),
            workers=self.config.max_workers,
        )

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="facts"
        ) as executor:
            futures = [executor.submit(self.read_files, batch, facts) for batch in batches]

            # Barrier: the table is not handed out until every batch is done
            for future in futures:
                self.stats.merge(future.result())

        elapsed = time.time() - start_time

        logger.info(
            "Aggregation completed",
            files=self.stats.files_total,
            files_read=self.stats.files_read,
            read_errors=self.stats.read_errors,
            parse_errors=self.stats.parse_errors,
            batches=self.stats.batches,
            attributes=len(facts),
            elapsed_sec=round(elapsed, 3),
        )

        return facts
