"""
Error taxonomy for detection runs.

Directory and output errors abort the run. File-level errors are isolated:
the aggregator logs them and moves on to the next file.
"""

from pathlib import Path


class DetectionError(Exception):
    """Base class for every error raised by a detection run"""


class DirectoryError(DetectionError):
    """Input directory is missing or cannot be read"""

    def __init__(self, directory: str | Path, reason: str):
        self.directory = Path(directory)
        self.reason = reason
        super().__init__(f"Cannot read input directory {self.directory}: {reason}")


class FactFileError(DetectionError):
    """A single fact file could not be ingested"""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class FileReadError(FactFileError):
    """Fact file exists but its content could not be read"""


class ParseError(FactFileError):
    """Fact file is not a flat JSON object"""


class OutputWriteError(DetectionError):
    """Anomaly snapshot could not be written"""

    def __init__(self, output_path: str | Path, reason: str):
        self.output_path = Path(output_path)
        self.reason = reason
        super().__init__(f"Cannot write anomaly report to {self.output_path}: {reason}")
