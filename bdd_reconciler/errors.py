"""Exceptions raised while parsing, merging and enriching results."""

from pathlib import Path


class ReconcileError(Exception):
    """Base exception for all reconciliation errors."""


class UnsupportedFormatError(ReconcileError):
    """Raised when no parser recognises a report file."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No parser found for file: {path}")
        self.path = path


class InvalidFormatError(ReconcileError):
    """Raised when a recognised report file is structurally broken."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid report file {path}: {reason}")
        self.path = path
        self.reason = reason


class ReportFileNotFoundError(ReconcileError, FileNotFoundError):
    """Raised when a report file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Test result file not found: {path}")
        self.path = path


class MergeInputEmptyError(ReconcileError):
    """Raised when merging is asked to combine zero reports."""


class InvalidSpecificationError(ReconcileError):
    """Raised when enrichment cannot proceed on the given inputs."""


class UnidentifiableFeatureError(InvalidSpecificationError):
    """Raised when an execution feature has no usable name."""
