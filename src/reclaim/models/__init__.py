"""Reclaim data models."""

from reclaim.models.pattern import PatternEntry
from reclaim.models.scan_result import (
    Candidate,
    IgnoreVerdict,
    RepositoryRoot,
    RepositoryScan,
    ScanReport,
)
from reclaim.models.clean_result import DeletionOutcome

__all__ = [
    "Candidate",
    "DeletionOutcome",
    "IgnoreVerdict",
    "PatternEntry",
    "RepositoryRoot",
    "RepositoryScan",
    "ScanReport",
]
