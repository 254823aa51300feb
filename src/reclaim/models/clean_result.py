"""Deletion result dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """Result of deleting a single candidate directory."""

    path: Path
    success: bool
    error: str = ""
    freed_bytes: int = 0
