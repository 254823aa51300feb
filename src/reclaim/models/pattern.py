"""Cache directory pattern dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PatternEntry:
    """Directory basename produced by a build tool or language runtime.

    ``name`` is matched verbatim against directory basenames; it is not a glob.
    """

    name: str
    label: str
