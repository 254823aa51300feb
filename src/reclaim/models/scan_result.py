"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RepositoryRoot:
    """Top-level directory of a discovered git repository."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class IgnoreVerdict:
    """Answer of the ignore oracle for a single directory.

    ``rule`` is the matching ignore rule as reported by git
    (``<source>:<line>:<pattern>``), or empty when no rule matched.
    """

    path: Path
    ignored: bool
    rule: str = ""


@dataclass(frozen=True, slots=True)
class Candidate:
    """Ignored cache directory that can be deleted.

    Only constructible from a positive verdict for the very same path.
    """

    path: Path
    size_bytes: int
    repository: RepositoryRoot
    label: str
    verdict: IgnoreVerdict
    file_count: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.verdict, IgnoreVerdict) or not self.verdict.ignored:
            raise ValueError(f"{self.path} is not confirmed as ignored")
        if self.verdict.path != self.path:
            raise ValueError(f"Verdict for {self.verdict.path} does not cover {self.path}")

    @property
    def relative_path(self) -> Path:
        """Path relative to the owning repository."""
        return self.path.relative_to(self.repository.path)


@dataclass(frozen=True, slots=True)
class RepositoryScan:
    """Result of scanning a single repository.

    A non-empty ``skipped`` holds the reason the repository was left out;
    such a scan never carries candidates.
    """

    root: RepositoryRoot
    candidates: tuple[Candidate, ...] = ()
    skipped: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def total_bytes(self) -> int:
        return sum(c.size_bytes for c in self.candidates)


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Aggregated result of scanning every discovered repository."""

    base: Path
    repositories: tuple[RepositoryScan, ...] = ()
    warnings: tuple[str, ...] = field(default=())

    @property
    def total_bytes(self) -> int:
        return sum(r.total_bytes for r in self.repositories)

    @property
    def candidates(self) -> list[Candidate]:
        """All candidates, in report order."""
        return [c for r in self.repositories for c in r.candidates]

    @property
    def skipped(self) -> list[RepositoryScan]:
        return [r for r in self.repositories if r.skipped]

    @property
    def all_warnings(self) -> list[str]:
        """Discovery warnings followed by per-repository warnings and skip notices."""
        lines = list(self.warnings)
        for repo in self.repositories:
            lines.extend(repo.warnings)
            if repo.skipped:
                lines.append(f"{repo.root.path}: skipped ({repo.skipped})")
        return lines
