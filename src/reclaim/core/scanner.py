"""Per-repository search for ignored cache directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from reclaim.core.catalog import PatternCatalog
from reclaim.core.ignore import IgnoreEvaluationError, IgnoreOracle
from reclaim.core.locator import GIT_MARKER, is_repository
from reclaim.models.scan_result import Candidate, RepositoryRoot, RepositoryScan
from reclaim.utils import contains_git_marker, dir_info

log = logging.getLogger(__name__)

OracleFactory = Callable[[Path], IgnoreOracle]


class CacheScanner:
    """Walks a repository and collects ignored directories named in the catalog.

    A matched directory that git reports as ignored becomes a
    :class:`Candidate` and is not descended into.  Everything else,
    including ignored directories with other names, is walked normally.
    Nested repositories are walked with an oracle of their own and are
    never candidates themselves, and neither is an ignored match that holds
    one further down.
    """

    def __init__(self, catalog: PatternCatalog, oracle_factory: OracleFactory = IgnoreOracle.open) -> None:
        self.catalog = catalog
        self._open_oracle = oracle_factory

    def scan(self, root: RepositoryRoot) -> RepositoryScan:
        """Scan one repository.  MUST NOT delete anything.

        Raises:
            IgnoreEvaluationError: If the repository's ignore rules cannot
                be evaluated.  No partial result is returned in that case.
        """
        oracle = self._open_oracle(root.path)
        candidates: list[Candidate] = []
        warnings: list[str] = []

        # Depth-first, children pushed in reverse so they pop in sorted order.
        stack: list[tuple[Path, IgnoreOracle]] = [(root.path, oracle)]
        while stack:
            directory, current = stack.pop()
            children: list[tuple[Path, IgnoreOracle]] = []
            for path in self._list_dirs(directory, warnings):
                if path.name == GIT_MARKER:
                    continue

                if is_repository(path):
                    nested = self._open_nested(path, warnings)
                    if nested is not None:
                        children.append((path, nested))
                    continue

                entry = self.catalog.lookup(path.name)
                if entry is not None:
                    verdict = current.verdict(path)
                    if verdict.ignored and contains_git_marker(path):
                        warnings.append(f"{path}: holds a nested repository, not deleting it")
                        log.debug("Descending into %s: it holds a nested repository", path)
                    elif verdict.ignored:
                        size, fcount = dir_info(path)
                        candidates.append(
                            Candidate(
                                path=path,
                                size_bytes=size,
                                repository=root,
                                label=entry.label,
                                verdict=verdict,
                                file_count=fcount,
                            )
                        )
                        log.debug("Candidate %s (%d bytes, %s)", path, size, verdict.rule)
                        continue
                    else:
                        log.debug("Not ignored, descending: %s", path)

                children.append((path, current))
            stack.extend(reversed(children))

        log.info("Scanned %s: %d candidates", root.path, len(candidates))
        return RepositoryScan(root=root, candidates=tuple(candidates), warnings=tuple(warnings))

    def _open_nested(self, path: Path, warnings: list[str]) -> IgnoreOracle | None:
        try:
            return self._open_oracle(path)
        except IgnoreEvaluationError as exc:
            warnings.append(f"{path}: nested repository skipped ({exc})")
            log.debug("Cannot open nested repository %s: %s", path, exc)
            return None

    @staticmethod
    def _list_dirs(directory: Path, warnings: list[str]) -> list[Path]:
        """Return real subdirectories of *directory* in sorted order."""
        try:
            with os.scandir(directory) as it:
                names = sorted(entry.name for entry in it if entry.is_dir(follow_symlinks=False))
        except OSError as e:
            warnings.append(f"{directory}: cannot read directory ({e.strerror or e})")
            log.debug("Cannot read %s: %s", directory, e)
            return []
        return [directory / name for name in names]
