"""Scanning and deletion orchestration engine."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from reclaim.core.catalog import PatternCatalog
from reclaim.core.ignore import IgnoreEvaluationError
from reclaim.core.locator import DEFAULT_MAX_DEPTH, discover
from reclaim.core.scanner import CacheScanner
from reclaim.models.clean_result import DeletionOutcome
from reclaim.models.scan_result import Candidate, RepositoryRoot, RepositoryScan, ScanReport
from reclaim.utils import remove_tree

log = logging.getLogger(__name__)

ProgressCallback = Callable[[Path, str], None]  # (repository_path, status)
ResultCallback = Callable[[RepositoryScan], None]
DeletionCallback = Callable[[DeletionOutcome], None]


class ReclaimEngine:
    """Orchestrates discovery, scanning and deletion."""

    def __init__(
        self,
        catalog: PatternCatalog,
        scanner: CacheScanner | None = None,
        workers: int | None = None,
    ) -> None:
        self.catalog = catalog
        self.scanner = scanner or CacheScanner(catalog)
        self.workers = workers or os.cpu_count() or 1

    def discover(
        self, base: Path | str, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> tuple[list[RepositoryRoot], list[str]]:
        """Find repositories under *base*.

        Returns:
            (repositories, warnings) tuple; pass both on to :meth:`scan`.

        Raises:
            DiscoveryError: If *base* cannot be searched.
        """
        return discover(base, max_depth)

    def scan(
        self,
        roots: list[RepositoryRoot],
        base: Path,
        warnings: Iterable[str] = (),
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> ScanReport:
        """Scan every repository and build a report in discovery order.

        One task per repository runs on a thread pool sized to the available
        CPUs.  Falls back to sequential scanning when only one worker or one
        repository is involved.

        Args:
            roots: Repositories in discovery order.
            base: Directory the repositories were discovered under.
            warnings: Discovery warnings to carry into the report.
            on_progress: Optional callback for progress updates.
            on_result: Optional callback fired after each repository scan.

        Returns:
            ScanReport ordered like *roots*, regardless of completion order.
        """

        def _scan_root(root: RepositoryRoot) -> RepositoryScan:
            if on_progress:
                on_progress(root.path, "scanning")
            result = self._scan_one(root)
            if on_result:
                on_result(result)
            if on_progress:
                on_progress(root.path, "skipped" if result.skipped else "done")
            return result

        max_workers = min(self.workers, len(roots))
        if max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(_scan_root, root) for root in roots]
                results = [future.result() for future in futures]
        else:
            results = [_scan_root(root) for root in roots]

        return ScanReport(
            base=base,
            repositories=tuple(results),
            warnings=tuple(warnings),
        )

    def _scan_one(self, root: RepositoryRoot) -> RepositoryScan:
        """Scan a repository; any failure skips it instead of aborting the run."""
        try:
            return self.scanner.scan(root)
        except IgnoreEvaluationError as exc:
            log.info("Skipping %s: %s", root.path, exc)
            return RepositoryScan(root=root, skipped=str(exc))
        except Exception as exc:
            log.exception("Scanning '%s' failed", root.path)
            return RepositoryScan(root=root, skipped=f"scan failed: {exc}")

    def delete(
        self,
        candidates: Iterable[Candidate],
        on_result: DeletionCallback | None = None,
    ) -> list[DeletionOutcome]:
        """Delete approved candidates one by one.

        Each path is re-checked to still be a real directory, but the ignore
        rules are not evaluated again.  A failure never stops the remaining
        deletions.
        """
        outcomes: list[DeletionOutcome] = []
        for candidate in candidates:
            try:
                remove_tree(candidate.path)
            except OSError as e:
                log.debug("Failed to delete %s: %s", candidate.path, e)
                outcome = DeletionOutcome(path=candidate.path, success=False, error=str(e))
            else:
                outcome = DeletionOutcome(path=candidate.path, success=True, freed_bytes=candidate.size_bytes)
            outcomes.append(outcome)
            if on_result:
                on_result(outcome)

        failed = sum(1 for o in outcomes if not o.success)
        log.info("Deleted %d of %d directories", len(outcomes) - failed, len(outcomes))
        return outcomes
