"""Discovery of git repositories below a base directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from reclaim.models.scan_result import RepositoryRoot

log = logging.getLogger(__name__)

GIT_MARKER = ".git"
DEFAULT_MAX_DEPTH = 3


class DiscoveryError(Exception):
    """Raised when the base directory cannot be searched at all."""


def is_repository(path: Path) -> bool:
    """Check whether *path* holds a git marker (directory or gitfile)."""
    return os.path.lexists(path / GIT_MARKER)


def discover(base: Path | str, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[list[RepositoryRoot], list[str]]:
    """Find repository roots up to *max_depth* directory steps below *base*.

    The base itself is depth 0.  Once a directory is identified as a
    repository its subtree is not searched for more repositories.  Children
    are visited in sorted order so the result is deterministic, and symbolic
    links are never followed.

    Returns:
        (repositories, warnings) tuple; warnings describe skipped directories.

    Raises:
        DiscoveryError: If *base* is missing or not a directory, or the depth is negative.
    """
    if max_depth < 0:
        raise DiscoveryError(f"Invalid depth: {max_depth}")
    try:
        root = Path(base).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise DiscoveryError(f"cannot access '{base}': {e.strerror if isinstance(e, OSError) else e}") from e
    if not root.is_dir():
        raise DiscoveryError(f"not a directory: '{base}'")

    repos: list[RepositoryRoot] = []
    warnings: list[str] = []
    _collect(root, max_depth, 0, repos, warnings)
    log.info("Discovered %d repositories under %s", len(repos), root)
    return repos, warnings


def _collect(
    directory: Path,
    max_depth: int,
    depth: int,
    repos: list[RepositoryRoot],
    warnings: list[str],
) -> None:
    if is_repository(directory):
        log.debug("Repository found: %s", directory)
        repos.append(RepositoryRoot(directory))
        return
    if depth >= max_depth:
        return

    try:
        with os.scandir(directory) as it:
            children = sorted(
                (entry for entry in it if entry.is_dir(follow_symlinks=False)),
                key=lambda entry: entry.name,
            )
    except OSError as e:
        warnings.append(f"{directory}: cannot read directory ({e.strerror or e})")
        log.debug("Cannot read %s: %s", directory, e)
        return

    for entry in children:
        _collect(Path(entry.path), max_depth, depth + 1, repos, warnings)
