"""Catalog of known cache directory names."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from reclaim.models.pattern import PatternEntry
from reclaim.settings import Settings

log = logging.getLogger(__name__)

_JVM = "Java / Gradle / Kotlin"
_DOTNET = ".NET"
_NODE = "Node.js"
_RUST = "Rust"
_PYTHON = "Python"

DEFAULT_PATTERNS: tuple[PatternEntry, ...] = (
    PatternEntry("build", _JVM),
    PatternEntry(".gradle", _JVM),
    PatternEntry("bin", _DOTNET),
    PatternEntry("obj", _DOTNET),
    PatternEntry("node_modules", _NODE),
    PatternEntry("target", _RUST),
    PatternEntry("__pycache__", _PYTHON),
    PatternEntry(".mypy_cache", _PYTHON),
    PatternEntry(".pytest_cache", _PYTHON),
    PatternEntry(".ruff_cache", _PYTHON),
    PatternEntry(".tox", _PYTHON),
)


class PatternCatalog:
    """Immutable exact-name lookup table of cache directories.

    Shared read-only by all scanner threads; never mutated after construction.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[PatternEntry] = DEFAULT_PATTERNS) -> None:
        table: dict[str, PatternEntry] = {}
        for entry in entries:
            if entry.name in table:
                log.debug("Pattern '%s' redefined as %s", entry.name, entry.label)
            table[entry.name] = entry
        self._entries: Mapping[str, PatternEntry] = MappingProxyType(table)

    def lookup(self, name: str) -> PatternEntry | None:
        """Return the entry for a directory basename, or None."""
        return self._entries.get(name)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def by_label(self) -> dict[str, list[PatternEntry]]:
        """Group entries by their tool label, preserving name order."""
        groups: dict[str, list[PatternEntry]] = {}
        for entry in self:
            groups.setdefault(entry.label, []).append(entry)
        return groups

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PatternEntry]:
        return (self._entries[name] for name in sorted(self._entries))

    def __contains__(self, name: object) -> bool:
        return name in self._entries


def _valid_name(name: object) -> bool:
    """Whether *name* can be used as a plain directory basename."""
    if not isinstance(name, str) or name in ("", ".", "..", ".git"):
        return False
    return "/" not in name and "\\" not in name


def build_catalog(settings: Settings | None = None) -> PatternCatalog:
    """Build the process-wide catalog from the defaults and user settings.

    ``patterns.extra`` maps additional (or relabelled) names to labels and
    ``patterns.disabled`` lists default names to drop.
    """
    entries = {entry.name: entry for entry in DEFAULT_PATTERNS}
    if settings is None:
        return PatternCatalog(entries.values())

    disabled = settings.get("patterns.disabled", [])
    if isinstance(disabled, list):
        for name in disabled:
            if not isinstance(name, str) or entries.pop(name, None) is None:
                log.warning("Cannot disable unknown pattern: %r", name)
    else:
        log.warning("Ignoring patterns.disabled in %s: expected a list", settings.path)

    extra = settings.get("patterns.extra", {})
    if isinstance(extra, dict):
        for name, label in extra.items():
            if not _valid_name(name) or not isinstance(label, str):
                log.warning("Ignoring invalid pattern in %s: %r", settings.path, name)
                continue
            entries[name] = PatternEntry(name, label or name)
    else:
        log.warning("Ignoring patterns.extra in %s: expected an object", settings.path)

    catalog = PatternCatalog(entries.values())
    log.info("Loaded %d cache patterns", len(catalog))
    return catalog
