"""Tests for the cache pattern catalog."""

from __future__ import annotations

import json

import pytest

from reclaim.core.catalog import DEFAULT_PATTERNS, PatternCatalog, build_catalog
from reclaim.models.pattern import PatternEntry
from reclaim.settings import Settings


@pytest.fixture
def settings_file(tmp_path):
    """Write a settings file and return a loaded Settings for it."""

    def _write(data: object) -> Settings:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps(data))
        return Settings(path)

    return _write


class TestPatternCatalog:
    def test_default_names(self):
        catalog = PatternCatalog()
        assert catalog.names() == sorted([
            "build", ".gradle", "bin", "obj", "node_modules", "target",
            "__pycache__", ".mypy_cache", ".pytest_cache", ".ruff_cache", ".tox",
        ])
        assert len(catalog) == len(DEFAULT_PATTERNS)

    def test_lookup_exact_match_only(self):
        catalog = PatternCatalog()
        assert catalog.lookup("node_modules") == PatternEntry("node_modules", "Node.js")
        assert catalog.lookup("target").label == "Rust"
        assert catalog.lookup("Node_Modules") is None
        assert catalog.lookup("node_modules.bak") is None
        assert catalog.lookup("*") is None
        assert catalog.lookup("") is None

    def test_contains(self):
        catalog = PatternCatalog()
        assert "__pycache__" in catalog
        assert "src" not in catalog

    def test_iterates_in_name_order(self):
        catalog = PatternCatalog([PatternEntry("zeta", "Z"), PatternEntry("alpha", "A")])
        assert [e.name for e in catalog] == ["alpha", "zeta"]

    def test_later_entry_wins(self):
        catalog = PatternCatalog([PatternEntry("dist", "Old"), PatternEntry("dist", "New")])
        assert len(catalog) == 1
        assert catalog.lookup("dist").label == "New"

    def test_by_label(self):
        groups = PatternCatalog().by_label()
        assert [e.name for e in groups["Python"]] == [
            ".mypy_cache", ".pytest_cache", ".ruff_cache", ".tox", "__pycache__",
        ]
        assert [e.name for e in groups[".NET"]] == ["bin", "obj"]

    def test_construction_does_not_alias_input(self):
        entries = [PatternEntry("dist", "JavaScript")]
        catalog = PatternCatalog(entries)
        entries.append(PatternEntry("out", "Generic"))
        assert "out" not in catalog


class TestBuildCatalog:
    def test_defaults_without_settings(self):
        assert build_catalog().names() == PatternCatalog().names()

    def test_defaults_with_missing_file(self, tmp_path):
        catalog = build_catalog(Settings(tmp_path / "missing.json"))
        assert len(catalog) == len(DEFAULT_PATTERNS)

    def test_extra_and_disabled(self, settings_file):
        settings = settings_file({
            "patterns": {
                "extra": {"dist": "JavaScript", "target": "Rust / Maven"},
                "disabled": ["bin", "obj"],
            }
        })
        catalog = build_catalog(settings)

        assert catalog.lookup("dist").label == "JavaScript"
        assert catalog.lookup("target").label == "Rust / Maven"
        assert "bin" not in catalog
        assert "obj" not in catalog
        assert len(catalog) == len(DEFAULT_PATTERNS) - 1

    def test_empty_label_falls_back_to_name(self, settings_file):
        catalog = build_catalog(settings_file({"patterns": {"extra": {".next": ""}}}))
        assert catalog.lookup(".next").label == ".next"

    def test_invalid_entries_skipped(self, settings_file, caplog):
        settings = settings_file({
            "patterns": {
                "extra": {"a/b": "Nested", "": "Empty", ".git": "Git", "..": "Up", "out": 3},
                "disabled": ["nope", 7],
            }
        })
        catalog = build_catalog(settings)

        assert catalog.names() == PatternCatalog().names()
        assert "Ignoring invalid pattern" in caplog.text
        assert "Cannot disable unknown pattern" in caplog.text

    def test_wrong_container_types_ignored(self, settings_file, caplog):
        settings = settings_file({"patterns": {"extra": ["dist"], "disabled": "bin"}})
        catalog = build_catalog(settings)

        assert catalog.names() == PatternCatalog().names()
        assert "expected an object" in caplog.text
        assert "expected a list" in caplog.text
