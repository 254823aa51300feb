"""Tests for the settings store."""

from __future__ import annotations

import json

from reclaim.settings import Settings, default_settings_path


class TestSettings:
    def test_dot_notation(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"scan": {"max_depth": 5}, "patterns": {"extra": {"dist": "JS"}}}))
        settings = Settings(path)

        assert settings.get("scan.max_depth") == 5
        assert settings.get("patterns.extra") == {"dist": "JS"}
        assert settings.get("scan.workers", 8) == 8
        assert settings.get("scan.max_depth.deeper", "x") == "x"

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = Settings(tmp_path / "nope.json")
        assert settings.get("scan.max_depth", 3) == 3

    def test_invalid_json_logged(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        settings = Settings(path)

        assert settings.get("scan.max_depth", 3) == 3
        assert "Could not load settings" in caplog.text

    def test_non_object_top_level(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        settings = Settings(path)

        assert settings.get("scan", None) is None
        assert "not an object" in caplog.text

    def test_get_int_rejects_invalid(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"scan": {"max_depth": -1, "workers": "many", "flag": True, "ok": 0}}))
        settings = Settings(path)

        assert settings.get_int("scan.max_depth", 3) == 3
        assert settings.get_int("scan.workers", 4) == 4
        assert settings.get_int("scan.flag", 2) == 2
        assert settings.get_int("scan.ok", 9) == 0
        assert "Ignoring invalid value for scan.max_depth" in caplog.text

    def test_never_writes(self, tmp_path):
        path = tmp_path / "sub" / "settings.json"
        Settings(path).get("scan.max_depth")
        assert not path.parent.exists()

    def test_default_path_follows_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_settings_path() == tmp_path / "reclaim" / "settings.json"
