"""Tests for config_manager module."""

import json
import os
import tempfile

import pytest

from pageorganizer.utils.config_manager import ConfigManager
from pageorganizer.utils.exceptions import ConfigurationError


class TestConfigManager:
    def _make_manager(self, tmp_dir, initial=None):
        path = os.path.join(tmp_dir, "config.json")
        if initial:
            with open(path, "w") as f:
                json.dump(initial, f)
        return ConfigManager(config_path=path)

    def test_get_default_value(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.get("nonexistent.key", "fallback") == "fallback"

    def test_defaults(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.get("export.delivery_mode") == "archive"
            assert cm.get("export.output_prefix") == "modified-"
            assert cm.get("export.archive_name") == "processed-pdfs.zip"
            assert cm.thumbnail_scale() == pytest.approx(0.15)

    def test_set_and_get(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            cm.set("export.delivery_mode", "individual", save_immediately=False)
            assert cm.get("export.delivery_mode") == "individual"

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "nested", "config.json")
            cm = ConfigManager(config_path=path)
            cm.set("export.archive_name", "bundle.zip")
            cm2 = ConfigManager(config_path=path)
            assert cm2.get("export.archive_name") == "bundle.zip"

    def test_nested_key_path(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            cm.set("a.b.c", 42, save_immediately=False)
            assert cm.get("a.b.c") == 42

    def test_load_existing_config_merges_defaults(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d, initial={"export": {"delivery_mode": "individual"}})
            assert cm.get("export.delivery_mode") == "individual"
            assert cm.get("export.output_prefix") == "modified-"
            assert cm.get("version") == 1

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "config.json")
            with open(path, "w") as f:
                f.write("{not json")
            cm = ConfigManager(config_path=path)
            assert cm.get("export.delivery_mode") == "archive"

    def test_save_returns_true(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.save() is True

    def test_invalid_thumbnail_scale(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            cm.set("thumbnails.scale", 0, save_immediately=False)
            with pytest.raises(ConfigurationError):
                cm.thumbnail_scale()
            cm.set("thumbnails.scale", "big", save_immediately=False)
            with pytest.raises(ConfigurationError, match="thumbnails.scale"):
                cm.thumbnail_scale()
