"""JSON config defaults and CLI override merging."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from peek.runtime import config as config_mod
from peek.runtime.config import BrowserConfig, load_browser_config, load_config


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config.json"
        patcher = mock.patch.object(config_mod, "CONFIG_PATH", self.path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, payload) -> None:
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(load_config(), {})
        self.assertEqual(load_browser_config(), BrowserConfig())

    def test_malformed_or_non_object_config_is_ignored(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(load_config(), {})
        self._write([1, 2, 3])
        self.assertEqual(load_config(), {})

    def test_booleans_and_commands_are_loaded(self) -> None:
        self._write(
            {
                "show_hidden": True,
                "color": False,
                "indicators": "yes",
                "editor": "code --wait",
                "opener": ["open", "-a", "Preview"],
                "shell": 42,
            }
        )
        config = load_browser_config()
        self.assertTrue(config.show_hidden)
        self.assertFalse(config.color)
        self.assertFalse(config.indicators)
        self.assertEqual(config.editor, ("code", "--wait"))
        self.assertEqual(config.opener, ("open", "-a", "Preview"))
        self.assertIsNone(config.shell)

    def test_overrides_skip_none(self) -> None:
        config = BrowserConfig(show_hidden=True).with_overrides(show_hidden=None, color=False)
        self.assertTrue(config.show_hidden)
        self.assertFalse(config.color)

    def test_scan_options_mirror_display_flags(self) -> None:
        options = BrowserConfig(show_hidden=True, indicators=True, show_escapes=True).scan_options()
        self.assertTrue(options.show_hidden and options.indicators and options.show_escapes)


if __name__ == "__main__":
    unittest.main()
