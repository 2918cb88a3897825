"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from evented.config import DEFAULT_CONFIG, load_config


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertEqual(config["events"]["listener_errors"], "log")
            self.assertTrue(config["events"]["log_unhandled_errors"])
            self.assertFalse(config_path.exists())

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[events]
listener_errors = "RAISE"

[logging]
level = "debug"
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)
            self.assertEqual(config["events"]["listener_errors"], "raise")
            self.assertEqual(config["logging"]["level"], "DEBUG")
            self.assertEqual(
                config["logging"]["structured"], DEFAULT_CONFIG["logging"]["structured"]
            )

    def test_invalid_values_fallback_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[events]
listener_errors = "ignore"

[logging]
level = "LOUD"
                """.strip(),
                encoding="utf-8",
            )
            with self.assertLogs("evented.config", level="WARNING"):
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)

    def test_unparsable_toml_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[events\nlistener_errors = ", encoding="utf-8")
            with self.assertLogs("evented.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertTrue(any("Failed to parse config" in line for line in logs.output))

    def test_default_path_is_read_when_no_path_given(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                '[events]\nlog_unhandled_errors = false\n', encoding="utf-8"
            )

            import evented.config as config_mod

            original_config_path = config_mod.CONFIG_PATH
            try:
                config_mod.CONFIG_PATH = config_path
                loaded = config_mod.load_config()
                self.assertFalse(loaded["events"]["log_unhandled_errors"])
            finally:
                config_mod.CONFIG_PATH = original_config_path


if __name__ == "__main__":
    unittest.main()
