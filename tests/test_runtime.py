"""Tests for applying configuration at runtime."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
import unittest
from unittest.mock import Mock

from evented.events import Event, Evented, ListenerErrorPolicy
from evented.exceptions import ListenerError
from evented.runtime import apply_events_config, configure


class RuntimeTests(unittest.TestCase):
    """Validate that configuration reaches logging and Evented defaults."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)
        self._original_policy = Evented.listener_errors
        self._original_log_unhandled = Evented.log_unhandled_errors

    def tearDown(self) -> None:
        Evented.listener_errors = self._original_policy
        Evented.log_unhandled_errors = self._original_log_unhandled
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def test_apply_events_config_sets_class_defaults(self) -> None:
        apply_events_config({"listener_errors": "raise", "log_unhandled_errors": False})
        self.assertIs(Evented.listener_errors, ListenerErrorPolicy.RAISE)
        self.assertFalse(Evented.log_unhandled_errors)

        evented = Evented()
        evented.on("a", Mock(side_effect=RuntimeError("boom")))
        with self.assertRaises(ListenerError):
            evented.fire(Event("a"))

    def test_instance_policy_overrides_class_default(self) -> None:
        apply_events_config({"listener_errors": "raise"})
        evented = Evented()
        evented.listener_errors = ListenerErrorPolicy.LOG
        after = Mock()
        evented.on("a", Mock(side_effect=RuntimeError("boom")))
        evented.on("a", after)
        with self.assertLogs("evented.events", level="ERROR"):
            evented.fire(Event("a"))
        after.assert_called_once()

    def test_configure_loads_from_path(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                '[logging]\nstructured = false\nlevel = "WARNING"\n\n'
                '[events]\nlistener_errors = "raise"\n',
                encoding="utf-8",
            )
            config = configure(config_path=config_path)
        self.assertEqual(config["logging"]["level"], "WARNING")
        self.assertEqual(logging.getLogger().level, logging.WARNING)
        self.assertIs(Evented.listener_errors, ListenerErrorPolicy.RAISE)


if __name__ == "__main__":
    unittest.main()
