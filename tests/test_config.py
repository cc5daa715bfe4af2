"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from event_registry.config import DEFAULT_CONFIG, load_config
from event_registry.registry import EventRegistry


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertTrue(config["registry"]["validate_listeners"])
            self.assertFalse(config["registry"]["isolate_listener_errors"])
            self.assertFalse(config["registry"]["dedupe_listeners"])
            self.assertEqual(config["logging"]["level"], "INFO")

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[registry]
isolate_listener_errors = true

[logging]
level = "debug"
structured = false
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)
            self.assertTrue(config["registry"]["isolate_listener_errors"])
            self.assertTrue(config["registry"]["validate_listeners"])
            self.assertEqual(config["logging"]["level"], "DEBUG")
            self.assertFalse(config["logging"]["structured"])
            self.assertEqual(
                config["logging"]["log_file_path"],
                DEFAULT_CONFIG["logging"]["log_file_path"],
            )

    def test_invalid_values_fallback_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[registry]
dedupe_listeners = true

[logging]
level = "LOUD"
                """.strip(),
                encoding="utf-8",
            )
            with self.assertLogs("event_registry.config", level="WARNING"):
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)

    def test_unparseable_toml_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[registry\nbroken = ", encoding="utf-8")
            with self.assertLogs("event_registry.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertTrue(any("Failed to parse config" in line for line in logs.output))

    def test_loaded_registry_section_builds_registry(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                "[registry]\ndedupe_listeners = true\n", encoding="utf-8"
            )
            config = load_config(config_path=config_path)

        registry = EventRegistry.from_config(config["registry"])
        calls: list[int] = []

        def listener(value: int) -> None:
            calls.append(value)

        registry.on("a", listener)
        registry.on("a", listener)
        registry.emit("a", 7)
        self.assertEqual(calls, [7])


if __name__ == "__main__":
    unittest.main()
