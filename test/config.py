"""
Persisted configuration tests (ShellConfiguration, ShellOptions).

Scope
- Validate defaults and the active configuration fallback.
- Validate the JSON file: saving, loading, missing and corrupted files.

Conventions
- Test method names follow CamelCase per project convention.
- Files live in a TemporaryDirectory; the home directory is never touched.
"""

from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase, mock

from saas import Color, MemoryTerminal, Session, ShellConfiguration, ShellOptions, default_path


class TestShellConfiguration(TestCase):

    def testDefault(self):
        config = ShellConfiguration.default()
        self.assertEqual(config.name, "default")
        self.assertEqual(config.background, Color(0, 0, 0))
        self.assertEqual(config.foreground, Color(255, 255, 255))
        self.assertEqual(config.font, "Courier New")
        self.assertEqual(config.prompt, "#> ")

    def testDumpAndRestore(self):
        config = ShellConfiguration("dark", Color(1, 2, 3), Color(4, 5, 6), "Mono", "$ ")
        self.assertEqual(config.dump(), {
            "background": [1, 2, 3],
            "foreground": [4, 5, 6],
            "font": "Mono",
            "prompt": "$ ",
        })
        self.assertEqual(ShellConfiguration.restore("dark", config.dump()), config)

    def testFromSession(self):
        terminal = MemoryTerminal()
        session = Session(terminal, ShellOptions())
        terminal.configure(background=(9, 9, 9), font="Mono")
        session.set_prompt("% ")
        config = ShellConfiguration.from_session("mine", session)
        self.assertEqual(config, ShellConfiguration("mine", (9, 9, 9), (255, 255, 255), "Mono", "% "))


class TestShellOptions(TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.path = Path(self.directory.name) / "options.json"

    def tearDown(self):
        self.directory.cleanup()

    def testDefaults(self):
        options = ShellOptions()
        self.assertIsNone(options.active)
        self.assertEqual(dict(options.aliases), {"print": "echo", "man": "help"})
        self.assertEqual(options.active_configuration(), ShellConfiguration.default())
        self.assertEqual(options.active, "default")
        self.assertFalse(options.save())

    def testUnknownActiveFallsBack(self):
        options = ShellOptions({}, "gone")
        self.assertEqual(options.active_configuration().name, "default")
        self.assertTrue(options.is_active("default"))

    def testActivate(self):
        options = ShellOptions()
        config = ShellConfiguration.default("other")
        options.activate(config)
        self.assertTrue(options.is_active("other"))
        self.assertTrue(options.is_active(config))

    def testMissingFile(self):
        options = ShellOptions.load(self.path)
        self.assertEqual(options.path, self.path)
        self.assertEqual(options.directory, self.path.parent)
        self.assertEqual(options.configs, {})

    def testSaveAndLoad(self):
        options = ShellOptions(path=self.path)
        options.configs["dark"] = ShellConfiguration("dark", Color(1, 2, 3), Color(4, 5, 6), "Mono", "$ ")
        options.activate("dark")
        options.aliases.define("ll", "help")
        self.assertTrue(options.save())

        loaded = ShellOptions.load(self.path)
        self.assertEqual(loaded.active, "dark")
        self.assertEqual(loaded.configs, options.configs)
        self.assertEqual(loaded.aliases["ll"], "help")
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8"))["active"], "dark")

    def testCorruptedFile(self):
        for content in ("{", "[]", '{"configs": {}}', '{"configs": {"a": {}}, "aliases": {}}'):
            self.path.write_text(content, encoding="utf-8")
            with self.assertRaises(ValueError):
                ShellOptions.load(self.path)

    def testSaveFailureIsLogged(self):
        options = ShellOptions(path=self.directory.name)
        with self.assertLogs("saas.config", "WARNING"):
            self.assertFalse(options.save())

    def testDefaultPath(self):
        with mock.patch.dict(os.environ, {"SAAS_HOME": self.directory.name}):
            self.assertEqual(default_path(), self.path)


if __name__ == "__main__":
    unittest.main()
