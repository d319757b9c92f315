"""
Tool application tests (SaveStore, restoretool, wipetool).

Scope
- Validate save and backup file handling below one directory.
- Validate the restoretool and wipetool sessions end to end, including the
  reboot they request after changing save data.

Conventions
- Test method names follow CamelCase per project convention.
- Every test works in its own TemporaryDirectory, which also holds the
  options file the sessions save on exit.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import TestCase

from saas import (
    Context,
    ExitSignal,
    MemoryTerminal,
    RestoreSession,
    SaveStore,
    Session,
    ShellOptions,
    WipeSession,
)
from saas.terminal import Align
from saas.tools import print_backup_info


class ToolTestCase(TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.root = Path(self.directory.name)
        self.store = SaveStore(self.root)
        self.options = ShellOptions(path=self.root / "options.json")

    def tearDown(self):
        self.directory.cleanup()

    def write_save(self, content="level 1"):
        self.store.save.write_text(content, encoding="utf-8")

    def write_backup(self, name, content="old"):
        self.store.directory.mkdir(exist_ok=True)
        path = self.store.directory / f"{name}.json"
        path.write_text(content, encoding="utf-8")
        return path


class TestSaveStore(ToolTestCase):

    def testLayout(self):
        self.assertEqual(self.store.save, self.root / "Game.json")
        self.assertEqual(self.store.spare, self.root / "Game.json.bak")
        self.assertEqual(self.store.directory, self.root / "SaveBackup")
        self.assertFalse(self.store.has_save())
        self.assertEqual(self.store.backups(), [])

    def testBackupAndRestore(self):
        self.write_save("first")
        target = self.store.backup("one")
        self.assertEqual(target, self.root / "SaveBackup" / "one.json")
        self.write_save("second")
        self.store.restore(target)
        self.assertEqual(self.store.save.read_text(encoding="utf-8"), "first")

    def testBackupsAreSorted(self):
        self.write_backup("b")
        self.write_backup("a")
        (self.store.directory / "notes.txt").write_text("", encoding="utf-8")
        self.assertEqual([path.stem for path in self.store.backups()], ["a", "b"])
        self.assertTrue(self.store.has_backups())

    def testBackupNames(self):
        for name in ("", "  ", "../escape", "sub/name"):
            with self.assertRaises(ValueError):
                self.store.backup_path(name)


class TestRestoreTool(ToolTestCase):

    def session(self, *inputs):
        self.terminal = MemoryTerminal(inputs)
        return RestoreSession(self.terminal, self.options)

    def testCommands(self):
        self.assertEqual(
            sorted(self.session().commands),
            ["backup", "clear", "confirm", "exit", "help", "restore"],
        )

    def testStatus(self):
        session = self.session()
        self.assertEqual(session.status(), ("Not found", "Not found"))
        self.write_backup("a")
        self.assertEqual(session.status(), ("Can restore", "Found"))
        self.write_save()
        self.assertEqual(session.status(), ("Found", "Found"))

    def testGreeting(self):
        self.write_save()
        session = self.session()
        session.main()
        line = self.terminal.lines[2]
        self.assertEqual(line.text(), "   # SHELL AS A SERVICE #")
        self.assertEqual(line.text(Align.RIGHT).strip(), "Found")
        self.assertTrue(self.terminal.lines[1].highlighted(Align.RIGHT))

    def testBackupThenExit(self):
        self.write_save()
        signal = self.session("backup first", "exit").main()
        self.assertEqual(signal.status, "exit")
        self.assertTrue((self.store.directory / "first.json").is_file())
        self.assertTrue(self.options.path.is_file())

    def testBackupAsksForAName(self):
        self.write_save()
        self.session("backup", "second", "exit").main()
        self.assertIn("Backup name: second", self.terminal.text())
        self.assertEqual(self.terminal.history, ["backup", "exit"])
        self.assertTrue((self.store.directory / "second.json").is_file())

    def testBackupErrors(self):
        self.session("backup x", "exit").main()
        self.assertIn("backup: save data not found", self.terminal.text())
        self.write_save()
        self.session("backup ../x", "backup", "", "exit").main()
        self.assertIn("backup: invalid backup name ../x", self.terminal.text())
        self.assertIn("backup: no name given", self.terminal.text())

    def testRestoreByNameReboots(self):
        self.write_backup("first", "old")
        self.write_save("new")
        with self.assertRaises(ExitSignal) as caught:
            self.session("restore first", "exit").main()
        self.assertEqual(caught.exception.status, "reboot")
        self.assertEqual(self.store.save.read_text(encoding="utf-8"), "old")
        self.assertIn("Changes have been made: the game must restart", self.terminal.text())
        self.assertIn("Restarting...", self.terminal.text())
        self.assertEqual(self.terminal.ticks, 80)

    def testRestoreErrors(self):
        self.session("restore", "exit").main()
        self.assertIn("restore: no save data backups found", self.terminal.text())
        self.write_save()
        self.write_backup("first")
        self.session("restore second", "exit").main()
        self.assertIn("restore: backup second not found", self.terminal.text())

    def testRestoreSingleBackup(self):
        self.write_backup("only", "old")
        session = self.session("restore", "y")
        session.main()
        self.assertTrue(session.must_restart)
        self.assertEqual(self.store.save.read_text(encoding="utf-8"), "old")
        self.assertIn("Load this backup? (y/n) y", self.terminal.text())

    def testRestoreChoice(self):
        self.write_save()
        self.write_backup("a", "from a")
        self.write_backup("b", "from b")
        session = self.session("restore", "5", "restore", "2")
        session.main()
        self.assertIn("restore: 5 not between 1 and 2", self.terminal.text())
        self.assertIn("Load backup 1-2: 2", self.terminal.text())
        self.assertEqual(self.store.save.read_text(encoding="utf-8"), "from b")

    def testExitWithoutSaveAsks(self):
        self.write_backup("a")
        signal = self.session("exit", "n", "exit", "y").main()
        self.assertEqual(signal.status, "exit")
        self.assertEqual(self.terminal.text().count("Save data was not found, but backups exist."), 2)

    def testAliasesAreNotExpanded(self):
        self.session("print hi", "exit").main()
        self.assertIn("restoretool: unknown command print", self.terminal.text())

    def testHelp(self):
        self.session("help", "exit").main()
        self.assertIn("RESTORETOOL COMMANDS", self.terminal.text())
        self.assertIn("View individual help with 'help [command]'", self.terminal.text())

    def testBackupInfo(self):
        path = self.write_backup("slot", "x" * 2500)
        session = self.session()
        print_backup_info(Context(session, session.command("restore")), 1, path)
        self.assertRegex(self.terminal.lines[0].text(), r"^1: slot \(2kb\) \d\d/\d\d/\d{4} \d\d:\d\d[AP]M$")

    def testLaunchedFromTheShell(self):
        terminal = MemoryTerminal(["restoretool", "exit", "echo back"])
        signal = Session(terminal, self.options).main()
        self.assertEqual(signal.status, "exit")
        self.assertIn("restoretool> exit", terminal.text())
        self.assertIn("back", terminal.text())


class TestWipeTool(ToolTestCase):

    def session(self, *inputs):
        self.terminal = MemoryTerminal(inputs)
        return WipeSession(self.terminal, self.options)

    def testGreeting(self):
        self.session().main()
        self.assertEqual(self.terminal.lines[1].text(Align.CENTER), "######################")
        self.assertEqual(self.terminal.lines[6].text(Align.CENTER), "or 'wipe' to begin deletion")

    def testWipeEverything(self):
        self.write_save()
        self.store.spare.write_text("spare", encoding="utf-8")
        self.write_backup("a")
        self.write_backup("b")
        session = self.session("wipe", "y", "n", "y", "y", "exit")
        with self.assertRaises(ExitSignal) as caught:
            session.main()
        self.assertEqual(caught.exception.status, "reboot")
        self.assertTrue(session.must_reset)
        self.assertFalse(self.store.save.exists())
        self.assertTrue(self.store.spare.exists())
        self.assertEqual(self.store.backups(), [])
        self.assertIn("Delete Game.json.bak? (y/n) n", self.terminal.text())

    def testNothingToWipe(self):
        signal = self.session("wipe", "exit").main()
        self.assertEqual(signal.status, "exit")
        self.assertIn("Game.json was not found", self.terminal.text())

    def testKeepingTheSaveDoesNotReboot(self):
        self.write_save()
        signal = self.session("wipe", "n", "exit").main()
        self.assertEqual(signal.status, "exit")
        self.assertTrue(self.store.has_save())


if __name__ == "__main__":
    unittest.main()
