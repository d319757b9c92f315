r"""
SAAS tool applications: restoretool and wipetool.

Both run as nested sessions on the terminal of the shell that launched them
and work on the save data stored next to the options file:

    <options directory>/Game.json           the save
    <options directory>/Game.json.bak       its backup copy, if any
    <options directory>/SaveBackup/*.json   named backups

restoretool creates and restores named backups. Restoring changes the save,
so leaving the tool afterwards reboots. wipetool deletes the save, its .bak
and every backup, one confirmation each; deleting the save reboots on exit.
"""
import logging
import shutil
from datetime import datetime
from pathlib import Path

from .arguments import Argument
from .commands import command
from .faults import ExitSignal
from .sessions import Session
from .terminal import Align
from .utils import *

logger = logging.getLogger(__name__)

SAVE_NAME = "Game.json"
BACKUP_DIRECTORY = "SaveBackup"


class SaveStore:
    """
    Save file and backups below one directory.
    """

    def __init__(self, root, /):
        self._root = Path(root)

    root = mirror("root")

    @property
    def save(self):
        return self._root / SAVE_NAME

    @property
    def spare(self):
        return self.save.with_suffix(self.save.suffix + ".bak")

    @property
    def directory(self):
        return self._root / BACKUP_DIRECTORY

    def has_save(self):
        return self.save.is_file()

    def backups(self):
        """
        Backup files sorted by name.
        """
        if not self.directory.is_dir():
            return []
        return sorted(path for path in self.directory.iterdir() if path.suffix == self.save.suffix and path.is_file())

    def has_backups(self):
        return bool(self.backups())

    def backup_path(self, name, /):
        """
        Raises ValueError when name would leave the backup directory.
        """
        if not name.strip() or Path(name).name != name:
            raise ValueError(f"invalid backup name {name!r}")
        return self.directory / (name + self.save.suffix)

    def backup(self, name, /):
        target = self.backup_path(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.save, target)
        logger.info("backed up %s to %s", self.save, target)
        return target

    def restore(self, path, /):
        shutil.copy2(path, self.save)
        logger.info("restored %s from %s", self.save, path)


def _store_of(options, /):
    return SaveStore(coalesce(options.directory, Path.cwd()))


class ToolSession(Session):
    """
    Session working on a SaveStore. Aliases are not expanded.
    """
    expands = False

    def __init__(self, terminal, options=Unset, /, *, store=Unset, **kwargs):
        super().__init__(terminal, options, **kwargs)
        self._store = _store_of(self.options) if store is Unset else store

    store = mirror("store")


class RestoreSession(ToolSession):
    name = "restoretool"
    default_prompt = "restoretool> "
    mounts = (("shell", "clear"), ("shell", "confirm"))

    def __init__(self, terminal, options=Unset, /, **kwargs):
        super().__init__(terminal, options, **kwargs)
        self._restart = False

    @property
    def must_restart(self):
        return self._restart

    def status(self):
        """
        (save data, backup files) status labels.
        """
        if self._store.has_save():
            save = "Found"
        elif self._store.has_backups():
            save = "Can restore"
        else:
            save = "Not found"
        return save, "Found" if self._store.has_backups() else "Not found"

    def greet(self):
        save, backups = self.status()
        self.println()
        self.print(r"\t######################")
        self.println(r"\hSave data         ", Align.RIGHT)
        self.print(r"\t# SHELL AS A SERVICE #")
        self.println(f"{save:<16}", Align.RIGHT)
        self.print(r"\t# RESTORETOOL   v1.0 #")
        self.println(r"\hBackup files      ", Align.RIGHT)
        self.print(r"\t######################")
        self.println(f"{backups:<16}", Align.RIGHT)
        self.println(r"\tType 'help' to get help")

    def enable_restart(self):
        self.println("Changes have been made: the game must restart")
        self._restart = True


class WipeSession(ToolSession):
    name = "wipetool"
    default_prompt = "wipetool> "
    mounts = (("shell", "confirm"), ("shell", "exit"))
    banner = (
        "######################",
        "# SHELL AS A SERVICE #",
        "# WIPETOOL      v1.0 #",
        "######################",
        "Type 'exit' to leave",
        "or 'wipe' to begin deletion",
    )

    def __init__(self, terminal, options=Unset, /, **kwargs):
        super().__init__(terminal, options, **kwargs)
        self._reset = False

    @property
    def must_reset(self):
        return self._reset

    def greet(self):
        self.println()
        for line in self.banner:
            self.println(line, Align.CENTER)

    def enable_reset(self):
        self._reset = True
        self.println("Type 'exit' to restart", Align.CENTER)

    def main(self):
        signal = super().main()
        if self._reset:
            raise ExitSignal("reboot")
        return signal


def _spawn(context, cls, /):
    session = context.session
    return cls(
        session.terminal,
        session.options,
        debug=session.debug,
        platform=session.platform,
        registry=session.registry,
    ).main()


@command(
    "restoretool",
    descr="Application for restoring save data.",
    manual=r"A console application for restoring and\nbacking up save and system data.",
    ingame=False,
)
def restoretool(context, arguments, /):
    _spawn(context, RestoreSession)
    return 0


@command(
    "wipetool",
    descr="Application for removing save data.",
    manual="A console application for removing save data.",
    ingame=False,
)
def wipetool(context, arguments, /):
    _spawn(context, WipeSession)
    return 0


@command(
    "exit",
    descr="Exit restoretool.",
    manual=r"Exits restoretool. If changes to save or\nsystem data have been made, restarts the game.",
    scope="restoretool",
)
def restoretool_exit(context, arguments, /):
    session = context.session
    if session.must_restart:
        context.println("Restarting...")
        context.wait(80)
        raise ExitSignal("reboot")
    if not session.store.has_save() and session.store.has_backups():
        context.println("Save data was not found, but backups exist.")
        if not context.confirm("Exit anyway?"):
            return 1
    raise ExitSignal()


@command(
    "help",
    descr="Show help information.",
    manual=r"If a command name is passed as the argument,\nshows its help page. Otherwise lists all\navailable commands.",
    arguments=(Argument("command", optional=True),),
    scope="restoretool",
)
def restoretool_help(context, arguments, /):
    commands = context.session.commands
    if not arguments:
        context.println(r"\hRESTORETOOL COMMANDS")
        for name, entry in commands.items():
            context.print(name)
            context.println(entry.descr, Align.RIGHT)
        context.println("View individual help with 'help [command]'")
    elif arguments[0] in commands:
        for line in commands[arguments[0]].manual_lines():
            context.println(line)
    else:
        context.error(f"command not found: {arguments[0]}")
    return 0


@command(
    "backup",
    descr="Create a new backup.",
    manual=r"Creates a new backup and puts it in the\nSaveBackup folder. If the backup name is omitted,\nthe user is prompted to give one.",
    arguments=(Argument("backup name", "*s", optional=True),),
    scope="restoretool",
)
def backup(context, arguments, /):
    store = context.session.store
    if not store.has_save():
        context.error("save data not found")
    if arguments:
        name = " ".join(arguments)
    else:
        context.print("Backup name: ")
        name = context.session.await_input(prompt=False, history=False)
        if not name.strip():
            context.error("no name given")
    try:
        store.backup(name)
    except ValueError:
        context.error(f"invalid backup name {name}")
    except OSError as error:
        logger.warning("backup %r failed: %s", name, error)
        context.error("error encountered")
    return 0


def print_backup_info(context, index, path, /):
    """
    Print "<index>: <name> (<size>kb) <mtime>"; index 0 omits the prefix.
    """
    stat = path.stat()
    name = f"{index}: {path.stem}" if index > 0 else path.stem
    mtime = datetime.fromtimestamp(stat.st_mtime).strftime("%m/%d/%Y %I:%M%p")
    context.println(f"{name} ({stat.st_size // 1000}kb) {mtime}")


def _choose_backup(context, backups, /):
    if len(backups) == 1:
        print_backup_info(context, 0, backups[0])
        return backups[0] if context.confirm("Load this backup?") else None
    context.println("Restore save data from which backup?")
    for index, path in enumerate(backups, 1):
        print_backup_info(context, index, path)
    context.print(f"Load backup 1-{len(backups)}: ")
    choice = context.validate("i", context.session.await_input(prompt=False, history=False))
    context.validate_range((1, len(backups)), choice)
    return backups[choice - 1]


@command(
    "restore",
    descr="Restore save and system data.",
    manual=r"Restores save and system data from various\nbackups. If the backup name is omitted, the user\nis prompted to select the backup to restore.",
    arguments=(Argument("backup name", "*s", optional=True),),
    scope="restoretool",
)
def restore(context, arguments, /):
    session = context.session
    store = session.store
    if not (backups := store.backups()):
        context.error("no save data backups found")
    if arguments:
        name = " ".join(arguments)
        try:
            location = store.backup_path(name)
        except ValueError:
            context.error(f"backup {name} not found")
        if not location.is_file():
            context.error(f"backup {name} not found")
    elif (location := _choose_backup(context, backups)) is None:
        return 1
    try:
        store.restore(location)
    except OSError as error:
        logger.warning("restore from %s failed: %s", location, error)
        context.error("error encountered")
    session.enable_restart()
    return 0


def _prompt_wipe(context, name, path, /):
    if not context.confirm(f"Delete {name}?"):
        return False
    try:
        path.unlink()
    except OSError as error:
        logger.warning("could not delete %s: %s", path, error)
        context.println(str(error), raw=True)
        context.println(f"{name} was not deleted")
        return False
    logger.info("deleted %s", path)
    return True


@command("wipe", descr="Delete save data.", scope="wipetool")
def wipe(context, arguments, /):
    session = context.session
    store = session.store
    if store.save.exists():
        if _prompt_wipe(context, store.save.name, store.save):
            session.enable_reset()
    else:
        context.println(f"{store.save.name} was not found")
    if store.spare.exists():
        _prompt_wipe(context, store.spare.name, store.spare)
    for path in store.backups():
        _prompt_wipe(context, path.name, path)
    return 0


__all__ = (
    "SaveStore",
    "ToolSession",
    "RestoreSession",
    "WipeSession",
    "SAVE_NAME",
    "BACKUP_DIRECTORY",
)
