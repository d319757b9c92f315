r"""
SAAS sessions: the read-eval loop around a Terminal.

Lifecycle
- Session(terminal, options, ...) resolves the commands of its scope and
  applies the active configuration to the terminal.
- main() greets, then loops on process(await_input()) until an ExitSignal.
  Interrupts and shell errors that escape a batch are printed and the loop
  goes on:

      #> foo
      shell: unknown command foo                                     :(

- exit() is the teardown: options are saved and the terminal flushed.

Batches
- process() splits the input into statements and runs them left to right.
  Each statement is alias-expanded right before it runs, so aliases defined
  earlier in the same batch apply.
- dispatch() runs one command and turns its errors into output; the exit code
  of the batch is the one of its last command.

Session kinds
- Session: bare "shell" session.
- InteractiveSession / IngameSession: greet the player. IngameSession lists
  in-game commands instead of outside-game ones.
"""
import functools
import logging
import sys

from .aliases import AliasTable, expand
from .commands import Context, catalog
from .config import ShellOptions
from .faults import ExitSignal, InterruptSignal, ShellError, UnknownCommandError
from .lexer import split
from .parsing import parse
from .terminal import Align
from .utils import *

logger = logging.getLogger(__name__)

SHELL_VERSION = "0.8.0"


class Session:
    """
    Base session.

    Class attributes
    - name: shown in error lines ("shell: unknown command foo") and used as
      the command scope.
    - default_prompt: fixed prompt; Unset uses the one of the active configuration.
    - mounts: (scope, name) pairs of extra commands, hidden or from another
      scope, made available in this session.
    - expands: whether statements are alias-expanded.
    """
    name = "shell"
    default_prompt = Unset
    mounts = ()
    expands = True

    def __init__(self, terminal, options=Unset, /, *, debug=False, ingame=False, platform=sys.platform,
                 registry=catalog):
        self._terminal = terminal
        self._options = ShellOptions() if options is Unset else options
        self._debug = bool(debug)
        self._ingame = bool(ingame)
        self._platform = platform
        self._registry = registry
        self._contexts = []

        self._commands = registry.resolve(self.name, debug=self._debug, ingame=self._ingame, platform=platform)
        for scope, name in self.mounts:
            if (command := registry.get(name, scope)) is None:
                raise LookupError(f"session {self.name!r} cannot mount unknown command {name!r}")
            self._commands[name] = command

        self._config = self._options.active_configuration()
        self._prompt = coalesce(self.default_prompt, self._config.prompt)
        terminal.configure(background=self._config.background, foreground=self._config.foreground,
                           font=self._config.font)

    @property
    def terminal(self):
        return self._terminal

    @property
    def options(self):
        return self._options

    @property
    def config(self):
        return self._config

    @property
    def prompt(self):
        return self._prompt

    @property
    def commands(self):
        return dict(self._commands)

    @property
    def aliases(self):
        return self._options.aliases if self.expands else AliasTable()

    @property
    def context(self):
        """
        Innermost running Context, or None.
        """
        return self._contexts[-1] if self._contexts else None

    @property
    def debug(self):
        return self._debug

    @property
    def ingame(self):
        return self._ingame

    @property
    def platform(self):
        return self._platform

    @property
    def registry(self):
        return self._registry

    @property
    def fps(self):
        return self._terminal.fps

    def command(self, name, /):
        return self._commands.get(name)

    def print(self, text, align=Align.LEFT, raw=False):
        self._terminal.print(text, align, raw)

    def println(self, text="", align=Align.LEFT, raw=False):
        self._terminal.print(text, align, raw)
        self._terminal.print(r"\n", align)

    def replace(self, text, align=Align.LEFT, raw=False):
        self._terminal.replace(text, align, raw)

    def wait(self, frames):
        for _ in range(frames):
            self._terminal.tick()

    def force_wait(self, frames):
        for _ in range(frames):
            self._terminal.tick(False)

    def await_input(self, prompt=True, history=True):
        """
        Read one line from the terminal and echo it on the prompt line.

        Raises InterruptSignal on Ctrl+C.
        """
        if prompt:
            self.print(self._prompt)
        previous = self._terminal.last.text(Align.LEFT)
        input = self._terminal.read_line(history).replace("\x00", "")
        self.replace(previous + input, Align.LEFT, True)
        self.println()
        return input

    def process(self, input, aliases=True):
        """
        Run every statement of input. Returns the exit code of the last
        command, 1 when none ran.

        Raises
        - UnterminatedStringError before anything runs.
        - UnknownCommandError on the first unknown name; the rest of the
          batch is dropped.
        """
        code = 1
        for statement in split(input):
            expanded = expand(statement, self.aliases) if aliases and self.expands else []
            for statement in expanded or [statement]:
                if not statement.name:
                    continue
                if statement.name not in self._commands:
                    raise UnknownCommandError(f"unknown command {statement.name}", command=statement.name)
                code = self.dispatch(statement.name, statement.arguments)
        return code

    def dispatch(self, name, tokens=(), /):
        """
        Parse tokens and run the command name with them.

        Errors are printed as "<name>: <message>" and give the exit code 1.
        ExitSignal is not caught.
        """
        if not name:
            return 1
        if (command := self._commands.get(name)) is None:
            raise UnknownCommandError(f"unknown command {name}", command=name)

        try:
            self._contexts.append(Context(self, command))
            try:
                positionals, values = parse(command, tokens)
                self._contexts[-1] = Context(self, command, positionals, values)
                code = command(self.context, positionals, **values)
            finally:
                self._contexts.pop()
        except InterruptSignal:
            self.print("^C")
            self.println(":(", Align.RIGHT)
            return 1
        except ShellError as error:
            logger.debug("command %r failed: %s (%s)", name, error, error.options["code"].name)
            self.print(f"{name}: {error.message}", Align.LEFT, True)
            self.println(":(", Align.RIGHT)
            return 1
        except Exception as error:
            logger.exception("command %r raised an unexpected error", name)
            self.print(f"{name}: {error}", Align.LEFT, True)
            self.println(":(", Align.RIGHT)
            return 1
        return 1 if code is None else code

    def greet(self):
        """
        Print the session banner; does nothing by default.
        """

    def main(self):
        """
        Run the session until it exits.

        Returns the ExitSignal of a plain exit. Power-off and reboot signals
        are raised again after the teardown.
        """
        logger.info("%s session started", self.name)
        try:
            self.greet()
            while True:
                try:
                    self.process(self.await_input())
                except InterruptSignal:
                    self.replace("^C")
                    self.println(":(", Align.RIGHT)
                except ShellError as error:
                    self.print(f"{self.name}: {error.message}", Align.LEFT, True)
                    self.println(":(", Align.RIGHT)
        except ExitSignal as signal:
            self.exit()
            logger.info("%s session ended (%s)", self.name, signal.status)
            if signal.final:
                raise
            return signal

    def exit(self):
        self._options.save()
        self._terminal.close()

    def set_prompt(self, prompt):
        self._prompt = prompt

    def set_alias(self, name, value):
        self._options.aliases.define(name, value)

    def unset_alias(self, name):
        self._options.aliases.remove(name)

    def switch_config(self, config):
        self._config = config
        self._terminal.configure(background=config.background, foreground=config.foreground, font=config.font)
        self.set_prompt(config.prompt)
        self._options.activate(config)
        logger.info("switched to configuration %r", config.name)


class InteractiveSession(Session):
    """
    Shell session opened from outside the game.
    """
    banner = "Interactive session: enter 'exit' to leave"

    def __init__(self, terminal, options=Unset, /, *, player=Unset, **kwargs):
        super().__init__(terminal, options, **kwargs)
        self._player = player

    player = mirror("player")

    def greet(self):
        self.println(f"SHELL AS A SERVICE {SHELL_VERSION}")
        self.println(self.banner)
        if self._player:
            self.println(rf"\nLogged in as {self._player}")
        self.force_wait(10)


class IngameSession(InteractiveSession):
    """
    Shell session opened while playing; lists the in-game commands.
    """
    banner = "In-Game Session"

    def __init__(self, terminal, options=Unset, /, **kwargs):
        super().__init__(terminal, options, **kwargs | {"ingame": True})


def hotkey(update, /, *, pressed, launch):
    """
    Wrap the input polling function of a game loop.

    The returned function calls update() then, when pressed() is true,
    launch(). Compose it once at startup:

        Input.update = hotkey(Input.update, pressed=ctrl_s, launch=open_shell)
    """

    @functools.wraps(update)
    def wrapper(*args, **kwargs):
        result = update(*args, **kwargs)
        if pressed():
            launch()
        return result

    return wrapper


__all__ = (
    "SHELL_VERSION",
    "Session",
    "InteractiveSession",
    "IngameSession",
    "hotkey",
)
