r"""
SAAS command layer: declare, register and run shell commands.

What this module provides
- Command: an immutable record built from a handler function. The handler
  signature is the schema:

      @command("echo", descr="Echo the given input.", arguments=(Argument("text", "*s"),))
      def echo(context, arguments, /, *, align=Option("--align", "-a", kind="i", default=0),
               raw=Flag("--raw", "-r")):
          ...

  • the two positional-only parameters receive the Context and the
    positional tokens;
  • every keyword-only parameter declares an Option or a Flag, and its name
    is the target field the parsed value is passed under.
- Registry: scope-aware collection of commands; catalog is the default one
  every @command registers into.
- Context: the per-run invocation record handed to handlers. It carries the
  parsed option values and the services a command needs (printing, waiting,
  confirmation, nested command runs, validation, manual pages, subcommand
  delegation).

Visibility (Registry.resolve)
- scope: the session kind a command belongs to ("shell", "restoretool", ...).
- debug: only listed in debug mode.
- ingame: True for in-game only, False for outside the game only, Unset for
  both.
- platform: only listed on that platform.
- hidden: never listed, still reachable with Registry.get().
"""
import functools
import inspect
import logging
import operator
import re
from inspect import Parameter
from types import MappingProxyType

from .arguments import Argument, Flag, Option, Subcommand
from .faults import ShellError
from .terminal import Align
from .utils import *
from .validation import validate, validate_range, validate_values

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass providing typename, mirrored properties and repr for commands.

    __displayable__ narrows what __rich_repr__ shows; __introspectable__ lists
    every field published as a read-only property.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_source(cls, metadata):
    """
    Read the handler signature into option lookup tables.

    Builds, in metadata
    - options: ordered tuple of Option | Flag as declared.
    - fields: target field -> Option | Flag
    - switches: option name -> target field (every alias fans out)

    Rules
    - the first two parameters are positional-only without defaults
      (context, arguments).
    - every other parameter is keyword-only with an Option or Flag default.
    - an option name may only be used once per command.
    """
    options = []
    fields = metadata["fields"] = {}
    switches = metadata["switches"] = {}

    try:
        signature = inspect.signature(metadata["callback"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'callback' must be callable") from None
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'callback' must be an inspectable callable") from None

    parameters = list(signature.parameters.values())
    if len(parameters) < 2 or any(
        parameter.kind is not Parameter.POSITIONAL_ONLY or parameter.default is not Parameter.empty
        for parameter in parameters[:2]
    ):
        raise TypeError(
            f"{cls.__typename__} 'callback' must take (context, arguments, /) as its first parameters"
        )

    for parameter in parameters[2:]:
        name = parameter.name
        if parameter.kind is not Parameter.KEYWORD_ONLY:
            raise TypeError(f"{cls.__typename__} 'callback' parameter {name!r} must be keyword-only")
        if not isinstance(option := parameter.default, Option | Flag):
            raise TypeError(f"{cls.__typename__} 'callback' parameter {name!r} default must be an option or a flag")
        for switch in option.names:
            if switch in switches:
                raise TypeError(f"{cls.__typename__} 'callback' name {switch!r} is already in use")
            switches[switch] = name
        fields[name] = option
        options.append(option)

    metadata["options"] = tuple(options)


def _process_strings(cls, metadata):
    """
    Validate and trim the scalar string fields; descr and manual may be empty.
    """
    for name in ("name", "descr", "manual", "scope"):
        if not isinstance(object := metadata[name], str):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        object = object.strip()
        if not object and name in ("name", "scope"):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = object

    if " " in metadata["name"]:
        raise ValueError(f"{cls.__typename__} 'name' cannot contain spaces")
    if not isinstance(metadata["ingame"], bool | Unset):
        raise TypeError(f"{cls.__typename__} 'ingame' must be a boolean")
    if not isinstance(metadata["platform"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'platform' must be a string")


def _process_iterables(cls, metadata):
    """
    Normalize arguments and aliases into tuples, rejecting bad entries.
    """
    arguments = tuple(metadata["arguments"])
    for argument in arguments:
        if not isinstance(argument, Argument):
            raise TypeError(f"{cls.__typename__} 'arguments' must only contain arguments")
    metadata["arguments"] = arguments

    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str) or not alias.strip():
            raise TypeError(f"{cls.__typename__} 'aliases' must be non-empty strings")
        if alias == metadata["name"] or alias in aliases:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates")
        aliases.append(alias.strip())
    metadata["aliases"] = tuple(aliases)


class Command(metaclass=CommandType):
    """
    Declared shell command.

    Fields
    - name, descr (one-line description), manual (manual page text)
    - arguments: positional argument descriptions, for the manual page
    - options: declared Option/Flag objects; fields/switches are their lookup
      tables (target field -> option, option name -> target field)
    - subcommands: Subcommand branches added with @command.subcommand(...)
    - aliases: default shell aliases pointing at this command
    - scope, hidden, debug, ingame, platform: visibility

    A Command is callable as command(context, arguments, **values); the
    values come from saas.parsing.parse().
    """

    __introspectable__ = (
        "name",
        "descr",
        "manual",
        "arguments",
        "options",
        "fields",
        "switches",
        "subcommands",
        "aliases",
        "scope",
        "hidden",
        "debug",
        "ingame",
        "platform",
    )

    __displayable__ = (
        "name",
        "descr",
        "scope",
        "aliases",
    )

    def __new__(
            cls,
            callback,
            /,
            name=Unset,
            descr=Unset,
            manual=Unset,
            arguments=(),
            aliases=(),
            *,
            scope="shell",
            hidden=False,
            debug=False,
            ingame=Unset,
            platform=Unset,
    ):
        """
        Build a command from its handler.

        Parameters
        - callback: the handler, see the module documentation for its shape.
        - name: defaults to the handler __name__.
        - descr: defaults to the first docstring line of the handler.
        - manual: defaults to descr.
        - arguments: Argument descriptions, in order.
        - aliases: alias names seeded into the default alias table.
        - scope, hidden, debug, ingame, platform: visibility.

        Raises
        - TypeError/ValueError on a malformed handler or metadata.
        """
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")

        doc = (inspect.getdoc(callback) or "").strip().splitlines()
        metadata = {
            "callback": callback,
            "name": coalesce(name, getattr(callback, "__name__", "")),
            "descr": coalesce(descr, doc[0] if doc else ""),
            "manual": manual,
            "arguments": arguments,
            "aliases": aliases,
            "scope": scope,
            "hidden": bool(hidden),
            "debug": bool(debug),
            "ingame": ingame,
            "platform": platform,
        }
        metadata["manual"] = coalesce(manual, metadata["descr"])

        _process_source(cls, metadata)
        _process_strings(cls, metadata)
        _process_iterables(cls, metadata)

        self = super().__new__(cls)
        self._callback = metadata.pop("callback")
        self._subcommands = []
        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        return self

    def subcommand(self, name, /, descr=Unset, *, passall=False):
        """
        Decorator binding a handler to a new subcommand of this command.

        The handler takes (context, arguments, /) and returns an exit code.
        Returns the Subcommand.
        """
        if any(subcommand.name == name for subcommand in self._subcommands):
            raise ValueError(f"{type(self).__typename__} {self.name!r} subcommand {name!r} is already in use")

        @rename("subcommand")
        def wrapper(callback, /):
            subcommand = Subcommand(name, descr, passall=passall).bind(callback)
            self._subcommands.append(subcommand)
            return subcommand

        return wrapper

    def visible(self, scope, /, *, debug=False, ingame=False, platform=Unset):
        """
        Whether the command is listed in a session with these properties.
        """
        if self._scope != scope or self._hidden:
            return False
        if self._debug and not debug:
            return False
        if self._ingame is not Unset and self._ingame != bool(ingame):
            return False
        if self._platform is not Unset and self._platform != platform:
            return False
        return True

    def manual_lines(self):
        r"""
        Lines of the manual page, with \h and \t output codes.
        """
        lines = [
            " ".join((self._name, *(argument.manual for argument in self._arguments))) + r"\h",
            r"\t" + self._manual,
        ]
        if self._subcommands:
            lines.append(r"\hSubcommands:")
            lines.extend(subcommand.manual for subcommand in self._subcommands)
        if self._options:
            lines.append(r"\hOptions:")
            lines.extend(option.manual for option in self._options)
        return lines

    def __call__(self, context, arguments, /, **values):
        return self._callback(context, arguments, **values)


class Registry:
    """
    Commands keyed by (scope, name).

    Command names and alias names share one namespace per scope; registering
    a command whose name or alias is already taken raises ValueError.
    """

    def __init__(self):
        self._commands = {}

    def register(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        key = (command.scope, command.name)
        if key in self._commands:
            raise ValueError(f"command {command.name!r} is already registered in scope {command.scope!r}")
        taken = self.aliases(command.scope)
        if command.name in taken:
            raise ValueError(f"command {command.name!r} is already an alias in scope {command.scope!r}")
        names = {name for scope, name in self._commands if scope == command.scope}
        for alias in command.aliases:
            if alias in taken or alias in names or alias == command.name:
                raise ValueError(f"alias {alias!r} is already registered in scope {command.scope!r}")
        self._commands[key] = command
        logger.debug("registered command %r in scope %r", command.name, command.scope)
        return command

    def get(self, name, /, scope="shell"):
        """
        Return the command, hidden or not, or None.
        """
        return self._commands.get((scope, name))

    def resolve(self, scope, /, *, debug=False, ingame=False, platform=Unset):
        """
        Mapping name -> Command of the commands listed in such a session.
        """
        return {
            command.name: command
            for command in self._commands.values()
            if command.visible(scope, debug=debug, ingame=ingame, platform=platform)
        }

    def aliases(self, scope="shell", /):
        """
        Mapping alias -> command name declared by the commands of scope.
        """
        return {
            alias: command.name
            for command in self._commands.values()
            if command.scope == scope
            for alias in command.aliases
        }

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self):
        return len(self._commands)

    def __contains__(self, key):
        return key in self._commands


catalog = Registry()


def command(source=Unset, /, *args, registry=catalog, **kwargs):
    """
    Build and register a Command, or return a decorator doing so.

    Forms
    - command(handler, "name", ...) -> Command
    - @command("name", ...) -> decorator

    Every command is registered into registry (the global catalog unless told
    otherwise).
    """
    if isinstance(source, str):
        args = (source, *args)
        source = Unset

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return registry.register(Command(source, *args, **kwargs))

    return wrapper(source) if source is not Unset else wrapper


class Context:
    """
    One run of a command.

    Created by Session.dispatch() for every statement and discarded when the
    handler returns. Handlers use it for everything they need from the
    session; option values are also available through .options.
    """

    def __init__(self, session, command, /, arguments=(), options=None):
        self._session = session
        self._command = command
        self._arguments = tuple(arguments)
        self._options = MappingProxyType(dict(options or {}))

    session = property(operator.attrgetter("_session"))
    command = property(operator.attrgetter("_command"))
    arguments = property(operator.attrgetter("_arguments"))
    options = property(operator.attrgetter("_options"))

    @property
    def name(self):
        return self._command.name

    def print(self, text, align=Align.LEFT, raw=False):
        self._session.print(text, align, raw)

    def print_raw(self, text, align=Align.LEFT):
        self._session.print(text, align, True)

    def println(self, text="", align=Align.LEFT, raw=False):
        self._session.println(text, align, raw)

    def replace(self, text, align=Align.LEFT, raw=False):
        self._session.replace(text, align, raw)

    def wait(self, frames):
        """
        Wait for frames ticks; Ctrl+C raises InterruptSignal.
        """
        self._session.wait(frames)

    def confirm(self, text=""):
        """
        Ask a yes/no question through the confirm command.
        """
        quoted = text.replace("\\", "\\\\").replace('"', '\\"')
        return self.run(f'confirm "{quoted}"') == 0

    def process(self, input, aliases=True):
        return self._session.process(input, aliases)

    def run(self, input):
        return self._session.process(input, False)

    def error(self, message):
        raise ShellError(message, command=self.name)

    def validate(self, kind, value):
        return validate(kind, value)

    def validate_values(self, kind, values, *indexes):
        return validate_values(kind, values, *indexes)

    def validate_range(self, bounds, *values):
        validate_range(bounds, *values)

    def show_manual(self):
        for line in self._command.manual_lines():
            self.println(line)

    def delegate(self, arguments):
        """
        Run the subcommand named by the first matching token of arguments.

        Returns the subcommand exit code, or 1 after printing the manual when
        no subcommand is named.
        """
        arguments = list(arguments)
        subcommands = {subcommand.name: subcommand for subcommand in self._command.subcommands}
        for index, token in enumerate(arguments):
            if (subcommand := subcommands.get(token)) is not None:
                return subcommand(self, arguments if subcommand.passall else arguments[index + 1:])
        self.show_manual()
        return 1


__all__ = (
    "Command",
    "Registry",
    "Context",
    "catalog",
    "command",
)

del CommandType
