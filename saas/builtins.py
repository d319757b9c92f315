r"""
SAAS built-in shell commands.

Every command here registers into the default catalog under the "shell"
scope when the module is imported. Handlers follow one contract: return 0 on
success, 1 when the user declined or nothing was done, and raise through
context.error() for anything the user must be told about.

Output conventions
- "\h" highlights a title line, "\t" indents manual style.
- user supplied text (alias bodies, configuration names) is printed raw so
  that its backslashes stay visible.
"""
import importlib.metadata
import platform
import sys

from .arguments import Argument, Flag, Option
from .commands import command
from .config import DEFAULT_CONFIG, Color, ShellConfiguration
from .faults import ExitSignal, InterruptSignal
from .sessions import SHELL_VERSION
from .terminal import Align
from .utils import *
from .validation import TRUTHY

PAGE_SIZE = 16
HELP_PAGE_THRESHOLD = 13
CONFIG_PAGE_THRESHOLD = 4


def page(context, text, /):
    r"""
    Show text one screenful at a time.

    The first PAGE_SIZE lines are printed at once; every Enter shows one more
    line. "q" or Ctrl+C stops early. text may use literal "\n" codes.
    """
    lines = text.replace(r"\n", "\n").split("\n")
    for line in lines[:PAGE_SIZE]:
        context.println(line)
    rest = lines[PAGE_SIZE:]

    def prompt():
        if rest:
            context.replace("--- ENTER ---")
        else:
            context.print("--- PRESS ENTER OR Q TO QUIT ---")

    prompt()
    terminal = context.session.terminal
    while True:
        try:
            answer = terminal.read_line(False)
        except InterruptSignal:
            break
        if answer.strip().lower() == "q" or not rest:
            break
        context.replace(rest.pop(0) + r"\n")
        prompt()
    context.replace("")
    return 0


@command(
    "echo",
    descr="Echo the given input.",
    manual=r"Echoes the given input with optional alignment:\n0: left, 1: center, 2: right.",
    arguments=(Argument("text", "*s"),),
    aliases=("print",),
)
def echo(
        context,
        arguments,
        /,
        *,
        align=Option("--align", "-a", kind="i", descr="changes the alignment", default=0),
        raw=Flag("--raw", "-r", descr="doesn't parse special codes"),
        no_newline=Flag("-n", descr="omits the trailing newline"),
):
    context.validate_range(range(3), align)
    if not arguments:
        context.error("nothing to echo")
    context.print(" ".join(arguments), align, raw)
    if not no_newline:
        context.print(r"\n")
    return 0


@command(
    "alias",
    descr="View and modify aliases.",
    manual=r"Views or modifies aliases. If no alias name\nis passed, lists all aliases.",
    arguments=(Argument("alias name", optional=True), Argument("aliased string", optional=True)),
)
def alias(context, arguments, /):
    aliases = context.session.aliases
    if not arguments:
        for name, body in aliases.items():
            context.print_raw(f"'{name}' => '{body}'")
            context.println()
    elif len(arguments) > 1:
        name, body = arguments[:2]
        aliases.check(name)
        operation = "Overwrite" if name in aliases else "Set"
        context.print_raw(f"{operation} '{name}' to '{body}'?")
        if not context.confirm():
            return 1
        context.session.set_alias(name, body)
    elif arguments[0] in aliases:
        context.print_raw(f"'{arguments[0]}' => '{aliases[arguments[0]]}'")
        context.println()
    else:
        context.error(f"no alias set for '{arguments[0]}'")
    return 0


@command(
    "unalias",
    descr="Remove aliases.",
    manual="Removes the given alias.",
    arguments=(Argument("alias name"),),
)
def unalias(context, arguments, /, *, force=Flag("--force", "-f", descr="skip confirmation")):
    if not arguments:
        context.error("no alias given")
    name = arguments[0]
    aliases = context.session.aliases
    if name not in aliases:
        context.error(f"no alias set for '{name}'")
    if not force:
        context.print_raw(f"'{name}' => '{aliases[name]}'")
        context.println()
        if not context.confirm("Delete this alias?"):
            return 1
    context.session.unset_alias(name)
    return 0


@command(
    "more",
    descr="Filter for paging through text.",
    manual=r"Offers a filter for paging through text one\nscreenful at a time.",
    arguments=(Argument("text", "*s"),),
)
def more(context, arguments, /):
    if not arguments:
        context.error("no string given")
    return page(context, " ".join(arguments))


@command(
    "sleep",
    descr="Sleep for x seconds.",
    manual="Sleeps for the given duration.",
    arguments=(Argument("duration", "i"),),
)
def sleep(context, arguments, /):
    duration = context.validate("i", arguments[0] if arguments else None)
    if duration < 0:
        context.error("can not sleep for a negative duration")
    context.wait(context.session.fps * duration)
    return 0


@command(
    "confirm",
    descr="Confirm a choice.",
    manual="Asks for confirmation. Used by other programs.",
    arguments=(Argument("text", "*s", optional=True),),
)
def confirm(context, arguments, /):
    if arguments:
        context.print(" ".join(arguments))
    context.print(" (y/n) ")
    answer = context.session.await_input(prompt=False)
    return 0 if answer.strip().lower() in TRUTHY else 1


@command(
    "help",
    descr="Show help information.",
    manual=r"If a command name is passed as the argument,\nshows its help page. Otherwise lists all\navailable commands.",
    arguments=(Argument("command", optional=True),),
    aliases=("man",),
)
def help(context, arguments, /):
    session = context.session
    commands = session.commands
    if not arguments:
        text = r"\hSHELL AS A SERVICE COMMANDS\nView individual help with 'help [command]'\n"
        for name, entry in commands.items():
            text += rf"\n{name}: {entry.descr}"
        if len(commands) > HELP_PAGE_THRESHOLD:
            return page(context, text)
        context.println(text)
    elif arguments[0] in commands:
        _show_manual(context, commands[arguments[0]])
    elif (target := session.aliases.get(arguments[0])) in commands:
        context.print_raw(f"{arguments[0]} is an alias of {target}:")
        context.println()
        _show_manual(context, commands[target])
    else:
        context.error(f"command not found: {arguments[0]}")
    return 0


def _show_manual(context, entry, /):
    for line in entry.manual_lines():
        context.println(line)


@command("clear", descr="Clears the screen.")
def clear(context, arguments, /):
    context.session.terminal.clear()
    return 0


def _read_color(context, arguments, /):
    values = list(arguments)
    context.validate_values("i", values, 0, 1, 2)
    context.validate_range(range(256), *values[:3])
    return Color(*values[:3])


_color_arguments = (Argument("red", "i"), Argument("green", "i"), Argument("blue", "i"))


@command("bgcol", descr="Change the background color.", manual="Changes the background color.",
         arguments=_color_arguments)
def bgcol(context, arguments, /):
    context.session.terminal.configure(background=_read_color(context, arguments))
    return 0


@command("txtcol", descr="Change the text color.", manual="Changes the text color.",
         arguments=_color_arguments)
def txtcol(context, arguments, /):
    context.session.terminal.configure(foreground=_read_color(context, arguments))
    return 0


@command(
    "config",
    descr="Save, load and view shell configurations.",
    manual=r"Application for modifying and loading shell\nconfigurations. 'list' and 'active' don't\nrequire an additional argument.",
    arguments=(Argument("subcommand"), Argument("config name", optional=True)),
)
def config(context, arguments, /, *, force=Flag("--force", "-f", descr="skip confirmation")):
    return context.delegate(arguments)


def describe(options, config, /):
    """
    Multi-line summary of a configuration, with output codes.
    """
    background, foreground = config.background, config.foreground
    return (
        config.name + (r" [ACTIVE]\n" if options.is_active(config) else r"\n")
        + rf"\tBackground color  {background.red}, {background.green}, {background.blue}\n"
        + rf"\tText color        {foreground.red}, {foreground.green}, {foreground.blue}\n"
        + rf"\tFont name         {config.font}\n"
        + rf"\tPrompt            '{config.prompt}'"
    )


def _find_config(context, arguments, /):
    if not arguments:
        context.error("no config specified")
    options = context.session.options
    if arguments[0] not in options.configs:
        context.error(f"config {arguments[0]} not found")
    return options.configs[arguments[0]]


@config.subcommand("load", "load a configuration")
def config_load(context, arguments, /):
    chosen = _find_config(context, arguments)
    if not context.options["force"]:
        context.println(describe(context.session.options, chosen))
        if not context.confirm(f"Load config {chosen.name}?"):
            return 1
    context.session.switch_config(chosen)
    return 0


@config.subcommand("save", "save a configuration")
def config_save(context, arguments, /):
    if not arguments:
        context.error("no config specified")
    session = context.session
    options = session.options
    name = strip_codes(arguments[0])
    if not name:
        context.error("no config specified")
    snapshot = ShellConfiguration.from_session(name, session)
    if not context.options["force"]:
        context.println(describe(options, snapshot))
        operation = "Overwrite" if name in options.configs else "Save"
        if not context.confirm(f"{operation} config {name}?"):
            return 1
    options.configs[name] = snapshot
    if session.config.name != name and context.confirm(f"Switch to {name}?"):
        session.switch_config(snapshot)
    return 0


@config.subcommand("delete", "delete a configuration")
def config_delete(context, arguments, /):
    if arguments and arguments[0] == DEFAULT_CONFIG:
        context.error("can't delete default config")
    chosen = _find_config(context, arguments)
    options = context.session.options
    if not context.options["force"]:
        context.println(describe(options, chosen))
        if not context.confirm(f"Delete config {chosen.name}?"):
            return 1
    if options.is_active(chosen):
        options.configs.setdefault(DEFAULT_CONFIG, ShellConfiguration.default())
        options.activate(DEFAULT_CONFIG)
        context.println("The default config was set as active.")
    del options.configs[chosen.name]
    return 0


@config.subcommand("list", "list all saved configurations")
def config_list(context, arguments, /):
    options = context.session.options
    if not options.configs:
        context.println("There are no saved configurations")
    elif len(options.configs) < CONFIG_PAGE_THRESHOLD:
        for entry in options.configs.values():
            context.println(describe(options, entry))
    else:
        page(context, r"\n".join(["SAVED CONFIGURATIONS", *(describe(options, entry) for entry in options.configs.values())]))
    return 0


@config.subcommand("active", "view the active configuration")
def config_active(context, arguments, /):
    options = context.session.options
    context.println(describe(options, options.active_configuration()))
    return 0


@command("setfont", descr="Change the font.", manual="Changes the font.", arguments=(Argument("font name", "*s"),))
def setfont(context, arguments, /):
    if not arguments:
        context.error("no font name given")
    context.session.terminal.configure(font=" ".join(arguments))
    return 0


@command("version", descr="Show version information.", manual=r"Prints the version of SAAS, Python\nand rich.")
def version(context, arguments, /):
    context.print("Shell As A Service")
    context.println(SHELL_VERSION, Align.RIGHT)
    context.print("Python")
    context.println(f"{platform.python_version()} ({sys.platform})", Align.RIGHT)
    context.print("rich")
    context.println(importlib.metadata.version("rich"), Align.RIGHT)
    return 0


@command("setprompt", descr="Change the command prompt.", manual="Changes the command prompt.",
         arguments=(Argument("new prompt"),))
def setprompt(context, arguments, /):
    if not arguments:
        context.error("no prompt given")
    context.session.set_prompt(strip_codes(arguments[0]))
    return 0


def _shutdown(context, force, question, announcement, status, /):
    if force or context.confirm(question):
        context.println(announcement)
        context.wait(60)
        raise ExitSignal(status)
    return 1


@command("reboot", descr="Reboot the system.", manual="Reboots the system.")
def reboot(context, arguments, /, *, force=Flag("--force", "-f", descr="skip confirmation")):
    return _shutdown(context, force, "Reboot the system?", "Rebooting system...", "reboot")


@command("poweroff", descr="Power the system off.", manual="Powers the system off.")
def poweroff(context, arguments, /, *, force=Flag("--force", "-f", descr="skip confirmation")):
    return _shutdown(context, force, "Power off the system?", "Powering off...", "poweroff")


@command("exit", descr="Exit the shell.", manual="Exits the shell.")
def exit(context, arguments, /):
    raise ExitSignal()


__all__ = (
    "page",
    "describe",
)
