"""
Command line entry point: python -m saas

    saas                        interactive shell on this TTY
    saas -c "echo hi ; version" run one input line, exit with its code
    saas --options PATH         use another options file
    saas --debug                list debug-only commands
    saas --verbose              log debug messages to stderr

reboot re-executes the interpreter with the same arguments; poweroff and
exit end the process.
"""
import argparse
import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import ShellOptions, default_path
from .faults import ExitSignal, ShellError
from .sessions import InteractiveSession, Session
from .terminal import Align, RichTerminal
from .utils import *

logger = logging.getLogger("saas")


def build_parser():
    parser = argparse.ArgumentParser(prog="saas", description="Shell As A Service")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="list debug-only commands")
    parser.add_argument("--verbose", "-v", action="store_true", help="log debug messages to stderr")
    parser.add_argument("--options", type=Path, default=None, metavar="PATH",
                        help=f"shell options file (default: {default_path()})")
    parser.add_argument("--player", default=None, help="name shown after logging in")
    parser.add_argument("-c", "--command", default=None, metavar="INPUT",
                        help="run INPUT and exit with its exit code")
    return parser


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=verbose)],
    )


def _finish(signal):
    if signal.status == "reboot":
        logger.info("rebooting")
        sys.stdout.flush()
        os.execv(sys.executable, [sys.executable, "-m", "saas", *sys.argv[1:]])
    return 0


def run_once(session, input):
    """
    Process one input line the way the session loop would. Returns the exit
    code.
    """
    try:
        code = session.process(input)
    except ShellError as error:
        session.print(f"{session.name}: {error.message}", Align.LEFT, True)
        session.println(":(", Align.RIGHT)
        code = 1
    except ExitSignal as signal:
        session.exit()
        return _finish(signal)
    session.exit()
    return code


def main(argv=None):
    arguments = build_parser().parse_args(argv)
    setup_logging(arguments.verbose)

    try:
        options = ShellOptions.load(arguments.options or Unset)
    except ValueError as error:
        logger.error("%s (%s)", error, arguments.options or default_path())
        return 2

    terminal = RichTerminal()
    if arguments.command is not None:
        return run_once(Session(terminal, options, debug=arguments.debug), arguments.command)

    session = InteractiveSession(terminal, options, debug=arguments.debug, player=arguments.player or Unset)
    try:
        session.main()
    except ExitSignal as signal:
        return _finish(signal)
    return 0


if __name__ == "__main__":
    sys.exit(main())
