"""
SAAS faults (errors and control-flow signals).

Scope
- FaultCode: stable numeric identifiers for every user-facing error, grouped
  by domain so log lines stay searchable.
- ShellError and subclasses: errors that abort a statement (or a whole batch
  for lexing failures). They carry a message plus read-only options and can
  be copied with copy.replace().
- ShellSignal and subclasses: InterruptSignal (Ctrl+C) and ExitSignal
  (leave the session, power off or reboot). These derive from BaseException
  so that "except Exception" in command bodies never swallows them.

Propagation
- Parse and validation errors are caught where a command is dispatched and
  printed as "<command>: <message>".
- UnknownCommandError and UnterminatedStringError escape Session.process and
  are printed by the session loop as "<session>: <message>".
- InterruptSignal is caught at the dispatch and loop boundaries.
- ExitSignal is only caught by the session loop.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - lexing (1111x): UNTERMINATED_STRING
    - switches (1111x): UNKNOWN_OPTION, MISSING_OPTION_VALUE, BUNDLED_VALUE
    - values (1112x): TOO_FEW_ARGUMENTS, INVALID_VALUE, OUT_OF_RANGE
    - delegated (1113x): COMMAND_ERROR, raised by command bodies
    """
    # --- routing errors ---
    UNKNOWN_COMMAND      = 11101

    # --- lexing errors ---
    UNTERMINATED_STRING  = 11110

    # --- switch errors ---
    UNKNOWN_OPTION       = 11112
    MISSING_OPTION_VALUE = 11117
    BUNDLED_VALUE        = 11118

    # --- value errors ---
    TOO_FEW_ARGUMENTS    = 11121
    INVALID_VALUE        = 11124
    OUT_OF_RANGE         = 11126

    # --- delegated errors ---
    COMMAND_ERROR        = 11131

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to
        replace numeric ids with its own labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ShellError(Exception):
    """
    Base class of every error reported to the shell user.

    The message is what the user sees after the "<name>: " prefix. Options are
    free-form context (the offending token, the command name, the fault code)
    exposed through a read-only mapping.
    """
    title = "command error"
    code = FaultCode.COMMAND_ERROR

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": type(self).code} | options)

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = {
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
        } | getattr(__import__("__main__"), "__styles__", {})
        return Text.assemble(
            "[ ",
            (self.options["code"].normalize(), styles["code"]),
            " | ",
            (self.title, styles["title"]),
            " ] ",
            (self.message, styles["message"]),
        )

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ValidationError(ShellError):
    title = "invalid value"
    code = FaultCode.INVALID_VALUE


class UnknownCommandError(ShellError):
    title = "unknown command"
    code = FaultCode.UNKNOWN_COMMAND


class UnknownOptionError(ShellError):
    title = "unknown option"
    code = FaultCode.UNKNOWN_OPTION


class MissingOptionValueError(ShellError):
    title = "missing value"
    code = FaultCode.MISSING_OPTION_VALUE


class BundleError(ShellError):
    title = "bad bundle"
    code = FaultCode.BUNDLED_VALUE


class UnterminatedStringError(ShellError):
    title = "unterminated string"
    code = FaultCode.UNTERMINATED_STRING


class ShellSignal(BaseException):
    """
    Control-flow signal raised through command bodies.
    """


class InterruptSignal(ShellSignal):
    """
    The user pressed Ctrl+C while a wait or a read was pending.
    """


class ExitSignal(ShellSignal):
    """
    Leave the current session.

    status
    - "exit": leave this session only.
    - "poweroff" / "reboot": leave every session and let the launcher stop or
      restart the process.
    """
    statuses = ("exit", "poweroff", "reboot")

    def __init__(self, status="exit", /):
        if status not in self.statuses:
            raise ValueError(f"exit status must be one of {', '.join(map(repr, self.statuses))}")
        super().__init__(status)
        self.status = status

    @property
    def final(self):
        return self.status != "exit"


__all__ = (
    "FaultCode",
    "ShellError",
    "ValidationError",
    "UnknownCommandError",
    "UnknownOptionError",
    "MissingOptionValueError",
    "BundleError",
    "UnterminatedStringError",
    "ShellSignal",
    "InterruptSignal",
    "ExitSignal",
)
