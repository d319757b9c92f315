"""
SAAS aliases: a mutable name -> body table and one-level expansion.

An alias body is ordinary shell input. When a statement starts with an
alias name, the body is split again (without expanding aliases a second time)
and the user's trailing arguments are appended to the last statement it
produced:

    greet = "echo hi ; echo hey"
    greet world  ->  echo hi ; echo hey world
"""
import re
from collections import UserDict

from .faults import ValidationError
from .lexer import Statement, split


class AliasTable(UserDict):
    """
    Alias bodies keyed by alias name.

    Bodies stored through define() have their double quotes escaped so that
    quotes typed by the user survive the second tokenization.
    """
    reserved = "alias"

    @classmethod
    def check(cls, name, /):
        """
        Reject names that could never be typed as a command.

        Raises
        - ValidationError for "alias", the empty name, or names holding
          "&&" or ";".
        """
        if name == cls.reserved:
            raise ValidationError(f"cannot use name '{name}'")
        if not name:
            raise ValidationError("name cannot be empty")
        if match := re.search(r"&&|;", name):
            raise ValidationError(f"{match.group()} in alias name")

    def define(self, name, body, /):
        self.check(name)
        self.data[name] = body.replace('"', '\\"')

    def remove(self, name, /):
        del self.data[name]


def expand(statement, aliases, /):
    """
    Expand the leading alias of statement.

    Returns
    - [] when statement does not start with a known alias.
    - otherwise the statements of the alias body, the trailing arguments of
      statement appended to the last one.
    """
    statement = Statement(statement)
    if not statement or statement.name not in aliases:
        return []
    *leading, last = split(aliases[statement.name])
    return [*leading, last.extend(statement.arguments)]


__all__ = (
    "AliasTable",
    "expand",
)
