r"""
SAAS argument declarations.

Overview
- Argument: positional argument description. Positionals are not parsed by
  the schema (commands validate them themselves); the description is used
  for manual pages.
- Option: named, value-bearing option (e.g. -a/--align taking an int).
- Flag: named, presence-only switch (e.g. -f/--force).
- Subcommand: named branch of a command, bound to its own handler with the
  @command.subcommand(...) decorator.

Options and flags are declared as keyword-only parameter defaults of a
command handler; the parameter name becomes the target field the parsed
value is stored under (see saas.commands).

Manual forms
- Argument: "[descr: type]" when required, "<descr: type>" when optional,
  "*type" when variadic, no type for flags.
- Option: "\t-a, --align (int): descr"
- Flag: "\t-f, --force: descr"
- Subcommand: "\tname: descr"

Validation highlights
- Names must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique within one option.
- Descriptions are trimmed; empty strings are rejected.
- Option kinds are value kinds ("i", "b", "f", "s"); flags are always "x".
"""
import functools
import operator
import re

from .utils import *
from .validation import Kind, kindof, typename


class ArgumentType(type):
    """
    Metaclass giving declarations a typename, read-only properties and a repr.

    Conventions
    - __typename__ is derived from the class name ("Subcommand" ->
      "subcommand") and used in declaration errors.
    - every name in __introspectable__ becomes a mirror() property over the
      matching private field.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, metadata, /, *, required=False):
    """
    Validate and trim metadata["descr"]; Unset becomes "" unless required.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    elif descr is Unset and required:
        raise TypeError(f"{cls.__typename__} must specify a 'descr'")
    metadata["descr"] = coalesce(descr, "")


def _sanitize_names(cls, metadata, /):
    """
    Validate option names: non-empty, shell-style, no duplicates. Order is kept.
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)


class Argument(metaclass=ArgumentType):
    """
    Positional argument description.

    Parameters
    - descr: str, what the argument is ("text", "alias name").
    - kind: value kind letter, "*" prefixed when variadic ("*s").
    - optional: whether the argument may be omitted.
    """
    __introspectable__ = (
        "descr",
        "kind",
        "variadic",
        "optional",
    )

    def __new__(cls, descr, /, kind="s", *, optional=False):
        metadata = {"descr": descr}
        _sanitize_descr(cls, metadata, required=True)
        metadata["kind"], metadata["variadic"] = kindof(kind)
        metadata["optional"] = bool(optional)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def manual(self):
        text = ("<" if self.optional else "[") + self.descr
        if self.kind is not Kind.FLAG:
            text += ": " + ("*" if self.variadic else "") + typename(self.kind)
        return text + (">" if self.optional else "]")


class Option(metaclass=ArgumentType):
    """
    Named option carrying a value.

    Parameters
    - names: one or more names, "-x" or "--long-name".
    - kind: value kind of the payload ("i", "b", "f", "s").
    - descr: short description shown in the manual.
    - default: value of the target field when the option is absent.
    """
    __introspectable__ = (
        "names",
        "kind",
        "descr",
        "default",
    )

    def __new__(cls, *names, kind="s", descr=Unset, default=None):
        metadata = {"names": names, "descr": descr, "default": default}
        _sanitize_names(cls, metadata)
        _sanitize_descr(cls, metadata)

        metadata["kind"], variadic = kindof(kind)
        if variadic:
            raise ValueError(f"{cls.__typename__} cannot be variadic")
        if metadata["kind"] is Kind.FLAG:
            raise ValueError(f"{cls.__typename__} kind cannot be a flag, use Flag(...) instead")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def takes_value(self):
        return True

    @property
    def manual(self):
        return r"\t" + ", ".join(self.names) + f" ({typename(self.kind)}): " + self.descr


class Flag(metaclass=ArgumentType):
    """
    Named presence-only switch. Its target field is False unless given.
    """
    __introspectable__ = (
        "names",
        "descr",
    )

    kind = Kind.FLAG
    default = False

    def __new__(cls, *names, descr=Unset):
        metadata = {"names": names, "descr": descr}
        _sanitize_names(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def takes_value(self):
        return False

    @property
    def manual(self):
        return r"\t" + ", ".join(self.names) + ": " + self.descr


class Subcommand(metaclass=ArgumentType):
    """
    Named branch of a command.

    Parameters
    - name: the token selecting this branch.
    - descr: short description shown in the manual.
    - passall: when True the handler receives every argument of the command,
      otherwise only the tokens following the subcommand name.

    The handler is bound once, by Command.subcommand(); calling an unbound
    subcommand raises TypeError.
    """
    __introspectable__ = (
        "name",
        "descr",
        "passall",
    )

    def __new__(cls, name, /, descr=Unset, *, passall=False):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()) or " " in name:
            raise ValueError(f"{cls.__typename__} 'name' must be a single non-empty word")

        metadata = {"name": name, "descr": descr, "passall": bool(passall)}
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        self._callback = Unset
        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        return self

    def bind(self, callback, /):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        if self._callback is not Unset:
            raise TypeError(f"{type(self).__typename__} {self.name!r} is already bound")
        self._callback = callback
        return self

    def __call__(self, context, arguments, /):
        if self._callback is Unset:
            raise TypeError(f"{type(self).__typename__} {self.name!r} has no handler")
        return self._callback(context, arguments)

    @property
    def manual(self):
        return rf"\t{self.name}: {self.descr}"


__all__ = (
    "Argument",
    "Option",
    "Flag",
    "Subcommand",
)

del ArgumentType
