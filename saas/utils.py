"""
SAAS utilities shared by the schema, registry and session layers.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "not provided", distinct from None and False.
  • Used for tri-state command flags (e.g. ingame=Unset means "anywhere").

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/"" are kept as they are.

- rename(callable, name) / @rename("name")
  • Give generated wrappers (hotkey hooks, metaclass methods) stable names.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers
    are copied on access so callers cannot mutate a registered command.

- strip_codes(text)
  • Remove the output control codes (\\n, \\h, \\t) from user supplied text that
    must stay on one line, such as prompts and configuration names.

Quick examples
    >>> coalesce(Unset, "shell")
    'shell'
    >>> strip_codes(r"\\h#> ")
    '#> '
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for "no value was given".

    Characteristics
    - bool(Unset) is False, yet Unset is neither None nor False.
    - repr(Unset) is "Unset".
    - Sealed and singleton: UnsetType() always returns the same object.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values such as None, 0, "" or () are returned unchanged; only the
    Unset sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    Raises
    - TypeError on a non-callable target, a non-string name, a callable whose
      names cannot be updated, or a wrong number of arguments.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy containers recursively; tuples stay tuples, other sequences become lists.
    """
    if isinstance(object, tuple):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Build a read-only property exposing self._{name}.

    Container values are copied through _immortalize on every access.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def strip_codes(text, /):
    r"""
    Remove the literal \n, \h and \t output codes from text.
    """
    if not isinstance(text, str):
        raise TypeError("strip_codes() argument must be a string")
    return re.sub(r"\\[nht]", "", text)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "strip_codes",
)
