"""
SAAS option parser.

parse(command, tokens) walks tokens left to right:
- "--name" and "-x" are looked up by exact name.
- "-abc" is a bundle of "-a", "-b" and "-c". Only the last option of a bundle
  may take a value; it consumes the next token.
- a value option consumes the next whole token, converted with
  saas.validation.validate() according to the option kind.
- the first token that is not an option ends option parsing: it and every
  token after it are positional, even when they start with "-".

The command supplies two lookup tables built when it was declared:
- switches: option name -> target field
- fields: target field -> Option | Flag
"""
from .faults import BundleError, MissingOptionValueError, UnknownOptionError
from .validation import validate


def _lookup(command, name, /):
    try:
        target = command.switches[name]
    except KeyError:
        raise UnknownOptionError(f"unknown option {name}", option=name) from None
    return target, command.fields[target]


def _assign(values, target, option, name, value, /):
    """
    Store the value of one option; return True when value was consumed.
    """
    if not option.takes_value:
        values[target] = True
        return False
    if value is None:
        raise MissingOptionValueError(f"option {name} lacks value", option=name)
    values[target] = validate(option.kind, value)
    return True


def parse(command, tokens, /):
    """
    Split tokens into positionals and option values.

    Returns
    - (positionals, values): a list of positional tokens and a dict holding
      every target field of the command, defaults included.

    Raises
    - UnknownOptionError, MissingOptionValueError, BundleError
    - ValidationError when an option value does not fit its kind.
    """
    tokens = list(tokens)
    values = {target: option.default for target, option in command.fields.items()}
    positionals = []
    skip = False

    for index, token in enumerate(tokens):
        if skip:
            skip = False
            continue
        if positionals or not token.startswith("-"):
            positionals.append(token)
            continue

        following = tokens[index + 1] if index + 1 < len(tokens) else None

        if token.startswith("--") or len(token) <= 2:
            target, option = _lookup(command, token)
            skip = _assign(values, target, option, token, following)
            continue

        names = ["-" + char for char in token[1:]]
        resolved = [(name, *_lookup(command, name)) for name in names]
        for position, (name, target, option) in enumerate(resolved):
            if option.takes_value and position != len(resolved) - 1:
                raise BundleError(f"option {name} cannot take a value inside bundle {token}", option=name)
            skip = _assign(values, target, option, name, following) or skip

    return positionals, values


__all__ = (
    "parse",
)
