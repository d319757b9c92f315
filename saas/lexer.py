r"""
SAAS tokenizer: raw input line -> statements.

Syntax
- words are separated by spaces; runs of spaces never yield empty words.
- "=" separates words too, but always ends the current word, even an empty
  one: "a=b" -> a, b and "a==b" -> a, "", b.
- double quotes group text into one word (spaces, "=", ";" and "&&" are
  literal inside) and are not part of the word.
- a backslash escapes a following '"' or '\'; before anything else it is
  kept as is.
- ";" and "&&" end a statement. Empty statements are kept; the session
  skips them.

Examples
    >>> split('echo a ; echo b')
    [('echo', 'a'), ('echo', 'b')]
    >>> split('echo "a ; b"')
    [('echo', 'a ; b')]
"""
from .faults import UnterminatedStringError


class Statement(tuple):
    """
    One statement: a command name followed by its argument tokens.
    """
    __slots__ = ()

    def __new__(cls, tokens=(), /):
        return super().__new__(cls, tokens)

    @property
    def name(self):
        return self[0] if self else ""

    @property
    def arguments(self):
        return self[1:]

    def extend(self, tokens, /):
        return type(self)((*self, *tokens))


def split(input, /):
    """
    Split input into a list of Statement.

    Raises
    - TypeError when input is not a string.
    - UnterminatedStringError when a quote is left open.
    """
    if not isinstance(input, str):
        raise TypeError("split() argument must be a string")

    statements = []
    tokens = []
    word = ""
    quoted = False
    index = 0

    while index < len(input):
        char = input[index]
        following = input[index + 1] if index + 1 < len(input) else None

        if char == "\\":
            if following in ('"', "\\"):
                word += following
                index += 1
            else:
                word += char
        elif char == '"':
            quoted = not quoted
        elif quoted:
            word += char
        elif char == " ":
            if word:
                tokens.append(word)
                word = ""
        elif char == "=":
            tokens.append(word)
            word = ""
        elif char == ";" or (char == "&" and following == "&"):
            if char == "&":
                index += 1
            if word:
                tokens.append(word)
                word = ""
            statements.append(Statement(tokens))
            tokens = []
        else:
            word += char
        index += 1

    if word:
        tokens.append(word)
    statements.append(Statement(tokens))

    if quoted:
        raise UnterminatedStringError("unterminated string", input=input)
    return statements


__all__ = (
    "Statement",
    "split",
)
