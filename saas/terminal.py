r"""
SAAS terminal: the line model, the abstract device and a rich-based TTY.

Scope
- Align: left/center/right text slots. Every line holds one text per slot.
- Line / Screen: the output sink. print() and replace() interpret three
  literal two-character codes unless raw is set:
    \n  start a new line
    \t  three spaces
    \h  highlight the line it appears on (removed from the text)
- Terminal: Screen plus the input source (read_line) and the frame pump
  (tick). A game engine subclasses it for its own window.
- MemoryTerminal: headless Terminal reading a script of lines; used to
  drive sessions from code and in tests.
- RichTerminal: Terminal on a rich Console. Completed lines are rendered as
  a three-column grid; the pending line is used as the input prompt.

Notes
- Only the last line can change. A line is "committed" (handed to _commit)
  once a newer line exists.
- Colours are (red, green, blue) triples; fonts are names. RichTerminal
  keeps the font name but cannot change the TTY font.
"""
import time
from abc import ABC, abstractmethod
from enum import IntEnum

from rich.color import Color
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .faults import ExitSignal, InterruptSignal
from .utils import *


class Align(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class Line:
    """
    One output line with three independent text slots.
    """

    def __init__(self, text="", align=Align.LEFT, highlight=False):
        self._texts = ["", "", ""]
        self._highlights = [False, False, False]
        self.write(text, align, highlight)

    def write(self, text, align=Align.LEFT, highlight=False):
        self._texts[align] += text
        self._highlights[align] |= highlight

    def replace(self, text, align=Align.LEFT, highlight=False):
        self._texts[align] = text
        self._highlights[align] |= highlight

    def highlight(self, align=Align.LEFT):
        self._highlights[align] = True

    def text(self, align=Align.LEFT):
        return self._texts[align]

    def highlighted(self, align=Align.LEFT):
        return self._highlights[align]

    @property
    def empty(self):
        return not any(self._texts)

    def __repr__(self):
        return f"Line({", ".join(map(repr, self._texts))})"


class Screen:
    """
    In-memory output sink.

    Parameters
    - capacity: number of lines kept; older lines are dropped. Unset keeps
      every line.
    """
    tab = "   "

    def __init__(self, *, capacity=Unset):
        if not isinstance(capacity, int | Unset) or capacity is not Unset and capacity < 1:
            raise TypeError("screen 'capacity' must be a positive integer")
        self._capacity = capacity
        self._lines = [Line()]
        self.background = (0, 0, 0)
        self.foreground = (255, 255, 255)
        self.font = None

    @property
    def lines(self):
        return tuple(self._lines)

    @property
    def last(self):
        return self._lines[-1]

    def configure(self, *, background=Unset, foreground=Unset, font=Unset):
        self.background = tuple(coalesce(background, self.background))
        self.foreground = tuple(coalesce(foreground, self.foreground))
        self.font = coalesce(font, self.font)

    def print(self, text, align=Align.LEFT, raw=False):
        self._draw(text, Align(align), False, raw)

    def replace(self, text, align=Align.LEFT, raw=False):
        self._draw(text, Align(align), True, raw)

    def clear(self):
        self._lines = [Line()]

    def _draw(self, text, align, replace, raw):
        if raw:
            pieces = [text]
        else:
            pieces = text.replace(r"\t", self.tab).split(r"\n")

        head, *rest = pieces
        highlight = not raw and r"\h" in head
        if replace:
            self.last.replace(head.replace(r"\h", "") if not raw else head, align, highlight)
        else:
            self.last.write(head.replace(r"\h", "") if not raw else head, align, highlight)

        for piece in rest:
            self._newline(Line(piece.replace(r"\h", ""), align, r"\h" in piece))

    def _newline(self, line=Unset):
        self._commit(self.last)
        self._lines.append(coalesce(line, Line()))
        if self._capacity is not Unset and len(self._lines) > self._capacity:
            del self._lines[:len(self._lines) - self._capacity]

    def _commit(self, line):
        """
        Hook called once per line when it stops being the last one.
        """


class Terminal(Screen, ABC):
    """
    Output sink, input source and frame pump of a session.
    """
    fps = 60

    @abstractmethod
    def read_line(self, history=True):
        """
        Return one line typed by the user.

        Raises
        - InterruptSignal on Ctrl+C.
        - ExitSignal when the input is exhausted.
        """

    @abstractmethod
    def tick(self, interruptible=True):
        """
        Let one frame pass. Raises InterruptSignal on Ctrl+C when interruptible.
        """

    def close(self):
        """
        Flush the pending line. The terminal stays usable afterwards.
        """
        if not self.last.empty:
            self._newline()


class MemoryTerminal(Terminal):
    """
    Headless terminal fed from a script of input lines.

    Each entry of inputs is either a line of text or a ShellSignal (class or
    instance) raised by read_line() instead. Once the script is exhausted,
    read_line() raises ExitSignal. interrupt() makes the next interruptible
    tick raise InterruptSignal.
    """

    def __init__(self, inputs=(), /, *, fps=60, capacity=Unset):
        super().__init__(capacity=capacity)
        self._inputs = list(inputs)
        self._history = []
        self._interrupted = False
        self.ticks = 0
        self.fps = fps

    history = mirror("history")

    def feed(self, *inputs):
        self._inputs.extend(inputs)

    def interrupt(self):
        self._interrupted = True

    def read_line(self, history=True):
        if not self._inputs:
            raise ExitSignal()
        entry = self._inputs.pop(0)
        if not isinstance(entry, str):
            raise entry
        if history and entry:
            self._history.append(entry)
        return entry

    def tick(self, interruptible=True):
        self.ticks += 1
        if interruptible and self._interrupted:
            self._interrupted = False
            raise InterruptSignal()

    def text(self, align=Align.LEFT):
        """
        Texts of every line in one slot, oldest first.
        """
        return [line.text(align) for line in self._lines]


class RichTerminal(Terminal):
    """
    Terminal rendering to a rich Console and reading with Console.input().

    Colours of the active configuration apply to every rendered line; the
    host application may add a __styles__ mapping to __main__ with "text" and
    "highlight" entries to override them.
    """

    def __init__(self, console=Unset, /, *, fps=60, capacity=1000):
        super().__init__(capacity=capacity)
        self._console = coalesce(console, Console(highlight=False))
        self._history = []
        self._echoed = None
        self.fps = fps

    console = mirror("console")
    history = mirror("history")

    def _style(self, line, align):
        styles = {"text": "", "highlight": "reverse"} | getattr(__import__("__main__"), "__styles__", {})
        style = Style(
            color=Color.from_rgb(*self.foreground),
            bgcolor=Color.from_rgb(*self.background),
        ) + Style.parse(styles["text"])
        if line.highlighted(align):
            style += Style.parse(styles["highlight"])
        return style

    def render(self, line):
        grid = Table.grid(expand=True)
        grid.add_column(justify="left", ratio=1)
        grid.add_column(justify="center", ratio=1)
        grid.add_column(justify="right", ratio=1)
        grid.add_row(*(Text(line.text(align), style=self._style(line, align)) for align in Align))
        return grid

    def _commit(self, line):
        # the TTY already shows the prompt line with what was typed
        if self._echoed == (line, line.text(Align.LEFT)) and not line.text(Align.CENTER) + line.text(Align.RIGHT):
            return
        self._console.print(self.render(line))

    def read_line(self, history=True):
        line = self.last
        prompt = Text(line.text(Align.LEFT), style=self._style(line, Align.LEFT))
        try:
            text = self._console.input(prompt)
        except KeyboardInterrupt:
            self._console.line()
            raise InterruptSignal() from None
        except EOFError:
            self._console.line()
            raise ExitSignal() from None
        self._echoed = (line, line.text(Align.LEFT) + text)
        if history and text:
            self._history.append(text)
        return text

    def tick(self, interruptible=True):
        try:
            time.sleep(1 / self.fps)
        except KeyboardInterrupt:
            if interruptible:
                raise InterruptSignal() from None

    def clear(self):
        super().clear()
        self._console.clear()


__all__ = (
    "Align",
    "Line",
    "Screen",
    "Terminal",
    "MemoryTerminal",
    "RichTerminal",
)
