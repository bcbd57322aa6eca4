"""
Corsair faults: one exception type for every failure, rendered with rich.

CommandError
- message: the lowercased, human-readable text (also what str() returns).
- options: read-only rendering context.
    title     family label shown in the header ("unknown option", "missing field", ...)
    hint      optional follow-up line, drawn after an arrow
    tool      the command level that failed (its root names the program)
    shell     render and exit(1) instead of raising
    fancy     wrap the render in a panel
    colorful  apply the palette

Families are told apart by title and message text only:
- declaration errors (bad names, duplicates, default/choices/optional conflicts)
- token errors (unknown option, option without a value, unexpected argument)
- post-validation errors (required field missing, invalid choice)

Parsing code raises CommandError and never prints. Command.__invoke__ is the one
place that calls trigger(), so rendering and exiting stay at the program edge.
"""
import sys
from collections import defaultdict
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

PALETTE = {
    "fault-program": "bold #E6E6F0",
    "fault-title": "bold #FF4DA6",
    "fault-message": "#C8C8D0",
    "fault-arrow": "dim #9CE19C",
    "fault-hint": "italic #9CE19C",
}


class CommandError(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    @property
    def program(self):
        """
        Label for the header: __main__.__prog__, else the failing tool's root name.
        """
        if (program := getattr(sys.modules.get("__main__"), "__prog__", Unset)) is not Unset:
            return program
        if (tool := self.options.get("tool")) is not None:
            return tool.root.name
        return "corsair"

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        palette = defaultdict(str, PALETTE | getattr(sys.modules.get("__main__"), "__styles__", {}))

        def paint(fragment, key):
            return Text(str(fragment), palette[key] if colorful else "")

        header = Text.assemble(
            "[ ",
            paint(self.program, "fault-program"),
            " | ",
            paint(self.options.get("title", "error").title(), "fault-title"),
            " ]",
        )
        lines = [paint(self, "fault-message")]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble(paint(" → ", "fault-arrow"), paint(hint, "fault-hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*lines), title=header, title_align="left")
        return Group(header, *lines)

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
            sys.exit(1)
        raise self from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional overrides are not supported"
        return type(self)(self.message, **(dict(self.options) | overrides))


def trigger(fault, /, **options):
    """
    Surface `fault` with extra runtime options merged in.

    The fault is copied through __replace__(**options) and then triggered: raised
    outside shell mode, printed to stderr followed by exit(1) inside it.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() argument must have __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandError",
    "trigger",
)
