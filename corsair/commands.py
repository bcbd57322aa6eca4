"""
Corsair command layer: declare, compose, and run CLI commands.

What this module provides
- Command: a declaration node (name, aliases, options, arguments, handlers, children)
  with a fluent builder API, Rich-based help/version renderers, and entry points:
  • parse(tokens): parse this level only, returning a ParseResult.
  • run(tokens): async; parse, run handlers, and dispatch into children.
  • __invoke__(prompt): synchronous runner used by invoke(), with shell-mode fault
    rendering.

- Factories and helpers:
  • command(...): create a Command from a handler function, or a decorator that does.
  • invoke(obj, prompt): convenience runner for Commands.

Quick start
    from corsair import Command, invoke

    git = Command("git", descr="the stupid content tracker", version="2.45.0")
    git.option("--verbose", "flag", short_flag="-V")

    @git.command(aliases=("c",))
    def commit(result, command):
        "record changes to the repository"
        print(result.options["message"], result.options.get("verbose", False))

    commit.option("--message", short_flag="-m")

    if __name__ == "__main__":
        invoke(git)          # e.g. `git -V c -m "first"`

Design notes
- The declaration tree is the canonical mutable state while it is being built;
  parsing and running only read it.
- Built-in --help/-h and --version/-v flags are declared on every command at
  construction; hide("help" | "version") keeps them from short-circuiting the parse
  and from being listed in help.
- Declaration problems (bad names, duplicates, default/choices conflicts) surface at
  parse time, right before the offending level reads its tokens.
"""
import asyncio
import inspect
import os
import re
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import parser, runner
from .arguments import Option, Argument
from .faults import CommandError, trigger
from .utils import *


PALETTE = {
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "program-version": "bold #00E6FF",
    "description": "italic #A3A3A3",
    "group-label": "bold #FFFFFF",
    "field-description": "#9CA3AF",
    "option-name": "bold #00E6FF",
    "metavar": "bold #FFD600",
    "choice": "bold #FF4D94",
    "default": "italic #22C55E",
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",
    "children": "bold #36C5F0",
    "children-description": "#9CA3AF",
    "panel-title": "bold #FF4D94",
}


class _Painter:
    """
    Turn fragments into fresh Text objects, styled from the palette when colorful.
    """

    def __init__(self, colorful):
        self.colorful = colorful
        self.palette = defaultdict(str, PALETTE | getattr(sys.modules.get("__main__"), "__styles__", {}))

    def style(self, key):
        return self.palette[key] if self.colorful else ""

    def __call__(self, fragment, key):
        if isinstance(fragment, Text):
            return fragment.copy() if self.colorful else Text(fragment.plain)
        return Text(coalesce(fragment, ""), self.style(key))


def _framed(renderable, title, paint):
    return Panel(renderable, title=paint(f"[ {title.upper()} ]", "panel-title"), title_align="left")


def _metavar(name, kind, optional=False):
    """
    '<name>' for required fields, '[name]' for optional ones, '...' suffix for variadic.
    """
    label = re.sub(r"^--", "", name) + ("..." if kind == "variadic" else "")
    return f"[{label}]" if optional else f"<{label}>"


def _flag(flag, kind, optional=False):
    if kind == "inline":
        return f"{flag}[=value]" if optional else f"{flag}=value"
    return flag


def _tokenize(prompt):
    """
    Turn a prompt into tokens: Unset -> sys.argv[1:], str -> shlex.split, iterable -> list.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


class Command(metaclass=DeclarationType):
    """
    Declaration node for one command level.

    Responsibilities
    - Declaration: name, description, version, aliases, options, arguments, handlers,
      children; exposed as read-only properties.
    - Composition: command() creates children bound to this node as parent.
    - Rendering: help() and about() via Rich, honouring colorful/fancy.
    - Execution: parse() for one level, run() for the full dispatch.

    Runtime flags
    - shell: render faults and exit(1) instead of raising (only in __invoke__).
    - fancy: wrap renders in panels.
    - colorful: apply the palette (overridable via __main__.__styles__).
    Each flag defaults to the parent's value, or False at the root.
    """

    __introspectable__ = (
        "name",
        "descr",
        "version",
        "aliases",
        "options",
        "arguments",
        "handlers",
        "children",
        "hidden",
        "helpers",
        "parent",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "descr",
        "version",
        "aliases",
        "options",
        "arguments",
        "children",
        "hidden",
    )

    @property
    def root(self):
        """
        Return the topmost command of this hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def __init__(
            self,
            name=Unset,
            /,
            *,
            descr=Unset,
            version=Unset,
            parent=Unset,
            shell=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        cls = type(self)
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")

        self._name = coalesce(name, os.path.splitext(os.path.basename(sys.argv[0]))[0])
        self._descr = coalesce(descr, "")
        self._version = coalesce(version, "1.0.0")
        self._aliases = []
        self._options = []
        self._arguments = []
        self._handlers = []
        self._children = []
        self._hidden = set()
        self._parent = coalesce(parent)
        # Runtime flags (inherit from parent when Unset)
        self._shell = bool(coalesce(shell, getattr(self._parent, "shell", False)))
        self._fancy = bool(coalesce(fancy, getattr(self._parent, "fancy", False)))
        self._colorful = bool(coalesce(colorful, getattr(self._parent, "colorful", False)))

        # Built-in helper flags, declared once per level.
        self._helpers = {
            "help": Option("--help", "flag", short_flag="-h", descr="show this help message and exit"),
            "version": Option("--version", "flag", short_flag="-v", descr="show this version message and exit"),
        }
        self._options.extend(self._helpers.values())

        if self._parent:
            self._parent._children.append(self)

    # ── Builder ─────────────────────────────────────────────────────────────

    def alias(self, alias, /):
        """
        Add an alternative name under which the parent dispatches to this command.
        """
        if not isinstance(alias, str):
            raise TypeError(f"{type(self).__typename__} alias must be a string")
        self._aliases.append(alias)
        return self

    def hide(self, kind, /):
        """
        Hide a built-in flag ("help" or "version").

        A hidden built-in is still accepted as a plain flag, but it no longer stops
        the parse and it is not listed in help.
        """
        if kind not in self._helpers:
            raise ValueError(f"{type(self).__typename__} can only hide 'help' or 'version'")
        self._hidden.add(kind)
        return self

    def option(self, option, kind="value", /, **fields):
        """
        Declare an option, either from its fields or as a ready Option instance.

        Examples
        - cmd.option("--output", "inline", short_flag="-o", default="dist/", optional=True)
        - cmd.option(Option("--dry-run", "flag"))
        """
        if not isinstance(option, Option):
            option = Option(option, kind, **fields)
        elif fields:
            raise TypeError(f"{type(self).__typename__} option() takes no fields with an Option instance")
        self._options.append(option)
        return self

    def argument(self, argument, kind="value", /, **fields):
        """
        Declare a positional argument, either from its fields or as an Argument instance.
        """
        if not isinstance(argument, Argument):
            argument = Argument(argument, kind, **fields)
        elif fields:
            raise TypeError(f"{type(self).__typename__} argument() takes no fields with an Argument instance")
        self._arguments.append(argument)
        return self

    def handler(self, handler, /):
        """
        Register a handler, called as handler(result, command) after a successful parse.

        Handlers may be coroutine functions; they are awaited in turn. Returns the
        handler itself, enabling decorator-style usage: @cmd.handler
        """
        if not callable(handler):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        self._handlers.append(handler)
        return handler

    def command(self, source=Unset, /, **metadata):
        """
        Create a subcommand under this command.

        Modes
        - cmd.command("name", descr=...)      -> the new child Command
        - cmd.command(function, ...)          -> child wrapping function as handler
        - @cmd.command(descr=...) / @cmd.command
        """
        if isinstance(source, str):
            aliases = metadata.pop("aliases", ())
            child = Command(source, parent=self, **metadata)
            for alias in aliases:
                child.alias(alias)
            return child
        return command(source, parent=self, **metadata)

    # ── Rendering ───────────────────────────────────────────────────────────

    def help(self, *, stderr=False):
        """
        Render usage, description, arguments, options and subcommands.

        Sections are separated by one blank line. Hidden built-ins are not listed.
        Palette keys are those of PALETTE; __main__.__styles__ overrides them.
        """
        paint = _Painter(self.colorful)
        hidden = [option for kind, option in self.helpers.items() if kind in self.hidden]
        options = [option for option in self.options if option not in hidden]
        route = " ".join(step.name for step in self.path)

        usage = Text.assemble(paint("usage", "usage-label"), ": ", paint(route, "program-name"))
        for argument in self.arguments:
            usage.append(" ").append(paint(_metavar(argument.name, argument.kind, argument.optional), "metavar"))
        if options:
            usage.append(" [options]")
        if self.children:
            usage.append(" [command]")
        sections = [usage]

        if self.descr:
            sections.append(paint(self.descr, "description"))

        def describe(field):
            line = paint(field.descr, "field-description")
            if field.kind == "flag":
                return line
            if field.choices is not Unset:
                line.append(" (choices: ").append(paint(", ".join(field.choices), "choice")).append(")")
            if field.default is not Unset:
                default = field.default if isinstance(field.default, str) else " ".join(field.default)
                line.append(" (default: ").append(paint(default, "default")).append(")")
            return line

        if self.arguments:
            grid = Table.grid(padding=(0, 2), pad_edge=True)
            for argument in self.arguments:
                grid.add_row(paint(_metavar(argument.name, argument.kind, argument.optional), "metavar"), describe(argument))
            sections.append(Group(Text.assemble(paint("arguments", "group-label"), ":"), grid))

        if options:
            grid = Table.grid(padding=(0, 2), pad_edge=True)
            for option in options:
                optional = option.kind == "flag" or option.optional
                names = Text(", ").join(paint(_flag(name, option.kind, optional), "option-name") for name in option.names)
                metavar = ""
                if option.kind in ("value", "variadic"):
                    metavar = _metavar(option.long_flag, option.kind, optional)
                grid.add_row(names, paint(metavar, "metavar"), describe(option))
            sections.append(Group(Text.assemble(paint("options", "group-label"), ":"), grid))

        if self.children:
            table = Table(
                "name", "aliases", "help",
                title=paint("subcommands" if self.parent else "commands", "children-title"),
                box=ROUNDED,
                style=paint.style("children-table"),
                header_style=paint.style("children-title"),
            )
            for child in self.children:
                summary = child.descr or f"run '{route} {child.name} --help' for details"
                table.add_row(paint(child.name, "children"), ", ".join(child.aliases), paint(summary, "children-description"))
            sections.append(table)

        spaced = []
        for section in sections:
            spaced.extend((Text(""), section) if spaced else (section,))
        renderable = Group(*spaced)
        Console(stderr=stderr).print(_framed(renderable, f"{self.name} help", paint) if self.fancy else renderable)

    def about(self):
        """
        Render '<name> — <version>'.
        """
        paint = _Painter(self.colorful)
        line = Text(" — ").join((paint(self.name, "program-name"), paint(self.version, "program-version")))
        Console().print(_framed(line, f"{self.name} version", paint) if self.fancy else line)

    # ── Execution ───────────────────────────────────────────────────────────

    def parse(self, tokens=Unset, /):
        """
        Parse this level only (no handlers, no dispatch).

        Tokens default to sys.argv[1:]. Raises CommandError on failure.
        """
        return parser.parse(self, coalesce(tokens, sys.argv[1:]))

    async def run(self, tokens=Unset, /):
        """
        Parse, run handlers, and dispatch into children (see corsair.runner).

        Tokens default to sys.argv[1:]. Returns the accumulated ParseResult.
        Raises CommandError on failure, with the failing level as its 'tool' option.
        """
        return await runner.run(self, coalesce(tokens, sys.argv[1:]))

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags.

        In shell mode the failing level's help is rendered to stderr first, then
        the fault, and the process exits with status 1; otherwise it is raised.
        Explicit options (tool, shell, fancy, colorful, ...) take precedence.
        """
        if not isinstance(fault, CommandError):
            raise TypeError(f"{type(self).__typename__} can only trigger command errors")
        options = {
            "tool": fault.options.get("tool", self),
            "shell": self.shell,
            "fancy": self.fancy,
            "colorful": self.colorful,
        } | options
        if options["shell"]:
            options["tool"].help(stderr=True)
        trigger(fault, **options)

    def __invoke__(self, prompt=Unset):
        """
        Execute this command with a prompt.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Returns
        - the accumulated ParseResult (faults are triggered, see trigger()).
        """
        tokens = _tokenize(prompt)
        try:
            return asyncio.run(self.run(tokens))
        except CommandError as fault:
            self.trigger(fault)


def command(source=Unset, /, **metadata):
    """
    Create a Command from a handler function, or return a decorator that does.

    Invocation modes
    - cmd = command(func, descr=..., version=...)
    - @command(name="x", aliases=("y",))
      def func(result, command): ...
    - @command
      def func(result, command): ...

    The name defaults to the function name with underscores turned into hyphens;
    the description defaults to the function docstring. An 'aliases' iterable is
    registered through alias().
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        fields = dict(metadata)
        name = fields.pop("name", source.__name__.strip("_").replace("_", "-"))
        aliases = fields.pop("aliases", ())
        fields.setdefault("descr", inspect.getdoc(source) or Unset)
        self = Command(name, **fields)
        for alias in aliases:
            self.alias(alias)
        self.handler(source)
        return self

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: an instance providing __invoke__(prompt).
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.

    Returns
    - whatever __invoke__ returns (the accumulated ParseResult for a Command).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "command",
    "invoke",
)
