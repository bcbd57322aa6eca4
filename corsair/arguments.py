r"""
Corsair argument declarations.

Overview
- Specs
  • Option: a named field matched by a long flag ('--output') and optionally a
    short flag ('-o'). Kinds:
      - "flag":     presence-only, parses to True.
      - "value":    takes the next token verbatim ('--output dist').
      - "inline":   takes the value attached with '=' ('--output=dist').
      - "variadic": takes a run of tokens until the next option or subcommand.
  • Argument: a positional field. Kinds:
      - "value":    takes exactly one token.
      - "variadic": takes a run of tokens until the next option or subcommand.

- Introspection & representation
  • DeclarationType (corsair.utils) gives both classes a stable __repr__ and
    __rich_repr__, and exposes the fields listed in __introspectable__ as
    read-only properties.
  • `key` is the canonical (camelized) name used in parse results.

Construction vs. validation
- Constructors only reject values of the wrong Python shape (TypeError) or an
  unknown kind (ValueError). Whether a name is well formed, unique, or whether a
  default agrees with choices/optional is a *declaration* concern checked by
  corsair.validation right before the owning command parses its tokens.
- A flag option never carries default or choices, and is always optional.

Quick example:
    >>> from corsair.arguments import Option, Argument
    >>> Option("--output", "inline", short_flag="-o", default="dist/", optional=True).key
    'output'
    >>> Argument("files", "variadic").key
    'files'
"""
from collections.abc import Iterable

from rich.text import Text

from .utils import *

OPTION_KINDS = ("flag", "value", "inline", "variadic")
ARGUMENT_KINDS = ("value", "variadic")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the shape of the fields shared by every declaration.

    - descr: Unset | str | Text. Strings are trimmed and must stay non-empty.
    - optional: bool.
    - default: Unset | str | Iterable[str]. Non-string iterables are stored as lists;
      whether a list is allowed for the declared kind is a declaration check.
    - choices: Unset | Iterable[str]. Stored as a tuple; duplicates are rejected.

    The metadata dict is modified in place.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = descr

    if not isinstance(metadata["optional"], bool):
        raise TypeError(f"{cls.__typename__} 'optional' must be a boolean")

    if not isinstance(default := metadata["default"], str | Iterable | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string or an iterable of strings")
    elif isinstance(default, Iterable) and not isinstance(default, str):
        default = list(default)
        if not all(isinstance(value, str) for value in default):
            raise TypeError(f"{cls.__typename__} 'default' must be a string or an iterable of strings")
    metadata["default"] = default

    if isinstance(choices := metadata["choices"], str) or not isinstance(choices, Iterable | Unset):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    elif choices is not Unset:
        choices = tuple(choices)
        if not all(isinstance(choice, str) for choice in choices):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        if len(set(choices)) != len(choices):
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
    metadata["choices"] = choices


class Option(metaclass=DeclarationType):
    """
    Named field declaration.

    Parameters
    - long_flag: str, e.g. '--output' (its camelized form is the result key).
    - kind: "flag" | "value" | "inline" | "variadic" (defaults to "value").
    - short_flag: str, e.g. '-o'.
    - descr: short help text.
    - default: str, or a list of str for variadic options.
    - choices: iterable of allowed strings.
    - optional: whether the option may be omitted (always True for flags).
    """
    __introspectable__ = (
        "long_flag",
        "kind",
        "short_flag",
        "descr",
        "default",
        "choices",
        "optional",
    )

    def __init__(
            self,
            long_flag,
            kind="value",
            /,
            *,
            short_flag=Unset,
            descr=Unset,
            default=Unset,
            choices=Unset,
            optional=False
    ):
        cls = type(self)
        if not isinstance(long_flag, str):
            raise TypeError(f"{cls.__typename__} 'long_flag' must be a string")
        if not isinstance(short_flag, str | Unset):
            raise TypeError(f"{cls.__typename__} 'short_flag' must be a string")
        if kind not in OPTION_KINDS:
            raise ValueError(f"{cls.__typename__} 'kind' must be one of: {', '.join(OPTION_KINDS)}")

        if kind == "flag":
            # presence-only: the option is never required and never carries a payload
            if default is not Unset or choices is not Unset:
                raise TypeError(f"{cls.__typename__} {long_flag!r} is a flag and cannot take a default or choices")
            optional = True

        metadata = {
            "long_flag": long_flag,
            "kind": kind,
            "short_flag": short_flag,
            "descr": descr,
            "default": default,
            "choices": choices,
            "optional": optional,
        }
        _sanitize_metadata(cls, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        """
        Canonical result key ('--dry-run' -> 'dryRun').
        """
        return camelize(self._long_flag)

    @property
    def names(self):
        """
        The declared flags, long first.
        """
        return tuple(name for name in (self._long_flag, self._short_flag) if name is not Unset)


class Argument(metaclass=DeclarationType):
    """
    Positional field declaration.

    Parameters
    - name: str (its camelized form is the result key).
    - kind: "value" | "variadic" (defaults to "value").
    - descr, default, choices, optional: as for Option.
    """
    __introspectable__ = (
        "name",
        "kind",
        "descr",
        "default",
        "choices",
        "optional",
    )

    def __init__(self, name, kind="value", /, *, descr=Unset, default=Unset, choices=Unset, optional=False):
        cls = type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if kind not in ARGUMENT_KINDS:
            raise ValueError(f"{cls.__typename__} 'kind' must be one of: {', '.join(ARGUMENT_KINDS)}")

        metadata = {
            "name": name,
            "kind": kind,
            "descr": descr,
            "default": default,
            "choices": choices,
            "optional": optional,
        }
        _sanitize_metadata(cls, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        """
        Canonical result key ('out-dir' -> 'outDir').
        """
        return camelize(self._name)


__all__ = (
    "Option",
    "Argument",
    "OPTION_KINDS",
    "ARGUMENT_KINDS",
)
