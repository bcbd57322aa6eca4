"""
Corsair utilities shared by declarations, the parser and the renderers.

Contents
- Unset: "no value given" marker, distinct from None and from empty strings.
- coalesce(object, default): materialize Unset.
- rename(...): give generated functions readable names in tracebacks.
- mirror(name): read-only property over "_{name}" that hands out copies of
  containers, so declaration state can only change through builder methods.
- camelize(token): the name normalizer. '--dry-run', 'dry-run' and 'dryRun'
  all map to the canonical key 'dryRun' used in parse results.
- is_option(token) / is_inline(token): token shapes used by the parse loop.
- ordinal(number): position words for messages ("at third position").
- DeclarationType: metaclass giving declarations their typename, read-only
  fields and representations.

    >>> camelize("--dry-run")
    'dryRun'
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3)
    'third'
"""
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance. It is falsey, prints as "Unset", cannot be
    subclassed, and can take part in `X | Unset` unions so that isinstance checks
    read like the parameter they guard.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
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


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when it is Unset. Other falsey values pass through.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(function, name) renames in place; rename(name) returns a decorator.
    """
    match parameters:
        case (str() as name,):
            return lambda function: rename(function, name)
        case (function, str() as name) if callable(function):
            function.__name__ = function.__qualname__ = name
            return function
        case _:
            raise TypeError("rename() expects a callable and a name, or a name alone")


def _detach(object):
    # lists for sequences, dicts for mappings, sets for sets; leaves are shared
    if isinstance(object, Sequence) and not isinstance(object, str):
        return [_detach(item) for item in object]
    if isinstance(object, Mapping):
        return {key: _detach(value) for key, value in object.items()}
    if isinstance(object, Set):
        return {_detach(item) for item in object}
    return object


def mirror(name, /):
    """
    Read-only property over the private attribute "_{name}".

    Options, arguments, handlers and child commands inside the copied containers
    are the live objects; only the containers are fresh.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


def camelize(token, /):
    """
    Normalize a flag or argument name into its canonical lookup key.

    Leading dashes are stripped, every '-x' pair becomes 'X', and any hyphen
    left over is dropped. The transform is total and never fails.

    Examples
    - camelize("--dry-run") -> "dryRun"
    - camelize("-o")        -> "o"
    - camelize("out-dir")   -> "outDir"
    - camelize("a--b")      -> "ab"
    """
    if not isinstance(token, str):
        raise TypeError("camelize() argument must be a string")
    token = re.sub(r"^-+", "", token.strip())
    token = re.sub(r"-.", lambda match: match.group()[1].upper(), token)
    return token.replace("-", "")


def is_inline(token, /):
    """
    Return True when the token carries an attached value ('name=value').
    """
    return "=" in token


def is_option(token, /):
    """
    Return True when the token looks like an option: it starts with '-' or
    carries an inline '=' value.
    """
    return token.startswith("-") or is_inline(token)


@functools.cache
def ordinal(number, /):
    """
    Words for 1..10 ("first"..."tenth"), numeric suffixes beyond ("11th", "22nd").
    """
    words = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")
    if 1 <= number <= len(words):
        return words[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}" + {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()


@rename("__rich_repr__")
def _rich_repr(self):
    for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
        if (value := getattr(self, field)) is not Unset:
            yield field, value


@rename("__repr__")
def _repr(self):
    fields = ", ".join(f"{field}={value!r}" for field, value in self.__rich_repr__())
    return f"{type(self).__typename__}({fields})"


class DeclarationType(type):
    """
    Metaclass shared by Option, Argument and Command.

    - __typename__ is the class name split on capitals and hyphenated ("Command" -> "command").
    - every name in __introspectable__ becomes a mirror() property.
    - __repr__ and __rich_repr__ list __displayable__ (by default __introspectable__),
      leaving Unset fields out.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        namespace = namespace | {field: mirror(field) for field in namespace.get("__introspectable__", ())}
        namespace.setdefault("__typename__", re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower())
        namespace.setdefault("__repr__", _repr)
        namespace.setdefault("__rich_repr__", _rich_repr)
        return super().__new__(cls, name, bases, namespace, **options)


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "camelize",
    "is_inline",
    "is_option",
    "ordinal",
    "UnsetType",
    "DeclarationType",
    "Unset",
)
