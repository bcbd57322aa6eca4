"""
Corsair validators: declaration checks (before scanning) and post-scan checks.

Declaration validator
- validate(command) checks one command level, first failure wins:
    1. the command name is present and well formed;
    2. aliases are well formed and unique;
    3. arguments: names present, well formed and unique; default/choices/optional agree;
    4. options: long flag present; long/short flags well formed; no flag is used twice
       across long and short flags (one shared, normalized namespace); default/choices/
       optional agree for value-bearing kinds;
    5. children: every name and alias is unique among siblings, and each child passes
       steps 1-4. Grandchildren are left for the moment their own tokens are reached.

Post-scan validator
- resolve(command, result) walks declared options then arguments and, in that order:
  raises when a required field produced nothing, substitutes defaults for fields that
  produced nothing (or an empty list), and checks choices membership.

Every failure raises CommandError with a descriptive, lowercased message.
"""
import re

from .faults import CommandError
from .utils import Unset, camelize

NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")
FLAG_PATTERN = re.compile(r"[A-Za-z-][A-Za-z0-9_-]*")


def _fault(message, /):
    return CommandError(
        message,
        title="declaration error",
        hint="fix the command declaration; this is not caused by the command-line input",
    )


def _check_name(name, variant="command"):
    if not NAME_PATTERN.fullmatch(name):
        raise _fault(
            f"{variant} name {name!r} must start with a letter and contain only letters, "
            f"numbers, underscores, or hyphens"
        )


def _check_flag(flag, variant):
    if flag is not Unset and not FLAG_PATTERN.fullmatch(flag):
        raise _fault(
            f"invalid {variant} {flag!r}; {variant}s must start with a letter or hyphen "
            f"and contain only letters, numbers, hyphens, or underscores"
        )


def _check_default(field, variant, label):
    """
    default/choices/optional agreement shared by arguments and value-bearing options.
    """
    default = field.default
    if default is Unset:
        return

    if field.choices is not Unset:
        defaults = default if isinstance(default, list) else [default]
        if any(value not in field.choices for value in defaults):
            raise _fault(
                f"default value {default!r} for {variant} {label!r} must be one of: {', '.join(field.choices)}"
            )

    if not field.optional:
        raise _fault(f"{variant} {label!r} cannot have a default value if it's required")

    if isinstance(default, list) and field.kind != "variadic":
        raise _fault(f"default value for {variant} {label!r} cannot be a list unless it is variadic")


def _validate_name(command):
    if not command.name:
        raise _fault("command name is required")
    _check_name(command.name)


def _validate_aliases(command):
    seen = set()
    for alias in command.aliases:
        _check_name(alias, "alias")
        if alias in seen:
            raise _fault(f"duplicate alias {alias!r}")
        seen.add(alias)


def _validate_arguments(command):
    seen = set()
    for argument in command.arguments:
        if not argument.name:
            raise _fault("argument name is required")
        _check_name(argument.name, "argument")
        if argument.name in seen:
            raise _fault(f"duplicate argument name {argument.name!r}")
        seen.add(argument.name)
        _check_default(argument, "argument", argument.name)


def _validate_options(command):
    seen = set()
    for option in command.options:
        if not option.long_flag:
            raise _fault("option long flag is required")
        _check_flag(option.long_flag, "long flag")
        _check_flag(option.short_flag, "short flag")

        # long and short flags share one namespace, compared by canonical key
        if (long := camelize(option.long_flag)) in seen:
            raise _fault(f"duplicate option long flag {option.long_flag!r}")
        if option.short_flag is not Unset and (short := camelize(option.short_flag)) in seen:
            raise _fault(f"duplicate short flag {option.short_flag!r} in options")

        seen.add(long)
        if option.short_flag is not Unset:
            seen.add(short)

        if option.kind != "flag":
            _check_default(option, "option", option.long_flag)


def _validate_level(command):
    _validate_name(command)
    _validate_aliases(command)
    _validate_arguments(command)
    _validate_options(command)


def _validate_children(command):
    seen = set()
    for child in command.children:
        if not child.name:
            raise _fault("subcommand name is required")
        for name in (child.name, *child.aliases):
            if name in seen:
                raise _fault(f"duplicate subcommand name {name!r}")
            seen.add(name)
        _validate_level(child)


def validate(command, /):
    """
    Validate one command level and the immediate shape of its children.

    Raises
    - CommandError on the first malformed, duplicated or conflicting declaration.
    """
    _validate_level(command)
    _validate_children(command)


def _check_choices(field, variant, label, value):
    if field.choices is Unset or isinstance(value, bool):
        return
    for item in value if isinstance(value, list) else [value]:
        if item not in field.choices:
            raise CommandError(
                f"value {item!r} for {variant} {label!r} must be one of: {', '.join(field.choices)}",
                title="invalid choice",
                hint=f"pick one of: {', '.join(field.choices)}",
            )


def resolve(command, result, /):
    """
    Apply required/default/choices rules to a scanned result, in place.

    Flags are always optional and never checked against choices; for every other
    option and for every argument, in declaration order:
    - absent and required               -> "required ... is missing"
    - absent (or empty list) + default  -> default substituted (copied)
    - choices declared and value known  -> every element must be a member
    """
    fields = [
        ("option", option.long_flag, option, result.options)
        for option in command.options if option.kind != "flag"
    ] + [
        ("argument", argument.name, argument, result.args)
        for argument in command.arguments
    ]

    for variant, label, field, namespace in fields:
        if field.key not in namespace and not field.optional:
            raise CommandError(
                f"required {variant} {label!r} is missing",
                title="missing field",
                hint=f"provide the {variant} {label!r}; see --help for the expected usage",
            )

        if field.default is not Unset and namespace.get(field.key, []) == []:
            default = field.default
            namespace[field.key] = list(default) if isinstance(default, list) else default

        if field.key in namespace:
            _check_choices(field, variant, label, namespace[field.key])

    return result


__all__ = (
    "validate",
    "resolve",
)
