"""
Corsair parsing engine: one command level, one left-to-right pass.

Pieces
- ParseResult: args/options mappings keyed by canonical names, plus the unparsed tail.
- collect(tokens, command): the variadic collector shared by options and arguments.
- match_option(token, tokens, command, index): resolve one option-looking token.
- match_argument(tokens, command, cursor, index): resolve the next positional slot.
- parse(command, tokens, index=1): the top-level loop for one level.

Token classification (in this order)
- '--'                      -> everything after it becomes `unparsed`; stop.
- option-looking token      -> match_option (starts with '-' or contains '=').
                               A visible built-in --help/--version stops the scan
                               right away and skips every post-scan check.
- subcommand name or alias  -> the token and the rest become `unparsed`; stop.
- anything else             -> match_argument at the current positional slot.

Positions
- `index` is the 1-based position of tokens[0] in the whole invocation, so that a
  child level keeps counting where its parent stopped ("at fifth position").
"""
from rich.repr import auto

from .faults import CommandError
from .utils import Unset, camelize, is_inline, is_option, ordinal
from .validation import resolve, validate


@auto
class ParseResult:
    """
    Structured outcome of a parse.

    - args: canonical argument name -> str | list[str]
    - options: canonical long flag -> bool | str | list[str]
    - unparsed: leftover tokens (after '--', or from a subcommand token on)
    - helper: "help" / "version" when the scan stopped on that built-in, else Unset

    The runner threads one ParseResult through every level of a run and folds each
    level into it with update().
    """
    __slots__ = ("args", "options", "unparsed", "helper")

    def __init__(self, args=(), options=(), unparsed=(), helper=Unset):
        self.args = dict(args)
        self.options = dict(options)
        self.unparsed = list(unparsed)
        self.helper = helper

    def update(self, other, /):
        """
        Fold a deeper level into this accumulator.

        Arguments and options merge (later levels win on key clashes); the
        unparsed tail and the helper marker are replaced by the deeper level's.
        """
        self.args.update(other.args)
        self.options.update(other.options)
        self.unparsed = list(other.unparsed)
        self.helper = other.helper
        return self

    def __eq__(self, other):
        if not isinstance(other, ParseResult):
            return NotImplemented
        return (self.args, self.options, self.unparsed) == (other.args, other.options, other.unparsed)

    def __rich_repr__(self):
        yield "args", self.args
        yield "options", self.options
        yield "unparsed", self.unparsed
        if self.helper is not Unset:
            yield "helper", self.helper


def _route(command):
    return " ".join(step.name for step in command.path)


def find_child(command, token, /):
    """
    Return the child command named (or aliased) `token`, or None.
    """
    for child in command.children:
        if child.name == token or token in child.aliases:
            return child
    return None


def collect(tokens, command, /):
    """
    Greedily gather tokens until an option-looking token or a child command name.

    The stopping token is not consumed. The result may be empty.
    """
    values = []
    for token in tokens:
        if is_option(token) or find_child(command, token):
            break
        values.append(token)
    return values


def match_option(token, tokens, command, /, index=1):
    """
    Resolve one option-looking token.

    parameters
    - token: the option token, equal to tokens[0].
    - tokens: the remaining tokens, starting at the option token.
    - command: the level whose options are searched (declaration order, first match wins).
    - index: position of the token in the invocation, for messages.

    returns
    - (option, value, consumed)

    raises
    - CommandError "unknown option" when no long/short flag matches.
    - CommandError "unexpected option" when the kind cannot produce a value
      (inline without '=', value without a following token, or a bare 'name=value'
      token for a kind that needs the dashed form).
    """
    head, _, attached = token.partition("=")
    key = camelize(head)

    for option in command.options:
        if key in map(camelize, option.names):
            break
    else:
        raise CommandError(
            "unknown option %r at %s position" % (token, ordinal(index)),
            title="unknown option",
            hint="run '%s --help' to see all available options" % _route(command),
        )

    dashed = token.startswith("-")
    value = Unset
    consumed = 1

    match option.kind:
        case "flag" if dashed:
            value = True
        case "value" if dashed and len(tokens) > 1:
            value = tokens[1]
            consumed = 2
        case "inline" if is_inline(token):
            value = attached
        case "variadic" if dashed:
            value = collect(tokens[1:], command)
            consumed += len(value)

    if value is Unset:
        match option.kind:
            case "inline":
                hint = "use the inline form: %s=<value>" % option.long_flag
            case "value":
                hint = "pass a value after a space (for example: %s <value>)" % option.long_flag
            case _:
                hint = "spell the option with its dashes (for example: %s)" % option.long_flag
        raise CommandError(
            "unexpected option %r at %s position" % (token, ordinal(index)),
            title="unexpected option",
            hint=hint,
        )

    return option, value, consumed


def match_argument(tokens, command, cursor, /, index=1):
    """
    Resolve the positional slot `cursor` against the remaining tokens.

    returns
    - (argument, value, consumed); a variadic argument consumes the collected run.

    raises
    - CommandError "unexpected argument" when every declared slot is already used.
    """
    try:
        argument = command.arguments[cursor]
    except IndexError:
        raise CommandError(
            "unexpected argument %r at %s position" % (tokens[0], ordinal(index)),
            title="unexpected argument",
            hint="remove this extra value or run '%s --help' to see the expected usage" % _route(command),
        ) from None

    if argument.kind == "variadic":
        value = collect(tokens, command)
        return argument, value, len(value)
    return argument, tokens[0], 1


def parse(command, tokens, /, index=1):
    """
    Parse one command level.

    phases
    - validate the declaration of this level (and the shape of its children).
    - scan tokens once, left to right (see module docstring for classification).
    - unless a visible help/version flag stopped the scan, apply the post-scan
      rules (required fields, defaults, choices).

    returns
    - ParseResult

    raises
    - CommandError for declaration, token or post-validation failures.
    """
    validate(command)

    result = ParseResult()
    helpers = {option: kind for kind, option in command.helpers.items() if kind not in command.hidden}
    tokens = list(tokens)
    cursor = 0
    position = 0

    while position < len(tokens):
        token = tokens[position]
        remaining = tokens[position:]

        if token == "--":
            result.unparsed = tokens[position + 1:]
            break

        if is_option(token):
            option, value, consumed = match_option(token, remaining, command, index + position)
            result.options[option.key] = value
            if option in helpers:
                result.helper = helpers[option]
                return result
        elif find_child(command, token):
            result.unparsed = remaining
            break
        else:
            argument, value, consumed = match_argument(remaining, command, cursor, index + position)
            result.args[argument.key] = value
            cursor += 1

        position += max(consumed, 1)

    return resolve(command, result)


__all__ = (
    "ParseResult",
    "find_child",
    "collect",
    "match_option",
    "match_argument",
    "parse",
)
