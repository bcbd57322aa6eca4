"""
Corsair dispatch runner: parse a level, run its handlers, recurse into a child.

Flow per level
- parse(command, tokens) produces the level's ParseResult.
- The level is folded into the run's accumulator, so handlers of a child still see
  the arguments and options parsed by every ancestor.
- A visible built-in --help/--version stops the run after rendering (no handlers).
- Handlers run strictly in declaration order; awaitables are awaited before the
  next handler starts.
- When the unparsed tail starts with a child name or alias, the rest of the tail
  is parsed by that child. Any other tail is left alone: it stays readable through
  `result.unparsed` (that is how tokens after '--' reach handlers) and no error is
  raised.

The accumulator is an explicit parameter; nothing is kept at module level, so
separate runs never share state.
"""
import inspect

from .faults import CommandError
from .parser import ParseResult, find_child, parse
from .utils import Unset, coalesce


async def run(command, tokens, /, namespace=Unset, *, index=1):
    """
    Execute `command` against `tokens`.

    parameters
    - command: the level to parse and execute.
    - tokens: the tokens that belong to this level and below.
    - namespace: the accumulator shared with ancestor levels (a fresh ParseResult
      when omitted).
    - index: 1-based position of tokens[0] in the whole invocation.

    returns
    - the accumulator, after every reached level was folded into it.

    raises
    - CommandError from parsing, carrying the failing level as its 'tool' option.
      Exceptions raised by handlers propagate unchanged.
    """
    namespace = coalesce(namespace, ParseResult())
    tokens = list(tokens)

    try:
        result = parse(command, tokens, index)
    except CommandError as fault:
        raise fault.__replace__(tool=command) from None
    namespace.update(result)

    match result.helper:
        case "help":
            command.help()
            return namespace
        case "version":
            command.about()
            return namespace

    for handler in command.handlers:
        if inspect.isawaitable(outcome := handler(namespace, command)):
            await outcome

    if result.unparsed and (child := find_child(command, result.unparsed[0])):
        # the child token itself sits right after everything this level consumed
        offset = len(tokens) - len(result.unparsed) + 1
        return await run(child, result.unparsed[1:], namespace, index=index + offset)

    return namespace


__all__ = (
    "run",
)
