"""
Cling executor: resolve the target command, parse, validate, run.

Lifecycle
    RESOLVING → PARSING → VALIDATING → PRE_RUN → RUN → POST_RUN → DONE
                              ↘ FAILED (hook halts or raises; a stage raises)

- RESOLVING: walk down from the invoked command while the next token is the
  name or alias of a child (exact, case-sensitive). The last node reached is
  the target; the remaining tokens belong to it. Never fails.
- PARSING: Parser.parse() against the target's own arguments and options.
- VALIDATING: each non-empty problem category is reported to the target's
  hook, in this order: missing arguments, unknown arguments, unknown options,
  missing values, missing options. A hook that raises ends the run with that
  exception; a hook returning False ends it quietly; anything else continues
  with best-effort values. No cross-field checks happen here.
- PRE_RUN / RUN / POST_RUN: called with the same Arguments/Options pair.
  pre_run returning False skips run and post_run (DONE). An exception from
  any stage goes to the target's on_error hook; the default re-raises, a
  replacement that returns ends the run in FAILED without raising.

Definition errors (an unnamed command) are raised before RESOLVING finishes
and are never routed through a hook.

Concurrency
- Everything runs synchronously on the calling thread. There is no locking:
  a command tree must be fully built (setup, add_* and add_command) before
  the first execute(), and concurrent execute() calls sharing a node are not
  supported. Wrap execute() externally for timeouts or cancellation.
"""
import logging
from enum import Enum

from .hooks import halts
from .parser import Arguments, Options, Parser

logger = logging.getLogger(__name__)


class State(Enum):
    RESOLVING = "resolving"
    PARSING = "parsing"
    VALIDATING = "validating"
    PRE_RUN = "pre-run"
    RUN = "run"
    POST_RUN = "post-run"
    DONE = "done"
    FAILED = "failed"


def resolve(command, tokens, /):
    """
    Descend from `command` through children named by the leading tokens.

    Returns (target, remaining) where remaining is the list of tokens that
    were not consumed as command names.
    """
    tokens = list(tokens)
    index = 0
    while index < len(tokens) and (child := command.children.get(tokens[index])) is not None:
        command = child
        index += 1
    return command, tokens[index:]


class Executor:
    """
    Drives one run of the lifecycle for a command tree.

    Attributes (inspectable after execute)
    - state: the last State entered (DONE or FAILED once finished).
    - target: the command the tokens resolved to.
    - result: the ParseResult of the target's tokens.
    """

    def __init__(self, command, /):
        self.command = command
        self.state = None
        self.target = None
        self.result = None

    def _enter(self, state):
        logger.debug("%s: %s -> %s", self.command.name, self.state and self.state.value, state.value)
        self.state = state

    def _validate(self, target, result):
        for kind, names in (
            ("missing_arguments", result.missing_arguments),
            ("unknown_arguments", result.unknown_arguments),
            ("unknown_options", result.unknown_options),
            ("missing_values", result.missing_values),
            ("missing_options", result.missing_options),
        ):
            if not names:
                continue
            logger.debug("%s: dispatching %s hook with %r", target.name, kind, names)
            try:
                outcome = target.hooks[kind](list(names))
            except Exception:
                self._enter(State.FAILED)
                raise
            if halts(outcome):
                self._enter(State.FAILED)
                return False
        return True

    def execute(self, tokens, /):
        self.command.name  # unnamed commands cannot run
        tokens = list(tokens)

        self._enter(State.RESOLVING)
        self.target, remaining = resolve(self.command, tokens)
        target = self.target
        logger.debug("resolved %r to %r with %r", tokens, target.name, remaining)

        self._enter(State.PARSING)
        self.result = result = Parser.of(target).parse(remaining)

        self._enter(State.VALIDATING)
        if not self._validate(target, result):
            return

        arguments = Arguments(result.arguments)
        options = Options(result.options)

        for state, stage in (
            (State.PRE_RUN, target.pre_run),
            (State.RUN, target.run),
            (State.POST_RUN, target.post_run),
        ):
            self._enter(state)
            try:
                outcome = stage(arguments, options)
            except Exception as exception:
                self._enter(State.FAILED)
                logger.debug("%s: %s raised %r", target.name, state.value, exception)
                target.hooks["error"](exception)
                return
            if state is State.PRE_RUN and halts(outcome):
                break

        self._enter(State.DONE)


__all__ = (
    "State",
    "Executor",
    "resolve",
)
