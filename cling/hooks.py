"""
Default hooks for validation and runtime faults.

Every command starts with these callbacks installed and may replace any of
them (see Command.on_error, Command.on_missing_arguments, ...). They are plain,
stateless functions so they can be reused, wrapped or tested on their own.

Decision protocol
- A hook receives the offending names (validation hooks) or the raised
  exception (error hook).
- Returning False halts the run; returning anything else (None included)
  lets the executor carry on with best-effort results.
- Raising is fatal: the exception leaves Command.execute unchanged.

The defaults below always raise, so an unconfigured command fails with one
aggregated message per category, e.g. "Missing required arguments: src, dst".
"""
from .faults import (
    MissingArgumentsError,
    UnknownArgumentsError,
    MissingOptionsError,
    UnknownOptionsError,
    MissingValuesError,
)
from .utils import pluralize

HALT = False


def halts(outcome, /):
    """Return True when a hook outcome asks the executor to stop."""
    return outcome is HALT


def _enumerate(prefix, label, names):
    return "%s %s: %s" % (prefix, pluralize(label, len(names)), ", ".join(names))


def raise_error(exception, /):
    raise exception


def raise_missing_arguments(names, /):
    raise MissingArgumentsError(_enumerate("Missing required", "argument", names), names=tuple(names))


def raise_unknown_arguments(names, /):
    raise UnknownArgumentsError(_enumerate("Unknown", "argument", names), names=tuple(names))


def raise_missing_options(names, /):
    raise MissingOptionsError(_enumerate("Missing required", "option", names), names=tuple(names))


def raise_unknown_options(names, /):
    raise UnknownOptionsError(_enumerate("Unknown", "option", names), names=tuple(names))


def raise_missing_values(names, /):
    raise MissingValuesError(_enumerate("Missing value for", "option", names), names=tuple(names))


__all__ = (
    "HALT",
    "halts",
    "raise_error",
    "raise_missing_arguments",
    "raise_unknown_arguments",
    "raise_missing_options",
    "raise_unknown_options",
    "raise_missing_values",
)
