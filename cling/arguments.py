r"""
Cling argument specifications.

Overview
- Specs
  • Argument: positional input, matched by declaration order.
  • Option: named input, matched by long (--name) or short (-n) form; either a
    boolean presence flag or value-taking (has_value=True).

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ via read-only properties.
  • Specs are immutable once built; the help collaborator reads them as-is.

Metadata (sanitized on construction)
- Shared
  • description: Unset | str (short help), non-empty when provided; None when omitted.
  • required: bool.
- Argument
  • name: non-empty, whitespace-free string.
- Option
  • long: non-empty, whitespace-free string that does not start with '-'.
  • short: Unset | single character (not '-' nor whitespace); None when omitted.
  • has_value: bool (False means presence-only flag).
  • default: any value; only allowed on value-taking options.

Uniqueness of names is a per-command concern and is enforced by
Command.add_argument/add_option, not here.

Quick example:
    >>> from cling.arguments import Argument, Option
    >>> Argument("name", required=True)
    argument(name='name', description=None, required=True)
    >>> Option("caps", short="c")
    option(long='caps', short='c', description=None, required=False, has_value=False, default=None)
"""
import functools
import operator
import re

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Derive __typename__ from the class name (used in messages and reprs).
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())
        self.__eq__ = __eq__
        self.__hash__ = None

        return self


def _sanitize_name(cls, field, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} '{field}' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} '{field}' cannot be empty")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} '{field}' cannot contain whitespace")
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared spec metadata.

    - description: optional short text. Unset becomes None; a provided string
      must be non-empty after trimming.
    - required: coerced to bool.

    The dict is mutated in place.
    """
    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)
    metadata["required"] = bool(metadata["required"])


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate long/short names and value semantics of an option.

    - long: no leading '-' (the prefix belongs to the token, not the name).
    - short: exactly one character, not '-' and not whitespace.
    - default: rejected on presence-only options; presence is the value.
    """
    long = _sanitize_name(cls, "long", metadata["long"])
    if long.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'long' must be given without the '-' prefix")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short == "-" or short.isspace()):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character other than '-'")
    metadata["short"] = coalesce(short)

    metadata["has_value"] = bool(metadata["has_value"])
    if not metadata["has_value"] and metadata["default"] is not None:
        raise TypeError(f"presence-only {cls.__typename__} cannot have a 'default'")


class Argument(metaclass=ArgumentType):
    """
    Positional argument specification.

    Arguments are unnamed on the command line: the first free token fills the
    first declared argument, the second token the second one, and so on. The
    name is the key under which the value is handed to the command.
    """

    __introspectable__ = (
        "name",
        "description",
        "required",
    )

    def __init__(self, name, /, description=Unset, required=False):
        metadata = {
            "name": _sanitize_name(type(self), "name", name),
            "description": description,
            "required": required,
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Option(metaclass=ArgumentType):
    """
    Named option specification.

    An option is matched by "--long" or, when it has a short name, by "-s".
    Presence-only options (has_value=False) resolve to True when given and
    False otherwise; value-taking options read the next token (or an inline
    "=value") and fall back to `default` when absent.
    """

    __introspectable__ = (
        "long",
        "short",
        "description",
        "required",
        "has_value",
        "default",
    )

    def __init__(self, long, /, short=Unset, description=Unset, required=False, has_value=False, default=None):
        metadata = {
            "long": long,
            "short": short,
            "description": description,
            "required": required,
            "has_value": has_value,
            "default": default,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_named_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        """Every token spelling that selects this option, long form first."""
        if self.short is None:
            return ("--" + self.long,)
        return "--" + self.long, "-" + self.short


__all__ = (
    "Argument",
    "Option",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
