"""
Cling parser: turn the tokens left after tree resolution into values.

Grammar (one shape only)
- "--name" selects an option by long name, "-n" by its single-character short
  name. Either form may carry an inline value: "--name=value", "-n=value".
- A value-taking option without an inline value reads the next token, unless
  that token is itself option-marked (or there is none): the value is missing.
- Any other token is positional and fills the declared arguments in order.
  Bare "-" and "--" are positional. Combined short flags ("-abc") and
  negative numbers ("-1") are not special: they are unknown options unless
  such a short name exists.

Contract
- Parser.parse() never raises on bad input. Problems are collected per
  category and returned in a ParseResult so they can be reported together;
  the executor decides which hook to call with them.
- Parsing reads the specs and never mutates them, so parsing the same tokens
  twice against the same command gives equal results.

Results
- Arguments: argument name -> token string.
- Options: long name -> True/False for presence-only options; the supplied
  string (last one wins) or the declared default for value-taking options.
"""
import logging
from collections import deque, namedtuple
from collections.abc import Mapping
from types import MappingProxyType

from .utils import Unset

logger = logging.getLogger(__name__)

PREFIX = "-"

_TRUTHY = frozenset({"1", "true", "yes", "on", "y"})
_FALSY = frozenset({"0", "false", "no", "off", "n", ""})


class ParseResult(namedtuple("ParseResult", (
    "arguments",
    "options",
    "missing_arguments",
    "unknown_arguments",
    "unknown_options",
    "missing_values",
    "missing_options",
))):
    """
    Outcome of one parse: resolved values plus every problem found.

    The problem fields are tuples of names (or raw tokens for unknown
    arguments) in the order they were met on the command line or, for missing
    names, in declaration order.
    """
    __slots__ = ()

    @property
    def ok(self):
        return not any(self[2:])


class Inputs(Mapping):
    """
    Read-only mapping handed to pre_run/run/post_run.

    Besides the Mapping protocol it offers has() and cast() so commands can
    read values without caring whether they came from a token or a default.
    """
    __kind__ = "input"

    def __init__(self, values=(), /):
        self._values = dict(values)

    def __getitem__(self, name):
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"no {self.__kind__} named {name!r}") from None

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"{type(self).__name__}({self._values!r})"

    def __rich_repr__(self):
        yield from self._values.items()

    def has(self, name, /):
        """True when a value was supplied or defaulted (a False flag does not count)."""
        return name in self._values and self._values[name] is not False

    def cast(self, name, type, /):
        """
        Convert a value with `type`.

        Strings cast to bool understand 1/0, true/false, yes/no, on/off, y/n;
        anything else raises ValueError.
        """
        value = self[name]
        if type is bool and isinstance(value, str):
            if (lowered := value.strip().lower()) in _TRUTHY:
                return True
            if lowered in _FALSY:
                return False
            raise ValueError(f"{self.__kind__} {name!r} is not a boolean: {value!r}")
        return type(value)


class Arguments(Inputs):
    __kind__ = "argument"


class Options(Inputs):
    __kind__ = "option"


class Parser:
    """
    Parser bound to the argument/option definitions of one command.

    Parameters
    - arguments: ordered iterable of Argument specs.
    - options: mapping of long name -> Option spec.
    """

    def __init__(self, arguments, options, /):
        self.arguments = tuple(arguments)
        self.options = MappingProxyType(dict(options))
        self.shorts = MappingProxyType({
            option.short: option for option in self.options.values() if option.short is not None
        })

    @classmethod
    def of(cls, command, /):
        return cls(command.arguments, command.options)

    @staticmethod
    def classify(token):
        """
        Split an option token into (long, name, value); None for positionals.

        - long: True for "--name", False for "-n".
        - value: the inline value after "=", or Unset when there is none.
        """
        if token in (PREFIX, PREFIX * 2) or not token.startswith(PREFIX):
            return None
        long = token.startswith(PREFIX * 2)
        name, equals, value = token[2 if long else 1:].partition("=")
        return long, name, value if equals else Unset

    def lookup(self, long, name):
        return self.options.get(name) if long else self.shorts.get(name)

    def parse(self, tokens):
        source = tuple(tokens)
        tokens = deque(source)
        pending = deque(self.arguments)
        arguments = {}
        given = {}
        unknown_arguments = []
        unknown_options = []
        missing_values = []

        while tokens:
            token = tokens.popleft()

            if (match := self.classify(token)) is None:
                if pending:
                    arguments[pending.popleft().name] = token
                else:
                    unknown_arguments.append(token)
                continue

            long, name, value = match
            option = self.lookup(long, name)

            # presence-only options never take a value, not even inline
            if option is None or (not option.has_value and value is not Unset):
                unknown_options.append(name if value is Unset else f"{name}={value}")
                continue

            if not option.has_value:
                given[option.long] = True
            elif value is not Unset:
                given[option.long] = value
            elif tokens and self.classify(tokens[0]) is None:
                given[option.long] = tokens.popleft()
            elif option.long not in missing_values:
                missing_values.append(option.long)

        options = {}
        missing_options = []
        for option in self.options.values():
            if option.long in given:
                options[option.long] = given[option.long]
            elif not option.has_value:
                options[option.long] = False
                if option.required:
                    missing_options.append(option.long)
            elif option.default is not None:
                options[option.long] = option.default
            elif option.required and option.long not in missing_values:
                missing_options.append(option.long)

        result = ParseResult(
            MappingProxyType(arguments),
            MappingProxyType(options),
            tuple(argument.name for argument in pending if argument.required),
            tuple(unknown_arguments),
            tuple(unknown_options),
            tuple(missing_values),
            tuple(missing_options),
        )
        logger.debug("parsed %r into %r", source, result)
        return result


__all__ = (
    "ParseResult",
    "Arguments",
    "Options",
    "Parser",
)
