"""
Cling faults (definition and input errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by domain so logs and searches stay predictable, and they double as
  the tag of the fault taxonomy.
- CommandException: base type that carries message + options and knows how to
  render itself (rich) or raise itself (plain Python).
- DefinitionError family: programmer errors found while building the tree
  (duplicate names, re-attachment, unnamed commands). Always raised at once,
  never routed through a hook.
- InputError family: user input errors found while parsing (missing/unknown
  arguments and options, missing option values). Raised by the default hooks.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Default hooks build an InputError with an enumerated, pluralized message and
  raise it; the invoke() helper catches faults and calls trigger() so shell
  programs get a rendered message and exit status 1 instead of a traceback.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping
    - definition (111xx)
      • DUPLICATE_ARGUMENT, DUPLICATE_OPTION, DUPLICATE_SHORT_OPTION,
        DUPLICATE_COMMAND, ATTACHED_COMMAND, MISSING_NAME
    - input (121xx)
      • MISSING_ARGUMENTS, UNKNOWN_ARGUMENTS (positionals)
      • MISSING_OPTIONS, UNKNOWN_OPTIONS, MISSING_VALUES (options)

    normalize() lets the host remap codes to its own labels while the numeric
    identity stays fixed.
    """
    # --- definition errors (111xx) ---
    DUPLICATE_ARGUMENT     = 11101
    DUPLICATE_OPTION       = 11102
    DUPLICATE_SHORT_OPTION = 11103
    DUPLICATE_COMMAND      = 11104
    ATTACHED_COMMAND       = 11105
    MISSING_NAME           = 11106

    # --- input errors: positionals (1210x) ---
    MISSING_ARGUMENTS      = 12101
    UNKNOWN_ARGUMENTS      = 12102

    # --- input errors: options (1211x) ---
    MISSING_OPTIONS        = 12111
    UNKNOWN_OPTIONS        = 12112
    MISSING_VALUES         = 12113

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base fault: a message plus read-only rendering/context options.

    Subclasses declare `code`, `title` and `hint` as class attributes; any of
    them can be overridden per instance through options. Common options
    - names: tuple of offending names (input errors)
    - tool: the command the fault belongs to (used for the program name)
    - shell, fancy, colorful: rendering switches consumed by trigger()
    """
    code = Unset
    title = "command error"
    hint = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "code": type(self).code,
            "title": type(self).title,
            "hint": type(self).hint,
        } | options)

    def __str__(self):
        return self.message

    @property
    def names(self):
        return tuple(self.options.get("names", ()))

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        tool = self.options.get("tool")
        prog = getattr(main, "__prog__", tool.root.name if tool is not None else "cling")

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.options["code"].normalize() if self.options["code"] else "", "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        body = [text(self.message, "error-message")]
        if hint := coalesce(self.options["hint"]):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DefinitionError(CommandException, ValueError):
    """Invalid command tree (programmer error); never passed through a hook."""
    title = "invalid definition"


class DuplicateArgumentError(DefinitionError):
    code = FaultCode.DUPLICATE_ARGUMENT
    title = "duplicate argument"
    hint = "each argument name can be declared only once per command"


class DuplicateOptionError(DefinitionError):
    code = FaultCode.DUPLICATE_OPTION
    title = "duplicate option"
    hint = "each option long name can be declared only once per command"


class DuplicateShortOptionError(DefinitionError):
    code = FaultCode.DUPLICATE_SHORT_OPTION
    title = "duplicate short option"
    hint = "pick another short name or drop it"


class DuplicateCommandError(DefinitionError):
    code = FaultCode.DUPLICATE_COMMAND
    title = "duplicate command"
    hint = "command names and aliases must be unique among siblings"


class AttachedCommandError(DefinitionError):
    code = FaultCode.ATTACHED_COMMAND
    title = "command already attached"
    hint = "a command can have a single parent"


class MissingNameError(DefinitionError):
    code = FaultCode.MISSING_NAME
    title = "missing command name"
    hint = "set 'name' in the command setup"


class InputError(CommandException):
    """Invalid user input; raised by the default validation hooks."""
    title = "invalid input"


class MissingArgumentsError(InputError):
    code = FaultCode.MISSING_ARGUMENTS
    title = "missing arguments"
    hint = "add the missing values in the declared order"


class UnknownArgumentsError(InputError):
    code = FaultCode.UNKNOWN_ARGUMENTS
    title = "unknown arguments"
    hint = "remove the extra values"


class MissingOptionsError(InputError):
    code = FaultCode.MISSING_OPTIONS
    title = "missing options"
    hint = "add the required options"


class UnknownOptionsError(InputError):
    code = FaultCode.UNKNOWN_OPTIONS
    title = "unknown options"
    hint = "check the spelling of the options"


class MissingValuesError(InputError):
    code = FaultCode.MISSING_VALUES
    title = "missing values"
    hint = "pass a value after the option (--name value or --name=value)"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console and the process exits
      with status 1; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandException",
    "DefinitionError",
    "DuplicateArgumentError",
    "DuplicateOptionError",
    "DuplicateShortOptionError",
    "DuplicateCommandError",
    "AttachedCommandError",
    "MissingNameError",
    "InputError",
    "MissingArgumentsError",
    "UnknownArgumentsError",
    "MissingOptionsError",
    "UnknownOptionsError",
    "MissingValuesError",
    "trigger",
    "getdoc",
)
