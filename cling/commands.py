"""
Cling command layer: declare, compose, and run CLI commands.

What this module provides
- Command: abstract tree node. A concrete command subclasses it, fills in its
  name, display metadata, arguments and options in setup(), and implements
  run(). pre_run() and post_run() are optional.
  • Hierarchies (parent/child) model subcommands; children are reachable by
    name and by alias.
  • Border inheritance copies the parent's header/footer into the child on
    attach; option inheritance adds the parent's options the child lacks.
  • Replaceable hooks for every input fault category and for runtime errors.

- Factories and helpers:
  • command(...): wrap a plain callable as a Command (or return a decorator).
  • invoke(cmd, prompt): run a command from argv or a shell-like string,
    rendering faults with rich when the command is in shell mode.

Quick start
    from cling import Command, invoke

    class Greet(Command):
        def setup(self):
            self.name = "greet"
            self.summary = "say hello"
            self.add_argument("name", required=True)
            self.add_option("caps", short="c", description="shout it")

        def run(self, arguments, options):
            greeting = "hello, %s" % arguments["name"]
            print(greeting.upper() if options["caps"] else greeting)

    invoke(Greet(), "Dev -c")

Notes
- Trees are built once (setup + add_command) and then only read; see
  cling.executor for the lifecycle and concurrency rules.
- arguments/options/children are exposed as read-only views; mutate them only
  through add_argument/add_option/add_command.
"""
import abc
import inspect
import logging
import shlex
import sys
import weakref
from collections.abc import Iterable

from rich.console import Console

from . import hooks
from .arguments import Argument, Option
from .executor import Executor
from .faults import (
    CommandException,
    DuplicateArgumentError,
    DuplicateOptionError,
    DuplicateShortOptionError,
    DuplicateCommandError,
    AttachedCommandError,
    MissingNameError,
    trigger,
)
from .utils import *

logger = logging.getLogger(__name__)


def _hook(kind):
    """
    Build the public setter for one hook category.

    The setter stores the callback and hands it back, so it can be used
    directly (cmd.on_error(handler)) or as a decorator (@cmd.on_error).
    """

    @rename("on_" + kind)
    def setter(self, callback, /):
        if not callable(callback):
            raise TypeError(f"{type(self).__name__} 'on_{kind}' callback must be callable")
        self._hooks[kind] = callback
        return callback

    setter.__doc__ = f"Replace the {kind.replace('_', ' ')} hook; returns the callback."
    return setter


class Command(abc.ABC):
    """
    One node of a command tree.

    Responsibilities
    - Identity: name (required before execute) and aliases.
    - Display metadata for the help collaborator: header, summary,
      description, footer, usage lines, hidden.
    - Definitions: ordered arguments and options keyed by long name.
    - Composition: children keyed by name and alias, weak parent reference.
    - Behavior: pre_run/run/post_run plus one hook per fault category.

    Runtime flags (shell, fancy, colorful) and streams (stdin, stdout,
    stderr) left unset are taken from the parent when attached; unattached
    they fall back to False and the sys streams.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "summary",
        "arguments",
        "options",
        "children",
        "hidden",
    )

    arguments = property(rename(lambda self: tuple(self._arguments.values()), "arguments"))
    options = mirror("options")
    children = mirror("children")
    hooks = mirror("hooks")

    def __init__(
            self,
            *,
            name=Unset,
            aliases=(),
            usage=(),
            header=None,
            summary=None,
            description=None,
            footer=None,
            hidden=False,
            inherit_borders=True,
            inherit_options=True,
            shell=Unset,
            fancy=Unset,
            colorful=Unset,
            stdin=Unset,
            stdout=Unset,
            stderr=Unset
    ):
        self._name = Unset
        if name is not Unset:
            self.name = name
        self.aliases = list(aliases)
        self.usage = list(usage)
        self.header = header
        self.summary = summary
        self.description = description
        self.footer = footer
        self.hidden = bool(hidden)
        self.inherit_borders = bool(inherit_borders)
        self.inherit_options = bool(inherit_options)

        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr

        self._parent = None
        self._children = {}
        self._arguments = {}
        self._options = {}
        self._hooks = {
            "error": hooks.raise_error,
            "missing_arguments": hooks.raise_missing_arguments,
            "unknown_arguments": hooks.raise_unknown_arguments,
            "missing_options": hooks.raise_missing_options,
            "unknown_options": hooks.raise_unknown_options,
            "missing_values": hooks.raise_missing_values,
        }

        self.setup()

    # ── Identity ──────────────────────────────────────────────────────────

    @property
    def name(self):
        if self._name is Unset:
            raise MissingNameError("No name has been set for command")
        return self._name

    @name.setter
    def name(self, name):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__name__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__name__} 'name' cannot be empty")
        self._name = name

    @property
    def parent(self):
        """The command this one is attached to (weak reference), or None."""
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """Ancestry from the root to this command, as a tuple."""
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def commands(self):
        """Distinct children in attach order (aliases collapsed)."""
        return tuple(dict.fromkeys(self._children.values()))

    # ── Runtime flags and streams ─────────────────────────────────────────

    shell = property(rename(lambda self: bool(coalesce(self._shell, False)), "shell"))
    fancy = property(rename(lambda self: bool(coalesce(self._fancy, False)), "fancy"))
    colorful = property(rename(lambda self: bool(coalesce(self._colorful, False)), "colorful"))

    stdin = property(rename(lambda self: coalesce(self._stdin, sys.stdin), "stdin"))
    stdout = property(rename(lambda self: coalesce(self._stdout, sys.stdout), "stdout"))
    stderr = property(rename(lambda self: coalesce(self._stderr, sys.stderr), "stderr"))

    @property
    def console(self):
        """Rich console over this command's error stream (faults are rendered here)."""
        return Console(file=self.stderr)

    # ── Setup ─────────────────────────────────────────────────────────────

    @abc.abstractmethod
    def setup(self):
        """Populate name, metadata, arguments and options. Called once by __init__."""

    def add_argument(self, argument, /, *args, **kwargs):
        """
        Declare the next positional argument.

        Accepts an Argument or the parameters to build one
        (name, description=..., required=...). Returns the spec.
        """
        if not isinstance(argument, Argument):
            argument = Argument(argument, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("add_argument() takes no extra parameters with an argument spec")

        if argument.name in self._arguments:
            raise DuplicateArgumentError(f"Duplicate argument {argument.name!r}", names=(argument.name,))
        self._arguments[argument.name] = argument
        return argument

    def add_option(self, option, /, *args, **kwargs):
        """
        Declare an option.

        Accepts an Option or the parameters to build one
        (long, short=..., description=..., required=..., has_value=..., default=...).
        Returns the spec.
        """
        if not isinstance(option, Option):
            option = Option(option, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("add_option() takes no extra parameters with an option spec")

        if option.long in self._options:
            raise DuplicateOptionError(f"Duplicate flag option {option.long!r}", names=(option.long,))
        if option.short is not None:
            for other in self._options.values():
                if other.short == option.short:
                    raise DuplicateShortOptionError(
                        f"Flag {other.long!r} already has the short option {option.short!r}",
                        names=(other.long, option.long),
                    )
        self._options[option.long] = option
        return option

    def add_command(self, command, /):
        """
        Attach `command` as a child. Permanent; there is no detach.

        Raises
        - TypeError when `command` is not a Command.
        - AttachedCommandError when it already has a parent or is an ancestor.
        - DuplicateCommandError when its name or an alias is taken.
        The tree is left untouched when anything is raised.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__name__} children must be commands")

        names = tuple(dict.fromkeys((command.name, *command.aliases)))

        if command.parent is not None:
            raise AttachedCommandError(
                f"Command {command.name!r} is already attached to {command.parent.name!r}",
                names=(command.name,),
            )
        if command in self.path:
            raise AttachedCommandError(
                f"Command {command.name!r} cannot be attached below itself",
                names=(command.name,),
            )
        for name in names:
            if name in self._children:
                raise DuplicateCommandError(f"Duplicate command {name!r}", names=(name,))

        command._parent = weakref.ref(self)

        if command.inherit_borders:
            command.header = self.header
            command.footer = self.footer

        if command.inherit_options:
            shorts = {option.short for option in command._options.values() if option.short is not None}
            for long, option in self._options.items():
                if long in command._options:
                    continue
                if option.short is not None and option.short in shorts:
                    logger.debug("%s: skipped inherited option %r, short name taken", command.name, long)
                    continue
                command._options[long] = option

        for field in ("_shell", "_fancy", "_colorful", "_stdin", "_stdout", "_stderr"):
            if getattr(command, field) is Unset:
                setattr(command, field, getattr(self, field))

        self._children.update(dict.fromkeys(names, command))
        logger.debug("attached %r under %r as %r", command.name, self.name, names)
        return command

    def add_commands(self, *commands):
        for command in commands:
            self.add_command(command)

    def command(self, source=Unset, /, **kwargs):
        """Create a callback command (see command()) attached under this one."""
        return command(source, parent=self, **kwargs)

    # ── Hooks ─────────────────────────────────────────────────────────────

    on_error = _hook("error")
    on_missing_arguments = _hook("missing_arguments")
    on_unknown_arguments = _hook("unknown_arguments")
    on_missing_options = _hook("missing_options")
    on_unknown_options = _hook("unknown_options")
    on_missing_values = _hook("missing_values")

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def pre_run(self, arguments, options):
        """Runs before run(); return False to stop (e.g. after printing help)."""

    @abc.abstractmethod
    def run(self, arguments, options):
        """The command's behavior."""

    def post_run(self, arguments, options):
        """Runs after run() succeeded."""

    def execute(self, tokens, /):
        """
        Resolve, parse, validate and run `tokens` (argv without the program name).

        Returns None. Faults not recovered by a hook propagate to the caller.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("execute() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("execute() argument must be an iterable of strings")
        Executor(self).execute(tokens)

    # ── Representation ────────────────────────────────────────────────────

    def __repr__(self):
        return f"{type(self).__name__}(name={coalesce(self._name)!r})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            if name == "name":
                yield name, coalesce(self._name)
            elif name == "children":
                yield name, tuple(self._children)
            else:
                yield name, getattr(self, name)


class CallbackCommand(Command):
    """
    Command whose run() forwards to a plain callable.

    The callable receives (arguments, options). Specs are given up front and
    declared during setup().
    """

    def __init__(self, callback, /, arguments=(), options=(), **metadata):
        if not callable(callback):
            raise TypeError(f"{type(self).__name__} callback must be callable")
        self._callback = callback
        self._declared = (tuple(arguments), tuple(options))
        super().__init__(**metadata)

    def setup(self):
        arguments, options = self._declared
        for argument in arguments:
            self.add_argument(argument)
        for option in options:
            self.add_option(option)

    def run(self, arguments, options):
        return self._callback(arguments, options)


def command(source=Unset, /, *, parent=Unset, **kwargs):
    """
    Create a CallbackCommand or return a decorator to build it later.

    Invocation modes
    - Direct:    cmd = command(func, name="x", arguments=[...])
    - Decorator: @command(name="x", options=[Option("caps", short="c")])

    Defaults
    - name: the callable's __name__.
    - description: the callable's docstring.
    - parent: when given, the new command is attached under it.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        metadata = {
            "name": getattr(source, "__name__", Unset),
            "description": inspect.getdoc(source),
        } | kwargs
        self = CallbackCommand(source, **metadata)
        if parent is not Unset:
            parent.add_command(self)
        return self

    return wrapper(source) if source is not Unset else wrapper


def invoke(command, prompt=Unset, /):
    """
    Run a command the way a shell entry point would.

    Parameters
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: pre-tokenized sequence.

    In shell mode faults are rendered on the command's error console and the
    process exits with status 1; otherwise they propagate.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    else:
        tokens = prompt

    try:
        command.execute(tokens)
    except CommandException as exception:
        if not command.shell:
            raise
        trigger(
            exception,
            tool=command,
            shell=True,
            fancy=command.fancy,
            colorful=command.colorful,
            console=command.console,
        )


__all__ = (
    "Command",
    "CallbackCommand",
    "command",
    "invoke",
)
