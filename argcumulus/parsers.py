"""
argcumulus parser facade.

A Parser owns one level of the command line:
- a SpecRegistry (its arguments, starting with the built-in --help/-h Bool),
- a SubcommandRouter (its subcommands, once add_subparsers() was called),
- a Namespace shared with every subparser it creates,
- the runtime flags subparsers inherit (shell, colorful, fancy, error_prefix,
  print_usage_if_help).

Typical use:
    parser = Parser(prog="tool")
    parser.add_argument("--verbose", "-v", kind="Count")
    parser.add_subparsers()
    listing = parser.add_parser("list", aliases=["ls"], help="list entries")
    listing.add_argument("--long", "-l", kind="Bool")
    namespace = parser.parse_args("list -l")
    namespace.current_command, namespace["long"]  # ('list', True)

Values accumulate across parse_args() calls on the same parser.

Faults
- Registration problems (duplicate arguments or subcommands, malformed specs)
  are raised directly from add_argument()/add_parser().
- Parse-time faults go through trigger(), which decorates them with this
  parser's prog, error prefix and ui flags. Without shell mode they are raised;
  in shell mode the usage and the fault are printed to stderr and the process
  exits with status 1.
"""
import difflib
import os
import shlex
import sys
from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.text import Text

from .arguments import ArgumentSpec
from .faults import *
from .faults import console
from .formatter import format_usage, format_command_usage
from .namespace import Namespace
from .registry import SpecRegistry
from .resolver import resolve
from .router import SubcommandRouter
from .utils import *


def _sanitize_text(name, value, /):
    if not isinstance(value, str | Text | Unset):
        raise TypeError(f"Parser '{name}' must be a string")
    if isinstance(value, str):
        value = value.strip()
    return value or None


class Parser:
    """
    Command-line parser: argument specs, subcommands and the namespace they fill.

    Parameters
    - prog: program name shown in usage (defaults to the basename of sys.argv[0]).
    - help: one-line summary; description: longer paragraph; epilog: footer.
    - namespace: object implementing the accessor contract (construct, set_attr,
      get_attr); a fresh Namespace by default.
    - parents: parsers whose arguments and subcommands are copied (see copy()).
    - error_prefix: text prefixed to fault messages (default "argcumulus: ").
    - print_usage_if_help: print usage after a parse that set 'help' or ran the
      'help' command.
    - shell: print faults (and usage) then exit instead of raising.
    - colorful / fancy: rich styling of usage and faults.
    """

    def __init__(
            self,
            prog=Unset,
            help=Unset,
            description=Unset,
            epilog=Unset,
            namespace=Unset,
            parents=(),
            error_prefix=Unset,
            print_usage_if_help=True,
            *,
            shell=False,
            colorful=False,
            fancy=False,
    ):
        if not isinstance(prog, str | Unset):
            raise TypeError("Parser 'prog' must be a string")
        self._prog = coalesce(prog, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argcumulus")
        self._help = _sanitize_text("help", help)
        self._description = _sanitize_text("description", description)
        self._epilog = _sanitize_text("epilog", epilog)

        if namespace is Unset:
            namespace = Namespace.construct()
        elif not all(callable(getattr(namespace, name, None)) for name in ("set_attr", "get_attr")):
            raise TypeError("Parser 'namespace' must implement set_attr() and get_attr()")
        self._namespace = namespace

        if not isinstance(error_prefix, str | Unset):
            raise TypeError("Parser 'error_prefix' must be a string")
        self._error_prefix = coalesce(error_prefix, "argcumulus: ")
        self._print_usage_if_help = bool(print_usage_if_help)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

        self._registry = SpecRegistry()
        self._router = SubcommandRouter()
        self._parent = None
        self._argv = []

        self.add_argument("--help", "-h", kind="Bool", help="show this help message")

        if isinstance(parents, Parser):
            parents = (parents,)
        for parent in parents:
            self.copy(parent)

    prog = property(lambda self: self._prog)
    help = property(lambda self: self._help)
    description = property(lambda self: self._description)
    epilog = property(lambda self: self._epilog)
    namespace = property(lambda self: self._namespace)
    registry = property(lambda self: self._registry)
    router = property(lambda self: self._router)
    parent = property(lambda self: self._parent)
    error_prefix = property(lambda self: self._error_prefix)
    print_usage_if_help = property(lambda self: self._print_usage_if_help)
    shell = property(lambda self: self._shell)
    colorful = property(lambda self: self._colorful)
    fancy = property(lambda self: self._fancy)

    @property
    def argv(self):
        """
        Leftover tokens of the last parse_args() call.
        """
        return list(self._argv)

    def _inherited(self, **overrides):
        return {
            "namespace": self._namespace,
            "error_prefix": self._error_prefix,
            "print_usage_if_help": self._print_usage_if_help,
            "shell": self._shell,
            "colorful": self._colorful,
            "fancy": self._fancy,
        } | overrides

    def add_argument(self, *names, reset=False, **options):
        """
        Register one argument.

        Accepts either names plus ArgumentSpec keyword metadata, or a single
        prebuilt ArgumentSpec. With reset=True the argument replaces every
        existing one it collides with, and their namespace entries are removed.

        Returns the registered ArgumentSpec.
        """
        if len(names) == 1 and isinstance(names[0], ArgumentSpec):
            if options:
                raise TypeError("add_argument() takes no options along with an argument-spec")
            spec, = names
        else:
            spec = ArgumentSpec(*names, **options)
        return self._registry.register(spec, reset=reset, namespace=self._namespace)

    def add_arguments(self, *entries):
        """
        Register several arguments at once.

        Each entry is an ArgumentSpec or a sequence of names optionally ending
        with a mapping of options: ("--foo", "-f", {"kind": "Bool"}).
        """
        specs = []
        for entry in entries:
            if isinstance(entry, ArgumentSpec):
                specs.append(self.add_argument(entry))
            elif isinstance(entry, Iterable) and not isinstance(entry, str | Mapping):
                names, options = tuple(entry), {}
                if names and isinstance(names[-1], Mapping):
                    *names, options = names
                specs.append(self.add_argument(*names, **options))
            else:
                raise TypeError("add_arguments() entries must be argument-specs or sequences of names and options")
        return specs

    def add_subparsers(self, title=Unset, description=Unset):
        """
        Turn on subcommand dispatch (idempotent).

        Binds the implicit 'help' command. Not allowed on a subparser: there is
        only one level of subcommands.
        """
        if self._parent is not None:
            raise ValueError("subparser %r cannot have subcommands" % self._prog)
        if not self._router.enabled:
            self._router.enable(
                title,
                description,
                self._help_command,
                **self._inherited(prog="%s help" % self._prog),
            )
            self._router.resolve("help").parser._parent = self
        return self

    def add_parser(self, name, aliases=(), help=Unset, description=Unset, parents=(), epilog=Unset):
        """
        Create, bind and return a subparser sharing this parser's namespace and flags.

        Raises
        - ValueError when add_subparsers() was not called first, or when a parent
          would give the subparser subcommands of its own.
        - DuplicateSubcommandError when the name or an alias is already bound.
        """
        if not self._router.enabled:
            raise ValueError("add_subparsers() must be called before add_parser()")
        child = Parser(
            help=help,
            description=description,
            epilog=epilog,
            **self._inherited(prog="%s %s" % (self._prog, name)),
        )
        child._parent = self
        if isinstance(parents, Parser):
            parents = (parents,)
        for parent in parents:
            child.copy(parent)
        self._router.add(name, aliases, child, help=child.help)
        return child

    def copy_args(self, parent, /):
        """
        Clone the argument specs of another parser into this one.
        """
        if not isinstance(parent, Parser):
            raise TypeError("copy_args() argument must be a Parser")
        self._registry.copy_from(parent.registry)
        return self

    def copy_parsers(self, parent, /):
        """
        Share the subcommands of another parser (child parsers by reference).
        """
        if not isinstance(parent, Parser):
            raise TypeError("copy_parsers() argument must be a Parser")
        if parent.router.enabled:
            self.add_subparsers(parent.router.title, parent.router.description)
            self._router.copy_from(parent.router)
        return self

    def copy(self, parent, /):
        """
        copy_args() then copy_parsers().
        """
        return self.copy_args(parent).copy_parsers(parent)

    def parse_args(self, tokens=Unset):
        """
        Parse tokens into the namespace and return it.

        Parameters
        - tokens:
          • Unset: sys.argv[1:].
          • str: split with shlex.split.
          • Iterable[str]: used as given.

        Leftover tokens (unknown flags, extra values) are kept in argv.
        """
        if tokens is Unset:
            tokens = sys.argv[1:]
        elif isinstance(tokens, str):
            tokens = shlex.split(tokens)
        elif isinstance(tokens, Iterable):
            tokens = list(tokens)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse_args() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse_args() argument must be a string or an iterable of strings")

        try:
            outcome = resolve(
                tokens,
                self._namespace,
                self._registry,
                self._router if self._router.enabled else Unset,
            )
        except ParserException as fault:
            self.trigger(fault)

        self._argv = outcome.leftover
        if self._print_usage_if_help and outcome.help:
            if outcome.command is not None:
                self.print_command_usage(outcome.command)
            else:
                self.print_usage()
            if self._shell:
                sys.exit(0)
        return outcome.namespace

    def _help_command(self, namespace, /):
        if not self._print_usage_if_help:
            return
        if namespace.get_attr("all") is True:
            self.print_usage()
            for binding in self._router:
                if binding.name != "help":
                    Console().print()
                    self.print_command_usage(binding.name)
        elif command := namespace.get_attr("help_command"):
            self.print_command_usage(command)
        else:
            self.print_usage()
        if self._shell:
            sys.exit(0)

    def format_usage(self):
        """
        Usage of this parser as a list of rich Text lines.
        """
        return format_usage(
            self._registry,
            self._router,
            prog=self._prog,
            help=self._help,
            description=self._description,
            epilog=self._epilog,
            colorful=self._colorful,
        )

    def print_usage(self, *, stderr=False):
        Console(stderr=stderr).print(Text("\n").join(self.format_usage()))

    def format_command_usage(self, command, /):
        """
        Usage of one subcommand (by name or alias) as a list of rich Text lines.

        An unknown command is surfaced as an UnknownSubcommandError.
        """
        if (binding := self._router.resolve(command)) is None:
            suggestions = difflib.get_close_matches(command, self._router.names, 5)
            self.trigger(UnknownSubcommandError(
                "unknown command %r" % command,
                title="unknown command",
                code=FaultCode.UNKNOWN_SUBCOMMAND,
                input=command,
                suggestions=tuple(suggestions),
                hint=(
                    "did you mean %s?" % " or ".join(map(repr, suggestions))
                    if suggestions else
                    "run '%s help' to list the available commands" % self._prog
                ),
                docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
            ))
        return format_command_usage(binding, prog=self._prog, colorful=self._colorful)

    def print_command_usage(self, command=Unset, /, *, stderr=False):
        """
        Print the usage of a subcommand.

        Without an explicit command, help_command then current_command from the
        namespace are used; with neither, the usage of this parser is printed.
        """
        command = (
            coalesce(command)
            or self._namespace.get_attr("help_command")
            or self._namespace.get_attr("current_command")
        )
        if not command:
            return self.print_usage(stderr=stderr)
        Console(stderr=stderr).print(Text("\n").join(self.format_command_usage(command)))

    def trigger(self, fault, /, **options):
        """
        Surface a fault decorated with this parser's prog, prefix and ui flags.

        In shell mode an exception is preceded by usage on stderr: the failing
        subcommand's when options["command"] names one, this parser's otherwise.
        """
        if self._shell and isinstance(fault, ParserException):
            if (command := fault.options.get("command")) in self._router:
                usage = format_command_usage(self._router.resolve(command), prog=self._prog, colorful=self._colorful)
            else:
                usage = self.format_usage()
            console.print(Text("\n").join(usage))
            console.print()
        trigger(
            fault,
            prog=self._prog,
            prefix=self._error_prefix,
            shell=self._shell,
            colorful=self._colorful,
            fancy=self._fancy,
            **options,
        )

    def __repr__(self):
        return "parser(prog=%r, arguments=%d, subcommands=%d)" % (self._prog, len(self._registry), len(self._router))

    def __rich_repr__(self):
        yield "prog", self._prog
        yield "registry", self._registry
        yield "router", self._router
        yield "namespace", self._namespace


__all__ = (
    "Parser",
)
