"""
argcumulus subcommand router: the one-level table of subcommands of a parser.

Bindings
- Each binding ties a canonical name (plus aliases) to a child parser and a
  short help string. Names and aliases share one lookup table; rebinding any of
  them is a DuplicateSubcommandError (there is no reset for subcommands).
- Child parsers are held by reference: copying a router shares the children.

The implicit 'help' command
- enable() turns the router on and binds 'help' once. Its parser takes an
  optional COMMAND positional stored in 'help_command' and a Bool '--all/-a'.
- After 'help' is resolved, the helper callback given to enable() is called
  with a read view (get_attr) of the pending values; they are written to the
  namespace only once the helper returns (the owning parser uses it to print usage).
"""
import collections

from .faults import *
from .utils import *


Binding = collections.namedtuple("Binding", ("name", "aliases", "parser", "help"))


class SubcommandRouter:
    """
    Ordered table of subcommand bindings.

    Attributes
    - enabled: bool, whether subcommand dispatch is on.
    - title / description: headings used by help output.
    - helper: callable(view) invoked after the 'help' command (or None); view
      exposes get_attr() over the values about to be committed.
    - names: every bound name and alias, in binding order.
    """

    def __init__(self):
        self._bindings = {}
        self._lookup = {}
        self._enabled = False
        self._title = None
        self._description = None
        self._helper = None

    @property
    def enabled(self):
        return self._enabled

    @property
    def title(self):
        return self._title

    @property
    def description(self):
        return self._description

    @property
    def helper(self):
        return self._helper

    @property
    def names(self):
        return tuple(self._lookup)

    def enable(self, title=Unset, description=Unset, helper=Unset, /, **options):
        """
        Turn dispatch on and bind the implicit 'help' command.

        Re-enabling an enabled router is a no-op. Extra keyword options are handed
        to the Parser built for the 'help' command (prog, colorful, ...).
        """
        if self._enabled:
            return
        from .parsers import Parser

        self._enabled = True
        self._title = coalesce(title, "subcommands")
        self._description = coalesce(description)
        self._helper = coalesce(helper)

        parser = Parser(**{"help": "display help information"} | options)
        parser.add_argument(
            "command",
            dest="help_command",
            nargs="?",
            metavar="COMMAND",
            help="show the usage of this command",
        )
        parser.add_argument("--all", "-a", kind="Bool", help="show the usage of every command")
        self.add("help", (), parser, help="display help information")

    def add(self, name, aliases, parser, /, help=Unset):
        """
        Bind a child parser under a name and its aliases.

        Raises
        - DuplicateSubcommandError when the name or an alias is already bound.
        - TypeError / ValueError on malformed names.
        """
        if isinstance(aliases, str):
            aliases = (aliases,)
        for token in (name, *aliases):
            if not isinstance(token, str):
                raise TypeError("subcommand names must be strings")
            elif not token.strip() or flagged(token) or any(character.isspace() for character in token):
                raise ValueError("subcommand name %r is not valid" % token)
        if len(set(tokens := (name, *aliases))) != len(tokens):
            raise ValueError("subcommand %r lists the same name twice" % name)
        for token in tokens:
            if token in self._lookup:
                raise DuplicateSubcommandError(
                    "subcommand %r is already defined" % token,
                    title="duplicate subcommand",
                    code=FaultCode.DUPLICATE_SUBCOMMAND,
                    input=token,
                    hint="subcommands cannot be redefined; pick another name or alias",
                    docs=getdoc(FaultCode.DUPLICATE_SUBCOMMAND),
                )

        binding = Binding(name, tuple(aliases), parser, coalesce(help))
        self._bindings[name] = binding
        for token in tokens:
            self._lookup[token] = name
        return binding

    def resolve(self, token, /):
        """
        Canonical binding for a name or alias, or None.
        """
        if (name := self._lookup.get(token)) is None:
            return None
        return self._bindings[name]

    def canonical(self, token, /):
        return self._lookup.get(token)

    def copy_from(self, parent, /, **options):
        """
        Share every binding of another router (children by reference).

        The router is enabled first when needed, with the parent's headings and
        the keyword options (helper plus the 'help' parser options). The
        parent's 'help' binding is never copied.
        """
        if not isinstance(parent, SubcommandRouter):
            raise TypeError("copy_from() argument must be a subcommand-router")
        if not parent.enabled:
            return
        helper = options.pop("helper", Unset)
        self.enable(parent.title, parent.description, helper, **options)
        for binding in parent:
            if binding.name == "help":
                continue
            self.add(binding.name, binding.aliases, binding.parser, help=binding.help)

    def __iter__(self):
        return iter(tuple(self._bindings.values()))

    def __len__(self):
        return len(self._bindings)

    def __contains__(self, token, /):
        return token in self._lookup

    def __repr__(self):
        return "subcommand-router(%s)" % ", ".join(repr(name) for name in self._bindings)


__all__ = (
    "Binding",
    "SubcommandRouter",
)
