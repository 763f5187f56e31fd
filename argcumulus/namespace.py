"""
argcumulus namespace: the accumulative result store.

Scope
- Namespace maps destination names to parsed values:
  • Scalar → str (or the default), Bool → bool with a complementary "no_<dest>",
    Count → int >= 0, Array → list (appended across calls), Pair → dict (merged).
- Two reserved entries are exposed as properties:
  • current_command: the most recently dispatched subcommand.
  • help_command: the argument given to the implicit 'help' subcommand.

Accessor contract
- The resolver only ever calls construct(), set_attr(dest, value) and
  get_attr(dest, default=None). Any object implementing those three may be
  handed to a Parser instead of a Namespace.

Lifecycle
- Created empty with its parser, or supplied pre-populated by the caller (for
  example with values loaded from configuration files).
- Mutated by the resolver during parse calls; lives as long as the parser.
- Not synchronized: concurrent parse calls on one namespace are the caller's
  responsibility.
"""
from collections.abc import Mapping


class Namespace:
    """
    Explicit mapping from destination names to values.

    Values are read and written by key (ns["verbose"], ns.get_attr("verbose"));
    there is no attribute-style access generated from destination names.
    """
    __slots__ = ("_values",)

    def __init__(self, values=(), /, **entries):
        if not isinstance(values, Mapping | tuple | list):
            raise TypeError("Namespace() argument must be a mapping or an iterable of pairs")
        self._values = {}
        for dest, value in (dict(values) | entries).items():
            self.set_attr(dest, value)

    @classmethod
    def construct(cls):
        """
        Return a fresh, empty namespace.
        """
        return cls()

    def set_attr(self, dest, value, /):
        if not isinstance(dest, str) or not dest:
            raise TypeError("namespace keys must be non-empty strings")
        self._values[dest] = value

    def get_attr(self, dest, default=None, /):
        return self._values.get(dest, default)

    def del_attr(self, dest, /):
        """
        Remove an entry; missing entries are ignored.
        """
        self._values.pop(dest, None)

    @property
    def current_command(self):
        return self._values.get("current_command")

    @property
    def help_command(self):
        return self._values.get("help_command")

    def to_dict(self):
        """
        Shallow copy of the stored values.
        """
        return dict(self._values)

    def __getitem__(self, dest, /):
        return self._values[dest]

    def __contains__(self, dest, /):
        return dest in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, Namespace):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return "namespace(%s)" % ", ".join("%s=%r" % item for item in self._values.items())

    def __rich_repr__(self):
        yield from self._values.items()


__all__ = (
    "Namespace",
)
