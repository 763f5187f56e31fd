"""
argcumulus spec registry: the per-parser collection of ArgumentSpecs.

Responsibilities
- Keep specs in declaration order (positional order matters for resolution).
- Index every flag alias and every destination for O(1) lookups while resolving.
- Enforce uniqueness: no two live specs share an alias or a dest (Bool specs also
  reserve their "no_<dest>" complement). A newer registration may replace the
  older ones only with reset=True, which also clears their namespace entries.
- Copy semantics: copy_from(parent) clones every parent spec (copy.replace), so
  later changes on either side never leak into the other.

Registration-time rules
- A greedy positional (nargs="*") must stay the last positional.
- Collisions raise DuplicateArgumentError at the point of registration.
"""
import copy

from .arguments import ArgumentSpec, Kind
from .faults import *
from .utils import *


def _dests(spec, /):
    """
    Namespace keys owned by a spec: its dest, plus "no_<dest>" for Bool.
    """
    if spec.kind is Kind.BOOL:
        return (spec.dest, "no_" + spec.dest)
    return (spec.dest,)


def _clear(namespace, spec, /):
    """
    Drop the namespace entries owned by a spec.

    Namespaces that only implement the accessor contract get None written instead.
    """
    for dest in _dests(spec):
        if callable(getattr(namespace, "del_attr", None)):
            namespace.del_attr(dest)
        else:
            namespace.set_attr(dest, None)


class SpecRegistry:
    """
    Ordered, indexed collection of ArgumentSpecs for one parser level.

    Lookups
    - lookup_by_token("--foo") → spec bound to that alias, or None.
    - lookup("foo")            → spec bound to that dest, or None.
    - positionals / nameds     → specs of each family in declaration order.
    """

    def __init__(self):
        self._specs = []
        self._aliases = {}
        self._dests = {}

    def _collisions(self, spec, /):
        collisions = []
        for name in spec.names:
            if (bound := self._aliases.get(name)) is not None and bound not in collisions:
                collisions.append(bound)
        for dest in _dests(spec):
            if (bound := self._dests.get(dest)) is not None and bound not in collisions:
                collisions.append(bound)
        return collisions

    def _unbind(self, spec, /):
        self._specs.remove(spec)
        for name in spec.names:
            self._aliases.pop(name, None)
        for dest in _dests(spec):
            self._dests.pop(dest, None)

    def register(self, spec, /, *, reset=False, namespace=Unset):
        """
        Add a spec, optionally replacing the specs it collides with.

        Parameters
        - spec: ArgumentSpec
        - reset: bool, replace every colliding spec instead of failing.
        - namespace: the namespace whose entries are cleared on reset (optional).

        Raises
        - DuplicateArgumentError when an alias or dest is already bound and reset is false.
        - TypeError when a positional would follow a greedy ("*") positional.

        Returns
        - the registered spec.
        """
        if not isinstance(spec, ArgumentSpec):
            raise TypeError("register() argument must be an argument-spec")

        collisions = self._collisions(spec)
        if collisions and not reset:
            taken = next(
                key for key in (*spec.names, *_dests(spec))
                if key in self._aliases or key in self._dests
            )
            raise DuplicateArgumentError(
                "argument %r is already defined" % taken,
                title="duplicate argument",
                code=FaultCode.DUPLICATE_ARGUMENT,
                input=taken,
                dest=spec.dest,
                hint="pass reset=True to override the existing definition",
                docs=getdoc(FaultCode.DUPLICATE_ARGUMENT),
            )

        position = len(self._specs)
        if collisions:
            position = min(self._specs.index(bound) for bound in collisions)

        remaining = [bound for bound in self._specs if bound not in collisions]
        if spec.positional:
            before = [bound for bound in remaining[:position] if bound.positional]
            after = [bound for bound in remaining[position:] if bound.positional]
            if any(bound.nargs == "*" for bound in before) or (after and spec.nargs == "*"):
                raise TypeError("argument-spec greedy positional (nargs='*') must be the last positional")

        for bound in collisions:
            self._unbind(bound)
            if namespace is not Unset:
                _clear(namespace, bound)

        self._specs.insert(position, spec)
        for name in spec.names:
            self._aliases[name] = spec
        for dest in _dests(spec):
            self._dests[dest] = spec
        return spec

    def lookup_by_token(self, token, /):
        return self._aliases.get(token)

    def lookup(self, dest, /):
        return self._dests.get(dest)

    @property
    def positionals(self):
        return tuple(spec for spec in self._specs if spec.positional)

    @property
    def nameds(self):
        return tuple(spec for spec in self._specs if not spec.positional)

    def copy_from(self, parent, /):
        """
        Clone every spec of a parent registry into this one.

        A parent spec equal to the one already bound here (for instance the
        built-in --help every parser starts with) is skipped; any other
        collision raises DuplicateArgumentError.
        """
        if not isinstance(parent, SpecRegistry):
            raise TypeError("copy_from() argument must be a spec-registry")
        for spec in parent:
            if any(bound == spec for bound in self._collisions(spec)):
                continue
            self.register(copy.replace(spec))

    def __iter__(self):
        return iter(tuple(self._specs))

    def __len__(self):
        return len(self._specs)

    def __contains__(self, object, /):
        if isinstance(object, ArgumentSpec):
            return object in self._specs
        return object in self._aliases or object in self._dests

    def __repr__(self):
        return "spec-registry(%s)" % ", ".join(repr(spec.dest) for spec in self._specs)


__all__ = (
    "SpecRegistry",
)
