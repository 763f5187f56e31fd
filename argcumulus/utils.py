"""
argcumulus utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the arguments, registry, resolver and parser layers.
- Public-but-internal leaning: importable, but designed to support the higher-level
  modules rather than end users.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None (None is a valid default).
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- @rename("name")
  • Pin __name__/__qualname__ on callables generated at class-creation time.

- mirror("attr")
  • Read-only property over a private backing field (self._attr), returning
    immutable views for containers.

- normalize(name) / flagged(token)
  • Destination-name derivation ("--dry-run" → "dry_run") and flag-shape detection.
"""
import functools
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used where None is a legitimate user value (a default of None, a namespace
    entry holding None) and the API still needs to tell “not provided” apart.

    Characteristics
    - Boolean-false, but distinct from None and 0.
    - repr(Unset) -> "Unset".
    - Sealed and process-wide singleton.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns object unless it is Unset, in which case default is returned.
    Falsey values like None, 0, "" or [] are kept as-is.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator pinning __name__ and __qualname__ of a generated callable, so the
    accessors built by metaclasses read well in tracebacks and reprs.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Return an immutable view of a container (tuple, MappingProxyType, frozenset);
    anything else is returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" on the instance and wraps containers in
    immutable views so public state cannot be mutated by accident.

    Example
    - Given self._names, declare names = mirror("names").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def normalize(name, /):
    """
    Derive a namespace key from an argument name.

    Leading dashes are stripped and the remaining hyphens become underscores:
    "--dry-run" → "dry_run", "-f" → "f", "out-file" → "out_file".
    """
    if not isinstance(name, str):
        raise TypeError("normalize() argument must be a string")
    return name.lstrip("-").replace("-", "_")


def flagged(token, /):
    """
    Tell whether a raw token is flag-shaped ("-x", "--name", "--name=value").

    A lone "-" (conventionally stdin) and negative numbers ("-1", "-2.5") are
    values, not flags.
    """
    return (
        isinstance(token, str)
        and len(token) > 1
        and token.startswith("-")
        and not re.fullmatch(r"-\d+(\.\d*)?", token)
    )


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Singleton, falsey, never equal to None. Materialize with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "normalize",
    "flagged",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
