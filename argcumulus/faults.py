"""
argcumulus faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (registration, routing, resolution, warnings).
- ParserException / ParserWarning: base types carrying a message plus an
  immutable options mapping (code, title, hint, and context such as the
  offending token or dest). They know how to render themselves with rich.
- trigger(): central entry point to surface a fault (raise, warn, or print and exit
  depending on the shell option).
- getdoc(): optional documentation lookup for a code from the host application.

Where faults come from
- Registration (SpecRegistry, SubcommandRouter, ArgumentSpec construction):
  DuplicateArgumentError, DuplicateSubcommandError, ConflictingChoiceSpecError.
- Resolution (Resolver): UnknownSubcommandError, MissingRequiredArgumentError,
  ArityError, ValidationError.
- Nothing is retried or swallowed; faults propagate to the caller of
  register/parse. The Parser only decorates them (prog, error prefix, ui flags)
  through copy.replace before re-raising.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes (stable identifiers).

    grouping
    - registration (2110x): DUPLICATE_ARGUMENT, DUPLICATE_SUBCOMMAND, CONFLICTING_CHOICE_SPEC
    - routing (2111x): UNKNOWN_SUBCOMMAND
    - resolution (2112x): MISSING_REQUIRED_ARGUMENT, ARITY_MISMATCH, INVALID_VALUE
    - warnings (22xxx): REQUIRED_IGNORED

    normalize() lets a host remap codes to custom labels through a __codes__
    mapping in __main__ while the numeric values stay stable.
    """
    # --- registration errors ---
    DUPLICATE_ARGUMENT          = 21101
    DUPLICATE_SUBCOMMAND        = 21102
    CONFLICTING_CHOICE_SPEC     = 21103

    # --- routing errors ---
    UNKNOWN_SUBCOMMAND          = 21111

    # --- resolution errors ---
    MISSING_REQUIRED_ARGUMENT   = 21121
    ARITY_MISMATCH              = 21122
    INVALID_VALUE               = 21123

    # --- warnings ---
    REQUIRED_IGNORED            = 22101

    def normalize(self):
        """
        return a host-normalized string for this code (numeric value by default).
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    Build the rich renderable shared by exceptions and warnings.

    Layout
    - header: "[ prog — code | title ]"
    - body: the message
    - hint: " → hint" (omitted when no hint was given)
    Wrapped in a Panel when the fault carries fancy=True.
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = text(getattr(main, "__prog__", fault.options.get("prog") or "argcumulus"), "prog-name")
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", "code"),
        " | ",
        text(fault.options.get("title", type(fault).__name__).title(), "title"),
        " ]",
    )
    parts = [text(str(fault), "message")]
    if hint := fault.options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fault.options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class ParserException(Exception):
    """
    Base class of every fault raised by argcumulus.

    Attributes
    - message: str, the plain message.
    - options: read-only mapping with code/title/hint and context (token, dest, ...).
      The parser adds prog/prefix/colorful/fancy/shell before surfacing it.

    str(fault) is the message prefixed by options["prefix"] when present.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.options.get("prefix", "") + self.message

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateArgumentError(ParserException): ...
class DuplicateSubcommandError(ParserException): ...
class ConflictingChoiceSpecError(ParserException): ...
class UnknownSubcommandError(ParserException): ...
class MissingRequiredArgumentError(ParserException): ...
class ArityError(ParserException): ...
class ValidationError(ParserException): ...


class ParserWarning(ABC, Warning):
    """
    Base class of non-fatal diagnostics.

    Outside shell mode they are emitted through the warnings module (so hosts
    can filter them); in shell mode they are printed with rich.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.options.get("prefix", "") + self.message

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RequiredIgnoredWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into a copy of the fault via copy.replace before triggering.
    - exceptions are raised (or printed and exit(1) in shell mode); warnings are warned
      (or printed in shell mode).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from a __docs__ mapping in __main__.

    returns None when the host does not document the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "DuplicateArgumentError",
    "DuplicateSubcommandError",
    "ConflictingChoiceSpecError",
    "UnknownSubcommandError",
    "MissingRequiredArgumentError",
    "ArityError",
    "ValidationError",
    "ParserWarning",
    "RequiredIgnoredWarning",
    "trigger",
    "getdoc",
)
