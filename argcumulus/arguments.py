r"""
argcumulus argument specifications.

Overview
- Kind: storage shape and accumulation rule of an argument
  (Scalar, Array, Pair, Bool, Count).
- Validators: a capability variant used to restrict values
  • Choices: exact allow-list.
  • CaseInsensitiveChoices: allow-list compared with str.casefold.
  • Predicate: a callable; raising or returning False rejects the value.
- ArgumentSpec: the declarative, immutable-once-built descriptor of one argument,
  either named (every name starts with '-') or positional (a single bare name).

Metadata (sanitized on construction)
- names: tuple[str, ...] in declaration order; flags match r"--?[^\W\d](?:[\w-]*\w)?",
  a positional name matches r"[^\W\d](?:[\w-]*\w)?". Named and positional names
  cannot be mixed, a positional has exactly one name.
- dest: str, defaults to normalize(names[0]) ("--dry-run" → "dry_run").
- kind: Kind, defaults to Scalar (Array for positionals claiming several tokens).
- nargs: positional only; 1 (default), any int >= 1, "?", "+" or "*".
- split: Array/Pair only; a non-empty delimiter.
- choices / choices_i: mutually exclusive (ConflictingChoiceSpecError).
- default: one value for Scalar/Bool/Count; a sequence for Array (a lone value is
  wrapped); a mapping for Pair.
- required: ignored with a RequiredIgnoredWarning for Bool/Count.
- help, metavar: display-only, non-empty when provided.

Accumulation (consume)
- Scalar → last value, Bool → True, Count → previous + 1,
  Array → previous + elements, Pair → previous merged with key=value pieces
  (later keys win). Previous values are never mutated in place.

Cloning
- copy.replace(spec, **overrides) builds an independent spec; specs compare
  equal when every piece of metadata is equal.

Quick example:
    >>> spec = ArgumentSpec("--emails", kind="Array", split=",")
    >>> spec.consume(["a"], ["b,c"])
    ['a', 'b', 'c']
"""
import enum
import functools
import operator
import re
from collections.abc import Iterable, Mapping, Sequence

from rich.text import Text

from .faults import *
from .utils import *


class Kind(enum.Enum):
    """
    Storage shape of an argument in the namespace.

    Lookup by value is case-insensitive: Kind("bool") is Kind.BOOL.
    """
    SCALAR = "Scalar"
    ARRAY = "Array"
    PAIR = "Pair"
    BOOL = "Bool"
    COUNT = "Count"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.casefold() == value.strip().casefold():
                    return member
        return None

    @property
    def valueless(self):
        """
        Bool and Count consume no value token.
        """
        return self in (Kind.BOOL, Kind.COUNT)


class Choices:
    """
    Exact allow-list validator.

    Duplicates are rejected and the order is kept for help output.
    """
    __slots__ = ("_choices",)

    def __init__(self, choices, /):
        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError(f"{type(self).__name__} argument must be a non-string iterable")
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{type(self).__name__} cannot contain duplicates")
            sanitized.append(choice)
        if not sanitized:
            raise ValueError(f"{type(self).__name__} cannot be empty")
        self._choices = tuple(sanitized)

    @property
    def choices(self):
        return self._choices

    def accepts(self, value, /):
        return value in self._choices

    def validate(self, value, /, *, dest="value"):
        if not self.accepts(value):
            raise ValidationError(
                "invalid choice %r for %r" % (value, dest),
                title="invalid choice",
                code=FaultCode.INVALID_VALUE,
                dest=dest,
                value=value,
                hint="choose one of: %s" % ", ".join(map(str, self._choices)),
                docs=getdoc(FaultCode.INVALID_VALUE),
            )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._choices == other._choices

    def __hash__(self):
        return hash((type(self), self._choices))

    def __repr__(self):
        return f"{type(self).__name__}({list(self._choices)!r})"


class CaseInsensitiveChoices(Choices):
    """
    Allow-list compared case-insensitively ("DEV" matches "dev").

    The original spelling of the accepted value is kept in the namespace.
    """
    __slots__ = ()

    def accepts(self, value, /):
        folded = str(value).casefold()
        return any(folded == str(choice).casefold() for choice in self._choices)


class Predicate:
    """
    Validator backed by a callable.

    The callable receives the raw value. Raising any exception or returning
    False (exactly) rejects the value; any other return accepts it.
    """
    __slots__ = ("_function",)

    def __init__(self, function, /):
        if not callable(function):
            raise TypeError("Predicate argument must be callable")
        self._function = function

    @property
    def function(self):
        return self._function

    def validate(self, value, /, *, dest="value"):
        try:
            result = self._function(value)
        except Exception as exception:
            raise ValidationError(
                "invalid value %r for %r: %s" % (value, dest, str(exception).strip() or type(exception).__name__),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                dest=dest,
                value=value,
                hint="check the accepted values with --help",
                docs=getdoc(FaultCode.INVALID_VALUE),
            ) from exception
        if result is False:
            raise ValidationError(
                "invalid value %r for %r" % (value, dest),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                dest=dest,
                value=value,
                hint="check the accepted values with --help",
                docs=getdoc(FaultCode.INVALID_VALUE),
            )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._function is other._function

    def __hash__(self):
        return hash((type(self), id(self._function)))

    def __repr__(self):
        return f"Predicate({getattr(self._function, '__qualname__', self._function)!r})"


class ArgumentType(type):
    """
    Metaclass wiring introspection for specs.

    - __typename__ derived from the class name ("ArgumentSpec" → "argument-spec"),
      used as the subject of construction errors.
    - Read-only properties for every name in __introspectable__ (via mirror()).
    - Stable __repr__/__rich_repr__ listing __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate names and derive positional/dest.

    Mutates metadata["names"] (tuple), metadata["positional"] (bool) and
    metadata["dest"] (str).
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"(--?)?[^\W\d](?:[\w-]*\w)?", name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid flag or positional name")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    flags = [name.startswith("-") for name in names]
    if any(flags) and not all(flags):
        raise TypeError(f"{cls.__typename__} cannot mix flags and positional names")
    if not any(flags) and len(names) > 1:
        raise TypeError(f"{cls.__typename__} positional argument takes a single name")

    metadata["names"] = tuple(names)
    metadata["positional"] = not any(flags)

    if not isinstance(dest := metadata["dest"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'dest' must be a string")
    elif isinstance(dest, str) and not re.fullmatch(r"[^\W\d]\w*", dest := normalize(dest.strip())):
        raise ValueError(f"{cls.__typename__} 'dest' must be a valid identifier")
    metadata["dest"] = coalesce(dest, normalize(names[0]))


def _sanitize_shape(cls, metadata, /):
    """
    Internal: validate kind, nargs and split together.

    Rules
    - nargs is positional-only; positionals default to exactly one token.
    - a positional claiming several tokens defaults to Array and cannot be Scalar.
    - Bool/Count are named-only and take no split.
    - split is only meaningful for Array and Pair.
    """
    positional = metadata["positional"]

    nargs = metadata["nargs"]
    if not positional:
        if nargs is not Unset:
            raise TypeError(f"{cls.__typename__} 'nargs' is only valid for positional arguments")
        metadata["nargs"] = None
    else:
        if isinstance(nargs, bool) or not isinstance(nargs, str | int | Unset):
            raise TypeError(f"{cls.__typename__} 'nargs' must be a string or an integer")
        if isinstance(nargs, str) and nargs not in ("?", "+", "*"):
            raise ValueError(f"{cls.__typename__} 'nargs' must be one of '?', '+', or '*'")
        if isinstance(nargs, int) and nargs < 1:
            raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")
        metadata["nargs"] = nargs = coalesce(nargs, 1)

    multiple = positional and (nargs in ("+", "*") or (isinstance(nargs, int) and nargs > 1))

    kind = metadata["kind"]
    if kind is Unset:
        kind = Kind.ARRAY if multiple else Kind.SCALAR
    elif not isinstance(kind, Kind | str):
        raise TypeError(f"{cls.__typename__} 'kind' must be a string or a Kind")
    else:
        try:
            kind = Kind(kind)
        except ValueError:
            raise ValueError(
                f"{cls.__typename__} 'kind' must be one of {', '.join(member.value for member in Kind)}"
            ) from None

    if positional and kind.valueless:
        raise TypeError(f"{cls.__typename__} {kind.value} cannot be positional")
    if multiple and kind is Kind.SCALAR:
        raise TypeError(f"{cls.__typename__} Scalar cannot take nargs={nargs!r}, use Array or Pair")
    metadata["kind"] = kind

    if not isinstance(split := metadata["split"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'split' must be a string")
    elif isinstance(split, str):
        if not split:
            raise ValueError(f"{cls.__typename__} 'split' cannot be empty")
        if kind not in (Kind.ARRAY, Kind.PAIR):
            raise TypeError(f"{cls.__typename__} 'split' only works with Array and Pair")
    metadata["split"] = coalesce(split)


def _sanitize_validation(cls, metadata, /):
    """
    Internal: fold choices/choices_i into a single validator.

    - choices: Iterable → Choices, callable → Predicate, or a validator instance.
    - choices_i: Iterable → CaseInsensitiveChoices (callables are rejected).
    - both → ConflictingChoiceSpecError.
    """
    choices = metadata.pop("choices")
    insensitive = metadata.pop("choices_i")

    if choices is not Unset and insensitive is not Unset:
        raise ConflictingChoiceSpecError(
            "argument %r cannot specify both 'choices' and 'choices_i'" % metadata["dest"],
            title="conflicting choices",
            code=FaultCode.CONFLICTING_CHOICE_SPEC,
            dest=metadata["dest"],
            hint="keep either 'choices' (exact) or 'choices_i' (case-insensitive)",
            docs=getdoc(FaultCode.CONFLICTING_CHOICE_SPEC),
        )

    if isinstance(choices, Choices | Predicate):
        validator = choices
    elif choices is not Unset:
        validator = Predicate(choices) if callable(choices) else Choices(choices)
    elif insensitive is not Unset:
        if callable(insensitive) and not isinstance(insensitive, Iterable):
            raise TypeError(f"{cls.__typename__} 'choices_i' does not accept a callable")
        validator = CaseInsensitiveChoices(insensitive)
    else:
        validator = None

    if validator is not None and metadata["kind"].valueless:
        raise TypeError(f"{cls.__typename__} {metadata['kind'].value} cannot have choices")
    metadata["validator"] = validator


def _sanitize_default(cls, metadata, /):
    """
    Internal: check the default against the kind's storage shape.

    Array defaults are stored as tuples and Pair defaults as dicts; scalar kinds
    reject sequences and mappings.
    """
    default = metadata["default"]
    kind = metadata["kind"]
    if default is Unset:
        return

    match kind:
        case Kind.ARRAY:
            if isinstance(default, Mapping):
                raise TypeError(f"{cls.__typename__} Array 'default' cannot be a mapping")
            if isinstance(default, str) or not isinstance(default, Iterable):
                default = (default,)
            metadata["default"] = tuple(default)
        case Kind.PAIR:
            if not isinstance(default, Mapping):
                raise TypeError(f"{cls.__typename__} Pair 'default' must be a mapping")
            metadata["default"] = dict(default)
        case _:
            if isinstance(default, Mapping) or isinstance(default, Sequence | set | frozenset) and not isinstance(default, str):
                raise TypeError(f"{cls.__typename__} {kind.value} 'default' only accepts a single value")
            if kind is Kind.COUNT and (isinstance(default, bool) or not isinstance(default, int) or default < 0):
                raise TypeError(f"{cls.__typename__} Count 'default' must be a non-negative integer")


def _sanitize_display(cls, metadata, /):
    """
    Internal: trim help/metavar and drop 'required' where it has no effect.
    """
    if not isinstance(help := metadata["help"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    metadata["required"] = bool(metadata["required"])
    if metadata["required"] and metadata["kind"].valueless:
        trigger(RequiredIgnoredWarning(
            "'required' has no effect on %s argument %r" % (metadata["kind"].value, metadata["dest"]),
            title="required ignored",
            code=FaultCode.REQUIRED_IGNORED,
            dest=metadata["dest"],
            hint="drop 'required'; %s arguments always have a value" % metadata["kind"].value,
            docs=getdoc(FaultCode.REQUIRED_IGNORED),
        ))
        metadata["required"] = False


class ArgumentSpec(metaclass=ArgumentType):
    """
    Declarative descriptor of a single argument.

    An ArgumentSpec does not parse anything by itself: the resolver matches
    tokens against it, then asks it to validate and accumulate the raw text.
    All metadata is exposed through read-only properties.

    Properties
    - names, dest, kind, positional, nargs, split, validator, default, required,
      help, metavar (see the module docstring for their rules).
    - choices: the allow-list of a Choices/CaseInsensitiveChoices validator, else ().
    - label: display name of the value (metavar, else the dest upper-cased).
    - minimum: tokens a positional needs at least ("?"/"*" → 0, "+" → 1, n → n).
    """

    __introspectable__ = (
        "names",
        "dest",
        "kind",
        "positional",
        "nargs",
        "split",
        "validator",
        "default",
        "required",
        "help",
        "metavar",
    )

    __displayable__ = (
        "names",
        "dest",
        "kind",
        "nargs",
        "required",
    )

    def __new__(
            cls,
            *names,
            dest=Unset,
            kind=Unset,
            nargs=Unset,
            split=Unset,
            choices=Unset,
            choices_i=Unset,
            default=Unset,
            required=False,
            help=Unset,
            metavar=Unset,
    ):
        """
        Construct a spec from names and keyword metadata.

        Raises
        - TypeError / ValueError on malformed metadata.
        - ConflictingChoiceSpecError when both choices and choices_i are given.
        """
        metadata = {
            "names": names,
            "dest": dest,
            "positional": False,
            "kind": kind,
            "nargs": nargs,
            "split": split,
            "choices": choices,
            "choices_i": choices_i,
            "default": default,
            "required": required,
            "help": help,
            "metavar": metavar,
        }
        _sanitize_names(cls, metadata)
        _sanitize_shape(cls, metadata)
        _sanitize_validation(cls, metadata)
        _sanitize_default(cls, metadata)
        _sanitize_display(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __replace__(self, **overrides):
        """
        Build an independent copy, optionally overriding metadata (copy.replace).

        'choices' and 'choices_i' overrides replace the current validator.
        """
        metadata = {
            "dest": self._dest,
            "kind": self._kind,
            "nargs": self._nargs if self._positional else Unset,
            "split": self._split if self._split is not None else Unset,
            "choices": self._validator if self._validator is not None else Unset,
            "default": self._default,
            "required": self._required,
            "help": self._help if self._help is not None else Unset,
            "metavar": self._metavar if self._metavar is not None else Unset,
        }
        if "choices_i" in overrides:
            metadata["choices"] = Unset
        names = overrides.pop("names", self._names)
        return type(self)(*names, **(metadata | overrides))

    def __eq__(self, other):
        if not isinstance(other, ArgumentSpec):
            return NotImplemented
        return all(
            getattr(self, "_" + name) == getattr(other, "_" + name) for name in type(self).__introspectable__
        )

    def __hash__(self):
        return hash((self._names, self._dest, self._kind))

    @property
    def choices(self):
        if isinstance(self._validator, Choices):
            return self._validator.choices
        return ()

    @property
    def label(self):
        return self._metavar or self._dest.upper()

    @property
    def minimum(self):
        match self._nargs:
            case "?" | "*" | None:
                return 0
            case "+":
                return 1
            case int():
                return self._nargs

    def explode(self, raw, /):
        """
        Split raw text by the 'split' delimiter (whole text when unset).
        """
        if not isinstance(raw, str):
            raise TypeError(f"{type(self).__typename__} raw values must be strings")
        return raw.split(self._split) if self._split else [raw]

    def decompose(self, piece, /):
        """
        Decompose a Pair piece "key=value" into (key, value); splits on the first '='.
        """
        key, separator, value = piece.partition("=")
        if not separator or not key:
            raise ValidationError(
                "invalid pair %r for %r" % (piece, self._dest),
                title="invalid pair",
                code=FaultCode.INVALID_VALUE,
                dest=self._dest,
                value=piece,
                hint="use the key=value form",
                docs=getdoc(FaultCode.INVALID_VALUE),
            )
        return key, value

    def validate(self, value, /):
        """
        Check one resolved value against the validator; raises ValidationError.
        """
        if self._validator is not None:
            self._validator.validate(value, dest=self._dest)
        return value

    def consume(self, previous, raws=(), /):
        """
        Return the new namespace value after one occurrence of this argument.

        Parameters
        - previous: the current namespace value (None when absent).
        - raws: raw texts claimed by this occurrence (empty for Bool/Count).

        Every piece is validated before anything is accumulated, so a failing
        occurrence leaves no partial value behind.
        """
        match self._kind:
            case Kind.BOOL:
                return True
            case Kind.COUNT:
                start = previous if isinstance(previous, int) and not isinstance(previous, bool) else coalesce(self._default, 0)
                return start + 1
            case Kind.SCALAR:
                if not raws:
                    raise TypeError(f"{type(self).__typename__} Scalar needs a value")
                return self.validate(raws[-1])
            case Kind.ARRAY:
                values = [self.validate(piece) for raw in raws for piece in self.explode(raw)]
                return list(previous or ()) + values
            case Kind.PAIR:
                pairs = [self.decompose(piece) for raw in raws for piece in self.explode(raw)]
                for key, value in pairs:
                    self.validate(value)
                return dict(previous or {}) | dict(pairs)

    def fallback(self):
        """
        Fresh value to store when the argument is absent, or Unset when there is none.

        Bool falls back to False and Count to 0 unless a default overrides them.
        """
        match self._kind:
            case Kind.BOOL:
                return bool(coalesce(self._default, False))
            case Kind.COUNT:
                return coalesce(self._default, 0)
            case Kind.ARRAY:
                return list(self._default) if self._default is not Unset else Unset
            case Kind.PAIR:
                return dict(self._default) if self._default is not Unset else Unset
            case _:
                return self._default


__all__ = (
    "Kind",
    "Choices",
    "CaseInsensitiveChoices",
    "Predicate",
    "ArgumentSpec",
)

# The metaclass is an implementation detail, keep it out of star-imports and docs.
del ArgumentType
