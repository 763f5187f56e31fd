"""
argcumulus resolver: turns a token list into namespace updates.

Pipeline (one call)
0. no tokens → nothing happens, nothing is left over.
1. subcommand check (router enabled, first token not flag-shaped):
   • unknown name → UnknownSubcommandError with close-match suggestions.
   • 'help'       → the help command's specs consume the rest (help_command and
                    all are cleared unless given), then the router's helper is
                    invoked on the pending values; current_command is left alone.
   • otherwise    → the child's specs consume the rest (one level only, same
                    namespace), current_command is set, then this level's defaults apply.
2. named resolution over split() records: Bool/Count take no value, every other
   kind takes exactly one; "--no-<name>" clears a Bool.
3. values are validated and accumulated by ArgumentSpec.consume().
4. positional resolution over the plain residual tokens, in declaration order,
   reserving the minimum of every later positional.
5. defaults for absent dests (Bool also writes its "no_<dest>" complement).
6. required check.
7. unclaimed residual tokens are returned as leftovers.

Writes are staged and committed only once the whole call succeeded, so a
failing call leaves the namespace exactly as it was. When '--help' was given
in the call, arity and required failures are not raised: the caller is about
to print usage instead.
"""
import copy
import difflib
from collections import namedtuple

from .arguments import Kind
from .faults import *
from .splitter import split
from .utils import *


class _Stage:
    """
    Pending writes layered over a namespace.
    """
    __slots__ = ("namespace", "values", "seen")

    def __init__(self, namespace, /):
        self.namespace = namespace
        self.values = {}
        self.seen = set()

    def get(self, dest, /):
        if dest in self.values:
            return self.values[dest]
        return self.namespace.get_attr(dest, Unset)

    def set(self, dest, value, /):
        self.values[dest] = value

    def get_attr(self, dest, default=None, /):
        return coalesce(self.get(dest), default)

    def absent(self, dest, /):
        return coalesce(self.get(dest)) is None

    def commit(self):
        for dest, value in self.values.items():
            self.namespace.set_attr(dest, value)


def _display(spec, /):
    return "/".join(spec.names) if not spec.positional else spec.label


def _arity(spec, message, /, **context):
    return ArityError(
        message,
        title="wrong number of values",
        code=FaultCode.ARITY_MISMATCH,
        dest=spec.dest,
        docs=getdoc(FaultCode.ARITY_MISMATCH),
        **context,
    )


def _resolve_named(records, stage, /):
    residual = []
    for token in records:
        if (spec := token.spec) is None:
            residual.append(token)
            continue

        stage.seen.add(spec.dest)
        if token.negated:
            stage.set(spec.dest, False)
            stage.set("no_" + spec.dest, True)
        elif spec.kind.valueless:
            if token.value is not None:
                raise _arity(
                    spec,
                    "argument %r takes no value" % token.flag,
                    hint="drop '=%s'" % token.value,
                    input=token.flag,
                    value=token.value,
                )
            if spec.kind is Kind.BOOL:
                stage.set(spec.dest, True)
                stage.set("no_" + spec.dest, False)
            else:
                stage.set(spec.dest, spec.consume(stage.get(spec.dest)))
        elif token.value is None:
            raise _arity(
                spec,
                "argument %r expects a value" % token.flag,
                hint="pass it as '%s %s' or '%s=%s'" % (token.flag, spec.label, token.flag, spec.label),
                input=token.flag,
            )
        else:
            stage.set(spec.dest, spec.consume(stage.get(spec.dest), (token.value,)))
    return residual


def _resolve_positional(residual, registry, stage, /, *, lenient=False):
    plain = [index for index, token in enumerate(residual) if token.plain]
    positionals = registry.positionals
    claimed = set()
    cursor = 0

    for position, spec in enumerate(positionals):
        available = len(plain) - cursor
        reserve = sum(later.minimum for later in positionals[position + 1:])

        match spec.nargs:
            case "*":
                indexes = [index for index in range(len(residual)) if index not in claimed]
                cursor = len(plain)
            case "?":
                indexes = plain[cursor:cursor + (available - reserve >= 1)]
            case "+":
                if not available and not lenient:
                    raise _arity(
                        spec,
                        "argument %r expects at least one value" % spec.label,
                        hint="pass one or more %s values" % spec.label,
                    )
                indexes = plain[cursor:cursor + (available and max(1, available - reserve))]
            case int(count):
                if available >= count:
                    indexes = plain[cursor:cursor + count]
                elif (not available and not spec.required) or lenient:
                    indexes = []
                else:
                    raise _arity(
                        spec,
                        "argument %r expects %d value%s, got %d" % (spec.label, count, "s" * (count != 1), available),
                        hint="pass exactly %d %s value%s" % (count, spec.label, "s" * (count != 1)),
                        expected=count,
                        received=available,
                    )

        if spec.nargs != "*":
            cursor += len(indexes)
        if not indexes:
            continue
        claimed.update(indexes)
        stage.seen.add(spec.dest)
        raws = [text for index in indexes for text in residual[index].raw]
        stage.set(spec.dest, spec.consume(stage.get(spec.dest), raws))

    return claimed


def _apply_defaults(registry, stage, /):
    for spec in registry:
        if stage.absent(spec.dest) and (fallback := spec.fallback()) is not Unset:
            stage.set(spec.dest, fallback)
        if spec.kind is Kind.BOOL and stage.absent("no_" + spec.dest):
            stage.set("no_" + spec.dest, not stage.get(spec.dest))


def _check_required(registry, stage, /):
    for spec in registry:
        if spec.required and stage.absent(spec.dest):
            raise MissingRequiredArgumentError(
                "argument %r is required" % _display(spec),
                title="missing required argument",
                code=FaultCode.MISSING_REQUIRED_ARGUMENT,
                dest=spec.dest,
                hint="pass %s" % (spec.label if spec.positional else "%s %s" % (spec.names[0], spec.label)),
                docs=getdoc(FaultCode.MISSING_REQUIRED_ARGUMENT),
            )


def _dispatch(tokens, stage, registry, router, /):
    name, *rest = tokens
    if (binding := router.resolve(name)) is None:
        suggestions = difflib.get_close_matches(name, router.names, 5)
        raise UnknownSubcommandError(
            "unknown command %r" % name,
            title="unknown command",
            code=FaultCode.UNKNOWN_SUBCOMMAND,
            input=name,
            suggestions=tuple(suggestions),
            hint=(
                "did you mean %s?" % " or ".join(map(repr, suggestions))
                if suggestions else
                "run 'help' to list the available commands"
            ),
            docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
        )

    try:
        leftover = _resolve_level(rest, stage, binding.parser.registry)
    except ParserException as fault:
        raise copy.replace(fault, command=binding.name) from None

    if binding.name == "help":
        # help_command and all describe this call only.
        if "help_command" not in stage.seen:
            stage.set("help_command", None)
        if "all" not in stage.seen:
            stage.set("all", False)
            stage.set("no_all", True)
        if callable(router.helper):
            router.helper(stage)
        return leftover, binding.name

    stage.set("current_command", binding.name)
    _apply_defaults(registry, stage)
    return leftover, binding.name


def _resolve_level(tokens, stage, registry, /):
    residual = _resolve_named(split(tokens, registry), stage)
    lenient = _asked_help(stage)
    claimed = _resolve_positional(residual, registry, stage, lenient=lenient)
    _apply_defaults(registry, stage)
    if not lenient:
        _check_required(registry, stage)
    return [text for index, token in enumerate(residual) if index not in claimed for text in token.raw]


def _asked_help(stage, /):
    return "help" in stage.seen and stage.get("help") is True


Outcome = namedtuple("Outcome", ("namespace", "leftover", "command", "help"))
Outcome.__doc__ = """
What one resolve() call did.

- namespace: the namespace that was written to.
- leftover: unclaimed tokens.
- command: canonical name of the subcommand dispatched by this call (None when
  no subcommand ran, or when it was the 'help' command, whose helper already
  printed).
- help: True when '--help' was given in this call.
"""


def resolve(tokens, namespace, registry, router=Unset, /):
    """
    Resolve tokens against a registry (and optionally a router) into a namespace.

    Parameters
    - tokens: iterable of str.
    - namespace: any object implementing the accessor contract
      (construct, set_attr, get_attr).
    - registry: SpecRegistry of this level.
    - router: SubcommandRouter of this level (optional).

    Returns
    - Outcome(namespace, leftover, command, help).

    Raises
    - UnknownSubcommandError, ArityError, ValidationError, MissingRequiredArgumentError.
      Faults raised while a subcommand resolves carry its name in options["command"].
    """
    if not (tokens := list(tokens)):
        return Outcome(namespace, [], None, False)

    stage = _Stage(namespace)
    command = None
    if router is not Unset and router.enabled and not flagged(tokens[0]):
        leftover, command = _dispatch(tokens, stage, registry, router)
    else:
        leftover = _resolve_level(tokens, stage, registry)
    stage.commit()

    if command == "help":
        return Outcome(namespace, leftover, None, False)
    return Outcome(namespace, leftover, command, _asked_help(stage))


__all__ = (
    "Outcome",
    "resolve",
)
