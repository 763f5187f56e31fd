"""
argcumulus usage formatter.

Pure rendering: every function returns a list of rich Text lines and never
prints. The caller (usually a Parser) decides where the lines go.

Layout of format_usage()
    usage: prog [-h|--help] [--name NAME] SOURCE [FILES ...] <command> ...

    short help
    long description

    positional arguments:
      SOURCE            *  where to read from
      FILES             ?  files to process

    optional arguments:
      -h, --help        ?  show this help message
      --name NAME       *  who to greet

    subcommands:
      list, ls             list the entries

    epilog

Markers: '*' flags a required argument (a "+" positional always is), '?' an optional one.

Palette entries (override any of them through a __styles__ mapping in __main__)
- usage-label, program-name, command-name, help-section, description-section, epilog-section
- group-label, argument-description, required-mark, optional-mark
- option-name, flag-name, metavar, choice, default
- children, children-description
Styling is dropped entirely when colorful is False.
"""
from collections import defaultdict
from collections.abc import Mapping

from rich.text import Text

from .arguments import Kind
from .utils import *

_PALETTE = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "command-name": "bold #36C5F0",
    "help-section": "#E5E7EB",
    "description-section": "italic #A3A3A3",
    "epilog-section": "#737373",

    # === Groups / arguments ===
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",
    "required-mark": "bold #EF4444",
    "optional-mark": "#6B7280",

    # === Names / metavars ===
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "choice": "bold #FF4D94",
    "default": "#737373",

    # === Subcommands ===
    "children": "bold #36C5F0",
    "children-description": "#9CA3AF",
}

_INDENT = 2
_COLUMN = 24


def _styling(colorful, /):
    styles = defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styler(style))

    return styler, text


def _metavar(spec, text, /):
    if spec.choices:
        return Text.assemble("{", Text(",").join(text(choice, "choice") for choice in spec.choices), "}")
    if spec.kind is Kind.PAIR and spec.metavar is None:
        return text("KEY=VALUE", "metavar")
    return text(spec.label, "metavar")


def _shape(spec, text, /):
    """
    Value shape of a positional according to its nargs.
    """
    metavar = _metavar(spec, text)
    match spec.nargs:
        case "?":
            return Text.assemble("[", metavar, "]")
        case "*":
            return Text.assemble("[", metavar, " ...]")
        case "+":
            return Text.assemble(metavar, " [", metavar, " ...]")
        case int(count):
            return Text(" ").join(metavar.copy() for _ in range(count))


def _names(spec, text, /, separator):
    style = "flag-name" if spec.kind.valueless else "option-name"
    return Text(separator).join(text(name, style) for name in spec.names)


def _usage(registry, router, prog, text, styler, /):
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(text(prog, "program-name"))

    for spec in registry.nameds:
        item = _names(spec, text, "|")
        if not spec.kind.valueless:
            item = Text.assemble(item, " ", _metavar(spec, text))
        usage.append(" ").append(item if spec.required else Text.assemble("[", item, "]"))
    for spec in registry.positionals:
        usage.append(" ").append(_shape(spec, text))
    if router is not None and router.enabled:
        usage.append(" ").append(text("<command>", "command-name")).append(" ...")
    return usage


def _mandatory(spec, /):
    return spec.required or (spec.positional and spec.nargs == "+")


def _row(head, spec, text, /, description=None, style="argument-description"):
    """
    One argument line: head column, required marker, help text.
    """
    row = Text(" " * _INDENT).append(head)
    row.append(" " * max(1, _COLUMN - len(row)))
    if spec is not None:
        row.append(text("*", "required-mark") if _mandatory(spec) else text("?", "optional-mark"))
        row.append("  ")
    if description:
        row.append(text(description, style))
    return row


def _default(spec, text, /):
    match spec.kind:
        case Kind.BOOL | Kind.COUNT:
            return None
        case Kind.ARRAY:
            value = ",".join(map(str, spec.default)) if isinstance(spec.default, tuple) else None
        case Kind.PAIR:
            value = ",".join("%s=%s" % item for item in spec.default.items()) if isinstance(spec.default, Mapping) else None
        case _:
            value = coalesce(spec.default)
    if value in (None, ""):
        return None
    return text("(default: %s)" % value, "default")


def _arguments(specs, text, /):
    lines = []
    for spec in specs:
        if spec.positional:
            head = _metavar(spec, text)
        else:
            head = _names(spec, text, ", ")
            if not spec.kind.valueless:
                head = Text.assemble(head, " ", _metavar(spec, text))
        row = _row(head, spec, text, spec.help)
        if (default := _default(spec, text)) is not None:
            row.append(" " if spec.help else "").append(default)
        lines.append(row)
    return lines


def format_usage(
        registry,
        router=None,
        /,
        *,
        prog,
        help=None,
        description=None,
        epilog=None,
        colorful=False,
):
    """
    Render the full usage of one parser level.

    Parameters
    - registry: SpecRegistry whose specs are listed.
    - router: SubcommandRouter whose bindings are listed (optional).
    - prog: program name shown after 'usage:'.
    - help / description / epilog: optional paragraphs.
    - colorful: apply the palette.

    Returns
    - list of rich.text.Text lines.
    """
    styler, text = _styling(colorful)
    lines = [_usage(registry, router, prog, text, styler)]

    if help or description:
        lines.append(Text())
    if help:
        lines.append(text(help, "help-section"))
    if description:
        lines.append(text(description, "description-section"))

    if positionals := registry.positionals:
        lines.append(Text())
        lines.append(text("positional arguments", "group-label").append(":"))
        lines.extend(_arguments(positionals, text))

    if nameds := registry.nameds:
        lines.append(Text())
        lines.append(text("optional arguments", "group-label").append(":"))
        lines.extend(_arguments(nameds, text))

    if router is not None and router.enabled:
        lines.append(Text())
        lines.append(text(router.title, "group-label").append(":"))
        if router.description:
            lines.append(Text(" " * _INDENT).append(text(router.description, "description-section")))
        for binding in router:
            head = Text(", ").join(text(name, "children") for name in (binding.name, *binding.aliases))
            lines.append(_row(head, None, text, binding.help, "children-description"))

    if epilog:
        lines.append(Text())
        lines.append(text(epilog, "epilog-section"))

    return lines


def format_command_usage(binding, /, *, prog, colorful=False):
    """
    Render the usage of one subcommand binding ("usage: prog command ...").

    The child parser must expose 'registry'; its 'description' and 'epilog'
    attributes are used when present.
    """
    parser = binding.parser
    lines = format_usage(
        parser.registry,
        None,
        prog="%s %s" % (prog, binding.name),
        help=binding.help,
        description=getattr(parser, "description", None),
        epilog=getattr(parser, "epilog", None),
        colorful=colorful,
    )
    if binding.aliases:
        _, text = _styling(colorful)
        lines[1:1] = [
            Text("aliases: ").append(Text(", ").join(text(alias, "children") for alias in binding.aliases)),
        ]
    return lines


__all__ = (
    "format_usage",
    "format_command_usage",
)
