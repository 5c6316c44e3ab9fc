"""
recli shell: route command-line tokens through a command tree.

Parsing model
- Tokens come from sys.argv[1:] (prompt left Unset), shlex.split(prompt) (a string)
  or any iterable of strings.
- Grouping nodes consume one token each: the token names a child (last match wins,
  see Node.find). An unknown name is an UnknownCommandError with suggestions.
- "help", "-h" and "--help" print the help of the node reached so far; running out
  of tokens on a grouping node does the same.
- Leaves receive the remaining tokens. When the leaf declares flags, tokens shaped
  like -name, -name=value, --name, --name=value or --name value are flags; "--"
  ends flag parsing. Leaves without flags take every token as a positional
  argument (so "set -5" stores -5).

Flag values
- bool: presence means True; -name=false (any boolean literal) is accepted too.
- int / float: parsed with the scalar codec rules (0x.., 0o.., _ separators ...).
- str: verbatim.
- repeatable flags collect every occurrence into a list.

Faults
- Any CommandException raised while routing or running the leaf is surfaced with
  trigger(): raised to the caller by default, printed on stderr followed by exit
  status 1 when shell=True.
"""
import difflib
import os
import re
import shlex
import sys
from collections import defaultdict, deque
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import codec
from .faults import *
from .nodes import ACTIONS, ITEMS, PROPERTIES, Context, Node
from .utils import *

console = Console()

_HELP = frozenset(("help", "-h", "--help"))

# tokens like -5, -0x1f or -1.5e3 are values, never flags
_NEGATIVE = re.compile(r"-[0-9.][0-9a-zA-Z_.+-]*")

_SECTIONS = {
    PROPERTIES: "properties",
    ITEMS: "items",
    ACTIONS: "actions",
}


def _tokenize(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("invoke() prompt must be a string or an iterable of strings")
            tokens.append(item)
        return tokens
    raise TypeError("invoke() prompt must be a string or an iterable of strings")


def _styler(colorful):
    styles = defaultdict(str, {
        "title": "bold #FF4DA6",
        "route": "bold #E6E6F0",
        "name": "bold #00E5FF",
        "args": "#9CE19C",
        "usage": "#C8C8D0",
        "section": "bold #FFB400",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def render_help(node, route, /, *, fancy=False, colorful=True):
    """
    Render the help of node as a rich renderable.

    - grouping nodes: one table per category (properties, items, actions).
    - leaves: the usage line followed by the declared flags.
    """
    styler = _styler(colorful)
    renders = []

    usage = Text.assemble(
        ("usage: ", styler("section")),
        (" ".join(route), styler("route")),
    )
    if node.leaf:
        if node.flags:
            usage.append(" [flags]", styler("args"))
        if node.args_usage:
            usage.append(" " + node.args_usage, styler("args"))
    else:
        usage.append(" <command>", styler("args"))
    renders.append(usage)

    if node.usage:
        renders.append(Text(node.usage, styler("usage")))

    if node.leaf:
        if node.flags:
            table = Table("flag", "type", "usage", title=Text("flags", styler("section")), box=ROUNDED)
            for flag in node.flags:
                table.add_row(
                    Text("-" + flag.name, styler("name")),
                    Text(flag.type.__name__ + ("..." if flag.multiple else ""), styler("args")),
                    Text(flag.usage or "", styler("usage")),
                )
            renders.append(table)
    else:
        groups = defaultdict(list)
        for child in node.children:
            groups[child.category].append(child)
        # known categories first, then anything a host added, in tree order
        order = list(_SECTIONS)
        for category in sorted(groups, key=lambda category: order.index(category) if category in order else len(order)):
            table = Table(
                "name", "usage",
                title=Text(_SECTIONS.get(category, str(category or "other").lower()), styler("section")),
                box=ROUNDED,
            )
            for child in groups[category]:
                name = Text(child.name, styler("name"))
                if child.leaf and child.args_usage:
                    name.append(" " + child.args_usage, styler("args"))
                table.add_row(name, Text(child.usage or "", styler("usage")))
            renders.append(table)

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[ ", " ".join(route).upper(), " HELP ]", style=styler("title")),
            title_align="left",
        )
    return renderable


def _suggest(name, candidates, route, kind):
    suggestions = difflib.get_close_matches(name, candidates, 5)
    try:
        return "did you mean %r? you can also run '%s --help' to see available %s" % (
            suggestions[0], " ".join(route), kind
        )
    except IndexError:
        return "run '%s --help' to see available %s" % (" ".join(route), kind)


_COERCERS = {
    bool: codec.parse_bool,
    int: codec.parse_int,
    float: codec.parse_float,
    str: str,
}


def _parse_flags(node, tokens, route):
    """
    Split the leaf's tokens into positional args and coerced flag values.
    """
    args = []
    values = {}
    while tokens:
        token = tokens.popleft()
        if token == "--":
            args.extend(tokens)
            break
        if not token.startswith("-") or token == "-" or _NEGATIVE.fullmatch(token):
            args.append(token)
            continue

        name, separator, text = token[2 if token.startswith("--") else 1:].partition("=")
        flag = node.flag(name)
        if flag is None:
            raise UnknownFlagError(
                "unknown flag %r" % token,
                hint=_suggest(name, [flag.name for flag in node.flags], route, "flags"),
            )

        if flag.type is bool and not separator:
            value = True
        else:
            if not separator:
                if not tokens:
                    raise MissingFlagValueError("flag %r expects a value" % ("-" + name))
                text = tokens.popleft()
            try:
                value = _COERCERS[flag.type](text)
            except ConversionError as error:
                raise ConversionError("flag %r: %s" % ("-" + name, error.message)) from None

        if flag.multiple:
            values.setdefault(name, []).append(value)
        else:
            values[name] = value
    return args, values


def _dispatch(root, tokens, *, fancy, colorful):
    node = root
    route = [root.name]
    while not node.leaf:
        if not tokens or tokens[0] in _HELP:
            console.print(render_help(node, route, fancy=fancy, colorful=colorful))
            return
        name = tokens.popleft()
        child = node.find(name)
        if child is None:
            raise UnknownCommandError(
                "unknown command %r" % name,
                hint=_suggest(name, [child.name for child in node.children], route, "commands"),
            )
        node = child
        route.append(name)

    if tokens and tokens[0] in ("-h", "--help"):
        console.print(render_help(node, route, fancy=fancy, colorful=colorful))
        return

    if node.flags:
        args, values = _parse_flags(node, tokens, route)
    else:
        args, values = list(tokens), {}
    node.action(Context.of(args, values))


def invoke(commands, prompt=Unset, /, *, prog=None, shell=False, fancy=False, colorful=True):
    """
    Run one command line against a command tree.

    Parameters
    - commands: the list returned by construct() (or a single root Node).
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of tokens.
    - prog: program name shown in help and fault headers (defaults to argv[0]).
    - shell: print faults and exit(1) instead of raising them.
    - fancy / colorful: rendering switches for help and faults.

    Raises
    - CommandException subclasses (outside shell mode).
    - TypeError on malformed arguments.
    """
    prog = coalesce(prog, None) or getattr(__import__("__main__"), "__prog__", None) or (
        os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "recli"
    )
    if isinstance(commands, Node):
        root = commands
    elif isinstance(commands, Iterable):
        root = Node(prog, children=commands)
    else:
        raise TypeError("invoke() first argument must be a node or an iterable of nodes")

    tokens = deque(_tokenize(prompt))
    try:
        _dispatch(root, tokens, fancy=fancy, colorful=colorful)
    except CommandException as error:
        trigger(error, shell=shell, fancy=fancy, colorful=colorful, prog=prog)


__all__ = (
    "invoke",
    "render_help",
)
