"""
recli faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (dispatching, construction, leaf actions, warnings).
- CommandException / CommandWarning: base types that carry a message plus an
  immutable options mapping and know how to render themselves with rich.
- trigger(): central entry point to surface any fault (raise, warn, or print and exit).
- getdoc(): optional description lookup for a code from the host application.

Paths
- Construction faults are raised deep inside the recursion over a record. Every
  level re-raises a copy (copy.replace(fault, path=...)) with its field name
  prepended, so str(fault) reads "backends.port: unsupported kind ...".

Integration
- Library code raises faults directly; recli.shell catches them and calls
  trigger(fault, shell=..., fancy=..., colorful=..., prog=...).
- In non-shell mode exceptions are raised; in shell mode they are rendered via rich
  on stderr and the process exits with status 1.
"""
import copy
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

    grouping (by high-level domain)
    - dispatching (111xx)
      • UNKNOWN_COMMAND, UNKNOWN_FLAG, MISSING_FLAG_VALUE
    - construction (131xx)
      • INVALID_INPUT, UNSUPPORTED_KIND
    - leaf actions (141xx)
      • CONVERSION_ERROR, WRONG_ARITY, NO_PROPERTIES_SPECIFIED
    - warnings (121xx)
      • DUPLICATE_KEY

    normalize() allows the host to remap codes to custom labels.
    """
    # --- dispatching errors (111xx) ---
    UNKNOWN_COMMAND         = 11101
    UNKNOWN_FLAG            = 11112
    MISSING_FLAG_VALUE      = 11114

    # --- construction errors (131xx) ---
    INVALID_INPUT           = 13101
    UNSUPPORTED_KIND        = 13102

    # --- leaf action errors (141xx) ---
    CONVERSION_ERROR        = 14101
    WRONG_ARITY             = 14102
    NO_PROPERTIES_SPECIFIED = 14103

    # --- warnings (121xx) ---
    DUPLICATE_KEY           = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    """
    shared rich renderer for exceptions and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: the message, prefixed with the dotted field path when there is one.
    - footer: "→ hint" when a hint is known.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("prog") or "recli"), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler("title")),
        " ]"
    )
    message = text(str(fault), styler("message"))
    body = [message]
    if hint := options.get("hint", type(fault).__hint__):
        body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class CommandException(Exception):
    """
    base class of every recli error.

    a fault is a message plus an immutable mapping of options. well-known options:
    - path: tuple of field names leading to the offending field (construction faults).
    - code / title / hint: override the class-level defaults.
    - shell / fancy / colorful / prog: rendering and surfacing switches (see trigger()).
    """
    __code__ = Unset
    __title__ = "error"
    __hint__ = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def path(self):
        return tuple(self.options.get("path", ()))

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    def __str__(self):
        if self.path:
            return "%s: %s" % (".".join(self.path), self.message)
        return self.message

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidInputError(CommandException):
    __code__ = FaultCode.INVALID_INPUT
    __title__ = "invalid input"
    __hint__ = "pass a dataclass instance, not a class or another kind of object"


class UnsupportedKindError(CommandException):
    __code__ = FaultCode.UNSUPPORTED_KIND
    __title__ = "unsupported kind"
    __hint__ = "mark the field with the skip tag to hide it from the command tree"


class ConversionError(CommandException):
    __code__ = FaultCode.CONVERSION_ERROR
    __title__ = "conversion error"


class WrongArityError(CommandException):
    __code__ = FaultCode.WRONG_ARITY
    __title__ = "wrong arity"


class NoPropertiesSpecifiedError(CommandException):
    __code__ = FaultCode.NO_PROPERTIES_SPECIFIED
    __title__ = "no properties specified"
    __hint__ = "set at least one property flag (for example: -name=value)"


class UnknownCommandError(CommandException):
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"


class UnknownFlagError(CommandException):
    __code__ = FaultCode.UNKNOWN_FLAG
    __title__ = "unknown flag"


class MissingFlagValueError(CommandException):
    __code__ = FaultCode.MISSING_FLAG_VALUE
    __title__ = "missing flag value"


class CommandWarning(ABC, Warning):
    """
    base class of every recli warning; mirrors CommandException's options model.
    """
    __code__ = Unset
    __title__ = "warning"
    __hint__ = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    path = CommandException.path
    code = CommandException.code
    title = CommandException.title
    __str__ = CommandException.__str__

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateKeyWarning(CommandWarning):
    __code__ = FaultCode.DUPLICATE_KEY
    __title__ = "duplicate key"
    __hint__ = "lookups resolve to the last item carrying this key"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options).
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings go through warnings.warn.
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
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "CommandException",
    "InvalidInputError",
    "UnsupportedKindError",
    "ConversionError",
    "WrongArityError",
    "NoPropertiesSpecifiedError",
    "UnknownCommandError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "CommandWarning",
    "DuplicateKeyWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
