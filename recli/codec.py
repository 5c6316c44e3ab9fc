"""
Scalar codec: text <-> typed scalar.

format(value, shape) and parse(text, shape) convert single values; read(binding)
and write(binding, text) do the same through a live binding. Codec shapes always
go through their __marshal__/__unmarshal__ hooks; everything else is handled by
the raw kind:

    kind    accepted text
    bool    1 t T TRUE true True / 0 f F FALSE false False
    int     [+-] then decimal, 0x.., 0o.., 0b.., legacy 0-prefixed octal; "_" separators
    float   decimal or exponential forms, inf, nan
    str     anything (verbatim)

Integers outside the declared Bounds are rejected ("value overflows"). Int and str
subclasses (IntEnum, StrEnum, ...) are coerced through their constructor.
"""
import re

from .faults import ConversionError, UnsupportedKindError
from .shapes import Codec, Scalar

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

# sign, then either a prefixed literal or a run of digits; "_" only between digits
_INTEGER = re.compile(r"[+-]?(0[xX](_?[0-9a-fA-F])+|0[oO](_?[0-7])+|0[bB](_?[01])+|[0-9](_?[0-9])*)")


def parse_bool(text, /):
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConversionError("invalid boolean %r" % text)


def parse_int(text, /):
    if not _INTEGER.fullmatch(text):
        raise ConversionError("invalid integer %r" % text)
    sign, digits = (text[0], text[1:]) if text[0] in "+-" else ("", text)
    # 0755 is octal, as in C-like literals
    if len(digits) > 1 and digits[0] == "0" and digits[1] not in "xXoObB":
        digits = "0o" + digits[1:].lstrip("_")
    try:
        return int(sign + digits, 0)
    except ValueError:
        raise ConversionError("invalid integer %r" % text) from None


def parse_float(text, /):
    try:
        return float(text)
    except ValueError:
        raise ConversionError("invalid float %r" % text) from None


_PARSERS = {
    "bool": parse_bool,
    "int": parse_int,
    "float": parse_float,
    "str": str,
}


def parse(text, shape, /):
    """
    Convert text into a value of the given primitive shape.

    Raises
    - ConversionError when the text is not a valid literal, overflows the declared
      width, or is refused by the type's __unmarshal__ hook.
    - UnsupportedKindError when the shape is not primitive.
    """
    if not isinstance(text, str):
        raise TypeError("parse() first argument must be a string")

    match shape:
        case Codec(type=type):
            try:
                return type.__unmarshal__(text)
            except ConversionError:
                raise
            except (ValueError, TypeError, KeyError) as error:
                raise ConversionError(str(error)) from error
        case Scalar(type=type, kind=kind, bounds=bounds):
            value = _PARSERS[kind](text)
            if bounds is not None and value not in bounds:
                raise ConversionError("value overflows: %d" % value)
            if type in (bool, int, float, str):
                return value
            # subclasses (enums and friends) decide which raw values they accept
            try:
                return type(value)
            except (ValueError, TypeError) as error:
                raise ConversionError(str(error)) from None
    raise UnsupportedKindError("unsupported kind: %r" % (shape,))


def format(value, shape, /):
    """
    Render a value of the given primitive shape as text.
    """
    if value is None:
        return "null"
    match shape:
        case Codec():
            return value.__marshal__()
        case Scalar(kind="bool"):
            return "true" if value else "false"
        case Scalar(kind="int"):
            return str(int(value))
        case Scalar(kind="float"):
            return repr(float(value))
        case Scalar(kind="str"):
            return str.__str__(value)
    raise UnsupportedKindError("unsupported kind: %r" % (shape,))


def read(binding, /):
    """Current value of a primitive binding, as text."""
    return format(binding.get(), binding.shape)


def write(binding, text, /):
    """Parse text and store it through the binding; a failed parse leaves the slot untouched."""
    binding.set(parse(text, binding.shape))


__all__ = (
    "parse",
    "format",
    "read",
    "write",
    "parse_bool",
    "parse_int",
    "parse_float",
)
