"""
Builder policy: which tags mean what, how fields are named, where output goes.

Config is immutable. Derive variants with copy.replace:

    quiet = copy.replace(STANDARD, value_printer=lines.append)

STANDARD
- skip tag: recli="-"          (field hidden from the command tree)
- id tag: recli="id"           (field value names list items)
- usage tag: usage="..."       (help text of the field's node)
- default tag: default="..."   (value applied by apply_defaults)
- converter: dashed            (ListenAddress -> listen-address)
- printers: rich console on stdout ("value" and "key = value")
"""
import functools
import operator
from typing import NamedTuple, final

from rich.console import Console

from .utils import *

console = Console(soft_wrap=True)


class Tag(NamedTuple):
    """(metadata key, marker value) pair, e.g. Tag("recli", "id")."""
    name: str
    value: str


def print_value(value, /):
    console.print(value, markup=False, highlight=False)


def print_key_value(key, value, /):
    console.print(key, "=", value, markup=False, highlight=False)


@final
class Config:
    """
    Immutable policy object handed to Constructor.

    Properties
    - skip_tag, id_tag: Tag
    - usage_tag, default_tag: str (metadata keys)
    - converter: Callable[[str], str] (field name -> command name)
    - value_printer: Callable[[object], None]
    - key_value_printer: Callable[[object, object], None]
    """

    __introspectable__ = (
        "skip_tag",
        "id_tag",
        "usage_tag",
        "default_tag",
        "converter",
        "value_printer",
        "key_value_printer",
    )

    skip_tag = mirror("skip_tag")
    id_tag = mirror("id_tag")
    usage_tag = mirror("usage_tag")
    default_tag = mirror("default_tag")
    converter = mirror("converter")
    value_printer = mirror("value_printer")
    key_value_printer = mirror("key_value_printer")

    def __init__(
            self,
            *,
            skip_tag=Tag("recli", "-"),
            id_tag=Tag("recli", "id"),
            usage_tag="usage",
            default_tag="default",
            converter=dashed,
            value_printer=print_value,
            key_value_printer=print_key_value,
    ):
        for name, tag in (("skip_tag", skip_tag), ("id_tag", id_tag)):
            if not isinstance(tag, Tag):
                raise TypeError(f"config {name!r} must be a Tag")
        for name, key in (("usage_tag", usage_tag), ("default_tag", default_tag)):
            if not isinstance(key, str):
                raise TypeError(f"config {name!r} must be a string")
            elif not key.strip():
                raise ValueError(f"config {name!r} cannot be empty")
        for name, function in (
                ("converter", converter),
                ("value_printer", value_printer),
                ("key_value_printer", key_value_printer),
        ):
            if not callable(function):
                raise TypeError(f"config {name!r} must be callable")

        self._skip_tag = skip_tag
        self._id_tag = id_tag
        self._usage_tag = usage_tag.strip()
        self._default_tag = default_tag.strip()
        self._converter = converter
        self._value_printer = value_printer
        self._key_value_printer = key_value_printer

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"config attribute {name!r} is read-only")
        super().__setattr__(name, value)

    def __replace__(self, /, **changes):
        return type(self)(**{name: getattr(self, name) for name in self.__introspectable__} | changes)

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"config({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"


STANDARD = Config()


__all__ = (
    "Tag",
    "Config",
    "STANDARD",
    "print_value",
    "print_key_value",
)
