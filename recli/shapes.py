"""
Value classification: reduce a declared field type to one of five shapes.

Shapes (a closed tagged union; dispatch with match)
- Scalar(type, kind, bounds): bool, int (any width), float, str, and their
  subclasses (IntEnum, StrEnum, ...). All integer widths share the "int" kind;
  the width survives only as Bounds, checked when a value is parsed.
- Codec(type): a type exposing the text hooks
    • __marshal__(self) -> str
    • __unmarshal__(cls, text) -> instance   (classmethod)
  The hooks win over the raw kind, so an IntEnum with hooks round-trips by name.
- Record(type): a dataclass type.
- Sequence(type, element): list[T].
- Mapping(type, key, value): dict[K, V].

Anything else raises UnsupportedKindError. Optional[X] classifies as X.

Also here
- Bounds and the fixed-width aliases Int8 ... UInt64 (Annotated[int, Bounds]).
- TextCodec: mixin giving Enum classes the text hooks (symbolic names).
- Descriptor / describe(): per-class field descriptors (name, annotation, metadata).
- Binding: getter/setter closures bound to a record attribute or a list slot.
- zero(shape): the zero value used when a collection item is built from flags.
- assign(record, values): field writes that also work on frozen records.
"""
import builtins
import dataclasses
import enum
import functools
import types
import typing
from typing import Annotated, NamedTuple

from .faults import ConversionError, UnsupportedKindError


class Bounds(NamedTuple):
    """Inclusive integer range of a fixed-width field."""
    minimum: int
    maximum: int

    def __contains__(self, value):
        return self.minimum <= value <= self.maximum


Int8 = Annotated[int, Bounds(-2 ** 7, 2 ** 7 - 1)]
Int16 = Annotated[int, Bounds(-2 ** 15, 2 ** 15 - 1)]
Int32 = Annotated[int, Bounds(-2 ** 31, 2 ** 31 - 1)]
Int64 = Annotated[int, Bounds(-2 ** 63, 2 ** 63 - 1)]
UInt8 = Annotated[int, Bounds(0, 2 ** 8 - 1)]
UInt16 = Annotated[int, Bounds(0, 2 ** 16 - 1)]
UInt32 = Annotated[int, Bounds(0, 2 ** 32 - 1)]
UInt64 = Annotated[int, Bounds(0, 2 ** 64 - 1)]


class TextCodec:
    """
    Mixin giving an Enum the text hooks, using lowercased member names.

        class Auth(TextCodec, IntEnum):
            STATIC = 1
            LDAP = 2

    Auth.LDAP marshals to "ldap" and "ldap"/"LDAP" unmarshal to Auth.LDAP.
    """

    def __marshal__(self):
        return self.name.lower()

    @classmethod
    def __unmarshal__(cls, text):
        try:
            return cls[text.upper()]
        except KeyError:
            choices = ", ".join(member.name.lower() for member in cls)
            raise ConversionError(
                "invalid %s %r (expected one of: %s)" % (cls.__name__, text, choices)
            ) from None


class Scalar(NamedTuple):
    type: type
    kind: str
    bounds: Bounds | None = None


class Codec(NamedTuple):
    type: type


class Record(NamedTuple):
    type: type


class Sequence(NamedTuple):
    type: type
    element: "Scalar | Codec | Record | Sequence | Mapping"


class Mapping(NamedTuple):
    type: type
    key: "Scalar | Codec | Record | Sequence | Mapping"
    value: "Scalar | Codec | Record | Sequence | Mapping"


_KINDS = {bool: "bool", int: "int", float: "float", str: "str"}


def is_codec(cls, /):
    """True when cls carries both text hooks."""
    return (
        isinstance(cls, builtins.type) and
        callable(getattr(cls, "__marshal__", None)) and
        callable(getattr(cls, "__unmarshal__", None))
    )


def classify(annotation, /):
    """
    Return the shape of a declared type.

    Raises
    - UnsupportedKindError when the type has no command representation.
    """
    bounds = None
    if typing.get_origin(annotation) is Annotated:
        annotation, *extras = typing.get_args(annotation)
        bounds = next((extra for extra in extras if isinstance(extra, Bounds)), None)

    origin = typing.get_origin(annotation)

    # Optional[X] and X | None behave as X.
    if origin is typing.Union or origin is types.UnionType:
        members = [member for member in typing.get_args(annotation) if member is not types.NoneType]
        if len(members) != 1:
            raise UnsupportedKindError("unsupported kind: %s" % _typename(annotation))
        return classify(members[0])

    if origin is list:
        element, = typing.get_args(annotation) or (None,)
        if element is None:
            raise UnsupportedKindError("unsupported kind: list without element type")
        return Sequence(list, classify(element))

    if origin is dict:
        arguments = typing.get_args(annotation)
        if len(arguments) != 2:
            raise UnsupportedKindError("unsupported kind: dict without key and value types")
        return Mapping(dict, classify(arguments[0]), classify(arguments[1]))

    if not isinstance(annotation, builtins.type) or origin is not None:
        raise UnsupportedKindError("unsupported kind: %s" % _typename(annotation))

    if is_codec(annotation):
        return Codec(annotation)

    # bool is checked before int (bool subclasses int).
    for base, kind in _KINDS.items():
        if issubclass(annotation, base):
            return Scalar(annotation, kind, bounds if kind == "int" else None)

    if dataclasses.is_dataclass(annotation):
        return Record(annotation)

    raise UnsupportedKindError("unsupported kind: %s" % _typename(annotation))


def is_primitive(shape, /):
    """True for shapes that read and write as a single text token."""
    return isinstance(shape, Scalar | Codec)


def _typename(annotation):
    return getattr(annotation, "__qualname__", None) or repr(annotation)


class Descriptor(NamedTuple):
    """
    Read-only view of one dataclass field.

    The shape is not stored: classification happens on demand so that fields
    hidden by tags never have to be representable.
    """
    name: str
    annotation: object
    metadata: typing.Mapping[str, object]
    frozen: bool

    @property
    def private(self):
        return self.name.startswith("_")

    @property
    def shape(self):
        return classify(self.annotation)

    def tagged(self, tag, /):
        """True when metadata[tag.name] lists tag.value among its comma-separated entries."""
        return tag.value in str(self.metadata.get(tag.name, "")).split(",")


@functools.cache
def describe(cls, /):
    """
    Return the field descriptors of a dataclass type, in declaration order.
    """
    if not dataclasses.is_dataclass(cls) or not isinstance(cls, builtins.type):
        raise TypeError("describe() argument must be a dataclass type")
    hints = typing.get_type_hints(cls, include_extras=True)
    frozen = cls.__dataclass_params__.frozen
    return tuple(
        Descriptor(field.name, hints[field.name], field.metadata, frozen)
        for field in dataclasses.fields(cls)
    )


class Binding:
    """
    Live handle to one storage slot: a record attribute or a list element.

    Leaf actions hold bindings instead of values so every read sees the current
    state and every write lands in the caller's object.
    """
    __slots__ = ("shape", "settable", "_getter", "_setter")

    def __init__(self, shape, getter, setter=None):
        self.shape = shape
        self.settable = setter is not None
        self._getter = getter
        self._setter = setter

    @classmethod
    def attribute(cls, owner, descriptor, /):
        name = descriptor.name

        def getter():
            return getattr(owner, name)

        def setter(value):
            setattr(owner, name, value)

        return cls(descriptor.shape, getter, None if descriptor.frozen else setter)

    @classmethod
    def item(cls, items, index, shape, /):
        def getter():
            return items[index]

        def setter(value):
            items[index] = value

        return cls(shape, getter, setter)

    def get(self):
        return self._getter()

    def set(self, value):
        if self._setter is None:
            raise TypeError("binding is read-only")
        self._setter(value)

    def __repr__(self):
        return "binding(shape=%r, settable=%r)" % (self.shape, self.settable)


def zero(shape, /):
    """
    Return the zero value for a shape.

    - scalars: False / 0 / 0.0 / "" (enums: their first member)
    - codecs: their first member for enums, otherwise type()
    - records: the dataclass built from its own defaults, with zero values for
      required fields
    - lists / dicts: new empty containers
    """
    match shape:
        case Scalar(type=type) | Codec(type=type):
            if issubclass(type, enum.Enum):
                return next(iter(type))
            return type()
        case Record(type=type):
            fields = {field.name: field for field in dataclasses.fields(type)}
            arguments = {}
            for descriptor in describe(type):
                field = fields[descriptor.name]
                if not field.init:
                    continue
                if field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:
                    continue
                arguments[descriptor.name] = None if _optional(descriptor.annotation) else zero(descriptor.shape)
            return type(**arguments)
        case Sequence():
            return []
        case Mapping():
            return {}
    raise UnsupportedKindError("unsupported kind: %r" % (shape,))


def assign(record, values, /):
    """
    Store values (field name -> value) on record and return the result.

    Frozen records cannot be written in place; they are rebuilt with
    dataclasses.replace() and the copy is returned instead.
    """
    if not values:
        return record
    if not type(record).__dataclass_params__.frozen:
        for name, value in values.items():
            setattr(record, name, value)
        return record
    for field in dataclasses.fields(record):
        if field.name in values and not field.init:
            raise UnsupportedKindError(
                "cannot rebuild frozen %s: field is not an init field" % type(record).__name__,
                path=(field.name,),
            )
    return dataclasses.replace(record, **values)


def _optional(annotation):
    if typing.get_origin(annotation) is Annotated:
        annotation = typing.get_args(annotation)[0]
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return types.NoneType in typing.get_args(annotation)
    return False


__all__ = (
    # Shapes
    "Scalar",
    "Codec",
    "Record",
    "Sequence",
    "Mapping",
    "classify",
    "is_primitive",
    "is_codec",

    # Integer widths
    "Bounds",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",

    # Text hooks
    "TextCodec",

    # Fields and storage
    "Descriptor",
    "describe",
    "Binding",
    "zero",
    "assign",
)
