"""
JSON encoding of records (dump-json) and decoding of collection items (add-json).

encode(value) -> str
- dataclasses become objects keyed by field name (private "_" fields are left out);
- codec values use __marshal__; enums without hooks use their value;
- dict keys are rendered as text (JSON only has string keys).

decode(text, annotation) -> value
- starts from the zero value of the target, so absent keys keep zero values and
  unknown keys are ignored;
- codec values go through __unmarshal__, dict keys through the scalar codec;
- any mismatch between the JSON and the declared type is a ConversionError.
"""
import dataclasses
import enum
import json

from . import codec
from .faults import ConversionError
from .shapes import Codec, Mapping, Record, Scalar, Sequence, classify, describe, is_primitive, zero


def _plain(value):
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            descriptor.name: _plain(getattr(value, descriptor.name))
            for descriptor in describe(type(value))
            if not descriptor.private
        }
    if callable(getattr(value, "__marshal__", None)):
        return value.__marshal__()
    if isinstance(value, enum.Enum):
        return _plain(value.value)
    if isinstance(value, list | tuple):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {_key(key): _plain(item) for key, item in value.items()}
    return value


def _key(key):
    if callable(getattr(key, "__marshal__", None)):
        return key.__marshal__()
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, enum.Enum):
        return str(key.value)
    return str(key)


def encode(value, /):
    """Indented JSON text for a record (or any value made of supported shapes)."""
    return json.dumps(_plain(value), indent=2, ensure_ascii=False)


def _mismatch(expected, object):
    return ConversionError("cannot decode %s from JSON %s" % (expected, type(object).__name__))


def _build(object, shape):
    if object is None:
        return None

    match shape:
        case Codec():
            if not isinstance(object, str):
                raise _mismatch(shape.type.__name__, object)
            return codec.parse(object, shape)
        case Scalar(kind="bool"):
            if not isinstance(object, bool):
                raise _mismatch("bool", object)
            return codec.parse("true" if object else "false", shape)
        case Scalar(kind="int"):
            if isinstance(object, bool) or not isinstance(object, int):
                raise _mismatch("int", object)
            return codec.parse(str(object), shape)
        case Scalar(kind="float"):
            if isinstance(object, bool) or not isinstance(object, int | float):
                raise _mismatch("float", object)
            return shape.type(object)
        case Scalar(kind="str"):
            if not isinstance(object, str):
                raise _mismatch("str", object)
            return codec.parse(object, shape)
        case Record(type=cls):
            if not isinstance(object, dict):
                raise _mismatch(cls.__name__, object)
            settable = {field.name for field in dataclasses.fields(cls) if field.init}
            values = {
                descriptor.name: _build(object[descriptor.name], descriptor.shape)
                for descriptor in describe(cls)
                if not descriptor.private and descriptor.name in settable and descriptor.name in object
            }
            # replace() also works for frozen records
            return dataclasses.replace(zero(shape), **values)
        case Sequence(element=element):
            if not isinstance(object, list):
                raise _mismatch("list", object)
            return [_build(item, element) for item in object]
        case Mapping(key=key, value=value):
            if not isinstance(object, dict):
                raise _mismatch("dict", object)
            if not is_primitive(key):
                raise ConversionError("cannot decode dict keys of %r" % (key,))
            return {codec.parse(name, key): _build(item, value) for name, item in object.items()}


def decode(text, annotation, /):
    """
    Parse JSON text into a value of the declared type.

    Raises
    - ConversionError on malformed JSON or a type mismatch.
    - UnsupportedKindError when the declared type has no shape.
    """
    try:
        object = json.loads(text)
    except json.JSONDecodeError as error:
        raise ConversionError("invalid JSON: %s" % error) from None
    return _build(object, classify(annotation))


__all__ = (
    "encode",
    "decode",
)
