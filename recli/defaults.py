"""
Tag-declared default values.

apply_defaults(record, tag="default") walks a record graph depth-first and assigns
the default declared in each field's metadata, e.g.

    port: int = field(default=0, metadata={"default": "2019"})
    tags: list[str] = field(default_factory=list, metadata={"default": "a,b"})

order per field
1. nested records are recursed into first; records never take a default themselves.
2. no tag (or an empty one): the field is left untouched.
3. a __parse_default__(cls, text) classmethod on the declared type decides alone.
4. scalars and codec scalars parse the text through the scalar codec.
5. lists of scalars split the text on "," and parse every element.
6. any other shape carrying a tag is an unsupported kind.

cycles
- visited holds id() of every record already handled; a record reached again
  (self reference, shared sub-record) is skipped, so each record gets its
  defaults exactly once.

frozen records
- they are rebuilt with dataclasses.replace() rather than written; nested
  frozen records are swapped into their parent the same way.
"""
import copy
import dataclasses
import types
import typing

from . import codec
from .faults import CommandException, UnsupportedKindError
from .shapes import Sequence, assign, describe, is_primitive
from .utils import Unset


def apply_defaults(record, tag="default", visited=None):
    """
    Apply tag defaults to record and everything below it.

    Returns the record. A frozen record is rebuilt instead of written, so the
    returned object is then a copy and the caller has to keep that one.
    """
    if not dataclasses.is_dataclass(record) or isinstance(record, type):
        raise TypeError("apply_defaults() first argument must be a dataclass instance")

    if visited is None:
        visited = set()
    if id(record) in visited:
        return record
    visited.add(id(record))

    values = {}
    for descriptor in describe(type(record)):
        try:
            value = _default(record, descriptor, tag, visited)
        except CommandException as error:
            raise copy.replace(error, path=(descriptor.name, *error.path)) from None
        if value is not Unset:
            values[descriptor.name] = value
    return assign(record, values)


def _default(record, descriptor, tag, visited):
    value = getattr(record, descriptor.name)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        updated = apply_defaults(value, tag, visited)
        return updated if updated is not value else Unset

    if not (text := descriptor.metadata.get(tag)):
        return Unset

    hook = getattr(_declared(descriptor), "__parse_default__", None)
    if callable(hook):
        return hook(text)

    shape = descriptor.shape
    if is_primitive(shape):
        return codec.parse(text, shape)
    elif isinstance(shape, Sequence) and is_primitive(shape.element):
        return [codec.parse(item, shape.element) for item in text.split(",")]
    raise UnsupportedKindError("unsupported kind for a default value: %r" % (shape,))


def _declared(descriptor):
    # the class behind Optional[...] / Annotated[...] wrappers, when there is one
    annotation = descriptor.annotation
    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        members = [member for member in typing.get_args(annotation) if member is not types.NoneType]
        if len(members) == 1:
            annotation, = members
    return annotation if isinstance(annotation, type) else None


__all__ = (
    "apply_defaults",
)
