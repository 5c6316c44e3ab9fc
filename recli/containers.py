"""
Command sets for list and dict fields.

Lists (sequence_commands)
- one ITEMS node per element, named by the keyer, holding the element's own
  commands plus "delete".
- keyer: the element index, or, for records, the value of the field carrying
  the id tag.
- "list" prints every key in order.
- scalar elements: "add <value>".
- record elements: "add -flag=value ..." (zero item, tag defaults, then the flags
  that were set) and "add-json <json>" (decoded as-is).

Dicts (mapping_commands)
- keys and values must be primitive (scalar or codec).
- "dump", "get <key>", "set <key> <value>", "unset <key>".
- "get" on an absent key prints the `missing` sentinel.

Both builders take the Constructor that is building the tree; record elements
are expanded with constructor.construct().
"""
import copy
from collections import Counter

from . import codec, serial
from .defaults import apply_defaults
from .faults import *
from .nodes import ACTIONS, ITEMS, Flag, Node, expect_args
from .shapes import Binding, Codec, Record, Sequence, assign, describe, is_primitive, zero
from .utils import Unset
from .void import missing


def _items(binding):
    """The live list behind a binding, created on first use when it is None."""
    items = binding.get()
    if items is None:
        items = []
        binding.set(items)
    return items


def _keyer(constructor, binding):
    """
    Return keyer(index) -> str for the list behind binding.
    """
    element = binding.shape.element
    if isinstance(element, Record):
        for descriptor in describe(element.type):
            if descriptor.tagged(constructor.config.id_tag):
                name, shape = descriptor.name, descriptor.shape
                if not is_primitive(shape):
                    raise UnsupportedKindError("unsupported kind for an id field: %r" % (shape,))

                def keyer(index):
                    return codec.format(getattr(binding.get()[index], name), shape)

                return keyer

    def keyer(index):
        return str(index)

    return keyer


# action names a list group may hold next to its items
_RESERVED = frozenset(("list", "add", "add-json"))


def sequence_commands(constructor, binding, /):
    element = binding.shape.element
    if not is_primitive(element) and not isinstance(element, Record):
        raise UnsupportedKindError("unsupported kind for a list element: %r" % (element,))

    keyer = _keyer(constructor, binding)
    items = binding.get() or []
    commands = []

    keys = [keyer(index) for index in range(len(items))]
    for key, count in Counter(keys).items():
        if count > 1:
            trigger(DuplicateKeyWarning("%d items share the key %r" % (count, key), path=(key,)))
        if key in _RESERVED:
            trigger(DuplicateKeyWarning("item key %r is shadowed by a command of the same name" % key, path=(key,)))

    for index, key in enumerate(keys):
        try:
            if isinstance(element, Record):
                children = constructor.construct(items[index])
            else:
                children = constructor.primitive_commands(Binding.item(items, index, element))
        except CommandException as error:
            raise copy.replace(error, path=(key, *error.path)) from None

        if any(child.name == "delete" for child in children):
            raise UnsupportedKindError("command name 'delete' is already taken by a field", path=(key, "delete"))
        children.append(_delete_command(binding, index, key))
        commands.append(Node(key, category=ITEMS, children=children))

    def listing(context):
        for index in range(len(binding.get() or ())):
            constructor.config.value_printer(keyer(index))

    commands.append(Node(
        "list",
        usage="List item keys in the collection",
        category=ACTIONS,
        action=expect_args(0, listing),
    ))

    if is_primitive(element):
        def add(context):
            value = codec.parse(context.args[0], element)
            _items(binding).append(value)

        commands.append(Node(
            "add",
            usage="Add a new item to the collection",
            args_usage="[value]",
            category=ACTIONS,
            action=expect_args(1, add),
        ))
    else:
        commands.extend(_record_builders(constructor, binding))

    return commands


def _delete_command(binding, index, key):
    def delete(context):
        del binding.get()[index]

    return Node(
        "delete",
        usage="Delete item represented by key %r from the collection" % key,
        category=ACTIONS,
        action=expect_args(0, delete),
    )


def _item_flags(constructor, element):
    """
    One flag per primitive field and one repeatable flag per list-of-primitives
    field of the element type. Other fields (bool lists included) cannot be set
    from flags.
    """
    config = constructor.config
    flags = {}
    for descriptor in describe(element.type):
        if descriptor.private or descriptor.tagged(config.skip_tag):
            continue
        try:
            shape = descriptor.shape
        except UnsupportedKindError:
            continue
        if is_primitive(shape):
            kind, multiple = _flag_type(shape), False
        elif isinstance(shape, Sequence) and is_primitive(shape.element) and _flag_type(shape.element) is not bool:
            kind, multiple = _flag_type(shape.element), True
        else:
            continue

        name = config.converter(descriptor.name)
        if name in flags:
            raise UnsupportedKindError("flag name %r is already taken by another field" % name, path=(descriptor.name,))
        usage = "default value: %s" % default if (default := descriptor.metadata.get(config.default_tag)) else Unset
        try:
            flags[name] = Flag(name, kind, multiple=multiple, usage=usage)
        except ValueError as error:
            raise UnsupportedKindError(str(error), path=(descriptor.name,)) from None
    return list(flags.values())


def _flag_type(shape):
    # codec values travel as text and are unmarshalled by the codec
    if isinstance(shape, Codec):
        return str
    return {"bool": bool, "int": int, "float": float, "str": str}[shape.kind]


def _text(value):
    # flag values come back already typed; the scalar codec re-parses their text
    # form so bounds and subclass coercion apply exactly as for "set"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _record_builders(constructor, binding):
    config = constructor.config
    element = binding.shape.element
    flags = _item_flags(constructor, element)

    def add(context):
        if not context.flags:
            raise NoPropertiesSpecifiedError("no properties specified")

        item = apply_defaults(zero(element), config.default_tag)

        values = {}
        for descriptor in describe(element.type):
            name = config.converter(descriptor.name)
            if name not in context.flags or descriptor.private or descriptor.tagged(config.skip_tag):
                continue
            shape = descriptor.shape
            value = context.flags[name]
            try:
                if is_primitive(shape):
                    parsed = codec.parse(_text(value), shape)
                else:
                    parsed = [codec.parse(_text(entry), shape.element) for entry in value]
            except CommandException as error:
                raise copy.replace(error, path=(name, *error.path)) from None
            values[descriptor.name] = parsed

        _items(binding).append(assign(item, values))

    def add_json(context):
        _items(binding).append(serial.decode(context.args[0], element.type))

    return [
        Node(
            "add",
            usage="Add a new item to the collection",
            args_usage="-attribute=value",
            category=ACTIONS,
            action=expect_args(0, add),
            flags=flags,
        ),
        Node(
            "add-json",
            usage="Add a new item to the collection deserialised from JSON",
            args_usage="[value]",
            category=ACTIONS,
            action=expect_args(1, add_json),
        ),
    ]


def _mapping(binding):
    mapping = binding.get()
    if mapping is None:
        mapping = {}
        binding.set(mapping)
    return mapping


def mapping_commands(constructor, binding, /):
    shape = binding.shape
    for label, part in (("key", shape.key), ("value", shape.value)):
        if not is_primitive(part):
            raise UnsupportedKindError("unsupported kind for a dict %s: %r" % (label, part))
    config = constructor.config

    def dump(context):
        for key, value in (binding.get() or {}).items():
            config.key_value_printer(codec.format(key, shape.key), codec.format(value, shape.value))

    def get(context):
        key = codec.parse(context.args[0], shape.key)
        mapping = binding.get() or {}
        if key not in mapping:
            config.value_printer(missing)
            return
        config.value_printer(codec.format(mapping[key], shape.value))

    def store(context):
        key = codec.parse(context.args[0], shape.key)
        value = codec.parse(context.args[1], shape.value)
        _mapping(binding)[key] = value

    def unset(context):
        key = codec.parse(context.args[0], shape.key)
        (binding.get() or {}).pop(key, None)

    return [
        Node(
            "dump",
            usage="Dump all keys and their values",
            category=ACTIONS,
            action=expect_args(0, dump),
        ),
        Node(
            "get",
            usage="Get the value of a given key",
            args_usage="[key]",
            category=ACTIONS,
            action=expect_args(1, get),
        ),
        Node(
            "set",
            usage="Set the key to the given value",
            args_usage="[key] [value]",
            category=ACTIONS,
            action=expect_args(2, store),
        ),
        Node(
            "unset",
            usage="Remove the key from the map",
            args_usage="[key]",
            category=ACTIONS,
            action=expect_args(1, unset),
        ),
    ]


__all__ = (
    "sequence_commands",
    "mapping_commands",
)
