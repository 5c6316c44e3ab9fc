"""
recli builder: compile a record into a command tree.

What this module provides
- Constructor: holds a Config and turns dataclass instances into lists of Nodes.
- construct(record, config=STANDARD): one-shot convenience wrapper.

Per field
- hidden: private names ("_x") and fields carrying the skip tag.
- scalar / codec   -> "get" and, unless the record is frozen, "set <value>".
- record           -> the nested record's own tree.
- list / dict      -> see recli.containers.
Every level also gets a "dump-json" leaf printing the (sub-)record as JSON.

Quick start
    from dataclasses import dataclass, field
    from recli import construct, invoke

    @dataclass
    class Backend:
        hostname: str = field(default="", metadata={"recli": "id"})
        port: int = field(default=0, metadata={"default": "2019"})

    @dataclass
    class Proxy:
        address: str = ""
        backends: list[Backend] = field(default_factory=list)

    proxy = Proxy()
    invoke(construct(proxy), "backends add -hostname=b2.com")
    # proxy.backends == [Backend("b2.com", 2019)]

Errors
- InvalidInputError: the argument is not a dataclass instance.
- UnsupportedKindError: a visible field has no command representation; the fault's
  path names the field (e.g. "listeners.b1.com.handler: unsupported kind: ...").
  Two fields whose names convert to the same command name fail the same way.
Construction is all-or-nothing: no partial tree is ever returned.
"""
import copy
import dataclasses

from . import codec, serial
from .config import STANDARD, Config
from .containers import mapping_commands, sequence_commands
from .faults import *
from .nodes import ACTIONS, PROPERTIES, Node, expect_args
from .shapes import Binding, Codec, Mapping, Record, Scalar, Sequence, describe


class Constructor:
    """
    Command tree compiler bound to one configuration.

    Constructors hold no per-record state; one instance can build trees for any
    number of records.
    """

    def __init__(self, config=STANDARD, /):
        if not isinstance(config, Config):
            raise TypeError("Constructor() argument must be a config")
        self._config = config

    @property
    def config(self):
        return self._config

    def construct(self, record, /):
        """
        Build the command list for record.

        Returns
        - list[Node]: one PROPERTIES node per visible field, then "dump-json".

        Raises
        - InvalidInputError, UnsupportedKindError (see module docs).
        """
        if isinstance(record, type) or not dataclasses.is_dataclass(record):
            raise InvalidInputError(
                "expected a dataclass instance, got: %s" % (
                    "the class %s" % record.__name__ if isinstance(record, type) else type(record).__name__
                )
            )

        commands = []
        taken = {"dump-json"}
        for descriptor in describe(type(record)):
            if descriptor.private or descriptor.tagged(self._config.skip_tag):
                continue
            name = self._config.converter(descriptor.name)
            if name in taken:
                raise UnsupportedKindError("command name %r is already taken" % name, path=(descriptor.name,))
            taken.add(name)
            try:
                children = self.value_commands(Binding.attribute(record, descriptor))
            except CommandException as error:
                raise copy.replace(error, path=(descriptor.name, *error.path)) from None

            commands.append(Node(
                name,
                usage=str(descriptor.metadata.get(self._config.usage_tag, "")),
                category=PROPERTIES,
                children=children,
            ))

        commands.append(self._dumper(record))
        return commands

    def value_commands(self, binding, /):
        """
        Commands for one bound value, dispatched on its shape.
        """
        match binding.shape:
            case Scalar() | Codec():
                return self.primitive_commands(binding)
            case Record(type=cls):
                value = binding.get()
                if not dataclasses.is_dataclass(value) or isinstance(value, type):
                    raise UnsupportedKindError("unaddressable record: %s is %r" % (cls.__name__, value))
                return self.construct(value)
            case Sequence():
                return sequence_commands(self, binding)
            case Mapping():
                return mapping_commands(self, binding)
        raise UnsupportedKindError("unsupported kind: %r" % (binding.shape,))

    def primitive_commands(self, binding, /):
        """
        "get" and, for settable bindings, "set <value>".
        """
        printer = self._config.value_printer

        def get(context):
            printer(codec.read(binding))

        commands = [Node(
            "get",
            usage="Get the value",
            category=ACTIONS,
            action=expect_args(0, get),
        )]

        if binding.settable:
            def set(context):
                codec.write(binding, context.args[0])

            commands.append(Node(
                "set",
                usage="Set the value",
                args_usage="[value]",
                category=ACTIONS,
                action=expect_args(1, set),
            ))
        return commands

    def _dumper(self, record):
        printer = self._config.value_printer

        def dump_json(context):
            printer(serial.encode(record))

        return Node(
            "dump-json",
            usage="Dump item as json",
            category=ACTIONS,
            action=expect_args(0, dump_json),
        )


def construct(record, /, config=STANDARD):
    """
    Build the command list for record with the given configuration.
    """
    return Constructor(config).construct(record)


__all__ = (
    "Constructor",
    "construct",
)
