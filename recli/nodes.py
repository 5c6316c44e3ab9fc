"""
recli command nodes: the output of the builder.

What this module provides
- Node: a named unit of the command tree. A grouping node holds children; a leaf
  holds an action (and, optionally, the flags that action accepts). A node never
  holds both.
- Flag: a named, typed switch declared by a leaf (bool, int, float or str; optionally
  repeatable).
- Context: what a leaf action receives: positional args plus the flags that were set.
- expect_args(n, action): wrap an action with an exact positional-arity check.

Categories
- PROPERTIES: one node per record field.
- ITEMS: one node per collection element.
- ACTIONS: leaves (get, set, list, add, delete, ...).

Lookup
- Sibling names are expected to be unique; when list items share a key, find()
  resolves to the last match.
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import NamedTuple

from .faults import WrongArityError
from .utils import *

PROPERTIES = "PROPERTIES"
ITEMS = "ITEMS"
ACTIONS = "ACTIONS"


class NodeType(type):
    """
    Metaclass giving node-like classes read-only properties and stable reprs.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when unset).
    - Derive __typename__ from the class name ("Node" -> "node").
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_FLAG_TYPES = (bool, int, float, str)


class Flag(metaclass=NodeType):
    """
    Named, typed switch accepted by a leaf.

    - name: bare name, written on the command line as -name or --name.
    - type: bool (presence, or -name=false), int, float or str.
    - multiple: repeatable; the leaf receives a list of every value given.
    - usage: help text.
    """

    __introspectable__ = (
        "name",
        "type",
        "multiple",
        "usage",
    )

    def __init__(self, name, /, type=str, *, multiple=False, usage=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{self.__typename__} 'name' {name!r} is not a valid flag name")
        if type not in _FLAG_TYPES:
            raise TypeError(f"{self.__typename__} 'type' must be one of bool, int, float or str")
        if multiple and type is bool:
            raise TypeError(f"{self.__typename__} boolean flags cannot be repeatable")
        if not isinstance(usage, str | Unset):
            raise TypeError(f"{self.__typename__} 'usage' must be a string")

        self._name = name
        self._type = type
        self._multiple = bool(multiple)
        self._usage = coalesce(usage)


class Node(metaclass=NodeType):
    """
    Named unit of a command tree.

    Properties
    - name: str (may be any text for collection items, e.g. "b1.com")
    - usage: str | None (one-line help)
    - args_usage: str | None (e.g. "[key] [value]")
    - category: str | None (PROPERTIES, ITEMS, ACTIONS)
    - children: tuple[Node, ...]
    - action: Callable[[Context], None] | None
    - flags: tuple[Flag, ...] (leaves only)
    """

    __introspectable__ = (
        "name",
        "usage",
        "args_usage",
        "category",
        "children",
        "action",
        "flags",
    )

    __displayable__ = (
        "name",
        "category",
        "children",
    )

    def __init__(
            self,
            name,
            /,
            *,
            usage=Unset,
            args_usage=Unset,
            category=Unset,
            children=(),
            action=Unset,
            flags=(),
    ):
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} 'name' must be a string")
        for label, object in (("usage", usage), ("args_usage", args_usage), ("category", category)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{self.__typename__} {label!r} must be a string")
        if not isinstance(children, Iterable) or isinstance(children, str):
            raise TypeError(f"{self.__typename__} 'children' must be an iterable of nodes")
        children = tuple(children)
        if not all(isinstance(child, Node) for child in children):
            raise TypeError(f"{self.__typename__} 'children' must be an iterable of nodes")
        if action is not Unset and not callable(action):
            raise TypeError(f"{self.__typename__} 'action' must be callable")
        flags = tuple(flags)
        if not all(isinstance(flag, Flag) for flag in flags):
            raise TypeError(f"{self.__typename__} 'flags' must be an iterable of flags")
        if children and action is not Unset:
            raise TypeError(f"{self.__typename__} {name!r} cannot have both children and an action")
        if flags and action is Unset:
            raise TypeError(f"{self.__typename__} {name!r} declares flags but has no action")
        if len({flag.name for flag in flags}) != len(flags):
            raise ValueError(f"{self.__typename__} {name!r} declares a flag name twice")

        self._name = name
        # empty usage strings (e.g. an empty metadata tag) read as "no usage"
        self._usage = coalesce(usage) or None
        self._args_usage = coalesce(args_usage)
        self._category = coalesce(category)
        self._children = children
        self._action = coalesce(action)
        self._flags = flags

    @property
    def leaf(self):
        return self._action is not None

    def find(self, name, /):
        """
        Return the child called name (last match wins), or None.
        """
        for child in reversed(self._children):
            if child.name == name:
                return child
        return None

    def flag(self, name, /):
        """
        Return the declared flag called name, or None.
        """
        return next((flag for flag in self._flags if flag.name == name), None)

    def __call__(self, *args, **flags):
        """
        Run the leaf action directly: node("value") or node(hostname="b2.com").

        Flag values are passed through untouched; no coercion happens here.
        """
        if not self.leaf:
            raise TypeError(f"{self.__typename__} {self.name!r} is not a leaf")
        return self._action(Context.of(args, flags))


class Context(NamedTuple):
    """
    Invocation data handed to a leaf action.

    - args: the positional arguments, as strings.
    - flags: read-only mapping of the flags that were explicitly set, already
      coerced to their declared type (lists for repeatable flags).
    """
    args: tuple[str, ...] = ()
    flags: Mapping[str, object] = MappingProxyType({})

    @classmethod
    def of(cls, args=(), flags=None, /):
        """Build a context from any iterable of args and any mapping of flags."""
        return cls(tuple(args), MappingProxyType(dict(flags or {})))


def expect_args(n, action, /):
    """
    Wrap a leaf action so it refuses any positional count other than n.
    """
    if not isinstance(n, int) or n < 0:
        raise TypeError("expect_args() first argument must be a non-negative integer")
    if not callable(action):
        raise TypeError("expect_args() second argument must be callable")

    @functools.wraps(action)
    def wrapper(context, /):
        if len(context.args) != n:
            raise WrongArityError("expected %d argument%s, got %d" % (n, "s" * (n != 1), len(context.args)))
        return action(context)

    return wrapper


__all__ = (
    "PROPERTIES",
    "ITEMS",
    "ACTIONS",
    "Flag",
    "Node",
    "Context",
    "expect_args",
)
