"""
recli utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the configuration, node and builder layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated leaf actions for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr); mutable
    containers are copied on the way out so public state cannot be edited in place.

- dashed(name)
  • Default field-name converter: ListenAddress -> listen-address, TimeoutMS -> timeout-ms.

Stability and contract
- Names in __all__ are re-exported by the package; anything else may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> dashed("MaxConnsPerHost")
    'max-conns-per-host'
"""
import builtins
import functools
from collections.abc import Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    Leaf actions are closures generated per field; naming them after the
    command they serve keeps tracebacks readable (e.g. "backends.add").
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                # Built-in callables refuse attribute updates.
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy mutable containers recursively; tuples and scalars are returned as-is.

    Tuples are kept because node children, flags and tags are stored as tuples
    (or tuple subclasses such as Tag) and must keep their type.
    """
    if isinstance(object, list):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set) and not isinstance(object, frozenset):
        return set(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a copy
    for mutable containers.

    Example
    - Given self._children, declare children = mirror("children").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def dashed(name, /):
    """
    Convert a field name into a command name.

    rules
    - the first character is lowercased.
    - an uppercase character starts a new dash-separated word, unless the
      previous character was uppercase too or it is the last character; a
      trailing run of capitals is read as a unit suffix (TimeoutMS -> timeout-ms).
    - underscores become dashes; dashes are never doubled or trailing.

    examples
    - dashed("Address")        -> "address"
    - dashed("ListenAddress")  -> "listen-address"
    - dashed("UserID")         -> "user-id"
    - dashed("SizeKB")         -> "size-kb"
    - dashed("max_conns")      -> "max-conns"
    """
    if not isinstance(name, str):
        raise TypeError("dashed() argument must be a string")

    output = []
    uppercase = False
    for index, char in enumerate(name):
        if index == 0:
            output.append(char.lower())
        elif char == "_":
            if output[-1] != "-":
                output.append("-")
        elif char.isupper():
            if not uppercase and index != len(name) - 1 and output[-1] != "-":
                output.append("-")
            output.append(char.lower())
        else:
            output.append(char)
        uppercase = char.isupper()
    return "".join(output).rstrip("-")


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Typical pattern: value = coalesce(user_value, default) to materialize a fallback
only when user_value is Unset (None and other falsey values are preserved).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "dashed",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
