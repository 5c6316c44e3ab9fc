"""
Sentinel for lookups that found nothing.

This module exposes a single instance: `missing`. Map `get` leaves hand it to the
value printer when the requested key is absent, so a not-found lookup is reported
as a value instead of aborting the command. It is falsy, prints as "(missing)",
and renders with colors in Rich.

Common patterns
- Printers can test identity:
    def printer(value):
        if value is missing: ...
"""
from rich.text import Text

missing = type("missing-type", (), {
    "__module__": None,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("missing", "red"), (")", "yellow")),
    "__repr__": lambda self: "(missing)",
    "__str__": lambda self: "(missing)",
    "__bool__": lambda self: False,
    "__doc__": "singleton reported in place of a value that does not exist",
    # Cache the singleton creation so repeated instantiation returns the same object.
    "__new__": __import__("functools").cache(lambda cls: super(type, cls).__new__(cls)),
})()


__all__ = ("missing",)
