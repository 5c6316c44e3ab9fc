"""
Command tree construction tests.

Scope
- Tree layout: one node per visible field, hidden fields, usage, dump-json.
- Scalar leaves: get/set, frozen records, text codecs.
- Faults: invalid input, unsupported kinds and their field paths, arity.

Conventions
- Printed values are collected by a config whose printers append to lists.
- Leaves are driven through invoke() so routing matches real command lines.
"""
import copy
import json
import unittest
from dataclasses import dataclass, field
from enum import IntEnum
from unittest import TestCase

from recli import *


class Auth(TextCodec, IntEnum):
    STATIC = 1
    LDAP = 2


@dataclass
class Backend:
    hostname: str = field(default="", metadata={"recli": "id", "usage": "Backend host name"})
    port: int = field(default=0, metadata={"default": "2019"})


@dataclass
class Proxy:
    address: str = ""
    backends: list[Backend] = field(default_factory=list)


@dataclass
class Directory:
    auth: Auth = Auth.STATIC


@dataclass(frozen=True)
class Point:
    x: int = 0
    y: int = 0


@dataclass
class Limits:
    MaxConns: UInt8 = 10
    TimeoutMS: int = 0
    enabled: bool = False
    ratio: float = 0.5


@dataclass
class Hidden:
    name: str = ""
    handler: object = field(default=None, metadata={"recli": "-"})
    _secret: object = None


@dataclass
class Broken:
    handler: complex = 0j


@dataclass
class Listener:
    address: str = field(default="", metadata={"recli": "id"})
    handler: complex = 0j


@dataclass
class Listeners:
    listeners: list[Listener] = field(default_factory=list)


@dataclass
class Shadow:
    dump_json: str = ""


@dataclass
class Twins:
    max_conns: int = 0
    MaxConns: int = 0


@dataclass
class Site:
    name: str = ""
    limits: Limits = field(default_factory=Limits)
    fallback: Limits | None = None


class Recorder:
    """Collect what the printers receive."""

    def __init__(self):
        self.values = []
        self.pairs = []
        self.config = copy.replace(
            STANDARD,
            value_printer=self.values.append,
            key_value_printer=lambda key, value: self.pairs.append((key, value)),
        )


def names(nodes):
    return [node.name for node in nodes]


def child(nodes, *route):
    for name in route:
        nodes = next(node for node in reversed(nodes) if node.name == name).children
    return nodes


class LayoutTest(TestCase):

    def setUp(self):
        self.proxy = Proxy(address=":8080", backends=[Backend("b1.com", 2019)])
        self.commands = construct(self.proxy)

    def testTopLevel(self):
        self.assertEqual(names(self.commands), ["address", "backends", "dump-json"])
        self.assertEqual(self.commands[0].category, PROPERTIES)
        self.assertEqual(self.commands[-1].category, ACTIONS)
        self.assertTrue(self.commands[-1].leaf)

    def testCollection(self):
        self.assertEqual(names(child(self.commands, "backends")), ["b1.com", "list", "add", "add-json"])
        self.assertEqual(child(self.commands, "backends")[0].category, ITEMS)

    def testItem(self):
        item = child(self.commands, "backends", "b1.com")
        self.assertEqual(names(item), ["hostname", "port", "dump-json", "delete"])
        self.assertEqual(item[0].usage, "Backend host name")
        self.assertIsNone(item[1].usage)

    def testScalarLeaves(self):
        self.assertEqual(names(child(self.commands, "address")), ["get", "set"])
        get, set = child(self.commands, "address")
        self.assertIsNone(get.args_usage)
        self.assertEqual(set.args_usage, "[value]")

    def testConvertedNames(self):
        commands = construct(Limits())
        self.assertEqual(names(commands), ["max-conns", "timeout-ms", "enabled", "ratio", "dump-json"])

    def testCustomConverter(self):
        config = copy.replace(STANDARD, converter=str.upper)
        self.assertEqual(names(construct(Limits(), config)), ["MAXCONNS", "TIMEOUTMS", "ENABLED", "RATIO", "dump-json"])

    def testHiddenFields(self):
        self.assertEqual(names(construct(Hidden())), ["name", "dump-json"])

    def testCustomSkipTag(self):
        config = copy.replace(STANDARD, skip_tag=Tag("cli", "skip"))
        with self.assertRaises(UnsupportedKindError):
            construct(Hidden(), config)

    def testNestedRecords(self):
        commands = construct(Site(fallback=Limits()))
        self.assertEqual(names(commands), ["name", "limits", "fallback", "dump-json"])
        self.assertEqual(names(child(commands, "limits")), ["max-conns", "timeout-ms", "enabled", "ratio", "dump-json"])

    def testFrozenRecordsHaveNoSetters(self):
        commands = construct(Point(1, 2))
        self.assertEqual(names(child(commands, "x")), ["get"])

    def testReusableConstructor(self):
        constructor = Constructor()
        self.assertIs(constructor.config, STANDARD)
        self.assertEqual(names(constructor.construct(Point())), ["x", "y", "dump-json"])
        self.assertEqual(names(constructor.construct(Directory())), ["auth", "dump-json"])


class LeafTest(TestCase):

    def setUp(self):
        self.recorder = Recorder()
        self.proxy = Proxy(address=":8080", backends=[Backend("b1.com", 2019)])
        self.commands = construct(self.proxy, self.recorder.config)

    def testGetAndSet(self):
        invoke(self.commands, "address get")
        invoke(self.commands, "address set example.com:80")
        invoke(self.commands, "address get")
        self.assertEqual(self.recorder.values, [":8080", "example.com:80"])
        self.assertEqual(self.proxy.address, "example.com:80")

    def testItemLeaves(self):
        invoke(self.commands, "backends b1.com port set 8080")
        invoke(self.commands, "backends b1.com port get")
        self.assertEqual(self.recorder.values, ["8080"])
        self.assertEqual(self.proxy.backends[0].port, 8080)

    def testDirectCall(self):
        get, set = child(self.commands, "address")
        set("direct")
        get()
        self.assertEqual(self.recorder.values, ["direct"])

    def testDumpJson(self):
        invoke(self.commands, "dump-json")
        self.assertEqual(json.loads(self.recorder.values[0]), {
            "address": ":8080",
            "backends": [{"hostname": "b1.com", "port": 2019}],
        })

    def testNestedDumpJson(self):
        invoke(self.commands, "backends b1.com dump-json")
        self.assertEqual(json.loads(self.recorder.values[0]), {"hostname": "b1.com", "port": 2019})

    def testTypedScalars(self):
        limits = Limits()
        commands = construct(limits, self.recorder.config)
        invoke(commands, "enabled set T")
        invoke(commands, "ratio set 2.25")
        invoke(commands, "timeout-ms set -5")
        invoke(commands, "enabled get")
        invoke(commands, "ratio get")
        invoke(commands, "timeout-ms get")
        self.assertEqual(self.recorder.values, ["true", "2.25", "-5"])
        self.assertIs(limits.enabled, True)

    def testWidthOverflowLeavesTheValue(self):
        limits = Limits()
        commands = construct(limits, self.recorder.config)
        with self.assertRaises(ConversionError):
            invoke(commands, "max-conns set 256")
        self.assertEqual(limits.MaxConns, 10)

    def testTextCodec(self):
        directory = Directory()
        commands = construct(directory, self.recorder.config)
        invoke(commands, "auth set ldap")
        invoke(commands, "auth get")
        self.assertEqual(self.recorder.values, ["ldap"])
        self.assertIs(directory.auth, Auth.LDAP)
        with self.assertRaises(ConversionError):
            invoke(commands, "auth set bogus")
        self.assertIs(directory.auth, Auth.LDAP)

    def testWrongArity(self):
        with self.assertRaises(WrongArityError):
            invoke(self.commands, "address get extra")
        with self.assertRaises(WrongArityError):
            invoke(self.commands, "address set")
        with self.assertRaises(WrongArityError):
            invoke(self.commands, "address set a b")
        self.assertEqual(self.proxy.address, ":8080")

    def testOptionalNestedRecordWhenSet(self):
        site = Site(fallback=Limits(MaxConns=1))
        commands = construct(site, self.recorder.config)
        invoke(commands, "fallback max-conns get")
        self.assertEqual(self.recorder.values, ["1"])


class FaultTest(TestCase):

    def testInvalidInput(self):
        for record in (Proxy, 42, "text", None, {"address": ""}):
            with self.subTest(record=record):
                with self.assertRaises(InvalidInputError):
                    construct(record)

    def testUnsupportedKind(self):
        with self.assertRaises(UnsupportedKindError) as context:
            construct(Broken())
        self.assertEqual(context.exception.path, ("handler",))

    def testUnsupportedKindPathThroughItems(self):
        with self.assertRaises(UnsupportedKindError) as context:
            construct(Listeners([Listener("b1.com")]))
        self.assertEqual(context.exception.path, ("listeners", "b1.com", "handler"))
        self.assertTrue(str(context.exception).startswith("listeners.b1.com.handler: "))

    def testEmptyListOfUnsupportedElementsStillBuilds(self):
        # elements are only expanded when present
        self.assertEqual(names(construct(Listeners())), ["listeners", "dump-json"])

    def testUnsetNestedRecordIsUnsupported(self):
        with self.assertRaises(UnsupportedKindError) as context:
            construct(Site())  # fallback is None
        self.assertEqual(context.exception.path, ("fallback",))

    def testFieldNamesMustNotShadowDumpJson(self):
        with self.assertRaises(UnsupportedKindError) as context:
            construct(Shadow())
        self.assertEqual(context.exception.path, ("dump_json",))

    def testFieldNamesMustNotCollide(self):
        with self.assertRaises(UnsupportedKindError) as context:
            construct(Twins())
        self.assertEqual(context.exception.path, ("MaxConns",))
        self.assertIn("'max-conns'", str(context.exception))

    def testConfigMustBeAConfig(self):
        with self.assertRaises(TypeError):
            Constructor({"converter": str.upper})


if __name__ == "__main__":
    unittest.main()
