"""
Node, Flag, Context, expect_args and Config tests.
"""
import copy
import unittest
from unittest import TestCase

from recli.config import *
from recli.faults import WrongArityError
from recli.nodes import *
from recli.utils import dashed


def noop(context):
    pass


class FlagTest(TestCase):

    def testDefaults(self):
        flag = Flag("hostname")
        self.assertIs(flag.type, str)
        self.assertFalse(flag.multiple)
        self.assertIsNone(flag.usage)
        self.assertEqual(repr(flag), "flag(name='hostname', type=<class 'str'>, multiple=False, usage=None)")

    def testNames(self):
        for name in ("a", "max-conns", "ipv6", "größe"):
            with self.subTest(name=name):
                Flag(name)
        for name in ("", "-a", "a-", "a--b", "6in4", "a_b", "a=b"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Flag(name)

    def testTypes(self):
        with self.assertRaises(TypeError):
            Flag("when", complex)
        with self.assertRaises(TypeError):
            Flag("verbose", bool, multiple=True)
        self.assertTrue(Flag("tags", str, multiple=True).multiple)


class NodeTest(TestCase):

    def testLeafAndGroup(self):
        leaf = Node("get", category=ACTIONS, action=noop)
        group = Node("address", usage="Address", category=PROPERTIES, children=[leaf])
        self.assertTrue(leaf.leaf)
        self.assertFalse(group.leaf)
        self.assertEqual(group.children, (leaf,))
        self.assertIsNone(group.action)
        self.assertEqual(repr(group), "node(name='address', category='PROPERTIES', children=(node(name='get', category='ACTIONS', children=()),))")

    def testIterablesAreStoredAsTuples(self):
        leaf = Node("add", action=noop, flags=(flag for flag in [Flag("hostname"), Flag("port", int)]))
        group = Node("backends", children=(node for node in [leaf]))
        self.assertEqual([flag.name for flag in leaf.flags], ["hostname", "port"])
        self.assertEqual(group.children, (leaf,))

    def testEmptyUsageReadsAsNone(self):
        self.assertIsNone(Node("x", usage="").usage)

    def testInvalidShapes(self):
        leaf = Node("get", action=noop)
        with self.assertRaises(TypeError):
            Node("both", children=[leaf], action=noop)
        with self.assertRaises(TypeError):
            Node("flagged", flags=[Flag("a")])
        with self.assertRaises(ValueError):
            Node("twice", action=noop, flags=[Flag("a"), Flag("a", int)])
        with self.assertRaises(TypeError):
            Node("children", children=["get"])
        with self.assertRaises(TypeError):
            Node(1)
        with self.assertRaises(TypeError):
            Node("action", action="get")

    def testFindReturnsTheLastMatch(self):
        first = Node("x.com", children=[Node("get", action=noop)])
        second = Node("x.com", children=[Node("set", action=noop)])
        group = Node("backends", children=[first, second])
        self.assertIs(group.find("x.com"), second)
        self.assertIsNone(group.find("y.com"))

    def testCallPassesAContext(self):
        received = []
        node = Node("add", action=received.append, flags=[Flag("hostname")])
        node("a", hostname="b")
        context, = received
        self.assertEqual(context.args, ("a",))
        self.assertEqual(dict(context.flags), {"hostname": "b"})
        self.assertIs(node.flag("hostname"), node.flags[0])
        self.assertIsNone(node.flag("port"))

    def testCallOnGroupFails(self):
        with self.assertRaises(TypeError):
            Node("group")()


class ContextTest(TestCase):

    def testDefaults(self):
        context = Context()
        self.assertEqual(context.args, ())
        self.assertEqual(dict(context.flags), {})

    def testFlagsAreReadOnly(self):
        context = Context.of(["a"], {"x": 1})
        with self.assertRaises(TypeError):
            context.flags["x"] = 2


class ExpectArgsTest(TestCase):

    def testExactArity(self):
        calls = []
        action = expect_args(2, calls.append)
        action(Context.of(["k", "v"]))
        self.assertEqual(len(calls), 1)
        with self.assertRaises(WrongArityError) as context:
            action(Context.of(["k"]))
        self.assertEqual(str(context.exception), "expected 2 arguments, got 1")
        with self.assertRaises(WrongArityError) as context:
            expect_args(1, noop)(Context())
        self.assertEqual(str(context.exception), "expected 1 argument, got 0")

    def testValidation(self):
        with self.assertRaises(TypeError):
            expect_args(-1, noop)
        with self.assertRaises(TypeError):
            expect_args(1, None)


class ConfigTest(TestCase):

    def testStandard(self):
        self.assertEqual(STANDARD.skip_tag, Tag("recli", "-"))
        self.assertEqual(STANDARD.id_tag, Tag("recli", "id"))
        self.assertEqual(STANDARD.usage_tag, "usage")
        self.assertEqual(STANDARD.default_tag, "default")
        self.assertIs(STANDARD.converter, dashed)
        self.assertIs(STANDARD.value_printer, print_value)

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            STANDARD.usage_tag = "help"
        with self.assertRaises(AttributeError):
            STANDARD._usage_tag = "help"

    def testReplace(self):
        config = copy.replace(STANDARD, usage_tag="help", id_tag=Tag("cli", "key"))
        self.assertEqual(config.usage_tag, "help")
        self.assertEqual(config.id_tag, Tag("cli", "key"))
        self.assertEqual(config.default_tag, "default")
        self.assertEqual(STANDARD.usage_tag, "usage")

    def testValidation(self):
        with self.assertRaises(TypeError):
            Config(skip_tag=("recli", "-"))
        with self.assertRaises(ValueError):
            Config(default_tag=" ")
        with self.assertRaises(TypeError):
            Config(value_printer="stdout")
        with self.assertRaises(TypeError):
            Config(usage_tag=None)


if __name__ == "__main__":
    unittest.main()
