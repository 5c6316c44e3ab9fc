"""
Tests for the fault model: codes, paths, copies, surfacing and rendering.
"""
import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from recli.faults import *


class FaultTest(TestCase):

    def testStableCodes(self):
        self.assertEqual(FaultCode.INVALID_INPUT, 13101)
        self.assertEqual(FaultCode.UNSUPPORTED_KIND, 13102)
        self.assertEqual(FaultCode.CONVERSION_ERROR, 14101)
        self.assertEqual(FaultCode.WRONG_ARITY, 14102)
        self.assertEqual(FaultCode.NO_PROPERTIES_SPECIFIED, 14103)
        self.assertEqual(FaultCode.DUPLICATE_KEY, 12101)

    def testClassDefaults(self):
        error = ConversionError("invalid integer 'x'")
        self.assertEqual(error.code, FaultCode.CONVERSION_ERROR)
        self.assertEqual(error.title, "conversion error")
        self.assertEqual(error.path, ())
        self.assertEqual(str(error), "invalid integer 'x'")

    def testPathPrefixesMessage(self):
        error = UnsupportedKindError("unsupported kind: complex", path=("listeners", "b1.com", "handler"))
        self.assertEqual(str(error), "listeners.b1.com.handler: unsupported kind: complex")

    def testReplaceKeepsTypeAndMergesOptions(self):
        error = UnsupportedKindError("unsupported kind: complex", path=("handler",))
        replaced = copy.replace(error, path=("listeners", *error.path), shell=False)
        self.assertIsInstance(replaced, UnsupportedKindError)
        self.assertEqual(replaced.path, ("listeners", "handler"))
        self.assertEqual(replaced.message, error.message)
        self.assertFalse(replaced.options["shell"])
        # the source fault is unchanged
        self.assertEqual(error.path, ("handler",))

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(WrongArityError) as context:
            trigger(WrongArityError("expected 1 argument, got 0"), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testTriggerExitsInShell(self):
        with self.assertRaises(SystemExit) as context:
            trigger(WrongArityError("expected 1 argument, got 0"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testTriggerWarns(self):
        with self.assertWarns(DuplicateKeyWarning):
            trigger(DuplicateKeyWarning("2 items share the key 'a'"))

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testRichRendering(self):
        console = Console(file=io.StringIO(), color_system=None, width=120)
        console.print(UnsupportedKindError("unsupported kind: complex", prog="tool"))
        output = console.file.getvalue()
        self.assertIn("13102", output)
        self.assertIn("Unsupported Kind", output)
        self.assertIn("unsupported kind: complex", output)
        self.assertIn("skip tag", output)

    def testFancyRenderingUsesPanel(self):
        console = Console(file=io.StringIO(), color_system=None, width=120)
        console.print(ConversionError("invalid boolean 'yes'", fancy=True, colorful=False))
        output = console.file.getvalue()
        self.assertIn("Conversion Error", output)
        self.assertIn("invalid boolean", output)

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.WRONG_ARITY))
        with self.assertRaises(TypeError):
            getdoc(14102)


if __name__ == "__main__":
    unittest.main()
