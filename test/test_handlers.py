"""
Handlers module behavioral tests.

Scope
- Validate ArgumentHandler construction and metadata sanitation.
- Validate matching (full name, short-name prefix), binding and processing.
- Validate copy.replace() replicas and the @flag/@action decorators.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (ArgumentHandler, flag, action).
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argqueue import ArgumentHandler, flag, action


class TestArgumentHandlerConstruction(TestCase):
    """Behavioral tests for handler metadata."""

    def testDefaults(self):
        handler = ArgumentHandler("--name")
        self.assertEqual(handler.name, "--name")
        self.assertEqual(handler.short, "")
        self.assertFalse(handler.flag)
        self.assertFalse(handler.final)
        self.assertEqual(handler.nargs, 0)
        self.assertIsNone(handler.descr)
        self.assertEqual(handler.values, ())

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            ArgumentHandler(3)

    def testNameCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            ArgumentHandler("   ")

    def testNameCannotBePadded(self):
        with self.assertRaises(ValueError):
            ArgumentHandler(" --name")

    def testShortMustBeString(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--name", None)

    def testShortCannotBeBlank(self):
        with self.assertRaises(ValueError):
            ArgumentHandler("--name", " ")

    def testFlagCannotBeFinal(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--all", flag=True, final=True)

    def testNargsMustBeInteger(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--name", nargs="1")
        with self.assertRaises(TypeError):
            ArgumentHandler("--name", nargs=True)

    def testNargsCannotBeNegative(self):
        with self.assertRaises(ValueError):
            ArgumentHandler("--name", nargs=-1)

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--name", descr=None)

    def testDescrIsTrimmed(self):
        self.assertEqual(ArgumentHandler("--name", descr="  a name  ").descr, "a name")

    def testCallbackMustBeCallable(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--name", callback="nope")

    def testPropertiesAreReadOnly(self):
        handler = ArgumentHandler("--name")
        with self.assertRaises(AttributeError):
            handler.name = "--other"

    def testRepr(self):
        handler = ArgumentHandler("--name", "-n", nargs=1)
        self.assertEqual(
            repr(handler),
            "argument-handler(name='--name', short='-n', flag=False, nargs=1, final=False, values=())",
        )


class TestArgumentHandlerBehavior(TestCase):
    """Behavioral tests for matching, binding and processing."""

    def testMatchesFullName(self):
        handler = ArgumentHandler("--verbose", "-v")
        self.assertTrue(handler.matches("--verbose"))
        self.assertFalse(handler.matches("--verbosity"))

    def testMatchesShortNameAsTokenPrefix(self):
        handler = ArgumentHandler("--verbose", "-v")
        self.assertTrue(handler.matches("-v"))
        self.assertTrue(handler.matches("-vvv"))
        self.assertFalse(handler.matches("v"))

    def testTokenShorterThanShortNameDoesNotMatch(self):
        handler = ArgumentHandler("--verbose", "-verbose")
        self.assertFalse(handler.matches("-v"))

    def testEmptyShortNameNeverMatches(self):
        handler = ArgumentHandler("--verbose")
        self.assertFalse(handler.matches(""))
        self.assertFalse(handler.matches("-v"))

    def testMatchesRejectsNonString(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--verbose").matches(None)

    def testBindReplacesValues(self):
        handler = ArgumentHandler("--pair", nargs=2)
        handler.bind(["a", "b"])
        self.assertEqual(handler.values, ("a", "b"))
        handler.bind(iter(["c"]))
        self.assertEqual(handler.values, ("c",))

    def testBindRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--pair").bind(["a", 1])

    def testProcessWithoutCallbackSucceeds(self):
        self.assertEqual(ArgumentHandler("--name").process(), 0)

    def testProcessForwardsValues(self):
        received = []
        handler = ArgumentHandler("--pair", nargs=2, callback=lambda *values: received.append(values))
        handler.bind(["a", "b"])
        self.assertEqual(handler.process(), 0)
        self.assertEqual(received, [("a", "b")])

    def testProcessReturnsIntegerResult(self):
        handler = ArgumentHandler("--fail", callback=lambda: 7)
        self.assertEqual(handler.process(), 7)

    def testProcessRejectsNonIntegerResult(self):
        with self.assertRaises(TypeError):
            ArgumentHandler("--odd", callback=lambda: "0").process()
        with self.assertRaises(TypeError):
            ArgumentHandler("--odd", callback=lambda: True).process()

    def testProcessPropagatesCallbackErrors(self):
        def explode():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            ArgumentHandler("--boom", callback=explode).process()

    def testReplaceBindsReplicaOnly(self):
        handler = ArgumentHandler("--name", nargs=1)
        replica = copy.replace(handler, values=("alice",))
        self.assertIsNot(replica, handler)
        self.assertEqual(replica.values, ("alice",))
        self.assertEqual(handler.values, ())
        self.assertEqual(replica.name, "--name")
        self.assertEqual(replica.nargs, 1)

    def testReplaceWithoutOverridesCopies(self):
        handler = ArgumentHandler("--name")
        handler.bind(["x"])
        replica = copy.replace(handler)
        replica.bind(["y"])
        self.assertEqual(handler.values, ("x",))

    def testReplaceRejectsUnknownFields(self):
        with self.assertRaises(TypeError):
            copy.replace(ArgumentHandler("--name"), name="--other")


class TestDecorators(TestCase):
    """Behavioral tests for @flag and @action."""

    def testFlagDecorator(self):
        received = []

        @flag("--verbose", "-v", descr="talk more")
        def onVerbose(token):
            received.append(token)

        self.assertIsInstance(onVerbose, ArgumentHandler)
        self.assertTrue(onVerbose.flag)
        self.assertEqual(onVerbose.short, "-v")
        self.assertEqual(onVerbose.descr, "talk more")
        copy.replace(onVerbose, values=("-vv",)).process()
        self.assertEqual(received, ["-vv"])

    def testActionDecorator(self):
        received = []

        @action("--point", nargs=3)
        def onPoint(x, y, z):
            received.append((x, y, z))

        self.assertFalse(onPoint.flag)
        self.assertEqual(onPoint.nargs, 3)
        copy.replace(onPoint, values=("1", "2", "3")).process()
        self.assertEqual(received, [("1", "2", "3")])

    def testFinalActionDecorator(self):
        @action("run", final=True)
        def onRun(*rest):
            pass

        self.assertTrue(onRun.final)

    def testDecoratorSingleAssignmentGuard(self):
        dec = action("--only-once")

        @dec
        def first():
            pass

        with self.assertRaises(TypeError):
            @dec
            def second():
                pass

    def testDecoratorRequiresCallable(self):
        with self.assertRaises(TypeError):
            flag("--verbose")("not callable")


if __name__ == "__main__":
    unittest.main()
