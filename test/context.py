"""
Context module behavioral tests (read-only facade over a matched registry).

Scope
- Validate positional lookups by index and by name.
- Validate option/switch dual-key lookups with or without leading dashes.
- Validate *_or_none variants, no_values and the output sinks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from consoleapp import ArgumentRegistry, Cancellation, Context, match, option, positional, switch


def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestContext(TestCase):
    """Behavioral tests for Context lookups."""

    def setUp(self):
        self.registry = ArgumentRegistry([
            positional("src", required=True),
            positional("dst", default="out"),
            option("n", "count", default="1"),
            switch("v", "verbose"),
            switch("q", "quiet"),
        ])
        match(self.registry, ["a.txt", "-v", "--count=4"])
        self.stdout, self.stderr = console(), console()
        self.context = Context(self.registry, Cancellation(), stdout=self.stdout, stderr=self.stderr)

    def testPositionalByIndexAndName(self):
        self.assertEqual(self.context.get(0).name, "src")
        self.assertEqual(self.context.get("dst").index, 1)
        self.assertEqual(self.context.value(0), "a.txt")
        self.assertEqual(self.context.value("dst"), "out")

    def testMissingPositional(self):
        with self.assertRaises(KeyError):
            self.context.get(5)
        self.assertIsNone(self.context.get_or_none("nothing"))
        self.assertIsNone(self.context.value_or_none(7))

    def testPositionalKeyType(self):
        with self.assertRaises(TypeError):
            self.context.get(1.5)

    def testOptionDualKey(self):
        for key in ("count", "n", "--count", "-n"):
            self.assertEqual(self.context.option_value(key), "4", key)
        self.assertEqual(self.context.option("count").as_int(), 4)

    def testMissingOption(self):
        with self.assertRaises(KeyError):
            self.context.option("out")
        self.assertIsNone(self.context.option_or_none("out"))
        self.assertIsNone(self.context.option_value_or_none("out"))

    def testSwitchValue(self):
        self.assertTrue(self.context.switch_value("verbose"))
        self.assertTrue(self.context.switch_value("-v"))
        self.assertFalse(self.context.switch_value("quiet"))
        with self.assertRaises(KeyError):
            self.context.switch_value("force")
        self.assertIsNone(self.context.switch_or_none("force"))

    def testNoValues(self):
        self.assertFalse(self.context.no_values)
        empty = ArgumentRegistry([positional("file"), switch("v", "verbose")])
        match(empty, [])
        self.assertTrue(Context(empty, Cancellation()).no_values)

    def testNoValuesIgnoresBuiltins(self):
        registry = ArgumentRegistry()
        match(registry, ["--help"])
        self.assertTrue(Context(registry, Cancellation()).no_values)

    def testSinks(self):
        self.context.print("hello")
        self.context.error("oops")
        self.assertEqual(self.stdout.file.getvalue(), "hello\n")
        self.assertEqual(self.stderr.file.getvalue(), "oops\n")

    def testCancellationExposed(self):
        self.assertFalse(self.context.cancellation.cancelled)


if __name__ == "__main__":
    unittest.main()
