"""
Tests for the Unset sentinel and the shared helpers.

This module verifies:
- Singleton identity, falsy semantics and representation of `Unset`.
- Copying preserves identity; the type cannot be subclassed.
- coalesce() only replaces Unset.
- pluralize() section labels and stylize() plain/colorful normalization.
"""
import copy
import unittest
from threading import Lock, Thread
from unittest import TestCase

from rich.text import Text

from consoleapp.utils import Unset, UnsetType, coalesce, mirror, pluralize, stylize


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self):
        self.assertIs(Unset, UnsetType())

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testFalsely(self):
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testCopyPreservesSingleton(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testThreadSafetySingleton(self):
        results = []
        lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertTrue(results)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self):
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), mirror(), pluralize() and stylize().
    """

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", []):
            self.assertIs(coalesce(value, "fallback"), value)

    def testMirrorFreezesContainers(self):
        class Owner:
            def __init__(self):
                self._items = [1, 2]

            items = mirror("items")

        self.assertEqual(Owner().items, (1, 2))

    def testPluralize(self):
        self.assertEqual(pluralize("Switch"), "Switches")
        self.assertEqual(pluralize("Option"), "Options")
        self.assertEqual(pluralize("Argument"), "Arguments")
        self.assertEqual(pluralize("category"), "categories")

    def testStylize(self):
        self.assertEqual(stylize("x", "bold").spans, [])
        self.assertEqual(str(stylize("x", "bold", colorful=True).style), "bold")
        self.assertEqual(stylize(Text("y", style="red")).style, "")


if __name__ == '__main__':
    unittest.main()
