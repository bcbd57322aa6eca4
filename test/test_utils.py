# python
"""
Utilities behavioral tests.

Scope
- Validate the Unset sentinel (falsey, singleton, sealed, union-friendly).
- Validate coalesce/rename/mirror helpers.
- Validate the name normalizer and token shape predicates used by the parser.
- Validate ordinal labels used in position-first messages.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from corsair.utils import (
    Unset,
    UnsetType,
    camelize,
    coalesce,
    is_inline,
    is_option,
    mirror,
    ordinal,
    rename,
)


class TestUnset(TestCase):
    """Sentinel semantics."""

    def testUnsetIsFalsey(self):
        self.assertFalse(Unset)

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testUnsetRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA
                pass

    def testUnsetSupportsUnionsInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))


class TestHelpers(TestCase):
    """coalesce / rename / mirror."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRenameInPlace(self):
        def fn():
            pass

        self.assertIs(rename(fn, "other"), fn)
        self.assertEqual(fn.__name__, "other")
        self.assertEqual(fn.__qualname__, "other")

    def testRenameAsDecorator(self):
        @rename("renamed")
        def fn():
            pass

        self.assertEqual(fn.__name__, "renamed")

    def testRenameRejectsBadArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testMirrorReturnsFreshContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        holder.items.append("b")
        self.assertEqual(holder.items, ["a"])

    def testMirrorIsReadOnly(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 1

        with self.assertRaises(AttributeError):
            Holder().value = 2


class TestCamelize(TestCase):
    """Canonical key normalization."""

    def testLongFlag(self):
        self.assertEqual(camelize("--dry-run"), "dryRun")

    def testShortFlag(self):
        self.assertEqual(camelize("-o"), "o")

    def testPlainName(self):
        self.assertEqual(camelize("out-dir"), "outDir")

    def testDoubleHyphenInsideIsDropped(self):
        self.assertEqual(camelize("a--b"), "ab")

    def testTrailingHyphenIsDropped(self):
        self.assertEqual(camelize("name-"), "name")

    def testAlreadyCanonicalIsUnchanged(self):
        self.assertEqual(camelize("dryRun"), "dryRun")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            camelize(1)


class TestTokenShapes(TestCase):
    """Option/inline predicates."""

    def testDashedTokenIsOption(self):
        self.assertTrue(is_option("-x"))
        self.assertTrue(is_option("--x"))

    def testAttachedValueIsOption(self):
        self.assertTrue(is_option("key=value"))
        self.assertTrue(is_inline("--key=value"))

    def testPlainTokenIsNotOption(self):
        self.assertFalse(is_option("build"))
        self.assertFalse(is_inline("--key"))


class TestOrdinal(TestCase):
    """Position labels."""

    def testWordsUpToTen(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(5), "fifth")
        self.assertEqual(ordinal(10), "tenth")

    def testNumericSuffixes(self):
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(24), "24th")

    def testTeens(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(112), "112th")


if __name__ == "__main__":
    unittest.main()
