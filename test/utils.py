"""
Utilities tests (Unset sentinel, coalesce, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from types import MappingProxyType
from unittest import TestCase

from flagstone.utils import Unset, UnsetType, coalesce, rename, mirror


class Holder:
    items = mirror("items")
    mapping = mirror("mapping")
    scalar = mirror("scalar")

    def __init__(self):
        self._items = [1, 2]
        self._mapping = {"a": 1}
        self._scalar = 3


class TestUnset(TestCase):

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testUsableInUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)


class TestCoalesce(TestCase):

    def testOnlyUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))


class TestRename(TestCase):

    def testDecoratorForm(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(1, "x")


class TestMirror(TestCase):

    def testFrozenViews(self):
        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.mapping, MappingProxyType)
        self.assertEqual(holder.scalar, 3)

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            Holder().items = ()


if __name__ == "__main__":
    unittest.main()
