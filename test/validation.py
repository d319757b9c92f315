"""
Value validation tests (conversion, ranges, in-place validation).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from saas.faults import FaultCode, ValidationError
from saas.validation import Kind, kindof, typename, validate, validate_range, validate_values


class TestKinds(TestCase):

    def testVariadicPrefix(self):
        self.assertEqual(kindof("*s"), (Kind.STR, True))
        self.assertEqual(kindof("i"), (Kind.INT, False))

    def testUnknownKindRaises(self):
        with self.assertRaises(ValueError):
            kindof("q")

    def testTypenames(self):
        self.assertEqual(typename("i"), "int")
        self.assertEqual(typename("*f"), "float")
        self.assertEqual(typename("x"), "arg")


class TestValidate(TestCase):

    def testIntegers(self):
        self.assertEqual(validate("i", "42"), 42)
        self.assertEqual(validate("i", "-3"), -3)
        self.assertEqual(validate("i", " 7 "), 7)

    def testNotAnInteger(self):
        with self.assertRaises(ValidationError) as caught:
            validate("i", "4a")
        self.assertEqual(caught.exception.message, "4a is not an integer")

    def testBooleans(self):
        self.assertIs(validate("b", "YES"), True)
        self.assertIs(validate("b", "n"), False)
        with self.assertRaises(ValidationError) as caught:
            validate("b", "maybe")
        self.assertEqual(caught.exception.message, "maybe is not a boolean")

    def testFloats(self):
        self.assertEqual(validate("f", "1.05"), 1.05)
        self.assertEqual(validate("f", "-2.5"), -2.5)
        for value in ("1", "1.2.3", "a.5", "1.-5"):
            with self.assertRaises(ValidationError):
                validate("f", value)

    def testStringsPassThrough(self):
        self.assertEqual(validate("s", " as is "), " as is ")

    def testMissingValue(self):
        with self.assertRaises(ValidationError) as caught:
            validate("i", None)
        self.assertEqual(caught.exception.message, "too few arguments")
        self.assertEqual(caught.exception.options["code"], FaultCode.TOO_FEW_ARGUMENTS)

    def testFlagKindCarriesNoValue(self):
        with self.assertRaises(ValueError):
            validate("x", "1")


class TestValidateValues(TestCase):

    def testInPlace(self):
        values = ["1", "two", "3"]
        self.assertIs(validate_values("i", values, 0, 2), values)
        self.assertEqual(values, [1, "two", 3])

    def testMissingIndex(self):
        with self.assertRaises(ValidationError) as caught:
            validate_values("i", ["1"], 0, 1)
        self.assertEqual(caught.exception.message, "too few arguments")


class TestValidateRange(TestCase):

    def testRangeIsInclusiveOfItsLastElement(self):
        validate_range(range(256), 0, 255)
        with self.assertRaises(ValidationError) as caught:
            validate_range(range(256), 256)
        self.assertEqual(caught.exception.message, "256 not between 0 and 255")
        self.assertEqual(caught.exception.options["code"], FaultCode.OUT_OF_RANGE)

    def testPairBounds(self):
        validate_range((1, 3), 1, 2, 3)
        with self.assertRaises(ValidationError):
            validate_range((1, 3), 2, 0)


if __name__ == "__main__":
    unittest.main()
