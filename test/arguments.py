"""
Arguments module behavioral tests (Argument, Option, Flag, Subcommand).

Scope
- Validate construction rules: names, descriptions, kinds.
- Validate the manual forms shown on help pages.
- Validate subcommand binding.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from saas import Argument, Flag, Option, Subcommand
from saas.validation import Kind


class TestArgument(TestCase):

    def testKindAndVariadic(self):
        argument = Argument("text", "*s")
        self.assertIs(argument.kind, Kind.STR)
        self.assertTrue(argument.variadic)
        self.assertFalse(argument.optional)

    def testDescrIsRequired(self):
        with self.assertRaises(ValueError):
            Argument("  ")
        with self.assertRaises(TypeError):
            Argument(5)

    def testManualForms(self):
        self.assertEqual(Argument("text", "*s").manual, "[text: *str]")
        self.assertEqual(Argument("alias name", optional=True).manual, "<alias name: str>")
        self.assertEqual(Argument("duration", "i").manual, "[duration: int]")
        self.assertEqual(Argument("switch", "x").manual, "[switch]")

    def testUnknownKind(self):
        with self.assertRaises(ValueError):
            Argument("text", "z")


class TestOption(TestCase):

    def testManual(self):
        option = Option("--align", "-a", kind="i", descr="changes the alignment")
        self.assertEqual(option.manual, r"\t--align, -a (int): changes the alignment")
        self.assertTrue(option.takes_value)

    def testDefault(self):
        self.assertEqual(Option("--align", kind="i", default=0).default, 0)
        self.assertIsNone(Option("--name").default)

    def testKindMustCarryAValue(self):
        with self.assertRaises(ValueError):
            Option("--flag", kind="x")
        with self.assertRaises(ValueError):
            Option("--many", kind="*i")

    def testNamesAreValidated(self):
        with self.assertRaises(TypeError):
            Option()
        with self.assertRaises(ValueError):
            Option("align")
        with self.assertRaises(ValueError):
            Option("-a", "-a")

    def testRepr(self):
        self.assertEqual(
            repr(Option("-a", kind="i", descr="align", default=1)),
            "option(names=('-a',), kind=<Kind.INT: 'i'>, descr='align', default=1)",
        )


class TestFlag(TestCase):

    def testFlagShape(self):
        flag = Flag("--force", "-f", descr="skip confirmation")
        self.assertEqual(flag.names, ("--force", "-f"))
        self.assertIs(flag.kind, Kind.FLAG)
        self.assertIs(flag.default, False)
        self.assertFalse(flag.takes_value)
        self.assertEqual(flag.manual, r"\t--force, -f: skip confirmation")

    def testNamesAreReadOnly(self):
        flag = Flag("-n")
        with self.assertRaises(AttributeError):
            flag.names = ("-m",)


class TestSubcommand(TestCase):

    def testManual(self):
        self.assertEqual(Subcommand("load", "load a configuration").manual, r"\tload: load a configuration")

    def testNameIsOneWord(self):
        with self.assertRaises(ValueError):
            Subcommand("two words")
        with self.assertRaises(ValueError):
            Subcommand(" ")

    def testBinding(self):
        subcommand = Subcommand("list")
        with self.assertRaises(TypeError):
            subcommand(None, [])

        subcommand.bind(lambda context, arguments: len(arguments))
        self.assertEqual(subcommand(None, ["a", "b"]), 2)
        with self.assertRaises(TypeError):
            subcommand.bind(print)


if __name__ == "__main__":
    unittest.main()
