"""
Alias table and expansion tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from saas.aliases import AliasTable, expand
from saas.faults import ValidationError
from saas.lexer import Statement


class TestAliasTable(TestCase):

    def testReservedName(self):
        with self.assertRaises(ValidationError) as caught:
            AliasTable.check("alias")
        self.assertEqual(caught.exception.message, "cannot use name 'alias'")

    def testEmptyName(self):
        with self.assertRaises(ValidationError) as caught:
            AliasTable().define("", "echo")
        self.assertEqual(caught.exception.message, "name cannot be empty")

    def testSeparatorsInName(self):
        for name, separator in (("a;b", ";"), ("a&&b", "&&")):
            with self.assertRaises(ValidationError) as caught:
                AliasTable.check(name)
            self.assertEqual(caught.exception.message, f"{separator} in alias name")

    def testDefineEscapesQuotes(self):
        table = AliasTable()
        table.define("hi", 'echo "x y"')
        self.assertEqual(table["hi"], 'echo \\"x y\\"')

    def testRemove(self):
        table = AliasTable({"ll": "help"})
        table.remove("ll")
        self.assertNotIn("ll", table)
        with self.assertRaises(KeyError):
            table.remove("ll")


class TestExpand(TestCase):

    def testNotAnAlias(self):
        self.assertEqual(expand(Statement(("echo", "a")), {"ll": "help"}), [])
        self.assertEqual(expand(Statement(), {"ll": "help"}), [])

    def testArgumentsGoToTheLastStatement(self):
        aliases = {"greet": "echo hi ; echo hey"}
        self.assertEqual(
            expand(Statement(("greet", "world")), aliases),
            [("echo", "hi"), ("echo", "hey", "world")],
        )

    def testSingleStatement(self):
        self.assertEqual(expand(("man", "echo"), {"man": "help"}), [("help", "echo")])

    def testEscapedQuotesStayLiteral(self):
        table = AliasTable()
        table.define("hi", 'echo "x y"')
        self.assertEqual(expand(("hi",), table), [("echo", '"x', 'y"')])


if __name__ == "__main__":
    unittest.main()
