"""
Router module behavioral tests (bindings, the implicit help command, copying).

Scope
- Validate name/alias binding, lookups and duplicate detection.
- Validate enable(): a single implicit 'help' binding with its own arguments.
- Validate copy_from(): children shared by reference, 'help' never duplicated.

Conventions
- Test method names follow CamelCase per project convention.
- Child parsers are plain Parser instances built directly.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argcumulus import DuplicateSubcommandError, FaultCode, Kind, Parser, SubcommandRouter


class TestSubcommandRouter(TestCase):
    """Behavioral tests for SubcommandRouter."""

    def testStartsDisabledAndEmpty(self):
        router = SubcommandRouter()
        self.assertFalse(router.enabled)
        self.assertEqual(len(router), 0)

    def testAddAndResolveAliases(self):
        router = SubcommandRouter()
        child = Parser(prog="tool list")
        binding = router.add("list", ("ls", "l"), child, help="list entries")
        self.assertIs(router.resolve("ls"), binding)
        self.assertIs(router.resolve("list").parser, child)
        self.assertEqual(router.canonical("l"), "list")
        self.assertIsNone(router.resolve("lst"))
        self.assertEqual(router.names, ("list", "ls", "l"))
        self.assertIn("ls", router)

    def testSingleAliasString(self):
        router = SubcommandRouter()
        router.add("list", "ls", Parser(prog="tool list"))
        self.assertEqual(router.resolve("list").aliases, ("ls",))

    def testDuplicateNameRejected(self):
        router = SubcommandRouter()
        router.add("list", (), Parser(prog="a"))
        with self.assertRaises(DuplicateSubcommandError) as context:
            router.add("list", (), Parser(prog="b"))
        self.assertEqual(context.exception.options["code"], FaultCode.DUPLICATE_SUBCOMMAND)

    def testDuplicateAliasRejected(self):
        router = SubcommandRouter()
        router.add("list", ("ls",), Parser(prog="a"))
        with self.assertRaises(DuplicateSubcommandError):
            router.add("lookup", ("ls",), Parser(prog="b"))
        self.assertIsNone(router.resolve("lookup"))

    def testMalformedNamesRejected(self):
        router = SubcommandRouter()
        with self.assertRaises(ValueError):
            router.add("--list", (), Parser(prog="a"))
        with self.assertRaises(ValueError):
            router.add("two words", (), Parser(prog="a"))
        with self.assertRaises(TypeError):
            router.add(1, (), Parser(prog="a"))

    def testEnableBindsHelpOnce(self):
        router = SubcommandRouter()
        router.enable("commands", "what it can do")
        router.enable("ignored")
        self.assertTrue(router.enabled)
        self.assertEqual(router.title, "commands")
        self.assertEqual(router.description, "what it can do")
        self.assertEqual([binding.name for binding in router], ["help"])

    def testEnableDefaultTitle(self):
        router = SubcommandRouter()
        router.enable()
        self.assertEqual(router.title, "subcommands")

    def testHelpParserArguments(self):
        router = SubcommandRouter()
        router.enable(prog="tool help")
        parser = router.resolve("help").parser
        command = parser.registry.lookup("help_command")
        self.assertTrue(command.positional)
        self.assertEqual(command.nargs, "?")
        self.assertEqual(command.label, "COMMAND")
        self.assertIs(parser.registry.lookup_by_token("-a").kind, Kind.BOOL)
        self.assertIs(parser.registry.lookup_by_token("--all").kind, Kind.BOOL)

    def testCopyFromSharesChildrenByReference(self):
        parent = SubcommandRouter()
        parent.enable("commands")
        child = Parser(prog="tool list")
        parent.add("list", ("ls",), child, help="list entries")

        copy = SubcommandRouter()
        copy.copy_from(parent)
        self.assertTrue(copy.enabled)
        self.assertEqual(copy.title, "commands")
        self.assertIs(copy.resolve("ls").parser, child)
        self.assertEqual(copy.resolve("list").help, "list entries")
        self.assertIsNot(copy.resolve("help").parser, parent.resolve("help").parser)
        self.assertEqual([binding.name for binding in copy], ["help", "list"])

    def testCopyFromDisabledParentIsNoop(self):
        copy = SubcommandRouter()
        copy.copy_from(SubcommandRouter())
        self.assertFalse(copy.enabled)

    def testCopyFromMutationsStayLocal(self):
        parent = SubcommandRouter()
        parent.enable()
        copy = SubcommandRouter()
        copy.copy_from(parent)
        copy.add("push", (), Parser(prog="tool push"))
        self.assertIsNone(parent.resolve("push"))


if __name__ == "__main__":
    unittest.main()
