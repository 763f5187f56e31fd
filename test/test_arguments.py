"""
Arguments module behavioral tests (specs, kinds, validators, accumulation).

Scope
- Validate ArgumentSpec construction: names, dest derivation, kind/nargs/split rules,
  choices folding, default shapes, required handling.
- Validate validators (Choices, CaseInsensitiveChoices, Predicate) and the faults they raise.
- Validate per-kind accumulation (consume) and absent-value fallbacks.
- Validate cloning through copy.replace and metadata equality.

Conventions
- Test method names follow CamelCase per project convention.
- Specs are built through the public constructor only.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argcumulus import (
    ArgumentSpec,
    CaseInsensitiveChoices,
    Choices,
    ConflictingChoiceSpecError,
    FaultCode,
    Kind,
    Predicate,
    RequiredIgnoredWarning,
    ValidationError,
)


class TestKind(TestCase):
    """Behavioral tests for Kind lookups."""

    def testKindLookupIsCaseInsensitive(self):
        self.assertIs(Kind("bool"), Kind.BOOL)
        self.assertIs(Kind("ARRAY"), Kind.ARRAY)
        self.assertIs(Kind("Pair"), Kind.PAIR)

    def testKindUnknownNameRejected(self):
        with self.assertRaises(ValueError):
            Kind("List")

    def testKindValuelessOnlyForBoolAndCount(self):
        self.assertTrue(Kind.BOOL.valueless)
        self.assertTrue(Kind.COUNT.valueless)
        self.assertFalse(Kind.SCALAR.valueless)
        self.assertFalse(Kind.ARRAY.valueless)
        self.assertFalse(Kind.PAIR.valueless)


class TestValidators(TestCase):
    """Behavioral tests for the validator variants."""

    def testChoicesRejectStringsAndEmpty(self):
        with self.assertRaises(TypeError):
            Choices("abc")
        with self.assertRaises(ValueError):
            Choices([])

    def testChoicesRejectDuplicates(self):
        with self.assertRaises(ValueError):
            Choices(["a", "a"])

    def testChoicesExactMatch(self):
        choices = Choices(["dev", "prod"])
        choices.validate("dev")
        with self.assertRaises(ValidationError) as context:
            choices.validate("DEV", dest="env")
        self.assertEqual(context.exception.options["code"], FaultCode.INVALID_VALUE)
        self.assertEqual(context.exception.options["dest"], "env")

    def testCaseInsensitiveChoicesFoldCase(self):
        choices = CaseInsensitiveChoices(["dev", "prod"])
        self.assertTrue(choices.accepts("DEV"))
        self.assertTrue(choices.accepts("Prod"))
        self.assertFalse(choices.accepts("staging"))

    def testPredicateFalseRejects(self):
        predicate = Predicate(str.isdigit)
        predicate.validate("80")
        with self.assertRaises(ValidationError):
            predicate.validate("eighty")

    def testPredicateExceptionRejectsAndChains(self):
        predicate = Predicate(int)
        predicate.validate("12")
        with self.assertRaises(ValidationError) as context:
            predicate.validate("twelve")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testPredicateRequiresCallable(self):
        with self.assertRaises(TypeError):
            Predicate(["a"])


class TestArgumentSpecConstruction(TestCase):
    """Behavioral tests for ArgumentSpec metadata sanitization."""

    def testDestDerivedFromFirstName(self):
        self.assertEqual(ArgumentSpec("--dry-run", "-n").dest, "dry_run")
        self.assertEqual(ArgumentSpec("out-file").dest, "out_file")

    def testExplicitDestNormalized(self):
        self.assertEqual(ArgumentSpec("-o", dest="output-file").dest, "output_file")

    def testPositionalDetection(self):
        self.assertTrue(ArgumentSpec("source").positional)
        self.assertFalse(ArgumentSpec("--source").positional)

    def testNamesMustNotMixFlagsAndPositionals(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("--source", "source")

    def testPositionalTakesSingleName(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("source", "target")

    def testNamesRequired(self):
        with self.assertRaises(TypeError):
            ArgumentSpec()

    def testMalformedNameRejected(self):
        with self.assertRaises(ValueError):
            ArgumentSpec("--9lives")
        with self.assertRaises(ValueError):
            ArgumentSpec("---triple")

    def testDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            ArgumentSpec("--name", "--name")

    def testKindDefaultsToScalar(self):
        self.assertIs(ArgumentSpec("--name").kind, Kind.SCALAR)

    def testKindAcceptsStrings(self):
        self.assertIs(ArgumentSpec("--tag", kind="array").kind, Kind.ARRAY)

    def testUnknownKindRejected(self):
        with self.assertRaises(ValueError):
            ArgumentSpec("--tag", kind="List")

    def testNargsOnlyForPositionals(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("--files", nargs="+")

    def testNamedNargsIsNone(self):
        self.assertIsNone(ArgumentSpec("--name").nargs)

    def testPositionalNargsDefaultsToOne(self):
        self.assertEqual(ArgumentSpec("source").nargs, 1)

    def testInvalidNargsRejected(self):
        with self.assertRaises(ValueError):
            ArgumentSpec("files", nargs="++")
        with self.assertRaises(ValueError):
            ArgumentSpec("files", nargs=0)
        with self.assertRaises(TypeError):
            ArgumentSpec("files", nargs=True)

    def testMultiTokenPositionalDefaultsToArray(self):
        self.assertIs(ArgumentSpec("files", nargs="+").kind, Kind.ARRAY)
        self.assertIs(ArgumentSpec("pair", nargs=2).kind, Kind.ARRAY)
        self.assertIs(ArgumentSpec("maybe", nargs="?").kind, Kind.SCALAR)

    def testScalarWithMultiTokenNargsRejected(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("files", nargs="*", kind="Scalar")

    def testBoolAndCountCannotBePositional(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("verbose", kind="Bool")
        with self.assertRaises(TypeError):
            ArgumentSpec("verbose", kind="Count")

    def testSplitOnlyForArrayAndPair(self):
        self.assertEqual(ArgumentSpec("--tag", kind="Array", split=",").split, ",")
        self.assertEqual(ArgumentSpec("--define", kind="Pair", split=",").split, ",")
        with self.assertRaises(TypeError):
            ArgumentSpec("--name", split=",")
        with self.assertRaises(ValueError):
            ArgumentSpec("--tag", kind="Array", split="")

    def testChoicesAndChoicesInsensitiveConflict(self):
        with self.assertRaises(ConflictingChoiceSpecError) as context:
            ArgumentSpec("--env", choices=["dev"], choices_i=["dev"])
        self.assertEqual(context.exception.options["code"], FaultCode.CONFLICTING_CHOICE_SPEC)

    def testChoicesFoldedIntoValidators(self):
        self.assertIsInstance(ArgumentSpec("--env", choices=["dev", "prod"]).validator, Choices)
        self.assertIsInstance(ArgumentSpec("--env", choices_i=["dev"]).validator, CaseInsensitiveChoices)
        self.assertIsInstance(ArgumentSpec("--port", choices=str.isdigit).validator, Predicate)
        self.assertIsNone(ArgumentSpec("--env").validator)

    def testChoicesInsensitiveRejectsCallable(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("--env", choices_i=str.isdigit)

    def testChoicesRejectedOnValuelessKinds(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("--flag", kind="Bool", choices=["yes"])

    def testChoicesPropertyListsAllowedValues(self):
        self.assertEqual(ArgumentSpec("--env", choices=["dev", "prod"]).choices, ("dev", "prod"))
        self.assertEqual(ArgumentSpec("--port", choices=str.isdigit).choices, ())

    def testArrayDefaultWrapsLoneValue(self):
        self.assertEqual(ArgumentSpec("--tag", kind="Array", default="x").default, ("x",))
        self.assertEqual(ArgumentSpec("--tag", kind="Array", default=["x", "y"]).default, ("x", "y"))

    def testPairDefaultMustBeMapping(self):
        self.assertEqual(dict(ArgumentSpec("--define", kind="Pair", default={"a": "1"}).default), {"a": "1"})
        with self.assertRaises(TypeError):
            ArgumentSpec("--define", kind="Pair", default=["a=1"])

    def testScalarDefaultRejectsSequences(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("--name", default=["a", "b"])

    def testCountDefaultMustBeNonNegativeInteger(self):
        with self.assertRaises(TypeError):
            ArgumentSpec("-v", kind="Count", default=-1)
        with self.assertRaises(TypeError):
            ArgumentSpec("-v", kind="Count", default="2")

    def testRequiredIgnoredOnBool(self):
        with self.assertWarns(RequiredIgnoredWarning):
            spec = ArgumentSpec("--force", kind="Bool", required=True)
        self.assertFalse(spec.required)

    def testRequiredIgnoredOnCount(self):
        with self.assertWarns(RequiredIgnoredWarning):
            spec = ArgumentSpec("-v", kind="Count", required=True)
        self.assertFalse(spec.required)

    def testHelpAndMetavarMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            ArgumentSpec("--name", help="  ")
        with self.assertRaises(ValueError):
            ArgumentSpec("--name", metavar="")

    def testLabelPrefersMetavar(self):
        self.assertEqual(ArgumentSpec("--name").label, "NAME")
        self.assertEqual(ArgumentSpec("--name", metavar="WHO").label, "WHO")

    def testMinimumPerNargs(self):
        self.assertEqual(ArgumentSpec("a", nargs="?").minimum, 0)
        self.assertEqual(ArgumentSpec("a", nargs="*").minimum, 0)
        self.assertEqual(ArgumentSpec("a", nargs="+").minimum, 1)
        self.assertEqual(ArgumentSpec("a", nargs=3).minimum, 3)
        self.assertEqual(ArgumentSpec("--a").minimum, 0)


class TestArgumentSpecAccumulation(TestCase):
    """Behavioral tests for consume() and fallback()."""

    def testScalarKeepsLastValue(self):
        spec = ArgumentSpec("--name")
        self.assertEqual(spec.consume("old", ["new"]), "new")

    def testScalarValidatesValue(self):
        spec = ArgumentSpec("--env", choices=["dev", "prod"])
        with self.assertRaises(ValidationError):
            spec.consume(None, ["staging"])

    def testBoolBecomesTrue(self):
        self.assertIs(ArgumentSpec("--force", kind="Bool").consume(False), True)

    def testCountIncrementsPrevious(self):
        spec = ArgumentSpec("-v", kind="Count")
        self.assertEqual(spec.consume(None), 1)
        self.assertEqual(spec.consume(2), 3)

    def testCountStartsFromDefault(self):
        spec = ArgumentSpec("-v", kind="Count", default=5)
        self.assertEqual(spec.consume(None), 6)

    def testArrayAppendsSplitPieces(self):
        spec = ArgumentSpec("--emails", kind="Array", split=",")
        self.assertEqual(spec.consume(["a"], ["b,c"]), ["a", "b", "c"])

    def testArrayDoesNotMutatePrevious(self):
        spec = ArgumentSpec("--emails", kind="Array")
        previous = ["a"]
        spec.consume(previous, ["b"])
        self.assertEqual(previous, ["a"])

    def testArrayValidatesEveryPiece(self):
        spec = ArgumentSpec("--env", kind="Array", split=",", choices=["dev", "prod"])
        with self.assertRaises(ValidationError):
            spec.consume(None, ["dev,staging"])

    def testPairMergesLaterKeysWin(self):
        spec = ArgumentSpec("--param", kind="Pair", split=",")
        self.assertEqual(spec.consume({"a": "1", "b": "2"}, ["b=3,c=4"]), {"a": "1", "b": "3", "c": "4"})

    def testPairSplitsOnFirstEquals(self):
        spec = ArgumentSpec("--param", kind="Pair")
        self.assertEqual(spec.consume(None, ["url=a=b"]), {"url": "a=b"})

    def testPairPieceWithoutEqualsRejected(self):
        spec = ArgumentSpec("--param", kind="Pair")
        with self.assertRaises(ValidationError):
            spec.consume(None, ["novalue"])
        with self.assertRaises(ValidationError):
            spec.consume(None, ["=value"])

    def testPairValidatesValuePart(self):
        spec = ArgumentSpec("--param", kind="Pair", choices=["on", "off"])
        self.assertEqual(spec.consume(None, ["cache=on"]), {"cache": "on"})
        with self.assertRaises(ValidationError):
            spec.consume(None, ["cache=maybe"])

    def testFallbacks(self):
        self.assertIs(ArgumentSpec("--force", kind="Bool").fallback(), False)
        self.assertEqual(ArgumentSpec("-v", kind="Count").fallback(), 0)
        self.assertEqual(ArgumentSpec("--tag", kind="Array", default="x").fallback(), ["x"])
        self.assertEqual(ArgumentSpec("--define", kind="Pair", default={"a": "1"}).fallback(), {"a": "1"})
        self.assertEqual(ArgumentSpec("--name", default="anon").fallback(), "anon")
        self.assertFalse(ArgumentSpec("--name").fallback())

    def testFallbackReturnsFreshContainers(self):
        spec = ArgumentSpec("--tag", kind="Array", default=["x"])
        first = spec.fallback()
        first.append("y")
        self.assertEqual(spec.fallback(), ["x"])


class TestArgumentSpecCloning(TestCase):
    """Behavioral tests for copy.replace and equality."""

    def testReplaceWithoutOverridesIsEqualButIndependent(self):
        spec = ArgumentSpec("--tag", "-t", kind="Array", split=",", choices=["a", "b"], help="tags")
        clone = copy.replace(spec)
        self.assertEqual(clone, spec)
        self.assertIsNot(clone, spec)

    def testReplaceOverridesMetadata(self):
        spec = ArgumentSpec("--name", help="who")
        clone = copy.replace(spec, help="someone else", required=True)
        self.assertNotEqual(clone, spec)
        self.assertEqual(clone.help, "someone else")
        self.assertTrue(clone.required)
        self.assertEqual(clone.names, spec.names)

    def testReplaceChoicesInsensitiveDropsChoices(self):
        spec = ArgumentSpec("--env", choices=["dev"])
        clone = copy.replace(spec, choices_i=["DEV"])
        self.assertIsInstance(clone.validator, CaseInsensitiveChoices)

    def testReplacePositionalKeepsNargs(self):
        spec = ArgumentSpec("files", nargs="+")
        self.assertEqual(copy.replace(spec).nargs, "+")

    def testReplaceNames(self):
        spec = ArgumentSpec("--name", "-n")
        clone = copy.replace(spec, names=("--who",))
        self.assertEqual(clone.names, ("--who",))
        self.assertEqual(clone.dest, "name")

    def testPropertiesAreReadOnly(self):
        spec = ArgumentSpec("--name")
        with self.assertRaises(AttributeError):
            spec.dest = "other"

    def testReprListsDisplayableMetadata(self):
        self.assertTrue(repr(ArgumentSpec("--name")).startswith("argument-spec(names=('--name',)"))


if __name__ == "__main__":
    unittest.main()
