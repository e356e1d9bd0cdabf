"""
Parser module behavioral tests (resolvers, iterator, parse modes, faults).

Scope
- End-to-end option streams and residues for short and long options.
- Longest-prefix long option matching with '=' in names.
- Parse modes, the "--" terminator and the cleanup contract.
- long_only fallback, GNU words, case folding.
- Fault routing to the injected sink.

Conventions
- Test method names follow CamelCase per project convention.
- Sinks are injected as list.append so nothing reaches stderr.
- Streams are compared as lists of (Option, fault) pairs.
"""

from __future__ import annotations

import io
import os
import unittest
from unittest import TestCase, mock

from rich.console import Console

from optargs import (
    Parser,
    ParserConfig,
    Flag,
    Option,
    NONOPT,
    NO_ARGUMENT,
    REQUIRED_ARGUMENT,
    OPTIONAL_ARGUMENT,
    getopt,
    getopt_long,
    UnknownOptionError,
    MissingArgumentError,
    InvalidOptionError,
    ArgumentKindError,
    InvalidShortOptionError,
    ProhibitedShortOptionError,
    InvalidLongOptionError,
    OptargsError,
)
from optargs import faults


class ParserTestCase(TestCase):
    def setUp(self) -> None:
        """
        Clear POSIXLY_CORRECT and provide a fresh list sink.
        """
        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        os.environ.pop("POSIXLY_CORRECT", None)
        self.logged: list[OptargsError] = []

    def collect(self, parser):
        return list(parser.options())

    def options(self, parser):
        pairs = self.collect(parser)
        for option, fault in pairs:
            self.assertIsNone(fault, option)
        return [option for option, _ in pairs]


class TestShortOptions(ParserTestCase):
    """Short option resolution and compaction."""

    def testBasicStream(self) -> None:
        """
        "ab:c" over -a -b val -c x yields a, b=val, c and leaves x.
        """
        parser = getopt(["-a", "-b", "val", "-c", "x"], "ab:c", sink=self.logged.append)
        self.assertEqual(self.options(parser), [
            ("a", False, ""),
            ("b", True, "val"),
            ("c", False, ""),
        ])
        self.assertEqual(parser.args, ["x"])

    def testOptionalArgument(self) -> None:
        """
        An optional argument comes from the word tail, then the next element.
        """
        parser = getopt(["-afoo", "-a", "bar", "-a"], "a::", sink=self.logged.append)
        self.assertEqual(self.options(parser), [
            ("a", True, "foo"),
            ("a", True, "bar"),
            ("a", False, ""),
        ])
        self.assertEqual(parser.args, [])

    def testCompaction(self) -> None:
        """
        Compacted words expand left to right until an option takes the rest.
        """
        parser = getopt(["-acbfoo", "-abc"], "ab:c", sink=self.logged.append)
        self.assertEqual(self.options(parser), [
            ("a", False, ""),
            ("c", False, ""),
            ("b", True, "foo"),
            ("a", False, ""),
            ("b", True, "c"),
        ])

    def testRequiredTakesNextElementVerbatim(self) -> None:
        """
        A required argument takes the next element even when it looks like an option.
        """
        parser = getopt(["-b", "-a", "--", "x"], "ab:", sink=self.logged.append)
        self.assertEqual(self.options(parser), [("b", True, "-a")])
        self.assertEqual(parser.args, ["x"])

    def testMissingRequiredArgument(self) -> None:
        """
        A trailing required option yields and logs a missing-argument fault.
        """
        parser = getopt(["-a", "-b"], "ab:", sink=self.logged.append)
        stream = self.collect(parser)
        self.assertEqual(stream, [
            (Option("a"), None),
            (Option("b"), MissingArgumentError("b")),
        ])
        self.assertEqual(stream[1][1].message, "option requires an argument: b")
        self.assertEqual(self.logged, [MissingArgumentError("b")])

    def testUnknownShortOption(self) -> None:
        """
        An unregistered character yields an empty option and an unknown-option fault.
        """
        parser = getopt(["-az"], "a", sink=self.logged.append)
        self.assertEqual(self.collect(parser), [
            (Option("a"), None),
            (Option(), UnknownOptionError("z")),
        ])
        self.assertEqual(str(self.logged[0]), "unknown option: z")

    def testDashInsideCompactedWordIsInvalid(self) -> None:
        """
        '-' inside a compacted word is an invalid option.
        """
        parser = getopt(["-a-"], "a", sink=self.logged.append)
        stream = self.collect(parser)
        self.assertEqual(stream[1], (Option(), InvalidOptionError("-")))
        self.assertEqual(stream[1][1].message, "invalid option: -")

    def testLoneDashIsNonOption(self) -> None:
        """
        A lone '-' is permuted like any other non-option.
        """
        parser = getopt(["-", "-a"], "a", sink=self.logged.append)
        self.assertEqual(self.options(parser), [("a", False, "")])
        self.assertEqual(parser.args, ["-"])

    def testUnknownArgumentKind(self) -> None:
        """
        A flag with an out-of-range kind yields ArgumentKindError when matched.
        """
        parser = Parser(short_options=[Flag("x", 7)], args=["-x"], sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option("x"), ArgumentKindError(7))])
        self.assertEqual(self.logged[0].message, "unknown argument type: 7")

    def testShortCaseFold(self) -> None:
        """
        With short_case_fold the opposite case is tried after the exact one.
        """
        config = ParserConfig(short_case_fold=True)
        parser = Parser(config, [Flag("a"), Flag("B", REQUIRED_ARGUMENT)], args=["-A", "-bx"])
        self.assertEqual(self.options(parser), [("a", False, ""), ("B", True, "x")])

    def testShortCaseFoldPrefersExactCharacter(self) -> None:
        """
        An exact-case flag wins over its folded counterpart.
        """
        config = ParserConfig(short_case_fold=True)
        parser = Parser(config, [Flag("a"), Flag("A", OPTIONAL_ARGUMENT)], args=["-Ax"])
        self.assertEqual(self.options(parser), [("A", True, "x")])

    def testShortCaseSensitiveByDefault(self) -> None:
        """
        Without folding, case mismatches are unknown options.
        """
        parser = Parser(short_options=[Flag("a")], args=["-A"], sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("A"))])


class TestLongOptions(ParserTestCase):
    """Longest-prefix matching and value binding."""

    def long(self, flags, args, config=None):
        return Parser(config or ParserConfig(), long_options=flags, args=args, sink=self.logged.append)

    def testExactNameBeatsValueSplit(self) -> None:
        """
        A registered "foo=bar" wins over "foo" with the value "bar".
        """
        parser = self.long([Flag("foo", REQUIRED_ARGUMENT), Flag("foo=bar", NO_ARGUMENT)], ["--foo=bar"])
        self.assertEqual(self.options(parser), [("foo=bar", False, "")])

    def testValueMayContainEquals(self) -> None:
        """
        Only the first '=' after the name separates the value.
        """
        parser = self.long([Flag("foo", REQUIRED_ARGUMENT)], ["--foo=bar=baz"])
        self.assertEqual(self.options(parser), [("foo", True, "bar=baz")])

    def testLongerNameWithEqualsTakesValue(self) -> None:
        """
        The longest name followed by '=' binds the remainder.
        """
        parser = self.long(
            [Flag("foo", REQUIRED_ARGUMENT), Flag("foo=bar", REQUIRED_ARGUMENT)],
            ["--foo=bar=arg"],
        )
        self.assertEqual(self.options(parser), [("foo=bar", True, "arg")])

    def testNoArgumentCandidateSkipped(self) -> None:
        """
        A no-argument candidate cannot take "=value"; with nothing shorter it is unknown.
        """
        parser = self.long([Flag("output", NO_ARGUMENT), Flag("out", REQUIRED_ARGUMENT)], ["--output=file"])
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("output=file"))])
        self.assertEqual(self.logged[0].message, "unknown option: output=file")

    def testNoArgumentCandidateFallsToShorterOne(self) -> None:
        """
        After skipping a no-argument candidate, a shorter one at an '=' boundary binds.
        """
        parser = self.long([Flag("foo=x", NO_ARGUMENT), Flag("foo", OPTIONAL_ARGUMENT)], ["--foo=x=1"])
        self.assertEqual(self.options(parser), [("foo", True, "x=1")])

    def testEmptyValueAfterEquals(self) -> None:
        """
        "--name=" binds an empty value for required and optional flags.
        """
        parser = self.long([Flag("name", REQUIRED_ARGUMENT), Flag("tag", OPTIONAL_ARGUMENT)], ["--name=", "--tag="])
        self.assertEqual(self.options(parser), [("name", True, ""), ("tag", True, "")])

    def testValueFromNextElement(self) -> None:
        """
        Without '=', required and optional flags take the next element when present.
        """
        parser = self.long(
            [Flag("file", REQUIRED_ARGUMENT), Flag("level", OPTIONAL_ARGUMENT), Flag("quiet")],
            ["--file", "in.txt", "--quiet", "--level", "3", "--level"],
        )
        self.assertEqual(self.options(parser), [
            ("file", True, "in.txt"),
            ("quiet", False, ""),
            ("level", True, "3"),
            ("level", False, ""),
        ])

    def testMissingLongArgument(self) -> None:
        """
        A trailing required long option yields and logs a missing-argument fault.
        """
        parser = self.long([Flag("file", REQUIRED_ARGUMENT)], ["--file"])
        self.assertEqual(self.collect(parser), [(Option("file"), MissingArgumentError("file"))])
        self.assertEqual(self.logged, [MissingArgumentError("file")])

    def testNoAbbreviations(self) -> None:
        """
        A prefix of a registered name is not accepted.
        """
        parser = self.long([Flag("verbose")], ["--verb"])
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("verb"))])

    def testLongCaseFoldDefault(self) -> None:
        """
        Long names fold ASCII case by default and yield the registered spelling.
        """
        parser = self.long([Flag("verbose"), Flag("file", REQUIRED_ARGUMENT)], ["--VERBOSE", "--File=x"])
        self.assertEqual(self.options(parser), [("verbose", False, ""), ("file", True, "x")])

    def testLongCaseSensitive(self) -> None:
        """
        With long_case_fold off, case mismatches are unknown options.
        """
        parser = self.long([Flag("verbose")], ["--VERBOSE"], ParserConfig(long_case_fold=False))
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("VERBOSE"))])

    def testUnknownLongArgumentKind(self) -> None:
        """
        An out-of-range kind on a long flag yields ArgumentKindError.
        """
        parser = self.long([Flag("odd", 5)], ["--odd=1"])
        self.assertEqual(self.collect(parser), [(Option("odd"), ArgumentKindError(5))])


class TestParseModes(ParserTestCase):
    """Non-option handling, terminator and cleanup."""

    def testDefaultPermutes(self) -> None:
        """
        DEFAULT mode moves non-options to the residue in input order.
        """
        parser = getopt(["x", "-a", "y", "-b", "1", "z"], "ab:")
        self.assertEqual(self.options(parser), [("a", False, ""), ("b", True, "1")])
        self.assertEqual(parser.args, ["x", "y", "z"])

    def testTerminator(self) -> None:
        """
        Tokens after "--" are never parsed and follow the permuted non-options.
        """
        parser = getopt(["x", "-a", "--", "-b", "y"], "ab")
        self.assertEqual(self.options(parser), [("a", False, "")])
        self.assertEqual(parser.args, ["x", "-b", "y"])

    def testPosixlyCorrectStops(self) -> None:
        """
        POSIXLY_CORRECT mode stops at the first non-option, leaving it in place.
        """
        parser = getopt(["-a", "x", "-b"], "+ab")
        self.assertEqual(self.options(parser), [("a", False, "")])
        self.assertEqual(parser.args, ["x", "-b"])

    def testPosixlyCorrectFromEnvironment(self) -> None:
        """
        The environment variable selects the same stopping behaviour.
        """
        os.environ["POSIXLY_CORRECT"] = "1"
        parser = getopt(["-a", "x", "-b"], "ab")
        self.assertEqual(self.options(parser), [("a", False, "")])
        self.assertEqual(parser.args, ["x", "-b"])

    def testYieldNonOptions(self) -> None:
        """
        YIELD_NONOPTS mode yields non-options as NONOPT entries in place.
        """
        parser = getopt(["x", "-a", "y"], "-a")
        self.assertEqual(self.options(parser), [
            (NONOPT, True, "x"),
            ("a", False, ""),
            (NONOPT, True, "y"),
        ])
        self.assertEqual(parser.args, [])

    def testEarlyCloseRestoresResidue(self) -> None:
        """
        Closing the stream early merges permuted non-options back in front.
        """
        parser = getopt(["x", "-a", "y", "-b"], "ab")
        iterator = parser.options()
        self.assertEqual(next(iterator), (Option("a"), None))
        iterator.close()
        self.assertEqual(parser.args, ["x", "y", "-b"])

    def testResumedIterationAfterClose(self) -> None:
        """
        A new stream continues over the restored residue.
        """
        parser = getopt(["x", "-a", "y", "-b"], "ab")
        iterator = parser.options()
        next(iterator)
        iterator.close()
        self.assertEqual(self.options(parser), [("b", False, "")])
        self.assertEqual(parser.args, ["x", "y"])

    def testEmptyVector(self) -> None:
        """
        An empty argument vector yields nothing.
        """
        parser = getopt([], "ab")
        self.assertEqual(self.collect(parser), [])
        self.assertEqual(parser.args, [])


class TestLongOnly(ParserTestCase):
    """long_only trial lookup and fallback."""

    def testLongFirstThenShortFallback(self) -> None:
        """
        Single-dash words try long options first and fall back to short ones quietly.
        """
        parser = Parser(
            ParserConfig(long_only=True),
            [Flag("v"), Flag("x")],
            [Flag("verbose")],
            ["-verbose", "-vx"],
            sink=self.logged.append,
        )
        self.assertEqual(self.options(parser), [
            ("verbose", False, ""),
            ("v", False, ""),
            ("x", False, ""),
        ])
        self.assertEqual(self.logged, [])

    def testSingleDashValueForms(self) -> None:
        """
        "-name=value" and "-name value" bind like their double-dash forms.
        """
        parser = Parser(
            ParserConfig(long_only=True),
            long_options=[Flag("file", REQUIRED_ARGUMENT)],
            args=["-file=a", "-file", "b"],
        )
        self.assertEqual(self.options(parser), [("file", True, "a"), ("file", True, "b")])

    def testUnknownWithoutShortOptionsSurfaces(self) -> None:
        """
        With no short options the failed trial is yielded but not logged.
        """
        parser = Parser(ParserConfig(long_only=True), long_options=[Flag("verbose")], args=["-nope"],
                        sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("nope"))])
        self.assertEqual(self.logged, [])

    def testMissingArgumentWithoutShortOptionsSurfaces(self) -> None:
        """
        A matched long option missing its argument is yielded unlogged when there is no fallback.
        """
        parser = Parser(ParserConfig(long_only=True), long_options=[Flag("file", REQUIRED_ARGUMENT)],
                        args=["-file"], sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option("file"), MissingArgumentError("file"))])
        self.assertEqual(self.logged, [])

    def testMatchedLongFaultFallsBackToShortOptions(self) -> None:
        """
        Any failed trial, not only an unknown name, falls back to short options.
        """
        parser = Parser(
            ParserConfig(long_only=True),
            [Flag("f"), Flag("i"), Flag("l"), Flag("e")],
            [Flag("file", REQUIRED_ARGUMENT)],
            ["-file"],
            sink=self.logged.append,
        )
        self.assertEqual(self.options(parser), [
            ("f", False, ""),
            ("i", False, ""),
            ("l", False, ""),
            ("e", False, ""),
        ])
        self.assertEqual(self.logged, [])

    def testFallbackFaultsAreLogged(self) -> None:
        """
        Faults of the short-option fallback itself reach the sink.
        """
        parser = Parser(ParserConfig(long_only=True), [Flag("a")], [Flag("all")], ["-az"],
                        sink=self.logged.append)
        self.assertEqual(self.collect(parser), [
            (Option("a"), None),
            (Option(), UnknownOptionError("z")),
        ])
        self.assertEqual(self.logged, [UnknownOptionError("z")])

    def testDoubleDashStillLong(self) -> None:
        """
        "--name" keeps working in long-only mode.
        """
        parser = Parser(ParserConfig(long_only=True), [Flag("v")], [Flag("verbose")], ["--verbose"])
        self.assertEqual(self.options(parser), [("verbose", False, "")])


class TestGnuWords(ParserTestCase):
    """"-W word" rewriting."""

    def testRewrite(self) -> None:
        """
        "-W word" is renamed to the word, which stays the argument.
        """
        parser = getopt(["-W", "foo", "-Wbar=1"], "W;")
        self.assertEqual(self.options(parser), [("foo", True, "foo"), ("bar=1", True, "bar=1")])

    def testNoRewriteWithoutSemicolon(self) -> None:
        """
        "W:" registers a plain option with a required argument.
        """
        parser = getopt(["-W", "foo"], "W:")
        self.assertEqual(self.options(parser), [("W", True, "foo")])

    def testNoRewriteOnFault(self) -> None:
        """
        A failed "-W" keeps its own name alongside the fault.
        """
        parser = getopt(["-W"], "W;", sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option("W"), MissingArgumentError("W"))])


class TestFaultRouting(ParserTestCase):
    """Sinks, silent errors and the default rich renderer."""

    def testSilentErrorsStillYielded(self) -> None:
        """
        silent_errors keeps faults out of the sink but not out of the stream.
        """
        parser = getopt(["-z"], ":a", sink=self.logged.append)
        self.assertEqual(self.collect(parser), [(Option(), UnknownOptionError("z"))])
        self.assertEqual(self.logged, [])

    def testDefaultSinkRendersOnConsole(self) -> None:
        """
        Without a sink, faults are rendered as "error: <message>" on the console.
        """
        stream = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=stream, force_terminal=False, width=200)):
            parser = getopt(["-z"], "a")
            self.collect(parser)
        self.assertEqual(stream.getvalue(), "error: unknown option: z\n")

    def testReportWithProgramAndHint(self) -> None:
        """
        report() prefixes the program name and prints the hint on its own line.
        """
        stream = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=stream, force_terminal=False, width=200)):
            faults.report(UnknownOptionError("z", hint="see --help"), prog="tool")
        self.assertEqual(stream.getvalue(), "tool: error: unknown option: z\nhint: see --help\n")

    def testTriggerContract(self) -> None:
        """
        trigger() returns the fault, calls the sink unless silent and rejects foreign errors.
        """
        fault = UnknownOptionError("q")
        self.assertIs(faults.trigger(fault, sink=self.logged.append), fault)
        self.assertIs(faults.trigger(fault, sink=self.logged.append, silent=True), fault)
        self.assertEqual(self.logged, [fault])
        with self.assertRaises(TypeError):
            faults.trigger(ValueError("nope"))

    def testFaultEquality(self) -> None:
        """
        Faults compare by type and message.
        """
        self.assertEqual(UnknownOptionError("a"), UnknownOptionError("a"))
        self.assertNotEqual(UnknownOptionError("a"), MissingArgumentError("a"))
        self.assertIsInstance(UnknownOptionError("a"), OptargsError)


class TestConstruction(ParserTestCase):
    """Flag table validation and accessors."""

    def testInvalidShortFlags(self) -> None:
        """
        Short flags must be one graphic, non-prohibited character.
        """
        with self.assertRaises(InvalidShortOptionError):
            Parser(short_options=[Flag("ab")])
        with self.assertRaises(InvalidShortOptionError):
            Parser(short_options=[Flag(" ")])
        with self.assertRaises(ProhibitedShortOptionError):
            Parser(short_options=[Flag(";")])

    def testInvalidLongFlags(self) -> None:
        """
        Long flags must be non-empty runs of graphic characters.
        """
        with self.assertRaises(InvalidLongOptionError) as context:
            Parser(long_options=[Flag("bad name")])
        self.assertEqual(context.exception.message, "invalid long option: bad name")
        with self.assertRaises(InvalidLongOptionError):
            Parser(long_options=[Flag("")])

    def testTypeErrors(self) -> None:
        """
        Wrongly typed constructor arguments raise TypeError.
        """
        with self.assertRaises(TypeError):
            Parser(config={})
        with self.assertRaises(TypeError):
            Parser(args="-a")
        with self.assertRaises(TypeError):
            Parser(args=["-a", 1])
        with self.assertRaises(TypeError):
            Parser(short_options=[("a", 0)])
        with self.assertRaises(TypeError):
            Parser(sink="stderr")

    def testOptionTablesAreCopies(self) -> None:
        """
        The option tables handed out are detached copies.
        """
        parser = Parser(short_options=[Flag("a")], long_options=[Flag("all")])
        parser.short_options["b"] = Flag("b")
        self.assertEqual(parser.short_options, {"a": Flag("a")})
        self.assertEqual(parser.long_options, {"all": Flag("all")})
        self.assertIsNone(parser.parent)

    def testRepr(self) -> None:
        """
        repr() lists the config and sorted option names.
        """
        parser = Parser(short_options=[Flag("b"), Flag("a")], args=["x"])
        self.assertTrue(repr(parser).startswith("parser(config="))
        self.assertIn("short_options=['a', 'b']", repr(parser))


class TestRoundTrip(ParserTestCase):
    """Re-emitting a parsed stream parses back to the same result."""

    def testReemittedStreamParsesIdentically(self) -> None:
        """
        Options written back in canonical form parse to the same options and residue.
        """
        def build(args):
            return getopt_long(args, "ab:c::", [Flag("file", REQUIRED_ARGUMENT), Flag("dry-run")])

        first = build(["-a", "x", "--file=f", "-bval", "y", "-cz", "--dry-run"])
        options = self.options(first)

        words = []
        for name, has_arg, arg in options:
            if len(name) == 1:
                words.append("-" + name + arg if has_arg else "-" + name)
            else:
                words.extend(["--" + name, arg] if has_arg else ["--" + name])
        second = build(words + first.args)

        self.assertEqual(sorted(self.options(second)), sorted(options))
        self.assertEqual(sorted(second.args), sorted(first.args))


if __name__ == "__main__":
    unittest.main()
