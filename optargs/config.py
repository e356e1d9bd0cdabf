"""
Optargs parser configuration and optstring compiler.

What this module provides
- ParseMode: DEFAULT (permute non-options to the tail), POSIXLY_CORRECT
  (stop at the first non-option), YIELD_NONOPTS (yield non-options as
  synthetic options named "\\x01").
- ParserConfig: the immutable record of behavioural switches a parser is
  born with.
- compile_optstring(): POSIX optstring -> (ParserConfig, short flags).

Optstring grammar
    optstring := prefix* body
    prefix    := ':' | '+' | '-'
    body      := item*
    item      := char argmark?  |  'W;'
    argmark   := ':' | '::'
    char      := any graphic character except ':' ';' '-'

Environment
- POSIXLY_CORRECT set to any non-empty value selects ParseMode.POSIXLY_CORRECT.
  It is read here, at compile time, and nowhere else.
"""
import os
from collections import namedtuple
from enum import IntEnum

from .faults import InvalidShortOptionError, ProhibitedShortOptionError, LongOnlyOptstringError
from .flags import ArgumentKind, Flag
from .utils import isgraph

PROHIBITED = frozenset(":;-")


class ParseMode(IntEnum):
    """
    policy for tokens that are neither options nor registered commands.
    """
    DEFAULT = 0
    YIELD_NONOPTS = 1
    POSIXLY_CORRECT = 2


class ParserConfig(namedtuple("ParserConfig", (
    "silent_errors",
    "short_case_fold",
    "long_case_fold",
    "long_only",
    "gnu_words",
    "command_case_fold",
    "parse_mode",
), defaults=(False, False, True, False, False, False, ParseMode.DEFAULT))):
    """
    Behavioural switches of a parser, frozen at construction.

    Fields
    - silent_errors: keep faults out of the error sink (they are still yielded).
    - short_case_fold: ASCII case-insensitive short option lookup.
    - long_case_fold: ASCII case-insensitive long option matching (default True).
    - long_only: try single-dash multi-character tokens as long options first.
    - gnu_words: rewrite "-W word" into the long option "word".
    - command_case_fold: ASCII case-insensitive subcommand lookup.
    - parse_mode: a ParseMode.
    """
    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        self = super().__new__(cls, *args, **kwargs)
        for field in cls._fields[:-1]:
            if not isinstance(getattr(self, field), bool):
                raise TypeError(f"ParserConfig {field!r} must be a boolean")
        try:
            mode = ParseMode(self.parse_mode)
        except ValueError:
            raise ValueError(f"ParserConfig 'parse_mode' must be a parse mode, not {self.parse_mode!r}") from None
        return super().__new__(cls, *self[:-1], mode)

    def replace(self, /, **changes):
        """
        Return a copy with the given fields changed (validated like the constructor).
        """
        return type(self)(**(self._asdict() | changes))


def posixly_correct():
    """
    True when the POSIXLY_CORRECT environment variable is set and non-empty.
    """
    return bool(os.environ.get("POSIXLY_CORRECT"))


def compile_optstring(optstring, /, *, long_only=False):
    """
    Compile a POSIX optstring into a ParserConfig and a list of short Flags.

    Steps
    1. start from the defaults (long_case_fold on, errors enabled, DEFAULT mode);
       POSIXLY_CORRECT in the environment switches to POSIXLY_CORRECT mode.
    2. consume the behaviour prefix: ':' silences errors, '+' selects
       POSIXLY_CORRECT, '-' selects YIELD_NONOPTS; the last of '+'/'-' wins.
    3. with long_only, a non-empty body is a LongOnlyOptstringError.
    4. every remaining character must be graphic and not one of ':', ';', '-';
       "c::" is an optional argument, "c:" a required one, "W;" enables GNU
       words (W then takes a required argument). Redefinitions overwrite.

    Returns
    - (ParserConfig, list[Flag]) in optstring order, last definition winning.

    Raises
    - InvalidShortOptionError, ProhibitedShortOptionError, LongOnlyOptstringError.
    """
    if not isinstance(optstring, str):
        raise TypeError("compile_optstring() argument must be a string")

    settings = {
        "long_case_fold": True,
        "long_only": bool(long_only),
        "parse_mode": ParseMode.POSIXLY_CORRECT if posixly_correct() else ParseMode.DEFAULT,
    }

    index = 0
    while index < len(optstring):
        match optstring[index]:
            case ":":
                settings["silent_errors"] = True
            case "+":
                settings["parse_mode"] = ParseMode.POSIXLY_CORRECT
            case "-":
                settings["parse_mode"] = ParseMode.YIELD_NONOPTS
            case _:
                break
        index += 1

    body = optstring[index:]
    if long_only and body:
        raise LongOnlyOptstringError(body)

    flags = {}
    index = 0
    while index < len(body):
        char = body[index]
        index += 1
        if not isgraph(char):
            raise InvalidShortOptionError(char)
        if char in PROHIBITED:
            raise ProhibitedShortOptionError(char)

        if body.startswith("::", index):
            kind = ArgumentKind.OPTIONAL
            index += 2
        elif body.startswith(":", index):
            kind = ArgumentKind.REQUIRED
            index += 1
        elif char == "W" and body.startswith(";", index):
            settings["gnu_words"] = True
            kind = ArgumentKind.REQUIRED
            index += 1
        else:
            kind = ArgumentKind.NONE

        # Redefinitions replace the earlier entry but keep its position.
        flags[char] = Flag(char, kind)

    return ParserConfig(**settings), list(flags.values())


__all__ = (
    "ParseMode",
    "ParserConfig",
    "posixly_correct",
    "compile_optstring",
)
