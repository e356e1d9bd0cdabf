"""
Optargs flag descriptors and yielded options.

Overview
- ArgumentKind: NONE, REQUIRED, OPTIONAL (getopt.h's no_argument,
  required_argument and optional_argument).
- Flag: a registered option, (name, kind). Short flags have a single
  character name; long flag names are any run of graphic characters and
  may contain '='.
- Option: what the parse iterator yields, (name, has_arg, arg). has_arg is
  True iff a value was bound, whatever the flag's kind was.
- NONOPT: the synthetic option name ("\\x01") used to yield non-options when
  the parser runs in ParseMode.YIELD_NONOPTS.

Both Flag and Option are immutable named tuples, so they compare equal to
plain tuples:
    >>> Option("a", True, "x") == ("a", True, "x")
    True
"""
from collections import namedtuple
from enum import IntEnum


class ArgumentKind(IntEnum):
    """
    whether a flag refuses, requires or optionally accepts a value.
    """
    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


NO_ARGUMENT = ArgumentKind.NONE
REQUIRED_ARGUMENT = ArgumentKind.REQUIRED
OPTIONAL_ARGUMENT = ArgumentKind.OPTIONAL

NONOPT = "\x01"


class Flag(namedtuple("Flag", ("name", "kind"), defaults=(ArgumentKind.NONE,))):
    """
    A registered option: its name and ArgumentKind.

    The kind is stored as given; plain integers are accepted and coerced to
    ArgumentKind when they are in range. An out-of-range kind is kept raw and
    only reported when the flag is matched ("unknown argument type: <n>").
    """
    __slots__ = ()

    def __new__(cls, name, kind=ArgumentKind.NONE):
        if not isinstance(name, str):
            raise TypeError("Flag 'name' must be a string")
        if isinstance(kind, bool) or not isinstance(kind, int):
            raise TypeError("Flag 'kind' must be an argument kind")
        try:
            kind = ArgumentKind(kind)
        except ValueError:
            pass
        return super().__new__(cls, name, kind)

    def __repr__(self):
        kind = self.kind.name if isinstance(self.kind, ArgumentKind) else self.kind
        return f"flag(name={self.name!r}, kind={kind})"


class Option(namedtuple("Option", ("name", "has_arg", "arg"), defaults=("", False, ""))):
    """
    A parsed option as yielded by Parser.options().

    On faults the option may be partial: the name is set when the flag was
    matched (e.g. a missing required argument) and empty otherwise.
    """
    __slots__ = ()

    def __repr__(self):
        return f"option(name={self.name!r}, has_arg={self.has_arg!r}, arg={self.arg!r})"


__all__ = (
    "ArgumentKind",
    "NO_ARGUMENT",
    "REQUIRED_ARGUMENT",
    "OPTIONAL_ARGUMENT",
    "NONOPT",
    "Flag",
    "Option",
)
