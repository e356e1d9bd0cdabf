"""
Optargs public constructors: getopt(3), getopt_long(3), getopt_long_only(3).

These translate the classic C inputs, an optstring plus a list of long
option descriptors, into a configured Parser:

    >>> parser = getopt_long(["-v", "--file", "in.txt", "rest"], "vf:",
    ...                      [Flag("file", REQUIRED_ARGUMENT)])
    >>> for option, fault in parser.options():
    ...     ...
    >>> parser.args
    ['rest']

parse_longopts() reads the comma-separated descriptor syntax of getopt(1)
("name", "name:", "name::") into Flags.
"""
from .config import compile_optstring
from .flags import ArgumentKind, Flag
from .parser import Parser
from .utils import Unset


def _build(args, optstring, longopts, long_only, sink):
    config, short_options = compile_optstring(optstring, long_only=long_only)
    return Parser(config, short_options, longopts, args, sink=sink)


def getopt(args, optstring, /, *, sink=Unset):
    """
    POSIX getopt(3): short options only.

    Raises InvalidShortOptionError / ProhibitedShortOptionError on a bad optstring.
    """
    return _build(args, optstring, (), False, sink)


def getopt_long(args, optstring, longopts=(), /, *, sink=Unset):
    """
    GNU getopt_long(3): short options from `optstring`, long options from
    `longopts` (an iterable of Flag).
    """
    return _build(args, optstring, longopts, False, sink)


def getopt_long_only(args, optstring, longopts=(), /, *, sink=Unset):
    """
    GNU getopt_long_only(3): single-dash tokens are tried as long options.

    The optstring may carry behaviour prefixes (':', '+', '-') only; any
    option character raises LongOnlyOptstringError.
    """
    return _build(args, optstring, longopts, True, sink)


def parse_longopts(source, /):
    """
    Read getopt(1) long option descriptors into a list of Flags.

    "verbose,file:,color::" -> NONE verbose, REQUIRED file, OPTIONAL color.
    Empty entries (",,") are skipped; names are validated by the Parser.
    """
    if not isinstance(source, str):
        raise TypeError("parse_longopts() argument must be a string")
    flags = []
    for entry in source.split(","):
        if entry.endswith("::"):
            flags.append(Flag(entry[:-2], ArgumentKind.OPTIONAL))
        elif entry.endswith(":"):
            flags.append(Flag(entry[:-1], ArgumentKind.REQUIRED))
        elif entry:
            flags.append(Flag(entry, ArgumentKind.NONE))
    return flags


__all__ = (
    "getopt",
    "getopt_long",
    "getopt_long_only",
    "parse_longopts",
)
