"""
getopt(1)-style command-line normalizer.

    python -m optargs [options] [--] [optstring] parameters

Parses `parameters` with the given optstring and long options and prints
them in canonical form, ready for `eval set -- "$(...)"` in shell scripts:

    $ python -m optargs -o ab:c -l verbose,file: -- -ab1 --verbose x
     -a -b '1' --verbose -- 'x'

Options
- -o, --options=OPTSTRING      short options (else the first parameter is used)
- -l, --longoptions=LONGOPTS   comma-separated long options; may be repeated
- -a, --alternative            allow long options with a single dash
- -q, --quiet                  do not report parse errors
- -Q, --quiet-output           do not print the normalized output
- -n, --name=NAME              program name used when reporting errors
- -u, --unquoted               do not quote the output
- -T, --test                   exit with status 4 (enhanced getopt probe)
- -V, --version                print the version and exit

Exit status: 0 on success, 1 when the parameters had errors, 2 when the
options of this tool itself were wrong, 4 for --test.
"""
import functools
import sys

from . import __version__
from .config import compile_optstring
from .constructors import getopt_long, parse_longopts
from .faults import OptargsError, report
from .flags import ArgumentKind, Flag, Option, NONOPT
from .parser import Parser
from .utils import Unset, coalesce

LONGOPTS = (
    Flag("options", ArgumentKind.REQUIRED),
    Flag("longoptions", ArgumentKind.REQUIRED),
    Flag("alternative"),
    Flag("quiet"),
    Flag("quiet-output"),
    Flag("name", ArgumentKind.REQUIRED),
    Flag("unquoted"),
    Flag("test"),
    Flag("version"),
)

# short spelling -> long spelling
ALIASES = {
    "o": "options",
    "l": "longoptions",
    "a": "alternative",
    "q": "quiet",
    "Q": "quiet-output",
    "n": "name",
    "u": "unquoted",
    "T": "test",
    "V": "version",
}


def quote(word, /, *, unquoted=False):
    """
    Single-quote a word for POSIX shells (unless `unquoted`).
    """
    if unquoted:
        return word
    return "'" + word.replace("'", "'\\''") + "'"


def unword(option, longs, /):
    """
    Turn a "-W name[=value]" rewrite back into the long option it names.

    The value is split off at the first '=' only when the named long option
    takes an argument; anything else is reported as a bare long option.
    """
    name, sep, value = option.arg.partition("=")
    flag = longs.get(name)
    if sep and flag is not None and flag.kind in (ArgumentKind.REQUIRED, ArgumentKind.OPTIONAL):
        return Option(name, True, value)
    return Option(option.arg)


def normalize(parser, /, *, unquoted=False):
    """
    Run `parser` and return (words, ok): the canonical words and whether
    every option parsed cleanly.
    """
    words = []
    ok = True
    shorts = parser.short_options
    longs = parser.long_options
    for option, fault in parser.options():
        if fault is not None:
            ok = False
            continue
        if option.name == NONOPT:
            words.append(quote(option.arg, unquoted=unquoted))
            continue
        # -W name[=value] comes back as Option(word, True, word)
        if parser.config.gnu_words and option.has_arg and option.name == option.arg:
            flag = longs.get(option.name)
            if flag is None or flag.kind is ArgumentKind.NONE:
                option = unword(option, longs)
        if len(option.name) == 1 and option.name in shorts:
            words.append("-" + option.name)
            flag = shorts[option.name]
        else:
            words.append("--" + option.name)
            flag = longs.get(option.name)
        if option.has_arg or getattr(flag, "kind", None) is ArgumentKind.OPTIONAL:
            words.append(quote(option.arg, unquoted=unquoted))
    words.append("--")
    words.extend(quote(word, unquoted=unquoted) for word in parser.args)
    return words, ok


def main(argv=Unset, /):
    """
    Entry point; returns the exit status.
    """
    argv = list(coalesce(argv, sys.argv[1:]))
    own = getopt_long(argv, "+o:l:aqQn:uTV", LONGOPTS, sink=functools.partial(report, prog="optargs"))

    settings = {"longoptions": []}
    for option, fault in own.options():
        if fault is not None:
            return 2
        name = ALIASES.get(option.name, option.name)
        if name == "longoptions":
            settings[name].append(option.arg)
        else:
            settings[name] = option.arg if option.has_arg else True

    if settings.get("version"):
        print(f"optargs {__version__}")
        return 0
    if settings.get("test"):
        return 4

    parameters = own.args
    optstring = settings.get("options", Unset)
    if optstring is Unset:
        if not parameters:
            report(OptargsError("missing optstring argument"), prog="optargs")
            return 2
        optstring, parameters = parameters[0], parameters[1:]

    try:
        config, shorts = compile_optstring(optstring)
        longs = [flag for source in settings["longoptions"] for flag in parse_longopts(source)]
        if settings.get("quiet"):
            config = config.replace(silent_errors=True)
        if settings.get("alternative"):
            config = config.replace(long_only=True)
        parser = Parser(
            config,
            shorts,
            longs,
            parameters,
            sink=functools.partial(report, prog=settings.get("name", "optargs"))
        )
    except OptargsError as fault:
        report(fault, prog="optargs")
        return 2

    words, ok = normalize(parser, unquoted=bool(settings.get("unquoted")))
    if not settings.get("quiet-output"):
        print(" " + " ".join(words))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
