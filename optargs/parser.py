"""
Optargs parser: option recognition and subcommand dispatch.

What this module provides
- Parser: a node holding its frozen ParserConfig, its short and long flag
  tables, the argument vector it consumes, a command registry and a weak
  back-link to the parser it is registered under.
  • options(): the lazy (Option, fault) stream over the argument vector.
  • add_command()/add_alias()/get_command()/...: subcommand registration.

Recognized tokens
- "--"                          end of options; the rest is residue.
- "--name", "--name=value",
  "--name value"                long options (longest-prefix matching).
- "-name"                       long option first when long_only is set.
- "-c", "-cVALUE", "-c VALUE"   short options; "-abc" is compacted.
- "-W name"                     rewritten to the long option "name" with gnu_words.
- "-" and anything else         non-options (or a registered command name).

Inheritance
- Resolvers walk the parent chain, nearest first. Short options: the first
  parser that knows the character wins. Long options: candidates from the
  whole chain compete under the longest-prefix rule, nearer parsers winning
  ties.
- Faults go to the sink of the parser that is iterating, and only when its
  config is not silent. A parser with a parent never logs a missing
  required argument; it still yields it.

Quick example
    >>> parser = Parser(short_options=[Flag("a"), Flag("b", REQUIRED_ARGUMENT)],
    ...                 args=["-a", "file", "-b", "val"])
    >>> [option for option, fault in parser.options()]
    [option(name='a', has_arg=False, arg=''), option(name='b', has_arg=True, arg='val')]
    >>> parser.args
    ['file']
"""
import weakref
from collections.abc import Iterable

from .commands import CommandRegistry
from .config import ParseMode, ParserConfig, PROHIBITED
from .faults import *
from .flags import ArgumentKind, Flag, Option, NONOPT
from .utils import *


def _strings(iterable, what):
    """
    Materialize an argument vector, validating every element is a string.
    """
    if isinstance(iterable, str) or not isinstance(iterable, Iterable):
        raise TypeError(f"parser {what} must be an iterable of strings")
    items = list(iterable)
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"parser {what} must be an iterable of strings")
    return items


def _flags(iterable, what):
    if isinstance(iterable, str) or not isinstance(iterable, Iterable):
        raise TypeError(f"parser {what} must be an iterable of flags")
    items = list(iterable)
    for item in items:
        if not isinstance(item, Flag):
            raise TypeError(f"parser {what} must be an iterable of flags")
    return items


class Parser:
    """
    A getopt parser node.

    Construction
    - config: ParserConfig | Unset. Unset means ParserConfig() (defaults). The
      environment is never consulted here; compile_optstring() does that.
    - short_options: Iterable[Flag] with single graphic character names other
      than ':', ';' and '-'.
    - long_options: Iterable[Flag] whose names are non-empty runs of graphic
      characters ('=' included).
    - args: Iterable[str], the argument vector without the program name.
    - sink: callable(fault) receiving faults when errors are not silenced;
      Unset means optargs.faults.report (rich, stderr).

    Raises
    - InvalidShortOptionError / ProhibitedShortOptionError /
      InvalidLongOptionError on bad flag tables.
    - TypeError on wrongly typed arguments.

    State
    - args: public list; consumed by options() and replaced by the residue
      (unprocessed tokens, permuted non-options first) when the stream ends.
    """

    def __init__(self, config=Unset, short_options=(), long_options=(), args=(), *, sink=Unset):
        config = coalesce(config, ParserConfig())
        if not isinstance(config, ParserConfig):
            raise TypeError("parser 'config' must be a parser config")
        if sink is not Unset and not callable(sink):
            raise TypeError("parser 'sink' must be callable")

        self._config = config
        self._sink = sink

        self._short_options = {}
        for flag in _flags(short_options, "'short_options'"):
            if len(flag.name) != 1 or not isgraph(flag.name):
                raise InvalidShortOptionError(flag.name)
            if flag.name in PROHIBITED:
                raise ProhibitedShortOptionError(flag.name)
            self._short_options[flag.name] = flag

        self._long_options = {}
        for flag in _flags(long_options, "'long_options'"):
            if not flag.name or not all(map(isgraph, flag.name)):
                raise InvalidLongOptionError(flag.name)
            self._long_options[flag.name] = flag

        self.args = _strings(args, "'args'")
        self._nonopts = []
        self._commands = CommandRegistry()
        self._parent = None

    @property
    def config(self):
        return self._config

    short_options = mirror("short_options")
    long_options = mirror("long_options")

    @property
    def commands(self):
        """
        The CommandRegistry of this parser (shared, not a copy).
        """
        return self._commands

    @property
    def parent(self):
        """
        The parser this one is registered under, or None.

        The link is weak: parsers form a tree whose lifetime the caller manages.
        """
        return self._parent() if self._parent is not None else None

    def __rich_repr__(self):
        yield "config", self._config
        yield "short_options", sorted(self._short_options)
        yield "long_options", sorted(self._long_options)
        yield "commands", sorted(self._commands)
        yield "args", self.args

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def _chain(self):
        """
        Yield this parser and then every ancestor up to the root.
        """
        parser = self
        while parser is not None:
            yield parser
            parser = parser.parent

    def _has_short_options(self):
        return any(parser._short_options for parser in self._chain())

    def trigger(self, fault, /):
        """
        Route a fault to this parser's sink (unless silent) and return it.

        A parser with a parent leaves missing-argument faults to whoever
        composes the tree: they are returned but never logged here.
        """
        if fault is None:
            return None
        silent = self._config.silent_errors or (
            isinstance(fault, MissingArgumentError) and self.parent is not None
        )
        return trigger(fault, sink=self._sink, silent=silent)

    def _find_long_option(self, name, args):
        """
        resolve a long-option token against the whole parser chain.

        parameters
        - name: the token without its leading dashes, '=' and value included
          (e.g. "output=file" for "--output=file").
        - args: the remaining argument vector (a possible value source).

        algorithm
        - candidates are every registered name k, from this parser and its
          ancestors, that prefixes `name` (ASCII-folded when the owning parser
          folds long options).
        - candidates are tried longest first; equal lengths keep discovery
          order, so nearer parsers win.
        - an exact-length candidate binds its value from `args` (required:
          mandatory, optional: when available, none: never).
        - a shorter candidate must be followed by '=' in `name`; a no-argument
          candidate cannot take "=value" and is skipped, any other binds the
          text after '=' (possibly empty).

        returns
        - (args, Option, fault | None), the fault not yet reported.
        """
        candidates = []
        for parser in self._chain():
            ignorecase = parser._config.long_case_fold
            for key, flag in parser._long_options.items():
                if len(key) <= len(name) and has_prefix(name, key, ignorecase):
                    candidates.append(flag)

        # sort() is stable: ties stay in discovery order (self before parents)
        candidates.sort(key=lambda flag: len(flag.name), reverse=True)

        for flag in candidates:
            length = len(flag.name)
            if length == len(name):
                match flag.kind:
                    case ArgumentKind.NONE:
                        return args, Option(flag.name), None
                    case ArgumentKind.REQUIRED:
                        if not args:
                            return args, Option(flag.name), MissingArgumentError(name)
                        return args[1:], Option(flag.name, True, args[0]), None
                    case ArgumentKind.OPTIONAL:
                        if not args:
                            return args, Option(flag.name), None
                        return args[1:], Option(flag.name, True, args[0]), None
                    case _:
                        return args, Option(flag.name), ArgumentKindError(flag.kind)

            if name[length] != "=":
                continue
            match flag.kind:
                case ArgumentKind.NONE:
                    continue
                case ArgumentKind.REQUIRED | ArgumentKind.OPTIONAL:
                    return args, Option(flag.name, True, name[length + 1:]), None
                case _:
                    return args, Option(flag.name), ArgumentKindError(flag.kind)

        return args, Option(), UnknownOptionError(name)

    def _find_short_option(self, char, word, args):
        """
        resolve one short-option character against the parser chain.

        parameters
        - char: the option character.
        - word: the rest of the current token after `char` (the word tail).
        - args: the remaining argument vector.

        behavior
        - '-' is never an option (InvalidOptionError).
        - the first parser on the chain holding `char` wins; a parser with
          short_case_fold also tries the opposite ASCII case.
        - required: the word tail, else the next argument, else a fault.
        - optional: the word tail, else the next argument, else no value.

        returns
        - (args, word, Option, fault | None); `word` is "" once consumed.
        """
        if char == "-":
            return args, word, Option(), InvalidOptionError(char)

        for parser in self._chain():
            flag = parser._short_options.get(char)
            if flag is None and parser._config.short_case_fold:
                flag = parser._short_options.get(swapcase(char))
            if flag is not None:
                break
        else:
            return args, word, Option(), UnknownOptionError(char)

        match flag.kind:
            case ArgumentKind.NONE:
                return args, word, Option(flag.name), None
            case ArgumentKind.REQUIRED:
                if word:
                    return args, "", Option(flag.name, True, word), None
                if args:
                    return args[1:], word, Option(flag.name, True, args[0]), None
                return args, word, Option(flag.name), MissingArgumentError(char)
            case ArgumentKind.OPTIONAL:
                if word:
                    return args, "", Option(flag.name, True, word), None
                if args:
                    return args[1:], word, Option(flag.name, True, args[0]), None
                return args, word, Option(flag.name), None
            case _:
                return args, word, Option(flag.name), ArgumentKindError(flag.kind)

    def options(self):
        """
        Lazily parse self.args, yielding (Option, fault | None) pairs.

        Stepping rules, for the head token h
        - "--": stop; everything after it becomes residue untouched.
        - "--...": long option.
        - "-..." (not "-"): with long_only, a quiet long-option attempt first;
          any failure falls back to short parsing when the chain has short
          options, and is yielded unlogged when it has none. Otherwise every
          character is a short option until one
          consumes the rest of the token. With gnu_words, a resolved "W"
          option is renamed to its argument.
        - anything else: a registered command receives the remaining tokens
          (iteration then stops here, yielding only a dispatch fault if the
          command has no parser). Otherwise DEFAULT permutes it to the
          residue, YIELD_NONOPTS yields Option("\\x01", True, h), and
          POSIXLY_CORRECT stops with h left in place.

        Cleanup
        - on every exit (exhaustion, "--", stop, or the consumer closing the
          generator) self.args becomes the permuted non-options followed by
          whatever was not processed, in original order.
        """
        merged = False
        try:
            while self.args:
                head, tail = self.args[0], self.args[1:]

                if head == "--":
                    self.args = self._nonopts + tail
                    self._nonopts = []
                    merged = True
                    return

                if head.startswith("--"):
                    self.args, option, fault = self._find_long_option(head[2:], tail)
                    yield option, self.trigger(fault)
                    continue

                if head.startswith("-") and head != "-":
                    if self._config.long_only:
                        # trial lookup; its faults never reach the sink
                        args, option, fault = self._find_long_option(head[1:], tail)
                        if fault is None or not self._has_short_options():
                            self.args = args
                            yield option, fault
                            continue

                    word = head[1:]
                    self.args = tail
                    while word:
                        self.args, word, option, fault = self._find_short_option(word[0], word[1:], self.args)
                        # -W foo is --foo
                        if fault is None and option.name == "W" and self._config.gnu_words:
                            option = option._replace(name=option.arg)
                        yield option, self.trigger(fault)
                    continue

                _, exists = self._commands.get_command(head, self._config.command_case_fold)
                if exists:
                    self.args = []
                    try:
                        self._commands.execute_command(head, tail, self._config.command_case_fold)
                    except DispatchError as fault:
                        yield Option(), self.trigger(fault)
                    return

                match self._config.parse_mode:
                    case ParseMode.DEFAULT:
                        self._nonopts.append(head)
                        self.args = tail
                    case ParseMode.YIELD_NONOPTS:
                        self.args = tail
                        yield Option(NONOPT, True, head), None
                    case ParseMode.POSIXLY_CORRECT:
                        return
        finally:
            if not merged:
                self.args = self._nonopts + self.args
                self._nonopts = []

    def add_command(self, name, parser, /):
        """
        Register `parser` as the subcommand `name` and return it.

        A non-None parser gets this parser as its parent. The link is set
        once: registering the same child again here (e.g. under a second
        name) is fine, registering it under another parent is a ValueError.
        None is accepted and reported as MissingParserError on dispatch.
        """
        if not isinstance(name, str):
            raise TypeError("add_command() first argument must be a string")
        if parser is not None:
            if not isinstance(parser, Parser):
                raise TypeError("add_command() second argument must be a parser or None")
            if any(ancestor is parser for ancestor in self._chain()):
                raise ValueError("add_command() cannot register a parser under itself or its descendants")
            current = parser.parent
            if current is None:
                parser._parent = weakref.ref(self)
            elif current is not self:
                raise ValueError(f"parser for command {name!r} is already registered under another parser")
        return self._commands.add_command(name, parser)

    def add_alias(self, alias, existing, /):
        """
        Register `alias` for the already registered command `existing`.

        Raises CommandNotFoundError when `existing` is unknown.
        """
        self._commands.add_alias(alias, existing)

    def get_command(self, name, /):
        """
        Return (parser, exists), honouring command_case_fold.
        """
        return self._commands.get_command(name, self._config.command_case_fold)

    def list_commands(self):
        return self._commands.list_commands()

    def list_aliases(self, target, /):
        return self._commands.list_aliases(target)

    def has_commands(self):
        return self._commands.has_commands()

    def execute_command(self, name, args, /):
        """
        Install `args` on the command `name` and return its parser.

        Raises UnknownCommandError or MissingParserError.
        """
        return self._commands.execute_command(name, args, self._config.command_case_fold)


__all__ = (
    "Parser",
)
