"""
Optargs subcommand registry.

A CommandRegistry maps command names, aliases included, to child parsers.
Aliases are first-class entries pointing at the same parser as the command
they were derived from. Entries are never deleted and iteration order
carries no meaning. The registry never creates parsers; wiring the parent
back-link is the job of Parser.add_command().

Dispatch contract
- execute_command(name, args) installs `args` as the target's argument
  vector and clears its permutation scratch, then returns the target.
- an unregistered name raises UnknownCommandError.
- a name registered with None raises MissingParserError.
"""
from collections.abc import Iterable

from .faults import UnknownCommandError, MissingParserError, CommandNotFoundError
from .utils import fold


class CommandRegistry:
    """
    Name (or alias) -> parser mapping owned by one parser.

    Supports `in`, len(), iteration over names and item access, like the
    mapping it wraps.
    """
    __slots__ = ("_commands",)

    def __init__(self):
        self._commands = {}

    def __contains__(self, name):
        return name in self._commands

    def __len__(self):
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def __getitem__(self, name):
        return self._commands[name]

    def __bool__(self):
        return bool(self._commands)

    def __repr__(self):
        return f"command-registry({sorted(self._commands)!r})"

    def add_command(self, name, parser, /):
        """
        Register `parser` under `name`, replacing any previous entry. Returns `parser`.
        """
        if not isinstance(name, str):
            raise TypeError("command name must be a string")
        self._commands[name] = parser
        return parser

    def add_alias(self, alias, existing, /):
        """
        Make `alias` point at the parser already registered as `existing`.

        Raises CommandNotFoundError when `existing` is not registered.
        """
        if not isinstance(alias, str):
            raise TypeError("command alias must be a string")
        try:
            self._commands[alias] = self._commands[existing]
        except KeyError:
            raise CommandNotFoundError(existing) from None

    def get_command(self, name, /, ignorecase=False):
        """
        Look a command up, returning (parser, exists).

        With `ignorecase` an exact hit still wins; otherwise the first name
        equal under ASCII folding is used.
        """
        try:
            return self._commands[name], True
        except KeyError:
            pass
        if ignorecase:
            target = fold(name)
            for command, parser in self._commands.items():
                if fold(command) == target:
                    return parser, True
        return None, False

    def list_commands(self):
        """
        Return a snapshot of every name -> parser mapping, aliases included.
        """
        return dict(self._commands)

    def list_aliases(self, target, /):
        """
        Return every name that maps to `target` (identity comparison).
        """
        return [name for name, parser in self._commands.items() if parser is target]

    def has_commands(self):
        return bool(self._commands)

    def execute_command(self, name, args, /, ignorecase=False):
        """
        Prepare the parser registered as `name` to run over `args`.

        Returns the parser with `args` installed and an empty scratch.
        """
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("execute_command() 'args' must be an iterable of strings")
        parser, exists = self.get_command(name, ignorecase)
        if not exists:
            raise UnknownCommandError(name)
        if parser is None:
            raise MissingParserError(name)
        parser.args = list(args)
        parser._nonopts = []
        return parser


__all__ = (
    "CommandRegistry",
)
