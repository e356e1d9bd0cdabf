"""
Optargs faults (errors) and reporting.

Scope
- FaultCode: canonical, stable numeric identifiers for every getopt fault.
  Codes are grouped by domain so logs and searches stay predictable.
- OptargsError: base type carrying the contract message, its code and an
  optional hint. The message strings are part of the library's contract;
  applications match on them or pass them through.
- report(): the default error sink, rendering through a rich console on stderr.
- trigger(): the single routing point deciding whether a fault reaches a sink.

Propagation
- Configuration faults are raised from constructors.
- Parse and dispatch faults are returned alongside the option in the
  iterator's stream; logging them is a side effect that may be silenced,
  returning them is not.
"""
from enum import IntEnum

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - configuration (201xx): invalid/prohibited short options, invalid long
      options, long-only constructor given an optstring.
    - parse (202xx): unknown option, missing required argument, '-' used as
      a short option.
    - dispatch (203xx): unknown command, command without parser, alias to a
      missing command.
    - internal (209xx): a registered flag carries an out-of-range kind.
    """
    # --- configuration errors (201xx) ---
    INVALID_SHORT_OPTION    = 20101
    PROHIBITED_SHORT_OPTION = 20102
    INVALID_LONG_OPTION     = 20103
    LONG_ONLY_OPTSTRING     = 20104

    # --- parse errors (202xx) ---
    UNKNOWN_OPTION          = 20201
    MISSING_ARGUMENT        = 20202
    INVALID_OPTION          = 20203

    # --- dispatch errors (203xx) ---
    UNKNOWN_COMMAND         = 20301
    MISSING_PARSER          = 20302
    COMMAND_NOT_FOUND       = 20303

    # --- internal (209xx) ---
    UNKNOWN_ARGUMENT_KIND   = 20901


class OptargsError(Exception):
    """
    Base class of every fault the library produces.

    Attributes
    - message: the exact, stable message string (also str(fault)).
    - code: FaultCode for this fault type.
    - hint: optional short advice for renderers; never part of the message.
    """
    code = Unset

    def __init__(self, message, /, *, hint=Unset):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.hint = coalesce(hint)

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.message == other.message

    def __hash__(self):
        return hash((type(self), self.message))

    def __rich__(self):
        text = Text.assemble(("error", "bold red"), ": ", (self.message, "red"))
        if self.hint:
            text.append_text(Text.assemble("\n", ("hint", "cyan"), ": ", self.hint))
        return text


# --- configuration ---
class ConfigurationError(OptargsError): ...


class InvalidShortOptionError(ConfigurationError):
    code = FaultCode.INVALID_SHORT_OPTION

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("invalid short option: %s" % option, hint=hint)
        self.option = option


class ProhibitedShortOptionError(ConfigurationError):
    code = FaultCode.PROHIBITED_SHORT_OPTION

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("prohibited short option: %s" % option, hint=hint)
        self.option = option


class InvalidLongOptionError(ConfigurationError):
    code = FaultCode.INVALID_LONG_OPTION

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("invalid long option: %s" % option, hint=hint)
        self.option = option


class LongOnlyOptstringError(ConfigurationError):
    code = FaultCode.LONG_ONLY_OPTSTRING

    def __init__(self, optstring, /, *, hint=Unset):
        super().__init__(
            "non-empty option string found when long-only parsing was enabled: %s" % optstring,
            hint=hint
        )
        self.optstring = optstring


# --- parse ---
class ParseError(OptargsError): ...


class UnknownOptionError(ParseError):
    code = FaultCode.UNKNOWN_OPTION

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("unknown option: %s" % option, hint=hint)
        self.option = option


class MissingArgumentError(ParseError):
    code = FaultCode.MISSING_ARGUMENT

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("option requires an argument: %s" % option, hint=hint)
        self.option = option


class InvalidOptionError(ParseError):
    code = FaultCode.INVALID_OPTION

    def __init__(self, option, /, *, hint=Unset):
        super().__init__("invalid option: %s" % option, hint=hint)
        self.option = option


# --- dispatch ---
class DispatchError(OptargsError): ...


class UnknownCommandError(DispatchError):
    code = FaultCode.UNKNOWN_COMMAND

    def __init__(self, command, /, *, hint=Unset):
        super().__init__("unknown command: %s" % command, hint=hint)
        self.command = command


class MissingParserError(DispatchError):
    code = FaultCode.MISSING_PARSER

    def __init__(self, command, /, *, hint=Unset):
        super().__init__("command %s has no parser" % command, hint=hint)
        self.command = command


class CommandNotFoundError(DispatchError):
    code = FaultCode.COMMAND_NOT_FOUND

    def __init__(self, command, /, *, hint=Unset):
        super().__init__("command %s does not exist" % command, hint=hint)
        self.command = command


# --- internal ---
class ArgumentKindError(OptargsError):
    code = FaultCode.UNKNOWN_ARGUMENT_KIND

    def __init__(self, kind, /, *, hint=Unset):
        super().__init__("unknown argument type: %s" % kind, hint=hint)
        self.kind = kind


def report(fault, /, *, prog=Unset):
    """
    default error sink: render a fault on stderr through rich.

    form
    - "error: <message>" or "<prog>: error: <message>" when a program name
      is given, followed by the hint on its own line when the fault has one.
    """
    text = fault.__rich__() if isinstance(fault, OptargsError) else Text(str(fault))
    if prog is not Unset:
        text = Text.assemble((str(prog), "bold"), ": ", text)
    console.print(text, highlight=False)


def trigger(fault, /, *, sink=Unset, silent=False):
    """
    route a fault to a sink (unless silenced) and hand it back.

    contract
    - fault must be an OptargsError.
    - sink defaults to report(); any callable taking the fault works.
    - silent=True skips the sink entirely; the fault is still returned so the
      caller can put it into the option stream.
    """
    if not isinstance(fault, OptargsError):
        raise TypeError("trigger() argument must be an optargs fault")
    if not silent:
        coalesce(sink, report)(fault)
    return fault


__all__ = (
    "FaultCode",
    "OptargsError",
    "ConfigurationError",
    "InvalidShortOptionError",
    "ProhibitedShortOptionError",
    "InvalidLongOptionError",
    "LongOnlyOptstringError",
    "ParseError",
    "UnknownOptionError",
    "MissingArgumentError",
    "InvalidOptionError",
    "DispatchError",
    "UnknownCommandError",
    "MissingParserError",
    "CommandNotFoundError",
    "ArgumentKindError",
    "report",
    "trigger",
)
