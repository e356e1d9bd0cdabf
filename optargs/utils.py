"""
Optargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the optstring compiler, the resolvers and
  the parser node. Stable enough for consumers, designed primarily to keep
  the higher layers consistent.

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided" without conflating with None.
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserve None/0/""/[] untouched.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated accessors.

- mirror("attr")
  • Read-only property exposing self._attr as a fresh copy, so callers can
    never mutate a parser's option tables through the public surface.

- isgraph(char)
  • The classical isgraph() contract: printable and not whitespace.

- fold(text), has_prefix(s, p, fold), trim_prefix(s, p, fold)
  • ASCII-only case folding and prefix tests. Unicode folding is outside the
    POSIX contract, so non-ASCII letters are compared verbatim.

Quick examples
    >>> has_prefix("Output=x", "output", True)
    True
    >>> trim_prefix("--name", "--", False)
    'name'
    >>> isgraph("=")
    True
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and singleton per process.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is
    replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Shallow-copy containers so the caller receives a detached snapshot.

    Mapping values are kept as-is (flags are immutable named tuples and
    parsers must keep their identity); sequences and sets become new
    list/set objects.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return set(object)
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" on the instance and hands out a detached
    copy for container types.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def isgraph(char, /):
    """
    Return True when `char` is a single printable, non-whitespace character.

    Across 0-127 this matches C's isgraph(); above 127 Python's own notion
    of printable characters is used.
    """
    if not isinstance(char, str):
        raise TypeError("isgraph() argument must be a string")
    return len(char) == 1 and char.isprintable() and not char.isspace()


def fold(text, /):
    """
    ASCII-only lower-casing (str.lower() would also fold non-ASCII letters).
    """
    return text.translate(_ASCII_LOWER)


def swapcase(char, /):
    """
    Flip the case of an ASCII letter; anything else is returned unchanged.
    """
    if char.isascii():
        return char.swapcase()
    return char


def has_prefix(s, prefix, ignorecase=False, /):
    """
    True iff `prefix` starts `s`, optionally under ASCII case folding.
    """
    if ignorecase:
        return fold(s).startswith(fold(prefix))
    return s.startswith(prefix)


def trim_prefix(s, prefix, ignorecase=False, /):
    """
    Return `s` without `prefix` when present; `s` unchanged otherwise.

    With `ignorecase`, the original casing of the remainder is kept.
    """
    if has_prefix(s, prefix, ignorecase):
        return s[len(prefix):]
    return s


_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "abcdefghijklmnopqrstuvwxyz",
)


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a default when None is a valid, user-meaningful value but you
still need to distinguish "no input" from "explicitly passed None".
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "isgraph",
    "fold",
    "swapcase",
    "has_prefix",
    "trim_prefix",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
