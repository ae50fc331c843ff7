"""
Argqueue utilities (internal helpers, carefully exposed)

Scope
- Building blocks shared by the handler and dispatcher layers.
- The two token collaborators used by the resolution pass live here as well,
  so the dispatcher only ever talks to them through these narrow functions.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple / MappingProxyType / frozenset for containers).

- startswith(text, prefix)
  • Prefix comparator used to match short handler names against tokens.

- discard(tokens, indices)
  • Remove exactly the given positions from a token list, keeping the order of the rest.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> tokens = ["prog", "--name", "x", "--name"]
    >>> discard(tokens, (1, 2))
    >>> tokens
    ['prog', '--name']
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set, MutableSequence, Iterable
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

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

    Falsey values like None, 0, "" or () are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
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


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" from the instance and returns an immutable view:
    - Sequence (non-str) → tuple
    - Mapping           → MappingProxyType
    - Set               → frozenset
    - other types       → returned as-is
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


def startswith(text, prefix, /):
    """
    Return True when `text` begins with a non-empty `prefix`.

    An empty prefix never matches; callers use "" to mean "no prefix at all".
    """
    if not isinstance(text, str) or not isinstance(prefix, str):
        raise TypeError("startswith() arguments must be strings")
    return bool(prefix) and text.startswith(prefix)


def discard(tokens, indices, /):
    """
    Remove the tokens at `indices` from `tokens`, in place.

    Removal is positional: equal strings elsewhere in the list are left alone,
    and the surviving tokens keep their relative order.

    Raises
    - TypeError: tokens is not a mutable sequence or indices are not integers.
    - ValueError: the same index is listed more than once.
    - IndexError: an index falls outside the list.
    """
    if not isinstance(tokens, MutableSequence):
        raise TypeError("discard() first argument must be a mutable sequence")
    if not isinstance(indices, Iterable):
        raise TypeError("discard() second argument must be an iterable of integers")

    marked = set()
    for index in indices:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("discard() indices must be integers")
        if not 0 <= index < len(tokens):
            raise IndexError(f"discard() index {index} out of range")
        if index in marked:
            raise ValueError(f"discard() index {index} listed more than once")
        marked.add(index)

    tokens[:] = [token for index, token in enumerate(tokens) if index not in marked]


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid value but you still need to
distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "startswith",
    "discard",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
