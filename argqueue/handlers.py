r"""
Argqueue argument handlers and decorators.

Overview
- ArgumentHandler: one recognized argument. It knows how to recognize its token
  (full name or short-name prefix), what kind it is (flag or action), how many
  trailing values it consumes (fixed count, or every remaining token when final),
  the values captured for the current run, and the callback it runs.

- Decorators
  • @flag(...): build a flag handler bound to a function receiving the matched token.
  • @action(...): build an action handler bound to a function receiving the captured values.
  Each decorator returns the configured handler itself.

- Introspection & representation
  • HandlerType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- name: str, required, non-empty and without surrounding whitespace.
- short: str, optional ("" means no short name), same whitespace rule when given.
- flag / final: bool (a flag cannot be final).
- nargs: int >= 0, the fixed value count (ignored for flags and final handlers).
- descr: Unset | str | Text (short description), non-empty when provided.
- callback: Unset | Callable.

Copy semantics
- The dispatcher never binds values on a registered handler. It asks for a bound
  replica with copy.replace(handler, values=...) and queues that replica instead.

Quick example:
    >>> from argqueue.handlers import flag, action
    >>> @flag("--verbose", "-v")
    >>> def on_verbose(token): ...
    ...
    >>> @action("--name", nargs=1)
    >>> def on_name(name): ...
    ...

Public API
- Classes: ArgumentHandler
- Decorators: flag, action
"""
import copy
import functools
import operator
import re

from rich.text import Text

from .utils import *


class HandlerType(type):
    """
    Metaclass that turns handler classes into introspectable descriptors.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument-handler(name='--name', short='-n', flag=False, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate handler metadata in place.

    Raises
    - TypeError: a field has the wrong type, or the handler is both flag and final.
    - ValueError: name/short/descr are empty or padded, nargs is negative.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name.strip():
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name != name.strip():
        raise ValueError(f"{cls.__typename__} 'name' cannot have surrounding whitespace")

    # An empty short name means "no short name"; a blank one is a mistake.
    if not isinstance(short := metadata["short"], str):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif short != short.strip():
        raise ValueError(f"{cls.__typename__} 'short' cannot have surrounding whitespace")

    metadata["flag"] = bool(metadata["flag"])
    metadata["final"] = bool(metadata["final"])
    if metadata["flag"] and metadata["final"]:
        raise TypeError(f"flag {cls.__typename__} cannot be final")

    if not isinstance(nargs := metadata["nargs"], int) or isinstance(nargs, bool):
        raise TypeError(f"{cls.__typename__} 'nargs' must be an integer")
    elif nargs < 0:
        raise ValueError(f"{cls.__typename__} 'nargs' must be a non-negative integer")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if metadata["callback"] is not Unset and not callable(metadata["callback"]):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")


class ArgumentHandler(metaclass=HandlerType):
    """
    One recognized command-line argument and the work bound to it.

    Kinds
    - flag: captures the matched token itself and nothing else.
    - action: captures the `nargs` tokens following the match.
    - final action: captures every token following the match, whatever `nargs` says.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
      `values` is empty until the handler is bound for a run.
    """
    __introspectable__ = (
        "name",
        "short",
        "flag",
        "nargs",
        "final",
        "descr",
        "values",
    )
    __displayable__ = (
        "name",
        "short",
        "flag",
        "nargs",
        "final",
        "values",
    )

    def __init__(
            self,
            name,
            short="",
            /,
            *,
            flag=False,
            nargs=0,
            final=False,
            descr=Unset,
            callback=Unset,
    ):
        """
        Construct a handler with the provided metadata.

        Parameters
        - name: str
          Full token that selects this handler (e.g. "--verbose", "build").
        - short: str
          Short name matched as a token prefix ("" disables it).
        - flag: bool
          Presence-only switch, queued before every action.
        - nargs: int
          Number of trailing tokens an action captures. Ignored for flags and final handlers.
        - final: bool
          Capture every remaining token after the match.
        - descr: Unset | str | Text
          Short description. If Unset, becomes None.
        - callback: Unset | Callable
          Called by process() with the captured values as positional arguments.
        """
        metadata = {
            "name": name,
            "short": short,
            "flag": flag,
            "nargs": nargs,
            "final": final,
            "descr": descr,
            "callback": callback,
        }
        _sanitize_metadata(type(self), metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        self._values = ()

    def matches(self, token, /):
        """
        Return True when `token` selects this handler.

        A token selects the handler when it equals the full name, or when a short
        name is set and the token starts with it ("-v" selects "-v" and "-vvv").
        """
        if not isinstance(token, str):
            raise TypeError(f"{type(self).__typename__} tokens must be strings")
        return token == self._name or startswith(token, self._short)

    def bind(self, values, /):
        """
        Replace the captured values. Counts are the caller's business.
        """
        values = tuple(values)
        if not all(isinstance(value, str) for value in values):
            raise TypeError(f"{type(self).__typename__} values must be strings")
        self._values = values

    def process(self):
        """
        Run the callback with the captured values and return its status.

        Returns 0 when no callback is bound or when the callback returns None;
        an integer result is returned unchanged. Any other result is a TypeError.
        """
        if self._callback is Unset:
            return 0
        result = self._callback(*self._values)
        if result is None:
            return 0
        if isinstance(result, bool) or not isinstance(result, int):
            raise TypeError(
                f"{type(self).__typename__} {self._name!r} callback must return an integer or None, "
                f"not {type(result).__name__!r}"
            )
        return result

    def __replace__(self, /, **overrides):
        """
        Return an independent replica, optionally bound to new `values`.
        """
        if unknown := overrides.keys() - {"values"}:
            raise TypeError(f"{type(self).__typename__} cannot replace {", ".join(sorted(unknown))}")
        replica = copy.copy(self)
        replica.bind(overrides.get("values", self._values))
        return replica


def flag(name, short="", /, *, descr=Unset):
    """
    Decorator/factory for defining a flag handler.

    Usage
        @flag("--verbose", "-v")
        def on_verbose(token): ...

    The decorated function receives the matched token ("--verbose", "-v", "-vv", ...)
    and may return None/0 for success or a non-zero integer to abort the run.

    Returns
    - ArgumentHandler: the flag handler with the decorated function bound.
    """
    handler = ArgumentHandler(name, short, flag=True, descr=descr)

    @rename("flag")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@flag() must be applied to a callable")
        # Prevent reusing the same decorator instance multiple times.
        if handler._callback is not Unset:
            raise TypeError("@flag() must be applied only once")
        handler._callback = callback
        return handler

    return wrapper


def action(name, short="", /, *, nargs=0, final=False, descr=Unset):
    """
    Decorator/factory for defining an action handler.

    Usage
        @action("--name", "-n", nargs=1)
        def on_name(name): ...

        @action("run", final=True)
        def on_run(*rest): ...

    The decorated function receives the captured values positionally.

    Returns
    - ArgumentHandler: the action handler with the decorated function bound.
    """
    handler = ArgumentHandler(name, short, nargs=nargs, final=final, descr=descr)

    @rename("action")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@action() must be applied to a callable")
        if handler._callback is not Unset:
            raise TypeError("@action() must be applied only once")
        handler._callback = callback
        return handler

    return wrapper


__all__ = (
    # Classes
    "ArgumentHandler",

    # Decorators
    "flag",
    "action",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del HandlerType
