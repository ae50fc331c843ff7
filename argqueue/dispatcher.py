"""
Argqueue dispatcher: resolve raw tokens to handlers, then run them in two phases.

What this module provides
- Dispatcher: owns an ordered registry of ArgumentHandler instances and, per run:
  • resolves the raw token vector into a flag queue, an action queue and the
    leftover (unused) tokens;
  • drains the flag queue, then the action queue, stopping at the first handler
    that reports a non-zero status;
  • converts every internal fault into an integer status, so the public entry
    point never raises.

- invoke(dispatcher, prompt): convenience runner reading sys.argv, a shell-like
  string, or an iterable of tokens.

Run lifecycle
    IDLE → RESOLVING → EXECUTING_FLAGS → EXECUTING_ACTIONS → DONE
    EXECUTING_FLAGS / EXECUTING_ACTIONS → ABORTED   (a handler returned non-zero)
    any state → FAULTED                            (an exception was caught)

Resolution rules
- Handlers are scanned in registration order, each against the current token list,
  left to right. The first matching token wins and a handler matches at most once.
- A flag captures the matched token. An action captures the `nargs` tokens that
  follow it (every following token when final). Asking for more tokens than remain
  is an InsufficientTokensError, never a short read.
- Consumed tokens are removed by position, so equal strings elsewhere survive.
- Registration order decides who gets a token first; execution order is always
  flags before actions.

Quick start
    from argqueue import Dispatcher, flag, action

    @flag("--verbose", "-v")
    def verbose(token):
        ...

    @action("--name", nargs=1)
    def name(value):
        print("hello", value)

    dispatcher = Dispatcher([verbose, name])
    status = dispatcher.process_inputs(["prog", "--verbose", "--name", "alice", "extra"])
    dispatcher.unused  # ("prog", "extra")
"""
import copy
import enum
import logging as logmod
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .handlers import ArgumentHandler
from .utils import *

logging = logmod.getLogger(__name__)


class State(enum.Enum):
    """
    lifecycle of a single dispatcher run.
    """
    IDLE = enum.auto()
    RESOLVING = enum.auto()
    EXECUTING_FLAGS = enum.auto()
    EXECUTING_ACTIONS = enum.auto()
    DONE = enum.auto()
    ABORTED = enum.auto()
    FAULTED = enum.auto()


class Resolution(NamedTuple):
    """
    outcome of a resolution pass.

    - flags: bound flag handler replicas, in match order.
    - actions: bound action handler replicas, in match order.
    - unused: tokens neither matched nor captured.
    """
    flags: deque
    actions: deque
    unused: tuple


class Dispatcher:
    """
    Match tokens to handlers and execute them, flags first.

    Parameters
    - handlers: Iterable[ArgumentHandler]
      Registry, in match-scan precedence order. Full names must be unique, and so
      must non-empty short names.
    - name: Unset | str
      Program label for rendered faults. When Unset, the basename of the first raw
      token of the run is used ("argqueue" when the run has no tokens).
    - shell: bool
      Render faults on stderr through rich when a run fails.
    - fancy: bool
      Render faults inside a panel.
    - colorful: bool
      Style rendered faults (see __styles__ in __main__).

    Raises
    - TypeError: handlers is not iterable, or contains something else than handlers.
    - ValueError: two handlers share a name or a short name.
    """

    def __init__(self, handlers, /, *, name=Unset, shell=False, fancy=False, colorful=True):
        if not isinstance(handlers, Iterable):
            raise TypeError("dispatcher 'handlers' must be an iterable of argument handlers")
        if not isinstance(name, str | Unset):
            raise TypeError("dispatcher 'name' must be a string")

        names = set()
        shorts = set()
        registry = []
        for handler in handlers:
            if not isinstance(handler, ArgumentHandler):
                raise TypeError("dispatcher 'handlers' must be an iterable of argument handlers")
            if handler.name in names:
                raise ValueError(f"dispatcher handlers cannot share the name {handler.name!r}")
            if handler.short and handler.short in shorts:
                raise ValueError(f"dispatcher handlers cannot share the short name {handler.short!r}")
            names.add(handler.name)
            if handler.short:
                shorts.add(handler.short)
            registry.append(handler)

        self._handlers = tuple(registry)
        self._name = name
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._state = State.IDLE
        self._unused = ()
        self._fault = None
        self._prog = coalesce(name, "argqueue")

    handlers = mirror("handlers")
    state = mirror("state")
    unused = mirror("unused")
    fault = mirror("fault")

    def __repr__(self):
        return f"dispatcher(handlers={len(self._handlers)}, state={self._state.name.lower()})"

    def resolve(self, tokens, /):
        """
        Split `tokens` into a flag queue, an action queue and the unused tokens.

        The registered handlers are never bound; each queue holds replicas made with
        copy.replace(handler, values=...).

        Raises
        - TypeError: tokens is not an iterable of strings.
        - InsufficientTokensError: an action asks for more trailing tokens than remain.
        """
        self._fault = None
        self._unused = ()
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("resolve() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() argument must be an iterable of strings")

        self._state = State.RESOLVING
        self._unused = tuple(tokens)
        flags = deque()
        actions = deque()

        for handler in self._handlers:
            for index, token in enumerate(tokens):
                if not handler.matches(token):
                    continue

                if handler.flag:
                    values = (token,)
                    consumed = (index,)
                    queue = flags
                else:
                    count = len(tokens) - index - 1 if handler.final else handler.nargs
                    if index + count >= len(tokens):
                        raise InsufficientTokensError(
                            f"{token!r} expects {count} value(s) but only {len(tokens) - index - 1} follow it",
                            prog=self._prog,
                            hint=f"pass {count} value(s) after {token!r}",
                            handler=handler,
                            index=index,
                        )
                    values = tuple(tokens[index + 1:index + 1 + count])
                    consumed = range(index, index + 1 + count)
                    queue = actions

                queue.append(copy.replace(handler, values=values))
                discard(tokens, consumed)
                self._unused = tuple(tokens)
                logging.debug("Matched %r at %d with %r", handler.name, index, values)
                break

        return Resolution(flags, actions, self._unused)

    def run(self, flags, actions, /):
        """
        Drain `flags`, then `actions`, calling process() on each handler.

        The first non-zero result stops the run and is returned; the failing handler
        stays at the front of its queue together with everything queued after it.
        Exceptions are converted to FAILURE. Returns 0 when both queues drain.
        """
        self._fault = None
        try:
            failure = self._drain(flags, actions)
        except Exception as exception:
            return self._handle(exception)

        if failure is not None:
            return self._abort(*failure)
        self._state = State.DONE
        return 0

    def _drain(self, flags, actions):
        for state, queue in ((State.EXECUTING_FLAGS, flags), (State.EXECUTING_ACTIONS, actions)):
            self._state = state
            while queue:
                handler = queue[0]
                logging.debug("Processing %r", handler.name)
                if (result := handler.process()) != 0:
                    return handler, result
                queue.popleft()
        return None

    def process_inputs(self, tokens, /):
        """
        Resolve and run `tokens` (program name included) and return the exit status.

        Never raises for a failed run: handler failures return the handler's result,
        every other failure returns FAILURE. The latest failure stays on `fault`.
        """
        self._prog = self._label(tokens)
        try:
            resolution = self.resolve(tokens)
        except Exception as exception:
            return self._handle(exception)
        return self.run(resolution.flags, resolution.actions)

    def _label(self, tokens):
        if self._name is not Unset:
            return self._name
        if isinstance(tokens, (list, tuple)) and tokens and isinstance(tokens[0], str) and tokens[0]:
            return os.path.basename(tokens[0]) or tokens[0]
        return "argqueue"

    def _abort(self, handler, result):
        self._state = State.ABORTED
        self._fault = HandlerFailureError(
            f"{handler.name!r} returned {result}",
            prog=self._prog,
            hint="handlers queued after it were not run",
            handler=handler,
            result=result,
        )
        logging.warning("Handler %r failed with status %d", handler.name, result)
        self._surface(self._fault)
        return result

    def _handle(self, exception):
        self._state = State.FAULTED
        if isinstance(exception, DispatchException):
            fault = exception
        else:
            fault = InternalFaultError(
                f"{type(exception).__name__}: {exception}",
                prog=self._prog,
                hint="this is a bug in a handler or in its registration",
            )
            fault.__cause__ = exception
        self._fault = fault
        logging.warning("Dispatch faulted: %s", fault.message)
        self._surface(fault)
        return fault.status

    def _surface(self, fault):
        try:
            trigger(fault, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        except Exception:
            logging.warning("Fault rendering failed", exc_info=True)


def invoke(dispatcher, prompt=Unset, /):
    """
    Convenience runner for dispatchers.

    Parameters
    - dispatcher: Dispatcher
    - prompt:
      • Unset: use sys.argv (program name included).
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Returns
    - int: the run's exit status.

    Raises
    - TypeError: dispatcher is not a Dispatcher or the prompt has the wrong type.
    """
    if not isinstance(dispatcher, Dispatcher):
        raise TypeError("invoke() first argument must be a dispatcher")

    if prompt is Unset:
        tokens = list(sys.argv)
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() second argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() second argument must be a string or an iterable of strings")

    return dispatcher.process_inputs(tokens)


__all__ = (
    "State",
    "Resolution",
    "Dispatcher",
    "invoke",
)
