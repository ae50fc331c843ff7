"""
Argqueue faults and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure a run can
  end with. Codes are grouped by phase (resolution, execution, internal).
- DispatchException: base type that carries message + options and knows how to
  render itself in a short, lowercased and actionable way.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).
- FAILURE: the generic non-zero status every fault collapses to.

Integration
- The dispatcher never lets a fault escape its public entry point. It records the
  fault, hands it to trigger(fault, **ctx) and returns an integer status.
- In shell mode faults are rendered via rich on stderr; otherwise trigger() is silent
  and the fault stays available on the dispatcher for the caller to inspect.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)

FAILURE = -1
"""generic failure status returned for resolution and internal faults."""


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping
    - resolution (211xx)
      • INSUFFICIENT_TOKENS
    - execution (212xx)
      • HANDLER_FAILURE
    - internal (213xx)
      • INTERNAL_FAULT
    """
    # --- resolution errors (211xx) ---
    INSUFFICIENT_TOKENS = 21101

    # --- execution errors (212xx) ---
    HANDLER_FAILURE     = 21201

    # --- internal errors (213xx) ---
    INTERNAL_FAULT      = 21301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class DispatchException(Exception):
    """
    base fault raised or recorded by the dispatcher.

    options
    - prog: program label shown in the header (overridden by __prog__ in __main__).
    - hint: one-line suggestion rendered under the message.
    - shell/fancy/colorful: rendering switches merged in by trigger().
    """
    code = FaultCode.INTERNAL_FAULT
    title = "internal fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def status(self):
        """integer status the dispatcher returns for this fault."""
        return FAILURE

    def __rich__(self):
        main = __import__("__main__")
        options = defaultdict(bool, self.options)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not options["colorful"]:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "argqueue")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if options["fancy"]:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class InsufficientTokensError(DispatchException):
    code = FaultCode.INSUFFICIENT_TOKENS
    title = "insufficient tokens"


class HandlerFailureError(DispatchException):
    """a handler's process() returned a non-zero result; the run aborted there."""
    code = FaultCode.HANDLER_FAILURE
    title = "handler failure"

    @property
    def status(self):
        return self.options.get("result", FAILURE)


class InternalFaultError(DispatchException):
    code = FaultCode.INTERNAL_FAULT
    title = "internal fault"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see DispatchException).
    - options are merged into a copy of the fault via copy.replace() before triggering,
      the original fault is left untouched.
    - in shell mode, rendering happens via the rich stderr console; otherwise nothing
      is emitted.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FAILURE",
    "FaultCode",
    "DispatchException",
    "InsufficientTokensError",
    "HandlerFailureError",
    "InternalFaultError",
    "trigger",
)
