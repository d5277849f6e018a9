"""
Flagstone faults (errors, interruptions and warnings) and the top-level runner.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the library
  raises or emits. Codes are grouped by domain so logs/searches stay predictable.
- ArgumentsError family: structural, programmer errors raised by the engine
  (duplicate declarations, lookups of undeclared names). Never meant to be shown
  to end users; they propagate as ordinary exceptions.
- PrintableException family: faults meant for direct display. They carry an exit
  status and know how to render themselves through rich.
  • HelpRequested: not an error, “stop, show this text, exit successfully”.
  • ExpectedException: user-facing validation failure raised by convertors.
  • ConversionError: ExpectedException raised by the built-in convertors.
- ArgumentsWarning family: non-fatal anomalies emitted through `warnings`.
- Outcome / evaluate() / invoke(): run an entry point and keep “clean stop with
  a message” apart from “genuine defect”.

Integration
- Entry points raise printable faults anywhere below them; evaluate() turns them
  into a STOPPED outcome, invoke() prints that outcome and exits with its status.
- Anything that is not a PrintableException is left to propagate untouched.
- Styles can be overridden with a __styles__ mapping in __main__, fault codes
  relabelled with a __codes__ mapping.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import NamedTuple, Any

from rich.console import Console, Group
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declarations (2110x)
      • DECLARATION_CONFLICT, UNDECLARED_ARGUMENT
    - values (2111x)
      • EXPECTED_FAILURE, CONVERSION_FAILURE
    - interruptions (2210x)
      • HELP_REQUESTED
    - warnings (2310x)
      • SHORT_NAME_COLLISION, DEPRECATED_METHOD
    """
    # --- declaration errors (21xxx) ---
    DECLARATION_CONFLICT        = 21101
    UNDECLARED_ARGUMENT         = 21102

    # --- value errors (21xxx) ---
    EXPECTED_FAILURE            = 21111
    CONVERSION_FAILURE          = 21112

    # --- interruptions (22xxx) ---
    HELP_REQUESTED              = 22101

    # --- warnings (23xxx) ---
    SHORT_NAME_COLLISION        = 23101
    DEPRECATED_METHOD           = 23102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentsError(Exception):
    """
    base class for structural errors raised by the engine itself.
    """
    code: FaultCode

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message


class DeclarationConflictError(ArgumentsError, ValueError):
    code = FaultCode.DECLARATION_CONFLICT


class UndeclaredArgumentError(ArgumentsError, LookupError):
    code = FaultCode.UNDECLARED_ARGUMENT


def _styles(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class PrintableException(Exception):
    """
    base class for faults whose message is meant for the end user.

    attributes
    - message: str, the text to display.
    - status: int, the exit status a top-level runner should use.
    - options: read-only mapping of rendering/context options
      (colorful, and whatever context the raiser attached).
    """
    code = FaultCode.EXPECTED_FAILURE
    status = 1

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return Text.from_ansi(self.message)

    def __trigger__(self):
        (console if self.status else Console()).print(self)
        sys.exit(self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        # subclasses may define their own __init__, so the constructor is not called again
        clone = type(self).__new__(type(self), *self.args)
        clone.__dict__.update(self.__dict__)
        clone.options = MappingProxyType({**self.options, **overrides})
        return clone


class HelpRequested(PrintableException):
    """
    control-flow signal carrying rendered help text; exits with status 0.
    """
    code = FaultCode.HELP_REQUESTED
    status = 0


class ExpectedException(PrintableException):
    """
    printable validation failure (e.g. "sleep time must not be less than 200 ms").

    rendered line by line, each line prefixed with ">> " in the error style; the
    first line also carries the normalized fault code ("[21111]").
    """

    def __rich__(self):
        styles = _styles({
            "expected-marker": "bold #FF4646",  # hot red marker
            "code": "bold #00E5FF",  # neon cyan fault code
            "expected-message": "bold #FF4646",  # same red for the body
        })
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        first, *rest = self.message.split("\n")
        header = Text.assemble(
            (">> ", styler("expected-marker")),
            ("[%s] " % self.code.normalize(), styler("code")),
            (first, styler("expected-message")),
        )
        return Group(header, *(
            Text.assemble((">> ", styler("expected-marker")), (line, styler("expected-message")))
            for line in rest
        ))


class ConversionError(ExpectedException, ValueError):
    """
    raised by the built-in convertors when a raw value cannot be converted.
    """
    code = FaultCode.CONVERSION_FAILURE


class ArgumentsWarning(Warning):
    """
    base class for non-fatal anomalies emitted through the warnings module.
    """
    code: FaultCode


class ShortNameCollisionWarning(ArgumentsWarning):
    code = FaultCode.SHORT_NAME_COLLISION


class DeprecatedMethodWarning(ArgumentsWarning, DeprecationWarning):
    code = FaultCode.DEPRECATED_METHOD


class OutcomeKind(StrEnum):
    COMPLETED = "completed"
    STOPPED = "stopped"


class Outcome(NamedTuple):
    """
    result of running an entry point through evaluate().

    - COMPLETED: the entry point returned; `value` holds its result, status is 0.
    - STOPPED: a printable fault interrupted it; `fault` holds it and `status`
      is the fault's exit status.
    """
    kind: OutcomeKind
    status: int
    value: Any = None
    fault: PrintableException | None = None

    @property
    def message(self):
        return self.fault.message if self.fault is not None else None


def trigger(fault, /, **options):
    """
    surface a printable fault: render it with rich and exit with its status.

    options are merged into the fault via __replace__ before triggering
    (e.g. colorful=False).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    if options:
        fault = copy.replace(fault, **options)
    fault.__trigger__()


def evaluate(entry, /, *args, **kwargs):
    """
    run `entry(*args, **kwargs)` and classify how it ended.

    returns
    - Outcome(COMPLETED, 0, value) when the entry point returns.
    - Outcome(STOPPED, fault.status, fault=fault) when it raises a PrintableException.

    any other exception propagates: it indicates a bug, not a user mistake.
    """
    if not callable(entry):
        raise TypeError("evaluate() first argument must be callable")
    try:
        value = entry(*args, **kwargs)
    except PrintableException as fault:
        return Outcome(OutcomeKind.STOPPED, fault.status, fault=fault)
    return Outcome(OutcomeKind.COMPLETED, 0, value)


def invoke(entry, /, *args, **kwargs):
    """
    convenience runner for scripts: evaluate the entry point, print and exit on a
    printable fault, otherwise return its value.
    """
    outcome = evaluate(entry, *args, **kwargs)
    if outcome.kind is OutcomeKind.STOPPED:
        trigger(outcome.fault)
    return outcome.value


__all__ = (
    "FaultCode",
    "ArgumentsError",
    "DeclarationConflictError",
    "UndeclaredArgumentError",
    "PrintableException",
    "HelpRequested",
    "ExpectedException",
    "ConversionError",
    "ArgumentsWarning",
    "ShortNameCollisionWarning",
    "DeprecatedMethodWarning",
    "OutcomeKind",
    "Outcome",
    "trigger",
    "evaluate",
    "invoke",
)
