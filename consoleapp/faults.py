"""
consoleapp faults (user-facing errors, programmer errors) and exit codes.

Scope
- ExitCode: process exit codes returned by the run loop.
- FaultCode: stable numeric identifiers for every user-facing fault.
- CommandException: base type for user input faults. It carries a message plus
  options and knows how to render itself through rich.
- CommandExit: exception group bundling every fault of one parse pass so they
  are reported together.
- ProgrammerError: misuse of the construction contract. These are raised at the
  offending call and never converted into exit codes.
- OperationCancelledError: raised by Cancellation.raise_if_cancelled().

Taxonomy
- user input (bad / missing / unknown argument, unknown command): rendered to the
  error sink, exit code 1.
- handler faults (exceptions from user code, including cancellation): caught at
  the run-loop boundary, rendered and logged, exit code 1.
- programmer errors: raised immediately.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, palette, stylize


class ExitCode(IntEnum):
    """
    exit codes produced by an invocation.
    """
    SUCCESS = 0
    FAILURE = 1


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers, searchable in logs).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - matching (1111x): BAD_ARGUMENTS, MISSING_ARGUMENTS, UNKNOWN_ARGUMENTS
    - delegated (1113x): HANDLER_ERROR, HANDLER_CANCELLED
    """
    UNKNOWN_COMMAND   = 11101

    BAD_ARGUMENTS     = 11111
    MISSING_ARGUMENTS = 11112
    UNKNOWN_ARGUMENTS = 11113

    HANDLER_ERROR     = 11131
    HANDLER_CANCELLED = 11132


_STYLES = {
    "error-title": "bold #FF4DA6",  # friendly pinky headline
    "error-detail": "#C8C8D0",  # soft light gray body
    "error-value": "bold #FFD600",  # amber offending value
}


class CommandException(Exception):
    """
    user-facing fault rendered through rich.

    options
    - code: FaultCode of the fault.
    - details: sequence of str | Text lines rendered below the message, indented
      by one space.
    - colorful: apply the palette (plain text otherwise).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        styles = palette(_STYLES)
        colorful = self.options.get("colorful", False)

        lines = [stylize(self.message or "", styles["error-title"], colorful=colorful)]
        for detail in self.options.get("details", ()):
            lines.append(Text.assemble(" ", stylize(detail, styles["error-detail"], colorful=colorful)))
        return Group(*lines)

    def __str__(self):
        return "\n".join([self.message or "", *(" " + str(detail) for detail in self.options.get("details", ()))])


class BadArgumentsError(CommandException): ...
class MissingArgumentsError(CommandException): ...
class UnknownArgumentsError(CommandException): ...
class UnknownCommandError(CommandException): ...
class HandlerError(CommandException): ...


class CommandExit(ExceptionGroup):
    """
    every fault of one invocation, reported together (bad, then missing, then unknown).
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        return Group(*self.exceptions)


class OperationCancelledError(Exception):
    """
    raised by Cancellation.raise_if_cancelled() once cancellation was requested.
    """


class ProgrammerError(Exception):
    """
    base type for misuse of the construction contract (never a user error).
    """


class MissingIdentifierError(ProgrammerError, ValueError): ...
class DuplicateArgumentError(ProgrammerError, ValueError): ...
class DuplicateCommandError(ProgrammerError, ValueError): ...
class RegistrySealedError(ProgrammerError, RuntimeError): ...
class MissingHandlerError(ProgrammerError, TypeError): ...
class HandlerConflictError(ProgrammerError, TypeError): ...
class ParseRequiredError(ProgrammerError, RuntimeError): ...


__all__ = (
    "ExitCode",
    "FaultCode",
    "CommandException",
    "BadArgumentsError",
    "MissingArgumentsError",
    "UnknownArgumentsError",
    "UnknownCommandError",
    "HandlerError",
    "CommandExit",
    "OperationCancelledError",
    "ProgrammerError",
    "MissingIdentifierError",
    "DuplicateArgumentError",
    "DuplicateCommandError",
    "RegistrySealedError",
    "MissingHandlerError",
    "HandlerConflictError",
    "ParseRequiredError",
)
