"""
consoleapp commands: named argument registries bound to a handler.

Handler
- Tagged union over the two supported callables: a plain function returning an
  exit code, or a coroutine function awaited once. The variant is fixed at
  construction; supplying both raises HandlerConflictError, supplying neither
  raises MissingHandlerError.
- The handler receives a Context. Its return value is the exit code (None maps
  to 0).

Command
- name (unique within its app), optional title, a nested ArgumentRegistry and
  its Handler.

Shared run-loop steps (also used by ConsoleApp for its own registry)
- process_arguments(): built-in help/version short circuits, matching, and
  diagnostics. Returns the exit code to stop with, or None when the handler
  should run.
- execute_handler(): runs a handler at the fault boundary. Exceptions raised by
  user code (cancellation included) are rendered, logged and turned into exit
  code 1, whatever their type.

Quick example:
    >>> from consoleapp import command, positional
    >>> @command(title="Double a number", arguments=[positional("number", required=True)])
    ... def double(context):
    ...     context.print(context.get("number").as_int() * 2)
"""
import asyncio
import inspect
import logging
import re

from .faults import (
    BadArgumentsError,
    CommandExit,
    ExitCode,
    FaultCode,
    HandlerConflictError,
    HandlerError,
    MissingArgumentsError,
    MissingHandlerError,
    OperationCancelledError,
    UnknownArgumentsError,
)
from .helptext import render_help
from .matcher import match
from .registry import ArgumentRegistry
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

_HINT = "(use --help switch to view help)"


class Handler:
    """
    exactly one of a synchronous function or a coroutine function.
    """

    __slots__ = ("_callback", "_asynchronous")

    def __init__(self, callback, /, *, asynchronous=Unset):
        if not callable(callback):
            raise TypeError("handler must be callable")
        self._callback = callback
        self._asynchronous = bool(coalesce(asynchronous, inspect.iscoroutinefunction(callback)))

    @classmethod
    def build(cls, function=Unset, coroutine=Unset, /, *, owner="command", required=True):
        """
        Build the handler variant from the two mutually exclusive slots.

        Returns Unset when neither is supplied and required is False.
        """
        if function is not Unset and coroutine is not Unset:
            raise HandlerConflictError(f"{owner} accepts either a function or a coroutine, not both")
        if function is not Unset:
            return cls(function, asynchronous=False)
        if coroutine is not Unset:
            return cls(coroutine, asynchronous=True)
        if required:
            raise MissingHandlerError(f"{owner} requires a function or a coroutine")
        return Unset

    @property
    def callback(self):
        return self._callback

    @property
    def asynchronous(self):
        return self._asynchronous

    def __repr__(self):
        kind = "coroutine" if self._asynchronous else "function"
        return f"handler({kind}={getattr(self._callback, '__qualname__', self._callback)!r})"

    async def __call__(self, context, /):
        if self._asynchronous:
            result = await self._callback(context)
        else:
            result = self._callback(context)
        return ExitCode.SUCCESS if result is None else int(result)


def requested(tokens, name, /):
    """
    True when -name or --name appears before any "--".
    """
    for token in tokens:
        if token == "--":
            return False
        if token in (f"-{name}", f"--{name}"):
            return True
    return False


def diagnose(result, /, *, colorful=False):
    """
    Faults describing a failed MatchResult, in bad, missing, unknown order.
    """
    faults = []

    if result.bad:
        details = []
        for argument, constraint, value in result.bad:
            described = f"{argument.label} - {argument.descr}" if argument.descr else argument.label
            details.append(f"{described} - {constraint.value}: {'' if value is None else value}")
        faults.append(BadArgumentsError(
            f"Bad arguments {_HINT}:",
            code=FaultCode.BAD_ARGUMENTS,
            details=details,
            colorful=colorful,
        ))

    if result.missing:
        faults.append(MissingArgumentsError(
            f"Missing required arguments {_HINT}:",
            code=FaultCode.MISSING_ARGUMENTS,
            details=[
                f"{argument.label} - {argument.descr}" if argument.descr else argument.label
                for argument in result.missing
            ],
            colorful=colorful,
        ))

    if result.unknown:
        faults.append(UnknownArgumentsError(
            f"Unknown arguments {_HINT}: {', '.join(result.unknown)}",
            code=FaultCode.UNKNOWN_ARGUMENTS,
            colorful=colorful,
        ))

    return faults


def process_arguments(
        registry, tokens, /, *, help_text, version_text=Unset, stdout, stderr, colorful=False, probe=Unset,
        check_constraints=True
):
    """
    Run the parse phase of one registry.

    Parameters
    - registry: ArgumentRegistry to match.
    - tokens: list[str] left for this registry.
    - help_text: Callable[[], Text] rendering the help of this registry.
    - version_text: Callable[[], Text] rendering the version (Unset: no version short circuit).
    - stdout / stderr: rich Consoles.
    - check_constraints: False skips constraint validation (bad is always empty).

    Returns
    - ExitCode to terminate with, or None when the handler should run.
    """
    if requested(tokens, "help") and registry.builtin("help") is not None:
        stdout.print(help_text(), soft_wrap=True)
        return ExitCode.SUCCESS

    if version_text is not Unset and requested(tokens, "version") and registry.builtin("version") is not None:
        stdout.print(version_text(), soft_wrap=True)
        return ExitCode.SUCCESS

    if result := match(registry, tokens, probe=probe, check_constraints=check_constraints):
        return None

    if faults := diagnose(result, colorful=colorful):
        stderr.print(CommandExit(faults), soft_wrap=True)
    else:
        stdout.print(help_text(), soft_wrap=True)
    return ExitCode.FAILURE


async def execute_handler(handler, context, /, *, origin="command", stderr, colorful=False):
    """
    Await handler(context) at the fault boundary.

    Parameters
    - origin: "command" or "console", used in the "Unhandled <origin> error" report.
    """
    try:
        return await handler(context)
    except (OperationCancelledError, asyncio.CancelledError):
        logger.info("%s handler cancelled", origin, exc_info=True)
        fault = HandlerError("Unhandled task cancellation", code=FaultCode.HANDLER_CANCELLED, colorful=colorful)
    except Exception as exception:
        logger.error("%s handler raised %s", origin, type(exception).__name__, exc_info=True)
        reason = f"{type(exception).__name__}: {exception}" if str(exception) else type(exception).__name__
        fault = HandlerError(f"Unhandled {origin} error: {reason}", code=FaultCode.HANDLER_ERROR, colorful=colorful)

    stderr.print(CommandExit([fault]), soft_wrap=True)
    return ExitCode.FAILURE


def _sanitize_name(name):
    if not isinstance(name, str):
        raise TypeError("command 'name' must be a string")
    if not (name := name.strip()):
        raise ValueError("command 'name' cannot be empty")
    if name.startswith("-") or re.search(r"\s", name):
        raise ValueError(f"command 'name' cannot start with '-' or contain whitespace: {name!r}")
    return name


class Command:
    """
    Named sub-command of a command-based ConsoleApp.

    Parameters
    - name: str
      Token selecting the command (exact match on the first argv token).
    - title: str
      One-line description shown in help.
    - arguments: Iterable[Argument]
      Specs registered, in order, after the built-in switches.
    - function / coroutine: the handler (exactly one).
    - check_constraints: False accepts argument values without checking their constraints.
    """

    def __init__(self, name, /, title=Unset, arguments=(), *, function=Unset, coroutine=Unset, check_constraints=True):
        self._name = _sanitize_name(name)
        if not isinstance(title, str | Unset):
            raise TypeError("command 'title' must be a string")
        self._title = coalesce(title)
        self._handler = Handler.build(function, coroutine, owner=f"command {self._name!r}")
        self._registry = ArgumentRegistry(arguments, nested=True)
        self._check_constraints = bool(check_constraints)

    @property
    def name(self):
        return self._name

    @property
    def title(self):
        return self._title

    @property
    def handler(self):
        return self._handler

    @property
    def arguments(self):
        return self._registry

    @property
    def check_constraints(self):
        return self._check_constraints

    def __repr__(self):
        return f"command(name={self._name!r}, title={self._title!r}, arguments={self._registry!r})"

    def add(self, argument, /):
        """
        Register one more argument (before the first parse).
        """
        return self._registry.add(argument)

    def help_text(self, *, colorful=False):
        return render_help(self._name, self._registry, title=self._title, label="Command", colorful=colorful)


def command(source=Unset, /, title=Unset, arguments=(), *, name=Unset, check_constraints=True):
    """
    Build a Command from a callable, or return a decorator doing so.

    The command name defaults to the callable's __name__ ("_" turned into "-");
    coroutine functions become asynchronous handlers.

    Modes
    - command(func, "Title", [...]) -> Command
    - @command(title="Title", arguments=[...]) -> decorator
    """
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        slot = "coroutine" if inspect.iscoroutinefunction(callback) else "function"
        return Command(
            coalesce(name, callback.__name__.replace("_", "-")), title, arguments,
            check_constraints=check_constraints, **{slot: callback}
        )

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Handler",
    "Command",
    "command",
    "requested",
    "diagnose",
    "process_arguments",
    "execute_handler",
)
