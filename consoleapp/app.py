"""
consoleapp application: command router and run loop.

A ConsoleApp is either argument-based (one registry, one handler) or
command-based (a table of Commands keyed by name). It becomes command-based as
soon as a command is added.

One invocation
    argv
     ├─ command-based, empty argv → default command, else top-level help (0)
     ├─ first token names a command → that command's help or matcher
     ├─ no command matched
     │    ├─ --help / --version → text (0)
     │    ├─ command-based → "Unknown command: <token>" (1)
     │    └─ argument-based → top-level matcher
     ├─ match failed → diagnostics (1)
     └─ match succeeded → handler(Context) → its exit code

process(argv) and execute(cancellation) expose the two halves; run() chains
them and invoke() drives run() from synchronous code.
"""
import asyncio
import contextlib
import logging
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .cancellation import Cancellation, InterruptCoordinator
from .commands import Command, Handler, command, execute_handler, process_arguments, requested
from .context import Context
from .entry import entry
from .faults import (
    CommandExit,
    DuplicateCommandError,
    ExitCode,
    FaultCode,
    HandlerConflictError,
    MissingHandlerError,
    ParseRequiredError,
    UnknownCommandError,
)
from .helptext import render_help, render_version
from .registry import ArgumentRegistry
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def _tokens(argv):
    """
    Normalize argv into list[str]: Unset reads sys.argv[1:], a string is split
    the way a POSIX shell would.
    """
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("argv must be a string or an iterable of strings")


class ConsoleApp:
    """
    Console application (argument-based or command-based).

    Parameters
    - arguments: Iterable[Argument]
      Top-level specs of an argument-based app.
    - commands: Iterable[Command]
      Commands of a command-based app.
    - name: str
      Program name shown in usage and version text (defaults to entry().name).
    - title: str
      First help line and version subtitle.
    - version: str
      Version shown by --version (defaults to entry().version).
    - default_command: str
      Command run when a command-based app receives no arguments.
    - function / coroutine: handler of an argument-based app (at most one).
    - colorful: style output with the palette.
    - handle_interrupts: install the SIGINT coordinator while the handler runs.
    - stdout / stderr: rich Consoles (tests inject consoles writing to StringIO).
    - on_cancel / on_terminate: interrupt hooks; returning False vetoes.
    - probe: FileSystemProbe for the path constraints.
    - check_constraints: False accepts top-level argument values without checking
      their constraints (each Command carries its own setting).
    """

    def __init__(
            self,
            arguments=(),
            /,
            commands=(),
            *,
            name=Unset,
            title=Unset,
            version=Unset,
            default_command=Unset,
            function=Unset,
            coroutine=Unset,
            colorful=False,
            handle_interrupts=True,
            stdout=Unset,
            stderr=Unset,
            on_cancel=Unset,
            on_terminate=Unset,
            probe=Unset,
            check_constraints=True
    ):
        for key, object in (("name", name), ("title", title), ("version", version), ("default_command", default_command)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"console-app {key!r} must be a string")
        for key, object in (("on_cancel", on_cancel), ("on_terminate", on_terminate)):
            if object is not Unset and not callable(object):
                raise TypeError(f"console-app {key!r} must be callable")

        self._name = name
        self._title = coalesce(title)
        self._version = version
        self._default_command = default_command
        self._handler = Handler.build(function, coroutine, owner="console-app", required=False)
        self._colorful = bool(colorful)
        self._handle_interrupts = bool(handle_interrupts)
        self._stdout = stdout if stdout is not Unset else Console()
        self._stderr = stderr if stderr is not Unset else Console(stderr=True)
        self._on_cancel = on_cancel
        self._on_terminate = on_terminate
        self._probe = probe
        self._check_constraints = bool(check_constraints)

        self._registry = ArgumentRegistry(arguments)
        self._commands = {}
        for object in commands:
            self.add_command(object)

        self._processed = False
        self._selected = Unset
        self._status = Unset

    # ── Declaration ───────────────────────────────────────────────────────────
    @property
    def name(self):
        return coalesce(self._name, entry().name)

    @property
    def title(self):
        return self._title

    @property
    def version(self):
        return coalesce(self._version, entry().version)

    @property
    def default_command(self):
        return coalesce(self._default_command)

    @property
    def command_based(self):
        return bool(self._commands)

    @property
    def commands(self):
        return tuple(self._commands.values())

    @property
    def arguments(self):
        return self._registry

    @property
    def check_constraints(self):
        return self._check_constraints

    @property
    def colorful(self):
        return self._colorful

    @property
    def stdout(self):
        return self._stdout

    @property
    def stderr(self):
        return self._stderr

    def __repr__(self):
        if self._commands:
            return f"console-app(name={self.name!r}, commands={list(self._commands)!r})"
        return f"console-app(name={self.name!r}, arguments={self._registry!r})"

    def add(self, argument, /):
        """
        Register a top-level argument (before the first parse).
        """
        return self._registry.add(argument)

    def add_command(self, object, /):
        """
        Register a Command; the app becomes command-based.
        """
        if not isinstance(object, Command):
            raise TypeError("add_command() argument must be a command")
        if object.name in self._commands:
            raise DuplicateCommandError(f"command {object.name!r} is already declared")
        self._commands[object.name] = object
        logger.debug("registered command %r", object.name)
        return object

    def command(self, source=Unset, /, title=Unset, arguments=(), *, name=Unset, check_constraints=True):
        """
        Decorator form of add_command(command(...)).

        Example
            @app.command(title="Double a number", arguments=[positional("number", required=True)])
            def double(context): ...
        """
        def wrapper(callback, /):
            return self.add_command(command(callback, title, arguments, name=name, check_constraints=check_constraints))

        return wrapper(source) if source is not Unset else wrapper

    def handler(self, callback, /):
        """
        Set the handler of an argument-based app (decorator).

        Raises
        - HandlerConflictError: a handler was already supplied.
        """
        if self._handler is not Unset:
            raise HandlerConflictError("console-app handler is already set")
        self._handler = Handler(callback)
        return callback

    # ── Rendering ─────────────────────────────────────────────────────────────
    def help_text(self):
        return render_help(
            self.name,
            self._registry,
            title=self._title,
            commands=self.commands,
            colorful=self._colorful,
        )

    def version_text(self):
        return render_version(self.name, self.version, title=self._title, colorful=self._colorful)

    # ── Run loop ──────────────────────────────────────────────────────────────
    @property
    def processed(self):
        return self._processed

    @property
    def exit_code(self):
        """
        Exit code decided by process(), or None when the handler is due to run.
        """
        return coalesce(self._status)

    def _stop(self, status):
        self._status = status
        return status is None

    def process(self, argv=Unset, /):
        """
        Route and match argv.

        Returns
        - True when a handler is ready to run (call execute()), False when the
          invocation already finished (help, version or diagnostics were
          printed; see exit_code).
        """
        tokens = _tokens(argv)
        self._processed = True
        self._selected = Unset
        sinks = {"stdout": self._stdout, "stderr": self._stderr, "colorful": self._colorful, "probe": self._probe}

        if not self._commands:
            return self._stop(process_arguments(
                self._registry,
                tokens,
                help_text=self.help_text,
                version_text=self.version_text,
                check_constraints=self._check_constraints,
                **sinks,
            ))

        if not tokens:
            if self._default_command is Unset:
                self._stdout.print(self.help_text(), soft_wrap=True)
                return self._stop(ExitCode.SUCCESS)
            logger.debug("no arguments, running default command %r", self._default_command)
            tokens = [self._default_command]

        if (selected := self._commands.get(tokens[0])) is None:
            if requested(tokens, "help"):
                self._stdout.print(self.help_text(), soft_wrap=True)
                return self._stop(ExitCode.SUCCESS)
            if requested(tokens, "version"):
                self._stdout.print(self.version_text(), soft_wrap=True)
                return self._stop(ExitCode.SUCCESS)
            logger.debug("unknown command %r", tokens[0])
            self._stderr.print(CommandExit([UnknownCommandError(
                f"Unknown command: {tokens[0]}",
                code=FaultCode.UNKNOWN_COMMAND,
                colorful=self._colorful,
            )]), soft_wrap=True)
            return self._stop(ExitCode.FAILURE)

        logger.debug("selected command %r", selected.name)
        self._selected = selected
        return self._stop(process_arguments(
            selected.arguments,
            tokens[1:],
            help_text=lambda: selected.help_text(colorful=self._colorful),
            check_constraints=selected.check_constraints,
            **sinks,
        ))

    async def execute(self, cancellation=Unset, /):
        """
        Run the handler chosen by process().

        Raises
        - ParseRequiredError: process() was not called.
        - MissingHandlerError: the argument-based app has no handler.
        """
        if not self._processed:
            raise ParseRequiredError("process() must be called before execute()")
        if self._status is not None:
            return int(self._status)

        if self._selected is not Unset:
            handler, registry, origin = self._selected.handler, self._selected.arguments, "command"
            help_text = self._selected.help_text(colorful=self._colorful)
        else:
            if self._handler is Unset:
                raise MissingHandlerError("console-app has no handler: pass function=/coroutine= or use @app.handler")
            handler, registry, origin = self._handler, self._registry, "console"
            help_text = self.help_text()

        linked = Cancellation.link(cancellation)
        context = Context(registry, linked, help_text=help_text, stdout=self._stdout, stderr=self._stderr)

        interrupts = InterruptCoordinator(
            linked,
            on_cancel=self._on_cancel,
            on_terminate=self._on_terminate,
            stderr=self._stderr,
            colorful=self._colorful,
        ) if self._handle_interrupts else contextlib.nullcontext()

        try:
            with interrupts:
                return int(await execute_handler(handler, context, origin=origin, stderr=self._stderr, colorful=self._colorful))
        finally:
            linked.release()

    async def run(self, argv=Unset, cancellation=Unset, /):
        """
        process(argv) then execute(cancellation); returns the exit code.
        """
        if not self.process(argv):
            return int(self._status)
        return await self.execute(cancellation)

    def __invoke__(self, argv=Unset, /):
        return asyncio.run(self.run(argv))


def invoke(object, argv=Unset, /):
    """
    Run a ConsoleApp (or any object implementing __invoke__) from synchronous code.

    Returns
    - int exit code, suitable for sys.exit().
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(argv)
    raise TypeError("invoke() argument must implement __invoke__ method")


__all__ = (
    "ConsoleApp",
    "invoke",
)
