"""
App module behavioral tests (router state machine and run loop, end to end).

Scope
- Validate argument-based apps: handler invocation, help, version, diagnostics.
- Validate command-based apps: routing, command help, unknown commands, default command.
- Validate the run-loop contract: process/execute split, exit codes, programmer
  errors, cancellation and SIGINT scoping.

Conventions
- Test method names follow CamelCase per project convention.
- Apps are named explicitly and write to rich consoles backed by StringIO.
"""

from __future__ import annotations

import asyncio
import io
import signal
import unittest
from unittest import TestCase

from rich.console import Console

from consoleapp import (
    Cancellation,
    Command,
    ConsoleApp,
    Constraint,
    DuplicateCommandError,
    HandlerConflictError,
    InterruptCoordinator,
    MissingHandlerError,
    ParseRequiredError,
    RegistrySealedError,
    invoke,
    option,
    positional,
    switch,
)


def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


class AppTestCase(TestCase):
    def setUp(self):
        self.stdout, self.stderr = console(), console()

    def app(self, *args, **options):
        options = {
            "name": "testhost",
            "version": "1.2",
            "handle_interrupts": False,
            "stdout": self.stdout,
            "stderr": self.stderr,
        } | options
        return ConsoleApp(*args, **options)

    @property
    def out(self):
        return self.stdout.file.getvalue()

    @property
    def err(self):
        return self.stderr.file.getvalue()


class TestArgumentBasedApp(AppTestCase):
    """Behavioral tests for an app with a single registry and handler."""

    def setUp(self):
        super().setUp()
        self.calls = []

        def greet(context):
            self.calls.append(context.value("yourName"))
            context.print(f"Hello, {context.value('yourName')}!")

        self.greeter = self.app(
            [positional("yourName", "The name of the user", required=True, constraint=Constraint.NOT_EMPTY_OR_WHITE_SPACE)],
            title="TestConsoleApp.RunWithArguments",
            function=greet,
        )

    def testRunWithArguments(self):
        self.assertEqual(invoke(self.greeter, ["World"]), 0)
        self.assertEqual(self.out, "Hello, World!\n")

    def testMissingRequiredArgument(self):
        self.assertEqual(invoke(self.greeter, []), 1)
        self.assertEqual(self.err, "Missing required arguments (use --help switch to view help):\n yourName - The name of the user\n")
        self.assertEqual(self.calls, [])

    def testBadArgument(self):
        self.assertEqual(invoke(self.greeter, [""]), 1)
        self.assertIn("Bad arguments (use --help switch to view help):", self.err)
        self.assertIn(" yourName - The name of the user - NotEmptyOrWhiteSpace:", self.err)
        self.assertNotIn("Missing", self.err)

    def testUnknownArguments(self):
        self.assertEqual(invoke(self.greeter, ["World", "extra", "--nope"]), 1)
        self.assertEqual(self.err, "Unknown arguments (use --help switch to view help): extra, --nope\n")

    def testHelp(self):
        self.assertEqual(invoke(self.greeter, ["--help"]), 0)
        self.assertEqual(self.out, "\n".join([
            "TestConsoleApp.RunWithArguments",
            "Usage: testhost yourName",
            "",
            "Switches:",
            " help - Show help",
            " version - Show version",
            "",
            "Arguments:",
            " yourName - The name of the user",
            "",
        ]))
        self.assertEqual(self.calls, [])

    def testVersion(self):
        self.assertEqual(invoke(self.greeter, ["--version"]), 0)
        self.assertEqual(self.out, "testhost — TestConsoleApp.RunWithArguments (v1.2)\n")
        self.assertEqual(self.calls, [])

    def testVersionWithoutTitle(self):
        app = self.app(function=lambda context: 0)
        invoke(app, ["-version"])
        self.assertEqual(self.out, "testhost (v1.2)\n")

    def testDoubleDashDisablesBuiltins(self):
        self.assertEqual(invoke(self.greeter, ["--", "--help"]), 0)
        self.assertEqual(self.calls, ["--help"])

    def testStringArgvIsSplit(self):
        self.assertEqual(invoke(self.greeter, "'Big World'"), 0)
        self.assertEqual(self.calls, ["Big World"])

    def testRepeatedRunsResetValues(self):
        invoke(self.greeter, ["First"])
        self.assertEqual(invoke(self.greeter, []), 1)
        self.assertEqual(self.calls, ["First"])

    def testConstraintChecksDisabledForApp(self):
        app = self.app(
            [positional("yourName", required=True, constraint=Constraint.NOT_EMPTY_OR_WHITE_SPACE)],
            function=lambda context: context.print(f"<{context.value('yourName')}>", end=""),
            check_constraints=False,
        )
        self.assertEqual(invoke(app, [""]), 0)
        self.assertEqual(self.out, "<>")
        self.assertEqual(self.err, "")

    def testRegistrySealedAfterRun(self):
        invoke(self.greeter, ["World"])
        with self.assertRaises(RegistrySealedError):
            self.greeter.add(switch("v", "verbose"))


class TestCommandBasedApp(AppTestCase):
    """Behavioral tests for command routing."""

    def setUp(self):
        super().setUp()
        self.numbers = []

        def double(context):
            self.numbers.append(context.get("number").value)
            context.print(context.get("number").as_int() * 2, end="")

        self.doubler = self.app(
            commands=[Command(
                "double",
                "Double a number",
                [positional("number", "The number to double", required=True)],
                function=double,
            )],
            title="TestConsoleApp.RunWithDoubleNumberCommand",
        )

    def testRunCommand(self):
        self.assertEqual(invoke(self.doubler, ["double", "2"]), 0)
        self.assertEqual(self.numbers, ["2"])
        self.assertEqual(self.out, "4")

    def testCommandMissingArgument(self):
        self.assertEqual(invoke(self.doubler, ["double"]), 1)
        self.assertEqual(self.err, "Missing required arguments (use --help switch to view help):\n number - The number to double\n")
        self.assertEqual(self.numbers, [])

    def testCommandHelp(self):
        self.assertEqual(invoke(self.doubler, ["double", "--help"]), 0)
        self.assertEqual(self.out, "\n".join([
            "Double a number",
            "Command: double number",
            "",
            "Switches:",
            " help - Show help",
            "",
            "Arguments:",
            " number - The number to double",
            "",
        ]))
        self.assertEqual(self.numbers, [])

    def testEmptyArgvPrintsTopLevelHelp(self):
        self.assertEqual(invoke(self.doubler, []), 0)
        self.assertEqual(self.out, "\n".join([
            "TestConsoleApp.RunWithDoubleNumberCommand",
            "Usage: testhost command [arguments]",
            "",
            "Commands:",
            " double - Double a number",
            "",
            "Switches:",
            " help - Show help",
            " version - Show version",
            "",
        ]))

    def testTopLevelHelpAndVersion(self):
        self.assertEqual(invoke(self.doubler, ["--help"]), 0)
        self.assertIn("Usage: testhost command [arguments]", self.out)
        self.assertEqual(invoke(self.doubler, ["--version"]), 0)
        self.assertTrue(self.out.endswith("testhost — TestConsoleApp.RunWithDoubleNumberCommand (v1.2)\n"))

    def testUnknownCommand(self):
        self.assertEqual(invoke(self.doubler, ["triple", "2"]), 1)
        self.assertEqual(self.err, "Unknown command: triple\n")

    def testCommandNamesAreExact(self):
        self.assertEqual(invoke(self.doubler, ["Double", "2"]), 1)
        self.assertIn("Unknown command: Double", self.err)

    def testDefaultCommand(self):
        app = self.app(commands=[Command("hello", function=lambda context: context.print("hi", end=""))], default_command="hello")
        self.assertEqual(invoke(app, []), 0)
        self.assertEqual(self.out, "hi")

    def testDuplicateCommandRejected(self):
        with self.assertRaises(DuplicateCommandError):
            self.doubler.add_command(Command("double", function=lambda context: 0))

    def testCommandDecorator(self):
        app = self.app()

        @app.command(title="Say hello", arguments=[option("n", "name", default="you")])
        async def hello(context):
            context.print(f"hello {context.option_value('name')}", end="")

        self.assertTrue(app.command_based)
        self.assertIs(app.commands[0], hello)
        self.assertEqual(invoke(app, ["hello", "--name=bob"]), 0)
        self.assertEqual(self.out, "hello bob")

    def testConstraintChecksDisabledForCommand(self):
        app = self.app()

        @app.command(arguments=[positional("number", constraint=Constraint.IS_INTEGER)], check_constraints=False)
        def echo(context):
            context.print(context.value("number"), end="")

        self.assertFalse(echo.check_constraints)
        self.assertEqual(invoke(app, ["echo", "two"]), 0)
        self.assertEqual(self.out, "two")

    def testCommandConstraintsCheckedByDefault(self):
        app = self.app(commands=[Command("echo", arguments=[positional("number", constraint=Constraint.IS_INTEGER)], function=lambda context: 0)])
        self.assertEqual(invoke(app, ["echo", "two"]), 1)
        self.assertIn("Bad arguments (use --help switch to view help):", self.err)

    def testCommandVersionSwitchIsAnOrdinarySwitch(self):
        self.assertEqual(invoke(self.doubler, ["double", "2", "--version"]), 0)
        self.assertEqual(self.numbers, ["2"])


class TestRunLoop(AppTestCase):
    """Behavioral tests for process/execute, exit codes and faults."""

    def testExitCodePropagates(self):
        self.assertEqual(invoke(self.app(function=lambda context: 3), []), 3)

    def testCoroutineHandler(self):
        async def run(context):
            await asyncio.sleep(0)
            return 0

        self.assertEqual(invoke(self.app(coroutine=run), []), 0)

    def testProcessThenExecute(self):
        app = self.app(function=lambda context: 5)
        self.assertTrue(app.process([]))
        self.assertIsNone(app.exit_code)
        self.assertEqual(asyncio.run(app.execute()), 5)

    def testProcessStopsOnHelp(self):
        app = self.app(function=lambda context: 5)
        self.assertFalse(app.process(["--help"]))
        self.assertEqual(app.exit_code, 0)
        self.assertEqual(asyncio.run(app.execute()), 0)

    def testExecuteBeforeProcessRaises(self):
        with self.assertRaises(ParseRequiredError):
            asyncio.run(self.app(function=lambda context: 0).execute())

    def testMissingHandlerRaises(self):
        with self.assertRaises(MissingHandlerError):
            invoke(self.app(), [])

    def testHandlerConflicts(self):
        async def run(context):
            return 0

        with self.assertRaises(HandlerConflictError):
            self.app(function=lambda context: 0, coroutine=run)

        app = self.app(function=lambda context: 0)
        with self.assertRaises(HandlerConflictError):
            app.handler(lambda context: 1)

    def testHandlerDecorator(self):
        app = self.app()

        @app.handler
        def main(context):
            return 4

        self.assertTrue(callable(main))
        self.assertEqual(invoke(app, []), 4)

    def testUnhandledConsoleError(self):
        def fail(context):
            raise ValueError("broken")

        self.assertEqual(invoke(self.app(function=fail), []), 1)
        self.assertEqual(self.err, "Unhandled console error: ValueError: broken\n")

    def testUnhandledCommandError(self):
        def fail(context):
            raise ValueError("broken")

        app = self.app(commands=[Command("go", function=fail)])
        self.assertEqual(invoke(app, ["go"]), 1)
        self.assertEqual(self.err, "Unhandled command error: ValueError: broken\n")

    def testRegistryMisuseInsideHandlerReported(self):
        def late(context):
            context.arguments.add(positional("late"))

        self.assertEqual(invoke(self.app(function=late), []), 1)
        self.assertEqual(self.err, "Unhandled console error: RegistrySealedError: cannot add argument 'late': registry was already parsed\n")

    def testExternalCancellationReachesHandler(self):
        async def run(context):
            context.cancellation.raise_if_cancelled()
            return 0

        cancellation = Cancellation()
        cancellation.cancel()
        app = self.app(coroutine=run)
        self.assertEqual(asyncio.run(app.run([], cancellation)), 1)
        self.assertEqual(self.err, "Unhandled task cancellation\n")

    def testCallerCancellationReleasedAfterRun(self):
        cancellation = Cancellation()
        app = self.app(function=lambda context: 0)
        for argv in (["--help"], [], []):
            asyncio.run(app.run(argv, cancellation))
        self.assertEqual(cancellation._callbacks, [])

    def testInterruptHandlerScopedToExecution(self):
        seen = []
        previous = signal.getsignal(signal.SIGINT)

        def run(context):
            seen.append(signal.getsignal(signal.SIGINT))

        app = self.app(function=run, handle_interrupts=True)
        self.assertEqual(invoke(app, []), 0)
        self.assertIsInstance(seen[0], InterruptCoordinator)
        self.assertEqual(signal.getsignal(signal.SIGINT), previous)

    def testInterruptsDisabled(self):
        seen = []
        app = self.app(function=lambda context: seen.append(signal.getsignal(signal.SIGINT)))
        invoke(app, [])
        self.assertNotIsInstance(seen[0], InterruptCoordinator)

    def testArgvTypeChecked(self):
        with self.assertRaises(TypeError):
            invoke(self.app(function=lambda context: 0), [1, 2])


if __name__ == "__main__":
    unittest.main()
