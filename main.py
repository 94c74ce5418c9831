import sys

from consoleapp import *

__prog__ = "demo"

app = ConsoleApp(title="Console app demo", version="1.0", default_command="greet")


@app.command(
    title="Greet someone",
    arguments=[
        positional("yourName", "The name of the user", default="World", constraint=Constraint.NOT_EMPTY_OR_WHITE_SPACE),
        switch("s", "shout", "Greet loudly"),
    ],
)
def greet(context):
    greeting = f"Hello, {context.value('yourName')}!"
    context.print(greeting.upper() if context.switch_value("shout") else greeting)


@app.command(
    title="Double a number",
    arguments=[positional("number", "The number to double", required=True, constraint=Constraint.IS_INTEGER)],
)
async def double(context):
    context.cancellation.raise_if_cancelled()
    context.print(context.get("number").as_int() * 2)


if __name__ == '__main__':
    sys.exit(invoke(app))
