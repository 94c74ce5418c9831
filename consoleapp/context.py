"""
consoleapp execution context: what a handler sees of one successful parse.

The context is a read-only facade over the registry that was just matched. It
does not copy values; it resolves them on access, so custom transforms that ran
during matching are reflected.

Lookups
- positional: by index (int) or by name (str).
- option / switch: dual-key, by name first, then by identifier (leading dashes
  are ignored: "--out", "-o", "out" and "o" are all accepted).
- *_or_none variants return None instead of raising KeyError.
"""
from .arguments import ArgumentKind
from .utils import Unset


class Context:
    """
    Read-only view handed to a command handler.

    Attributes
    - arguments: the matched ArgumentRegistry.
    - cancellation: Cancellation observed by the handler.
    - help_text: rich Text of the command help (print it for a usage hint).
    - no_values: True when no non-built-in argument exists (bound or defaulted).
    - stdout / stderr: rich Consoles of the owning app.
    """

    def __init__(self, arguments, cancellation, /, *, help_text=Unset, stdout=Unset, stderr=Unset):
        self._arguments = arguments
        self._cancellation = cancellation
        self._help_text = help_text
        self._stdout = stdout
        self._stderr = stderr

    @property
    def arguments(self):
        return self._arguments

    @property
    def cancellation(self):
        return self._cancellation

    @property
    def help_text(self):
        return self._help_text

    @property
    def stdout(self):
        return self._stdout

    @property
    def stderr(self):
        return self._stderr

    @property
    def no_values(self):
        return not any(argument.exists for argument in self._arguments if not argument.builtin)

    def __repr__(self):
        return f"context({self._arguments!r})"

    # ── Positionals ───────────────────────────────────────────────────────────
    def get_or_none(self, key, /):
        """
        Positional spec by index or by name, or None.
        """
        if isinstance(key, int) and not isinstance(key, bool):
            return self._arguments.positional(key)
        if isinstance(key, str):
            return self._arguments.find(lambda x: x.kind is ArgumentKind.POSITIONAL and x.name == key)
        raise TypeError("positional key must be an index or a name")

    def get(self, key, /):
        if (argument := self.get_or_none(key)) is None:
            raise KeyError(key)
        return argument

    def value_or_none(self, key, /):
        """
        value ?? default of a positional, or None when it is not declared.
        """
        return argument.value_or_none if (argument := self.get_or_none(key)) is not None else None

    def value(self, key, /):
        return self.get(key).get_value()

    # ── Options ───────────────────────────────────────────────────────────────
    def _named(self, kind, key):
        if not isinstance(key, str):
            raise TypeError(f"{kind.value} key must be a string")
        return self._arguments.named(kind, key.lstrip("-"))

    def option_or_none(self, key, /):
        return self._named(ArgumentKind.OPTION, key)

    def option(self, key, /):
        if (argument := self.option_or_none(key)) is None:
            raise KeyError(key)
        return argument

    def option_value_or_none(self, key, /):
        return argument.value_or_none if (argument := self.option_or_none(key)) is not None else None

    def option_value(self, key, /):
        return self.option(key).get_value()

    # ── Switches ──────────────────────────────────────────────────────────────
    def switch_or_none(self, key, /):
        return self._named(ArgumentKind.SWITCH, key)

    def switch(self, key, /):
        if (argument := self.switch_or_none(key)) is None:
            raise KeyError(key)
        return argument

    def switch_value(self, key, /):
        """
        True when the switch was given on the command line.
        """
        return self.switch(key).value is True

    # ── Output ────────────────────────────────────────────────────────────────
    def print(self, *objects, **options):
        self._stdout.print(*objects, **options)

    def error(self, *objects, **options):
        self._stderr.print(*objects, **options)


__all__ = (
    "Context",
)
