"""
consoleapp argument registry: the ordered specs of one command (or app).

A registry is seeded with the built-in help and version switches, grows through
add()/extend() while the program is being declared, and is sealed in shape by
its first parse. Registration errors are programmer errors and are raised
immediately:
- DuplicateArgumentError: two specs share (identifier, name, kind), two
  options (or two switches) share an identifier or a name, one's identifier
  is the other's name, or the spec already belongs to another registry.
- RegistrySealedError: add() after the registry was parsed.

Lookups are linear; registries hold tens of entries at most.
"""
import logging

from .arguments import ArgumentKind, help_switch, version_switch
from .faults import DuplicateArgumentError, RegistrySealedError

logger = logging.getLogger(__name__)


class ArgumentRegistry:
    """
    Ordered collection of Argument specs with positional indexing.

    Parameters
    - nested: bool
      True for the registry of a command inside a command-based app; its version
      switch is then marked top-level-only.
    """

    def __init__(self, arguments=(), /, *, nested=False):
        self._arguments = []
        self._max_index = -1
        self._sealed = False
        self._nested = bool(nested)
        self.add(help_switch())
        self.add(version_switch(top_level_only=self._nested))
        self.extend(arguments)

    @property
    def nested(self):
        return self._nested

    @property
    def sealed(self):
        return self._sealed

    @property
    def max_index(self):
        """
        Highest positional index declared so far (-1 when there are none).
        """
        return self._max_index

    def __iter__(self):
        return iter(self._arguments)

    def __len__(self):
        return len(self._arguments)

    def __contains__(self, argument):
        return any(candidate is argument for candidate in self._arguments)

    def __repr__(self):
        return f"argument-registry({', '.join(argument.use_text for argument in self._arguments)})"

    def add(self, argument, /):
        """
        Register one spec; positionals receive the next sequential index.
        """
        if self._sealed:
            raise RegistrySealedError(f"cannot add argument {argument.name!r}: registry was already parsed")

        for other in self._arguments:
            if other.key == argument.key:
                raise DuplicateArgumentError(f"argument {argument.name!r} ({argument.kind.value}) is already declared")
            if argument.kind is not ArgumentKind.POSITIONAL and other.kind is argument.kind:
                if other.identifier == argument.identifier:
                    raise DuplicateArgumentError(
                        f"{argument.kind.value} identifier {argument.identifier!r} is already in use by {other.name!r}"
                    )
                if other.name == argument.name:
                    raise DuplicateArgumentError(
                        f"{argument.kind.value} name {argument.name!r} is already in use"
                    )
                # named() resolves names before identifiers, so a crossed key would shadow one of them.
                if argument.identifier == other.name or argument.name == other.identifier:
                    raise DuplicateArgumentError(
                        f"{argument.kind.value} {argument.name!r} and {other.name!r} share a key"
                    )

        if argument.kind is ArgumentKind.POSITIONAL:
            index = self._max_index + 1
            argument._register(len(self._arguments), index)
            self._max_index = index
        else:
            argument._register(len(self._arguments))
        self._arguments.append(argument)
        logger.debug("registered %s %r (index=%d)", argument.kind.value, argument.name, argument.index)
        return argument

    def extend(self, arguments, /):
        for argument in arguments:
            self.add(argument)

    def find(self, predicate, /):
        """
        First spec satisfying predicate, or None.
        """
        return next(filter(predicate, self._arguments), None)

    def positional(self, index, /):
        return self.find(lambda x: x.kind is ArgumentKind.POSITIONAL and x.index == index)

    def named(self, kind, key, /):
        """
        Dual-key lookup for options and switches: by name first, then by identifier.
        """
        kind = ArgumentKind(kind)
        return (
            self.find(lambda x: x.kind is kind and x.name == key) or
            self.find(lambda x: x.kind is kind and x.identifier == key)
        )

    def builtin(self, name, /):
        return self.find(lambda x: x.builtin and x.name == name)

    def of(self, kind, /):
        """
        Specs of one kind in declaration order (positionals ordered by index).
        """
        kind = ArgumentKind(kind)
        arguments = [argument for argument in self._arguments if argument.kind is kind]
        if kind is ArgumentKind.POSITIONAL:
            arguments.sort(key=lambda x: x.index)
        return arguments

    def reset(self):
        """
        Seal the registry and clear every bound value (start of a parse pass).
        """
        self._sealed = True
        for argument in self._arguments:
            argument.reset()


__all__ = (
    "ArgumentRegistry",
)
