"""
consoleapp token matcher: binds argv tokens to the specs of one registry.

Grammar
- "--"                               ends option/switch recognition; every later
                                     token is positional. A "--" token is never
                                     an argument itself, even when repeated.
- "--key" / "-key"                   switch, looked up by name then identifier.
- "--key=value" / "--key:value"      option, looked up by name then identifier
  "-key=value" / "-key:value"        (the value may be empty).
- anything else                      positional, bound to the next index.

Classification (one parse pass, every token is processed)
- bad:     value bound (or defaulted) but failing its constraint.
- missing: required spec with nothing bound and no default, not already bad.
- unknown: token that matched no spec.

A token lands in at most one classification; a spec lands in bad at most once
(with the first value that failed).

Defaults never go through the token loop. Once the loop is done, every
non-built-in spec left unbound but carrying a default is preprocessed and
validated exactly like a bound value would have been, so a value behaves the
same whether it came from the command line or from the declaration.

With check_constraints=False the pass still binds, preprocesses and reports
missing and unknown tokens, but never rejects a value as bad.
"""
import logging
import re
from collections import namedtuple

from .arguments import ArgumentKind
from .constraints import probe as default_probe
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

_SWITCH_OR_OPTION = re.compile(r"--?(?P<key>[^:=]+)(?:[:=](?P<value>.*))?", re.DOTALL)

Rejection = namedtuple("Rejection", ("argument", "constraint", "value"))
Rejection.__doc__ = """
a spec whose value failed its constraint: (argument, constraint, value).
"""


class MatchResult:
    """
    outcome of one parse pass.

    Attributes
    - bad: tuple[Rejection, ...]
    - missing: tuple[Argument, ...]
    - unknown: tuple[str, ...] (raw tokens, in input order)
    - success: True when the three classifications are empty.
    """

    __slots__ = ("bad", "missing", "unknown")

    def __init__(self, bad=(), missing=(), unknown=()):
        self.bad = tuple(bad)
        self.missing = tuple(missing)
        self.unknown = tuple(unknown)

    @property
    def success(self):
        return not (self.bad or self.missing or self.unknown)

    def __bool__(self):
        return self.success

    def __repr__(self):
        return "match-result(bad=%r, missing=%r, unknown=%r)" % (
            [rejection.argument.name for rejection in self.bad],
            [argument.name for argument in self.missing],
            list(self.unknown),
        )


class Matcher:
    """
    single-use parse pass over one registry.

    The registry is reset (values cleared, defaults restored, shape sealed) when
    the pass starts. Use match() for the common case.
    """

    def __init__(self, registry, /, *, probe=Unset, check_constraints=True):
        self._registry = registry
        self._probe = coalesce(probe, default_probe)
        self._check_constraints = bool(check_constraints)
        self._end_of_options = False
        self._position = -1
        self._bad = []
        self._unknown = []

    def __call__(self, tokens, /):
        self._registry.reset()

        for token in tokens:
            if token == "--":
                self._end_of_options = True
                continue

            if not self._end_of_options and token.startswith("-"):
                self._named(token)
            else:
                self._positional(token)

        self._defaults()

        failed = {rejection.argument.id for rejection in self._bad}
        missing = [
            argument for argument in self._registry
            if argument.required and not argument.exists and argument.id not in failed
        ]

        result = MatchResult(self._bad, missing, self._unknown)
        logger.debug("matched %d token(s): %r", len(tokens), result)
        return result

    def _named(self, token):
        if not (match := _SWITCH_OR_OPTION.fullmatch(token)):
            logger.debug("malformed switch or option %r", token)
            self._unknown.append(token)
            return

        if match["value"] is not None:
            argument = self._registry.named(ArgumentKind.OPTION, match["key"])
            value = match["value"]
        else:
            argument = self._registry.named(ArgumentKind.SWITCH, match["key"])
            value = True

        if argument is None:
            logger.debug("unknown switch or option %r", token)
            self._unknown.append(token)
            return

        self._bind(argument, value)

    def _positional(self, token):
        self._position += 1

        if self._position > self._registry.max_index:
            logger.debug("unexpected positional %r at index %d", token, self._position)
            self._unknown.append(token)
            return

        if (argument := self._registry.positional(self._position)) is None:
            self._unknown.append(token)
            return

        self._bind(argument, token)

    def _bind(self, argument, value):
        argument.add_value(value)
        argument.apply_preprocessing()
        # The freshly bound value is the last one (preprocessing may have rewritten it).
        self._validate(argument, argument.values[-1] if argument.values else Unset)

    def _defaults(self):
        for argument in self._registry:
            if argument.builtin or argument.values or argument.default is None:
                continue
            argument.apply_preprocessing()
            self._validate(argument, Unset)

    def _validate(self, argument, value):
        if not self._check_constraints:
            return
        if argument.check_constraints(value, probe=self._probe):
            return
        if any(rejection.argument is argument for rejection in self._bad):
            return
        value = coalesce(value, argument.value_or_none)
        logger.debug("%s %r failed %s with %r", argument.kind.value, argument.name, argument.constraint.value, value)
        self._bad.append(Rejection(argument, argument.constraint, value))


def match(registry, tokens, /, *, probe=Unset, check_constraints=True):
    """
    Parse tokens against registry and return the MatchResult.

    Parameters
    - registry: ArgumentRegistry
    - tokens: Sequence[str] (argv without the program name)
    - probe: FileSystemProbe for the path constraints (defaults to os.path)
    - check_constraints: False accepts every bound or default value as is.
    """
    return Matcher(registry, probe=probe, check_constraints=check_constraints)(list(tokens))


__all__ = (
    "Rejection",
    "MatchResult",
    "Matcher",
    "match",
)
