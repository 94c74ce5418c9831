r"""
consoleapp argument specifications.

Overview
- ArgumentKind
  • POSITIONAL: bound by order in the remaining token stream.
  • OPTION: flagged argument carrying an attached value (-x=value, --name:value).
  • SWITCH: flagged presence-only boolean (-x, --name).
- Preprocess
  • Flag set of value transforms applied after matching and before constraint
    checking: EXPAND_ENVIRONMENT ($VAR, ${VAR}, ~), ABSOLUTE_PATH.
- Argument
  • Declarative spec (name, identifier, kind, required, constraint, default,
    preprocessing, help text) plus the values bound during one parse pass.
- Factories
  • positional(name, ...), option(identifier, name, ...), switch(identifier, ...)
    build the three kinds with the keywords that make sense for each.

Identity
- Argument.key is the tuple (identifier, name, kind). Registries reject two specs
  sharing a key and assign an opaque Argument.id on registration; match results
  compare specs by that id.

Bound values
- values holds the raw bound values in order (repeated options append). value is
  the first of them; value_or_none falls back to the default. Typed accessors
  (as_str/as_int/as_float/as_bool/as_type) parse the canonical string form on
  demand, so the same spec can be read as any of them.

Quick example:
    >>> from consoleapp.arguments import positional, option, switch
    >>> name = positional("yourName", required=True, descr="The name of the user")
    >>> count = option("c", "count", constraint=Constraint.IS_INTEGER, default="1")
    >>> verbose = switch("v", "verbose", descr="Chatty output")
"""
import enum
import functools
import operator
import os.path
import re

from .constraints import Constraint, check, convert, parse_bool, parse_float, parse_int, probe
from .faults import DuplicateArgumentError, MissingIdentifierError
from .utils import Unset, coalesce, mirror, rename


class ArgumentKind(enum.Enum):
    """
    how an argument is matched on the command line.
    """
    POSITIONAL = "positional"
    OPTION = "option"
    SWITCH = "switch"


class Preprocess(enum.Flag):
    """
    value transforms applied once per parse, in declaration order of the members.
    """
    NONE = 0
    EXPAND_ENVIRONMENT = enum.auto()
    ABSOLUTE_PATH = enum.auto()


def expand(value, /):
    """
    Expand environment references and the "~" home shorthand in a string value.

    Non-string values are returned untouched.
    """
    if not isinstance(value, str):
        return value
    return os.path.expanduser(os.path.expandvars(value))


def absolute(value, /):
    """
    Resolve a string value to an absolute, normalized path.
    """
    if not isinstance(value, str) or not value:
        return value
    return os.path.abspath(value)


class ArgumentType(type):
    """
    Metaclass publishing the fields of an argument spec as read-only properties.

    Responsibilities
    - Derive __typename__ from the class name ("Argument" -> "argument") for
      messages.
    - Expose every name in __introspectable__ as a property mirroring "_{name}".
    - Provide stable __repr__/__rich_repr__ built from __displayable__ (falls back
      to __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Example
            - argument(name='yourName', identifier='', kind=<ArgumentKind.POSITIONAL: ...>, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the declarative fields of an Argument.

    Rules
    - name: non-empty string after trimming.
    - identifier: string (trimmed, leading dashes removed); required for options
      and switches (MissingIdentifierError otherwise), forced to "" for
      positionals.
    - kind/constraint/preprocess: coerced into their enums.
    - descr: Unset → None; otherwise a non-empty string.
    - transform: Unset or a callable receiving the argument.
    - target: required when the constraint is CONVERTS_TO_TYPE.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    kind = metadata["kind"] = ArgumentKind(metadata["kind"])

    if not isinstance(identifier := metadata["identifier"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'identifier' must be a string")
    identifier = coalesce(identifier, "").strip().lstrip("-")
    if kind is ArgumentKind.POSITIONAL:
        identifier = ""
    elif not identifier:
        raise MissingIdentifierError(f"{cls.__typename__} 'identifier' is required for non-positional argument {name!r}")
    elif re.search(r"[\s:=]", identifier):
        raise ValueError(f"{cls.__typename__} 'identifier' cannot contain whitespace, ':' or '='")
    metadata["identifier"] = identifier

    metadata["constraint"] = Constraint(metadata["constraint"])
    if not isinstance(metadata["preprocess"], Preprocess):
        raise TypeError(f"{cls.__typename__} 'preprocess' must be a Preprocess flag")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if metadata["transform"] is not Unset and not callable(metadata["transform"]):
        raise TypeError(f"{cls.__typename__} 'transform' must be callable")

    if metadata["constraint"] is Constraint.CONVERTS_TO_TYPE and not callable(metadata["target"]):
        raise TypeError(f"{cls.__typename__} constraint {Constraint.CONVERTS_TO_TYPE.value!r} requires a callable 'target'")


class Argument(metaclass=ArgumentType):
    """
    Declarative description of one accepted argument, plus its bound values.

    Fields (read-only properties)
    - name, identifier, kind, index, descr, required, constraint, target, default,
      preprocess, transform, hidden, top_level_only, builtin, id.

    Parse-time state
    - values: raw bound values (strings for positionals/options, True for switches).
    - default: may be rewritten by preprocessing; the declared default is restored
      by reset() before every parse.

    Invariants
    - options and switches always carry a non-empty identifier.
    - index is assigned by the owning registry for positionals only (-1 otherwise).
    """

    __introspectable__ = (
        "name",
        "identifier",
        "kind",
        "index",
        "descr",
        "required",
        "constraint",
        "target",
        "default",
        "preprocess",
        "transform",
        "hidden",
        "top_level_only",
        "builtin",
        "id",
    )

    __displayable__ = (
        "name",
        "identifier",
        "kind",
        "index",
        "required",
        "constraint",
        "default",
        "values",
    )

    def __init__(
            self,
            name,
            /,
            identifier=Unset,
            descr=Unset,
            kind=ArgumentKind.POSITIONAL,
            required=False,
            constraint=Constraint.NONE,
            default=None,
            preprocess=Preprocess.NONE,
            transform=Unset,
            *,
            target=Unset,
            hidden=False,
            top_level_only=False,
            builtin=False
    ):
        """
        Construct an argument spec.

        Parameters
        - name: str
          Positional name, or the value label of an option/switch.
        - identifier: str
          Key matched by -identifier / --identifier; required unless positional.
          Leading dashes are stripped ("--out" and "out" are the same identifier).
        - descr: str
          Help text shown in help and diagnostics.
        - kind: ArgumentKind
        - required: bool
          Reported under "missing" when never bound and without default.
        - constraint: Constraint
          Validation rule; target supplies the type for CONVERTS_TO_TYPE.
        - default: Any
          Effective value when nothing was bound.
        - preprocess: Preprocess
          Flag transforms applied to bound values and to the default.
        - transform: Callable[[Argument], None]
          Custom preprocessing step; receives the whole argument and may rewrite
          any bound value or the default through replace_values()/replace_default().
        - hidden: bool
          Omit from the usage line (still listed in its help section).
        - top_level_only: bool
          Only listed in top-level help.
        - builtin: bool
          Marks the seeded help/version switches.

        Raises
        - MissingIdentifierError: non-positional kind without identifier.
        - TypeError/ValueError: malformed metadata.
        """
        metadata = {
            "name": name,
            "identifier": identifier,
            "kind": kind,
            "descr": descr,
            "required": bool(required),
            "constraint": constraint,
            "target": target,
            "default": default,
            "preprocess": preprocess,
            "transform": transform,
            "hidden": bool(hidden),
            "top_level_only": bool(top_level_only),
            "builtin": bool(builtin),
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._declared = self._default
        self._values = []
        self._processed = 0
        self._defaulted = False
        self._index = -1
        self._id = Unset

    # ── Identity ──────────────────────────────────────────────────────────────
    @property
    def key(self):
        """
        (identifier, name, kind): structural identity used for duplicate detection.
        """
        return self._identifier, self._name, self._kind

    def _register(self, id, index=-1):
        """
        Internal: called once by the owning registry.
        """
        if self._id is not Unset:
            raise DuplicateArgumentError(f"{type(self).__typename__} {self._name!r} is already registered")
        self._id = id
        self._index = index

    # ── Bound values ──────────────────────────────────────────────────────────
    @property
    def values(self):
        return tuple(self._values)

    @property
    def value(self):
        """
        First bound value, or None.
        """
        return self._values[0] if self._values else None

    @property
    def value_or_none(self):
        """
        value ?? default
        """
        return value if (value := self.value) is not None else self._default

    @property
    def exists(self):
        return self.value_or_none is not None

    @property
    def is_default(self):
        return self.value is None and self._default is not None

    @property
    def has_multiple_values(self):
        return len(self._values) > 1

    def add_value(self, value, /):
        self._values.append(value)

    def replace_values(self, values, /):
        """
        Replace every bound value (intended for custom transforms).
        """
        self._values[:] = list(values)

    def replace_default(self, default, /):
        """
        Replace the effective default for the current parse (intended for custom transforms).
        """
        self._default = default

    def reset(self):
        """
        Drop bound values and restore the declared default (start of a parse pass).
        """
        self._values.clear()
        self._default = self._declared
        self._processed = 0
        self._defaulted = False

    def get_value(self):
        """
        Return value ?? default; LookupError when neither is present.
        """
        if (value := self.value_or_none) is None:
            raise LookupError(f"{type(self).__typename__} {self._name!r} has no value")
        return value

    def as_str(self):
        return str(self.get_value())

    def as_int(self):
        return parse_int(self.get_value())

    def as_float(self):
        return parse_float(self.get_value())

    def as_bool(self):
        return parse_bool(self.get_value())

    def as_type(self, target=Unset, /):
        """
        Convert the effective value to target (defaults to the declared target).
        """
        target = coalesce(target, self._target)
        if target is Unset:
            raise TypeError(f"{type(self).__typename__} {self._name!r} has no conversion target")
        return convert(self.get_value(), target)

    # ── Matching support ──────────────────────────────────────────────────────
    def apply_preprocessing(self):
        """
        Run the preprocessing pipeline over values bound since the last call.

        Order: environment expansion, absolute-path resolution, custom transform.
        Flag transforms touch each bound value and the default once per parse;
        the custom transform runs on every call.
        """
        flags = self._preprocess

        def pipeline(value):
            if Preprocess.EXPAND_ENVIRONMENT in flags:
                value = expand(value)
            if Preprocess.ABSOLUTE_PATH in flags:
                value = absolute(value)
            return value

        if flags:
            for position in range(self._processed, len(self._values)):
                self._values[position] = pipeline(self._values[position])
            if not self._defaulted:
                self._default = pipeline(self._default)
        self._processed = len(self._values)
        self._defaulted = True

        if self._transform is not Unset:
            self._transform(self)

    def check_constraints(self, value=Unset, /, *, probe=probe):
        """
        Validate value (defaults to value ?? default) against the constraint.

        Constraint.NONE always passes, even when nothing exists.
        """
        if self._constraint is Constraint.NONE:
            return True
        return check(self._constraint, coalesce(value, self.value_or_none), target=self._target, probe=probe)

    # ── Rendering helpers ─────────────────────────────────────────────────────
    @property
    def use_text(self):
        """
        Usage-line form: -identifier for options/switches, name for positionals.
        """
        if self._kind is ArgumentKind.POSITIONAL:
            return self._name
        return "-" + self._identifier

    @property
    def label(self):
        """
        Help-section form: name, identifier:name, or identifier[, name].
        """
        match self._kind:
            case ArgumentKind.POSITIONAL:
                return self._name
            case ArgumentKind.OPTION:
                return f"{self._identifier}:{self._name}"
            case ArgumentKind.SWITCH:
                return self._identifier if self._identifier == self._name else f"{self._identifier}, {self._name}"

    def __str__(self):
        return str(value) if (value := self.value_or_none) is not None else ""


def positional(name, /, descr=Unset, *, required=False, constraint=Constraint.NONE, default=None,
               preprocess=Preprocess.NONE, transform=Unset, target=Unset, hidden=False):
    """
    Build a positional argument (bound by order).
    """
    return Argument(
        name, Unset, descr, ArgumentKind.POSITIONAL, required, constraint, default, preprocess, transform,
        target=target, hidden=hidden
    )


def option(identifier, name, /, descr=Unset, *, required=False, constraint=Constraint.NONE, default=None,
           preprocess=Preprocess.NONE, transform=Unset, target=Unset, hidden=False):
    """
    Build an option (-identifier=value, --name:value).
    """
    return Argument(
        name, identifier, descr, ArgumentKind.OPTION, required, constraint, default, preprocess, transform,
        target=target, hidden=hidden
    )


def switch(identifier, name=Unset, /, descr=Unset, *, required=False, constraint=Constraint.NONE,
           transform=Unset, hidden=False, top_level_only=False):
    """
    Build a switch (-identifier, --name). name defaults to the identifier.
    """
    return Argument(
        coalesce(name, identifier), identifier, descr, ArgumentKind.SWITCH, required, constraint, None,
        Preprocess.NONE, transform, hidden=hidden, top_level_only=top_level_only
    )


def help_switch():
    """
    Fresh built-in help switch (one per registry).
    """
    return Argument("help", "help", "Show help", ArgumentKind.SWITCH, hidden=True, builtin=True)


def version_switch(*, top_level_only=False):
    """
    Fresh built-in version switch (one per registry).
    """
    return Argument(
        "version", "version", "Show version", ArgumentKind.SWITCH,
        hidden=True, top_level_only=top_level_only, builtin=True
    )


__all__ = (
    # Types
    "ArgumentKind",
    "Preprocess",
    "Argument",

    # Factories
    "positional",
    "option",
    "switch",
    "help_switch",
    "version_switch",

    # Transforms
    "expand",
    "absolute",
)
