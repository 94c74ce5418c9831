"""
consoleapp constraint validator.

A constraint is a named validation rule applied to a bound value. check() is a
pure predicate: it receives the candidate value (after preprocessing, already
resolved to value ?? default) and returns True/False. Nothing here raises for
bad user input.

Filesystem constraints go through a FileSystemProbe so hosts and tests can
replace the os.path-backed default.
"""
import enum
import os.path
import re
import urllib.parse
from enum import StrEnum

from .utils import Unset


class Constraint(StrEnum):
    """
    validation rules accepted by an argument (at most one per argument).

    The member values are the labels shown in diagnostics
    ("Bad arguments ... - NotEmptyOrWhiteSpace: ").
    """
    NONE = "None"
    NOT_EMPTY = "NotEmpty"
    NOT_WHITE_SPACE = "NotWhiteSpace"
    NOT_EMPTY_OR_WHITE_SPACE = "NotEmptyOrWhiteSpace"
    IS_INTEGER = "IsInteger"
    IS_UNSIGNED_INTEGER = "IsUnsignedInteger"
    IS_DOUBLE = "IsDouble"
    IS_BOOLEAN = "IsBoolean"
    FILE_EXISTS = "FileExists"
    FILE_DOES_NOT_EXIST = "FileDoesNotExist"
    DIRECTORY_EXISTS = "DirectoryExists"
    DIRECTORY_DOES_NOT_EXIST = "DirectoryDoesNotExist"
    IS_URL = "IsUrl"
    CONVERTS_TO_TYPE = "ConvertsToType"


class FileSystemProbe:
    """
    existence checks used by the path constraints (backed by os.path).
    """

    def is_file(self, path):
        return os.path.isfile(path)

    def is_directory(self, path):
        return os.path.isdir(path)


probe = FileSystemProbe()


_INTEGER = re.compile(r"\s*[+-]?\d+\s*")
_UNSIGNED = re.compile(r"\s*\+?\d+\s*")
_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")


def parse_int(value, /):
    """
    Parse a signed integer from its canonical string form; ValueError otherwise.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid integer: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    return int(value)


def parse_float(value, /):
    """
    Parse a floating-point number; ValueError otherwise.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid number: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str) or "_" in value:
        raise ValueError(f"invalid number: {value!r}")
    return float(value)


def parse_bool(value, /):
    """
    Parse "true"/"false" case-insensitively (surrounding whitespace ignored).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        match value.strip().lower():
            case "true":
                return True
            case "false":
                return False
    raise ValueError(f"invalid boolean: {value!r}")


def convert(value, target, /):
    """
    Convert value to target.

    - enum types match member names case-insensitively;
    - bool follows parse_bool;
    - int/float follow parse_int/parse_float;
    - any other callable target is applied to the value as-is.
    """
    if isinstance(target, type) and isinstance(value, target) and not isinstance(value, str):
        return value
    if isinstance(target, enum.EnumMeta):
        if isinstance(value, str):
            for name, member in target.__members__.items():
                if name.lower() == value.strip().lower():
                    return member
        raise ValueError(f"{value!r} is not a member of {target.__name__}")
    if target is bool:
        return parse_bool(value)
    if target is int:
        return parse_int(value)
    if target is float:
        return parse_float(value)
    return target(value)


def _is_url(value):
    parts = urllib.parse.urlsplit(value.strip())
    return bool(parts.scheme and _SCHEME.fullmatch(parts.scheme) and (parts.netloc or parts.path))


def check(constraint, value, /, *, target=Unset, probe=probe):
    """
    Evaluate one constraint against a candidate value.

    Parameters
    - constraint: Constraint
    - value: the effective value (bound value, else default), possibly None.
    - target: type used by CONVERTS_TO_TYPE.
    - probe: FileSystemProbe used by the path constraints.

    Returns
    - bool: True when the value passes. Constraint.NONE always passes.
    """
    match Constraint(constraint):
        case Constraint.NONE:
            return True
        case Constraint.NOT_EMPTY:
            return isinstance(value, str) and value != ""
        case Constraint.NOT_WHITE_SPACE | Constraint.NOT_EMPTY_OR_WHITE_SPACE:
            # An empty string counts as all-whitespace for both rules.
            return isinstance(value, str) and value.strip() != ""
        case Constraint.IS_INTEGER:
            return _passes(parse_int, value)
        case Constraint.IS_UNSIGNED_INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value >= 0
            return isinstance(value, str) and bool(_UNSIGNED.fullmatch(value))
        case Constraint.IS_DOUBLE:
            return _passes(parse_float, value)
        case Constraint.IS_BOOLEAN:
            return _passes(parse_bool, value)
        case Constraint.FILE_EXISTS:
            return isinstance(value, str) and probe.is_file(value)
        case Constraint.FILE_DOES_NOT_EXIST:
            return isinstance(value, str) and not probe.is_file(value)
        case Constraint.DIRECTORY_EXISTS:
            return isinstance(value, str) and probe.is_directory(value)
        case Constraint.DIRECTORY_DOES_NOT_EXIST:
            return isinstance(value, str) and not probe.is_directory(value)
        case Constraint.IS_URL:
            return isinstance(value, str) and _is_url(value)
        case Constraint.CONVERTS_TO_TYPE:
            if target is Unset:
                raise TypeError("constraint 'ConvertsToType' requires a 'target' type")
            if value is None:
                return False
            return _passes(lambda x: convert(x, target), value)


def _passes(parser, value):
    try:
        parser(value)
    except (TypeError, ValueError, OverflowError):
        return False
    return True


__all__ = (
    "Constraint",
    "FileSystemProbe",
    "probe",
    "check",
    "convert",
    "parse_int",
    "parse_float",
    "parse_bool",
)
