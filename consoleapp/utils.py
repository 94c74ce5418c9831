"""
consoleapp utilities (internal helpers shared by the argument and command layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None (None is a
    legitimate default for arguments).
- coalesce(value, default=None)
  • Replace Unset with a concrete default while preserving None/0/""/[].
- rename("name")
  • Give generated callables a stable __name__/__qualname__.
- mirror("attr")
  • Read-only property publishing a private backing field (self._attr); containers
    are handed out as tuples/dicts copies so callers cannot reshape the owner.
- pluralize(text)
  • English pluralizer for section labels ("switch" -> "switches").
- palette(defaults) / stylize(fragment, style, colorful=...)
  • Style lookup honoring __main__.__styles__, and Text normalization that strips
    styles when output is not colorful.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> pluralize("switch")
    'switches'
"""
import builtins
import functools
import re
from collections import defaultdict
from collections.abc import Mapping, Set
from typing import final

from rich.text import Text


@final
class UnsetType:
    """
    Sentinel type representing a parameter that was not provided.

    Characteristics
    - Boolean-false, but distinct from None and 0.
    - repr(Unset) -> "Unset".
    - Singleton: UnsetType() always yields the same instance.
    - Sealed: subclassing raises TypeError.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is the Unset sentinel, in which case return default.

    Falsey values such as None, 0 or "" are preserved; only Unset is replaced.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator assigning a stable __name__/__qualname__ to a generated callable.

    Example
        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(callable):
        if not builtins.callable(callable):
            raise TypeError("@rename() must be applied to a callable")
        try:
            callable.__qualname__ = name
            callable.__name__ = name
        except (AttributeError, TypeError):
            raise TypeError("@rename() must be applied to an updatable callable") from None
        return callable

    return wrapper


def _freeze(object):
    """
    Copy container values so the returned view cannot reshape the owner.

    - list/tuple → tuple, set → frozenset, mapping → dict copy.
    - Anything else (including strings) is returned as-is.
    """
    if isinstance(object, list | tuple):
        return tuple(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property reading the private backing field "_{name}".

    Example
        class X:
            _items = [1, 2]
            items = mirror("items")

        X().items  # (1, 2)
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(text, /):
    """
    Best-effort English pluralizer; only the last word of a phrase is changed.

    Examples
    - pluralize("switch")     -> "switches"
    - pluralize("option")     -> "options"
    - pluralize("Argument")   -> "Arguments"
    - pluralize("category")   -> "categories"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")

    if not (match := re.search(r"(\S+)(\s*)$", text)):
        return text

    head, last, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = last.lower()

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    # Keep the casing style of the original word.
    if last.isupper():
        plural = plural.upper()
    elif last[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


def palette(defaults, /):
    """
    Merge a default style palette with the host overrides in __main__.__styles__.

    Unknown keys resolve to "" (no style) so renderers can ask for any entry.
    """
    styles = getattr(__import__("__main__"), "__styles__", {})
    if not isinstance(styles, Mapping):
        raise TypeError("__main__.__styles__ must be a mapping")
    return defaultdict(str, {**defaults, **styles})


def stylize(fragment, style="", /, *, colorful=False):
    """
    Normalize a fragment to rich Text; styles only apply when colorful is True.
    """
    if isinstance(fragment, Text):
        return fragment.copy() if colorful else Text(fragment.plain)
    return Text(str(fragment), style if colorful else "")


Unset = UnsetType()
"""
Sentinel for "not provided". Use as a parameter default when None is a valid
user value; materialize with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "palette",
    "stylize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
