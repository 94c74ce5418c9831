"""
consoleapp entry program provider.

entry() answers "what is this program called and which version is it" for apps
that do not name themselves. It is resolved once per process:
- name: __main__.__prog__, else the basename of sys.argv[0] without ".py".
- version: __main__.__version__, else the installed distribution version of
  that name, else "0.0".

Versions are shortened to major.minor, keeping the third component only when
it is greater than zero ("1.2.0" -> "1.2", "1.2.3" -> "1.2.3").
"""
import functools
import importlib.metadata
import os.path
import re
import sys
from collections import namedtuple

Entry = namedtuple("Entry", ("name", "version"))


def short_version(version, /):
    """
    Normalize a version string to major.minor[.build when build > 0].

    Strings that do not start with numeric components are returned unchanged.
    """
    version = str(version).strip()
    if not (match := re.match(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?", version)):
        return version
    major, minor, build = match.groups()
    text = f"{int(major)}.{int(minor or 0)}"
    if build is not None and int(build) > 0:
        text += f".{int(build)}"
    return text


def _name(main):
    if prog := getattr(main, "__prog__", None):
        return str(prog)
    name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    if name.endswith(".py"):
        name = name[:-3]
    return name or "app"


def _version(main, name):
    if version := getattr(main, "__version__", None):
        return short_version(version)
    try:
        return short_version(importlib.metadata.version(name))
    except (importlib.metadata.PackageNotFoundError, ValueError):
        return "0.0"


@functools.cache
def entry():
    """
    Entry program (name, version) of the running process.
    """
    main = __import__("__main__")
    name = _name(main)
    return Entry(name, _version(main, name))


__all__ = (
    "Entry",
    "entry",
    "short_version",
)
