"""
consoleapp help renderer.

Builds help and version text from a registry alone (no parse required). The
output is a rich Text: .plain is the deterministic text, and styles from the
palette are attached when colorful is True.

Layout
    <title>
    Usage: <name> <switches> <options> <positionals>

    Commands:
     <name> - <title>

    Switches:
     <label> - <descr>

    Options:
     <identifier>:<name> - <descr>

    Arguments:
     <name> - <descr>

- Usage items: "-identifier" for switches/options, the bare name for positionals
  (wrapped in brackets when optional). Hidden specs (the built-ins) are left out
  of the usage line but keep their section entry.
- Commands of a command-based app are listed before the argument sections and
  the usage line reads "<name> command [arguments]".
- Inside a command (nested registry) top-level-only specs are not listed.

Palette keys (override through __main__.__styles__)
- title, usage-label, program-name, usage-section, section-label, argument-label,
  argument-description, command-name, command-title, version-separator,
  program-version.
"""
from rich.text import Text

from .arguments import ArgumentKind
from .utils import Unset, palette, pluralize, stylize

_STYLES = {
    "title": "italic #A3A3A3",
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "section-label": "bold #FFFFFF",
    "argument-label": "bold #22C55E",
    "argument-description": "#9CA3AF",
    "command-name": "bold #36C5F0",
    "command-title": "#9CA3AF",
    "version-separator": "#737373",
    "program-version": "bold #00E6FF",
}

_SECTIONS = (
    (ArgumentKind.SWITCH, "Switch"),
    (ArgumentKind.OPTION, "Option"),
    (ArgumentKind.POSITIONAL, "Argument"),
)


def usage_items(registry, /):
    """
    The usage-line items in order: switches, options, then positionals by index.
    """
    items = []
    for kind, _ in _SECTIONS:
        for argument in registry.of(kind):
            if argument.hidden:
                continue
            if kind is ArgumentKind.POSITIONAL and not argument.required:
                items.append(f"[{argument.use_text}]")
            else:
                items.append(argument.use_text)
    return items


def usage_text(name, registry, /, *, commands=False):
    """
    "<name> <items>" or "<name> command [arguments]" for command-based apps.
    """
    items = ["command [arguments]"] if commands else usage_items(registry)
    return " ".join([name, *items])


def render_help(name, registry, /, *, title=Unset, label="Usage", commands=(), colorful=False):
    """
    Render help for one registry.

    Parameters
    - name: program or command name shown on the usage line.
    - registry: ArgumentRegistry to describe.
    - title: optional first line.
    - label: "Usage" for apps, "Command" for commands.
    - commands: Commands of a command-based app (listed before the argument sections).
    - colorful: attach palette styles.

    Returns
    - rich.text.Text
    """
    styles = palette(_STYLES)

    def text(fragment, style):
        return stylize(fragment, styles[style], colorful=colorful)

    lines = []
    if title:
        lines.append(text(title, "title"))

    lines.append(Text.assemble(
        text(label, "usage-label"), ": ",
        text(name, "program-name"),
        *((" ", text(rest, "usage-section")) if (rest := usage_text(name, registry, commands=bool(commands))[len(name) + 1:]) else ()),
    ))

    if commands:
        lines.append(Text())
        lines.append(Text.assemble(text("Commands", "section-label"), ":"))
        for command in commands:
            entry = Text.assemble(" ", text(command.name, "command-name"))
            if command.title:
                entry.append_text(Text.assemble(" - ", text(command.title, "command-title")))
            lines.append(entry)

    for kind, section in _SECTIONS:
        arguments = [
            argument for argument in registry.of(kind)
            if not (registry.nested and argument.top_level_only)
        ]
        if not arguments:
            continue
        lines.append(Text())
        lines.append(Text.assemble(text(pluralize(section), "section-label"), ":"))
        for argument in arguments:
            entry = Text.assemble(" ", text(argument.label, "argument-label"))
            if argument.descr:
                entry.append_text(Text.assemble(" - ", text(argument.descr, "argument-description")))
            lines.append(entry)

    return Text("\n").join(lines)


def render_version(name, version, /, *, title=Unset, colorful=False):
    """
    "<name> — <title> (v<version>)", or "<name> (v<version>)" without title.
    """
    styles = palette(_STYLES)

    def text(fragment, style):
        return stylize(fragment, styles[style], colorful=colorful)

    rendered = Text.assemble(text(name, "program-name"))
    if title:
        rendered.append_text(Text.assemble(text(" — ", "version-separator"), text(title, "title")))
    rendered.append_text(Text.assemble(" (", text(f"v{version}", "program-version"), ")"))
    return rendered


__all__ = (
    "usage_items",
    "usage_text",
    "render_help",
    "render_version",
)
