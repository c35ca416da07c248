"""Registry of the available output plugins."""

from __future__ import annotations

from typing import TextIO

from gbsplayer.altmidi import AltMidiPlugin
from gbsplayer.midi import MidiPlugin
from gbsplayer.plugout import OutputPlugin
from gbsplayer.streams import IoDumperPlugin, StdoutPlugin

_PLUGINS = (StdoutPlugin, MidiPlugin, AltMidiPlugin, IoDumperPlugin)

DEFAULT_PLUGIN = _PLUGINS[0].name


def available_plugins() -> list[OutputPlugin]:
    """Return a fresh instance of every plugin, in order of preference."""
    return [plugin() for plugin in _PLUGINS]


def select_by_name(name: str) -> OutputPlugin:
    """Return a new instance of the plugin called ``name``.

    Raises ValueError when no plugin has that name.
    """
    for plugin in _PLUGINS:
        if plugin.name == name:
            return plugin()
    raise ValueError(f'"{name}" is not a known output plugin.')


def list_plugins(out: TextIO) -> None:
    """Write the names and descriptions of all plugins to ``out``."""
    out.write("Available output plugins:\n\n")
    if not _PLUGINS:
        out.write("No output plugins available.\n\n")
        return
    for plugin in _PLUGINS:
        out.write(f"{plugin.name:<8} - {plugin.description}\n")
    out.write("\n")