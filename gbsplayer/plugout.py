"""Interface implemented by every sound output plugin."""

from __future__ import annotations

import enum
from collections.abc import Sequence

from gbsplayer.status import ChannelStatus

HOOKS = ("open", "skip", "pause", "io", "step", "write", "close")


class Endian(enum.IntEnum):
    """Byte order requested for 16-bit sample output."""

    BIG = 0
    LITTLE = 1
    NATIVE = 2


class OutputPlugin:
    """Base class for output plugins.

    Every hook does nothing by default; ``implements`` tells which hooks a
    plugin really provides, so a player only wires up those.
    """

    name = ""
    description = ""
    uses_stdout = False

    def implements(self, hook: str) -> bool:
        """Return whether this plugin overrides the named hook."""
        if hook not in HOOKS:
            raise AttributeError(f"unknown plugin hook {hook!r}")
        return getattr(type(self), hook) is not getattr(OutputPlugin, hook)

    def open(self, endian: Endian, rate: int, buffer_bytes: int) -> int:
        """Prepare output and return the buffer size in bytes it wants.

        Raises OSError when the output cannot be opened.
        """
        return buffer_bytes

    def skip(self, subsong: int) -> None:
        """Called when playback switches to another subsong."""

    def pause(self, paused: bool) -> None:
        """Called when playback is paused or resumed."""

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Called for every write to a sound register."""

    def step(self, cycles: int, channels: Sequence[ChannelStatus]) -> None:
        """Called after every emulated instruction with the channel states."""

    def write(self, data: bytes) -> int:
        """Consume rendered samples and return the number of bytes taken."""
        return len(data)

    def close(self) -> None:
        """Release the output."""