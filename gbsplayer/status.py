"""Player state, metadata and channel status shared by the player and plugins."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

GBS_LEN_SHIFT = 10
GBS_LEN_DIV = 1 << GBS_LEN_SHIFT

_LN2 = 0.69314718055994530941
_MAGIC = 5.78135971352465960412
_FREQ_BASE = 262144


class LoopMode(enum.IntEnum):
    """How playback continues once a subsong has finished."""

    OFF = 0
    RANGE = 1
    SINGLE = 2

    def next(self) -> LoopMode:
        """Return the mode that follows this one, wrapping around."""
        members = list(LoopMode)
        return members[(members.index(self) + 1) % len(members)]


class FilterType(enum.IntEnum):
    """High-pass filter emulating a hardware variant."""

    OFF = 0
    DMG = 1
    CGB = 2


@dataclass
class ChannelStatus:
    """Current state of one of the four sound channels."""

    mute: bool = False
    vol: int = 0
    div_tc: int = 0
    playing: bool = False


def _four_channels() -> list[ChannelStatus]:
    return [ChannelStatus() for _ in range(4)]


@dataclass
class PlayerStatus:
    """State of the player routine.

    ``subsong_len`` is measured in units of 1/GBS_LEN_DIV seconds.
    """

    songtitle: str = ""
    subsong: int = 0
    subsong_len: int = 0
    songs: int = 0
    defaultsong: int = 0
    lvol: int = 0
    rvol: int = 0
    ticks: int = 0
    loop_mode: LoopMode = LoopMode.OFF
    channels: list[ChannelStatus] = field(default_factory=_four_channels)


@dataclass(frozen=True)
class Metadata:
    """Static information about a GBS file."""

    title: str = ""
    author: str = ""
    copyright: str = ""


@dataclass
class OutputBuffer:
    """Buffer of rendered 16-bit stereo samples.

    ``size`` is the capacity in bytes, ``pos`` the number of stereo frames
    rendered so far.
    """

    size: int = 8192
    pos: int = 0
    data: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.data = bytearray(self.size)

    @property
    def frames(self) -> int:
        """Number of stereo frames the buffer can hold."""
        return self.size // 4

    def filled(self) -> bytes:
        """Return the bytes of the frames rendered so far."""
        return bytes(self.data[: self.pos * 4])


def note(div: int) -> int:
    """Return the note number for a channel frequency divider.

    Raises ValueError when the divider does not give a positive frequency.
    """
    if div <= 0:
        raise ValueError(f"divider must be positive, got {div}")
    freq = _FREQ_BASE // div
    if freq == 0:
        raise ValueError(f"divider {div} gives no audible frequency")
    return int((math.log(freq) / _LN2 - _MAGIC) * 12 + 0.2)