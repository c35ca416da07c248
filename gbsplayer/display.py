"""Text rendering of the player state for the terminal front end."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from gbsplayer.status import ChannelStatus, LoopMode, PlayerStatus, note

MAXOCTAVE = 9

_VOLUME_GLYPHS = " -=#%"
_NOISE_CHANNEL = 3
_CURSOR_UP = "\033[A"


class _TimeLike(Protocol):
    played_min: int
    played_sec: int
    total_min: int
    total_sec: int


def _build_note_names() -> tuple[str, ...]:
    names = []
    for i in range(MAXOCTAVE * 12):
        n = i % 12
        n += (n > 2) + (n > 7)
        letter = chr(ord("A") + (n >> 1))
        accidental = "#" if n & 1 else "-"
        names.append(f"{letter}{accidental}{i // 12}")
    return tuple(names)


_NOTE_NAMES = _build_note_names()


def note_index(div: int) -> int:
    """Return the index of the note played at divider ``div``, clamped to the table.

    Notes above the table map to ``MAXOCTAVE - 1``, as the player always did.
    """
    n = 0
    if div > 0:
        try:
            n = note(div)
        except ValueError:
            n = 0
    if n < 0:
        n = 0
    elif n >= MAXOCTAVE * 12:
        n = MAXOCTAVE - 1
    return n


def note_name(index: int) -> str:
    """Return the three-character name of note ``index`` such as ``C#4``."""
    if not 0 <= index < len(_NOTE_NAMES):
        raise ValueError(f"note index {index} out of range 0-{len(_NOTE_NAMES) - 1}")
    return _NOTE_NAMES[index]


def note_string(channel: ChannelStatus, index: int) -> str:
    """Return the note column for channel number ``index``."""
    if channel.mute:
        return "-M-"
    if channel.vol == 0:
        return "---"
    if index == _NOISE_CHANNEL:
        return "nse"
    return note_name(note_index(channel.div_tc))


def volume_bar(volume: int) -> str:
    """Return a four-character bar for a volume in 0-15 (values are clamped)."""
    remaining = max(0, min(15, volume))
    chars = []
    for _ in range(4):
        if remaining >= 4:
            chars.append(_VOLUME_GLYPHS[4])
            remaining -= 4
        else:
            chars.append(_VOLUME_GLYPHS[remaining])
            remaining = 0
    return "".join(chars)


def reverse_bar(bar: str) -> str:
    """Return a volume bar mirrored, for the left channel."""
    return bar[::-1]


def loop_mode_label(mode: LoopMode) -> str:
    """Return the suffix shown in the status line for a loop mode."""
    if mode == LoopMode.RANGE:
        return " [loop range]"
    if mode == LoopMode.SINGLE:
        return " [loop single]"
    return ""


def format_status(status: PlayerStatus, time: _TimeLike, paused: bool, verbosity: int) -> str:
    """Render the status lines, overwriting the previous ones on screen."""
    parts = [
        "\r" + _CURSOR_UP * 2,
        f"Song {status.subsong + 1:3d}/{status.songs:3d}"
        f"{' [Paused]' if paused else ''}{loop_mode_label(status.loop_mode)}"
        f" ({status.songtitle})\033[K\n",
        f"{time.played_min:02d}:{time.played_sec:02d}/"
        f"{time.total_min:02d}:{time.total_sec:02d}",
    ]
    if verbosity > 2:
        columns = "  ".join(
            f"{note_string(ch, i)} {volume_bar(ch.vol)}"
            for i, ch in enumerate(status.channels[:4])
        )
        left = reverse_bar(volume_bar(int(status.lvol / 1024)))
        right = volume_bar(int(status.rvol / 1024))
        parts.append(f"  {columns}  [{left}|{right}]\n")
    else:
        parts.append("\n")
    return "".join(parts)


def format_registers(peek: Callable[[int], int]) -> str:
    """Render a dump of the sound registers read through ``peek``."""
    lines = []
    for channel in range(4):
        base = 0xFF10 + channel * 5
        values = " ".join(f"{peek(base + k):02x}" for k in range(5))
        lines.append(f"CH{channel + 1}: {values}")
    misc = " ".join(f"{peek(addr):02x}" for addr in range(0xFF24, 0xFF27))
    lines.append(f"MISC: {misc}")
    wave = "".join(f"{peek(0xFF30 + k):02x}" for k in range(16))
    lines.append(f"WAVE: {wave}")
    return "\n".join(lines) + "\n" + _CURSOR_UP * 6


def commands_text() -> str:
    """Return the help line listing the interactive keys."""
    return (
        "\ncommands:  [p]revious subsong   [n]ext subsong   [q]uit player\n"
        "           [ ] pause/resume   [1-4] mute channel   [l]oop mode"
    )