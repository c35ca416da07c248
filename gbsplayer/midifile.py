"""Writing single-track standard MIDI files, one per subsong."""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

FILENAME_PATTERN = "gbsplay-{}.mid"
DIVISION = 124
END_OF_TRACK = b"\xff\x2f\x00"
CYCLE_SHIFT = 14

_ULONG_MASK = (1 << 64) - 1


def encode_varlen(value: int) -> bytes:
    """Encode a delta time as a MIDI variable-length quantity of at most 4 bytes."""
    value &= _ULONG_MASK
    groups = []
    for _ in range(4):
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
        if not value:
            break
    groups[0] &= 0x7F
    return bytes(reversed(groups))


class MidiTrackWriter:
    """Writes note, pan and end-of-track events into ``gbsplay-<n>.mid`` files."""

    def __init__(self, directory: Union[str, os.PathLike] = ".") -> None:
        self.directory = Path(directory)
        self.path: Optional[Path] = None
        self.track_length = 0
        self.cycles_prev = 0
        self.notes = [0, 0, 0, 0]
        self._file: Optional[BinaryIO] = None
        self._length_offset = 0

    @property
    def is_open(self) -> bool:
        """Whether a track file is currently being written."""
        return self._file is not None

    def open_track(self, subsong: int) -> None:
        """Create the file for ``subsong`` and write the headers."""
        path = self.directory / FILENAME_PATTERN.format(subsong + 1)
        handle = open(path, "wb")
        try:
            handle.write(b"MThd")
            handle.write((6).to_bytes(4, "big"))
            handle.write((0).to_bytes(2, "big"))
            handle.write((1).to_bytes(2, "big"))
            handle.write(DIVISION.to_bytes(2, "big"))
            handle.write(b"MTrk")
            self._length_offset = handle.tell()
            handle.write((0).to_bytes(4, "big"))
        except OSError:
            handle.close()
            raise
        self.track_length = 0
        self.path = path
        self._file = handle

    def write_event(self, cycles: int, event: bytes) -> None:
        """Write ``event`` preceded by the delta time since the previous event."""
        if self._file is None:
            raise RuntimeError("no MIDI track is open")
        delta = encode_varlen((cycles - self.cycles_prev) >> CYCLE_SHIFT)
        self._file.write(delta)
        self._file.write(event)
        self.track_length += len(delta) + len(event)
        self.cycles_prev = cycles

    def note_on(self, cycles: int, channel: int, note: int, velocity: int) -> None:
        """Start ``note`` on ``channel``."""
        self.write_event(cycles, bytes([0x90 | channel, note, velocity]))
        self.notes[channel] = note

    def note_off(self, cycles: int, channel: int) -> None:
        """Stop the note sounding on ``channel``, if any."""
        if not self.notes[channel]:
            return
        self.write_event(cycles, bytes([0x80 | channel, self.notes[channel], 0]))
        self.notes[channel] = 0

    def pan(self, cycles: int, channel: int, value: int) -> None:
        """Set the stereo position of ``channel`` (0 left, 127 right)."""
        self.write_event(cycles, bytes([0xB0 | channel, 0x0A, value]))

    def close_track(self) -> None:
        """Write the end-of-track event, fill in the length and close the file."""
        handle = self._file
        if handle is None:
            raise RuntimeError("no MIDI track is open")
        try:
            self.write_event(self.cycles_prev, END_OF_TRACK)
            handle.seek(self._length_offset)
            handle.write(self.track_length.to_bytes(4, "big"))
        finally:
            handle.close()
            self._file = None

    def start(self, subsong: int) -> None:
        """Finish the current track, if any, and begin one for ``subsong``."""
        self.cycles_prev = 0
        if self.is_open:
            self.close_track()
        self.open_track(subsong)

    def finish(self) -> None:
        """Silence all channels and close the current track, if any."""
        if not self.is_open:
            return
        for channel in range(4):
            self.note_off(self.cycles_prev + 1, channel)
        self.close_track()