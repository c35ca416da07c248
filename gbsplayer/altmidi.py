"""Alternative MIDI output driven by the per-step channel status."""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import Optional, Union

from gbsplayer.midifile import MidiTrackWriter
from gbsplayer.plugout import Endian, OutputPlugin
from gbsplayer.status import ChannelStatus, note


def _midi_note(div: int) -> Optional[int]:
    try:
        midi_note = note(div) + 21
    except ValueError:
        return None
    return midi_note if 0 <= midi_note < 0x80 else None


def _pan_value(value: int, channel: int) -> int:
    bits = (value >> channel) & 0x11
    if bits == 0x10:
        return 0
    if bits == 0x01:
        return 127
    return 64


class AltMidiPlugin(OutputPlugin):
    """Writes one MIDI file per subsong, following which channels are playing."""

    name = "altmidi"
    description = "alternative MIDI file writer"

    def __init__(self, directory: Union[str, os.PathLike] = ".") -> None:
        self.writer = MidiTrackWriter(directory)
        self._volume = [0, 0, 0, 0]
        self._playing = [False, False, False, False]

    def open(self, endian: Endian, rate: int, buffer_bytes: int) -> int:
        return buffer_bytes

    def skip(self, subsong: int) -> None:
        self.writer.start(subsong)

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Track volume, trigger and pan registers; ignored while no track is open."""
        writer = self.writer
        if not writer.is_open:
            return
        chan = (addr - 0xFF10) // 5
        if addr in (0xFF12, 0xFF17):
            self._volume[chan] = 8 * (value >> 4)
        elif addr in (0xFF14, 0xFF19, 0xFF1E):
            if value & 0x80:
                writer.note_off(cycles, chan)
                self._playing[chan] = False
        elif addr == 0xFF1C:
            self._volume[2] = 32 * ((4 - (value >> 5)) & 3)
        elif addr == 0xFF25:
            for channel in range(4):
                writer.pan(cycles, channel, _pan_value(value, channel))

    def step(self, cycles: int, channels: Sequence[ChannelStatus]) -> None:
        """Start, change or stop notes of channels 1-3; ignored while no track is open."""
        writer = self.writer
        if not writer.is_open:
            return
        for c, channel in enumerate(channels[:3]):
            if self._playing[c]:
                if channel.playing:
                    new_note = _midi_note(channel.div_tc)
                    if new_note != writer.notes[c]:
                        writer.note_off(cycles, c)
                        if new_note is None:
                            continue
                        writer.note_on(cycles, c, new_note, self._volume[c])
                else:
                    writer.note_off(cycles, c)
                    self._playing[c] = False
            elif channel.playing:
                new_note = _midi_note(channel.div_tc)
                if new_note is None:
                    continue
                writer.note_on(cycles, c, new_note, self._volume[c])
                self._playing[c] = True

    def close(self) -> None:
        self.writer.finish()