"""MIDI file output driven by writes to the sound registers."""

from __future__ import annotations

import os
from typing import Optional, Union

from gbsplayer.midifile import MidiTrackWriter
from gbsplayer.plugout import Endian, OutputPlugin
from gbsplayer.status import note


def _note_for_div(div: int) -> int:
    return note(2048 - div) + 21


def _playable(midi_note: int) -> bool:
    return 0 <= midi_note < 0x80


def _pan_value(value: int, channel: int) -> int:
    bits = (value >> channel) & 0x11
    if bits == 0x10:
        return 0
    if bits == 0x01:
        return 127
    return 64


class MidiPlugin(OutputPlugin):
    """Writes one MIDI file per subsong from the register writes of channels 1-3."""

    name = "midi"
    description = "MIDI file writer"

    def __init__(self, directory: Union[str, os.PathLike] = ".") -> None:
        self.writer = MidiTrackWriter(directory)
        self._div = [0, 0, 0, 0]
        self._volume = [0, 0, 0, 0]
        self._running = [False, False, False, False]
        self._master = [False, False, False, False]

    def open(self, endian: Endian, rate: int, buffer_bytes: int) -> int:
        return buffer_bytes

    def skip(self, subsong: int) -> None:
        self.writer.start(subsong)

    def _retrigger(self, cycles: int, chan: int, new_note: int) -> None:
        if new_note != self.writer.notes[chan]:
            self.writer.note_off(cycles, chan)
            if _playable(new_note):
                self.writer.note_on(cycles, chan, new_note, self._volume[chan])

    def _resume(self, cycles: int, chan: int, div_chan: int) -> None:
        if self._running[chan] and not self.writer.notes[chan]:
            new_note = _note_for_div(self._div[div_chan])
            if _playable(new_note):
                self.writer.note_on(cycles, chan, new_note, self._volume[chan])

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Track register writes; ignored while no track is open."""
        writer: Optional[MidiTrackWriter] = self.writer
        if not writer.is_open:
            return
        chan = (addr - 0xFF10) // 5

        if addr in (0xFF12, 0xFF17):
            self._volume[chan] = 8 * (value >> 4)
            self._master[chan] = (value & 0xF8) != 0
            if not self._master[chan] and self._running[chan]:
                writer.note_off(cycles, chan)
                self._running[chan] = False
            if self._volume[chan]:
                self._resume(cycles, chan, chan)
            else:
                writer.note_off(cycles, chan)
        elif addr in (0xFF13, 0xFF18, 0xFF1D):
            self._div[chan] = (self._div[chan] & 0xFF00) | value
            if self._running[chan]:
                self._retrigger(cycles, chan, _note_for_div(self._div[chan]))
        elif addr in (0xFF14, 0xFF19, 0xFF1E):
            self._div[chan] = (self._div[chan] & 0x00FF) | ((value & 7) << 8)
            new_note = _note_for_div(self._div[chan])
            if value & 0x80:
                writer.note_off(cycles, chan)
                if not _playable(new_note):
                    return
                if self._master[chan]:
                    writer.note_on(cycles, chan, new_note, self._volume[chan])
                    self._running[chan] = True
            elif self._running[chan]:
                self._retrigger(cycles, chan, new_note)
        elif addr == 0xFF1A:
            self._master[2] = (value & 0x80) == 0x80
            if not self._master[2] and self._running[2]:
                writer.note_off(cycles, 2)
                self._running[2] = False
        elif addr == 0xFF1C:
            self._volume[2] = 32 * ((4 - (value >> 5)) & 3)
            if self._volume[2]:
                self._resume(cycles, 2, chan)
            else:
                writer.note_off(cycles, 2)
        elif addr == 0xFF25:
            for channel in range(4):
                writer.pan(cycles, channel, _pan_value(value, channel))
        elif addr == 0xFF26:
            if not value & 0x80:
                for channel in range(4):
                    self._div[channel] = 0
                    self._volume[channel] = 0
                    self._running[channel] = False
                    self._master[channel] = True
                    writer.note_off(cycles, 2)

    def close(self) -> None:
        self.writer.finish()