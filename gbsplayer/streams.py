"""Plugins that write to standard output: a register dumper and raw samples."""

from __future__ import annotations

import os
import sys
from typing import BinaryIO, Optional, TextIO

from gbsplayer.plugout import Endian, OutputPlugin

_ULONG_MASK = (1 << 64) - 1


def _claim_stdout() -> int:
    """Take over the standard output descriptor so nothing else writes to it."""
    sys.stdout.flush()
    fd = os.dup(sys.stdout.fileno())
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, sys.stdout.fileno())
    finally:
        os.close(devnull)
    return fd


class IoDumperPlugin(OutputPlugin):
    """Dumps every sound register write as text."""

    name = "iodumper"
    description = "STDOUT io dumper"
    uses_stdout = True

    def __init__(self, stream: Optional[TextIO] = None, log: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._log = log
        self._out: Optional[TextIO] = None
        self._owned = False
        self._cycles_prev = 0

    def _output(self) -> TextIO:
        if self._out is None:
            raise RuntimeError("io dumper is not open")
        return self._out

    def open(self, endian: Endian, rate: int, buffer_bytes: int) -> int:
        if self._stream is None:
            self._out = os.fdopen(_claim_stdout(), "w")
            self._owned = True
        else:
            self._out = self._stream
        return buffer_bytes

    def skip(self, subsong: int) -> None:
        self._output().write(f"\nsubsong {subsong}\n")
        (self._log or sys.stderr).write(f"dumping subsong {subsong}\n")

    def io(self, cycles: int, addr: int, value: int) -> None:
        diff = (cycles - self._cycles_prev) & _ULONG_MASK
        self._output().write(f"{diff:08x} {addr:04x}={value:02x}\n")
        self._cycles_prev = cycles

    def close(self) -> None:
        out = self._output()
        out.flush()
        if self._owned:
            out.close()
        self._out = None


class StdoutPlugin(OutputPlugin):
    """Writes raw rendered samples to standard output."""

    name = "stdout"
    description = "STDOUT file writer"
    uses_stdout = True

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream
        self._out: Optional[BinaryIO] = None
        self._owned = False

    def open(self, endian: Endian, rate: int, buffer_bytes: int) -> int:
        if self._stream is None:
            self._out = os.fdopen(_claim_stdout(), "wb", buffering=0)
            self._owned = True
        else:
            self._out = self._stream
        return buffer_bytes

    def write(self, data: bytes) -> int:
        if self._out is None:
            raise RuntimeError("stdout writer is not open")
        written = self._out.write(data)
        return len(data) if written is None else written

    def close(self) -> None:
        if self._out is None:
            return
        self._out.flush()
        if self._owned:
            self._out.close()
        self._out = None