"""Raw, non-blocking keyboard input on a POSIX terminal."""

from __future__ import annotations

import fcntl
import os
import signal
import sys
import termios
from types import FrameType, TracebackType
from typing import Any, Optional, TextIO


class Terminal:
    """Context manager putting the terminal into unbuffered, no-echo mode.

    While active, SIGTERM and SIGINT restore the terminal and exit with status
    1, SIGABRT restores the terminal and SIGCONT re-enters raw mode and sets
    ``redraw``.
    """

    def __init__(
        self,
        fd: Optional[int] = None,
        out: Optional[TextIO] = None,
        handle_signals: bool = True,
    ) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.redraw = False
        self._out = out
        self._handle_signals = handle_signals
        self._saved_attrs: Optional[list[Any]] = None
        self._saved_flags: Optional[int] = None
        self._saved_handlers: dict[int, Any] = {}

    @property
    def configured(self) -> bool:
        """Whether raw mode is currently in effect."""
        return self._saved_attrs is not None

    def _setup(self) -> None:
        try:
            attrs = termios.tcgetattr(self.fd)
        except termios.error:
            return
        self._saved_attrs = [list(a) if isinstance(a, list) else a for a in attrs]
        raw = list(attrs)
        raw[3] &= ~(termios.ICANON | termios.ECHO | termios.ECHONL)
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw)
        flags = fcntl.fcntl(self.fd, fcntl.F_GETFL)
        if self._saved_flags is None:
            self._saved_flags = flags
        fcntl.fcntl(self.fd, fcntl.F_SETFL, flags | os.O_NONBLOCK)

    def _restore(self) -> None:
        if self._saved_attrs is None:
            return
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved_attrs)
        self._saved_attrs = None

    def _on_exit_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        out = self._out or sys.stdout
        out.write(f"\nCaught signal {signum}, exiting...\n")
        out.flush()
        self._restore()
        sys.exit(1)

    def _on_stop_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        self._restore()

    def _on_continue(self, signum: int, frame: Optional[FrameType]) -> None:
        self._setup()
        self.redraw = True

    def _install_handlers(self) -> None:
        handlers = {
            signal.SIGTERM: self._on_exit_signal,
            signal.SIGINT: self._on_exit_signal,
            signal.SIGABRT: self._on_stop_signal,
            signal.SIGCONT: self._on_continue,
        }
        for signum, handler in handlers.items():
            self._saved_handlers[signum] = signal.signal(signum, handler)

    def _remove_handlers(self) -> None:
        for signum, handler in self._saved_handlers.items():
            signal.signal(signum, handler)
        self._saved_handlers.clear()

    def __enter__(self) -> Terminal:
        if self._handle_signals:
            self._install_handlers()
        self._setup()
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self._restore()
        if self._saved_flags is not None:
            fcntl.fcntl(self.fd, fcntl.F_SETFL, self._saved_flags)
            self._saved_flags = None
        self._remove_handlers()

    def read_key(self) -> Optional[str]:
        """Return the next pressed key, or None when no input is waiting."""
        try:
            data = os.read(self.fd, 1)
        except (BlockingIOError, InterruptedError):
            return None
        if len(data) != 1:
            return None
        return data.decode("latin-1")