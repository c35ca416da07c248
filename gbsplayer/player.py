"""Player logic shared by the front ends: options, subsong order, pausing and output."""

from __future__ import annotations

import array
import copy
import enum
import getopt
import os
import random
import re
import sys
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from gbsplayer.plugins import DEFAULT_PLUGIN
from gbsplayer.plugout import Endian, OutputPlugin
from gbsplayer.status import FilterType, LoopMode, OutputBuffer, PlayerStatus
from gbsplayer.util import rand_long, shuffle

GBHW_CLOCK = 4194304
DEFAULT_REFRESH_DELAY = 33
CONFIG_FILE = ".gbsplayrc"

_OPTSTRING = "1234c:E:f:g:hH:lLo:qr:R:t:T:vVzZ"
_LONG_PATTERN = re.compile(r"\s*([+-]?\d+)")

_FILTERS = {
    "off": FilterType.OFF,
    "dmg": FilterType.DMG,
    "cgb": FilterType.CGB,
}

_ENDIANS = {
    "b": Endian.BIG,
    "l": Endian.LITTLE,
    "n": Endian.NATIVE,
}

_ENDIAN_NAMES = {
    Endian.BIG: "big",
    Endian.LITTLE: "little",
    Endian.NATIVE: "native",
}


class PlayMode(enum.IntEnum):
    """Order in which subsongs are played."""

    LINEAR = 1
    RANDOM = 2
    SHUFFLE = 3


class UsageError(Exception):
    """The command line could not be understood."""

    def __init__(self, message: str = "", exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass
class PlayerConfig:
    """Settings from configuration files and the command line.

    ``config_files`` lists additional configuration files named with -c, in order.
    """

    endian: Endian = Endian.NATIVE
    fadeout: int = 3
    filter_type: str = "dmg"
    loop_mode: LoopMode = LoopMode.OFF
    output_plugin: str = DEFAULT_PLUGIN
    rate: int = 44100
    refresh_delay: int = DEFAULT_REFRESH_DELAY
    silence_timeout: int = 2
    subsong_gap: int = 2
    subsong_timeout: int = 2 * 60
    verbosity: int = 3
    playmode: PlayMode = PlayMode.LINEAR
    mute: tuple[bool, bool, bool, bool] = (False, False, False, False)
    subsong_start: int = -1
    subsong_stop: int = -1
    config_files: list[str] = field(default_factory=list)
    show_help: bool = False
    show_version: bool = False


@dataclass(frozen=True)
class DisplayTime:
    """Played and total time of the current subsong in minutes and seconds."""

    played_min: int
    played_sec: int
    total_min: int
    total_sec: int


class _Emulator(Protocol):
    status: PlayerStatus

    def init(self, subsong: int) -> None:
        ...


def display_time(status: PlayerStatus) -> DisplayTime:
    """Return the time to show for ``status``; an unknown length shows as 99:99."""
    played = status.ticks // GBHW_CLOCK
    total = status.subsong_len // 1024
    if total:
        total_min, total_sec = divmod(total, 60)
    else:
        total_min, total_sec = 99, 99
    played_min, played_sec = divmod(played, 60)
    return DisplayTime(played_min, played_sec, total_min, total_sec)


def parse_filter(name: str) -> FilterType:
    """Return the filter called ``name`` (case-insensitive); raise ValueError if unknown."""
    try:
        return _FILTERS[name.lower()]
    except KeyError:
        raise ValueError(f'Invalid filter type "{name}"') from None


def parse_endian(value: str) -> Endian:
    """Return the byte order for b, l or n (case-insensitive); raise ValueError otherwise."""
    try:
        return _ENDIANS[value.lower()]
    except KeyError:
        raise ValueError(f'"{value}" is not a valid endian.') from None


def swap_endian(data: bytes) -> bytes:
    """Swap each native 16-bit sample the way the output stage does.

    The high byte is shifted down arithmetically, so for a negative sample the
    upper byte of the result is 0xff rather than the original low byte.
    """
    samples = array.array("h")
    samples.frombytes(bytes(data[: len(data) - len(data) % 2]))
    swapped = array.array(
        "h",
        (
            int.from_bytes(
                ((((x & 0xFF) << 8) | (x >> 8)) & 0xFFFF).to_bytes(2, "little"),
                "little",
                signed=True,
            )
            for x in samples
        ),
    )
    return swapped.tobytes() + bytes(data[len(samples) * 2 :])


def filename_only(path: str) -> str:
    """Return the part of ``path`` after the last slash."""
    return path.rsplit("/", 1)[-1]


def _scan_long(text: str, default: int) -> int:
    match = _LONG_PATTERN.match(text)
    return int(match.group(1)) if match else default


def parse_options(argv: list[str], config: PlayerConfig) -> tuple[PlayerConfig, Optional[str]]:
    """Apply command-line options to a copy of ``config``.

    ``argv`` excludes the program name. Returns the new configuration and the
    GBS file name, or None when none was given. Start and stop subsongs given
    after the file name are stored zero-based. Raises UsageError on bad options.
    """
    cfg = copy.deepcopy(config)
    try:
        opts, args = getopt.gnu_getopt(list(argv), _OPTSTRING)
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from exc

    mute = list(cfg.mute)
    for opt, value in opts:
        flag = opt[1]
        if flag in "1234":
            index = int(flag) - 1
            mute[index] = not mute[index]
        elif flag == "c":
            cfg.config_files.append(value)
        elif flag == "E":
            try:
                cfg.endian = parse_endian(value)
            except ValueError as exc:
                raise UsageError(str(exc)) from exc
        elif flag == "f":
            cfg.fadeout = _scan_long(value, cfg.fadeout)
        elif flag == "g":
            cfg.subsong_gap = _scan_long(value, cfg.subsong_gap)
        elif flag == "h":
            cfg.show_help = True
        elif flag == "H":
            cfg.filter_type = value
        elif flag == "l":
            cfg.loop_mode = LoopMode.RANGE
        elif flag == "L":
            cfg.loop_mode = LoopMode.SINGLE
        elif flag == "o":
            cfg.output_plugin = value
        elif flag == "q":
            cfg.verbosity -= 1
        elif flag == "r":
            cfg.rate = _scan_long(value, cfg.rate)
        elif flag == "R":
            cfg.refresh_delay = _scan_long(value, cfg.refresh_delay)
        elif flag == "t":
            cfg.subsong_timeout = _scan_long(value, cfg.subsong_timeout)
        elif flag == "T":
            cfg.silence_timeout = _scan_long(value, cfg.silence_timeout)
        elif flag == "v":
            cfg.verbosity += 1
        elif flag == "V":
            cfg.show_version = True
        elif flag == "z":
            cfg.playmode = PlayMode.SHUFFLE
        elif flag == "Z":
            cfg.playmode = PlayMode.RANDOM
    cfg.mute = (mute[0], mute[1], mute[2], mute[3])

    filename = args[0] if args else None
    if len(args) >= 2:
        cfg.subsong_start = _scan_long(args[1], cfg.subsong_start) - 1
    if len(args) >= 3:
        cfg.subsong_stop = _scan_long(args[2], cfg.subsong_stop) - 1
    return cfg, filename


def usage_text(prog: str, config: PlayerConfig) -> str:
    """Return the help text, showing the current settings as defaults."""
    return (
        f"Usage: {prog} [option(s)] <gbs-file> [start_at_subsong [stop_at_subsong] ]\n"
        "\n"
        "Available options are:\n"
        f"  -E        endian, b == big, l == little, n == native ({_ENDIAN_NAMES.get(config.endian, 'invalid')})\n"
        f"  -f        set fadeout ({config.fadeout} seconds)\n"
        f"  -g        set subsong gap ({config.subsong_gap} seconds)\n"
        "  -h        display this help and exit\n"
        f"  -H        set output high-pass type ({config.filter_type})\n"
        "  -l        set loop mode to range\n"
        "  -L        set loop mode to single\n"
        f"  -o        select output plugin ({config.output_plugin})\n"
        "            'list' shows available plugins\n"
        "  -q        reduce verbosity\n"
        f"  -r        set samplerate ({config.rate}Hz)\n"
        f"  -R        set refresh delay ({config.refresh_delay} milliseconds)\n"
        f"  -t        set subsong timeout ({config.subsong_timeout} seconds)\n"
        f"  -T        set silence timeout ({config.silence_timeout} seconds)\n"
        "  -v        increase verbosity\n"
        "  -V        print version and exit\n"
        "  -z        play subsongs in shuffle mode\n"
        "  -Z        play subsongs in random mode (repetitions possible)\n"
        "  -1 to -4  mute a channel on startup\n"
    )


def sanitize_range(start: int, stop: int, songs: int) -> tuple[int, int]:
    """Clamp zero-based start and stop subsongs; -1 means default start or no stop."""
    if start < -1:
        start = 0
    elif start >= songs:
        start = songs - 1
    if stop < 0 or stop >= songs:
        stop = -1
    return start, stop


class Playlist:
    """Reproducible shuffled order of subsongs, reshuffled by seed at either end."""

    def __init__(self, songs: int, seed: int) -> None:
        self.songs = songs
        self.seed = seed
        self.index = 0
        self.items: list[int] = []
        self._rebuild()

    def _rebuild(self) -> None:
        items = list(range(self.songs))
        shuffle(items, random.Random(self.seed))
        self.items = items

    def next(self) -> int:
        """Advance and return the subsong; past the end a new order is drawn."""
        self.index += 1
        if self.index == self.songs:
            self.seed += 1
            self._rebuild()
            self.index = 0
        return self.items[self.index]

    def prev(self) -> int:
        """Step back and return the subsong; before the start the previous order is drawn."""
        self.index -= 1
        if self.index == -1:
            self.seed -= 1
            self._rebuild()
            self.index = self.songs - 1
        return self.items[self.index]

    def start_at(self, subsong: int) -> int:
        """Reseed until ``subsong`` comes first (-1 keeps the order) and return the first.

        The shuffle never leaves subsong 0 in front when there are several
        subsongs, so asking for it raises ValueError.
        """
        self.index = 0
        if subsong == -1:
            return self.items[0]
        if not 0 <= subsong < self.songs or (subsong == 0 and self.songs > 1):
            raise ValueError(f"subsong {subsong} cannot start a shuffled playlist of {self.songs}")
        while self.items[0] != subsong:
            self.seed += 1
            self._rebuild()
        return subsong


class Player:
    """Chooses subsongs, tracks pausing and passes rendered sound to a plugin."""

    def __init__(
        self,
        gbs: _Emulator,
        config: Optional[PlayerConfig] = None,
        plugin: Optional[OutputPlugin] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.gbs = gbs
        self.config = config if config is not None else PlayerConfig()
        self.plugin = plugin
        self.seed = int(time.time()) + os.getpid() if seed is None else seed
        self.rng = random.Random(self.seed)
        self.playlist: Optional[Playlist] = None
        self.paused = False

    def _uses(self, hook: str) -> bool:
        return self.plugin is not None and self.plugin.implements(hook)

    def _play(self, subsong: int) -> None:
        self.gbs.init(subsong)
        if self._uses("skip"):
            self.plugin.skip(subsong)

    def _shuffle_playlist(self) -> Playlist:
        if self.playlist is None:
            self.playlist = Playlist(self.gbs.status.songs, self.seed)
        return self.playlist

    def _next_candidate(self) -> int:
        status = self.gbs.status
        mode = self.config.playmode
        if mode == PlayMode.RANDOM:
            return rand_long(self.rng, status.songs)
        if mode == PlayMode.SHUFFLE:
            return self._shuffle_playlist().next()
        return status.subsong + 1

    def _prev_candidate(self) -> int:
        status = self.gbs.status
        mode = self.config.playmode
        if mode == PlayMode.RANDOM:
            return rand_long(self.rng, status.songs)
        if mode == PlayMode.SHUFFLE:
            return self._shuffle_playlist().prev()
        return status.subsong - 1

    def next_subsong(self) -> int:
        """Start the following subsong and return its number."""
        subsong = self._next_candidate() % self.gbs.status.songs
        self._play(subsong)
        return subsong

    def prev_subsong(self) -> int:
        """Start the preceding subsong and return its number."""
        subsong = self._prev_candidate()
        while subsong < 0:
            subsong += self.gbs.status.songs
        self._play(subsong)
        return subsong

    def setup_playmode(self) -> int:
        """Prepare the play mode and return the subsong to start with."""
        status = self.gbs.status
        subsong = status.subsong
        mode = self.config.playmode
        if mode == PlayMode.RANDOM:
            if subsong == -1:
                subsong = self._next_candidate()
        elif mode == PlayMode.SHUFFLE:
            self.playlist = Playlist(status.songs, self.seed)
            subsong = self.playlist.start_at(subsong)
            self.seed = self.playlist.seed
        elif subsong == -1:
            subsong = status.defaultsong - 1
        return subsong

    def on_subsong_end(self) -> bool:
        """Start what follows a finished subsong; return False when playback ends."""
        status = self.gbs.status
        subsong = self._next_candidate()
        if status.loop_mode == LoopMode.SINGLE:
            subsong = status.subsong
        elif status.subsong == self.config.subsong_stop or subsong >= status.songs:
            if status.loop_mode == LoopMode.OFF:
                return False
            subsong = self.config.subsong_start
            self.setup_playmode()
        self._play(subsong)
        return True

    def toggle_pause(self) -> bool:
        """Pause or resume and return whether playback is now paused."""
        self.paused = not self.paused
        if self._uses("pause"):
            self.plugin.pause(self.paused)
        return self.paused

    def is_running(self) -> bool:
        """Whether playback is not paused."""
        return not self.paused

    def _needs_swap(self) -> bool:
        endian = self.config.endian
        little = sys.byteorder == "little"
        return (little and endian == Endian.BIG) or (not little and endian == Endian.LITTLE)

    def handle_sound(self, buffer: OutputBuffer) -> None:
        """Hand the rendered frames to the plugin in the requested byte order and empty the buffer."""
        if self._uses("write"):
            if self._needs_swap():
                buffer.data[:] = swap_endian(bytes(buffer.data))
            self.plugin.write(bytes(buffer.data[: buffer.pos * 4]))
        buffer.pos = 0