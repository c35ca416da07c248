# gbsplayer

Building blocks for playing Game Boy Sound System (GBS) music: the
player's subsong, playlist and pause logic, command-line option parsing,
cartridge memory mappers, the band-limited impulse table used for sound
synthesis, text rendering of the player status, raw terminal input, and
output plugins that write MIDI files, sound register dumps or raw PCM to
standard output.

## Installation

```
pip install .
```

With the test extra:

```
pip install .[test]
pytest
```

## Command line

`gbsplayer-impulse` prints the impulse table (128 shifted impulses of 32
samples each, no cutoff) as a C header defining `IMPULSE_N_SHIFT`,
`IMPULSE_W_SHIFT` and `base_impulse`:

```
gbsplayer-impulse > impulse.h
```

## Modules

- `gbsplayer.status` – `LoopMode` (`OFF`, `RANGE`, `SINGLE`; `next()`
  cycles through them), `FilterType`, `ChannelStatus`, `PlayerStatus`,
  `Metadata`, `OutputBuffer`, and `note(div)`, which turns a channel
  frequency divider into a note number and raises `ValueError` for a
  divider that gives no frequency.
- `gbsplayer.impulsegen` – `gen_impulsetab(w_shift, n_shift, cutoff)`
  builds the windowed-sinc impulse table (every impulse sums to 256);
  `render_header(table, w_shift, n_shift)` formats it; `main()` is the
  `gbsplayer-impulse` command.
- `gbsplayer.util` – `rand_long(rng, maximum)` and `shuffle(items, rng)`,
  driven by a `random.Random`, so orders are reproducible from a seed.
- `gbsplayer.mapper` – `mapper_gbs(rom)`, `mapper_gbr(rom, bank_lower,
  bank_upper)` and `mapper_gb(rom, cart_type, rom_type, ram_type)` build a
  `Mapper` with `read(addr)` and `write(addr, value)`. `mapper_gb` handles
  plain ROM, MBC1 and MBC3 cartridge types and raises
  `UnsupportedCartridge` for others.
- `gbsplayer.plugout` – the `OutputPlugin` base class (hooks `open`,
  `skip`, `pause`, `io`, `step`, `write`, `close`; `implements(hook)`
  tells which ones a plugin overrides) and `Endian`.
- `gbsplayer.midifile` – `MidiTrackWriter`, which writes
  `gbsplay-<n>.mid` files, and `encode_varlen()`.
- `gbsplayer.midi` – `MidiPlugin` (`midi`), building notes from writes to
  the sound registers of channels 1–3.
- `gbsplayer.altmidi` – `AltMidiPlugin` (`altmidi`), building notes from
  the per-step channel status.
- `gbsplayer.streams` – `IoDumperPlugin` (`iodumper`) writes one line per
  register write; `StdoutPlugin` (`stdout`) writes raw samples. Both take
  over standard output unless given a stream.
- `gbsplayer.plugins` – `available_plugins()`, `select_by_name(name)`
  (raises `ValueError` for an unknown name) and `list_plugins(out)`.
  `stdout` is the default plugin.
- `gbsplayer.display` – note names, volume bars, `format_status()`,
  `format_registers(peek)` and `commands_text()`.
- `gbsplayer.terminal` – `Terminal`, a context manager that switches a
  POSIX terminal to non-echoing, non-blocking input; `read_key()` returns
  a key or `None`.
- `gbsplayer.player` – `PlayerConfig`, `parse_options()`, `usage_text()`,
  `sanitize_range()`, `PlayMode`, `Playlist`, `Player`, `display_time()`,
  `parse_filter()`, `parse_endian()`, `swap_endian()` and
  `filename_only()`. `UsageError` is raised for bad options.

## Example

```python
from gbsplayer.player import Player, PlayerConfig, parse_options
from gbsplayer.status import PlayerStatus


class Emulator:
    def __init__(self):
        self.status = PlayerStatus(songs=5, defaultsong=1, subsong=-1)

    def init(self, subsong):
        self.status.subsong = subsong


config, filename = parse_options(["-r", "22050", "song.gbs", "2"], PlayerConfig())
# config.rate == 22050, config.subsong_start == 1, filename == "song.gbs"

emulator = Emulator()
player = Player(emulator, PlayerConfig(), seed=1)
first = player.setup_playmode()   # 0, the default song
player.next_subsong()             # 1
```

## What it does not do

The package contains no GBS file reader, no CPU or sound hardware
emulation and no sound card output. `Player` works with any object that
has a `status` attribute (a `PlayerStatus`) and an `init(subsong)`
method; supplying that object is up to the caller. There is no
interactive player command: `gbsplayer-impulse` is the only command.
Configuration files named with `-c` are collected in
`PlayerConfig.config_files` but not read.