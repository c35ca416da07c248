from gbsplayer.midi import MidiPlugin
from gbsplayer.plugout import Endian
from gbsplayer.status import note


def _decode_varlen(data, pos):
    value = 0
    while True:
        byte = data[pos]
        pos += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos


def _events(path):
    body = path.read_bytes()[22:]
    events = []
    pos = 0
    while pos < len(body):
        _, pos = _decode_varlen(body, pos)
        events.append(body[pos : pos + 3])
        pos += 3
    return events


def _start(tmp_path):
    plugin = MidiPlugin(tmp_path)
    plugin.open(Endian.NATIVE, 44100, 8192)
    plugin.skip(0)
    return plugin


def _trigger_channel1(plugin, cycles=0):
    plugin.io(cycles, 0xFF12, 0xF0)
    plugin.io(cycles, 0xFF13, 0x00)
    plugin.io(cycles, 0xFF14, 0x87)


def test_io_without_track_writes_nothing(tmp_path):
    plugin = MidiPlugin(tmp_path)
    plugin.io(0, 0xFF12, 0xF0)
    plugin.close()
    assert list(tmp_path.iterdir()) == []


def test_trigger_plays_note(tmp_path):
    plugin = _start(tmp_path)
    _trigger_channel1(plugin)
    plugin.close()
    expected = note(2048 - 0x700) + 21
    events = _events(tmp_path / "gbsplay-1.mid")
    assert events[0] == bytes([0x90, expected, 120])
    assert events[1] == bytes([0x80, expected, 0])
    assert events[-1] == b"\xff\x2f\x00"


def test_dac_off_prevents_note(tmp_path):
    plugin = _start(tmp_path)
    plugin.io(0, 0xFF12, 0x00)
    plugin.io(0, 0xFF14, 0x87)
    plugin.close()
    assert _events(tmp_path / "gbsplay-1.mid") == [b"\xff\x2f\x00"]


def test_zero_volume_stops_note(tmp_path):
    plugin = _start(tmp_path)
    _trigger_channel1(plugin)
    plugin.io(1 << 14, 0xFF12, 0x08)
    assert plugin.writer.notes[0] == 0
    plugin.close()
    events = _events(tmp_path / "gbsplay-1.mid")
    assert [e[0] for e in events] == [0x90, 0x80, 0xFF]


def test_frequency_change_retriggers(tmp_path):
    plugin = _start(tmp_path)
    _trigger_channel1(plugin)
    plugin.io(0, 0xFF13, 0x80)
    plugin.close()
    old = note(2048 - 0x700) + 21
    new = note(2048 - 0x780) + 21
    events = _events(tmp_path / "gbsplay-1.mid")
    assert events[1] == bytes([0x80, old, 0])
    assert events[2][:2] == bytes([0x90, new])


def test_pan_register(tmp_path):
    plugin = _start(tmp_path)
    plugin.io(0, 0xFF25, 0x01)
    plugin.close()
    events = _events(tmp_path / "gbsplay-1.mid")
    assert events[:4] == [
        bytes([0xB0, 0x0A, 127]),
        bytes([0xB1, 0x0A, 64]),
        bytes([0xB2, 0x0A, 64]),
        bytes([0xB3, 0x0A, 64]),
    ]


def test_sound_off_silences_wave_channel(tmp_path):
    plugin = _start(tmp_path)
    plugin.io(0, 0xFF1A, 0x80)
    plugin.io(0, 0xFF1C, 0x20)
    plugin.io(0, 0xFF1D, 0x00)
    plugin.io(0, 0xFF1E, 0x87)
    assert plugin.writer.notes[2] == note(2048 - 0x700) + 21
    plugin.io(0, 0xFF26, 0x00)
    assert plugin.writer.notes[2] == 0
    plugin.close()
    statuses = [e[0] for e in _events(tmp_path / "gbsplay-1.mid")]
    assert statuses == [0x92, 0x82, 0xFF]


def test_skip_starts_new_file(tmp_path):
    plugin = _start(tmp_path)
    plugin.skip(1)
    plugin.close()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["gbsplay-1.mid", "gbsplay-2.mid"]