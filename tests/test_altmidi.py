from gbsplayer.altmidi import AltMidiPlugin
from gbsplayer.plugout import Endian
from gbsplayer.status import ChannelStatus, note


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


def _channels(playing, div_tc=256):
    return [ChannelStatus(playing=playing, div_tc=div_tc)] + [ChannelStatus() for _ in range(3)]


def _start(tmp_path):
    plugin = AltMidiPlugin(tmp_path)
    plugin.open(Endian.NATIVE, 44100, 8192)
    plugin.skip(0)
    return plugin


def test_step_without_track_writes_nothing(tmp_path):
    plugin = AltMidiPlugin(tmp_path)
    plugin.step(0, _channels(True))
    plugin.close()
    assert list(tmp_path.iterdir()) == []


def test_playing_channel_emits_note_with_volume(tmp_path):
    plugin = _start(tmp_path)
    plugin.io(0, 0xFF12, 0xA0)
    plugin.step(0, _channels(True))
    plugin.close()
    events = _events(tmp_path / "gbsplay-1.mid")
    assert events[0] == bytes([0x90, note(256) + 21, 80])


def test_stopped_channel_emits_note_off(tmp_path):
    plugin = _start(tmp_path)
    plugin.step(0, _channels(True))
    plugin.step(1 << 14, _channels(False))
    assert plugin.writer.notes[0] == 0
    plugin.close()
    statuses = [e[0] for e in _events(tmp_path / "gbsplay-1.mid")]
    assert statuses == [0x90, 0x80, 0xFF]


def test_trigger_restarts_note(tmp_path):
    plugin = _start(tmp_path)
    plugin.step(0, _channels(True))
    plugin.io(0, 0xFF14, 0x80)
    plugin.step(0, _channels(True))
    plugin.close()
    statuses = [e[0] for e in _events(tmp_path / "gbsplay-1.mid")]
    assert statuses.count(0x90) == 2


def test_zero_divider_is_ignored(tmp_path):
    plugin = _start(tmp_path)
    plugin.step(0, _channels(True, div_tc=0))
    plugin.close()
    assert _events(tmp_path / "gbsplay-1.mid") == [b"\xff\x2f\x00"]


def test_close_silences_sounding_notes(tmp_path):
    plugin = _start(tmp_path)
    plugin.step(0, _channels(True))
    plugin.close()
    events = _events(tmp_path / "gbsplay-1.mid")
    assert events[1] == bytes([0x80, note(256) + 21, 0])
    assert plugin.writer.is_open is False