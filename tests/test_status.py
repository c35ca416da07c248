import pytest

from gbsplayer.status import (
    ChannelStatus,
    LoopMode,
    Metadata,
    OutputBuffer,
    PlayerStatus,
    note,
)


def test_loop_mode_cycles_through_all_modes():
    assert LoopMode.OFF.next() is LoopMode.RANGE
    assert LoopMode.RANGE.next() is LoopMode.SINGLE
    assert LoopMode.SINGLE.next() is LoopMode.OFF


def test_player_status_has_four_independent_channels():
    first = PlayerStatus()
    second = PlayerStatus()
    assert len(first.channels) == 4
    first.channels[0].vol = 7
    assert second.channels[0].vol == 0
    assert first.channels[1] == ChannelStatus()


def test_metadata_fields():
    meta = Metadata(title="t", author="a", copyright="c")
    assert (meta.title, meta.author, meta.copyright) == ("t", "a", "c")


def test_output_buffer_allocates_capacity():
    buf = OutputBuffer(size=16)
    assert len(buf.data) == 16
    assert buf.frames == 4
    assert buf.filled() == b""


def test_output_buffer_filled_returns_rendered_frames():
    buf = OutputBuffer(size=16)
    buf.data[:8] = bytes(range(8))
    buf.pos = 2
    assert buf.filled() == bytes(range(8))


@pytest.mark.parametrize("div", [1, 2, 4, 8, 16, 32, 64, 128, 256, 512, 1024, 2048])
def test_note_drops_an_octave_when_divider_doubles(div):
    assert note(div * 2) == note(div) - 12


def test_note_decreases_with_divider():
    values = [note(div) for div in range(1, 2000)]
    assert all(a >= b for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("div", [0, -5, 262145])
def test_note_rejects_invalid_divider(div):
    with pytest.raises(ValueError):
        note(div)