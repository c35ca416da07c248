import pytest

from gbsplayer.plugout import Endian, OutputPlugin


class _Writer(OutputPlugin):
    name = "writer"

    def __init__(self):
        self.chunks = []

    def write(self, data):
        self.chunks.append(data)
        return len(data)


def test_base_open_keeps_buffer_size():
    assert OutputPlugin().open(Endian.NATIVE, 44100, 8192) == 8192


def test_base_write_consumes_everything():
    assert OutputPlugin().write(b"abcd") == 4


def test_implements_reports_overridden_hooks():
    plugin = _Writer()
    assert OutputPlugin.implements(plugin, "write") is True
    assert OutputPlugin.implements(plugin, "io") is False
    assert OutputPlugin.implements(plugin, "step") is False


def test_implements_rejects_unknown_hook():
    with pytest.raises(AttributeError):
        OutputPlugin().implements("bogus")