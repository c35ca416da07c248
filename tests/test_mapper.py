import pytest

from gbsplayer.mapper import (
    Bank,
    UnsupportedCartridge,
    mapper_gb,
    mapper_gbr,
    mapper_gbs,
)


def make_rom(banks):
    return b"".join(bytes([n]) * 0x4000 for n in range(banks))


def test_bank_map_and_read():
    bank = Bank(0x10)
    data = bytes(range(0x40))
    bank.map(data, 2)
    assert bank.read(0x5) == data[0x25]
    assert bank.size == 0x20


def test_bank_out_of_range_reads_ff():
    bank = Bank(0x10)
    bank.map(bytes(0x10), 3)
    assert bank.read(0) == 0xFF


def test_bank_disabled_ignores_access():
    ram = bytearray(0x10)
    bank = Bank(0x10, enable=False)
    bank.map(ram, 0)
    bank.write(3, 0x42)
    assert ram[3] == 0
    assert bank.read(3) == 0xFF


def test_gbs_initial_banks():
    m = mapper_gbs(make_rom(8))
    assert m.read(0x0000) == 0
    assert m.read(0x4000) == 1


def test_gbs_bank_switch():
    m = mapper_gbs(make_rom(8))
    m.write(0x2000, 3)
    assert m.read(0x4000) == 3
    m.write(0x2000, 0)
    assert m.read(0x4000) == 1


def test_gbs_write_outside_select_range_ignored():
    m = mapper_gbs(make_rom(8))
    m.write(0x1000, 5)
    m.write(0x5000, 5)
    assert m.read(0x4000) == 1
    assert m.read(0x1000) == 0


def test_gbs_ram_round_trip():
    m = mapper_gbs(make_rom(2))
    m.write(0xA123, 0x5A)
    assert m.read(0xA123) == 0x5A


def test_gbs_small_rom_upper_unmapped():
    m = mapper_gbs(make_rom(1))
    assert m.read(0x4000) == 0xFF


def test_gbr_fixed_banks_and_disabled_ram():
    m = mapper_gbr(make_rom(8), 2, 5)
    assert m.read(0x0000) == 2
    assert m.read(0x4000) == 5
    m.write(0xA000, 1)
    assert m.read(0xA000) == 0xFF


def test_unhandled_address_raises():
    m = mapper_gbs(make_rom(2))
    with pytest.raises(ValueError):
        m.read(0x8000)


def test_unsupported_cartridge():
    with pytest.raises(UnsupportedCartridge):
        mapper_gb(make_rom(2), 0x05, 0, 0)


def test_gb_without_ram_has_no_extram():
    m = mapper_gb(make_rom(2), 0x00, 0, 0)
    with pytest.raises(ValueError):
        m.read(0xA000)


def test_mbc1_simple_banking():
    m = mapper_gb(make_rom(64), 0x01, 0, 0)
    m.write(0x2000, 0x03)
    assert m.read(0x4000) == 3
    m.write(0x4000, 0x01)
    assert m.read(0x4000) == 0x23
    assert m.read(0x0000) == 0


def test_mbc1_advanced_rom_banking():
    m = mapper_gb(make_rom(64), 0x02, 0, 0x02)
    m.write(0x4000, 0x01)
    m.write(0x6000, 0x01)
    assert m.read(0x0000) == 0x20


def test_mbc1_ram_banking_mode():
    m = mapper_gb(make_rom(4), 0x03, 0, 0x03)
    assert m.read(0xA000) == 0xFF
    m.write(0x0000, 0x0A)
    m.write(0x6000, 0x01)
    m.write(0x4000, 0x01)
    m.write(0xA010, 0x77)
    assert m.read(0xA010) == 0x77
    m.write(0x4000, 0x00)
    assert m.read(0xA010) == 0x00
    m.write(0x4000, 0x01)
    assert m.read(0xA010) == 0x77


def test_mbc3_rom_banking():
    m = mapper_gb(make_rom(128), 0x13, 0, 0x03)
    m.write(0x2000, 0x45)
    assert m.read(0x4000) == 0x45
    m.write(0x2000, 0x00)
    assert m.read(0x4000) == 1


def test_mbc3_ram_enable():
    m = mapper_gb(make_rom(4), 0x12, 0, 0x02)
    m.write(0xA000, 0x11)
    assert m.read(0xA000) == 0xFF
    m.write(0x0000, 0x0A)
    m.write(0xA000, 0x11)
    assert m.read(0xA000) == 0x11