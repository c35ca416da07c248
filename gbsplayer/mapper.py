"""Memory bank controllers mapping ROM and cartridge RAM into the address space."""

from __future__ import annotations

import enum
import sys
from typing import Optional, Union

ROMBANK_SIZE = 0x4000
MAX_EXTRAM_SIZE = 0x8000
RAMBANK_SIZE = 0x2000

_Buffer = Union[bytes, bytearray]

_warned: set[str] = set()


def _warn_once(key: str, message: str) -> None:
    if key not in _warned:
        _warned.add(key)
        sys.stderr.write(message)


class UnsupportedCartridge(ValueError):
    """The cartridge type has no mapper implementation."""


class Bank:
    """A window of ``banksize`` bytes onto ROM or RAM."""

    def __init__(self, banksize: int, enable: bool = True) -> None:
        self.banksize = banksize
        self.mask = banksize - 1
        self.enable = enable
        self.size = 0
        self._data: Optional[_Buffer] = None
        self._offset = 0

    def map(self, data: _Buffer, bank: int) -> None:
        """Point the window at bank number ``bank`` of ``data``."""
        offset = bank * self.banksize
        if offset >= len(data):
            _warn_once(
                "bank-range",
                f"Bank {bank} out of range (0-{len(data) // self.banksize})!\n",
            )
            self._data = None
            self._offset = 0
            self.size = 0
            return
        self._data = data
        self._offset = offset
        self.size = len(data) - offset

    def _valid(self, maddr: int) -> bool:
        return self.enable and self._data is not None and maddr < self.size

    def read(self, addr: int) -> int:
        """Read a byte; unmapped or disabled locations read as 0xff."""
        maddr = addr & self.mask
        if not self._valid(maddr):
            return 0xFF
        return self._data[self._offset + maddr]

    def write(self, addr: int, value: int) -> None:
        """Write a byte; ignored when unmapped or disabled."""
        maddr = addr & self.mask
        if not self._valid(maddr):
            return
        self._data[self._offset + maddr] = value & 0xFF


class _Controller(enum.Enum):
    GBS = "gbs"
    MBC1 = "mbc1"
    MBC3 = "mbc3"


class Mapper:
    """Cartridge mapper serving 0x0000-0x7fff and, if present, 0xa000-0xbfff."""

    def __init__(self, rom: bytes, ram_size: int, controller: _Controller, has_extram: bool = True) -> None:
        if ram_size > MAX_EXTRAM_SIZE:
            raise ValueError(f"RAM size {ram_size:#x} exceeds {MAX_EXTRAM_SIZE:#x}")
        self.rom = bytes(rom)
        self.ram = bytearray(ram_size)
        self.rom_lower = Bank(ROMBANK_SIZE)
        self.rom_upper = Bank(ROMBANK_SIZE)
        self.extram = Bank(RAMBANK_SIZE, enable=False)
        self.registers = [0, 0, 0, 0]
        self.has_extram = has_extram
        self._rom_put = {
            _Controller.GBS: self._gbs_rom_put,
            _Controller.MBC1: self._mbc1_rom_put,
            _Controller.MBC3: self._mbc3_rom_put,
        }[controller]

    def _map_rom(self, bank: Bank, number: int) -> None:
        bank.map(self.rom, number)

    def _map_ram(self, bank: Bank, number: int) -> None:
        bank.map(self.ram, number)

    def read(self, addr: int) -> int:
        """Read a byte from the mapped address space."""
        if 0x0000 <= addr <= 0x3FFF:
            return self.rom_lower.read(addr)
        if 0x4000 <= addr <= 0x7FFF:
            return self.rom_upper.read(addr)
        if self.has_extram and 0xA000 <= addr <= 0xBFFF:
            return self.extram.read(addr)
        raise ValueError(f"address {addr:#06x} is not handled by this mapper")

    def write(self, addr: int, value: int) -> None:
        """Write a byte: ROM addresses drive the controller, RAM addresses store."""
        value &= 0xFF
        if 0x0000 <= addr <= 0x7FFF:
            self._rom_put(addr, value)
            return
        if self.has_extram and 0xA000 <= addr <= 0xBFFF:
            self.extram.write(addr, value)
            return
        raise ValueError(f"address {addr:#06x} is not handled by this mapper")

    def _gbs_rom_put(self, addr: int, value: int) -> None:
        if 0x2000 <= addr <= 0x3FFF:
            self._map_rom(self.rom_upper, value + (value == 0))
        else:
            _warn_once("rom-write", f"rom write of {value:02x} to {addr:04x} ignored\n")

    def _mbc1_rom_put(self, addr: int, value: int) -> None:
        self.registers[addr // 0x2000] = value
        self.extram.enable = self.registers[0] == 0x0A
        rombank = self.registers[1] & 0x1F
        rombank += rombank == 0
        rambank = self.registers[2] & 0x03

        if self.registers[3] == 1:
            if len(self.ram) > RAMBANK_SIZE:
                self._map_rom(self.rom_lower, 0)
                self._map_rom(self.rom_upper, rombank)
                self._map_ram(self.extram, rambank)
            else:
                rombank |= rambank << 5
                self._map_rom(self.rom_lower, rambank << 5)
                self._map_rom(self.rom_upper, rombank)
                self._map_ram(self.extram, 0)
        else:
            rombank |= rambank << 5
            self._map_rom(self.rom_lower, 0)
            self._map_rom(self.rom_upper, rombank)
            self._map_ram(self.extram, 0)

    def _mbc3_rom_put(self, addr: int, value: int) -> None:
        self.registers[addr // 0x2000] = value
        self.extram.enable = self.registers[0] == 0x0A
        rombank = self.registers[1] & 0x7F
        rombank += rombank == 0
        rambank = self.registers[2] & 0x03
        self._map_rom(self.rom_lower, 0)
        self._map_rom(self.rom_upper, rombank)
        self._map_ram(self.extram, rambank)


def mapper_gbs(rom: bytes) -> Mapper:
    """Mapper for GBS images: switchable upper bank and 8 KiB of enabled RAM."""
    m = Mapper(rom, RAMBANK_SIZE, _Controller.GBS)
    m.extram.enable = True
    m._map_rom(m.rom_lower, 0)
    m._map_rom(m.rom_upper, 1)
    m._map_ram(m.extram, 0)
    return m


def mapper_gbr(rom: bytes, bank_lower: int, bank_upper: int) -> Mapper:
    """Mapper for GBR images with fixed initial lower and upper banks."""
    m = Mapper(rom, RAMBANK_SIZE, _Controller.GBS)
    m._map_rom(m.rom_lower, bank_lower)
    m._map_rom(m.rom_upper, bank_upper)
    m._map_ram(m.extram, 0)
    return m


_CART_CONTROLLERS = {
    0x00: _Controller.MBC1,
    0x01: _Controller.MBC1,
    0x02: _Controller.MBC1,
    0x03: _Controller.MBC1,
    0x08: _Controller.MBC1,
    0x09: _Controller.MBC1,
    0x11: _Controller.MBC3,
    0x12: _Controller.MBC3,
    0x13: _Controller.MBC3,
}

_RAM_SIZES = {
    0x01: 0x00800,
    0x02: 0x02000,
    0x03: 0x08000,
}


def mapper_gb(rom: bytes, cart_type: int, rom_type: int, ram_type: int) -> Mapper:
    """Mapper for a Game Boy cartridge described by its header type bytes.

    Raises UnsupportedCartridge for cartridge types without a controller.
    """
    controller = _CART_CONTROLLERS.get(cart_type)
    if controller is None:
        raise UnsupportedCartridge(f"unsupported cartridge type {cart_type:#04x}")
    ram_size = _RAM_SIZES.get(ram_type, 0)
    m = Mapper(rom, ram_size, controller, has_extram=ram_size > 0)
    m._map_rom(m.rom_lower, 0)
    m._map_rom(m.rom_upper, 1)
    if ram_size > 0:
        m._map_ram(m.extram, 0)
    return m