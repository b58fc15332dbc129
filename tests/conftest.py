"""Shared pytest fixtures for building synthetic ROM images."""

import pytest

from smwrom.core.level_header import LEVEL_COUNT
from smwrom.core.rom_utils import MapMode, SnesAddress, snes_to_pc

ROM_SIZE = 0x40000  # 256KB, a multiple of 1KB

LOROM_HEADER = 0x7FC0
HIROM_HEADER = 0xFFC0

# Primary header used for every level unless a test overrides it:
# bg palette 3, length 5 / back area 2, mode 1 / l3 priority, music 3,
# sprite gfx 4 / timer 2, sprite palette 5, fg palette 6 / item memory 1,
# vertical scroll 2, fg/bg gfx 3
PRIMARY_HEADER = bytes([0x65, 0x41, 0xB4, 0xAE, 0x63])
SECONDARY_HEADER = (0x3A, 0x9D, 0x79, 0xCA)
LEVEL_DATA_ADDR = 0x058000

# Two byte-fill chunks of 24 x 0xFF, then end of stream: 48 bytes, which is
# a whole number of both 2bpp (16-byte) and 3bpp (24-byte) tiles
GFX_STREAM = bytes([0x37, 0xFF, 0x37, 0xFF, 0xFF])
GFX_DATA_ADDR = 0x078000


class SyntheticRom:
    """
    Builds a minimal LoROM image with just enough data for the loader.

    Everything not written explicitly is zero.
    """

    def __init__(self, size: int = ROM_SIZE):
        self.data = bytearray(size)

    def pc(self, snes_addr: int) -> int:
        return int(snes_to_pc(SnesAddress(snes_addr), MapMode.SLOW_LOROM))

    def put(self, snes_addr: int, data: bytes) -> "SyntheticRom":
        pc = self.pc(snes_addr)
        self.data[pc : pc + len(data)] = data
        return self

    def put_word(self, snes_addr: int, value: int) -> "SyntheticRom":
        return self.put(snes_addr, bytes([value & 0xFF, value >> 8]))

    def set_header(
        self,
        location: int = LOROM_HEADER,
        name: bytes = b"SUPER MARIOWORLD     ",
        map_mode: int = 0x20,
        rom_type: int = 0x02,
        rom_size: int = 0x09,
        sram_size: int = 0x01,
        region: int = 0x01,
        developer_id: int = 0x01,
        version: int = 0x00,
        valid: bool = True,
    ) -> "SyntheticRom":
        assert len(name) == 21
        record = name + bytes(
            [map_mode, rom_type, rom_size, sram_size, region, developer_id, version]
        )
        self.data[location : location + 28] = record
        self.set_checksum(location, valid)
        return self

    def set_checksum(self, location: int, valid: bool) -> "SyntheticRom":
        checksum = 0x5A3C
        complement = checksum ^ 0xFFFF if valid else checksum
        self.data[location + 0x1C : location + 0x20] = bytes(
            [complement & 0xFF, complement >> 8, checksum & 0xFF, checksum >> 8]
        )
        return self

    def set_level_pointer(self, level_num: int, snes_addr: int) -> "SyntheticRom":
        return self.put(
            0x05E000 + 3 * level_num,
            bytes([snes_addr & 0xFF, (snes_addr >> 8) & 0xFF, snes_addr >> 16]),
        )

    def set_levels(
        self,
        primary: bytes = PRIMARY_HEADER,
        secondary: tuple = SECONDARY_HEADER,
    ) -> "SyntheticRom":
        """Point every level at one shared primary header."""
        self.put(LEVEL_DATA_ADDR, primary)
        for level_num in range(LEVEL_COUNT):
            self.set_level_pointer(level_num, LEVEL_DATA_ADDR)
            for table_num, value in enumerate(secondary):
                self.put(0x05F000 + 0x200 * table_num + level_num, bytes([value]))
        return self

    def set_gfx_files(self, stream: bytes = GFX_STREAM) -> "SyntheticRom":
        """Point every vanilla graphics file at one compressed stream."""
        self.put(GFX_DATA_ADDR, stream)
        for file_num in range(0x32):
            self.put(0x00B992 + file_num, bytes([GFX_DATA_ADDR & 0xFF]))
            self.put(0x00B9C4 + file_num, bytes([(GFX_DATA_ADDR >> 8) & 0xFF]))
            self.put(0x00B9F6 + file_num, bytes([GFX_DATA_ADDR >> 16]))
        return self

    def build(self, smc_header: bool = False) -> bytes:
        prefix = bytes(0x200) if smc_header else b""
        return prefix + bytes(self.data)


@pytest.fixture
def synthetic_rom():
    """Blank 256KB image builder."""
    return SyntheticRom()


@pytest.fixture
def valid_rom():
    """Image builder with a valid LoROM header, levels and graphics files."""
    return SyntheticRom().set_header().set_levels().set_gfx_files()
