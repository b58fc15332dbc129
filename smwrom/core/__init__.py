"""
Core SNES functionality.

This package contains address translation, ROM reading, internal header
and level header parsing, color palettes, graphics decompression and tile
decoding for Super Mario World.
"""

from .errors import (
    AddressConversionError,
    DecompressionError,
    InternalHeaderError,
    RomParseError,
    RomReadError,
    SmwRomError,
)
from .rom import Rom, load_rom
from .rom_reader import RomReader
from .rom_utils import MapMode, PcAddress, SnesAddress, pc_to_snes, snes_to_pc

__all__ = [
    "AddressConversionError",
    "DecompressionError",
    "InternalHeaderError",
    "RomParseError",
    "RomReadError",
    "SmwRomError",
    "Rom",
    "load_rom",
    "RomReader",
    "MapMode",
    "PcAddress",
    "SnesAddress",
    "pc_to_snes",
    "snes_to_pc",
]
