"""
Super Mario World ROM - Graphics Files

A graphics file is a compressed block of tiles. Decoding one takes a tile
format, a location, and a codec: the region is read, decompressed, and
split into 8x8 tiles.

The vanilla game keeps 50 compressed files (GFX00-GFX31) whose addresses
live in three parallel pointer tables (low, high, bank bytes).
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .chr_tile import TileFormat, decode_tiles
from .decompressor import decompress_lz2
from .rom_reader import RomReader
from .rom_slice import RomSlice, SnesSlice
from .rom_utils import SnesAddress

# Compressed bytes in, decompressed bytes out; raises DecompressionError
Decoder = Callable[[bytes], bytes]

GFX_FILE_COUNT = 0x32

TABLE_GFX_PTR_LOW = SnesSlice(0x00B992, 1)
TABLE_GFX_PTR_HIGH = SnesSlice(0x00B9C4, 1)
TABLE_GFX_PTR_BANK = SnesSlice(0x00B9F6, 1)


def gfx_file_format(file_num: int) -> TileFormat:
    """Tile format of a vanilla graphics file: GFX28-GFX2B are layer 3 (2bpp)."""
    if 0x28 <= file_num <= 0x2B:
        return TileFormat.TILE_2BPP
    return TileFormat.TILE_3BPP


@dataclass(frozen=True)
class GfxFileMeta:
    """Manifest entry. A size of 0 means the compressed stream ends itself."""

    tile_format: TileFormat
    address: SnesAddress
    size: int = 0


@dataclass(frozen=True, eq=False)
class GfxFile:
    tile_format: TileFormat
    address: SnesAddress
    data: bytes
    tiles: np.ndarray

    @property
    def tile_count(self) -> int:
        return self.tiles.shape[0]

    @classmethod
    def parse(
        cls,
        reader: RomReader,
        tile_format: TileFormat,
        address: SnesAddress,
        size: int = 0,
        decoder: Decoder = decompress_lz2,
    ) -> "GfxFile":
        """
        Read, decompress and decode one graphics file.

        Args:
            reader: ROM to read from
            tile_format: Bit depth of the decompressed tiles
            address: Start of the compressed data
            size: Compressed size in bytes, or 0 to read to the end of the ROM
            decoder: Decompression codec

        Returns:
            Decoded graphics file

        Raises:
            SnesToPcError: If the address is not mapped to ROM
            RomParseError: If the region runs past the end of the ROM
            DecompressionError: If the codec rejects the data
            ValueError: If the output is not a whole number of tiles
        """
        compressed = reader.read_slice(RomSlice(address, size))
        data = decoder(compressed)
        return cls(tile_format, address, data, decode_tiles(data, tile_format))


def read_gfx_file_meta(reader: RomReader, file_num: int) -> GfxFileMeta:
    """
    Look up one vanilla graphics file in the ROM's pointer tables.

    Raises:
        SnesToPcError: If a table address is not mapped to ROM
        RomParseError: If the tables run past the end of the ROM
    """
    low = reader.read_snes_byte(TABLE_GFX_PTR_LOW.skip_forward(file_num).begin)
    high = reader.read_snes_byte(TABLE_GFX_PTR_HIGH.skip_forward(file_num).begin)
    bank = reader.read_snes_byte(TABLE_GFX_PTR_BANK.skip_forward(file_num).begin)
    address = SnesAddress((bank << 16) | (high << 8) | low)
    return GfxFileMeta(gfx_file_format(file_num), address)
