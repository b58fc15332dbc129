"""
Super Mario World ROM - Tile Decoding

SNES planar tile decoding for the bit depths the game's graphics use.

An 8x8 tile at N bits per pixel stores N bitplanes, one byte per row per
plane. Planes come in interleaved pairs: for each pair, 16 bytes alternate
(row 0 plane 0, row 0 plane 1, row 1 plane 0, ...). The 3bpp format the game
uses for most graphics files is a 2bpp pair followed by 8 bytes holding the
third plane, one byte per row.
"""

from enum import Enum

import numpy as np

TILE_SIZE = 8  # 8x8 pixels per tile


class TileFormat(Enum):
    TILE_2BPP = 2
    TILE_3BPP = 3
    TILE_4BPP = 4
    TILE_8BPP = 8

    @property
    def bits_per_pixel(self) -> int:
        return self.value

    @property
    def bytes_per_tile(self) -> int:
        return TILE_SIZE * self.value

    def __str__(self):
        return f"{self.value}BPP"


def _plane_offsets(tile_format: TileFormat) -> list[list[int]]:
    """Byte offset of each plane's row 0, and the stride between rows."""
    offsets = []
    for plane in range(tile_format.bits_per_pixel):
        if tile_format is TileFormat.TILE_3BPP and plane == 2:
            offsets.append([16, 1])
        else:
            offsets.append([(plane // 2) * 16 + (plane % 2), 2])
    return offsets


def decode_tiles(data: bytes, tile_format: TileFormat) -> np.ndarray:
    """
    Decode a run of tiles.

    Args:
        data: Tile data; its length must be a whole number of tiles
        tile_format: Bit depth of the tile data

    Returns:
        (tile_count, 8, 8) uint8 array

    Raises:
        ValueError: If data does not hold a whole number of tiles
    """
    size = tile_format.bytes_per_tile
    if len(data) % size:
        raise ValueError(
            f"{len(data)} bytes is not a whole number of {tile_format} tiles ({size} bytes each)"
        )

    raw = np.frombuffer(bytes(data), dtype=np.uint8).reshape(-1, size)
    pixels = np.zeros((raw.shape[0], TILE_SIZE, TILE_SIZE), dtype=np.uint8)

    for plane, (start, stride) in enumerate(_plane_offsets(tile_format)):
        # (tiles, 8 rows) of plane bytes, expanded MSB first into 8 columns
        rows = raw[:, start : start + stride * TILE_SIZE : stride]
        bits = np.unpackbits(rows[:, :, np.newaxis], axis=2)
        pixels |= bits << plane

    return pixels

