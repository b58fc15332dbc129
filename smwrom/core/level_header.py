"""
Super Mario World ROM - Level Headers

Each of the 0x200 levels has a primary header (5 bytes at the start of its
layer 1 data) and a secondary header (one byte in each of four tables
indexed by level number). Both are plain bitfield records.
"""

from dataclasses import dataclass
from typing import Tuple

from .rom_reader import RomReader
from .rom_slice import SnesSlice
from .rom_utils import SnesAddress

LEVEL_COUNT = 0x200

# Layer 1 data pointers: LEVEL_COUNT x 3-byte long pointers
TABLE_LAYER1_DATA = SnesSlice(0x05E000, 3)

PRIMARY_HEADER_SIZE = 5

# Secondary header: LEVEL_COUNT x 1 byte per table
TABLE_SECONDARY_HEADER_1 = SnesSlice(0x05F000, 1)  # SSSSYYYY
TABLE_SECONDARY_HEADER_2 = SnesSlice(0x05F200, 1)  # 33AAAXXX
TABLE_SECONDARY_HEADER_3 = SnesSlice(0x05F400, 1)  # MMMMFFBB
TABLE_SECONDARY_HEADER_4 = SnesSlice(0x05F600, 1)  # NV-EEEEE


@dataclass(frozen=True)
class PrimaryLevelHeader:
    palette_bg: int
    level_length: int
    back_area_color: int
    level_mode: int
    layer3_priority: bool
    music: int
    sprite_gfx: int
    timer: int
    palette_sprite: int
    palette_fg: int
    item_memory: int
    vertical_scroll: int
    fg_bg_gfx: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "PrimaryLevelHeader":
        """
        Decode the 5-byte primary header.

        Byte layout:
            0: BBBLLLLL  bg palette, level length (screens)
            1: CCCOOOOO  back area color, level mode
            2: 3MMMSSSS  layer 3 priority, music, sprite GFX set
            3: TTPPPFFF  timer, sprite palette, fg palette
            4: IIVVZZZZ  item memory, vertical scroll, FG/BG GFX set
        """
        if len(data) != PRIMARY_HEADER_SIZE:
            raise ValueError(f"Primary header is {PRIMARY_HEADER_SIZE} bytes, got {len(data)}")
        b0, b1, b2, b3, b4 = data
        return cls(
            palette_bg=(b0 >> 5) & 0x07,
            level_length=b0 & 0x1F,
            back_area_color=(b1 >> 5) & 0x07,
            level_mode=b1 & 0x1F,
            layer3_priority=bool(b2 & 0x80),
            music=(b2 >> 4) & 0x07,
            sprite_gfx=b2 & 0x0F,
            timer=(b3 >> 6) & 0x03,
            palette_sprite=(b3 >> 3) & 0x07,
            palette_fg=b3 & 0x07,
            item_memory=(b4 >> 6) & 0x03,
            vertical_scroll=(b4 >> 4) & 0x03,
            fg_bg_gfx=b4 & 0x0F,
        )


@dataclass(frozen=True)
class SecondaryLevelHeader:
    layer2_scroll: int
    main_entrance_pos: Tuple[int, int]  # (x, y)
    layer3: int
    main_entrance_mario_action: int
    main_entrance_screen: int
    midway_entrance_screen: int
    fg_initial_pos: int
    bg_initial_pos: int
    no_yoshi_level: bool
    vertical_level: bool

    @classmethod
    def from_bytes(cls, b1: int, b2: int, b3: int, b4: int) -> "SecondaryLevelHeader":
        """Decode one byte from each of the four secondary header tables."""
        return cls(
            layer2_scroll=(b1 >> 4) & 0x0F,
            main_entrance_pos=(b2 & 0x07, b1 & 0x0F),
            layer3=(b2 >> 6) & 0x03,
            main_entrance_mario_action=(b2 >> 3) & 0x07,
            main_entrance_screen=b4 & 0x1F,
            midway_entrance_screen=(b3 >> 4) & 0x0F,
            fg_initial_pos=(b3 >> 2) & 0x03,
            bg_initial_pos=b3 & 0x03,
            no_yoshi_level=bool(b4 & 0x80),
            vertical_level=bool(b4 & 0x40),
        )


@dataclass(frozen=True)
class Level:
    number: int
    layer1_address: SnesAddress
    primary_header: PrimaryLevelHeader
    secondary_header: SecondaryLevelHeader

    @classmethod
    def parse(cls, reader: RomReader, level_num: int) -> "Level":
        """
        Read both headers of one level.

        Args:
            reader: ROM to read from
            level_num: Level number (0 to LEVEL_COUNT - 1)

        Returns:
            Parsed level

        Raises:
            ValueError: If the level number is out of range
            SnesToPcError: If a pointer or table address is not mapped to ROM
            RomParseError: If a read runs past the end of the ROM
        """
        if not 0 <= level_num < LEVEL_COUNT:
            raise ValueError(f"Level {level_num:#x} out of range 0-{LEVEL_COUNT - 1:#x}")

        layer1_address = SnesAddress(
            reader.read_snes_long(TABLE_LAYER1_DATA.skip_forward(level_num).begin)
        )
        primary = PrimaryLevelHeader.from_bytes(
            reader.read_snes(layer1_address, PRIMARY_HEADER_SIZE)
        )

        secondary_bytes = [
            reader.read_snes_byte(table.skip_forward(level_num).begin)
            for table in (
                TABLE_SECONDARY_HEADER_1,
                TABLE_SECONDARY_HEADER_2,
                TABLE_SECONDARY_HEADER_3,
                TABLE_SECONDARY_HEADER_4,
            )
        ]
        secondary = SecondaryLevelHeader.from_bytes(*secondary_bytes)

        return cls(level_num, layer1_address, primary, secondary)
