"""Unit tests for level header decoding."""

import pytest

from smwrom.core.errors import RomParseError, SnesToPcError
from smwrom.core.level_header import (
    LEVEL_COUNT,
    Level,
    PrimaryLevelHeader,
    SecondaryLevelHeader,
)
from smwrom.core.rom_reader import RomReader
from smwrom.core.rom_utils import SnesAddress


class TestPrimaryLevelHeader:
    """Tests for the 5-byte primary header bitfields."""

    def test_fields(self):
        header = PrimaryLevelHeader.from_bytes(bytes([0x65, 0x41, 0xB4, 0xAE, 0x63]))
        assert header.palette_bg == 3
        assert header.level_length == 5
        assert header.back_area_color == 2
        assert header.level_mode == 1
        assert header.layer3_priority is True
        assert header.music == 3
        assert header.sprite_gfx == 4
        assert header.timer == 2
        assert header.palette_sprite == 5
        assert header.palette_fg == 6
        assert header.item_memory == 1
        assert header.vertical_scroll == 2
        assert header.fg_bg_gfx == 3

    def test_all_zero(self):
        header = PrimaryLevelHeader.from_bytes(bytes(5))
        assert header.layer3_priority is False
        assert header.palette_bg == header.level_length == header.fg_bg_gfx == 0

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            PrimaryLevelHeader.from_bytes(bytes(4))


class TestSecondaryLevelHeader:
    """Tests for the four secondary header table bytes."""

    def test_fields(self):
        header = SecondaryLevelHeader.from_bytes(0x3A, 0x9D, 0x79, 0xCA)
        assert header.layer2_scroll == 3
        assert header.main_entrance_pos == (5, 0xA)
        assert header.layer3 == 2
        assert header.main_entrance_mario_action == 3
        assert header.midway_entrance_screen == 7
        assert header.fg_initial_pos == 2
        assert header.bg_initial_pos == 1
        assert header.main_entrance_screen == 0x0A
        assert header.no_yoshi_level is True
        assert header.vertical_level is True


class TestLevelParse:
    """Tests for reading a level through its layer 1 pointer."""

    def test_parse(self, valid_rom):
        reader = RomReader(valid_rom.build())
        level = Level.parse(reader, 0x105)
        assert level.number == 0x105
        assert level.layer1_address == SnesAddress(0x058000)
        assert level.primary_header.level_length == 5
        assert level.secondary_header.main_entrance_pos == (5, 0xA)

    def test_secondary_tables_indexed_by_level(self, valid_rom):
        valid_rom.put(0x05F600 + 0x1FF, bytes([0x05]))
        reader = RomReader(valid_rom.build())
        assert Level.parse(reader, 0x1FF).secondary_header.main_entrance_screen == 5
        assert Level.parse(reader, 0x1FE).secondary_header.main_entrance_screen == 0x0A

    def test_unmapped_pointer(self, valid_rom):
        valid_rom.set_level_pointer(7, 0x000000)
        with pytest.raises(SnesToPcError):
            Level.parse(RomReader(valid_rom.build()), 7)

    def test_pointer_past_end(self, valid_rom):
        # $10:8000 -> PC 0x80000, past a 256KB image
        valid_rom.set_level_pointer(7, 0x108000)
        with pytest.raises(RomParseError):
            Level.parse(RomReader(valid_rom.build()), 7)

    @pytest.mark.parametrize("level_num", [-1, LEVEL_COUNT])
    def test_level_number_out_of_range(self, valid_rom, level_num):
        with pytest.raises(ValueError):
            Level.parse(RomReader(valid_rom.build()), level_num)
