"""Unit tests for JSON export of decoded ROM values."""

import json

from smwrom.core.internal_header import RegionCode, RomInternalHeader, RomType
from smwrom.core.level_header import Level, PrimaryLevelHeader, SecondaryLevelHeader
from smwrom.core.palettes import Bgr555, GlobalLevelColorPalette, LevelColorPalette
from smwrom.core.rom_utils import MapMode, SnesAddress
from smwrom.formats.rom_json import (
    UNSET_CELL,
    format_color_row,
    header_to_dict,
    level_to_dict,
    palette_to_dict,
)


class TestColorRows:
    """Tests for palette row formatting."""

    def test_format(self):
        assert format_color_row([Bgr555(0x7FFF), Bgr555(0x001F)]) == "7FFF 001F"

    def test_format_unset(self):
        assert format_color_row([None, Bgr555(1)]) == f"{UNSET_CELL} 0001"


class TestToDict:
    """Tests for record conversion."""

    def test_header(self):
        header = RomInternalHeader(
            internal_rom_name="SUPER MARIOWORLD     ",
            map_mode=MapMode.SLOW_LOROM,
            rom_type=RomType.ROM_RAM_SRAM,
            rom_size=0x09,
            sram_size=0x01,
            region_code=RegionCode.NORTH_AMERICA,
            developer_id=0x01,
            version_number=0,
        )
        assert header_to_dict(header) == {
            "internal_rom_name": "SUPER MARIOWORLD     ",
            "map_mode": "LoROM",
            "rom_type": "ROM + RAM + SRAM",
            "rom_size_kb": 512,
            "sram_size_kb": 2,
            "region": "North America",
            "developer_id": "0x01",
            "version": 0,
        }

    def test_level(self):
        level = Level(
            0x105,
            SnesAddress(0x058000),
            PrimaryLevelHeader.from_bytes(bytes([0x65, 0x41, 0xB4, 0xAE, 0x63])),
            SecondaryLevelHeader.from_bytes(0x3A, 0x9D, 0x79, 0xCA),
        )
        data = level_to_dict(level)
        assert data["level"] == "0x105"
        assert data["layer1_address"] == "$058000"
        assert data["primary_header"]["music"] == 3
        assert data["secondary_header"]["main_entrance_pos"] == {"x": 5, "y": 10}
        # Must serialize without a custom encoder
        json.dumps(data)

    def test_level_palette(self):
        palette = LevelColorPalette(GlobalLevelColorPalette(), back_area_color=Bgr555(0x1234))
        data = palette_to_dict(palette)
        assert data["back_area_color"] == "1234"
        assert len(data["rows"]) == 16
        assert data["rows"][0].split()[0] == "0000"

    def test_global_palette_has_no_back_area(self):
        assert "back_area_color" not in palette_to_dict(GlobalLevelColorPalette())
