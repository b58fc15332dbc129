"""Unit tests for internal ROM header location and decoding."""

import pytest

from smwrom.core.errors import InternalHeaderError, InternalHeaderErrorKind
from smwrom.core.internal_header import (
    HEADER_HIROM,
    HEADER_LOROM,
    RegionCode,
    RomInternalHeader,
    RomType,
)
from smwrom.core.rom_utils import MapMode, PcAddress

LOROM_HEADER = 0x7FC0
HIROM_HEADER = 0xFFC0


class TestFind:
    """Tests for header location by complement/checksum."""

    def test_lorom_only(self, synthetic_rom):
        data = synthetic_rom.set_header(LOROM_HEADER).build()
        assert RomInternalHeader.find(data) == PcAddress(0x7FC0)

    def test_hirom_only(self, synthetic_rom):
        data = synthetic_rom.set_header(HIROM_HEADER, map_mode=0x21).build()
        assert RomInternalHeader.find(data) == PcAddress(0xFFC0)

    def test_both_valid_prefers_lorom(self, synthetic_rom):
        data = (
            synthetic_rom.set_header(LOROM_HEADER)
            .set_header(HIROM_HEADER, map_mode=0x21)
            .build()
        )
        assert RomInternalHeader.find(data) == HEADER_LOROM.begin

    def test_neither_valid(self, synthetic_rom):
        data = (
            synthetic_rom.set_header(LOROM_HEADER, valid=False)
            .set_header(HIROM_HEADER, valid=False)
            .build()
        )
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.find(data)
        assert exc_info.value.kind is InternalHeaderErrorKind.NOT_FOUND

    def test_blank_image_not_found(self, synthetic_rom):
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.find(synthetic_rom.build())
        assert exc_info.value.kind is InternalHeaderErrorKind.NOT_FOUND

    def test_too_short_for_lorom_checksum(self):
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.find(bytes(0x7000))
        assert exc_info.value.kind is InternalHeaderErrorKind.READ_LOROM_CHECKSUM

    def test_too_short_for_hirom_checksum(self):
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.find(bytes(0x8000))
        assert exc_info.value.kind is InternalHeaderErrorKind.READ_HIROM_CHECKSUM

    def test_header_windows(self):
        assert HEADER_LOROM.size == HEADER_HIROM.size == 64


class TestParse:
    """Tests for decoding the header record fields."""

    def test_fields(self, synthetic_rom):
        header = RomInternalHeader.parse(synthetic_rom.set_header().build())
        assert header.internal_rom_name == "SUPER MARIOWORLD     "
        assert header.map_mode is MapMode.SLOW_LOROM
        assert header.rom_type is RomType.ROM_RAM_SRAM
        assert header.rom_size == 0x09
        assert header.sram_size == 0x01
        assert header.region_code is RegionCode.NORTH_AMERICA
        assert header.developer_id == 0x01
        assert header.version_number == 0

    def test_hirom_location(self, synthetic_rom):
        data = synthetic_rom.set_header(HIROM_HEADER, map_mode=0x31, version=2).build()
        header = RomInternalHeader.parse(data)
        assert header.map_mode is MapMode.FAST_HIROM
        assert header.version_number == 2

    def test_sizes_in_kb(self, synthetic_rom):
        header = RomInternalHeader.parse(synthetic_rom.set_header().build())
        assert header.rom_size_in_kb() == 512
        assert header.sram_size_in_kb() == 2

    def test_no_sram(self, synthetic_rom):
        header = RomInternalHeader.parse(synthetic_rom.set_header(sram_size=0).build())
        assert header.sram_size_in_kb() == 0

    def test_invalid_utf8_name(self, synthetic_rom):
        data = synthetic_rom.set_header(name=b"\xff" + b" " * 20).build()
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.parse(data)
        assert exc_info.value.kind is InternalHeaderErrorKind.READ_ROM_NAME

    @pytest.mark.parametrize(
        "field, value, kind",
        [
            ("map_mode", 0x00, InternalHeaderErrorKind.READ_MAP_MODE),
            ("rom_type", 0x07, InternalHeaderErrorKind.READ_ROM_TYPE),
            ("region", 0x15, InternalHeaderErrorKind.READ_REGION_CODE),
        ],
    )
    def test_invalid_enum_fields(self, synthetic_rom, field, value, kind):
        data = synthetic_rom.set_header(**{field: value}).build()
        with pytest.raises(InternalHeaderError) as exc_info:
            RomInternalHeader.parse(data)
        assert exc_info.value.kind is kind


class TestDisplay:
    """String renderings of header enums."""

    @pytest.mark.parametrize(
        "rom_type, text",
        [
            (RomType.ROM, "ROM"),
            (RomType.ROM_RAM_SRAM, "ROM + RAM + SRAM"),
            (RomType.ROM_DSP, "ROM + DSP"),
            (RomType.ROM_SA1_SRAM, "ROM + SA-1 + SRAM"),
            (RomType.ROM_SUPERFX_RAM_SRAM, "ROM + SuperFX + RAM + SRAM"),
        ],
    )
    def test_rom_type(self, rom_type, text):
        assert str(rom_type) == text

    def test_region(self):
        assert str(RegionCode.NORTH_AMERICA) == "North America"
        assert str(RegionCode.OTHER1) == "Other (1)"
        assert len(RegionCode) == 0x15
