"""Unit tests for error message formatting."""

import pytest

from smwrom.core.chr_tile import TileFormat
from smwrom.core.errors import (
    DecompressionError,
    InternalHeaderError,
    InternalHeaderErrorKind,
    PcToSnesError,
    RomParseError,
    RomReadError,
    SmwRomError,
    SnesToPcError,
)
from smwrom.core.rom_utils import MapMode, PcAddress, SnesAddress


class TestRomParseErrorMessages:
    """Each parse error variant renders its fixed message."""

    @pytest.mark.parametrize(
        "error, message",
        [
            (RomParseError.bad_address(0x12345), "ROM doesn't contain PC address 74565"),
            (RomParseError.bad_size(12), "Invalid ROM size: 12"),
            (RomParseError.internal_header(), "Parsing internal header failed"),
            (RomParseError.level(0x105), "Invalid level: 0x105"),
            (RomParseError.palette_global(), "Could not parse global level color palette"),
            (RomParseError.palette_level(0x1F), "Invalid level color palette: 0x1f"),
        ],
    )
    def test_message(self, error, message):
        assert str(error) == message

    def test_gfx_file_message(self):
        error = RomParseError.gfx_file(TileFormat.TILE_3BPP, SnesAddress(0x08D9F9), 0)
        assert str(error) == "Invalid GFX file - tile format: 3BPP, addr: $08D9F9, size: 0B"

    def test_equality_by_kind_and_params(self):
        assert RomParseError.level(3) == RomParseError.level(3)
        assert RomParseError.level(3) != RomParseError.level(4)
        assert RomParseError.level(3) != RomParseError.palette_level(3)


class TestOtherErrors:
    """Message texts for the remaining error families."""

    def test_pc_to_snes(self):
        assert str(PcToSnesError(PcAddress(0x400000))) == "PC address 0x400000 is too big for LoROM."

    def test_snes_to_pc(self):
        error = SnesToPcError(SnesAddress(0x7E0000), MapMode.SLOW_LOROM)
        assert str(error) == "Invalid SNES LoROM address: $7e0000"

    def test_internal_header(self):
        error = InternalHeaderError(InternalHeaderErrorKind.NOT_FOUND)
        assert error.kind is InternalHeaderErrorKind.NOT_FOUND
        assert str(error) == "Internal ROM header not found"

    def test_decompression(self):
        assert str(DecompressionError(" bad")) == "Decompressing data failed: bad"

    def test_read_error_keeps_cause_message(self):
        cause = RomParseError.bad_size(1)
        error = RomReadError(cause)
        assert error.cause is cause
        assert str(error) == "Invalid ROM size: 1"

    def test_hierarchy(self):
        for error_type in (PcToSnesError, InternalHeaderError, RomParseError, RomReadError):
            assert issubclass(error_type, SmwRomError)
