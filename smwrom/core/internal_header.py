"""
Super Mario World ROM - Internal Header

Locates and decodes the cartridge's internal header: the 32-byte metadata
record the SNES cartridge format places at one of two fixed locations.
The location is found by checking the complement/checksum pair at both
candidates; the LoROM location wins when both are valid.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import InternalHeaderError, InternalHeaderErrorKind, RomParseError
from .rom_reader import ByteCursor
from .rom_slice import PcSlice
from .rom_utils import MapMode, PcAddress

logger = logging.getLogger(__name__)

# Candidate header windows (PC address space)
HEADER_LOROM = PcSlice(0x007FC0, 64)
HEADER_HIROM = PcSlice(0x00FFC0, 64)

# Offsets within the header window
OFFSET_COMPLEMENT_CHECK = 0x1C
OFFSET_CHECKSUM = 0x1E

INTERNAL_HEADER_SIZE = 32
INTERNAL_ROM_NAME_SIZE = 21


class RomType(Enum):
    """Cartridge contents: ROM plus optional coprocessor and memory chips."""

    ROM = 0x00
    ROM_RAM = 0x01
    ROM_RAM_SRAM = 0x02

    ROM_DSP = 0x03
    ROM_SUPERFX = 0x13
    ROM_OBC1 = 0x23
    ROM_SA1 = 0x33
    ROM_SDD1 = 0x43
    ROM_SRTC = 0x53
    ROM_OTHER = 0xE3
    ROM_CUSTOM = 0xF3

    ROM_DSP_RAM = 0x04
    ROM_SUPERFX_RAM = 0x14
    ROM_OBC1_RAM = 0x24
    ROM_SA1_RAM = 0x34
    ROM_SDD1_RAM = 0x44
    ROM_SRTC_RAM = 0x54
    ROM_OTHER_RAM = 0xE4
    ROM_CUSTOM_RAM = 0xF4

    ROM_DSP_RAM_SRAM = 0x05
    ROM_SUPERFX_RAM_SRAM = 0x15
    ROM_OBC1_RAM_SRAM = 0x25
    ROM_SA1_RAM_SRAM = 0x35
    ROM_SDD1_RAM_SRAM = 0x45
    ROM_SRTC_RAM_SRAM = 0x55
    ROM_OTHER_RAM_SRAM = 0xE5
    ROM_CUSTOM_RAM_SRAM = 0xF5

    ROM_DSP_SRAM = 0x06
    ROM_SUPERFX_SRAM = 0x16
    ROM_OBC1_SRAM = 0x26
    ROM_SA1_SRAM = 0x36
    ROM_SDD1_SRAM = 0x46
    ROM_SRTC_SRAM = 0x56
    ROM_OTHER_SRAM = 0xE6
    ROM_CUSTOM_SRAM = 0xF6

    @property
    def coprocessor(self) -> str | None:
        if self.value <= 0x02:
            return None
        return _COPROCESSORS.get(self.value & 0xF0, "Unknown expansion chip")

    def __str__(self):
        if self is RomType.ROM:
            return "ROM"
        if self is RomType.ROM_RAM:
            return "ROM + RAM"
        if self is RomType.ROM_RAM_SRAM:
            return "ROM + RAM + SRAM"

        memory = self.value & 0x0F
        if memory == 0x3:
            return f"ROM + {self.coprocessor}"
        memory_name = _MEMORY_CHIPS.get(memory, "Unknown memory chip")
        return f"ROM + {self.coprocessor} + {memory_name}"


_COPROCESSORS = {
    0x00: "DSP",
    0x10: "SuperFX",
    0x20: "OBC-1",
    0x30: "SA-1",
    0x40: "SDD-1",
    0x50: "S-RTC",
    0xE0: "Other expansion chip",
    0xF0: "Custom expansion chip",
}

_MEMORY_CHIPS = {
    0x4: "RAM",
    0x5: "RAM + SRAM",
    0x6: "SRAM",
}


class RegionCode(Enum):
    JAPAN = 0x00
    NORTH_AMERICA = 0x01
    EUROPE = 0x02
    SWEDEN = 0x03
    FINLAND = 0x04
    DENMARK = 0x05
    FRANCE = 0x06
    NETHERLANDS = 0x07
    SPAIN = 0x08
    GERMANY = 0x09
    ITALY = 0x0A
    CHINA = 0x0B
    INDONESIA = 0x0C
    KOREA = 0x0D
    GLOBAL = 0x0E
    CANADA = 0x0F
    BRAZIL = 0x10
    AUSTRALIA = 0x11
    OTHER1 = 0x12
    OTHER2 = 0x13
    OTHER3 = 0x14

    def __str__(self):
        if self.name.startswith("OTHER"):
            return f"Other ({self.name[-1]})"
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class RomInternalHeader:
    internal_rom_name: str
    map_mode: MapMode
    rom_type: RomType
    rom_size: int
    sram_size: int
    region_code: RegionCode
    developer_id: int
    version_number: int

    def rom_size_in_kb(self) -> int:
        return 2**self.rom_size

    def sram_size_in_kb(self) -> int:
        if self.sram_size == 0:
            return 0
        return 2**self.sram_size

    @classmethod
    def parse(cls, rom_data: bytes) -> "RomInternalHeader":
        """
        Locate and decode the internal header.

        Args:
            rom_data: Trimmed ROM image (copier header removed)

        Returns:
            Decoded header

        Raises:
            InternalHeaderError: If no valid header location exists or a
                field is malformed; the error kind names the failing field
        """
        begin = cls.find(rom_data)

        try:
            record = ByteCursor(rom_data, begin).read_bytes(INTERNAL_HEADER_SIZE)
        except RomParseError as err:
            raise InternalHeaderError(InternalHeaderErrorKind.ISOLATING_DATA) from err
        cursor = ByteCursor(record)

        name_bytes = _read_field(
            cursor.read_bytes, InternalHeaderErrorKind.READ_ROM_NAME, INTERNAL_ROM_NAME_SIZE
        )
        try:
            internal_rom_name = name_bytes.decode("utf-8")
        except UnicodeDecodeError as err:
            raise InternalHeaderError(InternalHeaderErrorKind.READ_ROM_NAME) from err

        map_mode = _read_enum(cursor, MapMode, InternalHeaderErrorKind.READ_MAP_MODE)
        rom_type = _read_enum(cursor, RomType, InternalHeaderErrorKind.READ_ROM_TYPE)
        rom_size = _read_field(cursor.read_u8, InternalHeaderErrorKind.READ_ROM_SIZE)
        sram_size = _read_field(cursor.read_u8, InternalHeaderErrorKind.READ_SRAM_SIZE)
        region_code = _read_enum(cursor, RegionCode, InternalHeaderErrorKind.READ_REGION_CODE)
        developer_id = _read_field(cursor.read_u8, InternalHeaderErrorKind.READ_DEVELOPER_ID)
        version_number = _read_field(cursor.read_u8, InternalHeaderErrorKind.READ_VERSION_NUMBER)

        return cls(
            internal_rom_name=internal_rom_name,
            map_mode=map_mode,
            rom_type=rom_type,
            rom_size=rom_size,
            sram_size=sram_size,
            region_code=region_code,
            developer_id=developer_id,
            version_number=version_number,
        )

    @staticmethod
    def find(rom_data: bytes) -> PcAddress:
        """
        Find the internal header by its complement/checksum pair.

        Args:
            rom_data: Trimmed ROM image

        Returns:
            PC address of the header record

        Raises:
            InternalHeaderError: NOT_FOUND if neither location validates,
                or READ_*_CHECKSUM if the ROM is too short to hold one
        """
        lo_cpl, lo_csm = _read_checks(
            rom_data, HEADER_LOROM.begin, InternalHeaderErrorKind.READ_LOROM_CHECKSUM
        )
        hi_cpl, hi_csm = _read_checks(
            rom_data, HEADER_HIROM.begin, InternalHeaderErrorKind.READ_HIROM_CHECKSUM
        )

        if (lo_csm ^ lo_cpl) == 0xFFFF:
            logger.info("Internal ROM header found at LoROM location: %#x", int(HEADER_LOROM.begin))
            return HEADER_LOROM.begin
        if (hi_csm ^ hi_cpl) == 0xFFFF:
            logger.info("Internal ROM header found at HiROM location: %#x", int(HEADER_HIROM.begin))
            return HEADER_HIROM.begin

        logger.error("Couldn't find internal ROM header due to invalid checksums")
        logger.error("(LoROM: %X^%X, HiROM: %X^%X)", lo_cpl, lo_csm, hi_cpl, hi_csm)
        raise InternalHeaderError(InternalHeaderErrorKind.NOT_FOUND)


def _read_checks(rom_data: bytes, begin: PcAddress, kind: InternalHeaderErrorKind):
    cursor = ByteCursor(rom_data, begin + OFFSET_COMPLEMENT_CHECK)
    try:
        return cursor.read_u16_le(), cursor.read_u16_le()
    except RomParseError as err:
        raise InternalHeaderError(kind) from err


def _read_field(read, kind: InternalHeaderErrorKind, *args):
    try:
        return read(*args)
    except RomParseError as err:
        raise InternalHeaderError(kind) from err


def _read_enum(cursor: ByteCursor, enum_type, kind: InternalHeaderErrorKind):
    raw = _read_field(cursor.read_u8, kind)
    try:
        return enum_type(raw)
    except ValueError as err:
        raise InternalHeaderError(kind) from err
