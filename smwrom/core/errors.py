"""
Super Mario World ROM - Error Types

Every failure the decoding engine can report. Errors are tagged values:
each family carries an ``Enum`` kind plus the arguments its message needs,
and a ``format_*`` function turns that pair into the text shown to users.
None of these conditions are transient, so none of them are retried.
"""

from enum import Enum, auto
from typing import Any


class SmwRomError(Exception):
    """Base class for all ROM decoding errors."""

    pass


# ============================================================================
# Address conversion
# ============================================================================


class AddressConversionError(SmwRomError):
    """Raised when an address cannot be translated to the other address space."""

    pass


class PcToSnesError(AddressConversionError):
    """PC offset too large to be represented as a LoROM SNES address."""

    def __init__(self, addr):
        self.addr = addr
        super().__init__(f"PC address {int(addr):#x} is too big for LoROM.")


class SnesToPcError(AddressConversionError):
    """SNES address not mapped to ROM under the given map mode."""

    def __init__(self, addr, map_mode):
        self.addr = addr
        self.map_mode = map_mode
        super().__init__(f"Invalid SNES {map_mode} address: ${int(addr):x}")


# ============================================================================
# Internal header
# ============================================================================


class InternalHeaderErrorKind(Enum):
    NOT_FOUND = auto()
    ISOLATING_DATA = auto()
    READ_LOROM_CHECKSUM = auto()
    READ_HIROM_CHECKSUM = auto()
    READ_ROM_NAME = auto()
    READ_MAP_MODE = auto()
    READ_ROM_TYPE = auto()
    READ_ROM_SIZE = auto()
    READ_SRAM_SIZE = auto()
    READ_REGION_CODE = auto()
    READ_DEVELOPER_ID = auto()
    READ_VERSION_NUMBER = auto()


_INTERNAL_HEADER_MESSAGES = {
    InternalHeaderErrorKind.NOT_FOUND: "Internal ROM header not found",
    InternalHeaderErrorKind.ISOLATING_DATA: "Could not isolate internal ROM header data",
    InternalHeaderErrorKind.READ_LOROM_CHECKSUM: "Could not read LoROM checksum",
    InternalHeaderErrorKind.READ_HIROM_CHECKSUM: "Could not read HiROM checksum",
    InternalHeaderErrorKind.READ_ROM_NAME: "Could not read internal ROM name",
    InternalHeaderErrorKind.READ_MAP_MODE: "Could not read map mode",
    InternalHeaderErrorKind.READ_ROM_TYPE: "Could not read ROM type",
    InternalHeaderErrorKind.READ_ROM_SIZE: "Could not read ROM size",
    InternalHeaderErrorKind.READ_SRAM_SIZE: "Could not read SRAM size",
    InternalHeaderErrorKind.READ_REGION_CODE: "Could not read region code",
    InternalHeaderErrorKind.READ_DEVELOPER_ID: "Could not read developer ID",
    InternalHeaderErrorKind.READ_VERSION_NUMBER: "Could not read version number",
}


def format_internal_header_error(kind: InternalHeaderErrorKind) -> str:
    return _INTERNAL_HEADER_MESSAGES[kind]


class InternalHeaderError(SmwRomError):
    """Raised when the internal ROM header cannot be located or decoded."""

    def __init__(self, kind: InternalHeaderErrorKind):
        self.kind = kind
        super().__init__(format_internal_header_error(kind))


# ============================================================================
# ROM parsing
# ============================================================================


class RomParseErrorKind(Enum):
    BAD_ADDRESS = auto()
    BAD_SIZE = auto()
    INTERNAL_HEADER = auto()
    LEVEL = auto()
    PALETTE_GLOBAL = auto()
    PALETTE_LEVEL = auto()
    GFX_FILE = auto()


def format_rom_parse_error(kind: RomParseErrorKind, args: tuple[Any, ...]) -> str:
    """
    Render the user-visible message for a ROM parse error.

    Args:
        kind: Error variant
        args: Variant arguments, in the order the variant declares them

    Returns:
        Message text
    """
    if kind is RomParseErrorKind.BAD_ADDRESS:
        return f"ROM doesn't contain PC address {int(args[0])}"
    if kind is RomParseErrorKind.BAD_SIZE:
        return f"Invalid ROM size: {args[0]}"
    if kind is RomParseErrorKind.INTERNAL_HEADER:
        return "Parsing internal header failed"
    if kind is RomParseErrorKind.LEVEL:
        return f"Invalid level: {args[0]:#x}"
    if kind is RomParseErrorKind.PALETTE_GLOBAL:
        return "Could not parse global level color palette"
    if kind is RomParseErrorKind.PALETTE_LEVEL:
        return f"Invalid level color palette: {args[0]:#x}"
    if kind is RomParseErrorKind.GFX_FILE:
        tile_format, addr, size_bytes = args
        return (
            f"Invalid GFX file - tile format: {tile_format}, "
            f"addr: {addr}, size: {size_bytes}B"
        )
    raise ValueError(f"Unknown ROM parse error kind: {kind}")


class RomParseError(SmwRomError):
    """
    Raised when a stage of ROM decoding fails.

    Use the classmethod constructors rather than building the kind/args
    pair by hand.
    """

    def __init__(self, kind: RomParseErrorKind, *args: Any):
        self.kind = kind
        self.params = args
        super().__init__(format_rom_parse_error(kind, args))

    def __eq__(self, other):
        if not isinstance(other, RomParseError):
            return NotImplemented
        return self.kind is other.kind and self.params == other.params

    __hash__ = SmwRomError.__hash__

    @classmethod
    def bad_address(cls, pc_offset: int) -> "RomParseError":
        return cls(RomParseErrorKind.BAD_ADDRESS, pc_offset)

    @classmethod
    def bad_size(cls, remainder: int) -> "RomParseError":
        return cls(RomParseErrorKind.BAD_SIZE, remainder)

    @classmethod
    def internal_header(cls) -> "RomParseError":
        return cls(RomParseErrorKind.INTERNAL_HEADER)

    @classmethod
    def level(cls, level_num: int) -> "RomParseError":
        return cls(RomParseErrorKind.LEVEL, level_num)

    @classmethod
    def palette_global(cls) -> "RomParseError":
        return cls(RomParseErrorKind.PALETTE_GLOBAL)

    @classmethod
    def palette_level(cls, level_num: int) -> "RomParseError":
        return cls(RomParseErrorKind.PALETTE_LEVEL, level_num)

    @classmethod
    def gfx_file(cls, tile_format, addr, size_bytes: int) -> "RomParseError":
        return cls(RomParseErrorKind.GFX_FILE, tile_format, addr, size_bytes)


# ============================================================================
# Decompression and top-level load errors
# ============================================================================


class DecompressionError(SmwRomError):
    """Raised by the graphics codec when compressed data is malformed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Decompressing data failed:{reason}")


class RomReadError(SmwRomError):
    """
    Top-level load failure.

    Wraps either the ``OSError`` raised while reading the ROM file or the
    ``RomParseError`` raised while decoding it. The message is the wrapped
    error's message, unchanged.
    """

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(str(cause))
