"""
Super Mario World ROM - Loader

Decodes a whole ROM image into a Rom value. Stages run in a fixed order and
the first failure aborts the load:

1. strip the optional 512-byte copier header
2. internal header
3. level headers, 0 to LEVEL_COUNT - 1
4. global level palette
5. one level palette per level, all sharing the global palette
6. graphics files

Each failure is reported as a RomParseError naming the stage (and level or
graphics file) that failed, chained to the underlying error.
"""

import logging
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .decompressor import decompress_lz2
from .errors import RomParseError, RomReadError, SmwRomError
from .gfx_file import (
    GFX_FILE_COUNT,
    TABLE_GFX_PTR_LOW,
    Decoder,
    GfxFile,
    GfxFileMeta,
    gfx_file_format,
    read_gfx_file_meta,
)
from .internal_header import RomInternalHeader
from .level_header import LEVEL_COUNT, Level
from .palettes import CustomColorPalette, GlobalLevelColorPalette, LevelColorPalette
from .rom_reader import RomReader
from .rom_utils import SMC_HEADER_BLOCK, SMC_HEADER_SIZE

logger = logging.getLogger(__name__)

# Errors a stage may raise for malformed input
_STAGE_ERRORS = (SmwRomError, ValueError)


@dataclass(frozen=True)
class Rom:
    """
    Decoded ROM. Built once by the loader and not modified afterwards.

    Every level palette shares ``global_level_color_palette``, and so does
    the Rom itself, so writes through a level palette never reach it.
    """

    internal_header: RomInternalHeader
    levels: Tuple[Level, ...]
    global_level_color_palette: GlobalLevelColorPalette
    level_color_palettes: Tuple[LevelColorPalette, ...]
    gfx_files: Tuple[GfxFile, ...]
    custom_color_palettes: Tuple[CustomColorPalette, ...] = field(default=())

    @classmethod
    def from_file(cls, path: Union[str, PathLike], **options) -> "Rom":
        """
        Load a ROM file.

        Args:
            path: Path to the ROM image (.smc/.sfc, with or without copier header)
            **options: Passed to from_raw

        Returns:
            Decoded ROM

        Raises:
            RomReadError: Wrapping the OSError or RomParseError that stopped the load
        """
        try:
            data = Path(path).read_bytes()
        except OSError as err:
            logger.error("Could not read ROM file %s: %s", path, err)
            raise RomReadError(err) from err

        try:
            return cls.from_raw(data, **options)
        except RomParseError as err:
            raise RomReadError(err) from err

    @classmethod
    def from_raw(
        cls,
        rom_data: bytes,
        gfx_manifest: Optional[Sequence[GfxFileMeta]] = None,
        decoder: Decoder = decompress_lz2,
    ) -> "Rom":
        """
        Decode a ROM image held in memory.

        Args:
            rom_data: Raw ROM image, with or without copier header
            gfx_manifest: Graphics files to decode; None reads the vanilla
                pointer tables from the ROM
            decoder: Graphics decompression codec

        Returns:
            Decoded ROM

        Raises:
            RomParseError: For the first stage that fails
        """
        rom_data = trim_smc_header(rom_data)

        internal_header = get_internal_header(rom_data)
        reader = RomReader(rom_data, internal_header.map_mode)

        levels = get_levels(reader)
        global_palette = get_global_level_color_palette(reader)
        level_palettes = get_level_color_palettes(reader, global_palette, levels)
        gfx_files = get_gfx_files(reader, gfx_manifest, decoder)

        logger.info(
            "Loaded '%s': %d levels, %d graphics files",
            internal_header.internal_rom_name.strip(),
            len(levels),
            len(gfx_files),
        )

        rom = cls(
            internal_header=internal_header,
            levels=tuple(levels),
            global_level_color_palette=global_palette,
            level_color_palettes=tuple(level_palettes),
            gfx_files=tuple(gfx_files),
        )
        global_palette.share(rom)
        return rom


def load_rom(source: Union[str, PathLike, bytes, bytearray, memoryview], **options) -> Rom:
    """
    Load a ROM from a path or from raw bytes.

    Args:
        source: Path to a ROM file, or the ROM image itself
        **options: gfx_manifest / decoder, see Rom.from_raw

    Returns:
        Decoded ROM

    Raises:
        RomReadError: Wrapping the OSError or RomParseError that stopped the load
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        try:
            return Rom.from_raw(bytes(source), **options)
        except RomParseError as err:
            raise RomReadError(err) from err
    return Rom.from_file(source, **options)


# ============================================================================
# Stages
# ============================================================================


def trim_smc_header(rom_data: bytes) -> bytes:
    """
    Remove the copier header if present.

    Raises:
        RomParseError: BadSize if the size is neither a multiple of 1KB
            nor a multiple of 1KB plus the 512-byte header
    """
    remainder = len(rom_data) % SMC_HEADER_BLOCK
    if remainder == SMC_HEADER_SIZE:
        logger.debug("Stripping %d-byte copier header", SMC_HEADER_SIZE)
        return rom_data[SMC_HEADER_SIZE:]
    if remainder == 0:
        return rom_data
    raise RomParseError.bad_size(remainder)


def get_internal_header(rom_data: bytes) -> RomInternalHeader:
    try:
        return RomInternalHeader.parse(rom_data)
    except _STAGE_ERRORS as err:
        raise RomParseError.internal_header() from err


def get_levels(reader: RomReader) -> list[Level]:
    levels = []
    for level_num in range(LEVEL_COUNT):
        try:
            levels.append(Level.parse(reader, level_num))
        except _STAGE_ERRORS as err:
            logger.error("Level %#x: %s", level_num, err)
            raise RomParseError.level(level_num) from err
    logger.debug("Parsed %d level headers", len(levels))
    return levels


def get_global_level_color_palette(reader: RomReader) -> GlobalLevelColorPalette:
    try:
        return GlobalLevelColorPalette.parse(reader)
    except _STAGE_ERRORS as err:
        raise RomParseError.palette_global() from err


def get_level_color_palettes(
    reader: RomReader, global_palette: GlobalLevelColorPalette, levels: Sequence[Level]
) -> list[LevelColorPalette]:
    palettes = []
    for level in levels:
        try:
            palettes.append(
                LevelColorPalette.parse(reader, level.primary_header, global_palette)
            )
        except _STAGE_ERRORS as err:
            logger.error("Level palette %#x: %s", level.number, err)
            raise RomParseError.palette_level(level.number) from err
    logger.debug("Parsed %d level palettes", len(palettes))
    return palettes


def get_gfx_files(
    reader: RomReader,
    gfx_manifest: Optional[Sequence[GfxFileMeta]],
    decoder: Decoder,
) -> list[GfxFile]:
    if gfx_manifest is None:
        gfx_manifest = []
        for file_num in range(GFX_FILE_COUNT):
            try:
                gfx_manifest.append(read_gfx_file_meta(reader, file_num))
            except _STAGE_ERRORS as err:
                pointer = TABLE_GFX_PTR_LOW.skip_forward(file_num).begin
                raise RomParseError.gfx_file(gfx_file_format(file_num), pointer, 0) from err

    gfx_files = []
    for meta in gfx_manifest:
        try:
            gfx_files.append(
                GfxFile.parse(reader, meta.tile_format, meta.address, meta.size, decoder)
            )
        except _STAGE_ERRORS as err:
            logger.error("GFX file at %s: %s", meta.address, err)
            raise RomParseError.gfx_file(meta.tile_format, meta.address, meta.size) from err
    logger.debug("Decoded %d graphics files", len(gfx_files))
    return gfx_files
