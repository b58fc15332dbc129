"""
Super Mario World ROM - JSON Export

Converts decoded ROM values into JSON-serializable dictionaries for the dump
tool. Palettes are written as 16 rows of space-separated hex colors, the
same row format used for other hex data in dump files.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, List, Optional

from ..core.internal_header import RomInternalHeader
from ..core.level_header import Level
from ..core.palettes import Bgr555, ColorPalette
from ..core.rom import Rom

UNSET_CELL = "----"


def format_color_row(row: List[Optional[Bgr555]]) -> str:
    """
    Format one palette row as space-separated 4-digit hex colors.

    Example:
        >>> format_color_row([Bgr555(0x7FFF), Bgr555(0x001F)])
        '7FFF 001F'
    """
    return " ".join(str(color) if color is not None else UNSET_CELL for color in row)


def header_to_dict(header: RomInternalHeader) -> dict[str, Any]:
    return {
        "internal_rom_name": header.internal_rom_name,
        "map_mode": str(header.map_mode),
        "rom_type": str(header.rom_type),
        "rom_size_kb": header.rom_size_in_kb(),
        "sram_size_kb": header.sram_size_in_kb(),
        "region": str(header.region_code),
        "developer_id": f"0x{header.developer_id:02X}",
        "version": header.version_number,
    }


def level_to_dict(level: Level) -> dict[str, Any]:
    secondary = asdict(level.secondary_header)
    x, y = level.secondary_header.main_entrance_pos
    secondary["main_entrance_pos"] = {"x": x, "y": y}
    return {
        "level": f"0x{level.number:03X}",
        "layer1_address": str(level.layer1_address),
        "primary_header": asdict(level.primary_header),
        "secondary_header": secondary,
    }


def palette_to_dict(palette: ColorPalette) -> dict[str, Any]:
    data: dict[str, Any] = {}
    back_area_color = getattr(palette, "back_area_color", None)
    if back_area_color is not None:
        data["back_area_color"] = str(back_area_color)
    data["rows"] = [format_color_row(row) for row in palette.to_grid()]
    return data


def dump_rom(rom: Rom, output_dir: Path) -> List[Path]:
    """
    Write header, level headers and level palettes as JSON files.

    Layout:
        output_dir/header.json
        output_dir/levels/level_XXX.json
        output_dir/palettes/level_XXX.json

    Args:
        rom: Decoded ROM
        output_dir: Directory to write into (created if missing)

    Returns:
        Paths of the files written
    """
    output_dir = Path(output_dir)
    levels_dir = output_dir / "levels"
    palettes_dir = output_dir / "palettes"
    levels_dir.mkdir(parents=True, exist_ok=True)
    palettes_dir.mkdir(parents=True, exist_ok=True)

    written = [_write_json(output_dir / "header.json", header_to_dict(rom.internal_header))]

    for level, palette in zip(rom.levels, rom.level_color_palettes):
        name = f"level_{level.number:03X}.json"
        written.append(_write_json(levels_dir / name, level_to_dict(level)))
        written.append(_write_json(palettes_dir / name, palette_to_dict(palette)))

    return written


def _write_json(path: Path, data: dict[str, Any]) -> Path:
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path
