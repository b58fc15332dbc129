"""
Super Mario World - ROM Data Dumper

Decodes a ROM and saves its internal header, level headers and level
palettes as human-readable JSON files.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core.errors import RomReadError
from .core.rom import load_rom
from .formats.rom_json import dump_rom


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dump Super Mario World ROM data to JSON files.",
    )
    parser.add_argument("rom", help="Path to ROM file (.smc/.sfc)")
    parser.add_argument(
        "-o",
        "--output",
        default="rom_dump",
        help="Output directory (default: rom_dump)",
    )
    parser.add_argument(
        "--no-gfx",
        action="store_true",
        help="Skip decoding graphics files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show loader log messages",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print(f"Loading ROM: {args.rom}")
    options = {"gfx_manifest": []} if args.no_gfx else {}
    try:
        rom = load_rom(args.rom, **options)
    except RomReadError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    header = rom.internal_header
    print(f"  Name:    {header.internal_rom_name.strip()}")
    print(f"  Mapping: {header.map_mode}")
    print(f"  Type:    {header.rom_type}")
    print(f"  Size:    {header.rom_size_in_kb()}KB ROM, {header.sram_size_in_kb()}KB SRAM")
    print(f"  Region:  {header.region_code}")
    print(f"  Levels:  {len(rom.levels)}")
    print(f"  GFX:     {len(rom.gfx_files)} files")

    output_dir = Path(args.output)
    print(f"Output directory: {output_dir}")
    written = dump_rom(rom, output_dir)

    print(f"\nDone! Wrote {len(written)} files.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
