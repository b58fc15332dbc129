#!/usr/bin/env python3
"""
Super Mario World - ROM Data Dumper

Usage: python dump.py <rom_file> [-o output_dir] [--no-gfx] [-v]
"""

import sys

from smwrom.dump import main

if __name__ == "__main__":
    sys.exit(main())
