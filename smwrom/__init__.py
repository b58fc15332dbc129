"""Super Mario World ROM decoding."""

from .core import Rom, RomReadError, load_rom

__all__ = ["Rom", "RomReadError", "load_rom"]

__version__ = "0.1.0"
