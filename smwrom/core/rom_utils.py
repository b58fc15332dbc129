"""
Super Mario World ROM constants and address utilities.

This module provides:
- ROM layout constants (copier header size, internal header locations)
- The two address kinds: PC (flat file offset) and SNES (24-bit bank:offset)
- Map mode decoding (LoROM/HiROM/ExLoROM/ExHiROM, slow or fast)
- Address translation functions between the two address spaces

PC and SNES addresses are distinct types. Adding an integer offset keeps the
kind, subtracting two addresses of the same kind gives a distance, and any
arithmetic or comparison mixing the two kinds raises TypeError.
"""

from enum import Enum
from functools import total_ordering

from .errors import PcToSnesError, SnesToPcError

# ROM layout constants
SMC_HEADER_SIZE = 0x200  # Optional copier header
SMC_HEADER_BLOCK = 0x400  # Dumps are a multiple of 1KB without the copier header
SNES_ADDRESS_MAX = 0xFFFFFF
LOROM_PC_LIMIT = 0x400000  # 4MB addressable through the LoROM layout


# ============================================================================
# Address Kinds
# ============================================================================


def _is_offset(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@total_ordering
class _Address:
    """Common arithmetic for one address kind."""

    __slots__ = ("value",)

    def __init__(self, value: int):
        value = int(value)
        self._check(value)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @staticmethod
    def _check(value: int):
        if value < 0:
            raise ValueError(f"Address {value:#x} is negative")

    def _same_kind(self, other) -> bool:
        if isinstance(other, _Address):
            if type(other) is not type(self):
                raise TypeError(
                    f"Cannot mix {type(self).__name__} and {type(other).__name__}"
                )
            return True
        return False

    def __add__(self, offset):
        if not _is_offset(offset):
            return NotImplemented
        return type(self)(self.value + offset)

    def __radd__(self, offset):
        return self.__add__(offset)

    def __sub__(self, other):
        if self._same_kind(other):
            return self.value - other.value
        if not _is_offset(other):
            return NotImplemented
        return type(self)(self.value - other)

    def __eq__(self, other):
        if self._same_kind(other):
            return self.value == other.value
        return NotImplemented

    def __lt__(self, other):
        if self._same_kind(other):
            return self.value < other.value
        return NotImplemented

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __int__(self):
        return self.value

    def __index__(self):
        return self.value

    def __format__(self, spec):
        if spec:
            return format(self.value, spec)
        return str(self)

    def __repr__(self):
        return f"{type(self).__name__}({self.value:#08x})"


class PcAddress(_Address):
    """Flat byte offset into the trimmed ROM buffer."""

    __slots__ = ()

    def __str__(self):
        return f"{self.value:#08x}"


class SnesAddress(_Address):
    """24-bit address as the console's memory bus sees it."""

    __slots__ = ()

    @staticmethod
    def _check(value: int):
        if value < 0 or value > SNES_ADDRESS_MAX:
            raise ValueError(f"SNES address {value:#x} out of range $000000-$FFFFFF")

    @property
    def bank(self) -> int:
        return self.value >> 16

    @property
    def offset(self) -> int:
        return self.value & 0xFFFF

    def __str__(self):
        return f"${self.value:06X}"


# ============================================================================
# Map Modes
# ============================================================================

_MAP_MODE_FAST = 0b010000
_MAP_MODE_HIROM = 0b000001
_MAP_MODE_EXLOROM = 0b000010
_MAP_MODE_EXHIROM = 0b000100


class MapMode(Enum):
    """Bank mapping mode byte from the internal header."""

    SLOW_LOROM = 0b100000
    SLOW_HIROM = 0b100001
    SLOW_EXLOROM = 0b100010
    SLOW_EXHIROM = 0b100100
    FAST_LOROM = 0b110000
    FAST_HIROM = 0b110001
    FAST_EXLOROM = 0b110010
    FAST_EXHIROM = 0b110100

    def is_slow(self) -> bool:
        return (self.value & _MAP_MODE_FAST) == 0

    def is_fast(self) -> bool:
        return not self.is_slow()

    def is_lorom(self) -> bool:
        return (self.value & _MAP_MODE_HIROM) == 0

    def is_hirom(self) -> bool:
        return (self.value & _MAP_MODE_HIROM) != 0

    def is_exlorom(self) -> bool:
        return (self.value & _MAP_MODE_EXLOROM) != 0

    def is_exhirom(self) -> bool:
        return (self.value & _MAP_MODE_EXHIROM) != 0

    def __str__(self):
        if self.is_exhirom():
            layout = "ExHiROM"
        elif self.is_exlorom():
            layout = "ExLoROM"
        elif self.is_hirom():
            layout = "HiROM"
        else:
            layout = "LoROM"
        return f"Fast {layout}" if self.is_fast() else layout


# ============================================================================
# Address Translation
# ============================================================================


def _is_wram(addr: int) -> bool:
    return (addr & 0xFE0000) == 0x7E0000


def _is_system_area(addr: int) -> bool:
    # Lower half of banks $00-$3F and $80-$BF: WRAM mirror, registers, expansion
    return (addr & 0x408000) == 0x000000


def _lorom_offset(addr: int) -> int:
    return ((addr & 0x7F0000) >> 1) | (addr & 0x7FFF)


def pc_to_snes(pc: PcAddress) -> SnesAddress:
    """
    Convert PC offset to SNES address using the LoROM layout.

    Offsets that would land in the WRAM banks ($7E-$7F) are returned in
    their $FE-$FF mirror so every representable offset converts back.

    Args:
        pc: Offset into the trimmed ROM buffer

    Returns:
        SNES address

    Raises:
        PcToSnesError: If the offset does not fit in 4MB of LoROM space
    """
    value = int(pc)
    if value >= LOROM_PC_LIMIT:
        raise PcToSnesError(pc)
    snes = ((value << 1) & 0x7F0000) | (value & 0x7FFF) | 0x8000
    if _is_wram(snes):
        snes |= 0x800000
    return SnesAddress(snes)


def snes_to_pc(snes: SnesAddress, map_mode: MapMode) -> PcAddress:
    """
    Convert SNES address to PC offset under the given map mode.

    Args:
        snes: SNES address
        map_mode: Bank mapping mode of the ROM

    Returns:
        Offset into the trimmed ROM buffer

    Raises:
        SnesToPcError: If the address is not mapped to ROM under map_mode
    """
    addr = int(snes)

    if map_mode.is_exhirom():
        if _is_wram(addr) or _is_system_area(addr):
            raise SnesToPcError(snes, map_mode)
        pc = addr & 0x3FFFFF
        if addr < 0x800000:
            pc |= 0x400000
        return PcAddress(pc)

    if map_mode.is_exlorom():
        if (addr & 0xF00000) == 0x700000 or _is_system_area(addr):
            raise SnesToPcError(snes, map_mode)
        pc = _lorom_offset(addr)
        if addr < 0x800000:
            pc += 0x400000
        return PcAddress(pc)

    if map_mode.is_hirom():
        if _is_wram(addr) or _is_system_area(addr):
            raise SnesToPcError(snes, map_mode)
        return PcAddress(addr & 0x3FFFFF)

    # LoROM; banks $70-$7D below $8000 hold SRAM
    if _is_wram(addr) or _is_system_area(addr) or (addr & 0x708000) == 0x700000:
        raise SnesToPcError(snes, map_mode)
    return PcAddress(_lorom_offset(addr))
