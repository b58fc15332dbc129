"""
Super Mario World ROM - Region Descriptors

A RomSlice names a region of ROM data: a start address of one kind plus a
size in bytes. Parsers build slices first and read them second, so address
arithmetic for fixed-stride tables is done here rather than inline.

A size of 0 marks the slice as unbounded (read to the end of the data).
"""

from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from .rom_utils import PcAddress, SnesAddress

A = TypeVar("A", PcAddress, SnesAddress)


@dataclass(frozen=True)
class RomSlice(Generic[A]):
    begin: A
    size: int

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"Slice size cannot be negative: {self.size}")
        if not self.is_infinite():
            # Raises ValueError if the end overflows the address kind's range
            self.end()

    def end(self) -> A:
        """
        First address past the slice.

        Raises:
            ValueError: If called on an unbounded slice
        """
        if self.is_infinite():
            raise ValueError("Unbounded slice has no end")
        return self.begin + self.size

    def shift_forward(self, offset: int) -> "RomSlice[A]":
        return replace(self, begin=self.begin + offset)

    def shift_backward(self, offset: int) -> "RomSlice[A]":
        return replace(self, begin=self.begin - offset)

    def skip_forward(self, times_size: int) -> "RomSlice[A]":
        """Move forward by a whole number of slice sizes (next table entry)."""
        return replace(self, begin=self.begin + self.size * times_size)

    def skip_backward(self, times_size: int) -> "RomSlice[A]":
        """Move backward by a whole number of slice sizes."""
        return replace(self, begin=self.begin - self.size * times_size)

    def move_to(self, new_address: A) -> "RomSlice[A]":
        if type(new_address) is not type(self.begin):
            raise TypeError(
                f"Cannot move {type(self.begin).__name__} slice "
                f"to {type(new_address).__name__}"
            )
        return replace(self, begin=new_address)

    def expand(self, diff: int) -> "RomSlice[A]":
        return replace(self, size=self.size + diff)

    def shrink(self, diff: int) -> "RomSlice[A]":
        return replace(self, size=self.size - diff)

    def resize(self, new_size: int) -> "RomSlice[A]":
        return replace(self, size=new_size)

    def infinite(self) -> "RomSlice[A]":
        return replace(self, size=0)

    def is_infinite(self) -> bool:
        return self.size == 0

    def __str__(self):
        return f"RomSlice {{ begin: {self.begin:X}, size: {self.size} }}"


def PcSlice(begin, size: int) -> RomSlice[PcAddress]:
    """Slice in PC address space."""
    return RomSlice(PcAddress(begin), size)


def SnesSlice(begin, size: int) -> RomSlice[SnesAddress]:
    """Slice in SNES address space."""
    return RomSlice(SnesAddress(begin), size)
