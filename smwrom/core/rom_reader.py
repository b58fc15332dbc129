"""
Super Mario World ROM - ROM Reader

Bounds-checked reading from a trimmed ROM image. Reads can be addressed by
PC offset, by SNES address (translated through the ROM's map mode), or by a
RomSlice of either kind. Every read that would run past the end of the data
raises RomParseError.bad_address instead of returning short data.
"""

from .errors import RomParseError
from .rom_slice import RomSlice
from .rom_utils import MapMode, PcAddress, SnesAddress, snes_to_pc


class ByteCursor:
    """
    Forward-only reader over a byte buffer.

    Each read advances the cursor. Little-endian throughout.
    """

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = int(offset)

    @property
    def remaining(self) -> int:
        return max(0, len(self.data) - self.offset)

    def _take(self, length: int) -> bytes:
        if length < 0:
            raise ValueError(f"Cannot read {length} bytes")
        end = self.offset + length
        if self.offset < 0 or end > len(self.data):
            # Report the first missing byte
            raise RomParseError.bad_address(max(self.offset, len(self.data)))
        chunk = bytes(self.data[self.offset : end])
        self.offset = end
        return chunk

    def read_bytes(self, length: int) -> bytes:
        return self._take(length)

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16_le(self) -> int:
        data = self._take(2)
        return data[0] | (data[1] << 8)

    def read_u24_le(self) -> int:
        data = self._take(3)
        return data[0] | (data[1] << 8) | (data[2] << 16)


class RomReader:
    """
    Read-only view of a trimmed Super Mario World ROM image.

    The copier header, if any, must already be stripped; PC offsets are
    relative to the start of the real cartridge image.
    """

    def __init__(self, data: bytes, map_mode: MapMode = MapMode.SLOW_LOROM):
        """
        Wrap ROM bytes.

        Args:
            data: Trimmed ROM image
            map_mode: Mapping used to translate SNES addresses
        """
        self.data = bytes(data)
        self.map_mode = map_mode

    def __len__(self):
        return len(self.data)

    def snes_to_pc(self, snes_addr: SnesAddress) -> PcAddress:
        """
        Convert SNES address to PC offset using this ROM's map mode.

        Raises:
            SnesToPcError: If the address is not mapped to ROM
        """
        return snes_to_pc(snes_addr, self.map_mode)

    def cursor_at(self, addr) -> ByteCursor:
        """
        Create a cursor positioned at a PC or SNES address.

        Args:
            addr: PcAddress or SnesAddress

        Returns:
            ByteCursor starting at the address
        """
        if isinstance(addr, SnesAddress):
            addr = self.snes_to_pc(addr)
        return ByteCursor(self.data, int(addr))

    def read_pc(self, pc_addr: PcAddress, length: int = 1) -> bytes:
        """
        Read bytes at a PC offset.

        Args:
            pc_addr: Offset into the trimmed ROM
            length: Number of bytes to read

        Returns:
            Requested bytes

        Raises:
            RomParseError: If the read runs past the end of the ROM
        """
        return ByteCursor(self.data, int(pc_addr)).read_bytes(length)

    def read_snes(self, snes_addr: SnesAddress, length: int = 1) -> bytes:
        """
        Read bytes at a SNES address.

        Raises:
            SnesToPcError: If the address is not mapped to ROM
            RomParseError: If the read runs past the end of the ROM
        """
        return self.read_pc(self.snes_to_pc(snes_addr), length)

    def read_snes_byte(self, snes_addr: SnesAddress) -> int:
        """Read a single byte at a SNES address."""
        return self.read_snes(snes_addr, 1)[0]

    def read_snes_long(self, snes_addr: SnesAddress) -> int:
        """Read 24-bit little-endian value (a long pointer) at a SNES address."""
        return self.cursor_at(snes_addr).read_u24_le()

    def read_slice(self, rom_slice: RomSlice) -> bytes:
        """
        Read the bytes a slice describes.

        Unbounded slices read from their start to the end of the ROM.

        Args:
            rom_slice: Slice in PC or SNES address space

        Returns:
            Requested bytes
        """
        cursor = self.cursor_at(rom_slice.begin)
        if rom_slice.is_infinite():
            if cursor.offset >= len(self.data):
                raise RomParseError.bad_address(cursor.offset)
            return cursor.read_bytes(cursor.remaining)
        return cursor.read_bytes(rom_slice.size)
