"""
Super Mario World ROM - Decompression

LC_LZ2 decompression, the format the game stores its graphics files in.
The loader only depends on the ``decompress_lz2(data) -> bytes`` contract,
so any other codec with the same signature and error type can replace it.

Stream format: a sequence of chunks, terminated by 0xFF. Each chunk starts
with a header byte CCCLLLLL (command, length - 1). Command 7 marks a long
header: 111CCCLL LLLLLLLL, giving a 10-bit length for command CCC.

Commands:
    0  direct copy     copy the next `length` bytes
    1  byte fill       repeat the next byte `length` times
    2  word fill       alternate the next two bytes for `length` bytes
    3  increasing fill write the next byte, then +1 each step, `length` bytes
    4  repeat          copy `length` bytes from an earlier output offset
                       (2-byte big-endian offset, overlapping allowed)
"""

from .errors import DecompressionError

CMD_DIRECT_COPY = 0
CMD_BYTE_FILL = 1
CMD_WORD_FILL = 2
CMD_INCREASING_FILL = 3
CMD_REPEAT = 4
CMD_LONG_HEADER = 7

END_OF_STREAM = 0xFF


class Lz2Decompressor:
    """Decompresses LC_LZ2 streams."""

    def __init__(self, data: bytes):
        """
        Args:
            data: Compressed data; anything after the end marker is ignored
        """
        self.data = data
        self.pos = 0

    def _next(self, what: str) -> int:
        if self.pos >= len(self.data):
            raise DecompressionError(f" unexpected end of data reading {what} at {self.pos:#x}")
        byte = self.data[self.pos]
        self.pos += 1
        return byte

    def decompress(self) -> bytes:
        """
        Decompress the stream.

        Returns:
            Decompressed bytes

        Raises:
            DecompressionError: If the stream is truncated or malformed
        """
        output = bytearray()

        while True:
            header = self._next("chunk header")
            if header == END_OF_STREAM:
                break

            command = header >> 5
            if command == CMD_LONG_HEADER:
                command = (header >> 2) & 0x07
                if command == CMD_LONG_HEADER:
                    raise DecompressionError(f" nested long header at {self.pos - 1:#x}")
                length = (((header & 0x03) << 8) | self._next("long length")) + 1
            else:
                length = (header & 0x1F) + 1

            if command == CMD_DIRECT_COPY:
                end = self.pos + length
                if end > len(self.data):
                    raise DecompressionError(
                        f" direct copy of {length} bytes at {self.pos:#x} runs past end of data"
                    )
                output += self.data[self.pos : end]
                self.pos = end
            elif command == CMD_BYTE_FILL:
                output += bytes([self._next("fill byte")]) * length
            elif command == CMD_WORD_FILL:
                pair = (self._next("fill word"), self._next("fill word"))
                output += bytes(pair[i % 2] for i in range(length))
            elif command == CMD_INCREASING_FILL:
                start = self._next("fill byte")
                output += bytes((start + i) & 0xFF for i in range(length))
            elif command == CMD_REPEAT:
                offset = (self._next("repeat offset") << 8) | self._next("repeat offset")
                if offset >= len(output):
                    raise DecompressionError(
                        f" repeat offset {offset:#x} beyond output size {len(output):#x}"
                    )
                # Byte by byte: the source may overlap the bytes being written
                for i in range(length):
                    output.append(output[offset + i])
            else:
                raise DecompressionError(f" unknown command {command} at {self.pos - 1:#x}")

        return bytes(output)


def decompress_lz2(data: bytes) -> bytes:
    """
    Decompress an LC_LZ2 stream.

    Raises:
        DecompressionError: If the stream is truncated or malformed
    """
    return Lz2Decompressor(data).decompress()
