from dataclasses import dataclass
from typing import BinaryIO

from .errors import ShortReadError

# SQLite varints have at most 9 bytes
MAX_VARINT_LENGTH = 9


@dataclass(frozen=True)
class Varint:
    value: int
    bytes_length: int

    @classmethod
    def from_data(cls, source: BinaryIO | bytes | bytearray | memoryview, offset: int = 0):
        """
        Decode a big-endian base-128 varint.

        `source` is either a byte buffer (read starting at `offset`) or a
        binary stream (read from its current position; `offset` is ignored).
        """
        is_stream = hasattr(source, "read")
        value = 0
        bytes_read = 0

        while bytes_read < MAX_VARINT_LENGTH:
            # Get next byte depending on source type
            if is_stream:
                chunk = source.read(1)
                if not chunk:
                    raise ShortReadError(bytes_read + 1, bytes_read, "varint")
                byte = chunk[0]
            else:
                if offset + bytes_read >= len(source):
                    raise ShortReadError(bytes_read + 1, bytes_read, "varint")
                byte = source[offset + bytes_read]
            bytes_read += 1

            # The ninth byte contributes all eight of its bits
            if bytes_read == MAX_VARINT_LENGTH:
                value = (value << 8) | byte
                break

            # & 0b01111111 will shave off the highest bit - that's the varint value
            # << 7 will create space for the new incoming bits
            # | will append the new bits to value
            value = (value << 7) | (byte & 0b01111111)

            # If highest bit is not set, we're done
            if not (byte & 0b10000000):
                break

        return cls(value=value, bytes_length=bytes_read)

    @staticmethod
    def encode(value: int) -> bytes:
        if not 0 <= value < 1 << 64:
            raise ValueError(f"varint out of range: {value}")

        if value >= 1 << 56:
            # Full-width final byte, preceded by eight 7-bit groups
            head = value >> 8
            groups = [(head >> (7 * i)) & 0x7F for i in reversed(range(8))]
            return bytes(g | 0x80 for g in groups) + bytes([value & 0xFF])

        groups = [value & 0x7F]
        value >>= 7
        while value:
            groups.append(value & 0x7F)
            value >>= 7
        groups.reverse()
        return bytes(g | 0x80 for g in groups[:-1]) + bytes(groups[-1:])


def to_signed64(value: int) -> int:
    """Reinterpret an unsigned 64-bit varint value as two's complement."""
    return value - (1 << 64) if value & (1 << 63) else value
