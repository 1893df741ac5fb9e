"""
Bit-level reading and writing over binary file objects.

Bits are packed most-significant first into big-endian bitarrays and moved
to and from the underlying stream in chunks.
"""

from typing import BinaryIO

from bitarray import bitarray
from bitarray.util import int2ba

from .exceptions import TruncatedStreamError

DEFAULT_CHUNK_SIZE = 64 * 1024


class BitWriter:
    def __init__(self, sink: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """
        Initializes the BitWriter.

        Parameters:
        sink (BinaryIO): Writable binary stream receiving the packed bytes.
        chunk_size (int): Number of whole bytes to collect before writing them out.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.sink = sink
        self.chunk_size = chunk_size
        self.buffer = bitarray(endian="big")
        self.bits_written = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        # Partial output is left unflushed when the block raises.
        if exc_type is None:
            self.flush()

    def write_bits(self, bits: bitarray) -> None:
        self.buffer.extend(bits)
        self.bits_written += len(bits)
        self._drain()

    def write_int(self, value: int, width: int) -> None:
        """
        Writes an unsigned integer as exactly `width` bits, most significant first.

        Parameters:
        value (int): The value to write.
        width (int): The number of bits to use.
        """
        if value < 0 or value >= 1 << width:
            raise ValueError(f"{value} does not fit in {width} bits")
        self.write_bits(int2ba(value, length=width, endian="big"))

    def flush(self) -> None:
        """Writes every buffered bit, zero-padding the final partial byte."""
        self._drain(force=True)
        if len(self.buffer):
            self.sink.write(self.buffer.tobytes())
            self.buffer.clear()
        if hasattr(self.sink, "flush"):
            self.sink.flush()

    def _drain(self, force: bool = False) -> None:
        if not force and len(self.buffer) < self.chunk_size * 8:
            return
        whole = len(self.buffer) - len(self.buffer) % 8
        if whole:
            self.sink.write(self.buffer[:whole].tobytes())
            del self.buffer[:whole]


class BitReader:
    def __init__(self, source: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.source = source
        self.chunk_size = chunk_size
        self.buffer = bitarray(endian="big")
        self.position = 0
        self.bits_read = 0

    def read_bit(self) -> int:
        """
        Reads the next bit from the stream.

        Returns:
        int: 0 or 1.

        Raises:
        TruncatedStreamError: If the stream has no more bits.
        """
        if self.position >= len(self.buffer) and not self._fill():
            raise TruncatedStreamError(
                f"input exhausted after {self.bits_read} bits"
            )
        bit = self.buffer[self.position]
        self.position += 1
        self.bits_read += 1
        return bit

    def read_int(self, width: int) -> int:
        value = 0
        for _ in range(width):
            value = (value << 1) | self.read_bit()
        return value

    def read_byte(self) -> int:
        return self.read_int(8)

    def _fill(self) -> bool:
        data = self.source.read(self.chunk_size)
        if not data:
            return False
        self.buffer = bitarray(endian="big")
        self.buffer.frombytes(data)
        self.position = 0
        return True
