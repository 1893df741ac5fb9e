"""
Password-masked frequency table header.

The header is XORed bit by bit with a keystream derived from the password.
This hides the table from casual inspection only: there is no
authentication, and a wrong password is detected only when the deciphered
header is impossible.
"""

from typing import Dict

from bitarray import bitarray
from bitarray.util import ba2int, int2ba
from Crypto.Cipher import AES
from loguru import logger

from .bitstream import BitReader, BitWriter
from .exceptions import CorruptHeaderError, MissingEndMarkerError
from .huffman import PSEUDO_EOF

COUNT_BITS = 32
SYMBOL_BITS = 8
FREQUENCY_BITS = 32
MAX_ENTRIES = 1 << SYMBOL_BITS

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3


def fnv1a_64(data: bytes) -> int:
    """
    Computes the 64-bit FNV-1a hash of data.

    Parameters:
    data (bytes): The bytes to hash.

    Returns:
    int: The hash as an unsigned 64-bit integer.
    """
    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & 0xFFFFFFFFFFFFFFFF
    return value


class PasswordStream:
    """
    Deterministic keystream seeded from a password.

    The seed is the FNV-1a hash of the UTF-8 password. The keystream is
    AES-128 in CTR mode keyed with the seed (big-endian, repeated twice),
    with an 8-byte zero nonce and a counter starting at 0. Bits are handed
    out most significant first.
    """
    BLOCK_BYTES = 64

    def __init__(self, password: str) -> None:
        if not isinstance(password, str):
            raise TypeError("Password must be a string.")
        self.seed = fnv1a_64(password.encode("utf-8"))
        key = self.seed.to_bytes(8, "big") * 2
        self.cipher = AES.new(key, AES.MODE_CTR, nonce=bytes(8), initial_value=0)
        self.bits = bitarray(endian="big")

    def take(self, width: int) -> bitarray:
        """Returns the next `width` keystream bits."""
        while len(self.bits) < width:
            self.bits.frombytes(self.cipher.encrypt(bytes(self.BLOCK_BYTES)))
        taken = self.bits[:width]
        del self.bits[:width]
        return taken

    def mask(self, value: int, width: int) -> int:
        """
        XORs each of the `width` bits of value with the next keystream bit.

        Masking twice with streams from the same password restores the value.
        """
        return ba2int(int2ba(value, length=width, endian="big") ^ self.take(width))


def write_encrypted_header(writer: BitWriter, frequencies: Dict[int, int], password: str) -> None:
    """
    Writes the frequency table, masked with the password keystream.

    Layout: 32-bit entry count (end marker excluded), then per entry in
    ascending symbol order an 8-bit symbol and a 32-bit frequency.

    Parameters:
    writer (BitWriter): Output at the start of the artifact.
    frequencies (Dict[int, int]): Table containing PSEUDO_EOF.
    password (str): Password seeding the keystream.
    """
    if PSEUDO_EOF not in frequencies:
        raise MissingEndMarkerError("No PSEUDO_EOF defined.")

    stream = PasswordStream(password)
    entries = sorted(symbol for symbol in frequencies if symbol != PSEUDO_EOF)
    writer.write_int(stream.mask(len(entries), COUNT_BITS), COUNT_BITS)

    for symbol in entries:
        frequency = frequencies[symbol]
        if not 0 <= symbol < MAX_ENTRIES:
            raise ValueError(f"Symbol {symbol} is not a byte value.")
        if not 0 <= frequency < 1 << FREQUENCY_BITS:
            raise ValueError(f"Frequency {frequency} of symbol {symbol} does not fit in {FREQUENCY_BITS} bits.")
        writer.write_int(stream.mask(symbol, SYMBOL_BITS), SYMBOL_BITS)
        writer.write_int(stream.mask(frequency, FREQUENCY_BITS), FREQUENCY_BITS)

    logger.debug("Wrote masked header with {} entries", len(entries))


def read_encrypted_header(reader: BitReader, password: str) -> Dict[int, int]:
    """
    Reads and unmasks a header written by write_encrypted_header.

    Parameters:
    reader (BitReader): Input at the start of the artifact.
    password (str): Password seeding the keystream.

    Returns:
    Dict[int, int]: The frequency table, with PSEUDO_EOF mapped to 1.

    Raises:
    CorruptHeaderError: If the count or the entries cannot belong to any
        table, which usually means the password is wrong.
    TruncatedStreamError: If the input ends inside the header.
    """
    stream = PasswordStream(password)
    entries = stream.mask(reader.read_int(COUNT_BITS), COUNT_BITS)
    if entries > MAX_ENTRIES:
        raise CorruptHeaderError(
            f"Header claims {entries} entries but at most {MAX_ENTRIES} exist; wrong password?"
        )

    frequencies = {}
    for _ in range(entries):
        symbol = stream.mask(reader.read_byte(), SYMBOL_BITS)
        frequency = stream.mask(reader.read_int(FREQUENCY_BITS), FREQUENCY_BITS)
        if symbol in frequencies:
            raise CorruptHeaderError(f"Symbol {symbol} appears twice in the header; wrong password?")
        frequencies[symbol] = frequency

    frequencies[PSEUDO_EOF] = 1
    logger.debug("Read masked header with {} entries", entries)
    return frequencies
