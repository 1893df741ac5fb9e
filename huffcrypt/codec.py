from functools import partial
from typing import BinaryIO, Dict

from bitarray import bitarray
from loguru import logger

from .bitstream import DEFAULT_CHUNK_SIZE, BitReader, BitWriter
from .exceptions import MissingSymbolError
from .huffman import PSEUDO_EOF, HuffmanNode


def encode_file(infile: BinaryIO, codes: Dict[int, bitarray], writer: BitWriter,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
    """
    Writes the code of every input byte, then the end marker's code once.

    Parameters:
    infile (BinaryIO): The input positioned at its start. Every byte in it
        must have a code.
    codes (Dict[int, bitarray]): Code table built from the same input.
    writer (BitWriter): Output positioned right after the header.
    """
    start = writer.bits_written
    for chunk in iter(partial(infile.read, chunk_size), b""):
        body = bitarray(endian="big")
        for byte in chunk:
            try:
                body.extend(codes[byte])
            except KeyError:
                raise MissingSymbolError(byte) from None
        writer.write_bits(body)

    writer.write_bits(codes[PSEUDO_EOF])
    logger.debug("Encoded body of {} bits", writer.bits_written - start)


def decode_file(reader: BitReader, root: HuffmanNode, outfile: BinaryIO,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Walks the tree bit by bit, writing each decoded byte, until the end marker.

    A root without children is a leaf by itself: if it is the end marker the
    body is empty and no bits are read.

    Parameters:
    reader (BitReader): Input positioned at the start of the body.
    root (HuffmanNode): Tree rebuilt from the deciphered header.
    outfile (BinaryIO): Destination for the decoded bytes.

    Returns:
    int: Number of bytes written.

    Raises:
    TruncatedStreamError: If the input ends before the end marker is reached.
    """
    if root.is_leaf and root.symbol != PSEUDO_EOF:
        raise ValueError("A single-leaf tree must hold the end marker.")

    out = bytearray()
    written = 0
    node = root
    while True:
        if node.is_leaf:
            if node.symbol == PSEUDO_EOF:
                break
            out.append(node.symbol)
            node = root
            if len(out) >= chunk_size:
                outfile.write(out)
                written += len(out)
                out.clear()
            continue
        node = node.one if reader.read_bit() else node.zero

    outfile.write(out)
    written += len(out)
    logger.debug("Decoded {} bytes", written)
    return written
