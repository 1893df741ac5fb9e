import io
from typing import BinaryIO, Optional

from loguru import logger

from .bitstream import BitReader, BitWriter
from .codec import decode_file, encode_file
from .config_loader import load_config
from .encryption import read_encrypted_header, write_encrypted_header
from .huffman import encoding_tree, generate_codes, get_frequency_table


class Compressor:
    # Compression pipeline: a Huffman-coded body behind a frequency table
    # header that is masked with a password keystream. The header must be
    # read with the same password to rebuild the tree that decodes the body.
    def __init__(self, chunk_size: Optional[int] = None):
        """
        Initializes the Compressor.

        Parameters:
        chunk_size (int, optional): Bytes per read and write. Taken from
            io.chunk_size in the configuration when not given.
        """
        if chunk_size is None:
            chunk_size = load_config()["io"]["chunk_size"]
        if not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
        self.chunk_size = chunk_size

    def compress(self, infile: BinaryIO, outfile: BinaryIO, password: str) -> None:
        """
        Compresses infile into outfile.

        Parameters:
        infile (BinaryIO): Seekable binary input; it is read twice.
        outfile (BinaryIO): Binary output receiving the header and body.
        password (str): Password masking the header.
        """
        if not infile.seekable():
            raise ValueError("Input stream must be seekable.")

        start = infile.tell()
        frequencies = get_frequency_table(infile, self.chunk_size)
        logger.debug("Frequency table has {} entries", len(frequencies))

        with encoding_tree(frequencies) as root:
            codes = generate_codes(root)
            with BitWriter(outfile, self.chunk_size) as writer:
                write_encrypted_header(writer, frequencies, password)
                infile.seek(start)
                encode_file(infile, codes, writer, self.chunk_size)

        logger.info("Compressed {} bytes into {} bits", sum(frequencies.values()) - 1, writer.bits_written)

    def decompress(self, infile: BinaryIO, outfile: BinaryIO, password: str) -> int:
        """
        Decompresses infile into outfile.

        A wrong password is only noticed when the deciphered header or the
        body turns out to be impossible; otherwise the output is silently
        wrong.

        Parameters:
        infile (BinaryIO): Binary input produced by compress.
        outfile (BinaryIO): Binary output for the original bytes.
        password (str): Password used at compression time.

        Returns:
        int: Number of bytes written.
        """
        reader = BitReader(infile, self.chunk_size)
        frequencies = read_encrypted_header(reader, password)

        with encoding_tree(frequencies) as root:
            written = decode_file(reader, root, outfile, self.chunk_size)

        logger.info("Decompressed {} bits into {} bytes", reader.bits_read, written)
        return written


def compress_bytes(data: bytes, password: str, chunk_size: Optional[int] = None) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("Input data must be bytes.")
    out = io.BytesIO()
    Compressor(chunk_size).compress(io.BytesIO(data), out, password)
    return out.getvalue()


def decompress_bytes(data: bytes, password: str, chunk_size: Optional[int] = None) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("Input compressed data must be bytes.")
    out = io.BytesIO()
    Compressor(chunk_size).decompress(io.BytesIO(data), out, password)
    return out.getvalue()
