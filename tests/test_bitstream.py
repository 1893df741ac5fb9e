import io

import pytest
from bitarray import bitarray

from huffcrypt.bitstream import BitReader, BitWriter
from huffcrypt.exceptions import TruncatedStreamError


def test_flush_pads_last_byte_with_zeros():
    sink = io.BytesIO()
    writer = BitWriter(sink)
    writer.write_bits(bitarray("101"))
    writer.flush()
    assert sink.getvalue() == b"\xa0"
    assert writer.bits_written == 3


def test_write_int_is_big_endian():
    sink = io.BytesIO()
    with BitWriter(sink) as writer:
        writer.write_int(0x0102, 16)
        writer.write_int(5, 3)
    assert sink.getvalue() == b"\x01\x02\xa0"


def test_write_int_rejects_values_that_do_not_fit():
    writer = BitWriter(io.BytesIO())
    with pytest.raises(ValueError):
        writer.write_int(256, 8)
    with pytest.raises(ValueError):
        writer.write_int(-1, 8)


def test_small_chunks_drain_whole_bytes_only():
    sink = io.BytesIO()
    writer = BitWriter(sink, chunk_size=1)
    writer.write_bits(bitarray("1111111100"))
    assert sink.getvalue() == b"\xff"
    writer.flush()
    assert sink.getvalue() == b"\xff\x00"


def test_writer_does_not_flush_when_block_raises():
    sink = io.BytesIO()
    with pytest.raises(RuntimeError):
        with BitWriter(sink) as writer:
            writer.write_bits(bitarray("1"))
            raise RuntimeError("boom")
    assert sink.getvalue() == b""


def test_reader_reads_bits_most_significant_first():
    reader = BitReader(io.BytesIO(b"\xa5\x01"), chunk_size=1)
    assert [reader.read_bit() for _ in range(8)] == [1, 0, 1, 0, 0, 1, 0, 1]
    assert reader.read_byte() == 1
    assert reader.bits_read == 16


def test_reader_raises_at_end_of_input():
    reader = BitReader(io.BytesIO(b"\x00"))
    assert reader.read_int(8) == 0
    with pytest.raises(TruncatedStreamError):
        reader.read_bit()


def test_chunk_size_must_be_positive():
    with pytest.raises(ValueError):
        BitReader(io.BytesIO(), chunk_size=0)
    with pytest.raises(ValueError):
        BitWriter(io.BytesIO(), chunk_size=0)
