import io

import pytest

from huffcrypt.bitstream import BitReader, BitWriter
from huffcrypt.encryption import (
    PasswordStream,
    fnv1a_64,
    read_encrypted_header,
    write_encrypted_header,
)
from huffcrypt.exceptions import (
    CorruptHeaderError,
    HuffcryptError,
    MissingEndMarkerError,
    TruncatedStreamError,
)
from huffcrypt.huffman import PSEUDO_EOF

TABLE = {ord("A"): 3, ord("B"): 1, PSEUDO_EOF: 1}


def _write(table, password):
    sink = io.BytesIO()
    with BitWriter(sink) as writer:
        write_encrypted_header(writer, table, password)
    return sink.getvalue()


def _read(data, password):
    return read_encrypted_header(BitReader(io.BytesIO(data)), password)


def _outcome(data, password):
    try:
        return _read(data, password)
    except HuffcryptError as e:
        return type(e)


@pytest.mark.parametrize("data, expected", [
    (b"", 0xCBF29CE484222325),
    (b"a", 0xAF63DC4C8601EC8C),
    (b"foobar", 0x85944171F73967E8),
])
def test_fnv1a_64_reference_values(data, expected):
    assert fnv1a_64(data) == expected


def test_password_stream_is_reproducible():
    a, b = PasswordStream("pw"), PasswordStream("pw")
    assert a.take(100) + a.take(3000) == b.take(3100)
    assert PasswordStream("pw").take(256) != PasswordStream("pw2").take(256)


def test_mask_is_its_own_inverse():
    masked = PasswordStream("secret").mask(0xDEADBEEF, 32)
    assert PasswordStream("secret").mask(masked, 32) == 0xDEADBEEF


def test_password_must_be_a_string():
    with pytest.raises(TypeError):
        PasswordStream(b"pw")


def test_header_round_trip():
    data = _write(TABLE, "pw")
    # 32-bit count plus two 40-bit entries
    assert len(data) == 14
    assert _read(data, "pw") == TABLE


def test_header_is_masked():
    data = _write(TABLE, "pw")
    assert data[:4] != (2).to_bytes(4, "big")
    assert _write(TABLE, "pw") == data


def test_wrong_password_is_deterministic_and_wrong():
    data = _write(TABLE, "pw")
    first = _outcome(data, "pw2")
    assert first != TABLE
    assert _outcome(data, "pw2") == first


def test_empty_table_header():
    data = _write({PSEUDO_EOF: 1}, "")
    assert len(data) == 4
    assert _read(data, "") == {PSEUDO_EOF: 1}


def test_full_table_header():
    table = {symbol: symbol * 1000 for symbol in range(256)}
    table[PSEUDO_EOF] = 1
    assert _read(_write(table, "long password " * 10), "long password " * 10) == table


def test_missing_end_marker_fails_fast():
    with pytest.raises(MissingEndMarkerError):
        _write({ord("A"): 3}, "pw")


def test_oversized_frequency_is_rejected():
    with pytest.raises(ValueError):
        _write({ord("A"): 1 << 32, PSEUDO_EOF: 1}, "pw")


def test_absurd_count_is_reported():
    count = PasswordStream("pw").mask(100000, 32)
    with pytest.raises(CorruptHeaderError):
        _read(count.to_bytes(4, "big"), "pw")


def test_repeated_symbol_is_reported():
    stream = PasswordStream("pw")
    sink = io.BytesIO()
    with BitWriter(sink) as writer:
        writer.write_int(stream.mask(2, 32), 32)
        for _ in range(2):
            writer.write_int(stream.mask(65, 8), 8)
            writer.write_int(stream.mask(1, 32), 32)
    with pytest.raises(CorruptHeaderError):
        _read(sink.getvalue(), "pw")


def test_header_cut_short_raises():
    with pytest.raises(TruncatedStreamError):
        _read(_write(TABLE, "pw")[:9], "pw")
