import pytest

from wxf.serialization import Deserializer, OutOfDataError, Serializer
from wxf.serialization.encoding.bytes import decode_bytes, encode_bytes


def test_read_bytes_is_a_view():
    data = bytearray(b'abcdef')
    de = Deserializer.build_bytes_deserializer(data)
    view = de.read_bytes(3)
    data[0] = ord('z')
    assert bytes(view) == b'zbc'
    assert de.cur_pos() == 3
    assert de.remaining() == 3


def test_read_past_end():
    de = Deserializer.build_bytes_deserializer(b'abc')
    with pytest.raises(OutOfDataError):
        de.read_bytes(4)
    # a failed read does not move the cursor
    assert de.cur_pos() == 0
    assert bytes(de.read_bytes(4, exact=False)) == b'abc'
    with pytest.raises(OutOfDataError):
        de.read_byte()


def test_huge_length_prefix():
    se = Serializer.build_bytes_serializer()
    se.write_bytes(bytes([0xff] * 9 + [0x01]))
    se.write_bytes(b'xyz')
    de = Deserializer.build_bytes_deserializer(bytes(se.finalize()))
    with pytest.raises(OutOfDataError):
        decode_bytes(de)


def test_finalize_trailing_data():
    de = Deserializer.build_bytes_deserializer(b'\x01ab')
    assert bytes(decode_bytes(de)) == b'a'
    with pytest.raises(ValueError):
        de.finalize()


def test_serializer_truncate():
    se = Serializer.build_bytes_serializer()
    encode_bytes(se, b'hello')
    pos = se.cur_pos()
    encode_bytes(se, b'world')
    se.truncate(pos)
    assert se.getvalue() == b'\x05hello'
    with pytest.raises(ValueError):
        se.truncate(pos + 1)
