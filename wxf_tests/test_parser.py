import numpy as np
import pytest

from wxf.conf.settings import CodecSettings
from wxf.exception import BadHeader, DecodeLimitExceeded, Truncated, UnknownTag
from wxf.parser import Parser
from wxf.tags import ElementType, TypeTag
from wxf.token import ArrayShape

F_1_A = bytes.fromhex('38 3a 66 02 73 01 66 43 01 53 01 61')


def _parse(data: bytes, **kwargs):
    return Parser(data, **kwargs).parse()


@pytest.mark.parametrize('data', [
    b'',
    b'8',
    b':8',
    b'9:C\x01',
    b'8;C\x01',
    b'\x00\x00',
    b'x:' + F_1_A[2:],
])
def test_bad_header(data):
    error = _parse(data).unwrap_err()
    assert isinstance(error, BadHeader)
    assert error.offset == 0


def test_header_only():
    assert _parse(b'8:').unwrap() == []


def test_token_stream():
    parser = Parser(F_1_A)
    tokens = parser.parse().unwrap()
    assert [token.type for token in tokens] == [TypeTag.FUNCTION, TypeTag.SYMBOL, TypeTag.INT8, TypeTag.STRING]
    assert [token.offset for token in tokens] == [2, 4, 7, 9]
    assert [token.length for token in tokens] == [2, 1, 1, 1]
    assert tokens[0].arity == 2
    assert tokens[1].as_text() == 'f'
    assert tokens[2].as_integer() == 1
    assert tokens[3].as_text() == 'a'
    # tokens borrow from the input
    assert tokens[3].data.obj is F_1_A
    # parsing again gives the same result
    assert parser.parse().unwrap() is tokens


def test_rules_carry_no_count():
    tokens = _parse(b'8:-C\x01:C\x02').unwrap()
    assert [(token.type, token.arity) for token in tokens] == [
        (TypeTag.RULE, 2),
        (TypeTag.INT8, 0),
        (TypeTag.DELAYED_RULE, 2),
        (TypeTag.INT8, 0),
    ]


def test_scalars():
    data = b'8:' + b'j\xff\x7f' + b'i\x00\x00\x00\x80' + b'L' + (2**40).to_bytes(8, 'little') + b'r' + bytes(8)
    tokens = _parse(data).unwrap()
    assert [token.as_integer() for token in tokens[:3]] == [32767, -2**31, 2**40]
    assert tokens[3].as_real() == 0.0
    with pytest.raises(TypeError):
        tokens[3].as_integer()
    with pytest.raises(TypeError):
        tokens[0].as_text()


def test_array_token():
    payload = np.arange(6, dtype='<i4').tobytes()
    data = b'8:\xc1\x02\x02\x02\x03' + payload
    (token,) = _parse(data).unwrap()
    assert token.type is TypeTag.PACKED_ARRAY
    assert token.shape == ArrayShape(ElementType.INT32, (2, 3))
    assert token.shape.count == 6
    assert token.shape.rank == 2
    assert bytes(token.data) == payload
    array = token.as_array()
    assert array.shape == (2, 3)
    assert not array.flags.writeable
    np.testing.assert_array_equal(array, np.arange(6).reshape(2, 3))


def test_array_with_zero_dimension():
    # a huge dimension is fine as long as another one is zero
    data = b'8:\xc2\x13\x02' + bytes([0xff] * 9 + [0x01]) + b'\x00'
    (token,) = _parse(data).unwrap()
    assert token.shape.count == 0
    assert token.length == 0


@pytest.mark.parametrize('data, offset, read', [
    (b'8:\x00', 2, 0),
    (b'8:C\x01\x99', 4, 1),
    (b'8:f\x01s\x01fC\x01\xff', 9, 3),
    # element types are checked per array kind
    (b'8:\xc1\x10\x01\x01\x00', 3, 0),
    (b'8:\xc2\x05\x01\x01\x00', 3, 0),
])
def test_unknown_tag(data, offset, read):
    parser = Parser(data)
    error = parser.parse().unwrap_err()
    assert isinstance(error, UnknownTag)
    assert error.offset == offset
    # tokens read before the error are kept
    assert len(parser.tokens) == read


@pytest.mark.parametrize('data, offset', [
    (b'8:j\x01', 2),
    (b'8:L\x01\x02\x03', 2),
    (b'8:r', 2),
    (b'8:S\x05ab', 2),
    (b'8:S\x85', 2),
    (b'8:f', 2),
    (b'8:A\x80', 2),
    (b'8:C\x01\xc1', 4),
    (b'8:\xc1\x00', 2),
    (b'8:\xc1\x00\x05\x01', 2),
    (b'8:\xc1\x00\x01\x04\x01\x02\x03', 2),
    (b'8:\xc1\x03\x02' + bytes([0xff] * 9 + [0x01]) * 2, 2),
])
def test_truncated(data, offset):
    error = _parse(data).unwrap_err()
    assert isinstance(error, Truncated)
    assert error.offset == offset


def test_input_limit():
    data = b'8:' + b'C\x01' * 10
    error = _parse(data, settings=CodecSettings(MAX_INPUT_BYTES=21)).unwrap_err()
    assert isinstance(error, DecodeLimitExceeded)
    assert len(_parse(data, settings=CodecSettings(MAX_INPUT_BYTES=22)).unwrap()) == 10
