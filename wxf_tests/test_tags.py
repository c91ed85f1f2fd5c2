import numpy as np
import pytest

from wxf.tags import (
    Array,
    Composite,
    ElementType,
    Invalid,
    Scalar,
    Textual,
    TypeTag,
    classify,
    element_dtype,
    element_is_complex,
    element_is_float,
    element_is_signed,
    element_is_unsigned,
    element_type_for_dtype,
    element_width,
    is_valid_element_type,
    scalar_width,
)


@pytest.mark.parametrize('tag, expected', [
    (102, Composite(TypeTag.FUNCTION, arity_follows=True)),
    (65, Composite(TypeTag.ASSOCIATION, arity_follows=True)),
    (58, Composite(TypeTag.DELAYED_RULE, arity_follows=False)),
    (45, Composite(TypeTag.RULE, arity_follows=False)),
    (115, Textual(TypeTag.SYMBOL)),
    (83, Textual(TypeTag.STRING)),
    (66, Textual(TypeTag.BINARY_STRING)),
    (73, Textual(TypeTag.BIG_INTEGER)),
    (82, Textual(TypeTag.BIG_REAL)),
    (67, Scalar(TypeTag.INT8, 1)),
    (106, Scalar(TypeTag.INT16, 2)),
    (105, Scalar(TypeTag.INT32, 4)),
    (76, Scalar(TypeTag.INT64, 8)),
    (114, Scalar(TypeTag.REAL64, 8)),
    (193, Array(TypeTag.PACKED_ARRAY, is_numeric=False)),
    (194, Array(TypeTag.NUMERIC_ARRAY, is_numeric=True)),
])
def test_classify(tag, expected):
    assert classify(tag) == expected


def test_every_other_byte_is_invalid():
    known = {tag.value for tag in TypeTag}
    for byte in range(256):
        if byte not in known:
            assert classify(byte) == Invalid(byte)
            assert scalar_width(byte) == 0


def test_scalar_width():
    assert [scalar_width(tag) for tag in (67, 106, 105, 76, 114)] == [1, 2, 4, 8, 8]
    assert scalar_width(TypeTag.STRING) == 0
    assert scalar_width(TypeTag.FUNCTION) == 0


@pytest.mark.parametrize('element_type, width, signed, unsigned, is_float, is_complex', [
    (ElementType.INT8, 1, True, False, False, False),
    (ElementType.INT64, 8, True, False, False, False),
    (ElementType.UINT16, 2, False, True, False, False),
    (ElementType.UINT64, 8, False, True, False, False),
    (ElementType.REAL32, 4, False, False, True, False),
    (ElementType.REAL64, 8, False, False, True, False),
    (ElementType.COMPLEX_REAL32, 8, False, False, False, True),
    (ElementType.COMPLEX_REAL64, 16, False, False, False, True),
])
def test_element_properties(element_type, width, signed, unsigned, is_float, is_complex):
    assert element_width(element_type) == width
    assert element_dtype(element_type).itemsize == width
    assert element_is_signed(element_type) is signed
    assert element_is_unsigned(element_type) is unsigned
    assert element_is_float(element_type) is is_float
    assert element_is_complex(element_type) is is_complex


def test_unsigned_only_in_numeric_arrays():
    for element_type in ElementType:
        assert is_valid_element_type(TypeTag.NUMERIC_ARRAY, element_type)
        assert is_valid_element_type(TypeTag.PACKED_ARRAY, element_type) != element_is_unsigned(element_type)
    for invalid in (4, 15, 20, 33, 36, 50, 53, 255):
        assert not is_valid_element_type(TypeTag.NUMERIC_ARRAY, invalid)
        assert not is_valid_element_type(TypeTag.PACKED_ARRAY, invalid)


def test_dtype_mapping():
    for element_type in ElementType:
        dtype = element_dtype(element_type)
        assert dtype.newbyteorder('<') == dtype
        assert element_type_for_dtype(dtype) is element_type
        assert element_type_for_dtype(dtype.newbyteorder('>')) is element_type


@pytest.mark.parametrize('dtype', [np.bool_, np.float16, np.object_, 'U3', 'S3'])
def test_dtype_without_element_type(dtype):
    with pytest.raises(ValueError):
        element_type_for_dtype(np.dtype(dtype))
