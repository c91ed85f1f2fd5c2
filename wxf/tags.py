#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

"""
Wire type tags and array element types.

Every expression on the wire starts with one tag byte taken from a closed set, any other byte is invalid. Tags fall in
four families:

- composite: function, association, rule and delayed rule, whose children follow them depth-first;
- scalar: the four signed integer widths and the 64-bit real, with a fixed-width little-endian payload;
- textual: string, binary string, symbol and the textual forms of big integers and big reals, varint length prefixed;
- array: packed and numeric arrays, whose payload is described by an element type, a rank and dimensions.

Element types encode `log2(width)` in their lowest 3 bits:

>>> [element_width(t) for t in ElementType]
[1, 2, 4, 8, 1, 2, 4, 8, 4, 8, 8, 16]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique

import numpy as np


@unique
class TypeTag(IntEnum):
    # composite
    FUNCTION = 102
    ASSOCIATION = 65
    DELAYED_RULE = 58
    RULE = 45
    # textual
    SYMBOL = 115
    STRING = 83
    BINARY_STRING = 66
    BIG_INTEGER = 73
    BIG_REAL = 82
    # scalar
    INT8 = 67
    INT16 = 106
    INT32 = 105
    INT64 = 76
    REAL64 = 114
    # array
    PACKED_ARRAY = 193
    NUMERIC_ARRAY = 194


@unique
class ElementType(IntEnum):
    INT8 = 0
    INT16 = 1
    INT32 = 2
    INT64 = 3
    UINT8 = 16
    UINT16 = 17
    UINT32 = 18
    UINT64 = 19
    REAL32 = 34
    REAL64 = 35
    COMPLEX_REAL32 = 51
    COMPLEX_REAL64 = 52


@dataclass(slots=True, frozen=True)
class Composite:
    tag: TypeTag
    # rules always have two children and carry no count on the wire
    arity_follows: bool


@dataclass(slots=True, frozen=True)
class Scalar:
    tag: TypeTag
    width: int


@dataclass(slots=True, frozen=True)
class Textual:
    tag: TypeTag


@dataclass(slots=True, frozen=True)
class Array:
    tag: TypeTag
    is_numeric: bool


@dataclass(slots=True, frozen=True)
class Invalid:
    byte: int


TagClass = Composite | Scalar | Textual | Array | Invalid

COMPOSITE_TAGS = frozenset({TypeTag.FUNCTION, TypeTag.ASSOCIATION, TypeTag.RULE, TypeTag.DELAYED_RULE})
RULE_TAGS = frozenset({TypeTag.RULE, TypeTag.DELAYED_RULE})
INTEGER_TAGS = frozenset({TypeTag.INT8, TypeTag.INT16, TypeTag.INT32, TypeTag.INT64})
TEXTUAL_TAGS = frozenset({
    TypeTag.SYMBOL,
    TypeTag.STRING,
    TypeTag.BINARY_STRING,
    TypeTag.BIG_INTEGER,
    TypeTag.BIG_REAL,
})
ARRAY_TAGS = frozenset({TypeTag.PACKED_ARRAY, TypeTag.NUMERIC_ARRAY})

_SCALAR_WIDTHS: dict[TypeTag, int] = {
    TypeTag.INT8: 1,
    TypeTag.INT16: 2,
    TypeTag.INT32: 4,
    TypeTag.INT64: 8,
    TypeTag.REAL64: 8,
}

# narrowest first, `push_integer` picks the first one that fits
SIGNED_INTEGER_TAGS: tuple[TypeTag, ...] = (TypeTag.INT8, TypeTag.INT16, TypeTag.INT32, TypeTag.INT64)

PACKED_ELEMENT_TYPES = frozenset({
    ElementType.INT8,
    ElementType.INT16,
    ElementType.INT32,
    ElementType.INT64,
    ElementType.REAL32,
    ElementType.REAL64,
    ElementType.COMPLEX_REAL32,
    ElementType.COMPLEX_REAL64,
})
NUMERIC_ELEMENT_TYPES = PACKED_ELEMENT_TYPES | {
    ElementType.UINT8,
    ElementType.UINT16,
    ElementType.UINT32,
    ElementType.UINT64,
}

_ELEMENT_DTYPES: dict[ElementType, np.dtype] = {
    ElementType.INT8: np.dtype('<i1'),
    ElementType.INT16: np.dtype('<i2'),
    ElementType.INT32: np.dtype('<i4'),
    ElementType.INT64: np.dtype('<i8'),
    ElementType.UINT8: np.dtype('<u1'),
    ElementType.UINT16: np.dtype('<u2'),
    ElementType.UINT32: np.dtype('<u4'),
    ElementType.UINT64: np.dtype('<u8'),
    ElementType.REAL32: np.dtype('<f4'),
    ElementType.REAL64: np.dtype('<f8'),
    ElementType.COMPLEX_REAL32: np.dtype('<c8'),
    ElementType.COMPLEX_REAL64: np.dtype('<c16'),
}
_DTYPE_ELEMENT_TYPES: dict[tuple[str, int], ElementType] = {
    (dtype.kind, dtype.itemsize): element_type for element_type, dtype in _ELEMENT_DTYPES.items()
}


def classify(tag: int) -> TagClass:
    """Find the family of a tag byte.

    >>> classify(102)
    Composite(tag=<TypeTag.FUNCTION: 102>, arity_follows=True)
    >>> classify(105)
    Scalar(tag=<TypeTag.INT32: 105>, width=4)
    >>> classify(0)
    Invalid(byte=0)
    """
    try:
        type_tag = TypeTag(tag)
    except ValueError:
        return Invalid(tag)
    if type_tag in COMPOSITE_TAGS:
        return Composite(type_tag, arity_follows=type_tag not in RULE_TAGS)
    if type_tag in TEXTUAL_TAGS:
        return Textual(type_tag)
    if type_tag in ARRAY_TAGS:
        return Array(type_tag, is_numeric=type_tag is TypeTag.NUMERIC_ARRAY)
    return Scalar(type_tag, width=_SCALAR_WIDTHS[type_tag])


def scalar_width(tag: int) -> int:
    """Payload size of a scalar tag, 0 for any tag that is not a scalar."""
    try:
        return _SCALAR_WIDTHS.get(TypeTag(tag), 0)
    except ValueError:
        return 0


def element_width(element_type: int) -> int:
    return 1 << (element_type & 0b111)


def element_is_signed(element_type: int) -> bool:
    return ElementType.INT8 <= element_type <= ElementType.INT64


def element_is_unsigned(element_type: int) -> bool:
    return ElementType.UINT8 <= element_type <= ElementType.UINT64


def element_is_float(element_type: int) -> bool:
    return element_type in (ElementType.REAL32, ElementType.REAL64)


def element_is_complex(element_type: int) -> bool:
    return element_type in (ElementType.COMPLEX_REAL32, ElementType.COMPLEX_REAL64)


def is_valid_element_type(array_tag: TypeTag, element_type: int) -> bool:
    """Unsigned integers are only allowed in numeric arrays."""
    allowed = NUMERIC_ELEMENT_TYPES if array_tag is TypeTag.NUMERIC_ARRAY else PACKED_ELEMENT_TYPES
    return element_type in allowed


def element_dtype(element_type: int) -> np.dtype:
    """The little-endian numpy dtype of an element type."""
    return _ELEMENT_DTYPES[ElementType(element_type)]


def element_type_for_dtype(dtype: np.dtype) -> ElementType:
    """The element type matching a numpy dtype, by kind and width, ignoring byte order.

    >>> element_type_for_dtype(np.dtype('>u2'))
    <ElementType.UINT16: 17>
    >>> element_type_for_dtype(np.dtype(complex))
    <ElementType.COMPLEX_REAL64: 52>
    """
    dtype = np.dtype(dtype)
    try:
        return _DTYPE_ELEMENT_TYPES[(dtype.kind, dtype.itemsize)]
    except KeyError:
        raise ValueError(f'no array element type for dtype {dtype}') from None
