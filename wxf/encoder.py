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
Append-only builder of encoded expressions.

The encoder writes tokens in the same depth-first order the decoder reads them, composites only declare how many
children follow and it is up to the caller to push exactly that many complete sub-expressions:

>>> enc = Encoder(include_header=True)
>>> enc.push_function('f', 2).push_integer(1).push_string('a').getvalue().hex(' ')
'38 3a 66 02 73 01 66 43 01 53 01 61'

Every push either succeeds or leaves the output exactly as it was before the call:

>>> before = enc.getvalue()
>>> enc.push_packed_array([2, 2], [1, 2, 3])
Traceback (most recent call last):
...
wxf.exception.ArrayLengthMismatch: dimensions [2, 2] require 4 elements, got 3
>>> enc.getvalue() == before
True
"""

from __future__ import annotations

import math
import operator
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

import numpy as np
from structlog import get_logger
from typing_extensions import Self

from wxf.conf.get_settings import get_global_settings
from wxf.conf.settings import CodecSettings
from wxf.constants import HEADER
from wxf.exception import ArrayLengthMismatch, EncodeError
from wxf.serialization import Serializer
from wxf.serialization.encoding.bytes import encode_bytes
from wxf.serialization.encoding.float import encode_float64
from wxf.serialization.encoding.int import encode_int
from wxf.serialization.encoding.varint import encode_varint
from wxf.serialization.types import Buffer
from wxf.tags import (
    SIGNED_INTEGER_TAGS,
    ElementType,
    TypeTag,
    element_dtype,
    element_is_unsigned,
    element_type_for_dtype,
    is_valid_element_type,
    scalar_width,
)

logger = get_logger()

# (tag, width, smallest value, largest value), narrowest first
_INTEGER_RANGES: tuple[tuple[TypeTag, int, int, int], ...] = tuple(
    (tag, scalar_width(tag), -(1 << (8 * scalar_width(tag) - 1)), (1 << (8 * scalar_width(tag) - 1)) - 1)
    for tag in SIGNED_INTEGER_TAGS
)

INT64_MIN = _INTEGER_RANGES[-1][2]
INT64_MAX = _INTEGER_RANGES[-1][3]


def integer_tag(value: int) -> TypeTag:
    """The narrowest integer tag able to hold `value`.

    >>> integer_tag(127), integer_tag(128), integer_tag(-32769), integer_tag(2**31)
    (<TypeTag.INT8: 67>, <TypeTag.INT16: 106>, <TypeTag.INT32: 105>, <TypeTag.INT64: 76>)
    """
    for tag, _width, lower, upper in _INTEGER_RANGES:
        if lower <= value <= upper:
            return tag
    raise ValueError(f'{value} does not fit in 64 bits, use a big integer')


def _as_payload(text: str | Buffer) -> Buffer:
    if isinstance(text, str):
        return text.encode('utf-8', 'surrogateescape')
    return text


class Encoder:
    """Writes encoded expressions to an in-memory buffer.

    The format header is written on creation unless `include_header` is false, the default comes from the
    `INCLUDE_HEADER` setting. Fragments built without header can be spliced into other encoders with `push_raw`.
    """

    def __init__(self, *, include_header: Optional[bool] = None, settings: Optional[CodecSettings] = None) -> None:
        self.log = logger.new()
        if include_header is None:
            include_header = (settings or get_global_settings()).INCLUDE_HEADER
        self.include_header = include_header
        self._serializer = Serializer.build_bytes_serializer()
        if include_header:
            self._serializer.write_bytes(HEADER)

    def __len__(self) -> int:
        return self._serializer.cur_pos()

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def getvalue(self) -> bytes:
        """Everything written so far, the encoder can keep being used."""
        return self._serializer.getvalue()

    def clear(self) -> None:
        """Discard all expressions, keeping the header if there was one."""
        self._serializer.truncate(len(HEADER) if self.include_header else 0)

    def truncate(self, size: int) -> None:
        """Discard everything after the first `size` bytes, `len(encoder)` gives a position to come back to."""
        self._serializer.truncate(size)

    @contextmanager
    def _atomic(self) -> Iterator[Serializer]:
        pos = self._serializer.cur_pos()
        try:
            yield self._serializer
        except BaseException:
            self._serializer.truncate(pos)
            self.log.debug('push rolled back', pos=pos)
            raise

    def push_integer(self, value: int) -> Self:
        value = operator.index(value)
        tag = integer_tag(value)
        with self._atomic() as se:
            se.write_byte(tag)
            encode_int(se, value, length=scalar_width(tag), signed=True)
        return self

    def push_real(self, value: float) -> Self:
        with self._atomic() as se:
            se.write_byte(TypeTag.REAL64)
            encode_float64(se, float(value))
        return self

    def _push_text(self, tag: TypeTag, text: str | Buffer) -> Self:
        payload = _as_payload(text)
        with self._atomic() as se:
            se.write_byte(tag)
            encode_bytes(se, payload)
        return self

    def push_string(self, text: str | Buffer) -> Self:
        return self._push_text(TypeTag.STRING, text)

    def push_symbol(self, name: str | Buffer) -> Self:
        return self._push_text(TypeTag.SYMBOL, name)

    def push_binary_string(self, data: Buffer) -> Self:
        return self._push_text(TypeTag.BINARY_STRING, data)

    def push_bigint(self, digits: int | str | Buffer) -> Self:
        """Push an integer of any size in its decimal textual form.

        The digits are written as given. An `int` is first turned into text, which raises `EncodeError` when it has
        more digits than the interpreter converts (see `sys.set_int_max_str_digits`), push its digits as text instead.
        """
        if isinstance(digits, int):
            try:
                digits = str(digits)
            except ValueError as e:
                raise EncodeError(f'integer too large to convert to text: {e}') from e
        return self._push_text(TypeTag.BIG_INTEGER, digits)

    def push_bigreal(self, text: str | Buffer) -> Self:
        """Push an arbitrary precision real in its textual form, for instance `1.5`20.`."""
        return self._push_text(TypeTag.BIG_REAL, text)

    def push_function(self, head: str | Buffer, count: int) -> Self:
        """Start a function, `count` complete expressions must be pushed after this call."""
        payload = _as_payload(head)
        with self._atomic() as se:
            se.write_byte(TypeTag.FUNCTION)
            encode_varint(se, count)
            se.write_byte(TypeTag.SYMBOL)
            encode_bytes(se, payload)
        return self

    def push_association(self, count: int) -> Self:
        """Start an association, `count` rules should be pushed after this call."""
        with self._atomic() as se:
            se.write_byte(TypeTag.ASSOCIATION)
            encode_varint(se, count)
        return self

    def push_rule(self) -> Self:
        """Start a rule, the left and right sides must be pushed after this call."""
        self._serializer.write_byte(TypeTag.RULE)
        return self

    def push_delay_rule(self) -> Self:
        self._serializer.write_byte(TypeTag.DELAYED_RULE)
        return self

    def push_packed_array(self, dimensions: Iterable[int], data: Any,
                          element_type: Optional[ElementType] = None) -> Self:
        """Push a packed array, elements are taken in row-major order.

        `data` is anything numpy can turn into an array, or raw little-endian bytes when `element_type` is given. When
        `element_type` is omitted it follows the dtype of the data.
        """
        return self._push_array(TypeTag.PACKED_ARRAY, dimensions, data, element_type)

    def push_numeric_array(self, dimensions: Iterable[int], data: Any,
                           element_type: Optional[ElementType] = None) -> Self:
        """Same as `push_packed_array`, but unsigned elements are allowed."""
        return self._push_array(TypeTag.NUMERIC_ARRAY, dimensions, data, element_type)

    def _push_array(self, tag: TypeTag, dimensions: Iterable[int], data: Any,
                    element_type: Optional[ElementType]) -> Self:
        dims = tuple(operator.index(dim) for dim in dimensions)
        with self._atomic() as se:
            # the header fields go first, a bad payload must still leave the output untouched
            se.write_byte(tag)
            array = _to_array(data, element_type)
            if element_type is None:
                element_type = element_type_for_dtype(array.dtype)
            if not is_valid_element_type(tag, element_type):
                if element_is_unsigned(element_type):
                    raise ValueError(f'{ElementType(element_type).name} elements need a numeric array')
                raise ValueError(f'invalid element type {element_type} for {tag.name}')
            se.write_byte(element_type)
            encode_varint(se, len(dims))
            for dim in dims:
                encode_varint(se, dim)
            expected = math.prod(dims)
            if expected != array.size:
                raise ArrayLengthMismatch(dims, expected, array.size)
            se.write_bytes(array.astype(element_dtype(element_type), copy=False).tobytes(order='C'))
        return self

    def push_raw(self, fragment: Buffer) -> Self:
        """Append an already encoded, headerless, sub-expression."""
        self._serializer.write_bytes(fragment)
        return self


def _to_array(data: Any, element_type: Optional[ElementType]) -> np.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        if element_type is None:
            raise ValueError('raw array data needs an explicit element type')
        return np.frombuffer(data, dtype=element_dtype(element_type))
    if element_type is None:
        return np.asarray(data)
    return np.asarray(data, dtype=element_dtype(element_type))
