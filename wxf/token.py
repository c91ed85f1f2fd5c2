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

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from wxf.serialization import Deserializer
from wxf.serialization.encoding.float import decode_float64
from wxf.serialization.encoding.int import decode_int
from wxf.tags import (
    ARRAY_TAGS,
    COMPOSITE_TAGS,
    INTEGER_TAGS,
    TEXTUAL_TAGS,
    ElementType,
    TypeTag,
    element_dtype,
)


@dataclass(slots=True, frozen=True)
class ArrayShape:
    """Shape metadata of an array token, owned by the token."""
    element_type: ElementType
    dimensions: tuple[int, ...]
    # flattened element count, always the product of the dimensions
    count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'count', math.prod(self.dimensions))

    @property
    def rank(self) -> int:
        return len(self.dimensions)


@dataclass(slots=True, frozen=True, kw_only=True)
class Token:
    """A typed unit of the flat token stream.

    `data` is a view into the buffer that was parsed, the token never copies it. For scalar, textual and array tokens
    `length` is the payload size in bytes, for composites it is the declared number of children and `data` is empty.
    Only array tokens have a `shape`.
    """
    type: TypeTag
    offset: int
    data: memoryview
    length: int = 0
    shape: Optional[ArrayShape] = None

    def __repr__(self) -> str:
        if self.shape is not None:
            return f'Token({self.type.name}, offset={self.offset}, shape={self.shape})'
        return f'Token({self.type.name}, offset={self.offset}, length={self.length})'

    def is_composite(self) -> bool:
        return self.type in COMPOSITE_TAGS

    def is_array(self) -> bool:
        return self.type in ARRAY_TAGS

    def is_textual(self) -> bool:
        return self.type in TEXTUAL_TAGS

    @property
    def arity(self) -> int:
        """Declared number of children, 0 for anything that is not a composite."""
        return self.length if self.is_composite() else 0

    def as_integer(self) -> int:
        if self.type not in INTEGER_TAGS:
            raise TypeError(f'{self.type.name} token is not an integer')
        return decode_int(Deserializer.build_bytes_deserializer(self.data), length=self.length, signed=True)

    def as_real(self) -> float:
        if self.type is not TypeTag.REAL64:
            raise TypeError(f'{self.type.name} token is not a real')
        return decode_float64(Deserializer.build_bytes_deserializer(self.data))

    def as_bytes(self) -> bytes:
        """Raw payload of a textual token."""
        if not self.is_textual():
            raise TypeError(f'{self.type.name} token has no text payload')
        return bytes(self.data)

    def as_text(self) -> str:
        if not self.is_textual() or self.type is TypeTag.BINARY_STRING:
            raise TypeError(f'{self.type.name} token is not text')
        # payloads are opaque on the wire, undecodable bytes are kept as surrogates
        return str(self.data, 'utf-8', 'surrogateescape')

    def as_array(self) -> np.ndarray:
        """A read-only numpy view of the elements, shaped as the declared dimensions."""
        if self.shape is None:
            raise TypeError(f'{self.type.name} token is not an array')
        dtype = element_dtype(self.shape.element_type)
        if self.shape.count == 0:
            array = np.empty(self.shape.dimensions, dtype=dtype)
        else:
            array = np.frombuffer(self.data, dtype=dtype, count=self.shape.count).reshape(self.shape.dimensions)
        array.flags.writeable = False
        return array

