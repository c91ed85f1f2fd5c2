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

from typing_extensions import override

from .deserializer import Deserializer
from .exceptions import OutOfDataError
from .types import Buffer


class BytesDeserializer(Deserializer):
    """Simple implementation of a Deserializer to parse values from a byte sequence.

    This implementation keeps a byte-view over the whole input and a cursor into it, every read returns a slice of
    that view, so nothing is copied and the position of each value in the input is always known.
    """

    def __init__(self, data: Buffer) -> None:
        view = memoryview(data)
        if view.format != 'B' or view.ndim != 1:
            view = view.cast('B')
        self._view = view
        self._pos = 0

    @override
    def finalize(self) -> None:
        if not self.is_empty():
            raise ValueError('trailing data')
        del self._view

    @override
    def cur_pos(self) -> int:
        return self._pos

    @override
    def remaining(self) -> int:
        return len(self._view) - self._pos

    @override
    def peek_byte(self) -> int:
        if self._pos >= len(self._view):
            raise OutOfDataError('not enough bytes to read')
        return self._view[self._pos]

    @override
    def read_byte(self) -> int:
        b = self.peek_byte()
        self._pos += 1
        return b

    @override
    def read_bytes(self, n: int, *, exact: bool = True) -> memoryview:
        if n < 0:
            raise ValueError('value cannot be negative')
        # XXX: compare against what is left before slicing, n comes straight from the input and can be huge
        if exact and n > self.remaining():
            raise OutOfDataError('not enough bytes to read')
        end = min(self._pos + n, len(self._view))
        b = self._view[self._pos:end]
        self._pos = end
        return b
