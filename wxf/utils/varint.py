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

from wxf.serialization import Deserializer, Serializer
from wxf.serialization.encoding.varint import decode_varint as _decode_varint, encode_varint as _encode_varint
from wxf.serialization.types import Buffer


def encode_varint(value: int) -> bytes:
    """
    Receive an unsigned integer of at most 64 bits and return its varint-encoded bytes.

    >>> encode_varint(0) == bytes([0x00])
    True
    >>> encode_varint(300) == bytes([0xAC, 0x02])
    True
    >>> len(encode_varint(2**64 - 1))
    10
    """
    serializer = Serializer.build_bytes_serializer()
    _encode_varint(serializer, value)
    return serializer.getvalue()


def decode_varint(data: Buffer, pos: int = 0) -> tuple[int, int]:
    """
    Read a varint from `data` starting at `pos` and return a tuple of the value and the number of bytes consumed.

    Reading stops after 10 bytes or at the end of the data, whichever comes first, so a truncated varint yields the
    bits that were present instead of an error.

    >>> decode_varint(bytes([0xAC, 0x02]) + b'test')
    (300, 2)
    >>> decode_varint(b'xx' + bytes([0xAC, 0x02]), 2)
    (300, 2)
    >>> decode_varint(bytes([0xAC]))
    (44, 1)
    >>> decode_varint(b'')
    (0, 0)
    >>> decode_varint(bytes([0xFF] * 12))
    (18446744073709551615, 10)
    """
    view = memoryview(data)[pos:]
    deserializer = Deserializer.build_bytes_deserializer(view)
    value = _decode_varint(deserializer, exact=False)
    return value, deserializer.cur_pos()
