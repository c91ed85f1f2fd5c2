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
This module implements the unsigned variable-length integers used for every length, count, rank and dimension.

The encoding is little-endian base-128: each byte carries 7 bits of data, least significant group first, and the high
bit is set on every byte except the last one. Values are limited to 64 bits, so an encoded value never takes more than
10 bytes.

>>> se = Serializer.build_bytes_serializer()
>>> se.write_bytes(b'test')  # writes 74657374
>>> encode_varint(se, 0)  # writes 00
>>> encode_varint(se, 127)  # writes 7f
>>> encode_varint(se, 128)  # writes 8001
>>> encode_varint(se, 624485)  # writes e58e26
>>> bytes(se.finalize()).hex()
'74657374007f8001e58e26'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('00 7f 8001 e58e26 74657374'))
>>> decode_varint(de)  # reads 00
0
>>> decode_varint(de)  # reads 7f
127
>>> decode_varint(de)  # reads 8001
128
>>> decode_varint(de)  # reads e58e26
624485
>>> bytes(de.read_all())  # reads 74657374
b'test'
>>> de.finalize()

A varint cut by the end of the buffer is an error by default, with `exact=False` the bits read so far are returned:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('e58e'))
>>> decode_varint(de)
Traceback (most recent call last):
...
wxf.serialization.exceptions.OutOfDataError: not enough bytes to read
>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('e58e'))
>>> decode_varint(de, exact=False)
1893
"""

from wxf.serialization import Deserializer, Serializer

MAX_VARINT_BYTES = 10
UINT64_MASK = (1 << 64) - 1


def encode_varint(serializer: Serializer, value: int) -> None:
    """ Encodes an unsigned integer of at most 64 bits.

    This module's docstring has more details and examples.
    """
    if value < 0:
        raise ValueError('cannot encode value <0 as varint')
    if value > UINT64_MASK:
        raise ValueError('too big to encode')
    while True:
        byte = value & 0b0111_1111
        value >>= 7
        if value == 0:
            serializer.write_byte(byte)
            break
        serializer.write_byte(byte | 0b1000_0000)


def decode_varint(deserializer: Deserializer, *, exact: bool = True) -> int:
    """ Decodes an unsigned integer, reading at most `MAX_VARINT_BYTES` bytes.

    When `exact=True` reaching the end of the data before the last group raises `OutOfDataError`, otherwise the
    decoding stops at the boundary and returns what was read.

    This module's docstring has more details and examples.
    """
    result = 0
    for i in range(MAX_VARINT_BYTES):
        if not exact and deserializer.is_empty():
            break
        byte = deserializer.read_byte()
        result |= (byte & 0b0111_1111) << (7 * i)
        if (byte & 0b1000_0000) == 0:
            break
    # the 10th group can carry bits past the 64th, they are dropped
    return result & UINT64_MASK
