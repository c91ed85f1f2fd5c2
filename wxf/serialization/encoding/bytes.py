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

r"""
This modules implements encoding of byte sequence by prefixing it with the length of the sequence encoded as a varint.

Strings, symbols, binary strings and the textual forms of big numbers all use this layout after their tag.

>>> se = Serializer.build_bytes_serializer()
>>> encode_bytes(se, b'test')  # will prepend b'\x04' before writing b'test'
>>> bytes(se.finalize()).hex()
'0474657374'

>>> se = Serializer.build_bytes_serializer()
>>> raw_data = b'test' * 32
>>> len(raw_data)
128
>>> encode_bytes(se, raw_data)  # prepends b'\x80\x01' before raw_data
>>> encoded_data = bytes(se.finalize())
>>> len(encoded_data)
130
>>> encoded_data[:10].hex()
'80017465737474657374'

Decoding returns a view over the input, not a copy:

>>> de = Deserializer.build_bytes_deserializer(encoded_data)  # that we encoded before
>>> decoded_data = decode_bytes(de)
>>> de.finalize()  # called to assert we've consumed everything
>>> type(decoded_data).__name__
'memoryview'
>>> decoded_data == raw_data
True

>>> de = Deserializer.build_bytes_deserializer(b'\x04testfoo')
>>> bytes(decode_bytes(de))
b'test'
>>> try:
...     de.finalize()
... except ValueError as e:
...     print(*e.args)
trailing data

>>> de = Deserializer.build_bytes_deserializer(b'\x05test')
>>> decode_bytes(de)
Traceback (most recent call last):
...
wxf.serialization.exceptions.OutOfDataError: not enough bytes to read
"""

from wxf.serialization import Deserializer, Serializer
from wxf.serialization.types import Buffer

from .varint import decode_varint, encode_varint


def encode_bytes(serializer: Serializer, data: Buffer) -> None:
    """ Encodes a byte-sequence adding a length prefix.

    This modules's docstring has more details and examples.
    """
    view = memoryview(data)
    encode_varint(serializer, view.nbytes)
    serializer.write_bytes(view)


def decode_bytes(deserializer: Deserializer) -> memoryview:
    """ Decodes a byte-sequence with a length prefix.

    This modules's docstring has more details and examples.
    """
    size = decode_varint(deserializer)
    return deserializer.read_bytes(size)
