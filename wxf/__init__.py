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
Encoder and decoder for the binary expression exchange format, version 8.

>>> data = Encoder(include_header=True).push_function('f', 2).push_integer(1).push_string('a').getvalue()
>>> tree = decode(data).unwrap()
>>> [tree[child].type.name for child in tree.root.children]
['INT8', 'STRING']
"""

from wxf.convert import dumps, encode_value, loads, to_python
from wxf.decoder import decode, decode_tokens
from wxf.encoder import Encoder
from wxf.exception import (
    ArityMismatch,
    ArrayLengthMismatch,
    BadHeader,
    DecodeError,
    DecodeLimitExceeded,
    EncodeError,
    InvalidHead,
    Truncated,
    UnknownTag,
    WxfError,
)
from wxf.tags import ElementType, TypeTag
from wxf.token import ArrayShape, Token
from wxf.tree import ExprNode, ExprTree
from wxf.version import __version__

__all__ = [
    '__version__',
    'ArityMismatch',
    'ArrayLengthMismatch',
    'ArrayShape',
    'BadHeader',
    'DecodeError',
    'DecodeLimitExceeded',
    'ElementType',
    'EncodeError',
    'Encoder',
    'ExprNode',
    'ExprTree',
    'InvalidHead',
    'Token',
    'Truncated',
    'TypeTag',
    'UnknownTag',
    'WxfError',
    'decode',
    'decode_tokens',
    'dumps',
    'encode_value',
    'loads',
    'to_python',
]
