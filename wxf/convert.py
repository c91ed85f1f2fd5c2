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
Conversions between decoded trees and Python values.

>>> loads(dumps({'a': [1, 2.5, 'x']}, include_header=True)).to_dict()
{'a': [1, 2.5, 'x']}
>>> dumps(2**70, include_header=True)
b'8:I\\x161180591620717411303424'
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from wxf.conf.settings import CodecSettings
from wxf.decoder import decode
from wxf.encoder import INT64_MAX, INT64_MIN, Encoder
from wxf.expr import Association, BigInteger, BigReal, Function, Rule, RuleDelayed, Symbol
from wxf.serialization.types import Buffer
from wxf.tags import INTEGER_TAGS, TypeTag, element_is_unsigned, element_type_for_dtype
from wxf.tree import ExprNode, ExprTree

LIST_HEAD = 'List'


def to_python(tree: ExprTree, node: Optional[ExprNode] = None) -> Any:
    """Convert a decoded tree, or the sub-tree under `node`, to Python values.

    `List[...]` functions become lists, big integers stay `BigInteger` digit strings and arrays become read-only
    numpy arrays viewing the decoded buffer. The conversion uses an explicit stack, so deeply nested inputs are fine.
    """
    if not tree.complete:
        raise ValueError('cannot convert a partially decoded tree')
    values: list[Any] = []
    stack: list[tuple[ExprNode, bool]] = [(node or tree.root, False)]
    while stack:
        current, expanded = stack.pop()
        if current.is_leaf():
            values.append(_compose(tree, current, []))
        elif not expanded:
            stack.append((current, True))
            # children are pushed in reverse so they are converted, and their values stacked, in order
            stack.extend((child, False) for child in reversed(current.children) if child is not None)
        else:
            args = values[-current.arity:]
            del values[-current.arity:]
            values.append(_compose(tree, current, args))
    (value,) = values
    return value


def _compose(tree: ExprTree, node: ExprNode, args: list[Any]) -> Any:
    token = tree[node]
    match token.type:
        case TypeTag.FUNCTION:
            head = tree.head(node).as_text()
            if head == LIST_HEAD:
                return args
            return Function(Symbol(head), tuple(args))
        case TypeTag.ASSOCIATION:
            return Association(tuple(args))
        case TypeTag.RULE:
            return Rule(*args)
        case TypeTag.DELAYED_RULE:
            return RuleDelayed(*args)
        case tag if tag in INTEGER_TAGS:
            return token.as_integer()
        case TypeTag.REAL64:
            return token.as_real()
        case TypeTag.STRING:
            return token.as_text()
        case TypeTag.BINARY_STRING:
            return token.as_bytes()
        case TypeTag.SYMBOL:
            return Symbol(token.as_text())
        case TypeTag.BIG_INTEGER:
            return BigInteger(token.as_text())
        case TypeTag.BIG_REAL:
            return BigReal(token.as_text())
        case TypeTag.PACKED_ARRAY | TypeTag.NUMERIC_ARRAY:
            return token.as_array()
        case _:
            raise NotImplementedError(token.type)


def encode_value(encoder: Encoder, value: Any) -> None:
    """Push a Python value as one complete expression.

    On error nothing is left in the encoder from this value. Integers outside int64 are written as big integers,
    `EncodeError` is raised for those with more digits than the interpreter turns into text.
    """
    start = len(encoder)
    try:
        _encode(encoder, value)
    except BaseException:
        encoder.truncate(start)
        raise


def _encode(encoder: Encoder, value: Any) -> None:
    match value:
        case bool() | np.bool_():
            raise TypeError('booleans have no wire form, push the symbols True or False instead')
        case int():
            if INT64_MIN <= value <= INT64_MAX:
                encoder.push_integer(value)
            else:
                encoder.push_bigint(value)
        case float():
            encoder.push_real(value)
        case str():
            encoder.push_string(value)
        case bytes() | bytearray() | memoryview():
            encoder.push_binary_string(value)
        case Symbol(name=name):
            encoder.push_symbol(name)
        case BigInteger(digits=digits):
            encoder.push_bigint(digits)
        case BigReal(text=text):
            encoder.push_bigreal(text)
        case Function(head=head, args=args):
            encoder.push_function(head.name, len(args))
            for arg in args:
                _encode(encoder, arg)
        case Rule(lhs=lhs, rhs=rhs):
            encoder.push_rule()
            _encode(encoder, lhs)
            _encode(encoder, rhs)
        case RuleDelayed(lhs=lhs, rhs=rhs):
            encoder.push_delay_rule()
            _encode(encoder, lhs)
            _encode(encoder, rhs)
        case Association(rules=rules):
            encoder.push_association(len(rules))
            for rule in rules:
                _encode(encoder, rule)
        case dict():
            encoder.push_association(len(value))
            for key, item in value.items():
                encoder.push_rule()
                _encode(encoder, key)
                _encode(encoder, item)
        case list() | tuple():
            encoder.push_function(LIST_HEAD, len(value))
            for item in value:
                _encode(encoder, item)
        case np.ndarray():
            if element_is_unsigned(element_type_for_dtype(value.dtype)):
                encoder.push_numeric_array(value.shape, value)
            else:
                encoder.push_packed_array(value.shape, value)
        case np.generic():
            _encode(encoder, value.item())
        case _:
            raise TypeError(f'cannot encode {type(value).__name__}')


def dumps(value: Any, *, include_header: Optional[bool] = None) -> bytes:
    encoder = Encoder(include_header=include_header)
    encode_value(encoder, value)
    return encoder.getvalue()


def loads(data: Buffer, *, settings: Optional[CodecSettings] = None) -> Any:
    """Decode and convert in one go, decode errors are raised."""
    return to_python(decode(data, settings=settings).unwrap_or_raise())
