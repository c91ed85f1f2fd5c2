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
First decode pass: turn a buffer into a flat list of tokens.

The buffer is read once, left to right, and every token is a view into it. Composite tags only contribute their
declared child count, the children are simply the tokens that follow; rebuilding the hierarchy is left to
`wxf.tree.TreeBuilder`.
"""

from __future__ import annotations

from typing import Optional

from structlog import get_logger
from typing_extensions import assert_never

from wxf.conf.settings import CodecSettings
from wxf.constants import HEADER
from wxf.exception import BadHeader, DecodeError, DecodeLimitExceeded, Truncated, UnknownTag
from wxf.serialization import Deserializer, OutOfDataError
from wxf.serialization.encoding.bytes import decode_bytes
from wxf.serialization.encoding.varint import decode_varint
from wxf.serialization.types import Buffer
from wxf.tags import Array, Composite, ElementType, Invalid, Scalar, Textual, TypeTag, classify, element_width
from wxf.tags import is_valid_element_type
from wxf.token import ArrayShape, Token
from wxf.utils.result import Err, Ok, Result, propagate_result

logger = get_logger()

_NO_DATA = memoryview(b'')

# rules and delayed rules always have a left and a right side
RULE_ARITY = 2


class Parser:
    """Builds the token stream of one buffer.

    The buffer must stay alive and unmodified for as long as the tokens are used, since they only borrow from it. The
    tokens read so far are kept on `tokens` even when parsing fails, callers decide whether a partial stream is
    useful.
    """

    def __init__(self, buffer: Buffer, *, settings: Optional[CodecSettings] = None) -> None:
        self.log = logger.new()
        self._deserializer = Deserializer.build_bytes_deserializer(buffer)
        self._max_input_bytes = settings.MAX_INPUT_BYTES if settings is not None else None
        self._result: Optional[Result[list[Token], DecodeError]] = None
        self.tokens: list[Token] = []

    def parse(self) -> Result[list[Token], DecodeError]:
        """Run the pass, calling it again returns the same result."""
        if self._result is None:
            self._result = self._parse()
            if self._result.is_err():
                self.log.warn('token stream aborted', error=str(self._result.err()), tokens=len(self.tokens))
            else:
                self.log.debug('token stream built', tokens=len(self.tokens))
        return self._result

    @propagate_result
    def _parse(self) -> Result[list[Token], DecodeError]:
        self._check_input().unwrap_or_propagate()
        while not self._deserializer.is_empty():
            token = self._read_token().unwrap_or_propagate()
            self.tokens.append(token)
        return Ok(self.tokens)

    def _check_input(self) -> Result[None, DecodeError]:
        de = self._deserializer
        size = de.remaining()
        if self._max_input_bytes is not None and size > self._max_input_bytes:
            return Err(DecodeLimitExceeded(f'input has {size} bytes, the limit is {self._max_input_bytes}'))
        if de.read_bytes(len(HEADER), exact=False) != HEADER:
            return Err(BadHeader('missing format header', offset=0))
        return Ok(None)

    def _read_token(self) -> Result[Token, DecodeError]:
        de = self._deserializer
        offset = de.cur_pos()
        tag = de.read_byte()
        tag_class = classify(tag)
        try:
            match tag_class:
                case Scalar(tag=type_tag, width=width):
                    return Ok(Token(type=type_tag, offset=offset, data=de.read_bytes(width), length=width))
                case Textual(tag=type_tag):
                    data = decode_bytes(de)
                    return Ok(Token(type=type_tag, offset=offset, data=data, length=len(data)))
                case Composite(tag=type_tag, arity_follows=True):
                    # only the count belongs to this token, the children are the tokens that follow
                    arity = decode_varint(de)
                    return Ok(Token(type=type_tag, offset=offset, data=_NO_DATA, length=arity))
                case Composite(tag=type_tag):
                    return Ok(Token(type=type_tag, offset=offset, data=_NO_DATA, length=RULE_ARITY))
                case Array(tag=type_tag):
                    return self._read_array(type_tag, offset)
                case Invalid(byte=byte):
                    return Err(UnknownTag(f'unknown tag {byte}', offset=offset))
                case _:
                    assert_never(tag_class)
        except OutOfDataError:
            return Err(Truncated(f'{TypeTag(tag).name} runs past the end of the buffer', offset=offset))

    def _read_array(self, type_tag: TypeTag, offset: int) -> Result[Token, DecodeError]:
        de = self._deserializer
        element_type = de.read_byte()
        if not is_valid_element_type(type_tag, element_type):
            return Err(UnknownTag(f'invalid element type {element_type} for {type_tag.name}', offset=offset + 1))
        width = element_width(element_type)

        rank = decode_varint(de)
        # every dimension takes at least one byte
        if rank > de.remaining():
            return Err(Truncated(f'rank {rank} runs past the end of the buffer', offset=offset))
        dimensions = tuple(decode_varint(de) for _ in range(rank))

        # XXX: dimensions come straight from the input, check the size incrementally instead of multiplying them all
        #      first, so a long list of huge dimensions cannot force huge integer arithmetic
        if 0 not in dimensions:
            max_count = de.remaining() // width
            count = 1
            for dim in dimensions:
                count *= dim
                if count > max_count:
                    return Err(Truncated(f'{type_tag.name} data runs past the end of the buffer', offset=offset))

        shape = ArrayShape(ElementType(element_type), dimensions)
        data = de.read_bytes(shape.count * width)
        return Ok(Token(type=type_tag, offset=offset, data=data, length=len(data), shape=shape))
