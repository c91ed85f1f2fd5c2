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

from typing import Optional

from wxf.conf.get_settings import get_global_settings
from wxf.conf.settings import CodecSettings
from wxf.exception import DecodeError
from wxf.parser import Parser
from wxf.serialization.types import Buffer
from wxf.token import Token
from wxf.tree import ExprTree, TreeBuilder
from wxf.utils.result import Result, propagate_result


def decode_tokens(buffer: Buffer, *, settings: Optional[CodecSettings] = None) -> Result[list[Token], DecodeError]:
    """Run only the first pass and return the flat token stream."""
    if settings is None:
        settings = get_global_settings()
    return Parser(buffer, settings=settings).parse()


@propagate_result
def decode(buffer: Buffer, *, settings: Optional[CodecSettings] = None) -> Result[ExprTree, DecodeError]:
    """Decode a complete buffer, header included, into an expression tree.

    Errors are returned as values, use `decode(...).unwrap_or_raise()` to get them raised instead. The buffer must not
    be modified while the tree is in use, since tokens view it without copying.
    """
    if settings is None:
        settings = get_global_settings()
    view = memoryview(buffer)
    tokens = Parser(view, settings=settings).parse().unwrap_or_propagate()
    return TreeBuilder(tokens, settings=settings, end_offset=view.nbytes).build()
