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

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from wxf.tree import ExprTree


class WxfError(Exception):
    """Base class for exceptions in wxf."""
    pass


class DecodeError(WxfError):
    """Base class for errors found while decoding a buffer.

    `offset` is the position in the input buffer where the problem was detected, when it is known.
    """

    def __init__(self, message: str = '', *, offset: Optional[int] = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.offset = offset

    def __str__(self) -> str:
        message = super().__str__()
        if self.offset is None:
            return message
        return f'{message} (at offset {self.offset})'


class BadHeader(DecodeError):
    """The buffer does not start with the 2-byte format marker."""


class UnknownTag(DecodeError):
    """A type tag or array element type is outside the closed set of known values."""


class Truncated(DecodeError):
    """A declared length, width, rank or dimension runs past the end of the buffer."""


class ArityMismatch(DecodeError):
    """The declared child counts do not match the tokens actually present.

    The partially built tree is available on `tree`, its `complete` flag is always `False`. It is `None` only when
    there is no token at all or when the first token declares more children than the whole token list holds.
    """

    def __init__(self, message: str = '', *, offset: Optional[int] = None, tree: Optional[ExprTree] = None) -> None:
        super().__init__(message, offset=offset)
        self.tree = tree


class InvalidHead(DecodeError):
    """A function token is not followed by a symbol token for its head."""


class DecodeLimitExceeded(DecodeError):
    """The input exceeds one of the configured decode limits."""


class EncodeError(WxfError):
    """Base class for errors raised by the encoder."""


class ArrayLengthMismatch(EncodeError):
    """The product of the dimensions does not match the number of elements supplied."""

    def __init__(self, dimensions: tuple[int, ...], expected: int, actual: int) -> None:
        super().__init__(f'dimensions {list(dimensions)} require {expected} elements, got {actual}')
        self.dimensions = dimensions
        self.expected = expected
        self.actual = actual


class TemplateError(WxfError):
    """Base class for errors raised while compiling a template."""


class TemplateSyntaxError(TemplateError):
    def __init__(self, message: str, *, position: int) -> None:
        super().__init__(f'{message} at position {position}')
        self.position = position


class MissingPlaceholder(TemplateError):
    def __init__(self, name: str) -> None:
        super().__init__(f'no value given for placeholder {name!r}')
        self.name = name
