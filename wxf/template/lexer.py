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

import re
from enum import Enum, auto
from typing import Iterator

from wxf.exception import TemplateSyntaxError


class TokenKind(Enum):
    NAME = auto()
    INTEGER = auto()
    REAL = auto()
    STRING = auto()
    PLACEHOLDER = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    END = auto()


# (kind, text, position in the source)
Lexeme = tuple[TokenKind, str, int]

_LEXEME_RE = re.compile(r'''
    (?P<SPACE>\s+)
  | (?P<REAL>-?(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?|-?\d+[eE][-+]?\d+)
  | (?P<INTEGER>-?\d+)
  | (?P<STRING>"(?:[^"\\]|\\.)*")
  | (?P<PLACEHOLDER>\#[A-Za-z0-9_$]+)
  | (?P<NAME>[A-Za-z$][A-Za-z0-9$]*)
  | (?P<LBRACKET>\[)
  | (?P<RBRACKET>\])
  | (?P<LBRACE>\{)
  | (?P<RBRACE>\})
  | (?P<COMMA>,)
''', re.VERBOSE | re.DOTALL)

_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '"': '"',
    '\\': '\\',
}
_ESCAPE_RE = re.compile(r'\\(.)', re.DOTALL)


def unescape(literal: str, position: int) -> str:
    """Turn the source text of a string literal, quotes included, into its value."""
    def replace(match: re.Match[str]) -> str:
        try:
            return _ESCAPES[match.group(1)]
        except KeyError:
            raise TemplateSyntaxError(f'invalid escape \\{match.group(1)}', position=position + 1 + match.start())
    return _ESCAPE_RE.sub(replace, literal[1:-1])


def tokenize(source: str) -> Iterator[Lexeme]:
    """Split a template in lexemes, always ending with an `END` lexeme.

    >>> [(kind.name, text) for kind, text, _ in tokenize('f[#x, -1.5]')]
    [('NAME', 'f'), ('LBRACKET', '['), ('PLACEHOLDER', '#x'), ('COMMA', ','), ('REAL', '-1.5'), ('RBRACKET', ']'), \
('END', '')]
    """
    pos = 0
    while pos < len(source):
        match = _LEXEME_RE.match(source, pos)
        if match is None:
            if source[pos] == '"':
                raise TemplateSyntaxError('unterminated string', position=pos)
            raise TemplateSyntaxError(f'unexpected character {source[pos]!r}', position=pos)
        assert match.lastgroup is not None
        if match.lastgroup != 'SPACE':
            yield (TokenKind[match.lastgroup], match.group(), pos)
        pos = match.end()
    yield (TokenKind.END, '', pos)
