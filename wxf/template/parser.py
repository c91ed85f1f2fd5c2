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
Recursive descent parser for the template language.

    expr := atom | NAME '[' [expr (',' expr)*] ']' | '{' [expr (',' expr)*] '}'
    atom := NAME | INTEGER | REAL | STRING | PLACEHOLDER

Braces are a shorthand for `List[...]`. Literals are parsed to the Python values `wxf.convert` knows how to encode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wxf.exception import TemplateSyntaxError
from wxf.expr import BigInteger, Symbol
from wxf.template.lexer import Lexeme, TokenKind, tokenize, unescape

LIST_HEAD = 'List'
_INT64_DIGITS = 19


@dataclass(slots=True, frozen=True)
class Literal:
    value: Any


@dataclass(slots=True, frozen=True)
class Placeholder:
    name: str
    position: int


@dataclass(slots=True, frozen=True)
class Call:
    head: str
    args: tuple[Node, ...]
    position: int


Node = Literal | Placeholder | Call


class TemplateParser:
    def __init__(self, source: str) -> None:
        self._lexemes = list(tokenize(source))
        self._pos = 0

    def parse(self) -> Node:
        node = self._expr()
        kind, text, position = self._next()
        if kind is not TokenKind.END:
            raise TemplateSyntaxError(f'unexpected {text!r} after the expression', position=position)
        return node

    def _peek(self) -> TokenKind:
        return self._lexemes[self._pos][0]

    def _next(self) -> Lexeme:
        lexeme = self._lexemes[self._pos]
        # END is never consumed, so peeking after it stays valid
        if lexeme[0] is not TokenKind.END:
            self._pos += 1
        return lexeme

    def _expr(self) -> Node:
        kind, text, position = self._next()
        match kind:
            case TokenKind.NAME:
                if self._peek() is TokenKind.LBRACKET:
                    self._next()
                    return Call(text, self._args(TokenKind.RBRACKET), position)
                return Literal(Symbol(text))
            case TokenKind.LBRACE:
                return Call(LIST_HEAD, self._args(TokenKind.RBRACE), position)
            case TokenKind.INTEGER:
                return Literal(_integer(text))
            case TokenKind.REAL:
                return Literal(float(text))
            case TokenKind.STRING:
                return Literal(unescape(text, position))
            case TokenKind.PLACEHOLDER:
                return Placeholder(text[1:], position)
            case TokenKind.END:
                raise TemplateSyntaxError('unexpected end of template', position=position)
            case _:
                raise TemplateSyntaxError(f'unexpected {text!r}', position=position)

    def _args(self, closing: TokenKind) -> tuple[Node, ...]:
        args: list[Node] = []
        if self._peek() is closing:
            self._next()
            return ()
        while True:
            args.append(self._expr())
            kind, text, position = self._next()
            if kind is closing:
                return tuple(args)
            if kind is not TokenKind.COMMA:
                raise TemplateSyntaxError(f'expected , or closing bracket, got {text!r}', position=position)


def _integer(text: str) -> int | BigInteger:
    # digits beyond the int64 range are kept as text, they are never computed on
    if len(text.lstrip('-').lstrip('0')) > _INT64_DIGITS:
        return BigInteger(text)
    return int(text)


def parse_template(source: str) -> Node:
    return TemplateParser(source).parse()
