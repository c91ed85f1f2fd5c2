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
Second decode pass: rebuild the expression hierarchy from the flat token stream.

Composite tokens only declare how many children they have, so the builder keeps a stack of open frames, each one
pointing to a composite node and to its next free child slot. Every placed node advances the slot of the frame on top
of the stack, and a full frame is popped, which in turn advances its parent. A single leaf can close any number of
ancestors, this is done in a loop so the nesting depth of the input never turns into Python call depth.

Nodes only hold token indexes, the tree keeps the token list alive and tokens keep viewing the input buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from structlog import get_logger

from wxf.conf.settings import CodecSettings
from wxf.exception import ArityMismatch, DecodeError, DecodeLimitExceeded, InvalidHead
from wxf.tags import INTEGER_TAGS, RULE_TAGS, TypeTag
from wxf.token import Token
from wxf.utils.result import Err, Ok, Result, propagate_result

logger = get_logger()


@dataclass(slots=True, eq=False)
class ExprNode:
    # index of the node's own token, for functions the head symbol is the token right after it
    index: int
    arity: int
    type: TypeTag
    children: list[Optional[ExprNode]] = field(init=False)

    def __post_init__(self) -> None:
        self.children = [None] * self.arity

    def __repr__(self) -> str:
        return f'ExprNode({self.type.name}, index={self.index}, arity={self.arity})'

    def is_leaf(self) -> bool:
        return self.arity == 0

    def is_complete(self) -> bool:
        """Whether every child slot of this node is filled, it does not look further down."""
        return all(child is not None for child in self.children)


class ExprTree:
    """A decoded expression: the token list and the root node built over it.

    `complete` is only `True` for trees returned by a successful decode, partial trees attached to `ArityMismatch`
    errors may have empty child slots.
    """

    __slots__ = ('tokens', 'root', 'complete')

    def __init__(self, tokens: Sequence[Token], root: ExprNode, *, complete: bool) -> None:
        self.tokens = tokens
        self.root = root
        self.complete = complete

    def __repr__(self) -> str:
        return f'ExprTree(root={self.root!r}, tokens={len(self.tokens)}, complete={self.complete})'

    def __getitem__(self, node: ExprNode) -> Token:
        return self.tokens[node.index]

    def head(self, node: ExprNode) -> Token:
        """The head symbol of a function node."""
        if node.type is not TypeTag.FUNCTION:
            raise TypeError(f'{node.type.name} node has no head')
        return self.tokens[node.index + 1]

    def walk(self, node: Optional[ExprNode] = None) -> Iterator[tuple[int, ExprNode]]:
        """Iterate over `(depth, node)` pairs in depth-first pre-order, empty slots of partial trees are skipped."""
        stack: list[tuple[int, ExprNode]] = [(0, node or self.root)]
        while stack:
            depth, current = stack.pop()
            yield depth, current
            stack.extend((depth + 1, child) for child in reversed(current.children) if child is not None)

    def format(self, node: Optional[ExprNode] = None, *, indent: str = '  ') -> str:
        lines = []
        for depth, current in self.walk(node):
            lines.append(f'{indent * depth}{self.describe(current)}')
        return '\n'.join(lines)

    def describe(self, node: ExprNode) -> str:
        token = self[node]
        match token.type:
            case TypeTag.FUNCTION:
                return f'Function {self.head(node).as_text()} [{node.arity}]'
            case TypeTag.ASSOCIATION:
                return f'Association [{node.arity}]'
            case tag if tag in RULE_TAGS:
                return tag.name.replace('_', ' ').title()
            case tag if tag in INTEGER_TAGS:
                return f'{tag.name} {token.as_integer()}'
            case TypeTag.REAL64:
                return f'REAL64 {token.as_real()!r}'
            case TypeTag.BINARY_STRING:
                return f'BINARY_STRING {token.as_bytes()!r}'
            case TypeTag.PACKED_ARRAY | TypeTag.NUMERIC_ARRAY:
                assert token.shape is not None
                return f'{token.type.name} {token.shape.element_type.name} {list(token.shape.dimensions)}'
            case _:
                return f'{token.type.name} {token.as_text()!r}'

    def __str__(self) -> str:
        return self.format()


@dataclass(slots=True)
class _Frame:
    node: ExprNode
    slot: int = 0


class TreeBuilder:
    """Builds the `ExprTree` of a token list.

    `end_offset` is the size of the buffer the tokens came from, it is only used to locate errors about children that
    never showed up.
    """

    def __init__(self, tokens: Sequence[Token], *, settings: Optional[CodecSettings] = None,
                 end_offset: Optional[int] = None) -> None:
        self.log = logger.new()
        self.tokens = tokens
        self._max_depth = settings.MAX_DEPTH if settings is not None else None
        self._end_offset = end_offset
        self._pos = 0
        self._stack: list[_Frame] = []
        self._root: Optional[ExprNode] = None

    def build(self) -> Result[ExprTree, DecodeError]:
        result = self._build()
        if result.is_err():
            self.log.warn('expression tree aborted', error=str(result.err()), position=self._pos,
                          open_frames=len(self._stack))
        else:
            self.log.debug('expression tree built', tokens=len(self.tokens))
        return result

    @propagate_result
    def _build(self) -> Result[ExprTree, DecodeError]:
        if not self.tokens:
            return Err(ArityMismatch('no expression in the buffer', offset=self._end_offset))

        root = self._open().unwrap_or_propagate()
        if not root.is_leaf():
            self._push(root).unwrap_or_propagate()

        while self._stack and self._pos < len(self.tokens):
            node = self._open().unwrap_or_propagate()
            if node.is_leaf():
                self._advance()
            else:
                self._push(node).unwrap_or_propagate()

        if self._stack:
            return Err(ArityMismatch(f'{len(self._stack)} expression(s) still expect children',
                                     offset=self._end_offset, tree=self._partial_tree()))
        if self._pos < len(self.tokens):
            return Err(ArityMismatch('unexpected token after the end of the expression',
                                     offset=self.tokens[self._pos].offset, tree=self._partial_tree()))
        return Ok(ExprTree(self.tokens, root, complete=True))

    def _open(self) -> Result[ExprNode, DecodeError]:
        """Create the node of the token at the current position, attach it to the tree and move past it.

        A node declaring more children than the whole token list holds is never allocated, the error then carries the
        tree built so far without it.
        """
        index = self._pos
        token = self.tokens[index]
        self._pos += 1
        if token.arity > len(self.tokens):
            return Err(self._missing_children(token))
        node = ExprNode(index, token.arity, token.type)
        self._attach(node)
        if token.type is TypeTag.FUNCTION:
            if self._pos >= len(self.tokens):
                return Err(ArityMismatch('function without a head', offset=self._end_offset,
                                         tree=self._partial_tree()))
            head = self.tokens[self._pos]
            if head.type is not TypeTag.SYMBOL:
                return Err(InvalidHead(f'function head is {head.type.name}, expected SYMBOL', offset=head.offset))
            self._pos += 1
        # every child takes at least one token, a larger count can never be satisfied
        if token.arity > len(self.tokens) - self._pos:
            return Err(self._missing_children(token))
        return Ok(node)

    def _missing_children(self, token: Token) -> ArityMismatch:
        return ArityMismatch(f'{token.type.name} declares {token.arity} children, '
                             f'only {len(self.tokens) - self._pos} tokens follow',
                             offset=token.offset, tree=self._partial_tree())

    def _attach(self, node: ExprNode) -> None:
        if self._root is None:
            self._root = node
        else:
            frame = self._stack[-1]
            frame.node.children[frame.slot] = node

    def _push(self, node: ExprNode) -> Result[None, DecodeError]:
        if self._max_depth is not None and len(self._stack) >= self._max_depth:
            return Err(DecodeLimitExceeded(f'nesting deeper than {self._max_depth}',
                                           offset=self.tokens[node.index].offset))
        self._stack.append(_Frame(node))
        return Ok(None)

    def _advance(self) -> None:
        """Move to the next slot, popping every frame that becomes full on the way up."""
        while self._stack:
            frame = self._stack[-1]
            frame.slot += 1
            if frame.slot < frame.node.arity:
                return
            self._stack.pop()

    def _partial_tree(self) -> Optional[ExprTree]:
        if self._root is None:
            return None
        return ExprTree(self.tokens, self._root, complete=False)
