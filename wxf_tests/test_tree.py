from typing import Optional

import pytest

from wxf.conf.settings import CodecSettings
from wxf.encoder import Encoder
from wxf.exception import ArityMismatch, DecodeError, DecodeLimitExceeded, InvalidHead
from wxf.parser import Parser
from wxf.tags import TypeTag
from wxf.tree import ExprTree, TreeBuilder
from wxf.utils.result import Result


def _build(data: bytes, settings: Optional[CodecSettings] = None) -> Result[ExprTree, DecodeError]:
    tokens = Parser(data).parse().unwrap()
    return TreeBuilder(tokens, settings=settings, end_offset=len(data)).build()


def _encoder() -> Encoder:
    return Encoder(include_header=True)


def test_function_with_two_children():
    tree = _build(_encoder().push_function('f', 2).push_integer(1).push_string('a').getvalue()).unwrap()
    assert tree.complete
    root = tree.root
    assert root.type is TypeTag.FUNCTION
    assert root.arity == 2
    assert tree.head(root).as_text() == 'f'
    first, second = root.children
    assert tree[first].as_integer() == 1
    assert tree[second].as_text() == 'a'
    assert first.is_leaf() and second.is_leaf()


def test_leaf_root():
    tree = _build(_encoder().push_real(2.5).getvalue()).unwrap()
    assert tree.root.is_leaf()
    assert tree[tree.root].as_real() == 2.5
    with pytest.raises(TypeError):
        tree.head(tree.root)


def test_nested_closing_many_frames():
    # g[h[k[1]], 2]: the leaf 1 closes k and h at once, then 2 closes g
    encoder = _encoder().push_function('g', 2).push_function('h', 1).push_function('k', 1).push_integer(1)
    encoder.push_integer(2)
    tree = _build(encoder.getvalue()).unwrap()
    h, two = tree.root.children
    assert tree.head(h).as_text() == 'h'
    assert tree[two].as_integer() == 2
    (k,) = h.children
    (one,) = k.children
    assert tree[one].as_integer() == 1
    assert [depth for depth, _ in tree.walk()] == [0, 1, 2, 3, 1]


def test_zero_arity_composites():
    encoder = _encoder().push_function('f', 3).push_function('g', 0).push_association(0).push_integer(5)
    tree = _build(encoder.getvalue()).unwrap()
    g, assoc, five = tree.root.children
    assert g.arity == 0 and tree.head(g).as_text() == 'g'
    assert assoc.type is TypeTag.ASSOCIATION and assoc.arity == 0
    assert tree[five].as_integer() == 5
    # an empty function alone is a complete expression
    assert _build(_encoder().push_function('List', 0).getvalue()).unwrap().root.arity == 0


def test_rules_and_association():
    encoder = _encoder().push_association(2)
    encoder.push_rule().push_string('a').push_integer(1)
    encoder.push_delay_rule().push_string('b').push_function('f', 1).push_integer(2)
    tree = _build(encoder.getvalue()).unwrap()
    rule, delayed = tree.root.children
    assert rule.type is TypeTag.RULE and rule.arity == 2
    assert delayed.type is TypeTag.DELAYED_RULE
    assert tree[delayed.children[1]].type is TypeTag.FUNCTION


def test_rule_root():
    tree = _build(_encoder().push_rule().push_symbol('x').push_integer(1).getvalue()).unwrap()
    assert tree.root.type is TypeTag.RULE
    assert [tree[child].type for child in tree.root.children] == [TypeTag.SYMBOL, TypeTag.INT8]


@pytest.mark.parametrize('arity', [1, 2, 3, 10])
def test_arity_closure(arity):
    encoder = _encoder().push_function('f', arity)
    for i in range(arity):
        encoder.push_function('g', 1).push_integer(i)
    data = encoder.getvalue()
    tree = _build(data).unwrap()
    assert len(tree.root.children) == arity
    assert all(child.is_complete() for child in tree.root.children)

    # removing the last child token leaves the function one child short
    error = _build(data[:-2]).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.tree is not None
    assert not error.tree.complete
    # the last child was opened but its own child never showed up
    assert error.tree.root.children[-1].children == [None]


def test_missing_children_partial_tree():
    data = _encoder().push_function('f', 3).push_integer(1).push_integer(2).getvalue()
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == 2
    tree = error.tree
    assert not tree.complete
    assert tree.root.arity == 3
    assert tree.root.children == [None, None, None]


def test_unclosed_frame_partial_tree():
    data = _encoder().push_function('f', 2).push_function('g', 2).push_integer(1).push_integer(2).getvalue()
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == len(data)
    tree = error.tree
    assert not tree.complete
    g, missing = tree.root.children
    assert missing is None
    assert g.is_complete()
    assert not tree.root.is_complete()
    # partial trees can still be printed
    assert tree.format().splitlines() == ['Function f [2]', '  Function g [2]', '    INT8 1', '    INT8 2']


def test_leftover_tokens():
    data = _encoder().push_integer(1).push_integer(2).getvalue()
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == 4

    data = _encoder().push_function('f', 1).push_integer(1).push_string('x').getvalue()
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.tree.root.is_complete()


def test_empty_token_list():
    error = TreeBuilder([], end_offset=2).build().unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == 2


def test_huge_declared_arity():
    data = b'8:f' + bytes([0xff] * 9 + [0x01]) + b's\x01fC\x01'
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == 2
    assert error.tree is None

    # a nested node with an impossible count is left out of the partial tree
    data = b'8:f\x01s\x01fA' + bytes([0xff] * 9 + [0x01]) + b'C\x01'
    error = _build(data).unwrap_err()
    assert isinstance(error, ArityMismatch)
    assert error.offset == 7
    assert error.tree.root.children == [None]


@pytest.mark.parametrize('data, offset', [
    (b'8:f\x01C\x01C\x02', 4),
    (b'8:f\x01S\x01fC\x01', 4),
    (b'8:f\x01s\x01ff\x00C\x01', 9),
])
def test_invalid_head(data, offset):
    error = _build(data).unwrap_err()
    assert isinstance(error, InvalidHead)
    assert error.offset == offset


def test_function_without_head():
    error = _build(b'8:f\x00').unwrap_err()
    assert isinstance(error, ArityMismatch)


def test_deep_nesting_is_not_recursive():
    depth = 50_000
    encoder = _encoder()
    for _ in range(depth):
        encoder.push_function('f', 1)
    encoder.push_integer(0)
    tree = _build(encoder.getvalue()).unwrap()
    depths = [depth for depth, _ in tree.walk()]
    assert max(depths) == depth
    assert len(depths) == depth + 1
    assert len(tree.format().splitlines()) == depth + 1


def test_depth_limit():
    encoder = _encoder()
    for _ in range(3):
        encoder.push_function('f', 1)
    encoder.push_integer(0)
    data = encoder.getvalue()
    assert _build(data, CodecSettings(MAX_DEPTH=3)).is_ok()
    error = _build(data, CodecSettings(MAX_DEPTH=2)).unwrap_err()
    assert isinstance(error, DecodeLimitExceeded)
    # the third function starts after two 5-byte functions
    assert error.offset == 12


def test_format():
    encoder = _encoder().push_function('f', 4).push_bigint(2**70).push_binary_string(b'\x00')
    encoder.push_numeric_array([2], [1, 2], 16).push_rule().push_symbol('x').push_real(0.5)
    tree = _build(encoder.getvalue()).unwrap()
    assert str(tree).splitlines() == [
        'Function f [4]',
        "  BIG_INTEGER '1180591620717411303424'",
        "  BINARY_STRING b'\\x00'",
        '  NUMERIC_ARRAY UINT8 [2]',
        '  Rule',
        "    SYMBOL 'x'",
        '    REAL64 0.5',
    ]
