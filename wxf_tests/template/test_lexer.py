import pytest

from wxf.exception import TemplateSyntaxError
from wxf.template.lexer import TokenKind, tokenize, unescape


def _kinds(source: str) -> list[tuple[str, str]]:
    return [(kind.name, text) for kind, text, _ in tokenize(source)]


def test_tokenize():
    assert _kinds('f[x$1, {-2, 3.5e2}, "a b", #arg_1]') == [
        ('NAME', 'f'),
        ('LBRACKET', '['),
        ('NAME', 'x$1'),
        ('COMMA', ','),
        ('LBRACE', '{'),
        ('INTEGER', '-2'),
        ('COMMA', ','),
        ('REAL', '3.5e2'),
        ('RBRACE', '}'),
        ('COMMA', ','),
        ('STRING', '"a b"'),
        ('COMMA', ','),
        ('PLACEHOLDER', '#arg_1'),
        ('RBRACKET', ']'),
        ('END', ''),
    ]


@pytest.mark.parametrize('source, kind', [
    ('1', 'INTEGER'),
    ('-10', 'INTEGER'),
    ('1.', 'REAL'),
    ('.5', 'REAL'),
    ('1e10', 'REAL'),
    ('-2.5E-3', 'REAL'),
    ('$Context', 'NAME'),
])
def test_atoms(source, kind):
    assert _kinds(source) == [(kind, source), ('END', '')]


def test_positions():
    assert [position for _, _, position in tokenize('  f[ 1 ]')] == [2, 3, 5, 7, 8]


@pytest.mark.parametrize('source, position', [
    ('f[1, @]', 5),
    ('"abc', 0),
    ('f["a", "b]', 7),
    ('_x', 0),
])
def test_errors(source, position):
    with pytest.raises(TemplateSyntaxError) as exc_info:
        list(tokenize(source))
    assert exc_info.value.position == position


def test_unescape():
    assert unescape(r'"a\n\t\r\"\\b"', 0) == 'a\n\t\r"\\b'
    with pytest.raises(TemplateSyntaxError) as exc_info:
        unescape(r'"ab\q"', 4)
    assert exc_info.value.position == 7
