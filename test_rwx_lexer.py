import pytest

from rwx_lexer import LineScanner, iter_lines
from rwx_types import RWXParseError


def test_iter_lines_skips_blank_and_comment_lines():
    text = "# header\n\n   \nvertex 0 0 0\n  # indented comment\ntriangle 1 2 3\n"
    lines = list(iter_lines(text))
    assert [(l.lineno, l.text) for l in lines] == [(4, 'vertex 0 0 0'), (6, 'triangle 1 2 3')]


def test_iter_lines_handles_all_line_terminators():
    lines = list(iter_lines("a 1\r\nb 2\rc 3\nd 4"))
    assert [l.text for l in lines] == ['a 1', 'b 2', 'c 3', 'd 4']
    assert [l.lineno for l in lines] == [1, 2, 3, 4]


def test_iter_lines_strips_inline_comments_and_leading_space():
    lines = list(iter_lines("   Vertex 1 2 3 #!prelight 0.5\n"))
    assert lines[0].text == 'Vertex 1 2 3'


def test_iter_lines_is_lazy():
    gen = iter_lines("vertex 0 0 0\n" * 3)
    assert next(gen).lineno == 1


def test_scanner_reads_numbers_and_words():
    s = LineScanner("  -1.5e2 .25 42 wood.jpg  ")
    assert s.read_float() == -150.0
    assert s.read_float() == 0.25
    assert s.read_uint() == 42
    assert s.read_word() == 'wood.jpg'
    assert s.at_end()


def test_scanner_match_keyword_is_case_insensitive():
    s = LineScanner("UV 0.5 1")
    assert not s.match_keyword('tag')
    assert s.match_keyword('uv')
    assert s.read_floats(2) == [0.5, 1.0]


def test_scanner_read_rest():
    s = LineScanner("lit foreshorten filter")
    assert s.read_rest() == ['lit', 'foreshorten', 'filter']
    assert s.at_end()


@pytest.mark.parametrize('text', ['abc', '1.0abc', '--', '1e', ''])
def test_scanner_rejects_malformed_floats(text):
    s = LineScanner(text, lineno=7, path='model.rwx')
    with pytest.raises(RWXParseError) as exc:
        s.read_float()
    assert exc.value.lineno == 7
    assert str(exc.value).startswith('model.rwx:7:')


@pytest.mark.parametrize('text', ['-1', '2.5', 'x', ''])
def test_scanner_rejects_malformed_integers(text):
    with pytest.raises(RWXParseError):
        LineScanner(text).read_uint()


def test_scanner_missing_word():
    with pytest.raises(RWXParseError):
        LineScanner("   ").read_word('name')


def test_iter_lines_comment_needs_no_leading_space():
    lines = list(iter_lines("vertex 0 0 0#corner\ntriangle 1 2 3# face\n"))
    assert [l.text for l in lines] == ['vertex 0 0 0', 'triangle 1 2 3']


def test_iter_lines_drops_byte_order_mark():
    lines = list(iter_lines("\ufeffprotobegin a\nprotoend\n"))
    assert lines[0].text == 'protobegin a'
    assert lines[0].lineno == 1
