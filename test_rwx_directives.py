import pytest

from rwx_directives import (KEYWORD_TABLE, DirectiveKind, inert_kinds, match_directive,
                            parse_directive)
from rwx_lexer import SourceLine
from rwx_types import RWXParseError


def parse(text, **kwargs):
    return parse_directive(SourceLine(1, text), 'test.rwx', **kwargs)


@pytest.mark.parametrize('word,kind', [
    ('vertex', DirectiveKind.VERTEX),
    ('Vertex', DirectiveKind.VERTEX),
    ('VERT', DirectiveKind.VERTEX),
    ('tri', DirectiveKind.TRIANGLE),
    ('ClumpBegin', DirectiveKind.CLUMPBEGIN),
    ('clumpb', DirectiveKind.CLUMPBEGIN),
    ('TransformBegin', DirectiveKind.TRANSFORMBEGIN),
    ('transform', DirectiveKind.TRANSFORM),
    ('translate', DirectiveKind.TRANSLATE),
    ('texture', DirectiveKind.TEXTURE),
    ('TextureModes', DirectiveKind.TEXTUREMODE),
    ('MaterialModes', DirectiveKind.MATERIALMODE),
    ('protoinst', DirectiveKind.PROTOINSTANCE),
    ('protoinstancegeom', DirectiveKind.PROTOINSTANCEGEOMETRY),
])
def test_match_directive(word, kind):
    assert match_directive(word) is kind


@pytest.mark.parametrize('word', ['foobar', 'v', 'ver', 'proto', 'material', 'texturem', 'col'])
def test_match_directive_unknown_or_too_short(word):
    assert match_directive(word) is DirectiveKind.UNKNOWN


def test_every_keyword_resolves_to_itself():
    for spelling, kind, min_len in KEYWORD_TABLE:
        assert match_directive(spelling) is kind
        assert match_directive(spelling[:min_len]) is kind, spelling
        assert min_len <= len(spelling)


def test_every_kind_has_a_keyword():
    kinds = {kind for _, kind, _ in KEYWORD_TABLE}
    assert kinds == set(DirectiveKind) - {DirectiveKind.UNKNOWN}


def test_vertex_with_uv_and_prelight():
    d = parse('vertex 1 2 3 uv 0.5 0.25 prelight 1 1 1')
    assert d.kind is DirectiveKind.VERTEX
    assert d.numbers == (1.0, 2.0, 3.0)
    assert d.uv == (0.5, 0.25)


def test_vertex_without_uv():
    assert parse('Vertex -1 0 .5').uv is None


def test_triangle_with_tag():
    d = parse('triangle 1 2 3 tag 7')
    assert d.indices == (1, 2, 3)
    assert d.tag == 7


def test_quad_with_uv_and_tag():
    d = parse('quad 1 2 3 4 uv 0 1 tag 2')
    assert d.indices == (1, 2, 3, 4)
    assert d.uv == (0.0, 1.0)
    assert d.tag == 2


def test_polygon_reads_counted_indices():
    d = parse('polygon 5 1 2 3 4 5 tag 9')
    assert d.indices == (1, 2, 3, 4, 5)
    assert d.tag == 9


def test_polygon_count_limits():
    with pytest.raises(RWXParseError):
        parse('polygon 2 1 2')
    with pytest.raises(RWXParseError):
        parse('polygon 4000000000 1 2 3', max_polygon_vertices=1024)
    with pytest.raises(RWXParseError):
        parse('polygon 4 1 2 3')


def test_texture_with_mask_and_bump():
    d = parse('texture brick mask brickm bump brickb')
    assert (d.name, d.mask, d.bump) == ('brick', 'brickm', 'brickb')


def test_texture_with_bump_only():
    d = parse('Texture brick Bump brickb')
    assert d.mask is None
    assert d.bump == 'brickb'


def test_rotate_and_transform_arguments():
    assert parse('rotate 0 1 0 90').numbers == (0.0, 1.0, 0.0, 90.0)
    assert parse('rotate 1 0 0 -45.5').numbers == (1, 0, 0, -45.5)
    d = parse('transform ' + ' '.join(str(i) for i in range(16)))
    assert d.numbers == tuple(float(i) for i in range(16))


@pytest.mark.parametrize('text', [
    'translate 1 2',
    'color 1 x 0',
    'triangle 1 2',
    'triangle 1 2 3 tag',
    'scale 1 1 1.0.0',
    'protoinstance',
    'texture',
    'lightsampling',
    'rotate 0.5 1 0 90',
    'rotate -1 0 0 90',
    'rotate 0 1 0',
])
def test_malformed_arguments_raise(text):
    with pytest.raises(RWXParseError):
        parse(text)


def test_inert_directives_consume_their_arguments():
    assert parse('texturemodes lit foreshorten').words == ('lit', 'foreshorten')
    assert parse('geometrysampling wireframe').words == ('wireframe',)
    assert parse('block 1 2 3').numbers == (1.0, 2.0, 3.0)
    assert parse('cylinder 1 0.5 0.5 12').numbers == (1.0, 0.5, 0.5, 12.0)
    assert parse('tag 3').tag == 3
    for kind in inert_kinds():
        assert kind is not DirectiveKind.UNKNOWN


def test_unknown_directive_keeps_its_keyword():
    d = parse('foobar 1 2 3')
    assert d.kind is DirectiveKind.UNKNOWN
    assert d.keyword == 'foobar'
    assert d.words == ('1', '2', '3')
