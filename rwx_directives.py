"""
RWX Directive Dispatcher
Keyword table, abbreviation-tolerant matching and argument grammars for every RWX directive.
Each source line is turned into one Directive value tagged with its DirectiveKind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from rwx_lexer import LineScanner, SourceLine
from rwx_types import Vec2


class DirectiveKind(Enum):
    # geometry
    VERTEX = 'vertex'
    TRIANGLE = 'triangle'
    QUAD = 'quad'
    POLYGON = 'polygon'
    # transform scope
    IDENTITY = 'identity'
    TRANSLATE = 'translate'
    ROTATE = 'rotate'
    SCALE = 'scale'
    TRANSFORM = 'transform'
    TRANSFORMBEGIN = 'transformbegin'
    TRANSFORMEND = 'transformend'
    # material scope
    AMBIENT = 'ambient'
    DIFFUSE = 'diffuse'
    SPECULAR = 'specular'
    COLOR = 'color'
    SURFACE = 'surface'
    OPACITY = 'opacity'
    TEXTURE = 'texture'
    MATERIALBEGIN = 'materialbegin'
    MATERIALEND = 'materialend'
    # grouping
    CLUMPBEGIN = 'clumpbegin'
    CLUMPEND = 'clumpend'
    PROTOBEGIN = 'protobegin'
    PROTOEND = 'protoend'
    PROTOINSTANCE = 'protoinstance'
    MODELBEGIN = 'modelbegin'
    MODELEND = 'modelend'
    # primitives, arguments consumed only
    BLOCK = 'block'
    CONE = 'cone'
    CYLINDER = 'cylinder'
    DISC = 'disc'
    HEMISPHERE = 'hemisphere'
    SPHERE = 'sphere'
    # recognized but inert
    ADDHINT = 'addhint'
    HINTS = 'hints'
    REMOVEHINT = 'removehint'
    ADDMATERIALMODE = 'addmaterialmode'
    REMOVEMATERIALMODE = 'removematerialmode'
    MATERIALMODE = 'materialmode'
    ADDTEXTUREMODE = 'addtexturemode'
    REMOVETEXTUREMODE = 'removetexturemode'
    TEXTUREMODE = 'texturemode'
    TEXTUREADDRESSMODE = 'textureaddressmode'
    TEXTUREMIPMAPSTATE = 'texturemipmapstate'
    TEXTUREDITHERING = 'texturedithering'
    TEXTUREGAMMACORRECTION = 'texturegammacorrection'
    GEOMETRYSAMPLING = 'geometrysampling'
    LIGHTSAMPLING = 'lightsampling'
    AXISALIGNMENT = 'axisalignment'
    COLLISION = 'collision'
    INCLUDE = 'include'
    INCLUDEGEOMETRY = 'includegeometry'
    TRACE = 'trace'
    TRANSFORMJOINT = 'transformjoint'
    PROTOINSTANCEGEOMETRY = 'protoinstancegeometry'
    TAG = 'tag'

    UNKNOWN = '<unknown>'


# (spelling, kind, minimum number of leading characters accepted as an abbreviation)
KEYWORD_TABLE: Tuple[Tuple[str, DirectiveKind, int], ...] = (
    ('addhint', DirectiveKind.ADDHINT, 7),
    ('addmaterialmode', DirectiveKind.ADDMATERIALMODE, 6),
    ('addtexturemode', DirectiveKind.ADDTEXTUREMODE, 6),
    ('ambient', DirectiveKind.AMBIENT, 3),
    ('axisalignment', DirectiveKind.AXISALIGNMENT, 4),
    ('block', DirectiveKind.BLOCK, 5),
    ('clumpbegin', DirectiveKind.CLUMPBEGIN, 6),
    ('clumpend', DirectiveKind.CLUMPEND, 6),
    ('collision', DirectiveKind.COLLISION, 4),
    ('color', DirectiveKind.COLOR, 5),
    ('cone', DirectiveKind.CONE, 4),
    ('cylinder', DirectiveKind.CYLINDER, 3),
    ('diffuse', DirectiveKind.DIFFUSE, 4),
    ('disc', DirectiveKind.DISC, 4),
    ('geometrysampling', DirectiveKind.GEOMETRYSAMPLING, 4),
    ('hemisphere', DirectiveKind.HEMISPHERE, 4),
    ('hints', DirectiveKind.HINTS, 5),
    ('identity', DirectiveKind.IDENTITY, 5),
    ('include', DirectiveKind.INCLUDE, 7),
    ('includegeometry', DirectiveKind.INCLUDEGEOMETRY, 8),
    ('lightsampling', DirectiveKind.LIGHTSAMPLING, 5),
    ('materialbegin', DirectiveKind.MATERIALBEGIN, 9),
    ('materialend', DirectiveKind.MATERIALEND, 9),
    ('materialmode', DirectiveKind.MATERIALMODE, 9),
    ('materialmodes', DirectiveKind.MATERIALMODE, 13),
    ('modelbegin', DirectiveKind.MODELBEGIN, 6),
    ('modelend', DirectiveKind.MODELEND, 6),
    ('opacity', DirectiveKind.OPACITY, 4),
    ('polygon', DirectiveKind.POLYGON, 4),
    ('protobegin', DirectiveKind.PROTOBEGIN, 6),
    ('protoend', DirectiveKind.PROTOEND, 6),
    ('protoinstance', DirectiveKind.PROTOINSTANCE, 6),
    ('protoinstancegeometry', DirectiveKind.PROTOINSTANCEGEOMETRY, 14),
    ('quad', DirectiveKind.QUAD, 4),
    ('removehint', DirectiveKind.REMOVEHINT, 7),
    ('removematerialmode', DirectiveKind.REMOVEMATERIALMODE, 7),
    ('removetexturemode', DirectiveKind.REMOVETEXTUREMODE, 7),
    ('rotate', DirectiveKind.ROTATE, 3),
    ('scale', DirectiveKind.SCALE, 5),
    ('specular', DirectiveKind.SPECULAR, 4),
    ('sphere', DirectiveKind.SPHERE, 4),
    ('surface', DirectiveKind.SURFACE, 4),
    ('tag', DirectiveKind.TAG, 3),
    ('texture', DirectiveKind.TEXTURE, 7),
    ('textureaddressmode', DirectiveKind.TEXTUREADDRESSMODE, 8),
    ('texturedithering', DirectiveKind.TEXTUREDITHERING, 8),
    ('texturegammacorrection', DirectiveKind.TEXTUREGAMMACORRECTION, 8),
    ('texturemipmapstate', DirectiveKind.TEXTUREMIPMAPSTATE, 9),
    ('texturemode', DirectiveKind.TEXTUREMODE, 9),
    ('texturemodes', DirectiveKind.TEXTUREMODE, 12),
    ('trace', DirectiveKind.TRACE, 5),
    ('transform', DirectiveKind.TRANSFORM, 9),
    ('transformbegin', DirectiveKind.TRANSFORMBEGIN, 10),
    ('transformend', DirectiveKind.TRANSFORMEND, 10),
    ('transformjoint', DirectiveKind.TRANSFORMJOINT, 10),
    ('translate', DirectiveKind.TRANSLATE, 5),
    ('triangle', DirectiveKind.TRIANGLE, 3),
    ('vertex', DirectiveKind.VERTEX, 4),
)

_EXACT = {spelling: kind for spelling, kind, _ in KEYWORD_TABLE}


def match_directive(word: str) -> DirectiveKind:
    """
    Resolve a directive keyword, ignoring case.
    An abbreviation matches when it has at least the keyword's minimum length and
    is a prefix of exactly one keyword; anything else is UNKNOWN.
    """
    word = word.lower()
    if word in _EXACT:
        return _EXACT[word]
    candidates = {kind for spelling, kind, min_len in KEYWORD_TABLE
                  if len(word) >= min_len and spelling.startswith(word)}
    if len(candidates) == 1:
        return candidates.pop()
    return DirectiveKind.UNKNOWN


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    lineno: Optional[int]
    keyword: str
    numbers: Tuple[float, ...] = ()
    indices: Tuple[int, ...] = ()
    words: Tuple[str, ...] = ()
    name: Optional[str] = None
    uv: Optional[Vec2] = None
    tag: Optional[int] = None
    mask: Optional[str] = None
    bump: Optional[str] = None


# Argument grammars. Each returns the keyword arguments for Directive and leaves
# the scanner after the last argument it understands.

def _no_args(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    return {'words': tuple(scanner.read_rest())}


def _floats(count: int) -> Callable[[LineScanner, int], dict]:
    def parse(scanner: LineScanner, max_polygon_vertices: int) -> dict:
        return {'numbers': tuple(scanner.read_floats(count))}
    return parse


def _rotate(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    flags = tuple(scanner.read_uint('rotation axis flag') for _ in range(3))
    return {'numbers': flags + (scanner.read_float('rotation angle'),)}


def _one_word(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    return {'words': (scanner.read_word('mode'),)}


def _rest_words(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    return {'words': tuple(scanner.read_rest())}


def _name(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    return {'name': scanner.read_word('name')}


def _optional_tag(scanner: LineScanner) -> Optional[int]:
    if scanner.match_keyword('tag'):
        return scanner.read_uint('tag')
    return None


def _vertex(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    numbers = tuple(scanner.read_floats(3, 'coordinate'))
    uv = None
    if scanner.match_keyword('uv'):
        u, v = scanner.read_floats(2, 'texture coordinate')
        uv = (u, v)
    if scanner.match_keyword('prelight'):
        scanner.read_floats(3, 'prelight color')
    return {'numbers': numbers, 'uv': uv}


def _triangle(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    indices = tuple(scanner.read_uint('vertex index') for _ in range(3))
    return {'indices': indices, 'tag': _optional_tag(scanner)}


def _quad(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    indices = tuple(scanner.read_uint('vertex index') for _ in range(4))
    uv = None
    if scanner.match_keyword('uv'):
        u, v = scanner.read_floats(2, 'texture coordinate')
        uv = (u, v)
    return {'indices': indices, 'uv': uv, 'tag': _optional_tag(scanner)}


def _polygon(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    count = scanner.read_uint('polygon vertex count')
    if count < 3:
        raise scanner.error(f"polygon needs at least 3 vertices, got {count}")
    if count > max_polygon_vertices:
        raise scanner.error(f"polygon vertex count {count} exceeds limit of {max_polygon_vertices}")
    indices = tuple(scanner.read_uint('vertex index') for _ in range(count))
    return {'indices': indices, 'tag': _optional_tag(scanner)}


def _texture(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    args = {'name': scanner.read_word('texture name')}
    if scanner.match_keyword('mask'):
        args['mask'] = scanner.read_word('mask name')
    if scanner.match_keyword('bump'):
        args['bump'] = scanner.read_word('bump name')
    return args


def _tag(scanner: LineScanner, max_polygon_vertices: int) -> dict:
    return {'tag': scanner.read_uint('tag')}


_GRAMMARS: Dict[DirectiveKind, Callable[[LineScanner, int], dict]] = {
    DirectiveKind.VERTEX: _vertex,
    DirectiveKind.TRIANGLE: _triangle,
    DirectiveKind.QUAD: _quad,
    DirectiveKind.POLYGON: _polygon,
    DirectiveKind.IDENTITY: _no_args,
    DirectiveKind.TRANSLATE: _floats(3),
    DirectiveKind.ROTATE: _rotate,
    DirectiveKind.SCALE: _floats(3),
    DirectiveKind.TRANSFORM: _floats(16),
    DirectiveKind.TRANSFORMBEGIN: _no_args,
    DirectiveKind.TRANSFORMEND: _no_args,
    DirectiveKind.AMBIENT: _floats(1),
    DirectiveKind.DIFFUSE: _floats(1),
    DirectiveKind.SPECULAR: _floats(1),
    DirectiveKind.COLOR: _floats(3),
    DirectiveKind.SURFACE: _floats(3),
    DirectiveKind.OPACITY: _floats(1),
    DirectiveKind.TEXTURE: _texture,
    DirectiveKind.MATERIALBEGIN: _no_args,
    DirectiveKind.MATERIALEND: _no_args,
    DirectiveKind.CLUMPBEGIN: _no_args,
    DirectiveKind.CLUMPEND: _no_args,
    DirectiveKind.PROTOBEGIN: _name,
    DirectiveKind.PROTOEND: _no_args,
    DirectiveKind.PROTOINSTANCE: _name,
    DirectiveKind.MODELBEGIN: _no_args,
    DirectiveKind.MODELEND: _no_args,
    DirectiveKind.BLOCK: _floats(3),         # width height depth
    DirectiveKind.CONE: _floats(3),          # height radius sides
    DirectiveKind.CYLINDER: _floats(4),      # height bottom-radius top-radius sides
    DirectiveKind.DISC: _floats(3),          # offset radius sides
    DirectiveKind.HEMISPHERE: _floats(2),    # radius density
    DirectiveKind.SPHERE: _floats(2),        # radius density
    DirectiveKind.ADDHINT: _rest_words,
    DirectiveKind.HINTS: _rest_words,
    DirectiveKind.REMOVEHINT: _rest_words,
    DirectiveKind.ADDMATERIALMODE: _one_word,
    DirectiveKind.REMOVEMATERIALMODE: _one_word,
    DirectiveKind.MATERIALMODE: _rest_words,
    DirectiveKind.ADDTEXTUREMODE: _one_word,
    DirectiveKind.REMOVETEXTUREMODE: _one_word,
    DirectiveKind.TEXTUREMODE: _rest_words,
    DirectiveKind.TEXTUREADDRESSMODE: _one_word,
    DirectiveKind.TEXTUREMIPMAPSTATE: _one_word,
    DirectiveKind.TEXTUREDITHERING: _rest_words,
    DirectiveKind.TEXTUREGAMMACORRECTION: _rest_words,
    DirectiveKind.GEOMETRYSAMPLING: _one_word,
    DirectiveKind.LIGHTSAMPLING: _one_word,
    DirectiveKind.AXISALIGNMENT: _one_word,
    DirectiveKind.COLLISION: _one_word,
    DirectiveKind.INCLUDE: _one_word,
    DirectiveKind.INCLUDEGEOMETRY: _one_word,
    DirectiveKind.TRACE: _rest_words,
    DirectiveKind.TRANSFORMJOINT: _floats(16),
    DirectiveKind.PROTOINSTANCEGEOMETRY: _name,
    DirectiveKind.TAG: _tag,
    DirectiveKind.UNKNOWN: _rest_words,
}


def parse_directive(line: SourceLine, path: Optional[str] = None,
                    max_polygon_vertices: int = 1024) -> Directive:
    """Scan one source line into a Directive, raising RWXParseError on malformed arguments"""
    scanner = LineScanner(line.text, line.lineno, path)
    keyword = scanner.read_word('directive')
    kind = match_directive(keyword)
    args = _GRAMMARS[kind](scanner, max_polygon_vertices)
    return Directive(kind=kind, lineno=line.lineno, keyword=keyword, **args)


def iter_directives(lines, path: Optional[str] = None,
                    max_polygon_vertices: int = 1024):
    for line in lines:
        yield parse_directive(line, path, max_polygon_vertices)


def inert_kinds() -> List[DirectiveKind]:
    """Kinds that are recognized and consumed but never change interpreter state"""
    return [
        DirectiveKind.MODELBEGIN, DirectiveKind.MODELEND,
        DirectiveKind.BLOCK, DirectiveKind.CONE, DirectiveKind.CYLINDER,
        DirectiveKind.DISC, DirectiveKind.HEMISPHERE, DirectiveKind.SPHERE,
        DirectiveKind.ADDHINT, DirectiveKind.HINTS, DirectiveKind.REMOVEHINT,
        DirectiveKind.ADDMATERIALMODE, DirectiveKind.REMOVEMATERIALMODE, DirectiveKind.MATERIALMODE,
        DirectiveKind.ADDTEXTUREMODE, DirectiveKind.REMOVETEXTUREMODE, DirectiveKind.TEXTUREMODE,
        DirectiveKind.TEXTUREADDRESSMODE, DirectiveKind.TEXTUREMIPMAPSTATE,
        DirectiveKind.TEXTUREDITHERING, DirectiveKind.TEXTUREGAMMACORRECTION,
        DirectiveKind.GEOMETRYSAMPLING, DirectiveKind.LIGHTSAMPLING,
        DirectiveKind.AXISALIGNMENT, DirectiveKind.COLLISION,
        DirectiveKind.INCLUDE, DirectiveKind.INCLUDEGEOMETRY,
        DirectiveKind.TRACE, DirectiveKind.TRANSFORMJOINT,
        DirectiveKind.PROTOINSTANCEGEOMETRY, DirectiveKind.TAG,
    ]
