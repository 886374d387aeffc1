"""
RWX Scene Interpreter
Runs the RWX directive stream against an owned scope state and collects the resulting meshes.
Handles transform/material scopes, clumps, and proto definition and instancing.
"""

import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from rwx_config import RWXImportConfig
from rwx_directives import Directive, DirectiveKind, inert_kinds, iter_directives
from rwx_lexer import iter_lines
from rwx_state import (ScopeState, matrix_from_rows, rotation_matrix, scaling_matrix,
                       transform_point, translation_matrix)
from rwx_types import Mesh, MeshBuilder, RWXParseError


@dataclass
class RWXScene:
    """Result of one parse, analogue to aiScene"""
    meshes: List[Mesh] = field(default_factory=list)
    protos: Dict[str, List[Mesh]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ProtoFrame:
    """Saved interpreter context while a proto is being defined"""
    name: str
    state: ScopeState
    collector: List[Mesh]

    @property
    def key(self) -> str:
        return self.name.lower()


class RWXParser:
    """Single-pass interpreter for RWX text"""

    def __init__(self, buffer: Union[str, bytes], path: Optional[str] = None,
                 config: Optional[RWXImportConfig] = None):
        if isinstance(buffer, (bytes, bytearray)):
            buffer = buffer.decode('utf-8-sig', errors='ignore')
        self.buffer = buffer
        self.path = path
        self.config = config or RWXImportConfig()

        self.state = ScopeState()
        self.builder = MeshBuilder()
        self.output: List[Mesh] = []
        # Meshes are flushed here: the output at top level, the proto's list inside a definition
        self.collector = self.output
        self.frames: List[ProtoFrame] = []
        self.protos: Dict[str, List[Mesh]] = {}
        self.warnings: List[str] = []

        self._handlers = self._build_handlers()
        self.scene = RWXScene()
        self.parse_file()

    def _build_handlers(self) -> Dict[DirectiveKind, Callable[[Directive], None]]:
        inert = set(inert_kinds())
        handlers = {}
        for kind in DirectiveKind:
            if kind in inert:
                handlers[kind] = self._cmd_inert
            elif kind is DirectiveKind.UNKNOWN:
                handlers[kind] = self._cmd_unknown
            else:
                handlers[kind] = getattr(self, f'_cmd_{kind.value}')
        return handlers

    def parse_file(self):
        directives = iter_directives(iter_lines(self.buffer), self.path,
                                     self.config.max_polygon_vertices)
        lineno = None
        for directive in directives:
            lineno = directive.lineno
            self._handlers[directive.kind](directive)

        self._flush()
        if self.frames:
            raise RWXParseError(f"protobegin '{self.frames[-1].name}' is never closed by protoend",
                                lineno, self.path)
        open_scopes = self.state.open_scopes()
        if open_scopes:
            raise RWXParseError(f"unclosed {', '.join(open_scopes)} at end of input", lineno, self.path)

        self.scene = RWXScene(meshes=self.output, protos=self.protos, warnings=self.warnings)

    def get_imported_data(self) -> RWXScene:
        return self.scene

    # -- helpers

    def _error(self, directive: Directive, message: str) -> RWXParseError:
        return RWXParseError(message, directive.lineno, self.path)

    def _warn(self, directive: Directive, message: str):
        text = f"{self.path or '<buffer>'}:{directive.lineno}: {message}"
        self.warnings.append(text)
        print(f"Warning: {text}", file=sys.stderr)

    def _flush(self):
        """Close the pending mesh into the current collector"""
        if self.builder.faces:
            self.collector.append(self.builder.build())
        self.builder = MeshBuilder()

    def _emit_face(self, directive: Directive):
        corners = []
        for index in directive.indices:
            vertex = self.state.lookup_vertex(index)
            if vertex is None:
                raise self._error(directive, f"vertex index {index} out of range "
                                             f"(1..{len(self.state.vertices)})")
            corners.append((transform_point(self.state.transform, vertex.position), vertex.uv))

        if self.builder.faces and self.builder.material != self.state.material:
            self._flush()
        if not self.builder.faces:
            self.builder.material = self.state.material
        self.builder.add_face(corners, directive.tag)

    # -- geometry

    def _cmd_vertex(self, d: Directive):
        x, y, z = d.numbers
        self.state.add_vertex((x, y, z), d.uv)

    def _cmd_triangle(self, d: Directive):
        self._emit_face(d)

    def _cmd_quad(self, d: Directive):
        # A trailing quad uv is parsed but has no per-face slot to go to
        self._emit_face(d)

    def _cmd_polygon(self, d: Directive):
        self._emit_face(d)

    # -- transform scope

    def _cmd_identity(self, d: Directive):
        self.state.reset_transform()

    def _cmd_translate(self, d: Directive):
        self.state.apply(translation_matrix(*d.numbers))

    def _cmd_rotate(self, d: Directive):
        ax, ay, az, angle = d.numbers
        for axis, flag in zip('xyz', (ax, ay, az)):
            if flag:
                self.state.apply(rotation_matrix(axis, angle))

    def _cmd_scale(self, d: Directive):
        self.state.apply(scaling_matrix(*d.numbers))

    def _cmd_transform(self, d: Directive):
        self.state.replace_transform(matrix_from_rows(d.numbers))

    def _cmd_transformbegin(self, d: Directive):
        self.state.push_transform()

    def _cmd_transformend(self, d: Directive):
        if not self.state.pop_transform():
            raise self._error(d, "transformend without matching transformbegin")

    # -- material scope

    def _cmd_ambient(self, d: Directive):
        self.state.update_material(ambient=d.numbers[0])

    def _cmd_diffuse(self, d: Directive):
        self.state.update_material(diffuse=d.numbers[0])

    def _cmd_specular(self, d: Directive):
        self.state.update_material(specular=d.numbers[0])

    def _cmd_color(self, d: Directive):
        r, g, b = d.numbers
        self.state.update_material(color=(r, g, b))

    def _cmd_surface(self, d: Directive):
        a, df, s = d.numbers
        self.state.update_material(ambient=a, diffuse=df, specular=s)

    def _cmd_opacity(self, d: Directive):
        self.state.update_material(opacity=d.numbers[0])

    def _cmd_texture(self, d: Directive):
        if d.name.lower() == 'null':
            self.state.update_material(texture=None, bump=None)
            return
        self.state.update_material(texture=d.name + self.config.texture_extension, bump=d.bump)

    def _cmd_materialbegin(self, d: Directive):
        self.state.push_material()

    def _cmd_materialend(self, d: Directive):
        if not self.state.pop_material():
            raise self._error(d, "materialend without matching materialbegin")

    # -- clumps

    def _cmd_clumpbegin(self, d: Directive):
        self._flush()
        self.state.push_vertices()

    def _cmd_clumpend(self, d: Directive):
        self._flush()
        if not self.state.pop_vertices():
            self._warn(d, "clumpend without matching clumpbegin")

    # -- protos

    def _cmd_protobegin(self, d: Directive):
        self._flush()
        self.frames.append(ProtoFrame(name=d.name, state=self.state, collector=self.collector))
        self.state = ScopeState()
        self.collector = []

    def _cmd_protoend(self, d: Directive):
        if not self.frames:
            raise self._error(d, "protoend without matching protobegin")
        open_scopes = self.state.open_scopes()
        if open_scopes:
            raise self._error(d, f"unclosed {', '.join(open_scopes)} inside proto '{self.frames[-1].name}'")
        self._flush()

        frame = self.frames.pop()
        if frame.key in self.protos:
            self._warn(d, f"redefining proto '{frame.name}'")
        self.protos[frame.key] = self.collector
        self.state = frame.state
        self.collector = frame.collector

    def _cmd_protoinstance(self, d: Directive):
        key = d.name.lower()
        if any(frame.key == key for frame in self.frames):
            raise self._error(d, f"proto '{d.name}' instantiated while it is being defined")
        if key not in self.protos:
            raise self._error(d, f"unknown proto '{d.name}'")
        self._flush()
        for mesh in self.protos[key]:
            self.collector.append(mesh.transformed(self.state.transform))

    # -- everything else

    def _cmd_inert(self, d: Directive):
        pass

    def _cmd_unknown(self, d: Directive):
        self._warn(d, f"unrecognized directive '{d.keyword}'")


def parse_rwx(buffer: Union[str, bytes], path: Optional[str] = None,
              config: Optional[RWXImportConfig] = None) -> RWXScene:
    """Interpret an in-memory RWX buffer"""
    return RWXParser(buffer, path, config).get_imported_data()
