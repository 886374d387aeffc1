"""
RWX Data Model
Vertices, faces, material snapshots and mesh objects produced by the RWX interpreter,
plus the error types raised while importing.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import numpy as np


Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


class RWXImportError(ValueError):
    """Import failure: the RWX source could not be read or interpreted"""


class RWXParseError(RWXImportError):
    """Structural or malformed-argument error found while interpreting a line"""

    def __init__(self, message: str, lineno: Optional[int] = None, path: Optional[str] = None):
        self.message = message
        self.lineno = lineno
        self.path = path
        super().__init__(self.__str__())

    def __str__(self) -> str:
        where = self.path or '<buffer>'
        if self.lineno is not None:
            where = f"{where}:{self.lineno}"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class Material:
    ambient: float = 1.0
    diffuse: float = 1.0
    specular: float = 1.0
    color: Vec3 = (1.0, 1.0, 1.0)
    opacity: float = 1.0
    texture: Optional[str] = None
    bump: Optional[str] = None

    def with_changes(self, **changes) -> 'Material':
        return replace(self, **changes)


@dataclass(frozen=True)
class Vertex:
    position: Vec3
    uv: Optional[Vec2] = None


@dataclass(frozen=True)
class Face:
    # Indices into the owning mesh's private vertex arrays
    indices: Tuple[int, ...]
    tag: Optional[int] = None

    def triangles(self) -> List[Tuple[int, int, int]]:
        """
        Split the face into triangles.
        Quads use the (1,2,3) + (3,4,1) diagonal, larger polygons are fanned from the first index.
        """
        idx = self.indices
        if len(idx) == 3:
            return [(idx[0], idx[1], idx[2])]
        if len(idx) == 4:
            return [(idx[0], idx[1], idx[2]), (idx[2], idx[3], idx[0])]
        return [(idx[0], idx[j], idx[j + 1]) for j in range(1, len(idx) - 1)]


@dataclass(frozen=True)
class Mesh:
    """Completed mesh object: a polygon soup with one material snapshot"""
    vertices: Tuple[Vec3, ...]
    uvs: Tuple[Optional[Vec2], ...]
    faces: Tuple[Face, ...]
    material: Material

    @property
    def has_uvs(self) -> bool:
        return any(uv is not None for uv in self.uvs)

    def vertex_array(self) -> np.ndarray:
        return np.array(self.vertices, dtype=np.float64).reshape(-1, 3)

    def uv_array(self) -> Optional[np.ndarray]:
        """UVs aligned with vertex_array(), missing entries filled with (0, 0)"""
        if not self.has_uvs:
            return None
        return np.array([uv if uv is not None else (0.0, 0.0) for uv in self.uvs], dtype=np.float64)

    def triangle_array(self) -> np.ndarray:
        tris = [tri for face in self.faces for tri in face.triangles()]
        return np.array(tris, dtype=np.int64).reshape(-1, 3)

    def transformed(self, matrix: np.ndarray) -> 'Mesh':
        """Copy of this mesh with every vertex position multiplied by a 4x4 matrix"""
        if not self.vertices:
            return self
        points = self.vertex_array()
        homogeneous = np.hstack([points, np.ones((len(points), 1))])
        moved = (homogeneous @ np.asarray(matrix, dtype=np.float64).T)[:, :3]
        return Mesh(
            vertices=tuple(tuple(float(c) for c in p) for p in moved),
            uvs=self.uvs,
            faces=self.faces,
            material=self.material,
        )


@dataclass
class MeshBuilder:
    """Mutable accumulator for the mesh currently being assembled"""
    material: Material = field(default_factory=Material)
    vertices: List[Vec3] = field(default_factory=list)
    uvs: List[Optional[Vec2]] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)

    def add_face(self, corners: List[Tuple[Vec3, Optional[Vec2]]], tag: Optional[int] = None) -> Face:
        start = len(self.vertices)
        for position, uv in corners:
            self.vertices.append(position)
            self.uvs.append(uv)
        face = Face(indices=tuple(range(start, start + len(corners))), tag=tag)
        self.faces.append(face)
        return face

    def build(self) -> Mesh:
        return Mesh(
            vertices=tuple(self.vertices),
            uvs=tuple(self.uvs),
            faces=tuple(self.faces),
            material=self.material,
        )
