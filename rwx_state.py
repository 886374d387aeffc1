"""
RWX Scope State
Transform and material stacks plus the local vertex buffer the interpreter mutates.
Matrices are 4x4 numpy arrays applied to column vectors, so a new operation is
right-multiplied onto the current matrix (current' = current @ op).
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from rwx_types import Material, Vec2, Vec3, Vertex


def identity_matrix() -> np.ndarray:
    return np.eye(4)


def translation_matrix(x: float, y: float, z: float) -> np.ndarray:
    T = np.eye(4)
    T[:3, 3] = (x, y, z)
    return T


def scaling_matrix(x: float, y: float, z: float) -> np.ndarray:
    return np.diag([x, y, z, 1.0])


def rotation_matrix(axis: str, degrees: float) -> np.ndarray:
    """Right-handed rotation about a principal axis ('x', 'y' or 'z')"""
    rad = math.radians(degrees)
    c = math.cos(rad)
    s = math.sin(rad)
    R = np.eye(4)
    if axis == 'x':
        R[1, 1], R[1, 2], R[2, 1], R[2, 2] = c, -s, s, c
    elif axis == 'y':
        R[0, 0], R[0, 2], R[2, 0], R[2, 2] = c, s, -s, c
    elif axis == 'z':
        R[0, 0], R[0, 1], R[1, 0], R[1, 1] = c, -s, s, c
    else:
        raise ValueError(f"Unknown rotation axis '{axis}'")
    return R


def matrix_from_rows(values: Sequence[float]) -> np.ndarray:
    """4x4 matrix from 16 values in row-major order"""
    if len(values) != 16:
        raise ValueError(f"Expected 16 matrix values, got {len(values)}")
    return np.array(values, dtype=np.float64).reshape(4, 4)


def transform_point(matrix: np.ndarray, point: Vec3) -> Vec3:
    x, y, z, _ = matrix @ np.array([point[0], point[1], point[2], 1.0])
    return (float(x), float(y), float(z))


@dataclass
class ScopeState:
    """
    Everything a proto definition saves and restores.
    Each instance owns its stacks and buffers; nothing is shared between instances.
    """
    transform: np.ndarray = field(default_factory=identity_matrix)
    transform_stack: List[np.ndarray] = field(default_factory=list)
    material: Material = field(default_factory=Material)
    material_stack: List[Material] = field(default_factory=list)
    vertices: List[Vertex] = field(default_factory=list)
    # Enclosing clumps' vertex buffers
    vertex_stack: List[List[Vertex]] = field(default_factory=list)

    # -- transform scope

    def apply(self, op: np.ndarray):
        self.transform = self.transform @ op

    def reset_transform(self):
        self.transform = identity_matrix()

    def replace_transform(self, matrix: np.ndarray):
        self.transform = np.array(matrix, dtype=np.float64)

    def push_transform(self):
        self.transform_stack.append(self.transform.copy())

    def pop_transform(self) -> bool:
        """Restore the last pushed matrix. Returns False when the stack is empty."""
        if not self.transform_stack:
            return False
        self.transform = self.transform_stack.pop()
        return True

    # -- material scope

    def update_material(self, **changes):
        self.material = self.material.with_changes(**changes)

    def push_material(self):
        # Material is frozen; the value itself is the snapshot
        self.material_stack.append(self.material)

    def pop_material(self) -> bool:
        if not self.material_stack:
            return False
        self.material = self.material_stack.pop()
        return True

    # -- vertex buffer

    def add_vertex(self, position: Vec3, uv: Optional[Vec2] = None) -> int:
        """Store an untransformed vertex, returning its 1-based index"""
        self.vertices.append(Vertex(position=position, uv=uv))
        return len(self.vertices)

    def lookup_vertex(self, index: int) -> Optional[Vertex]:
        """Resolve a 1-based vertex index; None when out of range"""
        if index < 1 or index > len(self.vertices):
            return None
        return self.vertices[index - 1]

    def push_vertices(self):
        self.vertex_stack.append(self.vertices)
        self.vertices = []

    def pop_vertices(self) -> bool:
        if not self.vertex_stack:
            return False
        self.vertices = self.vertex_stack.pop()
        return True

    def open_scopes(self) -> List[str]:
        scopes = []
        if self.transform_stack:
            scopes.append('transformbegin')
        if self.material_stack:
            scopes.append('materialbegin')
        return scopes
