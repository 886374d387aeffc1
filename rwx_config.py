"""
RWX Import Configuration
Settings shared by the interpreter, scene assembly and the file loader.
"""

import os
from dataclasses import dataclass
from typing import Tuple


_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class RWXImportConfig:
    """Configuration for importing RWX models."""
    texture_extension: str = '.jpg'
    max_polygon_vertices: int = 1024
    flip_handedness: bool = True
    flip_winding: bool = True
    load_textures: bool = True
    # Relative to the directory of the model file
    texture_search_dirs: Tuple[str, ...] = ('', 'textures')

    def __post_init__(self):
        if self.max_polygon_vertices < 3:
            raise ValueError(f"max_polygon_vertices must be at least 3, got {self.max_polygon_vertices}")
        if self.texture_extension and not self.texture_extension.startswith('.'):
            self.texture_extension = '.' + self.texture_extension

    @classmethod
    def from_env(cls) -> 'RWXImportConfig':
        """
        Build a config from RWX_* environment variables.
        Unset variables keep their defaults.
        """
        kwargs = {}
        ext = os.environ.get('RWX_TEXTURE_EXTENSION')
        if ext is not None:
            kwargs['texture_extension'] = ext
        max_verts = os.environ.get('RWX_MAX_POLYGON_VERTICES')
        if max_verts is not None:
            kwargs['max_polygon_vertices'] = int(max_verts)
        flip = os.environ.get('RWX_FLIP_HANDEDNESS')
        if flip is not None:
            kwargs['flip_handedness'] = flip.strip().lower() in _TRUE_VALUES
            kwargs['flip_winding'] = kwargs['flip_handedness']
        textures = os.environ.get('RWX_LOAD_TEXTURES')
        if textures is not None:
            kwargs['load_textures'] = textures.strip().lower() in _TRUE_VALUES
        return cls(**kwargs)
