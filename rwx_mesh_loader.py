"""
RWX Mesh Loader
Reads .rwx files from disk and runs them through the interpreter and scene assembly.
"""

import os
from typing import Dict, Optional

import trimesh

from rwx_config import RWXImportConfig
from rwx_parser import RWXScene, parse_rwx
from rwx_scene_assembly import assemble_scene
from rwx_types import RWXImportError


def read_rwx_buffer(path: str) -> str:
    """Load the whole file as text; a missing or unreadable file is an import failure"""
    if not os.path.isfile(path):
        raise RWXImportError(f"Failed to open RWX file {path}.")
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise RWXImportError(f"Failed to open RWX file {path}.") from e
    return data.decode('utf-8-sig', errors='ignore')


def parse_rwx_file(path: str, config: Optional[RWXImportConfig] = None) -> RWXScene:
    print(f"Attempting to parse RWX file: {path}")
    buffer = read_rwx_buffer(path)
    try:
        rwx_scene = parse_rwx(buffer, path, config)
    except RWXImportError as e:
        print(f"RWX parser failed: {e}")
        raise
    print(f"Parsed {len(rwx_scene.meshes)} meshes, {len(rwx_scene.protos)} protos, "
          f"{len(rwx_scene.warnings)} warnings from {path}")
    return rwx_scene


def load_rwx_with_materials(path: str, config: Optional[RWXImportConfig] = None) -> Dict:
    """Load an RWX file into a trimesh scene together with its material and texture information"""
    config = config or RWXImportConfig()
    rwx_scene = parse_rwx_file(path, config)
    result = assemble_scene(rwx_scene.meshes, os.path.dirname(os.path.abspath(path)), config)
    result['rwx_scene'] = rwx_scene
    print(f"Assembled {len(result['meshes'])} meshes, {len(result['textures'])} textures from {path}")
    return result


def load_rwx_scene(path: str, config: Optional[RWXImportConfig] = None) -> trimesh.Scene:
    return load_rwx_with_materials(path, config)['scene']


def load_rwx_mesh(path: str, config: Optional[RWXImportConfig] = None) -> Optional[trimesh.Trimesh]:
    """Load an RWX file merged into a single mesh (geometry only), or None when it has no faces"""
    result = load_rwx_with_materials(path, config)
    parts = result['meshes']
    if not parts:
        print(f"No geometry found in {path}")
        return None
    if len(parts) == 1:
        return parts[0]
    bare = [trimesh.Trimesh(vertices=p.vertices, faces=p.faces, process=False) for p in parts]
    return trimesh.util.concatenate(bare)
