"""
RWX Scene Assembly
Turns interpreted RWX meshes into a trimesh scene: one geometry and one material per mesh,
all attached under a single root node, with the coordinate conversion applied.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np
import trimesh

from rwx_config import RWXImportConfig
from rwx_materials import collect_texture_names, create_pbr_material, material_to_data
from rwx_types import Mesh


ROOT_NODE_NAME = 'RWXRoot'


def convert_coordinates(vertices: np.ndarray, faces: np.ndarray, flip_handedness: bool = True,
                        flip_winding: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """Mirror Z to switch handedness and reverse the corner order of every face"""
    vertices = np.array(vertices, dtype=np.float64, copy=True)
    faces = np.array(faces, dtype=np.int64, copy=True)
    if flip_handedness:
        vertices[:, 2] *= -1.0
    if flip_winding:
        faces = faces[:, ::-1].copy()
    return vertices, faces


def mesh_to_trimesh(mesh: Mesh, material: trimesh.visual.material.Material,
                    config: Optional[RWXImportConfig] = None) -> trimesh.Trimesh:
    config = config or RWXImportConfig()
    vertices, faces = convert_coordinates(mesh.vertex_array(), mesh.triangle_array(),
                                          config.flip_handedness, config.flip_winding)
    # process=False keeps the per-face vertex copies instead of merging them
    result = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    result.visual = trimesh.visual.TextureVisuals(uv=mesh.uv_array(), material=material)
    return result


def assemble_scene(meshes: List[Mesh], base_path: Optional[str] = None,
                   config: Optional[RWXImportConfig] = None) -> Dict:
    """
    Build a trimesh.Scene from interpreted meshes.
    base_path is the directory used to look up texture images.
    Returns a dict with the scene, the per-mesh trimesh geometry, material data and texture names.
    """
    config = config or RWXImportConfig()
    scene = trimesh.Scene()
    scene.graph.update(frame_from=scene.graph.base_frame, frame_to=ROOT_NODE_NAME, matrix=np.eye(4))

    geometries = []
    materials = []
    for i, mesh in enumerate(meshes):
        name = f"rwx_mesh_{i}"
        material_data = material_to_data(mesh.material, f"rwx_material_{i}")
        materials.append(material_data)

        geometry = mesh_to_trimesh(mesh, create_pbr_material(material_data, base_path, config), config)
        geometries.append(geometry)
        scene.add_geometry(geometry, node_name=name, geom_name=name, parent_node_name=ROOT_NODE_NAME)

    return {
        'scene': scene,
        'meshes': geometries,
        'materials': materials,
        'textures': collect_texture_names(materials),
    }


def root_mesh_names(scene: trimesh.Scene) -> List[str]:
    """Geometry nodes directly under the root node, in insertion order"""
    parents = scene.graph.transforms.parents
    return [name for name in scene.geometry if parents.get(name) == ROOT_NODE_NAME]
