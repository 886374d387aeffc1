#!/usr/bin/env python3

import os
from typing import Dict, List, Optional

import numpy as np
import trimesh
from PIL import Image

from rwx_config import RWXImportConfig
from rwx_types import Material


def material_to_data(material: Material, name: str) -> Dict:
    """Packaged material colours: each RWX factor scales the base colour"""
    color = np.array(material.color, dtype=float)
    diffuse = list(color * material.diffuse) + [material.opacity]
    ambient = list(color * material.ambient) + [1.0]
    specular = list(color * material.specular) + [1.0]
    textures = [material.texture] if material.texture else []
    return {
        'name': name,
        'diffuse': [float(c) for c in diffuse],
        'ambient': [float(c) for c in ambient],
        'specular': [float(c) for c in specular],
        'textures': textures,
        'bump': material.bump,
    }


def find_texture_file(texture_name: str, base_path: Optional[str], config: RWXImportConfig) -> Optional[str]:
    """Look for a texture next to the model, trying each configured search directory"""
    if not base_path:
        return None
    candidates = [os.path.join(base_path, subdir, texture_name) for subdir in config.texture_search_dirs]
    for path in candidates:
        if os.path.exists(path):
            return path
    return None


def load_texture_image(path: str) -> Optional[Image.Image]:
    try:
        img = Image.open(path)
        img.load()
    except OSError as e:
        print(f"Texture loading failed for {path}: {e}")
        return None
    if img.mode not in ('RGB', 'RGBA'):
        img = img.convert('RGBA')
    return img


def create_pbr_material(material_data: Dict, base_path: Optional[str] = None,
                        config: Optional[RWXImportConfig] = None) -> trimesh.visual.material.PBRMaterial:
    """Build a trimesh PBR material, attaching texture images that can be found on disk"""
    config = config or RWXImportConfig()

    material = trimesh.visual.material.PBRMaterial()
    material.name = material_data['name']
    material.baseColorFactor = material_data['diffuse']
    if material_data['diffuse'][3] < 1.0:
        material.alphaMode = 'BLEND'

    if not config.load_textures:
        return material

    if material_data['textures']:
        texture_path = find_texture_file(material_data['textures'][0], base_path, config)
        if texture_path:
            img = load_texture_image(texture_path)
            if img is not None:
                material.baseColorTexture = img
        else:
            print(f"Texture not found: {material_data['textures'][0]}")

    if material_data.get('bump'):
        bump_path = find_texture_file(material_data['bump'], base_path, config)
        if bump_path:
            img = load_texture_image(bump_path)
            if img is not None:
                material.normalTexture = img

    return material


def collect_texture_names(materials: List[Dict]) -> List[str]:
    """Unique texture names referenced by the materials, in first-use order"""
    textures = []
    for mat in materials:
        names = list(mat['textures'])
        if mat.get('bump'):
            names.append(mat['bump'])
        for tex_name in names:
            if tex_name not in textures:
                textures.append(tex_name)
    return textures
