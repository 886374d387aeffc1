import pytest
import trimesh
from PIL import Image

from rwx_config import RWXImportConfig
from rwx_mesh_loader import (load_rwx_mesh, load_rwx_scene, load_rwx_with_materials,
                             parse_rwx_file, read_rwx_buffer)
from rwx_types import RWXImportError, RWXParseError


MODEL = """\
modelbegin
clumpbegin
  color 1 0 0
  texture bark
  vertex 0 0 0 uv 0 0
  vertex 1 0 0 uv 1 0
  vertex 1 1 0 uv 1 1
  vertex 0 1 0 uv 0 1
  quad 1 2 3 4
clumpend
protobegin leaf
  color 0 1 0
  vertex 0 0 0
  vertex 1 0 0
  vertex 0 1 0
  triangle 1 2 3
protoend
transformbegin
  translate 0 2 0
  protoinstance leaf
transformend
modelend
"""


@pytest.fixture
def model_path(tmp_path):
    path = tmp_path / 'tree.rwx'
    path.write_text(MODEL)
    return path


def test_read_rwx_buffer_missing_file(tmp_path):
    with pytest.raises(RWXImportError, match="Failed to open RWX file"):
        read_rwx_buffer(str(tmp_path / 'nope.rwx'))


def test_read_rwx_buffer_directory_is_not_a_file(tmp_path):
    with pytest.raises(RWXImportError):
        read_rwx_buffer(str(tmp_path))


def test_parse_rwx_file(model_path, capsys):
    rwx_scene = parse_rwx_file(str(model_path))
    assert len(rwx_scene.meshes) == 2
    assert list(rwx_scene.protos) == ['leaf']
    assert "Parsed 2 meshes" in capsys.readouterr().out


def test_load_rwx_with_materials(model_path):
    Image.new('RGB', (4, 4), (90, 60, 30)).save(model_path.parent / 'bark.jpg')
    result = load_rwx_with_materials(str(model_path))
    assert isinstance(result['scene'], trimesh.Scene)
    assert len(result['meshes']) == 2
    assert result['textures'] == ['bark.jpg']
    assert result['materials'][0]['diffuse'] == [1.0, 0.0, 0.0, 1.0]
    assert result['materials'][1]['diffuse'] == [0.0, 1.0, 0.0, 1.0]
    assert result['meshes'][0].visual.material.baseColorTexture is not None
    assert len(result['meshes'][0].faces) == 2
    # leaf instance placed at y=2, z mirrored by the coordinate conversion
    assert result['meshes'][1].vertices[:, 1].min() == pytest.approx(2.0)
    assert result['rwx_scene'].warnings == []


def test_load_rwx_scene_and_mesh(model_path):
    cfg = RWXImportConfig(load_textures=False)
    scene = load_rwx_scene(str(model_path), cfg)
    assert len(scene.geometry) == 2
    mesh = load_rwx_mesh(str(model_path), cfg)
    assert isinstance(mesh, trimesh.Trimesh)
    assert len(mesh.faces) == 3


def test_load_rwx_mesh_without_geometry(tmp_path):
    path = tmp_path / 'empty.rwx'
    path.write_text("modelbegin\nclumpbegin\nclumpend\nmodelend\n")
    assert load_rwx_mesh(str(path)) is None


def test_structural_error_propagates_without_output(tmp_path, capsys):
    path = tmp_path / 'broken.rwx'
    path.write_text("vertex 0 0 0\ntransformend\n")
    with pytest.raises(RWXParseError) as exc:
        load_rwx_with_materials(str(path))
    assert exc.value.lineno == 2
    assert "RWX parser failed" in capsys.readouterr().out


def test_config_from_env(monkeypatch):
    monkeypatch.setenv('RWX_TEXTURE_EXTENSION', 'png')
    monkeypatch.setenv('RWX_MAX_POLYGON_VERTICES', '64')
    monkeypatch.setenv('RWX_FLIP_HANDEDNESS', 'off')
    monkeypatch.setenv('RWX_LOAD_TEXTURES', 'no')
    cfg = RWXImportConfig.from_env()
    assert cfg.texture_extension == '.png'
    assert cfg.max_polygon_vertices == 64
    assert not cfg.flip_handedness and not cfg.flip_winding
    assert not cfg.load_textures


def test_config_defaults_and_validation(monkeypatch):
    for name in ('RWX_TEXTURE_EXTENSION', 'RWX_MAX_POLYGON_VERTICES',
                 'RWX_FLIP_HANDEDNESS', 'RWX_LOAD_TEXTURES'):
        monkeypatch.delenv(name, raising=False)
    assert RWXImportConfig.from_env() == RWXImportConfig()
    with pytest.raises(ValueError):
        RWXImportConfig(max_polygon_vertices=2)
