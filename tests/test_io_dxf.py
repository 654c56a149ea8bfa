import ezdxf
import numpy as np
import pytest

from dxfmesh.document import InsertEntity, SolidEntity
from dxfmesh.errors import DocumentError
from dxfmesh.io.dxf import read_dxf
from dxfmesh.loader import load_document
from dxfmesh.scene import build_scene


def _make_drawing(path):
    doc = ezdxf.new(dxfversion='R2010', setup=False)
    doc.layers.new('FILL', dxfattribs={'color': 5}).off()
    blk = doc.blocks.new(name='TILE', base_point=(0, 0))
    blk.add_solid([(0, 0), (1, 0), (0, 1), (1, 1)], dxfattribs={'color': 0})
    msp = doc.modelspace()
    # SOLID corner order is the DXF "bow-tie" order
    msp.add_solid([(0, 0), (10, 0), (0, 10), (10, 10)], dxfattribs={'color': 1})
    msp.add_solid([(20, 0), (30, 0), (25, 5)], dxfattribs={'layer': 'FILL'})
    msp.add_blockref('TILE', (50, 0), dxfattribs={'xscale': 3, 'yscale': 3, 'color': 2})
    msp.add_line((0, 0), (1, 1))
    msp.add_trace([(60, 0), (61, 0), (60, 1), (61, 1)], dxfattribs={'color': 4})
    doc.saveas(path)


def test_read_dxf_entities(tmp_path):
    path = tmp_path / 'drawing.dxf'
    _make_drawing(path)
    doc = read_dxf(path)

    kinds = [e.type for e in doc.entities]
    assert kinds == ['SOLID', 'SOLID', 'INSERT', 'LINE', 'SOLID']
    quad, tri = doc.entities[0], doc.entities[1]
    assert isinstance(quad, SolidEntity) and len(quad.points) == 4
    assert quad.color_index == 1
    # the triangle's repeated fourth corner is dropped
    assert len(tri.points) == 3
    assert isinstance(doc.entities[2], InsertEntity)
    assert doc.entities[2].x_scale == 3.0
    assert 'TILE' in doc.blocks
    assert doc.layer_color('FILL') == -5


def test_dxf_scene(tmp_path):
    path = tmp_path / 'drawing.dxf'
    _make_drawing(path)
    result = build_scene(load_document(path))

    assert result.failures == []
    quad, tri, tile, trace = result.meshes
    assert quad.triangle_count == 2
    assert tri.triangle_count == 1
    # layer color, switched-off sign ignored
    assert tri.color.index == 5
    # BYBLOCK inside the block takes the INSERT color
    assert tile.color.index == 2
    np.testing.assert_allclose(tile.vertices[:, 0].max(), 53.0, atol=1e-5)
    assert trace.color.index == 4
    assert trace.triangle_count == 2


def test_bad_dxf(tmp_path):
    path = tmp_path / 'broken.dxf'
    path.write_text('this is not a dxf file', encoding='ascii')
    with pytest.raises(DocumentError):
        read_dxf(path)


def test_missing_dxf(tmp_path):
    with pytest.raises(DocumentError):
        read_dxf(tmp_path / 'missing.dxf')
