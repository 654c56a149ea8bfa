"""Read DXF drawings through ``ezdxf`` into a :class:`CadDocument`.

The reader flattens ezdxf entities into the same record layout the JSON
loader consumes, so both inputs go through one validation path
(:func:`dxfmesh.document.parse_document`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import ezdxf

from dxfmesh.document import CadDocument, parse_document
from dxfmesh.errors import DocumentError

logger = logging.getLogger(__name__)


def _vec(v) -> Dict[str, float]:
    return {'x': float(v[0]), 'y': float(v[1]), 'z': float(v[2]) if len(v) > 2 else 0.0}


def _solid_points(entity) -> List[Dict[str, float]]:
    pts = [entity.dxf.get(f'vtx{i}') for i in range(4)]
    pts = [p for p in pts if p is not None]
    # a triangular SOLID repeats its third corner as the fourth
    if len(pts) == 4 and tuple(pts[3]) == tuple(pts[2]):
        pts = pts[:3]
    return [_vec(p) for p in pts]


def entity_record(entity) -> Dict[str, Any]:
    """Flatten one ezdxf entity into a CAD JSON record."""

    dxftype = entity.dxftype()
    record: Dict[str, Any] = {
        'type': dxftype,
        'handle': entity.dxf.get('handle'),
        'layer': entity.dxf.get('layer', '0'),
    }
    color = entity.dxf.get('color')
    if color is not None:
        record['colorIndex'] = int(color)
    if dxftype in ('SOLID', 'TRACE'):
        # TRACE shares the SOLID corner layout and fill
        record['type'] = 'SOLID'
        record['points'] = _solid_points(entity)
    elif dxftype == 'INSERT':
        record.update({
            'name': entity.dxf.name,
            'position': _vec(entity.dxf.insert),
            'xScale': float(entity.dxf.get('xscale', 1.0)),
            'yScale': float(entity.dxf.get('yscale', 1.0)),
            'rotation': float(entity.dxf.get('rotation', 0.0)),
        })
    return record


def _layer_table(doc) -> Dict[str, Any]:
    layers = {}
    for layer in doc.layers:
        # raw value: negative when the layer is switched off
        layers[layer.dxf.name] = {'name': layer.dxf.name, 'colorIndex': int(layer.dxf.color)}
    return {'layer': {'layers': layers}}


def document_to_records(doc) -> Dict[str, Any]:
    """Return the CAD JSON representation of an ezdxf document."""

    blocks = {}
    for blk in doc.blocks:
        if blk.is_any_layout:
            continue
        blocks[blk.name] = {
            'name': blk.name,
            'position': _vec(blk.block.dxf.base_point),
            'entities': [entity_record(e) for e in blk],
        }
    return {
        'header': {'$ACADVER': doc.dxfversion},
        'tables': _layer_table(doc),
        'blocks': blocks,
        'entities': [entity_record(e) for e in doc.modelspace()],
    }


def read_dxf(path: Path | str, *, strict: bool = False) -> CadDocument:
    """Load the DXF file at ``path``."""

    try:
        doc = ezdxf.readfile(str(path))
    except IOError as exc:
        raise DocumentError(f'cannot read DXF file {path}: {exc}') from exc
    except ezdxf.DXFStructureError as exc:
        raise DocumentError(f'invalid or corrupt DXF file {path}: {exc}') from exc
    logger.debug('read %s (DXF %s)', path, doc.dxfversion)
    return parse_document(document_to_records(doc), strict=strict)


__all__ = ['read_dxf', 'document_to_records', 'entity_record']
