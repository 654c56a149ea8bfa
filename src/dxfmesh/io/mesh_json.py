"""Serialize built scenes to JSON for a WebGL front end.

Each mesh is written as a BufferGeometry-like record: a flat ``position``
array, a flat ``index`` array with its ``indexType`` (``uint16`` or
``uint32``) and a basic, double-sided material color.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from dxfmesh.scene import EntityFailure, SceneResult
from dxfmesh.solid import MeshResult

SCHEMA_ID = "dxfmesh-scene-json-v0.1"


def _float_vec(arr) -> List[float]:
    return [float(c) for c in arr.reshape(-1)]


def _int_vec(arr) -> List[int]:
    return [int(c) for c in arr.reshape(-1)]


def mesh_to_json(mesh: MeshResult) -> Dict[str, Any]:
    return {
        "type": "mesh",
        "handle": mesh.handle,
        "layer": mesh.layer,
        "position": _float_vec(mesh.vertices),
        "index": _int_vec(mesh.indices),
        "indexType": mesh.index_type,
        "material": {
            "type": "basic",
            "color": mesh.color.hex,
            "colorIndex": mesh.color.index,
            "side": "double" if mesh.double_sided else "front",
            "flatShading": mesh.flat_shaded,
        },
    }


def _failure_to_json(failure: EntityFailure) -> Dict[str, Any]:
    return {
        "position": failure.position,
        "handle": failure.handle,
        "type": failure.entity_type,
        "block": failure.block,
        "reason": failure.reason,
    }


def scene_to_json(result: SceneResult, *, name: Optional[str] = None) -> Dict[str, Any]:
    """Return a JSON-serializable dict describing ``result``."""

    return {
        "schema": SCHEMA_ID,
        "name": name,
        "meshes": [mesh_to_json(m) for m in result.meshes],
        "failures": [_failure_to_json(f) for f in result.failures],
        "summary": result.summary(),
    }


def write_scene_json(result: SceneResult, path_or_file, *, name: Optional[str] = None,
                     indent: Optional[int] = None) -> None:
    """Write ``result`` as JSON to a path or an open text stream."""

    doc = scene_to_json(result, name=name)
    if hasattr(path_or_file, 'write'):
        json.dump(doc, path_or_file, indent=indent)
        return
    target = Path(path_or_file)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        json.dump(doc, fp, indent=indent)
        fp.write("\n")


__all__ = ["SCHEMA_ID", "mesh_to_json", "scene_to_json", "write_scene_json"]
