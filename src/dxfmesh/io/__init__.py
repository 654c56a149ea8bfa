"""I/O utilities for dxfmesh."""

from .mesh_json import scene_to_json, write_scene_json
from .stl import write_stl

__all__ = ['scene_to_json', 'write_scene_json', 'write_stl']
