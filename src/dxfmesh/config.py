"""Settings for turning a drawing into a scene of meshes.

Settings live in a :class:`ViewerConfig`.  They can be read from a YAML
(``.yaml``/``.yml``) or JSON file with :func:`load_config`; command line
flags are applied on top with :meth:`ViewerConfig.replace`.

Example ``viewer.yaml``::

    tolerant_color: true
    default_color_index: null
    insert_depth_limit: 8
    workers: 4
    export_format: json
    entity_types: [SOLID, INSERT]
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional

from dxfmesh.errors import DocumentError

EXPORT_FORMATS = ('json', 'stl')


@dataclass(frozen=True)
class ViewerConfig:
    # the original viewer took abs() of every entity color
    tolerant_color: bool = True
    default_color_index: Optional[int] = None
    insert_depth_limit: int = 8
    workers: int = 1
    export_format: str = 'json'
    entity_types: FrozenSet[str] = field(default_factory=lambda: frozenset(['SOLID', 'INSERT']))

    def __post_init__(self):
        if self.export_format not in EXPORT_FORMATS:
            raise DocumentError(f'export_format must be one of {EXPORT_FORMATS}, '
                                f'got {self.export_format!r}')
        if int(self.workers) < 1:
            raise DocumentError(f'workers must be >= 1, got {self.workers}')
        if int(self.insert_depth_limit) < 0:
            raise DocumentError(f'insert_depth_limit must be >= 0, got {self.insert_depth_limit}')
        types = self.entity_types
        if isinstance(types, str):
            types = [types]
        object.__setattr__(self, 'entity_types', frozenset(str(t).upper() for t in types))

    def replace(self, **changes: Any) -> "ViewerConfig":
        """Return a copy with every non-``None`` value in ``changes`` applied."""
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})


def config_from_mapping(data: Mapping[str, Any]) -> ViewerConfig:
    known = {f.name for f in dataclasses.fields(ViewerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise DocumentError(f'unknown configuration keys: {", ".join(unknown)}')
    kwargs: Dict[str, Any] = dict(data)
    if 'entity_types' in kwargs:
        kwargs['entity_types'] = kwargs['entity_types'] or ()
    try:
        return ViewerConfig(**kwargs)
    except DocumentError:
        raise
    except (TypeError, ValueError) as exc:
        raise DocumentError(f'bad configuration: {exc}') from exc


def load_config(path: Path | str) -> ViewerConfig:
    """Load a :class:`ViewerConfig` from a YAML or JSON file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'config not found: {path}')
    with path.open('r', encoding='utf-8') as fp:
        if path.suffix.lower() == '.json':
            data = json.load(fp)
        else:
            import yaml  # local import to avoid hard dependency if unused
            data = yaml.safe_load(fp) or {}
    if not isinstance(data, Mapping):
        raise DocumentError(f'config file {path} must contain a mapping')
    return config_from_mapping(data)


__all__ = ['ViewerConfig', 'EXPORT_FORMATS', 'config_from_mapping', 'load_config']
