"""In-memory model of a CAD drawing.

Entity records come from loosely typed JSON (the output of a DXF-to-JSON
converter) or from :mod:`dxfmesh.io.dxf`.  They are checked here, once,
and turned into a small set of tagged variants keyed by the entity
``type``:

* :class:`SolidEntity` -- a filled polygon (``points`` + ``colorIndex``),
* :class:`InsertEntity` -- a placed reference to a block,
* :class:`OtherEntity` -- any other known DXF type, kept as raw data,
* :class:`InvalidEntity` -- a record that failed validation (lenient
  parsing only), carried along so the scene can report it in order.

The mesh pipeline only ever sees the ``points``/``color_index`` of a
validated :class:`SolidEntity`.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from dxfmesh.errors import DocumentError, InvalidGeometry
from dxfmesh.geometry import ORIGIN, Point, Transform

logger = logging.getLogger(__name__)

ENTITY_TYPES = frozenset([
    'LINE',
    'LWPOLYLINE',
    'CIRCLE',
    'ARC',
    'SOLID',
    'INSERT',
    'ATTRIB',
    'ATTDEF',
    'TEXT',
    'MTEXT',
    'HATCH',
    'DIMENSION',
    'LEADER',
    'VIEWPORT',
    'WIPEOUT',
])

ACI_BYBLOCK = 0
ACI_BYLAYER = 256


@dataclass(frozen=True)
class SolidEntity:
    points: Tuple[Point, ...]
    color_index: Optional[int] = None
    handle: Optional[str] = None
    layer: Optional[str] = None
    type: str = field(default='SOLID', init=False)


@dataclass(frozen=True)
class InsertEntity:
    name: str
    position: Point = ORIGIN
    x_scale: float = 1.0
    y_scale: float = 1.0
    rotation: float = 0.0
    color_index: Optional[int] = None
    handle: Optional[str] = None
    layer: Optional[str] = None
    type: str = field(default='INSERT', init=False)

    @property
    def transform(self) -> Transform:
        return Transform(position=self.position, x_scale=self.x_scale,
                         y_scale=self.y_scale, rotation=self.rotation)


@dataclass(frozen=True)
class OtherEntity:
    type: str
    raw: Mapping[str, Any]
    handle: Optional[str] = None
    layer: Optional[str] = None


@dataclass(frozen=True)
class InvalidEntity:
    type: str
    reason: str
    raw: Any = None
    handle: Optional[str] = None
    layer: Optional[str] = None


Entity = Union[SolidEntity, InsertEntity, OtherEntity, InvalidEntity]


@dataclass
class Block:
    """A named, reusable group of entities placed through INSERTs."""

    name: str
    base_point: Point = ORIGIN
    entities: List[Entity] = field(default_factory=list)


@dataclass
class CadDocument:
    entities: List[Entity] = field(default_factory=list)
    blocks: Dict[str, Block] = field(default_factory=dict)
    tables: Dict[str, Any] = field(default_factory=dict)
    header: Dict[str, Any] = field(default_factory=dict)

    def solids(self) -> List[SolidEntity]:
        return [e for e in self.entities if isinstance(e, SolidEntity)]

    def invalid_entities(self) -> List[InvalidEntity]:
        return [e for e in self.entities if isinstance(e, InvalidEntity)]

    def layer_color(self, name: Optional[str]) -> Optional[int]:
        """Return the ``colorIndex`` of layer ``name`` from the layer table.

        Follows the ``tables.layer.layers`` layout produced by DXF-to-JSON
        converters.  Returns ``None`` when the layer or its color is
        unknown.
        """

        if name is None:
            return None
        layers = (self.tables.get('layer') or {}).get('layers') or {}
        entry = layers.get(name)
        if not isinstance(entry, Mapping):
            return None
        value = entry.get('colorIndex')
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            return int(value)
        return None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _opt_number(record: Mapping[str, Any], key: str, default: float) -> float:
    value = record.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise DocumentError(f'{key} must be a number, got {value!r}')
    return float(value)


def _color_index(record: Mapping[str, Any]) -> Optional[int]:
    value = record.get('colorIndex')
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise DocumentError(f'colorIndex must be a number, got {value!r}')
    return value


def _parse_solid(record: Mapping[str, Any]) -> SolidEntity:
    points = record.get('points')
    if points is None:
        points = []
    if not isinstance(points, (list, tuple)):
        raise DocumentError(f'SOLID points must be a list, got {type(points).__name__}')
    try:
        pts = tuple(Point.from_record(p) for p in points)
    except InvalidGeometry as exc:
        raise DocumentError(str(exc)) from exc
    return SolidEntity(
        points=pts,
        color_index=_color_index(record),
        handle=_opt_str(record.get('handle')),
        layer=_opt_str(record.get('layer')),
    )


def _parse_insert(record: Mapping[str, Any]) -> InsertEntity:
    name = record.get('name')
    if not isinstance(name, str) or not name:
        raise DocumentError(f'INSERT needs a block name, got {name!r}')
    position = record.get('position')
    try:
        pos = ORIGIN if position is None else Point.from_record(position)
    except InvalidGeometry as exc:
        raise DocumentError(str(exc)) from exc
    return InsertEntity(
        name=name,
        position=pos,
        x_scale=_opt_number(record, 'xScale', 1.0),
        y_scale=_opt_number(record, 'yScale', 1.0),
        rotation=_opt_number(record, 'rotation', 0.0),
        color_index=_color_index(record),
        handle=_opt_str(record.get('handle')),
        layer=_opt_str(record.get('layer')),
    )


def parse_entity(record: Any) -> Entity:
    """Validate one raw entity record and return its typed variant.

    Raises :class:`DocumentError` when the record is malformed.
    """

    if not isinstance(record, Mapping):
        raise DocumentError(f'entity record must be a mapping, got {type(record).__name__}')
    etype = record.get('type')
    if not isinstance(etype, str):
        raise DocumentError(f'entity record has no type: {record!r}')
    etype = etype.upper()
    if etype == 'SOLID':
        return _parse_solid(record)
    if etype == 'INSERT':
        return _parse_insert(record)
    if etype not in ENTITY_TYPES:
        logger.debug('unknown entity type %s kept as raw data', etype)
    return OtherEntity(type=etype, raw=dict(record),
                       handle=_opt_str(record.get('handle')),
                       layer=_opt_str(record.get('layer')))


def _parse_entities(records: Any, *, strict: bool, where: str) -> List[Entity]:
    if records is None:
        return []
    if not isinstance(records, (list, tuple)):
        raise DocumentError(f'{where} must be a list of entity records')
    entities: List[Entity] = []
    for i, record in enumerate(records):
        try:
            entities.append(parse_entity(record))
        except DocumentError as exc:
            if strict:
                raise DocumentError(f'{where}[{i}]: {exc}') from exc
            etype = record.get('type') if isinstance(record, Mapping) else None
            handle = record.get('handle') if isinstance(record, Mapping) else None
            logger.warning('%s[%d] (%s) rejected: %s', where, i, etype, exc)
            entities.append(InvalidEntity(type=str(etype or 'UNKNOWN').upper(),
                                          reason=str(exc), raw=record,
                                          handle=_opt_str(handle)))
    return entities


def _parse_block(name: str, data: Any, *, strict: bool) -> Block:
    if not isinstance(data, Mapping):
        raise DocumentError(f'block {name!r} must be a mapping')
    base = data.get('position')
    try:
        base_point = ORIGIN if base is None else Point.from_record(base)
    except InvalidGeometry as exc:
        raise DocumentError(f'block {name!r}: {exc}') from exc
    entities = _parse_entities(data.get('entities'), strict=strict,
                               where=f'blocks[{name!r}].entities')
    return Block(name=str(data.get('name') or name), base_point=base_point,
                 entities=entities)


def parse_document(data: Any, *, strict: bool = False) -> CadDocument:
    """Validate a decoded CAD JSON document.

    With ``strict=False`` (the default) malformed entity records become
    :class:`InvalidEntity` placeholders so a single bad record does not
    stop the whole drawing from loading.  Structural problems (a document
    that is not a mapping, ``entities`` that is not a list) always raise
    :class:`DocumentError`.
    """

    if not isinstance(data, Mapping):
        raise DocumentError(f'CAD document must be a JSON object, got {type(data).__name__}')

    entities = _parse_entities(data.get('entities'), strict=strict, where='entities')

    blocks: Dict[str, Block] = {}
    raw_blocks = data.get('blocks') or {}
    if not isinstance(raw_blocks, Mapping):
        raise DocumentError('blocks must be a mapping of name to block')
    for name, block in raw_blocks.items():
        blocks[str(name)] = _parse_block(str(name), block, strict=strict)

    tables = data.get('tables') or {}
    header = data.get('header') or data.get('headers') or {}
    if not isinstance(tables, Mapping) or not isinstance(header, Mapping):
        raise DocumentError('tables and header must be mappings')

    doc = CadDocument(entities=entities, blocks=blocks,
                      tables=dict(tables), header=dict(header))
    logger.debug('parsed document: %d entities, %d blocks', len(entities), len(blocks))
    return doc


__all__ = [
    'ENTITY_TYPES',
    'ACI_BYBLOCK',
    'ACI_BYLAYER',
    'SolidEntity',
    'InsertEntity',
    'OtherEntity',
    'InvalidEntity',
    'Entity',
    'Block',
    'CadDocument',
    'parse_entity',
    'parse_document',
]
