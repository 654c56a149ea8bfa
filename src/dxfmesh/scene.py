"""Assemble the meshes of a whole drawing.

Each SOLID in modelspace becomes one mesh.  INSERTs are expanded into
the SOLIDs of their block, placed with the INSERT transform (nested
INSERTs compose their placements).  Every solid is built independently:
a malformed one is recorded as an :class:`EntityFailure` and the rest of
the drawing still loads.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple, Union

from dxfmesh.config import ViewerConfig
from dxfmesh.document import (
    ACI_BYBLOCK,
    ACI_BYLAYER,
    CadDocument,
    Entity,
    InsertEntity,
    InvalidEntity,
    SolidEntity,
)
from dxfmesh.errors import DxfMeshError
from dxfmesh.geometry import IDENTITY, Point, Transform
from dxfmesh.solid import MeshResult, build_entity_mesh

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityFailure:
    """Why one entity produced no mesh."""

    position: int
    handle: Optional[str]
    entity_type: str
    reason: str
    error: Optional[BaseException] = None
    block: Optional[str] = None


@dataclass(frozen=True)
class _Job:
    position: int
    solid: SolidEntity
    transform: Transform
    color_index: Any
    block: Optional[str] = None


Outcome = Union[MeshResult, EntityFailure]


@dataclass
class SceneResult:
    """Meshes and failures, both in drawing order."""

    outcomes: List[Outcome] = field(default_factory=list)
    skipped: int = 0

    @property
    def meshes(self) -> List[MeshResult]:
        return [o for o in self.outcomes if isinstance(o, MeshResult)]

    @property
    def failures(self) -> List[EntityFailure]:
        return [o for o in self.outcomes if isinstance(o, EntityFailure)]

    def summary(self) -> str:
        failures = self.failures
        text = f'{len(self.outcomes) - len(failures)} meshes built, {len(failures)} failed'
        if self.skipped:
            text += f', {self.skipped} entities ignored'
        return text


def _effective_color(doc: CadDocument, color_index: Any, layer: Optional[str],
                     inherited: Any) -> Any:
    """Resolve BYBLOCK/BYLAYER to a concrete index where possible."""

    if color_index == ACI_BYBLOCK and inherited is not None:
        return inherited
    if color_index is None or color_index == ACI_BYLAYER:
        layer_color = doc.layer_color(layer)
        if layer_color is not None:
            return layer_color
    return color_index


class _Expander:

    def __init__(self, doc: CadDocument, config: ViewerConfig):
        self.doc = doc
        self.config = config
        self.skipped = 0

    def expand(self, entity: Entity, position: int, transform: Transform,
               inherited: Any, depth: int, block: Optional[str]) -> Iterator[Union[_Job, EntityFailure]]:
        if entity.type not in self.config.entity_types:
            self.skipped += 1
            return
        if isinstance(entity, InvalidEntity):
            yield EntityFailure(position, entity.handle, entity.type, entity.reason, block=block)
        elif isinstance(entity, SolidEntity):
            color = _effective_color(self.doc, entity.color_index, entity.layer, inherited)
            yield _Job(position, entity, transform, color, block)
        elif isinstance(entity, InsertEntity):
            yield from self._expand_insert(entity, position, transform, inherited, depth)
        else:
            self.skipped += 1

    def _expand_insert(self, insert: InsertEntity, position: int, transform: Transform,
                       inherited: Any, depth: int) -> Iterator[Union[_Job, EntityFailure]]:
        if depth >= self.config.insert_depth_limit:
            yield EntityFailure(position, insert.handle, 'INSERT',
                                f'INSERT nesting deeper than {self.config.insert_depth_limit}',
                                block=insert.name)
            return
        blk = self.doc.blocks.get(insert.name)
        if blk is None:
            yield EntityFailure(position, insert.handle, 'INSERT',
                                f'block {insert.name!r} not found', block=insert.name)
            return
        bp = blk.base_point
        base = Transform(position=Point(-bp.x, -bp.y, -bp.z))
        try:
            placement = transform.compose(insert.transform).compose(base)
        except DxfMeshError as exc:
            yield EntityFailure(position, insert.handle, 'INSERT', str(exc),
                                error=exc, block=insert.name)
            return
        color = _effective_color(self.doc, insert.color_index, insert.layer, inherited)
        for child in blk.entities:
            yield from self.expand(child, position, placement, color, depth + 1, blk.name)


def _run(job: _Job, config: ViewerConfig) -> Outcome:
    try:
        return build_entity_mesh(
            job.solid,
            job.transform,
            color_index=job.color_index,
            custom_color_index=config.default_color_index,
            tolerant_color=config.tolerant_color,
        )
    except DxfMeshError as exc:
        return EntityFailure(job.position, job.solid.handle, 'SOLID', str(exc),
                             error=exc, block=job.block)


def build_scene(document: CadDocument, config: Optional[ViewerConfig] = None,
                *, transform: Transform = IDENTITY) -> SceneResult:
    """Build one mesh per qualifying solid of ``document``.

    Failures are collected, logged and returned alongside the meshes;
    they never stop the remaining entities from being built.  With
    ``config.workers > 1`` solids are built on a thread pool; the result
    order is the drawing order either way.
    """

    config = config or ViewerConfig()
    expander = _Expander(document, config)

    items: List[Union[_Job, EntityFailure]] = []
    for position, entity in enumerate(document.entities):
        items.extend(expander.expand(entity, position, transform, None, 0, None))

    jobs = [item for item in items if isinstance(item, _Job)]
    if config.workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            built = iter(list(pool.map(lambda j: _run(j, config), jobs)))
    else:
        built = (_run(j, config) for j in jobs)

    outcomes: List[Outcome] = []
    for item in items:
        outcomes.append(next(built) if isinstance(item, _Job) else item)

    result = SceneResult(outcomes=outcomes, skipped=expander.skipped)
    for failure in result.failures:
        logger.warning('skipped %s entity #%d (handle=%s%s): %s',
                       failure.entity_type, failure.position, failure.handle,
                       f', block={failure.block}' if failure.block else '',
                       failure.reason)
    logger.info('scene: %s', result.summary())
    return result


def count_by_layer(result: SceneResult) -> List[Tuple[Optional[str], int]]:
    """Number of meshes per layer, in first-seen order."""

    counts: dict = {}
    for mesh in result.meshes:
        counts[mesh.layer] = counts.get(mesh.layer, 0) + 1
    return list(counts.items())


__all__ = ['EntityFailure', 'SceneResult', 'build_scene', 'count_by_layer']
