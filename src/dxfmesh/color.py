"""AutoCAD Color Index (ACI) lookup.

The ACI palette is a fixed table of 255 colors addressed by the integers
1..255.  Index 0 means BYBLOCK and 256 means BYLAYER in DXF files; neither
is a real color, so both are rejected here.  Entity colors may also be
negative (a layer switched off keeps its color with the sign flipped), which
is why two validation modes exist:

* **strict** -- the raw value must lie in [1, 255].
* **sign-tolerant** -- the absolute value must lie in [1, 255].

The table is read once from the bundled ``data/aci.json`` and exposed as a
read-only mapping.
"""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass
from importlib import resources
from types import MappingProxyType
from typing import Mapping, Tuple

from dxfmesh.errors import InvalidColorIndex, InvalidColorIndexType

ACI_MIN = 1
ACI_MAX = 255

RGB = Tuple[int, int, int]


def _hex2rgb(value: str) -> RGB:
    value = value.lstrip('#')
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _load_table() -> Mapping[int, str]:
    raw = resources.files('dxfmesh').joinpath('data/aci.json').read_text(encoding='utf-8')
    table = {int(key): str(val).lower() for key, val in json.loads(raw).items()}
    missing = [i for i in range(ACI_MIN, ACI_MAX + 1) if i not in table]
    if missing or 0 in table:
        raise RuntimeError(f'ACI table is malformed, missing indices: {missing}')
    return MappingProxyType(table)


ACI_TABLE: Mapping[int, str] = _load_table()


@dataclass(frozen=True)
class Color:
    """A resolved ACI color."""

    index: int
    rgb: RGB

    @property
    def hex(self) -> str:
        return '#{:02x}{:02x}{:02x}'.format(*self.rgb)

    def as_float(self) -> Tuple[float, float, float]:
        return self.rgb[0] / 255.0, self.rgb[1] / 255.0, self.rgb[2] / 255.0


def _as_index(value) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidColorIndexType(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise InvalidColorIndexType(value)


def validate_index(value, *, tolerant: bool = False) -> int:
    """Return ``value`` as a table key, raising if it is not a valid ACI.

    In tolerant mode the absolute value is returned.
    """

    index = _as_index(value)
    if tolerant:
        index = abs(index)
    if not ACI_MIN <= index <= ACI_MAX:
        raise InvalidColorIndex(value, tolerant=tolerant)
    return index


def resolve(color_index, *, tolerant: bool = False) -> Color:
    """Map ``color_index`` to a :class:`Color`.

    Raises :class:`InvalidColorIndexType` for non-integral input and
    :class:`InvalidColorIndex` for anything outside [1, 255] (after taking
    the absolute value when ``tolerant`` is true).
    """

    index = validate_index(color_index, tolerant=tolerant)
    return Color(index=index, rgb=_hex2rgb(ACI_TABLE[index]))


def resolve_strict(color_index) -> Color:
    return resolve(color_index, tolerant=False)


def resolve_tolerant(color_index) -> Color:
    return resolve(color_index, tolerant=True)


def aci_to_hex(color_index, *, tolerant: bool = False) -> str:
    """Shorthand for ``resolve(...).hex``."""
    return resolve(color_index, tolerant=tolerant).hex


__all__ = [
    'ACI_MIN',
    'ACI_MAX',
    'ACI_TABLE',
    'Color',
    'validate_index',
    'resolve',
    'resolve_strict',
    'resolve_tolerant',
    'aci_to_hex',
]
