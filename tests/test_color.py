import pytest

from dxfmesh.color import (
    ACI_TABLE,
    Color,
    aci_to_hex,
    resolve,
    resolve_strict,
    resolve_tolerant,
    validate_index,
)
from dxfmesh.errors import InvalidColorIndex, InvalidColorIndexType


def test_table_covers_1_to_255_only():
    assert sorted(ACI_TABLE) == list(range(1, 256))
    assert 0 not in ACI_TABLE
    with pytest.raises(TypeError):
        ACI_TABLE[1] = '#000000'


def test_primary_colors():
    assert resolve(1).rgb == (255, 0, 0)
    assert resolve(3).hex == '#00ff00'
    assert resolve(7).hex == '#ffffff'
    assert aci_to_hex(5) == '#0000ff'


@pytest.mark.parametrize('index', [1, 255])
def test_boundaries_are_inclusive(index):
    color = resolve(index)
    assert isinstance(color, Color)
    assert color.index == index


@pytest.mark.parametrize('index', [0, 256, -5, -1, 1000])
def test_strict_rejects_out_of_range(index):
    with pytest.raises(InvalidColorIndex):
        resolve(index)
    with pytest.raises(InvalidColorIndex):
        resolve_strict(index)


def test_tolerant_takes_absolute_value():
    assert resolve(-5, tolerant=True) == resolve(5)
    assert resolve_tolerant(-255) == resolve(255)


@pytest.mark.parametrize('index', [0, 256, -256])
def test_tolerant_still_checks_range(index):
    with pytest.raises(InvalidColorIndex):
        resolve(index, tolerant=True)


@pytest.mark.parametrize('value', ['5', None, True, 2.5, [1]])
def test_non_integral_input(value):
    with pytest.raises(InvalidColorIndexType):
        resolve(value)


def test_integral_float_accepted():
    assert resolve(7.0) == resolve(7)


def test_error_kinds_are_also_builtin_kinds():
    with pytest.raises(ValueError):
        validate_index(0)
    with pytest.raises(TypeError):
        validate_index('red')


def test_as_float():
    r, g, b = resolve(1).as_float()
    assert (r, g, b) == (1.0, 0.0, 0.0)
