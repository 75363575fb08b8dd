"""SigilState の状態遷移（`sigilgen.core.sigil_state`）のテスト。"""

from __future__ import annotations

import numpy as np
import pytest

from sigilgen.core.appearance import Appearance
from sigilgen.core.shape import ShapeType, shape_vertices
from sigilgen.core.sigil_state import (
    SigilState,
    generate,
    with_colors,
    with_complexity,
    with_shape,
)


def test_default_state_is_not_generated() -> None:
    state = SigilState()
    assert state.shape is ShapeType.CIRCLE
    assert not state.is_generated
    assert state.outer_vertices() is None


def test_state_parses_shape_and_validates_complexity() -> None:
    assert SigilState(shape="hexagon").shape is ShapeType.HEXAGON
    with pytest.raises(ValueError):
        SigilState(shape="blob")
    with pytest.raises(ValueError):
        SigilState(complexity=0)


def test_generate_builds_layer_state() -> None:
    state = generate(SigilState(shape=ShapeType.HEXAGON), rng=np.random.default_rng(0))
    assert state.is_generated
    assert state.random_polygon is None
    assert len(state.layer_state.layers) in (2, 3)


def test_color_change_keeps_random_state() -> None:
    state = generate(SigilState(shape=ShapeType.RANDOM), rng=np.random.default_rng(1))
    recolored = with_colors(state, background="#112233", sigil="#abcdef")
    assert recolored.appearance == Appearance(background="#112233", sigil="#ABCDEF")
    assert recolored.layer_state is state.layer_state
    assert recolored.random_polygon is state.random_polygon


def test_random_shape_regenerates_polygon_on_each_generate() -> None:
    rng = np.random.default_rng(2)
    first = generate(SigilState(shape=ShapeType.RANDOM), rng=rng)
    assert first.random_polygon is not None
    assert 4 <= len(first.random_polygon) <= 8
    for p in first.random_polygon.points:
        assert 0.55 <= p.radius_fraction <= 1.0

    second = generate(first, rng=rng)
    assert second.random_polygon is not None
    assert second.random_polygon != first.random_polygon
    np.testing.assert_array_equal(second.outer_vertices(), second.random_polygon.vertices())


def test_other_shapes_keep_prior_random_polygon() -> None:
    rng = np.random.default_rng(3)
    state = generate(SigilState(shape=ShapeType.RANDOM), rng=rng)
    spec = state.random_polygon
    # random 以外の外形では既存の仕様を作り直さずに持ち越す。
    hexagon = SigilState(shape=ShapeType.HEXAGON, random_polygon=spec)
    regenerated = generate(hexagon, rng=rng)
    assert regenerated.random_polygon is spec


def test_random_without_polygon_renders_fallback_vertices() -> None:
    state = SigilState(shape=ShapeType.RANDOM)
    np.testing.assert_array_equal(state.outer_vertices(), shape_vertices(ShapeType.PENTAGON))


def test_with_shape_discards_random_state_only_on_change() -> None:
    state = generate(SigilState(shape=ShapeType.SQUARE), rng=np.random.default_rng(4))
    assert with_shape(state, "square") is state

    changed = with_shape(state, ShapeType.STAR)
    assert changed.shape is ShapeType.STAR
    assert changed.layer_state is None
    assert changed.random_polygon is None


def test_with_complexity_keeps_layer_state() -> None:
    state = generate(SigilState(), rng=np.random.default_rng(5))
    updated = with_complexity(state, 5)
    assert updated.complexity == 5
    assert updated.layer_state is state.layer_state
    with pytest.raises(ValueError):
        with_complexity(state, 6)


def test_to_dict() -> None:
    state = generate(SigilState(shape=ShapeType.RANDOM), rng=np.random.default_rng(6))
    out = state.to_dict()
    assert out["shape"] == "random"
    assert out["background"] == "#000000"
    assert out["sigil"] == "#FF0000"
    assert len(out["random_polygon"]) == len(state.random_polygon)
    assert out["layer_state"]["layers"]
