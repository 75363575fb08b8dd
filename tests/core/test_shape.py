"""外形の頂点構築（`sigilgen.core.shape`）のテスト。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from sigilgen.core.random_polygon import PolarVertex, RandomPolygonSpec
from sigilgen.core.shape import (
    FALLBACK_SHAPE,
    RING_SHAPES,
    ShapeType,
    shape_vertices,
    vertex_count,
)


@pytest.mark.parametrize(
    ("shape", "expected"),
    [
        (ShapeType.SQUARE, 4),
        (ShapeType.TRIANGLE, 3),
        (ShapeType.DIAMOND, 4),
        (ShapeType.PENTAGON, 5),
        (ShapeType.HEXAGON, 6),
        (ShapeType.OCTAGON, 8),
        (ShapeType.STAR, 10),
        (ShapeType.STAR_INVERTED, 10),
    ],
)
def test_vertex_count_per_shape(shape: ShapeType, expected: int) -> None:
    vertices = shape_vertices(shape)
    assert vertices is not None
    assert vertices.shape == (expected, 2)
    assert vertex_count(shape) == expected


def test_circle_has_no_vertices() -> None:
    assert shape_vertices(ShapeType.CIRCLE) is None
    assert vertex_count(ShapeType.CIRCLE) == 0


def test_regular_shapes_lie_on_unit_circle() -> None:
    for shape in (ShapeType.SQUARE, ShapeType.TRIANGLE, ShapeType.HEXAGON, ShapeType.OCTAGON):
        vertices = shape_vertices(shape)
        np.testing.assert_allclose(np.hypot(vertices[:, 0], vertices[:, 1]), 1.0, atol=1e-12)


def test_triangle_points_up_and_inverted_star_points_down() -> None:
    np.testing.assert_allclose(shape_vertices(ShapeType.TRIANGLE)[0], [0.0, -1.0], atol=1e-12)
    np.testing.assert_allclose(shape_vertices(ShapeType.STAR)[0], [0.0, -1.0], atol=1e-12)
    np.testing.assert_allclose(shape_vertices(ShapeType.STAR_INVERTED)[0], [0.0, 1.0], atol=1e-12)


def test_star_alternates_outer_and_inner_radius() -> None:
    vertices = shape_vertices(ShapeType.STAR)
    radii = np.hypot(vertices[:, 0], vertices[:, 1])
    np.testing.assert_allclose(radii[0::2], 1.0, atol=1e-12)
    np.testing.assert_allclose(radii[1::2], 0.5, atol=1e-12)


def test_square_and_diamond_differ_by_rotation() -> None:
    square = shape_vertices(ShapeType.SQUARE)
    diamond = shape_vertices(ShapeType.DIAMOND)
    # square は辺が軸平行、diamond は頂点が軸上。
    np.testing.assert_allclose(np.abs(square), math.sqrt(0.5), atol=1e-12)
    np.testing.assert_allclose(diamond[0], [0.0, -1.0], atol=1e-12)


def test_vertices_are_read_only() -> None:
    vertices = shape_vertices(ShapeType.HEXAGON)
    with pytest.raises(ValueError):
        vertices[0, 0] = 2.0


def test_random_without_spec_falls_back_to_pentagon() -> None:
    got = shape_vertices(ShapeType.RANDOM)
    np.testing.assert_array_equal(got, shape_vertices(FALLBACK_SHAPE))
    assert got.shape == (5, 2)


def test_random_with_spec_uses_spec_vertices() -> None:
    spec = RandomPolygonSpec(
        points=(
            PolarVertex(angle=0.0, radius_fraction=1.0),
            PolarVertex(angle=math.pi / 2, radius_fraction=0.6),
            PolarVertex(angle=math.pi, radius_fraction=0.8),
            PolarVertex(angle=3 * math.pi / 2, radius_fraction=0.7),
        )
    )
    got = shape_vertices(ShapeType.RANDOM, spec)
    np.testing.assert_allclose(got, [[1.0, 0.0], [0.0, 0.6], [-0.8, 0.0], [0.0, -0.7]], atol=1e-12)


@pytest.mark.parametrize("text", ["star-inverted", "STAR_INVERTED", " star-inverted "])
def test_parse_accepts_value_or_name(text: str) -> None:
    assert ShapeType.parse(text) is ShapeType.STAR_INVERTED


def test_parse_rejects_unknown_shape() -> None:
    with pytest.raises(ValueError, match="shape"):
        ShapeType.parse("blob")


def test_ring_shapes_exclude_random() -> None:
    assert ShapeType.RANDOM not in RING_SHAPES
    assert len(RING_SHAPES) == 9
