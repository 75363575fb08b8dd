"""幾何カーネル（`sigilgen.core.geometry`）のテスト。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from sigilgen.core.geometry import (
    CENTER,
    bounding_box,
    edge_lengths,
    perimeter_point,
    point_in_polygon,
    polygon_is_simple,
    regular_polygon,
    rejection_sample_point,
    similarity,
    star_polygon,
)
from sigilgen.core.shape import ShapeType, shape_vertices


def test_regular_polygon_rejects_too_few_sides() -> None:
    with pytest.raises(ValueError, match="sides"):
        regular_polygon(2)


def test_similarity_scales_and_rotates_about_origin() -> None:
    got = similarity(np.array([[1.0, 0.0]]), scale=2.0, rotation=math.pi / 2)
    np.testing.assert_allclose(got, [[0.0, 2.0]], atol=1e-12)


def test_perimeter_point_is_exact_first_vertex_at_zero() -> None:
    for shape in (ShapeType.SQUARE, ShapeType.TRIANGLE, ShapeType.STAR, ShapeType.OCTAGON):
        vertices = shape_vertices(shape)
        assert perimeter_point(vertices, 0.0) == (float(vertices[0, 0]), float(vertices[0, 1]))


def test_perimeter_point_on_circle_uses_angle() -> None:
    np.testing.assert_allclose(perimeter_point(None, 0.0), (1.0, 0.0), atol=1e-12)
    np.testing.assert_allclose(perimeter_point(None, 0.25), (0.0, 1.0), atol=1e-12)
    np.testing.assert_allclose(perimeter_point(None, 0.5), (-1.0, 0.0), atol=1e-12)


def test_perimeter_point_halfway_around_square_is_opposite_vertex() -> None:
    vertices = shape_vertices(ShapeType.SQUARE)
    np.testing.assert_allclose(perimeter_point(vertices, 0.5), vertices[2], atol=1e-9)
    np.testing.assert_allclose(perimeter_point(vertices, 1.0), vertices[0], atol=1e-9)


def test_perimeter_point_is_monotonic_in_arc_length() -> None:
    vertices = shape_vertices(ShapeType.HEXAGON)
    total = float(edge_lengths(vertices).sum())
    ts = np.linspace(0.0, 0.999, 300)
    points = np.array([perimeter_point(vertices, float(t)) for t in ts])
    steps = np.hypot(np.diff(points[:, 0]), np.diff(points[:, 1]))
    dt = float(ts[1] - ts[0])
    # 直線距離は弧長以下で、止まらずに進む。
    assert np.all(steps <= dt * total + 1e-9)
    assert np.all(steps > 0.0)


def test_perimeter_point_stays_on_boundary() -> None:
    vertices = shape_vertices(ShapeType.TRIANGLE)
    for t in np.linspace(0.0, 0.99, 50):
        x, y = perimeter_point(vertices, float(t))
        # 境界上の点は内側判定が境界付近で揺れるため、各辺までの最短距離で確認する。
        dists = []
        for i in range(3):
            a = vertices[i]
            b = vertices[(i + 1) % 3]
            ab = b - a
            u = np.clip(np.dot([x - a[0], y - a[1]], ab) / np.dot(ab, ab), 0.0, 1.0)
            proj = a + u * ab
            dists.append(math.hypot(x - proj[0], y - proj[1]))
        assert min(dists) < 1e-9


def test_point_in_polygon() -> None:
    square = shape_vertices(ShapeType.SQUARE)
    assert point_in_polygon((0.0, 0.0), square)
    assert not point_in_polygon((2.0, 2.0), square)
    star = star_polygon()
    assert point_in_polygon((0.0, 0.0), star)
    # 星の谷の外側（内周半径 0.5 より外、外周の先端方向でない）。
    assert not point_in_polygon((0.0, 0.9), star)


def test_bounding_box() -> None:
    assert bounding_box(np.array([[0.0, 1.0], [2.0, -1.0], [1.0, 3.0]])) == (0.0, -1.0, 2.0, 3.0)


def test_rejection_sample_point_in_unit_square_and_inside_shape() -> None:
    rng = np.random.default_rng(0)
    for shape in (ShapeType.CIRCLE, ShapeType.TRIANGLE, ShapeType.STAR, ShapeType.HEXAGON):
        vertices = shape_vertices(shape)
        for _ in range(100):
            nx, ny = rejection_sample_point(vertices, rng)
            assert 0.0 <= nx <= 1.0
            assert 0.0 <= ny <= 1.0
            if vertices is None:
                assert math.hypot(nx - 0.5, ny - 0.5) <= 0.5 + 1e-12
            elif (nx, ny) != CENTER:
                min_x, min_y, max_x, max_y = bounding_box(vertices)
                x = min_x + nx * (max_x - min_x)
                y = min_y + ny * (max_y - min_y)
                assert point_in_polygon((x, y), vertices)


def test_rejection_sample_point_falls_back_to_center() -> None:
    rng = np.random.default_rng(1)
    assert rejection_sample_point(shape_vertices(ShapeType.SQUARE), rng, attempts=0) == CENTER
    flat = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
    assert rejection_sample_point(flat, rng) == CENTER


def test_polygon_is_simple() -> None:
    assert polygon_is_simple(star_polygon())
    assert polygon_is_simple(regular_polygon(6))
    bowtie = np.array([[0.0, 0.0], [1.0, 1.0], [1.0, 0.0], [0.0, 1.0]])
    assert not polygon_is_simple(bowtie)
