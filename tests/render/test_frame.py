"""寸法計算と座標写像（`sigilgen.render.frame`）のテスト。"""

from __future__ import annotations

import numpy as np
import pytest

from sigilgen.core.shape import ShapeType, shape_vertices
from sigilgen.render.frame import CircleOutline, PolygonOutline, RenderFrame


def test_proportions_follow_canvas_size() -> None:
    frame = RenderFrame(size=800)
    assert frame.center == (400.0, 400.0)
    assert frame.radius == pytest.approx(280.0)
    assert frame.stroke_width == pytest.approx(16.0)
    assert frame.thin_width == pytest.approx(9.6)
    assert frame.dot_radius == pytest.approx(24.0)
    assert frame.padding == pytest.approx(32.0)
    assert frame.glow_blur(1.0) == pytest.approx(48.0)
    assert frame.glow_blur(0.5) == pytest.approx(24.0)


def test_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError, match="size"):
        RenderFrame(size=0)


def test_outline_for_circle_and_polygon() -> None:
    frame = RenderFrame(size=400)
    circle = frame.outline(None)
    assert isinstance(circle, CircleOutline)
    assert circle.radius == pytest.approx(140.0)

    square = frame.outline(shape_vertices(ShapeType.SQUARE))
    assert isinstance(square, PolygonOutline)
    assert len(square.points) == 4
    for x, y in square.points:
        assert np.hypot(x - 200.0, y - 200.0) == pytest.approx(140.0)


def test_normalized_to_canvas_on_circle() -> None:
    frame = RenderFrame(size=800)
    assert frame.normalized_to_canvas((0.5, 0.5), None) == pytest.approx((400.0, 400.0))
    inner = frame.radius - frame.padding
    assert frame.normalized_to_canvas((1.0, 0.5), None) == pytest.approx((400.0 + inner, 400.0))


def test_normalized_to_canvas_on_polygon_uses_inset_bbox() -> None:
    frame = RenderFrame(size=800)
    vertices = shape_vertices(ShapeType.DIAMOND)
    pts = np.asarray(frame.polygon_points(vertices))
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    p = frame.padding
    assert frame.normalized_to_canvas((0.0, 0.0), vertices) == pytest.approx((min_x + p, min_y + p))
    assert frame.normalized_to_canvas((1.0, 1.0), vertices) == pytest.approx((max_x - p, max_y - p))


def test_polygon_points_scale_and_rotate() -> None:
    frame = RenderFrame(size=200)
    pts = frame.polygon_points(np.array([[1.0, 0.0]]), scale=0.5, rotation=np.pi / 2)
    assert pts[0] == pytest.approx((100.0, 100.0 + 35.0))
