"""描画順・クリップ・レイヤ描画（`sigilgen.render.renderer`）のテスト。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from sigilgen.core.layer_state import (
    LAYER_KINDS,
    ConcentricShapes,
    ConnectedNodes,
    ConnectionStyle,
    CrossLine,
    CrossLines,
    LayerState,
    NodeStyle,
    PerimeterConnections,
    RadialLines,
    Ring,
    ScatterDots,
)
from sigilgen.core.shape import ShapeType
from sigilgen.core.sigil_state import SigilState, generate
from sigilgen.render.frame import CircleOutline, PolygonOutline, RenderFrame
from sigilgen.render.recording import RecordingSurface
from sigilgen.render.renderer import (
    all_pairs,
    registered_kinds,
    render,
    render_empty,
    render_inner_layers,
    skip_pattern_order,
)

SIZE = 800


def _state(*layers, shape: ShapeType = ShapeType.CIRCLE) -> SigilState:
    return SigilState(shape=shape, layer_state=LayerState(layers=tuple(layers)))


def _inner(surface: RecordingSurface):
    ops = surface.ops()
    start = ops.index("push_clip")
    end = ops.index("pop_clip")
    return surface.commands[start + 1 : end]


def test_every_layer_kind_has_a_drawer() -> None:
    assert registered_kinds() == LAYER_KINDS


def test_draw_order_with_background_and_glow() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    state = generate(SigilState(shape=ShapeType.HEXAGON), rng=np.random.default_rng(0))
    render(surface, state, glow=0.5)

    ops = surface.ops()
    assert ops[:3] == ["clear", "fill_background", "set_glow"]
    assert surface.commands[2].get("color") == "#FF0000"
    assert surface.commands[2].get("blur") == pytest.approx(0.5 * SIZE * 0.06)
    assert ops[3] == "push_clip"
    # 外形線は pop_clip の直後、クリップ外で最後に描く。
    pop = ops.index("pop_clip")
    assert ops[pop + 1] == "stroke_polyline"
    outline = surface.commands[pop + 1]
    assert outline.get("closed") is True
    assert outline.get("join") == "miter"
    assert outline.get("clip_depth") == 0
    assert outline.get("width") == pytest.approx(SIZE * 0.02)
    assert ops[-1] == "set_glow"
    assert surface.commands[-1].get("color") is None
    assert surface.clip_depth == 0


def test_transparent_skips_background_and_zero_glow_disables_shadow() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    state = generate(SigilState(), rng=np.random.default_rng(1))
    render(surface, state, transparent=True)
    assert "fill_background" not in surface.ops()
    assert surface.commands[1].op == "set_glow"
    assert surface.commands[1].get("color") is None
    assert surface.ops()[-2] == "stroke_circle"


def test_inner_layers_are_clipped_to_outline() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    state = generate(SigilState(shape=ShapeType.STAR), rng=np.random.default_rng(2))
    render(surface, state)
    push = next(c for c in surface.commands if c.op == "push_clip")
    assert isinstance(push.get("outline"), PolygonOutline)
    for cmd in _inner(surface):
        assert cmd.get("clip_depth") == 1

    surface.reset()
    render(surface, generate(SigilState(), rng=np.random.default_rng(2)))
    push = next(c for c in surface.commands if c.op == "push_clip")
    assert isinstance(push.get("outline"), CircleOutline)


def test_ungenerated_state_draws_outline_only() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    render(surface, SigilState(shape=ShapeType.SQUARE))
    assert "push_clip" not in surface.ops()
    assert surface.ops()[-2] == "stroke_polyline"


def test_clip_is_released_when_a_drawer_fails() -> None:
    class _Failing(RecordingSurface):
        def fill_circle(self, *args, **kwargs) -> None:
            raise RuntimeError("boom")

    surface = _Failing(width=SIZE, height=SIZE)
    with pytest.raises(RuntimeError, match="boom"):
        render(surface, _state(RadialLines(angles=(0.0,)), CrossLines(lines=())))
    assert surface.ops()[-1] == "pop_clip"
    assert surface.clip_depth == 0


def test_radial_lines_end_on_outer_radius_and_cap_center() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    render_inner_layers(surface, _state(RadialLines(angles=(0.0, math.pi / 2))))
    inner = _inner(surface)
    frame = RenderFrame(size=SIZE)
    assert [c.op for c in inner] == ["stroke_polyline", "stroke_polyline", "fill_circle"]
    np.testing.assert_allclose(inner[0].get("points"), [[400.0, 400.0], [400.0 + frame.radius, 400.0]])
    assert inner[1].get("points")[1] == pytest.approx((400.0, 400.0 + frame.radius))
    assert inner[2].get("radius") == pytest.approx(frame.thin_width * 0.5)


def test_skip_pattern_order() -> None:
    assert skip_pattern_order(3) is None
    assert skip_pattern_order(4) == [0, 2, 0, 2]
    assert skip_pattern_order(5) == [0, 2, 4, 1, 3]


def test_all_pairs() -> None:
    assert all_pairs(3) == [(0, 1), (0, 2), (1, 2)]
    assert len(all_pairs(5)) == 10


@pytest.mark.parametrize(
    ("style", "n", "expected_ops"),
    [
        (ConnectionStyle.SEQUENTIAL, 4, 1),
        (ConnectionStyle.SKIP_PATTERN, 5, 1),
        (ConnectionStyle.SKIP_PATTERN, 3, 0),
        (ConnectionStyle.ALL_PAIRS, 4, 6),
    ],
)
def test_perimeter_connection_styles(style: ConnectionStyle, n: int, expected_ops: int) -> None:
    positions = tuple(i / n for i in range(n))
    surface = RecordingSurface(width=SIZE, height=SIZE)
    render_inner_layers(
        surface, _state(PerimeterConnections(positions=positions, style=style), shape=ShapeType.SQUARE)
    )
    inner = _inner(surface)
    assert len(inner) == expected_ops
    if style is not ConnectionStyle.ALL_PAIRS and expected_ops:
        assert inner[0].get("closed") is True
        assert len(inner[0].get("points")) == n


def test_perimeter_first_position_is_first_vertex() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    state = _state(
        PerimeterConnections(positions=(0.0, 0.25, 0.5), style=ConnectionStyle.SEQUENTIAL),
        shape=ShapeType.TRIANGLE,
    )
    render_inner_layers(surface, state)
    frame = RenderFrame(size=SIZE)
    first_vertex = frame.polygon_points(state.outer_vertices())[0]
    assert _inner(surface)[0].get("points")[0] == pytest.approx(first_vertex)


def test_concentric_rings() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    rings = (
        Ring(shape=ShapeType.CIRCLE, scale=0.5, rotation=0.0),
        Ring(shape=ShapeType.HEXAGON, scale=0.3, rotation=0.1),
    )
    render_inner_layers(surface, _state(ConcentricShapes(rings=rings)))
    inner = _inner(surface)
    frame = RenderFrame(size=SIZE)
    assert inner[0].op == "stroke_circle"
    assert inner[0].get("radius") == pytest.approx(frame.radius * 0.5)
    assert inner[1].op == "stroke_polyline"
    assert len(inner[1].get("points")) == 6
    for x, y in inner[1].get("points"):
        assert math.hypot(x - 400.0, y - 400.0) == pytest.approx(frame.radius * 0.3)


def test_scatter_dots_are_filled_in_sigil_color() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    dots = ScatterDots(points=((0.5, 0.5), (0.2, 0.8)), radius_multiplier=1.5)
    render_inner_layers(surface, _state(dots))
    inner = _inner(surface)
    assert [c.op for c in inner] == ["fill_circle", "fill_circle"]
    assert inner[0].get("center") == pytest.approx((400.0, 400.0))
    assert inner[0].get("radius") == pytest.approx(SIZE * 0.03 * 1.5)
    assert all(c.get("color") == "#FF0000" for c in inner)


def test_cross_lines_are_offset_chords() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    render_inner_layers(surface, _state(CrossLines(lines=(CrossLine(angle=0.0, offset=0.1),))))
    (cmd,) = _inner(surface)
    frame = RenderFrame(size=SIZE)
    (x0, y0), (x1, y1) = cmd.get("points")
    assert y0 == pytest.approx(400.0 + 0.1 * frame.radius)
    assert y1 == pytest.approx(y0)
    assert x1 - x0 == pytest.approx(2.0 * frame.radius)


@pytest.mark.parametrize(
    ("style", "line_ops"),
    [(NodeStyle.CHAIN, 1), (NodeStyle.STAR, 2), (NodeStyle.ALL_PAIRS, 3)],
)
def test_connected_nodes_draw_links_then_hollow_nodes(style: NodeStyle, line_ops: int) -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    nodes = ConnectedNodes(points=((0.3, 0.3), (0.7, 0.3), (0.5, 0.7)), style=style, radius_multiplier=1.0)
    render_inner_layers(surface, _state(nodes))
    inner = _inner(surface)
    assert [c.op for c in inner[:line_ops]] == ["stroke_polyline"] * line_ops
    tail = inner[line_ops:]
    assert [c.op for c in tail] == ["fill_circle", "stroke_circle"] * 3
    assert tail[0].get("color") == "#000000"
    assert tail[1].get("color") == "#FF0000"


def test_render_empty_draws_background_only() -> None:
    surface = RecordingSurface(width=SIZE, height=SIZE)
    render_empty(surface, SigilState())
    assert surface.ops() == ["clear", "fill_background"]


def test_render_is_replayable() -> None:
    state = generate(SigilState(shape=ShapeType.RANDOM), rng=np.random.default_rng(7))
    a = RecordingSurface(width=SIZE, height=SIZE)
    b = RecordingSurface(width=SIZE, height=SIZE)
    render(a, state)
    render(b, state)
    assert a.commands == b.commands


def test_recording_surface_rejects_unbalanced_pop() -> None:
    with pytest.raises(RuntimeError):
        RecordingSurface().pop_clip()
