"""
どこで: `src/sigilgen/render/renderer.py`。
何を: SigilState を DrawingSurface への描画呼び出し列へ変換する（背景 → glow → クリップ済み内側レイヤ → 外形）。
なぜ: 再描画・PNG・SVG のすべてが同じ確定状態から同じ描画列を得られるようにするため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from sigilgen.core.geometry import Point, perimeter_point
from sigilgen.core.layer_state import (
    LAYER_KINDS,
    ConcentricShapes,
    ConnectedNodes,
    ConnectionStyle,
    CrossLines,
    LayerBundle,
    LayerKind,
    NodeStyle,
    PerimeterConnections,
    RadialLines,
    ScatterDots,
)
from sigilgen.core.shape import shape_vertices
from sigilgen.core.sigil_state import SigilState
from sigilgen.render.frame import CircleOutline, Outline, RenderFrame
from sigilgen.render.surface import DrawingSurface


@dataclass(frozen=True, slots=True)
class DrawContext:
    """レイヤ描画関数に渡す、1 回の render で不変な値の束。"""

    surface: DrawingSurface
    frame: RenderFrame
    outer_vertices: np.ndarray | None
    sigil_color: str
    background_color: str


LayerDrawer = Callable[[DrawContext, LayerBundle], None]

_DRAWERS: dict[LayerKind, LayerDrawer] = {}


def layer_drawer(kind: LayerKind) -> Callable[[LayerDrawer], LayerDrawer]:
    """レイヤ種別に描画関数を登録するデコレータ。"""

    def _decorator(func: LayerDrawer) -> LayerDrawer:
        if kind in _DRAWERS:
            raise ValueError(f"layer drawer '{kind.value}' は既に登録されている")
        _DRAWERS[kind] = func
        return func

    return _decorator


def registered_kinds() -> tuple[LayerKind, ...]:
    """描画関数が登録済みのレイヤ種別を定義順で返す。"""
    return tuple(k for k in LAYER_KINDS if k in _DRAWERS)


# --- 結線トポロジ ---


def skip_pattern_order(n: int) -> list[int] | None:
    """skip-pattern の巡回順（最小ストライド 2 で 1 周）を返す。

    ストライドは 2..floor(n/2) の最初の値を使う。候補が無い（n < 4）場合は None。
    """
    if n // 2 < 2:
        return None
    step = 2
    return [(i * step) % n for i in range(n)]


def all_pairs(n: int) -> list[tuple[int, int]]:
    return [(i, j) for i in range(n) for j in range(i + 1, n)]


def _line(ctx: DrawContext, a: Point, b: Point) -> None:
    ctx.surface.stroke_polyline([a, b], color=ctx.sigil_color, width=ctx.frame.thin_width)


def _pairs(ctx: DrawContext, pts: Sequence[Point]) -> None:
    for i, j in all_pairs(len(pts)):
        _line(ctx, pts[i], pts[j])


# --- レイヤ描画 ---


@layer_drawer(LayerKind.RADIAL_LINES)
def _draw_radial_lines(ctx: DrawContext, bundle: RadialLines) -> None:
    frame = ctx.frame
    center = frame.center
    for angle in bundle.angles:
        end = frame.to_canvas((math.cos(angle), math.sin(angle)))
        _line(ctx, center, end)
    # 中心の継ぎ目を塞ぐ。
    ctx.surface.fill_circle(center, frame.thin_width * 0.5, color=ctx.sigil_color)


@layer_drawer(LayerKind.PERIMETER_CONNECTIONS)
def _draw_perimeter_connections(ctx: DrawContext, bundle: PerimeterConnections) -> None:
    pts = [ctx.frame.to_canvas(perimeter_point(ctx.outer_vertices, t)) for t in bundle.positions]
    if not pts:
        return
    width = ctx.frame.thin_width
    if bundle.style is ConnectionStyle.SEQUENTIAL:
        ctx.surface.stroke_polyline(pts, color=ctx.sigil_color, width=width, closed=True)
    elif bundle.style is ConnectionStyle.SKIP_PATTERN:
        order = skip_pattern_order(len(pts))
        if order is not None:
            ctx.surface.stroke_polyline(
                [pts[j] for j in order], color=ctx.sigil_color, width=width, closed=True
            )
    else:
        _pairs(ctx, pts)


@layer_drawer(LayerKind.CONCENTRIC_SHAPES)
def _draw_concentric_shapes(ctx: DrawContext, bundle: ConcentricShapes) -> None:
    frame = ctx.frame
    for ring in bundle.rings:
        ring_vertices = shape_vertices(ring.shape)
        if ring_vertices is None:
            ctx.surface.stroke_circle(
                frame.center, frame.radius * ring.scale, color=ctx.sigil_color, width=frame.thin_width
            )
            continue
        pts = frame.polygon_points(ring_vertices, scale=ring.scale, rotation=ring.rotation)
        ctx.surface.stroke_polyline(pts, color=ctx.sigil_color, width=frame.thin_width, closed=True)


@layer_drawer(LayerKind.SCATTER_DOTS)
def _draw_scatter_dots(ctx: DrawContext, bundle: ScatterDots) -> None:
    r = ctx.frame.dot_radius * bundle.radius_multiplier
    for point in bundle.points:
        pos = ctx.frame.normalized_to_canvas(point, ctx.outer_vertices)
        ctx.surface.fill_circle(pos, r, color=ctx.sigil_color)


@layer_drawer(LayerKind.CROSS_LINES)
def _draw_cross_lines(ctx: DrawContext, bundle: CrossLines) -> None:
    frame = ctx.frame
    cx, cy = frame.center
    r = frame.radius
    for line in bundle.lines:
        # 線の向きに直交する方向へ offset * 半径だけずらした弦。
        off_x = math.cos(line.angle + math.pi / 2) * line.offset * r
        off_y = math.sin(line.angle + math.pi / 2) * line.offset * r
        dx = math.cos(line.angle) * r
        dy = math.sin(line.angle) * r
        _line(ctx, (cx + off_x - dx, cy + off_y - dy), (cx + off_x + dx, cy + off_y + dy))


@layer_drawer(LayerKind.CONNECTED_NODES)
def _draw_connected_nodes(ctx: DrawContext, bundle: ConnectedNodes) -> None:
    frame = ctx.frame
    pts = [frame.normalized_to_canvas(p, ctx.outer_vertices) for p in bundle.points]
    if not pts:
        return
    width = frame.thin_width

    # 結線を先に描き、ノードをその上に重ねる。
    if bundle.style is NodeStyle.CHAIN:
        if len(pts) >= 2:
            ctx.surface.stroke_polyline(pts, color=ctx.sigil_color, width=width)
    elif bundle.style is NodeStyle.STAR:
        for p in pts[1:]:
            _line(ctx, pts[0], p)
    else:
        _pairs(ctx, pts)

    r = frame.dot_radius * bundle.radius_multiplier
    for p in pts:
        # 背景色で塗って線を抜き、輪郭だけシジル色で描く。
        ctx.surface.fill_circle(p, r, color=ctx.background_color)
        ctx.surface.stroke_circle(p, r, color=ctx.sigil_color, width=width)


# --- 全体の描画 ---


def _context(surface: DrawingSurface, state: SigilState, frame: RenderFrame) -> DrawContext:
    return DrawContext(
        surface=surface,
        frame=frame,
        outer_vertices=state.outer_vertices(),
        sigil_color=state.appearance.sigil,
        background_color=state.appearance.background,
    )


def frame_for(surface: DrawingSurface) -> RenderFrame:
    """描画面の幅を一辺とする RenderFrame を返す。"""
    return RenderFrame(size=int(surface.width))


def render_inner_layers(
    surface: DrawingSurface,
    state: SigilState,
    frame: RenderFrame | None = None,
) -> None:
    """内側レイヤを外形内部にクリップして描く。

    Notes
    -----
    例外が起きてもクリップは必ず解除する。LayerState が無ければ何もしない。
    """
    layer_state = state.layer_state
    if layer_state is None:
        return
    frame = frame if frame is not None else frame_for(surface)
    ctx = _context(surface, state, frame)
    surface.push_clip(frame.outline(ctx.outer_vertices))
    try:
        for bundle in layer_state.layers:
            _DRAWERS[bundle.kind](ctx, bundle)
    finally:
        surface.pop_clip()


def draw_outline(surface: DrawingSurface, outline: Outline, *, color: str, width: float) -> None:
    """外形線を描く。"""
    if isinstance(outline, CircleOutline):
        surface.stroke_circle(outline.center, outline.radius, color=color, width=width)
        return
    surface.stroke_polyline(outline.points, color=color, width=width, closed=True, join="miter")


def render(
    surface: DrawingSurface,
    state: SigilState,
    *,
    glow: float = 0.0,
    transparent: bool = False,
    size: int | None = None,
) -> None:
    """シジル 1 枚を描画面へ描く（毎回全消去してから描き直す）。

    Parameters
    ----------
    surface : DrawingSurface
        描画先。幅をキャンバス一辺として使う。
    state : SigilState
        外形・色・確定済みレイヤ状態。
    glow : float, optional
        0..1 の glow 強度。0 で glow 無し。
    transparent : bool, optional
        True なら背景を塗らない。
    size : int or None, optional
        キャンバス一辺。None なら描画面の幅を使う。
    """
    frame = RenderFrame(size=size) if size is not None else frame_for(surface)
    surface.clear()
    if not transparent:
        surface.fill_background(state.appearance.background)

    glow_f = max(0.0, min(1.0, float(glow)))
    if glow_f > 0.0:
        surface.set_glow(state.appearance.sigil, frame.glow_blur(glow_f))
    else:
        surface.set_glow(None, 0.0)

    # 外形を最後に描いて最前面に置く。
    render_inner_layers(surface, state, frame)
    draw_outline(
        surface,
        frame.outline(state.outer_vertices()),
        color=state.appearance.sigil,
        width=frame.stroke_width,
    )
    surface.set_glow(None, 0.0)


def render_empty(surface: DrawingSurface, state: SigilState) -> None:
    """背景だけを描く（未生成時の表示）。"""
    surface.clear()
    surface.fill_background(state.appearance.background)


__all__ = [
    "DrawContext",
    "all_pairs",
    "draw_outline",
    "frame_for",
    "layer_drawer",
    "registered_kinds",
    "render",
    "render_empty",
    "render_inner_layers",
    "skip_pattern_order",
]
