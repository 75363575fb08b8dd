# どこで: `src/sigilgen/render/frame.py`。
# 何を: 出力サイズから中心・半径・線幅・ドット半径を決め、単位フレームの座標をキャンバス座標へ写す。
# なぜ: 描画・クリップ・SVG 外形が同じ寸法計算を共有し、解像度に依らず同じ見た目にするため。

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from sigilgen.core.geometry import Point, bounding_box, similarity

# キャンバス一辺に対する比率。
SHAPE_RATIO = 0.70
STROKE_RATIO = 0.02
DOT_RATIO = 0.03
THIN_STROKE_FACTOR = 0.6
GLOW_RATIO = 0.06


@dataclass(frozen=True, slots=True)
class CircleOutline:
    """円の外形（キャンバス座標）。"""

    center: Point
    radius: float


@dataclass(frozen=True, slots=True)
class PolygonOutline:
    """閉多角形の外形（キャンバス座標）。"""

    points: tuple[Point, ...]


Outline = CircleOutline | PolygonOutline


@dataclass(frozen=True, slots=True)
class RenderFrame:
    """正方キャンバス 1 枚分の寸法。"""

    size: int

    def __post_init__(self) -> None:
        if int(self.size) <= 0:
            raise ValueError(f"size は正の値である必要がある: got={self.size!r}")
        object.__setattr__(self, "size", int(self.size))

    @property
    def center(self) -> Point:
        half = self.size / 2.0
        return (half, half)

    @property
    def radius(self) -> float:
        return self.size * SHAPE_RATIO / 2.0

    @property
    def stroke_width(self) -> float:
        return self.size * STROKE_RATIO

    @property
    def thin_width(self) -> float:
        return self.stroke_width * THIN_STROKE_FACTOR

    @property
    def dot_radius(self) -> float:
        return self.size * DOT_RATIO

    @property
    def padding(self) -> float:
        """散布点が外形線に触れないための内側余白。"""
        return self.dot_radius + self.stroke_width / 2.0

    def glow_blur(self, glow: float) -> float:
        return float(glow) * self.size * GLOW_RATIO

    def to_canvas(self, xy: Point) -> Point:
        """単位半径フレームの点をキャンバス座標へ写す。"""
        cx, cy = self.center
        r = self.radius
        return (cx + r * float(xy[0]), cy + r * float(xy[1]))

    def polygon_points(
        self,
        unit_vertices: np.ndarray,
        *,
        scale: float = 1.0,
        rotation: float = 0.0,
    ) -> tuple[Point, ...]:
        """単位フレームの頂点列を拡大・回転してキャンバス座標で返す。"""
        coords = unit_vertices
        if scale != 1.0 or rotation != 0.0:
            coords = similarity(unit_vertices, scale=scale, rotation=rotation)
        return tuple(self.to_canvas((float(x), float(y))) for x, y in coords)

    def outline(self, unit_vertices: np.ndarray | None) -> Outline:
        """外形（円または閉多角形）をキャンバス座標で返す。"""
        if unit_vertices is None:
            return CircleOutline(center=self.center, radius=self.radius)
        return PolygonOutline(points=self.polygon_points(unit_vertices))

    def normalized_to_canvas(self, point: Point, unit_vertices: np.ndarray | None) -> Point:
        """正規化点 (nx, ny) を外形内部のキャンバス座標へ写す。

        Notes
        -----
        円: 中心からのオフセット `(n - 0.5) * 2` を `(半径 - 余白)` で拡大する。
        多角形: 外形 bbox を余白ぶん内側へ縮めた矩形内の位置として扱う。
        """
        nx, ny = float(point[0]), float(point[1])
        padding = self.padding
        if unit_vertices is None:
            cx, cy = self.center
            inner = self.radius - padding
            return (cx + (nx - 0.5) * 2.0 * inner, cy + (ny - 0.5) * 2.0 * inner)

        min_x, min_y, max_x, max_y = bounding_box(np.asarray(self.polygon_points(unit_vertices)))
        inner_w = (max_x - min_x) - padding * 2.0
        inner_h = (max_y - min_y) - padding * 2.0
        return (min_x + padding + nx * inner_w, min_y + padding + ny * inner_h)


__all__ = [
    "CircleOutline",
    "DOT_RATIO",
    "GLOW_RATIO",
    "Outline",
    "PolygonOutline",
    "RenderFrame",
    "SHAPE_RATIO",
    "STROKE_RATIO",
    "THIN_STROKE_FACTOR",
]
