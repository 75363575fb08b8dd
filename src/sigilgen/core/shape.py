# どこで: `src/sigilgen/core/shape.py`。
# 何を: 外形 ShapeType と、形状ごとの頂点生成テーブルを定義する。
# なぜ: 外形・同心リング・クリップ・SVG が同じ頂点計算を共有し、出力間の一致を保つため。

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from sigilgen.core.geometry import regular_polygon, star_polygon

if TYPE_CHECKING:
    from sigilgen.core.random_polygon import RandomPolygonSpec


class ShapeType(str, Enum):
    """外形の種類。値はハイフン区切りの名前。"""

    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    DIAMOND = "diamond"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"
    STAR = "star"
    STAR_INVERTED = "star-inverted"
    RANDOM = "random"

    @property
    def is_circle(self) -> bool:
        return self is ShapeType.CIRCLE

    @classmethod
    def parse(cls, value: "ShapeType | str") -> "ShapeType":
        """名前（`STAR_INVERTED`）または値（`star-inverted`）から ShapeType を返す。

        Raises
        ------
        ValueError
            未知の形状名の場合。
        """
        if isinstance(value, ShapeType):
            return value
        text = str(value).strip()
        for item in cls:
            if text == item.value or text.upper().replace("-", "_") == item.name:
                return item
        choices = ", ".join(item.value for item in cls)
        raise ValueError(f"未知の shape: {value!r}（選択肢: {choices}）")


# 同心リングで使える形状（random は頂点集合を持たないため除外）。
RING_SHAPES: tuple[ShapeType, ...] = tuple(s for s in ShapeType if s is not ShapeType.RANDOM)

# random 形状の頂点が未生成のときに使う既定形状。
FALLBACK_SHAPE = ShapeType.PENTAGON

# (辺数, 開始角)。
_REGULAR_TABLE: dict[ShapeType, tuple[int, float]] = {
    ShapeType.SQUARE: (4, -math.pi / 4),
    ShapeType.TRIANGLE: (3, -math.pi / 2),
    ShapeType.DIAMOND: (4, -math.pi / 2),
    ShapeType.PENTAGON: (5, -math.pi / 2),
    ShapeType.HEXAGON: (6, -math.pi / 2),
    ShapeType.OCTAGON: (8, -math.pi / 8),
}

STAR_POINTS = 5
STAR_INNER_RADIUS = 0.50


def shape_vertices(
    shape: ShapeType,
    random_polygon: "RandomPolygonSpec | None" = None,
) -> np.ndarray | None:
    """単位半径フレーム（原点中心）での外形頂点を返す。

    Parameters
    ----------
    shape : ShapeType
        外形。
    random_polygon : RandomPolygonSpec or None
        `shape` が random のときに使う頂点仕様。

    Returns
    -------
    np.ndarray or None
        shape (N, 2) の読み取り専用配列。円の場合は None。

    Notes
    -----
    random で `random_polygon` が None の場合は既定の五角形を返す（例外にはしない）。
    """
    if shape is ShapeType.CIRCLE:
        return None
    if shape is ShapeType.RANDOM:
        if random_polygon is None:
            return shape_vertices(FALLBACK_SHAPE)
        return random_polygon.vertices()
    if shape is ShapeType.STAR:
        return star_polygon(
            inner=STAR_INNER_RADIUS, points=STAR_POINTS, start_angle=-math.pi / 2
        )
    if shape is ShapeType.STAR_INVERTED:
        return star_polygon(
            inner=STAR_INNER_RADIUS, points=STAR_POINTS, start_angle=math.pi / 2
        )
    sides, start_angle = _REGULAR_TABLE[shape]
    return regular_polygon(sides, start_angle)


def vertex_count(shape: ShapeType) -> int:
    """形状の頂点数を返す（円は 0、random は既定形状の値）。"""
    vertices = shape_vertices(shape)
    return 0 if vertices is None else int(vertices.shape[0])


__all__ = [
    "FALLBACK_SHAPE",
    "RING_SHAPES",
    "STAR_INNER_RADIUS",
    "STAR_POINTS",
    "ShapeType",
    "shape_vertices",
    "vertex_count",
]
