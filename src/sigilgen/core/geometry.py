"""
どこで: `src/sigilgen/core/geometry.py`。
何を: 正多角形・星形・周長パラメータ化・内外判定・bbox・棄却サンプリングの純関数を提供する。
なぜ: 乱数以外の入力に対して決定的な頂点計算を 1 箇所に集め、生成と描画で共有するため。
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

Point = tuple[float, float]
BBox = tuple[float, float, float, float]

DEFAULT_SAMPLE_ATTEMPTS = 50
CENTER: Point = (0.5, 0.5)


def _frozen(coords: np.ndarray) -> np.ndarray:
    """float64 (N, 2) に揃え、writeable=False にして返す。"""
    out = np.asarray(coords, dtype=np.float64)
    if out.ndim != 2 or out.shape[1] != 2:
        raise ValueError("vertices は shape (N,2) の 2 次元配列である必要がある")
    out = np.array(out, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def regular_polygon(sides: int, start_angle: float = 0.0) -> np.ndarray:
    """単位円上に等間隔で並ぶ `sides` 個の頂点を返す。

    Parameters
    ----------
    sides : int
        頂点数。3 以上。
    start_angle : float, optional
        先頭頂点の角度 [rad]。

    Returns
    -------
    np.ndarray
        shape (sides, 2) の読み取り専用配列。
    """
    n = int(sides)
    if n < 3:
        raise ValueError(f"sides は 3 以上である必要がある: got={sides!r}")
    angles = float(start_angle) + 2.0 * math.pi * np.arange(n, dtype=np.float64) / n
    return _frozen(np.stack([np.cos(angles), np.sin(angles)], axis=1))


def star_polygon(
    outer: float = 1.0,
    inner: float = 0.50,
    points: int = 5,
    start_angle: float = -math.pi / 2,
) -> np.ndarray:
    """外周/内周半径を交互にとる `2 * points` 個の星形頂点を返す。

    偶数番目が外周、奇数番目が内周。反転星は `start_angle=+π/2` を渡す。
    """
    n = int(points)
    if n < 2:
        raise ValueError(f"points は 2 以上である必要がある: got={points!r}")
    idx = np.arange(2 * n, dtype=np.float64)
    angles = float(start_angle) + math.pi * idx / n
    radii = np.where(idx % 2 == 0, float(outer), float(inner))
    return _frozen(np.stack([radii * np.cos(angles), radii * np.sin(angles)], axis=1))


def similarity(
    vertices: np.ndarray,
    *,
    scale: float = 1.0,
    rotation: float = 0.0,
) -> np.ndarray:
    """原点まわりに拡大・回転した頂点列を返す。"""
    c, s = math.cos(float(rotation)), math.sin(float(rotation))
    rot = np.array([[c, -s], [s, c]], dtype=np.float64)
    coords = np.asarray(vertices, dtype=np.float64) * float(scale)
    # row-vector のため転置で適用する。
    return _frozen(coords @ rot.T)


def edge_lengths(vertices: np.ndarray) -> np.ndarray:
    """閉多角形の各辺（i → i+1、最後は先頭へ戻る）の長さを返す。"""
    coords = np.asarray(vertices, dtype=np.float64)
    nxt = np.roll(coords, -1, axis=0)
    return np.hypot(nxt[:, 0] - coords[:, 0], nxt[:, 1] - coords[:, 1])


def perimeter_point(vertices: np.ndarray | None, t: float) -> Point:
    """周上の割合 `t` を境界上の点へ写す。

    Parameters
    ----------
    vertices : np.ndarray or None
        閉多角形の頂点列。None の場合は単位円として扱う。
    t : float
        周上の割合。通常は [0, 1)。

    Returns
    -------
    Point
        円なら角度 `2πt` の単位円上の点、多角形なら弧長 `t * 周長` の位置を
        該当辺内で線形補間した点。

    Notes
    -----
    t=0 では先頭頂点を厳密に返す。t が 1 以上に達した場合は先頭頂点へ戻る。
    """
    tf = float(t)
    if vertices is None:
        angle = tf * 2.0 * math.pi
        return (math.cos(angle), math.sin(angle))

    coords = np.asarray(vertices, dtype=np.float64)
    lengths = edge_lengths(coords)
    target = tf * float(lengths.sum())
    n = int(coords.shape[0])
    for i in range(n):
        seg_len = float(lengths[i])
        if target <= seg_len:
            if seg_len <= 0.0:
                return (float(coords[i, 0]), float(coords[i, 1]))
            frac = target / seg_len
            a = coords[i]
            b = coords[(i + 1) % n]
            return (
                float(a[0] + (b[0] - a[0]) * frac),
                float(a[1] + (b[1] - a[1]) * frac),
            )
        target -= seg_len
    return (float(coords[0, 0]), float(coords[0, 1]))


def point_in_polygon(point: Sequence[float], vertices: np.ndarray) -> bool:
    """偶奇規則のレイキャストで点が多角形内部にあるかを返す。"""
    px, py = float(point[0]), float(point[1])
    coords = np.asarray(vertices, dtype=np.float64)
    inside = False
    n = int(coords.shape[0])
    j = n - 1
    for i in range(n):
        xi, yi = float(coords[i, 0]), float(coords[i, 1])
        xj, yj = float(coords[j, 0]), float(coords[j, 1])
        if (yi > py) != (yj > py) and px < (xj - xi) * (py - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def bounding_box(vertices: np.ndarray) -> BBox:
    """軸平行 bbox `(min_x, min_y, max_x, max_y)` を返す。"""
    coords = np.asarray(vertices, dtype=np.float64)
    if coords.shape[0] == 0:
        raise ValueError("空の頂点列には bbox を定義できない")
    mins = coords.min(axis=0)
    maxs = coords.max(axis=0)
    return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])


def rejection_sample_point(
    vertices: np.ndarray | None,
    rng: np.random.Generator,
    *,
    attempts: int = DEFAULT_SAMPLE_ATTEMPTS,
) -> Point:
    """形状内部の一様な正規化点 `(nx, ny)` ∈ [0,1]² を返す。

    Parameters
    ----------
    vertices : np.ndarray or None
        外形の頂点列。None の場合は円。
    rng : np.random.Generator
        一様乱数源。
    attempts : int, optional
        多角形での試行回数上限。

    Returns
    -------
    Point
        円: 面積一様に取った円盤内の点を中心 (0.5, 0.5)、半径 0.5 に写した値。
        多角形: bbox 内で一様に取り、内部判定を通った点を bbox で正規化した値。

    Notes
    -----
    試行回数を使い切った場合は中心 (0.5, 0.5) を返す。配置補助のため黙って戻す。
    """
    if vertices is None:
        angle = float(rng.random()) * 2.0 * math.pi
        r = math.sqrt(float(rng.random()))
        return (0.5 + r * 0.5 * math.cos(angle), 0.5 + r * 0.5 * math.sin(angle))

    min_x, min_y, max_x, max_y = bounding_box(vertices)
    width = max_x - min_x
    height = max_y - min_y
    if width <= 0.0 or height <= 0.0:
        return CENTER
    for _ in range(int(attempts)):
        x = min_x + float(rng.random()) * width
        y = min_y + float(rng.random()) * height
        if point_in_polygon((x, y), vertices):
            return ((x - min_x) / width, (y - min_y) / height)
    return CENTER


def _orientation(p: Point, q: Point, r: Point) -> float:
    return (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    """線分 p1-p2 と q1-q2 が端点以外で真に交差するかを返す。"""
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)
    return ((d1 > 0) != (d2 > 0)) and ((d3 > 0) != (d4 > 0)) and 0.0 not in (d1, d2, d3, d4)


def polygon_is_simple(vertices: np.ndarray) -> bool:
    """閉多角形の非隣接辺どうしが交差しないかを返す。"""
    coords = [(float(x), float(y)) for x, y in np.asarray(vertices, dtype=np.float64)]
    n = len(coords)
    for i in range(n):
        a1, a2 = coords[i], coords[(i + 1) % n]
        for j in range(i + 1, n):
            # 隣接辺（共有頂点を持つ）は除外する。
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            b1, b2 = coords[j], coords[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                return False
    return True


__all__ = [
    "BBox",
    "CENTER",
    "DEFAULT_SAMPLE_ATTEMPTS",
    "Point",
    "bounding_box",
    "edge_lengths",
    "perimeter_point",
    "point_in_polygon",
    "polygon_is_simple",
    "regular_polygon",
    "rejection_sample_point",
    "segments_intersect",
    "similarity",
    "star_polygon",
]
