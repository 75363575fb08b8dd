# どこで: `src/sigilgen/core/random_polygon.py`。
# 何を: random 外形の頂点仕様（角度 + 半径割合）を生成・保持する。
# なぜ: 頂点そのものではなく仕様を保存し、任意の出力解像度で同じ多角形を再構成するため。

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

MIN_VERTICES = 4
MAX_VERTICES = 8
MIN_RADIUS_FRACTION = 0.55
MAX_RADIUS_FRACTION = 1.0
ANGLE_ATTEMPTS = 64


@dataclass(frozen=True, slots=True)
class PolarVertex:
    """単位半径フレームでの極座標頂点。"""

    angle: float
    radius_fraction: float


@dataclass(frozen=True, slots=True)
class RandomPolygonSpec:
    """角度昇順に並んだ極座標頂点列。

    Notes
    -----
    角度昇順に接続するため、閉多角形は自己交差しない。
    """

    points: tuple[PolarVertex, ...]

    def __post_init__(self) -> None:
        if len(self.points) < 3:
            raise ValueError("RandomPolygonSpec は 3 頂点以上である必要がある")
        angles = [p.angle for p in self.points]
        if any(b <= a for a, b in zip(angles[:-1], angles[1:])):
            raise ValueError("RandomPolygonSpec の angle は狭義単調増加である必要がある")

    def __len__(self) -> int:
        return len(self.points)

    def vertices(self) -> np.ndarray:
        """単位半径フレームの頂点 shape (N, 2) を返す。"""
        angles = np.array([p.angle for p in self.points], dtype=np.float64)
        radii = np.array([p.radius_fraction for p in self.points], dtype=np.float64)
        coords = np.stack([radii * np.cos(angles), radii * np.sin(angles)], axis=1)
        coords.setflags(write=False)
        return coords

    def to_dict(self) -> list[dict[str, float]]:
        return [
            {"angle": float(p.angle), "radius_fraction": float(p.radius_fraction)}
            for p in self.points
        ]


def max_angle_gap(angles: Sequence[float]) -> float:
    """昇順の角度列について、先頭への折り返しを含めた隣接間隔の最大値を返す。"""
    if not angles:
        return 2.0 * math.pi
    gaps = [b - a for a, b in zip(angles[:-1], angles[1:])]
    gaps.append(angles[0] + 2.0 * math.pi - angles[-1])
    return max(gaps)


def _draw_angles(rng: np.random.Generator, n: int) -> list[float]:
    """最大間隔が π 未満になる昇順の角度列を引く。

    間隔が π 以上あると閉じる辺が他の辺と交差し得るため、満たすまで引き直す。
    上限回数で満たせなければ等間隔の角度をランダムに回転して使う。
    """
    for _ in range(ANGLE_ATTEMPTS):
        angles = sorted(float(rng.random()) * 2.0 * math.pi for _ in range(n))
        if max_angle_gap(angles) < math.pi:
            return angles
    step = 2.0 * math.pi / n
    offset = float(rng.random()) * step
    return [offset + step * i for i in range(n)]


def generate_random_polygon(rng: np.random.Generator) -> RandomPolygonSpec:
    """4〜8 頂点のランダム多角形仕様を生成する。

    角度は [0, 2π) から一様に取って昇順に並べ、半径割合は [0.55, 1.0) から一様に取る。

    Notes
    -----
    角度の最大間隔を π 未満に保つため、原点から全頂点が見える（星形）多角形になり、
    角度順に結んだ閉多角形は自己交差しない。
    """
    n = MIN_VERTICES + int(math.floor(float(rng.random()) * (MAX_VERTICES - MIN_VERTICES + 1)))
    n = min(n, MAX_VERTICES)
    angles = _draw_angles(rng, n)

    # 同一角度が出た場合は後続をわずかにずらし、狭義単調増加を保つ。
    for i in range(1, len(angles)):
        if angles[i] <= angles[i - 1]:
            angles[i] = math.nextafter(angles[i - 1], math.inf)

    span = MAX_RADIUS_FRACTION - MIN_RADIUS_FRACTION
    points = tuple(
        PolarVertex(angle=angle, radius_fraction=MIN_RADIUS_FRACTION + float(rng.random()) * span)
        for angle in angles
    )
    return RandomPolygonSpec(points=points)


__all__ = [
    "ANGLE_ATTEMPTS",
    "MAX_RADIUS_FRACTION",
    "MAX_VERTICES",
    "MIN_RADIUS_FRACTION",
    "MIN_VERTICES",
    "PolarVertex",
    "RandomPolygonSpec",
    "generate_random_polygon",
    "max_angle_gap",
]
