"""
どこで: `src/sigilgen/core/layer_state.py`。
何を: 内側レイヤ 6 種のパラメータ束（タグ付き union）と、それを乱数から確定させる生成器を定義する。
なぜ: 乱数はすべて生成時に消費し、以降の再描画・エクスポートが同じ LayerState だけを入力にできるようにするため。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Sequence, TypeAlias, TypeVar, Union

import numpy as np

from sigilgen.core.geometry import CENTER, DEFAULT_SAMPLE_ATTEMPTS, Point, rejection_sample_point
from sigilgen.core.random_polygon import RandomPolygonSpec
from sigilgen.core.shape import FALLBACK_SHAPE, RING_SHAPES, ShapeType, shape_vertices

_logger = logging.getLogger(__name__)

COMPLEXITY_MIN = 1
COMPLEXITY_MAX = 5
DEFAULT_COMPLEXITY = 3


class LayerKind(str, Enum):
    """内側レイヤの種類。"""

    RADIAL_LINES = "radialLines"
    PERIMETER_CONNECTIONS = "perimeterConnections"
    CONCENTRIC_SHAPES = "concentricShapes"
    SCATTER_DOTS = "scatterDots"
    CROSS_LINES = "crossLines"
    CONNECTED_NODES = "connectedNodes"


LAYER_KINDS: tuple[LayerKind, ...] = tuple(LayerKind)


class ConnectionStyle(str, Enum):
    """周上の点どうしの結び方。"""

    SEQUENTIAL = "sequential"
    SKIP_PATTERN = "skip-pattern"
    ALL_PAIRS = "all-pairs"


class NodeStyle(str, Enum):
    """ノードどうしの結び方。"""

    CHAIN = "chain"
    STAR = "star"
    ALL_PAIRS = "all-pairs"


# --- レイヤごとのパラメータ束 ---


@dataclass(frozen=True, slots=True)
class RadialLines:
    """中心から外形半径までの放射線。"""

    kind: ClassVar[LayerKind] = LayerKind.RADIAL_LINES

    angles: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class PerimeterConnections:
    """外形の周上の点（昇順の t）を結ぶ線。"""

    kind: ClassVar[LayerKind] = LayerKind.PERIMETER_CONNECTIONS

    positions: tuple[float, ...]
    style: ConnectionStyle


@dataclass(frozen=True, slots=True)
class Ring:
    """同心図形 1 つ分。"""

    shape: ShapeType
    scale: float
    rotation: float


@dataclass(frozen=True, slots=True)
class ConcentricShapes:
    """中心を共有する縮小図形の列。"""

    kind: ClassVar[LayerKind] = LayerKind.CONCENTRIC_SHAPES

    rings: tuple[Ring, ...]


@dataclass(frozen=True, slots=True)
class ScatterDots:
    """形状内部に散らした塗り円。

    Notes
    -----
    `relaxed` は試行上限に達し、距離制約を満たさないまま採用した点の数。
    """

    kind: ClassVar[LayerKind] = LayerKind.SCATTER_DOTS

    points: tuple[Point, ...]
    radius_multiplier: float
    relaxed: int = 0


@dataclass(frozen=True, slots=True)
class CrossLine:
    """中心からオフセットした弦 1 本分。"""

    angle: float
    offset: float


@dataclass(frozen=True, slots=True)
class CrossLines:
    """形状を横切る弦の列。"""

    kind: ClassVar[LayerKind] = LayerKind.CROSS_LINES

    lines: tuple[CrossLine, ...]


@dataclass(frozen=True, slots=True)
class ConnectedNodes:
    """線で結ばれた中抜きリングのノード群。"""

    kind: ClassVar[LayerKind] = LayerKind.CONNECTED_NODES

    points: tuple[Point, ...]
    style: NodeStyle
    radius_multiplier: float
    relaxed: int = 0


LayerBundle: TypeAlias = Union[
    RadialLines,
    PerimeterConnections,
    ConcentricShapes,
    ScatterDots,
    CrossLines,
    ConnectedNodes,
]

BUNDLE_TYPES: dict[LayerKind, type] = {
    RadialLines.kind: RadialLines,
    PerimeterConnections.kind: PerimeterConnections,
    ConcentricShapes.kind: ConcentricShapes,
    ScatterDots.kind: ScatterDots,
    CrossLines.kind: CrossLines,
    ConnectedNodes.kind: ConnectedNodes,
}


@dataclass(frozen=True, slots=True)
class LayerState:
    """1 回の生成で確定した内側レイヤ群。

    Notes
    -----
    描画順は `layers` の順。同じ種類は 1 度しか現れない。
    """

    layers: tuple[LayerBundle, ...]

    def __post_init__(self) -> None:
        kinds = [layer.kind for layer in self.layers]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"LayerState に同じ種類のレイヤが重複している: {kinds}")

    @property
    def kinds(self) -> tuple[LayerKind, ...]:
        return tuple(layer.kind for layer in self.layers)

    def get(self, kind: LayerKind) -> LayerBundle | None:
        for layer in self.layers:
            if layer.kind is kind:
                return layer
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON 化しやすい dict を返す。"""
        return {"layers": [_bundle_to_dict(layer) for layer in self.layers]}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, float):
        return float(value)
    return value


def _bundle_to_dict(bundle: LayerBundle) -> dict[str, Any]:
    out: dict[str, Any] = {"kind": bundle.kind.value}
    out.update(_plain(bundle))
    return out


# --- 生成 ---


def validate_complexity(complexity: int) -> int:
    """complexity を 1..5 の int として検証して返す。"""
    try:
        level = int(complexity)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"complexity は整数である必要がある: got={complexity!r}") from exc
    if level != complexity or not COMPLEXITY_MIN <= level <= COMPLEXITY_MAX:
        raise ValueError(
            f"complexity は {COMPLEXITY_MIN}..{COMPLEXITY_MAX} の整数である必要がある: got={complexity!r}"
        )
    return level


def _biased_unit(rng: np.random.Generator, complexity: int) -> float:
    """complexity で偏らせた [0,1) の一様値を返す。

    `u ** (3 / complexity)`。3 で一様、低いほど 0 寄り、高いほど 1 寄り。
    """
    return float(rng.random()) ** (float(DEFAULT_COMPLEXITY) / float(complexity))


def _count(rng: np.random.Generator, lo: int, hi: int, complexity: int) -> int:
    """[lo, hi] の個数を complexity に応じて引く。"""
    n = lo + int(math.floor(_biased_unit(rng, complexity) * (hi - lo + 1)))
    return min(n, hi)


_E = TypeVar("_E")

# (選択肢 0, 選択肢 1, 選択肢 2) = (0.4, 0.4, 0.2)
_STYLE_BANDS = (0.4, 0.8)


def _pick_band(rng: np.random.Generator, choices: Sequence[_E]) -> _E:
    r = float(rng.random())
    if r < _STYLE_BANDS[0]:
        return choices[0]
    if r < _STYLE_BANDS[1]:
        return choices[1]
    return choices[2]


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _place_points(
    rng: np.random.Generator,
    vertices: np.ndarray | None,
    n: int,
    *,
    min_distance: float,
    center_exclusion: float = 0.0,
    attempts: int = DEFAULT_SAMPLE_ATTEMPTS,
) -> tuple[tuple[Point, ...], int]:
    """距離制約つきの棄却サンプリングで n 点を置く。

    Returns
    -------
    tuple[tuple[Point, ...], int]
        配置した点列と、制約を満たせず最良候補で妥協した点の数。

    Notes
    -----
    ある点で試行上限に達した場合、それまでの候補のうち制約の破り方が最も小さいものを採用する。
    生成全体を失敗させることはしない。
    """
    placed: list[Point] = []
    relaxed = 0
    for _ in range(n):
        best: Point | None = None
        best_slack = -math.inf
        accepted = False
        for _attempt in range(int(attempts)):
            candidate = rejection_sample_point(vertices, rng)
            slack = math.inf
            if center_exclusion > 0.0:
                slack = _distance(candidate, CENTER) - center_exclusion
            for other in placed:
                slack = min(slack, _distance(candidate, other) - min_distance)
            if slack >= 0.0:
                placed.append(candidate)
                accepted = True
                break
            if slack > best_slack:
                best, best_slack = candidate, slack
        if not accepted:
            relaxed += 1
            placed.append(best if best is not None else rejection_sample_point(vertices, rng))
    return tuple(placed), relaxed


def _radial_lines(rng, ctx: "_BuildContext") -> RadialLines:
    n = _count(rng, 2, 5, ctx.complexity)
    return RadialLines(angles=tuple(float(rng.random()) * 2.0 * math.pi for _ in range(n)))


def _perimeter_connections(rng, ctx: "_BuildContext") -> PerimeterConnections:
    n = _count(rng, 3, 5, ctx.complexity)
    positions = sorted(float(rng.random()) for _ in range(n))
    style = _pick_band(
        rng,
        (ConnectionStyle.SEQUENTIAL, ConnectionStyle.SKIP_PATTERN, ConnectionStyle.ALL_PAIRS),
    )
    return PerimeterConnections(positions=tuple(positions), style=style)


def _concentric_shapes(rng, ctx: "_BuildContext") -> ConcentricShapes:
    n = _count(rng, 1, 3, ctx.complexity)
    rings: list[Ring] = []
    for _ in range(n):
        if float(rng.random()) < 0.5:
            ring_shape = ctx.shape if ctx.shape is not ShapeType.RANDOM else FALLBACK_SHAPE
        else:
            idx = int(math.floor(float(rng.random()) * len(RING_SHAPES)))
            ring_shape = RING_SHAPES[min(idx, len(RING_SHAPES) - 1)]
        scale = 0.2 + float(rng.random()) * 0.45
        rotation = (float(rng.random()) - 0.5) * math.pi * 0.4
        rings.append(Ring(shape=ring_shape, scale=scale, rotation=rotation))
    return ConcentricShapes(rings=tuple(rings))


def _scatter_dots(rng, ctx: "_BuildContext") -> ScatterDots:
    n = _count(rng, 2, 5, ctx.complexity)
    points, relaxed = _place_points(
        rng, ctx.vertices, n, min_distance=0.15, center_exclusion=0.12
    )
    if relaxed:
        _logger.debug("scatterDots: %d 点を制約緩和で配置", relaxed)
    multiplier = 0.5 + float(rng.random()) * 1.0
    return ScatterDots(points=points, radius_multiplier=multiplier, relaxed=relaxed)


def _cross_lines(rng, ctx: "_BuildContext") -> CrossLines:
    n = _count(rng, 1, 3, ctx.complexity)
    lines = tuple(
        CrossLine(angle=float(rng.random()) * math.pi, offset=(float(rng.random()) - 0.5) * 0.25)
        for _ in range(n)
    )
    return CrossLines(lines=lines)


def _connected_nodes(rng, ctx: "_BuildContext") -> ConnectedNodes:
    n = _count(rng, 2, 5, ctx.complexity)
    points, relaxed = _place_points(rng, ctx.vertices, n, min_distance=0.18)
    if relaxed:
        _logger.debug("connectedNodes: %d 点を制約緩和で配置", relaxed)
    style = _pick_band(rng, (NodeStyle.CHAIN, NodeStyle.STAR, NodeStyle.ALL_PAIRS))
    multiplier = 0.6 + float(rng.random()) * 0.8
    return ConnectedNodes(points=points, style=style, radius_multiplier=multiplier, relaxed=relaxed)


@dataclass(frozen=True, slots=True)
class _BuildContext:
    shape: ShapeType
    vertices: np.ndarray | None
    complexity: int


_BUILDERS: dict[LayerKind, Callable[[np.random.Generator, _BuildContext], LayerBundle]] = {
    LayerKind.RADIAL_LINES: _radial_lines,
    LayerKind.PERIMETER_CONNECTIONS: _perimeter_connections,
    LayerKind.CONCENTRIC_SHAPES: _concentric_shapes,
    LayerKind.SCATTER_DOTS: _scatter_dots,
    LayerKind.CROSS_LINES: _cross_lines,
    LayerKind.CONNECTED_NODES: _connected_nodes,
}


def build_layer_state(
    shape: ShapeType | str,
    complexity: int = DEFAULT_COMPLEXITY,
    *,
    rng: np.random.Generator | None = None,
    random_polygon: RandomPolygonSpec | None = None,
) -> LayerState:
    """外形に対する LayerState を 1 つ生成する。

    Parameters
    ----------
    shape : ShapeType or str
        現在の外形。点配置の内外判定に使う。
    complexity : int, optional
        1..5。要素数の期待値を単調に増やす。
    rng : np.random.Generator or None, optional
        乱数源。None の場合は毎回新しいエントロピーで初期化する。
    random_polygon : RandomPolygonSpec or None, optional
        `shape` が random のときの頂点仕様。

    Returns
    -------
    LayerState
        2〜3 種類のレイヤを持つ不変な状態。
    """
    shape_t = ShapeType.parse(shape)
    level = validate_complexity(complexity)
    gen = rng if rng is not None else np.random.default_rng()

    # レイヤ数は complexity に依らず {2, 3} から一様に選ぶ。
    count = _count(gen, 2, 3, DEFAULT_COMPLEXITY)
    order = gen.permutation(len(LAYER_KINDS))
    chosen = [LAYER_KINDS[int(i)] for i in order[:count]]

    ctx = _BuildContext(
        shape=shape_t,
        vertices=shape_vertices(shape_t, random_polygon),
        complexity=level,
    )
    layers = tuple(_BUILDERS[kind](gen, ctx) for kind in chosen)
    _logger.debug(
        "layer state: shape=%s complexity=%d layers=%s",
        shape_t.value,
        level,
        [kind.value for kind in chosen],
    )
    return LayerState(layers=layers)


__all__ = [
    "BUNDLE_TYPES",
    "COMPLEXITY_MAX",
    "COMPLEXITY_MIN",
    "ConcentricShapes",
    "ConnectedNodes",
    "ConnectionStyle",
    "CrossLine",
    "CrossLines",
    "DEFAULT_COMPLEXITY",
    "LAYER_KINDS",
    "LayerBundle",
    "LayerKind",
    "LayerState",
    "NodeStyle",
    "PerimeterConnections",
    "RadialLines",
    "Ring",
    "ScatterDots",
    "build_layer_state",
    "validate_complexity",
]
