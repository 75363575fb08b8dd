# どこで: `src/sigilgen/core/sigil_state.py`。
# 何を: 外形・見た目・complexity と、生成で確定したランダム状態を束ねる SigilState を定義する。
# なぜ: 生成器インスタンスのフィールドを直接書き換える代わりに、状態を受け取り新しい状態を返す形にするため。

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from sigilgen.core.appearance import Appearance
from sigilgen.core.layer_state import (
    DEFAULT_COMPLEXITY,
    LayerState,
    build_layer_state,
    validate_complexity,
)
from sigilgen.core.random_polygon import RandomPolygonSpec, generate_random_polygon
from sigilgen.core.shape import ShapeType, shape_vertices

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SigilState:
    """1 つのシジルを描くのに必要な状態一式。

    Parameters
    ----------
    shape : ShapeType
        外形。
    appearance : Appearance
        背景色とシジル色。
    complexity : int
        1..5。
    random_polygon : RandomPolygonSpec or None
        random 外形の頂点仕様。generate でのみ作られる。
    layer_state : LayerState or None
        内側レイヤ。generate でのみ作られる。None は未生成。
    """

    shape: ShapeType = ShapeType.CIRCLE
    appearance: Appearance = Appearance()
    complexity: int = DEFAULT_COMPLEXITY
    random_polygon: RandomPolygonSpec | None = None
    layer_state: LayerState | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", ShapeType.parse(self.shape))
        object.__setattr__(self, "complexity", validate_complexity(self.complexity))

    @property
    def is_generated(self) -> bool:
        return self.layer_state is not None

    def outer_vertices(self) -> np.ndarray | None:
        """単位半径フレームの外形頂点（円は None）を返す。"""
        return shape_vertices(self.shape, self.random_polygon)

    def to_dict(self) -> dict[str, Any]:
        """JSON 化しやすい dict を返す（セッションをまたぐ保存用ではない）。"""
        return {
            "shape": self.shape.value,
            "background": self.appearance.background,
            "sigil": self.appearance.sigil,
            "complexity": self.complexity,
            "random_polygon": (
                None if self.random_polygon is None else self.random_polygon.to_dict()
            ),
            "layer_state": None if self.layer_state is None else self.layer_state.to_dict(),
        }


def generate(state: SigilState, *, rng: np.random.Generator | None = None) -> SigilState:
    """新しい乱数でランダム状態を作り直した SigilState を返す。

    Notes
    -----
    外形が random のときだけ頂点仕様を再生成する。それ以外の外形では既存の仕様を保持する。
    """
    gen = rng if rng is not None else np.random.default_rng()
    random_polygon = state.random_polygon
    if state.shape is ShapeType.RANDOM:
        random_polygon = generate_random_polygon(gen)
        _logger.debug("random polygon: %d vertices", len(random_polygon))
    layer_state = build_layer_state(
        state.shape,
        state.complexity,
        rng=gen,
        random_polygon=random_polygon,
    )
    return replace(state, random_polygon=random_polygon, layer_state=layer_state)


def with_shape(state: SigilState, shape: ShapeType | str) -> SigilState:
    """外形を差し替えた SigilState を返す。

    外形が変わる場合はランダム状態を両方とも破棄する（次の generate で作り直す）。
    """
    shape_t = ShapeType.parse(shape)
    if shape_t is state.shape:
        return state
    return replace(state, shape=shape_t, random_polygon=None, layer_state=None)


def with_colors(
    state: SigilState,
    *,
    background: str | None = None,
    sigil: str | None = None,
) -> SigilState:
    """色だけを差し替えた SigilState を返す（ランダム状態は保持する）。"""
    appearance = state.appearance.with_colors(background=background, sigil=sigil)
    return replace(state, appearance=appearance)


def with_complexity(state: SigilState, complexity: int) -> SigilState:
    """complexity を差し替えた SigilState を返す（次の generate から反映）。"""
    return replace(state, complexity=validate_complexity(complexity))


__all__ = ["SigilState", "generate", "with_colors", "with_complexity", "with_shape"]
