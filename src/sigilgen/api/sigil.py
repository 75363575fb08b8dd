"""
どこで: `src/sigilgen/api/sigil.py`。
何を: ヘッドレスの生成 `generate` と保存 `export` を提供する。
なぜ: ウィンドウを開かずにシジルを作り、PNG/SVG として書き出す導線を固定するため。
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from sigilgen.core.appearance import Appearance
from sigilgen.core.runtime_config import runtime_config
from sigilgen.core.shape import ShapeType
from sigilgen.core.sigil_state import SigilState
from sigilgen.core.sigil_state import generate as _generate_state
from sigilgen.export.formats import export_sigil


def new_state(
    *,
    shape: ShapeType | str = ShapeType.CIRCLE,
    background: str | None = None,
    sigil: str | None = None,
    complexity: int | None = None,
) -> SigilState:
    """未生成の SigilState を作る。省略した色/complexity は設定値を使う。"""
    cfg = runtime_config()
    return SigilState(
        shape=ShapeType.parse(shape),
        appearance=Appearance(
            background=cfg.background_color if background is None else background,
            sigil=cfg.sigil_color if sigil is None else sigil,
        ),
        complexity=cfg.complexity if complexity is None else complexity,
    )


def generate(
    shape: ShapeType | str = ShapeType.CIRCLE,
    *,
    complexity: int | None = None,
    background: str | None = None,
    sigil: str | None = None,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> SigilState:
    """シジルを 1 つ生成して返す。

    Parameters
    ----------
    shape : ShapeType or str
        外形（`"hexagon"` などの値、または列挙名）。
    complexity : int or None, optional
        1..5。None なら設定の `generation.complexity`。
    background, sigil : str or None, optional
        `#RRGGBB`。None なら設定値。
    seed : int or None, optional
        rng 未指定時に `default_rng(seed)` へ渡す。
    rng : numpy.random.Generator or None, optional
        乱数生成器。指定時は seed を無視する。

    Raises
    ------
    ValueError
        外形名・色・complexity が不正な場合。
    """
    state = new_state(shape=shape, background=background, sigil=sigil, complexity=complexity)
    gen = rng if rng is not None else np.random.default_rng(seed)
    return _generate_state(state, rng=gen)


def export(
    state: SigilState,
    path: str | Path,
    *,
    fmt: str | None = None,
    size: int | None = None,
    transparent: bool | None = None,
) -> Path:
    """状態を PNG または SVG として保存する。

    Notes
    -----
    fmt 未指定なら拡張子で判定する。`transparent=None` は設定の `export.transparent` を使う。
    """
    flag = runtime_config().transparent if transparent is None else bool(transparent)
    return export_sigil(state, path, fmt=fmt, size=size, transparent=flag)


__all__ = ["export", "generate", "new_state"]
