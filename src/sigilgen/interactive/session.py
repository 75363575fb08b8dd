# どこで: `src/sigilgen/interactive/session.py`。
# 何を: 1 つの SigilState・描画面・Animator を束ね、生成/再描画/保存の操作を提供する。
# なぜ: ウィンドウやキー入力から独立した形で、操作ごとの状態遷移をテスト可能にするため。

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import numpy as np
from PIL import Image

from sigilgen.core.appearance import Appearance
from sigilgen.core.runtime_config import runtime_config
from sigilgen.core.shape import ShapeType
from sigilgen.core.sigil_state import SigilState, generate, with_colors, with_complexity, with_shape
from sigilgen.export.formats import export_sigil
from sigilgen.export.image import resolve_size
from sigilgen.export.pil_surface import PillowSurface
from sigilgen.interactive.animator import GlowAnimator, ManualScheduler, Scheduler
from sigilgen.interactive.frame_clock import ClockFactory
from sigilgen.render.renderer import render, render_empty

_logger = logging.getLogger(__name__)


def default_state() -> SigilState:
    """設定の色と complexity を反映した未生成の状態を返す。"""
    cfg = runtime_config()
    return SigilState(
        appearance=Appearance(background=cfg.background_color, sigil=cfg.sigil_color),
        complexity=cfg.complexity,
    )


class SigilSession:
    """対話操作 1 回分の状態。

    Notes
    -----
    描画面を書き換えるのは `_render_frame` と `draw_empty` だけで、いずれも全消去してから描く。
    `frame_version` は描画面が書き換わるたびに増え、表示側がテクスチャ更新の要否を判定する。
    """

    def __init__(
        self,
        *,
        state: SigilState | None = None,
        size: int | None = None,
        scheduler: Scheduler | None = None,
        clock_factory: ClockFactory | None = None,
        rng: np.random.Generator | None = None,
        on_generated: Callable[[SigilState], None] | None = None,
    ) -> None:
        cfg = runtime_config()
        self.state = state if state is not None else default_state()
        self.size = resolve_size(size)
        self.surface = PillowSurface(self.size)
        self.transparent_export = bool(cfg.transparent)
        self.frame_version = 0
        self._rng = rng if rng is not None else np.random.default_rng()
        self._on_generated = on_generated
        self.animator = GlowAnimator(
            self._render_frame,
            scheduler if scheduler is not None else ManualScheduler(),
            clock_factory,
            duration=cfg.animation_duration,
            fps=cfg.animation_fps,
        )

    def _render_frame(self, glow: float) -> None:
        render(self.surface, self.state, glow=glow)
        self.frame_version += 1

    # --- 操作 ---

    def generate(self) -> SigilState:
        """新しい乱数で生成し、glow アニメーションを始める。"""
        self.state = generate(self.state, rng=self._rng)
        _logger.debug("generated: shape=%s kinds=%s", self.state.shape.value, [k.value for k in self.state.layer_state.kinds])
        self.animator.start()
        if self._on_generated is not None:
            self._on_generated(self.state)
        return self.state

    def redraw(self) -> None:
        """確定済み状態を glow=0 で描き直す。未生成なら生成する。

        アニメーション中は次の刻みが最新の状態で描くため何もしない。
        """
        if not self.state.is_generated:
            self.generate()
            return
        if self.animator.is_animating:
            return
        self._render_frame(0.0)

    def draw_empty(self) -> None:
        """背景だけを描く。"""
        self.animator.cancel()
        render_empty(self.surface, self.state)
        self.frame_version += 1

    def set_shape(self, shape: ShapeType | str) -> None:
        """外形を切り替える（生成済み状態は外形が変わると破棄される）。"""
        self.state = with_shape(self.state, shape)
        if self.state.is_generated:
            self.redraw()
        else:
            self.draw_empty()

    def set_colors(self, *, background: str | None = None, sigil: str | None = None) -> None:
        """色を変えて描き直す。LayerState は保持する。"""
        self.state = with_colors(self.state, background=background, sigil=sigil)
        if self.state.is_generated:
            self.redraw()
        else:
            self.draw_empty()

    def set_complexity(self, complexity: int) -> None:
        """次回生成の complexity を変える。現在の LayerState は保持する。"""
        self.state = with_complexity(self.state, complexity)

    def toggle_transparent(self) -> bool:
        self.transparent_export = not self.transparent_export
        return self.transparent_export

    def image(self) -> Image.Image:
        """描画面の現在内容を返す。"""
        return self.surface.to_image()

    def export(self, path: str | Path, *, transparent: bool | None = None) -> Path:
        """現在の状態を拡張子に応じて PNG または SVG で保存する。"""
        flag = self.transparent_export if transparent is None else bool(transparent)
        return export_sigil(self.state, path, size=self.size, transparent=flag)


__all__ = ["SigilSession", "default_state"]
