# どこで: `src/sigilgen/render/surface.py`。
# 何を: Renderer が描画意図を発行する先（DrawingSurface）のプロトコルを定義する。
# なぜ: 描画処理を Pillow / 記録用などの具体バックエンドから切り離し、同じ呼び出し列を再生できるようにするため。

from __future__ import annotations

from typing import Protocol, Sequence

from sigilgen.core.geometry import Point
from sigilgen.render.frame import Outline


class DrawingSurface(Protocol):
    """即時モードの描画面。

    Notes
    -----
    色は `#RRGGBB`。`push_clip` と `pop_clip` は必ず対で呼ぶ。
    glow は `set_glow` 以降の stroke/fill に掛かる。
    """

    width: int
    height: int

    def clear(self) -> None:
        """全面を透明に戻し、クリップと glow を解除する。"""
        ...

    def fill_background(self, color: str) -> None: ...

    def set_glow(self, color: str | None, blur: float) -> None: ...

    def stroke_polyline(
        self,
        points: Sequence[Point],
        *,
        color: str,
        width: float,
        closed: bool = False,
        join: str = "miter",
    ) -> None: ...

    def fill_polygon(self, points: Sequence[Point], *, color: str) -> None: ...

    def stroke_circle(self, center: Point, radius: float, *, color: str, width: float) -> None: ...

    def fill_circle(self, center: Point, radius: float, *, color: str) -> None: ...

    def push_clip(self, outline: Outline) -> None:
        """現在の状態を保存し、以降の描画を outline の内部に制限する。"""
        ...

    def pop_clip(self) -> None:
        """直前の `push_clip` を解除する。"""
        ...


__all__ = ["DrawingSurface"]
