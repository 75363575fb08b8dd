# どこで: `src/sigilgen/render/recording.py`。
# 何を: 描画意図を DrawCommand 列として記録する DrawingSurface 実装を提供する。
# なぜ: 描画順・クリップの対応・glow 値をバックエンド無しで比較/検証できるようにするため。

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from sigilgen.core.geometry import Point
from sigilgen.render.frame import Outline


@dataclass(frozen=True, slots=True)
class DrawCommand:
    """記録された描画呼び出し 1 件。"""

    op: str
    args: tuple[tuple[str, Any], ...] = ()

    def get(self, name: str, default: Any = None) -> Any:
        for k, v in self.args:
            if k == name:
                return v
        return default


def _points(points: Sequence[Point]) -> tuple[Point, ...]:
    return tuple((float(x), float(y)) for x, y in points)


@dataclass
class RecordingSurface:
    """呼び出しを記録するだけの描画面。"""

    width: int = 800
    height: int = 800
    commands: list[DrawCommand] = field(default_factory=list)
    clip_depth: int = 0

    def _record(self, op: str, **kwargs: Any) -> None:
        self.commands.append(DrawCommand(op=op, args=tuple(sorted(kwargs.items()))))

    def clear(self) -> None:
        self.clip_depth = 0
        self._record("clear")

    def fill_background(self, color: str) -> None:
        self._record("fill_background", color=color)

    def set_glow(self, color: str | None, blur: float) -> None:
        self._record("set_glow", color=color, blur=float(blur))

    def stroke_polyline(
        self,
        points: Sequence[Point],
        *,
        color: str,
        width: float,
        closed: bool = False,
        join: str = "miter",
    ) -> None:
        self._record(
            "stroke_polyline",
            points=_points(points),
            color=color,
            width=float(width),
            closed=bool(closed),
            join=join,
            clip_depth=self.clip_depth,
        )

    def fill_polygon(self, points: Sequence[Point], *, color: str) -> None:
        self._record("fill_polygon", points=_points(points), color=color, clip_depth=self.clip_depth)

    def stroke_circle(self, center: Point, radius: float, *, color: str, width: float) -> None:
        self._record(
            "stroke_circle",
            center=(float(center[0]), float(center[1])),
            radius=float(radius),
            color=color,
            width=float(width),
            clip_depth=self.clip_depth,
        )

    def fill_circle(self, center: Point, radius: float, *, color: str) -> None:
        self._record(
            "fill_circle",
            center=(float(center[0]), float(center[1])),
            radius=float(radius),
            color=color,
            clip_depth=self.clip_depth,
        )

    def push_clip(self, outline: Outline) -> None:
        self.clip_depth += 1
        self._record("push_clip", outline=outline)

    def pop_clip(self) -> None:
        if self.clip_depth <= 0:
            raise RuntimeError("pop_clip が push_clip より多く呼ばれた")
        self.clip_depth -= 1
        self._record("pop_clip")

    def ops(self) -> list[str]:
        return [c.op for c in self.commands]

    def reset(self) -> None:
        self.commands.clear()
        self.clip_depth = 0


__all__ = ["DrawCommand", "RecordingSurface"]
