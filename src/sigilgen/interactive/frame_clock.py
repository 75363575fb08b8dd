# どこで: `src/sigilgen/interactive/frame_clock.py`。
# 何を: glow アニメーションの経過時間（秒）を与える時計を提供する。
# なぜ: 画面表示は実時間で、連番 PNG 書き出しは固定 fps のタイムラインで同じ Animator を回すため。

from __future__ import annotations

import time
from typing import Callable, Protocol


class FrameClock(Protocol):
    """アニメーション 1 回分の経過時間を返す時計。"""

    def t(self) -> float: ...

    def tick(self) -> None: ...


ClockFactory = Callable[[], FrameClock]


class RealTimeClock:
    """生成時刻からの実経過時間を返す時計。

    Notes
    -----
    `t` は `perf_counter()` の差分（秒）。`tick` は何もしない。
    """

    def __init__(self, *, start_time: float | None = None) -> None:
        self._start_time = time.perf_counter() if start_time is None else float(start_time)

    def t(self) -> float:
        return float(time.perf_counter() - self._start_time)

    def tick(self) -> None:
        return


class RecordingClock:
    """固定 fps で 1 フレームずつ進む時計。

    Notes
    -----
    `t` は `t0 + frame_index/fps`。実時間に依らず、書き出すフレーム数が duration と fps だけで決まる。
    """

    def __init__(self, *, fps: float, t0: float = 0.0) -> None:
        _fps = float(fps)
        if _fps <= 0:
            raise ValueError(f"fps は正の値である必要がある: got={fps!r}")
        self._t0 = float(t0)
        self._fps = _fps
        self._frame_index = 0

    @property
    def fps(self) -> float:
        return float(self._fps)

    @property
    def frame_index(self) -> int:
        """現在のフレーム番号（0-based）。"""
        return int(self._frame_index)

    def t(self) -> float:
        return float(self._t0 + float(self._frame_index) / float(self._fps))

    def tick(self) -> None:
        self._frame_index += 1


def real_time_clock_factory() -> ClockFactory:
    """アニメーション開始ごとに新しい RealTimeClock を作る factory を返す。"""
    return lambda: RealTimeClock()


def recording_clock_factory(fps: float) -> ClockFactory:
    """アニメーション開始ごとに 0 秒起点の RecordingClock を作る factory を返す。"""
    _fps = float(fps)
    if _fps <= 0:
        raise ValueError(f"fps は正の値である必要がある: got={fps!r}")
    return lambda: RecordingClock(fps=_fps)


__all__ = [
    "ClockFactory",
    "FrameClock",
    "RealTimeClock",
    "RecordingClock",
    "real_time_clock_factory",
    "recording_clock_factory",
]
