"""
どこで: `src/sigilgen/interactive/animator.py`。
何を: 生成直後の glow 演出（Idle → Animating → Idle）と、その刻みを回すスケジューラを提供する。
なぜ: 同時に走る描画ループを常に 1 本へ制限し、最後は必ず glow=0 の静止描画で終えるため。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Any, Callable, Protocol

from sigilgen.interactive.frame_clock import ClockFactory, FrameClock, real_time_clock_factory

_logger = logging.getLogger(__name__)

DEFAULT_DURATION = 0.8
DEFAULT_FPS = 60.0
# 立ち上がりに使う duration の割合。
RISE_FRACTION = 0.15


def smoothstep(x: float) -> float:
    g = min(1.0, max(0.0, float(x)))
    return g * g * (3.0 - 2.0 * g)


def glow_at(progress: float) -> float:
    """進捗 0..1 に対する glow 強度を返す。

    Notes
    -----
    最初の 15% で 0→1 に線形に上げ、残り 85% で 1→0 に下げ、最後に smoothstep を掛ける。
    範囲外の進捗は両端へ丸める。
    """
    p = min(1.0, max(0.0, float(progress)))
    if p < RISE_FRACTION:
        raw = p / RISE_FRACTION
    else:
        raw = 1.0 - (p - RISE_FRACTION) / (1.0 - RISE_FRACTION)
    return smoothstep(raw)


class Scheduler(Protocol):
    """1 回だけ呼ばれる遅延コールバックを登録/解除する。"""

    def schedule(self, callback: Callable[[], None], delay: float) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


@dataclass(frozen=True, slots=True)
class _Pending:
    handle: int
    callback: Callable[[], None]
    delay: float


class ManualScheduler:
    """明示的に `run_pending()` した時だけコールバックを実行するスケジューラ。

    ヘッドレスの連番書き出しとテストで使う。delay は記録するだけで待たない。
    """

    def __init__(self) -> None:
        self._pending: list[_Pending] = []
        self._ids = count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, callback: Callable[[], None], delay: float) -> int:
        handle = next(self._ids)
        self._pending.append(_Pending(handle=handle, callback=callback, delay=float(delay)))
        return handle

    def cancel(self, handle: Any) -> None:
        self._pending = [p for p in self._pending if p.handle != handle]

    def run_pending(self) -> int:
        """現時点で登録済みのコールバックを 1 巡実行し、実行数を返す。"""
        batch = self._pending
        self._pending = []
        for item in batch:
            item.callback()
        return len(batch)

    def run_until_idle(self, *, max_steps: int = 100_000) -> int:
        """登録が無くなるまで実行し、総実行数を返す。"""
        total = 0
        while self._pending:
            if total >= max_steps:
                raise RuntimeError(f"スケジューラが {max_steps} 回で収束しなかった")
            total += self.run_pending()
        return total


class AnimatorState(str, Enum):
    IDLE = "idle"
    ANIMATING = "animating"


class GlowAnimator:
    """glow 付き再描画を一定時間くり返し、最後に glow=0 で描いて止まる。

    Parameters
    ----------
    render : Callable[[float], None]
        glow 強度を受け取り、描画面を全消去して描き直す関数。
    scheduler : Scheduler
        次の刻みを登録する先。
    clock_factory : Callable[[], FrameClock] or None, optional
        `start()` ごとに新しい時計を作る。None なら実時間。
    duration : float, optional
        アニメーション時間（秒）。
    fps : float, optional
        刻みの目標頻度。
    on_finished : Callable[[], None] or None, optional
        終端の glow=0 描画の直後に呼ばれる。

    Notes
    -----
    登録中のハンドルを持つのはこのクラスだけで、同時に 1 本しか走らない。
    `start()` は走行中の刻みを取り消してから elapsed=0 で始め直す。
    """

    def __init__(
        self,
        render: Callable[[float], None],
        scheduler: Scheduler,
        clock_factory: ClockFactory | None = None,
        *,
        duration: float = DEFAULT_DURATION,
        fps: float = DEFAULT_FPS,
        on_finished: Callable[[], None] | None = None,
    ) -> None:
        if float(duration) <= 0:
            raise ValueError(f"duration は正の値である必要がある: got={duration!r}")
        if float(fps) <= 0:
            raise ValueError(f"fps は正の値である必要がある: got={fps!r}")
        self._render = render
        self._scheduler = scheduler
        self._clock_factory = clock_factory if clock_factory is not None else real_time_clock_factory()
        self._duration = float(duration)
        self._interval = 1.0 / float(fps)
        self._on_finished = on_finished
        self._clock: FrameClock | None = None
        self._handle: Any = None
        self._state = AnimatorState.IDLE

    @property
    def state(self) -> AnimatorState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state is AnimatorState.ANIMATING

    @property
    def duration(self) -> float:
        return self._duration

    def start(self) -> None:
        """アニメーションを最初から始める。"""
        self._cancel_pending()
        self._clock = self._clock_factory()
        self._state = AnimatorState.ANIMATING
        self._handle = self._scheduler.schedule(self._step, 0.0)

    def cancel(self) -> None:
        """走行中なら描画せずに止める。"""
        self._cancel_pending()
        self._clock = None
        self._state = AnimatorState.IDLE

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _step(self) -> None:
        self._handle = None
        clock = self._clock
        if clock is None or self._state is not AnimatorState.ANIMATING:
            return

        progress = clock.t() / self._duration
        if progress >= 1.0:
            self._clock = None
            self._state = AnimatorState.IDLE
            self._render(0.0)
            _logger.debug("glow animation finished")
            if self._on_finished is not None:
                self._on_finished()
            return

        try:
            self._render(glow_at(progress))
        except Exception:
            self._clock = None
            self._state = AnimatorState.IDLE
            raise
        clock.tick()
        self._handle = self._scheduler.schedule(self._step, self._interval)


__all__ = [
    "AnimatorState",
    "DEFAULT_DURATION",
    "DEFAULT_FPS",
    "GlowAnimator",
    "ManualScheduler",
    "RISE_FRACTION",
    "Scheduler",
    "glow_at",
    "smoothstep",
]
