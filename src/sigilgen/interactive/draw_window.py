# どこで: `src/sigilgen/interactive/draw_window.py`。
# 何を: SigilSession の描画面を pyglet ウィンドウへ表示し、キー入力を生成/保存の操作へ割り当てる。
# なぜ: pyglet 依存をこの層に閉じ込め、core/render/export をヘッドレスに保つため。

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import pyglet
from pyglet.window import key

from sigilgen.core.layer_state import COMPLEXITY_MAX, COMPLEXITY_MIN
from sigilgen.core.output_paths import default_output_path
from sigilgen.core.runtime_config import runtime_config
from sigilgen.core.shape import ShapeType
from sigilgen.interactive.frame_clock import real_time_clock_factory
from sigilgen.interactive.session import SigilSession

_logger = logging.getLogger(__name__)

# 1..9, 0 の順に ShapeType の定義順を割り当てる。
_SHAPE_KEYS = (key._1, key._2, key._3, key._4, key._5, key._6, key._7, key._8, key._9, key._0)
SHAPE_BY_KEY: dict[int, ShapeType] = dict(zip(_SHAPE_KEYS, list(ShapeType)))


class PygletScheduler:
    """`pyglet.clock` へ 1 回きりのコールバックを登録するスケジューラ。"""

    def schedule(self, callback: Callable[[], None], delay: float) -> Callable[[float], None]:
        def _fire(dt: float) -> None:
            callback()

        pyglet.clock.schedule_once(_fire, max(0.0, float(delay)))
        return _fire

    def cancel(self, handle: Any) -> None:
        pyglet.clock.unschedule(handle)


@dataclass(slots=True)
class _Texture:
    version: int = -1
    image: Any = None


def _session_image_data(session: SigilSession) -> Any:
    """描画面の内容を pyglet の ImageData に変換して返す。"""
    image = session.image()
    w, h = image.size
    # 負の pitch は行が上から並ぶことを表す。
    return pyglet.image.ImageData(w, h, "RGBA", image.tobytes(), pitch=-w * 4)


def _timestamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


def save_current(session: SigilSession, ext: str) -> None:
    """既定の出力先へ現在のシジルを保存する。"""
    if not session.state.is_generated:
        _logger.info("未生成のため保存しません")
        return
    path = default_output_path(kind=ext, ext=ext, run_id=_timestamp())
    session.export(path)


def handle_key(session: SigilSession, symbol: int) -> bool:
    """キーに対応する操作を実行し、処理したかどうかを返す。"""
    if symbol in (key.SPACE, key.G):
        session.generate()
        return True
    if symbol in SHAPE_BY_KEY:
        shape = SHAPE_BY_KEY[symbol]
        session.set_shape(shape)
        _logger.info("shape: %s", shape.value)
        return True
    if symbol in (key.PLUS, key.EQUAL, key.NUM_ADD):
        session.set_complexity(min(COMPLEXITY_MAX, session.state.complexity + 1))
        _logger.info("complexity: %d", session.state.complexity)
        return True
    if symbol in (key.MINUS, key.NUM_SUBTRACT):
        session.set_complexity(max(COMPLEXITY_MIN, session.state.complexity - 1))
        _logger.info("complexity: %d", session.state.complexity)
        return True
    if symbol == key.T:
        flag = session.toggle_transparent()
        _logger.info("transparent export: %s", flag)
        return True
    if symbol == key.S:
        save_current(session, "svg")
        return True
    if symbol == key.P:
        save_current(session, "png")
        return True
    return False


def create_draw_window(session: SigilSession) -> pyglet.window.Window:
    """セッションの描画面を表示するウィンドウを生成する。"""
    window = pyglet.window.Window(  # type: ignore[abstract]
        width=session.size,
        height=session.size,
        resizable=False,
        caption="Sigil Generator",
    )
    x, y = runtime_config().window_position
    window.set_location(int(x), int(y))

    texture = _Texture()

    def on_draw() -> None:
        if texture.version != session.frame_version:
            texture.image = _session_image_data(session)
            texture.version = session.frame_version
        window.clear()
        if texture.image is not None:
            texture.image.blit(0, 0)

    def on_key_press(symbol: int, modifiers: int) -> None:
        try:
            handle_key(session, symbol)
        except Exception:
            _logger.exception("キー操作の処理に失敗しました: symbol=%s", symbol)

    window.push_handlers(on_draw=on_draw, on_key_press=on_key_press)
    return window


def run_window(session: SigilSession, window: pyglet.window.Window, *, fps: float) -> None:
    """ウィンドウが閉じられるまで fps 間隔で描画するループを回す。"""

    def request_exit(*_: object) -> None:
        pyglet.app.exit()

    window.push_handlers(on_close=request_exit)

    def draw(dt: float) -> None:
        if window in pyglet.app.windows:
            window.draw(dt)

    if fps <= 0:
        pyglet.clock.schedule(draw)
    else:
        pyglet.clock.schedule_interval(draw, 1.0 / float(fps))

    try:
        pyglet.app.run(interval=None)
    finally:
        pyglet.clock.unschedule(draw)
        session.animator.cancel()


def run(
    *,
    size: int | None = None,
    shape: ShapeType | str | None = None,
    background: str | None = None,
    sigil: str | None = None,
    complexity: int | None = None,
) -> None:
    """対話ウィンドウを開き、閉じられるまでブロックする。"""
    session = SigilSession(size=size, scheduler=PygletScheduler(), clock_factory=real_time_clock_factory())
    if shape is not None:
        session.set_shape(shape)
    if background is not None or sigil is not None:
        session.set_colors(background=background, sigil=sigil)
    if complexity is not None:
        session.set_complexity(complexity)

    window = create_draw_window(session)
    session.draw_empty()
    _logger.info("Space/G: 生成, 1-9/0: 外形, +/-: complexity, T: 透過切替, S: SVG 保存, P: PNG 保存")
    run_window(session, window, fps=runtime_config().animation_fps)


__all__ = [
    "PygletScheduler",
    "SHAPE_BY_KEY",
    "create_draw_window",
    "handle_key",
    "run",
    "run_window",
    "save_current",
]
