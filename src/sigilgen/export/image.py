"""
どこで: `src/sigilgen/export/image.py`。
何を: SigilState を Pillow でラスタライズし、PNG ファイル/バイト列/data URL として出力する。
なぜ: 保存済み LayerState を新たな乱数無しで何度でも同じ画素へ再現するため。
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path

from PIL import Image

from sigilgen.core.runtime_config import runtime_config
from sigilgen.core.sigil_state import SigilState
from sigilgen.export.pil_surface import PillowSurface
from sigilgen.render.renderer import render, render_inner_layers

_logger = logging.getLogger(__name__)


def resolve_size(size: int | None) -> int:
    """出力サイズを決める。None なら設定の `canvas.size` を使う。"""
    value = runtime_config().canvas_size if size is None else size
    try:
        out = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"size は正の整数である必要がある: got={size!r}") from exc
    if out <= 0:
        raise ValueError(f"size は正の整数である必要がある: got={size!r}")
    return out


def render_image(
    state: SigilState,
    *,
    size: int | None = None,
    transparent: bool = False,
    glow: float = 0.0,
) -> Image.Image:
    """シジルを RGBA 画像として描いて返す。"""
    surface = PillowSurface(resolve_size(size))
    render(surface, state, glow=glow, transparent=transparent)
    return surface.to_image()


def render_inner_image(state: SigilState, *, size: int | None = None) -> Image.Image:
    """内側レイヤだけ（背景・glow・外形線なし）を透明背景の画像として返す。"""
    surface = PillowSurface(resolve_size(size))
    render_inner_layers(surface, state)
    return surface.to_image()


def _encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def png_bytes(
    state: SigilState,
    *,
    size: int | None = None,
    transparent: bool = False,
) -> bytes:
    """シジルを PNG エンコードしたバイト列を返す。"""
    return _encode_png(render_image(state, size=size, transparent=transparent))


def image_data_url(image: Image.Image) -> str:
    """画像を `data:image/png;base64,...` 形式の文字列へ変換して返す。"""
    encoded = base64.b64encode(_encode_png(image)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def png_data_url(
    state: SigilState,
    *,
    size: int | None = None,
    transparent: bool = False,
) -> str:
    """シジルの PNG data URL を返す。"""
    return image_data_url(render_image(state, size=size, transparent=transparent))


def export_png(
    state: SigilState,
    path: str | Path,
    *,
    size: int | None = None,
    transparent: bool = False,
) -> Path:
    """シジルを PNG として保存する。

    Parameters
    ----------
    state : SigilState
        描画する状態。LayerState が無ければ外形だけを描く。
    path : str or Path
        出力先パス。親ディレクトリは作成する。
    size : int or None, optional
        出力一辺（px）。None なら設定の `canvas.size`。
    transparent : bool, optional
        True なら背景を塗らない。

    Returns
    -------
    Path
        保存先パス。
    """
    _path = Path(path)
    _path.parent.mkdir(parents=True, exist_ok=True)
    image = render_image(state, size=size, transparent=transparent)
    image.save(_path, format="PNG")
    _logger.info("PNG を保存しました: %s", _path)
    return _path


__all__ = [
    "export_png",
    "image_data_url",
    "png_bytes",
    "png_data_url",
    "render_image",
    "render_inner_image",
    "resolve_size",
]
