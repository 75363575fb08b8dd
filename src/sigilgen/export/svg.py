"""
どこで: `src/sigilgen/export/svg.py`。
何を: SigilState を SVG テキストとして組み立て/保存する（内側レイヤは PNG 埋め込み、外形はベクタ）。
なぜ: 外形線を解像度非依存のまま残しつつ、クリップ済みの内側レイヤを確定状態から再現するため。
"""

from __future__ import annotations

import logging
from pathlib import Path

from sigilgen.core.sigil_state import SigilState
from sigilgen.export.image import image_data_url, render_inner_image, resolve_size
from sigilgen.render.frame import CircleOutline, RenderFrame

_logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"
_XLINK_NS = "http://www.w3.org/1999/xlink"
_FLOAT_DECIMALS = 3


def _fmt(value: float, *, decimals: int = _FLOAT_DECIMALS) -> str:
    """SVG 出力向けに float を決定的な文字列へ変換して返す。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-0") and float(text) == 0.0:
        return text[1:]
    return text


def outline_markup(state: SigilState, frame: RenderFrame) -> str:
    """外形線の `<circle>` / `<polygon>` 要素を返す。"""
    color = state.appearance.sigil
    stroke_width = _fmt(frame.stroke_width)
    outline = frame.outline(state.outer_vertices())
    if isinstance(outline, CircleOutline):
        cx, cy = outline.center
        return (
            f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(outline.radius)}" '
            f'fill="none" stroke="{color}" stroke-width="{stroke_width}"/>'
        )
    points = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in outline.points)
    return (
        f'<polygon points="{points}" fill="none" stroke="{color}" '
        f'stroke-width="{stroke_width}" stroke-linejoin="miter"/>'
    )


def build_svg(
    state: SigilState,
    *,
    size: int | None = None,
    transparent: bool = False,
) -> str:
    """SVG 文書の文字列を返す。

    Notes
    -----
    要素順は 背景 `<rect>`（transparent でない場合）→ 内側レイヤの `<image>` → 外形線。
    内側レイヤは glow 無し・背景無しで 1 回だけラスタライズし、PNG data URL として埋め込む。
    """
    px = resolve_size(size)
    frame = RenderFrame(size=px)

    lines: list[str] = []
    lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        (
            f'<svg xmlns="{_SVG_NS}" xmlns:xlink="{_XLINK_NS}" viewBox="0 0 {px} {px}" '
            f'width="{px}" height="{px}">'
        )
    )
    if not transparent:
        lines.append(f'  <rect width="100%" height="100%" fill="{state.appearance.background}"/>')
    if state.layer_state is not None:
        href = image_data_url(render_inner_image(state, size=px))
        lines.append(f'  <image href="{href}" width="{px}" height="{px}"/>')
    lines.append(f"  {outline_markup(state, frame)}")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def export_svg(
    state: SigilState,
    path: str | Path,
    *,
    size: int | None = None,
    transparent: bool = False,
) -> Path:
    """シジルを SVG として保存する。

    Parameters
    ----------
    state : SigilState
        描画する状態。
    path : str or Path
        出力先パス。
    size : int or None, optional
        viewBox と埋め込み画像の一辺（px）。None なら設定の `canvas.size`。
    transparent : bool, optional
        True なら背景 `<rect>` を出力しない。

    Returns
    -------
    Path
        保存先パス。
    """
    _path = Path(path)
    text = build_svg(state, size=size, transparent=transparent)

    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(text)

    _logger.info("SVG を保存しました: %s", _path)
    return _path


__all__ = ["build_svg", "export_svg", "outline_markup"]
