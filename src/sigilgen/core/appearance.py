"""
どこで: `src/sigilgen/core/appearance.py`。
何を: 背景色・シジル色（Appearance）と色表現の変換ユーティリティを定義する。
なぜ: 色の変更が LayerState を無効化しないよう、見た目の状態を生成結果から分離するため。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

ColorRGB255 = tuple[int, int, int]

DEFAULT_BACKGROUND = "#000000"
DEFAULT_SIGIL_COLOR = "#FF0000"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_hex(value: str) -> str:
    """`#rgb` / `#rrggbb`（# 省略可）を `#RRGGBB` に正規化して返す。

    Raises
    ------
    ValueError
        16 進カラーとして解釈できない場合。
    """
    text = str(value).strip()
    m = _HEX_RE.match(text)
    if m is None:
        raise ValueError(f"color は #RRGGBB 形式である必要がある: got={value!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.upper()}"


def hex_to_rgb255(value: str) -> ColorRGB255:
    """`#RRGGBB` を 0..255 int の RGB に変換して返す。"""
    digits = normalize_hex(value)[1:]
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb255_to_hex(rgb: ColorRGB255) -> str:
    """0..255 int の RGB を `#RRGGBB` に変換して返す（範囲外は clamp）。"""
    out: list[int] = []
    for v in rgb:
        iv = int(v)
        out.append(0 if iv < 0 else 255 if iv > 255 else iv)
    r, g, b = out
    return f"#{r:02X}{g:02X}{b:02X}"


@dataclass(frozen=True, slots=True)
class Appearance:
    """描画時の色指定。"""

    background: str = DEFAULT_BACKGROUND
    sigil: str = DEFAULT_SIGIL_COLOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "background", normalize_hex(self.background))
        object.__setattr__(self, "sigil", normalize_hex(self.sigil))

    def with_colors(
        self,
        *,
        background: str | None = None,
        sigil: str | None = None,
    ) -> "Appearance":
        """指定した色だけを差し替えた Appearance を返す。"""
        return replace(
            self,
            background=self.background if background is None else background,
            sigil=self.sigil if sigil is None else sigil,
        )


__all__ = [
    "Appearance",
    "ColorRGB255",
    "DEFAULT_BACKGROUND",
    "DEFAULT_SIGIL_COLOR",
    "hex_to_rgb255",
    "normalize_hex",
    "rgb255_to_hex",
]
