# どこで: `src/sigilgen/export/formats.py`。
# 何を: 出力フォーマット名/拡張子から PNG・SVG の書き出し関数を選ぶ。
# なぜ: API・CLI・interactive の保存操作が同じ判定規則を共有するため。

from __future__ import annotations

from pathlib import Path

from sigilgen.core.sigil_state import SigilState
from sigilgen.export.image import export_png
from sigilgen.export.svg import export_svg

_FORMAT_ALIASES = {
    "png": "png",
    "image": "png",
    "svg": "svg",
}


def resolve_format(path: str | Path, fmt: str | None = None) -> str:
    """`png` または `svg` を返す。fmt 未指定なら拡張子で判定する。

    Raises
    ------
    ValueError
        未対応のフォーマット/拡張子の場合。
    """
    if fmt is not None:
        key = str(fmt).lower().strip()
        if key not in _FORMAT_ALIASES:
            raise ValueError(f"未対応の出力フォーマット: fmt={fmt!r}")
        return _FORMAT_ALIASES[key]

    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix not in ("png", "svg"):
        raise ValueError(f"未対応の出力フォーマット: suffix={Path(path).suffix!r}")
    return suffix


def export_sigil(
    state: SigilState,
    path: str | Path,
    *,
    fmt: str | None = None,
    size: int | None = None,
    transparent: bool = False,
) -> Path:
    """状態を PNG または SVG として保存し、保存先パスを返す。"""
    kind = resolve_format(path, fmt)
    if kind == "svg":
        return export_svg(state, path, size=size, transparent=transparent)
    return export_png(state, path, size=size, transparent=transparent)


__all__ = ["export_sigil", "resolve_format"]
