"""
どこで: `src/sigilgen/api/runner.py`。公開 API のランナー実装。
何を: 設定ファイルを反映してから pyglet の対話ウィンドウを開く。
なぜ: `sigilgen.api.run()` と CLI の `run` サブコマンドが同じ起動手順を使うため。
"""

from __future__ import annotations

from pathlib import Path

from sigilgen.core.runtime_config import set_config_path
from sigilgen.core.shape import ShapeType
from sigilgen.interactive.draw_window import run as _run_window


def run(
    *,
    config_path: str | Path | None = None,
    size: int | None = None,
    shape: ShapeType | str | None = None,
    background: str | None = None,
    sigil: str | None = None,
    complexity: int | None = None,
) -> None:
    """対話ウィンドウを開き、閉じられるまでブロックする。

    Parameters
    ----------
    config_path : str or Path or None
        設定ファイル（config.yaml）のパス。指定した場合は探索より優先する。
    size : int or None
        キャンバス一辺（px）。None なら設定の `canvas.size`。
    shape, background, sigil, complexity
        初期状態。None なら既定値/設定値。
    """
    if config_path is not None:
        set_config_path(config_path)
    _run_window(size=size, shape=shape, background=background, sigil=sigil, complexity=complexity)


__all__ = ["run"]
