# どこで: `src/sigilgen/api/__init__.py`。
# 何を: 公開 API（generate / export / run）を再エクスポートする。
# なぜ: ユーザーコードと CLI が `sigilgen.api` だけを import すれば済むようにするため。

from __future__ import annotations

from .sigil import export, generate, new_state

__all__ = ["export", "generate", "new_state", "run"]


def run(*args, **kwargs):
    """公開 run API へのラッパ（遅延インポートで GUI 依存を後回しにする）。"""

    from .runner import run as _run

    return _run(*args, **kwargs)
