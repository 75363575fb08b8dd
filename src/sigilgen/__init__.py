# どこで: `src/sigilgen/__init__.py`。
# 何を: ルート `sigilgen` パッケージを定義する。
# なぜ: import 起点を `sigilgen` に統一するため。

from __future__ import annotations

from sigilgen.api import export, generate, new_state, run

__all__ = ["export", "generate", "new_state", "run"]
