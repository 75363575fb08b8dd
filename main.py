"""
どこで: リポジトリ直下 `main.py`。
何を: 対話ウィンドウを random 外形で開く。
なぜ: インストール無しで動作確認できる最小エントリポイントとして利用するため。
"""

import sys

sys.path.append("src")

from sigilgen.api import run

CANVAS_SIZE = 600


if __name__ == "__main__":
    run(
        size=CANVAS_SIZE,
        shape="random",
        background="#101010",
        sigil="#E0C060",
        complexity=4,
    )
