# どこで: `src/sigilgen/core/output_paths.py`。
# 何を: 出力種別（png/svg/frames）ごとの既定保存先パスを決める。
# なぜ: interactive の保存キーと CLI が同じ `output/{kind}/` 配下に整理して書き出すため。

from __future__ import annotations

import re
from pathlib import Path

from sigilgen.core.runtime_config import output_root_dir

DEFAULT_STEM = "sigil"


def _sanitize_run_id(run_id: str) -> str:
    """run_id をファイル名の一部として使える形に正規化して返す。"""

    return re.sub(r"[^A-Za-z0-9._-]+", "_", str(run_id))


def _run_id_suffix(run_id: str | None) -> str:
    """run_id の接尾辞（例: `_v1`）を返す。未指定なら空文字を返す。"""

    if run_id is None:
        return ""
    s = str(run_id).strip()
    if not s:
        return ""
    sanitized = _sanitize_run_id(s)
    if not sanitized:
        return ""
    return f"_{sanitized}"


def default_output_path(
    *,
    kind: str,
    ext: str,
    stem: str = DEFAULT_STEM,
    run_id: str | None = None,
) -> Path:
    """`output_root/{kind}/{stem}[_run_id].{ext}` を返す。"""

    ext_norm = str(ext).lstrip(".").strip()
    if not ext_norm:
        raise ValueError("ext は空でない必要がある")
    stem_norm = _sanitize_run_id(str(stem).strip()) or DEFAULT_STEM
    return output_root_dir() / str(kind) / f"{stem_norm}{_run_id_suffix(run_id)}.{ext_norm}"


__all__ = ["DEFAULT_STEM", "default_output_path"]
