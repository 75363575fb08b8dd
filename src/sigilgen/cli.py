# どこで: `src/sigilgen/cli.py`。
# 何を: `python -m sigilgen` のサブコマンド（generate / run）を提供する。
# なぜ: ウィンドウ無しの書き出しと対話起動を同じ入口から使えるようにするため。

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from sigilgen.api import export, generate, run
from sigilgen.core.runtime_config import runtime_config, set_config_path
from sigilgen.core.shape import ShapeType
from sigilgen.core.sigil_state import SigilState
from sigilgen.export.image import resolve_size
from sigilgen.export.pil_surface import PillowSurface
from sigilgen.interactive.animator import GlowAnimator, ManualScheduler
from sigilgen.interactive.frame_clock import recording_clock_factory
from sigilgen.render.renderer import render

_logger = logging.getLogger(__name__)

SHAPE_CHOICES = [s.value for s in ShapeType]


def _dump_json(path: str | Path, obj) -> Path:
    _path = Path(path)
    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
    return _path


def dump_frames(
    state: SigilState,
    out_dir: str | Path,
    *,
    fps: float,
    size: int | None = None,
    transparent: bool = False,
) -> list[Path]:
    """glow アニメーションを固定 fps の連番 PNG として書き出す。"""
    _dir = Path(out_dir)
    _dir.mkdir(parents=True, exist_ok=True)
    surface = PillowSurface(resolve_size(size))
    written: list[Path] = []

    def _render_frame(glow: float) -> None:
        render(surface, state, glow=glow, transparent=transparent)
        path = _dir / f"frame_{len(written):04d}.png"
        surface.to_image().save(path, format="PNG")
        written.append(path)

    scheduler = ManualScheduler()
    animator = GlowAnimator(
        _render_frame,
        scheduler,
        recording_clock_factory(fps),
        duration=runtime_config().animation_duration,
        fps=fps,
    )
    animator.start()
    scheduler.run_until_idle()
    _logger.info("%d フレームを書き出しました: %s", len(written), _dir)
    return written


def cmd_generate(args) -> int:
    state = generate(
        args.shape,
        complexity=args.complexity,
        background=args.bg,
        sigil=args.color,
        seed=args.seed,
    )
    transparent = True if args.transparent else None
    out = export(state, args.out, size=args.size, transparent=transparent)
    print(out)

    if args.dump_state:
        _dump_json(args.dump_state, state.to_dict())
    if args.frames:
        fps = float(args.fps) if args.fps is not None else runtime_config().animation_fps
        dump_frames(
            state,
            args.frames,
            fps=fps,
            size=args.size,
            transparent=bool(args.transparent),
        )
    return 0


def cmd_run(args) -> int:
    run(
        size=args.size,
        shape=args.shape,
        background=args.bg,
        sigil=args.color,
        complexity=args.complexity,
    )
    return 0


def _add_common(p: argparse.ArgumentParser, *, shape_default: str | None) -> None:
    p.add_argument("--shape", choices=SHAPE_CHOICES, default=shape_default, help="outer shape")
    p.add_argument("--complexity", type=int, default=None, help="1-5 (default: config)")
    p.add_argument("--size", type=int, default=None, help="canvas side in px (default: config)")
    p.add_argument("--bg", default=None, help="background color #RRGGBB")
    p.add_argument("--color", default=None, help="sigil color #RRGGBB")


def make_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sigilgen")
    p.add_argument("--config", default=None, help="config.yaml path")
    p.add_argument("--verbose", action="store_true", help="enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    pg = sub.add_parser("generate", help="generate a sigil and write PNG/SVG")
    _add_common(pg, shape_default=ShapeType.CIRCLE.value)
    pg.add_argument("--out", required=True, help="output path (.png or .svg)")
    pg.add_argument("--transparent", action="store_true", help="omit the background")
    pg.add_argument("--seed", type=int, default=None, help="seed for this command line only")
    pg.add_argument("--dump-state", dest="dump_state", default=None, help="write state JSON")
    pg.add_argument("--frames", default=None, help="directory for the glow animation PNG sequence")
    pg.add_argument("--fps", type=float, default=None, help="frame rate for --frames")
    pg.set_defaults(func=cmd_generate)

    pr = sub.add_parser("run", help="open the interactive window")
    _add_common(pr, shape_default=None)
    pr.set_defaults(func=cmd_run)

    return p


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = make_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ns.config is not None:
        set_config_path(ns.config)
    try:
        return ns.func(ns)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    raise SystemExit(main())
