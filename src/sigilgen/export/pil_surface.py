# どこで: `src/sigilgen/export/pil_surface.py`。
# 何を: Pillow の RGBA 画像へ描く DrawingSurface 実装（miter 結合・クリップ・glow）を提供する。
# なぜ: PNG/SVG 埋め込み画像/interactive 表示を同じラスタ描画から得るため。

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter

from sigilgen.core.appearance import hex_to_rgb255
from sigilgen.core.geometry import Point
from sigilgen.render.frame import CircleOutline, Outline

DEFAULT_ANTIALIAS = 2
# canvas 2D の既定 miterLimit。
MITER_LIMIT = 10.0
# glow のぼかしを計算する縮小画像での標準偏差の目安（px）。
GLOW_WORK_SIGMA = 4.0

Box = tuple[int, int, int, int]


@dataclass(slots=True)
class _Layer:
    image: Image.Image
    mask: Image.Image | None
    # glow 有効中の描画は segment へ溜め、glow には描いた範囲を重ねる。
    segment: Image.Image | None = None
    glow: Image.Image | None = None
    glow_color: str | None = None
    glow_sigma: float = 0.0


class PillowSurface:
    """Pillow 画像を描画先とする DrawingSurface。

    Parameters
    ----------
    width : int
        出力画像の幅（px）。
    height : int or None, optional
        出力画像の高さ（px）。None なら width と同じ。
    antialias : int, optional
        内部描画の拡大率。`to_image()` で面積平均により縮小してエッジを滑らかにする。

    Notes
    -----
    各描画は外接矩形ぶんだけの L カバレッジマスクを作り、その矩形へ色を alpha 合成する。
    `push_clip` は新しいレイヤを積み、`pop_clip` で外形マスクを掛けて親へ合成する。
    glow は canvas の shadowBlur（標準偏差 `blur/2`）に倣う。glow 有効中の描画を 1 枚へ溜め、
    glow の切り替え・クリップ境界・取り出し時に、溜めた範囲を 1 回だけぼかして下に敷く。
    """

    def __init__(self, width: int, height: int | None = None, *, antialias: int = DEFAULT_ANTIALIAS) -> None:
        w = int(width)
        h = int(height) if height is not None else w
        if w <= 0 or h <= 0:
            raise ValueError(f"surface size は正の値である必要がある: got=({width!r}, {height!r})")
        aa = int(antialias)
        if aa < 1:
            raise ValueError(f"antialias は 1 以上である必要がある: got={antialias!r}")
        self.width = w
        self.height = h
        self._aa = aa
        self._px = (w * aa, h * aa)
        self._stack: list[_Layer] = []
        self._glow_color: str | None = None
        self._glow_blur = 0.0
        self.clear()

    # --- 内部 ---

    def _blank(self) -> Image.Image:
        return Image.new("RGBA", self._px, (0, 0, 0, 0))

    def _region(self, x0: float, y0: float, x1: float, y1: float) -> Box | None:
        """内部座標の矩形を画素境界へ広げ、画像内へ切り詰めて返す。空なら None。"""
        w, h = self._px
        left = max(0, int(math.floor(x0)) - 1)
        top = max(0, int(math.floor(y0)) - 1)
        right = min(w, int(math.ceil(x1)) + 1)
        bottom = min(h, int(math.ceil(y1)) + 1)
        if right <= left or bottom <= top:
            return None
        return (left, top, right, bottom)

    def _points_region(self, pts: np.ndarray, margin: float) -> Box | None:
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        return self._region(lo[0] - margin, lo[1] - margin, hi[0] + margin, hi[1] + margin)

    def _new_mask(self, box: Box) -> tuple[Image.Image, ImageDraw.ImageDraw]:
        mask = Image.new("L", (box[2] - box[0], box[3] - box[1]), 0)
        return mask, ImageDraw.Draw(mask)

    def _scale_points(self, points: Sequence[Point]) -> np.ndarray:
        arr = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        return arr * float(self._aa)

    @staticmethod
    def _local(pts: np.ndarray, box: Box) -> list[tuple[float, float]]:
        ox, oy = float(box[0]), float(box[1])
        return [(float(x) - ox, float(y) - oy) for x, y in pts]

    def _ellipse_box(self, center: Point, radius: float, origin: Box) -> list[float]:
        cx = float(center[0]) * self._aa - origin[0]
        cy = float(center[1]) * self._aa - origin[1]
        r = float(radius) * self._aa
        return [cx - r, cy - r, cx + r, cy + r]

    def _circle_region(self, center: Point, radius: float) -> Box | None:
        cx = float(center[0]) * self._aa
        cy = float(center[1]) * self._aa
        r = float(radius) * self._aa
        return self._region(cx - r, cy - r, cx + r, cy + r)

    @staticmethod
    def _composite(target: Image.Image, mask: Image.Image, origin: tuple[int, int], color: str) -> None:
        src = Image.new("RGBA", mask.size, (*hex_to_rgb255(color), 0))
        src.putalpha(mask)
        target.alpha_composite(src, dest=origin)

    def _paint(self, mask: Image.Image, box: Box, color: str) -> None:
        layer = self._stack[-1]
        origin = (box[0], box[1])
        if self._glow_color is None or self._glow_blur <= 0.0:
            self._composite(layer.image, mask, origin, color)
            return

        if layer.segment is None:
            layer.segment = self._blank()
            layer.glow = Image.new("L", self._px, 0)
            layer.glow_color = self._glow_color
            layer.glow_sigma = self._glow_blur * self._aa / 2.0
        assert layer.glow is not None
        covered = ImageChops.lighter(layer.glow.crop(box), mask)
        layer.glow.paste(covered, origin)
        self._composite(layer.segment, mask, origin, color)

    def _blurred(self, mask: Image.Image, sigma: float) -> tuple[Image.Image, Box] | None:
        """マスクの描画範囲を 3σ 広げて切り出し、ぼかした結果と位置を返す。"""
        bbox = mask.getbbox()
        if bbox is None:
            return None
        pad = 3.0 * sigma
        box = self._region(bbox[0] - pad, bbox[1] - pad, bbox[2] + pad, bbox[3] + pad)
        if box is None:
            return None
        crop = mask.crop(box)
        factor = max(1, int(sigma // GLOW_WORK_SIGMA))
        if factor == 1:
            return crop.filter(ImageFilter.GaussianBlur(radius=sigma)), box
        # 大きな σ は縮小画像上でぼかしてから戻す。
        w, h = crop.size
        small = crop.resize((max(1, w // factor), max(1, h // factor)), Image.Resampling.BOX)
        small = small.filter(ImageFilter.GaussianBlur(radius=sigma / factor))
        return small.resize((w, h), Image.Resampling.BILINEAR), box

    def _flush_glow(self, layer: _Layer) -> None:
        """溜めた glow 区間を、ぼかした影 → 描画内容の順にレイヤへ合成する。"""
        if layer.segment is None:
            return
        segment, glow, color, sigma = layer.segment, layer.glow, layer.glow_color, layer.glow_sigma
        layer.segment = None
        layer.glow = None
        layer.glow_color = None
        layer.glow_sigma = 0.0
        if glow is not None and color is not None:
            shadow = self._blurred(glow, sigma)
            if shadow is not None:
                blurred, box = shadow
                self._composite(layer.image, blurred, (box[0], box[1]), color)
        layer.image.alpha_composite(segment)

    def _stroke_mask(self, pts: np.ndarray, width: float, closed: bool) -> tuple[Image.Image, Box] | None:
        n = int(pts.shape[0])
        half = float(width) * self._aa / 2.0
        if n < 2 or half <= 0.0:
            return None
        box = self._points_region(pts, half * MITER_LIMIT)
        if box is None:
            return None
        mask, draw = self._new_mask(box)
        local = pts - np.array([box[0], box[1]], dtype=np.float64)

        seg_count = n if closed else n - 1
        normals: list[np.ndarray | None] = []
        for i in range(seg_count):
            a = local[i]
            b = local[(i + 1) % n]
            d = b - a
            length = math.hypot(float(d[0]), float(d[1]))
            if length <= 0.0:
                normals.append(None)
                continue
            nrm = np.array([-d[1], d[0]]) / length * half
            normals.append(nrm)
            quad = [a + nrm, b + nrm, b - nrm, a - nrm]
            draw.polygon([(float(p[0]), float(p[1])) for p in quad], fill=255)

        joints = range(n) if closed else range(1, n - 1)
        for i in joints:
            n_in = normals[(i - 1) % seg_count]
            n_out = normals[i % seg_count]
            if n_in is None or n_out is None:
                continue
            v = local[i]
            u_in = n_in / half
            u_out = n_out / half
            bisector = u_in + u_out
            b_len = math.hypot(float(bisector[0]), float(bisector[1]))
            cos_half = b_len / 2.0
            for sign in (1.0, -1.0):
                if b_len > 1e-12 and cos_half >= 1.0 / MITER_LIMIT:
                    tip = v + sign * bisector / b_len * (half / cos_half)
                    wedge = [v, v + sign * n_in, tip, v + sign * n_out]
                else:
                    # miterLimit を超える鋭角は bevel にする。
                    wedge = [v, v + sign * n_in, v + sign * n_out]
                draw.polygon([(float(p[0]), float(p[1])) for p in wedge], fill=255)
        return mask, box

    # --- DrawingSurface ---

    def clear(self) -> None:
        self._stack = [_Layer(image=self._blank(), mask=None)]
        self._glow_color = None
        self._glow_blur = 0.0

    def fill_background(self, color: str) -> None:
        layer = self._stack[-1]
        self._flush_glow(layer)
        layer.image.paste((*hex_to_rgb255(color), 255), (0, 0, *self._px))

    def set_glow(self, color: str | None, blur: float) -> None:
        new_blur = max(0.0, float(blur)) if color is not None else 0.0
        if color != self._glow_color or new_blur != self._glow_blur:
            self._flush_glow(self._stack[-1])
        self._glow_color = color
        self._glow_blur = new_blur

    def stroke_polyline(
        self,
        points: Sequence[Point],
        *,
        color: str,
        width: float,
        closed: bool = False,
        join: str = "miter",
    ) -> None:
        pts = self._scale_points(points)
        if join != "miter":
            raise ValueError(f"join は 'miter' のみ対応: got={join!r}")
        stroke = self._stroke_mask(pts, width, bool(closed))
        if stroke is not None:
            self._paint(stroke[0], stroke[1], color)

    def fill_polygon(self, points: Sequence[Point], *, color: str) -> None:
        pts = self._scale_points(points)
        if pts.shape[0] < 3:
            return
        box = self._points_region(pts, 0.0)
        if box is None:
            return
        mask, draw = self._new_mask(box)
        draw.polygon(self._local(pts, box), fill=255)
        self._paint(mask, box, color)

    def stroke_circle(self, center: Point, radius: float, *, color: str, width: float) -> None:
        half = float(width) / 2.0
        box = self._circle_region(center, float(radius) + half)
        if box is None:
            return
        mask, draw = self._new_mask(box)
        draw.ellipse(self._ellipse_box(center, float(radius) + half, box), fill=255)
        inner = float(radius) - half
        if inner > 0.0:
            draw.ellipse(self._ellipse_box(center, inner, box), fill=0)
        self._paint(mask, box, color)

    def fill_circle(self, center: Point, radius: float, *, color: str) -> None:
        if float(radius) <= 0.0:
            return
        box = self._circle_region(center, radius)
        if box is None:
            return
        mask, draw = self._new_mask(box)
        draw.ellipse(self._ellipse_box(center, radius, box), fill=255)
        self._paint(mask, box, color)

    def push_clip(self, outline: Outline) -> None:
        self._flush_glow(self._stack[-1])
        full = (0, 0, *self._px)
        mask, draw = self._new_mask(full)
        if isinstance(outline, CircleOutline):
            draw.ellipse(self._ellipse_box(outline.center, outline.radius, full), fill=255)
        else:
            draw.polygon(self._local(self._scale_points(outline.points), full), fill=255)
        self._stack.append(_Layer(image=self._blank(), mask=mask))

    def pop_clip(self) -> None:
        if len(self._stack) <= 1:
            raise RuntimeError("pop_clip が push_clip より多く呼ばれた")
        layer = self._stack.pop()
        self._flush_glow(layer)
        parent = self._stack[-1].image
        if layer.mask is None:
            parent.alpha_composite(layer.image)
            return
        box = layer.mask.getbbox()
        if box is None:
            return
        image = layer.image.crop(box)
        image.putalpha(ImageChops.multiply(image.getchannel("A"), layer.mask.crop(box)))
        parent.alpha_composite(image, dest=(box[0], box[1]))

    # --- 取り出し ---

    @property
    def clip_depth(self) -> int:
        return len(self._stack) - 1

    def to_image(self) -> Image.Image:
        """現在の内容を出力サイズの RGBA 画像として返す。

        Raises
        ------
        RuntimeError
            クリップが解除されていない場合。
        """
        if self.clip_depth != 0:
            raise RuntimeError(f"クリップが解除されていない: depth={self.clip_depth}")
        self._flush_glow(self._stack[0])
        image = self._stack[0].image
        if self._aa > 1:
            return image.reduce(self._aa)
        return image.copy()


__all__ = ["DEFAULT_ANTIALIAS", "GLOW_WORK_SIGMA", "MITER_LIMIT", "PillowSurface"]
