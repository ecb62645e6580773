# epochimg/layout.py
# Single-line glyph layout on top of Pillow's FreeType fonts.
import math
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .fonts import FontFace


class PixelBox(NamedTuple):
    """Integer canvas rectangle, max edges exclusive."""
    x0: int
    y0: int
    x1: int
    y1: int


class BoundingBox(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2

    def translated(self, dx: float, dy: float) -> "BoundingBox":
        return BoundingBox(self.min_x + dx, self.min_y + dy, self.max_x + dx, self.max_y + dy)


EMPTY_BOX = BoundingBox(0.0, 0.0, 0.0, 0.0)


class PositionedGlyph:
    """A character placed with its pen at (x, y) on the baseline."""

    __slots__ = ("char", "x", "y", "_font", "_raster", "_rastered")

    def __init__(self, char: str, x: float, y: float, font: ImageFont.FreeTypeFont):
        self.char = char
        self.x = x
        self.y = y
        self._font = font
        self._raster = None
        self._rastered = False

    def __repr__(self):
        return f"PositionedGlyph({self.char!r}, {self.x:.3f}, {self.y:.3f})"

    def rasterize(self) -> Optional[Tuple[PixelBox, np.ndarray]]:
        """Pixel box and 0..255 coverage mask, or None when the glyph has no ink."""
        if not self._rastered:
            self._raster = self._draw()
            self._rastered = True
        return self._raster

    def pixel_bounding_box(self) -> Optional[PixelBox]:
        raster = self.rasterize()
        return raster[0] if raster else None

    def _draw(self):
        left, top, right, bottom = self._font.getbbox(self.char, anchor="ls")
        if right <= left or bottom <= top:
            return None

        # Mask origin in canvas space. The pen stays inside the mask so
        # Pillow only ever sees a positive fractional start.
        ox = math.floor(self.x) + min(left, 0) - 1
        oy = math.floor(self.y) + min(top, 0) - 1
        size = (max(right, 0) - min(left, 0) + 3, max(bottom, 0) - min(top, 0) + 3)

        mask = Image.new("L", size, 0)
        ImageDraw.Draw(mask).text(
            (self.x - ox, self.y - oy), self.char, fill=255, font=self._font, anchor="ls"
        )
        ink = mask.getbbox()
        if ink is None:
            return None
        box = PixelBox(ox + ink[0], oy + ink[1], ox + ink[2], oy + ink[3])
        return box, np.asarray(mask.crop(ink), dtype=np.uint8)


def kerning(font: ImageFont.FreeTypeFont, left: str, right: str) -> float:
    return font.getlength(left + right) - font.getlength(left) - font.getlength(right)


def layout(face: FontFace, text: str, scale: float, origin: Tuple[float, float]) -> List[PositionedGlyph]:
    """Lay ``text`` out on one line with the first pen position at ``origin``.

    Control characters are dropped; they neither draw nor advance the pen.
    """
    fnt = face.font(scale)
    x, y = origin
    glyphs = []
    prev = None
    for ch in text:
        if not ch.isprintable():
            continue
        if prev is not None:
            x += kerning(fnt, prev, ch)
        glyphs.append(PositionedGlyph(ch, x, y, fnt))
        x += fnt.getlength(ch)
        prev = ch
    return glyphs


def bounding_box(glyphs: List[PositionedGlyph]) -> BoundingBox:
    """Union of the glyphs' pixel boxes; EMPTY_BOX when none has ink."""
    boxes = [b for b in (g.pixel_bounding_box() for g in glyphs) if b is not None]
    if not boxes:
        return EMPTY_BOX
    return BoundingBox(
        float(min(b.x0 for b in boxes)),
        float(min(b.y0 for b in boxes)),
        float(max(b.x1 for b in boxes)),
        float(max(b.y1 for b in boxes)),
    )
