# epochimg/render.py
# Text -> centered black-on-white RGBA canvas.
import re
from typing import NamedTuple, Tuple

import numpy as np
from PIL import Image

from .fonts import FontFace, get_face
from .layout import BoundingBox, bounding_box, layout

# === CONFIG ===
DEFAULT_WIDTH = 320
MIN_WIDTH, MAX_WIDTH = 10, 10000
ASPECT = 4            # width / height
MARGIN = 0.05         # per side, fraction of each dimension
TEXT_FILL = 0.8       # glyph scale as a fraction of drawable height

BG = (255, 255, 255, 255)

_WIDTH_RE = re.compile(r"[+]?[0-9]+")


def clamp_width(value, default=DEFAULT_WIDTH, lo=MIN_WIDTH, hi=MAX_WIDTH) -> int:
    """Parse a requested width; anything missing or out of range gives ``default``."""
    if isinstance(value, str):
        if not _WIDTH_RE.fullmatch(value):
            return default
    try:
        width = int(value)
    except (TypeError, ValueError):
        return default
    return width if lo <= width <= hi else default


class Geometry(NamedTuple):
    width: int
    height: int
    margin_x: float
    margin_y: float

    @property
    def drawable_width(self) -> float:
        return self.width - 2 * self.margin_x

    @property
    def drawable_height(self) -> float:
        return self.height - 2 * self.margin_y

    @property
    def drawable_center(self) -> Tuple[float, float]:
        return self.margin_x + self.drawable_width / 2, self.margin_y + self.drawable_height / 2

    @property
    def scale(self) -> float:
        return self.drawable_height * TEXT_FILL


def geometry(width: int) -> Geometry:
    height = width // ASPECT
    return Geometry(width, height, width * MARGIN, height * MARGIN)


def centering_offset(box: BoundingBox, geo: Geometry) -> Tuple[float, float]:
    """Shift that puts the centre of ``box`` on the centre of the drawable area."""
    x = geo.margin_x + (geo.drawable_width - box.width) / 2 - box.min_x
    y = geo.margin_y + (geo.drawable_height - box.height) / 2 - box.min_y
    return x, y


def place_text(face: FontFace, text: str, geo: Geometry):
    """Two-pass layout: measure at the ascent origin, then lay out again centred."""
    ascent = face.ascent(geo.scale)
    first = layout(face, text, geo.scale, (0.0, ascent))
    dx, dy = centering_offset(bounding_box(first), geo)
    return layout(face, text, geo.scale, (dx, dy + ascent))


def composite(canvas: np.ndarray, glyphs) -> np.ndarray:
    """Blend black glyph coverage onto ``canvas`` in place, in draw order."""
    h, w = canvas.shape[:2]
    for g in glyphs:
        raster = g.rasterize()
        if raster is None:
            continue
        box, coverage = raster

        # clip to the canvas
        x0, y0 = max(box.x0, 0), max(box.y0, 0)
        x1, y1 = min(box.x1, w), min(box.y1, h)
        if x0 >= x1 or y0 >= y1:
            continue

        a = coverage[y0 - box.y0:y1 - box.y0, x0 - box.x0:x1 - box.x0].astype(np.uint16)
        inv = (255 - a)[..., None]
        rgb = canvas[y0:y1, x0:x1, :3].astype(np.uint16)
        # foreground is black, so the fg * a term vanishes
        canvas[y0:y1, x0:x1, :3] = (rgb * inv // 255).astype(np.uint8)
        canvas[y0:y1, x0:x1, 3] = 255
    return canvas


def render(text: str, width: int, face: FontFace = None) -> Image.Image:
    face = face or get_face()
    geo = geometry(clamp_width(width))
    canvas = np.empty((geo.height, geo.width, 4), dtype=np.uint8)
    canvas[...] = BG
    composite(canvas, place_text(face, text, geo))
    return Image.fromarray(canvas)
