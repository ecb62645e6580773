# epochimg/fonts.py
# Embedded monospace face, loaded once per process and shared read-only.
import io
import logging
import threading
from collections import OrderedDict
from functools import lru_cache
from importlib import resources
from typing import Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

FONT_FILE = "SourceCodePro-Regular.ttf"

# Em size used to read the vertical metrics; large enough that
# FreeType's integer rounding of ascender/descender is negligible.
_REFERENCE_EM = 2048

# Sized fonts kept per face; each one holds its own copy of the payload.
MAX_SIZES = 32


class FontLoadError(RuntimeError):
    pass


def embedded_font_bytes() -> bytes:
    return resources.files("epochimg").joinpath("fonts", FONT_FILE).read_bytes()


class FontFace:
    """One typeface plus the metrics needed to size it by pixel height.

    A scale here means the pixel distance from descender to ascender, so
    ``ascent(scale) - descent(scale) == scale``.
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)
        try:
            ref = ImageFont.truetype(io.BytesIO(self._data), _REFERENCE_EM)
        except (OSError, ValueError) as e:
            raise FontLoadError(f"cannot parse font payload: {e}") from e
        asc, desc = ref.getmetrics()
        if asc + desc <= 0:
            raise FontLoadError("font has no vertical extent")
        self.name = " ".join(n for n in ref.getname() if n)
        self._ascent_ratio = asc / (asc + desc)
        self._height_per_em = (asc + desc) / _REFERENCE_EM
        self._sizes = OrderedDict()
        self._lock = threading.Lock()

    def ascent(self, scale: float) -> float:
        return scale * self._ascent_ratio

    def descent(self, scale: float) -> float:
        return scale * (self._ascent_ratio - 1.0)

    def font(self, scale: float) -> ImageFont.FreeTypeFont:
        """Pillow font whose ascender-to-descender height is ``scale`` pixels."""
        with self._lock:
            fnt = self._sizes.get(scale)
            if fnt is not None:
                self._sizes.move_to_end(scale)
                return fnt
            em = scale / self._height_per_em
            fnt = ImageFont.truetype(io.BytesIO(self._data), em)
            self._sizes[scale] = fnt
            if len(self._sizes) > MAX_SIZES:
                self._sizes.popitem(last=False)
            return fnt


def load(data: Optional[bytes] = None) -> FontFace:
    if data is None:
        data = embedded_font_bytes()
    face = FontFace(data)
    logger.info(f"Loaded font {face.name} ({len(data)} bytes)")
    return face


@lru_cache(maxsize=None)
def get_face() -> FontFace:
    """Process-wide face; the first call parses the embedded payload."""
    return load()
