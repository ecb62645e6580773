# epochimg/encode.py
import io

from PIL import Image

# ext token -> (Pillow format, MIME type); unknown tokens fall back to PNG
FORMATS = {
    "png": ("PNG", "image/png"),
    "jpg": ("JPEG", "image/jpeg"),
    "jpeg": ("JPEG", "image/jpeg"),
}
DEFAULT_EXT = "png"

JPEG_QUALITY = 90


class EncodeError(RuntimeError):
    pass


def image_format(ext: str) -> str:
    return FORMATS.get(ext, FORMATS[DEFAULT_EXT])[0]


def content_type(ext: str) -> str:
    return FORMATS.get(ext, FORMATS[DEFAULT_EXT])[1]


def encode(img: Image.Image, ext: str, jpeg_quality: int = JPEG_QUALITY):
    """Serialize ``img`` for the ``ext`` token. Returns (bytes, mime)."""
    fmt = image_format(ext)
    buf = io.BytesIO()
    try:
        if fmt == "JPEG":
            # JPEG has no alpha; the canvas is opaque so dropping it is lossless
            img.convert("RGB").save(buf, format=fmt, quality=jpeg_quality)
        else:
            img.save(buf, format=fmt)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"{fmt} encoding failed: {e}") from e
    return buf.getvalue(), content_type(ext)
