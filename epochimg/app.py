# epochimg/app.py
# HTTP surface: "/" and "/{value}.{ext}" returning timestamp images.
import logging
import re
import threading
import time
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from . import config, fonts
from .encode import EncodeError, encode
from .render import MAX_WIDTH, MIN_WIDTH, clamp_width, render

logger = logging.getLogger(__name__)

# path values that redirect to the current timestamp
LATEST_ALIASES = ("epoch", "latest")

_EPOCH_RE = re.compile(r"[+-]?[0-9]+")
I64_MIN, I64_MAX = -(2 ** 63), 2 ** 63 - 1


def now_epoch() -> int:
    return int(time.time())


def parse_epoch(value: str) -> Optional[int]:
    """Signed 64-bit decimal integer, or None."""
    if not _EPOCH_RE.fullmatch(value or ""):
        return None
    n = int(value)
    return n if I64_MIN <= n <= I64_MAX else None


class RenderCache:
    """Small LRU of encoded images keyed by (text, width, ext); size 0 disables it."""

    def __init__(self, maxsize: int):
        self.maxsize = max(0, int(maxsize))
        self._items = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self):
        return len(self._items)

    def get(self, key):
        with self._lock:
            item = self._items.get(key)
            if item is None:
                self.misses += 1
                return None
            self._items.move_to_end(key)
            self.hits += 1
            return item

    def put(self, key, value):
        if not self.maxsize:
            return
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            while len(self._items) > self.maxsize:
                self._items.popitem(last=False)


def create_app(cfg=None, face=None) -> FastAPI:
    cfg = cfg or config.load()
    img_cfg = cfg["image"]
    http_cfg = cfg["http"]

    default_width = int(img_cfg["default_width"])
    min_width = max(int(img_cfg["min_width"]), MIN_WIDTH)
    max_width = min(int(img_cfg["max_width"]), MAX_WIDTH)
    if not min_width <= default_width <= max_width:
        raise config.ConfigError(
            f"image.default_width {default_width} outside [{min_width}, {max_width}]"
        )
    jpeg_quality = img_cfg["jpeg_quality"]
    cache_control = http_cfg["cache_control"]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # fails startup if the embedded font cannot be parsed
        app.state.face = face or fonts.get_face()
        logger.info(f"Serving with font {app.state.face.name}")
        yield

    app = FastAPI(title="epochimg", lifespan=lifespan)
    app.state.face = face
    app.state.render_cache = RenderCache(http_cfg["render_cache_size"])

    @app.middleware("http")
    async def add_cache_control(request: Request, call_next):
        response = await call_next(request)
        if cache_control:
            response.headers["Cache-Control"] = cache_control
        return response

    def image_response(text: str, raw_width, ext: str) -> Response:
        width = clamp_width(raw_width, default_width, min_width, max_width)
        key = (text, width, ext)
        cache = app.state.render_cache
        hit = cache.get(key)
        if hit is None:
            logger.debug(f"render text={text} width={width} ext={ext}")
            img = render(text, width, app.state.face or fonts.get_face())
            try:
                hit = encode(img, ext, jpeg_quality=jpeg_quality)
            except EncodeError:
                logger.exception(f"encoding {ext} failed for text={text} width={width}")
                raise HTTPException(status_code=500, detail="image encoding failed")
            cache.put(key, hit)
        data, mime = hit
        return Response(content=data, media_type=mime)

    @app.get("/")
    def index(width: Optional[str] = None):
        return image_response(str(now_epoch()), width, "png")

    @app.get("/{value}.{ext}")
    def image_with_epoch(value: str, ext: str, request: Request, width: Optional[str] = None):
        if value in LATEST_ALIASES:
            url = f"/{now_epoch()}.{ext}"
            if request.url.query:
                url = f"{url}?{request.url.query}"
            logger.debug(f"redirect /{value}.{ext} -> {url}")
            return RedirectResponse(url, status_code=307)

        epoch = parse_epoch(value)
        if epoch is None:
            epoch = now_epoch()
        return image_response(str(epoch), width, ext)

    return app
