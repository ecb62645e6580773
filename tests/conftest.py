import numpy as np
import pytest
from fastapi.testclient import TestClient

from epochimg import config, fonts
from epochimg.app import create_app


@pytest.fixture(scope="session")
def face():
    return fonts.get_face()


@pytest.fixture
def cfg():
    return config.load("/nonexistent/epochimg.yaml")


@pytest.fixture
def client(cfg, face):
    with TestClient(create_app(cfg, face)) as c:
        yield c


def ink_bbox(img):
    """(x0, y0, x1, y1) of non-white pixels, or None."""
    rgb = np.asarray(img.convert("RGB"))
    ys, xs = np.nonzero((rgb < 255).any(axis=2))
    if len(xs) == 0:
        return None
    return xs.min(), ys.min(), xs.max() + 1, ys.max() + 1
