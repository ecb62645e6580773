#!/usr/bin/env python3
# epochimg/snapshot.py
# Render one timestamp image straight to disk.
import argparse
import os
import sys

from .app import now_epoch
from .encode import encode
from .render import DEFAULT_WIDTH, clamp_width, render


def atomic_write(path, data: bytes):
    tmp = path + ".tmp"
    with open(tmp, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)
    return path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render a Unix timestamp to an image file")
    parser.add_argument("--epoch", type=int, help="timestamp to render (default: now)")
    parser.add_argument("--width", default=DEFAULT_WIDTH, help="canvas width in pixels, 10-10000")
    parser.add_argument("--format", default=None, help="png or jpg (default: from --out extension)")
    parser.add_argument("--out", required=True, help="output file")
    args = parser.parse_args(argv)

    ext = args.format or os.path.splitext(args.out)[1].lstrip(".") or "png"
    epoch = args.epoch if args.epoch is not None else now_epoch()

    img = render(str(epoch), clamp_width(args.width))
    data, mime = encode(img, ext)
    print(f"Wrote {atomic_write(args.out, data)} ({mime}, {img.width}x{img.height})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
