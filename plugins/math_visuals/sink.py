"""
Image Sink (Pillow)

The renderer never encodes images itself. This is the thin sink the
bundled tools (CLI snapshots, viewer screenshots) hand finished rasters to.
"""

import io
import os

from PIL import Image


def to_image(raster):
    """RasterTarget -> PIL RGBA image (copies the pixels)."""
    return Image.fromarray(raster.pixels.copy())


def encode_png(raster):
    """Encode a raster as PNG bytes."""
    buf = io.BytesIO()
    to_image(raster).save(buf, format="PNG")
    return buf.getvalue()


def save_png(raster, path):
    """Write a raster to `path` as PNG, creating parent directories."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    to_image(raster).save(path, format="PNG")
    return path
