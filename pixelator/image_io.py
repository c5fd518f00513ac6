# pixelator/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageCms, ImageOps

from .core_types import PixelBuffer, assert_u8_image_rgba
from .utils import warn

"""
Pillow adapters between image files / PIL images and PixelBuffer (RGBA, sRGB).

Exports:
  buffer_from_image(im)   -> PixelBuffer
  buffer_to_image(buf)    -> PIL.Image.Image (mode RGBA)
  load_buffer(path)       -> PixelBuffer
  save_buffer(path, buf)  -> Path actually written (always .png)
"""

PathLike = Union[str, Path]


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is not None:
                return im2
        except (OSError, ImageCms.PyCMSError) as exc:
            warn(f"ignoring unusable ICC profile: {exc}")

    return im.convert("RGBA")


def buffer_from_image(im: Image.Image) -> PixelBuffer:
    """EXIF-upright, sRGB, RGBA copy of `im` as a PixelBuffer."""
    rgba = _convert_to_srgb_rgba(im)
    arr = assert_u8_image_rgba(np.array(rgba, dtype=np.uint8))
    height, width = arr.shape[:2]
    return PixelBuffer(width, height, arr)


def buffer_to_image(buf: PixelBuffer) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(buf.data))


def load_buffer(path: PathLike) -> PixelBuffer:
    with Image.open(path) as im0:
        im0.load()
        return buffer_from_image(im0)


def save_buffer(path: PathLike, buf: PixelBuffer) -> Path:
    """Write `buf` as PNG; a non-.png suffix is replaced."""
    out_path = Path(path)
    if out_path.suffix.lower() != ".png":
        out_path = out_path.with_suffix(".png")
    buffer_to_image(buf).save(out_path, format="PNG")
    return out_path


__all__ = ["buffer_from_image", "buffer_to_image", "load_buffer", "save_buffer"]
