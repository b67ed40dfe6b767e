"""
Capture compressor: bounds a raw screenshot by dimensions and byte size.

The raw capture is clamped to max_width x max_height once (aspect ratio kept),
then re-encoded up to MAX_ATTEMPTS times:

- jpeg: quality drops by 20% per attempt (never below MIN_QUALITY); the
  dimensions stay fixed.
- png: lossless, so the image shrinks by 10% per side per attempt instead.

The last encoded bitmap is returned even when it is still above the ceiling.
"""

from __future__ import annotations

import base64
import math
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

DEFAULT_MAX_BYTES = 950_000
MAX_ATTEMPTS = 10
MIN_QUALITY = 10
QUALITY_STEP = 0.8
SHRINK_STEP = 0.9

MIME_TYPES = {"jpeg": "image/jpeg", "png": "image/png"}


@dataclass
class CaptureResult:
    data: bytes
    format: str
    width: int
    height: int
    quality: int | None
    attempts: int = 1

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.format]

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Clamp dimensions to the box, width bound first, keeping the aspect ratio."""
    aspect = width / height
    if width > max_width:
        width = max_width
        height = round(max_width / aspect)
    if height > max_height:
        height = max_height
        width = round(max_height * aspect)
    return max(1, int(width)), max(1, int(height))


def _resized(image: Image.Image, width: int, height: int) -> Image.Image:
    if image.size == (width, height):
        return image
    return image.resize((width, height), Image.Resampling.LANCZOS)


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buf = BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def _encode_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG", optimize=True, compress_level=9)
    return buf.getvalue()


def _flatten(image: Image.Image) -> Image.Image:
    """JPEG has no alpha channel: composite onto white."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _lossy_track(image: Image.Image, width: int, height: int, quality: int, max_bytes: int) -> CaptureResult:
    bitmap = _resized(_flatten(image), width, height)
    quality = max(1, min(100, int(quality)))
    data = b""
    attempts = 0
    while attempts < MAX_ATTEMPTS:
        data = _encode_jpeg(bitmap, quality)
        attempts += 1
        if len(data) <= max_bytes or quality <= MIN_QUALITY:
            break
        if attempts < MAX_ATTEMPTS:
            quality = max(MIN_QUALITY, math.floor(quality * QUALITY_STEP))
    return CaptureResult(data, "jpeg", width, height, quality, attempts)


def _lossless_track(image: Image.Image, width: int, height: int, max_bytes: int) -> CaptureResult:
    data = b""
    attempts = 0
    while attempts < MAX_ATTEMPTS:
        data = _encode_png(_resized(image, width, height))
        attempts += 1
        if len(data) <= max_bytes:
            break
        if attempts < MAX_ATTEMPTS:
            width = max(1, math.floor(width * SHRINK_STEP))
            height = max(1, math.floor(height * SHRINK_STEP))
    return CaptureResult(data, "png", width, height, None, attempts)


def compress(
    raw: bytes,
    fmt: str = "jpeg",
    quality: int = 60,
    max_width: int = 1280,
    max_height: int = 1440,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> CaptureResult:
    """Re-encode a raw capture so it fits the dimension box and, if possible, the byte ceiling."""
    if fmt not in MIME_TYPES:
        raise ValueError(f"Unsupported image format: {fmt}")
    with Image.open(BytesIO(raw)) as opened:
        opened.load()
        image = opened if opened.mode in ("RGB", "RGBA", "L", "LA", "P") else opened.convert("RGB")
        width, height = fit_within(image.width, image.height, max_width, max_height)
        if fmt == "jpeg":
            return _lossy_track(image, width, height, quality, max_bytes)
        return _lossless_track(image, width, height, max_bytes)


def compress_base64(data_b64: str, fmt: str = "jpeg", **kwargs) -> CaptureResult:
    return compress(base64.b64decode(data_b64), fmt, **kwargs)


__all__ = ["CaptureResult", "DEFAULT_MAX_BYTES", "MAX_ATTEMPTS", "compress", "compress_base64", "fit_within"]
