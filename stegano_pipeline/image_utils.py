from __future__ import annotations

import io
import os

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeFailure
from .lsb import as_pixel_buffer


def _decode(source) -> np.ndarray:
    try:
        with Image.open(source) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeFailure(f"Cannot decode carrier image: {e}") from e


def load_pixels(path: str) -> np.ndarray:
    """Load any Pillow-readable image as an (height, width, 4) RGBA uint8 array."""
    return _decode(path)


def pixels_from_bytes(data: bytes) -> np.ndarray:
    return _decode(io.BytesIO(data))


def save_pixels(path: str, pixels: np.ndarray) -> None:
    """Save an RGBA buffer as lossless PNG.

    Lossy formats would destroy the low bits, so only `.png` paths are accepted.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext != ".png":
        raise ValueError(f"Stego images must be saved as PNG, got {ext or 'no extension'}")
    Image.fromarray(as_pixel_buffer(pixels)).save(path, format="PNG")


def pixels_to_png_bytes(pixels: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(as_pixel_buffer(pixels)).save(buf, format="PNG")
    return buf.getvalue()


def generate_cover(width: int = 256, height: int = 256, seed: int = 42) -> np.ndarray:
    """Noisy orange gradient, opaque, for demos and tests."""
    if width <= 0 or height <= 0:
        raise ValueError("Cover dimensions must be positive")
    y = np.linspace(0, 1, height, dtype=np.float32)[:, None]
    x = np.linspace(0, 1, width, dtype=np.float32)[None, :]
    grad = (0.9 * (1 - y) + 0.1).astype(np.float32)  # top brighter

    rng = np.random.default_rng(seed)
    noise = rng.normal(loc=0.0, scale=0.08, size=(height, width)).astype(np.float32)

    vignette = (0.85 + 0.15 * (x * (1 - x) + y * (1 - y))).astype(np.float32)
    base = np.clip(grad * vignette + noise, 0, 1)
    R = np.clip(1.0 * base, 0, 1)
    G = np.clip(0.45 * base, 0, 1)
    B = np.clip(0.1 * base, 0, 1)
    A = np.ones_like(base)
    return (np.stack([R, G, B, A], axis=2) * 255).astype(np.uint8)
