from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .bitstream import is_bit_string
from .errors import CapacityExceeded, DelimiterCollision, DelimiterNotFound


logger = logging.getLogger(__name__)

DELIMITER = "1111111111111110"
CHANNELS = 4  # RGBA
DATA_CHANNELS = 3  # alpha is never written

# extraction scans this many low bits at a time
_SCAN_CHUNK = 1 << 16


@dataclass(frozen=True)
class EmbedResult:
    stego: np.ndarray
    pixels_touched: int
    capacity_bits: int
    used_bits: int
    psnr: float


def as_pixel_buffer(array: np.ndarray) -> np.ndarray:
    """Validate an (height, width, 4) RGBA array and return it as uint8.

    Integer arrays are accepted when every value fits in a byte; anything else
    is rejected rather than wrapped or truncated.
    """
    arr = np.asarray(array)
    if arr.ndim != 3 or arr.shape[2] != CHANNELS:
        raise ValueError(f"Pixel buffer must have shape (height, width, 4), got {arr.shape}")
    if arr.dtype == np.uint8:
        return arr
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"Pixel buffer must hold integers, got dtype {arr.dtype}")
    if arr.size and (arr.min() < 0 or arr.max() > 255):
        raise ValueError("Pixel values must lie in 0..255")
    return arr.astype(np.uint8)


def capacity_bits(buffer: np.ndarray) -> int:
    buf = as_pixel_buffer(buffer)
    return buf.shape[0] * buf.shape[1] * DATA_CHANNELS


def _bits_to_array(bits: str) -> np.ndarray:
    if not bits:
        return np.zeros(0, dtype=np.uint8)
    return np.frombuffer(bits.encode("ascii"), dtype=np.uint8) - ord("0")


def _array_to_bits(arr: np.ndarray) -> str:
    return (arr.astype(np.uint8) + ord("0")).tobytes().decode("ascii")


def embed(carrier: np.ndarray, payload_bits: str) -> EmbedResult:
    """Hide `payload_bits` followed by DELIMITER in the R, G, B low bits.

    The carrier is copied; the caller's buffer is left untouched.
    """
    original = as_pixel_buffer(carrier)
    if not is_bit_string(payload_bits):
        raise ValueError("Payload may only contain '0' and '1'")
    full_payload = payload_bits + DELIMITER
    marker_at = full_payload.find(DELIMITER)
    if marker_at != len(payload_bits):
        raise DelimiterCollision(
            f"Payload contains the end-of-payload marker at bit {marker_at}",
            details={"offset": marker_at, "payload_bits": len(payload_bits)},
        )
    capacity = capacity_bits(original)
    used = len(full_payload)
    if used > capacity:
        raise CapacityExceeded(
            f"Payload needs {used} bits but the carrier holds {capacity}",
            details={"required_bits": used, "capacity_bits": capacity},
        )

    stego = np.array(original, dtype=np.uint8, copy=True, order="C")
    flat = stego.reshape(-1)
    idx = np.arange(used)
    # i-th payload bit goes to pixel i // 3, channel i % 3
    positions = (idx // DATA_CHANNELS) * CHANNELS + idx % DATA_CHANNELS
    flat[positions] = (flat[positions] & 0xFE) | _bits_to_array(full_payload)

    quality = psnr(original, stego)
    logger.debug("Embedded %d/%d bits, PSNR %.2f dB", used, capacity, quality)
    return EmbedResult(
        stego=stego,
        pixels_touched=math.ceil(used / DATA_CHANNELS),
        capacity_bits=capacity,
        used_bits=used,
        psnr=quality,
    )


def extract(stego: np.ndarray) -> str:
    """Return the bits that precede the first DELIMITER in the R, G, B low bits.

    DELIMITER is fifteen ones and a zero, so a match ends at any zero whose
    previous zero lies more than fifteen bits back. The low bits are scanned
    in chunks that overlap by fifteen bits and the scan stops at the first hit.
    """
    buf = as_pixel_buffer(stego)
    lsbs = (buf[:, :, :DATA_CHANNELS] & 1).reshape(-1)
    run = len(DELIMITER) - 1
    for start in range(0, lsbs.size, _SCAN_CHUNK):
        lo = max(0, start - run)
        zeros = np.flatnonzero(lsbs[lo:start + _SCAN_CHUNK] == 0)
        if zeros.size == 0:
            continue
        prev = np.empty_like(zeros)
        prev[0] = -1
        prev[1:] = zeros[:-1]
        # zeros in the overlap were already judged by the previous chunk
        hits = zeros[(zeros - prev > run) & (zeros + lo >= start)]
        if hits.size:
            end = lo + int(hits[0])
            payload_len = end - run
            logger.debug("Delimiter found after %d payload bits", payload_len)
            return _array_to_bits(lsbs[:payload_len])
    raise DelimiterNotFound(
        "No end-of-payload marker found; image is corrupted or holds no message",
        details={"scanned_bits": int(lsbs.size)},
    )


def mse(original: np.ndarray, modified: np.ndarray) -> float:
    a = as_pixel_buffer(original)
    b = as_pixel_buffer(modified)
    if a.shape != b.shape:
        raise ValueError("Images must be same shape")
    diff = a[:, :, :DATA_CHANNELS].astype(np.float64) - b[:, :, :DATA_CHANNELS].astype(np.float64)
    if diff.size == 0:
        return 0.0
    # mean over pixels of the per-pixel RGB mean
    return float(np.mean(diff ** 2))


def psnr(original: np.ndarray, modified: np.ndarray) -> float:
    err = mse(original, modified)
    if err == 0:
        return float("inf")
    return 20 * math.log10(255.0 / math.sqrt(err))
