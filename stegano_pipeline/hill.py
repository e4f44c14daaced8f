from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidKeyMatrix


logger = logging.getLogger(__name__)

MODULUS = 26
PAD_LETTER = "X"

MatrixLike = Union[np.ndarray, Sequence[Sequence[int]]]


@dataclass(frozen=True)
class HillResult:
    processed_text: str
    original_length: int
    cipher_text: str


def as_key_matrix(matrix: MatrixLike) -> np.ndarray:
    """Return `matrix` as a 2x2 int64 array with entries reduced mod 26."""
    arr = np.array(matrix, dtype=np.int64)
    if arr.shape != (2, 2):
        raise InvalidKeyMatrix(f"Key matrix must be 2x2, got shape {arr.shape}")
    return arr % MODULUS


def mod_inverse(a: int, m: int = MODULUS) -> Optional[int]:
    # Plain scan; the modulus is tiny and fixed.
    a %= m
    for i in range(1, m):
        if (a * i) % m == 1:
            return i
    return None


def determinant(matrix: MatrixLike) -> int:
    k = as_key_matrix(matrix)
    return int(k[0, 0] * k[1, 1] - k[0, 1] * k[1, 0]) % MODULUS


def is_invertible(matrix: MatrixLike) -> bool:
    return mod_inverse(determinant(matrix)) is not None


def inverse_matrix(matrix: MatrixLike) -> np.ndarray:
    k = as_key_matrix(matrix)
    det = determinant(k)
    det_inv = mod_inverse(det)
    if det_inv is None:
        raise InvalidKeyMatrix(
            f"Determinant {det} has no inverse mod {MODULUS}",
            details={"determinant": det},
        )
    adjugate = np.array([[k[1, 1], -k[0, 1]], [-k[1, 0], k[0, 0]]], dtype=np.int64)
    return (det_inv * adjugate) % MODULUS


def require_invertible(matrix: MatrixLike) -> np.ndarray:
    k = as_key_matrix(matrix)
    if not is_invertible(k):
        det = determinant(k)
        raise InvalidKeyMatrix(
            f"Key matrix determinant {det} is not coprime with {MODULUS}",
            details={"determinant": det},
        )
    return k


def prepare_text(text: str) -> Tuple[str, int]:
    """Keep ASCII letters only, upper-cased, padded to an even length.

    Returns the padded letters and the letter count before padding.
    """
    letters = "".join(ch for ch in text if ("A" <= ch <= "Z") or ("a" <= ch <= "z")).upper()
    original_length = len(letters)
    if original_length % 2:
        letters += PAD_LETTER
    return letters, original_length


def _apply(letters: str, k: np.ndarray) -> str:
    if not letters:
        return ""
    nums = np.frombuffer(letters.encode("ascii"), dtype=np.uint8).astype(np.int64) - ord("A")
    pairs = nums.reshape(-1, 2)
    out = (pairs @ k.T) % MODULUS
    return (out.reshape(-1) + ord("A")).astype(np.uint8).tobytes().decode("ascii")


def encode(text: str, matrix: MatrixLike) -> HillResult:
    k = require_invertible(matrix)
    processed, original_length = prepare_text(text)
    cipher_text = _apply(processed, k)
    logger.debug("Hill encode: %d letters, %d after padding", original_length, len(processed))
    return HillResult(processed_text=processed, original_length=original_length, cipher_text=cipher_text)


def decode(cipher_text: str, matrix: MatrixLike, original_length: Optional[int] = None) -> str:
    """Invert `encode`.

    With `original_length`, the result is cut to that many letters. Padding is
    never stripped by pattern since the message itself may end in 'X'.
    """
    k = require_invertible(matrix)
    if len(cipher_text) % 2:
        raise ValueError("Cipher text length must be even")
    if any(not ("A" <= ch <= "Z") for ch in cipher_text):
        raise ValueError("Cipher text may only contain letters A-Z")
    plain = _apply(cipher_text, inverse_matrix(k))
    if original_length is not None:
        plain = plain[:original_length]
    return plain
