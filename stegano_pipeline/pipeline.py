from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from . import hill, lsb, sdes
from .bitstream import bits_to_text, text_to_bits
from .errors import CapacityExceeded, InvalidBlockLength
from .hill import HillResult, MatrixLike
from .lsb import EmbedResult
from .sdes import BlockTrace, SubKeyPair


logger = logging.getLogger(__name__)

DEFAULT_KEY_MATRIX: Tuple[Tuple[int, int], Tuple[int, int]] = ((3, 2), (5, 7))
DEFAULT_SDES_KEY = "1010000010"


@dataclass(frozen=True)
class EncryptionReport:
    hill: HillResult
    char_blocks: List[str]
    subkeys: SubKeyPair
    blocks: List[BlockTrace]
    pixels_touched: int
    capacity_bits: int
    used_bits: int
    psnr: float


@dataclass(frozen=True)
class DecryptionReport:
    extracted_bits: str
    decrypted_bits: str
    cipher_text: str
    plain_text: str


@dataclass(frozen=True)
class StegoArtifact:
    """Everything needed to undo one `encrypt` call."""

    stego_image: np.ndarray
    key_matrix: np.ndarray
    key10: str
    original_length: Optional[int]
    report: Optional[EncryptionReport] = None

    def summary(self) -> Dict[str, Any]:
        """JSON-ready view of the artifact without pixel data."""
        out: Dict[str, Any] = {
            "original_length": self.original_length,
            "key_matrix": self.key_matrix.tolist(),
            "key": self.key10,
        }
        r = self.report
        if r is not None:
            out.update(
                processed_text=r.hill.processed_text,
                cipher_text=r.hill.cipher_text,
                char_blocks=list(r.char_blocks),
                subkeys={"k1": r.subkeys.k1, "k2": r.subkeys.k2},
                blocks=[{"input": b.plain, "output": b.cipher} for b in r.blocks],
                pixels_touched=r.pixels_touched,
                used_bits=r.used_bits,
                capacity_bits=r.capacity_bits,
                psnr=None if math.isinf(r.psnr) else r.psnr,
            )
        return out


def encrypt(plain_text: str, key_matrix: MatrixLike, key10: str, carrier: np.ndarray) -> StegoArtifact:
    """Hill cipher -> 8-bit codes -> S-DES -> LSB embedding.

    Key material and carrier capacity are checked before any stage runs.
    """
    matrix = hill.require_invertible(key_matrix)
    subkeys = sdes.key_schedule(key10)
    carrier = lsb.as_pixel_buffer(carrier)

    processed, _ = hill.prepare_text(plain_text)
    required = 8 * len(processed) + len(lsb.DELIMITER)
    available = lsb.capacity_bits(carrier)
    if required > available:
        raise CapacityExceeded(
            f"Message needs {required} bits but the carrier holds {available}",
            details={"required_bits": required, "capacity_bits": available},
        )

    hill_result = hill.encode(plain_text, matrix)
    bits = text_to_bits(hill_result.cipher_text)
    blocks = sdes.encrypt_trace(bits, key10)
    cipher_bits = "".join(b.cipher for b in blocks)
    embedded: EmbedResult = lsb.embed(carrier, cipher_bits)
    logger.debug(
        "Encrypted %d letters into %d blocks, %d/%d bits used",
        hill_result.original_length, len(blocks), embedded.used_bits, embedded.capacity_bits,
    )

    report = EncryptionReport(
        hill=hill_result,
        char_blocks=[text_to_bits(ch) for ch in hill_result.cipher_text],
        subkeys=subkeys,
        blocks=blocks,
        pixels_touched=embedded.pixels_touched,
        capacity_bits=embedded.capacity_bits,
        used_bits=embedded.used_bits,
        psnr=embedded.psnr,
    )
    return StegoArtifact(
        stego_image=embedded.stego,
        key_matrix=matrix,
        key10=key10,
        original_length=hill_result.original_length,
        report=report,
    )


def decrypt_report(artifact: StegoArtifact) -> DecryptionReport:
    matrix = hill.require_invertible(artifact.key_matrix)
    sdes.validate_key(artifact.key10)

    extracted = lsb.extract(artifact.stego_image)
    if len(extracted) % sdes.BLOCK_BITS:
        raise InvalidBlockLength(
            f"Extracted payload of {len(extracted)} bits is not byte aligned",
            details={"payload_bits": len(extracted)},
        )
    decrypted = sdes.decrypt(extracted, artifact.key10)
    cipher_text = bits_to_text(decrypted)
    plain_text = hill.decode(cipher_text, matrix, artifact.original_length)
    logger.debug("Decrypted %d payload bits into %d letters", len(extracted), len(plain_text))
    return DecryptionReport(
        extracted_bits=extracted,
        decrypted_bits=decrypted,
        cipher_text=cipher_text,
        plain_text=plain_text,
    )


def decrypt(artifact: StegoArtifact) -> str:
    return decrypt_report(artifact).plain_text
