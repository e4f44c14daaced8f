from __future__ import annotations

import logging
from typing import List, NamedTuple, Sequence

from .bitstream import is_bit_string, segment_blocks
from .errors import InvalidBlockLength, InvalidKeyLength


logger = logging.getLogger(__name__)

P10 = [3, 5, 2, 7, 4, 10, 1, 9, 8, 6]
P8 = [6, 3, 7, 4, 8, 5, 10, 9]
IP = [2, 6, 3, 1, 4, 8, 5, 7]
IP_INV = [4, 1, 3, 5, 7, 2, 8, 6]
EP = [4, 1, 2, 3, 2, 3, 4, 1]
P4 = [2, 4, 3, 1]

S0 = [
    [1, 0, 3, 2],
    [3, 2, 1, 0],
    [0, 2, 1, 3],
    [3, 1, 3, 2],
]
S1 = [
    [0, 1, 2, 3],
    [2, 0, 1, 3],
    [3, 0, 1, 0],
    [2, 1, 0, 3],
]

KEY_BITS = 10
BLOCK_BITS = 8


class SubKeyPair(NamedTuple):
    k1: str
    k2: str


class BlockTrace(NamedTuple):
    plain: str
    cipher: str


def permute(bits: str, table: Sequence[int]) -> str:
    """Pick `bits` positions listed in `table` (1-based)."""
    return "".join(bits[pos - 1] for pos in table)


def left_rotate(bits: str, n: int) -> str:
    n %= len(bits)
    return bits[n:] + bits[:n]


def xor(a: str, b: str) -> str:
    return "".join("1" if x != y else "0" for x, y in zip(a, b))


def sbox_lookup(bits: str, box: Sequence[Sequence[int]]) -> str:
    # outer bits select the row, inner bits the column
    row = int(bits[0] + bits[3], 2)
    col = int(bits[1] + bits[2], 2)
    return format(box[row][col], "02b")


def validate_key(key10: str) -> None:
    if not isinstance(key10, str) or len(key10) != KEY_BITS or not is_bit_string(key10):
        raise InvalidKeyLength(
            f"S-DES key must be exactly {KEY_BITS} binary digits",
            details={"key_length": len(key10) if isinstance(key10, str) else None},
        )


def validate_block(block8: str) -> None:
    if not isinstance(block8, str) or len(block8) != BLOCK_BITS or not is_bit_string(block8):
        raise InvalidBlockLength(
            f"S-DES block must be exactly {BLOCK_BITS} binary digits",
            details={"block_length": len(block8) if isinstance(block8, str) else None},
        )


def key_schedule(key10: str) -> SubKeyPair:
    """Derive (K1, K2) from a 10-bit key.

    K1 comes from rotating both P10 halves by one; K2 rotates those already
    rotated halves by two more.
    """
    validate_key(key10)
    p10 = permute(key10, P10)
    left1 = left_rotate(p10[:5], 1)
    right1 = left_rotate(p10[5:], 1)
    k1 = permute(left1 + right1, P8)

    left2 = left_rotate(left1, 2)
    right2 = left_rotate(right1, 2)
    k2 = permute(left2 + right2, P8)
    return SubKeyPair(k1, k2)


def f(right: str, subkey: str) -> str:
    expanded = permute(right, EP)
    mixed = xor(expanded, subkey)
    s_out = sbox_lookup(mixed[:4], S0) + sbox_lookup(mixed[4:], S1)
    return permute(s_out, P4)


def encrypt_block(block8: str, k1: str, k2: str) -> str:
    validate_block(block8)
    current = permute(block8, IP)
    left, right = current[:4], current[4:]

    # round 1 swaps halves
    new_left = right
    new_right = xor(left, f(right, k1))

    # round 2 does not
    final_left = xor(new_left, f(new_right, k2))
    final_right = new_right
    return permute(final_left + final_right, IP_INV)


def decrypt_block(block8: str, k1: str, k2: str) -> str:
    return encrypt_block(block8, k2, k1)


def encrypt_trace(bits: str, key10: str) -> List[BlockTrace]:
    keys = key_schedule(key10)
    blocks = segment_blocks(bits, BLOCK_BITS)
    logger.debug("S-DES encrypt: %d blocks, K1=%s K2=%s", len(blocks), keys.k1, keys.k2)
    return [BlockTrace(b, encrypt_block(b, keys.k1, keys.k2)) for b in blocks]


def decrypt_trace(bits: str, key10: str) -> List[BlockTrace]:
    """Per-block trace of decryption; `plain` holds the recovered block."""
    keys = key_schedule(key10)
    blocks = segment_blocks(bits, BLOCK_BITS)
    logger.debug("S-DES decrypt: %d blocks", len(blocks))
    return [BlockTrace(decrypt_block(b, keys.k1, keys.k2), b) for b in blocks]


def encrypt(bits: str, key10: str) -> str:
    return "".join(t.cipher for t in encrypt_trace(bits, key10))


def decrypt(bits: str, key10: str) -> str:
    return "".join(t.plain for t in decrypt_trace(bits, key10))
