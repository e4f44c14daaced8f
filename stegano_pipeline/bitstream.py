from __future__ import annotations

from typing import List


def is_bit_string(bits: str) -> bool:
    return all(b in "01" for b in bits)


def text_to_bits(text: str) -> str:
    """Concatenate the 8-bit code of every character, most significant bit first."""
    out: List[str] = []
    for ch in text:
        code = ord(ch)
        if code > 0xFF:
            raise ValueError(f"Character {ch!r} does not fit in 8 bits")
        out.append(format(code, "08b"))
    return "".join(out)


def bits_to_text(bits: str) -> str:
    if len(bits) % 8 != 0:
        raise ValueError("Bit length not divisible by 8")
    if not is_bit_string(bits):
        raise ValueError("Bit string may only contain '0' and '1'")
    return "".join(chr(int(bits[i:i + 8], 2)) for i in range(0, len(bits), 8))


def segment_blocks(bits: str, width: int = 8) -> List[str]:
    """Split `bits` into `width`-sized blocks.

    Only the final block is right-padded with zeros. The padding cannot be
    undone without knowing the true payload length.
    """
    if width <= 0:
        raise ValueError("Block width must be positive")
    blocks = [bits[i:i + width] for i in range(0, len(bits), width)]
    if blocks and len(blocks[-1]) < width:
        blocks[-1] = blocks[-1].ljust(width, "0")
    return blocks
