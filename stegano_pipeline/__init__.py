"""Stegano-Pipeline package: Hill cipher, S-DES and LSB image steganography.

Modules:
- hill: 2x2 Hill cipher over A-Z with modular matrix inversion
- sdes: Simplified DES key schedule and 2-round Feistel block cipher
- bitstream: text <-> bit string conversion and 8-bit block segmentation
- lsb: delimiter-framed LSB embedding/extraction in RGBA buffers, PSNR
- image_utils: image decode/encode and cover generation
- pipeline: end-to-end encrypt (Hill -> S-DES -> embed) and decrypt
- cli: command-line interface (hide/extract/cover)
"""

__all__ = [
    "bitstream",
    "errors",
    "hill",
    "image_utils",
    "lsb",
    "pipeline",
    "sdes",
]
