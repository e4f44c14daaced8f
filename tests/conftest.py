# Shared fixtures for the stegano-pipeline test suite

import os
import sys

import numpy as np
import pytest

# Allow running the suite from a source checkout without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from stegano_pipeline.image_utils import generate_cover  # noqa: E402


@pytest.fixture
def key_matrix():
    """Default Hill key matrix (determinant 11)."""
    return [[3, 2], [5, 7]]


@pytest.fixture
def sdes_key():
    """Standard teaching key for S-DES."""
    return "1010000010"


@pytest.fixture
def blank_carrier():
    """Opaque black 8x8 RGBA buffer: every channel LSB is 0."""
    arr = np.zeros((8, 8, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    return arr


@pytest.fixture
def cover():
    """Noisy 32x32 RGBA cover image."""
    return generate_cover(32, 32, seed=7)
