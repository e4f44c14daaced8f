"""
Unit tests for the S-DES block cipher.
"""

import pytest

from stegano_pipeline import sdes
from stegano_pipeline.errors import InvalidBlockLength, InvalidKeyLength


class TestPrimitives:

    def test_permute_is_one_based(self):
        assert sdes.permute("abcd", [2, 4, 3, 1]) == "bdca"

    def test_left_rotate(self):
        assert sdes.left_rotate("10000", 1) == "00001"
        assert sdes.left_rotate("00001", 2) == "00100"

    def test_xor(self):
        assert sdes.xor("1100", "1010") == "0110"

    def test_sbox_lookup_uses_outer_and_inner_bits(self):
        # row 0b10 = 2, column 0b00 = 0
        assert sdes.sbox_lookup("1000", sdes.S0) == "00"
        # row 0b11 = 3, column 0b11 = 3
        assert sdes.sbox_lookup("1111", sdes.S1) == "11"


class TestKeySchedule:

    def test_reference_subkeys(self, sdes_key):
        assert sdes.key_schedule(sdes_key) == ("10100100", "01000011")

    @pytest.mark.parametrize("key", ["", "101", "10100000101", "10100000a0", "1010 00010"])
    def test_invalid_keys(self, key):
        with pytest.raises(InvalidKeyLength):
            sdes.key_schedule(key)


class TestBlocks:

    def test_reference_vector(self, sdes_key):
        k1, k2 = sdes.key_schedule(sdes_key)
        assert sdes.encrypt_block("10010111", k1, k2) == "00111000"
        assert sdes.decrypt_block("00111000", k1, k2) == "10010111"

    def test_second_vector(self, sdes_key):
        k1, k2 = sdes.key_schedule(sdes_key)
        assert sdes.encrypt_block("10100101", k1, k2) == "11001010"

    @pytest.mark.parametrize("key_int", range(0, 1024, 73))
    def test_involution_over_all_blocks(self, key_int):
        """Decrypting with the same subkeys restores every 8-bit block."""
        k1, k2 = sdes.key_schedule(format(key_int, "010b"))
        for value in range(256):
            block = format(value, "08b")
            assert sdes.decrypt_block(sdes.encrypt_block(block, k1, k2), k1, k2) == block

    def test_encryption_is_a_permutation(self, sdes_key):
        k1, k2 = sdes.key_schedule(sdes_key)
        outputs = {sdes.encrypt_block(format(v, "08b"), k1, k2) for v in range(256)}
        assert len(outputs) == 256

    @pytest.mark.parametrize("block", ["", "1010", "101010101", "1010101x"])
    def test_invalid_blocks(self, block, sdes_key):
        k1, k2 = sdes.key_schedule(sdes_key)
        with pytest.raises(InvalidBlockLength):
            sdes.encrypt_block(block, k1, k2)


class TestStreams:

    def test_round_trip(self, sdes_key):
        bits = "0100100001001001"
        assert sdes.decrypt(sdes.encrypt(bits, sdes_key), sdes_key) == bits

    def test_final_block_zero_padded(self, sdes_key):
        k1, k2 = sdes.key_schedule(sdes_key)
        cipher = sdes.encrypt("100101111010", sdes_key)
        assert len(cipher) == 16
        assert cipher[8:] == sdes.encrypt_block("10100000", k1, k2)

    def test_trace_records_each_block(self, sdes_key):
        trace = sdes.encrypt_trace("1001011110010111", sdes_key)
        assert trace == [("10010111", "00111000"), ("10010111", "00111000")]
        back = sdes.decrypt_trace("0011100000111000", sdes_key)
        assert [t.plain for t in back] == ["10010111", "10010111"]

    def test_empty_stream(self, sdes_key):
        assert sdes.encrypt("", sdes_key) == ""

    def test_key_checked_before_blocks(self):
        with pytest.raises(InvalidKeyLength):
            sdes.encrypt("10x", "1")
