import pytest

from xor_tickler.xor import InvalidKeyError, xor_apply, xor_single


class TestXorApply:
    """Test suite for xor_apply"""

    def test_single_byte_against_single_byte(self):
        """Test one data byte with one key byte"""
        assert xor_apply(bytes([0x65]), bytes([0xd1])) == bytes([0xb4])

    def test_key_shorter_than_data_cycles(self):
        """Test that a short key repeats over the data"""
        assert xor_apply(bytes([0x65, 0x21, 0xfa]), bytes([0xd1, 0x03])) == bytes([0xb4, 0x22, 0x2b])

    def test_key_longer_than_data_is_truncated(self):
        """Test that output length follows the data, not the key"""
        assert xor_apply(bytes([0xd1, 0x03]), bytes([0x65, 0x21, 0xfa])) == bytes([0xb4, 0x22])

    def test_same_size(self):
        """Test data and key of equal length"""
        assert xor_apply(bytes([0xd1, 0x03, 0xbf]), bytes([0x65, 0x21, 0xfa])) == bytes([0xb4, 0x22, 0x45])

    def test_known_repeating_key_vector(self):
        """Test the ICE repeating-key vector"""
        plaintext = b"Burning 'em, if you ain't quick and nimble\nI go crazy when I hear a cymbal"
        assert xor_apply(plaintext, b"ICE").hex() == (
            "0b3637272a2b2e63622c2e69692a23693a2a3c6324202d623d63343c2a26226324272765"
            "272a282b2f20430a652e2c652a3124333a653e2b2027630c692b20283165286326302e27282f"
        )

    @pytest.mark.parametrize("key", [b"\x00", b"x", b"SeCreT", bytes(range(256))])
    def test_self_inverse(self, key):
        """Test that applying the same key twice restores the data"""
        data = b"this text is encrypted with repeated xor"
        assert xor_apply(xor_apply(data, key), key) == data

    def test_empty_data(self):
        """Test that empty data stays empty"""
        assert xor_apply(b"", b"key") == b""

    def test_empty_key(self):
        """Test that an empty key is rejected"""
        with pytest.raises(InvalidKeyError, match="at least one byte"):
            xor_apply(b"data", b"")

    def test_invalid_key_is_value_error(self):
        """Test that callers can catch InvalidKeyError as ValueError"""
        assert issubclass(InvalidKeyError, ValueError)

    def test_returns_bytes(self):
        """Test that bytes-like inputs produce bytes"""
        assert isinstance(xor_apply(bytearray(b"ab"), memoryview(b"k")), bytes)


class TestXorSingle:
    """Test suite for xor_single"""

    def test_matches_xor_apply(self):
        """Test agreement with a one-byte repeating key"""
        data = b"Cooking MC's like a pound of bacon"
        assert xor_single(data, 0x58) == xor_apply(data, b"\x58")

    def test_key_out_of_range(self):
        """Test that values outside a byte are rejected"""
        with pytest.raises(InvalidKeyError):
            xor_single(b"data", 256)
        with pytest.raises(InvalidKeyError):
            xor_single(b"data", -1)
