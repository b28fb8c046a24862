from xor_tickler.bits import bit_distance, popcount


class TestPopcount:
    """Test suite for popcount"""

    def test_zero_and_full_byte(self):
        """Test the extremes of a byte"""
        assert popcount(0x00) == 0
        assert popcount(0xFF) == 8

    def test_mixed_bits(self):
        """Test a byte with some bits set"""
        assert popcount(0b1010_0110) == 4


class TestBitDistance:
    """Test suite for bit_distance"""

    def test_canonical_fixture(self):
        """Test the well known wokka wokka distance"""
        assert bit_distance(b"this is a test", b"wokka wokka!!!") == 37

    def test_single_bit_differences(self):
        """Test words differing in one bit"""
        assert bit_distance(b"HELLO", b"JELLO") == 1
        assert bit_distance(b"hello", b"jello") == 1
        assert bit_distance(b"AAAAA", b"JJJJA") == 12

    def test_symmetric(self):
        """Test that argument order doesn't matter for equal lengths"""
        a = b"\x00\x13\xff\x80"
        b = b"\x7f\x13\x0f\x01"
        assert bit_distance(a, b) == bit_distance(b, a)

    def test_identical_inputs(self):
        """Test that a sequence is at distance zero from itself"""
        data = bytes(range(256))
        assert bit_distance(data, data) == 0

    def test_upper_bound(self):
        """Test that the distance never exceeds 8 bits per byte"""
        assert bit_distance(b"\x00" * 4, b"\xff" * 4) == 32

    def test_empty_input(self):
        """Test that empty inputs have no positions to compare"""
        assert bit_distance(b"", b"") == 0
        assert bit_distance(b"", b"abc") == 0
        assert bit_distance(b"abc", b"") == 0

    def test_shorter_input_is_cycled(self):
        """Test that the shorter sequence repeats like a key"""
        assert bit_distance(b"\x00\x00\x00", b"\x01") == 3
        assert bit_distance(b"\x01", b"\x00\x00\x00") == 3
        assert bit_distance(b"\x00\x00\x00\x00", b"\x01\x03") == 6

    def test_accepts_bytearray_and_memoryview(self):
        """Test bytes-like inputs"""
        assert bit_distance(bytearray(b"this is a test"), memoryview(b"wokka wokka!!!")) == 37
