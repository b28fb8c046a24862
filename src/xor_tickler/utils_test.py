import pytest

from xor_tickler.utils import (
    PluginLoadError,
    PluginSignatureError,
    b64_decode,
    b64_encode,
    decode_input,
    hex_decode,
    hex_encode,
    load_ciphertext,
    load_criterion_fn,
)


class TestBase64:
    """Test suite for the base64 helpers"""

    def test_encode_str_and_bytes(self):
        """Test that str and bytes encode the same"""
        assert b64_encode("hello") == b64_encode(b"hello") == "aGVsbG8="

    def test_encode_urlsafe(self):
        """Test the URL-safe alphabet"""
        assert b64_encode(b"\xfb\xff", urlsafe=True) == "-_8="

    def test_decode_missing_padding(self):
        """Test that stripped padding is restored"""
        assert b64_decode("aGVsbG8") == b"hello"

    def test_decode_ignores_whitespace(self):
        """Test that line breaks are ignored"""
        assert b64_decode("aGVs\nbG8=\n") == b"hello"

    def test_decode_falls_back_to_urlsafe(self):
        """Test URL-safe input without the urlsafe flag"""
        assert b64_decode("-_8=") == b"\xfb\xff"

    def test_decode_return_str(self):
        """Test decoding straight to text"""
        assert b64_decode("aGVsbG8=", return_str=True) == "hello"

    def test_encode_rejects_other_types(self):
        """Test that non bytes-like values are rejected"""
        with pytest.raises(TypeError):
            b64_encode(42)


class TestHex:
    """Test suite for the hex helpers"""

    def test_encode(self):
        """Test lowercase hex output"""
        assert hex_encode(b"\x0b\x36\xff") == "0b36ff"

    def test_decode_ignores_whitespace(self):
        """Test hex split over lines"""
        assert hex_decode("0b 36\nff\n") == b"\x0b\x36\xff"

    def test_decode_invalid(self):
        """Test that non-hex input raises"""
        with pytest.raises(ValueError):
            hex_decode("zz")


class TestDecodeInput:
    """Test suite for decode_input and load_ciphertext"""

    @pytest.mark.parametrize(
        "data, fmt",
        [
            (b"aGVsbG8=\n", "b64"),
            (b"aGVsbG8\n", "b64_urlsafe"),
            (b"68656c6c6f\n", "hex"),
            (b"hello", "raw"),
        ],
    )
    def test_formats(self, data, fmt):
        """Test every supported format"""
        assert decode_input(data, fmt) == b"hello"

    def test_unknown_format(self):
        """Test that an unknown format is rejected"""
        with pytest.raises(ValueError, match="Invalid ciphertext format"):
            decode_input(b"hello", "rot13")

    def test_load_ciphertext(self, tmp_path):
        """Test loading from a file"""
        path = tmp_path / "ciphertext.hex"
        path.write_bytes(b"0b3637\n")
        assert load_ciphertext(str(path), "hex") == b"\x0b\x36\x37"


class TestLoadCriterionFn:
    """Test suite for load_criterion_fn"""

    def test_loads_score_function(self, tmp_path):
        """Test a valid plugin"""
        path = tmp_path / "plugin.py"
        path.write_text("def score(data):\n    return float(data.count(b'e'))\n")
        fn = load_criterion_fn(str(path))
        assert fn(b"eee") == 3.0

    def test_missing_function(self, tmp_path):
        """Test a plugin without a score function"""
        path = tmp_path / "plugin.py"
        path.write_text("def other(data):\n    return 0.0\n")
        with pytest.raises(PluginLoadError):
            load_criterion_fn(str(path))

    def test_wrong_signature(self, tmp_path):
        """Test a score function with the wrong arity"""
        path = tmp_path / "plugin.py"
        path.write_text("def score(data, extra):\n    return 0.0\n")
        with pytest.raises(PluginSignatureError):
            load_criterion_fn(str(path))

    def test_not_a_module(self, tmp_path):
        """Test a path that can't be loaded as a module"""
        path = tmp_path / "plugin.txt"
        path.write_text("not python")
        with pytest.raises(PluginLoadError):
            load_criterion_fn(str(path))
