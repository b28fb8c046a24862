from itertools import cycle

from xor_tickler.utils import BytesLike


class InvalidKeyError(ValueError):
    pass


def xor_apply(data: BytesLike, key: BytesLike) -> bytes:
    """
    XOR data against a key repeated cyclically to the data's length.

    Applying the same key twice returns the original data, so this is both
    the encrypt and the decrypt operation.
    """
    if not key:
        raise InvalidKeyError("XOR key must be at least one byte long")
    return bytes(d ^ k for d, k in zip(data, cycle(key)))


def xor_single(data: BytesLike, key_byte: int) -> bytes:
    """XOR every byte of data with the same key byte."""
    if not 0 <= key_byte <= 0xFF:
        raise InvalidKeyError(f"Single byte key out of range: {key_byte}")
    return bytes(d ^ key_byte for d in data)
