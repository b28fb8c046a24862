"""Break repeating-key XOR without knowing the key."""

__version__ = "0.1.0"
