"""One-time pad generation, encryption, decryption and randomness assessment."""

__version__ = "0.1.0"
__all__ = ["cli", "pad", "randomness", "report"]