"""
Falcon signatures over NTRU lattices, modulus q = 12289.

falcon512 and falcon1024 work on bytestrings; Falcon(n) works on the
expanded keys, for any degree n in {2, 4, ..., 1024}.
"""
import logging

from .errors import (
    FalconError, InvalidKeyEncoding, InvalidSeedLength, InvalidSignatureEncoding,
    KeyGenerationFailed, NotInvertible, SigningAborted, SigningAttemptsExhausted,
)
from .falcon import Falcon, SecretKey
from .params import FalconParam, params

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Falcon", "SecretKey", "FalconParam", "params",
    "FalconError", "InvalidKeyEncoding", "InvalidSeedLength", "InvalidSignatureEncoding",
    "KeyGenerationFailed", "NotInvertible", "SigningAborted", "SigningAttemptsExhausted",
]
