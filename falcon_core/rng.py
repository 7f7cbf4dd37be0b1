"""
Deterministic sources of randomness.

Every function of this package that needs randomness takes a callable
randombytes(k) -> k bytes. os.urandom is one; ChaCha20(seed).randombytes
is a reproducible one.
"""
from os import urandom

# https://pycryptodome.readthedocs.io/en/latest/src/cipher/chacha20.html
from Crypto.Cipher import ChaCha20 as _ChaCha20Cipher
from Crypto.Hash import SHAKE256

from .errors import SigningAborted


class ChaCha20:
    """
    A PRG expanding a seed with the ChaCha20 stream cipher.

    The 32-byte key and the 8-byte nonce of the cipher are derived from
    SHAKE256(seed), so that the seed can have any length.
    """

    def __init__(self, seed):
        material = SHAKE256.new(bytes(seed)).read(40)
        self.cipher = _ChaCha20Cipher.new(key=material[:32], nonce=material[32:])

    def randombytes(self, k):
        """Return the next k bytes of the keystream."""
        return self.cipher.encrypt(bytes(k))


def checked(randombytes):
    """
    Wrap randombytes so that any failure (an exception, or a bytestring of
    the wrong length) surfaces as SigningAborted.
    """
    def wrapper(k):
        try:
            out = randombytes(k)
        except Exception as err:
            raise SigningAborted("the source of randomness failed") from err
        if not isinstance(out, (bytes, bytearray)):
            raise SigningAborted("the source of randomness returned a %s" % type(out).__name__)
        if len(out) != k:
            raise SigningAborted("the source of randomness returned %d bytes instead of %d"
                                 % (len(out), k))
        return out
    return wrapper


def as_randombytes(rng):
    """
    Turn the rng argument of the byte-level API into a randombytes function:
    None for os.urandom, a bytestring for a ChaCha20 PRG seeded with it, or
    any callable randombytes(k) -> k bytes.
    """
    if rng is None:
        return urandom
    if isinstance(rng, (bytes, bytearray)):
        return ChaCha20(rng).randombytes
    if callable(rng):
        return rng
    raise TypeError("rng must be None, a bytestring or a callable, not %s" % type(rng).__name__)
