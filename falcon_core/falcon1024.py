"""
Falcon-1024 on bytestrings.

>>> pk, sk = generate_keypair(seed)          # 1793 and 2305 bytes
>>> sig = sign(b"message", sk)               # 1280 bytes
>>> assert verify(b"message", sig, pk)
"""
from .encoding import pubkey_bytelen, seckey_bytelen
from .falcon import Falcon
from .rng import as_randombytes

N = 1024

_falcon = Falcon(N)

PUBLIC_KEY_BYTES = pubkey_bytelen(N)
SECRET_KEY_BYTES = seckey_bytelen(N)
SIGNATURE_BYTES = _falcon.param.sig_bytelen


def generate_keypair(seed: bytes) -> tuple[bytes, bytes]:
    """Derive a key pair (public_key, secret_key) from a 32-byte seed."""
    sk, pk = _falcon.keygen(seed)
    return pk, _falcon.pack_sk(sk)


def sign(message: bytes, secret_key: bytes, rng=None) -> bytes:
    """
    Sign message with secret_key.

    rng is None (os.urandom), seed bytes for a ChaCha20 PRG, or a
    callable randombytes(k) -> k bytes. The same seed gives the same
    signature.
    """
    sk = _falcon.unpack_sk(secret_key)
    return _falcon.sign(sk, message, as_randombytes(rng))


def verify(message: bytes, signature: bytes, public_key: bytes) -> bool:
    """Check signature on message; a malformed public_key raises InvalidKeyEncoding."""
    return _falcon.verify(public_key, message, signature)
