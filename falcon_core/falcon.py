"""
Python implementation of Falcon:
https://falcon-sign.info/.
"""
import logging
from dataclasses import dataclass
from math import sqrt
# Randomness
from os import urandom

# https://pycryptodome.readthedocs.io/en/latest/src/hash/shake256.html
from Crypto.Hash import SHAKE256

from .common import q, sqnorm
from .encoding import (
    FG_bits, decode_public_key, decode_secret_key, decode_signature,
    encode_public_key, encode_secret_key, encode_signature, fits,
)
from .errors import (
    InvalidKeyEncoding, InvalidSeedLength, InvalidSignatureEncoding,
    KeyGenerationFailed, SigningAttemptsExhausted,
)
from .ffsampling import FalconTree, ffsampling_fft, gram_fft
from .fft import fft, ifft, neg, round_poly, sub
from .ntrugen import karamul, ntru_candidates
from .ntt import center_zq, div_zq, is_invertible, mul_zq, sub_zq
from .params import KEYGEN_SEED_LEN, SALT_LEN, SEED_LEN, FalconParam, params
from .precision import check_fft_precision, check_tree
from .rng import ChaCha20, checked

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SecretKey:
    """
    A Falcon secret key, in expanded form.
    - f, g, F, G verify f * G - g * F = q mod (x ** n + 1)
    - B0_fft is the basis [[g, -f], [G, -F]] in FFT representation
    - tree is the normalized falcon tree of B0
    - h = g / f mod (x ** n + 1, q) is the public key
    """
    f: list[int]
    g: list[int]
    F: list[int]
    G: list[int]
    B0_fft: list
    tree: FalconTree
    h: list[int]

    def to_bytes(self) -> bytes:
        return encode_secret_key(self.f, self.g, self.F)

    def public_key(self) -> bytes:
        return encode_public_key(self.h)


class Falcon:
    """
    Falcon for a given degree n.

    Typical example of how to use this class:

    >>> falcon = Falcon(n)  # n a power-of-two between 2 and 1024
    >>> sk, vk = falcon.keygen()
    >>> sig = falcon.sign(sk, msg)
    >>> assert (falcon.verify(vk, msg, sig) == True)

    """
    param: FalconParam

    def __init__(self, n: int, param: FalconParam | None = None):
        if param is None:
            if n not in params:
                raise ValueError("Falcon is only defined for n a power of two in [2, 1024]")
            param = params[n]
        if param.n != n:
            raise ValueError("the parameters are for degree %d, not %d" % (param.n, n))
        self.param = param
        # The norm of v = z * B0 is at most that of (c, 0) plus that of s
        if not check_fft_precision(n, q * sqrt(n) + sqrt(param.sig_bound)):
            raise ValueError("double precision is not enough for n = %d" % n)

    def hash_to_point(self, message: bytes, salt: bytes) -> list[int]:
        """
        Hash (salt, message) to a polynomial with coefficients in [0, q - 1].

        SHAKE256(salt || message) is read 16 bits at a time (big-endian),
        and values at or above 5 * q are rejected so that the reduction
        mod q is uniform.
        """
        n = self.param.n
        if q > (1 << 16):
            raise ValueError("The modulus is too large")

        limit = ((1 << 16) // q) * q
        shake = SHAKE256.new(salt + message)
        hashed = []
        while len(hashed) < n:
            elt = int.from_bytes(shake.read(2), "big")
            if elt < limit:
                hashed.append(elt % q)
        return hashed

    def _expand(self, f, g, F, G):
        """
        From f, g, F, G, compute the basis B0 of a NTRU lattice
        and its normalized falcon tree.
        """
        B0 = [[g, neg(f)], [G, neg(F)]]
        B0_fft = [[fft(elt) for elt in row] for row in B0]
        G0_fft = gram_fft(B0_fft)
        tree = FalconTree.from_gram(G0_fft)
        tree.normalize(self.param.sigma)
        return B0_fft, tree

    def keygen(self, seed: bytes | None = None):
        """
        Generate a key pair (sk, vk) from a 32-byte seed.
        Without a seed, one is drawn with urandom.

        Raise InvalidSeedLength for a seed of the wrong length, and
        KeyGenerationFailed if no key is found within the retry budget.
        """
        n = self.param.n
        if seed is None:
            seed = urandom(KEYGEN_SEED_LEN)
        if len(seed) != KEYGEN_SEED_LEN:
            raise InvalidSeedLength("the seed must be %d bytes long, not %d"
                                    % (KEYGEN_SEED_LEN, len(seed)))
        prng = ChaCha20(seed)

        # Compute NTRU polynomials f, g, F, G verifying fG - gF = q mod Phi
        for f, g, F, G in ntru_candidates(n, prng.randombytes, self.param.keygen_attempts):
            B0_fft, tree = self._expand(f, g, F, G)
            # Every leaf must be a valid std. dev. for samplerz
            if not check_tree(tree, self.param):
                logger.debug("falcon tree out of [sigmin, MAX_SIGMA], restarting")
                continue
            # The public key is a polynomial such that h*f = g mod (Phi,q)
            h = div_zq(g, f)
            sk = SecretKey(f, g, F, G, B0_fft, tree, h)
            return sk, sk.public_key()
        raise KeyGenerationFailed("no key found in %d attempts" % self.param.keygen_attempts)

    def pack_sk(self, sk: SecretKey) -> bytes:
        """
        Pack a Falcon secret key into a bytestring.
        To be used in conjunction with unpack_sk.
        """
        return sk.to_bytes()

    def unpack_sk(self, sk_bytes: bytes) -> SecretKey:
        """
        Unpack a bytestring to a Falcon secret key.
        G is recomputed from f, g, F.

        How to use:

        >>> falcon = Falcon(n)
        >>> sk, _ = falcon.keygen()
        >>> sk_bytes = falcon.pack_sk(sk)
        >>> sk_2 = falcon.unpack_sk(sk_bytes)
        >>> assert (sk.f == sk_2.f and sk.G == sk_2.G)

        Raise InvalidKeyEncoding if the bytestring is not a valid key.
        """
        n = self.param.n
        f, g, F = decode_secret_key(sk_bytes, n)
        if not is_invertible(f):
            raise InvalidKeyEncoding("f is not invertible mod q")
        # G = (q + g * F) / f, and q = 0 mod q
        G = center_zq(div_zq(mul_zq(g, F), f))
        if not fits(G, FG_bits):
            raise InvalidKeyEncoding("G does not fit on %d bits" % FG_bits)
        if sub(karamul(f, G), karamul(g, F)) != [q] + [0] * (n - 1):
            raise InvalidKeyEncoding("f, g, F do not verify the NTRU equation")
        B0_fft, tree = self._expand(f, g, F, G)
        if not check_tree(tree, self.param):
            raise InvalidKeyEncoding("the secret basis is not short enough")
        h = div_zq(g, f)
        return SecretKey(f, g, F, G, B0_fft, tree, h)

    def unpack_vk(self, vk: bytes) -> list[int]:
        """Unpack a public key, raise InvalidKeyEncoding if malformed."""
        return decode_public_key(vk, self.param.n)

    def sample_preimage(self, sk: SecretKey, point, randombytes):
        """
        Sample a short vector s such that s[0] + s[1] * h = point.

        The target t = (point, 0) * B0^-1 is sampled to an integral z with
        ffsampling; v = z * B0 is then a lattice vector close to (point, 0),
        and s = (point, 0) - v.
        """
        [[a, b], [c, d]] = sk.B0_fft

        # B0^-1 = [[-F, f], [-G, g]] / q, and the second coordinate is 0
        c_fft = fft(point)
        t_fft = [(c_fft * d) / q, (-c_fft * b) / q]
        z_fft = ffsampling_fft(t_fft, sk.tree, self.param.sigmin, randombytes)

        v0 = round_poly(ifft(z_fft[0] * a + z_fft[1] * c))
        v1 = round_poly(ifft(z_fft[0] * b + z_fft[1] * d))
        return [sub(point, v0), neg(v1)]

    def sign(self, sk: SecretKey, message: bytes, randombytes=urandom) -> bytes:
        """
        Sign a message. The message MUST be a byte string or byte array.
        Optionally, one can select the source of (pseudo-)randomness used
        (default: urandom).

        Raise SigningAborted if randombytes fails, and SigningAttemptsExhausted
        if no short enough signature is found within the retry budget.
        """
        randombytes = checked(randombytes)

        # We repeat the signing procedure until we find a signature that is
        # short enough (both the Euclidean norm and the bytelength)
        for attempt in range(self.param.sign_attempts):
            salt = randombytes(SALT_LEN)
            hashed = self.hash_to_point(message, salt)
            # The Gaussian samples come from a ChaCha20 PRG
            # seeded with fresh bytes of randombytes.
            seed = randombytes(SEED_LEN)
            s = self.sample_preimage(sk, hashed, ChaCha20(seed).randombytes)
            norm_sign = sqnorm(s)
            # Check the Euclidean norm
            if norm_sign > self.param.sig_bound:
                logger.debug("attempt %d: squared norm %d too large", attempt, norm_sign)
                continue
            signature = encode_signature(salt, s[1], self.param)
            # Check that the encoding is valid (sometimes it fails)
            if signature is False:
                logger.debug("attempt %d: s2 does not compress", attempt)
                continue
            return signature
        raise SigningAttemptsExhausted(
            "no signature found in %d attempts" % self.param.sign_attempts)

    def verify(self, vk: bytes, message: bytes, signature: bytes) -> bool:
        """
        Verify a signature.

        Raise InvalidKeyEncoding if vk is malformed; a malformed signature
        is simply rejected.
        """
        # Unpack vk, the salt and the short polynomial s2
        h = self.unpack_vk(vk)
        try:
            salt, s2 = decode_signature(signature, self.param)
        except InvalidSignatureEncoding as err:
            logger.info("Invalid encoding: %s", err)
            return False

        # Compute s1 and normalize its coefficients in (-q/2, q/2]
        hashed = self.hash_to_point(message, salt)
        s1 = center_zq(sub_zq(hashed, mul_zq(s2, h)))

        # Check that the (s1, s2) is short
        norm_sign = sqnorm([s1, s2])
        if norm_sign > self.param.sig_bound:
            logger.info("Squared norm of signature is too large: %d", norm_sign)
            return False

        # If all checks are passed, accept
        return True
