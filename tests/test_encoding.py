"""
Encoding Test Suite
Tests for the compression of signatures and the encodings of keys
"""

import random

import pytest

from falcon_core.common import q
from falcon_core.encoding import (
    FG_bits, compress, decode_public_key, decode_secret_key, decode_signature,
    decompress, encode_public_key, encode_secret_key, encode_signature, fg_bits,
    pack_fields, pubkey_bytelen, seckey_bytelen, unpack_fields,
)
from falcon_core.errors import InvalidKeyEncoding, InvalidSignatureEncoding
from falcon_core.params import logn, params


class TestCompression:
    """Tests for compress and decompress"""

    def test_roundtrip(self):
        v = [0, 1, -1, 127, -128, 300, -2047, 2047, 5, 0]
        enc = compress(v, 40)
        assert len(enc) == 40
        assert decompress(enc, 40, len(v)) == v

    def test_known_encoding(self):
        # 1 -> sign 0, low 0000001, high "1"; 0 -> 0, 0000000, "1"; -129 -> 1, 0000001, "01"
        enc = compress([1, 0, -129], 4)
        bits = "000000011" + "000000001" + "1000000101"
        bits += "0" * (32 - len(bits))
        assert enc == int(bits, 2).to_bytes(4, "big")

    def test_too_long(self):
        assert compress([2000] * 10, 10) is False

    def test_too_large(self):
        assert compress([2048], 10) is False
        assert compress([-4000], 10) is False

    def test_wrong_length(self):
        with pytest.raises(InvalidSignatureEncoding):
            decompress(bytes(5), 4, 1)

    def test_negative_zero(self):
        with pytest.raises(InvalidSignatureEncoding):
            decompress(bytes([0x80, 0x80]), 2, 1)

    def test_non_zero_padding(self):
        enc = bytearray(compress([1], 2))
        enc[-1] |= 1
        with pytest.raises(InvalidSignatureEncoding):
            decompress(bytes(enc), 2, 1)

    def test_truncated(self):
        enc = compress([1], 2)
        with pytest.raises(InvalidSignatureEncoding):
            decompress(enc, 2, 2)

    def test_unterminated_high_bits(self):
        with pytest.raises(InvalidSignatureEncoding):
            decompress(bytes(4), 4, 1)

    def test_high_bits_too_large(self):
        # 16 zeros in unary: |coefficient| >= 2048
        bits = "0" + "0000000" + "0" * 16 + "1" + "0" * 7
        with pytest.raises(InvalidSignatureEncoding):
            decompress(int(bits, 2).to_bytes(4, "big"), 4, 1)

    def test_random_roundtrip(self):
        rnd = random.Random(42)
        v = [int(rnd.gauss(0, 165)) for _ in range(512)]
        v = [max(-2047, min(2047, elt)) for elt in v]
        slen = params[512].sig_bytelen - 41
        enc = compress(v, slen)
        assert enc is not False
        assert decompress(enc, slen, 512) == v


class TestBitFields:
    """Tests for pack_fields and unpack_fields"""

    def test_big_endian(self):
        assert pack_fields([([1, 2], 4)]) == bytes([0x12])
        assert pack_fields([([1], 14)]) == bytes([0x00, 0x04])

    def test_mixed_widths(self):
        data = pack_fields([([3, 5], 6), ([200], 8)])
        (a, b), padding = unpack_fields(data, [(2, 6), (1, 8)])
        assert (a, b, padding) == ([3, 5], [200], 0)
        assert len(data) == 3


class TestPublicKey:
    """Tests for the public key encoding"""

    @pytest.mark.parametrize("n, size", [(512, 897), (1024, 1793), (2, 5)])
    def test_sizes(self, n, size):
        assert pubkey_bytelen(n) == size
        h = [random.Random(n).randrange(q) for _ in range(n)]
        assert len(encode_public_key(h)) == size

    def test_roundtrip(self):
        rnd = random.Random(9)
        h = [rnd.randrange(q) for _ in range(512)]
        h[0] = q - 1
        enc = encode_public_key(h)
        assert enc[0] == 0x09
        assert decode_public_key(enc, 512) == h

    def test_wrong_header(self):
        enc = bytearray(encode_public_key([1] * 64))
        enc[0] = 0x07
        with pytest.raises(InvalidKeyEncoding):
            decode_public_key(bytes(enc), 64)

    def test_wrong_length(self):
        enc = encode_public_key([1] * 64)
        with pytest.raises(InvalidKeyEncoding):
            decode_public_key(enc[:-1], 64)
        with pytest.raises(InvalidKeyEncoding):
            decode_public_key(enc + b"\x00", 64)

    def test_coefficient_not_reduced(self):
        n = 64
        enc = bytes([logn[n]]) + pack_fields([([q] + [0] * (n - 1), 14)])
        with pytest.raises(InvalidKeyEncoding):
            decode_public_key(enc, n)

    def test_non_zero_padding(self):
        # 2 * 14 = 28 bits, so 4 bits of padding
        enc = bytearray(encode_public_key([5, 6]))
        enc[-1] |= 1
        with pytest.raises(InvalidKeyEncoding):
            decode_public_key(bytes(enc), 2)

    def test_unreduced_input(self):
        with pytest.raises(ValueError):
            encode_public_key([q] * 4)


class TestSecretKey:
    """Tests for the secret key encoding"""

    @pytest.mark.parametrize("n, size", [(512, 1281), (1024, 2305), (64, 177)])
    def test_sizes(self, n, size):
        assert seckey_bytelen(n) == size

    @pytest.mark.parametrize("n", [16, 64, 512])
    def test_roundtrip(self, n):
        rnd = random.Random(n)
        fgb = fg_bits[logn[n]]
        b1 = (1 << (fgb - 1)) - 1
        b2 = (1 << (FG_bits - 1)) - 1
        f = [rnd.randint(-b1, b1) for _ in range(n)]
        g = [rnd.randint(-b1, b1) for _ in range(n)]
        F = [rnd.randint(-b2, b2) for _ in range(n)]
        f[0], g[0], F[0] = -b1, b1, -b2
        enc = encode_secret_key(f, g, F)
        assert len(enc) == seckey_bytelen(n)
        assert enc[0] == 0x50 + logn[n]
        assert decode_secret_key(enc, n) == (f, g, F)

    def test_forbidden_value(self):
        n = 512
        # On 6 bits, 0b100000 would be -32
        body = pack_fields([([32] + [0] * (n - 1), 6), ([0] * n, 6), ([0] * n, 8)])
        with pytest.raises(InvalidKeyEncoding):
            decode_secret_key(bytes([0x59]) + body, n)

    def test_wrong_header(self):
        n = 512
        body = pack_fields([([0] * n, 6), ([0] * n, 6), ([0] * n, 8)])
        with pytest.raises(InvalidKeyEncoding):
            decode_secret_key(bytes([0x58]) + body, n)

    def test_wrong_length(self):
        with pytest.raises(InvalidKeyEncoding):
            decode_secret_key(bytes(100), 512)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            encode_secret_key([32] * 512, [0] * 512, [0] * 512)
        with pytest.raises(ValueError):
            encode_secret_key([0] * 512, [0] * 512, [-128] * 512)


class TestSignature:
    """Tests for the signature framing"""

    def test_roundtrip(self):
        param = params[64]
        salt = bytes(range(40))
        s2 = [3, -200, 0, 17] * 16
        sig = encode_signature(salt, s2, param)
        assert len(sig) == param.sig_bytelen
        assert sig[0] == 0x36
        assert decode_signature(sig, param) == (salt, s2)

    def test_too_long(self):
        assert encode_signature(bytes(40), [2000] * 64, params[64]) is False

    def test_wrong_length(self):
        sig = encode_signature(bytes(40), [1] * 64, params[64])
        with pytest.raises(InvalidSignatureEncoding):
            decode_signature(sig[:-1], params[64])

    def test_wrong_header(self):
        sig = bytearray(encode_signature(bytes(40), [1] * 64, params[64]))
        sig[0] = 0x39
        with pytest.raises(InvalidSignatureEncoding):
            decode_signature(bytes(sig), params[64])
