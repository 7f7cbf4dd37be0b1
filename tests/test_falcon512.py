"""
Falcon-512 Test Suite
Tests for the bytestring interface of Falcon-512 and Falcon-1024
"""

import pytest

from falcon_core import Falcon, InvalidKeyEncoding, InvalidSeedLength
from falcon_core import falcon512, falcon1024
from falcon_core.common import q
from falcon_core.encoding import decode_public_key
from falcon_core.ntrugen import gs_norm, karamul
from falcon_core.params import GS_BOUND, params
from falcon_core.precision import check_tree
from falcon_core.rng import ChaCha20


class TestFalcon512:
    """Tests for falcon512"""

    def test_sizes(self, keypair512):
        pk, sk = keypair512
        assert (falcon512.PUBLIC_KEY_BYTES, falcon512.SECRET_KEY_BYTES, falcon512.SIGNATURE_BYTES) == (897, 1281, 666)
        assert len(pk) == 897
        assert len(sk) == 1281
        assert len(falcon512.sign(b"size", sk)) == 666

    def test_headers(self, keypair512):
        pk, sk = keypair512
        assert pk[0] == 0x09
        assert sk[0] == 0x59
        assert falcon512.sign(b"header", sk)[0] == 0x39

    def test_keypair_is_deterministic(self, keypair512):
        assert falcon512.generate_keypair(bytes(32)) == keypair512

    def test_keypair_is_a_valid_trapdoor(self, keypair512):
        pk, sk = keypair512
        key = Falcon(512).unpack_sk(sk)
        fG = karamul(key.f, key.G)
        gF = karamul(key.g, key.F)
        assert [fG[i] - gF[i] for i in range(512)] == [q] + [0] * 511
        assert gs_norm(key.f, key.g) <= GS_BOUND ** 2
        assert check_tree(key.tree, params[512])
        assert key.h == decode_public_key(pk, 512)

    def test_seeded_signing(self, keypair512):
        pk, sk = keypair512
        sig1 = falcon512.sign(b"test", sk, rng=b"\x01" * 32)
        sig2 = falcon512.sign(b"test", sk, rng=b"\x01" * 32)
        assert sig1 == sig2
        assert falcon512.verify(b"test", sig1, pk)
        assert not falcon512.verify(b"tset", sig1, pk)

    def test_random_signing(self, keypair512):
        pk, sk = keypair512
        sig1 = falcon512.sign(b"test", sk)
        sig2 = falcon512.sign(b"test", sk)
        assert sig1 != sig2
        assert falcon512.verify(b"test", sig1, pk)
        assert falcon512.verify(b"test", sig2, pk)

    def test_callable_rng(self, keypair512):
        pk, sk = keypair512
        sig = falcon512.sign(b"callable", sk, rng=ChaCha20(b"callable").randombytes)
        assert falcon512.verify(b"callable", sig, pk)

    @pytest.mark.parametrize("bit", [0, 7, 8, 200, 330, 2000, 5000, 8 * 666 - 1])
    def test_bit_flip(self, keypair512, bit):
        pk, sk = keypair512
        sig = bytearray(falcon512.sign(b"flip", sk, rng=b"flip"))
        sig[bit >> 3] ^= 0x80 >> (bit & 7)
        assert not falcon512.verify(b"flip", bytes(sig), pk)

    def test_other_key(self, keypair512):
        _, sk = keypair512
        other_pk, _ = falcon512.generate_keypair(b"\x01" * 32)
        assert not falcon512.verify(b"key", falcon512.sign(b"key", sk), other_pk)

    def test_seed_length(self):
        with pytest.raises(InvalidSeedLength):
            falcon512.generate_keypair(bytes(31))

    def test_bad_public_key(self, keypair512):
        pk, sk = keypair512
        sig = falcon512.sign(b"pk", sk)
        with pytest.raises(InvalidKeyEncoding):
            falcon512.verify(b"pk", sig, pk[:-1])
        with pytest.raises(InvalidKeyEncoding):
            falcon512.verify(b"pk", sig, b"\x0a" + pk[1:])

    def test_bad_secret_key(self, keypair512):
        _, sk = keypair512
        with pytest.raises(InvalidKeyEncoding):
            falcon512.sign(b"sk", sk[:-1])

    def test_wrong_signature_length(self, keypair512):
        pk, sk = keypair512
        sig = falcon512.sign(b"len", sk)
        assert not falcon512.verify(b"len", sig[:-1], pk)
        assert not falcon512.verify(b"len", sig + b"\x00", pk)


class TestFalcon1024:
    """Tests for falcon1024"""

    def test_sizes(self):
        assert (falcon1024.PUBLIC_KEY_BYTES, falcon1024.SECRET_KEY_BYTES, falcon1024.SIGNATURE_BYTES) == (1793, 2305, 1280)

    @pytest.mark.slow
    def test_roundtrip(self):
        pk, sk = falcon1024.generate_keypair(b"\x03" * 32)
        assert (pk[0], sk[0]) == (0x0a, 0x5a)
        sig = falcon1024.sign(b"Falcon-1024", sk, rng=b"\x04" * 32)
        assert sig[0] == 0x3a
        assert len(sig) == 1280
        assert falcon1024.verify(b"Falcon-1024", sig, pk)
        assert not falcon1024.verify(b"Falcon-1023", sig, pk)
