"""Shared fixtures: key generation is the slow part, so keys are built once."""

import pytest

from falcon_core import Falcon
from falcon_core import falcon512


@pytest.fixture(scope="session")
def falcon64():
    return Falcon(64)


@pytest.fixture(scope="session")
def keypair64(falcon64):
    """(sk, vk) for Falcon(64), from a fixed seed"""
    return falcon64.keygen(b"\x07" * 32)


@pytest.fixture(scope="session")
def keypair512():
    """(public_key, secret_key) bytes for Falcon-512, seed = 32 zero bytes"""
    return falcon512.generate_keypair(bytes(32))
