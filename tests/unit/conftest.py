"""
Shared fixtures: deterministic random sources and key material.
"""

import hashlib
import itertools

import pytest

from pivy_stealth.core.keys import Keypair, MetaKeys


def _counter_source(tag: bytes):
    counter = itertools.count()

    def random_bytes(n: int) -> bytes:
        out = b""
        while len(out) < n:
            out += hashlib.sha256(tag + next(counter).to_bytes(8, "big")).digest()
        return out[:n]

    return random_bytes


@pytest.fixture
def make_random():
    """Factory for reproducible byte sources; different tags give different streams."""
    return _counter_source


@pytest.fixture
def random_source():
    return _counter_source(b"payer")


@pytest.fixture
def meta_keys():
    return MetaKeys.generate(_counter_source(b"recipient"))


@pytest.fixture
def other_meta_keys():
    return MetaKeys.generate(_counter_source(b"someone-else"))


@pytest.fixture
def eph():
    return Keypair.generate(_counter_source(b"ephemeral"))
