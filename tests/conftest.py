import random

import pytest

from config import Defaults
from config.settings import get_settings
from fingerprint.engine import RabinFingerprintEngine


def reference_fingerprint(data: bytes, polynomial: int = Defaults.POLYNOMIAL, seed: int = 0) -> int:
    """Bit-serial M(x) mod (x^64 + polynomial), no tables involved."""
    modulus = (1 << 64) | polynomial
    r = seed
    for byte in data:
        for bit in range(7, -1, -1):
            r = (r << 1) | ((byte >> bit) & 1)
            if r >> 64:
                r ^= modulus
    return r


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep user config files and RABINFP_* variables out of every test."""
    for name in ("RABINFP_READ_BUFFER_SIZE", "RABINFP_WORKERS", "RABINFP_URL_TIMEOUT", "RABINFP_USER_AGENT", "RABINFP_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine():
    return RabinFingerprintEngine()


@pytest.fixture
def sample_data():
    rng = random.Random(1981)
    return bytes(rng.getrandbits(8) for _ in range(5000))


@pytest.fixture
def reference():
    return reference_fingerprint
