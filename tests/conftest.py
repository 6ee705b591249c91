import pytest

from securevault.data import SessionData
from securevault.vault import KeyStore, VaultCipher


class FakeClock:
    """Controllable wall clock for challenge expiry."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return SessionData(identity="u1")


@pytest.fixture
def key_store(session):
    return KeyStore.for_session(session)


@pytest.fixture
def cipher(key_store):
    return VaultCipher(key_store)
