"""
Vault Key Store — Lifecycle of the session-scoped symmetric key.

The key is created lazily on first use, exported as a JWK-equivalent JSON
document and kept only in session-scoped storage. Clearing it (logout)
makes every envelope sealed with it permanently unreadable.

Security Note:
    Never log key material. The exported key never leaves session storage.
    Two tabs sharing the same session storage may race to create a key;
    the last write wins and no locking is attempted.
"""
import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

import orjson
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..conf import KEY_STORAGE_NAME
from ..data import SessionData
from ..exceptions import CryptoUnavailable

logger = logging.getLogger("securevault.vault")

KEY_LENGTH = 32  # AES-256
KEY_ALGORITHM = "A256GCM"


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(encoded: str) -> bytes:
    padding = "=" * (-len(encoded) % 4)
    return base64.urlsafe_b64decode(encoded + padding)


class EncryptionKey:
    """Opaque AES-256-GCM key handle."""

    __slots__ = ("_key",)

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_LENGTH:
            raise ValueError(
                f"Encryption key must be exactly {KEY_LENGTH} bytes, "
                f"got {len(key)}"
            )
        self._key = bytes(key)

    def __repr__(self) -> str:
        return f"<EncryptionKey {KEY_ALGORITHM}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EncryptionKey):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    @classmethod
    def generate(cls) -> "EncryptionKey":
        """Mint a fresh random 256-bit key.

        Raises:
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        try:
            return cls(AESGCM.generate_key(bit_length=KEY_LENGTH * 8))
        except UnsupportedAlgorithm as err:
            raise CryptoUnavailable() from err

    def cipher(self) -> AESGCM:
        """Return an AES-GCM cipher bound to this key.

        Raises:
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        try:
            return AESGCM(self._key)
        except UnsupportedAlgorithm as err:
            raise CryptoUnavailable() from err

    def to_jwk(self) -> dict:
        """Export as a JSON Web Key dict (``kty=oct``)."""
        return {
            "kty": "oct",
            "k": _b64url_encode(self._key),
            "alg": KEY_ALGORITHM,
            "ext": True,
            "key_ops": ["encrypt", "decrypt"],
        }

    @classmethod
    def from_jwk(cls, jwk: dict) -> "EncryptionKey":
        """Import a key exported with :meth:`to_jwk`.

        Raises:
            ValueError: Not an AES-256-GCM octet key.
        """
        if jwk.get("kty") != "oct":
            raise ValueError(f"Unsupported key type: {jwk.get('kty')!r}")
        if jwk.get("alg", KEY_ALGORITHM) != KEY_ALGORITHM:
            raise ValueError(f"Unsupported key algorithm: {jwk.get('alg')!r}")
        return cls(_b64url_decode(jwk["k"]))


class KeyPersistence(ABC):
    """Storage for the exported key, cleared when the session ends."""

    @abstractmethod
    async def load(self) -> Optional[str]:
        """Return the exported key, or None if nothing is stored."""

    @abstractmethod
    async def save(self, exported: str) -> None:
        """Store the exported key, replacing any previous one."""

    @abstractmethod
    async def clear(self) -> None:
        """Forget the exported key. No-op when nothing is stored."""


class SessionKeyPersistence(KeyPersistence):
    """KeyPersistence backed by a :class:`SessionData`."""

    def __init__(self, session: SessionData, name: str = KEY_STORAGE_NAME):
        self._session = session
        self._name = name

    async def load(self) -> Optional[str]:
        return self._session.get(self._name)

    async def save(self, exported: str) -> None:
        self._session[self._name] = exported

    async def clear(self) -> None:
        self._session.pop(self._name, None)


class KeyStore:
    """Hands out the single active key of a session.

    ``get_or_create_key()`` reuses the stored key when there is one and
    mints (and stores) a new one otherwise. ``clear_key()`` forgets it.
    """

    def __init__(self, persistence: KeyPersistence):
        self._persistence = persistence

    @classmethod
    def for_session(
        cls,
        session: SessionData,
        name: str = KEY_STORAGE_NAME,
    ) -> "KeyStore":
        return cls(SessionKeyPersistence(session, name))

    def _import(self, exported: str) -> Optional[EncryptionKey]:
        try:
            return EncryptionKey.from_jwk(orjson.loads(exported))
        except (orjson.JSONDecodeError, ValueError, KeyError, TypeError, AttributeError) as err:
            logger.warning(
                "Discarding unreadable stored vault key: %s",
                type(err).__name__,
            )
            return None

    async def get_or_create_key(self) -> EncryptionKey:
        """Return the session key, creating and persisting it if absent.

        Returns:
            The active EncryptionKey.

        Raises:
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        exported = await self._persistence.load()
        if exported:
            key = self._import(exported)
            if key is not None:
                return key
        key = EncryptionKey.generate()
        await self._persistence.save(orjson.dumps(key.to_jwk()).decode("utf-8"))
        logger.debug("Created new session vault key")
        return key

    async def clear_key(self) -> None:
        """Remove the persisted key.

        Envelopes sealed with the removed key can no longer be opened.
        """
        await self._persistence.clear()
        logger.debug("Session vault key cleared")
