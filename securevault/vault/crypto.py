"""
Vault Crypto Core — Sealing and opening vault secrets.

encrypt: UTF-8(plaintext) → AES-256-GCM(session key, fresh nonce) → envelope
decrypt: envelope → nonce, ciphertext → AES-256-GCM open → UTF-8 plaintext

Decryption fails soft: a value that cannot be opened (wrong key, tampering,
corrupt data) comes back unchanged instead of raising. ``decrypt_result``
exposes the outcome so callers can surface a warning.

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import logging
from enum import Enum
from typing import NamedTuple, Optional

from cryptography.exceptions import InvalidTag

from ..conf import LEGACY_THRESHOLD
from ..exceptions import MalformedEnvelope
from . import envelope
from .envelope import NONCE_SIZE
from .keystore import KeyStore

logger = logging.getLogger("securevault.vault")


class DecryptStatus(str, Enum):
    OK = "ok"
    LEGACY = "legacy"
    DEGRADED = "degraded"


class DecryptResult(NamedTuple):
    """Outcome of opening an envelope.

    ``value`` is the plaintext when ``status`` is OK, and the untouched
    input otherwise.
    """

    status: DecryptStatus
    value: str
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DecryptStatus.OK

    @property
    def degraded(self) -> bool:
        return self.status is DecryptStatus.DEGRADED


class VaultCipher:
    """Encrypts and decrypts vault secrets with the session key."""

    def __init__(
        self,
        key_store: KeyStore,
        legacy_threshold: int = LEGACY_THRESHOLD,
    ):
        self._key_store = key_store
        self._legacy_threshold = legacy_threshold

    async def encrypt(self, plaintext: str) -> str:
        """Seal a secret.

        Args:
            plaintext: Secret to encrypt (may be empty).

        Returns:
            Envelope string: base64(nonce || ciphertext+tag).

        Raises:
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        key = await self._key_store.get_or_create_key()
        nonce = os.urandom(NONCE_SIZE)
        ct = key.cipher().encrypt(nonce, plaintext.encode("utf-8"), None)
        return envelope.encode(nonce, ct)

    async def decrypt_result(self, value: str) -> DecryptResult:
        """Open an envelope, reporting how it went.

        Values shorter than the legacy threshold are passed through as
        unencrypted legacy data.

        Raises:
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        if not value or len(value) < self._legacy_threshold:
            return DecryptResult(DecryptStatus.LEGACY, value)
        try:
            nonce, ct = envelope.decode(value)
        except MalformedEnvelope as err:
            logger.warning("Vault decrypt degraded: %s", err.message)
            return DecryptResult(DecryptStatus.DEGRADED, value, "malformed")
        key = await self._key_store.get_or_create_key()
        cipher = key.cipher()
        try:
            data = cipher.decrypt(nonce, ct, None)
        except InvalidTag:
            logger.warning(
                "Vault decrypt degraded: authentication failed (wrong key or tampered data)"
            )
            return DecryptResult(DecryptStatus.DEGRADED, value, "invalid-tag")
        try:
            return DecryptResult(DecryptStatus.OK, data.decode("utf-8"))
        except UnicodeDecodeError:
            logger.warning("Vault decrypt degraded: plaintext is not UTF-8")
            return DecryptResult(DecryptStatus.DEGRADED, value, "encoding")

    async def decrypt(self, value: str) -> str:
        """Open an envelope, returning ``value`` unchanged on failure."""
        result = await self.decrypt_result(value)
        return result.value
