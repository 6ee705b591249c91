"""SecureVault Exceptions.

Every error carries a ``message`` suitable for showing to the end user.
"""
from typing import Optional


class SecureVaultError(Exception):
    """Base class for SecureVault errors."""

    message: str = "SecureVault error"

    def __init__(self, message: Optional[str] = None, *args) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message, *args)


class CryptoUnavailable(SecureVaultError):
    """The cryptographic provider lacks a required primitive."""

    message = (
        "Encryption is not available on this device, "
        "try a different browser or device"
    )


class MalformedEnvelope(SecureVaultError, ValueError):
    """Stored envelope cannot be decoded into nonce and ciphertext."""

    message = "Malformed envelope"


class ChallengeNotFound(SecureVaultError):
    """No live challenge for the owner and purpose."""

    message = "Challenge expired or not found"


class ChallengeExpired(ChallengeNotFound):
    """The owner's challenge outlived its TTL."""


class NoCredentialEnrolled(SecureVaultError):
    """Assertion requested by an owner with no enrolled authenticator."""

    message = "No fingerprint registered"


class CredentialOwnershipMismatch(SecureVaultError):
    """Credential is unknown or belongs to another owner.

    Message is deliberately generic.
    """

    message = "Invalid credential"


class CredentialAlreadyEnrolled(SecureVaultError):
    """Credential id is already stored for some owner."""

    message = "Credential already registered"
