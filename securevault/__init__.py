"""SecureVault.

Session-scoped encryption of vault secrets and WebAuthn enrollment of
fingerprint authenticators.
"""
from .version import __version__
from .conf import VaultSettings
from .data import SessionData
from .exceptions import (
    SecureVaultError,
    CryptoUnavailable,
    MalformedEnvelope,
    ChallengeNotFound,
    ChallengeExpired,
    NoCredentialEnrolled,
    CredentialOwnershipMismatch,
    CredentialAlreadyEnrolled,
)

__all__ = [
    "__version__",
    "VaultSettings",
    "SessionData",
    "SecureVaultError",
    "CryptoUnavailable",
    "MalformedEnvelope",
    "ChallengeNotFound",
    "ChallengeExpired",
    "NoCredentialEnrolled",
    "CredentialOwnershipMismatch",
    "CredentialAlreadyEnrolled",
]
