"""WebAuthn — Fingerprint authenticator enrollment and assertion.

Security Note:
    Authenticator signatures are not verified; only challenge freshness
    and credential ownership are checked. Challenges are kept in process
    memory and are lost on restart.
"""

from .challenges import (
    ChallengePurpose,
    ChallengeRecord,
    ChallengeStore,
    InMemoryChallengeRegistry,
)
from .credentials import AuthenticatorCredential, CredentialStore, InMemoryCredentialStore
from .protocol import (
    AssertionRequest,
    AssertionResult,
    RegistrationRequest,
    WebAuthnProtocol,
)
from .handlers import USER_KEY, setup_webauthn

__all__ = [
    "ChallengePurpose",
    "ChallengeRecord",
    "ChallengeStore",
    "InMemoryChallengeRegistry",
    "AuthenticatorCredential",
    "CredentialStore",
    "InMemoryCredentialStore",
    "AssertionRequest",
    "AssertionResult",
    "RegistrationRequest",
    "WebAuthnProtocol",
    "USER_KEY",
    "setup_webauthn",
]
