"""
WebAuthn Protocol — Enrollment and assertion of fingerprint authenticators.

Enrollment:
    begin_registration → client ceremony → finish_registration
Assertion:
    begin_assertion → client ceremony → finish_assertion

Known gap:
    Neither flow verifies the authenticator's signature. Enrollment only
    checks that a fresh registration challenge exists; assertion only
    checks the challenge and credential ownership, then bumps the usage
    counter. The attestation object is stored as-is in ``public_key``.
"""
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..conf import VaultSettings
from ..exceptions import CredentialOwnershipMismatch, NoCredentialEnrolled
from .challenges import ChallengePurpose, ChallengeStore
from .credentials import AuthenticatorCredential, CredentialStore

logger = logging.getLogger("securevault.webauthn")


# ---------------------------------------------------------------------------
# Client payloads
# ---------------------------------------------------------------------------

class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AttestationResponse(_Payload):
    attestation_object: str = Field(min_length=1, alias="attestationObject")
    client_data_json: str = Field(min_length=1, alias="clientDataJSON")


class AssertionResponse(_Payload):
    client_data_json: str = Field(min_length=1, alias="clientDataJSON")
    authenticator_data: Optional[str] = Field(default=None, alias="authenticatorData")
    signature: Optional[str] = None
    user_handle: Optional[str] = Field(default=None, alias="userHandle")


class RegistrationCredential(_Payload):
    """PublicKeyCredential returned by ``navigator.credentials.create``."""
    id: str = Field(min_length=1)
    raw_id: str = Field(min_length=1, alias="rawId")
    type: Literal["public-key"]
    response: AttestationResponse


class AssertionCredential(_Payload):
    """PublicKeyCredential returned by ``navigator.credentials.get``."""
    id: str = Field(min_length=1)
    raw_id: str = Field(min_length=1, alias="rawId")
    type: Literal["public-key"]
    response: AssertionResponse


class RegistrationRequest(_Payload):
    credential: RegistrationCredential
    device_name: Optional[str] = Field(default=None, max_length=128, alias="deviceName")


class AssertionRequest(_Payload):
    credential: AssertionCredential


# ---------------------------------------------------------------------------
# Ceremony options and results
# ---------------------------------------------------------------------------

class RegistrationOptions(_Payload):
    challenge: str
    rp: dict[str, str]
    user: dict[str, str]


class AssertionOptions(_Payload):
    challenge: str
    allow_credentials: list[dict[str, str]] = Field(alias="allowCredentials")


class AssertionResult(_Payload):
    success: bool
    verified: bool
    counter: int


class WebAuthnProtocol:
    """Drives the challenge/response sequence for one relying party."""

    def __init__(
        self,
        challenges: ChallengeStore,
        credentials: CredentialStore,
        settings: Optional[VaultSettings] = None,
    ):
        self.challenges = challenges
        self.credentials = credentials
        self.settings = settings or VaultSettings()

    async def begin_registration(self, owner_id: str) -> RegistrationOptions:
        """Issue a registration challenge for ``owner_id``."""
        challenge = await self.challenges.issue(
            owner_id, ChallengePurpose.REGISTRATION
        )
        return RegistrationOptions(
            challenge=challenge,
            rp={"name": self.settings.rp_name, "id": self.settings.rp_id},
            user={"id": owner_id},
        )

    async def finish_registration(
        self, owner_id: str, request: RegistrationRequest
    ) -> AuthenticatorCredential:
        """Consume the registration challenge and store the credential.

        Raises:
            ChallengeNotFound: No live registration challenge for the owner.
            CredentialAlreadyEnrolled: The credential id is already stored.
        """
        await self.challenges.consume(owner_id, ChallengePurpose.REGISTRATION)
        credential = request.credential
        return await self.credentials.create(
            owner_id=owner_id,
            credential_id=credential.id,
            public_key=credential.response.attestation_object,
            device_name=request.device_name,
        )

    async def list_credentials(self, owner_id: str) -> list[AuthenticatorCredential]:
        return await self.credentials.list_for_owner(owner_id)

    async def begin_assertion(self, owner_id: str) -> AssertionOptions:
        """Issue an assertion challenge bound to the owner's credentials.

        Raises:
            NoCredentialEnrolled: The owner has no enrolled credential.
        """
        enrolled = await self.credentials.list_for_owner(owner_id)
        if not enrolled:
            raise NoCredentialEnrolled()
        challenge = await self.challenges.issue(
            owner_id, ChallengePurpose.ASSERTION
        )
        return AssertionOptions(
            challenge=challenge,
            allow_credentials=[c.descriptor() for c in enrolled],
        )

    async def finish_assertion(
        self, owner_id: str, request: AssertionRequest
    ) -> AssertionResult:
        """Consume the assertion challenge and record the credential's use.

        Raises:
            ChallengeNotFound: No live assertion challenge for the owner.
            CredentialOwnershipMismatch: Unknown credential, or another owner's.
        """
        await self.challenges.consume(owner_id, ChallengePurpose.ASSERTION)
        stored = await self.credentials.get(request.credential.id)
        if stored is None or stored.owner_id != owner_id:
            logger.warning("Assertion rejected: owner=%s", owner_id)
            raise CredentialOwnershipMismatch()
        used = await self.credentials.record_use(stored.credential_id)
        logger.info(
            "Assertion accepted: owner=%s id=%s counter=%d",
            owner_id, used.id, used.counter,
        )
        return AssertionResult(success=True, verified=True, counter=used.counter)
