"""
Authenticator credentials — Enrolled fingerprint authenticators.

``CredentialStore`` is the data-store side of the WebAuthn flows: the
protocol only needs to list, look up, create and touch credentials.
``InMemoryCredentialStore`` implements it for a single process.
"""
import uuid
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from datamodel import BaseModel

from ..exceptions import CredentialAlreadyEnrolled

logger = logging.getLogger("securevault.webauthn")

DEFAULT_DEVICE_NAME = "Unknown device"


class AuthenticatorCredential(BaseModel):
    """Server-side record of an enrolled authenticator.

    ``counter`` starts at 0 and grows by one per successful assertion;
    nothing else changes after enrollment except ``last_used``.
    """
    id: str
    credential_id: str
    owner_id: str
    public_key: str
    device_name: str
    created_at: datetime
    counter: int = 0
    last_used: Optional[datetime] = None

    def descriptor(self) -> dict:
        """Entry of an ``allowCredentials`` list."""
        return {"id": self.credential_id, "type": "public-key"}

    def summary(self) -> dict:
        return {
            "id": self.id,
            "deviceName": self.device_name,
            "createdAt": self.created_at.isoformat(),
            "lastUsed": self.last_used.isoformat() if self.last_used else None,
        }


class CredentialStore(ABC):
    """Persistence of authenticator credentials."""

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> list[AuthenticatorCredential]:
        ...

    @abstractmethod
    async def get(self, credential_id: str) -> Optional[AuthenticatorCredential]:
        """Look up a credential by its authenticator-issued id."""

    @abstractmethod
    async def create(
        self,
        owner_id: str,
        credential_id: str,
        public_key: str,
        device_name: Optional[str] = None,
    ) -> AuthenticatorCredential:
        """Persist a new credential with counter 0.

        Raises:
            CredentialAlreadyEnrolled: credential_id is already stored.
        """

    @abstractmethod
    async def record_use(self, credential_id: str) -> AuthenticatorCredential:
        """Increment the usage counter and stamp ``last_used``."""


class InMemoryCredentialStore(CredentialStore):

    def __init__(self):
        self._credentials: dict[str, AuthenticatorCredential] = {}

    def __len__(self) -> int:
        return len(self._credentials)

    async def list_for_owner(self, owner_id: str) -> list[AuthenticatorCredential]:
        return [
            c for c in self._credentials.values() if c.owner_id == owner_id
        ]

    async def get(self, credential_id: str) -> Optional[AuthenticatorCredential]:
        return self._credentials.get(credential_id)

    async def create(
        self,
        owner_id: str,
        credential_id: str,
        public_key: str,
        device_name: Optional[str] = None,
    ) -> AuthenticatorCredential:
        if credential_id in self._credentials:
            raise CredentialAlreadyEnrolled()
        credential = AuthenticatorCredential(
            id=uuid.uuid4().hex,
            credential_id=credential_id,
            owner_id=owner_id,
            public_key=public_key,
            device_name=device_name or DEFAULT_DEVICE_NAME,
            created_at=datetime.now(timezone.utc),
            counter=0,
        )
        self._credentials[credential_id] = credential
        logger.info(
            "Credential enrolled: owner=%s id=%s", owner_id, credential.id
        )
        return credential

    async def record_use(self, credential_id: str) -> AuthenticatorCredential:
        credential = self._credentials[credential_id]
        credential.counter = credential.counter + 1
        credential.last_used = datetime.now(timezone.utc)
        return credential
