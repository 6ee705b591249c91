"""
SessionVault — Seals vault entries with the session key.

Provides the public API used by the UI layer:
- ``seal(data)`` — validate an entry form and encrypt its password
- ``reveal(entry)`` — decrypt an entry's password (fail-soft)
- ``logout()`` — forget the session key and wipe the session

The sealed :class:`VaultEntry` is what gets sent to the data store; its
``encrypted_password`` never holds plaintext unless it is a legacy value.
"""
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..conf import VaultSettings
from ..data import SessionData
from .crypto import DecryptResult, VaultCipher
from .keystore import KeyStore

logger = logging.getLogger("securevault.vault")


class Folder(BaseModel):
    """Folder grouping vault entries."""

    name: str = Field(min_length=1, max_length=50)
    icon: str = "folder"


class VaultEntry(BaseModel):
    """Stored credential record, password already sealed."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    website: Optional[str] = None
    username: Optional[str] = None
    encrypted_password: str = Field(min_length=1, alias="encryptedPassword")
    notes: Optional[str] = None
    folder_id: Optional[str] = Field(default=None, alias="folderId")
    is_favorite: bool = Field(default=False, alias="isFavorite")
    is_deleted: bool = Field(default=False, alias="isDeleted")


class VaultEntryForm(BaseModel):
    """Entry as typed by the user, with the password in clear."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    website: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(min_length=1)
    notes: Optional[str] = None
    folder_id: Optional[str] = Field(default=None, alias="folderId")
    is_favorite: bool = Field(default=False, alias="isFavorite")


class SessionVault:
    """Vault bound to a user session.

    The session holds the exported key; everything sealed here can only
    be revealed while that session (and its key) is alive.
    """

    def __init__(
        self,
        session: SessionData,
        settings: Optional[VaultSettings] = None,
    ):
        self._settings = settings or VaultSettings()
        self._session = session
        self.key_store = KeyStore.for_session(session, self._settings.key_name)
        self.cipher = VaultCipher(
            self.key_store,
            legacy_threshold=self._settings.legacy_threshold,
        )

    @property
    def session(self) -> SessionData:
        return self._session

    async def seal(self, data: dict[str, Any]) -> VaultEntry:
        """Validate an entry form and encrypt its password.

        Args:
            data: Form fields; ``password`` holds the plaintext secret.

        Returns:
            VaultEntry ready for the data store.

        Raises:
            pydantic.ValidationError: If the form is invalid.
            CryptoUnavailable: AES-GCM is not supported by the backend.
        """
        form = VaultEntryForm.model_validate(data)
        sealed = await self.cipher.encrypt(form.password)
        entry = VaultEntry(
            encrypted_password=sealed,
            **form.model_dump(exclude={"password"}),
        )
        logger.debug(
            "Vault entry sealed: session=%s title=%s",
            self._session.session_id, entry.title,
        )
        return entry

    async def reveal(self, entry: VaultEntry) -> str:
        """Return the entry's password, or the stored value if it cannot be opened."""
        return await self.cipher.decrypt(entry.encrypted_password)

    async def reveal_result(self, entry: VaultEntry) -> DecryptResult:
        return await self.cipher.decrypt_result(entry.encrypted_password)

    async def logout(self) -> None:
        """Forget the session key and invalidate the session."""
        await self.key_store.clear_key()
        self._session.invalidate()
        logger.info("Vault session closed: session=%s", self._session.session_id)
