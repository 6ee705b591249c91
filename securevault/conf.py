"""
SecureVault Configuration — Validated settings loaded from environment.

Reads settings from environment variables:
    SECUREVAULT_KEY_NAME = <session storage name of the exported key>
    SECUREVAULT_LEGACY_THRESHOLD = <integer, minimum envelope length>
    SECUREVAULT_CHALLENGE_TTL = <integer seconds>
    SECUREVAULT_RP_NAME / SECUREVAULT_RP_ID = <relying party identity>

Security Note:
    Never log key material. Only log setting names and non-secret values.
"""
import os
import re
import logging

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("securevault.conf")

_RP_ID_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9.-]*[a-z0-9])?$")

# Session storage entry holding the exported symmetric key.
KEY_STORAGE_NAME = "securevault-key"
# Envelopes shorter than this are treated as unencrypted legacy values.
LEGACY_THRESHOLD = 20
# Seconds a WebAuthn challenge stays consumable.
CHALLENGE_TTL = 60
CHALLENGE_SIZE = 32

# Reserved session data keys.
SESSION_ID = "session_id"
SESSION_KEY = "user_id"


class VaultSettings(BaseModel):
    """Validated SecureVault settings."""

    key_name: str = Field(default=KEY_STORAGE_NAME, min_length=1)
    legacy_threshold: int = Field(default=LEGACY_THRESHOLD, ge=0)
    challenge_ttl: int = Field(default=CHALLENGE_TTL, ge=1)
    rp_name: str = Field(default="SecureVault", min_length=1)
    rp_id: str = Field(default="localhost")

    @field_validator("rp_id")
    @classmethod
    def validate_rp_id(cls, v: str) -> str:
        """Relying party id must be a bare, lowercase host name."""
        v = v.strip().lower()
        if not _RP_ID_PATTERN.match(v):
            raise ValueError(f"Invalid relying party id: {v!r}")
        return v

    @classmethod
    def from_env(cls) -> "VaultSettings":
        """Create VaultSettings by loading values from environment.

        Unset variables fall back to the field defaults.

        Returns:
            Populated VaultSettings instance.
        """
        env = {
            "key_name": os.environ.get("SECUREVAULT_KEY_NAME"),
            "legacy_threshold": os.environ.get("SECUREVAULT_LEGACY_THRESHOLD"),
            "challenge_ttl": os.environ.get("SECUREVAULT_CHALLENGE_TTL"),
            "rp_name": os.environ.get("SECUREVAULT_RP_NAME"),
            "rp_id": os.environ.get("SECUREVAULT_RP_ID"),
        }
        values = {k: v for k, v in env.items() if v is not None}
        settings = cls(**values)
        logger.debug(
            "Loaded settings: key_name=%s legacy_threshold=%d challenge_ttl=%d rp_id=%s",
            settings.key_name,
            settings.legacy_threshold,
            settings.challenge_ttl,
            settings.rp_id,
        )
        return settings
