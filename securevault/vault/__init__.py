"""Session Vault — Secrets sealed with a session-scoped key.

Security Note (Threat Model):
    The vault key lives only in session-scoped storage and is wiped on
    logout, which deliberately makes every previously sealed entry
    unreadable. Decryption fails soft: entries that cannot be opened are
    shown as stored instead of raising. Keys are not synced across
    devices or sessions.
"""

from .keystore import EncryptionKey, KeyPersistence, KeyStore, SessionKeyPersistence
from .crypto import DecryptResult, DecryptStatus, VaultCipher
from .entries import Folder, SessionVault, VaultEntry, VaultEntryForm
from .generator import PasswordStrength, generate_password, password_strength
from . import envelope

__all__ = [
    "EncryptionKey",
    "KeyPersistence",
    "KeyStore",
    "SessionKeyPersistence",
    "DecryptResult",
    "DecryptStatus",
    "VaultCipher",
    "Folder",
    "SessionVault",
    "VaultEntry",
    "VaultEntryForm",
    "PasswordStrength",
    "generate_password",
    "password_strength",
    "envelope",
]
