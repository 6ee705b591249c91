"""
Envelope Codec — Transportable string form of an AES-GCM payload.

Format: base64([nonce 12B][encrypted_payload + GCM_tag 16B])

Standard (not url-safe) base64 with padding, the form stored by the
data store as the entry's password value.
"""
import base64
import binascii

from ..exceptions import MalformedEnvelope

NONCE_SIZE = 12  # 96-bit nonce


def encode(nonce: bytes, ciphertext: bytes) -> str:
    """Concatenate nonce and ciphertext and base64-encode them.

    Args:
        nonce: 12-byte nonce used for this encryption.
        ciphertext: Encrypted payload including the GCM tag.

    Returns:
        Envelope string.
    """
    if len(nonce) != NONCE_SIZE:
        raise ValueError(
            f"nonce must be exactly {NONCE_SIZE} bytes, got {len(nonce)}"
        )
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decode(envelope: str) -> tuple[bytes, bytes]:
    """Split an envelope string into (nonce, ciphertext).

    Args:
        envelope: String produced by :func:`encode`.

    Returns:
        Tuple of (nonce, ciphertext).

    Raises:
        MalformedEnvelope: Not base64, or too short to hold a nonce.
    """
    try:
        raw = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as err:
        raise MalformedEnvelope(f"Envelope is not valid base64: {err}") from err
    if len(raw) < NONCE_SIZE:
        raise MalformedEnvelope(
            f"Envelope too short: {len(raw)} bytes (minimum {NONCE_SIZE})"
        )
    return raw[:NONCE_SIZE], raw[NONCE_SIZE:]
