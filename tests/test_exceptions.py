"""Tests for the error taxonomy."""
import pytest

from securevault.exceptions import (
    ChallengeExpired,
    ChallengeNotFound,
    CredentialAlreadyEnrolled,
    CredentialOwnershipMismatch,
    CryptoUnavailable,
    MalformedEnvelope,
    NoCredentialEnrolled,
    SecureVaultError,
)


class TestMessages:

    @pytest.mark.parametrize("exc_class, message", [
        (ChallengeNotFound, "Challenge expired or not found"),
        (ChallengeExpired, "Challenge expired or not found"),
        (NoCredentialEnrolled, "No fingerprint registered"),
        (CredentialOwnershipMismatch, "Invalid credential"),
        (CredentialAlreadyEnrolled, "Credential already registered"),
    ])
    def test_default_message(self, exc_class, message):
        err = exc_class()
        assert err.message == message
        assert str(err) == message

    def test_explicit_message(self):
        err = MalformedEnvelope("Envelope too short")
        assert err.message == "Envelope too short"
        assert MalformedEnvelope().message == "Malformed envelope"

    def test_none_keeps_default(self):
        assert CryptoUnavailable(None).message == CryptoUnavailable.message

    @pytest.mark.parametrize("exc_class", [
        NoCredentialEnrolled,
        CredentialAlreadyEnrolled,
        CredentialOwnershipMismatch,
        CryptoUnavailable,
    ])
    def test_documented(self, exc_class):
        assert exc_class.__doc__


class TestHierarchy:

    def test_expired_is_not_found(self):
        assert issubclass(ChallengeExpired, ChallengeNotFound)

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedEnvelope, ValueError)
        assert issubclass(MalformedEnvelope, SecureVaultError)
