"""Unit tests for auth module - key helpers and the Firestore-backed client."""

from unittest.mock import MagicMock

import pytest

from src.shell.auth import (
    API_KEY_PREFIX,
    AuthClient,
    generate_api_key,
    hash_api_key,
    validate_api_key_format,
)


class TestGenerateApiKey:
    """Tests for generate_api_key."""

    def test_starts_with_prefix(self):
        """Generated key starts with mfp_ prefix."""
        key = generate_api_key()
        assert key.startswith(API_KEY_PREFIX)

    def test_sufficient_length(self):
        """Generated key has sufficient length for security."""
        key = generate_api_key()
        # prefix (4) + base64 encoded 32 bytes (~43 chars)
        assert len(key) >= 40

    def test_unique_keys(self):
        """Each generated key is unique."""
        keys = [generate_api_key() for _ in range(100)]
        assert len(set(keys)) == 100


class TestHashApiKey:
    """Tests for hash_api_key."""

    def test_returns_32_char_hex(self):
        """Hash is 32 hex characters."""
        hashed = hash_api_key("mfp_test_key_12345678901234567890")
        assert len(hashed) == 32
        assert all(c in "0123456789abcdef" for c in hashed)

    def test_deterministic(self):
        """Same key always produces same hash."""
        key = "mfp_test_key_12345678901234567890"
        assert hash_api_key(key) == hash_api_key(key)

    def test_different_keys_different_hashes(self):
        """Different keys produce different hashes."""
        assert hash_api_key("mfp_key1_123456789012345678901234") != hash_api_key(
            "mfp_key2_123456789012345678901234"
        )


class TestValidateApiKeyFormat:
    """Tests for validate_api_key_format."""

    def test_valid_key(self):
        """Generated keys are valid."""
        assert validate_api_key_format(generate_api_key()) is True

    def test_empty_and_none(self):
        """Empty and None are invalid."""
        assert validate_api_key_format("") is False
        assert validate_api_key_format(None) is False

    def test_wrong_prefix(self):
        """Keys with another prefix are invalid."""
        assert validate_api_key_format("abc_12345678901234567890123456789012345678") is False

    def test_too_short(self):
        """Short keys are invalid."""
        assert validate_api_key_format("mfp_short") is False


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def auth(mock_db):
    return AuthClient(mock_db)


def key_doc(mock_db):
    return mock_db.collection.return_value.document.return_value


class TestAuthClient:
    """Tests for AuthClient."""

    def test_issue_stores_hash_not_key(self, auth, mock_db):
        """Issued keys are stored under their hash with the user ID."""
        api_key = auth.issue_api_key("user-123")

        assert api_key.startswith(API_KEY_PREFIX)
        mock_db.collection.assert_called_with("apiKeys")
        mock_db.collection.return_value.document.assert_called_with(hash_api_key(api_key))
        stored = key_doc(mock_db).set.call_args[0][0]
        assert stored["user_id"] == "user-123"
        assert api_key not in stored.values()

    def test_resolve_known_key(self, auth, mock_db):
        """A stored key resolves to its user."""
        doc = MagicMock()
        doc.exists = True
        doc.to_dict.return_value = {"user_id": "user-123"}
        key_doc(mock_db).get.return_value = doc

        assert auth.resolve_user(generate_api_key()) == "user-123"

    def test_resolve_unknown_key(self, auth, mock_db):
        """A key with no document resolves to None."""
        doc = MagicMock()
        doc.exists = False
        key_doc(mock_db).get.return_value = doc

        assert auth.resolve_user(generate_api_key()) is None

    def test_resolve_bad_format_skips_lookup(self, auth, mock_db):
        """Malformed keys are rejected without a database read."""
        assert auth.resolve_user("not-a-key") is None
        mock_db.collection.assert_not_called()

    def test_resolve_database_error(self, auth, mock_db):
        """Database errors resolve to None."""
        key_doc(mock_db).get.side_effect = Exception("unavailable")
        assert auth.resolve_user(generate_api_key()) is None

    def test_revoke(self, auth, mock_db):
        """Revoking deletes the key document."""
        assert auth.revoke_api_key(generate_api_key()) is True
        key_doc(mock_db).delete.assert_called_once()

    def test_revoke_failure(self, auth, mock_db):
        """Delete errors are reported as False."""
        key_doc(mock_db).delete.side_effect = Exception("unavailable")
        assert auth.revoke_api_key(generate_api_key()) is False
