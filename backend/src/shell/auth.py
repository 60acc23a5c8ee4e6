"""Authentication - API keys that act on behalf of an app user.

Each key is linked to an existing mobile-app user ID. Only the key's hash is
stored; the plaintext key is shown once, when issued.
"""

import hashlib
import logging
import secrets

from google.cloud import firestore

from ..core.models import ApiKeyRecord


logger = logging.getLogger(__name__)

# API key prefix for identification
API_KEY_PREFIX = "mfp_"
MIN_API_KEY_LENGTH = 40


def generate_api_key() -> str:
    """Generate a cryptographically secure API key.

    Returns:
        API key in format: mfp_<random_chars>
    """
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """Hash an API key into its Firestore document ID (SHA256, 32 chars)."""
    return hashlib.sha256(api_key.encode()).hexdigest()[:32]


def validate_api_key_format(api_key: str | None) -> bool:
    """Check if API key has valid format.

    Args:
        api_key: The API key to validate

    Returns:
        True if format is valid
    """
    if not api_key or not api_key.startswith(API_KEY_PREFIX):
        return False
    return len(api_key) >= MIN_API_KEY_LENGTH


class AuthClient:
    """Issues API keys and resolves them to app user IDs.

    Key documents live at apiKeys/{hash} and hold the user ID they act for.
    """

    def __init__(self, db: firestore.Client) -> None:
        self._db = db

    def _key_ref(self, key_hash: str) -> firestore.DocumentReference:
        return self._db.collection("apiKeys").document(key_hash)

    def issue_api_key(self, user_id: str) -> str:
        """Create a new API key for an app user.

        Args:
            user_id: The app user's ID

        Returns:
            The plaintext API key (only returned once)
        """
        api_key = generate_api_key()
        key_hash = hash_api_key(api_key)

        record = ApiKeyRecord(user_id=user_id)
        self._key_ref(key_hash).set(record.model_dump())

        logger.info("Issued API key %s for user %s", key_hash[:8], user_id[:8])
        return api_key

    def resolve_user(self, api_key: str | None) -> str | None:
        """Look up the app user an API key acts for.

        Args:
            api_key: The plaintext API key

        Returns:
            The user ID if the key is valid, None otherwise
        """
        if not validate_api_key_format(api_key):
            logger.warning("Invalid API key format")
            return None

        try:
            doc = self._key_ref(hash_api_key(api_key)).get()
            if not doc.exists:
                logger.warning("API key not found in database")
                return None
            return ApiKeyRecord(**doc.to_dict()).user_id
        except Exception as e:
            logger.error("Error resolving API key: %s", str(e))
            return None

    def revoke_api_key(self, api_key: str) -> bool:
        """Delete an API key.

        Returns:
            True if successful
        """
        try:
            self._key_ref(hash_api_key(api_key)).delete()
            return True
        except Exception as e:
            logger.error("Error revoking API key: %s", str(e))
            return False
