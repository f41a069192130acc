"""
Unit tests for token verifier hashing.
"""

import hashlib
import hmac

from connect_session_core.utils.hash_utils import hash_value


class TestHashValue:
    """Test verifier derivation."""

    def test_uses_hmac_with_configured_key(self):
        expected = hmac.new(b"test-hash-key", b"secret", hashlib.sha256).hexdigest()
        assert hash_value("secret") == expected

    def test_explicit_key_wins(self):
        expected = hmac.new(b"other", b"secret", hashlib.sha256).hexdigest()
        assert hash_value("secret", key="other") == expected

    def test_plain_sha256_without_key(self, app_config):
        app_config.security.hash_key = None
        assert hash_value("secret") == hashlib.sha256(b"secret").hexdigest()

    def test_deterministic_and_distinct(self):
        assert hash_value("a") == hash_value("a")
        assert hash_value("a") != hash_value("b")
        assert len(hash_value("a")) == 64

