"""
Unit tests for storage credentials.
"""

import base64
import hashlib
import hmac

import pytest

from cloudtable.auth.credentials import StorageAccountKey, StorageCredentials


KEY_BYTES = b"test-account-key-12345678901234567890"
KEY_B64 = base64.b64encode(KEY_BYTES).decode()


class TestCredentialKinds:
    """Tests for the three credential kinds."""

    def test_anonymous(self):
        """Test anonymous credentials."""
        creds = StorageCredentials.anonymous()
        assert creds.is_anonymous
        assert not creds.is_sas
        assert not creds.is_shared_key

    def test_account_key_from_base64(self):
        """Test shared key credentials decode a base64 key."""
        creds = StorageCredentials.from_account_key("myaccount", KEY_B64, "key1")
        assert creds.is_shared_key
        assert not creds.is_anonymous
        assert creds.account_name == "myaccount"
        assert creds.key.key_value == KEY_BYTES
        assert creds.key.key_name == "key1"

    def test_account_key_from_bytes(self):
        """Test shared key credentials accept raw key bytes."""
        creds = StorageCredentials.from_account_key("myaccount", KEY_BYTES)
        assert creds.key.key_value == KEY_BYTES
        assert creds.key.key_name is None

    def test_invalid_base64_key(self):
        """Test invalid key text is rejected."""
        with pytest.raises(ValueError, match="Invalid account key format"):
            StorageCredentials.from_account_key("myaccount", "not base64!!")

    def test_sas_token_strips_question_mark(self):
        """Test SAS token is stored without the leading '?'."""
        creds = StorageCredentials.from_sas_token("?sv=2012-02-12&sig=abc")
        assert creds.is_sas
        assert creds.sas_token == "sv=2012-02-12&sig=abc"

    def test_empty_sas_token(self):
        """Test empty SAS token is rejected."""
        with pytest.raises(ValueError):
            StorageCredentials.from_sas_token("?")

    def test_key_and_sas_together_rejected(self):
        """Test a credential set cannot be both key and SAS."""
        with pytest.raises(ValueError):
            StorageCredentials(
                account_name="myaccount",
                key=StorageAccountKey(KEY_BYTES),
                sas_token="sig=abc",
            )

    def test_key_without_account_rejected(self):
        """Test key credentials need an account name."""
        with pytest.raises(ValueError):
            StorageCredentials(key=StorageAccountKey(KEY_BYTES))

    def test_repr_hides_key(self):
        """Test the key bytes never appear in repr."""
        creds = StorageCredentials.from_account_key("myaccount", KEY_BYTES)
        assert "test-account-key" not in repr(creds)


class TestCredentialEquality:
    """Tests for strict equality between credential sets."""

    def test_same_key_equal(self):
        """Test identical key credentials compare equal."""
        a = StorageCredentials.from_account_key("myaccount", KEY_B64, "key1")
        b = StorageCredentials.from_account_key("myaccount", KEY_BYTES, "key1")
        assert a == b

    def test_different_key_name_not_equal(self):
        """Test same key with a different key name is a different credential."""
        a = StorageCredentials.from_account_key("myaccount", KEY_BYTES, "key1")
        b = StorageCredentials.from_account_key("myaccount", KEY_BYTES, "key2")
        assert a != b

    def test_different_key_value_not_equal(self):
        """Test same key name with a different value is a different credential."""
        a = StorageCredentials.from_account_key("myaccount", KEY_BYTES, "key1")
        b = StorageCredentials.from_account_key("myaccount", b"other", "key1")
        assert a != b

    def test_sas_tokens(self):
        """Test SAS credentials compare by token."""
        assert StorageCredentials.from_sas_token("sig=a") == StorageCredentials.from_sas_token("?sig=a")
        assert StorageCredentials.from_sas_token("sig=a") != StorageCredentials.from_sas_token("sig=b")


class TestSigning:
    """Tests for HMAC signing and URI transformation."""

    def test_compute_hmac(self):
        """Test HMAC-SHA256 signature matches an independent computation."""
        creds = StorageCredentials.from_account_key("myaccount", KEY_BYTES)
        expected = base64.b64encode(
            hmac.new(KEY_BYTES, "string\nto\nsign".encode("utf-8"), hashlib.sha256).digest()
        ).decode()

        assert creds.compute_hmac("string\nto\nsign") == expected

    def test_compute_hmac_requires_key(self):
        """Test signing without a key fails."""
        with pytest.raises(ValueError):
            StorageCredentials.from_sas_token("sig=abc").compute_hmac("x")

    def test_transform_uri_appends_sas(self):
        """Test SAS token is appended to a URI."""
        creds = StorageCredentials.from_sas_token("sv=2012-02-12&sig=abc")
        assert (
            creds.transform_uri("https://a.table.core.windows.net/t")
            == "https://a.table.core.windows.net/t?sv=2012-02-12&sig=abc"
        )
        assert (
            creds.transform_uri("https://a.table.core.windows.net/t?timeout=30")
            == "https://a.table.core.windows.net/t?timeout=30&sv=2012-02-12&sig=abc"
        )

    def test_transform_uri_key_unchanged(self):
        """Test key credentials leave a URI unchanged."""
        creds = StorageCredentials.from_account_key("myaccount", KEY_BYTES)
        uri = "https://a.table.core.windows.net/t"
        assert creds.transform_uri(uri) == uri
