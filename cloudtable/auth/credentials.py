"""
Storage credentials for table clients.

A credential set is exactly one of: anonymous, a Shared Access Signature
token, or a shared (symmetric) account key usable for local HMAC signing.
"""

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import urlparse, urlunparse


@dataclass(frozen=True)
class StorageAccountKey:
    """An account key and the optional name identifying it for key rotation."""

    key_value: bytes = field(repr=False)
    key_name: Optional[str] = None


@dataclass(frozen=True)
class StorageCredentials:
    """
    Immutable credential set.

    Equality is strict: two credential sets are equal only when every field
    matches (account name, key bytes, key name, SAS token).
    """

    account_name: Optional[str] = None
    key: Optional[StorageAccountKey] = None
    sas_token: Optional[str] = None

    def __post_init__(self):
        if self.key is not None and self.sas_token is not None:
            raise ValueError("Credentials cannot carry both an account key and a SAS token")
        if self.key is not None and not self.account_name:
            raise ValueError("Account key credentials require an account name")

    @classmethod
    def anonymous(cls) -> "StorageCredentials":
        return cls()

    @classmethod
    def from_account_key(
        cls,
        account_name: str,
        account_key: Union[str, bytes],
        key_name: Optional[str] = None,
    ) -> "StorageCredentials":
        """
        Build shared key credentials.

        Args:
            account_name: Storage account name
            account_key: Base64-encoded key text, or the raw key bytes
            key_name: Optional key identifier emitted with signatures

        Returns:
            StorageCredentials holding the decoded key

        Raises:
            ValueError: If the key text is not valid base64
        """
        if isinstance(account_key, bytes):
            key_bytes = account_key
        else:
            try:
                key_bytes = base64.b64decode(account_key, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError("Invalid account key format") from exc

        return cls(
            account_name=account_name,
            key=StorageAccountKey(key_value=key_bytes, key_name=key_name),
        )

    @classmethod
    def from_sas_token(cls, sas_token: str) -> "StorageCredentials":
        """Build SAS credentials from a query string, with or without the leading '?'."""
        token = sas_token.lstrip("?")
        if not token:
            raise ValueError("SAS token cannot be empty")
        return cls(sas_token=token)

    @property
    def is_anonymous(self) -> bool:
        return self.key is None and self.sas_token is None

    @property
    def is_sas(self) -> bool:
        return self.sas_token is not None

    @property
    def is_shared_key(self) -> bool:
        return self.key is not None

    def compute_hmac(self, string_to_sign: str) -> str:
        """
        Sign a string with the account key.

        Returns:
            Base64-encoded HMAC-SHA256 of the UTF-8 encoded string
        """
        if not self.is_shared_key:
            raise ValueError("HMAC signing requires account key credentials")

        digest = hmac.new(
            self.key.key_value,
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("utf-8")

    def transform_uri(self, uri: str) -> str:
        """Append the SAS token to a URI; other credential kinds leave it unchanged."""
        if not self.is_sas:
            return uri

        parsed = urlparse(uri)
        query = f"{parsed.query}&{self.sas_token}" if parsed.query else self.sas_token
        return urlunparse(parsed._replace(query=query))
