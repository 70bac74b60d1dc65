"""
Table service client.

Holds the service endpoint and credentials shared by table references.
"""

import logging
from typing import Optional

from cloudtable.auth.credentials import StorageCredentials
from cloudtable.exceptions import MissingArgumentError
from cloudtable.navigation import ensure_absolute_uri, use_path_style_addressing

logger = logging.getLogger(__name__)


class CloudTableClient:
    """Client-side view of a Table service endpoint."""

    def __init__(self, base_uri: str, credentials: Optional[StorageCredentials] = None):
        """
        Initialize table service client.

        Args:
            base_uri: Absolute Table service endpoint
            credentials: Account credentials; anonymous if None

        Raises:
            MissingArgumentError: If base_uri is None
            InvalidUriError: If base_uri is not absolute
        """
        if base_uri is None:
            raise MissingArgumentError("base_uri")
        ensure_absolute_uri(base_uri)

        self._base_uri = base_uri.rstrip("/")
        self._credentials = credentials if credentials is not None else StorageCredentials.anonymous()
        self._use_path_style_uris = use_path_style_addressing(self._base_uri)
        logger.debug(f"Table client created for {self._base_uri} (path-style: {self._use_path_style_uris})")

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def credentials(self) -> StorageCredentials:
        return self._credentials

    @property
    def use_path_style_uris(self) -> bool:
        return self._use_path_style_uris

    def get_table_reference(self, table_name: str) -> "CloudTable":
        """Return a reference to a table in this service."""
        from cloudtable.table.table import CloudTable

        return CloudTable(table_name, self)

    def __repr__(self) -> str:
        return f"CloudTableClient(base_uri={self._base_uri!r}, credentials={self._credentials!r})"
