"""
Client-side representation of a single table.

A CloudTable resolves its identity (name, address, owning service client)
either from a table address or from a name and a service client, and
builds table-scoped Shared Access Signatures for key ranges.
"""

import logging
from typing import Optional

from cloudtable.auth.credentials import StorageCredentials
from cloudtable.auth.sas import (
    SharedAccessTablePolicy,
    build_table_sas_query,
    build_table_string_to_sign,
)
from cloudtable.exceptions import (
    InvalidOperationError,
    MissingArgumentError,
    MissingCredentialsError,
    MultipleCredentialsProvidedError,
)
from cloudtable.navigation import (
    append_path_to_uri,
    get_service_client_base_address,
    get_table_name_from_uri,
    parse_table_query_and_verify,
)
from cloudtable.table.client import CloudTableClient

logger = logging.getLogger(__name__)


class CloudTable:
    """
    A table in the Table service.

    Instances are immutable after construction. The service client is an
    association: the table uses it for the endpoint and credentials but
    does not own it.

    Example:
        client = CloudTableClient(
            "https://myaccount.table.core.windows.net",
            StorageCredentials.from_account_key("myaccount", key),
        )
        table = client.get_table_reference("Orders")
        sas = table.get_shared_access_signature(
            SharedAccessTablePolicy(permissions="r", shared_access_expiry_time=expiry),
            start_partition_key="2024",
        )
        # table.uri + sas authorizes queries over partitions from "2024" on
    """

    def __init__(self, table_name: str, client: CloudTableClient):
        """
        Initialize a table reference from a name and its service client.

        Args:
            table_name: Table name
            client: Service client owning the endpoint and credentials

        Raises:
            MissingArgumentError: If table_name or client is None
        """
        if table_name is None:
            raise MissingArgumentError("table_name")
        if client is None:
            raise MissingArgumentError("client")

        self._name = table_name
        self._uri = append_path_to_uri(client.base_uri, table_name)
        self._service_client = client

    @classmethod
    def from_uri(cls, table_uri: str, credentials: Optional[StorageCredentials] = None) -> "CloudTable":
        """
        Initialize a table reference from its absolute address.

        The address may embed a Shared Access Signature, which then serves
        as the credentials. Explicit credentials that differ from the
        embedded ones are rejected.

        Args:
            table_uri: Absolute table address
            credentials: Account credentials, or None to use the embedded SAS

        Returns:
            CloudTable bound to a client derived from the address

        Raises:
            InvalidUriError: If the address is malformed
            MultipleCredentialsProvidedError: If embedded and explicit credentials disagree
            MissingCredentialsError: If no credentials are given and none are embedded
        """
        if table_uri is None:
            raise MissingArgumentError("table_uri")

        uri, parsed_credentials = parse_table_query_and_verify(table_uri)

        if (
            parsed_credentials is not None
            and credentials is not None
            and parsed_credentials != credentials
        ):
            raise MultipleCredentialsProvidedError()

        effective_credentials = credentials if credentials is not None else parsed_credentials
        if effective_credentials is None:
            raise MissingCredentialsError()

        client = CloudTableClient(
            get_service_client_base_address(uri),
            effective_credentials,
        )
        name = get_table_name_from_uri(uri, client.use_path_style_uris)

        table = cls.__new__(cls)
        table._name = name
        table._uri = uri
        table._service_client = client
        return table

    @property
    def name(self) -> str:
        return self._name

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def service_client(self) -> CloudTableClient:
        return self._service_client

    def get_shared_access_signature(
        self,
        policy: Optional[SharedAccessTablePolicy],
        access_policy_identifier: Optional[str] = None,
        start_partition_key: Optional[str] = None,
        start_row_key: Optional[str] = None,
        end_partition_key: Optional[str] = None,
        end_row_key: Optional[str] = None,
    ) -> str:
        """
        Return a Shared Access Signature for the table.

        Key bounds are passed through to the service, which owns the range
        semantics. Bounds that are None or empty are left out of the token.

        Args:
            policy: Access policy for the signature, or None when a stored
                policy supplies permissions and validity window
            access_policy_identifier: Stored access policy identifier, or None
            start_partition_key: Start partition key, or None
            start_row_key: Start row key, or None
            end_partition_key: End partition key, or None
            end_row_key: End row key, or None

        Returns:
            SAS query string, including the leading '?'

        Raises:
            InvalidOperationError: If the credentials are not an account key
        """
        credentials = self._service_client.credentials
        if not credentials.is_shared_key:
            raise InvalidOperationError()

        resource_name = self.get_canonical_name()
        string_to_sign = build_table_string_to_sign(
            policy,
            access_policy_identifier,
            resource_name,
            start_partition_key,
            start_row_key,
            end_partition_key,
            end_row_key,
        )
        signature = credentials.compute_hmac(string_to_sign)

        logger.debug(f"Generated Shared Access Signature for {resource_name}")

        return build_table_sas_query(
            policy,
            self._name,
            access_policy_identifier,
            start_partition_key,
            start_row_key,
            end_partition_key,
            end_row_key,
            signature,
            credentials.key.key_name,
        )

    def get_canonical_name(self) -> str:
        """
        Return the canonical name of the table, /<account-name>/<table-name>.

        Only the table name is lowercased. str.lower() applies the Unicode
        default case mapping, so the result does not depend on the host locale.
        """
        account_name = self._service_client.credentials.account_name
        return f"/{account_name}/{self._name.lower()}"

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"CloudTable(name={self._name!r}, uri={self._uri!r})"
