"""
cloudtable: client-side table references and Shared Access Signatures

Resolves table identity from an address or a service client and builds
table-scoped SAS tokens without any network I/O.
"""

__version__ = "0.1.0"

from .auth.credentials import StorageAccountKey, StorageCredentials
from .auth.sas import SharedAccessTablePermissions, SharedAccessTablePolicy
from .exceptions import (
    InvalidOperationError,
    InvalidUriError,
    MissingArgumentError,
    MissingCredentialsError,
    MultipleCredentialsProvidedError,
    StorageClientError,
)
from .table import CloudTable, CloudTableClient

__all__ = [
    "CloudTable",
    "CloudTableClient",
    "StorageAccountKey",
    "StorageCredentials",
    "SharedAccessTablePermissions",
    "SharedAccessTablePolicy",
    "StorageClientError",
    "InvalidOperationError",
    "InvalidUriError",
    "MissingArgumentError",
    "MissingCredentialsError",
    "MultipleCredentialsProvidedError",
    "__version__",
]
