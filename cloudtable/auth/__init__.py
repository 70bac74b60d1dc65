"""
cloudtable authentication module.

Provides credential sets and table Shared Access Signature construction.
"""

from cloudtable.auth.credentials import StorageAccountKey, StorageCredentials
from cloudtable.auth.sas import (
    TARGET_STORAGE_VERSION,
    SASQueryParam,
    SharedAccessTablePermissions,
    SharedAccessTablePolicy,
    build_table_sas_query,
    build_table_string_to_sign,
    format_sas_time,
    parse_sas_query,
)

__all__ = [
    # Credentials
    "StorageAccountKey",
    "StorageCredentials",
    # SAS
    "TARGET_STORAGE_VERSION",
    "SASQueryParam",
    "SharedAccessTablePermissions",
    "SharedAccessTablePolicy",
    "build_table_sas_query",
    "build_table_string_to_sign",
    "format_sas_time",
    "parse_sas_query",
]
