"""Shared Access Signature support for Table storage.

This module builds table-scoped SAS tokens: the access policy model, the
string-to-sign layout, and the query string handed back to callers. It also
recognizes SAS parameters embedded in a resource address.
"""

import logging
from datetime import datetime, timezone
from enum import Flag
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cloudtable.exceptions import InvalidUriError

logger = logging.getLogger(__name__)

# Storage service version the signatures are computed for
TARGET_STORAGE_VERSION = "2012-02-12"

SAS_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class SASQueryParam:
    """Query parameter names used by table SAS tokens."""

    SIGNED_VERSION = "sv"
    TABLE_NAME = "tn"
    START_PARTITION_KEY = "spk"
    START_ROW_KEY = "srk"
    END_PARTITION_KEY = "epk"
    END_ROW_KEY = "erk"
    SIGNED_START = "st"
    SIGNED_EXPIRY = "se"
    SIGNED_PERMISSIONS = "sp"
    SIGNED_IDENTIFIER = "si"
    SIGNED_KEY = "sk"
    SIGNATURE = "sig"

    # Emission order of a generated token
    ORDER = (
        SIGNED_VERSION,
        TABLE_NAME,
        START_PARTITION_KEY,
        START_ROW_KEY,
        END_PARTITION_KEY,
        END_ROW_KEY,
        SIGNED_START,
        SIGNED_EXPIRY,
        SIGNED_PERMISSIONS,
        SIGNED_IDENTIFIER,
        SIGNED_KEY,
        SIGNATURE,
    )


class SharedAccessTablePermissions(Flag):
    """Permission flags for a table SAS."""

    NONE = 0
    QUERY = 1
    ADD = 2
    UPDATE = 4
    DELETE = 8

    @classmethod
    def from_string(cls, value: str) -> "SharedAccessTablePermissions":
        """
        Parse a permission string such as "raud".

        Raises:
            ValueError: If the string contains an unknown permission letter
        """
        permissions = cls.NONE
        for char in value:
            if char not in _PERMISSION_LETTERS:
                raise ValueError(f"Invalid table permission: {char!r}")
            permissions |= _PERMISSION_LETTERS[char]
        return permissions

    def to_sas_string(self) -> str:
        # Order is fixed by the service: query, add, update, delete
        return "".join(
            letter for letter, flag in _PERMISSION_LETTERS.items() if flag in self
        )


_PERMISSION_LETTERS = {
    "r": SharedAccessTablePermissions.QUERY,
    "a": SharedAccessTablePermissions.ADD,
    "u": SharedAccessTablePermissions.UPDATE,
    "d": SharedAccessTablePermissions.DELETE,
}


class SharedAccessTablePolicy(BaseModel):
    """Permissions and validity window of a table SAS."""
    model_config = ConfigDict(frozen=True)

    permissions: SharedAccessTablePermissions = SharedAccessTablePermissions.NONE
    shared_access_start_time: Optional[datetime] = Field(
        default=None,
        description="Time the signature becomes valid (UTC)"
    )
    shared_access_expiry_time: Optional[datetime] = Field(
        default=None,
        description="Time the signature expires (UTC)"
    )

    @field_validator('permissions', mode='before')
    @classmethod
    def parse_permissions(cls, v):
        """Accept permission strings like "raud" as well as flags."""
        if isinstance(v, str):
            return SharedAccessTablePermissions.from_string(v)
        if isinstance(v, int) and not isinstance(v, SharedAccessTablePermissions):
            return SharedAccessTablePermissions(v)
        return v

    @field_validator('shared_access_start_time', 'shared_access_expiry_time')
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive datetimes as UTC and normalize aware ones to UTC."""
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


def format_sas_time(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime for a SAS token, or None if absent."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(SAS_TIME_FORMAT)


def _policy_fields(
    policy: Optional[SharedAccessTablePolicy],
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    if policy is None:
        return None, None, None
    return (
        policy.permissions.to_sas_string() or None,
        format_sas_time(policy.shared_access_start_time),
        format_sas_time(policy.shared_access_expiry_time),
    )


def build_table_string_to_sign(
    policy: Optional[SharedAccessTablePolicy],
    access_policy_identifier: Optional[str],
    resource_name: str,
    start_partition_key: Optional[str] = None,
    start_row_key: Optional[str] = None,
    end_partition_key: Optional[str] = None,
    end_row_key: Optional[str] = None,
) -> str:
    """
    Build the string to sign for a table SAS.

    Format (version 2012-02-12):
        signedpermissions\\n
        signedstart\\n
        signedexpiry\\n
        canonicalizedresource\\n
        signedidentifier\\n
        signedversion\\n
        startpk\\n
        startrk\\n
        endpk\\n
        endrk

    Absent values are written as empty lines.

    Args:
        policy: Access policy, or None when a stored policy supplies the fields
        access_policy_identifier: Stored access policy identifier, or None
        resource_name: Canonical resource name (/account/table)
        start_partition_key: Start partition key, or None
        start_row_key: Start row key, or None
        end_partition_key: End partition key, or None
        end_row_key: End row key, or None

    Returns:
        String to sign
    """
    permissions, start, expiry = _policy_fields(policy)

    parts = [
        permissions,
        start,
        expiry,
        resource_name,
        access_policy_identifier,
        TARGET_STORAGE_VERSION,
        start_partition_key,
        start_row_key,
        end_partition_key,
        end_row_key,
    ]

    return "\n".join(part or "" for part in parts)


def build_table_sas_query(
    policy: Optional[SharedAccessTablePolicy],
    table_name: str,
    access_policy_identifier: Optional[str],
    start_partition_key: Optional[str],
    start_row_key: Optional[str],
    end_partition_key: Optional[str],
    end_row_key: Optional[str],
    signature: str,
    key_name: Optional[str],
) -> str:
    """
    Assemble the SAS query string, including the leading '?'.

    Parameters whose value is None or empty are omitted entirely.
    """
    permissions, start, expiry = _policy_fields(policy)

    values = {
        SASQueryParam.SIGNED_VERSION: TARGET_STORAGE_VERSION,
        SASQueryParam.TABLE_NAME: table_name,
        SASQueryParam.START_PARTITION_KEY: start_partition_key,
        SASQueryParam.START_ROW_KEY: start_row_key,
        SASQueryParam.END_PARTITION_KEY: end_partition_key,
        SASQueryParam.END_ROW_KEY: end_row_key,
        SASQueryParam.SIGNED_START: start,
        SASQueryParam.SIGNED_EXPIRY: expiry,
        SASQueryParam.SIGNED_PERMISSIONS: permissions,
        SASQueryParam.SIGNED_IDENTIFIER: access_policy_identifier,
        SASQueryParam.SIGNED_KEY: key_name,
        SASQueryParam.SIGNATURE: signature,
    }

    return "?" + _encode_query(values)


def _encode_query(values: Mapping[str, Optional[str]]) -> str:
    pairs: List[str] = []
    for name in SASQueryParam.ORDER:
        value = values.get(name)
        if value:
            pairs.append(f"{name}={quote(value, safe='')}")
    return "&".join(pairs)


def parse_sas_query(params: Mapping[str, List[str]]) -> Optional[str]:
    """
    Extract an embedded SAS token from parsed query parameters.

    Args:
        params: Query parameters as returned by urllib.parse.parse_qs

    Returns:
        The re-assembled SAS token (without '?'), or None if the query
        carries no SAS parameters

    Raises:
        InvalidUriError: If SAS parameters are present without a signature
    """
    lowered: Dict[str, str] = {}
    for key, values in params.items():
        if values and key.lower() in SASQueryParam.ORDER:
            lowered[key.lower()] = values[0]

    if not lowered:
        return None

    if not lowered.get(SASQueryParam.SIGNATURE):
        logger.warning("Address carries SAS parameters without a signature")
        raise InvalidUriError(
            "Missing mandatory parameters for valid Shared Access Signature"
        )

    return _encode_query(lowered)
