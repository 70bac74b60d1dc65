"""Address helpers for table resources.

Handles the two addressing styles used by storage endpoints:

- host-style: ``https://<account>.table.core.windows.net/<table>``
- path-style: ``http://127.0.0.1:10002/<account>/<table>`` (IP hosts and
  localhost, as used by local emulators)

and extraction of Shared Access Signatures embedded in an address.
"""

import ipaddress
import logging
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, quote, unquote, urlparse, urlunparse

from cloudtable.auth.credentials import StorageCredentials
from cloudtable.auth.sas import parse_sas_query
from cloudtable.exceptions import InvalidUriError

logger = logging.getLogger(__name__)

PATH_STYLE_HOSTS = {"localhost"}


def ensure_absolute_uri(uri: str):
    """Parse an address, requiring a scheme and host."""
    parsed = urlparse(uri)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidUriError(f"Address must be an absolute URI: {uri}")
    return parsed


def _path_segments(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def use_path_style_addressing(uri: str) -> bool:
    """
    Determine whether an address uses path-style addressing.

    Args:
        uri: Absolute service or resource address

    Returns:
        True if the host is an IP literal or localhost
    """
    host = ensure_absolute_uri(uri).hostname or ""
    if host.lower() in PATH_STYLE_HOSTS:
        return True
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def append_path_to_uri(base_uri: str, relative_path: str) -> str:
    """Append a single path segment to an address, dropping its query string."""
    parsed = ensure_absolute_uri(base_uri)
    path = parsed.path.rstrip("/") + "/" + quote(relative_path, safe="")
    return urlunparse(parsed._replace(path=path, params="", query="", fragment=""))


def parse_table_query_and_verify(uri: str) -> Tuple[str, Optional[StorageCredentials]]:
    """
    Split a table address into its bare address and embedded SAS credentials.

    Args:
        uri: Absolute table address, optionally carrying SAS query parameters

    Returns:
        Tuple of (address without query, SAS credentials or None)

    Raises:
        InvalidUriError: If the address is not absolute or the SAS is incomplete
    """
    parsed = ensure_absolute_uri(uri)
    # A literal '+' is data (base64 signatures), not an encoded space
    query = parsed.query.replace("+", "%2B")
    sas_token = parse_sas_query(parse_qs(query, keep_blank_values=True))

    bare_uri = urlunparse(parsed._replace(params="", query="", fragment=""))
    if sas_token is None:
        return bare_uri, None

    logger.debug(f"Found Shared Access Signature in address {bare_uri}")
    return bare_uri, StorageCredentials.from_sas_token(sas_token)


def get_service_client_base_address(uri: str, use_path_style_uris: Optional[bool] = None) -> str:
    """
    Derive the service endpoint from a resource address.

    Args:
        uri: Absolute resource address
        use_path_style_uris: Addressing style; inferred from the address if None

    Returns:
        ``scheme://host[:port]`` or, for path-style, ``scheme://host[:port]/<account>``

    Raises:
        InvalidUriError: If a path-style address has no account segment
    """
    parsed = ensure_absolute_uri(uri)
    if use_path_style_uris is None:
        use_path_style_uris = use_path_style_addressing(uri)

    path = ""
    if use_path_style_uris:
        segments = _path_segments(parsed.path)
        if not segments:
            raise InvalidUriError(f"Path-style address has no account segment: {uri}")
        path = "/" + segments[0]

    return urlunparse((parsed.scheme, parsed.netloc, path, "", "", ""))


def get_table_name_from_uri(uri: str, use_path_style_uris: Optional[bool] = None) -> str:
    """
    Extract the table name from a table address.

    Raises:
        InvalidUriError: If the address has no table segment
    """
    parsed = ensure_absolute_uri(uri)
    if use_path_style_uris is None:
        use_path_style_uris = use_path_style_addressing(uri)

    segments = _path_segments(parsed.path)
    index = 1 if use_path_style_uris else 0
    if len(segments) <= index:
        raise InvalidUriError(f"Invalid table address, no table name found: {uri}")

    return unquote(segments[index])
