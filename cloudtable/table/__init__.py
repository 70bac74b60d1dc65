"""
Table service client objects.

This module provides the client-side table reference and its owning
service client.
"""

from cloudtable.table.client import CloudTableClient
from cloudtable.table.table import CloudTable

__all__ = [
    "CloudTableClient",
    "CloudTable",
]
