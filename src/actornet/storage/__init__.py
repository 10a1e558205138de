"""Access to the external relationship query service."""

from actornet.storage.query_client import (
    QueryServiceClient,
    QueryServiceError,
    close_query_client,
    get_query_client,
)

__all__ = [
    "QueryServiceClient",
    "QueryServiceError",
    "close_query_client",
    "get_query_client",
]
