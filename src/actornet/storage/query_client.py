"""HTTP client for the relationship query service.

The service fronts the pre-built relationship/document store. Every call
is a blocking ``requests`` call run in a worker thread so the event loop
stays responsive.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from actornet.config import settings
from actornet.models import (
    Actor,
    DeepSearchResult,
    DocumentSummary,
    FilterState,
    RelationshipRecord,
    Stats,
    TagCluster,
)

logger = logging.getLogger(__name__)


class QueryServiceError(Exception):
    """The query service was unreachable or returned an unusable response."""


def _join(values: Iterable[Any]) -> str:
    return ",".join(str(v) for v in sorted(values, key=str))


class QueryServiceClient:
    """Async-wrapped client for the query service using requests."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_concurrent: int = 8,
    ) -> None:
        self.base_url = (base_url or settings.query_service_url).rstrip("/")
        self.timeout = timeout or settings.query_service_timeout
        self.max_concurrent = max_concurrent

        self._semaphore = asyncio.Semaphore(self.max_concurrent)
        self._session: requests.Session | None = None

    def _get_session(self) -> requests.Session:
        """Get or create requests session with connection pooling."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Accept": "application/json"})
            adapter = HTTPAdapter(
                pool_connections=self.max_concurrent,
                pool_maxsize=self.max_concurrent * 2,
                max_retries=Retry(total=2, backoff_factor=0.5),
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _sync_get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Synchronous GET request (runs in thread)."""
        session = self._get_session()
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            raise QueryServiceError(
                f"{path}: HTTP {e.response.status_code if e.response is not None else '?'}"
            ) from e
        except requests.RequestException as e:
            raise QueryServiceError(f"{path}: {e}") from e
        except ValueError as e:
            raise QueryServiceError(f"{path}: invalid JSON response") from e

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        async with self._semaphore:
            try:
                return await asyncio.to_thread(self._sync_get, path, params)
            except QueryServiceError as e:
                logger.error(f"Query service request failed: {e}")
                raise

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def fetch_relationships(self, filters: FilterState) -> list[RelationshipRecord]:
        """Relationship records matching the filter, at most ``filters.limit``."""
        params: dict[str, Any] = {
            "limit": filters.limit,
            "clusters": _join(filters.cluster_ids),
            "categories": _join(filters.categories),
            "yearMin": filters.year_min,
            "yearMax": filters.year_max,
            "includeUndated": str(filters.include_undated).lower(),
            "keywords": filters.keyword,
        }
        if filters.max_hops is not None:
            params["maxHops"] = filters.max_hops

        data = await self._get("relationships", params)
        try:
            rows = data["relationships"] if isinstance(data, dict) else data
            records = [RelationshipRecord.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise QueryServiceError(f"relationships: malformed payload ({e})") from e

        logger.info(f"Fetched {len(records)} relationships")
        return records

    async def search_actors(self, query: str) -> list[Actor]:
        """Actors whose name contains ``query`` (case-insensitive)."""
        data = await self._get("actors/search", {"q": query})
        try:
            return [Actor.from_dict(row) for row in data]
        except (KeyError, TypeError, ValueError) as e:
            raise QueryServiceError(f"actors/search: malformed payload ({e})") from e

    async def fetch_document_text(self, doc_id: str) -> str:
        data = await self._get(f"document/{doc_id}/text")
        if not isinstance(data, dict) or "text" not in data:
            raise QueryServiceError(f"document/{doc_id}/text: missing text")
        return data["text"] or ""

    async def fetch_document(self, doc_id: str) -> DocumentSummary:
        data = await self._get(f"document/{doc_id}")
        try:
            return DocumentSummary.from_dict(data)
        except (KeyError, TypeError) as e:
            raise QueryServiceError(f"document/{doc_id}: malformed payload ({e})") from e

    async def deep_search(self, term: str, thorough: bool = False) -> DeepSearchResult:
        """Full-text and entity search; ``thorough`` asks for an exhaustive pass."""
        data = await self._get(
            "search/deep",
            {"q": term, "thorough": str(thorough).lower()},
        )
        try:
            result = DeepSearchResult.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise QueryServiceError(f"search/deep: malformed payload ({e})") from e
        if not result.query:
            result.query = term
        return result

    async def fetch_stats(self) -> Stats:
        data = await self._get("stats")
        try:
            return Stats.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise QueryServiceError(f"stats: malformed payload ({e})") from e

    async def fetch_tag_clusters(self) -> list[TagCluster]:
        data = await self._get("tag-clusters")
        try:
            return [TagCluster.from_dict(row) for row in data]
        except (KeyError, TypeError, ValueError) as e:
            raise QueryServiceError(f"tag-clusters: malformed payload ({e})") from e


# Global client instance
_query_client: QueryServiceClient | None = None


def get_query_client() -> QueryServiceClient:
    """Get or create the global query service client."""
    global _query_client
    if _query_client is None:
        _query_client = QueryServiceClient()
    return _query_client


async def close_query_client() -> None:
    """Close the global query service client."""
    global _query_client
    if _query_client is not None:
        await _query_client.close()
        _query_client = None
