import asyncio
import json
from typing import Any, Dict, Optional, Tuple

import aiohttp

from .errors import ContentfulApiError
from .models import Page, ResourceKind, ResourceRef, ScopeFilter

DEFAULT_BASE_URL = "https://api.contentful.com"
DEFAULT_TIMEOUT = 60
CONTENT_TYPE_HEADER = "application/vnd.contentful.management.v1+json"
CONNECTION_LIMIT = 50


class ContentfulClient:
    """Thin aiohttp wrapper around the Contentful Management API.

    Every request goes through one session whose ``ClientTimeout`` is the
    deadline for each backend call. Failed requests are not retried.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "ContentfulClient":
        headers = {
            "authorization": f"Bearer {self.token}",
            "accept": "application/json",
            "content-type": CONTENT_TYPE_HEADER,
        }
        connector = aiohttp.TCPConnector(
            limit=CONNECTION_LIMIT,
            limit_per_host=CONNECTION_LIMIT,
            ttl_dns_cache=300,
            use_dns_cache=True,
        )
        timeout = aiohttp.ClientTimeout(total=self.timeout, connect=min(10, self.timeout))
        self.session = aiohttp.ClientSession(
            headers=headers, connector=connector, timeout=timeout
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session:
            await self.session.close()

    def _url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{normalized}"

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        expected_status: Tuple[int, ...] = (200, 201, 204),
    ) -> Dict[str, Any]:
        if not self.session:
            raise RuntimeError("HTTP session not initialized")

        url = self._url(path)
        try:
            async with self.session.request(method, url, params=params) as response:
                text = await response.text()
                if response.status not in expected_status:
                    raise ContentfulApiError(method, url, response.status, text)
                if not text:
                    return {}
                try:
                    return json.loads(text)
                except json.JSONDecodeError:
                    return {}
        except asyncio.TimeoutError as error:
            raise ContentfulApiError(
                method, url, None, f"timed out after {self.timeout}s"
            ) from error
        except aiohttp.ClientError as error:
            raise ContentfulApiError(method, url, None, str(error)) from error

    async def get_space(self, space_id: str) -> Dict[str, Any]:
        return await self._request_json("GET", f"/spaces/{space_id}")

    async def get_environment(
        self, space_id: str, environment_id: str
    ) -> "Environment":
        await self._request_json(
            "GET", f"/spaces/{space_id}/environments/{environment_id}"
        )
        return Environment(self, space_id, environment_id)


class Environment:
    """Backend facade scoped to one space environment."""

    def __init__(
        self, client: ContentfulClient, space_id: str, environment_id: str
    ) -> None:
        self.client = client
        self.space_id = space_id
        self.environment_id = environment_id

    @property
    def base_path(self) -> str:
        return f"/spaces/{self.space_id}/environments/{self.environment_id}"

    def _collection_path(self, kind: ResourceKind) -> str:
        return f"{self.base_path}/{kind.value}"

    def _item_path(self, ref: ResourceRef) -> str:
        return f"{self._collection_path(ref.kind)}/{ref.id}"

    def _query(
        self, kind: ResourceKind, scope: ScopeFilter, limit: int
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"limit": limit}
        if kind is ResourceKind.ENTRY:
            params["include"] = 0
            if not scope.is_empty:
                params["content_type"] = scope.content_type_id
        return params

    async def count_matching(self, kind: ResourceKind, scope: ScopeFilter) -> int:
        data = await self.client._request_json(
            "GET", self._collection_path(kind), params=self._query(kind, scope, 0)
        )
        return int(data.get("total", 0))

    async def fetch_page(
        self, kind: ResourceKind, scope: ScopeFilter, limit: int, skip: int = 0
    ) -> Page:
        params = self._query(kind, scope, limit)
        if skip:
            params["skip"] = skip
        data = await self.client._request_json(
            "GET", self._collection_path(kind), params=params
        )
        refs = []
        for item in data.get("items", []) or []:
            item_id = (item.get("sys") or {}).get("id")
            if item_id:
                refs.append(ResourceRef(item_id, kind))
        return Page(total=int(data.get("total", len(refs))), items=refs)

    async def is_published(self, ref: ResourceRef) -> bool:
        data = await self.client._request_json("GET", self._item_path(ref))
        return bool((data.get("sys") or {}).get("publishedVersion"))

    async def unpublish(self, ref: ResourceRef) -> None:
        await self.client._request_json(
            "DELETE", f"{self._item_path(ref)}/published", expected_status=(200, 204)
        )

    async def delete(self, ref: ResourceRef) -> None:
        await self.client._request_json(
            "DELETE", self._item_path(ref), expected_status=(200, 204)
        )
