"""Async GitHub REST API client for repository metadata."""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100
RATE_LIMIT_WARNING = 50


class GitHubClient:
    """Client for the GitHub REST endpoints used by the refresh.

    Every request goes through a shared semaphore so a whole batch of
    repositories never has more than ``max_concurrency`` requests in
    flight. Failed requests raise ``httpx.HTTPStatusError``; nothing is
    retried.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        max_concurrency: int = 8,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "repo-watcher",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.AsyncClient(
            base_url=api_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, url: str, params: dict | None = None) -> httpx.Response:
        async with self._semaphore:
            logger.debug("GitHub API: GET %s", url)
            response = await self.client.get(url, params=params)

        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining and remaining.isdigit() and int(remaining) < RATE_LIMIT_WARNING:
            logger.warning("GitHub rate limit low: %s requests remaining", remaining)

        response.raise_for_status()
        return response

    async def get(self, endpoint: str, params: dict | None = None) -> Any:
        """GET a single resource and return the decoded JSON."""
        response = await self._request(endpoint, params)
        return response.json()

    async def get_paginated(
        self,
        endpoint: str,
        params: dict | None = None,
        items_key: str | None = None,
    ) -> list:
        """GET every page of a list endpoint, following ``Link: rel=next``.

        ``items_key`` selects the list inside wrapped responses such as
        search results.
        """
        items: list = []
        url: str | None = endpoint
        page_params = {**(params or {}), "per_page": PER_PAGE}

        while url:
            response = await self._request(url, page_params)
            data = response.json()
            items.extend(data[items_key] if items_key else data)

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            page_params = None

        return items

    async def get_repo(self, owner: str, repo: str) -> dict:
        return await self.get(f"/repos/{owner}/{repo}")

    async def list_open_pulls(self, owner: str, repo: str) -> list[dict]:
        return await self.get_paginated(f"/repos/{owner}/{repo}/pulls", {"state": "open"})

    async def list_security_advisories(self, owner: str, repo: str) -> list[dict]:
        return await self.get_paginated(f"/repos/{owner}/{repo}/security-advisories")

    async def list_dependabot_alerts(self, owner: str, repo: str) -> list[dict]:
        return await self.get_paginated(
            f"/repos/{owner}/{repo}/dependabot/alerts", {"state": "open"}
        )

    async def list_code_scanning_alerts(self, owner: str, repo: str) -> list[dict]:
        return await self.get_paginated(
            f"/repos/{owner}/{repo}/code-scanning/alerts", {"state": "open"}
        )

    async def list_secret_scanning_alerts(self, owner: str, repo: str) -> list[dict]:
        return await self.get_paginated(
            f"/repos/{owner}/{repo}/secret-scanning/alerts", {"state": "open"}
        )

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:
        return await self.get(f"/repos/{owner}/{repo}/languages")

    async def search_code(self, query: str) -> list[dict]:
        """Search code; returns the matching file items."""
        return await self.get_paginated("/search/code", {"q": query}, items_key="items")

    async def get_content(self, owner: str, repo: str, path: str) -> Any:
        """Get a file's contents object (base64 ``content`` for files)."""
        return await self.get(f"/repos/{owner}/{repo}/contents/{quote(path)}")
