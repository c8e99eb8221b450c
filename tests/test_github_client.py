"""Tests for the GitHub API client."""

import asyncio
import logging

import httpx

from repo_watcher.crawler.fetcher import RepositoryFetcher
from repo_watcher.crawler.github_client import GitHubClient
from repo_watcher.crawler.package_versions import PackageVersionExtractor


class InFlightCounter:
    """Async transport handler recording the peak number of concurrent requests."""

    def __init__(self, handler):
        self.handler = handler
        self.in_flight = 0
        self.peak = 0

    async def __call__(self, request):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.005)
            return self.handler(request)
        finally:
            self.in_flight -= 1


def test_max_concurrency_bounds_requests():
    counter = InFlightCounter(lambda request: httpx.Response(200, json={"full_name": "a/b"}))

    async def run():
        async with GitHubClient(max_concurrency=2, transport=httpx.MockTransport(counter)) as client:
            await asyncio.gather(*(client.get_repo("a", f"r{n}") for n in range(6)))

    asyncio.run(run())

    assert counter.peak == 2


def test_semaphore_shared_across_repositories(fake_github):
    names = [f"a/r{n}" for n in range(6)]
    for name in names:
        fake_github.add_repo(name, manifests={"package.json": {"dependencies": {"react": "18.0.0"}}})
    counter = InFlightCounter(fake_github.handler)

    async def run():
        async with GitHubClient(max_concurrency=2, transport=httpx.MockTransport(counter)) as client:
            fetcher = RepositoryFetcher(client, PackageVersionExtractor(client))
            return await asyncio.gather(
                *(fetcher.fetch(f"https://github.com/{name}") for name in names)
            )

    records = asyncio.run(run())

    assert [r.name for r in records] == names
    assert counter.peak <= 2
    assert len(fake_github.requests) == 6 * 9


def test_low_rate_limit_logs_warning(caplog):
    def handler(request):
        return httpx.Response(200, json={"full_name": "a/b"}, headers={"X-RateLimit-Remaining": "10"})

    async def run():
        async with GitHubClient(transport=httpx.MockTransport(handler)) as client:
            return await client.get_repo("a", "b")

    with caplog.at_level(logging.WARNING):
        assert asyncio.run(run()) == {"full_name": "a/b"}

    assert "rate limit low" in caplog.text


def test_plenty_of_rate_limit_is_quiet(caplog):
    def handler(request):
        return httpx.Response(200, json={}, headers={"X-RateLimit-Remaining": "4999"})

    async def run():
        async with GitHubClient(transport=httpx.MockTransport(handler)) as client:
            await client.get_repo("a", "b")

    with caplog.at_level(logging.WARNING):
        asyncio.run(run())

    assert "rate limit" not in caplog.text
