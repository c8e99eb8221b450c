"""Batch refresh of every tracked repository."""

import logging

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn

from .aio import gather_all
from .fetcher import RepositoryFetcher
from .models import RepositoryRecord

logger = logging.getLogger(__name__)


class RefreshError(Exception):
    """A repository could not be fetched; the whole refresh is aborted."""

    def __init__(self, repo_url: str, cause: Exception):
        super().__init__(f"Error fetching data for {repo_url}: {cause}")
        self.repo_url = repo_url
        self.cause = cause


class RefreshManager:
    """Fetches all repositories of a list concurrently."""

    def __init__(self, fetcher: RepositoryFetcher, console: Console | None = None):
        self.fetcher = fetcher
        # Must be the logging console for log lines to render above the progress bar
        self.console = console or Console()

    async def fetch_all(self, repo_urls: list[str]) -> list[RepositoryRecord]:
        """Fetch every repository, preserving the list order.

        The first failure raises RefreshError; no partial result is
        returned.
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=self.console,
        ) as progress:
            task = progress.add_task("Fetching repositories...", total=len(repo_urls))

            async def fetch_one(repo_url: str) -> RepositoryRecord:
                logger.info("Fetching data for %s...", repo_url)
                try:
                    record = await self.fetcher.fetch(repo_url)
                except Exception as e:
                    logger.error("Error fetching data for %s: %s", repo_url, e)
                    raise RefreshError(repo_url, e) from e

                progress.console.print(f"  [green]✓[/green] {record.name}")
                progress.advance(task)
                return record

            return await gather_all(*(fetch_one(url) for url in repo_urls))
