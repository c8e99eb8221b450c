"""Per-repository metadata collection."""

import logging
from collections.abc import Awaitable

import httpx

from .aio import gather_all
from .github_client import GitHubClient
from .models import RepositoryRecord, SecurityAlertSummary
from .package_versions import PackageVersionExtractor

logger = logging.getLogger(__name__)

DEFAULT_HOST_PREFIX = "https://github.com/"


def parse_repo_url(repo_url: str, host_prefix: str = DEFAULT_HOST_PREFIX) -> tuple[str, str]:
    """Split ``https://github.com/owner/repo`` into ``(owner, repo)``."""
    url = repo_url.strip()
    if not url.startswith(host_prefix):
        raise ValueError(f"Not a repository URL under {host_prefix}: {repo_url}")

    parts = url[len(host_prefix):].split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Missing owner or name in repository URL: {repo_url}")
    return parts[0], parts[1]


async def _optional_count(query: Awaitable[list], label: str) -> int | None:
    """Count the items of an alert query, or None if it isn't available."""
    try:
        return len(await query)
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("%s unavailable: %s", label, e)
        return None


class RepositoryFetcher:
    """Collects a RepositoryRecord for a single repository URL."""

    def __init__(
        self,
        client: GitHubClient,
        extractor: PackageVersionExtractor,
        host_prefix: str = DEFAULT_HOST_PREFIX,
    ):
        self.client = client
        self.extractor = extractor
        self.host_prefix = host_prefix

    async def fetch(self, repo_url: str) -> RepositoryRecord:
        """Fetch metadata, statistics and package versions concurrently.

        Alert queries that fail leave their count unset. Any other failure
        propagates to the caller.
        """
        owner, repo = parse_repo_url(repo_url, self.host_prefix)
        client = self.client
        full_name = f"{owner}/{repo}"

        (
            repo_data,
            pulls,
            advisories,
            dependabot,
            code_scanning,
            secret_scanning,
            languages,
            package_versions,
        ) = await gather_all(
            client.get_repo(owner, repo),
            client.list_open_pulls(owner, repo),
            client.list_security_advisories(owner, repo),
            _optional_count(
                client.list_dependabot_alerts(owner, repo), f"Dependabot alerts for {full_name}"
            ),
            _optional_count(
                client.list_code_scanning_alerts(owner, repo), f"Code scanning alerts for {full_name}"
            ),
            _optional_count(
                client.list_secret_scanning_alerts(owner, repo), f"Secret scanning alerts for {full_name}"
            ),
            client.list_languages(owner, repo),
            self.extractor.extract(owner, repo),
        )

        # open_issues_count includes open pull requests
        open_pulls = len(pulls)

        return RepositoryRecord(
            name=repo_data["full_name"],
            description=repo_data.get("description") or "",
            topics=repo_data.get("topics") or [],
            languages=list(languages),
            stars=repo_data["stargazers_count"],
            forks=repo_data["forks_count"],
            open_issues=repo_data["open_issues_count"] - open_pulls,
            open_pull_requests=open_pulls,
            security_alerts=SecurityAlertSummary(
                advisories=len(advisories),
                dependabot=dependabot,
                code_scanning=code_scanning,
                secret_scanning=secret_scanning,
            ),
            last_commit_date=repo_data.get("pushed_at"),
            package_versions=package_versions,
        )
