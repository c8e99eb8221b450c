"""Repository refresh module."""

from .models import RepositoryRecord, SecurityAlertSummary
from .github_client import GitHubClient
from .fetcher import RepositoryFetcher, parse_repo_url
from .package_versions import PackageVersionExtractor, tracked_packages
from .refresh import RefreshError, RefreshManager
from .repo_list import load_repo_list, parse_repo_list

__all__ = [
    "RepositoryRecord",
    "SecurityAlertSummary",
    "GitHubClient",
    "RepositoryFetcher",
    "parse_repo_url",
    "PackageVersionExtractor",
    "tracked_packages",
    "RefreshError",
    "RefreshManager",
    "load_repo_list",
    "parse_repo_list",
]
