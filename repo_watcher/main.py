"""Main entry point for the repository refresh.

Fetches data about the repositories listed in ``data/repos.md`` and saves
it to ``data/repos.json``.

Usage: ``repo-watcher [<partial-repo-name>]``
"""

import argparse
import asyncio
import copy
import logging
import os
from pathlib import Path

import httpx
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .crawler.fetcher import DEFAULT_HOST_PREFIX, RepositoryFetcher
from .crawler.github_client import DEFAULT_API_URL, GitHubClient
from .crawler.models import RepositoryRecord
from .crawler.package_versions import DEFAULT_PACKAGES, PackageVersionExtractor, tracked_packages
from .crawler.refresh import RefreshError, RefreshManager
from .crawler.repo_list import load_repo_list
from .store.output import SnapshotWriter

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"

DEFAULT_CONFIG = {
    "github": {
        "api_url": DEFAULT_API_URL,
        "host_prefix": DEFAULT_HOST_PREFIX,
        "max_concurrency": 8,
        "timeout": 30,
    },
    "repos": {
        "list_path": "data/repos.md",
        "output_path": "data/repos.json",
    },
    "packages": DEFAULT_PACKAGES,
    "server": {
        "title": "Repository Watcher",
        "source_url": "https://github.com/sinedied/github-repository-watcher",
    },
}


def load_config(config_path: Path, required: bool = False) -> dict:
    """Load configuration from YAML file, on top of the defaults.

    Sections are merged key by key, except ``packages`` which replaces the
    default tracked packages as a whole.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if not config_path.exists():
        if required:
            console.print(f"[red]Error:[/red] Config file not found: {config_path}")
            raise SystemExit(1)
        return config

    try:
        loaded = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as e:
        console.print(f"[red]Error:[/red] Invalid config file {config_path}: {e}")
        raise SystemExit(1)

    if not isinstance(loaded, dict):
        console.print(f"[red]Error:[/red] Invalid config file {config_path}: expected a mapping at the top level")
        raise SystemExit(1)

    for section, values in loaded.items():
        if section == "packages" or not isinstance(values, dict):
            config[section] = values
        else:
            config.setdefault(section, {}).update(values)

    return config


def get_token(config: dict) -> str | None:
    """Read the GitHub token, letting a local .env file override the environment."""
    load_dotenv(override=True)
    token = os.environ.get("GITHUB_TOKEN") or config.get("github", {}).get("token")
    if not token:
        logger.warning("GITHUB_TOKEN not set, calling the GitHub API anonymously")
    return token


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


async def fetch_records(
    config: dict,
    repo_urls: list[str],
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[RepositoryRecord]:
    """Fetch every repository with a shared, rate-bounded client."""
    gh_config = config["github"]

    async with GitHubClient(
        token=token,
        api_url=gh_config.get("api_url", DEFAULT_API_URL),
        max_concurrency=gh_config.get("max_concurrency", 8),
        timeout=gh_config.get("timeout", 30),
        transport=transport,
    ) as client:
        extractor = PackageVersionExtractor(client, tracked_packages(config.get("packages")))
        fetcher = RepositoryFetcher(
            client,
            extractor,
            host_prefix=gh_config.get("host_prefix", DEFAULT_HOST_PREFIX),
        )
        return await RefreshManager(fetcher, console=console).fetch_all(repo_urls)


def run_refresh(
    config: dict,
    selector: str | None = None,
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Load the repository list, fetch everything and write the snapshot.

    Raises RefreshError if any repository fails; the snapshot is then left
    untouched.
    """
    repos_config = config["repos"]
    list_path = Path(repos_config["list_path"])

    repo_urls = load_repo_list(list_path, selector)
    console.print(f"Found {len(repo_urls)} repositories in {list_path}")

    records = asyncio.run(fetch_records(config, repo_urls, token=token, transport=transport))

    return SnapshotWriter(repos_config["output_path"]).write(records)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Repository Watcher - Fetch GitHub metadata for the tracked repositories"
    )
    parser.add_argument(
        "filter",
        nargs="?",
        default="",
        help="Only fetch repositories whose URL contains this text",
    )
    parser.add_argument(
        "--config", "-c",
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--repos",
        help="Repository list file (overrides config)",
    )
    parser.add_argument(
        "--output", "-o",
        help="Output JSON file (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    config = load_config(
        Path(args.config or DEFAULT_CONFIG_PATH),
        required=args.config is not None,
    )
    if args.repos:
        config["repos"]["list_path"] = args.repos
    if args.output:
        config["repos"]["output_path"] = args.output

    list_path = Path(config["repos"]["list_path"])
    if not list_path.exists():
        console.print(f"[red]Error:[/red] Repository list not found: {list_path}")
        raise SystemExit(1)

    try:
        run_refresh(config, selector=args.filter, token=get_token(config))
    except RefreshError:
        # Already logged with the repository context
        raise SystemExit(1)


if __name__ == "__main__":
    main()
