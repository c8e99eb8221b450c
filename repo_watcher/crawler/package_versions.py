"""Tracked dependency version extraction from package.json manifests."""

import base64
import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from packaging.version import Version

from .aio import gather_all
from .github_client import GitHubClient

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"

DEFAULT_PACKAGES = {
    "@angular/core": "Angular",
    "react": "React",
    "vue": "Vue",
    "svelte": "Svelte",
    "lit": "Lit",
    "typescript": "TypeScript",
    "@azure/functions": "Functions",
    "langchain": "LangChain.js",
    "fastify": "Fastify",
}

# Same digit run npm's semver.coerce() picks out of a range like "^1.2.0"
COERCE_PATTERN = re.compile(r"(?<!\d)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?")


def tracked_packages(overrides: Mapping[str, str] | None = None) -> Mapping[str, str]:
    """Build the read-only manifest name -> display name table."""
    return MappingProxyType(dict(overrides) if overrides else dict(DEFAULT_PACKAGES))


@dataclass
class ManifestParseResult:
    """Outcome of parsing a single manifest."""
    file_path: str
    success: bool
    dependencies: dict[str, str] = field(default_factory=dict)
    error: str | None = None


def parse_manifest(encoded: str, file_path: str) -> ManifestParseResult:
    """Decode a base64 package.json and merge its dependency sections.

    ``dependencies`` and ``devDependencies`` are merged without
    distinguishing them; devDependencies win on a name collision.
    """
    try:
        manifest = json.loads(base64.b64decode(encoded).decode("utf-8"))
    except ValueError as e:
        return ManifestParseResult(file_path=file_path, success=False, error=str(e))

    if not isinstance(manifest, dict):
        return ManifestParseResult(
            file_path=file_path,
            success=False,
            error=f"Expected a JSON object, got {type(manifest).__name__}",
        )

    deps: dict[str, str] = {}
    for section in ("dependencies", "devDependencies"):
        entries = manifest.get(section)
        if not isinstance(entries, dict):
            continue
        deps.update({
            name: version for name, version in entries.items()
            if isinstance(version, str)
        })

    return ManifestParseResult(file_path=file_path, success=True, dependencies=deps)


def coerce_version(version: str) -> Version | None:
    """Pull a comparable MAJOR.MINOR.PATCH out of a version or range string."""
    match = COERCE_PATTERN.search(version)
    if not match:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return Version(f"{major}.{minor}.{patch}")


def select_tracked(dependencies: Mapping[str, str], packages: Mapping[str, str]) -> dict[str, str]:
    """Keep tracked dependencies, keyed by display name."""
    return merge_lowest(
        [{packages[name]: version} for name, version in dependencies.items() if name in packages]
    )


def merge_lowest(version_maps: Iterable[Mapping[str, str]]) -> dict[str, str]:
    """Merge display name -> version maps, keeping the lowest version of each.

    Versions that can't be coerced are dropped. On a tie the first
    occurrence is kept.
    """
    merged: dict[str, str] = {}
    lowest: dict[str, Version] = {}

    for versions in version_maps:
        for name, version in versions.items():
            coerced = coerce_version(version)
            if coerced is None:
                continue
            if name not in lowest or coerced < lowest[name]:
                lowest[name] = coerced
                merged[name] = version

    return merged


def normalize_version(version: str) -> str | None:
    """Shorten a version to the precision that tells it apart.

    ``2.1.3`` -> ``2``, ``0.5.2`` -> ``0.5``, ``0.0.7`` -> ``0.0.7``.
    """
    coerced = coerce_version(version)
    if coerced is None:
        return None
    if coerced.major > 0:
        return f"{coerced.major}"
    if coerced.minor > 0:
        return f"{coerced.major}.{coerced.minor}"
    return f"{coerced.major}.{coerced.minor}.{coerced.micro}"


class PackageVersionExtractor:
    """Finds the tracked package versions declared in a repository."""

    def __init__(self, client: GitHubClient, packages: Mapping[str, str] | None = None):
        self.client = client
        self.packages = packages if packages is not None else tracked_packages()

    async def extract(self, owner: str, repo: str) -> dict[str, str]:
        """Return display name -> normalized version for one repository."""
        query = f"filename:{MANIFEST_FILENAME} repo:{owner}/{repo}"
        items = await self.client.search_code(query)

        results = await gather_all(
            *(self._read_manifest(owner, repo, item["path"]) for item in items)
        )
        merged = merge_lowest(results)

        versions = {}
        for name, version in merged.items():
            normalized = normalize_version(version)
            if normalized:
                versions[name] = normalized
        return versions

    async def _read_manifest(self, owner: str, repo: str, path: str) -> dict[str, str]:
        """Fetch one manifest and return its tracked versions."""
        content = await self.client.get_content(owner, repo, path)

        # Directory listings and symlinks have no inline content
        if not isinstance(content, dict) or "content" not in content:
            return {}

        result = parse_manifest(content["content"], path)
        if not result.success:
            logger.warning("Error parsing %s in %s/%s: %s", path, owner, repo, result.error)
            return {}

        return select_tracked(result.dependencies, self.packages)
