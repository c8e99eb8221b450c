"""Shared test fixtures."""

import base64
import json

import httpx
import pytest


def encode_manifest(manifest) -> str:
    """Base64-encode a manifest the way the contents API returns it."""
    text = manifest if isinstance(manifest, str) else json.dumps(manifest)
    return base64.b64encode(text.encode()).decode()


class FakeGitHub:
    """In-memory GitHub REST API served through httpx.MockTransport.

    ``routes`` maps a request path to a JSON payload, an HTTP status code
    to fail with, or a ready-made ``httpx.Response``. Code search results
    are keyed by query unless ``/search/code`` itself is routed.
    """

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.searches: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/search/code" and path not in self.routes:
            items = self.searches.get(request.url.params["q"], [])
            return httpx.Response(200, json={"total_count": len(items), "items": items})

        if path not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})

        payload = self.routes[path]
        if isinstance(payload, httpx.Response):
            return payload
        if isinstance(payload, int):
            return httpx.Response(payload, json={"message": "Unavailable"})
        return httpx.Response(200, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_repo(
        self,
        full_name: str,
        open_issues: int = 10,
        pulls: int = 3,
        manifests: dict[str, object] | None = None,
    ) -> None:
        """Register a healthy repository with every endpoint answering."""
        base = f"/repos/{full_name}"
        self.routes[base] = {
            "full_name": full_name,
            "description": f"The {full_name} sample",
            "topics": ["azure", "sample"],
            "stargazers_count": 42,
            "forks_count": 7,
            "open_issues_count": open_issues,
            "pushed_at": "2024-05-01T12:00:00Z",
        }
        self.routes[f"{base}/pulls"] = [{"number": n} for n in range(pulls)]
        self.routes[f"{base}/security-advisories"] = [{"ghsa_id": "GHSA-xxxx"}]
        self.routes[f"{base}/dependabot/alerts"] = [{"number": 1}, {"number": 2}]
        self.routes[f"{base}/code-scanning/alerts"] = []
        self.routes[f"{base}/secret-scanning/alerts"] = [{"number": 1}]
        self.routes[f"{base}/languages"] = {"TypeScript": 9000, "Bicep": 300}

        manifests = manifests or {}
        self.searches[f"filename:package.json repo:{full_name}"] = [
            {"name": "package.json", "path": path} for path in manifests
        ]
        for path, manifest in manifests.items():
            self.routes[f"{base}/contents/{path}"] = {
                "type": "file",
                "path": path,
                "encoding": "base64",
                "content": encode_manifest(manifest),
            }


@pytest.fixture
def fake_github():
    """An empty fake GitHub API."""
    return FakeGitHub()


@pytest.fixture
def config(tmp_path):
    """A config dict pointing the repository list and snapshot into tmp_path."""
    from repo_watcher.main import load_config

    cfg = load_config(tmp_path / "missing.yaml")
    cfg["repos"]["list_path"] = str(tmp_path / "repos.md")
    cfg["repos"]["output_path"] = str(tmp_path / "out" / "repos.json")
    return cfg
