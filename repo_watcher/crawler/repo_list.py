"""Repository list loading."""

from pathlib import Path

URL_PREFIX = "http"


def parse_repo_list(text: str, selector: str | None = None) -> list[str]:
    """Extract repository URLs from a line-oriented list.

    Lines that don't start with ``http`` once trimmed (blank lines,
    markdown headers, comments) are skipped. When ``selector`` is given,
    only URLs containing it are kept.
    """
    urls = []
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(URL_PREFIX):
            continue
        if selector and selector not in line:
            continue
        urls.append(line)
    return urls


def load_repo_list(path: Path | str, selector: str | None = None) -> list[str]:
    """Read a repository list file."""
    return parse_repo_list(Path(path).read_text(encoding="utf-8"), selector)
