"""Tests for repository list loading."""

from repo_watcher.crawler.repo_list import load_repo_list, parse_repo_list


def test_skips_blank_and_comment_lines():
    text = "https://github.com/a/b\n\n# comment\n"
    assert parse_repo_list(text) == ["https://github.com/a/b"]


def test_skips_markdown_and_plain_text():
    text = "# Repos\n## Samples\n- not a url\ngithub.com/x/y\n  https://github.com/c/d  \n"
    assert parse_repo_list(text) == ["https://github.com/c/d"]


def test_selector_keeps_matching_urls():
    text = "https://github.com/Azure/chat\nhttps://github.com/Azure/rag\nhttps://github.com/other/chat-app\n"
    assert parse_repo_list(text, "chat") == [
        "https://github.com/Azure/chat",
        "https://github.com/other/chat-app",
    ]


def test_selector_is_case_sensitive():
    text = "https://github.com/Azure/chat\n"
    assert parse_repo_list(text, "azure") == []


def test_empty_selector_returns_everything():
    text = "https://github.com/a/b\nhttps://github.com/c/d\n"
    assert parse_repo_list(text, "") == parse_repo_list(text)
    assert len(parse_repo_list(text, None)) == 2


def test_duplicates_and_order_preserved():
    text = "https://github.com/c/d\nhttps://github.com/a/b\nhttps://github.com/c/d\n"
    assert parse_repo_list(text) == [
        "https://github.com/c/d",
        "https://github.com/a/b",
        "https://github.com/c/d",
    ]


def test_load_repo_list_reads_file(tmp_path):
    path = tmp_path / "repos.md"
    path.write_text("# Tracked\n\nhttps://github.com/a/b\r\nhttps://github.com/c/d\n")
    assert load_repo_list(path, "c/d") == ["https://github.com/c/d"]
