"""
Tests for the command-line interface.
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from kite_news import cli
from kite_news.Caching.news_cache import NewsCache
from kite_news.exceptions import TransportError

TIMESTAMP = int(datetime(2025, 3, 10, 10).timestamp())
INDEX = {
    "timestamp": TIMESTAMP,
    "categories": [{"file": "world.json", "name": "World"}, {"file": "tech.json", "name": "Tech"}],
}


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "kite-news"


def run_cli(cache_dir, tmp_path, *args):
    return cli.main(["--env-file", str(tmp_path / "missing.env"), "--data-dir", str(cache_dir), *args])


def make_client(index=INDEX, articles=None):
    client = MagicMock()
    if isinstance(index, Exception):
        client.fetch_categories.side_effect = index
    else:
        client.fetch_categories.return_value = index
    client.fetch_articles.side_effect = lambda f: (articles or {}).get(f, {"clusters": []})
    return client


def test_first_sync_downloads_category_list(cache_dir, tmp_path, capsys):
    client = make_client()
    with patch.object(cli.KiteClient, "from_config", return_value=client):
        assert run_cli(cache_dir, tmp_path, "sync", "--yes") == 0

    assert "Category list updated" in capsys.readouterr().out
    assert NewsCache(cache_dir).has_index()
    client.fetch_articles.assert_not_called()


def test_full_sync_reports_counts(cache_dir, tmp_path, capsys):
    NewsCache(cache_dir).save_index(INDEX)
    client = make_client(articles={"tech.json": {"clusters": [{"title": "A"}]}})

    with patch.object(cli.KiteClient, "from_config", return_value=client):
        assert run_cli(cache_dir, tmp_path, "sync", "--yes") == 0

    out = capsys.readouterr().out
    assert "Downloading category: World (1/2)..." in out
    assert "2/2 downloaded, 0 images." in out
    assert NewsCache(cache_dir).cached_article_count("tech.json") == 1


def test_sync_failure_exit_code(cache_dir, tmp_path, capsys):
    client = make_client(index=TransportError("HTTP 500 Internal Server Error"))
    with patch.object(cli.KiteClient, "from_config", return_value=client):
        assert run_cli(cache_dir, tmp_path, "sync", "--yes") == 1

    assert "HTTP 500 Internal Server Error" in capsys.readouterr().out


def test_sync_declined_at_prompt(cache_dir, tmp_path, capsys):
    NewsCache(cache_dir).save_index(INDEX)
    client = make_client()
    with patch.object(cli.KiteClient, "from_config", return_value=client), \
            patch("builtins.input", return_value="n"):
        assert run_cli(cache_dir, tmp_path, "sync") == 0

    assert "Sync not started." in capsys.readouterr().out
    client.fetch_categories.assert_not_called()


def test_follow_and_categories(cache_dir, tmp_path, capsys):
    cache = NewsCache(cache_dir)
    cache.save_index(INDEX)
    cache.save_articles("tech.json", {"clusters": [{"title": "A"}, {"title": "B"}]})

    assert run_cli(cache_dir, tmp_path, "follow", "tech.json") == 0
    assert cache.get_followed_categories() == ["tech.json"]

    assert run_cli(cache_dir, tmp_path, "categories") == 0
    out = capsys.readouterr().out
    assert "Tech (2)" in out
    assert "World" not in out

    assert run_cli(cache_dir, tmp_path, "follow", "--all") == 0
    assert cache.get_followed_categories() is None


def test_follow_requires_index(cache_dir, tmp_path, capsys):
    assert run_cli(cache_dir, tmp_path, "follow", "tech.json") == 1
    assert "Sync news first" in capsys.readouterr().out


def test_status_and_clear(cache_dir, tmp_path, capsys):
    cache = NewsCache(cache_dir)
    cache.save_index(INDEX)
    cache.save_followed_categories(["world.json"])

    assert run_cli(cache_dir, tmp_path, "status") == 0
    out = capsys.readouterr().out
    assert "Updated: 2025-03-10 10:00" in out
    assert "Followed categories: world.json" in out

    assert run_cli(cache_dir, tmp_path, "clear") == 0
    assert "Cache cleared." in capsys.readouterr().out
    assert not cache.has_index()
    assert cache.get_followed_categories() == ["world.json"]


def test_format_next_update():
    assert cli._format_next_update(None) == ""
    assert cli._format_next_update(0) == " (Update available)"
    assert cli._format_next_update(3 * 3600 + 25 * 60 + 10) == " (Next in 3h 25m)"
