import asyncio
import json
import logging
import sys
from pathlib import Path

import pytest

from cli.run import build_parser, main
from ingestion.source_factory import create_adapters_from_config
from services.config import ConfigError, load_config
from services.logging import JsonFormatter

PROJECT_CONFIG = Path(__file__).resolve().parent.parent / "resources" / "config.yml"

SAMPLE_CONFIG = """
LOG_LEVEL: DEBUG
cache:
  ttl_seconds: 120
http:
  max_retries: 3
sources:
  rss:
    - id: f2f
      name: Fibre2Fashion
      url: https://example.com/rss
      priority_weight: 8
      category: Industry
    - id: too-heavy
      name: Broken weight
      url: https://example.com/broken
      priority_weight: 42
  google_news:
    - id: gn-india-bd
      name: India to Bangladesh
      url: india bangladesh yarn
      region: BD
  reddit:
    - id: r-textiles
      name: r/textiles
      url: textiles
      enabled: "false"
  hackernews:
    - id: hn
      name: Hacker News
      keywords: [textile, apparel]
"""


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("NEWSAPI_KEY", raising=False)
    path = tmp_path / "config.yml"
    path.write_text(SAMPLE_CONFIG)
    return path


def test_load_config(config_file):
    config = load_config(str(config_file))

    assert [s.id for s in config.sources] == ["f2f", "gn-india-bd", "r-textiles", "hn"]
    assert config.LOG_LEVEL == "DEBUG"
    assert config.cache.ttl_seconds == 120
    assert config.cache.max_concurrency == 8
    assert config.http.max_retries == 3

    by_id = {s.id: s for s in config.sources}
    assert by_id["f2f"].type == "newspaper"
    assert by_id["gn-india-bd"].type == "aggregator"
    assert by_id["gn-india-bd"].region == "BD"
    assert by_id["r-textiles"].type == "forum"
    assert by_id["r-textiles"].enabled is False
    assert by_id["hn"].type == "social"
    assert by_id["hn"].keywords == ["textile", "apparel"]


def test_adapters_for_enabled_sources(config_file):
    adapters = create_adapters_from_config(load_config(str(config_file)))
    assert [a.source.id for a in adapters] == ["f2f", "gn-india-bd", "hn"]


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "nope.yml"))


def test_env_overrides(config_file, monkeypatch):
    monkeypatch.setenv("NEWSAPI_KEY", "from-env")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    config = load_config(str(config_file))

    assert config.NEWSAPI_KEY == "from-env"
    assert config.LOG_LEVEL == "WARNING"


def test_bundled_config_is_valid(monkeypatch):
    monkeypatch.delenv("NEWSAPI_KEY", raising=False)
    config = load_config(str(PROJECT_CONFIG))

    ids = [s.id for s in config.sources]
    assert len(ids) == len(set(ids))
    assert {s.adapter for s in config.sources} == {"rss", "google_news", "hackernews", "reddit", "newsapi"}

    # hackernews falls back to the top stories listing
    assert all(s.url for s in config.sources if s.adapter != "hackernews")


def test_parser():
    args = build_parser().parse_args(["feed", "--country", "India", "--limit", "10", "--days-back", "7"])
    assert args.command == "feed"
    assert args.country == "India"
    assert args.limit == 10
    assert args.days_back == 7
    assert args.offset == 0

    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_cli_lists_sources(config_file, capsys):
    code = asyncio.run(main(["--config", str(config_file), "--log-level", "error", "sources"]))

    assert code == 0
    listed = json.loads(capsys.readouterr().out)
    assert [s["id"] for s in listed] == ["f2f", "gn-india-bd", "r-textiles", "hn"]
    assert listed[0]["priority_weight"] == 8


def test_cli_config_error(tmp_path, capsys):
    code = asyncio.run(main(["--config", str(tmp_path / "missing.yml"), "sources"]))

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_cli_invalid_filter(config_file, capsys):
    code = asyncio.run(main(["--config", str(config_file), "--log-level", "error", "feed", "--limit", "0"]))

    assert code == 2
    assert "Invalid filter" in capsys.readouterr().err


def test_json_formatter():
    try:
        raise ValueError("bad feed")
    except ValueError:
        record = logging.LogRecord(
            "ingestion.rss", logging.ERROR, __file__, 1, "fetch failed", None, sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "ingestion.rss"
    assert payload["message"] == "fetch failed"
    assert "ValueError: bad feed" in payload["exception"]


@pytest.mark.parametrize(
    "body",
    [
        "cache:\n  max_concurrency: 0\n",
        "http:\n  timeout: soon\n",
        "cache: fast\n",
        "- just\n- a list\n",
        "sources: [rss]\n",
        "cache: [unclosed\n",
    ],
)
def test_malformed_settings_raise_config_error(tmp_path, body):
    path = tmp_path / "config.yml"
    path.write_text(body)

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_cli_malformed_settings_exit_code(tmp_path, capsys):
    path = tmp_path / "config.yml"
    path.write_text("cache:\n  ttl_seconds: later\n")

    code = asyncio.run(main(["--config", str(path), "sources"]))

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_non_mapping_source_entry_is_skipped(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "sources:\n"
        "  rss:\n"
        "    - https://example.com/bare-url\n"
        "    - id: f2f\n"
        "      name: Fibre2Fashion\n"
        "      url: https://example.com/rss\n"
    )

    config = load_config(str(path))

    assert [s.id for s in config.sources] == ["f2f"]
