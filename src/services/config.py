"""
Loads and handles config from config.yml
The NewsAPI key (NEWSAPI_KEY) is loaded from .env for security
"""
import logging
import os
from typing import Any, Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from core.entities import SourceType

logger = logging.getLogger(__name__)

AdapterKind = Literal["rss", "google_news", "hackernews", "reddit", "newsapi"]

# Article source type used when a source entry does not name one
DEFAULT_SOURCE_TYPES: Dict[str, str] = {
    "rss": "newspaper",
    "google_news": "aggregator",
    "hackernews": "social",
    "reddit": "forum",
    "newsapi": "newspaper",
}


class ConfigError(ValueError):
    """Raised when the configuration file is missing or unusable."""


class SourceConfig(BaseModel):
    """Configuration for a single news source."""
    id: str
    name: str
    adapter: AdapterKind
    url: str  # feed URL, query template, subreddit or story list
    type: SourceType = "newspaper"
    category: Optional[str] = None
    priority_weight: int = Field(default=5, ge=1, le=10)
    enabled: bool = True
    region: str = "IN"  # For google_news
    language: str = "en"  # For google_news and newsapi
    keywords: List[str] = []  # For hackernews
    limit: int = Field(default=20, ge=1, le=100)

    model_config = {"frozen": True}


class CacheConfig(BaseModel):
    """Aggregator cache and fan-out settings."""
    ttl_seconds: float = 600.0
    max_concurrency: int = Field(default=8, ge=1)
    adapter_timeout: float = 30.0
    refresh_deadline: float = 120.0


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by all adapters."""
    timeout: float = 30.0
    max_retries: int = Field(default=2, ge=1)
    retry_delay: float = 1.0
    user_agent: str = "trade-news-intel/1.0"


class Config(BaseModel):
    sources: List[SourceConfig] = []
    cache: CacheConfig = CacheConfig()
    http: HttpConfig = HttpConfig()
    NEWSAPI_KEY: Optional[str] = None
    LOG_LEVEL: str = "INFO"


def _bool(value: str | bool) -> bool:
    """Convert string or bool to boolean."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


def _get_config_path() -> str:
    """Get the path to config.yml, handling different working directories."""
    env_path = os.getenv("TRADE_NEWS_CONFIG")
    if env_path:
        if os.path.exists(env_path):
            return env_path
        raise ConfigError(f"Config file not found: {env_path}")

    # Try relative path first
    if os.path.exists('resources/config.yml'):
        return 'resources/config.yml'

    # Try from project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    config_path = os.path.join(project_root, 'resources', 'config.yml')
    if os.path.exists(config_path):
        return config_path

    raise ConfigError("Cannot find resources/config.yml")


def _parse_source(adapter: str, data: Dict[str, Any]) -> SourceConfig:
    """Parse a single source entry from YAML data."""
    return SourceConfig(
        id=data.get("id", ""),
        name=data.get("name", data.get("id", "")),
        adapter=adapter,
        url=data.get("url", ""),
        type=data.get("type", DEFAULT_SOURCE_TYPES.get(adapter, "newspaper")),
        category=data.get("category"),
        priority_weight=data.get("priority_weight", 5),
        enabled=_bool(data.get("enabled", True)),
        region=data.get("region", "IN"),
        language=data.get("language", "en"),
        keywords=data.get("keywords", []),
        limit=data.get("limit", 20),
    )


def parse_sources(data: Dict[str, Any]) -> List[SourceConfig]:
    """
    Parse the `sources` mapping (adapter kind -> list of entries).
    Invalid entries are logged and skipped.
    """
    sources = []
    for adapter, entries in (data or {}).items():
        for entry in entries or []:
            if not isinstance(entry, dict):
                logger.error(f"Invalid {adapter} source entry, expected a mapping: {entry!r}")
                continue
            try:
                sources.append(_parse_source(adapter, entry))
            except ValidationError as e:
                logger.error(f"Invalid {adapter} source '{entry.get('id', '?')}': {e}")
    return sources


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and the NewsAPI key from .env."""
    # Load .env for sensitive credentials
    load_dotenv()

    config_path = path or _get_config_path()

    try:
        with open(config_path, 'r') as file:
            config = yaml.safe_load(file) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    sources = config.get("sources") or {}
    if not isinstance(sources, dict):
        raise ConfigError("'sources' must map adapter kinds to lists of entries")

    try:
        cache = CacheConfig.model_validate(config.get("cache") or {})
        http = HttpConfig.model_validate(config.get("http") or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid cache/http settings in {config_path}: {e}") from e

    return Config(
        sources=parse_sources(sources),
        cache=cache,
        http=http,
        NEWSAPI_KEY=os.getenv("NEWSAPI_KEY"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", config.get("LOG_LEVEL", "INFO")),
    )


def get_enabled_sources(config: Config) -> List[SourceConfig]:
    """Get only enabled sources from a config."""
    return [src for src in config.sources if src.enabled]
