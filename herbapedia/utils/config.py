"""
Configuration and path constants for the Herbapedia tools.

Supports:
- Environment variables
- .env file (auto-loaded)
- YAML config file (optional)

Usage:
    from herbapedia.utils.config import Config, DEFAULT_CONTENT_DIR

    config = Config.load("herbapedia.yaml")
    print(config.store.content_dir)
"""
import os
from pathlib import Path
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError

# =============================================================================
# PATH CONSTANTS (computed at import)
# =============================================================================

UTILS_DIR: Path = Path(__file__).resolve().parent
PACKAGE_DIR: Path = UTILS_DIR.parent           # herbapedia/
REPO_ROOT: Path = PACKAGE_DIR.parent           # repository root

load_dotenv(REPO_ROOT / ".env")


# =============================================================================
# ENVIRONMENT OVERRIDES
# =============================================================================

DEFAULT_CONTENT_DIR: Path = Path(
    os.environ.get("HERBAPEDIA_CONTENT_DIR", str(REPO_ROOT / "src" / "content" / "herbs"))
)
DEFAULT_BASE_URL: str = os.environ.get("HERBAPEDIA_BASE_URL", "https://www.vitaherbapedia.com")
DEFAULT_USER_AGENT: str = os.environ.get(
    "HERBAPEDIA_USER_AGENT",
    "Mozilla/5.0 (compatible; HerbapediaBot/1.0; +https://sipm.org)",
)

DEFAULT_MARKDOWN_REPORT: Path = REPO_ROOT / "CONTENT_REPORT.md"
DEFAULT_JSON_REPORT: Path = REPO_ROOT / "content-report.json"

PRIMARY_FIELDS: List[str] = [
    'history',
    'introduction',
    'traditional_usage',
    'modern_usage',
    'functions',
]


# =============================================================================
# CONFIG CLASSES
# =============================================================================

@dataclass
class ScraperConfig:
    """Crawl settings."""
    base_url: str = DEFAULT_BASE_URL
    delay: float = 0.3          # seconds between consecutive fetches
    timeout: float = 30.0
    max_pages: int = 20
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class StoreConfig:
    """Content store settings."""
    content_dir: Path = DEFAULT_CONTENT_DIR


@dataclass
class VerifyConfig:
    """Verification settings."""
    fields: List[str] = field(default_factory=lambda: list(PRIMARY_FIELDS))
    strict: bool = False
    markdown_report: Path = DEFAULT_MARKDOWN_REPORT
    json_report: Path = DEFAULT_JSON_REPORT


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping",
                          config_key=key, expected_type="mapping")
    return value


def _number(section: Dict[str, Any], key: str, cast, default):
    value = section.get(key.rsplit('.', 1)[-1], default)
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}",
                          config_key=key, expected_type=cast.__name__, cause=e) from e


@dataclass
class Config:
    """Main configuration class."""

    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    verify: VerifyConfig = field(default_factory=VerifyConfig)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file. If None or missing, uses defaults.

        Returns:
            Config instance

        Raises:
            ConfigError: If the file is not valid YAML or has wrongly typed sections
        """
        config = cls()

        if config_path is None:
            return config

        path = Path(config_path)
        if not path.exists():
            return config

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}", cause=e) from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config root in {path} must be a mapping", expected_type="mapping")

        s = _section(data, 'scraper')
        config.scraper.base_url = str(s.get('base_url', config.scraper.base_url)).rstrip('/')
        config.scraper.delay = _number(s, 'scraper.delay', float, config.scraper.delay)
        config.scraper.timeout = _number(s, 'scraper.timeout', float, config.scraper.timeout)
        config.scraper.max_pages = _number(s, 'scraper.max_pages', int, config.scraper.max_pages)
        config.scraper.user_agent = str(s.get('user_agent', config.scraper.user_agent))

        st = _section(data, 'store')
        if 'content_dir' in st:
            config.store.content_dir = Path(st['content_dir'])

        v = _section(data, 'verify')
        if 'fields' in v:
            if not isinstance(v['fields'], list):
                raise ConfigError("verify.fields must be a list",
                                  config_key="verify.fields", expected_type="list")
            config.verify.fields = [str(f) for f in v['fields']]
        config.verify.strict = bool(v.get('strict', config.verify.strict))
        if 'markdown_report' in v:
            config.verify.markdown_report = Path(v['markdown_report'])
        if 'json_report' in v:
            config.verify.json_report = Path(v['json_report'])

        return config
