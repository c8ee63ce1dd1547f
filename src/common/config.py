"""Configuration loader for the country news crawler."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generic, TypeVar

import yaml
from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"

DEFAULT_COUNTRIES = ["Canada", "USA", "UK"]
DEFAULT_SECTION_LABELS = ["Top news", "Top News", "All coverage"]


@dataclass
class CrawlConfig:
    base_url: str = "https://news.google.com"
    max_story_workers: int = 16
    section_labels: list[str] = field(default_factory=lambda: list(DEFAULT_SECTION_LABELS))


@dataclass
class FetchConfig:
    timeout_seconds: int = 30


@dataclass
class ProxyConfig:
    username: str = ""
    password: str = ""


@dataclass
class QueueConfig:
    lease_seconds: int = 300
    renew_interval_seconds: float = 30.0
    wait_time_seconds: int = 20


@dataclass
class StoreConfig:
    topic_collection: str = "topics"
    article_collection: str = "articles"


@dataclass
class DispatchConfig:
    interval_seconds: int = 3600


@dataclass
class Config:
    countries: list[str] = field(default_factory=lambda: list(DEFAULT_COUNTRIES))
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)


def find_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "prod",
    env_var: str | None = None,
) -> Path:
    """Find config file path, checking env var and defaults.

    Args:
        config_name: Name of config (without .yaml) or None for default
        config_dir: Directory containing config files
        default_name: Default config name if config_name is None
        env_var: Environment variable to check for config name

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        config_name = os.environ.get(env_var, default_name) if env_var else default_name

    config_path = config_dir / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object.

    Proxy credentials always come from the environment, never from YAML.
    """
    crawl_raw = data.get("crawl", {})
    fetch_raw = data.get("fetch", {})
    queue_raw = data.get("queue", {})
    store_raw = data.get("store", {})
    dispatch_raw = data.get("dispatch", {})

    crawl = CrawlConfig(
        base_url=crawl_raw.get("base_url", "https://news.google.com").rstrip("/"),
        max_story_workers=crawl_raw.get("max_story_workers", 16),
        section_labels=crawl_raw.get("section_labels", list(DEFAULT_SECTION_LABELS)),
    )

    fetch = FetchConfig(
        timeout_seconds=fetch_raw.get("timeout_seconds", 30),
    )

    proxy = ProxyConfig(
        username=os.getenv("PROXY_USERNAME", ""),
        password=os.getenv("PROXY_PASSWORD", ""),
    )

    queue = QueueConfig(
        lease_seconds=queue_raw.get("lease_seconds", 300),
        renew_interval_seconds=queue_raw.get("renew_interval_seconds", 30.0),
        wait_time_seconds=queue_raw.get("wait_time_seconds", 20),
    )

    store = StoreConfig(
        topic_collection=store_raw.get("topic_collection", "topics"),
        article_collection=store_raw.get("article_collection", "articles"),
    )

    dispatch = DispatchConfig(
        interval_seconds=dispatch_raw.get("interval_seconds", 3600),
    )

    return Config(
        countries=data.get("countries", list(DEFAULT_COUNTRIES)),
        crawl=crawl,
        fetch=fetch,
        proxy=proxy,
        queue=queue,
        store=store,
        dispatch=dispatch,
    )


def load_config(config_name: str | None = None) -> Config:
    """Load configuration from a YAML file under configs/.

    Args:
        config_name: Name of config file (without .yaml extension).
                    If None, uses CONFIG_ENV env var or "prod".
    """
    path = find_config_path(config_name, CONFIG_DIR, env_var="CONFIG_ENV")
    return parse_config(load_yaml(path))


class ConfigSingleton(Generic[T]):
    """Generic config singleton manager.

    Provides get/set/reset pattern for managing a global config instance.
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader

    def get(self) -> T:
        """Get the config, loading it lazily if needed."""
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        """Set the config directly."""
        self._config = config

    def reset(self) -> None:
        """Reset the config, forcing reload on next get()."""
        self._config = None


_manager: ConfigSingleton[Config] = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
