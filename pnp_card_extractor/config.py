import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pnp_card_extractor.db.cache import CACHE_FRESHNESS_SEC, DiskTier, LayeredCache
from pnp_card_extractor.db.netrunnerdb import DEFAULT_HOST, USER_AGENT, NetrunnerdbClient


def default_cache_dir() -> Path:
    """$XDG_CACHE_HOME/pnp_card_extractor, or ~/.cache/pnp_card_extractor."""
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", "~/.cache"))
    return (cache_home / "pnp_card_extractor").expanduser()


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PNP_")

    api_url: str = DEFAULT_HOST
    cache_dir: Path = Field(default_factory=default_cache_dir)

    # Offline runs only read the disk cache; no API requests are made
    offline: bool = False
    disable_cache: bool = False

    http_timeout: float = 30.0
    user_agent: str = USER_AGENT
    cache_freshness_sec: float = CACHE_FRESHNESS_SEC


def build_catalog(settings: Settings) -> LayeredCache:
    """
    Compose the catalog cache for the given settings.

    The API source is left out when offline and the disk tier when caching
    is disabled; the memory tier is always present.
    """
    source = None
    if not settings.offline:
        source = NetrunnerdbClient(
            settings.api_url,
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
        )

    disk = None
    if not settings.disable_cache:
        disk = DiskTier(settings.cache_dir, freshness_sec=settings.cache_freshness_sec)

    return LayeredCache(source=source, disk=disk)
