"""Configuration du service Scholar Metrics."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool = False) -> bool:
    """Lit un booleen depuis l'environnement (1/true/yes/on)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Configuration centralisee, chargee une seule fois au demarrage."""

    # API Keys
    serpapi_key: str

    # Auteur par defaut (Google Scholar user ID)
    scholar_author_id: str = "DGm9l2wAAAAJ"

    # Sources
    scrape_enabled: bool = False
    snapshot_path: Optional[Path] = Path("./data/google_scholar_citations.json")
    snapshot_refresh: bool = False

    # Pagination / reseau
    serpapi_max_pages: int = 5
    scrape_max_pages: int = 3
    request_timeout: float = 30.0

    # Fusion multi-sources
    merge_sources: bool = False
    title_prefix_length: int = 40

    # Cache
    cache_ttl: int = 3600  # 1 heure
    cache_max_size: int = 100

    # Serveur
    app_env: str = "production"
    http_host: str = "127.0.0.1"
    http_port: int = 8323

    # Logging
    log_level: str = "INFO"

    @property
    def debug(self) -> bool:
        return self.app_env == "development"

    def get_enabled_sources(self) -> list[str]:
        """Retourne les sources activees, dans l'ordre de preference."""
        enabled = []
        if self.serpapi_key:
            enabled.append("serpapi")
        if self.scrape_enabled:
            enabled.append("scholar_scrape")
        if self.snapshot_path:
            enabled.append("snapshot")
        return enabled

    def validate(self) -> None:
        """Valide la configuration."""
        if self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT doit etre positif")
        if self.serpapi_max_pages < 1 or self.scrape_max_pages < 1:
            raise ValueError("SERPAPI_MAX_PAGES et SCRAPE_MAX_PAGES doivent etre >= 1")
        if self.title_prefix_length < 1:
            raise ValueError("TITLE_PREFIX_LENGTH doit etre >= 1")
        if not self.scholar_author_id:
            raise ValueError("SCHOLAR_AUTHOR_ID requis")
        # SERPAPI_KEY optionnelle: le snapshot reste disponible sans cle


def load_config() -> Config:
    """Charge la configuration depuis les variables d'environnement."""
    snapshot = os.getenv("SCHOLAR_SNAPSHOT_PATH", "./data/google_scholar_citations.json")
    config = Config(
        serpapi_key=os.getenv("SERPAPI_KEY", ""),
        scholar_author_id=os.getenv("SCHOLAR_AUTHOR_ID", "DGm9l2wAAAAJ"),
        scrape_enabled=_env_bool("SCHOLAR_SCRAPE_ENABLED"),
        snapshot_path=Path(snapshot) if snapshot else None,
        snapshot_refresh=_env_bool("SCHOLAR_SNAPSHOT_REFRESH"),
        serpapi_max_pages=int(os.getenv("SERPAPI_MAX_PAGES", "5")),
        scrape_max_pages=int(os.getenv("SCRAPE_MAX_PAGES", "3")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        merge_sources=_env_bool("SCHOLAR_MERGE_SOURCES"),
        title_prefix_length=int(os.getenv("TITLE_PREFIX_LENGTH", "40")),
        cache_ttl=int(os.getenv("CACHE_TTL", "3600")),
        cache_max_size=int(os.getenv("CACHE_MAX_SIZE", "100")),
        app_env=os.getenv("APP_ENV", "production"),
        http_host=os.getenv("HTTP_HOST", "127.0.0.1"),
        http_port=int(os.getenv("HTTP_PORT", "8323")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    return config


# Instance globale
config = load_config()
