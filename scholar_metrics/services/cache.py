"""Cache memoire des metriques resolues (couche de service HTTP)."""

import time
from typing import Callable, Optional

from cachetools import TTLCache

from ..models import AuthorMetrics


class MetricsCache:
    """Cache TTL par auteur, borne en taille.

    Seuls les resultats reussis y sont stockes; ``ttl`` ou ``max_size``
    a zero desactive le cache.
    """

    def __init__(
        self,
        ttl: float = 3600,
        max_size: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_size = max_size
        self.enabled = ttl > 0 and max_size > 0
        self._entries: TTLCache = TTLCache(
            maxsize=max(max_size, 1),
            ttl=ttl,
            timer=clock,
        )

    def get(self, author_id: str) -> Optional[AuthorMetrics]:
        return self._entries.get(author_id)

    def set(self, author_id: str, metrics: AuthorMetrics) -> None:
        if not self.enabled or metrics.failed:
            return
        self._entries[author_id] = metrics

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
