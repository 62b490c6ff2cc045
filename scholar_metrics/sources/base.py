"""Classe abstraite pour les sources de metriques de citation."""

from abc import ABC, abstractmethod
from typing import Any, Optional
import httpx

from ..models import DataSource


class SourceError(Exception):
    """Erreur lors de l'acces a une source (transport, statut ou parsing)."""
    pass


class BaseSource(ABC):
    """Strategie d'obtention du payload brut d'un profil auteur.

    Une source echoue en levant ``SourceError``; le resolver passe alors a
    la suivante. Un payload incomplet n'est pas un echec.
    """

    source: DataSource
    requires_http: bool = True

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self.client = client
        self._owns_client = False

    @property
    def name(self) -> str:
        return self.source.value

    async def __aenter__(self):
        if self.requires_http and self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
            self._owns_client = True
        return self

    async def __aexit__(self, *args):
        if self._owns_client and self.client:
            await self.client.aclose()
            self.client = None
            self._owns_client = False

    @abstractmethod
    async def fetch_raw(self, author_id: str) -> dict:
        """Recupere le payload brut du profil ``author_id``."""
        pass

    def describe(self) -> dict:
        """Description de la source pour les outils de statut."""
        return {"name": self.name}

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """Execute une requete; toute erreur devient une SourceError."""
        if self.client is None:
            raise SourceError(f"{self.name}: client HTTP non initialise (utiliser 'async with')")

        try:
            response = await self.client.request(
                method,
                url,
                headers=headers,
                params=params,
            )

            if response.status_code == 429:
                raise SourceError(f"429 Too Many Requests: {url}")

            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            raise SourceError(f"HTTP error {e.response.status_code}: {url}")
        except httpx.TimeoutException as e:
            raise SourceError(f"Timeout: {url} ({type(e).__name__})")
        except httpx.RequestError as e:
            raise SourceError(f"Request error: {e}")

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        """Decode un corps JSON qui doit etre un objet."""
        try:
            data = response.json()
        except ValueError as e:
            raise SourceError(f"{self.name}: reponse JSON invalide ({e})")
        if not isinstance(data, dict):
            raise SourceError(f"{self.name}: objet JSON attendu, recu {type(data).__name__}")
        return data
