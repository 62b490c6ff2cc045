"""Driver SerpApi (engine google_scholar_author)."""

import logging
from typing import Optional

import httpx

from ..models import DataSource
from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)


class SerpApiSource(BaseSource):
    """Profil Google Scholar via l'API SerpApi."""

    source = DataSource.SERPAPI

    SEARCH_URL = "https://serpapi.com/search.json"
    PAGE_SIZE = 100  # Max SerpApi pour google_scholar_author

    def __init__(
        self,
        api_key: str,
        max_pages: int = 5,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key
        self.max_pages = max_pages

    def _params(self, author_id: str, start: int) -> dict:
        """Parametres d'une page d'articles."""
        params = {
            "engine": "google_scholar_author",
            "author_id": author_id,
            "hl": "en",
            "num": self.PAGE_SIZE,
            "api_key": self.api_key,
        }
        if start:
            params["start"] = start
        return params

    async def fetch_raw(self, author_id: str) -> dict:
        """Recupere le profil et toutes les pages d'articles (max_pages)."""
        if not self.api_key:
            raise SourceError("SERPAPI_KEY non configuree")

        data = await self._fetch_page(author_id, 0)
        articles = list(data.get("articles") or [])

        page = data
        start = 0
        for _ in range(self.max_pages - 1):
            if not (page.get("serpapi_pagination") or {}).get("next"):
                break
            start += self.PAGE_SIZE
            try:
                page = await self._fetch_page(author_id, start)
            except SourceError as e:
                # Les pages deja recues restent exploitables
                logger.warning(f"SerpApi: pagination interrompue a start={start}: {e}")
                break
            new_articles = page.get("articles") or []
            if not new_articles:
                break
            articles.extend(new_articles)

        logger.info(f"SerpApi: {len(articles)} articles recuperes pour {author_id}")

        payload = dict(data)
        payload["articles"] = articles
        return payload

    async def _fetch_page(self, author_id: str, start: int) -> dict:
        response = await self._request(
            "GET",
            self.SEARCH_URL,
            params=self._params(author_id, start),
        )
        data = self._parse_json(response)
        self._check_shape(data)
        self._check_status(data)
        return data

    def _check_shape(self, data: dict) -> None:
        """Une reponse 200 de forme inattendue est une erreur de parsing."""
        for key, expected in (
            ("search_metadata", dict),
            ("serpapi_pagination", dict),
            ("articles", list),
        ):
            value = data.get(key)
            if value is not None and not isinstance(value, expected):
                raise SourceError(
                    f"SerpApi: champ '{key}' inattendu ({type(value).__name__})"
                )

    def _check_status(self, data: dict) -> None:
        """SerpApi peut repondre 200 avec une erreur dans le corps."""
        metadata = data.get("search_metadata") or {}
        status = metadata.get("status")
        if status and status != "Success":
            error = data.get("error") or metadata.get("error") or "Unknown error"
            raise SourceError(f"SerpApi status={status}: {error}")
        if data.get("error"):
            raise SourceError(f"SerpApi error: {data['error']}")

    def describe(self) -> dict:
        return {"name": self.name, "max_pages": self.max_pages, "api_key_set": bool(self.api_key)}
