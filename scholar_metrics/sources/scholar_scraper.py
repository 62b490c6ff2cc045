"""Scraping de la page profil Google Scholar (sans API).

La page est convertie en payload de meme forme que la reponse SerpApi
(``author``, ``cited_by.table``, ``cited_by.graph``, ``articles``) pour que
la normalisation soit commune aux deux sources.
"""

import logging
import re
from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from ..models import DataSource
from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)


BLOCK_MARKERS = (
    "captcha",
    "unusual traffic",
    "not a robot",
    "submit a verification",
    "our systems have detected",
)

# Libelles du tableau de metriques -> cle SerpApi
STAT_LABELS = {
    "citations": "citations",
    "h-index": "h_index",
    "i10-index": "i10_index",
}


def looks_like_block_page(html: str, url: str = "") -> bool:
    """Detecte une page CAPTCHA / 'unusual traffic'.

    Une page qui contient l'en-tete du profil n'est jamais consideree comme
    bloquee: les titres d'articles peuvent contenir les memes mots.
    """
    if "/sorry/" in url:
        return True

    soup = BeautifulSoup(html, "html.parser")
    if soup.find("div", id="gsc_prf_in") is not None:
        return False
    if soup.find("form", id="captcha-form") or soup.find(id="gs_captcha_ccl"):
        return True
    if soup.find("form", action=re.compile("/sorry/")):
        return True

    text = soup.get_text(" ").lower()
    return any(marker in text for marker in BLOCK_MARKERS)


class ScholarScraperSource(BaseSource):
    """Source par scraping du profil public Google Scholar."""

    source = DataSource.SCHOLAR_SCRAPE

    BASE_URL = "https://scholar.google.com"
    PROFILE_URL = "https://scholar.google.com/citations"
    PAGE_SIZE = 100

    HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
        ),
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(
        self,
        max_pages: int = 3,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.max_pages = max_pages

    async def fetch_raw(self, author_id: str) -> dict:
        """Scrape le profil; la premiere page fournit l'en-tete et les totaux."""
        html = await self._fetch_page(author_id, 0)
        soup = BeautifulSoup(html, "html.parser")

        if soup.find("div", id="gsc_prf_in") is None:
            raise SourceError(f"Scholar: page profil non reconnue pour {author_id}")

        payload = self.parse_profile(soup)
        rows = self.parse_articles(soup)
        articles = list(rows)

        cstart = 0
        for _ in range(self.max_pages - 1):
            if len(rows) < self.PAGE_SIZE:
                break
            cstart += self.PAGE_SIZE
            try:
                page = BeautifulSoup(await self._fetch_page(author_id, cstart), "html.parser")
            except SourceError as e:
                logger.warning(f"Scholar: pagination interrompue a cstart={cstart}: {e}")
                break
            rows = self.parse_articles(page)
            articles.extend(rows)

        logger.info(f"Scholar: {len(articles)} articles scrapes pour {author_id}")
        payload["articles"] = articles
        return payload

    async def _fetch_page(self, author_id: str, cstart: int) -> str:
        response = await self._request(
            "GET",
            self.PROFILE_URL,
            headers=self.HEADERS,
            params={
                "user": author_id,
                "hl": "en",
                "cstart": cstart,
                "pagesize": self.PAGE_SIZE,
            },
        )
        html = response.text
        if looks_like_block_page(html, str(response.url)):
            raise SourceError("Scholar: page CAPTCHA / trafic inhabituel")
        return html

    def parse_profile(self, soup: BeautifulSoup) -> dict:
        """En-tete du profil: nom, affiliation, tableau de metriques, graphe."""
        author: dict = {}

        name_div = soup.find("div", id="gsc_prf_in")
        if name_div:
            author["name"] = name_div.get_text(strip=True)

        inst_divs = soup.find_all("div", class_="gsc_prf_il")
        if inst_divs:
            affiliation = inst_divs[0].get_text(strip=True)
            if affiliation:
                author["affiliations"] = affiliation

        return {
            "author": author,
            "cited_by": {
                "table": self.parse_stats_table(soup),
                "graph": self.parse_graph(soup),
            },
        }

    def parse_stats_table(self, soup: BeautifulSoup) -> list[dict]:
        """Tableau ``#gsc_rsb_st``: lignes Citations / h-index / i10-index.

        Colonnes: [libelle, All, Since YYYY].
        """
        table = soup.find("table", id="gsc_rsb_st")
        if not table:
            return []

        since_key = "since"
        headers = [th.get_text(strip=True) for th in table.find_all("th")]
        for header in headers:
            match = re.search(r"since\s+(\d{4})", header, re.IGNORECASE)
            if match:
                since_key = f"since_{match.group(1)}"
                break

        rows = []
        for row in table.find_all("tr"):
            cells = row.find_all("td")
            if not cells:
                continue
            label = cells[0].get_text(strip=True).lower()
            key = STAT_LABELS.get(label)
            if key is None:
                continue
            values = {}
            if len(cells) >= 2:
                values["all"] = cells[1].get_text(strip=True)
            if len(cells) >= 3:
                values[since_key] = cells[2].get_text(strip=True)
            rows.append({key: values})
        return rows

    def parse_graph(self, soup: BeautifulSoup) -> Optional[list[dict]]:
        """Histogramme des citations par annee.

        Les annees sans citation n'ont pas de barre: sans correspondance
        exacte annees/barres le graphe est ignore.
        """
        years = [span.get_text(strip=True) for span in soup.find_all("span", class_="gsc_g_t")]
        counts = [span.get_text(strip=True) for span in soup.find_all("span", class_="gsc_g_al")]
        if not years:
            return None
        if len(years) != len(counts):
            logger.debug(f"Scholar: graphe incomplet ({len(years)} annees, {len(counts)} barres)")
            return None
        return [{"year": y, "citations": c} for y, c in zip(years, counts)]

    def parse_articles(self, soup: BeautifulSoup) -> list[dict]:
        """Lignes ``tr.gsc_a_tr`` du tableau des publications."""
        table = soup.find("table", id="gsc_a_t")
        if not table:
            return []

        articles = []
        for row in table.find_all("tr", class_="gsc_a_tr"):
            cell = row.find("td", class_="gsc_a_t")
            if cell is None:
                continue

            article: dict = {}
            title_elem = cell.find("a", class_="gsc_a_at")
            if title_elem:
                article["title"] = title_elem.get_text(strip=True)
                if title_elem.get("href"):
                    article["link"] = urljoin(self.BASE_URL, title_elem["href"])

            # [0] auteurs, [1] revue
            gray = cell.find_all("div", class_="gs_gray")
            if len(gray) >= 1:
                article["authors"] = gray[0].get_text(strip=True)
            if len(gray) >= 2:
                venue = gray[1].find(string=True, recursive=False)
                article["publication"] = (venue or gray[1].get_text()).strip().rstrip(",")

            cited_td = row.find("td", class_="gsc_a_c")
            if cited_td:
                cited_a = cited_td.find("a")
                cited_txt = cited_a.get_text(strip=True) if cited_a else cited_td.get_text(strip=True)
                article["cited_by"] = {"value": cited_txt.rstrip("*") or None}

            year_td = row.find("td", class_="gsc_a_y")
            if year_td:
                article["year"] = year_td.get_text(strip=True) or None

            articles.append(article)
        return articles

    def describe(self) -> dict:
        return {"name": self.name, "max_pages": self.max_pages}
