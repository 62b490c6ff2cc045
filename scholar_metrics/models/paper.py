"""Modele Paper - Representation d'un article d'un profil Google Scholar."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import re


class DataSource(str, Enum):
    """Sources de donnees pour les metriques de citation."""
    SERPAPI = "serpapi"
    SCHOLAR_SCRAPE = "scholar_scrape"
    SNAPSHOT = "snapshot"
    UNAVAILABLE = "unavailable"


DEFAULT_TITLE = "Untitled"


@dataclass(frozen=True)
class Paper:
    """Un article du profil, avec son nombre de citations."""

    title: str = DEFAULT_TITLE
    citations: int = 0
    year: Optional[int] = None
    authors: Optional[str] = None
    publication: Optional[str] = None
    link: Optional[str] = None

    def sort_key(self) -> tuple[int, int]:
        """Cle de tri: citations puis annee (annee absente = 0)."""
        return (self.citations, self.year or 0)

    def title_key(self, length: int) -> str:
        """Prefixe du titre normalise, utilise pour la deduplication."""
        title = re.sub(r"\s+", " ", self.title.strip().lower())
        return title[:length]

    def to_dict(self) -> dict:
        """Convertit le paper en dictionnaire."""
        return {
            "title": self.title,
            "citations": self.citations,
            "year": self.year,
            "authors": self.authors,
            "publication": self.publication,
            "link": self.link,
        }

    def __repr__(self) -> str:
        return f"Paper(title='{self.title[:50]}', citations={self.citations}, year={self.year})"
