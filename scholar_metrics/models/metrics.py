"""Modele AuthorMetrics - Metriques bibliometriques normalisees d'un auteur."""

from dataclasses import dataclass, field
from typing import Optional

from .paper import DataSource, Paper


@dataclass(frozen=True)
class CitationYear:
    """Nombre de citations recues pendant une annee."""

    year: int
    citations: int

    def to_dict(self) -> dict:
        return {"year": self.year, "citations": self.citations}


@dataclass(frozen=True)
class AuthorMetrics:
    """Enregistrement produit a chaque resolution, jamais modifie ensuite."""

    citation_count: int = 0
    publication_count: int = 0
    h_index: int = 0
    i10_index: int = 0
    citations_by_year: tuple[CitationYear, ...] = ()
    papers: tuple[Paper, ...] = ()

    author_name: str = ""
    author_affiliation: str = ""

    # Colonne "Since YYYY" de Google Scholar (jamais derivee)
    citations_since: Optional[int] = None
    h_index_since: Optional[int] = None
    i10_index_since: Optional[int] = None

    # Provenance
    data_source: DataSource = DataSource.UNAVAILABLE
    merged_sources: tuple[DataSource, ...] = ()
    errors: tuple[str, ...] = field(default=(), compare=False)
    failed: bool = False

    @classmethod
    def empty(cls, errors: tuple[str, ...] = ()) -> "AuthorMetrics":
        """Enregistrement a zero, utilise quand toutes les sources echouent."""
        return cls(
            data_source=DataSource.UNAVAILABLE,
            errors=tuple(errors),
            failed=True,
        )

    def to_dict(self) -> dict:
        """Convertit les metriques au format JSON de l'endpoint."""
        return {
            "citations": self.citation_count,
            "publications": self.publication_count,
            "h_index": self.h_index,
            "i10_index": self.i10_index,
            "citationsByYear": [entry.to_dict() for entry in self.citations_by_year],
            "papers": [paper.to_dict() for paper in self.papers],
            "author_name": self.author_name,
            "author_affiliation": self.author_affiliation,
            "citations_since": self.citations_since,
            "h_index_since": self.h_index_since,
            "i10_index_since": self.i10_index_since,
            "data_source": self.data_source.value,
        }
