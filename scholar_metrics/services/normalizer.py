"""Normalisation des payloads bruts en AuthorMetrics."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..models import DEFAULT_TITLE, AuthorMetrics, CitationYear, DataSource, Paper
from . import field_policy as fp
from .indices import citations_by_year, cited_counts, h_index, i10_index, sort_papers

logger = logging.getLogger(__name__)


@dataclass
class ExtractedPayload:
    """Champs extraits d'un payload, avant calcul des valeurs derivees.

    Les valeurs explicites restent a None quand la source ne les fournit pas.
    """

    papers: list[Paper] = field(default_factory=list)
    total_citations: Optional[int] = None
    h_index: Optional[int] = None
    i10_index: Optional[int] = None
    citations_since: Optional[int] = None
    h_index_since: Optional[int] = None
    i10_index_since: Optional[int] = None
    graph: Optional[list[CitationYear]] = None
    author_name: str = ""
    author_affiliation: str = ""


class MetricsNormalizer:
    """Transforme un payload brut (schema instable) en metriques normalisees."""

    def normalize(self, raw: dict, source: DataSource) -> AuthorMetrics:
        """Extraction puis assemblage, sans fusion."""
        return self.assemble(self.extract(raw), source)

    def extract(self, raw: dict) -> ExtractedPayload:
        """Extrait les champs d'un payload selon les politiques de resolution."""
        works = fp.WORKS.resolve_collection(raw)
        papers = [self.parse_work(work) for work in works or [] if isinstance(work, dict)]

        return ExtractedPayload(
            papers=papers,
            total_citations=fp.TOTAL_CITATIONS.resolve_int(raw),
            h_index=fp.H_INDEX.resolve_int(raw),
            i10_index=fp.I10_INDEX.resolve_int(raw),
            citations_since=fp.CITATIONS_SINCE.resolve_int(raw),
            h_index_since=fp.H_INDEX_SINCE.resolve_int(raw),
            i10_index_since=fp.I10_INDEX_SINCE.resolve_int(raw),
            graph=self.parse_graph(fp.CITATION_GRAPH.resolve_collection(raw)),
            author_name=fp.AUTHOR_NAME.resolve_text(raw) or "Unknown",
            author_affiliation=fp.AUTHOR_AFFILIATION.resolve_text(raw) or "",
        )

    def parse_work(self, work: dict) -> Paper:
        """Convertit un article brut en Paper (valeurs par defaut appliquees)."""
        authors = work.get("authors")
        if isinstance(authors, list):
            # SerpApi: liste de noms, snapshots: chaine deja formatee
            names = (a.get("name") if isinstance(a, dict) else a for a in authors)
            authors = ", ".join(
                n.strip() for n in names if isinstance(n, str) and n.strip()
            ) or None

        return Paper(
            title=fp.WORK_TITLE.resolve_text(work) or DEFAULT_TITLE,
            citations=fp.WORK_CITATIONS.resolve_int(work) or 0,
            year=fp.WORK_YEAR.resolve_year(work),
            authors=authors if isinstance(authors, str) and authors else None,
            publication=fp.WORK_PUBLICATION.resolve_text(work),
            link=fp.WORK_LINK.resolve_text(work),
        )

    def parse_graph(self, graph: Any) -> Optional[list[CitationYear]]:
        """Construit la serie annuelle a partir d'une liste ou d'un mapping.

        Les annees invalides sont ignorees; en cas de doublon la derniere
        valeur gagne. Retourne None si aucun graphe n'est present.
        """
        if graph is None:
            return None

        if isinstance(graph, dict):
            rows: Iterable[tuple[Any, Any]] = graph.items()
        else:
            rows = (
                (row.get("year"), row.get("citations"))
                for row in graph
                if isinstance(row, dict)
            )

        by_year: dict[int, int] = {}
        for raw_year, raw_citations in rows:
            year = fp.to_year(raw_year)
            if year is None:
                continue
            citations = fp.to_int(raw_citations)
            by_year[year] = citations if citations is not None and citations > 0 else 0

        return [CitationYear(year, by_year[year]) for year in sorted(by_year)]

    def assemble(
        self,
        extracted: ExtractedPayload,
        source: DataSource,
        extra_papers: Iterable[Paper] = (),
        merged_sources: Iterable[DataSource] = (),
    ) -> AuthorMetrics:
        """Calcule les valeurs derivees et construit l'enregistrement final.

        ``extra_papers`` sont les articles apportes par d'autres sources en
        mode fusion: ils comptent dans les indices derives et le nombre de
        publications, jamais dans les totaux explicites.
        """
        papers = list(extracted.papers) + list(extra_papers)
        counts = cited_counts(papers)

        series = extracted.graph
        if series is None:
            series = citations_by_year(papers)

        citation_count = extracted.total_citations or 0
        if citation_count == 0 and series:
            citation_count = sum(entry.citations for entry in series)

        final_h = extracted.h_index if extracted.h_index is not None else h_index(counts)
        final_i10 = extracted.i10_index if extracted.i10_index is not None else i10_index(counts)

        logger.debug(
            "Normalisation %s: %d articles, %d cites, h=%s (derive %d), i10=%s (derive %d)",
            source.value, len(papers), len(counts),
            extracted.h_index, h_index(counts), extracted.i10_index, i10_index(counts),
        )

        return AuthorMetrics(
            citation_count=citation_count,
            publication_count=len(papers),
            h_index=final_h,
            i10_index=final_i10,
            citations_by_year=tuple(series),
            papers=tuple(sort_papers(papers)),
            author_name=extracted.author_name,
            author_affiliation=extracted.author_affiliation,
            citations_since=extracted.citations_since,
            h_index_since=extracted.h_index_since,
            i10_index_since=extracted.i10_index_since,
            data_source=source,
            merged_sources=tuple(merged_sources),
        )
