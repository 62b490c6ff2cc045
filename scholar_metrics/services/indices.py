"""Indices bibliometriques derives de la liste des articles."""

from collections import defaultdict
from typing import Iterable

from ..models import CitationYear, Paper


def cited_counts(papers: Iterable[Paper]) -> list[int]:
    """Citations des articles cites au moins une fois, en ordre decroissant."""
    return sorted((p.citations for p in papers if p.citations > 0), reverse=True)


def h_index(counts: list[int]) -> int:
    """Plus grand h tel que h articles ont au moins h citations.

    ``counts`` doit etre trie en ordre decroissant. Le parcours s'arrete au
    premier rang qui echoue.
    """
    h = 0
    for rank, count in enumerate(counts, 1):
        if count >= rank:
            h = rank
        else:
            break
    return h


def i10_index(counts: Iterable[int]) -> int:
    """Nombre d'articles avec au moins 10 citations."""
    return sum(1 for count in counts if count >= 10)


def citations_by_year(papers: Iterable[Paper]) -> list[CitationYear]:
    """Somme des citations par annee de publication (articles dates seulement)."""
    totals: dict[int, int] = defaultdict(int)
    for paper in papers:
        if paper.year is not None and paper.year > 0:
            totals[paper.year] += paper.citations
    return [CitationYear(year, totals[year]) for year in sorted(totals)]


def sort_papers(papers: Iterable[Paper]) -> list[Paper]:
    """Citations decroissantes, puis annee decroissante (annee absente = 0)."""
    return sorted(papers, key=Paper.sort_key, reverse=True)
