"""Politiques de resolution de champs pour des payloads au schema instable.

Le schema SerpApi (et celui des autres sources) varie d'un appel a l'autre:
le meme chiffre peut se trouver sous ``author.cited_by.total``, sous
``cited_by.total`` ou directement a la racine. Une ``FieldPolicy`` decrit la
liste ordonnee des emplacements possibles; le premier present gagne.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

Accessor = Callable[[Any], Any]


def path(*keys: str) -> Accessor:
    """Accesseur qui descend dans des dictionnaires imbriques."""

    def access(payload: Any) -> Any:
        node = payload
        for key in keys:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node

    access.__name__ = ".".join(keys)
    return access


def table_cell(*labels: str, column: str = "all") -> Accessor:
    """Accesseur pour le tableau ``cited_by.table`` de SerpApi.

    Chaque ligne du tableau est un dict a une cle (``citations``,
    ``h_index``...), dont la valeur contient une colonne ``all`` et une
    colonne ``since_YYYY`` dont le nom depend de l'annee et de la langue.
    ``column="since"`` retourne la premiere colonne qui n'est pas ``all``.
    """

    def access(payload: Any) -> Any:
        table = path("cited_by", "table")(payload) or path("author", "cited_by", "table")(payload)
        if not isinstance(table, list):
            return None
        for row in table:
            if not isinstance(row, dict):
                continue
            for label in labels:
                cell = row.get(label)
                if not isinstance(cell, dict):
                    continue
                if column != "since":
                    return cell.get(column)
                for key, value in cell.items():
                    if key != "all":
                        return value
        return None

    access.__name__ = f"cited_by.table[{'|'.join(labels)}].{column}"
    return access


def to_int(value: Any) -> Optional[int]:
    """Convertit une valeur en entier, ou None si illisible.

    Accepte les entiers, les flottants entiers et les chaines
    (``"1,234"`` et ``" 42 "`` compris). Les booleens sont refuses.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        for separator in (",", "\u00a0", "\u202f", " "):
            text = text.replace(separator, "")
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def to_year(value: Any) -> Optional[int]:
    """Annee valide (entier strictement positif) ou None."""
    year = to_int(value)
    if year is None or year <= 0:
        return None
    return year


@dataclass(frozen=True)
class FieldPolicy:
    """Liste ordonnee d'accesseurs pour un meme champ logique."""

    name: str
    accessors: tuple[Accessor, ...]

    def resolve_int(self, payload: Any) -> Optional[int]:
        """Premier entier present, lisible et non negatif."""
        for accessor in self.accessors:
            value = to_int(accessor(payload))
            if value is not None and value >= 0:
                return value
        return None

    def resolve_year(self, payload: Any) -> Optional[int]:
        """Premiere annee valide (entier > 0)."""
        for accessor in self.accessors:
            year = to_year(accessor(payload))
            if year is not None:
                return year
        return None

    def resolve_text(self, payload: Any) -> Optional[str]:
        """Premiere chaine non vide (premier element si liste)."""
        for accessor in self.accessors:
            value = accessor(payload)
            if isinstance(value, list):
                value = next((v for v in value if isinstance(v, str) and v.strip()), None)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    def resolve_collection(self, payload: Any) -> Optional[list | dict]:
        """Premiere liste ou mapping present, meme vide."""
        for accessor in self.accessors:
            value = accessor(payload)
            if isinstance(value, (list, dict)):
                return value
        return None


# Citations d'un article
WORK_CITATIONS = FieldPolicy("work.citations", (
    path("cited_by", "value"),
    path("cited_by_count"),
    path("citations"),
    path("num_citations"),
))

WORK_YEAR = FieldPolicy("work.year", (
    path("year"),
    path("publication_year"),
    path("pub_year"),
))

WORK_TITLE = FieldPolicy("work.title", (path("title"),))
WORK_AUTHORS = FieldPolicy("work.authors", (path("authors"),))
WORK_PUBLICATION = FieldPolicy("work.publication", (path("publication"), path("venue")))
WORK_LINK = FieldPolicy("work.link", (path("link"), path("url")))

# Liste des travaux
WORKS = FieldPolicy("works", (path("articles"), path("papers")))

# Totaux de l'auteur
TOTAL_CITATIONS = FieldPolicy("citations", (
    path("author", "cited_by", "total"),
    path("cited_by", "total"),
    path("author", "cited_by_total"),
    path("citations"),
    table_cell("citations"),
    path("totals", "citationsAll"),
    path("citedby_total"),
))

H_INDEX = FieldPolicy("h_index", (
    path("author", "indices", "h_index"),
    path("h_index"),
    path("author", "h_index"),
    path("indices", "h_index"),
    table_cell("h_index", "indice_h"),
    path("totals", "hIndexAll"),
    path("hindex"),
))

I10_INDEX = FieldPolicy("i10_index", (
    path("author", "indices", "i10_index"),
    path("i10_index"),
    path("author", "i10_index"),
    path("indices", "i10_index"),
    table_cell("i10_index", "indice_i10"),
    path("totals", "i10IndexAll"),
    path("i10index"),
))

CITATIONS_SINCE = FieldPolicy("citations_since", (
    table_cell("citations", column="since"),
    path("totals", "citationsSince"),
    path("citations_since"),
    path("citedby_5y"),
))

H_INDEX_SINCE = FieldPolicy("h_index_since", (
    table_cell("h_index", "indice_h", column="since"),
    path("totals", "hIndexSince"),
    path("h_index_since"),
    path("hindex5y"),
))

I10_INDEX_SINCE = FieldPolicy("i10_index_since", (
    table_cell("i10_index", "indice_i10", column="since"),
    path("totals", "i10IndexSince"),
    path("i10_index_since"),
    path("i10index5y"),
))

CITATION_GRAPH = FieldPolicy("citations_by_year", (
    path("author", "cited_by", "graph"),
    path("cited_by", "graph"),
    path("graph"),
    path("citationsByYear"),
    path("cites_per_year"),
))

AUTHOR_NAME = FieldPolicy("author_name", (
    path("author", "name"),
    path("author_name"),
    path("authorName"),
))

AUTHOR_AFFILIATION = FieldPolicy("author_affiliation", (
    path("author", "affiliations"),
    path("author", "affiliation"),
    path("author_affiliation"),
))
