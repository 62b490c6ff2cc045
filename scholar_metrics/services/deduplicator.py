"""Deduplication d'articles entre sources (mode fusion)."""

from typing import Iterable

from ..models import Paper


class Deduplicator:
    """Deduplication par prefixe de titre normalise.

    Deux articles sont le meme travail quand les ``prefix_length`` premiers
    caracteres de leur titre (minuscules, espaces reduits) sont egaux. En
    cas de conflit l'article deja connu (source prioritaire) est conserve.
    """

    def __init__(self, prefix_length: int = 40):
        self.prefix_length = prefix_length

    def key(self, paper: Paper) -> str:
        return paper.title_key(self.prefix_length)

    def new_papers(self, known: Iterable[Paper], candidates: Iterable[Paper]) -> list[Paper]:
        """Retourne les candidats absents de ``known``, sans doublons entre eux.

        L'ordre des candidats est preserve.
        """
        seen = {self.key(p) for p in known}
        added = []
        for paper in candidates:
            key = self.key(paper)
            if key in seen:
                continue
            seen.add(key)
            added.append(paper)
        return added
