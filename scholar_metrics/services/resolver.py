"""Resolution des metriques de citation avec repli entre sources."""

import dataclasses
import logging
from typing import Optional

from ..config import Config, config
from ..models import AuthorMetrics, DataSource, Paper
from ..sources import BaseSource, ScholarScraperSource, SerpApiSource, SnapshotSource, SourceError
from .deduplicator import Deduplicator
from .normalizer import ExtractedPayload, MetricsNormalizer

logger = logging.getLogger(__name__)


class MetricsResolver:
    """Essaie les sources dans l'ordre jusqu'au premier succes.

    Les sources sont interrogees sequentiellement; un echec de transport ou
    de parsing (``SourceError``) fait passer a la suivante. Si toutes
    echouent, un enregistrement a zero marque ``failed`` est retourne: cette
    methode ne leve pas pour les erreurs amont ordinaires.

    En mode fusion, les sources suivantes sont aussi interrogees et leurs
    articles inedits (cle: prefixe de titre) sont ajoutes a ceux de la
    premiere source reussie, qui reste prioritaire pour tout le reste.
    """

    def __init__(
        self,
        sources: list[BaseSource],
        merge: bool = False,
        deduplicator: Optional[Deduplicator] = None,
        normalizer: Optional[MetricsNormalizer] = None,
    ):
        self.sources = list(sources)
        self.merge = merge
        self.deduplicator = deduplicator or Deduplicator(
            prefix_length=config.title_prefix_length
        )
        self.normalizer = normalizer or MetricsNormalizer()

    @classmethod
    def from_config(cls, cfg: Config = config) -> "MetricsResolver":
        """Construit les sources activees, dans l'ordre de preference."""
        sources: list[BaseSource] = []
        for name in cfg.get_enabled_sources():
            if name == "serpapi":
                sources.append(SerpApiSource(
                    cfg.serpapi_key,
                    max_pages=cfg.serpapi_max_pages,
                    timeout=cfg.request_timeout,
                ))
            elif name == "scholar_scrape":
                sources.append(ScholarScraperSource(
                    max_pages=cfg.scrape_max_pages,
                    timeout=cfg.request_timeout,
                ))
            elif name == "snapshot":
                sources.append(SnapshotSource(cfg.snapshot_path))

        return cls(
            sources,
            merge=cfg.merge_sources,
            deduplicator=Deduplicator(prefix_length=cfg.title_prefix_length),
        )

    def get_available_sources(self) -> list[str]:
        """Retourne la liste des sources configurees."""
        return [source.name for source in self.sources]

    async def resolve(self, author_id: str) -> AuthorMetrics:
        """Produit les metriques normalisees de ``author_id``."""
        errors: list[str] = []
        primary: Optional[tuple[DataSource, ExtractedPayload]] = None
        extra_papers: list[Paper] = []
        merged_sources: list[DataSource] = []

        for source in self.sources:
            extracted = await self._try_source(source, author_id, errors)
            if extracted is None:
                continue

            if primary is None:
                primary = (source.source, extracted)
                logger.info(
                    f"Metriques de {author_id} obtenues via {source.name} "
                    f"({len(extracted.papers)} articles)"
                )
                if not self.merge:
                    break
                continue

            added = self.deduplicator.new_papers(
                primary[1].papers + extra_papers, extracted.papers
            )
            logger.info(
                f"Fusion {source.name}: {len(added)} articles ajoutes, "
                f"{len(extracted.papers) - len(added)} doublons ignores"
            )
            if added:
                extra_papers.extend(added)
                merged_sources.append(source.source)

        if primary is None:
            logger.error(f"Toutes les sources ont echoue pour {author_id}: {errors}")
            return AuthorMetrics.empty(tuple(errors))

        data_source, extracted = primary
        metrics = self.normalizer.assemble(
            extracted,
            data_source,
            extra_papers=extra_papers,
            merged_sources=merged_sources,
        )
        return dataclasses.replace(metrics, errors=tuple(errors))

    async def _try_source(
        self,
        source: BaseSource,
        author_id: str,
        errors: list[str],
    ) -> Optional[ExtractedPayload]:
        """Interroge une source; None (et une erreur journalisee) si elle echoue.

        Un payload de forme inattendue compte comme un echec de la source.
        """
        try:
            async with source:
                raw = await source.fetch_raw(author_id)
            return self.normalizer.extract(raw)
        except SourceError as e:
            logger.warning(f"Erreur {source.name}: {e}")
            errors.append(f"{source.name}: {e}")
        except (TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Payload {source.name} inexploitable: {e!r}")
            errors.append(f"{source.name}: payload invalide ({e})")
        return None
