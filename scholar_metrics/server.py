"""Serveur MCP Scholar Metrics - Metriques de citation d'un profil Google Scholar."""

import logging
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .config import config
from .models import AuthorMetrics, DataSource
from .services import MetricsCache, MetricsResolver
from .sources import SnapshotSource

# Configuration du logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Creer le serveur MCP
server = Server("scholar-metrics")

# Resolver et cache globaux
resolver: Optional[MetricsResolver] = None
cache: Optional[MetricsCache] = None


def get_resolver() -> MetricsResolver:
    """Retourne le resolver, le cree si necessaire."""
    global resolver
    if resolver is None:
        resolver = MetricsResolver.from_config(config)
    return resolver


def get_cache() -> MetricsCache:
    """Retourne le cache de reponses, le cree si necessaire."""
    global cache
    if cache is None:
        cache = MetricsCache(ttl=config.cache_ttl, max_size=config.cache_max_size)
    return cache


async def resolve_metrics(author_id: Optional[str] = None) -> AuthorMetrics:
    """Resout les metriques en passant par le cache de reponses.

    Apres un succes d'une source live, le snapshot est rafraichi si
    SCHOLAR_SNAPSHOT_REFRESH est active.
    """
    author_id = author_id or config.scholar_author_id

    cached = get_cache().get(author_id)
    if cached is not None:
        logger.debug(f"Cache hit pour {author_id}")
        return cached

    metrics = await get_resolver().resolve(author_id)
    if metrics.failed:
        return metrics

    get_cache().set(author_id, metrics)
    if config.snapshot_refresh and metrics.data_source != DataSource.SNAPSHOT:
        refresh_snapshot(metrics)
    return metrics


def refresh_snapshot(metrics: AuthorMetrics) -> None:
    """Ecrit le dernier etat connu; un echec d'ecriture est seulement journalise."""
    snapshot = next(
        (s for s in get_resolver().sources if isinstance(s, SnapshotSource)),
        None,
    )
    if snapshot is None and config.snapshot_path:
        snapshot = SnapshotSource(config.snapshot_path)
    if snapshot is None:
        return
    try:
        snapshot.save(metrics)
    except OSError as e:
        logger.warning(f"Impossible d'ecrire le snapshot {snapshot.path}: {e}")


def build_response(
    metrics: AuthorMetrics,
    sources_configured: bool = True,
    debug: bool = False,
) -> tuple[dict, int]:
    """Corps JSON et statut HTTP de l'endpoint ``/api/scholar``."""
    if metrics.failed:
        fallback = AuthorMetrics.empty().to_dict()
        if not sources_configured:
            return {
                "error": "No citation source configured",
                "message": "Set SERPAPI_KEY, SCHOLAR_SCRAPE_ENABLED or SCHOLAR_SNAPSHOT_PATH",
                "fallback": fallback,
            }, 500
        return {
            "error": "Failed to fetch citation data",
            "message": "; ".join(metrics.errors) or "All citation sources failed",
            "fallback": fallback,
        }, 502

    body = metrics.to_dict()
    if debug:
        body["debug"] = {
            "sources_configured": get_resolver().get_available_sources(),
            "errors": list(metrics.errors),
            "merged_sources": [s.value for s in metrics.merged_sources],
            "articles_count": metrics.publication_count,
            "graph_years": [entry.year for entry in metrics.citations_by_year],
        }
    return body, 200


@server.list_tools()
async def list_tools() -> list[Tool]:
    """Liste les outils disponibles."""
    return [
        Tool(
            name="get_citation_metrics",
            description=(
                "Recupere les metriques de citation d'un profil Google Scholar "
                "(citations, h-index, i10-index, citations par annee, articles). "
                "Sources essayees dans l'ordre: SerpApi, scraping, snapshot."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "author_id": {
                        "type": "string",
                        "description": (
                            "Identifiant Google Scholar (parametre 'user' du profil). "
                            "Par defaut: SCHOLAR_AUTHOR_ID."
                        ),
                    },
                },
            },
        ),
        Tool(
            name="get_sources_status",
            description="Affiche les sources configurees et leur ordre de preference.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    try:
        if name == "get_citation_metrics":
            metrics = await resolve_metrics(arguments.get("author_id"))
            return [TextContent(
                type="text",
                text=format_metrics(metrics),
            )]

        elif name == "get_sources_status":
            return [TextContent(
                type="text",
                text=format_sources_status(get_resolver()),
            )]

        else:
            return [TextContent(
                type="text",
                text=f"Outil inconnu: {name}",
            )]

    except Exception as e:
        logger.exception(f"Erreur lors de l'execution de {name}")
        return [TextContent(
            type="text",
            text=f"Erreur: {str(e)}",
        )]


def format_metrics(metrics: AuthorMetrics, max_papers: int = 10) -> str:
    if metrics.failed:
        lines = [
            "## Metriques indisponibles",
            "",
            "Toutes les sources ont echoue:",
        ]
        lines.extend(f"- {error}" for error in metrics.errors)
        if not metrics.errors:
            lines.append("- Aucune source configuree")
        return "\n".join(lines)

    lines = [
        f"## {metrics.author_name or 'Auteur inconnu'}",
        "",
    ]
    if metrics.author_affiliation:
        lines.append(f"- **Affiliation**: {metrics.author_affiliation}")
    lines.append(f"- **Citations**: {metrics.citation_count:,}")
    if metrics.citations_since is not None:
        lines.append(f"- **Citations (recentes)**: {metrics.citations_since:,}")
    lines.append(f"- **h-index**: {metrics.h_index}")
    lines.append(f"- **i10-index**: {metrics.i10_index}")
    lines.append(f"- **Publications**: {metrics.publication_count}")
    lines.append(f"- **Source**: {metrics.data_source.value}")
    if metrics.merged_sources:
        lines.append(f"- **Fusion**: {', '.join(s.value for s in metrics.merged_sources)}")

    if metrics.citations_by_year:
        lines.append("")
        lines.append("### Citations par annee")
        for entry in metrics.citations_by_year:
            lines.append(f"- {entry.year}: {entry.citations}")

    if metrics.papers:
        lines.append("")
        lines.append("### Articles les plus cites")
        for i, paper in enumerate(metrics.papers[:max_papers], 1):
            lines.append(f"{i}. **{paper.title}** ({paper.year or 'N/A'}) - {paper.citations} citations")
            if paper.publication:
                lines.append(f"   - {paper.publication}")

        if len(metrics.papers) > max_papers:
            lines.append(f"... et {len(metrics.papers) - max_papers} autres articles")

    if metrics.errors:
        lines.append("")
        lines.append(f"Sources en echec: {', '.join(metrics.errors)}")

    return "\n".join(lines)


def format_sources_status(resolver: MetricsResolver) -> str:
    lines = [
        "## Sources configurees",
        "",
    ]

    if not resolver.sources:
        lines.append("Aucune source configuree (SERPAPI_KEY, SCHOLAR_SCRAPE_ENABLED, SCHOLAR_SNAPSHOT_PATH).")
        return "\n".join(lines)

    for i, source in enumerate(resolver.sources, 1):
        details = ", ".join(
            f"{key}={value}" for key, value in source.describe().items() if key != "name"
        )
        lines.append(f"{i}. **{source.name}**" + (f" ({details})" if details else ""))

    lines.append("")
    lines.append(f"Mode fusion: {'Oui' if resolver.merge else 'Non'}")
    return "\n".join(lines)


async def main():
    """Point d'entree principal."""
    logger.info("Demarrage du serveur Scholar Metrics (stdio)...")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
