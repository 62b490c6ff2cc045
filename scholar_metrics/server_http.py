#!/usr/bin/env python3
"""
Serveur HTTP pour scholar-metrics.

Expose l'endpoint JSON ``GET /api/scholar`` consomme par le site, ainsi que
les outils MCP en Streamable HTTP.

Utilise fastmcp standalone (pas mcp.server.fastmcp) pour supporter host/port.
"""

import logging
from typing import Optional

# Use standalone fastmcp (supports host/port in run())
from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import config
from .models import AuthorMetrics
from . import server as core
from .server import (
    build_response,
    format_metrics,
    format_sources_status,
    resolve_metrics,
)

logger = logging.getLogger(__name__)

# Creer le serveur FastMCP
mcp = FastMCP("scholar-metrics")


@mcp.custom_route("/api/scholar", methods=["GET"])
async def scholar_endpoint(request: Request) -> JSONResponse:
    """
    Metriques de citation au format JSON.

    Parametre optionnel ``author_id``; toujours une reponse JSON valide,
    avec un objet ``fallback`` a zero en cas d'echec.
    """
    author_id = request.query_params.get("author_id") or config.scholar_author_id
    sources_configured = bool(core.get_resolver().sources)

    try:
        metrics = await resolve_metrics(author_id)
    except Exception as e:
        logger.exception(f"Erreur inattendue pour {author_id}")
        metrics = AuthorMetrics.empty((f"internal: {e}",))

    body, status = build_response(
        metrics,
        sources_configured=sources_configured,
        debug=config.debug,
    )
    return JSONResponse(body, status_code=status)


@mcp.tool()
async def get_citation_metrics(author_id: Optional[str] = None) -> str:
    """
    Recupere les metriques de citation d'un profil Google Scholar
    (citations, h-index, i10-index, citations par annee, articles).
    """
    metrics = await resolve_metrics(author_id)
    return format_metrics(metrics)


@mcp.tool()
async def get_sources_status() -> str:
    """Affiche les sources configurees et leur ordre de preference."""
    return format_sources_status(core.get_resolver())


def main():
    """Point d'entree du serveur HTTP."""
    config.validate()

    print("=" * 60)
    print("SCHOLAR METRICS HTTP SERVER")
    print("=" * 60)
    print(f"Endpoint: http://{config.http_host}:{config.http_port}/api/scholar")
    print(f"Sources: {', '.join(config.get_enabled_sources()) or 'aucune'}")
    print("Press Ctrl+C to stop")
    print("=" * 60)

    logger.info("Demarrage scholar-metrics en mode Streamable HTTP...")
    mcp.run(transport="http", host=config.http_host, port=config.http_port)


if __name__ == "__main__":
    main()
