import sys
from pathlib import Path
from typing import Optional

import pytest

# Ensure repository root is on the import path for local package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scholar_metrics.models import DataSource  # noqa: E402
from scholar_metrics.sources.base import BaseSource, SourceError  # noqa: E402


class FakeSource(BaseSource):
    """Source en memoire: retourne un payload fixe ou leve une SourceError."""

    requires_http = False

    def __init__(
        self,
        source: DataSource,
        payload: Optional[dict] = None,
        error: Optional[str] = None,
    ):
        super().__init__()
        self.source = source
        self.payload = payload
        self.error = error
        self.calls: list[str] = []

    async def fetch_raw(self, author_id: str) -> dict:
        self.calls.append(author_id)
        if self.error is not None:
            raise SourceError(self.error)
        return self.payload or {}


@pytest.fixture
def serpapi_payload() -> dict:
    """Reponse google_scholar_author reduite, au format SerpApi."""
    return {
        "search_metadata": {"status": "Success"},
        "author": {
            "name": "Jane Doe",
            "affiliations": "University of Somewhere",
        },
        "articles": [
            {
                "title": "Paper One",
                "link": "https://scholar.google.com/citations?citation_for_view=X:1",
                "authors": "J Doe, A Smith",
                "publication": "Journal A 1 (2), 2023",
                "cited_by": {"value": 23},
                "year": "2023",
            },
            {"title": "Paper Two", "cited_by": {"value": 13}, "year": "2024"},
            {"title": "Paper Three", "cited_by": {"value": 13}, "year": "2022"},
            {"title": "Paper Four", "cited_by": {"value": None}, "year": ""},
        ],
        "cited_by": {
            "table": [
                {"citations": {"all": 50, "since_2021": 40}},
                {"h_index": {"all": 3, "since_2021": 3}},
                {"i10_index": {"all": 3, "since_2021": 2}},
            ],
            "graph": [
                {"year": 2022, "citations": 10},
                {"year": 2023, "citations": 15},
                {"year": 2024, "citations": 25},
            ],
        },
    }


@pytest.fixture
def fake_source():
    return FakeSource
