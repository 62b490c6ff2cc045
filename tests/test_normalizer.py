import pytest

from scholar_metrics.models import CitationYear, DataSource
from scholar_metrics.services.normalizer import MetricsNormalizer


@pytest.fixture
def normalizer():
    return MetricsNormalizer()


def test_serpapi_payload_normalized(normalizer, serpapi_payload):
    metrics = normalizer.normalize(serpapi_payload, DataSource.SERPAPI)

    assert metrics.citation_count == 50
    assert metrics.publication_count == 4
    assert metrics.h_index == 3
    assert metrics.i10_index == 3
    assert metrics.citations_since == 40
    assert metrics.h_index_since == 3
    assert metrics.i10_index_since == 2
    assert metrics.author_name == "Jane Doe"
    assert metrics.author_affiliation == "University of Somewhere"
    assert metrics.data_source is DataSource.SERPAPI
    assert [(e.year, e.citations) for e in metrics.citations_by_year] == [
        (2022, 10), (2023, 15), (2024, 25)
    ]
    assert [(p.title, p.citations, p.year) for p in metrics.papers] == [
        ("Paper One", 23, 2023),
        ("Paper Two", 13, 2024),
        ("Paper Three", 13, 2022),
        ("Paper Four", 0, None),
    ]
    assert metrics.papers[0].authors == "J Doe, A Smith"
    assert not metrics.failed


def test_zero_total_recomputed_from_yearly_series(normalizer):
    raw = {
        "author": {
            "cited_by": {
                "total": 0,
                "graph": [
                    {"year": "2022", "citations": "20"},
                    {"year": "2023", "citations": "24"},
                ],
            }
        }
    }

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.citation_count == 44


@pytest.mark.parametrize(
    "raw",
    [
        {"author": {"cited_by": {"total": 120}}},
        {"cited_by": {"total": 120}},
        {"author": {"cited_by_total": 120}},
        {"citations": 120},
        {"cited_by": {"table": [{"citations": {"all": "120"}}]}},
        {"totals": {"citationsAll": 120}},
        {"citedby_total": 120},
    ],
)
def test_total_citations_from_any_documented_location(normalizer, raw):
    assert normalizer.normalize(raw, DataSource.SERPAPI).citation_count == 120


def test_explicit_indices_take_precedence_over_derived(normalizer):
    raw = {
        "h_index": 7,
        "articles": [
            {"title": "a", "citations": 23},
            {"title": "b", "citations": 13},
            {"title": "c", "citations": 13},
            {"title": "d", "citations": 1},
        ],
    }

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.h_index == 7
    assert metrics.i10_index == 3


def test_explicit_zero_index_is_authoritative(normalizer):
    raw = {
        "author": {"indices": {"h_index": 0, "i10_index": 0}},
        "articles": [{"title": "a", "citations": 50}, {"title": "b", "citations": 50}],
    }

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.h_index == 0
    assert metrics.i10_index == 0


def test_indices_derived_when_absent(normalizer):
    raw = {
        "articles": [
            {"title": "a", "cited_by_count": 23},
            {"title": "b", "num_citations": "13"},
            {"title": "c", "cited_by": {"value": 13}},
            {"title": "d", "citations": 1},
            {"title": "e"},
        ]
    }

    metrics = normalizer.normalize(raw, DataSource.SCHOLAR_SCRAPE)

    assert metrics.h_index == 3
    assert metrics.i10_index == 3
    assert metrics.publication_count == 5


def test_graph_sorted_deduplicated_and_filtered(normalizer):
    raw = {
        "graph": [
            {"year": 2024, "citations": 5},
            {"year": 2021, "citations": 3},
            {"year": "abc", "citations": 9},
            {"year": 0, "citations": 4},
            {"year": 2021, "citations": 6},
            {"year": "2022", "citations": "7"},
        ]
    }

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.citations_by_year == (
        CitationYear(2021, 6),
        CitationYear(2022, 7),
        CitationYear(2024, 5),
    )
    assert metrics.citation_count == 18


def test_graph_as_year_mapping(normalizer):
    raw = {"citationsByYear": {"2023": 4, "2021": 2, "-1": 8}}

    metrics = normalizer.normalize(raw, DataSource.SNAPSHOT)

    assert [(e.year, e.citations) for e in metrics.citations_by_year] == [(2021, 2), (2023, 4)]


def test_series_derived_from_papers_when_no_graph(normalizer):
    raw = {
        "articles": [
            {"title": "A", "citations": 5, "year": "2020"},
            {"title": "B", "citations": 7},
            {"title": "C", "citations": 2, "year": 2020},
        ]
    }

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.citations_by_year == (CitationYear(2020, 7),)
    undated = [p for p in metrics.papers if p.title == "B"]
    assert len(undated) == 1
    assert undated[0].year is None


def test_work_defaults_applied(normalizer):
    raw = {"articles": [{"cited_by": {"value": "lots"}, "year": "soon"}, "not-a-work"]}

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert len(metrics.papers) == 1
    paper = metrics.papers[0]
    assert paper.title == "Untitled"
    assert paper.citations == 0
    assert paper.year is None


@pytest.mark.parametrize(
    "authors, expected",
    [
        ([{"name": None}], None),
        ([{"name": "J Doe"}, {"name": None}, {}, "A Smith", None], "J Doe, A Smith"),
        ([{"name": "  "}], None),
    ],
)
def test_author_list_with_missing_names(normalizer, authors, expected):
    raw = {"articles": [{"title": "T", "authors": authors}]}

    metrics = normalizer.normalize(raw, DataSource.SERPAPI)

    assert metrics.papers[0].authors == expected


def test_empty_payload_is_valid_zero_record(normalizer):
    metrics = normalizer.normalize({}, DataSource.SNAPSHOT)

    assert metrics.citation_count == 0
    assert metrics.publication_count == 0
    assert metrics.h_index == 0
    assert metrics.citations_by_year == ()
    assert metrics.papers == ()
    assert not metrics.failed


def test_update_script_snapshot_format(normalizer):
    raw = {
        "lastUpdated": "2025-01-01",
        "method": "serpapi_google_scholar_author",
        "totals": {
            "citationsAll": 321,
            "citationsSince": 200,
            "hIndexAll": 9,
            "i10IndexAll": 8,
        },
        "citationsByYear": {"2023": 100, "2024": 221},
    }

    metrics = normalizer.normalize(raw, DataSource.SNAPSHOT)

    assert metrics.citation_count == 321
    assert metrics.citations_since == 200
    assert metrics.h_index == 9
    assert metrics.i10_index == 8
    assert len(metrics.citations_by_year) == 2


def test_to_dict_uses_endpoint_field_names(normalizer, serpapi_payload):
    body = normalizer.normalize(serpapi_payload, DataSource.SERPAPI).to_dict()

    assert body["citations"] == 50
    assert body["publications"] == 4
    assert body["h_index"] == 3
    assert body["i10_index"] == 3
    assert body["citationsByYear"][0] == {"year": 2022, "citations": 10}
    assert body["papers"][3]["year"] is None
    assert body["author_name"] == "Jane Doe"
    assert body["author_affiliation"] == "University of Somewhere"
    assert body["data_source"] == "serpapi"
