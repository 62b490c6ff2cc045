from .paper import DEFAULT_TITLE, DataSource, Paper
from .metrics import AuthorMetrics, CitationYear

__all__ = ["AuthorMetrics", "CitationYear", "DataSource", "DEFAULT_TITLE", "Paper"]
