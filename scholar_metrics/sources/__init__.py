from .base import BaseSource, SourceError
from .serpapi import SerpApiSource
from .scholar_scraper import ScholarScraperSource
from .snapshot import SnapshotSource

__all__ = ["BaseSource", "SourceError", "SerpApiSource", "ScholarScraperSource", "SnapshotSource"]
