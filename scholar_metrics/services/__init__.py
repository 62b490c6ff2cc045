from .resolver import MetricsResolver
from .normalizer import MetricsNormalizer
from .deduplicator import Deduplicator
from .cache import MetricsCache

__all__ = ["MetricsResolver", "MetricsNormalizer", "Deduplicator", "MetricsCache"]
