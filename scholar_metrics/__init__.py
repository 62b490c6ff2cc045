"""Scholar Metrics - metriques de citation Google Scholar pour le site academique."""

__version__ = "0.1.0"
