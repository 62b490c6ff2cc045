"""Source snapshot: dernier etat connu, lu depuis un fichier JSON local."""

import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path

from ..models import AuthorMetrics, DataSource
from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)


class SnapshotSource(BaseSource):
    """Lit (et ecrit) un instantane JSON des metriques.

    Formats acceptes en lecture: la sortie de ``AuthorMetrics.to_dict()``
    ecrite par ``save()``, une reponse SerpApi brute, ou le format
    ``totals`` / ``citationsByYear`` du script de mise a jour du site.
    """

    source = DataSource.SNAPSHOT
    requires_http = False

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    async def fetch_raw(self, author_id: str) -> dict:
        """Le snapshot n'est pas indexe par auteur: ``author_id`` est ignore."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise SourceError(f"Snapshot introuvable: {self.path}")
        except OSError as e:
            raise SourceError(f"Snapshot illisible: {self.path} ({e})")

        try:
            data = json.loads(text)
        except ValueError as e:
            raise SourceError(f"Snapshot JSON invalide: {self.path} ({e})")

        if not isinstance(data, dict):
            raise SourceError(f"Snapshot: objet JSON attendu dans {self.path}")
        return data

    def save(self, metrics: AuthorMetrics) -> None:
        """Ecrit le snapshot de maniere atomique (fichier temporaire + replace)."""
        payload = metrics.to_dict()
        payload["lastUpdated"] = date.today().isoformat()
        data = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", delete=False, dir=self.path.parent, suffix=".tmp"
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise
        logger.info(f"Snapshot mis a jour: {self.path}")

    def describe(self) -> dict:
        return {"name": self.name, "path": str(self.path), "exists": self.path.exists()}
