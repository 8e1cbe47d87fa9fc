"""JSON file implementation of the competition repository."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from tradearena.errors import PersistenceWriteError
from .base import CompetitionRepository

logger = logging.getLogger(__name__)


class JsonFileRepository(CompetitionRepository):
    """
    Stores all competitions in one JSON document: ``{"competitions": [...]}``.
    
    Writes go to a temporary file in the same directory which then
    replaces the target, so readers never see a partial document.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[list[dict[str, Any]]]:
        if not self.path.exists():
            logger.info(f"No saved competitions at {self.path}")
            return None
        
        with self.path.open("r", encoding="utf-8") as f:
            document = json.load(f)
        
        competitions = document.get("competitions")
        if not isinstance(competitions, list):
            raise ValueError(f"{self.path} has no 'competitions' list")
        return competitions

    def save(self, competitions: list[dict[str, Any]]) -> None:
        payload = json.dumps({"competitions": competitions}, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceWriteError(f"Failed to write {self.path}: {e}") from e
