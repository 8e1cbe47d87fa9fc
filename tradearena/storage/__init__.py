from .base import CompetitionRepository
from .json_file import JsonFileRepository

__all__ = ["CompetitionRepository", "JsonFileRepository"]
