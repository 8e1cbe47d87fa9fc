"""Abstract base class for durable competition stores."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CompetitionRepository(ABC):
    """
    Abstract interface for persisting the competition roster.
    
    The running process treats the in-memory store as the source of
    truth; a repository only mirrors it so joins survive restarts.
    Implementations must succeed or fail atomically per call.
    """

    @abstractmethod
    def load(self) -> Optional[list[dict[str, Any]]]:
        """
        Load previously saved competition records.
        
        Returns:
            List of competition dicts (id, name, entryFee, prizePool,
            traders), or None if nothing has been saved yet
        """
        pass

    @abstractmethod
    def save(self, competitions: list[dict[str, Any]]) -> None:
        """
        Replace the saved state with ``competitions``.
        
        Raises:
            PersistenceWriteError: If the write did not complete
        """
        pass
