"""Application configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

HOUR_SECONDS = 60 * 60
DAY_SECONDS = 24 * HOUR_SECONDS

DEFAULT_DEFINITIONS_PATH = Path(__file__).parent / "data" / "competitions.json"


@dataclass
class Config:
    """Application configuration loaded from environment variables."""
    
    # API settings
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"
    
    # Durable store: saved roster, falls back to the bundled definitions
    data_path: str = "data/competitions.json"
    definitions_path: str = str(DEFAULT_DEFINITIONS_PATH)
    
    # Competition schedule relative to process start.
    # Index i starts at start_offsets_seconds[i]; indexes past the end start immediately.
    start_offsets_seconds: tuple[float, ...] = field(
        default_factory=lambda: (0.0, float(HOUR_SECONDS), float(DAY_SECONDS))
    )
    competition_duration_seconds: float = float(DAY_SECONDS)
    
    # Score mutator
    score_interval_seconds: float = 2.0
    random_seed: Optional[int] = None
    
    # Broadcast hub
    outbound_queue_size: int = 256
    
    # Client endpoints
    ws_url: str = "ws://localhost:4000/ws"
    api_url: str = "http://localhost:4000"
    
    def start_offset_for(self, index: int) -> float:
        """Start offset in seconds for the competition at position ``index``."""
        if index < len(self.start_offsets_seconds):
            return self.start_offsets_seconds[index]
        return 0.0
    
    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        seed = os.getenv("RANDOM_SEED")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "4000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            data_path=os.getenv("DATA_PATH", "data/competitions.json"),
            definitions_path=os.getenv(
                "DEFINITIONS_PATH",
                str(DEFAULT_DEFINITIONS_PATH),
            ),
            competition_duration_seconds=float(
                os.getenv("COMPETITION_DURATION_HOURS", "24")
            ) * HOUR_SECONDS,
            score_interval_seconds=float(os.getenv("SCORE_INTERVAL_SECONDS", "2.0")),
            random_seed=int(seed) if seed else None,
            outbound_queue_size=int(os.getenv("OUTBOUND_QUEUE_SIZE", "256")),
            ws_url=os.getenv("WS_URL", "ws://localhost:4000/ws"),
            api_url=os.getenv("API_URL", "http://localhost:4000"),
        )
