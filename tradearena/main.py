"""Application entry point."""

import logging
import uvicorn

from tradearena.config import Config
from tradearena.app import create_app

logger = logging.getLogger(__name__)


def main():
    """Run the API server with the score mutator and live feed."""
    config = Config.from_env()
    
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(
        f"Serving competitions from {config.data_path} on {config.host}:{config.port}, "
        f"scores every {config.score_interval_seconds}s"
    )
    
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
