"""
Run the API with uvicorn.

Usage:
    python -m backend.server
"""
from __future__ import annotations

import logging

import uvicorn

from .config import DEFAULT_SERVER_CONFIG, ServerConfig


def main(config: ServerConfig = DEFAULT_SERVER_CONFIG) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger(__name__).info("Starting server on %s:%d", config.host, config.port)
    uvicorn.run("backend.app:app", host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
