"""Main entry point for the operation registry host."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from operation_registry.api import create_fastapi_app
from operation_registry.config import AgentConfig
from operation_registry.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    setup_logging()

    # Get configuration from environment
    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    # Fails before any network call if identifiers are missing
    config = AgentConfig.from_env()

    app = create_fastapi_app(config)

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
