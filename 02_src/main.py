"""Main entry point for the hotel bot."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from hotelbot.api import create_fastapi_app
from hotelbot.config import env_flag
from hotelbot.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging(to_file=env_flag("LOG_TO_FILE", True))

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", os.getenv("PORT", "3978")))

    app = create_fastapi_app()

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
