"""
Chat server entry point.
"""
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import get_config, get_provider_catalog
from core.logging_config import setup_logging
from llm import PydanticAIChatModel
from server import app, set_chat_model

# Initialize logging before anything else
setup_logging()
logger = logging.getLogger(__name__)

# Constants
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration, populate the provider catalog and install the chat model."""
    config = get_config()
    logger.info("Starting chat server")
    logger.info(
        "Default model: %s/%s", config.chat.default_provider, config.chat.default_model
    )

    catalog = get_provider_catalog()
    catalog.initialize(config.model_providers, config.chat.default_provider)
    set_chat_model(PydanticAIChatModel())
    logger.info("Chat model ready with %d providers", len(catalog.list_providers()))

    yield

    set_chat_model(None)
    logger.info("Chat server stopped")


app.router.lifespan_context = lifespan


def main() -> None:
    """Start the chat server."""
    host = os.environ.get("HOST", DEFAULT_HOST)
    port = int(os.environ.get("PORT", str(DEFAULT_PORT)))

    logger.info("Server listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
