# cardreco/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from cardreco.db import mongo
from cardreco.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Catalog and order history live in Mongo: without it nothing can be served
    if settings.MONGO_URI:
        try:
            await mongo.connect()
            logger.info("Mongo connected db=%s", settings.MONGO_DB)
        except Exception as e:
            logger.error("Mongo connection failed: %s", e)
            raise
    else:
        logger.warning("No MONGO_URI provided, skipping Mongo connection")

    if not settings.llm_enabled:
        logger.warning("No OPENAI_API_KEY provided, generative paths will use deterministic fallbacks")

    # Application runs
    yield

    # --- Shutdown ---
    if settings.MONGO_URI:
        await mongo.disconnect()
        logger.info("Mongo disconnected")
