from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from cardreco.core.config import get_settings
from cardreco.core.lifespan import lifespan
from cardreco.api.v1.routers.health import router as health_router
from cardreco.api.v1.routers.recommendations import router as recommendations_router
from cardreco.api.v1.routers.chat import router as chat_router
from cardreco.core.logging import configure_logging, resolve_level
from cardreco.domain.errors import CollaboratorUnavailable

from fastapi.middleware.cors import CORSMiddleware
import logging

settings = get_settings()
configure_logging(level=resolve_level(settings.LOG_LEVEL, settings.DEBUG), app_name=settings.APP_NAME)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://admin.example.com"
allowed_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if allowed_origins else ["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# ------- Errors -------
@app.exception_handler(CollaboratorUnavailable)
async def collaborator_unavailable_handler(request: Request, exc: CollaboratorUnavailable):
    logger.error("Collaborator unavailable path=%s err=%s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": f"{exc.collaborator} unavailable, retry later"},
        headers={"Retry-After": "5"},
    )


# ------- Routes -------
app.include_router(health_router)
app.include_router(recommendations_router, prefix=settings.api_prefix)
app.include_router(chat_router, prefix=settings.api_prefix)
