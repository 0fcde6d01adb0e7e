# cardreco/api/v1/routers/health.py
import time
import subprocess
from fastapi import APIRouter, Depends
from cardreco.api.deps import settings_dep
from cardreco.core.config import Settings
from cardreco.db import mongo

router = APIRouter(tags=["health"])
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


@router.get("/health")
async def health(settings: Settings = Depends(settings_dep)):
    """
    Tolerant health check:
    - ping Mongo via Motor (async)
    - report whether a text completer is configured (generation is optional)
    """
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA or _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
    }

    # --- Mongo ---
    try:
        db = mongo.get_db()
        await db.command("ping")
        checks["mongodb"] = "ok"
    except Exception as e:
        checks["mongodb"] = f"error: {e}"

    # --- Completer: key presence only, never blocks "ok"
    checks["completer_configured"] = settings.llm_enabled

    status = "ok" if checks["mongodb"] == "ok" else "error"
    return {"status": status, "checks": checks, "timestamp": int(time.time())}
