import logging
import os
import subprocess
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arenabook.database import init_db
from arenabook.routes import courts, occupancy, reservations
from arenabook.settings import CORS_ORIGINS, LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _git_short_hash() -> Optional[str]:
    repo_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=repo_dir,
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git unavailable for build hash: %s", exc)
        return None
    return result.stdout.strip() if result.returncode == 0 else None


def resolve_build_hash() -> str:
    """BUILD_HASH from the environment, else the git HEAD, else a start timestamp."""
    return os.getenv("BUILD_HASH") or _git_short_hash() or datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = resolve_build_hash()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Arena Booking API started (build %s, %d routes)", BUILD_HASH, len(app.routes))
    yield


app = FastAPI(title="Arena Booking API", lifespan=lifespan)

_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if CORS_ORIGINS:
    _cors_origins.extend(o.strip() for o in CORS_ORIGINS.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(courts.router, prefix="/api", tags=["courts"])
app.include_router(reservations.router, prefix="/api", tags=["reservations"])
app.include_router(occupancy.router, prefix="/api", tags=["occupancy"])


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Arena Booking API", "build_hash": BUILD_HASH, "status": "healthy"}
