from __future__ import annotations

import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv

from .checker import check_site
from .logging_setup import install_json_logging
from .models import CheckRequest, CrewGuardReport
from .settings import CrewGuardSettings


# Load environment variables from the repo root .env (so CREWGUARD_* overrides work in local dev)
_HERE = Path(__file__).resolve()
_REPO_ROOT = _HERE.parents[1]
load_dotenv(_REPO_ROOT / ".env", override=False)


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    install_json_logging()
    yield


app = FastAPI(title="CrewGuard Crawl Risk Agent", version="0.1.0", lifespan=_lifespan)


def _cors_allow_origins() -> list[str]:
    raw = os.getenv("CREWGUARD_CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000"]
    return [o.strip() for o in raw.split(",") if o.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/check", response_model=CrewGuardReport)
def check_endpoint(req: CheckRequest):
    settings = CrewGuardSettings.from_env()
    try:
        return check_site(req.url, settings, robots_user_agent=req.user_agent)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
