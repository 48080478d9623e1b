from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, DEBUG, LOG_LEVEL
from .db import init_db
from .routers import catalog, engine, export, warbands
from .services.ruleset import default_ruleset

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Space Weirdos Warband Builder", debug=DEBUG)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    init_db()
    ruleset = default_ruleset()
    logger.info("Application started with ruleset %s", ruleset.name)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(export.router)
app.include_router(warbands.router)
app.include_router(engine.router)
app.include_router(catalog.router)
