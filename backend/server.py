from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from roomrates import config
from roomrates.db import close_mongo, connect_mongo
from roomrates.exception_handlers import register_exception_handlers
from roomrates.routers.inventory import router as inventory_router
from roomrates.routers.quotes import router as quotes_router

ROOT_DIR = Path(__file__).parent

# Load .env only if exists (development fallback)
env_path = ROOT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("roomrates")

app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get("CORS_ORIGINS", ",".join(config.CORS_ORIGINS)).split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers (/api prefix is on each router)
app.include_router(quotes_router)
if config.ENABLE_INVENTORY_REPORTS:
    app.include_router(inventory_router)


@app.get(f"{config.API_PREFIX}/health")
async def health() -> dict:
    return {"status": "ok", "version": config.APP_VERSION}


@app.on_event("startup")
async def _startup() -> None:
    await connect_mongo()
    logger.info("Startup complete")


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_mongo()
    logger.info("Shutdown complete")
