# app/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.logging_config import configure_logging
from app import models  # noqa: F401  registers all tables on Base.metadata
from app.routes import health
from app.routes.likes import router as likes_router
from app.routes.sync import router as sync_router
from app.scheduler import start_scheduler, stop_scheduler

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await start_scheduler()
    try:
        yield  # This is where the app runs
    finally:
        await stop_scheduler()


app = FastAPI(
    title="Social Sync",
    lifespan=lifespan
)

app.include_router(health.router)
app.include_router(likes_router)
app.include_router(sync_router)
