"""FastAPI application setup for the peak weather report service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .scheduler import start_report_scheduler
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="peak_report/main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the daily report timer with the app and stop it on shutdown."""
    logger.info("Starting Peak Report service...")
    app.state.scheduler_task = start_report_scheduler()

    yield

    logger.info("Shutting down Peak Report service...")
    task = getattr(app.state, "scheduler_task", None)
    if task is not None:
        task.cancel()


app = FastAPI(title="Peak Report", lifespan=lifespan)

app.include_router(api_router)
