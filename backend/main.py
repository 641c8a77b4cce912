"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from habit_helper.core.config import settings
from habit_helper.routes import habits, health, chat, push
from habit_helper.services.scheduler import start_scheduler, stop_scheduler
from habit_helper.services.realtime import start_change_feed, stop_change_feed

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Silence noisy third-party loggers
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)
logging.getLogger('apscheduler.scheduler').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors.default').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup/shutdown events
    """
    # Startup
    try:
        start_scheduler()
        logger.info("✓ Status scheduler started")
    except Exception as e:
        logger.warning(f"Could not start scheduler: {e}")

    if settings.REALTIME_ENABLED:
        try:
            await start_change_feed()
            logger.info("✓ Realtime change feed started")
        except Exception as e:
            logger.warning(f"Could not start change feed: {e}")

    yield

    # Shutdown
    try:
        await stop_change_feed()
    except Exception as e:
        logger.warning(f"Error stopping change feed: {e}")

    try:
        stop_scheduler()
        logger.info("✓ Status scheduler stopped")
    except Exception as e:
        logger.warning(f"Error stopping scheduler: {e}")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Habit Helper API",
    version="0.1.0",
    lifespan=lifespan
)

# Register routes
app.include_router(health.router)
app.include_router(habits.router)
app.include_router(chat.router)
app.include_router(push.router)
