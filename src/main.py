import logging
import uvicorn
from typing import Any
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware

from src.core.logging import LoggingMiddleware, setup_logging, shutdown_logging
from src.newsfeed.jobs.key_usage_reset import schedule_key_usage_reset
from src.newsfeed.providers.registry import create_aggregator
from src.scheduler.scheduler_config import create_scheduler
from src.utils.config import settings
from src.app import IncludeAPIRouter, logger_instance


logger = logger_instance.get_logger(__name__)


def env_bool(value: str, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# lifespan (app lifecycle management, default is None).
def get_application(lifespan: Any = None):
    IS_PROD = settings.is_production

    _app = FastAPI(lifespan=lifespan,
                   title="Newsfeed Aggregator",
                   description="Multi-provider news aggregation with key rotation and priority fallback",
                   version=settings.API_VERSION,
                   # Disable docs & openapi when in production
                   docs_url=None if IS_PROD else "/docs",
                   redoc_url=None if IS_PROD else "/redoc",
                   openapi_url=None if IS_PROD else "/openapi.json",
                   )

    _app.include_router(IncludeAPIRouter())

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _app.add_middleware(LoggingMiddleware)

    return _app


# Manage the lifecycle of asynchronous applications.
# Perform actions when the application starts and shuts down
@asynccontextmanager
async def app_lifespan(app: FastAPI):

    # ----------------------------------------------------
    # PHASE 1: STARTUP LOGIC
    # ----------------------------------------------------
    setup_logging()
    logger.info('event=app-startup')

    aggregator = create_aggregator(settings)
    app.state.aggregator = aggregator

    configured = [
        p.provider_name.value for p in aggregator.providers if p.registration.keys
    ]
    if configured:
        logger.info(f"Providers with usable keys: {configured}")
    else:
        logger.warning("No provider has a usable API key; /news will answer 503")

    scheduler = create_scheduler()
    schedule_key_usage_reset(
        scheduler, aggregator.key_rotator, interval_minutes=settings.KEY_USAGE_SWEEP_MINUTES
    )
    scheduler.start()
    logger.info(f"Configured {len(scheduler.get_jobs())} background jobs and started scheduler")

    yield # Application START accepting requests HERE

    # ----------------------------------------------------
    # PHASE 2: SHUTDOWN LOGIC
    # ----------------------------------------------------
    logger.info("Shutting down scheduler...")
    scheduler.shutdown()

    await aggregator.aclose()

    logger.info('event=app-shutdown message="All connections are closed."')
    shutdown_logging()


# Create FastAPI application object
app = get_application(lifespan=app_lifespan)


@app.get('/')
async def docs_redirect():
    if settings.is_production:
        return {"message": "Service running"}
    return RedirectResponse(url='/docs')


class EndpointFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().find('/ping') == -1


if __name__ == '__main__':
    logging.getLogger("uvicorn.access").addFilter(EndpointFilter())

    uvicorn.run('src.main:app',
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        workers=settings.UVICORN_WORKERS,
        reload=env_bool(settings.UVICORN_RELOAD, False),
    )
