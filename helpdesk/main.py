import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.api.router import api_router
from helpdesk.core.config import Settings, get_settings
from helpdesk.core.errors import register_exception_handlers
from helpdesk.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    logger.info(
        "Starting %s (%s) with API under %s",
        settings.app_name,
        settings.app_env,
        settings.api_prefix,
    )
    yield
    logger.info("Stopped %s", settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        debug=settings.app_debug,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)
    application.include_router(api_router, prefix=settings.api_prefix)

    @application.get("/")
    def root() -> dict[str, str]:
        return {"message": f"{settings.app_name} is running", "docs": "/docs"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("helpdesk.main:app", host="0.0.0.0", port=8000, reload=get_settings().app_debug)
