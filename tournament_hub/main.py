import uvicorn
from fastapi import FastAPI

from tournament_hub.api.routes.chat import router as chat_router
from tournament_hub.api.routes.health import router as health_router
from tournament_hub.api.routes.tournaments import router as tournaments_router
from tournament_hub.api.routes.users import router as users_router
from tournament_hub.core.config import get_settings
from tournament_hub.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)

    app = FastAPI(
        title="Tournament Hub API",
        version="0.1.0",
        docs_url="/docs" if settings.app_env != "prod" else None,
        redoc_url="/redoc" if settings.app_env != "prod" else None,
    )
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(tournaments_router)
    app.include_router(chat_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "tournament_hub.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
