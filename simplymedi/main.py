"""
SimplyMedi - FastAPI Application

Language service for the SimplyMedi patient portal: supported languages,
translation of text and UI strings, language detection, simplification of
medical text and per-user language preferences.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from simplymedi.config import settings
from simplymedi.api.routes import router, api_router
from simplymedi.api.middleware import (
    SessionMiddleware,
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    setup_rate_limiting
)
from simplymedi.services.translation_service import get_translation_service
from simplymedi.utils.logger import get_logger, configure_logging

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    configure_logging(
        log_level=settings.log_level,
        json_format=not settings.debug
    )

    service = get_translation_service()
    logger.info(
        "Starting SimplyMedi",
        version=settings.app_version,
        debug=settings.debug,
        translation_provider=service.provider
    )

    yield

    logger.info("Shutting down SimplyMedi")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## SimplyMedi Language Service

Multilingual support for the SimplyMedi patient portal.

### Endpoints

| Endpoint | Method | Description |
|----------|--------|-------------|
| `/api/languages/supported` | GET | Supported language catalog |
| `/api/languages/translate` | POST | Translate text |
| `/api/languages/translate-ui` | POST | Translate a UI string |
| `/api/languages/translate-batch` | POST | Translate several UI strings |
| `/api/languages/detect` | POST | Detect the language of a text |
| `/api/languages/simplify` | POST | Simplify medical text |
| `/api/languages/formatting-rules/{language}` | GET | Locale formatting rules |
| `/api/users/language-preferences` | GET/PATCH | Caller's language preferences |
| `/health` | GET | Health check |

Simplified text is informational and never replaces a doctor.
        """,
        version=settings.app_version,
        lifespan=lifespan,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Middleware (last added is outermost)
    app.add_middleware(SessionMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_rate_limiting(app)

    app.include_router(router, tags=["System"])
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


# Run with: uvicorn simplymedi.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "simplymedi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
