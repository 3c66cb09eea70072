from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from string_analyzer import __version__
from string_analyzer.api.routes import router
from string_analyzer.config import Settings, configure_logging, load_settings
from string_analyzer.database import Database
from string_analyzer.errors import StringServiceError

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. The database is opened on startup and closed on shutdown."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database...")
        database = Database(settings.database_url)
        database.init()
        app.state.database = database
        logger.info("Database initialized successfully")
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(
        title="String Analyzer Service",
        description="Analyze and store string properties",
        version=__version__,
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(router, tags=["strings"])

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": "String Analyzer Service",
            "version": __version__,
            "endpoints": {
                "POST /strings": "Analyze and store a string",
                "GET /strings/{string_value}": "Get specific string analysis",
                "GET /strings": "Get all strings with optional filters",
                "GET /strings/filter-by-natural-language": "Filter using natural language",
                "DELETE /strings/{string_value}": "Delete a string",
                "GET /docs": "API documentation"
            }
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    register_exception_handlers(app)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StringServiceError)
    async def string_service_exception_handler(request: Request, exc: StringServiceError):
        if exc.status_code < 500:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Validation error handler
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = {}
        for error in exc.errors():
            field = error['loc'][-1] if error['loc'] else "body"
            errors[str(field)] = error['msg']

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Validation failed",
                "details": errors
            }
        )

    # HTTPException handler (unknown routes, wrong methods)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict) and 'error' in exc.detail:
            return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers
        )

    # Generic error handler
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error"
            }
        )


app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run("string_analyzer.main:app", host=settings.host, port=settings.port)
