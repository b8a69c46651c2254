import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from jose import JWTError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.middleware.error_handler import (
    handle_app_error,
    handle_database_error,
    handle_generic_error,
    handle_http_exception,
    handle_integrity_error,
    handle_jwt_error,
    handle_no_result,
    handle_validation_error,
)
from app.api.middleware.logging import RequestLoggingMiddleware, configure_logging
from app.api.routes import router as api_router
from app.config import settings
from app.core.exceptions import AppError
from app.db.session import async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(
        "Application starting",
        extra={"environment": settings.app_env, "smtp_configured": bool(settings.smtp_user)},
    )
    yield
    # Shutdown
    await async_engine.dispose()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="EcoDescarte API",
        description="User registration, authentication and profile management",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )

    # Register exception handlers (lookup follows the exception's MRO,
    # so subclasses registered here win over their bases)
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(NoResultFound, handle_no_result)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(JWTError, handle_jwt_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
