from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from car_rental.config import Settings, get_settings
from car_rental.database import models  # noqa: F401  registers the tables on Base
from car_rental.database.init import Base, create_db_engine, create_session_factory
from car_rental.exceptions import InvalidRequest
from car_rental.middleware.tenant_gate import TenantGateMiddleware
from car_rental.responses.error import error_response, http_error
from car_rental.routes import (
    auth_routes,
    booking_routes,
    car_routes,
    dashboard_routes,
    tenant_routes,
    user_routes,
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=app.state.engine)
    logger.info("Database ready")
    yield
    app.state.engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Car Rental API", lifespan=lifespan)

    # The store handle lives on the application, never in a module global
    app.state.settings = settings
    app.state.engine = create_db_engine(settings.DATABASE_URL)
    app.state.session_factory = create_session_factory(app.state.engine)

    app.add_middleware(TenantGateMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_routes.router)
    app.include_router(auth_routes.page_router)
    app.include_router(tenant_routes.router)
    app.include_router(car_routes.router)
    app.include_router(booking_routes.router)
    app.include_router(user_routes.router)
    app.include_router(dashboard_routes.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = InvalidRequest.from_errors(exc.errors())
        logger.info("Rejected request to %s: %s", request.url.path, error.message)
        return error_response(error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = http_error(exc.status_code, exc.detail)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.get("/")
    def read_root(request: Request):
        return {
            "name": "Car Rental API",
            "version": "1.0.0",
            "tenant": getattr(request.state, "tenant", None),
        }

    return app


def main():
    settings = get_settings()
    uvicorn.run(
        "car_rental.main:create_app",
        factory=True,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
