# storefront/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from storefront.api.routers import admin, discounts, health, orders, payments
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


async def _http_error(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _validation_error(request: Request, exc: RequestValidationError):
    # same {"error": ...} body as every other client error
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    logger.info(f"Rejected {request.method} {request.url.path}: {field} {message}")
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request: {field}: {message}" if field else f"Invalid request: {message}"},
    )


async def _unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Order Service",
        version="1.0.0",
    )

    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health.router)
    app.include_router(discounts.router)
    app.include_router(payments.router)
    app.include_router(orders.router)
    app.include_router(admin.router)

    return app
