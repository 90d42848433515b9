# shiprate/api/errors.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from shiprate.services.shipping_rates.errors import ShippingError

logger = logging.getLogger("shiprate.api")

REQUEST_INVALID_CODE = 40000
INTERNAL_ERROR_CODE = 50000


def _envelope(status_code: int, code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"code": code, "message": message, "data": data}),
    )


def error_data(exc: ShippingError) -> Dict[str, Any]:
    out: Dict[str, Any] = {"error": exc.error}
    out.update(exc.context)
    return out


async def shipping_error_handler(_req: Request, exc: ShippingError) -> JSONResponse:
    return _envelope(exc.status, exc.code, exc.message, error_data(exc))


async def validation_error_handler(_req: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(
        422,
        REQUEST_INVALID_CODE,
        "request validation failed",
        {"error": "REQUEST_INVALID", "errors": [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]},
    )


async def http_error_handler(_req: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, exc.status_code * 100, str(exc.detail))


async def unhandled_error_handler(_req: Request, exc: Exception) -> JSONResponse:
    logger.exception("UNHANDLED_EXC: %s", exc)
    return _envelope(500, INTERNAL_ERROR_CODE, "INTERNAL_ERROR")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShippingError, shipping_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
