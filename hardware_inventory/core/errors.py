from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class InventoryError(Exception):
    """Base class for failures raised by the inventory store."""

    code = "inventory_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InventoryValidationError(InventoryError, ValueError):
    """A save was refused: a required field is blank or the serial is taken."""

    code = "validation_error"


class ItemNotFoundError(InventoryError, LookupError):
    code = "not_found"

    def __init__(self, item_id: str) -> None:
        super().__init__("Hardware item not found", details={"id": item_id})
        self.item_id = item_id


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = HTTPStatus(exc.status_code).phrase
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def inventory_error_handler(request: Request, exc: InventoryError):
    if isinstance(exc, ItemNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InventoryValidationError):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return ErrorEnvelope(status_code=status_code, code=exc.code, message=exc.message, details=exc.details)
