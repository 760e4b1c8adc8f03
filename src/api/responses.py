"""
Uniform JSON envelope for the claims API.

    {"status": "OK", "statusCode": 200, "message": "...", "data": ..., "timestamp": "...", "errors": [...]}

Members that are None are omitted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def status_name(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "UNKNOWN"


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str
    status_code: int
    message: Optional[str] = None
    data: Any = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    errors: Optional[List[FieldError]] = None


def envelope(
    status_code: int,
    message: Optional[str] = None,
    data: Any = None,
    errors: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ApiResponse(
        status=status_name(status_code),
        status_code=status_code,
        message=message,
        data=jsonable_encoder(data) if data is not None else None,
        errors=[FieldError(field=k, message=v) for k, v in errors.items()] if errors else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def ok(data: Any = None, message: str = "Success") -> JSONResponse:
    return envelope(200, message, data)


def created(data: Any = None, message: str = "Created successfully") -> JSONResponse:
    return envelope(201, message, data)


def error(status_code: int, message: str, errors: Optional[Dict[str, str]] = None) -> JSONResponse:
    return envelope(status_code, message, errors=errors)
