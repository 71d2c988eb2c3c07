"""Minimal JSON response writer shared by the exception handlers."""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ContentType:
    JSON = "application/json"
    PROBLEM_JSON = "application/problem+json"


def write_json(
    obj: Any,
    status_code: int = 200,
    media_type: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Serialize ``obj`` as a UTF-8 JSON response.

    Pydantic models are dumped with ``exclude_none=True`` so absent optional
    fields never show up as explicit nulls.
    """
    content = obj.model_dump(mode="json", exclude_none=True) if isinstance(obj, BaseModel) else obj
    return JSONResponse(
        content=content,
        status_code=status_code,
        media_type=media_type or ContentType.JSON,
        headers=headers,
    )
