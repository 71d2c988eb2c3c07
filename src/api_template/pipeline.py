"""Application pipeline helpers.

Each ``use_*`` function wires one concern into a FastAPI app. ``create_app``
in main.py calls them in order; tests call them on throwaway apps.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from api_template.cache import CachedStaticFiles
from api_template.config import STATIC_FILES_CACHE_PROFILE, Settings
from api_template.exceptions import ConflictError, DomainError, NotFoundError
from api_template.logging import get_logger
from api_template.middleware import ExceptionHandlerMiddleware
from api_template.problem_details import problem_response
from api_template.responses import ContentType
from api_template.schemas.problem import (
    VALIDATION_PROBLEM_DETAIL,
    VALIDATION_PROBLEM_TYPE,
    ProblemDetails,
    ValidationProblemDetails,
)

logger = get_logger(__name__)


def use_developer_error_pages(app: FastAPI) -> FastAPI:
    """Render Starlette's HTML traceback page for unexpected errors.

    The page shows source, locals and the full stack. It is unsafe to use
    in production.
    """
    app.debug = True
    return app


def use_static_files_with_cache_control(app: FastAPI, settings: Settings) -> FastAPI:
    """Serve ``settings.static_dir`` at "/" with the static_files cache profile.

    Mount this after every route: the mount matches any path, so routes
    registered later would be unreachable.
    """
    cache_profile = settings.cache_profiles.get(STATIC_FILES_CACHE_PROFILE)
    if cache_profile is None:
        raise RuntimeError(
            f"cache_profiles.{STATIC_FILES_CACHE_PROFILE} section is missing in settings"
        )
    if settings.static_dir is not None:
        app.mount(
            "/",
            CachedStaticFiles(directory=settings.static_dir, cache_profile=cache_profile),
            name="static",
        )
    return app


def use_custom_swagger_ui(app: FastAPI, settings: Settings) -> FastAPI:
    """Serve Swagger UI at "/" titled with the project name.

    Create the app with ``docs_url=None`` so FastAPI's own /docs page is not
    registered alongside this one.
    """
    openapi_url = app.openapi_url or "/openapi.json"

    @app.get("/", include_in_schema=False)
    async def swagger_ui() -> HTMLResponse:
        return get_swagger_ui_html(
            openapi_url=openapi_url,
            title=settings.project_name,
            swagger_ui_parameters={
                "displayRequestDuration": True,
                "urls": [{"url": openapi_url, "name": "Version 1"}],
            },
        )

    return app


def use_custom_exception_handler(app: FastAPI, settings: Settings) -> FastAPI:
    """Install the terminal problem+json exception handler.

    In development the problem ``detail`` carries the full exception text.
    """
    app.add_middleware(ExceptionHandlerMiddleware, diagnostic=settings.is_development)
    return app


def _validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group validation messages by field, dropping the body/query/path prefix."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        key = ".".join(loc[1:]) or ".".join(loc)
        errors.setdefault(key, []).append(error.get("msg", ""))
    return errors


def use_problem_details_handlers(app: FastAPI) -> FastAPI:
    """Answer validation and domain errors with problem+json bodies."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return 422 with messages grouped by field."""
        errors = _validation_errors(exc)
        count = sum(len(messages) for messages in errors.values())
        problem = ValidationProblemDetails(
            type=VALIDATION_PROBLEM_TYPE,
            title=f"{count} validation error{'' if count == 1 else 's'} occurred.",
            status=422,
            detail=VALIDATION_PROBLEM_DETAIL,
            instance=request.scope["path"],
            errors=errors,
        )
        return problem_response(problem)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        """Return 404 with the entity details."""
        return problem_response(
            ProblemDetails(
                title="Resource not found.",
                status=404,
                detail=exc.message,
                instance=request.scope["path"],
            )
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        """Return 409 when the request clashes with existing state."""
        logger.info("conflict", error=exc.message, path=request.scope["path"])
        return problem_response(
            ProblemDetails(
                title="Resource conflict.",
                status=409,
                detail=exc.message,
                instance=request.scope["path"],
            )
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Return 400 for generic domain-level violations."""
        logger.warning("domain_error", error=exc.message, path=request.scope["path"])
        return problem_response(
            ProblemDetails(
                title="Invalid request.",
                status=400,
                detail=exc.message,
                instance=request.scope["path"],
            )
        )

    return app


_PROBLEM_SCHEMAS = {ProblemDetails.__name__, ValidationProblemDetails.__name__}


def _move_problem_content(openapi_schema: dict[str, Any]) -> None:
    """Document problem responses under application/problem+json, as they are sent."""
    for path_item in openapi_schema.get("paths", {}).values():
        for operation in path_item.values():
            if not isinstance(operation, dict):
                continue
            for response in operation.get("responses", {}).values():
                content = response.get("content", {})
                ref = content.get(ContentType.JSON, {}).get("schema", {}).get("$ref", "")
                if ref.rsplit("/", 1)[-1] in _PROBLEM_SCHEMAS:
                    content[ContentType.PROBLEM_JSON] = content.pop(ContentType.JSON)


def use_problem_json_openapi(app: FastAPI) -> FastAPI:
    """Rewrite the generated OpenAPI document so problem models use their real media type."""
    generate = app.openapi

    def openapi() -> dict[str, Any]:
        if app.openapi_schema is None:
            _move_problem_content(generate())
        return app.openapi_schema  # type: ignore[return-value]

    app.openapi = openapi  # type: ignore[method-assign]
    return app
