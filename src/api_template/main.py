from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api_template.config import Settings, settings
from api_template.logging import get_logger
from api_template.middleware import RequestIDMiddleware, RequestLimitsMiddleware
from api_template.pipeline import (
    use_custom_exception_handler,
    use_custom_swagger_ui,
    use_developer_error_pages,
    use_problem_details_handlers,
    use_problem_json_openapi,
    use_static_files_with_cache_control,
)
from api_template.routers.widget import router as widget_router
from api_template.services.widget import WidgetStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager: code before yield runs on startup, after yield on shutdown."""
    logger.info("application_started", title=app.title, debug=app.debug)
    yield
    logger.info("application_stopped", title=app.title)


def create_app(settings: Settings) -> FastAPI:
    """Build the application and its request pipeline.

    Middleware added last runs first, so the resulting order is:
    RequestIDMiddleware -> error handling -> RequestLimitsMiddleware -> routes.
    """
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.widgets = WidgetStore()

    app.add_middleware(
        RequestLimitsMiddleware,
        max_request_line_size=settings.max_request_line_size,
        max_request_header_count=settings.max_request_header_count,
        max_request_headers_total_size=settings.max_request_headers_total_size,
    )
    if settings.developer_error_pages:
        use_developer_error_pages(app)
    else:
        use_custom_exception_handler(app, settings)
    app.add_middleware(RequestIDMiddleware)

    use_problem_details_handlers(app)
    use_problem_json_openapi(app)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check used by load balancers and container orchestrators."""
        return {"status": "ok"}

    app.include_router(widget_router)
    use_custom_swagger_ui(app, settings)
    # Must stay last: the static mount at "/" shadows anything registered after it
    use_static_files_with_cache_control(app, settings)
    return app


app = create_app(settings)
