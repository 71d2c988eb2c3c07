"""Integration tests for the terminal problem+json exception handler."""

from collections.abc import Awaitable, Callable

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from httpx import ASGITransport, AsyncClient
from starlette.middleware.base import BaseHTTPMiddleware

from api_template.main import create_app
from api_template.pipeline import use_custom_exception_handler
from tests.factories import add_failing_routes, make_settings


@pytest.mark.asyncio
async def test_unexpected_error_returns_generic_problem(client: AsyncClient) -> None:
    resp = await client.get("/boom")
    assert resp.status_code == 500
    assert resp.headers["content-type"] == "application/problem+json"
    assert resp.json() == {
        "type": "/",
        "title": "An unexpected error occurred.",
        "status": 500,
        "instance": "/boom",
    }


@pytest.mark.asyncio
async def test_null_attribute_error_leaks_nothing(client: AsyncClient) -> None:
    resp = await client.get("/none")
    assert resp.status_code == 500
    assert "detail" not in resp.json()
    assert "NoneType" not in resp.text


@pytest.mark.asyncio
async def test_malformed_request_from_route(client: AsyncClient) -> None:
    resp = await client.get("/api/orders")
    assert resp.status_code == 400
    assert resp.headers["content-type"] == "application/problem+json"
    assert resp.json() == {
        "type": "/",
        "title": "Invalid request.",
        "status": 400,
        "detail": "Header too long",
        "instance": "/api/orders",
    }


@pytest.mark.asyncio
async def test_unexpected_error_in_service_keeps_request_path(
    app: FastAPI, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def explode(widget_id: int) -> None:
        raise ZeroDivisionError("division by zero")

    monkeypatch.setattr(app.state.widgets, "get", explode)

    resp = await client.get("/api/widgets/5")
    assert resp.json() == {
        "type": "/",
        "title": "An unexpected error occurred.",
        "status": 500,
        "instance": "/api/widgets/5",
    }


@pytest.mark.asyncio
async def test_error_response_carries_request_id(client: AsyncClient) -> None:
    resp = await client.get("/boom", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 500
    assert resp.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_route_http_exception_is_left_to_fastapi(client: AsyncClient) -> None:
    resp = await client.get("/teapot")
    assert resp.status_code == 418
    assert resp.json() == {"detail": "I'm a teapot"}


@pytest.mark.asyncio
async def test_domain_error_returns_problem(client: AsyncClient) -> None:
    resp = await client.get("/domain")
    assert resp.status_code == 400
    assert resp.headers["content-type"] == "application/problem+json"
    assert resp.json()["detail"] == "Quantity cannot be negative"
    assert resp.json()["instance"] == "/domain"


@pytest.mark.asyncio
async def test_diagnostic_mode_includes_exception_description() -> None:
    app = add_failing_routes(create_app(make_settings(environment="development")))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/boom")

    body = resp.json()
    assert resp.status_code == 500
    assert body["title"] == "An unexpected error occurred."
    assert "RuntimeError: boom" in body["detail"]
    assert "Traceback" in body["detail"]


@pytest.mark.asyncio
async def test_diagnostic_mode_keeps_malformed_detail_as_message() -> None:
    app = add_failing_routes(create_app(make_settings(environment="development")))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/api/orders")

    assert resp.json()["detail"] == "Header too long"


@pytest.mark.asyncio
async def test_developer_error_pages_replace_problem_responses() -> None:
    app = add_failing_routes(
        create_app(make_settings(environment="development", developer_error_pages=True))
    )

    # Starlette re-raises after rendering the debug page
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/boom", headers={"Accept": "text/html"})

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("text/html")
    assert "RuntimeError" in resp.text


@pytest.mark.asyncio
async def test_instance_keeps_encoded_question_mark(client: AsyncClient) -> None:
    resp = await client.get("/api/a%3Fb")
    assert resp.status_code == 500
    assert resp.json()["instance"] == "/api/a?b"


@pytest.mark.asyncio
async def test_instance_keeps_encoded_hash(client: AsyncClient) -> None:
    resp = await client.get("/api/a%23b")
    assert resp.json()["instance"] == "/api/a#b"


@pytest.mark.asyncio
async def test_validation_problem_instance_keeps_encoded_path(client: AsyncClient) -> None:
    resp = await client.get("/api/widgets/a%3Fb")
    assert resp.status_code == 422
    assert resp.json()["instance"] == "/api/widgets/a?b"


class _RejectLargeUploads(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.headers.get("X-Upload-Size") == "huge":
            raise HTTPException(status_code=413, detail="Payload too large")
        return await call_next(request)


@pytest.mark.asyncio
async def test_http_exception_from_middleware_is_invalid_request() -> None:
    app = FastAPI()
    app.add_middleware(_RejectLargeUploads)
    use_custom_exception_handler(app, make_settings())

    @app.post("/upload")
    async def upload() -> dict[str, str]:
        return {"status": "stored"}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        rejected = await client.post("/upload", headers={"X-Upload-Size": "huge"})
        accepted = await client.post("/upload")

    assert rejected.status_code == 413
    assert rejected.headers["content-type"] == "application/problem+json"
    assert rejected.json() == {
        "type": "/",
        "title": "Invalid request.",
        "status": 413,
        "detail": "Payload too large",
        "instance": "/upload",
    }
    assert accepted.json() == {"status": "stored"}
