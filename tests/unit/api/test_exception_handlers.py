"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import AuthenticationError, AuthorizationError
from domain.services.errors import FieldViolation, ServiceError, ServiceErrorKind


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _get(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestServiceErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("kind", "status_code", "message"),
        [
            (ServiceErrorKind.NOT_FOUND, 404, "Resource not found"),
            (ServiceErrorKind.DUPLICATE, 409, "Resource already exists"),
            (
                ServiceErrorKind.UNAUTHORIZED,
                403,
                "You don't have permission to perform this action",
            ),
            (ServiceErrorKind.INTERNAL, 500, "An unexpected error occurred"),
        ],
    )
    async def test_kind_maps_to_status_and_message(
        self, kind: ServiceErrorKind, status_code: int, message: str
    ) -> None:
        app = _create_test_app()

        @app.get("/raise-service")
        async def _() -> None:
            raise ServiceError(kind, "GetProfileByID", "UserProfileService", "secret detail")

        response = await _get(app, "/raise-service")

        assert response.status_code == status_code
        body = response.json()
        assert body["status"] is False
        assert body["message"] == message
        assert "secret detail" not in response.text

    @pytest.mark.asyncio
    async def test_validation_error_lists_fields(self) -> None:
        app = _create_test_app()

        @app.get("/raise-validation")
        async def _() -> None:
            raise ServiceError.validation(
                "CreateProfile",
                "UserProfileService",
                [
                    FieldViolation("height", "Height must be between 100 and 250 cm"),
                    FieldViolation("name", "Name must be at least 2 characters long"),
                ],
            )

        response = await _get(app, "/raise-validation")

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["error"] == [
            {"field": "height", "message": "Height must be between 100 and 250 cm"},
            {"field": "name", "message": "Name must be at least 2 characters long"},
        ]


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_authentication_error_is_401(self) -> None:
        app = _create_test_app()

        @app.get("/raise-auth")
        async def _() -> None:
            raise AuthenticationError()

        response = await _get(app, "/raise-auth")

        assert response.status_code == 401
        body = response.json()
        assert body["status"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_authorization_error_is_403(self) -> None:
        app = _create_test_app()

        @app.get("/raise-forbidden")
        async def _() -> None:
            raise AuthorizationError()

        response = await _get(app, "/raise-forbidden")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_http_exception_returns_envelope(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=405, detail="Method Not Allowed")

        response = await _get(app, "/raise-http")

        assert response.status_code == 405
        assert response.json() == {"status": False, "message": "Method Not Allowed"}

    @pytest.mark.asyncio
    async def test_request_shape_error_is_400_with_fields(self) -> None:
        from pydantic import BaseModel

        app = _create_test_app()

        class Body(BaseModel):
            height: float

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"height": "tall"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid request body"
        assert [item["field"] for item in body["error"]] == ["height"]

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        app = _create_test_app()

        # Build a fake request with request.state.request_id
        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        exc = RuntimeError("password=hunter2")
        response = await handler(mock_request, exc)  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["message"] == "An unexpected error occurred"
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert body["error"]["request_id"] == "test-req-id"
        assert "hunter2" not in response.body.decode()
