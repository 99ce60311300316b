"""
Test suite for correlation ID propagation and logging setup.

System role: Verification of request tracing
"""

import asyncio
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ai_mentor.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ai_mentor.observability.logger import CorrelationIdFilter, configure_logging
from ai_mentor.observability.middleware import (
    CORRELATION_HEADER,
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)


@pytest.fixture
def app() -> FastAPI:
    """App exposing the correlation id seen by the handler."""
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    @app.get("/ping")
    async def ping() -> dict:
        return {"correlation_id": get_correlation_id()}

    return app


class TestCorrelationContext:
    """Test suite for the correlation context variable."""

    def test_set_generates_id(self) -> None:
        """Test a fresh id is minted when none is given."""
        # Act
        value = set_correlation_id()

        # Assert
        assert value
        assert get_correlation_id() == value
        clear_correlation_id()
        assert get_correlation_id() == ""

    @pytest.mark.asyncio
    async def test_tasks_inherit_id(self) -> None:
        """Test background tasks see the id of the request that created them."""
        # Arrange
        set_correlation_id("req-123")

        # Act
        seen = await asyncio.create_task(self._read())

        # Assert
        assert seen == "req-123"
        clear_correlation_id()

    @staticmethod
    async def _read() -> str:
        return get_correlation_id()


class TestCorrelationMiddleware:
    """Test suite for CorrelationMiddleware."""

    def test_incoming_id_is_used_and_echoed(self, app: FastAPI) -> None:
        # Arrange
        client = TestClient(app)

        # Act
        response = client.get("/ping", headers={CORRELATION_HEADER: "abc-1"})

        # Assert
        assert response.json() == {"correlation_id": "abc-1"}
        assert response.headers[CORRELATION_HEADER] == "abc-1"

    def test_id_minted_when_missing(self, app: FastAPI) -> None:
        # Arrange
        client = TestClient(app)

        # Act
        response = client.get("/ping")

        # Assert
        minted = response.headers[CORRELATION_HEADER]
        assert minted
        assert response.json()["correlation_id"] == minted


class TestLoggingSetup:
    """Test suite for configure_logging()."""

    def test_filter_defaults_to_dash(self) -> None:
        """Test records outside a request get a placeholder id."""
        # Arrange
        clear_correlation_id()
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)

        # Act
        CorrelationIdFilter().filter(record)

        # Assert
        assert record.correlation_id == "-"

    def test_configure_replaces_root_handlers(self) -> None:
        """Test repeated configuration leaves a single handler."""
        # Arrange
        root = logging.getLogger()
        previous = root.handlers[:]
        previous_level = root.level

        try:
            # Act
            configure_logging("debug")
            configure_logging("warning")

            # Assert
            assert len(root.handlers) == 1
            assert root.level == logging.WARNING
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
            for handler in previous:
                root.addHandler(handler)
            root.setLevel(previous_level)
