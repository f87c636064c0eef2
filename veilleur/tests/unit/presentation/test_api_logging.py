"""
Tests for the /api request logging middleware.
"""

import logging

import httpx

from veilleur.presentation.api.middleware import format_api_log_line


class TestFormatApiLogLine:
    """Unit tests for format_api_log_line()."""

    def test_without_payload(self):
        """Test the base line format."""
        assert format_api_log_line("GET", "/api/items", 200, 12) == "GET /api/items 200 in 12ms"

    def test_with_payload(self):
        """Test JSON payload is appended compactly."""
        line = format_api_log_line("POST", "/api/x", 201, 3, {"ok": True})

        assert line == 'POST /api/x 201 in 3ms :: {"ok":true}'

    def test_empty_payload_kept(self):
        """Test an empty JSON object is still logged."""
        assert format_api_log_line("GET", "/api/x", 200, 1, {}).endswith(":: {}")

    def test_truncated_to_max_length(self):
        """Test long lines are cut to 80 characters ending in an ellipsis."""
        line = format_api_log_line("GET", "/api/items", 200, 5, {"items": list(range(100))})

        assert len(line) == 80
        assert line.endswith("…")
        assert line.startswith("GET /api/items 200 in 5ms :: {")

    def test_exact_length_not_truncated(self):
        """Test a line of exactly max_length is left alone."""
        line = format_api_log_line("GET", "/api/x", 200, 1)

        assert format_api_log_line("GET", "/api/x", 200, 1, max_length=len(line)) == line


class TestApiLoggingMiddleware:
    """Integration of ApiLoggingMiddleware with the app."""

    async def test_logs_api_requests_only(self, container, caplog):
        """Test /api requests are logged and others are not."""
        app = container.app

        @app.get("/api/items")
        async def items():
            return {"items": [1, 2]}

        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        with caplog.at_level(logging.INFO, logger="veilleur.api"):
            async with httpx.AsyncClient(transport=transport, base_url="http://veilleur") as client:
                response = await client.get("/api/items")
                await client.get("/health")

        lines = [r.getMessage() for r in caplog.records if r.name == "veilleur.api"]

        assert response.json() == {"items": [1, 2]}
        assert len(lines) == 1
        assert lines[0].startswith("GET /api/items 200 in ")
        assert lines[0].endswith(':: {"items":[1,2]}')

    async def test_body_preserved(self, container):
        """Test buffering the body keeps headers and content intact."""
        app = container.app

        @app.get("/api/cookie")
        async def cookie():
            from fastapi.responses import JSONResponse

            response = JSONResponse({"a": 1})
            response.set_cookie("one", "1")
            response.set_cookie("two", "2")
            return response

        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://veilleur") as client:
            response = await client.get("/api/cookie")

        assert response.json() == {"a": 1}
        assert len(response.headers.get_list("set-cookie")) == 2
