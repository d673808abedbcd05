"""
Unit Tests for the Request Executor
Uses httpx.MockTransport to play the remote API
"""
import httpx
import pytest

from leadgen.domain.models.request_outcome import HttpStatusFailure, TransportFailure
from leadgen.domain.models.tenant import Tenant
from leadgen.infrastructure.api_client.errors import RequestFailure
from leadgen.infrastructure.api_client.executor import RequestExecutor
from leadgen.infrastructure.api_client.session_context import SessionContext


def make_executor(handler, session=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RequestExecutor("http://test/api/v1", session or SessionContext(), http_client=client)


class TestRequestExecutor:

    @pytest.mark.asyncio
    async def test_returns_json_body(self):
        def handler(request):
            assert request.url.path == "/api/v1/agents"
            assert request.url.params["public"] == "true"
            return httpx.Response(200, json=[{"id": "a1"}])

        executor = make_executor(handler)
        assert await executor.send("GET", "/agents", params={"public": "true"}) == [{"id": "a1"}]

    @pytest.mark.asyncio
    async def test_returns_text_for_non_json(self):
        executor = make_executor(lambda request: httpx.Response(200, text="pong"))
        assert await executor.send("GET", "/ping") == "pong"

    @pytest.mark.asyncio
    async def test_no_tenant_header_without_tenant_session(self):
        seen = {}

        def handler(request):
            seen["header"] = request.headers.get("X-Tenant-Id")
            return httpx.Response(200, json=[])

        await make_executor(handler).send("GET", "/records")
        assert seen["header"] is None

    @pytest.mark.asyncio
    async def test_attaches_tenant_header(self):
        session = SessionContext()
        session.sign_in_tenant(Tenant(id="tenant-a", name="Fredy", phone="+255714276111", company="Mbezi"))
        seen = {}

        def handler(request):
            seen["header"] = request.headers.get("X-Tenant-Id")
            return httpx.Response(200, json=[])

        await make_executor(handler, session).send("GET", "/records")
        assert seen["header"] == "tenant-a"

    @pytest.mark.asyncio
    async def test_decodes_error_body(self):
        def handler(request):
            return httpx.Response(400, json={
                "error": "Invalid agent",
                "message": "Agent not found",
                "code": "INVALID_AGENT",
            })

        with pytest.raises(RequestFailure) as exc_info:
            await make_executor(handler).send("POST", "/records", json={})

        assert exc_info.value.outcome == HttpStatusFailure(
            status=400, error="Invalid agent", message="Agent not found", code="INVALID_AGENT"
        )

    @pytest.mark.asyncio
    async def test_decodes_non_json_error(self):
        executor = make_executor(lambda request: httpx.Response(502, text="<html>bad gateway</html>"))

        with pytest.raises(RequestFailure) as exc_info:
            await executor.send("GET", "/agents")

        outcome = exc_info.value.outcome
        assert outcome.status == 502
        assert outcome.error == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_connect_error_is_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RequestFailure) as exc_info:
            await make_executor(handler).send("GET", "/agents")

        assert isinstance(exc_info.value.outcome, TransportFailure)
        assert exc_info.value.outcome.timed_out is False

    @pytest.mark.asyncio
    async def test_timeout_is_timed_out_transport_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(RequestFailure) as exc_info:
            await make_executor(handler).send("GET", "/agents")

        assert exc_info.value.outcome.timed_out is True

    def test_url_for(self):
        executor = RequestExecutor("http://test/api/v1/", SessionContext())
        assert executor.url_for("/agents") == "http://test/api/v1/agents"
        assert executor.url_for("agents/a1") == "http://test/api/v1/agents/a1"
        assert executor.url_for("https://other/x") == "https://other/x"
