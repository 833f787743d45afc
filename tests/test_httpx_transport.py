"""HttpxTransport against an in-process FastAPI app."""

from fastapi import APIRouter, FastAPI, Request as HttpRequest
from fastapi.responses import JSONResponse, PlainTextResponse
import httpx
import pytest

from cartflow import submit as X


def build_app():
    app = FastAPI()
    api = APIRouter(prefix="/api")
    seen = []

    @api.post("/echo", status_code=201)
    async def echo(request: HttpRequest):
        seen.append(dict(request.headers))
        return {"success": True, "data": await request.json()}

    @api.get("/limited")
    async def limited():
        return JSONResponse(
            {"success": False, "message": "Too many requests"},
            status_code=429,
            headers={"Retry-After": "7"},
        )

    @api.get("/plain")
    async def plain():
        return PlainTextResponse("upstream exploded", status_code=502)

    app.include_router(api)
    app.state.seen = seen
    return app


@pytest.fixture
def app():
    return build_app()


@pytest.fixture
async def transport(app):
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver/api")
    yield X.HttpxTransport(http)
    await http.aclose()


async def test_json_round_trip(app, transport):
    result = await transport.send(
        X.Request("POST", "/echo", {"total": 20.0}),
        {"Idempotency-Key": "tmp-1", "Authorization": "Bearer t"},
    )

    response = result.value
    assert response.status == 201
    assert response.body == {"success": True, "data": {"total": 20.0}}
    assert app.state.seen[0]["idempotency-key"] == "tmp-1"
    assert app.state.seen[0]["authorization"] == "Bearer t"


async def test_headers_are_readable(transport):
    response = (await transport.send(X.Request("GET", "/limited"), {})).value
    assert response.status == 429
    assert response.header("Retry-After") == "7"


async def test_non_json_body_is_text(transport):
    response = (await transport.send(X.Request("GET", "/plain"), {})).value
    assert response.status == 502
    assert response.body == "upstream exploded"


async def test_unknown_route_is_a_response_not_a_failure(transport):
    response = (await transport.send(X.Request("GET", "/nowhere"), {})).value
    assert response.status == 404


def failing_transport(exc):
    def handler(request):
        raise exc

    return X.HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://x"))


async def test_timeout_becomes_timeout_failure():
    transport = failing_transport(httpx.ReadTimeout("too slow"))
    failure = (await transport.send(X.Request("GET", "/"), {})).value
    assert isinstance(failure, X.TransportFailure)
    assert failure.timeout


async def test_connection_error_becomes_network_failure():
    transport = failing_transport(httpx.ConnectError("refused"))
    failure = (await transport.send(X.Request("GET", "/"), {})).value
    assert isinstance(failure, X.TransportFailure)
    assert not failure.timeout


async def test_client_retries_through_real_stack(app, transport, sleep):
    client = X.SubmissionClient(transport, X.RetryPolicy().with_max_retries(1), sleep=sleep)
    result = await client.submit(X.Request("GET", "/limited"))
    assert result.value.kind is X.ErrorKind.RATE_LIMITED
    assert sleep.delays == [7.0]
