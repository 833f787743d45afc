"""SubmissionClient against a scripted transport."""

import asyncio

from kungfu import Ok, Error
import pytest

from cartflow import submit as X


def receipt_request(**kw):
    return X.Request("POST", "/receipts", {"total": 20.0}, **kw)


@pytest.fixture
def make_client(sleep):
    def factory(*script, policy=None, hold=None, **kw):
        transport = X.ScriptedTransport(*script, hold=hold)
        return X.SubmissionClient(transport, policy, sleep=sleep, **kw), transport
    return factory


class TestRetries:
    async def test_three_server_errors_then_success(self, make_client, sleep):
        client, transport = make_client(500, 500, 500, 200)

        result = await client.submit(receipt_request())

        assert isinstance(result, Ok)
        assert result.value.attempts == 4
        assert transport.attempts == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    async def test_exhausted_server_errors_are_transient(self, make_client, sleep):
        client, transport = make_client(500, 502, 503, 504, 200)

        result = await client.submit(receipt_request())

        assert isinstance(result, Error)
        assert result.value.kind is X.ErrorKind.TRANSIENT
        assert result.value.attempts == 4
        assert transport.attempts == 4
        assert len(sleep.delays) == 3

    async def test_timeout_is_retried(self, make_client):
        client, transport = make_client(X.TransportFailure("read timeout", timeout=True), 201)
        result = await client.submit(receipt_request())
        assert result.value.status == 201
        assert transport.attempts == 2

    async def test_request_timeout_status_is_retried(self, make_client, sleep):
        client, transport = make_client(408, 200)

        result = await client.submit(receipt_request())

        assert isinstance(result, Ok)
        assert result.value.attempts == 2
        assert transport.attempts == 2
        assert sleep.delays == [1.0]

    async def test_client_error_is_not_retried(self, make_client, sleep):
        client, transport = make_client(
            X.Response(400, {"success": False, "message": "Customer name is required"})
        )

        result = await client.submit(receipt_request())

        assert result.value.kind is X.ErrorKind.CLIENT
        assert result.value.message == "Customer name is required"
        assert transport.attempts == 1
        assert sleep.delays == []

    async def test_unauthorized_is_auth(self, make_client):
        client, transport = make_client(401)
        result = await client.submit(receipt_request())
        assert result.value.kind is X.ErrorKind.AUTH
        assert result.value.status == 401
        assert transport.attempts == 1


class TestRateLimit:
    async def test_retry_after_is_waited_out(self, make_client, sleep):
        notices = []
        client, transport = make_client(
            X.Response(429, {"message": "Too many requests"}, {"Retry-After": "10"}),
            200,
            on_rate_limit=notices.append,
        )

        result = await client.submit(receipt_request())

        assert isinstance(result, Ok)
        assert sleep.delays[0] >= 10
        assert client.rate_limit.seconds == 10
        assert [n.seconds for n in notices] == [10]

    @pytest.mark.parametrize("retry_after", ["inf", "nan", "1e20"])
    async def test_hostile_retry_after_still_yields_result(self, make_client, sleep, retry_after):
        client, transport = make_client(
            X.Response(429, headers={"Retry-After": retry_after}),
            200,
        )

        result = await client.submit(receipt_request())

        assert isinstance(result, Ok)
        assert transport.attempts == 2
        assert sleep.delays[0] <= X.RETRY_AFTER_CEILING.total_seconds()

    async def test_exhausted_rate_limit(self, make_client):
        limited = X.Response(429, headers={"Retry-After": "5"})
        client, _ = make_client(
            limited, limited,
            policy=X.RetryPolicy().with_max_retries(1),
        )

        result = await client.submit(receipt_request())

        assert result.value.kind is X.ErrorKind.RATE_LIMITED
        assert result.value.rate_limit.seconds == 5
        assert "5 seconds" in result.value.message


class TestHeaders:
    async def test_bearer_token_is_attached(self, make_client):
        client, transport = make_client(200, credentials=lambda: "tok-123")
        await client.submit(receipt_request())
        _, headers = transport.calls[0]
        assert headers["Authorization"] == "Bearer tok-123"

    async def test_no_token_no_header(self, make_client):
        client, transport = make_client(200)
        await client.submit(receipt_request())
        _, headers = transport.calls[0]
        assert "Authorization" not in headers

    async def test_token_is_read_before_every_attempt(self, make_client):
        tokens = iter(["old", "fresh"])
        client, transport = make_client(500, 200, credentials=lambda: next(tokens))
        await client.submit(receipt_request())
        assert [h["Authorization"] for _, h in transport.calls] == ["Bearer old", "Bearer fresh"]

    async def test_idempotency_key_is_stable_across_attempts(self, make_client):
        client, transport = make_client(500, 500, 200)
        request = receipt_request(idempotency_key="tmp-abc")

        result = await client.submit(request)

        assert {h[X.IDEMPOTENCY_HEADER] for _, h in transport.calls} == {"tmp-abc"}
        assert result.value.idempotency_key == "tmp-abc"

    async def test_replay_is_flagged_after_ambiguous_write(self, make_client):
        client, transport = make_client(503, 200)

        result = await client.submit(receipt_request())

        first, second = (h for _, h in transport.calls)
        assert X.REPLAY_HEADER not in first
        assert second[X.REPLAY_HEADER] == "true"
        assert result.value.replayed

    async def test_clean_success_is_not_a_replay(self, make_client):
        client, _ = make_client(200)
        result = await client.submit(receipt_request())
        assert not result.value.replayed

    async def test_reads_are_never_replays(self, make_client):
        client, transport = make_client(500, 200)
        result = await client.submit(X.Request("GET", "/receipts/7"))
        assert not result.value.replayed
        assert X.REPLAY_HEADER not in transport.calls[1][1]


class TestInFlight:
    async def test_second_submission_is_refused_while_pending(self, make_client):
        hold = asyncio.Event()
        client, transport = make_client(200, hold=hold)

        first = asyncio.create_task(client.submit(receipt_request(session_key="s-1")))
        await asyncio.sleep(0)

        second = await client.submit(receipt_request(session_key="s-1"))

        assert second.value.kind is X.ErrorKind.IN_FLIGHT
        assert transport.attempts == 1

        hold.set()
        assert isinstance(await first, Ok)
        assert transport.attempts == 1
        assert len(client.guard) == 0

    async def test_other_sessions_are_not_blocked(self, make_client):
        hold = asyncio.Event()
        client, transport = make_client(200, 200, hold=hold)

        first = asyncio.create_task(client.submit(receipt_request(session_key="s-1")))
        await asyncio.sleep(0)
        second = asyncio.create_task(client.submit(receipt_request(session_key="s-2")))
        await asyncio.sleep(0)
        hold.set()

        assert isinstance(await first, Ok)
        assert isinstance(await second, Ok)
        assert transport.attempts == 2

    async def test_guard_is_released_after_failure(self, make_client):
        client, transport = make_client(400, 200)
        await client.submit(receipt_request(session_key="s-1"))
        result = await client.submit(receipt_request(session_key="s-1"))
        assert isinstance(result, Ok)


class TestLazy:
    async def test_nothing_is_sent_until_awaited(self, make_client):
        client, transport = make_client(200)

        lazy = client(receipt_request())
        assert transport.attempts == 0

        result = await lazy
        assert isinstance(result, Ok)
        assert transport.attempts == 1
