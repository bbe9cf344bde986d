"""ResilientFetcher response classification and retry accounting."""

import asyncio
import time

import httpx
import pytest

from core.errors import AuthError, ConfigError
from helpers import RecordingSleep
from infrastructure.api import FetchOptions, ResilientFetcher, partition_for

URL = "https://euw1.api.riotgames.com/tft/league/v1/master"
OPTIONS = FetchOptions(max_retries=3, base_delay_ms=1000, timeout_ms=500)


class RecordingLimiter:
    def __init__(self):
        self.acquired = []

    async def acquire(self, partition):
        self.acquired.append(partition)


def scripted(*responses):
    """Transport handler replaying ``responses``; the last one repeats.
    An exception class in the script is raised instead of answered."""
    calls = []

    def handler(request):
        calls.append(request)
        step = responses[min(len(calls), len(responses)) - 1]
        if isinstance(step, type) and issubclass(step, Exception):
            raise step("scripted failure", request=request)
        return step

    return handler, calls


def run_fetch(handler, *, api_key="RGAPI-test", options=OPTIONS):
    sleep = RecordingSleep()
    limiter = RecordingLimiter()

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = ResilientFetcher(api_key, limiter, client=client, sleep=sleep, options=options)
            result = await fetcher.fetch(URL)
            return fetcher, result

    fetcher, result = asyncio.run(go())
    return fetcher, result, sleep, limiter


class TestClassification:

    def test_success_returns_decoded_body(self):
        handler, calls = scripted(httpx.Response(200, json={"entries": []}))
        fetcher, result, sleep, _ = run_fetch(handler)
        assert result == {"entries": []}
        assert fetcher.attempts == 1
        assert calls[0].headers["X-Riot-Token"] == "RGAPI-test"
        assert sleep.calls == []

    def test_429_then_200_makes_two_attempts_and_honours_retry_after(self):
        handler, calls = scripted(
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"ok": True}),
        )
        fetcher, result, sleep, _ = run_fetch(handler)
        assert result == {"ok": True}
        assert fetcher.attempts == 2
        assert len(calls) == 2
        assert sleep.calls == [2.0]

    def test_429_without_header_uses_backoff(self):
        handler, _ = scripted(httpx.Response(429), httpx.Response(200, json=[]))
        _, result, sleep, _ = run_fetch(handler)
        assert result == []
        assert sleep.calls == [1.0]

    def test_403_aborts_after_one_attempt(self):
        handler, calls = scripted(httpx.Response(403))
        sleep = RecordingSleep()

        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                fetcher = ResilientFetcher("RGAPI-test", RecordingLimiter(), client=client, sleep=sleep, options=OPTIONS)
                with pytest.raises(AuthError) as info:
                    await fetcher.fetch(URL)
                return fetcher, info.value

        fetcher, err = asyncio.run(go())
        assert err.status_code == 403
        assert fetcher.attempts == 1
        assert len(calls) == 1
        assert sleep.calls == []

    def test_timeouts_exhaust_retries_and_return_none(self):
        handler, calls = scripted(httpx.ReadTimeout)
        fetcher, result, sleep, limiter = run_fetch(handler)
        assert result is None
        assert fetcher.attempts == OPTIONS.max_retries
        assert len(calls) == OPTIONS.max_retries
        # exponential backoff between attempts, none after the last one
        assert sleep.calls == [1.0, 2.0]
        # every attempt, retries included, goes through the limiter
        assert limiter.acquired == ["euw1"] * OPTIONS.max_retries

    def test_server_error_is_retried(self):
        handler, _ = scripted(httpx.Response(504), httpx.Response(200, json={"id": 1}))
        fetcher, result, sleep, _ = run_fetch(handler)
        assert result == {"id": 1}
        assert fetcher.attempts == 2
        assert sleep.calls == [1.0]

    def test_connect_error_is_transient(self):
        handler, _ = scripted(httpx.ConnectError, httpx.Response(200, json={}))
        fetcher, result, _, _ = run_fetch(handler)
        assert result == {}
        assert fetcher.attempts == 2

    def test_other_4xx_returns_none_without_retry(self):
        handler, calls = scripted(httpx.Response(404))
        fetcher, result, sleep, _ = run_fetch(handler)
        assert result is None
        assert fetcher.attempts == 1
        assert sleep.calls == []
        assert fetcher.last_status_code == 404

    def test_undecodable_body_returns_none(self):
        handler, _ = scripted(httpx.Response(200, content=b"not json"))
        _, result, _, _ = run_fetch(handler)
        assert result is None


class TestConfiguration:

    def test_missing_api_key_fails_before_any_request(self):
        with pytest.raises(ConfigError):
            ResilientFetcher("", RecordingLimiter())

    def test_partition_is_the_first_host_label(self):
        assert partition_for("https://euw1.api.riotgames.com/x") == "euw1"
        assert partition_for("https://americas.api.riotgames.com/x") == "americas"

    def test_partition_falls_back_to_default(self):
        assert partition_for("not a url") == "na1"


class TestAttemptDeadline:

    def test_slow_body_is_aborted_at_the_attempt_timeout(self):
        body = b'{"a": 1}'

        async def trickle(reader, writer):
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                b"Content-Length: %d\r\n\r\n" % len(body)
            )
            try:
                for byte in body:
                    writer.write(bytes([byte]))
                    await writer.drain()
                    await asyncio.sleep(0.2)
            except ConnectionError:
                pass
            finally:
                writer.close()

        async def go():
            server = await asyncio.start_server(trickle, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            sleep = RecordingSleep()
            try:
                async with httpx.AsyncClient(trust_env=False) as client:
                    fetcher = ResilientFetcher(
                        "RGAPI-test", RecordingLimiter(), client=client, sleep=sleep,
                        options=FetchOptions(max_retries=1, base_delay_ms=10, timeout_ms=500),
                    )
                    started = time.monotonic()
                    result = await fetcher.fetch(f"http://127.0.0.1:{port}/tft/league/v1/master")
                    return fetcher, result, time.monotonic() - started
            finally:
                server.close()

        fetcher, result, elapsed = asyncio.run(go())
        # the full body needs about 1.6s at one byte per 0.2s
        assert result is None
        assert fetcher.attempts == 1
        assert elapsed < 1.2
