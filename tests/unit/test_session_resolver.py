"""
Unit tests for SessionResolver

Covers the POST init / GET fallback protocol and the generation rule that
drops superseded results.
"""

import asyncio

import httpx
import pytest
from tenacity import wait_none

from ad_beaconing.client import (
    AdBeaconingAsyncClient,
    ResolutionFailure,
    SessionResolver,
)
from ad_beaconing.session import SessionState
from ad_beaconing.types import LogLevel
from ad_beaconing.utils.rewrite_to_metadata_url import rewrite_to_metadata_url
from tests.utils.fakes import (
    MEDIA_URL,
    REDIRECTED_URL,
    RecordingTransport,
    init_failing_redirect_handler,
    make_client,
)


class TestResolve:
    """Test suite for a single run of the resolution protocol."""

    @pytest.mark.asyncio
    async def test_init_request_success_skips_get(self):
        """Test that a successful POST init is used verbatim and GET never runs."""
        transport = RecordingTransport(
            lambda request: httpx.Response(
                200, json={"manifestUrl": "A", "trackingUrl": "B"}
            )
        )
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, True)

        assert session_info.manifest_url == "A"
        assert session_info.ad_tracking_metadata_url == "B"
        assert session_info.media_url == MEDIA_URL
        assert session_info.local_session_id
        assert transport.methods == ["POST"]

    @pytest.mark.asyncio
    async def test_init_request_absolute_paths_joined_to_host(self):
        """Test that path-only URLs from the init response get the media URL's host."""
        transport = RecordingTransport(
            lambda request: httpx.Response(
                200,
                json={
                    "manifestUrl": "/variant/master.m3u8?sessid=42",
                    "trackingUrl": "/variant/metadata?sessid=42",
                },
            )
        )
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, True)

        assert (
            session_info.manifest_url
            == "https://example.com/variant/master.m3u8?sessid=42"
        )
        assert (
            session_info.ad_tracking_metadata_url
            == "https://example.com/variant/metadata?sessid=42"
        )

    @pytest.mark.asyncio
    async def test_init_failure_falls_back_to_redirected_get(self):
        """Test the redirect scenario after a failed POST init."""
        transport = RecordingTransport(init_failing_redirect_handler)
        state = SessionState()
        async with make_client(transport) as client:
            session_info = await SessionResolver(client, state=state).resolve(
                MEDIA_URL, True
            )

        assert session_info.manifest_url == REDIRECTED_URL
        assert session_info.ad_tracking_metadata_url == rewrite_to_metadata_url(
            REDIRECTED_URL
        )
        assert session_info.media_url == MEDIA_URL
        assert transport.methods == ["POST", "GET", "GET"]
        assert state.log_messages[-1].level == LogLevel.WARNING
        assert "Falling back to GET request" in state.log_messages[-1].message

    @pytest.mark.asyncio
    async def test_invalid_init_body_falls_back_to_get(self):
        """Test that an unparsable init response is treated as a failed POST."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, text="not json")
            return httpx.Response(200, text="#EXTM3U\n")

        transport = RecordingTransport(handler)
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, True)

        assert session_info.manifest_url == MEDIA_URL
        assert transport.methods == ["POST", "GET"]

    @pytest.mark.asyncio
    async def test_empty_init_manifest_url_falls_back_to_get(self):
        """Test that an init response with an empty URL counts as a failed POST."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(
                    200, json={"manifestUrl": "", "trackingUrl": "B"}
                )
            return httpx.Response(200, text="#EXTM3U\n")

        transport = RecordingTransport(handler)
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, True)

        assert session_info.manifest_url == MEDIA_URL
        assert (
            session_info.ad_tracking_metadata_url == "https://example.com/metadata"
        )
        assert transport.methods == ["POST", "GET"]

    @pytest.mark.asyncio
    async def test_get_only_without_redirect_keeps_media_url(self):
        """Test that GET-only resolution without a redirect uses the media URL."""
        transport = RecordingTransport(
            lambda request: httpx.Response(200, text="#EXTM3U\n")
        )
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, False)

        assert session_info.manifest_url == MEDIA_URL
        assert (
            session_info.ad_tracking_metadata_url == "https://example.com/metadata"
        )
        assert transport.methods == ["GET"]

    @pytest.mark.asyncio
    async def test_custom_rewrite_rule_applied_to_effective_url(self):
        """Test that the injected rewrite rule receives the redirected URL."""
        transport = RecordingTransport(init_failing_redirect_handler)
        async with make_client(transport) as client:
            resolver = SessionResolver(client, rewrite=lambda url: url + "#meta")
            session_info = await resolver.resolve(MEDIA_URL, False)

        assert session_info.ad_tracking_metadata_url == REDIRECTED_URL + "#meta"

    @pytest.mark.asyncio
    async def test_both_paths_failing_raises_resolution_failure(self):
        """Test that ResolutionFailure carries the transport error."""
        transport = RecordingTransport(lambda request: httpx.Response(503))
        async with make_client(transport) as client:
            with pytest.raises(ResolutionFailure) as exc_info:
                await SessionResolver(client).resolve(MEDIA_URL, True)

        assert exc_info.value.media_url == MEDIA_URL
        assert isinstance(exc_info.value.error, httpx.HTTPStatusError)
        assert exc_info.value.__cause__ is exc_info.value.error
        assert transport.methods == ["POST", "GET"]

    @pytest.mark.asyncio
    async def test_each_resolution_gets_fresh_session_id(self):
        """Test that repeated resolutions never reuse a local session id."""
        transport = RecordingTransport(
            lambda request: httpx.Response(200, text="#EXTM3U\n")
        )
        async with make_client(transport) as client:
            resolver = SessionResolver(client)
            first = await resolver.resolve(MEDIA_URL, False)
            second = await resolver.resolve(MEDIA_URL, False)

        assert first.local_session_id != second.local_session_id


class TestResolveLatest:
    """Test suite for generation tracking in resolve_latest."""

    @pytest.mark.asyncio
    async def test_empty_media_url_is_noop(self):
        """Test that an empty URL sends nothing and raises nothing."""
        transport = RecordingTransport(lambda request: httpx.Response(200))
        async with make_client(transport) as client:
            resolver = SessionResolver(client)
            assert await resolver.resolve_latest("", True) is None

        assert transport.requests == []
        assert resolver.generation == 0

    @pytest.mark.asyncio
    async def test_failure_logged_and_returns_none(self):
        """Test that ResolutionFailure does not escape resolve_latest."""
        state = SessionState()
        transport = RecordingTransport(lambda request: httpx.Response(404))
        async with make_client(transport) as client:
            resolver = SessionResolver(client, state=state)
            assert await resolver.resolve_latest(MEDIA_URL, False) is None

        assert state.log_messages[-1].level == LogLevel.WARNING
        assert MEDIA_URL in state.log_messages[-1].message

    @pytest.mark.asyncio
    async def test_superseded_result_discarded(self):
        """Test that a slow older resolution loses to a newer one."""
        slow_url = "https://example.com/slow.m3u8"
        fast_url = "https://example.com/fast.m3u8"
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == slow_url:
                await gate.wait()
            return httpx.Response(200, text="#EXTM3U\n")

        async with make_client(RecordingTransport(handler)) as client:
            resolver = SessionResolver(client)
            slow = asyncio.create_task(resolver.resolve_latest(slow_url, False))
            await asyncio.sleep(0)
            fast = await resolver.resolve_latest(fast_url, False)
            gate.set()
            stale = await slow

        assert fast is not None
        assert fast.manifest_url == fast_url
        assert stale is None
        assert resolver.generation == 2

    @pytest.mark.asyncio
    async def test_invalidate_drops_in_flight_result(self):
        """Test that invalidate makes the in-flight resolution stale."""
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await gate.wait()
            return httpx.Response(200, text="#EXTM3U\n")

        async with make_client(RecordingTransport(handler)) as client:
            resolver = SessionResolver(client)
            task = asyncio.create_task(resolver.resolve_latest(MEDIA_URL, False))
            await asyncio.sleep(0)
            resolver.invalidate()
            gate.set()

            assert await task is None


@pytest.fixture
def no_retry_wait(monkeypatch):
    retrying = AdBeaconingAsyncClient.make_request.retry
    monkeypatch.setattr(retrying, "wait", wait_none())


class TestGetRetries:
    """Test suite for retrying transient transport errors on the GET request."""

    @pytest.mark.asyncio
    async def test_connect_error_retried_then_succeeds(self, no_retry_wait):
        """Test that one dropped connection does not fail the resolution."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text="#EXTM3U\n")

        transport = RecordingTransport(handler)
        async with make_client(transport) as client:
            session_info = await SessionResolver(client).resolve(MEDIA_URL, False)

        assert session_info.manifest_url == MEDIA_URL
        assert transport.methods == ["GET", "GET"]

    @pytest.mark.asyncio
    async def test_persistent_connect_error_gives_up_after_three(
        self, no_retry_wait
    ):
        """Test that the GET is attempted three times before failing."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = RecordingTransport(handler)
        async with make_client(transport) as client:
            with pytest.raises(ResolutionFailure) as exc_info:
                await SessionResolver(client).resolve(MEDIA_URL, False)

        assert transport.methods == ["GET", "GET", "GET"]
        assert isinstance(exc_info.value.error, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_status_errors_not_retried(self, no_retry_wait):
        transport = RecordingTransport(lambda request: httpx.Response(502))
        async with make_client(transport) as client:
            with pytest.raises(ResolutionFailure):
                await SessionResolver(client).resolve(MEDIA_URL, False)

        assert transport.methods == ["GET"]
