import asyncio

import pytest

from conftest import FakeResponse, FakeSession, no_sleep
from genproxy.client import ProxyClient, ServiceError
from genproxy.errors import JobTimedOut, PollCancelled, PollError, ProviderFailure
from genproxy.jobs.poller import PollPolicy
from genproxy.providers.attachments import Attachment

BASE = "http://proxy.test"
POLICY = PollPolicy(interval_s=0.0, max_attempts=3)


def _client(session, sleep=no_sleep):
    return ProxyClient(BASE, session=session, sleep=sleep)


def test_wait_for_video_polls_until_completed():
    session = FakeSession(
        FakeResponse(200, {"status": "processing", "message": "Status: processing"}),
        FakeResponse(200, {"status": "completed", "videoUrls": ["https://cdn/v.mp4"]}),
    )

    urls = asyncio.run(_client(session).wait_for_video("vid-1", policy=POLICY))

    assert urls == ["https://cdn/v.mp4"]
    assert len(session.calls) == 2
    assert session.calls[0]["url"] == f"{BASE}/api/generate/video/poll"
    assert session.calls[0]["params"] == {"requestId": "vid-1"}


def test_wait_for_video_reports_failure():
    session = FakeSession(FakeResponse(200, {"status": "failed", "error": "bad motion"}))

    with pytest.raises(ProviderFailure, match="bad motion"):
        asyncio.run(_client(session).wait_for_video("vid-1", policy=POLICY))


def test_wait_for_video_stops_on_poll_error():
    session = FakeSession(FakeResponse(503, {"status": "error", "error": "busy", "kind": "poll-error"}))

    with pytest.raises(PollError) as exc_info:
        asyncio.run(_client(session).wait_for_video("vid-1", policy=POLICY))
    assert exc_info.value.status_code == 503
    assert len(session.calls) == 1


def test_wait_for_video_times_out():
    session = FakeSession(*[FakeResponse(200, {"status": "processing"}) for _ in range(3)])

    with pytest.raises(JobTimedOut):
        asyncio.run(_client(session).wait_for_video("vid-1", policy=POLICY))
    assert len(session.calls) == 3


def test_cancel_stops_polling():
    session = FakeSession(*[FakeResponse(200, {"status": "processing"}) for _ in range(3)])
    cancel = asyncio.Event()

    async def sleep_then_cancel(_seconds):
        cancel.set()

    with pytest.raises(PollCancelled):
        asyncio.run(_client(session, sleep_then_cancel).wait_for_video("vid-1", cancel=cancel, policy=POLICY))
    assert len(session.calls) == 1


def test_start_video_returns_request_id():
    session = FakeSession(FakeResponse(200, {"requestId": "vid-9", "status": "processing"}))
    image = Attachment("a.png", "image/png", b"img")
    video = Attachment("b.mp4", "video/mp4", b"vid")

    job_id = asyncio.run(_client(session).start_video("kling-2.6-motion-control", image, video))

    assert job_id == "vid-9"
    call = session.calls[0]
    assert call["data"]["wait"] == "false"
    assert [name for name, _ in call["files"]] == ["image", "video"]


def test_generate_image_sends_reference_count():
    session = FakeSession(FakeResponse(200, {"imageUrls": ["https://cdn/a.png"]}))
    refs = [Attachment("a.png", "image/png", b"1"), Attachment("b.png", "image/png", b"2")]

    urls = asyncio.run(_client(session).generate_image("a cat", refs, stylePreset="anime"))

    assert urls == ["https://cdn/a.png"]
    data = session.calls[0]["data"]
    assert data == {"referenceImageCount": "2", "prompt": "a cat", "stylePreset": "anime"}


def test_service_error_keeps_kind():
    session = FakeSession(FakeResponse(400, {"error": "Prompt is required", "kind": "validation-error"}))

    with pytest.raises(ServiceError) as exc_info:
        asyncio.run(_client(session).generate_image(""))
    assert exc_info.value.kind == "validation-error"
    assert exc_info.value.status_code == 400
