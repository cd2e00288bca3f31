import pytest

from conftest import FakeResponse, envelope

KLING = "kling-2.6-motion-control"


@pytest.fixture
def media(png_bytes):
    return {
        "image": ("subject.png", png_bytes, "image/png"),
        "video": ("dance.mp4", b"fake-mp4-bytes", "video/mp4"),
    }


def test_image_without_video_names_the_missing_field(client, session, png_bytes):
    resp = client.post(
        "/api/generate/video",
        data={"modelId": KLING},
        files={"image": ("subject.png", png_bytes, "image/png")},
    )

    assert resp.status_code == 400
    assert resp.json()["field"] == "video"
    assert session.calls == []


def test_model_id_is_required(client, session, media):
    resp = client.post("/api/generate/video", files=media)

    assert resp.status_code == 400
    assert resp.json()["field"] == "modelId"
    assert session.calls == []


def test_image_model_is_not_a_video_model(client, session, media):
    resp = client.post("/api/generate/video", data={"modelId": "wan-2.6-image-edit"}, files=media)

    assert resp.status_code == 400
    assert resp.json()["kind"] == "unknown-model"
    assert session.calls == []


def test_video_part_must_be_a_video(client, session, png_bytes):
    resp = client.post(
        "/api/generate/video",
        data={"modelId": KLING},
        files={
            "image": ("subject.png", png_bytes, "image/png"),
            "video": ("notes.txt", b"hello", "text/plain"),
        },
    )

    assert resp.status_code == 400
    assert resp.json()["field"] == "video"


def test_server_side_wait_returns_video_urls(client, session, media):
    session.queue(
        envelope(id="vid-1", status="created"),
        envelope(id="vid-1", status="processing"),
        envelope(id="vid-1", status="completed", outputs=["https://cdn/v.mp4"]),
    )

    resp = client.post(
        "/api/generate/video",
        data={"modelId": KLING, "prompt": "dance", "keep_original_sound": "false"},
        files=media,
    )

    assert resp.status_code == 200, resp.text
    assert resp.json() == {"videoUrls": ["https://cdn/v.mp4"], "type": "video"}

    submitted = session.calls[0]["json"]
    assert session.calls[0]["url"].endswith("/kwaivgi/kling-v2.6-std/motion-control")
    assert submitted["image"].startswith("data:image/png;base64,")
    assert submitted["video"].startswith("data:video/mp4;base64,")
    assert submitted["keep_original_sound"] is False
    assert submitted["character_orientation"] == "video"
    assert submitted["prompt"] == "dance"


def test_no_wait_returns_request_id(client, session, media):
    session.queue(envelope(id="vid-2", status="created"))

    resp = client.post("/api/generate/video", data={"modelId": KLING, "wait": "false"}, files=media)

    assert resp.json() == {"requestId": "vid-2", "status": "processing"}
    assert len(session.calls) == 1


def test_trim_window_cuts_video_before_upload(client, session, toolkit, media):
    session.queue(envelope(id="vid-3", status="completed", outputs=["https://cdn/v.mp4"]))

    resp = client.post(
        "/api/generate/video",
        data={"modelId": KLING, "start_time": "1.5", "end_time": "4"},
        files=media,
    )

    assert resp.status_code == 200, resp.text
    assert toolkit.trims == [("dance.mp4", 1.5, 4.0)]
    assert session.calls[0]["json"]["video"] == "data:video/mp4;base64,dHJpbW1lZA=="


def test_bad_trim_window_is_rejected_before_any_work(client, session, toolkit, media):
    resp = client.post(
        "/api/generate/video",
        data={"modelId": KLING, "start_time": "5", "end_time": "2"},
        files=media,
    )

    assert resp.status_code == 400
    assert resp.json()["field"] == "end_time"
    assert toolkit.trims == []
    assert session.calls == []


def test_poll_completed(client, session):
    session.queue(envelope(id="vid-1", status="completed", outputs=["https://cdn/v.mp4"]))

    resp = client.get("/api/generate/video/poll", params={"requestId": "vid-1"})

    assert resp.json() == {"status": "completed", "videoUrls": ["https://cdn/v.mp4"]}
    assert session.calls[0]["url"].endswith("/predictions/vid-1/result")


def test_poll_failed(client, session):
    session.queue(envelope(id="vid-1", status="failed", error="motion too fast"))

    resp = client.get("/api/generate/video/poll", params={"requestId": "vid-1"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "failed", "error": "motion too fast"}


def test_poll_processing(client, session):
    session.queue(envelope(id="vid-1", status="processing"))

    resp = client.get("/api/generate/video/poll", params={"requestId": "vid-1"})

    assert resp.json() == {"status": "processing", "message": "Status: processing"}


def test_poll_passes_provider_error_status(client, session):
    session.queue(FakeResponse(503, {"message": "busy"}))

    resp = client.get("/api/generate/video/poll", params={"requestId": "vid-1"})

    assert resp.status_code == 503
    body = resp.json()
    assert body["status"] == "error"
    assert body["kind"] == "poll-error"


def test_poll_requires_request_id(client, session):
    resp = client.get("/api/generate/video/poll")

    assert resp.status_code == 400
    assert resp.json()["status"] == "error"
    assert session.calls == []
