import pytest
import requests
from fastapi.testclient import TestClient

from conftest import FakeResponse, FakeSession
from genproxy.api.v1 import deps
from genproxy.config import Settings
from genproxy.main import app
from genproxy.services.contact import ContactMailer, ContactMessage, render_message

FORM = {"fullName": "Ada Lovelace", "email": "ada@example.com", "details": "Hello\n<b>there</b>"}


@pytest.fixture
def mail_session():
    return FakeSession()


@pytest.fixture
def contact_client(mail_session):
    mailer = ContactMailer(Settings(resend_api_key="re-key"), session=mail_session)
    app.dependency_overrides[deps.get_contact_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_contact_sends_email(contact_client, mail_session):
    mail_session.queue(FakeResponse(200, {"id": "msg-1"}))

    resp = contact_client.post("/api/contact", json=FORM)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "messageId": "msg-1"}

    call = mail_session.calls[0]
    assert call["headers"]["Authorization"] == "Bearer re-key"
    assert call["json"]["reply_to"] == "ada@example.com"
    assert call["json"]["subject"] == "New Contact Form Submission from Ada Lovelace"


@pytest.mark.parametrize("missing", ["fullName", "email", "details"])
def test_all_fields_required(contact_client, mail_session, missing):
    resp = contact_client.post("/api/contact", json={**FORM, missing: ""})

    assert resp.status_code == 400
    assert resp.json()["field"] == missing
    assert mail_session.calls == []


def test_missing_key_is_config_error():
    session = FakeSession()
    mailer = ContactMailer(Settings(resend_api_key=None), session=session)
    app.dependency_overrides[deps.get_contact_mailer] = lambda: mailer
    try:
        resp = TestClient(app).post("/api/contact", json=FORM)
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json()["kind"] == "config-error"
    assert session.calls == []


def test_provider_rejection(contact_client, mail_session):
    mail_session.queue(FakeResponse(422, {"message": "invalid from"}))

    resp = contact_client.post("/api/contact", json=FORM)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to send email", "kind": "submission-error"}


def test_transport_failure(contact_client, mail_session):
    mail_session.queue(requests.Timeout("timed out"))

    resp = contact_client.post("/api/contact", json=FORM)

    assert resp.status_code == 500
    assert resp.json()["kind"] == "submission-error"


def test_message_body_is_escaped():
    rendered = render_message(ContactMessage("A <script>", "a@b.c", "line one\nline two & <i>"))

    assert "&lt;script&gt;" in rendered
    assert "line one<br />line two &amp; &lt;i&gt;" in rendered


@pytest.mark.parametrize("reply", [
    FakeResponse(200, None, content=b"<html>ok</html>", headers={"content-type": "text/html"}),
    FakeResponse(200, ["queued"]),
])
def test_delivered_without_message_id(contact_client, mail_session, reply):
    mail_session.queue(reply)

    resp = contact_client.post("/api/contact", json=FORM)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "messageId": None}
