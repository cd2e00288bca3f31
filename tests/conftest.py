# tests/conftest.py
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from genproxy.api.v1 import deps
from genproxy.main import app
from genproxy.providers.attachments import Attachment
from genproxy.providers.wavespeed import WavespeedClient
from genproxy.services.generation import GenerationService

PROVIDER_URL = "https://provider.test/api/v3"


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, content=b"", headers=None):
        self.status_code = status_code
        self._json = json_body
        self.content = content
        self.headers = headers or {"content-type": "application/json"}

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    @property
    def text(self):
        if self._json is not None:
            return str(self._json)
        return self.content.decode("utf-8", "replace")

    def json(self):
        if self._json is None:
            raise ValueError("no json body")
        return self._json


class FakeSession:
    """Stand-in for requests.Session: records every call, answers from a script."""

    def __init__(self, *responses):
        self.calls = []
        self._responses = list(responses)

    def queue(self, *responses):
        self._responses.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"unexpected outbound call {method} {url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


class FakeToolkit:
    def __init__(self):
        self.trims = []

    async def trim(self, attachment, start_s, end_s):
        self.trims.append((attachment.filename, start_s, end_s))
        return Attachment(attachment.filename, attachment.content_type, b"trimmed")


def envelope(**data):
    return FakeResponse(200, {"code": 200, "message": "success", "data": data})


async def no_sleep(_seconds):
    return None


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def toolkit():
    return FakeToolkit()


@pytest.fixture
def service(session, toolkit):
    client = WavespeedClient(api_key="test-key", base_url=PROVIDER_URL, session=session)
    return GenerationService(client, toolkit=toolkit, sleep=no_sleep)


@pytest.fixture
def client(service):
    app.dependency_overrides[deps.get_generation_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()
