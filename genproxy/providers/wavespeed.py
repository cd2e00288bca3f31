"""Remote job client for the Wavespeed prediction API.

Submits work, interprets the immediate answer (finished result or job id)
and fetches job status for the poll loop. ``requests`` calls are blocking,
so each one runs in the default executor to keep the event loop free.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Optional

import requests

from genproxy.errors import ConfigError, SubmissionError, UnexpectedResponse
from genproxy.jobs.poller import COMPLETED_STATUS, StatusResponse

logger = logging.getLogger(__name__)

RESULT_FIELDS = ("text", "transcription", "imageUrl", "image", "output", "images", "videoUrls")


@dataclass
class Submission:
    """Outcome of a submission: a finished payload, a job id, or both."""
    job_id: Optional[str] = None
    payload: Any = None
    immediate: bool = False


def unwrap_envelope(body: Any) -> Any:
    """Wavespeed wraps every answer as ``{"code", "message", "data": {...}}``."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body


def _job_id(body: Any, envelope: Any) -> Optional[str]:
    for source in (envelope, body):
        if not isinstance(source, dict):
            continue
        for field in ("id", "requestId"):
            value = source.get(field)
            if isinstance(value, str) and value:
                return value
    return None


def _has_result(envelope: Any) -> bool:
    if isinstance(envelope, list):
        return bool(envelope)
    if not isinstance(envelope, dict):
        return False
    if envelope.get("status") == COMPLETED_STATUS:
        return True
    if envelope.get("outputs"):
        return True
    return any(envelope.get(field) for field in RESULT_FIELDS)


def _body_preview(response: requests.Response, limit: int = 500) -> str:
    text = response.text or ""
    return text if len(text) <= limit else text[:limit] + "..."


class WavespeedClient:
    """Thin async wrapper around the provider's submit and result endpoints."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout_s: int = 120,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> "WavespeedClient":
        return cls(
            api_key=settings.wavespeed_api_key,
            base_url=settings.wavespeed_base_url,
            timeout_s=settings.request_timeout_s,
        )

    def require_credentials(self) -> None:
        if not self.api_key:
            raise ConfigError("Wavespeed API key not configured")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _call(self, method: str, url: str, **kwargs) -> requests.Response:
        loop = asyncio.get_running_loop()
        fn = partial(
            self._session.request,
            method,
            url,
            headers=self._headers(),
            timeout=self.timeout_s,
            **kwargs,
        )
        return await loop.run_in_executor(None, fn)

    async def submit(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, str]] = None,
        files: Optional[list] = None,
    ) -> Submission:
        """Post a job to ``{base_url}/{path}`` and interpret the answer."""
        self.require_credentials()
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            response = await self._call("POST", url, json=json, data=data, files=files)
        except requests.RequestException as exc:
            logger.error("Submission to %s failed: %s", url, exc)
            raise SubmissionError(f"Provider request failed: {exc}") from exc

        if not response.ok:
            logger.error("Provider error %s from %s: %s", response.status_code, url, _body_preview(response))
            raise SubmissionError(
                f"Provider error: {response.status_code} - {_body_preview(response)}",
                provider_status=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("image/"):
            mime = content_type.split(";")[0].strip()
            encoded = base64.b64encode(response.content).decode("ascii")
            logger.info("Provider answered %s synchronously with %d bytes", url, len(response.content))
            return Submission(payload=[f"data:{mime};base64,{encoded}"], immediate=True)

        try:
            body = response.json()
        except ValueError as exc:
            raise UnexpectedResponse(
                f"Provider returned a non-JSON body: {_body_preview(response)}"
            ) from exc

        envelope = unwrap_envelope(body)
        job_id = _job_id(body, envelope)
        if _has_result(envelope):
            logger.info("Provider answered %s synchronously (job id %s)", url, job_id)
            return Submission(job_id=job_id, payload=envelope, immediate=True)
        if job_id:
            logger.info("Provider accepted job %s at %s", job_id, url)
            return Submission(job_id=job_id, payload=envelope)
        raise UnexpectedResponse("No result or request ID returned by the provider")

    async def fetch_status(self, job_id: str) -> StatusResponse:
        """Fetch the result endpoint once. Non-2xx answers are returned, not raised."""
        self.require_credentials()
        url = f"{self.base_url}/predictions/{job_id}/result"
        response = await self._call("GET", url)
        try:
            body = unwrap_envelope(response.json())
        except ValueError:
            body = response.text
        return StatusResponse(http_status=response.status_code, body=body)
