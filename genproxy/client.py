"""HTTP client for this service, with client-driven video polling.

Long video jobs can outlive a single request, so callers may start a job
with ``wait=false`` and poll ``/api/generate/video/poll`` themselves. This
client does that with the shared poll loop and honours a cancel event
(e.g. the user navigated away).

Usage:
    client = ProxyClient("http://localhost:8001")
    job_id = await client.start_video("kling-2.6-motion-control", image, video)
    urls = await client.wait_for_video(job_id, cancel=stop_event)
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import requests

from genproxy.config import settings
from genproxy.errors import ProxyError
from genproxy.jobs.models import JobKind, JobRecord
from genproxy.jobs.poller import PollPolicy, StatusResponse, poll_job
from genproxy.processing.normalize import extract_urls
from genproxy.providers.attachments import Attachment, multipart_files


class ServiceError(ProxyError):
    """Error body returned by the proxy service."""

    def __init__(self, message: str, status_code: int, kind: str = "internal-error"):
        super().__init__(message, status_code)
        self.kind = kind


class ProxyClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout_s: int = 300,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._sleep = sleep

    async def _call(self, method: str, path: str, **kwargs) -> requests.Response:
        loop = asyncio.get_running_loop()
        fn = partial(
            self._session.request, method, f"{self.base_url}{path}", timeout=self.timeout_s, **kwargs
        )
        return await loop.run_in_executor(None, fn)

    @staticmethod
    def _body(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = {"error": response.text}
        if not response.ok:
            raise ServiceError(
                body.get("error") or f"HTTP {response.status_code}",
                response.status_code,
                body.get("kind", "internal-error"),
            )
        return body

    async def generate_image(
        self,
        prompt: str,
        reference_images: Sequence[Attachment] = (),
        **options: str,
    ) -> List[str]:
        """Options use the form names: quality, aspectRatio, outputFormat, stylePreset, modelId."""
        files, data = multipart_files(reference_images, "referenceImage", "referenceImageCount")
        data.update({"prompt": prompt, **options})
        response = await self._call("POST", "/api/generate", data=data, files=files or None)
        return self._body(response)["imageUrls"]

    async def start_video(
        self,
        model_id: str,
        image: Attachment,
        video: Attachment,
        **options: str,
    ) -> str:
        """Submit a video job without waiting; returns the job id to poll."""
        files = [
            ("image", (image.filename, image.data, image.content_type)),
            ("video", (video.filename, video.data, video.content_type)),
        ]
        data = {"modelId": model_id, "wait": "false", **options}
        response = await self._call("POST", "/api/generate/video", data=data, files=files)
        body = self._body(response)
        if body.get("videoUrls"):
            raise ServiceError("Video finished synchronously; no job to poll", response.status_code)
        return body["requestId"]

    async def fetch_video_status(self, job_id: str) -> StatusResponse:
        response = await self._call("GET", "/api/generate/video/poll", params={"requestId": job_id})
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return StatusResponse(http_status=response.status_code, body=body)

    async def wait_for_video(
        self,
        job_id: str,
        cancel: Optional[asyncio.Event] = None,
        policy: Optional[PollPolicy] = None,
    ) -> List[str]:
        job = JobRecord(job_id=job_id, kind=JobKind.VIDEO)
        outcome = await poll_job(
            job,
            self.fetch_video_status,
            policy or settings.poll_policy(JobKind.VIDEO),
            cancel=cancel,
            sleep=self._sleep,
        )
        return extract_urls(outcome.raise_for_state())

    async def transcribe(self, audio: Attachment) -> str:
        files = [("audio", (audio.filename, audio.data, audio.content_type))]
        response = await self._call("POST", "/api/transcribe", files=files)
        return self._body(response)["text"]
