"""Routes generation requests to the right provider model.

Every request is validated before any outbound call. A submission either
answers immediately or hands back a job id, which is polled with the
policy configured for its job kind. Outputs go through the result
normalizer, so callers always get a typed result or a typed error.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from genproxy.config import Settings, settings
from genproxy.errors import (
    InputValidationError,
    NoTranscriptionFound,
    PollError,
    UnknownModel,
    UnrecognizedResponse,
)
from genproxy.jobs.models import GenerationResult, JobKind, JobRecord, JobState, ResultKind
from genproxy.jobs.poller import classify_status, poll_job
from genproxy.media.toolkit import MediaToolkit, get_media_toolkit, validate_duration_window
from genproxy.models.base import ModelSpec, ModelType
from genproxy.models.registry import DEFAULT_IMAGE_MODEL, KLING_MOTION_CONTROL, ModelRegistry, registry
from genproxy.processing.normalize import as_image_url, extract_transcript, extract_urls
from genproxy.providers.attachments import Attachment, to_data_url
from genproxy.providers.wavespeed import Submission, WavespeedClient

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = {"png", "jpeg", "jpg", "webp"}
ORIENTATIONS = {"video", "image"}
TRANSCRIPTION_TASKS = {"translate", "transcribe"}


@dataclass
class ImageRequest:
    prompt: str
    model_id: str = DEFAULT_IMAGE_MODEL
    quality: str = "standard"
    aspect_ratio: str = "1:1"
    output_format: str = "png"
    style_preset: Optional[str] = None
    reference_images: List[Attachment] = field(default_factory=list)

    @property
    def full_prompt(self) -> str:
        if self.style_preset:
            return f"{self.prompt}, {self.style_preset} style"
        return self.prompt


@dataclass
class VideoRequest:
    model_id: str
    image: Optional[Attachment] = None
    video: Optional[Attachment] = None
    prompt: str = ""
    negative_prompt: str = ""
    character_orientation: str = "video"
    keep_original_sound: bool = True
    start_time: float = 0.0
    end_time: float = 0.0
    wait: bool = True

    @property
    def wants_trim(self) -> bool:
        return bool(self.start_time or self.end_time)


@dataclass
class TranscriptionRequest:
    audio: Optional[Attachment]
    task: str = "translate"
    language: str = "auto"


@dataclass
class VideoSubmission:
    """Either a finished result (server-side wait) or a job id to poll."""
    result: Optional[GenerationResult] = None
    job_id: Optional[str] = None


@dataclass
class VideoStatus:
    state: JobState
    video_urls: List[str] = field(default_factory=list)
    error: Optional[str] = None
    message: Optional[str] = None


class GenerationService:
    """Request router over the remote job client, poll loop and normalizer."""

    def __init__(
        self,
        client: WavespeedClient,
        config: Settings = settings,
        models: ModelRegistry = registry,
        toolkit: Optional[MediaToolkit] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.client = client
        self.config = config
        self.models = models
        self._toolkit = toolkit
        self._sleep = sleep

    @property
    def toolkit(self) -> MediaToolkit:
        if self._toolkit is None:
            self._toolkit = get_media_toolkit()
        return self._toolkit

    # ------------------------------------------------------------------
    # Shared submit-then-poll
    # ------------------------------------------------------------------

    async def _resolve(
        self,
        submission: Submission,
        kind: JobKind,
        extract: Callable[[Any], Any],
    ) -> Any:
        if submission.immediate:
            try:
                return extract(submission.payload)
            except (UnrecognizedResponse, NoTranscriptionFound):
                if not submission.job_id:
                    raise
                logger.info(
                    "Immediate answer for job %s held no output, polling instead",
                    submission.job_id,
                )

        job = JobRecord(job_id=submission.job_id, kind=kind)
        outcome = await poll_job(
            job,
            self.client.fetch_status,
            self.config.poll_policy(kind),
            sleep=self._sleep,
        )
        return extract(outcome.raise_for_state())

    # ------------------------------------------------------------------
    # Image generation
    # ------------------------------------------------------------------

    def validate_image(self, request: ImageRequest) -> ModelSpec:
        if not request.prompt or not request.prompt.strip():
            raise InputValidationError("Prompt is required", field="prompt")
        spec = self.models.require(request.model_id, ModelType.IMAGE)

        if request.output_format.lower() not in OUTPUT_FORMATS:
            raise InputValidationError(
                f"Unsupported output format '{request.output_format}'", field="outputFormat"
            )
        count = len(request.reference_images)
        if count > self.config.max_reference_images:
            raise InputValidationError(
                f"At most {self.config.max_reference_images} reference images are allowed",
                field="referenceImageCount",
            )
        if count < spec.min_reference_images:
            raise InputValidationError(
                "At least one reference image is required for image editing",
                field="referenceImage_0",
            )
        return spec

    async def generate_image(self, request: ImageRequest) -> GenerationResult:
        spec = self.validate_image(request)
        self.client.require_credentials()

        payload = {
            "enable_prompt_expansion": False,
            "images": [to_data_url(img) for img in request.reference_images],
            "prompt": request.full_prompt,
            "seed": -1,
        }
        logger.info(
            "Submitting %s: prompt=%r images=%d quality=%s aspect=%s format=%s",
            spec.model_id,
            request.full_prompt,
            len(payload["images"]),
            request.quality,
            request.aspect_ratio,
            request.output_format,
        )
        submission = await self.client.submit(spec.endpoint, json=payload)

        def extract(raw: Any) -> List[str]:
            return [as_image_url(url, request.output_format) for url in extract_urls(raw)]

        urls = await self._resolve(submission, JobKind.IMAGE, extract)
        logger.info("%s produced %d image(s)", spec.model_id, len(urls))
        return GenerationResult(kind=ResultKind.IMAGE_URLS, payload=urls)

    # ------------------------------------------------------------------
    # Video generation
    # ------------------------------------------------------------------

    def _kling_payload(self, request: VideoRequest) -> Dict[str, Any]:
        return {
            "image": to_data_url(request.image),
            "video": to_data_url(request.video),
            "prompt": request.prompt,
            "negative_prompt": request.negative_prompt,
            "character_orientation": request.character_orientation,
            "keep_original_sound": request.keep_original_sound,
        }

    def validate_video(self, request: VideoRequest) -> ModelSpec:
        if not request.model_id:
            raise InputValidationError("Model ID is required", field="modelId")
        spec = self.models.require(request.model_id, ModelType.VIDEO)
        if spec.model_id not in self._video_builders:
            raise UnknownModel(f"Unknown model: {request.model_id}")

        if request.image is None:
            raise InputValidationError("Character image is required", field="image")
        if request.video is None:
            raise InputValidationError("Motion reference video is required", field="video")
        if request.character_orientation not in ORIENTATIONS:
            raise InputValidationError(
                f"character_orientation must be one of {sorted(ORIENTATIONS)}",
                field="character_orientation",
            )
        if request.wants_trim:
            validate_duration_window(request.start_time, request.end_time)
        return spec

    @property
    def _video_builders(self) -> Dict[str, Callable[[VideoRequest], Dict[str, Any]]]:
        return {KLING_MOTION_CONTROL.model_id: self._kling_payload}

    async def generate_video(self, request: VideoRequest) -> VideoSubmission:
        spec = self.validate_video(request)
        self.client.require_credentials()

        if request.wants_trim:
            request.video = await self.toolkit.trim(request.video, request.start_time, request.end_time)

        payload = self._video_builders[spec.model_id](request)
        logger.info(
            "Submitting %s: image=%d bytes video=%d bytes orientation=%s keep_sound=%s",
            spec.model_id,
            request.image.size,
            request.video.size,
            request.character_orientation,
            request.keep_original_sound,
        )
        submission = await self.client.submit(spec.endpoint, json=payload)

        if not request.wait and submission.job_id and not submission.immediate:
            return VideoSubmission(job_id=submission.job_id)

        urls = await self._resolve(submission, JobKind.VIDEO, extract_urls)
        logger.info("%s produced %d video(s)", spec.model_id, len(urls))
        return VideoSubmission(result=GenerationResult(kind=ResultKind.VIDEO_URLS, payload=urls))

    async def check_video(self, job_id: str) -> VideoStatus:
        """One status check for client-driven polling."""
        if not job_id:
            raise InputValidationError("Request ID is required", field="requestId")
        self.client.require_credentials()

        try:
            response = await self.client.fetch_status(job_id)
        except Exception as exc:
            logger.error("Status check for video job %s raised: %s", job_id, exc)
            raise PollError(f"Polling error: {exc}") from exc

        state, payload, error = classify_status(response)
        if state == JobState.POLL_ERROR:
            logger.error("Poll error for video job %s: %s", job_id, error)
            raise PollError(f"Poll error: {response.http_status}", response.http_status)
        if state == JobState.COMPLETED:
            return VideoStatus(state=state, video_urls=extract_urls(payload))
        if state == JobState.FAILED:
            return VideoStatus(state=state, error=error or "Video generation failed")
        return VideoStatus(state=state, message=f"Status: {payload.get('status')}")

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    def validate_transcription(self, request: TranscriptionRequest) -> None:
        if request.audio is None:
            raise InputValidationError("Audio file is required", field="audio")
        if not request.audio.content_type.startswith(("audio/", "video/")):
            raise InputValidationError(
                f"File '{request.audio.filename}' is not an audio recording", field="audio"
            )
        if request.task not in TRANSCRIPTION_TASKS:
            raise InputValidationError(
                f"task must be one of {sorted(TRANSCRIPTION_TASKS)}", field="task"
            )

    async def transcribe(self, request: TranscriptionRequest) -> GenerationResult:
        self.validate_transcription(request)
        self.client.require_credentials()

        payload = {
            "audio": to_data_url(request.audio),
            "enable_sync_mode": True,
            "enable_timestamps": False,
            "language": request.language,
            "prompt": "",
            "task": request.task,
        }
        logger.info("Submitting %d bytes of audio for %s", request.audio.size, request.task)
        submission = await self.client.submit(self.config.whisper_endpoint, json=payload)

        text = await self._resolve(submission, JobKind.TRANSCRIPTION, extract_transcript)
        return GenerationResult(kind=ResultKind.TEXT, payload=[text])
