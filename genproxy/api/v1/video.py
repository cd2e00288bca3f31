"""Video generation and client-driven status polling endpoints."""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from genproxy.api.v1.deps import get_generation_service
from genproxy.api.v1.forms import form_bool, form_file, form_float, form_text
from genproxy.config import settings
from genproxy.errors import ProxyError
from genproxy.jobs.models import JobState
from genproxy.providers.attachments import require_media_type, sniff_image
from genproxy.services.generation import GenerationService, VideoRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate/video")
async def generate_video(
    request: Request,
    service: GenerationService = Depends(get_generation_service),
):
    """Start a video job from a subject image and a motion reference video.

    With wait=true (default) the job is polled here until it finishes.
    With wait=false the provider job id is returned for client-side polling
    through GET /api/generate/video/poll.
    """
    form = await request.form()
    max_bytes = settings.max_upload_bytes

    image = await form_file(form, "image", max_bytes)
    if image is not None:
        image = sniff_image(image, "image")
    video = await form_file(form, "video", max_bytes)
    if video is not None:
        video = require_media_type(video, "video/", "video")

    submission = await service.generate_video(
        VideoRequest(
            model_id=form_text(form, "modelId", ""),
            image=image,
            video=video,
            prompt=form_text(form, "prompt", ""),
            negative_prompt=form_text(form, "negative_prompt", ""),
            character_orientation=form_text(form, "character_orientation", "video"),
            keep_original_sound=form_bool(form, "keep_original_sound", True),
            start_time=form_float(form, "start_time", 0.0),
            end_time=form_float(form, "end_time", 0.0),
            wait=form_bool(form, "wait", True),
        )
    )

    if submission.result is None:
        return {"requestId": submission.job_id, "status": JobState.PROCESSING.value}
    return {"videoUrls": submission.result.payload, "type": "video"}


@router.get("/generate/video/poll")
async def poll_video(
    request_id: str = Query("", alias="requestId"),
    service: GenerationService = Depends(get_generation_service),
):
    """One status check for a video job.

    Returns one of:
        {status: completed, videoUrls}
        {status: failed, error}
        {status: processing, message}
        {status: error, error}  (with the provider's or a 4xx/5xx status)
    """
    try:
        status = await service.check_video(request_id)
    except ProxyError as exc:
        logger.error("Video poll for %r failed: %s", request_id, exc.message)
        body = exc.to_dict()
        body["status"] = "error"
        return JSONResponse(body, status_code=exc.status_code)

    if status.state == JobState.COMPLETED:
        return {"status": "completed", "videoUrls": status.video_urls}
    if status.state == JobState.FAILED:
        return {"status": "failed", "error": status.error}
    return {"status": "processing", "message": status.message}
