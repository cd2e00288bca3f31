"""Audio transcription proxy endpoint."""

from fastapi import APIRouter, Depends, Request

from genproxy.api.v1.deps import get_generation_service
from genproxy.api.v1.forms import form_file, form_text
from genproxy.config import settings
from genproxy.services.generation import GenerationService, TranscriptionRequest

router = APIRouter()


@router.post("/transcribe")
async def transcribe_audio(
    request: Request,
    service: GenerationService = Depends(get_generation_service),
):
    """Transcribe one audio recording, translated to English by default."""
    form = await request.form()
    audio = await form_file(form, "audio", settings.max_upload_bytes)

    result = await service.transcribe(
        TranscriptionRequest(
            audio=audio,
            task=form_text(form, "task", "translate"),
            language=form_text(form, "language", "auto"),
        )
    )
    return {"text": result.payload[0]}
