"""Image generation proxy endpoint."""

from fastapi import APIRouter, Depends, Request

from genproxy.api.v1.deps import get_generation_service
from genproxy.api.v1.forms import form_file, form_int, form_text
from genproxy.config import settings
from genproxy.errors import InputValidationError
from genproxy.models.registry import DEFAULT_IMAGE_MODEL
from genproxy.providers.attachments import sniff_image
from genproxy.services.generation import GenerationService, ImageRequest

router = APIRouter()


@router.post("/generate")
async def generate_image(
    request: Request,
    service: GenerationService = Depends(get_generation_service),
):
    """Generate or edit images from a prompt and optional reference images.

    Form fields: prompt (required), modelId, quality, aspectRatio,
    outputFormat, stylePreset, referenceImageCount + referenceImage_<i>.

    Returns:
        {imageUrls: [...]}
    """
    form = await request.form()

    prompt = form_text(form, "prompt")
    if not prompt:
        raise InputValidationError("Prompt is required", field="prompt")

    count = form_int(form, "referenceImageCount", 0)
    if count > settings.max_reference_images:
        raise InputValidationError(
            f"At most {settings.max_reference_images} reference images are allowed",
            field="referenceImageCount",
        )

    images = []
    for index in range(count):
        field = f"referenceImage_{index}"
        attachment = await form_file(form, field, settings.max_upload_bytes)
        if attachment is not None:
            images.append(sniff_image(attachment, field))

    result = await service.generate_image(
        ImageRequest(
            prompt=prompt,
            model_id=form_text(form, "modelId", DEFAULT_IMAGE_MODEL),
            quality=form_text(form, "quality", "standard"),
            aspect_ratio=form_text(form, "aspectRatio", "1:1"),
            output_format=form_text(form, "outputFormat", "png"),
            style_preset=form_text(form, "stylePreset"),
            reference_images=images,
        )
    )
    return {"imageUrls": result.payload}
