"""Registry of the provider models the proxy knows how to call."""

from typing import Dict, List, Optional

from genproxy.errors import UnknownModel
from genproxy.models.base import FieldType, InputField, ModelSpec, ModelType

WAN_IMAGE_EDIT = ModelSpec(
    model_id="wan-2.6-image-edit",
    name="Wan 2.6 Image Edit",
    description="Edit images with AI using text prompts",
    type=ModelType.IMAGE,
    endpoint="alibaba/wan-2.6/image-edit",
    output_type=ModelType.IMAGE,
    min_reference_images=1,
    input_fields=[
        InputField(
            name="image",
            type=FieldType.IMAGE,
            label="Reference Image",
            required=True,
            placeholder="Upload an image to edit",
            accept="image/*",
        ),
        InputField(
            name="prompt",
            type=FieldType.TEXTAREA,
            label="Prompt",
            required=True,
            placeholder="Describe how you want to edit the image...",
        ),
    ],
)

KLING_MOTION_CONTROL = ModelSpec(
    model_id="kling-2.6-motion-control",
    name="Kling 2.6 Motion Control",
    description="Create videos from image + motion reference video",
    type=ModelType.VIDEO,
    endpoint="kwaivgi/kling-v2.6-std/motion-control",
    output_type=ModelType.VIDEO,
    input_fields=[
        InputField(
            name="image",
            type=FieldType.IMAGE,
            label="Character/Subject Image",
            required=True,
            placeholder="Upload the character or subject image",
            accept="image/*",
        ),
        InputField(
            name="video",
            type=FieldType.VIDEO,
            label="Motion Reference Video",
            required=True,
            placeholder="Upload a video for motion reference",
            accept="video/*",
        ),
        InputField(
            name="character_orientation",
            type=FieldType.SELECT,
            label="Character Orientation",
            default="video",
            options=[
                {"label": "Follow Video", "value": "video"},
                {"label": "Follow Image", "value": "image"},
            ],
        ),
        InputField(
            name="keep_original_sound",
            type=FieldType.SELECT,
            label="Keep Original Sound",
            default="true",
            options=[
                {"label": "Yes", "value": "true"},
                {"label": "No", "value": "false"},
            ],
        ),
    ],
)

DEFAULT_IMAGE_MODEL = WAN_IMAGE_EDIT.model_id


class ModelRegistry:
    """Looks up provider models by id and type."""

    def __init__(self, specs: Optional[List[ModelSpec]] = None):
        self._models: Dict[str, ModelSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ModelSpec) -> None:
        if spec.model_id in self._models:
            raise ValueError(f"Model '{spec.model_id}' already registered")
        self._models[spec.model_id] = spec

    def list_models(self, model_type: Optional[ModelType] = None) -> List[ModelSpec]:
        specs = list(self._models.values())
        if model_type:
            specs = [s for s in specs if s.type == model_type]
        return specs

    def get(self, model_id: str) -> Optional[ModelSpec]:
        return self._models.get(model_id)

    def require(self, model_id: str, model_type: Optional[ModelType] = None) -> ModelSpec:
        """Return the model, or raise ``UnknownModel`` if absent or of another type."""
        spec = self._models.get(model_id)
        if spec is None or (model_type and spec.type != model_type):
            raise UnknownModel(f"Unknown model: {model_id}")
        return spec


# Global registry instance
registry = ModelRegistry([WAN_IMAGE_EDIT, KLING_MOTION_CONTROL])
