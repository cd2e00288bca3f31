"""Model metadata types for the provider model registry."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ModelType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SELECT = "select"
    IMAGE = "image"
    VIDEO = "video"


@dataclass
class InputField:
    """One form field a model accepts, as rendered by the UI."""
    name: str
    type: FieldType
    label: str
    required: bool = False
    placeholder: Optional[str] = None
    options: List[Dict[str, str]] = field(default_factory=list)
    default: Any = None
    accept: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type.value,
            "label": self.label,
            "required": self.required,
        }
        for key in ("placeholder", "default", "accept"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.options:
            data["options"] = self.options
        return data


@dataclass
class ModelSpec:
    """A provider model the proxy can route requests to."""
    model_id: str
    name: str
    description: str
    type: ModelType
    endpoint: str
    output_type: ModelType
    input_fields: List[InputField] = field(default_factory=list)
    min_reference_images: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.model_id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "endpoint": self.endpoint,
            "outputType": self.output_type.value,
            "inputFields": [f.to_dict() for f in self.input_fields],
        }
