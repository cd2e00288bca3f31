"""Models API: list the provider models the proxy can route to."""

from typing import Optional

from fastapi import APIRouter

from genproxy.errors import InputValidationError
from genproxy.models.base import ModelType
from genproxy.models.registry import registry

router = APIRouter()


@router.get("/models")
async def list_models(type: Optional[str] = None):
    """List registered models, optionally filtered by type (image | video)."""
    model_type = None
    if type:
        try:
            model_type = ModelType(type)
        except ValueError:
            raise InputValidationError(f"Unknown model type '{type}'", field="type")

    specs = registry.list_models(model_type)
    return {"models": [s.to_dict() for s in specs], "count": len(specs)}


@router.get("/models/{model_id}")
async def get_model(model_id: str):
    return registry.require(model_id).to_dict()
