"""Image history API for signed-in users."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from genproxy.auth.supabase_auth import AuthenticatedUser, verify_jwt
from genproxy.errors import InputValidationError
from genproxy.storage.history import HistoryStore

router = APIRouter()


def get_history_store(user: AuthenticatedUser = Depends(verify_jwt)) -> HistoryStore:
    return HistoryStore.for_token(user.id, user.access_token)


class SaveHistoryRequest(BaseModel):
    imageUrl: str = ""
    prompt: str = ""
    stylePreset: Optional[str] = None


# Supabase calls block, so these handlers are plain functions and run in
# FastAPI's threadpool.

@router.get("/history")
def list_history(store: HistoryStore = Depends(get_history_store)):
    items = store.list()
    return {"items": [item.model_dump(mode="json") for item in items], "count": len(items)}


@router.post("/history", status_code=201)
def save_history(request: SaveHistoryRequest, store: HistoryStore = Depends(get_history_store)):
    if not request.imageUrl:
        raise InputValidationError("imageUrl is required", field="imageUrl")
    if not request.prompt:
        raise InputValidationError("prompt is required", field="prompt")
    item = store.save(request.imageUrl, request.prompt, request.stylePreset)
    return item.model_dump(mode="json")


@router.delete("/history/{item_id}")
def delete_history_item(item_id: str, store: HistoryStore = Depends(get_history_store)):
    if not store.delete(item_id):
        raise HTTPException(status_code=404, detail="History item not found")
    return {"success": True}


@router.delete("/history")
def clear_history(store: HistoryStore = Depends(get_history_store)):
    return {"success": True, "deleted": store.clear()}
