"""Per-user image history stored in the Supabase ``image_history`` table."""

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from pydantic import BaseModel
from supabase import Client

from genproxy.db.supabase_client import get_user_client
from genproxy.errors import SubmissionError

logger = logging.getLogger(__name__)

TABLE = "image_history"


class ImageHistoryItem(BaseModel):
    id: str
    user_id: str
    image_url: str
    prompt: str
    style_preset: Optional[str] = None
    created_at: datetime


class HistoryStore:
    """History operations for one authenticated user."""

    def __init__(self, user_id: str, client: Client):
        self.user_id = user_id
        self._client = client

    @classmethod
    def for_token(
        cls,
        user_id: str,
        access_token: str,
        client_factory: Callable[[str], Client] = get_user_client,
    ) -> "HistoryStore":
        return cls(user_id, client_factory(access_token))

    def _execute(self, action: str, query: Any) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            logger.error("History %s failed for user %s: %s", action, self.user_id, exc)
            raise SubmissionError(f"Could not {action} image history") from exc

    def save(self, image_url: str, prompt: str, style_preset: Optional[str] = None) -> ImageHistoryItem:
        response = self._execute(
            "save",
            self._client.table(TABLE).insert(
                {
                    "user_id": self.user_id,
                    "image_url": image_url,
                    "prompt": prompt,
                    "style_preset": style_preset or None,
                }
            ),
        )
        rows = response.data or []
        if not rows:
            raise SubmissionError("Image history insert returned no row")
        return ImageHistoryItem.model_validate(rows[0])

    def list(self) -> List[ImageHistoryItem]:
        response = self._execute(
            "load",
            self._client.table(TABLE)
            .select("*")
            .eq("user_id", self.user_id)
            .order("created_at", desc=True),
        )
        return [ImageHistoryItem.model_validate(row) for row in response.data or []]

    def delete(self, item_id: str) -> bool:
        response = self._execute(
            "delete",
            self._client.table(TABLE).delete().eq("id", item_id).eq("user_id", self.user_id),
        )
        return bool(response.data)

    def clear(self) -> int:
        response = self._execute(
            "clear",
            self._client.table(TABLE).delete().eq("user_id", self.user_id),
        )
        return len(response.data or [])
