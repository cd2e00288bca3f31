"""Helpers for reading multipart form fields."""

from typing import Optional

from starlette.datastructures import FormData, UploadFile

from genproxy.errors import InputValidationError
from genproxy.providers.attachments import Attachment, read_upload

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def form_text(form: FormData, name: str, default: Optional[str] = None) -> Optional[str]:
    value = form.get(name)
    if not isinstance(value, str) or not value.strip():
        return default
    return value.strip()


def form_int(form: FormData, name: str, default: int = 0) -> int:
    raw = form_text(form, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InputValidationError(f"'{name}' must be an integer", field=name)
    if value < 0:
        raise InputValidationError(f"'{name}' must not be negative", field=name)
    return value


def form_float(form: FormData, name: str, default: float = 0.0) -> float:
    raw = form_text(form, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise InputValidationError(f"'{name}' must be a number", field=name)


def form_bool(form: FormData, name: str, default: bool) -> bool:
    raw = form_text(form, name)
    if raw is None:
        return default
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    raise InputValidationError(f"'{name}' must be true or false", field=name)


async def form_file(form: FormData, name: str, max_bytes: int) -> Optional[Attachment]:
    """Read an uploaded part, or None when the field is absent or not a file."""
    value = form.get(name)
    if not isinstance(value, UploadFile):
        return None
    return await read_upload(value, max_bytes, name)
