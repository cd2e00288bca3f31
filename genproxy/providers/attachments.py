"""Binary attachment handling for provider submissions.

Providers that only accept JSON get each file as a base64 data URL with its
original MIME type. Multipart targets get named parts plus a count field so
the receiver can enumerate them without relying on part order.
"""

import base64
import io
import mimetypes
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError
from starlette.datastructures import UploadFile

from genproxy.errors import InputValidationError

_CHUNK_BYTES = 1024 * 1024
_GENERIC_TYPES = {"", "application/octet-stream"}


@dataclass
class Attachment:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def guess_content_type(filename: str, declared: Optional[str]) -> str:
    if declared and declared not in _GENERIC_TYPES:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


async def read_upload(upload: UploadFile, max_bytes: int, field: str) -> Attachment:
    """Read an uploaded form part in chunks, enforcing the size limit."""
    chunks = []
    total = 0
    while True:
        chunk = await upload.read(_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise InputValidationError(
                f"File '{upload.filename}' is too large (max {max_bytes // (1024 * 1024)} MB)",
                field=field,
                status_code=413,
            )
        chunks.append(chunk)

    if total == 0:
        raise InputValidationError(f"Uploaded file for '{field}' is empty", field=field)

    filename = upload.filename or field
    return Attachment(
        filename=filename,
        content_type=guess_content_type(filename, upload.content_type),
        data=b"".join(chunks),
    )


def sniff_image(attachment: Attachment, field: str) -> Attachment:
    """Verify ``attachment`` is a decodable image and pin its MIME type."""
    try:
        with Image.open(io.BytesIO(attachment.data)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InputValidationError(
            f"File '{attachment.filename}' is not a valid image", field=field
        ) from exc

    mime = Image.MIME.get(fmt or "")
    if mime and not attachment.content_type.startswith("image/"):
        attachment.content_type = mime
    return attachment


def require_media_type(attachment: Attachment, prefix: str, field: str) -> Attachment:
    if not attachment.content_type.startswith(prefix):
        raise InputValidationError(
            f"File '{attachment.filename}' must be {prefix}* (got {attachment.content_type})",
            field=field,
        )
    return attachment


def to_data_url(attachment: Attachment) -> str:
    encoded = base64.b64encode(attachment.data).decode("ascii")
    return f"data:{attachment.content_type};base64,{encoded}"


def multipart_files(
    attachments: Sequence[Attachment],
    prefix: str,
    count_field: str,
) -> Tuple[List[Tuple[str, Tuple[str, bytes, str]]], Dict[str, str]]:
    """Build ``files`` and ``data`` arguments for a ``requests`` multipart post."""
    files = [
        (f"{prefix}_{index}", (item.filename, item.data, item.content_type))
        for index, item in enumerate(attachments)
    ]
    return files, {count_field: str(len(attachments))}
