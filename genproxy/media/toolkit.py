"""ffmpeg-backed media toolkit used to trim motion reference videos.

The toolkit is a lazily created process-wide singleton. Its initialisation
(locating the binary and checking it runs) happens once: concurrent callers
all await the same in-flight task instead of polling a loaded flag.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from typing import Optional

from genproxy.config import settings
from genproxy.errors import ConfigError, InputValidationError
from genproxy.providers.attachments import Attachment

logger = logging.getLogger(__name__)


def validate_duration_window(start_s: float, end_s: float) -> None:
    if start_s < 0:
        raise InputValidationError("start_time must not be negative", field="start_time")
    if end_s <= start_s:
        raise InputValidationError("end_time must be after start_time", field="end_time")


def _write_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as fh:
        fh.write(data)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


class MediaToolkit:
    """Wraps the ffmpeg binary behind a one-shot async initialisation."""

    def __init__(self, binary: str = "ffmpeg"):
        self.binary = binary
        self._path: Optional[str] = None
        self._init_task: Optional[asyncio.Future] = None

    @property
    def ready(self) -> bool:
        return self._path is not None

    async def ensure_ready(self) -> str:
        """Initialise the toolkit once; every concurrent caller shares the attempt.

        A failed initialisation is cleared so the next call tries again.
        Failures to start the binary surface as ``ConfigError``.
        """
        if self._path is not None:
            return self._path

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        task = self._init_task
        try:
            path = await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise
        self._path = path
        return path

    async def _initialize(self) -> str:
        path = shutil.which(self.binary)
        if path is None:
            raise ConfigError(f"Media toolkit unavailable: '{self.binary}' not found on PATH")

        try:
            proc = await asyncio.create_subprocess_exec(
                path,
                "-version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ConfigError(f"Media toolkit unavailable: cannot run '{path}': {exc}") from exc
        stdout, _ = await proc.communicate()
        if proc.returncode != 0:
            raise ConfigError(f"Media toolkit unavailable: '{path} -version' exited {proc.returncode}")

        version = stdout.decode("utf-8", "replace").splitlines()[:1]
        logger.info("Media toolkit ready: %s", version[0] if version else path)
        return path

    async def trim(self, attachment: Attachment, start_s: float, end_s: float) -> Attachment:
        """Cut ``attachment`` down to the [start_s, end_s) window."""
        validate_duration_window(start_s, end_s)
        binary = await self.ensure_ready()

        loop = asyncio.get_running_loop()
        suffix = os.path.splitext(attachment.filename)[1] or ".mp4"
        with tempfile.TemporaryDirectory(prefix="genproxy_trim_") as tmp:
            src = os.path.join(tmp, f"input{suffix}")
            dst = os.path.join(tmp, f"trimmed{suffix}")
            await loop.run_in_executor(None, _write_bytes, src, attachment.data)

            proc = await asyncio.create_subprocess_exec(
                binary,
                "-y",
                "-ss", f"{start_s:.3f}",
                "-i", src,
                "-t", f"{end_s - start_s:.3f}",
                "-c", "copy",
                dst,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await proc.communicate()
            if proc.returncode != 0 or not os.path.exists(dst):
                detail = stderr.decode("utf-8", "replace").strip().splitlines()[-1:] or [""]
                raise InputValidationError(f"Could not trim video: {detail[0]}", field="video")

            data = await loop.run_in_executor(None, _read_bytes, dst)

        logger.info(
            "Trimmed %s to %.2fs-%.2fs (%d -> %d bytes)",
            attachment.filename, start_s, end_s, attachment.size, len(data),
        )
        return Attachment(filename=attachment.filename, content_type=attachment.content_type, data=data)


_toolkit: Optional[MediaToolkit] = None


def get_media_toolkit() -> MediaToolkit:
    """Get or create the process-wide media toolkit."""
    global _toolkit
    if _toolkit is None:
        _toolkit = MediaToolkit(settings.ffmpeg_binary)
    return _toolkit
