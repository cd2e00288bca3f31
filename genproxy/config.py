"""Application configuration via environment variables."""

from typing import List, Optional

from pydantic_settings import BaseSettings

from genproxy.jobs.models import JobKind
from genproxy.jobs.poller import PollPolicy


class Settings(BaseSettings):
    # Wavespeed (image edit, video, whisper)
    wavespeed_api_key: Optional[str] = None
    wavespeed_base_url: str = "https://api.wavespeed.ai/api/v3"
    whisper_endpoint: str = "wavespeed-ai/openai-whisper"
    request_timeout_s: int = 120

    # Poll policies, one per job kind
    image_poll_interval_s: float = 1.0
    image_poll_max_attempts: int = 60
    video_poll_interval_s: float = 3.0
    video_poll_max_attempts: int = 200
    transcription_poll_interval_s: float = 0.5
    transcription_poll_max_attempts: int = 60

    # Uploads
    max_reference_images: int = 4
    max_upload_mb: int = 10

    # Supabase (image history + auth)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Contact form delivery (Resend)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    contact_from: str = "Studio Contact <onboarding@resend.dev>"
    contact_to: str = "hello@example.com"

    # Media toolkit
    ffmpeg_binary: str = "ffmpeg"

    # Server
    allowed_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"
    port: int = 8001

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def poll_policy(self, kind: JobKind) -> PollPolicy:
        """Interval and attempt ceiling for jobs of the given kind."""
        if kind == JobKind.VIDEO:
            return PollPolicy(self.video_poll_interval_s, self.video_poll_max_attempts)
        if kind == JobKind.TRANSCRIPTION:
            return PollPolicy(
                self.transcription_poll_interval_s,
                self.transcription_poll_max_attempts,
            )
        return PollPolicy(self.image_poll_interval_s, self.image_poll_max_attempts)


settings = Settings()
