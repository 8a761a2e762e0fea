"""Google Veo avatar provider."""

import asyncio
import time
from typing import Any
from uuid import uuid4

import httpx

from ad_engine.adapters.avatar.base import AvatarClip, AvatarProvider
from ad_engine.adapters.script.base import Script
from ad_engine.config import settings
from ad_engine.domain.errors import ProviderError
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class VeoAvatarProvider(AvatarProvider):
    """Talking-head testimonial clips generated with Google Veo.

    Uses the google-genai SDK. Veo 3.x models render speech from the prompt,
    so the script text is embedded as the presenter's dialogue. Veo 3.1 only
    supports 4, 6 or 8 second clips; the longest is always requested.
    """

    AVATAR_STYLE = (
        "Vertical selfie-style video of a real person speaking directly to camera "
        "in a warm, well-lit home. Natural handheld framing, authentic testimonial feel."
    )
    NEGATIVE_PROMPT = "text overlays, subtitles, watermarks, cartoon, distorted faces"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        poll_interval: float = 10.0,
        max_poll_attempts: int = 60,
    ) -> None:
        self.api_key = api_key or settings.google_api_key
        self.model = model or settings.veo_model
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self._client: Any = None

        if not self.api_key:
            logger.warning("google_api_key_not_configured", provider=self.name)

    def _get_client(self) -> Any:
        """Get or create the Google GenAI client."""
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @property
    def name(self) -> str:
        return "veo"

    def _build_prompt(self, script: Script) -> str:
        dialogue = f"{script.hook} {script.testimonial_script} {script.call_to_action}".strip()
        return f'{self.AVATAR_STYLE} The person says: "{dialogue}"'

    async def generate(self, script: Script) -> AvatarClip:
        if not self.api_key:
            raise ProviderError(self.name, "Google API key not configured")

        prompt = self._build_prompt(script)
        duration_seconds = 8 if "3.1" in self.model else min(max(len(prompt) // 60, 5), 8)

        logger.info(
            "veo_avatar_generation_started",
            script_id=script.id,
            model=self.model,
            duration_seconds=duration_seconds,
        )

        video_uri = await asyncio.to_thread(self._generate_sync, prompt, duration_seconds)
        video_data = await self._download(video_uri)

        logger.info(
            "veo_avatar_generation_completed",
            script_id=script.id,
            size_bytes=len(video_data),
        )

        return AvatarClip(
            id=f"avatar-{uuid4().hex[:8]}",
            video_data=video_data,
            duration_seconds=float(duration_seconds),
            provider=self.name,
            metadata={"model": self.model, "video_uri": video_uri},
        )

    def _generate_sync(self, prompt: str, duration_seconds: int) -> str:
        """Submit and poll a generation (runs in a worker thread); returns the video URI."""
        from google.genai import types

        client = self._get_client()

        operation = client.models.generate_videos(
            model=self.model,
            prompt=prompt,
            config=types.GenerateVideosConfig(
                aspect_ratio="9:16",
                number_of_videos=1,
                duration_seconds=duration_seconds,
                person_generation="allow_adult",
                negative_prompt=self.NEGATIVE_PROMPT,
            ),
        )
        operation_name = operation.name
        logger.info("veo_avatar_submitted", operation_name=operation_name)

        for attempt in range(self.max_poll_attempts):
            time.sleep(self.poll_interval)
            operation = client.operations.get(operation=operation)

            logger.debug(
                "veo_poll_status",
                operation_name=operation_name,
                done=operation.done,
                attempt=attempt + 1,
            )

            if not operation.done:
                continue

            if operation.error:
                raise ProviderError(self.name, f"generation failed: {operation.error.message}")

            if operation.response and operation.response.generated_videos:
                uri = operation.response.generated_videos[0].video.uri
                if uri:
                    return str(uri)

            raise ProviderError(self.name, "generation completed but no video returned")

        raise ProviderError(
            self.name,
            f"generation timed out after {self.max_poll_attempts * self.poll_interval} seconds",
            code="timeout",
        )

    async def _download(self, uri: str) -> bytes:
        try:
            async with httpx.AsyncClient(timeout=120.0, follow_redirects=True) as client:
                response = await client.get(uri, headers={"x-goog-api-key": self.api_key or ""})
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"download failed: {e}") from e

    async def health_check(self) -> bool:
        if not self.api_key:
            return False

        try:
            self._get_client()
            return True
        except Exception as e:
            logger.error("veo_health_check_failed", error=str(e))
            return False
