"""MoviePy local video composer.

Uses MoviePy 2.x (which bundles ffmpeg via imageio_ffmpeg). The avatar clip
carries the audio track; B-roll cutaways are laid over it at even intervals
so the testimonial keeps playing underneath.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse
from uuid import uuid4

import httpx

from ad_engine.adapters.avatar.base import AvatarClip
from ad_engine.adapters.broll.base import BRollClip
from ad_engine.adapters.composer.base import ComposedVideo, VideoComposer
from ad_engine.domain.errors import ProviderError
from ad_engine.logging import get_logger

logger = get_logger(__name__)

CUTAWAY_SECONDS = 2.5
MAX_CUTAWAYS = 4


class MoviePyComposer(VideoComposer):
    """Local composer using MoviePy."""

    def __init__(
        self,
        work_dir: Path | None = None,
        width: int = 1080,
        height: int = 1920,
        fps: int = 30,
        codec: str = "libx264",
        audio_codec: str = "aac",
    ) -> None:
        self.work_dir = work_dir or Path(tempfile.gettempdir()) / "ad_engine"
        self.work_dir.mkdir(parents=True, exist_ok=True)
        self.width = width
        self.height = height
        self.fps = fps
        self.codec = codec
        self.audio_codec = audio_codec

    @property
    def name(self) -> str:
        return "moviepy"

    async def compose(self, avatar: AvatarClip, broll: list[BRollClip]) -> ComposedVideo:
        logger.info("moviepy_compose_started", avatar_id=avatar.id, broll_count=len(broll))

        temp_files: list[Path] = []
        avatar_path = self.work_dir / f"avatar_{uuid4().hex}.mp4"
        avatar_path.write_bytes(avatar.video_data)
        temp_files.append(avatar_path)

        try:
            broll_paths: list[Path] = []
            for i, clip in enumerate(broll[:MAX_CUTAWAYS]):
                path, is_temp = await self._download_file(clip.url, f"broll_{i}")
                if is_temp:
                    temp_files.append(path)
                broll_paths.append(path)

            output_path = self.work_dir / f"composed_{uuid4().hex}.mp4"
            temp_files.append(output_path)

            duration = await asyncio.to_thread(
                self._compose_sync, avatar_path, broll_paths, output_path
            )
            video_data = output_path.read_bytes()
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"B-roll download failed: {e}") from e
        except OSError as e:
            raise ProviderError(self.name, f"composition failed: {e}") from e
        finally:
            for path in temp_files:
                path.unlink(missing_ok=True)

        logger.info(
            "moviepy_compose_completed",
            avatar_id=avatar.id,
            duration=duration,
            size_bytes=len(video_data),
        )

        return ComposedVideo(
            id=f"composed-{uuid4().hex[:8]}",
            video_data=video_data,
            duration_seconds=duration,
            width=self.width,
            height=self.height,
        )

    def _compose_sync(self, avatar_path: Path, broll_paths: list[Path], output_path: Path) -> float:
        """Render the composition (runs in a worker thread); returns the duration."""
        from moviepy import CompositeVideoClip, VideoFileClip

        base = self._resize_cover(VideoFileClip(str(avatar_path)), self.width, self.height)
        layers = [base]
        sources = [base]

        if broll_paths:
            spacing = base.duration / (len(broll_paths) + 1)
            for i, path in enumerate(broll_paths):
                clip = VideoFileClip(str(path)).without_audio()
                sources.append(clip)
                length = min(CUTAWAY_SECONDS, clip.duration, spacing)
                cutaway = self._resize_cover(clip.subclipped(0, length), self.width, self.height)
                layers.append(cutaway.with_start(spacing * (i + 1)))

        final = CompositeVideoClip(layers, size=(self.width, self.height)).with_duration(
            base.duration
        )
        duration = float(final.duration)

        try:
            final.write_videofile(
                str(output_path),
                fps=self.fps,
                codec=self.codec,
                audio_codec=self.audio_codec,
                logger=None,
            )
        finally:
            final.close()
            for clip in sources:
                clip.close()

        return duration

    @staticmethod
    def _resize_cover(clip: Any, target_w: int, target_h: int) -> Any:
        """Scale and center-crop a clip to exactly fill target dimensions."""
        cw, ch = clip.size
        scale = max(target_w / cw, target_h / ch)
        clip = clip.resized(scale)

        sw, sh = clip.size
        if sw != target_w or sh != target_h:
            x1 = (sw - target_w) // 2
            y1 = (sh - target_h) // 2
            clip = clip.cropped(x1=x1, y1=y1, width=target_w, height=target_h)

        return clip

    async def _download_file(self, url: str, prefix: str) -> tuple[Path, bool]:
        """Fetch a clip into the work directory.

        Returns ``(path, is_temp)``; file:// URLs are used in place. Only file,
        http and https URLs are accepted.
        """
        scheme = urlparse(url).scheme
        if scheme == "file":
            return Path(unquote(urlparse(url).path)), False
        if scheme not in ("http", "https"):
            raise ProviderError(self.name, f"unsupported clip URL: {url}")

        output_path = self.work_dir / f"{prefix}_{uuid4().hex}.mp4"

        async with httpx.AsyncClient(timeout=120.0, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            output_path.write_bytes(response.content)

        return output_path, True

    async def health_check(self) -> bool:
        try:
            import imageio_ffmpeg

            return imageio_ffmpeg.get_ffmpeg_exe() is not None
        except Exception as e:
            logger.error("moviepy_health_check_failed", error=str(e))
            return False
