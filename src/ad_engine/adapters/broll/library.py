"""B-roll clip library client."""

from typing import Any

import httpx

from ad_engine.adapters.broll.base import BRollClip, BRollService
from ad_engine.config import settings
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class LibraryBRollService(BRollService):
    """Searches a hosted clip library by tag.

    Expects ``GET {base_url}/clips?tag=<tag>&limit=<n>`` returning
    ``{"clips": [{"id", "url", "duration_seconds", "type"}]}``. Tags with no
    matches are skipped; when nothing matches at all the fallback tags are
    searched instead, and fixed fallback clips are returned if that finds
    nothing either. Failed searches are logged and skipped.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        clips_per_tag: int = 1,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = (base_url or settings.broll_library_url or "").rstrip("/")
        self.api_key = api_key or settings.broll_library_api_key
        self.clips_per_tag = clips_per_tag
        self.timeout = timeout

        if not self.base_url:
            logger.warning("broll_library_url_not_configured")

    @property
    def name(self) -> str:
        return "library"

    def _headers(self) -> dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    async def _search(self, client: httpx.AsyncClient, tag: str) -> list[BRollClip]:
        response = await client.get(
            f"{self.base_url}/clips",
            params={"tag": tag, "limit": self.clips_per_tag},
            headers=self._headers(),
        )
        response.raise_for_status()
        items: list[dict[str, Any]] = response.json().get("clips", [])

        return [
            BRollClip(
                id=str(item["id"]),
                url=item["url"],
                tag=tag,
                duration_seconds=float(item.get("duration_seconds", 5.0)),
                type=item.get("type", "video"),
            )
            for item in items
        ]

    async def _search_tag(self, client: httpx.AsyncClient, tag: str) -> list[BRollClip]:
        try:
            return await self._search(client, tag)
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning("broll_search_failed", tag=tag, error=str(e))
            return []

    async def fetch(self, tags: list[str]) -> list[BRollClip]:
        if not self.base_url:
            logger.warning("broll_using_fallback_clips", reason="no library url")
            return self.fallback_clips()

        clips: list[BRollClip] = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for tag in tags:
                clips.extend(await self._search_tag(client, tag))

            if not clips:
                logger.info("broll_using_fallback_tags", requested=tags)
                for tag in self.FALLBACK_TAGS:
                    clips.extend(await self._search_tag(client, tag))

        if not clips:
            logger.warning("broll_using_fallback_clips", reason="no matches")
            return self.fallback_clips()

        logger.info("broll_fetch_completed", tags=tags, clip_count=len(clips))
        return clips

    async def health_check(self) -> bool:
        if not self.base_url:
            return False

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(f"{self.base_url}/health", headers=self._headers())
                return response.status_code == 200
        except httpx.HTTPError:
            return False
