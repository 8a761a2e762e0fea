"""Video review queue: listing, quality review and deletion."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ad_engine.adapters.storage.base import StorageBackend
from ad_engine.db.models import GenerationModel, VideoModel
from ad_engine.domain.enums import QualityStatus, VideoStatus
from ad_engine.domain.errors import ValidationError, VideoNotFoundError
from ad_engine.logging import get_logger
from ad_engine.services.cost_ledger import CostLedger
from ad_engine.services.pipeline import storage_key

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100

# Marks an argument the caller did not send, as opposed to an explicit None
UNSET: Any = object()


class VideoService:
    """Queries and review updates for generated videos."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, video_id: UUID) -> VideoModel:
        video = self.session.get(VideoModel, video_id)
        if video is None:
            raise VideoNotFoundError(video_id)
        return video

    def search(
        self,
        quality_status: QualityStatus | None = None,
        status: VideoStatus | None = None,
        generation_id: UUID | None = None,
        brief_id: UUID | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[VideoModel, UUID]], int]:
        """Newest videos matching every given filter, with their brief ids.

        Returns the page and the total number of matches.
        """
        query: Select[Any] = select(VideoModel, GenerationModel.brief_id).join(
            GenerationModel, VideoModel.generation_id == GenerationModel.id
        )
        if quality_status is not None:
            query = query.where(VideoModel.quality_status == quality_status)
        if status is not None:
            query = query.where(VideoModel.status == status)
        if generation_id is not None:
            query = query.where(VideoModel.generation_id == generation_id)
        if brief_id is not None:
            query = query.where(GenerationModel.brief_id == brief_id)

        total = self.session.scalar(select(func.count()).select_from(query.subquery())) or 0
        page = self.session.execute(
            query.order_by(VideoModel.created_at.desc(), VideoModel.variant_index)
            .limit(min(limit, MAX_PAGE_SIZE))
            .offset(offset)
        ).all()
        return [(video, video_brief_id) for video, video_brief_id in page], total

    def review(
        self,
        video_id: UUID,
        quality_status: QualityStatus | None = None,
        quality_note: str | None = UNSET,
    ) -> VideoModel:
        """Record a review outcome.

        Passing a video clears its note unless a new note is given. Moving a
        video back to PENDING clears ``reviewed_at``.
        """
        if quality_status is None and quality_note is UNSET:
            raise ValidationError({"quality_status": "Provide a quality status or a note"})

        video = self.get(video_id)

        if quality_status is not None:
            video.quality_status = quality_status
            video.reviewed_at = (
                None if quality_status == QualityStatus.PENDING else datetime.now(UTC)
            )

        if quality_note is not UNSET:
            video.quality_note = quality_note
        elif quality_status == QualityStatus.PASSED:
            video.quality_note = None

        self.session.commit()
        self.session.refresh(video)

        logger.info(
            "video_reviewed",
            video_id=str(video_id),
            quality_status=video.quality_status,
            has_note=video.quality_note is not None,
        )
        return video

    async def delete(self, video_id: UUID, storage: StorageBackend) -> None:
        """Delete a video and its stored file.

        The stored object is removed best-effort. Ledger rows are kept with
        their video reference cleared, and the generation total is recomputed.
        """
        video = self.get(video_id)
        generation_id = video.generation_id

        if video.video_url:
            key = storage_key(generation_id, video_id)
            try:
                await storage.delete(key)
            except Exception as e:
                logger.warning("video_file_delete_failed", video_id=str(video_id), error=str(e))

        self.session.delete(video)
        self.session.flush()
        CostLedger(self.session).rollup_generation_cost(generation_id)
        self.session.commit()

        logger.info("video_deleted", video_id=str(video_id), generation_id=str(generation_id))
