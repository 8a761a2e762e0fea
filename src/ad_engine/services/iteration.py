"""Iteration: new generations spawned from an approved video."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from ad_engine.db.models import GenerationModel, VideoModel
from ad_engine.domain.enums import BriefStatus, GenerationStatus, QualityStatus
from ad_engine.domain.errors import ValidationError, VideoNotFoundError
from ad_engine.logging import get_logger
from ad_engine.services.cost_ledger import ZERO
from ad_engine.services.generations import (
    GenerationDispatcher,
    GenerationService,
    validate_target_count,
)

logger = get_logger(__name__)


class IterationService:
    """Creates a child generation from a video that passed quality review.

    The child keeps the source brief and points back at the generation that
    produced the source video. Scripts are re-derived from the brief alone;
    ``variation_params`` is accepted and logged only.
    """

    def __init__(self, session: Session, dispatcher: GenerationDispatcher) -> None:
        self.session = session
        self.generations = GenerationService(session, dispatcher)

    def iterate(
        self,
        source_video_id: UUID,
        target_count: int,
        variation_params: dict[str, Any] | None = None,
    ) -> GenerationModel:
        validate_target_count(target_count)

        video = self.session.get(VideoModel, source_video_id)
        if video is None:
            raise VideoNotFoundError(source_video_id)

        if video.quality_status != QualityStatus.PASSED:
            raise ValidationError(
                {
                    "source_video_id": (
                        f"Video must pass quality review before iterating "
                        f"(quality_status={video.quality_status})"
                    )
                }
            )

        source_generation = video.generation
        brief = source_generation.brief
        if brief.status != BriefStatus.PARSED:
            raise ValidationError(
                {"brief_id": f"Source brief is not parsed (status={brief.status})"}
            )

        generation = GenerationModel(
            brief_id=source_generation.brief_id,
            parent_generation_id=source_generation.id,
            target_count=target_count,
            status=GenerationStatus.PENDING,
            total_cost=ZERO,
        )
        self.session.add(generation)
        self.session.commit()

        logger.info(
            "iteration_created",
            generation_id=str(generation.id),
            parent_generation_id=str(source_generation.id),
            source_video_id=str(source_video_id),
            target_count=target_count,
            variation_params=variation_params or {},
        )
        return self.generations.dispatch(generation)
