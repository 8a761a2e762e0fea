"""Generation creation, dispatch and read models."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ad_engine.db.models import BriefModel, GenerationModel, VideoModel
from ad_engine.domain.enums import BriefStatus, GenerationStatus, VideoStatus
from ad_engine.domain.errors import (
    BriefNotFoundError,
    DispatchError,
    GenerationNotFoundError,
    ValidationError,
)
from ad_engine.logging import get_logger

logger = get_logger(__name__)

MIN_TARGET_COUNT = 1
MAX_TARGET_COUNT = 10


class GenerationDispatcher(ABC):
    """Hands a persisted generation to background execution."""

    @abstractmethod
    def dispatch(self, generation_id: UUID) -> str | None:
        """Start the pipeline for ``generation_id`` without waiting for it.

        Returns:
            A task identifier, if the backend provides one
        """
        ...


def validate_target_count(target_count: int) -> None:
    if not MIN_TARGET_COUNT <= target_count <= MAX_TARGET_COUNT:
        raise ValidationError(
            {
                "target_count": (
                    f"Must be between {MIN_TARGET_COUNT} and {MAX_TARGET_COUNT}, "
                    f"got {target_count}"
                )
            }
        )


def generation_progress(generation: GenerationModel) -> dict[str, int]:
    """Per-status video counts for a generation."""
    statuses = [video.status for video in generation.videos]
    completed = statuses.count(VideoStatus.COMPLETED)
    failed = statuses.count(VideoStatus.FAILED)
    return {
        "total": len(statuses),
        "completed": completed,
        "failed": failed,
        "pending": len(statuses) - completed - failed,
    }


class GenerationService:
    """Creates generations from parsed briefs and dispatches the pipeline."""

    def __init__(self, session: Session, dispatcher: GenerationDispatcher | None = None) -> None:
        self.session = session
        self.dispatcher = dispatcher

    def create(self, brief_id: UUID, target_count: int) -> GenerationModel:
        validate_target_count(target_count)

        brief = self.session.get(BriefModel, brief_id)
        if brief is None:
            raise BriefNotFoundError(brief_id)
        if brief.status != BriefStatus.PARSED:
            raise ValidationError({"brief_id": "Brief must be parsed before generating videos"})

        generation = GenerationModel(
            brief_id=brief.id,
            target_count=target_count,
            status=GenerationStatus.PENDING,
        )
        self.session.add(generation)
        self.session.commit()

        logger.info(
            "generation_created",
            generation_id=str(generation.id),
            brief_id=str(brief_id),
            target_count=target_count,
        )
        return self.dispatch(generation)

    def dispatch(self, generation: GenerationModel) -> GenerationModel:
        """Hand a committed generation to the dispatcher and record the task id."""
        if self.dispatcher is None:
            raise DispatchError("No generation dispatcher configured")

        try:
            task_id = self.dispatcher.dispatch(generation.id)
        except Exception as e:
            logger.error(
                "generation_dispatch_failed",
                generation_id=str(generation.id),
                error=str(e),
            )
            generation.status = GenerationStatus.FAILED
            generation.error_message = f"Dispatch failed: {e}"
            self.session.commit()
            raise DispatchError(f"Could not start generation {generation.id}: {e}") from e

        generation.task_id = task_id
        self.session.commit()
        self.session.refresh(generation)

        logger.info("generation_dispatched", generation_id=str(generation.id), task_id=task_id)
        return generation

    def get(self, generation_id: UUID) -> GenerationModel:
        generation = self.session.get(GenerationModel, generation_id)
        if generation is None:
            raise GenerationNotFoundError(generation_id)
        return generation

    def list_for_brief(self, brief_id: UUID) -> list[tuple[GenerationModel, int]]:
        """Generations of a brief, newest first, each with its video count."""
        if self.session.get(BriefModel, brief_id) is None:
            raise BriefNotFoundError(brief_id)

        video_count = (
            select(func.count(VideoModel.id))
            .where(VideoModel.generation_id == GenerationModel.id)
            .correlate(GenerationModel)
            .scalar_subquery()
        )
        rows = self.session.execute(
            select(GenerationModel, video_count)
            .where(GenerationModel.brief_id == brief_id)
            .order_by(GenerationModel.created_at.desc())
        ).all()
        return [(generation, count) for generation, count in rows]

    def summary(self, generation_id: UUID) -> dict[str, Any]:
        generation = self.get(generation_id)
        return {
            "generation": generation,
            "progress": generation_progress(generation),
            "child_count": len(generation.child_generations),
        }
