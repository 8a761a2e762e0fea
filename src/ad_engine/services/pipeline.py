"""Generation pipeline orchestrator.

Drives one Generation from PENDING to a terminal status:

1. claim the generation (atomic PENDING -> QUEUED)
2. SCRIPT_GEN - one batched script call, generation-scoped cost row
3. best-effort B-roll fetch
4. AVATAR_GEN - one Video row per script, all created before any work starts
5. bounded concurrent per-video work (avatar -> compose -> upload), each video
   isolated from its siblings
6. join, roll up costs, COMPLETED if at least one video completed else FAILED

Database access happens in short session units that never span an ``await``,
so concurrent per-video tasks never share a session.
"""

import asyncio
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ad_engine.adapters.broll.base import BRollClip, BRollService
from ad_engine.adapters.script.base import Script
from ad_engine.config import settings
from ad_engine.db.models import GenerationModel, VideoModel
from ad_engine.db.session import SessionContextFactory, get_session_context
from ad_engine.domain.enums import (
    BriefStatus,
    GenerationStatus,
    ServiceType,
    UnitType,
    VideoStatus,
)
from ad_engine.domain.errors import (
    BriefNotParsedError,
    GenerationNotFoundError,
    InvalidTransitionError,
    ProviderError,
)
from ad_engine.domain.models import ParsedBrief
from ad_engine.logging import get_logger
from ad_engine.services.cost_ledger import ZERO, CostEntry, CostLedger, Pricing
from ad_engine.services.providers import Capabilities, CapabilitiesResolver, resolve_capabilities

logger = get_logger(__name__)

# Label-only stages entered while per-video work is in flight
_PROGRESS_STAGES = (
    GenerationStatus.VIDEO_GEN,
    GenerationStatus.COMPOSITING,
    GenerationStatus.UPLOADING,
)


@dataclass
class PipelineResult:
    """Outcome of one orchestrator run."""

    generation_id: UUID
    status: GenerationStatus
    completed: int = 0
    failed: int = 0
    total_cost: Decimal = ZERO
    skipped: bool = False


def storage_key(generation_id: UUID, video_id: UUID) -> str:
    return f"generations/{generation_id}/{video_id}.mp4"


class GenerationPipeline:
    """Runs the generation state machine.

    Args:
        resolver: Builds the provider set for a run (called once per run)
        session_factory: Context manager factory yielding a committed session
        pricing: Unit prices for cost rows
        max_concurrency: Upper bound on per-video tasks in flight
    """

    def __init__(
        self,
        resolver: CapabilitiesResolver | None = None,
        session_factory: SessionContextFactory | None = None,
        pricing: Pricing | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.resolver = resolver or resolve_capabilities
        self.session_factory = session_factory or get_session_context
        self.pricing = pricing or Pricing.from_settings()
        self.max_concurrency = max_concurrency or settings.pipeline_max_concurrency

        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    async def run(self, generation_id: UUID) -> PipelineResult:
        """Run the pipeline for one generation.

        Per-video failures are absorbed. Anything else marks the generation
        FAILED and is re-raised to the caller.
        """
        log = logger.bind(generation_id=str(generation_id))

        try:
            return await self._run(generation_id)
        except Exception as e:
            log.error("generation_pipeline_failed", error=str(e), error_type=type(e).__name__)
            self._mark_failed(generation_id, str(e))
            raise

    async def _run(self, generation_id: UUID) -> PipelineResult:
        log = logger.bind(generation_id=str(generation_id))

        # Step 1: load generation and brief
        with self.session_factory() as session:
            generation = session.get(GenerationModel, generation_id)
            if generation is None:
                raise GenerationNotFoundError(generation_id)

            if generation.status != GenerationStatus.PENDING:
                log.info("generation_already_started", status=generation.status)
                return PipelineResult(
                    generation_id=generation_id,
                    status=GenerationStatus(generation.status),
                    skipped=True,
                )

            brief = generation.brief
            if brief.status != BriefStatus.PARSED or not brief.parsed_data:
                raise BriefNotParsedError(brief.id)

            parsed_brief = ParsedBrief.from_dict(brief.parsed_data)
            target_count = generation.target_count

        # Step 2: providers
        capabilities = self.resolver()

        # Step 3: claim, then write scripts
        if not self._claim(generation_id):
            log.info("generation_claim_lost")
            with self.session_factory() as session:
                current = session.get(GenerationModel, generation_id)
                status = GenerationStatus(current.status) if current else GenerationStatus.FAILED
            return PipelineResult(generation_id=generation_id, status=status, skipped=True)

        log.info(
            "generation_pipeline_started",
            target_count=target_count,
            **capabilities.names(),
        )

        self._transition(generation_id, GenerationStatus.SCRIPT_GEN)
        scripts, tokens_used = await self._generate_scripts(
            capabilities, parsed_brief, target_count
        )
        self._log_cost(
            CostEntry(
                service_type=ServiceType.SCRIPT,
                provider=capabilities.script.name,
                operation="generate_scripts",
                unit_type=UnitType.TOKENS,
                cost=self.pricing.script_cost(tokens_used),
                input_units=len(json.dumps(parsed_brief.to_dict())),
                output_units=tokens_used,
            )
        )
        log.info("scripts_generated", count=len(scripts))

        # Step 4: B-roll
        broll = await self._fetch_broll(capabilities.broll, parsed_brief.broll_tags)
        log.info("broll_fetched", clip_count=len(broll))

        # Step 5: every Video row exists before any per-video work
        self._transition(generation_id, GenerationStatus.AVATAR_GEN)
        video_ids = self._create_videos(generation_id, capabilities, scripts)

        # Steps 6-8: bounded fan-out, progress labels, join
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.create_task(
                self._process_video_bounded(
                    semaphore, capabilities, generation_id, video_id, script, broll
                )
            )
            for video_id, script in zip(video_ids, scripts, strict=True)
        ]

        try:
            for stage in _PROGRESS_STAGES:
                self._transition(generation_id, stage)
        finally:
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        errors = [o for o in outcomes if isinstance(o, BaseException)]
        if errors:
            raise errors[0]

        completed = sum(1 for o in outcomes if o is True)
        failed = len(outcomes) - completed

        # Steps 9-10: roll-up and final status
        final_status = GenerationStatus.COMPLETED if completed else GenerationStatus.FAILED
        with self.session_factory() as session:
            total_cost = self._rollup_costs(session, generation_id)

            generation = session.get(GenerationModel, generation_id)
            self._apply_transition(generation, final_status)
            generation.completed_at = datetime.now(UTC)
            if final_status == GenerationStatus.FAILED:
                generation.error_message = f"All {failed} videos failed"

        log.info(
            "generation_pipeline_finished",
            status=final_status,
            completed=completed,
            failed=failed,
            total_cost=str(total_cost),
        )

        return PipelineResult(
            generation_id=generation_id,
            status=final_status,
            completed=completed,
            failed=failed,
            total_cost=total_cost,
        )

    # -- generation state ---------------------------------------------------

    def _claim(self, generation_id: UUID) -> bool:
        """Atomically move PENDING -> QUEUED; False if another run got there first."""
        with self.session_factory() as session:
            result = session.execute(
                update(GenerationModel)
                .where(
                    GenerationModel.id == generation_id,
                    GenerationModel.status == GenerationStatus.PENDING,
                )
                .values(status=GenerationStatus.QUEUED)
            )
            claimed = result.rowcount == 1

        if claimed:
            logger.info(
                "generation_stage_changed",
                generation_id=str(generation_id),
                status=GenerationStatus.QUEUED,
            )
        return claimed

    def _transition(self, generation_id: UUID, target: GenerationStatus) -> None:
        with self.session_factory() as session:
            generation = session.get(GenerationModel, generation_id)
            if generation is None:
                raise GenerationNotFoundError(generation_id)
            self._apply_transition(generation, target)

    @staticmethod
    def _apply_transition(generation: GenerationModel, target: GenerationStatus) -> None:
        current = GenerationStatus(generation.status)
        if not current.can_transition_to(target):
            raise InvalidTransitionError(generation.id, current, target)

        generation.status = target
        logger.info("generation_stage_changed", generation_id=str(generation.id), status=target)

    def _mark_failed(self, generation_id: UUID, error: str) -> None:
        """Record a fatal error on the generation and on any unfinished video."""
        try:
            with self.session_factory() as session:
                generation = session.get(GenerationModel, generation_id)
                if generation is None:
                    return
                if GenerationStatus(generation.status).is_terminal:
                    return

                unfinished = session.scalars(
                    select(VideoModel).where(
                        VideoModel.generation_id == generation_id,
                        VideoModel.status.in_([VideoStatus.PENDING, VideoStatus.PROCESSING]),
                    )
                ).all()
                for video in unfinished:
                    video.status = VideoStatus.FAILED
                    video.generation_params = {
                        **(video.generation_params or {}),
                        "error": f"Generation failed: {error}",
                    }

                generation.status = GenerationStatus.FAILED
                generation.error_message = error
                generation.completed_at = datetime.now(UTC)
        except Exception as e:
            logger.error(
                "generation_mark_failed_error",
                generation_id=str(generation_id),
                error=str(e),
            )
            return

        # Cost rows written before the failure still count toward the totals
        try:
            with self.session_factory() as session:
                self._rollup_costs(session, generation_id)
        except Exception as e:
            logger.error(
                "generation_cost_rollup_failed",
                generation_id=str(generation_id),
                error=str(e),
            )

    @staticmethod
    def _rollup_costs(session: Session, generation_id: UUID) -> Decimal:
        """Recompute every video total of the generation, then the generation total."""
        ledger = CostLedger(session)
        video_ids = session.scalars(
            select(VideoModel.id).where(VideoModel.generation_id == generation_id)
        ).all()
        for video_id in video_ids:
            ledger.rollup_video_cost(video_id)
        return ledger.rollup_generation_cost(generation_id)

    # -- batch steps ----------------------------------------------------------

    async def _generate_scripts(
        self, capabilities: Capabilities, brief: ParsedBrief, count: int
    ) -> tuple[list[Script], int]:
        """Scripts for the batch plus the tokens billed for every variant returned."""
        scripts = await capabilities.script.generate(brief, count)
        if not scripts:
            raise ProviderError(capabilities.script.name, "no scripts returned")

        tokens_used = sum(s.tokens_used for s in scripts)
        if len(scripts) != count:
            logger.warning("script_count_mismatch", requested=count, returned=len(scripts))
        return scripts[:count], tokens_used

    async def _fetch_broll(self, service: BRollService, tags: list[str]) -> list[BRollClip]:
        try:
            return await service.fetch(tags)
        except Exception as e:
            logger.warning("broll_fetch_failed", provider=service.name, tags=tags, error=str(e))
            return []

    def _create_videos(
        self, generation_id: UUID, capabilities: Capabilities, scripts: list[Script]
    ) -> list[UUID]:
        with self.session_factory() as session:
            videos = [
                VideoModel(
                    generation_id=generation_id,
                    variant_index=index,
                    status=VideoStatus.PENDING,
                    script_provider=capabilities.script.name,
                    avatar_provider=capabilities.avatar.name,
                    generation_params={"script": script.to_params()},
                )
                for index, script in enumerate(scripts)
            ]
            session.add_all(videos)
            session.flush()
            video_ids = [video.id for video in videos]

        logger.info(
            "videos_created",
            generation_id=str(generation_id),
            count=len(video_ids),
        )
        return video_ids

    def _log_cost(self, entry: CostEntry) -> None:
        with self.session_factory() as session:
            CostLedger(session).log_cost(entry)

    # -- per-video work -------------------------------------------------------

    async def _process_video_bounded(self, semaphore: asyncio.Semaphore, *args: Any) -> bool:
        async with semaphore:
            return await self._process_video(*args)

    async def _process_video(
        self,
        capabilities: Capabilities,
        generation_id: UUID,
        video_id: UUID,
        script: Script,
        broll: list[BRollClip],
    ) -> bool:
        """Avatar -> compose -> upload for one video. Returns True on success.

        Any exception is caught here and recorded on this video only.
        """
        log = logger.bind(generation_id=str(generation_id), video_id=str(video_id))

        try:
            self._update_video(video_id, status=VideoStatus.PROCESSING)

            avatar = await capabilities.avatar.generate(script)
            self._log_cost(
                CostEntry(
                    video_id=video_id,
                    service_type=ServiceType.AVATAR,
                    provider=capabilities.avatar.name,
                    operation="generate_avatar",
                    unit_type=UnitType.SECONDS,
                    cost=self.pricing.avatar_cost(avatar.duration_seconds),
                    input_units=len(script.testimonial_script),
                    output_units=avatar.duration_seconds,
                )
            )

            composed = await capabilities.composer.compose(avatar, broll)
            self._log_cost(
                CostEntry(
                    video_id=video_id,
                    service_type=ServiceType.VIDEO,
                    provider=capabilities.composer.name,
                    operation="compose_video",
                    unit_type=UnitType.SECONDS,
                    cost=self.pricing.composition_cost(),
                    input_units=1,
                    output_units=composed.duration_seconds,
                )
            )

            url = await capabilities.storage.upload(
                composed.video_data, storage_key(generation_id, video_id)
            )
            self._log_cost(
                CostEntry(
                    video_id=video_id,
                    service_type=ServiceType.STORAGE,
                    provider=capabilities.storage.name,
                    operation="upload_video",
                    unit_type=UnitType.BYTES,
                    cost=self.pricing.storage_cost(composed.size_bytes),
                    input_units=0,
                    output_units=composed.size_bytes,
                )
            )

            self._update_video(video_id, status=VideoStatus.COMPLETED, video_url=url)
        except Exception as e:
            log.warning("video_pipeline_failed", error=str(e), error_type=type(e).__name__)
            self._update_video(
                video_id,
                status=VideoStatus.FAILED,
                error=str(e) or type(e).__name__,
            )
            return False

        log.info("video_pipeline_completed", video_url=url)
        return True

    def _update_video(
        self,
        video_id: UUID,
        status: VideoStatus,
        video_url: str | None = None,
        error: str | None = None,
    ) -> None:
        with self.session_factory() as session:
            video = session.get(VideoModel, video_id)
            video.status = status
            if video_url is not None:
                video.video_url = video_url
            if error is not None:
                # Reassign so the JSON column change is tracked
                video.generation_params = {**(video.generation_params or {}), "error": error}

        logger.debug("video_status_changed", video_id=str(video_id), status=status)
