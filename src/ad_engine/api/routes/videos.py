"""Video endpoints: review queue, detail, cost breakdown, review, deletion and iteration."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import AliasChoices, BaseModel, Field

from ad_engine.api.deps import CapabilitiesDep, DispatcherDep, SessionDep, parse_uuid
from ad_engine.api.schemas import GenerationResponse, VideoResponse
from ad_engine.domain.enums import QualityStatus, VideoStatus
from ad_engine.logging import get_logger
from ad_engine.services.cost_ledger import CostLedger
from ad_engine.services.iteration import IterationService
from ad_engine.services.videos import MAX_PAGE_SIZE, UNSET, VideoService

router = APIRouter(prefix="/videos", tags=["Videos"])
logger = get_logger(__name__)


class VideoListItem(VideoResponse):
    """Video with the brief it was generated from."""

    brief_id: UUID


class VideoListResponse(BaseModel):
    """One page of the review queue."""

    items: list[VideoListItem]
    total: int
    limit: int
    offset: int


class DeleteVideoResponse(BaseModel):
    deleted: bool
    id: UUID


class CostLogResponse(BaseModel):
    """One ledger row."""

    id: UUID
    video_id: UUID | None
    service_type: str
    provider: str
    operation: str
    input_units: float
    output_units: float
    unit_type: str
    cost: Decimal
    created_at: datetime | None

    model_config = {"from_attributes": True}


class VideoCostsResponse(BaseModel):
    """Cost breakdown for one video."""

    video_id: UUID
    total_cost: Decimal
    by_service_type: dict[str, Decimal]
    cost_logs: list[CostLogResponse]


class ReviewRequest(BaseModel):
    """Quality review outcome and reviewer note; at least one is required."""

    quality_status: QualityStatus | None = Field(
        default=None,
        validation_alias=AliasChoices("quality_status", "qualityStatus"),
    )
    quality_note: str | None = Field(
        default=None,
        max_length=2000,
        description="Reviewer note; send null to clear it",
        validation_alias=AliasChoices("quality_note", "qualityNote"),
    )


class IterateRequest(BaseModel):
    """Request to spawn a new generation from an approved video."""

    target_count: int = Field(
        ...,
        description="Number of videos to generate (1-10)",
        validation_alias=AliasChoices("target_count", "targetCount"),
    )
    variation_params: dict[str, Any] | None = Field(
        default=None,
        description="Requested variations; recorded but not yet applied to script writing",
        validation_alias=AliasChoices("variation_params", "variationParams"),
    )


class IterationResponse(GenerationResponse):
    """The child generation created by an iteration."""

    source_video_id: UUID
    variation_params: dict[str, Any] | None


@router.get(
    "",
    response_model=VideoListResponse,
    summary="List videos",
    description=(
        "Newest videos first, filtered by review outcome, status, generation or brief. "
        "Filters may also be given in camelCase (qualityStatus, generationId, briefId)."
    ),
)
async def list_videos(
    session: SessionDep,
    quality_status: QualityStatus | None = None,
    video_status: Annotated[VideoStatus | None, Query(alias="status")] = None,
    generation_id: UUID | None = None,
    brief_id: UUID | None = None,
    quality_status_alias: Annotated[
        QualityStatus | None, Query(alias="qualityStatus", include_in_schema=False)
    ] = None,
    generation_id_alias: Annotated[
        UUID | None, Query(alias="generationId", include_in_schema=False)
    ] = None,
    brief_id_alias: Annotated[
        UUID | None, Query(alias="briefId", include_in_schema=False)
    ] = None,
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> VideoListResponse:
    rows, total = VideoService(session).search(
        quality_status=quality_status or quality_status_alias,
        status=video_status,
        generation_id=generation_id or generation_id_alias,
        brief_id=brief_id or brief_id_alias,
        limit=limit,
        offset=offset,
    )

    items = [
        VideoListItem.model_validate(
            {**VideoResponse.model_validate(video).model_dump(), "brief_id": video_brief_id}
        )
        for video, video_brief_id in rows
    ]
    return VideoListResponse(items=items, total=total, limit=limit, offset=offset)


@router.get(
    "/{video_id}",
    response_model=VideoResponse,
    summary="Get video",
)
async def get_video(video_id: str, session: SessionDep) -> VideoResponse:
    video = VideoService(session).get(parse_uuid(video_id, "video"))
    return VideoResponse.model_validate(video)


@router.get(
    "/{video_id}/costs",
    response_model=VideoCostsResponse,
    summary="Video cost breakdown",
    description="Ledger rows for a video with subtotals per service type.",
)
async def get_video_costs(video_id: str, session: SessionDep) -> VideoCostsResponse:
    video = VideoService(session).get(parse_uuid(video_id, "video"))
    rows, subtotals = CostLedger(session).video_breakdown(video.id)

    return VideoCostsResponse(
        video_id=video.id,
        total_cost=video.total_cost,
        by_service_type=subtotals,
        cost_logs=[CostLogResponse.model_validate(r) for r in rows],
    )


@router.patch(
    "/{video_id}",
    response_model=VideoResponse,
    summary="Review video",
    description=(
        "Set the review outcome and/or a reviewer note. Only PASSED videos can be "
        "iterated on. Passing a video without a note clears the previous note."
    ),
)
@router.patch(
    "/{video_id}/quality",
    response_model=VideoResponse,
    summary="Record quality review",
    include_in_schema=False,
)
async def review_video(
    video_id: str,
    request: ReviewRequest,
    session: SessionDep,
) -> VideoResponse:
    video = VideoService(session).review(
        parse_uuid(video_id, "video"),
        quality_status=request.quality_status,
        quality_note=(
            request.quality_note if "quality_note" in request.model_fields_set else UNSET
        ),
    )
    return VideoResponse.model_validate(video)


@router.delete(
    "/{video_id}",
    response_model=DeleteVideoResponse,
    summary="Delete video",
    description=(
        "Remove a video and its stored file. Its cost rows stay in the ledger "
        "and the generation total is recomputed."
    ),
)
async def delete_video(
    video_id: str,
    session: SessionDep,
    capabilities: CapabilitiesDep,
) -> DeleteVideoResponse:
    video_uuid = parse_uuid(video_id, "video")
    await VideoService(session).delete(video_uuid, capabilities.storage)
    return DeleteVideoResponse(deleted=True, id=video_uuid)


@router.post(
    "/{video_id}/iterate",
    response_model=IterationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Iterate on video",
    description=(
        "Create a child generation from an approved video's brief and start it in the background."
    ),
)
async def iterate_video(
    video_id: str,
    request: IterateRequest,
    session: SessionDep,
    dispatcher: DispatcherDep,
) -> IterationResponse:
    source_video_id = parse_uuid(video_id, "video")

    generation = IterationService(session, dispatcher).iterate(
        source_video_id,
        request.target_count,
        request.variation_params,
    )

    return IterationResponse(
        **GenerationResponse.model_validate(generation).model_dump(),
        source_video_id=source_video_id,
        variation_params=request.variation_params,
    )
