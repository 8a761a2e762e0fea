"""Brief endpoints: create, edit, duplicate, parse and start generations."""

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import AliasChoices, BaseModel, Field

from ad_engine.api.deps import DispatcherDep, SessionDep, parse_uuid
from ad_engine.api.schemas import GenerationResponse
from ad_engine.logging import get_logger
from ad_engine.services.briefs import BriefService
from ad_engine.services.generations import GenerationService

router = APIRouter(prefix="/briefs", tags=["Briefs"])
logger = get_logger(__name__)


class CreateBriefRequest(BaseModel):
    """Request to create a brief from free text."""

    raw_input: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        validation_alias=AliasChoices("raw_input", "rawInput"),
    )


class UpdateBriefRequest(BaseModel):
    """Replacement brief text; the brief returns to unparsed."""

    raw_input: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        validation_alias=AliasChoices("raw_input", "rawInput"),
    )


class BriefResponse(BaseModel):
    """Brief response model."""

    id: UUID
    raw_input: str
    parsed_data: dict[str, Any] | None
    status: str
    error_message: str | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class DeleteBriefResponse(BaseModel):
    deleted: bool
    id: UUID


class CreateGenerationRequest(BaseModel):
    """Request to generate a batch of videos from a parsed brief."""

    target_count: int = Field(
        ...,
        description="Number of videos to generate (1-10)",
        validation_alias=AliasChoices("target_count", "targetCount"),
    )


class GenerationListItem(GenerationResponse):
    """Generation with its video count."""

    video_count: int


@router.post(
    "",
    response_model=BriefResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create brief",
    description="Store a raw marketing brief. It must be parsed before generating videos.",
)
async def create_brief(request: CreateBriefRequest, session: SessionDep) -> BriefResponse:
    brief = BriefService(session).create(request.raw_input)
    return BriefResponse.model_validate(brief)


@router.get(
    "",
    response_model=list[BriefResponse],
    summary="List briefs",
)
async def list_briefs(
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> list[BriefResponse]:
    briefs = BriefService(session).recent(limit=limit, offset=offset)
    return [BriefResponse.model_validate(b) for b in briefs]


@router.get(
    "/{brief_id}",
    response_model=BriefResponse,
    summary="Get brief",
)
async def get_brief(brief_id: str, session: SessionDep) -> BriefResponse:
    brief = BriefService(session).get(parse_uuid(brief_id, "brief"))
    return BriefResponse.model_validate(brief)


@router.patch(
    "/{brief_id}",
    response_model=BriefResponse,
    summary="Edit brief",
    description="Replace the brief text. Parsed data is cleared; the brief must be parsed again.",
)
async def update_brief(
    brief_id: str,
    request: UpdateBriefRequest,
    session: SessionDep,
) -> BriefResponse:
    brief = BriefService(session).update(parse_uuid(brief_id, "brief"), request.raw_input)
    return BriefResponse.model_validate(brief)


@router.delete(
    "/{brief_id}",
    response_model=DeleteBriefResponse,
    summary="Delete brief",
    description="Delete a brief with its generations and videos. Cost rows stay in the ledger.",
)
async def delete_brief(brief_id: str, session: SessionDep) -> DeleteBriefResponse:
    brief_uuid = parse_uuid(brief_id, "brief")
    BriefService(session).delete(brief_uuid)
    return DeleteBriefResponse(deleted=True, id=brief_uuid)


@router.post(
    "/{brief_id}/duplicate",
    response_model=BriefResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate brief",
    description="Create a new unparsed brief with the same text.",
)
async def duplicate_brief(brief_id: str, session: SessionDep) -> BriefResponse:
    brief = BriefService(session).duplicate(parse_uuid(brief_id, "brief"))
    return BriefResponse.model_validate(brief)


@router.post(
    "/{brief_id}/parse",
    response_model=BriefResponse,
    summary="Parse brief",
    description="Extract hook, persona, emotion, B-roll tags and testimonial points.",
)
async def parse_brief(brief_id: str, session: SessionDep) -> BriefResponse:
    brief = BriefService(session).parse(parse_uuid(brief_id, "brief"))
    return BriefResponse.model_validate(brief)


@router.post(
    "/{brief_id}/generations",
    response_model=GenerationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start generation",
    description="Create a generation for a parsed brief and start the pipeline in the background.",
)
async def create_generation(
    brief_id: str,
    request: CreateGenerationRequest,
    session: SessionDep,
    dispatcher: DispatcherDep,
) -> GenerationResponse:
    logger.info(
        "create_generation_requested",
        brief_id=brief_id,
        target_count=request.target_count,
    )

    generation = GenerationService(session, dispatcher).create(
        parse_uuid(brief_id, "brief"), request.target_count
    )
    return GenerationResponse.model_validate(generation)


@router.get(
    "/{brief_id}/generations",
    response_model=list[GenerationListItem],
    summary="List generations of a brief",
)
async def list_generations(
    brief_id: str,
    session: SessionDep,
) -> list[GenerationListItem]:
    rows = GenerationService(session).list_for_brief(parse_uuid(brief_id, "brief"))
    return [
        GenerationListItem.model_validate(
            {**GenerationResponse.model_validate(g).model_dump(), "video_count": count}
        )
        for g, count in rows
    ]
