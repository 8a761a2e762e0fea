"""Generation status endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from ad_engine.api.deps import SessionDep, parse_uuid
from ad_engine.api.schemas import GenerationResponse, VideoResponse
from ad_engine.services.generations import GenerationService

router = APIRouter(prefix="/generations", tags=["Generations"])


class ProgressResponse(BaseModel):
    """Video counts by outcome."""

    total: int
    completed: int
    failed: int
    pending: int


class GenerationDetailResponse(GenerationResponse):
    """Generation with its videos, progress and lineage."""

    videos: list[VideoResponse]
    progress: ProgressResponse
    child_count: int


@router.get(
    "/{generation_id}",
    response_model=GenerationDetailResponse,
    summary="Get generation",
    description="Generation status, total cost, videos and progress. Poll this to follow a run.",
)
async def get_generation(
    generation_id: str,
    session: SessionDep,
) -> GenerationDetailResponse:
    summary = GenerationService(session).summary(
        parse_uuid(generation_id, "generation")
    )
    generation = summary["generation"]

    return GenerationDetailResponse(
        **GenerationResponse.model_validate(generation).model_dump(),
        videos=[VideoResponse.model_validate(v) for v in generation.videos],
        progress=ProgressResponse(**summary["progress"]),
        child_count=summary["child_count"],
    )
