"""Background execution of the generation pipeline."""

from typing import Any
from uuid import UUID

from ad_engine.logging import bind_task_context, get_logger
from ad_engine.services.generations import GenerationDispatcher
from ad_engine.services.pipeline import GenerationPipeline
from ad_engine.utils import run_async
from ad_engine.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="pipeline.run_generation")
def run_generation_task(self: Any, generation_id: str) -> dict[str, Any]:
    """Run the pipeline for one generation.

    There is no automatic retry: a fatal error has already marked the
    generation FAILED, and re-raising records the task as FAILURE so it can
    be inspected by task id.
    """
    task_id = self.request.id
    bind_task_context(task_id=task_id, generation_id=generation_id)
    logger.info("run_generation_started")

    try:
        result = run_async(GenerationPipeline().run(UUID(generation_id)))
    except Exception as e:
        logger.error(
            "run_generation_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    logger.info(
        "run_generation_finished",
        status=result.status,
        skipped=result.skipped,
    )
    return {
        "generation_id": generation_id,
        "status": str(result.status),
        "completed": result.completed,
        "failed": result.failed,
        "total_cost": str(result.total_cost),
        "skipped": result.skipped,
    }


class CeleryGenerationDispatcher(GenerationDispatcher):
    """Enqueues the pipeline task on the Celery broker."""

    def dispatch(self, generation_id: UUID) -> str | None:
        task = run_generation_task.delay(str(generation_id))
        return task.id
