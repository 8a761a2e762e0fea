"""Celery jobs."""

from ad_engine.jobs.generation import CeleryGenerationDispatcher, run_generation_task

__all__ = ["CeleryGenerationDispatcher", "run_generation_task"]
