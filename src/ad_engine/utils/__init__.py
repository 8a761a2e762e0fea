"""Shared utilities."""

from ad_engine.utils.async_utils import run_async

__all__ = ["run_async"]
