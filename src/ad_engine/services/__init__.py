"""Application services."""

from ad_engine.services.brief_parser import BriefParser
from ad_engine.services.briefs import BriefService
from ad_engine.services.cost_ledger import CostEntry, CostLedger, Pricing
from ad_engine.services.generations import GenerationDispatcher, GenerationService
from ad_engine.services.iteration import IterationService
from ad_engine.services.pipeline import GenerationPipeline, PipelineResult
from ad_engine.services.providers import Capabilities, resolve_capabilities

__all__ = [
    "BriefParser",
    "BriefService",
    "Capabilities",
    "CostEntry",
    "CostLedger",
    "GenerationDispatcher",
    "GenerationPipeline",
    "GenerationService",
    "IterationService",
    "PipelineResult",
    "Pricing",
    "resolve_capabilities",
]
