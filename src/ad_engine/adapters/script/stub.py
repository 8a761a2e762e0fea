"""Stub script provider for testing."""

from uuid import uuid4

from ad_engine.adapters.script.base import Script, ScriptProvider
from ad_engine.domain.models import ParsedBrief
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubScriptProvider(ScriptProvider):
    """Builds script variants straight from the brief without external calls."""

    TOKENS_PER_SCRIPT = 150

    def __init__(self, call_to_action: str = "Download the app today!") -> None:
        self.call_to_action = call_to_action

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, brief: ParsedBrief, count: int) -> list[Script]:
        logger.info("stub_script_generation", count=count, hook=brief.hook[:50])

        return [
            Script(
                id=f"script-{uuid4().hex[:8]}-{i}",
                hook=f"{brief.hook} - Variation {i + 1}",
                testimonial_script=" ".join(brief.testimonial_points),
                call_to_action=self.call_to_action,
                tokens_used=self.TOKENS_PER_SCRIPT,
                provider=self.name,
            )
            for i in range(count)
        ]
