"""Stub LLM provider for testing."""

import json
import re

from ad_engine.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class StubLLMProvider(LLMProvider):
    """Stub provider that returns canned script variants."""

    TOKENS_PER_VARIANT = 150

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Return a mock completion response."""
        logger.info(
            "stub_llm_complete",
            message_count=len(messages),
            json_mode=json_mode,
        )

        user_message = ""
        for msg in reversed(messages):
            if msg.role == "user":
                user_message = msg.content
                break

        count = 1
        match = re.search(r"Write (\d+) script variants", user_message)
        if match:
            count = int(match.group(1))

        if json_mode:
            content = json.dumps(
                {
                    "scripts": [
                        {
                            "hook": f"Variation {i + 1}: you have to hear this",
                            "testimonial_script": "I tried it for a week and never looked back.",
                            "call_to_action": "Download it today!",
                        }
                        for i in range(count)
                    ]
                }
            )
        else:
            content = f"This is a stub response for: {user_message[:100]}"

        tokens = self.TOKENS_PER_VARIANT * count
        return LLMResponse(
            content=content,
            model="stub",
            usage={"prompt_tokens": 0, "completion_tokens": tokens, "total_tokens": tokens},
            finish_reason="stop",
        )
