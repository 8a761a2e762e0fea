"""Base interface for script generation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ad_engine.domain.models import ParsedBrief


@dataclass
class Script:
    """One script variant written for a brief."""

    id: str
    hook: str
    testimonial_script: str
    call_to_action: str
    tokens_used: int = 0
    provider: str = ""

    def to_params(self) -> dict[str, Any]:
        """Snapshot stored in ``Video.generation_params``."""
        return {
            "hook": self.hook,
            "testimonial_script": self.testimonial_script,
            "call_to_action": self.call_to_action,
        }


class ScriptProvider(ABC):
    """Abstract base class for script generation providers.

    Implementations:
    - StubScriptProvider: Deterministic variants for testing
    - LLMScriptProvider: Writes variants with an LLM
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def generate(self, brief: ParsedBrief, count: int) -> list[Script]:
        """Write ``count`` script variants for a parsed brief.

        Raises:
            ProviderError: If the provider call fails
        """
        ...

    async def health_check(self) -> bool:
        return True
