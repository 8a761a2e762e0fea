"""Domain models - pure Python classes independent of database."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any


@dataclass
class Persona:
    """Who delivers the testimonial."""

    type: str = "parent"
    age: str = "30-40"
    demographic: str = "general"
    tone: str = "enthusiastic"


_PERSONA_FIELDS = {f.name for f in fields(Persona)}


@dataclass
class ParsedBrief:
    """Structured form of a marketing brief."""

    hook: str
    persona: Persona = field(default_factory=Persona)
    emotion: str = "joy"
    broll_tags: list[str] = field(default_factory=list)
    testimonial_points: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage in ``Brief.parsed_data``."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParsedBrief":
        """Rebuild from stored parsed data.

        Accepts the camelCase keys written by earlier clients as well.
        """
        persona = data.get("persona") or {}
        return cls(
            hook=data.get("hook", ""),
            persona=Persona(**{k: v for k, v in persona.items() if k in _PERSONA_FIELDS}),
            emotion=data.get("emotion", "joy"),
            broll_tags=list(data.get("broll_tags", data.get("brollTags", []))),
            testimonial_points=list(
                data.get("testimonial_points", data.get("testimonialPoints", []))
            ),
        )
