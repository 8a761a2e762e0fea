"""LLM-backed script provider."""

import json
from uuid import uuid4

from ad_engine.adapters.llm.base import LLMMessage, LLMProvider
from ad_engine.adapters.script.base import Script, ScriptProvider
from ad_engine.domain.errors import ProviderError
from ad_engine.domain.models import ParsedBrief
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class LLMScriptProvider(ScriptProvider):
    """Writes testimonial script variants with a single batched LLM call.

    The whole batch is requested in one JSON-mode completion so that token
    usage can be logged once per generation. Tokens are split across the
    returned variants so that the per-script shares add up to the billed total.
    """

    SYSTEM_PROMPT = """You are a direct-response copywriter for short vertical video ads.
Each ad is a first-person testimonial spoken by an AI avatar, intercut with B-roll.

You must output a JSON object with this exact structure:
{
    "scripts": [
        {
            "hook": "Opening line, under 12 words, stops the scroll",
            "testimonial_script": "30-45 seconds of natural spoken testimonial",
            "call_to_action": "One short closing line"
        }
    ]
}

Guidelines:
- Write EXACTLY the number of variants requested
- Every variant must take a clearly different angle on the same brief
- Speak in the persona's voice and tone, never in marketing third person
- No stage directions, emojis, hashtags or on-screen text cues"""

    def __init__(self, llm: LLMProvider, temperature: float = 0.9) -> None:
        self.llm = llm
        self.temperature = temperature

    @property
    def name(self) -> str:
        return self.llm.name

    def _build_user_prompt(self, brief: ParsedBrief, count: int) -> str:
        persona = brief.persona
        points = "\n".join(f"- {p}" for p in brief.testimonial_points)
        return f"""Write {count} script variants for this brief.

## Hook idea
{brief.hook}

## Persona
{persona.type}, age {persona.age}, {persona.demographic}, tone: {persona.tone}

## Emotion to evoke
{brief.emotion}

## Testimonial points to cover
{points}"""

    async def generate(self, brief: ParsedBrief, count: int) -> list[Script]:
        logger.info("llm_script_generation_started", provider=self.llm.name, count=count)

        response = await self.llm.complete(
            messages=[
                LLMMessage(role="system", content=self.SYSTEM_PROMPT),
                LLMMessage(role="user", content=self._build_user_prompt(brief, count)),
            ],
            temperature=self.temperature,
            json_mode=True,
        )

        try:
            data = json.loads(response.content)
        except json.JSONDecodeError as e:
            logger.error("script_json_parse_error", error=str(e), content=response.content[:500])
            raise ProviderError(self.name, f"LLM returned invalid JSON: {e}") from e

        items = data.get("scripts") or []
        if not items:
            raise ProviderError(self.name, "LLM response missing scripts")

        if len(items) != count:
            logger.warning("script_count_mismatch", requested=count, returned=len(items))

        tokens_each, remainder = divmod(response.total_tokens, len(items))
        scripts = [
            Script(
                id=f"script-{uuid4().hex[:8]}-{i}",
                hook=item.get("hook", brief.hook),
                testimonial_script=item.get("testimonial_script", ""),
                call_to_action=item.get("call_to_action", ""),
                tokens_used=tokens_each + (remainder if i == 0 else 0),
                provider=self.name,
            )
            for i, item in enumerate(items)
        ]

        logger.info(
            "llm_script_generation_completed",
            count=len(scripts),
            total_tokens=response.total_tokens,
        )
        return scripts

    async def health_check(self) -> bool:
        return await self.llm.health_check()
