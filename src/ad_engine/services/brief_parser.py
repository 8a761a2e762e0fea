"""Keyword heuristic that turns free-text briefs into structured data."""

import re

from ad_engine.domain.errors import BriefParseError
from ad_engine.domain.models import ParsedBrief, Persona

MAX_TESTIMONIAL_POINTS = 5
MAX_BROLL_TAGS = 6
MIN_POINT_LENGTH = 10

DEFAULT_TESTIMONIAL_POINTS = [
    "Great experience with the app",
    "My kids love the stories",
]
DEFAULT_BROLL_TAGS = ["child-sleeping", "reading-together", "app-interface"]

# Substring -> B-roll tag, checked in order
SCENE_KEYWORDS: dict[str, str] = {
    "bedtime": "child-sleeping",
    "sleep": "cozy-bedroom",
    "story": "reading-together",
    "read": "book-closeup",
    "kid": "happy-child",
    "child": "child-playing",
    "family": "family-moment",
    "parent": "parent-child",
    "night": "nighttime-routine",
    "dream": "dreamy-clouds",
    "imagination": "magical-scene",
    "adventure": "adventure-scene",
    "app": "app-interface",
    "phone": "phone-usage",
    "tablet": "tablet-usage",
}

# First matching group wins
EMOTION_KEYWORDS: list[tuple[str, set[str]]] = [
    ("joy", {"love", "amazing", "wonderful", "fantastic"}),
    ("serenity", {"calm", "peaceful", "relaxing", "soothing"}),
    ("excitement", {"exciting", "adventure", "fun", "thrilling"}),
    ("trust", {"trust", "safe", "reliable", "secure"}),
]
DEFAULT_EMOTION = "warmth"

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WORD = re.compile(r"[a-z']+")


class BriefParser:
    """Extracts hook, persona, emotion, B-roll tags and testimonial points."""

    def parse(self, raw_input: str) -> ParsedBrief:
        text = raw_input.strip()
        if not text:
            raise BriefParseError("Brief text is empty")

        words = set(_WORD.findall(text.lower()))
        sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text)]

        hook = sentences[0] if sentences and sentences[0] else text[:50]

        points = [s for s in sentences[1:] if len(s) > MIN_POINT_LENGTH][:MAX_TESTIMONIAL_POINTS]

        return ParsedBrief(
            hook=hook,
            persona=self.detect_persona(words),
            emotion=self.detect_emotion(words),
            broll_tags=self.extract_broll_tags(text),
            testimonial_points=points or list(DEFAULT_TESTIMONIAL_POINTS),
        )

    @staticmethod
    def detect_persona(words: set[str]) -> Persona:
        persona = Persona()

        if words & {"mom", "mother"}:
            persona.type = "mother"
            persona.demographic = "female"
        elif words & {"dad", "father"}:
            persona.type = "father"
            persona.demographic = "male"
        elif words & {"grandparent", "grandma", "grandpa"}:
            persona.type = "grandparent"
            persona.age = "55-65"

        if words & {"professional", "busy"}:
            persona.tone = "professional"
        elif words & {"fun", "playful"}:
            persona.tone = "playful"
        elif words & {"calm", "relaxing"}:
            persona.tone = "calm"

        return persona

    @staticmethod
    def detect_emotion(words: set[str]) -> str:
        for emotion, keywords in EMOTION_KEYWORDS:
            if words & keywords:
                return emotion
        return DEFAULT_EMOTION

    @staticmethod
    def extract_broll_tags(text: str) -> list[str]:
        lower = text.lower()
        tags: list[str] = []
        for keyword, tag in SCENE_KEYWORDS.items():
            if keyword in lower and tag not in tags:
                tags.append(tag)
        return (tags or list(DEFAULT_BROLL_TAGS))[:MAX_BROLL_TAGS]
