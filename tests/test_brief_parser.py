"""Tests for the keyword brief parser."""

import pytest

from ad_engine.domain.errors import BriefParseError
from ad_engine.services.brief_parser import (
    DEFAULT_BROLL_TAGS,
    DEFAULT_TESTIMONIAL_POINTS,
    MAX_BROLL_TAGS,
    BriefParser,
)


@pytest.fixture
def parser() -> BriefParser:
    return BriefParser()


def test_hook_is_first_sentence(parser: BriefParser) -> None:
    """Test the opening sentence becomes the hook."""
    parsed = parser.parse(
        "Bedtime is finally easy! Our daughter asks for a new story every night. "
        "The narration voices are wonderful."
    )

    assert parsed.hook == "Bedtime is finally easy"
    assert parsed.testimonial_points == [
        "Our daughter asks for a new story every night",
        "The narration voices are wonderful",
    ]


def test_short_sentences_fall_back_to_default_points(parser: BriefParser) -> None:
    parsed = parser.parse("Great app. Try it.")

    assert parsed.testimonial_points == DEFAULT_TESTIMONIAL_POINTS


def test_testimonial_points_are_capped(parser: BriefParser) -> None:
    text = "Hook. " + " ".join(f"This is testimonial sentence {i}." for i in range(8))

    assert len(parser.parse(text).testimonial_points) == 5


def test_empty_brief_raises(parser: BriefParser) -> None:
    with pytest.raises(BriefParseError):
        parser.parse("  \n ")


class TestPersona:
    """Tests for persona detection."""

    def test_father(self, parser: BriefParser) -> None:
        persona = parser.parse("As a busy dad I needed help at bedtime.").persona

        assert persona.type == "father"
        assert persona.demographic == "male"
        assert persona.tone == "professional"

    def test_grandparent(self, parser: BriefParser) -> None:
        persona = parser.parse("Grandma reads with the kids, it is fun.").persona

        assert persona.type == "grandparent"
        assert persona.age == "55-65"
        assert persona.tone == "playful"

    def test_default_persona(self, parser: BriefParser) -> None:
        persona = parser.parse("An app for stories.").persona

        assert persona.type == "parent"
        assert persona.tone == "enthusiastic"


class TestEmotion:
    """Tests for emotion detection."""

    @pytest.mark.parametrize(
        ("text", "emotion"),
        [
            ("The kids love it.", "joy"),
            ("A calm end to the day.", "serenity"),
            ("Every story is an adventure.", "excitement"),
            ("A safe place for stories.", "trust"),
            ("Stories at night.", "warmth"),
        ],
    )
    def test_detect_emotion(self, parser: BriefParser, text: str, emotion: str) -> None:
        assert parser.parse(text).emotion == emotion

    def test_first_group_wins(self, parser: BriefParser) -> None:
        assert parser.parse("Calm and wonderful.").emotion == "joy"


class TestBRollTags:
    """Tests for scene tag extraction."""

    def test_tags_in_keyword_order(self) -> None:
        tags = BriefParser.extract_broll_tags("Our family uses the app at bedtime")

        assert tags == ["child-sleeping", "family-moment", "app-interface"]

    def test_defaults_when_nothing_matches(self) -> None:
        assert BriefParser.extract_broll_tags("Nothing relevant here") == DEFAULT_BROLL_TAGS

    def test_tags_are_capped(self) -> None:
        text = "bedtime sleep story read kid child family parent night dream"

        assert len(BriefParser.extract_broll_tags(text)) == MAX_BROLL_TAGS
