"""Tests for domain models and state rules."""

import pytest

from ad_engine.domain.enums import GenerationStatus, VideoStatus
from ad_engine.domain.errors import (
    BriefNotFoundError,
    UploadError,
    ValidationError,
)
from ad_engine.domain.models import ParsedBrief, Persona


class TestGenerationStatus:
    """Tests for the generation stage sequence."""

    def test_forward_transitions_allowed(self) -> None:
        assert GenerationStatus.PENDING.can_transition_to(GenerationStatus.QUEUED)
        assert GenerationStatus.QUEUED.can_transition_to(GenerationStatus.SCRIPT_GEN)
        assert GenerationStatus.UPLOADING.can_transition_to(GenerationStatus.COMPLETED)

    def test_skipping_forward_allowed(self) -> None:
        assert GenerationStatus.AVATAR_GEN.can_transition_to(GenerationStatus.COMPLETED)

    def test_backward_transitions_rejected(self) -> None:
        assert not GenerationStatus.COMPOSITING.can_transition_to(GenerationStatus.VIDEO_GEN)
        assert not GenerationStatus.SCRIPT_GEN.can_transition_to(GenerationStatus.SCRIPT_GEN)

    @pytest.mark.parametrize(
        "status",
        [s for s in GenerationStatus if not s.is_terminal],
    )
    def test_failed_reachable_from_any_active_stage(self, status: GenerationStatus) -> None:
        assert status.can_transition_to(GenerationStatus.FAILED)

    @pytest.mark.parametrize("terminal", [GenerationStatus.COMPLETED, GenerationStatus.FAILED])
    def test_terminal_states_are_final(self, terminal: GenerationStatus) -> None:
        assert terminal.is_terminal
        assert not any(terminal.can_transition_to(target) for target in GenerationStatus)

    def test_stage_ranks_increase(self) -> None:
        stages = list(GenerationStatus)[:-2]

        assert [s.rank for s in stages] == list(range(len(stages)))

    def test_video_terminal_states(self) -> None:
        assert VideoStatus.COMPLETED.is_terminal
        assert VideoStatus.FAILED.is_terminal
        assert not VideoStatus.PROCESSING.is_terminal


class TestParsedBrief:
    """Tests for parsed brief serialization."""

    def test_round_trip(self) -> None:
        brief = ParsedBrief(
            hook="Hook",
            persona=Persona(type="father", tone="calm"),
            emotion="trust",
            broll_tags=["app-interface"],
            testimonial_points=["One point that matters"],
        )

        assert ParsedBrief.from_dict(brief.to_dict()) == brief

    def test_from_dict_accepts_camel_case(self) -> None:
        """Test stored data from older clients is still readable."""
        brief = ParsedBrief.from_dict(
            {
                "hook": "Hook",
                "persona": {"type": "mother", "unknown": "ignored"},
                "brollTags": ["child-sleeping"],
                "testimonialPoints": ["A point"],
            }
        )

        assert brief.persona.type == "mother"
        assert brief.persona.tone == "enthusiastic"
        assert brief.broll_tags == ["child-sleeping"]
        assert brief.testimonial_points == ["A point"]
        assert brief.emotion == "joy"


class TestErrors:
    """Tests for error payloads."""

    def test_validation_error_fields(self) -> None:
        error = ValidationError({"target_count": "Must be between 1 and 10, got 0"})

        assert error.to_dict() == {
            "type": "ValidationError",
            "message": "Validation failed",
            "fields": {"target_count": "Must be between 1 and 10, got 0"},
        }

    def test_not_found_message(self) -> None:
        assert BriefNotFoundError("abc").message == "Brief not found: abc"

    def test_upload_error_message(self) -> None:
        error = UploadError("local", "a/b.mp4", "disk full")

        assert error.provider == "local"
        assert error.message == "local: upload of a/b.mp4 failed: disk full"
