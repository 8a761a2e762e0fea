"""Tests for the REST API."""

import asyncio
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from ad_engine.config import settings
from ad_engine.domain.enums import GenerationStatus, QualityStatus

from conftest import FailingDispatcher

BRIEF_TEXT = (
    "Bedtime used to be a battle! As a busy mom I tried everything. "
    "Now my kids ask for a new story every night and fall asleep calm."
)


def _parsed_brief(client: TestClient) -> str:
    brief_id = client.post("/api/v1/briefs", json={"rawInput": BRIEF_TEXT}).json()["id"]
    response = client.post(f"/api/v1/briefs/{brief_id}/parse")
    assert response.status_code == 200
    return brief_id


class TestBriefEndpoints:
    """Tests for brief endpoints."""

    def test_create_brief(self, test_client: TestClient) -> None:
        """Test creating a brief accepts camelCase and snake_case bodies."""
        camel = test_client.post("/api/v1/briefs", json={"rawInput": BRIEF_TEXT})
        snake = test_client.post("/api/v1/briefs", json={"raw_input": BRIEF_TEXT})

        assert camel.status_code == 201
        assert snake.status_code == 201
        data = camel.json()
        assert data["status"] == "PENDING"
        assert data["parsed_data"] is None

    def test_create_brief_rejects_empty_body(self, test_client: TestClient) -> None:
        response = test_client.post("/api/v1/briefs", json={"rawInput": ""})

        assert response.status_code == 422

    def test_parse_brief(self, test_client: TestClient) -> None:
        """Test parsing stores structured brief data."""
        brief_id = _parsed_brief(test_client)

        data = test_client.get(f"/api/v1/briefs/{brief_id}").json()
        assert data["status"] == "PARSED"
        assert data["parsed_data"]["hook"] == "Bedtime used to be a battle"
        assert data["parsed_data"]["persona"]["type"] == "mother"
        assert "child-sleeping" in data["parsed_data"]["broll_tags"]

    def test_list_briefs(self, test_client: TestClient) -> None:
        for _ in range(3):
            test_client.post("/api/v1/briefs", json={"rawInput": BRIEF_TEXT})

        response = test_client.get("/api/v1/briefs", params={"limit": 2})

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_get_brief_invalid_id(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/briefs/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid brief ID format"

    def test_get_brief_not_found(self, test_client: TestClient) -> None:
        response = test_client.get(f"/api/v1/briefs/{uuid4()}")

        assert response.status_code == 404
        assert "Brief not found" in response.json()["detail"]["message"]

    def test_edit_brief_resets_parsed_data(self, test_client: TestClient) -> None:
        brief_id = _parsed_brief(test_client)

        response = test_client.patch(
            f"/api/v1/briefs/{brief_id}", json={"rawInput": "  A calmer bedtime brief  "}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["raw_input"] == "A calmer bedtime brief"
        assert data["parsed_data"] is None
        assert data["status"] == "PENDING"

        generation = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 1}
        )
        assert generation.status_code == 400

    @pytest.mark.parametrize("raw_input", ["", "   "])
    def test_edit_brief_rejects_blank_text(self, test_client: TestClient, raw_input: str) -> None:
        brief_id = _parsed_brief(test_client)

        response = test_client.patch(f"/api/v1/briefs/{brief_id}", json={"rawInput": raw_input})

        assert response.status_code in (400, 422)
        assert test_client.get(f"/api/v1/briefs/{brief_id}").json()["status"] == "PARSED"

    def test_duplicate_brief(self, test_client: TestClient) -> None:
        """Test a copy keeps the text but starts unparsed."""
        brief_id = _parsed_brief(test_client)

        response = test_client.post(f"/api/v1/briefs/{brief_id}/duplicate")

        assert response.status_code == 201
        data = response.json()
        assert data["id"] != brief_id
        assert data["raw_input"] == BRIEF_TEXT
        assert data["parsed_data"] is None
        assert data["status"] == "PENDING"
        assert test_client.get(f"/api/v1/briefs/{brief_id}").json()["status"] == "PARSED"

    def test_delete_brief(self, test_client: TestClient) -> None:
        brief_id = _parsed_brief(test_client)
        test_client.post(f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 1})

        response = test_client.delete(f"/api/v1/briefs/{brief_id}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "id": brief_id}
        assert test_client.get(f"/api/v1/briefs/{brief_id}").status_code == 404
        assert test_client.delete(f"/api/v1/briefs/{brief_id}").status_code == 404


class TestGenerationEndpoints:
    """Tests for starting and following generations."""

    def test_start_generation(self, test_client: TestClient, dispatcher) -> None:
        """Test a generation is accepted and handed to the worker."""
        brief_id = _parsed_brief(test_client)

        response = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 3}
        )

        assert response.status_code == 202
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["brief_id"] == brief_id
        assert data["target_count"] == 3
        assert data["task_id"] == "task-1"
        assert [str(g) for g in dispatcher.dispatched] == [data["id"]]

    @pytest.mark.parametrize("target_count", [0, 11])
    def test_start_generation_count_out_of_range(
        self, test_client: TestClient, dispatcher, target_count: int
    ) -> None:
        """Test out-of-range counts are rejected with field detail."""
        brief_id = _parsed_brief(test_client)

        response = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": target_count}
        )

        assert response.status_code == 400
        assert "target_count" in response.json()["detail"]["fields"]
        assert dispatcher.dispatched == []
        assert test_client.get(f"/api/v1/briefs/{brief_id}/generations").json() == []

    def test_start_generation_unparsed_brief(self, test_client: TestClient) -> None:
        brief_id = test_client.post("/api/v1/briefs", json={"rawInput": BRIEF_TEXT}).json()["id"]

        response = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 2}
        )

        assert response.status_code == 400
        assert "brief_id" in response.json()["detail"]["fields"]

    def test_start_generation_dispatch_failure(self, test_client: TestClient) -> None:
        """Test an unreachable worker queue answers 503 and fails the generation."""
        from ad_engine.api.deps import get_dispatcher
        from ad_engine.main import app

        brief_id = _parsed_brief(test_client)
        app.dependency_overrides[get_dispatcher] = FailingDispatcher

        response = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 2}
        )

        assert response.status_code == 503
        generations = test_client.get(f"/api/v1/briefs/{brief_id}/generations").json()
        assert generations[0]["status"] == "FAILED"

    def test_generation_detail_after_run(
        self, test_client: TestClient, make_pipeline, capabilities
    ) -> None:
        """Test a finished run reports videos, progress and cost."""
        brief_id = _parsed_brief(test_client)
        generation_id = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 2}
        ).json()["id"]
        pending = test_client.get(f"/api/v1/generations/{generation_id}").json()
        assert pending["progress"] == {"total": 0, "completed": 0, "failed": 0, "pending": 0}

        asyncio.run(make_pipeline(capabilities).run(UUID(generation_id)))

        data = test_client.get(f"/api/v1/generations/{generation_id}").json()
        assert data["status"] == GenerationStatus.COMPLETED
        assert data["completed_at"] is not None
        assert data["progress"] == {"total": 2, "completed": 2, "failed": 0, "pending": 0}
        assert data["child_count"] == 0
        assert len(data["videos"]) == 2
        video_total = sum(Decimal(v["total_cost"]) for v in data["videos"])
        assert Decimal(data["total_cost"]) == video_total

        listing = test_client.get(f"/api/v1/briefs/{brief_id}/generations").json()
        assert listing[0]["video_count"] == 2

    def test_generation_not_found(self, test_client: TestClient) -> None:
        response = test_client.get(f"/api/v1/generations/{uuid4()}")

        assert response.status_code == 404


@pytest.fixture
def finished_generation(test_client: TestClient, make_pipeline, capabilities) -> dict:
    """A completed two-video generation, as returned by the detail endpoint."""
    brief_id = _parsed_brief(test_client)
    generation_id = test_client.post(
        f"/api/v1/briefs/{brief_id}/generations", json={"targetCount": 2}
    ).json()["id"]
    asyncio.run(make_pipeline(capabilities).run(UUID(generation_id)))
    return test_client.get(f"/api/v1/generations/{generation_id}").json()


class TestVideoEndpoints:
    """Tests for video review, costs and iteration."""

    def test_get_video(self, test_client: TestClient, finished_generation: dict) -> None:
        video = finished_generation["videos"][0]

        data = test_client.get(f"/api/v1/videos/{video['id']}").json()

        assert data["status"] == "COMPLETED"
        assert data["quality_status"] == "PENDING"
        assert data["video_url"].startswith("https://storage.example.com/generations/")

    def test_video_costs(self, test_client: TestClient, finished_generation: dict) -> None:
        """Test the breakdown rows add up to the video total."""
        video = finished_generation["videos"][0]

        data = test_client.get(f"/api/v1/videos/{video['id']}/costs").json()

        assert len(data["cost_logs"]) == 3
        assert set(data["by_service_type"]) == {"script", "avatar", "video", "storage"}
        assert Decimal(data["by_service_type"]["script"]) == 0
        row_total = sum(Decimal(row["cost"]) for row in data["cost_logs"])
        assert Decimal(data["total_cost"]) == row_total

    def test_iterate_requires_passed_quality(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        response = test_client.post(
            f"/api/v1/videos/{video['id']}/iterate", json={"targetCount": 2}
        )

        assert response.status_code == 400
        assert "source_video_id" in response.json()["detail"]["fields"]

    def test_iterate_after_review(
        self, test_client: TestClient, finished_generation: dict, dispatcher
    ) -> None:
        """Test an approved video spawns a child generation of the same brief."""
        video = finished_generation["videos"][0]
        review = test_client.patch(
            f"/api/v1/videos/{video['id']}/quality",
            json={"qualityStatus": QualityStatus.PASSED},
        )
        assert review.status_code == 200
        assert review.json()["quality_status"] == "PASSED"

        response = test_client.post(
            f"/api/v1/videos/{video['id']}/iterate",
            json={"targetCount": 3, "variationParams": {"tone": "calmer"}},
        )

        assert response.status_code == 202
        data = response.json()
        assert data["parent_generation_id"] == finished_generation["id"]
        assert data["brief_id"] == finished_generation["brief_id"]
        assert data["source_video_id"] == video["id"]
        assert data["variation_params"] == {"tone": "calmer"}
        assert data["status"] == "PENDING"
        assert data["target_count"] == 3
        assert str(dispatcher.dispatched[-1]) == data["id"]

        parent = test_client.get(f"/api/v1/generations/{finished_generation['id']}").json()
        assert parent["child_count"] == 1

    def test_invalid_quality_status(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        response = test_client.patch(
            f"/api/v1/videos/{video['id']}/quality", json={"qualityStatus": "GREAT"}
        )

        assert response.status_code == 422

    def test_video_not_found(self, test_client: TestClient) -> None:
        response = test_client.get(f"/api/v1/videos/{uuid4()}/costs")

        assert response.status_code == 404


    def test_list_videos_with_filters(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        """Test the review queue filters by outcome and reports the match count."""
        first, second = finished_generation["videos"]
        test_client.patch(f"/api/v1/videos/{first['id']}", json={"qualityStatus": "PASSED"})

        everything = test_client.get("/api/v1/videos").json()
        assert everything["total"] == 2
        assert everything["limit"] == 20
        assert {v["brief_id"] for v in everything["items"]} == {finished_generation["brief_id"]}

        passed = test_client.get("/api/v1/videos", params={"qualityStatus": "PASSED"}).json()
        assert passed["total"] == 1
        assert passed["items"][0]["id"] == first["id"]

        pending = test_client.get(
            "/api/v1/videos",
            params={"quality_status": "PENDING", "status": "COMPLETED"},
        ).json()
        assert [v["id"] for v in pending["items"]] == [second["id"]]

        page = test_client.get(
            "/api/v1/videos",
            params={"generationId": finished_generation["id"], "limit": 1, "offset": 1},
        ).json()
        assert page["total"] == 2
        assert len(page["items"]) == 1

        other_brief = test_client.get("/api/v1/videos", params={"briefId": str(uuid4())}).json()
        assert other_brief == {"items": [], "total": 0, "limit": 20, "offset": 0}

    def test_list_videos_limit_is_capped(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/videos", params={"limit": 101})

        assert response.status_code == 422

    def test_review_records_note_and_time(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        failed = test_client.patch(
            f"/api/v1/videos/{video['id']}",
            json={"qualityStatus": "FAILED", "qualityNote": "Lip sync drifts"},
        ).json()
        assert failed["quality_status"] == "FAILED"
        assert failed["quality_note"] == "Lip sync drifts"
        assert failed["reviewed_at"] is not None

        passed = test_client.patch(
            f"/api/v1/videos/{video['id']}", json={"qualityStatus": "PASSED"}
        ).json()
        assert passed["quality_status"] == "PASSED"
        assert passed["quality_note"] is None

        reset = test_client.patch(
            f"/api/v1/videos/{video['id']}", json={"qualityStatus": "PENDING"}
        ).json()
        assert reset["reviewed_at"] is None

    def test_review_note_only_keeps_status(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        response = test_client.patch(
            f"/api/v1/videos/{video['id']}", json={"quality_note": "Check the ending"}
        )

        assert response.status_code == 200
        assert response.json()["quality_status"] == "PENDING"
        assert response.json()["quality_note"] == "Check the ending"

    def test_review_requires_status_or_note(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        response = test_client.patch(f"/api/v1/videos/{video['id']}", json={})

        assert response.status_code == 400
        assert "quality_status" in response.json()["detail"]["fields"]

    def test_delete_video_keeps_ledger_rows(
        self, test_client: TestClient, finished_generation: dict, storage
    ) -> None:
        """Test deletion removes the file and recomputes the generation total."""
        removed, kept = finished_generation["videos"]
        stats_before = test_client.get("/api/v1/cost-logs/stats").json()
        key = f"generations/{finished_generation['id']}/{removed['id']}.mp4"
        assert key in storage.objects

        response = test_client.delete(f"/api/v1/videos/{removed['id']}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "id": removed["id"]}
        assert key not in storage.objects
        assert test_client.get(f"/api/v1/videos/{removed['id']}").status_code == 404

        generation = test_client.get(f"/api/v1/generations/{finished_generation['id']}").json()
        assert [v["id"] for v in generation["videos"]] == [kept["id"]]
        assert Decimal(generation["total_cost"]) == Decimal(kept["total_cost"])

        stats_after = test_client.get("/api/v1/cost-logs/stats").json()
        assert stats_after["all_time"] == stats_before["all_time"]

    def test_delete_video_not_found(self, test_client: TestClient) -> None:
        response = test_client.delete(f"/api/v1/videos/{uuid4()}")

        assert response.status_code == 404


class TestResponseCasing:
    """Responses use snake_case keys while requests accept both spellings."""

    def test_generation_keys_are_snake_case(self, test_client: TestClient) -> None:
        brief_id = _parsed_brief(test_client)

        data = test_client.post(
            f"/api/v1/briefs/{brief_id}/generations", json={"target_count": 2}
        ).json()

        assert {"brief_id", "parent_generation_id", "target_count", "created_at"} <= set(data)
        assert "targetCount" not in data
        assert data["target_count"] == 2

    def test_video_keys_are_snake_case(
        self, test_client: TestClient, finished_generation: dict
    ) -> None:
        video = finished_generation["videos"][0]

        data = test_client.get(f"/api/v1/videos/{video['id']}").json()

        assert {"generation_id", "quality_status", "quality_note", "reviewed_at"} <= set(data)
        assert "qualityStatus" not in data


class TestAuthentication:
    """Bearer token checks on the versioned API."""

    @pytest.fixture(autouse=True)
    def api_token(self, monkeypatch: pytest.MonkeyPatch) -> str:
        monkeypatch.setattr(settings, "api_token", "secret-token")
        return "secret-token"

    def test_missing_token_rejected(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/briefs")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_token_rejected(self, test_client: TestClient) -> None:
        response = test_client.get(
            "/api/v1/briefs", headers={"Authorization": "Bearer not-the-token"}
        )

        assert response.status_code == 401

    def test_valid_token_accepted(self, test_client: TestClient, api_token: str) -> None:
        response = test_client.get(
            "/api/v1/briefs", headers={"Authorization": f"Bearer {api_token}"}
        )

        assert response.status_code == 200

    def test_health_is_public(self, test_client: TestClient) -> None:
        assert test_client.get("/health").status_code == 200


class TestCostStats:
    """Tests for spend statistics."""

    def test_empty_ledger(self, test_client: TestClient) -> None:
        data = test_client.get("/api/v1/cost-logs/stats").json()

        assert Decimal(data["all_time"]) == 0
        assert data["by_service_type"] == {}

    def test_stats_after_run(self, test_client: TestClient, finished_generation: dict) -> None:
        """Test all-time spend includes the generation-scoped script cost."""
        data = test_client.get("/api/v1/cost-logs/stats").json()

        video_total = Decimal(finished_generation["total_cost"])
        script_total = Decimal(data["by_service_type"]["script"])
        assert script_total > 0
        assert Decimal(data["all_time"]) == video_total + script_total
        assert Decimal(data["month"]) == Decimal(data["all_time"])
