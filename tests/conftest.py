"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from typing import Any
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_RESULT_BACKEND"] = "redis://localhost:6379/1"
os.environ["LOG_LEVEL"] = "WARNING"

from ad_engine.adapters.avatar.base import AvatarClip  # noqa: E402
from ad_engine.adapters.avatar.stub import StubAvatarProvider  # noqa: E402
from ad_engine.adapters.broll.stub import StubBRollService  # noqa: E402
from ad_engine.adapters.composer.stub import StubVideoComposer  # noqa: E402
from ad_engine.adapters.script.base import Script  # noqa: E402
from ad_engine.adapters.script.stub import StubScriptProvider  # noqa: E402
from ad_engine.adapters.storage.stub import StubStorageBackend  # noqa: E402
from ad_engine.db.models import Base, BriefModel, GenerationModel, VideoModel  # noqa: E402
from ad_engine.db.session import (  # noqa: E402
    SessionContextFactory,
    build_engine,
    make_session_context,
)
from ad_engine.domain.enums import (  # noqa: E402
    BriefStatus,
    GenerationStatus,
    QualityStatus,
    VideoStatus,
)
from ad_engine.domain.errors import ProviderError  # noqa: E402
from ad_engine.services.cost_ledger import Pricing  # noqa: E402
from ad_engine.services.generations import GenerationDispatcher  # noqa: E402
from ad_engine.services.pipeline import GenerationPipeline  # noqa: E402
from ad_engine.services.providers import Capabilities  # noqa: E402

PARSED_BRIEF = {
    "hook": "My kids finally fall asleep on their own",
    "persona": {
        "type": "mother",
        "age": "30-40",
        "demographic": "general",
        "tone": "warm",
    },
    "emotion": "serenity",
    "broll_tags": ["child-sleeping", "app-interface"],
    "testimonial_points": [
        "Bedtime used to take an hour every night.",
        "Now the stories do the work for me.",
    ],
}


class RecordingDispatcher(GenerationDispatcher):
    """Records dispatched generations instead of queueing them."""

    def __init__(self) -> None:
        self.dispatched: list[UUID] = []

    def dispatch(self, generation_id: UUID) -> str | None:
        self.dispatched.append(generation_id)
        return f"task-{len(self.dispatched)}"


class FailingDispatcher(GenerationDispatcher):
    """Simulates an unreachable broker."""

    def dispatch(self, generation_id: UUID) -> str | None:
        raise ConnectionError("broker unreachable")


class FlakyAvatarProvider(StubAvatarProvider):
    """Fails for scripts whose hook ends with one of the given variation numbers."""

    def __init__(self, fail_variations: set[int] | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.fail_variations = fail_variations
        self.calls = 0

    @property
    def name(self) -> str:
        return "flaky"

    async def generate(self, script: Script) -> AvatarClip:
        self.calls += 1
        variation = int(script.hook.rsplit(" ", 1)[-1])
        if self.fail_variations is None or variation in self.fail_variations:
            raise ProviderError(self.name, f"avatar rendering failed for variation {variation}")
        return await super().generate(script)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def session_context(session_factory: sessionmaker[Session]) -> SessionContextFactory:
    return make_session_context(session_factory)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage() -> StubStorageBackend:
    return StubStorageBackend()


@pytest.fixture
def capabilities(storage: StubStorageBackend) -> Capabilities:
    """Stub provider set."""
    return Capabilities(
        script=StubScriptProvider(),
        avatar=StubAvatarProvider(),
        composer=StubVideoComposer(),
        broll=StubBRollService(),
        storage=storage,
    )


@pytest.fixture
def pricing() -> Pricing:
    return Pricing.from_settings()


@pytest.fixture
def make_pipeline(
    session_context: SessionContextFactory, pricing: Pricing
) -> Callable[..., GenerationPipeline]:
    """Build a pipeline bound to the test database."""

    def factory(capabilities: Capabilities, max_concurrency: int = 4) -> GenerationPipeline:
        return GenerationPipeline(
            resolver=lambda: capabilities,
            session_factory=session_context,
            pricing=pricing,
            max_concurrency=max_concurrency,
        )

    return factory


@pytest.fixture
def make_brief(db_session: Session) -> Callable[..., BriefModel]:
    def factory(parsed: bool = True, raw_input: str = "Bedtime stories app brief") -> BriefModel:
        brief = BriefModel(
            raw_input=raw_input,
            parsed_data=dict(PARSED_BRIEF) if parsed else None,
            status=BriefStatus.PARSED if parsed else BriefStatus.PENDING,
        )
        db_session.add(brief)
        db_session.commit()
        return brief

    return factory


@pytest.fixture
def make_generation(db_session: Session) -> Callable[..., GenerationModel]:
    def factory(
        brief: BriefModel,
        target_count: int = 3,
        status: GenerationStatus = GenerationStatus.PENDING,
        parent_generation_id: UUID | None = None,
    ) -> GenerationModel:
        generation = GenerationModel(
            brief_id=brief.id,
            target_count=target_count,
            status=status,
            parent_generation_id=parent_generation_id,
        )
        db_session.add(generation)
        db_session.commit()
        return generation

    return factory


@pytest.fixture
def make_video(db_session: Session) -> Callable[..., VideoModel]:
    def factory(
        generation: GenerationModel,
        variant_index: int = 0,
        status: VideoStatus = VideoStatus.COMPLETED,
        quality_status: QualityStatus = QualityStatus.PENDING,
    ) -> VideoModel:
        video = VideoModel(
            generation_id=generation.id,
            variant_index=variant_index,
            status=status,
            quality_status=quality_status,
            script_provider="stub",
            avatar_provider="stub",
            generation_params={"script": {"hook": "Variation 1", "testimonial_script": ""}},
            video_url="https://storage.example.com/video.mp4",
        )
        db_session.add(video)
        db_session.commit()
        return video

    return factory


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def test_client(
    session_factory: sessionmaker[Session],
    dispatcher: RecordingDispatcher,
    capabilities: Capabilities,
) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app bound to the test database."""
    from ad_engine.api.deps import get_capabilities, get_dispatcher
    from ad_engine.db.session import get_session
    from ad_engine.main import app

    def override_session() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_capabilities] = lambda: capabilities

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
