"""Brief creation, editing and parsing."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ad_engine.db.models import BriefModel
from ad_engine.domain.enums import BriefStatus
from ad_engine.domain.errors import BriefNotFoundError, BriefParseError, ValidationError
from ad_engine.logging import get_logger
from ad_engine.services.brief_parser import BriefParser

logger = get_logger(__name__)


class BriefService:
    """Stores raw briefs and runs the parser over them."""

    def __init__(self, session: Session, parser: BriefParser | None = None) -> None:
        self.session = session
        self.parser = parser or BriefParser()

    def create(self, raw_input: str) -> BriefModel:
        if not raw_input.strip():
            raise ValidationError({"raw_input": "Brief text is required"})

        brief = BriefModel(raw_input=raw_input, status=BriefStatus.PENDING)
        self.session.add(brief)
        self.session.commit()
        self.session.refresh(brief)

        logger.info("brief_created", brief_id=str(brief.id), length=len(raw_input))
        return brief

    def get(self, brief_id: UUID) -> BriefModel:
        brief = self.session.get(BriefModel, brief_id)
        if brief is None:
            raise BriefNotFoundError(brief_id)
        return brief

    def update(self, brief_id: UUID, raw_input: str) -> BriefModel:
        """Replace the brief text. The brief must be parsed again afterwards."""
        if not raw_input.strip():
            raise ValidationError({"raw_input": "Must be a non-empty string"})

        brief = self.get(brief_id)
        brief.raw_input = raw_input.strip()
        brief.parsed_data = None
        brief.status = BriefStatus.PENDING
        brief.error_message = None
        self.session.commit()
        self.session.refresh(brief)

        logger.info("brief_updated", brief_id=str(brief_id), length=len(brief.raw_input))
        return brief

    def delete(self, brief_id: UUID) -> None:
        """Delete a brief with its generations and videos; cost rows are kept."""
        brief = self.get(brief_id)
        self.session.delete(brief)
        self.session.commit()

        logger.info("brief_deleted", brief_id=str(brief_id))

    def duplicate(self, brief_id: UUID) -> BriefModel:
        """Copy the brief text into a new unparsed brief."""
        original = self.get(brief_id)
        copy = BriefModel(raw_input=original.raw_input, status=BriefStatus.PENDING)
        self.session.add(copy)
        self.session.commit()
        self.session.refresh(copy)

        logger.info("brief_duplicated", brief_id=str(brief_id), copy_id=str(copy.id))
        return copy

    def recent(self, limit: int = 50, offset: int = 0) -> list[BriefModel]:
        query = (
            select(BriefModel).order_by(BriefModel.created_at.desc()).limit(limit).offset(offset)
        )
        return list(self.session.scalars(query))

    def parse(self, brief_id: UUID) -> BriefModel:
        """Parse a brief and store the result.

        A parse failure is recorded on the brief (status FAILED) and re-raised.
        """
        brief = self.get(brief_id)

        try:
            parsed = self.parser.parse(brief.raw_input)
        except BriefParseError as e:
            brief.status = BriefStatus.FAILED
            brief.error_message = e.message
            self.session.commit()
            logger.warning("brief_parse_failed", brief_id=str(brief_id), error=e.message)
            raise

        brief.parsed_data = parsed.to_dict()
        brief.status = BriefStatus.PARSED
        brief.error_message = None
        self.session.commit()
        self.session.refresh(brief)

        logger.info(
            "brief_parsed",
            brief_id=str(brief_id),
            emotion=parsed.emotion,
            broll_tags=len(parsed.broll_tags),
        )
        return brief
