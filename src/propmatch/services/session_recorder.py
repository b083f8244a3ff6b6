"""Session Recorder — persists Smart-Match searches, their matches, and conversions.

A session row is written once per executed search and touched at most once
more, when the visitor leaves their contact details and becomes a lead.
"""
import logging
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from propmatch.domain.enums import ActivityType, LeadSource, LeadStage
from propmatch.domain.models import PropertyMatchRecord, SearchSession
from propmatch.domain.schemas import (
    LeadConversionRequest,
    LeadConversionResponse,
    PropertyMatch,
    SearchCriteria,
)
from propmatch.services.lead_service import LeadService

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a conversion references an unknown search session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Search session {session_id} not found")


class SessionAlreadyConvertedError(Exception):
    """Raised when a session has already been linked to a lead."""

    def __init__(self, session_id: str, lead_id: str):
        self.session_id = session_id
        self.lead_id = lead_id
        super().__init__(f"Search session {session_id} already converted to lead {lead_id}")


class LeadConversionError(Exception):
    """Raised when the lead store rejects a conversion."""


class SessionRecorder:
    """Reads and writes SearchSession / PropertyMatchRecord rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_session(self, criteria: SearchCriteria) -> SearchSession | None:
        """Record and commit a new search session.

        Returns None (after logging) when the insert fails; the search goes
        on without a session id rather than failing the visitor.
        """
        session = SearchSession(
            id=str(uuid.uuid4()),
            session_token=secrets.token_urlsafe(32),
            purpose=criteria.purpose.value,
            preferred_property_type=criteria.property_type.value if criteria.property_type else None,
            office_size_min=criteria.office_size.min if criteria.office_size else None,
            office_size_max=criteria.office_size.max if criteria.office_size else None,
            budget_min=criteria.budget.min if criteria.budget else None,
            budget_max=criteria.budget.max if criteria.budget else None,
            preferred_area=criteria.area,
            near_transit=criteria.near_transit,
            criteria=criteria.model_dump(mode="json"),
        )
        try:
            self.db.add(session)
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.error("Error creating search session: %s", exc)
            await self.db.rollback()
            return None

        logger.info("Created search session %s (token %s...)", session.id, session.session_token[:8])
        return session

    async def record_matches(self, session_id: str, matches: list[PropertyMatch]) -> list[PropertyMatchRecord]:
        """Insert one row per surfaced match, ranked 1..N in the given order."""
        records = [
            PropertyMatchRecord(
                id=str(uuid.uuid4()),
                session_id=session_id,
                property_id=match.listing_id,
                match_score=match.score,
                match_reasons=list(match.reasons),
                rank=rank,
            )
            for rank, match in enumerate(matches, start=1)
        ]
        if records:
            self.db.add_all(records)
            await self.db.flush()
        return records

    async def get_session_by_token(self, token: str) -> SearchSession | None:
        result = await self.db.execute(
            select(SearchSession)
            .where(SearchSession.session_token == token)
            .options(selectinload(SearchSession.matches))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def convert_to_lead(self, request: LeadConversionRequest) -> LeadConversionResponse:
        """Turn a search visitor into a lead.

        Order matters: the lead is created first and the session is only
        linked once that succeeded. Lead, link and activity commit together,
        so a failed conversion leaves the session untouched.

        Raises:
            SessionNotFoundError: unknown session id.
            SessionAlreadyConvertedError: the session already has a lead.
            LeadConversionError: the lead store rejected the lead or its activity.
        """
        session = await self.db.get(SearchSession, request.session_id)
        if session is None:
            raise SessionNotFoundError(request.session_id)
        if session.lead_id:
            raise SessionAlreadyConvertedError(session.id, session.lead_id)

        leads = LeadService(self.db)
        try:
            lead = await leads.create_lead(
                full_name=request.full_name,
                phone=request.phone,
                email=request.email,
                line_id=request.line_id,
                source=LeadSource.WEBSITE,
                stage=LeadStage.NEW,
                note=(
                    "Auto-generated from Smart Match Wizard. "
                    f"SessionID: {session.id}\nLine ID: {request.line_id or '-'}"
                ),
            )

            session.lead_id = lead.id
            session.converted_at = datetime.now(timezone.utc)

            await leads.create_activity(
                lead.id,
                ActivityType.SYSTEM,
                f"Interest recorded via Smart Match Wizard. Property ID: {request.listing_id}",
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise LeadConversionError(f"Failed to create lead: {exc}") from exc

        logger.info("Converted search session %s to lead %s", request.session_id, lead.id)
        return LeadConversionResponse(lead_id=lead.id)
