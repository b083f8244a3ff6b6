"""Lead Service — creates CRM leads and their timeline activities."""
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.domain.enums import ActivityType, LeadSource, LeadStage, LeadType
from propmatch.domain.models import Lead, LeadActivity

logger = logging.getLogger(__name__)


class LeadService:
    """Write access to the lead store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_lead(
        self,
        full_name: str,
        phone: str,
        email: str | None = None,
        source: LeadSource = LeadSource.WEBSITE,
        stage: LeadStage = LeadStage.NEW,
        note: str | None = None,
        line_id: str | None = None,
        lead_type: LeadType = LeadType.INDIVIDUAL,
    ) -> Lead:
        """Insert a lead and flush so its id is available to the caller."""
        lead = Lead(
            id=str(uuid.uuid4()),
            full_name=full_name,
            phone=phone,
            email=email,
            line_id=line_id,
            lead_type=lead_type.value,
            source=source.value,
            stage=stage.value,
            note=note,
        )
        self.db.add(lead)
        await self.db.flush()

        logger.info("Created lead %s from %s", lead.id, source.value)
        return lead

    async def create_activity(
        self,
        lead_id: str,
        activity_type: ActivityType,
        note: str,
    ) -> LeadActivity:
        activity = LeadActivity(
            id=str(uuid.uuid4()),
            lead_id=lead_id,
            activity_type=activity_type.value,
            note=note,
        )
        self.db.add(activity)
        await self.db.flush()
        return activity
