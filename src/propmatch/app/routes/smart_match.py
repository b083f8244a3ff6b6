"""Smart-Match routes — anonymous, no visitor account required.

Config:        GET  /api/smart-match/config
Availability:  GET  /api/smart-match/availability/{purposes,property-types,office-sizes}
               POST /api/smart-match/availability/{budgets,transit,locations}
Search:        POST /api/smart-match/search
               GET  /api/smart-match/sessions/{token}
Conversion:    POST /api/smart-match/convert
Wizard:        POST /api/smart-match/wizard/{start,select,back,reset,options,submit}
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.domain.enums import SearchPurpose
from propmatch.domain.schemas import (
    BudgetAvailabilityRequest,
    LeadConversionRequest,
    LeadConversionResponse,
    LocationAvailabilityRequest,
    OfficeSizeAvailability,
    SearchCriteria,
    SearchResult,
    SearchSessionResponse,
    StepOption,
    TransitAvailabilityRequest,
    WizardSelection,
    WizardState,
)
from propmatch.infra.database import get_db
from propmatch.services.inventory_service import InventoryService
from propmatch.services.search_service import SearchError, SmartMatchSearch
from propmatch.services.session_recorder import (
    LeadConversionError,
    SessionAlreadyConvertedError,
    SessionNotFoundError,
    SessionRecorder,
)
from propmatch.services.smart_match_config import get_smart_match_config
from propmatch.services.wizard import InvalidStepTransitionError, WizardController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/smart-match", tags=["smart-match"])


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@router.get("/config")
async def get_config(db: AsyncSession = Depends(get_db)):
    """Budget buckets, property types, office sizes and wizard settings."""
    config = await get_smart_match_config(db)
    return config.to_dict()


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.get("/availability/purposes", response_model=list[str])
async def purpose_availability(db: AsyncSession = Depends(get_db)):
    return await InventoryService(db).check_purpose_availability()


@router.get("/availability/property-types", response_model=list[str])
async def property_type_availability(
    purpose: SearchPurpose,
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService(db).check_property_type_availability(purpose)


@router.get("/availability/office-sizes", response_model=list[OfficeSizeAvailability])
async def office_size_availability(
    purpose: SearchPurpose,
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService(db).check_office_size_availability(purpose)


@router.post("/availability/budgets", response_model=list[str])
async def budget_availability(
    req: BudgetAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService(db).check_budget_availability(
        req.purpose,
        property_type=req.property_type,
        office_size=req.office_size,
        budget_ranges=req.budget_ranges,
    )


@router.post("/availability/transit", response_model=list[str])
async def transit_availability(
    req: TransitAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService(db).check_transit_availability(
        req.purpose,
        property_type=req.property_type,
        office_size=req.office_size,
        budget=req.budget,
    )


@router.post("/availability/locations", response_model=list[str])
async def location_availability(
    req: LocationAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService(db).check_location_availability(
        req.purpose,
        property_type=req.property_type,
        office_size=req.office_size,
        budget=req.budget,
        near_transit=req.near_transit,
    )


# ---------------------------------------------------------------------------
# Search + sessions
# ---------------------------------------------------------------------------


@router.post("/search", response_model=SearchResult)
async def run_search(
    criteria: SearchCriteria,
    db: AsyncSession = Depends(get_db),
):
    """Score active listings against *criteria* and record the session."""
    try:
        return await SmartMatchSearch(db).search(criteria)
    except SearchError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/sessions/{token}", response_model=SearchSessionResponse)
async def get_session(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Retrieve a recorded search and its ranked matches by token."""
    session = await SessionRecorder(db).get_session_by_token(token)
    if not session:
        raise HTTPException(status_code=404, detail="Search session not found")
    return session


@router.post("/convert", response_model=LeadConversionResponse)
async def convert_session(
    req: LeadConversionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create a lead from a result card and link it to the search session."""
    try:
        return await SessionRecorder(db).convert_to_lead(req)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionAlreadyConvertedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LeadConversionError as e:
        logger.error("Lead conversion failed for session %s: %s", req.session_id, e)
        raise HTTPException(status_code=502, detail="Failed to create lead")


# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------


@router.post("/wizard/start", response_model=WizardState)
async def wizard_start(db: AsyncSession = Depends(get_db)):
    wizard = await WizardController.for_session(db)
    return wizard.start()


@router.post("/wizard/select", response_model=WizardState)
async def wizard_select(
    req: WizardSelection,
    db: AsyncSession = Depends(get_db),
):
    """Apply the choice made on the current step and advance."""
    wizard = await WizardController.for_session(db)
    try:
        return wizard.apply(req)
    except InvalidStepTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid selection: {e}")


@router.post("/wizard/back", response_model=WizardState)
async def wizard_back(
    state: WizardState,
    db: AsyncSession = Depends(get_db),
):
    wizard = await WizardController.for_session(db)
    try:
        return wizard.back(state)
    except InvalidStepTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/wizard/reset", response_model=WizardState)
async def wizard_reset(
    state: WizardState,
    db: AsyncSession = Depends(get_db),
):
    wizard = await WizardController.for_session(db)
    return wizard.reset(state)


@router.post("/wizard/options", response_model=list[StepOption])
async def wizard_options(
    state: WizardState,
    db: AsyncSession = Depends(get_db),
):
    """Choices for the current step, dead ends marked unavailable."""
    wizard = await WizardController.for_session(db)
    return await wizard.load_options(state)


@router.post("/wizard/submit", response_model=WizardState)
async def wizard_submit(
    state: WizardState,
    db: AsyncSession = Depends(get_db),
):
    """Run the search for a completed wizard and return the Results state."""
    wizard = await WizardController.for_session(db)
    try:
        return await wizard.submit(state)
    except InvalidStepTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
