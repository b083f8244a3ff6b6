"""Smart-Match wizard controller.

The wizard is a linear state machine with two optional detours:

    Purpose(1) -> PropertyType(1.5) -> [OfficeSize(1.7)] -> Budget(2)
        -> [Transit(2.5)] -> Area(3) -> Searching(4) -> Results(9)

OfficeSize is inserted when an office property type is chosen; Transit
when the transit question is enabled in configuration. All state lives in
a ``WizardState`` value owned by the client: every transition takes a state
and returns a new one, nothing is kept server-side between calls.

Before a step is rendered, ``load_options`` asks the inventory service
which of its choices still have live listings so dead ends can be
disabled. ``submit`` runs the search on criteria frozen from the state.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.app.config import Settings, get_settings
from propmatch.domain.enums import PropertyType, SearchPurpose, TransitOption, WizardStep
from propmatch.domain.schemas import (
    NumericRange,
    SearchCriteria,
    StepOption,
    WizardSelection,
    WizardState,
)
from propmatch.services.inventory_service import InventoryService
from propmatch.services.location_normalizer import POPULAR_AREAS, expand
from propmatch.services.search_service import SearchError, SmartMatchSearch
from propmatch.services.smart_match_config import (
    SmartMatchConfig,
    get_smart_match_config,
)

logger = logging.getLogger(__name__)

W = WizardStep

# Budget applied when the visitor never picked one; also closes open bounds
UNBOUNDED_BUDGET = NumericRange(min=0, max=1_000_000_000)

SEARCH_ERROR = "search_error"

PURPOSE_LABELS: dict[SearchPurpose, str] = {
    SearchPurpose.BUY: "Buy",
    SearchPurpose.RENT: "Rent",
    SearchPurpose.INVEST: "Invest",
}

TRANSIT_LABELS: dict[TransitOption, str] = {
    TransitOption.NEAR_TRANSIT: "Near BTS/MRT",
    TransitOption.ANY_LOCATION: "Any location",
}

# Progress-bar position per step; PropertyType and OfficeSize share a slot
STEP_INDEX: dict[WizardStep, int] = {
    W.PURPOSE: 0,
    W.PROPERTY_TYPE: 1,
    W.OFFICE_SIZE: 1,
    W.BUDGET: 2,
    W.TRANSIT: 3,
    W.AREA: 4,
    W.SEARCHING: 5,
    W.RESULTS: 5,
}


class InvalidStepTransitionError(Exception):
    """Raised when a wizard action is not allowed from the current step."""

    def __init__(self, current_step: WizardStep, action: str, reason: str):
        self.current_step = current_step
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot {action} from step {current_step.value}: {reason}")


def _require(state: WizardState, step: WizardStep, action: str) -> None:
    if state.step != step:
        raise InvalidStepTransitionError(
            state.step, action, f"only allowed on step {step.value}"
        )


def _advance(state: WizardState, step: WizardStep, **changes) -> WizardState:
    return state.model_copy(update={"step": step, "error": None, **changes})


def criteria_from_state(state: WizardState) -> SearchCriteria:
    """Freeze the wizard answers into search criteria.

    Returns a new object, so later edits to *state* cannot tear a search
    that is already running.
    """
    property_type = state.property_type
    if property_type is None and state.is_office_mode:
        property_type = PropertyType.OFFICE_BUILDING

    return SearchCriteria(
        purpose=state.purpose,
        property_type=property_type,
        office_size=state.office_size if state.is_office_mode else None,
        budget=_close_budget(state.budget),
        area=state.area or None,
        near_transit=state.near_transit,
    )


def _close_budget(budget: Optional[NumericRange]) -> NumericRange:
    """Fill any open bound of *budget* from ``UNBOUNDED_BUDGET``."""
    if budget is None:
        return UNBOUNDED_BUDGET
    return NumericRange(
        min=budget.min or UNBOUNDED_BUDGET.min,
        max=budget.max or UNBOUNDED_BUDGET.max,
    )


def _mark(options: list[StepOption], available: set[str]) -> list[StepOption]:
    """Disable options missing from *available*.

    An empty answer means the check failed or found nothing to narrow by;
    either way every option stays enabled.
    """
    if not available:
        return options
    return [opt.model_copy(update={"available": opt.id in available}) for opt in options]


class WizardController:
    """Drives the Smart-Match wizard for one visitor."""

    def __init__(
        self,
        inventory: InventoryService,
        search: SmartMatchSearch,
        config: SmartMatchConfig,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.inventory = inventory
        self.search = search
        self.config = config
        self.settings = settings or get_settings()
        self.sleep = sleep

    @classmethod
    async def for_session(cls, db: AsyncSession, settings: Optional[Settings] = None) -> "WizardController":
        """Wire a controller to a database session with stored configuration."""
        settings = settings or get_settings()
        config = await get_smart_match_config(db)
        return cls(InventoryService(db), SmartMatchSearch(db, settings), config, settings)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> WizardState:
        """A fresh wizard on the Purpose step."""
        return WizardState(transit_enabled=self.config.transit_question_enabled)

    def reset(self, state: WizardState) -> WizardState:
        """Drop every answer and go back to Purpose."""
        return WizardState(transit_enabled=state.transit_enabled)

    # ------------------------------------------------------------------
    # Forward transitions
    # ------------------------------------------------------------------

    def select_purpose(self, state: WizardState, purpose: SearchPurpose) -> WizardState:
        _require(state, W.PURPOSE, "select purpose")
        # Budget buckets differ between sale and rent prices
        changes = {"purpose": purpose}
        if purpose != state.purpose:
            changes.update(budget=None, budget_range_id=None)
        return _advance(state, W.PROPERTY_TYPE, **changes)

    def select_property_type(self, state: WizardState, property_type: PropertyType) -> WizardState:
        _require(state, W.PROPERTY_TYPE, "select property type")
        if property_type == PropertyType.OFFICE_BUILDING:
            return _advance(state, W.OFFICE_SIZE, property_type=property_type, is_office_mode=True)
        return _advance(
            state,
            W.BUDGET,
            property_type=property_type,
            is_office_mode=False,
            office_size=None,
        )

    def select_office_size(self, state: WizardState, office_size: NumericRange) -> WizardState:
        _require(state, W.OFFICE_SIZE, "select office size")
        return _advance(state, W.BUDGET, office_size=office_size)

    def select_budget(
        self,
        state: WizardState,
        budget: NumericRange,
        range_id: Optional[str] = None,
    ) -> WizardState:
        _require(state, W.BUDGET, "select budget")
        next_step = W.TRANSIT if state.transit_enabled else W.AREA
        return _advance(state, next_step, budget=budget, budget_range_id=range_id)

    def select_transit(self, state: WizardState, option: TransitOption) -> WizardState:
        _require(state, W.TRANSIT, "select transit")
        return _advance(state, W.AREA, near_transit=option == TransitOption.NEAR_TRANSIT)

    def select_area(self, state: WizardState, area: str) -> WizardState:
        """Lock in the area; the state is then ready for ``submit``."""
        _require(state, W.AREA, "select area")
        return _advance(state, W.SEARCHING, area=area)

    def apply(self, selection: WizardSelection) -> WizardState:
        """Dispatch a client selection to the transition for its step."""
        state = selection.state
        value = selection.value

        if state.step == W.PURPOSE:
            return self.select_purpose(state, SearchPurpose(value))
        if state.step == W.PROPERTY_TYPE:
            return self.select_property_type(state, PropertyType(value))
        if state.step == W.OFFICE_SIZE:
            return self.select_office_size(state, self._office_range(value, selection.range))
        if state.step == W.BUDGET:
            return self.select_budget(state, self._budget_range(state, value, selection.range), value)
        if state.step == W.TRANSIT:
            return self.select_transit(state, TransitOption(value))
        if state.step == W.AREA:
            if not value:
                raise InvalidStepTransitionError(state.step, "select area", "no area given")
            return self.select_area(state, value)
        raise InvalidStepTransitionError(state.step, "select", "step takes no selection")

    def _office_range(self, option_id: Optional[str], explicit: Optional[NumericRange]) -> NumericRange:
        if explicit is not None:
            return explicit
        for option in self.config.office_sizes:
            if option.id == option_id or option.bucket.value == option_id:
                return NumericRange(min=option.min_sqm, max=option.max_sqm)
        raise InvalidStepTransitionError(W.OFFICE_SIZE, "select office size", f"unknown option {option_id!r}")

    def _budget_range(
        self,
        state: WizardState,
        range_id: Optional[str],
        explicit: Optional[NumericRange],
    ) -> NumericRange:
        if explicit is not None:
            return explicit
        for option in self.config.budget_ranges_for(state.purpose):
            if option.id == range_id:
                return NumericRange(min=option.min_value, max=option.max_value)
        raise InvalidStepTransitionError(W.BUDGET, "select budget", f"unknown budget range {range_id!r}")

    # ------------------------------------------------------------------
    # Back navigation
    # ------------------------------------------------------------------

    def back(self, state: WizardState) -> WizardState:
        """Step back one screen, honouring the optional detours."""
        step = state.step
        if step == W.PROPERTY_TYPE:
            return _advance(state, W.PURPOSE)
        if step == W.OFFICE_SIZE:
            return _advance(state, W.PROPERTY_TYPE)
        if step == W.BUDGET:
            return _advance(state, W.OFFICE_SIZE if state.is_office_mode else W.PROPERTY_TYPE)
        if step == W.TRANSIT:
            return _advance(state, W.BUDGET)
        if step == W.AREA:
            return _advance(state, W.TRANSIT if state.transit_enabled else W.BUDGET)
        if step == W.RESULTS:
            return _advance(state, W.AREA, matches=[], session_id=None)
        raise InvalidStepTransitionError(step, "go back", "no previous step")

    # ------------------------------------------------------------------
    # Step options (inventory-aware)
    # ------------------------------------------------------------------

    async def load_options(self, state: WizardState) -> list[StepOption]:
        """Choices for the current step, with dead ends marked unavailable."""
        step = state.step
        purpose = state.purpose

        if step == W.PURPOSE:
            options = [StepOption(id=p.value, label=label) for p, label in PURPOSE_LABELS.items()]
            available = await self.inventory.check_purpose_availability()
            return _mark(options, set(available))

        if step == W.PROPERTY_TYPE:
            options = list(
                {
                    t.value.value: StepOption(id=t.value.value, label=t.label_en or t.label)
                    for t in self.config.property_types
                }.values()
            )
            available = await self.inventory.check_property_type_availability(purpose)
            return _mark(options, set(available))

        if step == W.OFFICE_SIZE:
            sizes = await self.inventory.check_office_size_availability(purpose)
            counts = {s.size.value: s.count for s in sizes}
            options = [
                StepOption(
                    id=o.id,
                    label=o.label_en or o.label,
                    count=counts.get(o.bucket.value),
                )
                for o in self.config.office_sizes
            ]
            available = {
                o.id for o in self.config.office_sizes if counts.get(o.bucket.value, 0) > 0
            }
            if not counts:
                return options
            return [opt.model_copy(update={"available": opt.id in available}) for opt in options]

        if step == W.BUDGET:
            ranges = self.config.budget_ranges_for(purpose)
            options = [StepOption(id=r.id, label=r.label_en or r.label) for r in ranges]
            available = await self.inventory.check_budget_availability(
                purpose,
                property_type=state.property_type,
                office_size=state.office_size if state.is_office_mode else None,
                budget_ranges=ranges,
            )
            return _mark(options, set(available))

        if step == W.TRANSIT:
            options = [StepOption(id=t.value, label=label) for t, label in TRANSIT_LABELS.items()]
            available = await self.inventory.check_transit_availability(
                purpose,
                property_type=state.property_type,
                office_size=state.office_size if state.is_office_mode else None,
                budget=state.budget,
            )
            return _mark(options, set(available))

        if step == W.AREA:
            available = await self.inventory.check_location_availability(
                purpose,
                property_type=state.property_type,
                office_size=state.office_size if state.is_office_mode else None,
                budget=state.budget,
                near_transit=state.near_transit,
            )
            return self._area_options(available)

        return []

    @staticmethod
    def _area_options(available: list[str]) -> list[StepOption]:
        """Popular areas first, then any other live area names.

        A popular area counts as available when any of its synonyms or
        districts has inventory.
        """
        live = set(available)
        covered: set[str] = set()
        options: list[StepOption] = []
        for area in POPULAR_AREAS:
            terms = expand(area)
            hit = bool(live & terms)
            if hit:
                covered |= live & terms
            options.append(StepOption(id=area, label=area, available=hit or not live))

        options.extend(StepOption(id=name, label=name) for name in available if name not in covered)
        return options

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def submit(self, state: WizardState) -> WizardState:
        """Run the search and move to Results.

        On a search failure the wizard starts over on Purpose with
        ``error`` set so the client can show a notification.
        """
        _require(state, W.SEARCHING, "search")
        criteria = criteria_from_state(state)

        try:
            result = await self.search.search(criteria)
        except SearchError as exc:
            logger.warning("Smart-Match search failed, resetting wizard: %s", exc)
            return self.reset(state).model_copy(update={"error": SEARCH_ERROR})

        # UX pacing: let the "analysing" screen breathe before results
        await self.sleep(self.settings.results_delay_seconds)

        return _advance(
            state,
            W.RESULTS,
            session_id=result.session_id,
            matches=result.matches,
        )

    def progress(self, state: WizardState) -> tuple[int, int]:
        """(current index, total steps) for the progress indicator."""
        index = STEP_INDEX[state.step]
        if not state.transit_enabled and index > STEP_INDEX[W.TRANSIT]:
            index -= 1
        total = 4 + (1 if state.transit_enabled else 0)
        return index, total
