"""Smart-Match search — fetch, score, rank, persist.

Runs one executed search for frozen criteria:
    1. Open a search session (best effort, see SessionRecorder)
    2. Fetch active candidates for the purpose and property type
    3. Score every candidate and build the buyer-facing match cards
    4. Drop weak matches, rank by score, keep the top N
    5. Persist the ranked matches against the session
"""

import logging
import random
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.app.config import Settings, get_settings
from propmatch.domain.schemas import (
    ListingRecord,
    PropertyMatch,
    SearchCriteria,
    SearchResult,
)
from propmatch.services.listing_pricing import display_price
from propmatch.services.listing_query import ListingFilter, fetch_listings
from propmatch.services.match_scorer import score_listing
from propmatch.services.session_recorder import SessionRecorder

logger = logging.getLogger(__name__)

# Commute-time heuristic (minutes), display only
COMMUTE_BASE_MINUTES = 35
COMMUTE_SAME_AREA_SAVING = 15
COMMUTE_TRANSIT_SAVING = 10
COMMUTE_JITTER = 2
COMMUTE_FLOOR_MINUTES = 10


class SearchError(Exception):
    """Raised when candidate listings cannot be fetched."""


def estimate_commute_minutes(
    listing: ListingRecord,
    criteria: SearchCriteria,
    rng: random.Random,
) -> int:
    """Rough commute estimate for the result card.

    Carries a little random jitter so cards don't all read the same; it is
    never part of the score.
    """
    minutes = COMMUTE_BASE_MINUTES
    if criteria.area and listing.popular_area == criteria.area:
        minutes -= COMMUTE_SAME_AREA_SAVING
    if listing.near_transit:
        minutes -= COMMUTE_TRANSIT_SAVING
    minutes += rng.randint(-COMMUTE_JITTER, COMMUTE_JITTER)
    return max(COMMUTE_FLOOR_MINUTES, minutes)


class SmartMatchSearch:
    """Executes Smart-Match searches against the listing store."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.recorder = SessionRecorder(db)

    def build_match(self, listing: ListingRecord, criteria: SearchCriteria) -> PropertyMatch:
        """Score *listing* and dress it up as a match card."""
        result = score_listing(listing, criteria)
        price = display_price(listing, criteria.purpose)
        image_url = (listing.image_urls or [None])[0] or self.settings.default_image_url

        return PropertyMatch(
            listing_id=listing.id,
            slug=listing.slug,
            title=listing.title,
            price=price.amount,
            original_price=price.original_price,
            secondary_price=price.secondary_price,
            is_sqm_price=price.is_sqm_price,
            image_url=image_url,
            score=result.score,
            reasons=result.reasons,
            score_breakdown=result.breakdown,
            commute_time=estimate_commute_minutes(listing, criteria, self.rng),
            bedrooms=listing.bedrooms,
            bathrooms=listing.bathrooms,
            near_transit=listing.near_transit,
            transit_station_name=listing.transit_station_name,
            transit_type=listing.transit_type,
            transit_distance_meters=listing.transit_distance_meters,
            property_type=listing.property_type,
        )

    def rank(self, matches: list[PropertyMatch]) -> list[PropertyMatch]:
        """Keep matches above the cutoff, best first, top N.

        ``sorted`` is stable, so ties keep the candidate fetch order.
        """
        relevant = [m for m in matches if m.score > self.settings.match_score_cutoff]
        ranked = sorted(relevant, key=lambda m: m.score, reverse=True)
        return ranked[: self.settings.max_matches]

    async def search(self, criteria: SearchCriteria) -> SearchResult:
        """Run one search for *criteria*.

        The session row is committed before candidates are fetched, so a
        failed search still leaves its session on record. Failing to record
        the ranked matches is logged and the matches are returned anyway.

        Raises:
            SearchError: candidate listings could not be fetched.
        """
        # Freeze: later mutations by the caller must not leak into this run
        criteria = criteria.model_copy(deep=True)

        session = await self.recorder.create_session(criteria)
        session_id = session.id if session else None
        session_token = session.session_token if session else None

        listing_filter = ListingFilter.for_purpose(
            criteria.purpose,
            property_type=criteria.property_type,
            limit=self.settings.search_candidate_limit,
        )
        try:
            candidates = await fetch_listings(self.db, listing_filter)
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch properties for matching: %s", exc)
            raise SearchError("Failed to fetch properties for matching") from exc

        matches = self.rank([self.build_match(p, criteria) for p in candidates])

        if session_id is not None:
            try:
                await self.recorder.record_matches(session_id, matches)
                await self.db.commit()
            except SQLAlchemyError as exc:
                logger.error("Error recording matches for session %s: %s", session_id, exc)
                await self.db.rollback()

        logger.info(
            "Smart-Match search %s: %d candidates, %d matches",
            session_id or "<no session>",
            len(candidates),
            len(matches),
        )
        return SearchResult(
            session_id=session_id,
            session_token=session_token,
            matches=matches,
        )
