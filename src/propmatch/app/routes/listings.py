"""Listing keyword search — used by the chat front end."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.domain.enums import PropertyType, SearchPurpose
from propmatch.domain.schemas import ListingRecord
from propmatch.infra.database import get_db
from propmatch.services.listing_query import KEYWORD_SEARCH_LIMIT, keyword_search

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/listings", tags=["listings"])


@router.get("/search", response_model=list[ListingRecord])
async def search_listings(
    q: Optional[str] = None,
    location: Optional[str] = None,
    property_type: Optional[PropertyType] = None,
    purpose: Optional[SearchPurpose] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    limit: int = Query(KEYWORD_SEARCH_LIMIT, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Active listings matching free text, area synonyms and filters."""
    return await keyword_search(
        db,
        q,
        location=location,
        property_type=property_type,
        purpose=purpose,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
    )
