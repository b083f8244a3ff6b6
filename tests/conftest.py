"""Shared test infrastructure for the PropMatch test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- make_listing: factory for Property rows (the listing store)
- make_session: factory for SearchSession rows
- api_client: factory for an httpx client bound to one router and db_session
"""

import secrets
import uuid

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from propmatch.infra.database import Base, get_db

import propmatch.domain.models  # noqa: F401

from propmatch.domain.models import Property, SearchSession


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Listing factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_listing(db_session):
    """Factory that creates an ACTIVE Property row.

    Usage:
        listing = await make_listing(price=4_000_000, popular_area="พระราม 9")
        office = await make_listing(property_type="OFFICE_BUILDING", size_sqm=55)
    """
    async def _factory(
        title: str = "Test condo",
        status: str = "ACTIVE",
        listing_type: str = "SALE",
        property_type: str | None = "CONDO",
        price: float | None = 4_000_000,
        rental_price: float | None = None,
        popular_area: str | None = "อโศก",
        district: str | None = "วัฒนา",
        province: str | None = "กรุงเทพมหานคร",
        near_transit: bool = False,
        **extra,
    ) -> Property:
        prop = Property(
            id=str(uuid.uuid4()),
            title=title,
            status=status,
            listing_type=listing_type,
            property_type=property_type,
            price=price,
            rental_price=rental_price,
            popular_area=popular_area,
            district=district,
            province=province,
            near_transit=near_transit,
            **extra,
        )
        db_session.add(prop)
        await db_session.flush()
        return prop

    return _factory


# ---------------------------------------------------------------------------
# Search session factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_session(db_session):
    """Factory that creates a SearchSession row.

    Usage:
        session = await make_session(purpose="RENT")
    """
    async def _factory(purpose: str = "BUY", **extra) -> SearchSession:
        session = SearchSession(
            id=str(uuid.uuid4()),
            session_token=secrets.token_urlsafe(32),
            purpose=purpose,
            criteria={"purpose": purpose},
            **extra,
        )
        db_session.add(session)
        await db_session.flush()
        return session

    return _factory


# ---------------------------------------------------------------------------
# API client factory
# ---------------------------------------------------------------------------

@pytest.fixture
def api_client(db_session):
    """Factory for an AsyncClient serving one router against db_session.

    Usage:
        async with api_client(smart_match_router) as client:
            resp = await client.get("/api/smart-match/config")
    """
    def _factory(router) -> AsyncClient:
        test_app = FastAPI()
        test_app.include_router(router)

        async def _override_get_db():
            yield db_session

        test_app.dependency_overrides[get_db] = _override_get_db

        return AsyncClient(
            transport=ASGITransport(app=test_app),
            base_url="http://testserver",
        )

    return _factory
