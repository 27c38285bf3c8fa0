"""
Place repository backed by async SQLAlchemy.
"""
import abc
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Boolean, Column, DateTime, Float, String, Text, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import Base
from app.models.places import Place, PlaceCategory


class PlaceRecord(Base):
    __tablename__ = "places"

    place_id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    cuisine = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    location_text = Column(String, nullable=True)
    influence_text = Column(String, nullable=True)
    visited = Column(Boolean, nullable=True)
    notes = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)
    website = Column(String, nullable=True)
    social_media = Column(String, nullable=True)
    provider_id = Column(String, nullable=True)
    full_address = Column(String, nullable=True)
    is_permanently_closed = Column(Boolean, nullable=True)
    created_at = Column(DateTime, nullable=True)
    last_updated_at = Column(DateTime, nullable=True)


def _place_from_record(record: PlaceRecord) -> Place:
    return Place(
        place_id=UUID(record.place_id),
        name=record.name,
        cuisine=record.cuisine,
        category=PlaceCategory(record.category) if record.category else None,
        location_text=record.location_text,
        influence_text=record.influence_text,
        visited=record.visited,
        notes=record.notes,
        rating=record.rating,
        website=record.website,
        social_media=record.social_media,
        provider_id=record.provider_id,
        full_address=record.full_address,
        is_permanently_closed=record.is_permanently_closed,
        created_at=record.created_at,
        last_updated_at=record.last_updated_at,
    )


def _record_from_place(place: Place) -> PlaceRecord:
    # Opening hours are re-derived from the provider and never stored
    return PlaceRecord(
        place_id=str(place.place_id),
        name=place.name,
        cuisine=place.cuisine,
        category=place.category.value if place.category else None,
        location_text=place.location_text,
        influence_text=place.influence_text,
        visited=place.visited,
        notes=place.notes,
        rating=place.rating,
        website=place.website,
        social_media=place.social_media,
        provider_id=place.provider_id,
        full_address=place.full_address,
        is_permanently_closed=place.is_permanently_closed,
        created_at=place.created_at,
        last_updated_at=place.last_updated_at,
    )


class PlaceRepository(abc.ABC):
    """Keyed store of Place records."""

    @abc.abstractmethod
    async def find_by_id(self, place_id: UUID) -> Optional[Place]:
        ...

    @abc.abstractmethod
    async def find_all(self) -> List[Place]:
        ...

    @abc.abstractmethod
    async def save(self, place: Place) -> Place:
        ...

    @abc.abstractmethod
    async def delete_by_id(self, place_id: UUID) -> None:
        """Remove a place; a missing id is a no-op."""


class SqlPlaceRepository(PlaceRepository):
    """PlaceRepository using one short-lived session per operation."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_id(self, place_id: UUID) -> Optional[Place]:
        async with self._session_factory() as session:
            record = await session.get(PlaceRecord, str(place_id))
            return _place_from_record(record) if record else None

    async def find_all(self) -> List[Place]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlaceRecord).order_by(PlaceRecord.created_at)
            )
            return [_place_from_record(record) for record in result.scalars()]

    async def save(self, place: Place) -> Place:
        """Insert or update in a single transaction."""
        async with self._session_factory() as session:
            async with session.begin():
                await session.merge(_record_from_place(place))
        return place

    async def delete_by_id(self, place_id: UUID) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                record = await session.get(PlaceRecord, str(place_id))
                if record is not None:
                    await session.delete(record)
