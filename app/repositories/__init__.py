from .places import PlaceRecord, PlaceRepository, SqlPlaceRepository

__all__ = ["PlaceRecord", "PlaceRepository", "SqlPlaceRepository"]
