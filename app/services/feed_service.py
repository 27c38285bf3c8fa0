"""Feed queries over the full place collection."""
import logging
from typing import List, Optional, Union

from app.errors import InvalidArgumentError
from app.models.places import Place
from app.repositories.places import PlaceRepository
from app.utils.normalizers import is_all_categories, parse_category, parse_visited

logger = logging.getLogger(__name__)


class FeedService:
    """Read-only filtering of stored places by category and visited state."""

    def __init__(self, repository: PlaceRepository):
        self.repository = repository

    async def list_places(self) -> List[Place]:
        return await self.repository.find_all()

    async def get_feed(
        self,
        category: str,
        visited: Optional[Union[bool, str]] = None,
    ) -> List[Place]:
        """
        Filter places by category and, optionally, visited state.

        Args:
            category: "ALL" (any case) or an exact category name, e.g. "RESTAURANT"
            visited: True/False to filter on visited state, None for no filter

        Returns:
            Matching places. "ALL" ignores the visited filter.
        """
        if is_all_categories(category):
            return await self.repository.find_all()

        place_category = parse_category(category)
        if place_category is None:
            raise InvalidArgumentError("Place type is required")
        visited_filter = parse_visited(visited)
        places = await self.repository.find_all()

        feed = [place for place in places if place.category == place_category]
        if visited_filter is not None:
            feed = [place for place in feed if place.visited is visited_filter]

        logger.debug(
            f"Feed category={category} visited={visited_filter}: {len(feed)} of {len(places)} places"
        )
        return feed
