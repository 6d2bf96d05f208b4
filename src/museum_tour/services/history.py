"""Saving the current tour session to the history log."""

import copy
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from museum_tour.domain.history import (
    Coordinates,
    CreatePersistedTourParams,
    PersistedTour,
)
from museum_tour.services.items import ItemStore
from museum_tour.services.titles import (
    UNKNOWN_LOCATION,
    generate_tour_description,
    generate_tour_title,
    get_hero_image_uri,
)

MIN_ITEMS_TO_SAVE = 1

_logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Persistence interface for saved tours."""

    def save_tour(self, params: CreatePersistedTourParams) -> UUID:
        """Create a saved tour and return its id."""

    def update_tour(self, tour_id: UUID, updates: dict[str, object]) -> None:
        """Update fields of a saved tour."""

    def get_tour(self, tour_id: UUID) -> PersistedTour | None:
        """Return a saved tour by id, if present."""

    def list_tours(self) -> list[PersistedTour]:
        """Return saved tours, newest first."""

    def delete_tour(self, tour_id: UUID) -> None:
        """Delete a saved tour."""


@dataclass
class TourHistoryService:
    """Snapshots the live item store into the history log.

    The first save of a session creates a tour; later saves update that same
    tour until start_new_tour is called.
    """

    store: ItemStore
    repository: HistoryRepository
    saved_tour_id: UUID | None = None

    def can_save(self) -> bool:
        """Whether enough items have finished to be worth saving."""
        finished = [item for item in self.store.items() if not item.is_pending]
        return len(finished) >= MIN_ITEMS_TO_SAVE

    def save(  # noqa: PLR0913
        self,
        *,
        session_id: str,
        museum_name: str = UNKNOWN_LOCATION,
        museum_id: str | None = None,
        coordinates: Coordinates | None = None,
        user_id: str | None = None,
    ) -> UUID | None:
        """Save or update the current tour; return its id, or None if skipped."""
        if not self.can_save():
            _logger.debug("No finished tour items to save")
            return None

        feed_items = copy.deepcopy(self.store.items())
        resolved_museum = museum_name or UNKNOWN_LOCATION
        title = generate_tour_title(feed_items, resolved_museum)
        description = generate_tour_description(feed_items)
        hero_image_uri = get_hero_image_uri(feed_items)

        if self.saved_tour_id is not None:
            _logger.debug(
                "Updating saved tour %s with %s items",
                self.saved_tour_id,
                len(feed_items),
            )
            self.repository.update_tour(
                self.saved_tour_id,
                {
                    "title": title,
                    "description": description,
                    "hero_image_uri": hero_image_uri,
                    "feed_items": feed_items,
                },
            )
            return self.saved_tour_id

        tour_id = self.repository.save_tour(
            CreatePersistedTourParams(
                title=title,
                description=description,
                hero_image_uri=hero_image_uri,
                museum_name=resolved_museum,
                session_id=session_id,
                feed_items=feed_items,
                museum_id=museum_id,
                coordinates=coordinates,
                user_id=user_id,
            )
        )
        self.saved_tour_id = tour_id
        _logger.info("Tour saved: %s (%s items)", tour_id, len(feed_items))
        return tour_id

    def start_new_tour(self) -> None:
        """Clear the live store and forget the saved tour."""
        self.store.reset()
        self.saved_tour_id = None
