"""Title, description and hero image generation for saved tours."""

from collections.abc import Sequence

from museum_tour.domain.tour import TourItem

UNKNOWN_LOCATION = "Unknown Location"
MAX_DESCRIPTION_LENGTH = 150
DEFAULT_TOUR_TITLE = "Art Tour"

_ELLIPSIS = "..."


def generate_tour_title(items: Sequence[TourItem], museum_name: str) -> str:
    """Build a tour title from the museum name or the artworks seen."""
    if museum_name and museum_name != UNKNOWN_LOCATION:
        return f"{museum_name} Tour"

    if not items:
        return DEFAULT_TOUR_TITLE
    if len(items) == 1:
        metadata = items[0].metadata
        if metadata is not None and metadata.title:
            return f"Tour: {metadata.title}"
        return f"{DEFAULT_TOUR_TITLE} - 1 Artwork"
    return f"{DEFAULT_TOUR_TITLE} - {len(items)} Artworks"


def generate_tour_description(items: Sequence[TourItem]) -> str:
    """Describe up to three artworks, truncated to a readable length."""
    if not items:
        return "An empty tour"

    described = [
        _format_artwork(item)
        for item in items
        if item.metadata is not None and (item.metadata.title or item.metadata.artist)
    ][:3]
    if not described:
        noun = "artwork" if len(items) == 1 else "artworks"
        return f"A tour featuring {len(items)} {noun}"

    return _truncate(f"Featuring {', '.join(described)}", MAX_DESCRIPTION_LENGTH)


def get_hero_image_uri(items: Sequence[TourItem]) -> str:
    """Return the first photo of the first item that has one."""
    for item in items:
        if item.photos:
            return item.photos[0]
    return ""


def _format_artwork(item: TourItem) -> str:
    metadata = item.metadata
    title = metadata.title if metadata else None
    artist = metadata.artist if metadata else None
    if title and artist:
        return f"{title} by {artist}"
    if title:
        return title
    if artist:
        return f"work by {artist}"
    return ""


def _truncate(text: str, max_length: int) -> str:
    """Cut text to max_length, preferring a word boundary past the halfway point."""
    if len(text) <= max_length:
        return text
    cut_at = max_length - len(_ELLIPSIS)
    truncated = text[:cut_at]
    last_space = truncated.rfind(" ")
    if last_space > cut_at * 0.5:
        return truncated[:last_space] + _ELLIPSIS
    return truncated + _ELLIPSIS
