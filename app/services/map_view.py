from app.models.events import Event


def filter_by_category(events: list[Event], search: str | None) -> tuple[list[Event], bool]:
    """Case-insensitive substring match on category.

    Returns the events to show and whether the search came up empty; an empty
    result falls back to showing every event.
    """
    term = (search or "").strip().lower()
    if not term:
        return events, False
    matched = [e for e in events if term in (e.category or "").lower()]
    if not matched:
        return events, True
    return matched, False


def build_markers(events: list[Event], *, is_logged_in: bool) -> list[dict]:
    return [
        {
            "id": event.id,
            "lat": event.latitude,
            "lng": event.longitude,
            "name": event.name,
            "category": event.category,
            "description": event.description,
            "location": event.location,
            "available_spots": event.remaining_capacity,
            "bookable": is_logged_in,
        }
        for event in events
        if event.is_geolocated
    ]
