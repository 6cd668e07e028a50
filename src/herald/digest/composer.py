"""Digest body composition."""

from datetime import datetime

DIGEST_SUBJECT = "Weekly digest: new events"


def _event_line(event: dict) -> str:
    line = f"- {event.get('title') or 'Untitled event'} at {event.get('datetime') or 'TBA'}"
    if event.get("location"):
        line += f", {event['location']}"
    if event.get("price") is not None:
        line += f" (price: {event['price']})"
    return line


def compose_digest_body(events: list[dict], period_start: datetime, period_end: datetime) -> str:
    """Plain-text digest listing ``events``, or a nothing-new note when empty."""
    start = period_start.date().isoformat()
    end = period_end.date().isoformat()

    if not events:
        return (
            "Hello!\n\n"
            f"There are no new events for {start} to {end}.\n"
            "We will write again next week.\n"
        )

    lines = ["Hello!", "", f"Here are the new events for {start} to {end}:", ""]
    lines.extend(_event_line(event) for event in events)
    lines.extend(["", "Have a nice weekend!"])
    return "\n".join(lines) + "\n"
