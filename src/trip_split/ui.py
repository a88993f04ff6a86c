"""Interactive UI components for picking a trip."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .models import Trip

logger = logging.getLogger(__name__)


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="bor" matches "Boracay 2024"
        query="bgo" matches "Baguio weekend"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


def trip_label(trip: Trip) -> str:
    """Label shown for a trip in the picker."""
    return f"{trip.name} ({trip.id})"


class TripCompleter(Completer):
    """Fuzzy search completer for trips."""

    def __init__(self, trips: list[Trip]):
        """Initialize the completer with available trips."""
        self.trips = trips
        self.label_to_id = {trip_label(trip): trip.id for trip in trips}

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for label in self.label_to_id:
            if not query:
                yield Completion(text=label, start_position=0, display=label)
            elif fuzzy_match(query, label.lower()):
                yield Completion(
                    text=label,
                    start_position=-len(document.text),
                    display=label,
                )

    def resolve(self, text: str) -> str | None:
        """Map a typed label or bare trip id back to a trip id."""
        if text in self.label_to_id:
            return self.label_to_id[text]
        for trip in self.trips:
            if trip.id == text:
                return trip.id
        return None


def select_trip_interactive(trips: list[Trip]) -> str | None:
    """
    Interactive trip selection with fuzzy search.

    Args:
        trips: Trips to choose from

    Returns:
        Selected trip id, or None to cancel
    """
    if not trips:
        print("\n⚠️  No trips found")
        return None

    if len(trips) == 1:
        return trips[0].id

    print("\n🧳 Select a trip")
    print("   Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    completer = TripCompleter(trips)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        while True:
            result = session.prompt("Trip: ", complete_while_typing=True)

            if not result:
                return None

            trip_id = completer.resolve(result.strip())
            if trip_id:
                logger.info(f"User selected trip: {trip_id}")
                return trip_id

            print("❌ Unknown trip. Please select from the list or press Tab to complete.")

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return None
    except EOFError:
        return None
