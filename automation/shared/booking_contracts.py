"""Shared contracts between the orchestration core and the tee sheet adapter.

The core never touches Playwright directly. It talks to a :class:`TeeSheetSite`
and passes around opaque ``session`` (the authenticated page) and ``view``
(the tee sheet frame) handles that only the adapter understands.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol


class PageState(Enum):
    """What the tee sheet view shows right now. Recomputed on every poll."""

    READY = "ready"
    TOO_EARLY = "too-early"
    NO_RESULTS = "no-results"
    LOADING = "loading"


class AvailabilitySignal(Enum):
    """Verdict derived from the tee sheet's background data fetch."""

    AVAILABLE = "available"
    ALL_BOOKED = "all-booked"
    NOT_RELEASED = "not-released"
    TIMEOUT = "timeout"


class SelectionOutcome(Enum):
    """First signal observed after clicking a candidate tee time."""

    CONFLICT = "locked"
    FORM = "form"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ViewSnapshot:
    """Readable snapshot of the tee sheet view."""

    text: str
    slot_indicator_count: int = 0

    @property
    def has_slot_indicators(self) -> bool:
        return self.slot_indicator_count > 0


@dataclass(frozen=True)
class SlotRow:
    """Raw tee sheet row as scraped: display time, capacity text, handle."""

    time_text: str
    capacity_text: str
    handle: str


@dataclass(frozen=True)
class Slot:
    """Bookable candidate: normalized ``HH:MM`` time and its view handle."""

    time: str
    handle: str


@dataclass(frozen=True)
class ConfirmationOutcome:
    """Result of the final confirmation step for one candidate."""

    confirmed: bool
    confirmation_number: Optional[str] = None
    detail: Optional[str] = None


ResponseMatcher = Callable[[str], bool]


class TeeSheetSite(Protocol):
    """Collaborator interface the orchestration core depends on."""

    async def authenticate(self, initial_play_date: date) -> Any:
        """Log in and return the session handle (lands on the tee sheet)."""

    async def navigate_to_resource_view(self, session: Any, play_date: date) -> Any:
        """Open the tee sheet for ``play_date`` and return its view handle."""

    async def current_view(self, session: Any) -> Any:
        """Return the view handle for whatever the session currently shows."""

    async def reload_view(self, view: Any) -> Any:
        """Reload only the tee sheet frame and return the (possibly new) view."""

    async def confirm_date_selection(self, view: Any, play_date: date) -> bool:
        """Make sure ``play_date`` is the selected day, clicking it if needed."""

    async def observe_view(self, view: Any) -> ViewSnapshot:
        """Capture the view's visible text and slot indicator count."""

    async def list_slot_rows(self, view: Any) -> List[SlotRow]:
        """Return every open tee sheet row with a handle usable for selection."""

    async def intercept_next_matching_response(
        self,
        session: Any,
        matcher: ResponseMatcher,
        timeout_ms: int,
    ) -> Optional[Any]:
        """Return the first matching background JSON payload, or ``None`` on timeout."""

    async def select_candidate(self, view: Any, handle: str, timeout_ms: int) -> SelectionOutcome:
        """Click a tee time and race the conflict dialog against the booking form."""

    async def dismiss_conflict(self, view: Any) -> None:
        """Close the conflict dialog if one is showing."""

    async def confirm_acquisition(self, view: Any, timeout_ms: int) -> ConfirmationOutcome:
        """Pick the participant group, press book and wait for confirmation."""

    async def capture_diagnostic(self, session: Any, label: str) -> Optional[Path]:
        """Save a diagnostic artifact (screenshot) and return where it went."""

    async def close(self) -> None:
        """Release browser resources."""


__all__ = [
    "PageState",
    "AvailabilitySignal",
    "SelectionOutcome",
    "ViewSnapshot",
    "SlotRow",
    "Slot",
    "ConfirmationOutcome",
    "ResponseMatcher",
    "TeeSheetSite",
]
