"""Classify what the tee sheet view is currently showing."""

from __future__ import annotations

import re
from datetime import date
from typing import Pattern

from tracking import t

from automation.shared.booking_contracts import PageState, ViewSnapshot
from infrastructure.constants import NO_RESULTS_TEXT, TOO_EARLY_MARKER

_RELEASE_CLOCK = r"\d{1,2}:\d{2}\s*[AP]M"


def format_release_date(play_date: date) -> str:
    """Render a date the way the release notice prints it (``June 15, 2025``)."""

    t('automation.availability.page_state.format_release_date')
    return f"{play_date.strftime('%B')} {play_date.day}, {play_date.year}"


def too_early_pattern(play_date: date) -> Pattern[str]:
    t('automation.availability.page_state.too_early_pattern')
    return re.compile(
        rf"{re.escape(TOO_EARLY_MARKER)}\s+{re.escape(format_release_date(play_date))}"
        rf"\s+at\s+{_RELEASE_CLOCK}",
        re.IGNORECASE,
    )


def classify_page_state(snapshot: ViewSnapshot, play_date: date) -> PageState:
    """Return the :class:`PageState` for ``snapshot``.

    The release notice is checked before the no-results message because both
    can be on screen while the sheet renders; a pre-release placeholder must
    not read as an empty day.
    """

    t('automation.availability.page_state.classify_page_state')
    text = snapshot.text or ""
    if too_early_pattern(play_date).search(text):
        return PageState.TOO_EARLY
    if NO_RESULTS_TEXT.lower() in text.lower():
        return PageState.NO_RESULTS
    if snapshot.has_slot_indicators:
        return PageState.READY
    return PageState.LOADING
