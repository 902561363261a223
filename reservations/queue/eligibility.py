"""Select which pending requests can be booked on a given day."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List

from tracking import t

from infrastructure.constants import (
    DEFAULT_FAR_HORIZON_DAYS as FAR_HORIZON_DAYS,
    DEFAULT_NEAR_HORIZON_DAYS as NEAR_HORIZON_DAYS,
)
from reservations.models import BookingRequest


def is_near_horizon(play_date: date, today: date, near_horizon_days: int = NEAR_HORIZON_DAYS) -> bool:
    """True when ``play_date`` falls within ``[today, today + near_horizon_days]``."""

    t('reservations.queue.eligibility.is_near_horizon')
    return today <= play_date <= today + timedelta(days=near_horizon_days)


def is_eligible(
    request: BookingRequest,
    today: date,
    *,
    far_horizon_days: int = FAR_HORIZON_DAYS,
    near_horizon_days: int = NEAR_HORIZON_DAYS,
) -> bool:
    if not request.is_pending:
        return False
    if request.play_date == today + timedelta(days=far_horizon_days):
        return True
    return is_near_horizon(request.play_date, today, near_horizon_days)


def select_eligible(
    requests: Iterable[BookingRequest],
    today: date,
    far_horizon_days: int = FAR_HORIZON_DAYS,
    near_horizon_days: int = NEAR_HORIZON_DAYS,
) -> List[BookingRequest]:
    """Return pending requests on the release day or inside the near window.

    Results are ordered by play date, latest first. Requests sharing a play
    date keep their queue order.
    """

    t('reservations.queue.eligibility.select_eligible')
    eligible = [
        request
        for request in requests
        if is_eligible(
            request,
            today,
            far_horizon_days=far_horizon_days,
            near_horizon_days=near_horizon_days,
        )
    ]
    return sorted(eligible, key=lambda request: request.play_date, reverse=True)
