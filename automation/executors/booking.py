"""Acquisition of the first bookable candidate slot."""

from __future__ import annotations
from tracking import t

import logging
from typing import Any, Optional, Sequence

from automation.shared.booking_contracts import SelectionOutcome, Slot, TeeSheetSite
from automation.shared.errors import AcquisitionConflict, AcquisitionError

from .core import DEFAULT_ACQUISITION_CONFIG, AcquisitionConfig, AcquisitionResult


class AcquisitionProtocol:
    """Try candidates in preference order until one books.

    Each candidate is tried once. A conflict (another golfer holds the time)
    or an unfinished confirmation is recorded and the next candidate is tried.
    """

    def __init__(
        self,
        site: TeeSheetSite,
        config: AcquisitionConfig = DEFAULT_ACQUISITION_CONFIG,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('automation.executors.booking.AcquisitionProtocol.__init__')
        self.site = site
        self.config = config
        self.logger = logger or logging.getLogger("AcquisitionProtocol")

    async def run(self, view: Any, slots: Sequence[Slot]) -> AcquisitionResult:
        t('automation.executors.booking.AcquisitionProtocol.run')
        result = AcquisitionResult()

        for slot in slots:
            result.attempted.append(slot.time)
            self.logger.info("Attempting to book %s", slot.time)
            try:
                booked = await self._attempt(view, slot, result)
            except Exception as exc:
                self.logger.warning("Booking %s failed: %s", slot.time, exc)
                result.failures.append(AcquisitionError(slot.time))
                continue
            if booked:
                self.logger.info("Booked %s", slot.time)
                return result

        if result.failures:
            self.logger.info(
                "No candidate booked after %s attempts (%s conflicts); last reason: %s",
                len(result.attempted),
                len(result.conflicts),
                result.last_failure.reason,
            )
        return result

    async def _attempt(self, view: Any, slot: Slot, result: AcquisitionResult) -> bool:
        outcome = await self.site.select_candidate(view, slot.handle, self.config.candidate_race_ms)

        if outcome is SelectionOutcome.CONFLICT:
            self.logger.info("Time slot %s is locked by another user, trying next slot", slot.time)
            await self.site.dismiss_conflict(view)
            result.failures.append(AcquisitionConflict(slot.time))
            return False

        if outcome is not SelectionOutcome.FORM:
            self.logger.info("Timeout waiting for booking form or lock message for %s", slot.time)
            result.failures.append(AcquisitionError(slot.time))
            return False

        confirmation = await self.site.confirm_acquisition(view, self.config.confirmation_ms)
        if not confirmation.confirmed:
            self.logger.info("No confirmation for %s: %s", slot.time, confirmation.detail)
            result.failures.append(AcquisitionError(slot.time))
            return False

        result.booked = slot
        result.confirmation_number = confirmation.confirmation_number
        return True


async def acquire_first_available(
    site: TeeSheetSite,
    view: Any,
    slots: Sequence[Slot],
    *,
    config: AcquisitionConfig = DEFAULT_ACQUISITION_CONFIG,
    logger: Optional[logging.Logger] = None,
) -> AcquisitionResult:
    t('automation.executors.booking.acquire_first_available')
    return await AcquisitionProtocol(site, config, logger).run(view, slots)
