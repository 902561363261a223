"""Shared data structures for the acquisition executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from automation.shared.booking_contracts import Slot
from automation.shared.errors import AcquisitionConflict, AcquisitionError, BookingRunError
from infrastructure.constants import TIMEOUTS


@dataclass(frozen=True)
class AcquisitionConfig:
    """Bounds for the per-candidate races."""

    candidate_race_ms: int = TIMEOUTS['candidate_race']
    confirmation_ms: int = TIMEOUTS['confirmation']


DEFAULT_ACQUISITION_CONFIG = AcquisitionConfig()


@dataclass
class AcquisitionResult:
    """Outcome of walking the candidate list once."""

    booked: Optional[Slot] = None
    confirmation_number: Optional[str] = None
    failures: List[BookingRunError] = field(default_factory=list)
    attempted: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.booked is not None

    @property
    def conflicts(self) -> List[AcquisitionConflict]:
        return [failure for failure in self.failures if isinstance(failure, AcquisitionConflict)]

    @property
    def last_failure(self) -> Optional[BookingRunError]:
        return self.failures[-1] if self.failures else None

    def raise_for_failure(self) -> None:
        """Raise the last recorded failure when nothing was booked."""

        if self.success:
            return
        last = self.last_failure
        if last is None:
            raise AcquisitionError(reason="No candidate slots to book")
        raise last


__all__ = [
    "AcquisitionConfig",
    "DEFAULT_ACQUISITION_CONFIG",
    "AcquisitionResult",
]
