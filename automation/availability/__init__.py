"""Availability detection for the tee sheet: page state, slots and polling."""

from .page_state import classify_page_state
from .retry_policy import (
    FAR_HORIZON_POLICY,
    NEAR_HORIZON_POLICY,
    DiscoveryResult,
    HorizonPolicy,
    PollState,
    SlotSampler,
    StopReason,
    escalating_backoff,
    poll_for_slots,
)
from .slot_discovery import discover_slots, normalize_clock
from .tee_sheet_api import (
    TeeSheetEntry,
    capture_availability_signal,
    classify_availability,
    parse_tee_sheet_payload,
    tee_sheet_response_matcher,
)

__all__ = [
    "classify_page_state",
    "FAR_HORIZON_POLICY",
    "NEAR_HORIZON_POLICY",
    "DiscoveryResult",
    "HorizonPolicy",
    "PollState",
    "SlotSampler",
    "StopReason",
    "escalating_backoff",
    "poll_for_slots",
    "discover_slots",
    "normalize_clock",
    "TeeSheetEntry",
    "capture_availability_signal",
    "classify_availability",
    "parse_tee_sheet_payload",
    "tee_sheet_response_matcher",
]
