"""Builders for converting queue file records into booking requests and back."""

from __future__ import annotations
from tracking import t

import uuid
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from reservations.models import BookingRequest, RequestStatus, TimeRange
from reservations.queue.reservation_transitions import utc_timestamp

REQUIRED_RECORD_FIELDS = {"playDate", "timeRange"}

# Keys owned by the builder; anything else in a record is carried through untouched.
_KNOWN_KEYS = {
    "id",
    "requestDate",
    "playDate",
    "timeRange",
    "status",
    "requestedBy",
    "processedDate",
    "bookedTime",
    "confirmationNumber",
    "failureReason",
}

_OPTIONAL_OUTCOME_FIELDS = (
    ("requestedBy", "requested_by"),
    ("processedDate", "processed_date"),
    ("bookedTime", "booked_time"),
    ("confirmationNumber", "confirmation_number"),
    ("failureReason", "failure_reason"),
)


class BookingRequestBuilder:
    """Construct :class:`BookingRequest` objects from the camelCase queue format."""

    def __init__(self, *, id_factory: Optional[Any] = None) -> None:
        t('reservations.queue.request_builder.BookingRequestBuilder.__init__')
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def from_payload(self, payload: Mapping[str, Any]) -> BookingRequest:
        """Convert a stored queue record into a :class:`BookingRequest`."""
        t('reservations.queue.request_builder.BookingRequestBuilder.from_payload')

        self._ensure_fields(payload, REQUIRED_RECORD_FIELDS, "Booking request")

        request = BookingRequest(
            id=str(payload.get("id") or self._id_factory()),
            request_date=str(payload.get("requestDate") or utc_timestamp()),
            play_date=self._parse_date(payload["playDate"]),
            time_range=self._parse_time_range(payload["timeRange"]),
            status=self._parse_status(payload.get("status")),
            extra={key: value for key, value in payload.items() if key not in _KNOWN_KEYS},
        )
        for record_key, attribute in _OPTIONAL_OUTCOME_FIELDS:
            value = payload.get(record_key)
            if value is not None:
                setattr(request, attribute, str(value))
        return request

    def to_payload(self, request: BookingRequest) -> Dict[str, Any]:
        """Serialize a request back into the queue file structure."""
        t('reservations.queue.request_builder.BookingRequestBuilder.to_payload')

        payload: Dict[str, Any] = {
            "id": request.id,
            "requestDate": request.request_date,
            "playDate": request.play_date.isoformat(),
            "timeRange": {
                "start": request.time_range.start,
                "end": request.time_range.end,
            },
            "status": request.status.value,
        }
        for record_key, attribute in _OPTIONAL_OUTCOME_FIELDS:
            value = getattr(request, attribute)
            if value is not None:
                payload[record_key] = value
        for key, value in request.extra.items():
            payload.setdefault(key, value)
        return payload

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _ensure_fields(source: Mapping[str, Any], required: set, label: str) -> None:
        missing = sorted(key for key in required if source.get(key) in (None, ""))
        if missing:
            raise ValueError(f"{label} missing required fields: {', '.join(missing)}")

    @staticmethod
    def _parse_date(value: Any) -> date:
        t('reservations.queue.request_builder.BookingRequestBuilder._parse_date')
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"Invalid play date {value!r} (expected YYYY-MM-DD)") from exc

    @staticmethod
    def _parse_time_range(value: Any) -> TimeRange:
        if not isinstance(value, Mapping):
            raise ValueError(f"Invalid time range {value!r}")
        return TimeRange(start=str(value.get("start", "")), end=str(value.get("end", "")))

    @staticmethod
    def _parse_status(value: Any) -> RequestStatus:
        if value in (None, ""):
            return RequestStatus.PENDING
        try:
            return RequestStatus(str(value))
        except ValueError as exc:
            raise ValueError(f"Unknown request status {value!r}") from exc


DEFAULT_BUILDER = BookingRequestBuilder()
