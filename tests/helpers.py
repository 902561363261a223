"""Shared fakes and utilities for unit tests."""

from __future__ import annotations
from tracking import t

from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from automation.shared.booking_contracts import (
    ConfirmationOutcome,
    SelectionOutcome,
    SlotRow,
    ViewSnapshot,
)
from reservations.models import BookingRequest, RequestStatus, TimeRange


class DummyLogger:
    """Lightweight stand-in for ``logging.Logger`` that records calls."""

    def __init__(self) -> None:
        t('tests.helpers.DummyLogger.__init__')
        self.records: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []

    def _record(self, level: str, *args: Any, **kwargs: Any) -> None:
        self.records.append((level, args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self._record("debug", *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        self._record("info", *args, **kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self._record("warning", *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        self._record("error", *args, **kwargs)

    def exception(self, *args: Any, **kwargs: Any) -> None:
        self._record("exception", *args, **kwargs)

    @property
    def messages(self) -> List[Tuple[str, Any]]:
        """Return formatted messages for quick assertions."""
        t('tests.helpers.DummyLogger.messages')

        formatted: List[Tuple[str, Any]] = []
        for level, args, _kwargs in self.records:
            template = args[0] if args else ""
            try:
                message = template % args[1:] if len(args) > 1 else template
            except (TypeError, ValueError):
                message = template
            formatted.append((level, message))
        return formatted


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_request(
    play_date: date,
    start: str = "08:00",
    end: str = "11:00",
    *,
    request_id: Optional[str] = None,
    status: RequestStatus = RequestStatus.PENDING,
) -> BookingRequest:
    t('tests.helpers.make_request')
    return BookingRequest(
        id=request_id or f"req-{play_date.isoformat()}",
        request_date="2025-06-01T12:00:00.000Z",
        play_date=play_date,
        time_range=TimeRange(start, end),
        status=status,
        requested_by="tester@example.com",
    )


def ready_snapshot(count: int = 3) -> ViewSnapshot:
    return ViewSnapshot(text="Tee Sheet Lora Bay", slot_indicator_count=count)


def row(time_text: str, capacity: str, handle: Optional[str] = None) -> SlotRow:
    return SlotRow(time_text=time_text, capacity_text=capacity, handle=handle or f"slot-{time_text}")


class FakeTeeSheetSite:
    """Scripted :class:`TeeSheetSite` that records every call.

    Sequences (snapshots, row lists, payloads, date confirmations) are consumed one item per call
    and the last item repeats once the script runs out.
    """

    def __init__(
        self,
        *,
        snapshots: Sequence[ViewSnapshot] = (),
        rows: Sequence[Sequence[SlotRow]] = (),
        payloads: Sequence[Any] = (None,),
        selection_outcomes: Optional[Dict[str, SelectionOutcome]] = None,
        confirmations: Optional[Dict[str, ConfirmationOutcome]] = None,
        date_selected: Union[bool, Sequence[bool]] = True,
        auth_error: Optional[Exception] = None,
        navigate_error: Optional[Exception] = None,
    ) -> None:
        t('tests.helpers.FakeTeeSheetSite.__init__')
        self.snapshots = list(snapshots) or [ready_snapshot()]
        self.rows = [list(item) for item in rows] or [[]]
        self.payloads = list(payloads)
        self.selection_outcomes = dict(selection_outcomes or {})
        self.confirmations = dict(confirmations or {})
        self.date_selected = [date_selected] if isinstance(date_selected, bool) else list(date_selected)
        self.auth_error = auth_error
        self.navigate_error = navigate_error
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.diagnostics: List[str] = []
        self.selected: List[str] = []
        self.closed = False
        self._views = 0
        self._snapshot_index = 0
        self._rows_index = 0
        self._payload_index = 0
        self._date_index = 0

    @staticmethod
    def _next(items: List[Any], index: int) -> Any:
        return items[min(index, len(items) - 1)]

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def _new_view(self) -> str:
        self._views += 1
        return f"view-{self._views}"

    async def authenticate(self, initial_play_date: date) -> str:
        self.calls.append(("authenticate", (initial_play_date,)))
        if self.auth_error is not None:
            raise self.auth_error
        return "session"

    async def navigate_to_resource_view(self, session: Any, play_date: date) -> str:
        self.calls.append(("navigate_to_resource_view", (session, play_date)))
        if self.navigate_error is not None:
            raise self.navigate_error
        return self._new_view()

    async def current_view(self, session: Any) -> str:
        self.calls.append(("current_view", (session,)))
        return self._new_view()

    async def reload_view(self, view: Any) -> Any:
        self.calls.append(("reload_view", (view,)))
        return view

    async def confirm_date_selection(self, view: Any, play_date: date) -> bool:
        self.calls.append(("confirm_date_selection", (view, play_date)))
        selected = self._next(self.date_selected, self._date_index)
        self._date_index += 1
        return selected

    async def observe_view(self, view: Any) -> ViewSnapshot:
        self.calls.append(("observe_view", (view,)))
        snapshot = self._next(self.snapshots, self._snapshot_index)
        self._snapshot_index += 1
        return snapshot

    async def list_slot_rows(self, view: Any) -> List[SlotRow]:
        self.calls.append(("list_slot_rows", (view,)))
        rows = self._next(self.rows, self._rows_index)
        self._rows_index += 1
        return list(rows)

    async def intercept_next_matching_response(self, session: Any, matcher: Any, timeout_ms: int) -> Any:
        self.calls.append(("intercept_next_matching_response", (session, timeout_ms)))
        payload = self._next(self.payloads, self._payload_index)
        self._payload_index += 1
        return payload

    async def select_candidate(self, view: Any, handle: str, timeout_ms: int) -> SelectionOutcome:
        self.calls.append(("select_candidate", (view, handle, timeout_ms)))
        self.selected.append(handle)
        return self.selection_outcomes.get(handle, SelectionOutcome.FORM)

    async def dismiss_conflict(self, view: Any) -> None:
        self.calls.append(("dismiss_conflict", (view,)))

    async def confirm_acquisition(self, view: Any, timeout_ms: int) -> ConfirmationOutcome:
        self.calls.append(("confirm_acquisition", (view, timeout_ms)))
        handle = self.selected[-1]
        return self.confirmations.get(
            handle, ConfirmationOutcome(confirmed=True, confirmation_number=f"CONF-{handle}")
        )

    async def capture_diagnostic(self, session: Any, label: str) -> Optional[Path]:
        self.calls.append(("capture_diagnostic", (session, label)))
        self.diagnostics.append(label)
        return None

    async def close(self) -> None:
        self.calls.append(("close", ()))
        self.closed = True
