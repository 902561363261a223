"""
Booking Queue Module

This module provides the BookingQueue class that holds the pending and
processed booking requests of one run. It hydrates records from the queue
file, hands pending requests to the orchestrator, and writes the file back
once the run is over.
"""
from tracking import t

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from reservations.models import BookingRequest, QueueData
from reservations.queue.request_builder import BookingRequestBuilder, DEFAULT_BUILDER
from reservations.queue.reservation_repository import (
    PENDING_KEY,
    PROCESSED_KEY,
    QueueRepository,
)


# A hydrated request, or the raw record when it could not be hydrated.
QueueEntry = Union[BookingRequest, Dict[str, Any]]


class QueueRecordSerializer:
    """Serialize and hydrate queue records."""

    def __init__(self, builder: BookingRequestBuilder = DEFAULT_BUILDER) -> None:
        self._builder = builder

    def to_storage(self, request: BookingRequest) -> Dict[str, Any]:
        return dict(self._builder.to_payload(request))

    def from_storage(self, payload: Mapping[str, Any]) -> BookingRequest:
        return self._builder.from_payload(payload)


class BookingQueue:
    """In-memory view of the queue file for a single processing run.

    Records that cannot be hydrated stay in their list as the raw dicts read
    from the file and are written back unchanged.
    """

    def __init__(
        self,
        repository: QueueRepository,
        *,
        serializer: Optional[QueueRecordSerializer] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.queue.reservation_queue.BookingQueue.__init__')
        self.repository = repository
        self.serializer = serializer or QueueRecordSerializer()
        self.logger = logger or logging.getLogger('BookingQueue')
        self._pending: List[QueueEntry] = []
        self._processed: List[QueueEntry] = []

    @property
    def pending(self) -> List[BookingRequest]:
        return [entry for entry in self._pending if isinstance(entry, BookingRequest)]

    @property
    def processed(self) -> List[BookingRequest]:
        return [entry for entry in self._processed if isinstance(entry, BookingRequest)]

    @property
    def data(self) -> QueueData:
        return QueueData(pending=self.pending, processed=self.processed)

    def _hydrate(self, records: Iterable[Dict[str, Any]], key: str) -> List[QueueEntry]:
        entries: List[QueueEntry] = []
        for index, record in enumerate(records):
            try:
                entries.append(self.serializer.from_storage(record))
            except (TypeError, ValueError) as exc:
                self.logger.warning("Skipping unreadable %s record #%s: %s", key, index, exc)
                entries.append(record)
        return entries

    def load(self) -> QueueData:
        """Read the queue file; unreadable records are kept raw and never processed."""
        t('reservations.queue.reservation_queue.BookingQueue.load')
        document = self.repository.load()
        self._pending = self._hydrate(document[PENDING_KEY], PENDING_KEY)
        self._processed = self._hydrate(document[PROCESSED_KEY], PROCESSED_KEY)
        self.logger.info(
            "Queue loaded: %s pending, %s processed",
            len(self._pending),
            len(self._processed),
        )
        return self.data

    def complete_run(self, handled: Iterable[BookingRequest]) -> QueueData:
        """Move ``handled`` requests from pending to the front of processed.

        Requests keep the order in which they were handled and are matched by
        identity, so a pending record sharing an id with a handled one stays.
        """
        t('reservations.queue.reservation_queue.BookingQueue.complete_run')
        handled_list = list(handled)
        handled_objects = {id(request) for request in handled_list}
        remaining = [entry for entry in self._pending if id(entry) not in handled_objects]
        self._pending = remaining
        self._processed = list(handled_list) + self._processed
        self.logger.info(
            "Run complete: moved %s requests to processed, %s still pending",
            len(handled_list),
            len(remaining),
        )
        return self.data

    def _dump(self, entries: List[QueueEntry]) -> List[Dict[str, Any]]:
        return [
            self.serializer.to_storage(entry) if isinstance(entry, BookingRequest) else entry
            for entry in entries
        ]

    def save(self) -> None:
        t('reservations.queue.reservation_queue.BookingQueue.save')
        self.repository.save(self._dump(self._pending), self._dump(self._processed))
        self.logger.info("Queue written to %s", self.repository.path)
