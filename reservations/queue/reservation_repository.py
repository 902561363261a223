"""Persistence helpers for the booking queue file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from tracking import t

PENDING_KEY = "bookingRequests"
PROCESSED_KEY = "processedRequests"


class QueueFileError(RuntimeError):
    """Raised when the queue file cannot be parsed into the expected layout."""


def empty_queue_payload() -> Dict[str, List[dict]]:
    return {PENDING_KEY: [], PROCESSED_KEY: []}


class QueueRepository:
    """Read/write the queue JSON document (``bookingRequests`` / ``processedRequests``)."""

    def __init__(self, file_path: Union[str, Path], *, logger: Any) -> None:
        t('reservations.queue.reservation_repository.QueueRepository.__init__')
        self._path = Path(file_path)
        self._logger = logger

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, List[dict]]:
        """Load the queue document, creating an empty one when the file is missing.

        Malformed JSON or an unexpected layout raises :class:`QueueFileError`;
        the caller treats that as fatal and leaves the file alone.
        """

        t('reservations.queue.reservation_repository.QueueRepository.load')
        if not self._path.exists():
            self._logger.info("Queue file %s does not exist; creating an empty queue", self._path)
            payload = empty_queue_payload()
            self.save(payload[PENDING_KEY], payload[PROCESSED_KEY])
            return payload

        try:
            with self._path.open('r', encoding='utf-8') as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise QueueFileError(f"Queue file {self._path} is not valid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise QueueFileError(
                f"Invalid queue format in {self._path}; expected object, received "
                f"{type(payload).__name__}"
            )

        result = empty_queue_payload()
        for key in (PENDING_KEY, PROCESSED_KEY):
            entries = payload.get(key, [])
            if not isinstance(entries, list):
                raise QueueFileError(f"Queue key {key!r} in {self._path} must be a list")
            result[key] = entries

        self._logger.debug(
            "Loaded %s pending and %s processed requests from %s",
            len(result[PENDING_KEY]),
            len(result[PROCESSED_KEY]),
            self._path,
        )
        return result

    def save(self, pending: Iterable[dict], processed: Iterable[dict]) -> None:
        """Persist both lists, ensuring parent directories exist."""

        t('reservations.queue.reservation_repository.QueueRepository.save')
        self._path.parent.mkdir(parents=True, exist_ok=True)
        document = {PENDING_KEY: list(pending), PROCESSED_KEY: list(processed)}
        with self._path.open('w', encoding='utf-8') as handle:
            json.dump(document, handle, indent=2, ensure_ascii=False)
            handle.write("\n")
        self._logger.debug("Queue saved to %s", self._path)
