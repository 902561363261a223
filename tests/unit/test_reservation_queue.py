import json
from datetime import date

from reservations.models import RequestStatus
from reservations.queue.reservation_queue import BookingQueue
from reservations.queue.reservation_repository import QueueRepository
from reservations.queue.reservation_transitions import mark_failed, mark_success
from tests.helpers import DummyLogger


def _write_queue(path):
    path.write_text(
        json.dumps(
            {
                "bookingRequests": [
                    {"id": "a", "playDate": "2025-06-11", "timeRange": {"start": "08:00", "end": "10:00"}},
                    {"id": "b", "playDate": "2025-06-12", "timeRange": {"start": "09:00", "end": "12:00"}},
                    {"id": "c", "playDate": "2025-06-20", "timeRange": {"start": "07:00", "end": "08:00"}},
                ],
                "processedRequests": [
                    {
                        "id": "z",
                        "playDate": "2025-06-01",
                        "timeRange": {"start": "08:00", "end": "09:00"},
                        "status": "failed",
                        "failureReason": "No available times",
                    }
                ],
            }
        )
    )


def _queue(path):
    return BookingQueue(QueueRepository(path, logger=DummyLogger()), logger=DummyLogger())


def test_load_hydrates_requests(tmp_path):
    queue_file = tmp_path / "queue.json"
    _write_queue(queue_file)
    queue = _queue(queue_file)

    queue.load()

    assert [request.id for request in queue.pending] == ["a", "b", "c"]
    assert queue.pending[0].play_date == date(2025, 6, 11)
    assert queue.pending[1].time_range.end == "12:00"
    assert all(request.is_pending for request in queue.pending)
    assert queue.processed[0].status is RequestStatus.FAILED


def test_complete_run_moves_handled_to_front_of_processed(tmp_path):
    queue_file = tmp_path / "queue.json"
    _write_queue(queue_file)
    queue = _queue(queue_file)
    queue.load()
    b, a = queue.pending[1], queue.pending[0]
    mark_success(b, "10:40", confirmation_number="123456")
    mark_failed(a, "No available times")

    queue.complete_run([b, a])
    queue.save()

    document = json.loads(queue_file.read_text())
    assert [item["id"] for item in document["bookingRequests"]] == ["c"]
    assert [item["id"] for item in document["processedRequests"]] == ["b", "a", "z"]
    assert document["processedRequests"][0]["bookedTime"] == "10:40"
    assert document["processedRequests"][0]["confirmationNumber"] == "123456"
    assert document["processedRequests"][1]["failureReason"] == "No available times"
    assert document["bookingRequests"][0]["status"] == "pending"


def test_queue_persistence(tmp_path):
    queue_file = tmp_path / "queue.json"
    _write_queue(queue_file)
    queue = _queue(queue_file)
    queue.load()
    queue.complete_run([])
    queue.save()

    # Reload from disk and ensure data persisted
    reloaded = _queue(queue_file)
    reloaded.load()
    assert [request.id for request in reloaded.pending] == ["a", "b", "c"]
    assert [request.id for request in reloaded.processed] == ["z"]


def test_unreadable_record_is_kept_raw_and_written_back(tmp_path):
    queue_file = tmp_path / "queue.json"
    broken = {"id": "broken", "playDate": "2025-06-11", "timeRange": {"start": "14:00", "end": "09:00"}}
    legacy = {"id": "legacy", "playDate": "2025-05-01", "status": "success"}
    queue_file.write_text(
        json.dumps(
            {
                "bookingRequests": [
                    broken,
                    {"id": "ok", "playDate": "2025-06-11", "timeRange": {"start": "08:00", "end": "10:00"}},
                ],
                "processedRequests": [legacy],
            }
        )
    )
    logger = DummyLogger()
    queue = BookingQueue(QueueRepository(queue_file, logger=DummyLogger()), logger=logger)

    queue.load()

    assert [request.id for request in queue.pending] == ["ok"]
    assert queue.processed == []
    assert sum(1 for level, _ in logger.messages if level == "warning") == 2

    ok = queue.pending[0]
    mark_success(ok, "09:10")
    queue.complete_run([ok])
    queue.save()

    document = json.loads(queue_file.read_text())
    assert document["bookingRequests"] == [broken]
    assert [item["id"] for item in document["processedRequests"]] == ["ok", "legacy"]
    assert document["processedRequests"][1] == legacy


def test_complete_run_keeps_pending_request_sharing_an_id(tmp_path):
    queue_file = tmp_path / "queue.json"
    queue_file.write_text(
        json.dumps(
            {
                "bookingRequests": [
                    {"id": "dup", "playDate": "2025-06-11", "timeRange": {"start": "08:00", "end": "10:00"}},
                    {"id": "dup", "playDate": "2025-08-01", "timeRange": {"start": "08:00", "end": "10:00"}},
                ]
            }
        )
    )
    queue = _queue(queue_file)
    queue.load()
    handled = queue.pending[0]
    mark_failed(handled, "No available times")

    queue.complete_run([handled])

    assert [request.play_date for request in queue.pending] == [date(2025, 8, 1)]
    assert queue.pending[0].is_pending
    assert [request.play_date for request in queue.processed] == [date(2025, 6, 11)]
