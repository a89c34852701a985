from datetime import date, datetime

from timekeeping.attendance.model import dedupe_key
from timekeeping.attendance.queue import PendingActionQueue
from timekeeping.core.enums import ActionType
from timekeeping.storage.memory_store import InMemoryStore


def _enqueue(queue, at: datetime, action_type=ActionType.CLOCK_IN):
    key = dedupe_key("EMP001", at.date(), action_type, at)
    return queue.enqueue(action_type=action_type, timestamp=at, payload={"employeeId": "EMP001"}, dedupe_key=key)


def test_queue_is_fifo_and_persisted(store):
    queue = PendingActionQueue(store)
    first = _enqueue(queue, datetime(2025, 1, 1, 9, 0))
    second = _enqueue(queue, datetime(2025, 1, 1, 12, 0), ActionType.BREAK_START)

    reopened = PendingActionQueue(store)
    assert [a.action_id for a in reopened.pending()] == [first.action_id, second.action_id]
    assert reopened.count() == 2


def test_same_action_is_not_queued_twice(queue):
    at = datetime(2025, 1, 1, 9, 0)
    a = _enqueue(queue, at)
    b = _enqueue(queue, at)

    assert a.action_id == b.action_id
    assert queue.count() == 1


def test_two_breaks_on_one_day_are_distinct(queue):
    _enqueue(queue, datetime(2025, 1, 1, 10, 0), ActionType.BREAK_START)
    _enqueue(queue, datetime(2025, 1, 1, 15, 0), ActionType.BREAK_START)

    assert queue.count() == 2


def test_record_failure_dead_letters_after_budget():
    queue = PendingActionQueue(InMemoryStore(), default_max_retries=2)
    action = _enqueue(queue, datetime(2025, 1, 1, 9, 0))

    for _ in range(2):
        updated = queue.record_failure(action.action_id, "timeout")
        assert not updated.failed

    updated = queue.record_failure(action.action_id, "timeout")
    assert updated.failed
    assert updated.retry_count == 3
    assert queue.count() == 0
    assert [a.action_id for a in queue.failed()] == [action.action_id]
    assert queue.failed()[0].last_error == "timeout"


def test_dead_letter_and_discard(queue):
    action = _enqueue(queue, datetime(2025, 1, 1, 9, 0))

    queue.dead_letter(action.action_id, "bad request")
    assert queue.pending() == []
    assert queue.failed()[0].last_error == "bad request"

    queue.discard_failed(action.action_id)
    assert queue.peek_all() == []


def test_applied_keys_are_pruned_by_day(queue):
    old = dedupe_key("EMP001", date(2025, 1, 1), ActionType.CLOCK_IN, datetime(2025, 1, 1, 9, 0))
    new = dedupe_key("EMP001", date(2025, 2, 1), ActionType.CLOCK_IN, datetime(2025, 2, 1, 9, 0))
    queue.mark_applied(old)
    queue.mark_applied(new)
    queue.mark_applied(new)

    assert queue.applied_keys() == {old, new}
    assert queue.prune_applied(date(2025, 1, 15)) == 1
    assert not queue.is_applied(old)
    assert queue.is_applied(new)
