from datetime import datetime, timedelta

from chatranslator.core.models import TranslationRequest
from chatranslator.core.request_queue import RequestQueue

T0 = datetime(2024, 1, 1, 12, 0, 0)


def test_fifo_order():
    queue = RequestQueue(min_interval=0)
    queue.enqueue("a", immediate=False)
    queue.enqueue("b", immediate=True)
    queue.enqueue("c", immediate=False, attempt=3)

    # With a zero interval, each distinct timestamp opens the gate
    got = [queue.try_dequeue(T0 + timedelta(seconds=i)) for i in range(3)]
    assert got == [
        TranslationRequest("a", False, 1),
        TranslationRequest("b", True, 1),
        TranslationRequest("c", False, 3),
    ]
    assert len(queue) == 0


def test_empty_queue_returns_none():
    queue = RequestQueue(min_interval=1.3)
    assert queue.try_dequeue(T0) is None


def test_empty_poll_does_not_consume_the_gate():
    queue = RequestQueue(min_interval=1.3)
    assert queue.try_dequeue(T0) is None
    queue.enqueue("a", immediate=False)
    assert queue.try_dequeue(T0 + timedelta(milliseconds=10)).content == "a"


def test_dequeues_are_spaced_by_min_interval():
    queue = RequestQueue(min_interval=1.3)
    for text in ("a", "b", "c"):
        queue.enqueue(text, immediate=False)

    assert queue.try_dequeue(T0).content == "a"
    assert queue.try_dequeue(T0 + timedelta(seconds=1)) is None
    assert queue.try_dequeue(T0 + timedelta(seconds=1.29)) is None
    assert queue.try_dequeue(T0 + timedelta(seconds=1.3)).content == "b"
    assert queue.try_dequeue(T0 + timedelta(seconds=2.5)) is None
    assert queue.try_dequeue(T0 + timedelta(seconds=2.6)).content == "c"


def test_pending_is_a_snapshot():
    queue = RequestQueue(min_interval=1.3)
    queue.enqueue("a", immediate=False)
    snapshot = queue.pending()
    queue.enqueue("b", immediate=False)
    assert [r.content for r in snapshot] == ["a"]
    assert len(queue) == 2
