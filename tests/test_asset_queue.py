from swipe_cleaner.services.asset_queue import AssetQueue

from .conftest import make_items


def ids(queue):
    return [item.id for item in queue]


def test_advance_sets_current_and_preview():
    a, b, c = make_items("A", "B", "C")
    queue = AssetQueue()
    queue.replace([a, b, c])
    assert queue.advance() == a
    assert queue.current == a
    assert queue.preview == b
    assert ids(queue) == ["B", "C"]


def test_advance_on_empty_clears_slots():
    (a,) = make_items("A")
    queue = AssetQueue()
    queue.replace([a])
    queue.advance()
    assert queue.advance() is None
    assert queue.current is None
    assert queue.preview is None


def test_return_to_back_appends():
    a, b, c = make_items("A", "B", "C")
    queue = AssetQueue()
    queue.replace([a, b, c])
    queue.advance()
    queue.return_to_back(a)
    assert ids(queue) == ["B", "C", "A"]
    assert queue.preview == b


def test_return_to_front_keeps_order_and_updates_preview():
    a, b, c, d = make_items("A", "B", "C", "D")
    queue = AssetQueue()
    queue.replace([c, d])
    queue.advance()
    queue.return_to_front([a, b])
    assert queue.current == c
    assert ids(queue) == ["A", "B", "D"]
    assert queue.preview == a


def test_return_to_front_fills_empty_screen():
    a, b = make_items("A", "B")
    queue = AssetQueue()
    queue.return_to_front([a, b])
    assert queue.current == a
    assert queue.preview == b
    assert ids(queue) == ["B"]


def test_return_to_front_skips_duplicates():
    a, b, c = make_items("A", "B", "C")
    queue = AssetQueue()
    queue.replace([b, c])
    queue.advance()
    queue.return_to_front([a, b, c, a])
    assert queue.current == b
    assert ids(queue) == ["A", "C"]
