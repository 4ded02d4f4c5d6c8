import pytest

from luahint.core.documents import scratch_document
from luahint.core.events import EventBus
from luahint.hints.overlay import OVERLAY_CHANGED, Annotation, OverlayStore, RenderMode


def _batch(size):
    return [Annotation(i, f"n{i}: ", 0, i, RenderMode.INLINE_AFTER) for i in range(1, size + 1)]


@pytest.mark.parametrize("size", [0, 1, 5, 200])
def test_apply_then_clear_leaves_nothing(size):
    store = OverlayStore("luahint")
    doc = scratch_document()
    store.apply(doc, _batch(size))
    assert store.count(doc) == size
    store.clear(doc)
    assert store.marks(doc) == []


def test_new_batch_replaces_previous():
    store = OverlayStore("luahint")
    doc = scratch_document()
    store.apply(doc, _batch(3))
    store.apply(doc, [Annotation(1, ": x", 4, 2, RenderMode.INLINE_BEFORE)])
    assert store.marks(doc) == [Annotation(1, ": x", 4, 2, RenderMode.INLINE_BEFORE)]


def test_same_id_replaces_marker():
    store = OverlayStore("luahint")
    doc = scratch_document()
    store.apply(
        doc,
        [
            Annotation(1, "a: ", 0, 0, RenderMode.INLINE_AFTER),
            Annotation(2, "c: ", 2, 0, RenderMode.INLINE_AFTER),
            Annotation(1, "b: ", 1, 0, RenderMode.INLINE_AFTER),
        ],
    )
    assert [mark.text for mark in store.marks(doc)] == ["b: ", "c: "]
    assert store.count(doc) == 2


def test_documents_are_isolated():
    store = OverlayStore("luahint")
    first, second = scratch_document(), scratch_document()
    store.apply(first, _batch(2))
    store.apply(second, _batch(1))
    store.clear(first)
    assert store.count(first) == 0
    assert store.count(second) == 1


def test_clear_is_idempotent_and_quiet():
    events = EventBus()
    changes = []
    events.subscribe(OVERLAY_CHANGED, changes.append)
    store = OverlayStore("luahint", events)
    doc = scratch_document()

    store.clear(doc)
    assert changes == []

    store.apply(doc, _batch(2))
    store.clear(doc)
    store.clear(doc)
    assert len(changes) == 2
    assert changes[0].namespace == "luahint"
    assert changes[0].document is doc
