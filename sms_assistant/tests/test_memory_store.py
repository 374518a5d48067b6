import threading

from sms_assistant.domain.conversation import Turn, utc_now
from sms_assistant.infrastructure.storage.memory_store import InMemoryConversationStore


def test_get_or_create_returns_detached_snapshot():
    store = InMemoryConversationStore()
    snap = store.get_or_create("A")
    snap.history.append(Turn(role="user", text="x", timestamp=utc_now()))
    assert store.get_or_create("A").history == []
    assert store.list_conversation_ids() == ["A"]


def test_apply_returns_mutation_result():
    store = InMemoryConversationStore()
    n = store.apply("A", lambda s: s.history.append(Turn(role="user", text="hi", timestamp=utc_now())) or len(s.history))
    assert n == 1
    assert store.get_or_create("A").history[0].text == "hi"


def test_apply_serializes_same_conversation():
    store = InMemoryConversationStore()
    first_inside = threading.Event()
    release = threading.Event()
    second_inside = threading.Event()

    def slow(state):
        first_inside.set()
        release.wait(5)

    t1 = threading.Thread(target=store.apply, args=("A", slow))
    t1.start()
    assert first_inside.wait(5)
    t2 = threading.Thread(target=store.apply, args=("A", lambda s: second_inside.set()))
    t2.start()
    assert not second_inside.wait(0.2)
    release.set()
    t1.join(5)
    t2.join(5)
    assert second_inside.is_set()


def test_apply_does_not_block_other_conversations():
    store = InMemoryConversationStore()
    inside = threading.Event()
    release = threading.Event()

    def slow(state):
        inside.set()
        release.wait(5)

    t = threading.Thread(target=store.apply, args=("A", slow))
    t.start()
    try:
        assert inside.wait(5)
        assert store.apply("B", lambda s: s.conversation_id) == "B"
        assert t.is_alive()
    finally:
        release.set()
        t.join(5)


def test_get_does_not_create_missing_conversation():
    store = InMemoryConversationStore()
    assert store.get("A") is None
    assert store.list_conversation_ids() == []
    store.apply("A", lambda s: s.history.append(Turn(role="user", text="hi", timestamp=utc_now())))
    snap = store.get("A")
    snap.history.clear()
    assert [t.text for t in store.get("A").history] == ["hi"]
