import tempfile
from pathlib import Path

import pytest

from sms_assistant.domain.conversation import Turn, utc_now
from sms_assistant.domain.exceptions import StoreUnavailable
from sms_assistant.infrastructure.storage.json_store import JsonConversationStore


def _add_turn(state):
    state.history.append(Turn(role="user", text="hello", timestamp=utc_now()))
    state.stats.message_count += 1
    return len(state.history)


def test_json_store_persists_across_instances():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        store = JsonConversationStore(root=root)
        assert store.apply("+15550001111", _add_turn) == 1
        reopened = JsonConversationStore(root=root)
        state = reopened.get_or_create("+15550001111")
        assert [t.text for t in state.history] == ["hello"]
        assert state.stats.message_count == 1
        assert reopened.list_conversation_ids() == ["+15550001111"]
        assert (root / "conversations" / "%2B15550001111.json").exists()


def test_json_store_failed_mutation_is_not_written():
    with tempfile.TemporaryDirectory() as d:
        store = JsonConversationStore(root=Path(d))
        store.apply("A", _add_turn)

        def boom(state):
            _add_turn(state)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.apply("A", boom)
        assert len(store.get_or_create("A").history) == 1


def test_json_store_corrupt_file_is_store_unavailable():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d)
        store = JsonConversationStore(root=root)
        (root / "conversations" / "A.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailable) as exc:
            store.apply("A", _add_turn)
        assert exc.value.retryable
        assert exc.value.code == "STORE_READ_ERROR"


def test_json_store_get_is_read_only():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d)
        store = JsonConversationStore(root=root)
        assert store.get("+15559999999") is None
        assert store.list_conversation_ids() == []
        assert list((root / "conversations").iterdir()) == []
        store.apply("+15550001111", _add_turn)
        assert [t.text for t in store.get("+15550001111").history] == ["hello"]
