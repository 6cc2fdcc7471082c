"""Tests for ConversationStore."""

from __future__ import annotations

import pytest

from streamchat.conversation.models import Message
from streamchat.conversation.store import ConversationStore, StoreChange
from streamchat.exceptions import (
    DuplicateIdError,
    InFlightMessageError,
    MessageFinalizedError,
    MessageNotFoundError,
)
from streamchat.types import ChangeKind


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def changes(store: ConversationStore) -> list[StoreChange]:
    seen: list[StoreChange] = []
    store.add_listener(seen.append)
    return seen


class TestAppend:
    def test_append_and_read_back(self, store):
        msg = store.append(Message.user("hello"))
        assert len(store) == 1
        assert msg.id in store
        assert store.get(msg.id) == msg
        assert store.messages == (msg,)

    def test_duplicate_id_rejected(self, store):
        msg = store.append(Message.user("hello"))
        with pytest.raises(DuplicateIdError):
            store.append(msg)
        assert len(store) == 1

    def test_only_one_incomplete_message(self, store):
        first = store.append(Message.placeholder())
        with pytest.raises(InFlightMessageError) as info:
            store.append(Message.placeholder())
        assert info.value.pending_id == first.id
        assert store.pending_id == first.id

    def test_notifies_appended_then_section_opened(self, store, changes):
        msg = store.append(Message.user("hello"))
        assert [c.kind for c in changes] == [ChangeKind.APPENDED, ChangeKind.SECTION_OPENED]
        assert all(c.message_id == msg.id for c in changes)
        assert len(changes[-1].sections) == 1

    def test_reply_in_same_section_does_not_open_one(self, store, changes):
        store.append(Message.user("hello"))
        changes.clear()
        store.append(Message.placeholder())
        assert [c.kind for c in changes] == [ChangeKind.APPENDED]

    def test_second_exchange_opens_section(self, store, changes):
        store.append(Message.user("one"))
        store.append(Message.placeholder().model_copy(update={"is_complete": True}))
        changes.clear()
        second = store.append(Message.user("two", starts_new_section=True))
        assert [c.kind for c in changes] == [ChangeKind.APPENDED, ChangeKind.SECTION_OPENED]
        assert len(store.sections()) == 2
        assert store.active_section is not None
        assert store.active_section.messages[0].id == second.id


class TestUpdate:
    def test_update_text(self, store, changes):
        msg = store.append(Message.placeholder())
        changes.clear()
        updated = store.update(msg.id, text="partial")
        assert updated.text == "partial"
        assert store.get(msg.id).text == "partial"
        assert [c.kind for c in changes] == [ChangeKind.UPDATED]

    def test_append_text_extends(self, store):
        msg = store.append(Message.placeholder())
        store.append_text(msg.id, "Hello ")
        store.append_text(msg.id, "world")
        assert store.get(msg.id).text == "Hello world"

    def test_finalize_clears_pending(self, store):
        msg = store.append(Message.placeholder())
        store.update(msg.id, text="done", is_complete=True)
        assert store.pending_id is None
        store.append(Message.placeholder())

    def test_complete_message_is_immutable(self, store):
        msg = store.append(Message.user("final"))
        with pytest.raises(MessageFinalizedError):
            store.update(msg.id, text="changed")
        assert store.get(msg.id).text == "final"

    def test_unknown_id(self, store):
        with pytest.raises(MessageNotFoundError):
            store.update("nope", text="x")
        with pytest.raises(MessageNotFoundError):
            store.get("nope")

    def test_empty_update_is_noop(self, store, changes):
        msg = store.append(Message.placeholder())
        changes.clear()
        assert store.update(msg.id) == msg
        assert changes == []

    def test_snapshots_are_not_mutated(self, store):
        msg = store.append(Message.placeholder())
        before = store.messages
        store.update(msg.id, text="new")
        assert before[0].text == ""


class TestListeners:
    def test_remove_listener(self, store):
        seen: list[StoreChange] = []
        store.add_listener(seen.append)
        store.remove_listener(seen.append)
        store.append(Message.user("hi"))
        assert seen == []

    def test_remove_unknown_listener_is_ignored(self, store):
        store.remove_listener(lambda change: None)
