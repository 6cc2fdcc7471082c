"""Tests for ExchangeCoordinator."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from streamchat.conversation.models import FileAttachment, Message
from streamchat.conversation.store import ConversationStore
from streamchat.exceptions import InvalidTransitionError, TransportError
from streamchat.exchange.coordinator import ExchangeCoordinator, format_failure
from streamchat.exchange.models import Exchange, TransportReply
from streamchat.staging.input import InputStaging
from streamchat.streaming.streamer import WordStreamer
from streamchat.types import ExchangeState, MessageRole

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeTransport:
    """Replies with a fixed text, optionally after a gate opens."""

    def __init__(self, reply: str = "hello there", *, gate: asyncio.Event | None = None) -> None:
        self.reply = reply
        self.gate = gate
        self.calls: list[tuple[str, tuple[FileAttachment, ...]]] = []

    async def send(
        self, message: str, attachments: Sequence[FileAttachment] = ()
    ) -> TransportReply:
        self.calls.append((message, tuple(attachments)))
        if self.gate is not None:
            await self.gate.wait()
        return TransportReply(text=self.reply)


class FailingTransport:
    def __init__(self, status_code: int = 500) -> None:
        self.status_code = status_code
        self.calls = 0

    async def send(
        self, message: str, attachments: Sequence[FileAttachment] = ()
    ) -> TransportReply:
        self.calls += 1
        raise TransportError(
            f"Webhook request failed with status {self.status_code}",
            status_code=self.status_code,
        )


class BrokenTransport:
    """Raises something other than ``TransportError``."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def send(
        self, message: str, attachments: Sequence[FileAttachment] = ()
    ) -> TransportReply:
        raise self.exc


class RecordingEffects:
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def on_accept(self, exchange: Exchange) -> None:
        self.events.append(("accept", exchange.id))

    def on_reply_started(self, exchange: Exchange) -> None:
        self.events.append(("reply_started", exchange.id))

    def on_terminal(self, exchange: Exchange) -> None:
        self.events.append(("terminal", exchange.id))


def _make(transport, *, delay: float = 0.0, effects=None):
    store = ConversationStore()
    staging = InputStaging()
    coordinator = ExchangeCoordinator(
        store, transport, streamer=WordStreamer(delay=delay), effects=effects
    )
    return store, staging, coordinator


def _stage(staging: InputStaging, text: str) -> InputStaging:
    staging.set_text(text)
    return staging


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    @pytest.mark.asyncio
    async def test_first_submit_streams_reply(self):
        gate = asyncio.Event()
        store, staging, coordinator = _make(FakeTransport("hello there", gate=gate))

        exchange = coordinator.accept(_stage(staging, "hi"))
        assert exchange is not None
        user, reply = store.messages
        assert (user.role, user.text, user.starts_new_section) == (MessageRole.USER, "hi", False)
        assert (reply.role, reply.text, reply.is_complete) == (MessageRole.SYSTEM, "", False)
        assert coordinator.state is ExchangeState.SENDING

        task = asyncio.create_task(coordinator.run(exchange))
        await asyncio.sleep(0)
        assert coordinator.state is ExchangeState.AWAITING_REPLY
        gate.set()
        await task

        final = store.get(exchange.reply_message_id)
        assert final.text == "hello there"
        assert final.is_complete
        assert coordinator.is_idle
        assert coordinator.current is None
        assert coordinator.streaming_chunks == ()

    @pytest.mark.asyncio
    async def test_second_submit_opens_new_section(self):
        store, staging, coordinator = _make(FakeTransport("ok"))
        await coordinator.submit(_stage(staging, "first"))
        assert len(store) == 2

        exchange = await coordinator.submit(_stage(staging, "next"))

        user = store.get(exchange.user_message_id)
        assert user.starts_new_section
        sections = store.sections()
        assert len(sections) == 2
        assert sections[-1].is_active
        assert [m.id for m in sections[-1].messages] == [
            exchange.user_message_id,
            exchange.reply_message_id,
        ]

    @pytest.mark.asyncio
    async def test_transport_fault_finalizes_with_error(self):
        transport = FailingTransport(500)
        store, staging, coordinator = _make(transport)
        states: list[ExchangeState] = []
        coordinator.add_listener(lambda state, exchange: states.append(state))

        exchange = await coordinator.submit(_stage(staging, "hi"))

        reply = store.get(exchange.reply_message_id)
        assert reply.is_complete
        assert reply.text == format_failure("Webhook request failed with status 500")
        assert reply.text.startswith("Sorry, I couldn't process your request. Error:")
        assert exchange.failed
        assert exchange.chunk_count == 0
        assert states == [
            ExchangeState.SENDING,
            ExchangeState.AWAITING_REPLY,
            ExchangeState.FAILED,
            ExchangeState.IDLE,
        ]
        assert not staging.locked

        coordinator._transport = FakeTransport("recovered")
        again = await coordinator.submit(_stage(staging, "retry"))
        assert again is not None
        assert store.get(again.reply_message_id).text == "recovered"

    @pytest.mark.asyncio
    async def test_unexpected_transport_exception_fails_exchange(self):
        store, staging, coordinator = _make(BrokenTransport(RuntimeError("boom")))
        states: list[ExchangeState] = []
        coordinator.add_listener(lambda state, exchange: states.append(state))

        exchange = await coordinator.submit(_stage(staging, "hi"))

        reply = store.get(exchange.reply_message_id)
        assert reply.is_complete
        assert reply.text == format_failure("boom")
        assert exchange.error == "boom"
        assert states[-2:] == [ExchangeState.FAILED, ExchangeState.IDLE]
        assert coordinator.is_idle
        assert coordinator.current is None
        assert not staging.locked
        assert coordinator.accept(_stage(staging, "again")) is not None

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(self):
        store, staging, coordinator = _make(BrokenTransport(KeyError()))
        exchange = await coordinator.submit(_stage(staging, "hi"))
        assert store.get(exchange.reply_message_id).text == format_failure("KeyError")


# ---------------------------------------------------------------------------
# Accept gating
# ---------------------------------------------------------------------------


class TestAccept:
    def test_blank_input_is_refused(self):
        store, staging, coordinator = _make(FakeTransport())
        assert coordinator.accept(_stage(staging, "   ")) is None
        assert len(store) == 0
        assert coordinator.is_idle

    def test_attachment_only_is_accepted(self):
        store, staging, coordinator = _make(FakeTransport())
        staging.add_files([FileAttachment.from_bytes("a.txt", b"a")])
        exchange = coordinator.accept(staging)
        assert exchange is not None
        user = store.get(exchange.user_message_id)
        assert user.text == ""
        assert [a.filename for a in user.attachments] == ["a.txt"]

    def test_accept_takes_and_locks_staging(self):
        _, staging, coordinator = _make(FakeTransport())
        staging.add_files([FileAttachment.from_bytes("a.txt", b"a")])
        exchange = coordinator.accept(_stage(staging, "  hi  "))
        assert exchange.submission.text == "hi"
        assert staging.text == ""
        assert staging.attachments == ()
        assert staging.locked

    def test_reentry_is_refused_not_queued(self):
        store, staging, coordinator = _make(FakeTransport())
        assert coordinator.accept(_stage(staging, "one")) is not None
        other = InputStaging()
        assert coordinator.accept(_stage(other, "two")) is None
        assert other.text == "two"
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_transport_called_once_with_snapshot(self):
        transport = FakeTransport()
        _, staging, coordinator = _make(transport)
        att = FileAttachment.from_bytes("a.png", b"\x89PNG")
        staging.add_files([att])
        await coordinator.submit(_stage(staging, "look"))
        assert transport.calls == [("look", (att,))]


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class TestStreaming:
    @pytest.mark.asyncio
    async def test_chunks_applied_in_order(self):
        store, staging, coordinator = _make(FakeTransport("one two three four five"))
        seen: list[str] = []

        def _watch(change):
            message = store.get(change.message_id)
            if message.role is MessageRole.SYSTEM:
                seen.append(message.text)

        store.add_listener(_watch)
        exchange = await coordinator.submit(_stage(staging, "count"))

        assert seen[-3:] == ["one two three four ", "one two three four five", "one two three four five"]
        assert exchange.chunk_count == 3
        assert exchange.reply_text == "one two three four five"

    @pytest.mark.asyncio
    async def test_streaming_id_and_chunks_visible_mid_stream(self):
        store, staging, coordinator = _make(FakeTransport("a b c d e f"), delay=0.01)
        exchange = coordinator.accept(_stage(staging, "go"))
        task = asyncio.create_task(coordinator.run(exchange))
        while coordinator.state is not ExchangeState.STREAMING:
            await asyncio.sleep(0)
        assert coordinator.streaming_id == exchange.reply_message_id
        await asyncio.sleep(0.015)
        assert coordinator.streaming_chunks
        assert not store.get(exchange.reply_message_id).is_complete
        await task
        assert coordinator.streaming_id is None

    @pytest.mark.asyncio
    async def test_effects_fire_at_transitions(self):
        effects = RecordingEffects()
        _, staging, coordinator = _make(FakeTransport("hi"), effects=effects)
        exchange = await coordinator.submit(_stage(staging, "x"))
        assert effects.events == [
            ("accept", exchange.id),
            ("reply_started", exchange.id),
            ("terminal", exchange.id),
        ]

    @pytest.mark.asyncio
    async def test_wait_resolves_when_finished(self):
        _, staging, coordinator = _make(FakeTransport("hi"))
        exchange = coordinator.accept(_stage(staging, "x"))
        task = asyncio.create_task(coordinator.run(exchange))
        await asyncio.wait_for(exchange.wait(), timeout=1)
        await task
        assert exchange.finished_at is not None


# ---------------------------------------------------------------------------
# Reset and liveness
# ---------------------------------------------------------------------------


class TestReset:
    def test_reset_when_idle(self):
        _, _, coordinator = _make(FakeTransport())
        assert coordinator.reset() is False

    @pytest.mark.asyncio
    async def test_reset_while_waiting_uses_reason_and_drops_late_reply(self):
        gate = asyncio.Event()
        store, staging, coordinator = _make(FakeTransport("too late", gate=gate))
        exchange = coordinator.accept(_stage(staging, "hi"))
        task = asyncio.create_task(coordinator.run(exchange))
        await asyncio.sleep(0)

        assert coordinator.reset("Stopped.") is True
        reply = store.get(exchange.reply_message_id)
        assert (reply.text, reply.is_complete) == ("Stopped.", True)
        assert coordinator.is_idle
        assert not staging.locked
        assert exchange.cancelled

        gate.set()
        await task
        assert store.get(exchange.reply_message_id).text == "Stopped."

    @pytest.mark.asyncio
    async def test_reset_mid_stream_keeps_revealed_text(self):
        store, staging, coordinator = _make(FakeTransport("a b c d e f g h"), delay=0.01)
        exchange = coordinator.accept(_stage(staging, "go"))
        task = asyncio.create_task(coordinator.run(exchange))
        while not coordinator.streaming_chunks:
            await asyncio.sleep(0.005)

        coordinator.reset()
        revealed = store.get(exchange.reply_message_id).text
        assert revealed.startswith("a b ")
        await task
        assert store.get(exchange.reply_message_id).text == revealed

    @pytest.mark.asyncio
    async def test_new_exchange_after_reset(self):
        gate = asyncio.Event()
        store, staging, coordinator = _make(FakeTransport("reply", gate=gate))
        first = coordinator.accept(_stage(staging, "one"))
        first_task = asyncio.create_task(coordinator.run(first))
        await asyncio.sleep(0)
        coordinator.reset()

        second = coordinator.accept(_stage(staging, "two"))
        assert second is not None
        gate.set()
        await asyncio.gather(first_task, coordinator.run(second))

        assert store.get(first.reply_message_id).text == "Request cancelled."
        assert store.get(second.reply_message_id).text == "reply"
        assert store.pending_id is None

    @pytest.mark.asyncio
    async def test_cancelled_run_resets(self):
        gate = asyncio.Event()
        store, staging, coordinator = _make(FakeTransport(gate=gate))
        exchange = coordinator.accept(_stage(staging, "hi"))
        task = asyncio.create_task(coordinator.run(exchange))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert coordinator.is_idle
        assert store.get(exchange.reply_message_id).is_complete


class TestTransitions:
    def test_illegal_transition_raises(self):
        _, _, coordinator = _make(FakeTransport())
        with pytest.raises(InvalidTransitionError):
            coordinator._transition(ExchangeState.STREAMING, None)

    def test_store_single_incomplete_invariant_holds(self):
        store, staging, coordinator = _make(FakeTransport())
        coordinator.accept(_stage(staging, "hi"))
        assert sum(1 for m in store if not m.is_complete) == 1
        assert isinstance(store.messages[-1], Message)
