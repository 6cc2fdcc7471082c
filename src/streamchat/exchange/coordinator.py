"""Exchange coordinator: drives one submit → transport → stream cycle.

The coordinator is the only writer of reply messages. Every write it makes
first checks that the exchange it belongs to is still the live one, so a
reset can drop an exchange without cancelling the task that runs it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from streamchat.conversation.models import Message
from streamchat.conversation.store import ConversationStore
from streamchat.exceptions import InvalidTransitionError, TransportError
from streamchat.exchange.models import Exchange
from streamchat.exchange.transport import Transport
from streamchat.staging.input import InputStaging
from streamchat.streaming.streamer import StreamingChunk, WordStreamer
from streamchat.types import ExchangeState

logger = logging.getLogger(__name__)

FAILURE_TEMPLATE = "Sorry, I couldn't process your request. Error: {detail}"
DEFAULT_RESET_REASON = "Request cancelled."

_TRANSITIONS: dict[ExchangeState, frozenset[ExchangeState]] = {
    ExchangeState.IDLE: frozenset({ExchangeState.SENDING}),
    ExchangeState.SENDING: frozenset({ExchangeState.AWAITING_REPLY, ExchangeState.IDLE}),
    ExchangeState.AWAITING_REPLY: frozenset(
        {ExchangeState.STREAMING, ExchangeState.FAILED, ExchangeState.IDLE}
    ),
    ExchangeState.STREAMING: frozenset({ExchangeState.IDLE}),
    ExchangeState.FAILED: frozenset({ExchangeState.IDLE}),
}

CoordinatorListener = Callable[[ExchangeState, Exchange | None], None]


class ExchangeEffects(Protocol):
    """Side effects fired at exchange milestones (sounds, notifications)."""

    def on_accept(self, exchange: Exchange) -> None: ...

    def on_reply_started(self, exchange: Exchange) -> None: ...

    def on_terminal(self, exchange: Exchange) -> None: ...


class NullEffects:
    def on_accept(self, exchange: Exchange) -> None:
        pass

    def on_reply_started(self, exchange: Exchange) -> None:
        pass

    def on_terminal(self, exchange: Exchange) -> None:
        pass


def format_failure(detail: str) -> str:
    return FAILURE_TEMPLATE.format(detail=detail)


class ExchangeCoordinator:
    """Runs at most one exchange at a time against a conversation store."""

    def __init__(
        self,
        store: ConversationStore,
        transport: Transport,
        *,
        streamer: WordStreamer | None = None,
        effects: ExchangeEffects | None = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._streamer = streamer or WordStreamer()
        self._effects: ExchangeEffects = effects or NullEffects()
        self._state = ExchangeState.IDLE
        self._current: Exchange | None = None
        self._staging: InputStaging | None = None
        self._chunks: list[StreamingChunk] = []
        self._listeners: list[CoordinatorListener] = []

    # -- state ----------------------------------------------------------------

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is ExchangeState.IDLE

    @property
    def current(self) -> Exchange | None:
        """The live exchange, or ``None`` when idle."""
        return self._current

    @property
    def streaming_id(self) -> str | None:
        """Id of the reply being revealed, while streaming."""
        if self._state is ExchangeState.STREAMING and self._current is not None:
            return self._current.reply_message_id
        return None

    @property
    def streaming_chunks(self) -> tuple[StreamingChunk, ...]:
        return tuple(self._chunks)

    @property
    def transport(self) -> Transport:
        return self._transport

    # -- listeners ------------------------------------------------------------

    def add_listener(self, listener: CoordinatorListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CoordinatorListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _transition(self, target: ExchangeState, exchange: Exchange | None) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransitionError(self._state, target)
        logger.debug("Exchange state %s -> %s", self._state, target)
        self._state = target
        for listener in list(self._listeners):
            listener(target, exchange)

    def _is_live(self, exchange: Exchange) -> bool:
        return self._current is exchange

    # -- lifecycle ------------------------------------------------------------

    def accept(self, staging: InputStaging) -> Exchange | None:
        """Take the staged input and open a new exchange.

        Returns ``None`` when an exchange is already running or there is
        nothing to send. Refused submissions are not queued.
        """
        if not self.is_idle:
            logger.debug("Submission refused while %s", self._state)
            return None
        if not staging.can_submit():
            return None

        submission = staging.take()
        staging.lock()
        user_message = Message.user(
            submission.text,
            attachments=submission.attachments,
            starts_new_section=len(self._store) >= 1,
        )
        placeholder = Message.placeholder()
        exchange = Exchange(
            submission=submission,
            user_message_id=user_message.id,
            reply_message_id=placeholder.id,
        )
        self._current = exchange
        self._staging = staging
        self._chunks = []

        self._store.append(user_message)
        self._store.append(placeholder)
        logger.info(
            "Accepted exchange %s (%d chars, %d attachment(s))",
            exchange.id,
            len(submission.text),
            len(submission.attachments),
        )
        self._transition(ExchangeState.SENDING, exchange)
        self._effects.on_accept(exchange)
        return exchange

    async def run(self, exchange: Exchange) -> Exchange:
        """Send *exchange* and reveal the reply. Transport faults never propagate."""
        if not self._is_live(exchange):
            return exchange
        self._transition(ExchangeState.AWAITING_REPLY, exchange)
        try:
            await self._deliver(exchange)
        except asyncio.CancelledError:
            if self._is_live(exchange):
                self.reset(DEFAULT_RESET_REASON)
            raise
        return exchange

    async def submit(self, staging: InputStaging) -> Exchange | None:
        """Accept the staged input and run the exchange to completion."""
        exchange = self.accept(staging)
        if exchange is None:
            return None
        return await self.run(exchange)

    async def _deliver(self, exchange: Exchange) -> None:
        submission = exchange.submission
        try:
            reply = await self._transport.send(submission.text, submission.attachments)
        except TransportError as exc:
            self._fail(exchange, exc.detail)
            return
        except Exception as exc:
            # A transport that breaks its contract still ends the exchange.
            self._fail(exchange, str(exc) or type(exc).__name__)
            return

        if not self._is_live(exchange):
            logger.debug("Ignoring late reply for dropped exchange %s", exchange.id)
            return

        exchange.mark_replied()
        exchange.reply_text = reply.text
        self._transition(ExchangeState.STREAMING, exchange)
        self._effects.on_reply_started(exchange)

        async for chunk in self._streamer.stream(reply.text):
            if not self._is_live(exchange):
                return
            self._chunks.append(chunk)
            exchange.chunk_count += 1
            self._store.append_text(exchange.reply_message_id, chunk.text)

        if not self._is_live(exchange):
            return
        self._store.update(exchange.reply_message_id, text=reply.text, is_complete=True)
        logger.info("Exchange %s finished: %s", exchange.id, exchange.format_summary())
        self._finish(exchange)

    def _fail(self, exchange: Exchange, detail: str) -> None:
        if not self._is_live(exchange):
            logger.debug("Ignoring transport error for dropped exchange %s", exchange.id)
            return
        logger.warning("Exchange %s failed: %s", exchange.id, detail, exc_info=True)
        exchange.mark_replied()
        exchange.error = detail
        self._transition(ExchangeState.FAILED, exchange)
        self._store.update(
            exchange.reply_message_id,
            text=format_failure(detail),
            is_complete=True,
        )
        self._finish(exchange)

    def _finish(self, exchange: Exchange) -> None:
        self._effects.on_terminal(exchange)
        self._current = None
        self._chunks = []
        if self._staging is not None:
            self._staging.unlock()
            self._staging = None
        exchange.mark_finished()
        self._transition(ExchangeState.IDLE, exchange)

    def reset(self, reason: str = DEFAULT_RESET_REASON) -> bool:
        """Drop the live exchange and return to idle.

        The reply placeholder keeps whatever text was already revealed, or
        shows *reason* when nothing was. Returns ``False`` when idle.
        """
        exchange = self._current
        if exchange is None:
            return False

        pending = self._store.get(exchange.reply_message_id)
        if not pending.is_complete:
            self._store.update(
                exchange.reply_message_id,
                text=pending.text or reason,
                is_complete=True,
            )
        exchange.cancelled = True
        logger.info("Exchange %s reset from %s: %s", exchange.id, self._state, reason)
        self._finish(exchange)
        return True
