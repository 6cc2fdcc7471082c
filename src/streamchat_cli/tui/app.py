"""StreamchatApp -- chat TUI for a webhook-backed assistant.

The whole app is a single chat view: sections of messages scroll upward,
input is docked at the bottom, and a status bar shows the transport target
and the state of the current exchange.

The app never renders from its own bookkeeping. It listens to the
conversation store and the exchange coordinator, turns their notifications
into Textual messages, and updates widgets from those.
"""

from __future__ import annotations

import contextlib

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.message import Message as TextualMessage
from textual.widgets import Markdown, Static, TextArea
from textual.widgets.text_area import Selection

from streamchat.config import StreamchatConfig, get_config
from streamchat.conversation import ConversationStore, Message, Section, StoreChange
from streamchat.exchange import (
    Exchange,
    ExchangeCoordinator,
    Transport,
    create_transport,
)
from streamchat.staging import InputStaging
from streamchat.streaming import WordStreamer
from streamchat.types import ChangeKind, ExchangeState, MessageRole
from streamchat_cli.tui.commands import CommandRouter, format_size
from streamchat_cli.tui.screens.attach import AttachScreen
from streamchat_cli.tui.theme import APP_CSS
from streamchat_cli.tui.widgets.thinking_indicator import ThinkingIndicator

# Delay before scrolling to a freshly opened section, so it has been laid out.
_SCROLL_DELAY = 0.1

_IDLE_HINT = "Enter to send · Shift+Enter for newline · Ctrl+O attach · /help"
_BUSY_HINT = "Waiting for the reply · Escape to stop"


class PromptInput(TextArea):
    """Chat input -- Enter submits, Shift+Enter inserts newline.

    TextArea's internal ``_on_key`` consumes Enter (inserts newline) and
    calls ``event.stop()``, so the key never bubbles to the App. This
    subclass intercepts Enter before the parent handler and posts a
    :class:`Submitted` message instead.
    """

    class Submitted(TextualMessage):
        """Posted when the user presses Enter."""

        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            self.post_message(self.Submitted(self.text))
            event.stop()
            event.prevent_default()
            return
        if event.key == "shift+enter":
            start, end = self.selection
            self._replace_via_keyboard("\n", start, end)
            event.stop()
            event.prevent_default()
            return
        await super()._on_key(event)


class ConversationChanged(TextualMessage):
    """A store notification, forwarded onto the app's message queue."""

    def __init__(self, change: StoreChange) -> None:
        super().__init__()
        self.change = change


class ExchangeStateChanged(TextualMessage):
    def __init__(self, state: ExchangeState, exchange: Exchange | None) -> None:
        super().__init__()
        self.state = state
        self.exchange = exchange


class MessageView(Vertical):
    """One message: sender line, text, and any attachments."""

    def __init__(self, message: Message) -> None:
        is_user = message.role is MessageRole.USER
        super().__init__(classes="msg-box" if is_user else "msg-box-reply")
        self.message = message
        self._content = Markdown(
            message.text,
            classes="msg-content msg-content-user" if is_user else "msg-content",
        )

    def compose(self) -> ComposeResult:
        if self.message.role is MessageRole.USER:
            yield Static("You", classes="msg-sender msg-sender-user")
        else:
            yield Static("Assistant", classes="msg-sender msg-sender-reply")
        if self.message.text or self.message.role is MessageRole.SYSTEM:
            yield self._content
        for attachment in self.message.attachments:
            if attachment.is_image:
                label = f"▣ image · {attachment.filename} ({format_size(attachment.size)})"
                yield Static(label, classes="msg-attachment-image")
            else:
                label = f"□ file · {attachment.filename} ({format_size(attachment.size)})"
                yield Static(label, classes="msg-attachment")

    async def show(self, message: Message) -> None:
        """Render a newer version of the same message."""
        if message.text != self.message.text:
            await self._content.update(message.text)
        self.message = message


class AppEffects:
    """Exchange side effects that belong to the terminal, not the log."""

    def __init__(self, app: StreamchatApp) -> None:
        self._app = app

    def on_accept(self, exchange: Exchange) -> None:
        self._app.set_hint(_BUSY_HINT)

    def on_reply_started(self, exchange: Exchange) -> None:
        pass

    def on_terminal(self, exchange: Exchange) -> None:
        if exchange.failed:
            self._app.bell()


class StreamchatApp(App):
    """Chat TUI bound to one conversation store and one coordinator."""

    TITLE = "streamchat"
    CSS = APP_CSS

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=False),
        Binding("ctrl+o", "attach_file", "Attach", show=False),
        Binding("escape", "stop_reply", "Stop", show=False),
    ]

    def __init__(
        self,
        *,
        config: StreamchatConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        super().__init__()
        self._config = config or get_config()
        self._store = ConversationStore()
        self._staging = InputStaging(
            max_attachments=self._config.max_attachments,
            max_attachment_size=self._config.max_attachment_size,
        )
        self._transport = transport or create_transport(
            self._config.transport,
            url=self._config.webhook_url,
            timeout=self._config.request_timeout,
        )
        self._coordinator = ExchangeCoordinator(
            self._store,
            self._transport,
            streamer=WordStreamer(
                chunk_size=self._config.chunk_size, delay=self._config.word_delay
            ),
            effects=AppEffects(self),
        )
        self._router = CommandRouter(
            staging=self._staging, coordinator=self._coordinator, config=self._config
        )
        self._section_views: dict[str, Vertical] = {}
        self._message_views: dict[str, MessageView] = {}
        self._indicator: ThinkingIndicator | None = None
        # Exchanges in flight, by reply message id. Filled when the coordinator
        # enters SENDING, which happens before the placeholder is mounted.
        self._exchanges: dict[str, Exchange] = {}

        self._store.add_listener(self._on_store_change)
        self._coordinator.add_listener(self._on_coordinator_change)

    # -- read-only views for tests and commands -------------------------------

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def staging(self) -> InputStaging:
        return self._staging

    @property
    def coordinator(self) -> ExchangeCoordinator:
        return self._coordinator

    # -- layout ---------------------------------------------------------------

    def compose(self) -> ComposeResult:
        with Horizontal(id="header-bar"):
            yield Static("streamchat", classes="header-title")
            yield Static("Ctrl+O attach · Esc stop · Ctrl+Q quit", classes="header-hint")

        with Vertical(id="welcome"):
            yield Static(CommandRouter.WELCOME_TEXT, classes="welcome-text")

        yield VerticalScroll(id="message-list")

        with Vertical(id="input-area"):
            yield Static("", id="attachment-bar")
            with Horizontal(id="input-row"):
                yield Static("> ", classes="prompt-prefix", id="prompt-prefix")
                yield PromptInput(id="prompt-input")
            yield Static(_IDLE_HINT, classes="input-hint", id="input-hint")

        with Horizontal(id="status-bar"):
            yield Static(self._router.target_label(), classes="status-item status-target", id="status-target")
            yield Static(" · ", classes="status-sep")
            yield Static("0 messages", classes="status-item", id="status-count")
            yield Static("● idle", classes="status-item status-state state-idle", id="status-state")

    def on_mount(self) -> None:
        self.query_one("#prompt-input", PromptInput).focus()

    # -- store and coordinator bridges ----------------------------------------

    def _on_store_change(self, change: StoreChange) -> None:
        self.post_message(ConversationChanged(change))

    def _on_coordinator_change(self, state: ExchangeState, exchange: Exchange | None) -> None:
        if state is ExchangeState.SENDING and exchange is not None:
            self._exchanges[exchange.reply_message_id] = exchange
        self.post_message(ExchangeStateChanged(state, exchange))

    async def on_conversation_changed(self, event: ConversationChanged) -> None:
        change = event.change
        if change.kind is ChangeKind.APPENDED:
            await self._mount_message(change.message_id, change.sections)
        elif change.kind is ChangeKind.UPDATED:
            view = self._message_views.get(change.message_id)
            if view is not None:
                await view.show(self._store.get(change.message_id))
                self._follow_output()
        elif change.kind is ChangeKind.SECTION_OPENED and len(change.sections) > 1:
            self.set_timer(_SCROLL_DELAY, self._scroll_to_end)
        self._update_status_count()

    async def on_exchange_state_changed(self, event: ExchangeStateChanged) -> None:
        self._update_state_label(event.state)
        if self._indicator is not None:
            self._indicator.set_state(event.state)
        if event.state is ExchangeState.IDLE and event.exchange is not None:
            await self._finish_exchange(event.exchange)

    async def _mount_message(self, message_id: str, sections: tuple[Section, ...]) -> None:
        message = self._store.get(message_id)
        section = next(s for s in sections if any(m.id == message_id for m in s.messages))
        self._hide_welcome()
        container = await self._section_view(section)

        view = MessageView(message)
        self._message_views[message.id] = view
        await container.mount(view)
        if not message.is_complete:
            self._indicator = ThinkingIndicator(self._exchanges.get(message.id))
            await view.mount(self._indicator)
        self._follow_output()

    async def _section_view(self, section: Section) -> Vertical:
        existing = self._section_views.get(section.id)
        if existing is not None:
            return existing
        classes = "section section-anchored" if section.is_anchored else "section"
        container = Vertical(classes=classes, id=section.id)
        self._section_views[section.id] = container
        await self.query_one("#message-list", VerticalScroll).mount(container)
        return container

    async def _finish_exchange(self, exchange: Exchange) -> None:
        self._exchanges.pop(exchange.reply_message_id, None)
        if self._indicator is not None:
            self._indicator.stop()
            await self._indicator.remove()
            self._indicator = None
        view = self._message_views.get(exchange.reply_message_id)
        if view is not None:
            if exchange.failed:
                view.add_class("msg-failed")
            await view.mount(Static(exchange.format_summary(), classes="response-summary"))
        self.set_hint(_IDLE_HINT)
        self._update_attachment_bar()
        self._follow_output()
        with contextlib.suppress(NoMatches):
            self.query_one("#prompt-input", PromptInput).focus()

    # -- input ----------------------------------------------------------------

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id == "prompt-input":
            self._staging.set_text(event.text_area.text)

    async def on_prompt_input_submitted(self, event: PromptInput.Submitted) -> None:
        text = event.text.strip()
        prompt = self.query_one("#prompt-input", PromptInput)
        if self._router.is_command(text):
            prompt.clear()
            await self._handle_command(text)
            return
        self._staging.set_text(event.text)
        exchange = self._coordinator.accept(self._staging)
        if exchange is None:
            return
        prompt.clear()
        self._update_attachment_bar()
        self._run_exchange(exchange)

    @work(exclusive=True, group="exchange")
    async def _run_exchange(self, exchange: Exchange) -> None:
        await self._coordinator.run(exchange)

    # -- slash commands -------------------------------------------------------

    async def _handle_command(self, text: str) -> None:
        command, arg = self._router.parse(text)
        match command:
            case "/help":
                await self._add_command_output(self._router.help_text)
            case "/attach":
                await self._add_command_output(self._router.attach_text(arg))
                self._update_attachment_bar()
            case "/detach":
                await self._add_command_output(self._router.detach_text(arg))
                self._update_attachment_bar()
            case "/status":
                await self._add_command_output(self._router.status_text(len(self._store)))
            case "/quit":
                self.exit()

    async def _add_command_output(self, text: str) -> None:
        self._hide_welcome()
        message_list = self.query_one("#message-list", VerticalScroll)
        box = Vertical(classes="cmd-output")
        await message_list.mount(box)
        await box.mount(Markdown(text, classes="cmd-output-content"))
        message_list.scroll_end(animate=False)

    # -- actions --------------------------------------------------------------

    def action_attach_file(self) -> None:
        """Open the attach dialog, keeping the prompt's selection."""
        prompt = self.query_one("#prompt-input", PromptInput)
        document = prompt.document
        start, end = prompt.selection
        self._staging.save_selection(
            document.get_index_from_location(start),
            document.get_index_from_location(end),
        )
        self.push_screen(AttachScreen(), callback=self._on_attach_dismissed)

    async def _on_attach_dismissed(self, path: str | None) -> None:
        if path:
            await self._add_command_output(self._router.attach_text(path))
            self._update_attachment_bar()
        prompt = self.query_one("#prompt-input", PromptInput)
        snapshot = self._staging.restore_selection()
        if snapshot is not None:
            document = prompt.document
            prompt.selection = Selection(
                document.get_location_from_index(snapshot.start),
                document.get_location_from_index(snapshot.end),
            )
        prompt.focus()

    def action_stop_reply(self) -> None:
        """Escape: drop the exchange in flight, if any."""
        if not self._coordinator.is_idle:
            self._coordinator.reset("Stopped.")

    # -- helpers --------------------------------------------------------------

    def set_hint(self, text: str) -> None:
        with contextlib.suppress(NoMatches):
            self.query_one("#input-hint", Static).update(text)

    def _hide_welcome(self) -> None:
        welcome = self.query_one("#welcome", Vertical)
        if welcome.display:
            welcome.display = False
            self.query_one("#message-list", VerticalScroll).display = True

    def _update_attachment_bar(self) -> None:
        with contextlib.suppress(NoMatches):
            self.query_one("#attachment-bar", Static).update(self._router.attachments_label())

    def _update_status_count(self) -> None:
        with contextlib.suppress(NoMatches):
            self.query_one("#status-count", Static).update(f"{len(self._store)} messages")

    def _update_state_label(self, state: ExchangeState) -> None:
        with contextlib.suppress(NoMatches):
            label = self.query_one("#status-state", Static)
            label.update(f"● {state.value.replace('_', ' ')}")
            label.set_classes(f"status-item status-state {self._state_class(state)}")

    @staticmethod
    def _state_class(state: ExchangeState) -> str:
        if state is ExchangeState.IDLE:
            return "state-idle"
        if state is ExchangeState.FAILED:
            return "state-failed"
        return "state-busy"

    def _scroll_to_end(self) -> None:
        with contextlib.suppress(NoMatches):
            self.query_one("#message-list", VerticalScroll).scroll_end(animate=False)

    def _follow_output(self) -> None:
        with contextlib.suppress(NoMatches):
            message_list = self.query_one("#message-list", VerticalScroll)
            if self._is_near_bottom(message_list):
                message_list.scroll_end(animate=False)

    @staticmethod
    def _is_near_bottom(container: VerticalScroll) -> bool:
        """Check if the user is scrolled near the bottom (within 5 lines)."""
        return container.scroll_y >= container.max_scroll_y - 5
