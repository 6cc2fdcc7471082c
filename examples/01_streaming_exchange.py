"""Streaming example -- one exchange printed as it is revealed.

Posts to ``STREAMCHAT_WEBHOOK_URL`` when it is set, otherwise answers with
the offline echo responder.
"""

import asyncio
import os

from streamchat import ConversationStore, ExchangeCoordinator, InputStaging
from streamchat.conversation import StoreChange
from streamchat.exchange import create_transport
from streamchat.types import MessageRole

url = os.environ.get("STREAMCHAT_WEBHOOK_URL")
transport = create_transport("webhook", url=url) if url else create_transport("echo")


async def main() -> None:
    store = ConversationStore()
    coordinator = ExchangeCoordinator(store, transport)
    printed = 0

    def show(change: StoreChange) -> None:
        nonlocal printed
        message = store.get(change.message_id)
        if message.role is MessageRole.SYSTEM and not message.is_complete:
            print(message.text[printed:], end="", flush=True)
            printed = len(message.text)

    store.add_listener(show)
    staging = InputStaging()
    staging.set_text("Give me three reasons to stream replies word by word.")
    exchange = await coordinator.submit(staging)
    print()
    print(exchange.format_summary())


asyncio.run(main())
