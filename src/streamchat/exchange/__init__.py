"""Exchange lifecycle: transport calls, coordinator state machine, records."""

from streamchat.exchange.coordinator import (
    ExchangeCoordinator,
    ExchangeEffects,
    NullEffects,
    format_failure,
)
from streamchat.exchange.models import Exchange, TransportReply
from streamchat.exchange.transport import (
    EchoTransport,
    Transport,
    WebhookTransport,
    create_transport,
)

__all__ = [
    "EchoTransport",
    "Exchange",
    "ExchangeCoordinator",
    "ExchangeEffects",
    "NullEffects",
    "Transport",
    "TransportReply",
    "WebhookTransport",
    "create_transport",
    "format_failure",
]
