"""LINE adapters: Messaging and Login HTTP clients, Flex card templates, webhook signature."""

from memberdir.infrastructure.external.line.card_template import BusinessCardRenderer
from memberdir.infrastructure.external.line.client import (
    LineLoginClient,
    LineMessagingClient,
)
from memberdir.infrastructure.external.line.signature import (
    compute_signature,
    verify_signature,
)

__all__ = [
    "BusinessCardRenderer",
    "LineLoginClient",
    "LineMessagingClient",
    "compute_signature",
    "verify_signature",
]
