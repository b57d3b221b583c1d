"""Wallet context enrichment for outgoing chat messages."""

import re
from typing import Optional

MY_WALLET_PATTERN = re.compile(r"\b(my|mine)\s+(wallet|balance|address|sol)\b", re.IGNORECASE)

CONTEXT_HINT_TEMPLATE = "\n\n[Context: User's connected wallet address is {identifier}]"


def enrich_message(message: str, known_user_identifier: Optional[str]) -> str:
    """Append the caller's wallet address when the message refers to "my wallet".

    The hint is appended as-is; the identifier is expected to be a wallet
    address and is not escaped. A hint already present in ``message`` is not
    deduplicated.
    """
    if not known_user_identifier:
        return message
    if not MY_WALLET_PATTERN.search(message):
        return message
    return message + CONTEXT_HINT_TEMPLATE.format(identifier=known_user_identifier)


__all__ = ["MY_WALLET_PATTERN", "CONTEXT_HINT_TEMPLATE", "enrich_message"]
