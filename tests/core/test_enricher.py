import pytest

from cordai.core.enricher import enrich_message

WALLET = "So11111111111111111111111111111111111111112"
HINT = f"\n\n[Context: User's connected wallet address is {WALLET}]"


@pytest.mark.parametrize(
    "message",
    [
        "What's my balance?",
        "check MY WALLET please",
        "how much is in mine   address",
        "show my sol",
    ],
)
def test_hint_appended_for_self_references(message):
    assert enrich_message(message, WALLET) == message + HINT


@pytest.mark.parametrize(
    "message",
    [
        "What's the price of SOL?",
        "myWallet is empty",
        "check balance of 7Abc",
        "my solana wallet",
    ],
)
def test_message_unchanged_without_self_reference(message):
    assert enrich_message(message, WALLET) == message


def test_message_unchanged_without_identifier():
    assert enrich_message("What's my balance?", None) == "What's my balance?"
    assert enrich_message("What's my balance?", "") == "What's my balance?"


def test_existing_hint_is_not_deduplicated():
    once = enrich_message("my wallet", WALLET)
    twice = enrich_message(once, WALLET)
    assert twice == once + HINT
    assert twice.count("[Context:") == 2
