"""Helpers for validating Solana wallet addresses."""

from __future__ import annotations

from functools import lru_cache

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {ch: idx for idx, ch in enumerate(_BASE58_ALPHABET)}

# Ed25519 public keys are 32 bytes, which base58-encode to 32..44 characters.
SOLANA_PUBKEY_BYTES = 32


def _base58_decoded_length(address: str) -> int:
    value = 0
    for ch in address:
        value = value * 58 + _BASE58_INDEX[ch]
    leading_zeros = len(address) - len(address.lstrip("1"))
    return leading_zeros + (value.bit_length() + 7) // 8


@lru_cache(maxsize=128)
def is_valid_solana_address(address: str) -> bool:
    if not address or not isinstance(address, str):
        return False
    length = len(address)
    if length < 32 or length > 44:
        return False
    if not all(ch in _BASE58_INDEX for ch in address):
        return False
    return _base58_decoded_length(address) == SOLANA_PUBKEY_BYTES


__all__ = [
    "SOLANA_PUBKEY_BYTES",
    "is_valid_solana_address",
]
