"""Service layer helpers"""

from .address import SOLANA_PUBKEY_BYTES, is_valid_solana_address

__all__ = [
    "SOLANA_PUBKEY_BYTES",
    "is_valid_solana_address",
]
