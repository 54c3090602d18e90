"""Two-party ECDSA key generation and signing: party one and party two."""

__all__ = ["party_one", "party_two"]