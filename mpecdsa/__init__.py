"""Two-party ECDSA on secp256k1 with Paillier encryption, MtA and zero-knowledge proofs."""

__version__ = "0.1.0"