"""Exceptions raised by the protocols and proofs."""


class ProtocolError(Exception):
    """Base class for protocol failures."""


class InvalidKey(ProtocolError):
    """A key or a proof bound to a key failed to verify."""


class InvalidSig(ProtocolError):
    """A signature failed to verify."""


class ProofError(ProtocolError):
    """A zero-knowledge proof or commitment failed to verify."""


class IncorrectProof(ProtocolError):
    """A proof about a Paillier key or ciphertext failed to verify."""