"""Party two of two-party ECDSA key generation and signing with Paillier encryption."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..arith import int_from_bytes, mod_inv, sample_below, sample_bits
from ..curve import CURVE_ORDER, Point, Scalar
from ..errors import IncorrectProof, ProofError, ProtocolError
from ..hashing import create_commitment, hash_points
from ..mta import MessageA, MessageB
from ..paillier import EncryptionKey, add, encrypt, mul
from ..sigma import DLogProof, ECDDHProof, ECDDHStatement
from ..zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement, ZkPdlWithSlackError
from ..zkproofs import SALT_STRING, CompositeDLogProof, DLogStatement, NiCorrectKeyProof

SECURITY_BITS = 256
PAILLIER_KEY_SIZE = 2048


class PartyTwoError(ProtocolError):
    """Party two's PDL verification failed."""


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


@dataclass(frozen=True)
class EcKeyPair:
    """Party two's long-term key share."""

    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class KeyGenFirstMsg:
    """Party two's public share with a proof of knowledge of its discrete log."""

    d_log_proof: DLogProof
    public_share: Point

    @classmethod
    def create(cls) -> tuple[KeyGenFirstMsg, EcKeyPair]:
        """Pick a random secret share and prove knowledge of it."""
        return cls.create_with_fixed_secret_share(Scalar.random())

    @classmethod
    def create_with_fixed_secret_share(cls, secret_share: Scalar) -> tuple[KeyGenFirstMsg, EcKeyPair]:
        """Use the given secret share and prove knowledge of it."""
        secret_share = Scalar(secret_share)
        public_share = Point.generator() * secret_share
        d_log_proof = DLogProof.prove(secret_share)
        return cls(d_log_proof=d_log_proof, public_share=public_share), EcKeyPair(
            public_share=public_share, secret_share=secret_share
        )


@dataclass(frozen=True)
class KeyGenSecondMsg:
    """Party two's acknowledgement of party one's decommitment."""

    @classmethod
    def verify_commitments_and_dlog_proof(
        cls, party_one_first_message: Any, party_one_second_message: Any
    ) -> KeyGenSecondMsg:
        """Check party one's commitments and proof; raise :class:`ProofError` if wrong."""
        witness = party_one_second_message.comm_witness
        pk_ok = party_one_first_message.pk_commitment == create_commitment(
            _point_int(witness.public_share), witness.pk_commitment_blind_factor
        )
        zk_ok = party_one_first_message.zk_pok_commitment == create_commitment(
            _point_int(witness.d_log_proof.pk_t_rand_commitment), witness.zk_pok_blind_factor
        )
        if not (pk_ok and zk_ok):
            raise ProofError("party one commitments do not open")
        witness.d_log_proof.verify()
        return cls()


def compute_pubkey(local_share: EcKeyPair, other_share_public_share: Point) -> Point:
    """The joint public key ``x2 * (x1 * G)``."""
    return other_share_public_share * local_share.secret_share


@dataclass(frozen=True)
class Party2Private:
    """Party two's private key share."""

    x2: Scalar = field(repr=False)

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair) -> Party2Private:
        """Take the secret share of a key pair."""
        return cls(x2=ec_key.secret_share)

    def update_private_key(self, factor: int) -> Party2Private:
        """The share multiplied by ``factor``, for key rotation."""
        return Party2Private(x2=self.x2 * Scalar(factor))

    def to_mta_message_b(self, ek: EncryptionKey, ciphertext: int) -> tuple[MessageB, Scalar]:
        """Answer an MtA request on ``ciphertext`` with this share; return message and ``beta``."""
        message_a = MessageA(c=ciphertext, range_proofs=())
        message_b, beta, _, _ = MessageB.b(self.x2, ek, message_a, [])
        return message_b, beta


@dataclass(frozen=True)
class PaillierPublic:
    """Party one's Paillier key and the encryption of its share."""

    ek: EncryptionKey
    encrypted_secret_share: int

    def pdl_verify(
        self,
        composite_dlog_proof: CompositeDLogProof,
        pdl_w_slack_statement: PDLwSlackStatement,
        pdl_w_slack_proof: PDLwSlackProof,
        q1: Point,
    ) -> None:
        """Raise :class:`PartyTwoError` unless the encrypted share matches ``q1``."""
        if (
            pdl_w_slack_statement.ek != self.ek
            or pdl_w_slack_statement.ciphertext != self.encrypted_secret_share
            or pdl_w_slack_statement.q_point != q1
        ):
            raise PartyTwoError("party two pdl verify failed (lindell 2017)")
        dlog_statement = DLogStatement(
            n=pdl_w_slack_statement.n_tilde,
            g=pdl_w_slack_statement.h1,
            ni=pdl_w_slack_statement.h2,
        )
        try:
            composite_dlog_proof.verify(dlog_statement)
            pdl_w_slack_proof.verify(pdl_w_slack_statement)
        except (IncorrectProof, ZkPdlWithSlackError) as exc:
            raise PartyTwoError("party two pdl verify failed (lindell 2017)") from exc

    @staticmethod
    def verify_ni_proof_correct_key(proof: NiCorrectKeyProof, ek: EncryptionKey) -> None:
        """Raise :class:`IncorrectProof` if the key is too short or the proof fails."""
        if ek.n.bit_length() < PAILLIER_KEY_SIZE - 1:
            raise IncorrectProof("Paillier modulus is too short")
        proof.verify(ek, SALT_STRING)


@dataclass(frozen=True)
class EphEcKeyPair:
    """Party two's ephemeral share for one signature."""

    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class EphCommWitness:
    """Opening of party two's ephemeral commitments."""

    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: ECDDHProof
    c: Point


@dataclass(frozen=True)
class EphKeyGenFirstMsg:
    """Commitments to party two's ephemeral share and its DDH proof."""

    pk_commitment: int
    zk_pok_commitment: int

    @classmethod
    def create_commitments(cls) -> tuple[EphKeyGenFirstMsg, EphCommWitness, EphEcKeyPair]:
        """Pick an ephemeral share, prove it and commit to the result."""
        generator = Point.generator()
        h = Point.base_point2()
        secret_share = Scalar.random()
        public_share = generator * secret_share
        c = h * secret_share
        delta = ECDDHStatement(g1=generator, h1=public_share, g2=h, h2=c)
        d_log_proof = ECDDHProof.prove(secret_share, delta)

        pk_blind = sample_bits(SECURITY_BITS)
        pk_commitment = create_commitment(_point_int(public_share), pk_blind)
        zk_blind = sample_bits(SECURITY_BITS)
        zk_pok_commitment = create_commitment(hash_points(d_log_proof.a1, d_log_proof.a2), zk_blind)

        return (
            cls(pk_commitment=pk_commitment, zk_pok_commitment=zk_pok_commitment),
            EphCommWitness(
                pk_commitment_blind_factor=pk_blind,
                zk_pok_blind_factor=zk_blind,
                public_share=public_share,
                d_log_proof=d_log_proof,
                c=c,
            ),
            EphEcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class EphKeyGenSecondMsg:
    """Party two's decommitment, sent after checking party one's proof."""

    comm_witness: EphCommWitness

    @classmethod
    def verify_and_decommit(
        cls, comm_witness: EphCommWitness, party_one_first_message: Any
    ) -> EphKeyGenSecondMsg:
        """Check party one's DDH proof; raise :class:`ProofError` if it fails."""
        delta = ECDDHStatement(
            g1=Point.generator(),
            h1=party_one_first_message.public_share,
            g2=Point.base_point2(),
            h2=party_one_first_message.c,
        )
        party_one_first_message.d_log_proof.verify(delta)
        return cls(comm_witness=comm_witness)


@dataclass(frozen=True)
class PartialSig:
    """Paillier ciphertext of party two's contribution to ``s``."""

    c3: int

    @classmethod
    def compute(
        cls,
        ek: EncryptionKey,
        encrypted_secret_share: int,
        local_share: Party2Private,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
        message: int,
    ) -> PartialSig:
        """Homomorphically compute ``Enc(k2^-1 * (m + r * x1 * x2) + rho * q)``."""
        q = CURVE_ORDER
        r = ephemeral_other_public_share * ephemeral_local_share.secret_share
        if r.x is None:
            raise ValueError("ephemeral point is at infinity")
        rx = r.x % q
        rho = sample_below(q**2)
        k2_inv = mod_inv(int(ephemeral_local_share.secret_share), q)
        if k2_inv is None:
            raise ValueError("ephemeral secret share is zero")
        partial_sig = rho * q + k2_inv * message % q
        c1 = encrypt(ek, partial_sig)
        v = k2_inv * (rx * int(local_share.x2) % q) % q
        c2 = mul(ek, encrypted_secret_share, v)
        return cls(c3=add(ek, c2, c1))