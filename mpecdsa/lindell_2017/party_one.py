"""Party one of two-party ECDSA key generation and signing with Paillier encryption."""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..arith import int_from_bytes, int_to_bytes, mod_inv, sample_below, sample_bits
from ..curve import CURVE_ORDER, Point, Scalar
from ..errors import InvalidSig, ProofError
from ..hashing import create_commitment, hash_points
from ..mta import MessageB
from ..paillier import (
    DecryptionKey,
    EncryptionKey,
    decrypt,
    encrypt_with_randomness,
    generate_keypair,
    sample_randomness,
)
from ..sigma import DLogProof, ECDDHProof, ECDDHStatement
from ..zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement, PDLwSlackWitness
from ..zkproofs import CompositeDLogProof, DLogStatement, NiCorrectKeyProof

if TYPE_CHECKING:
    from .party_two import EphKeyGenFirstMsg as Party2EphKeyGenFirstMsg
    from .party_two import EphKeyGenSecondMsg as Party2EphKeyGenSecondMsg

SECURITY_BITS = 256


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


@dataclass(frozen=True)
class EcKeyPair:
    """Party one's long-term key share."""

    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class CommWitness:
    """Opening of party one's key generation commitments."""

    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: DLogProof


@dataclass(frozen=True)
class KeyGenFirstMsg:
    """Commitments to party one's public share and to its proof of knowledge."""

    pk_commitment: int
    zk_pok_commitment: int

    @classmethod
    def create_commitments(cls) -> tuple[KeyGenFirstMsg, CommWitness, EcKeyPair]:
        """Pick a random secret share and commit to it and its proof."""
        return cls.create_commitments_with_fixed_secret_share(Scalar.random())

    @classmethod
    def create_commitments_with_fixed_secret_share(
        cls, secret_share: Scalar
    ) -> tuple[KeyGenFirstMsg, CommWitness, EcKeyPair]:
        """Commit to the given secret share and its proof of knowledge."""
        secret_share = Scalar(secret_share)
        public_share = Point.generator() * secret_share
        d_log_proof = DLogProof.prove(secret_share)

        pk_blind = sample_bits(SECURITY_BITS)
        pk_commitment = create_commitment(_point_int(public_share), pk_blind)
        zk_blind = sample_bits(SECURITY_BITS)
        zk_pok_commitment = create_commitment(
            _point_int(d_log_proof.pk_t_rand_commitment), zk_blind
        )

        return (
            cls(pk_commitment=pk_commitment, zk_pok_commitment=zk_pok_commitment),
            CommWitness(
                pk_commitment_blind_factor=pk_blind,
                zk_pok_blind_factor=zk_blind,
                public_share=public_share,
                d_log_proof=d_log_proof,
            ),
            EcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class KeyGenSecondMsg:
    """Party one's decommitment, sent after checking party two's proof."""

    comm_witness: CommWitness

    @classmethod
    def verify_and_decommit(cls, comm_witness: CommWitness, proof: DLogProof) -> KeyGenSecondMsg:
        """Check party two's proof; raise :class:`ProofError` if it fails."""
        proof.verify()
        return cls(comm_witness=comm_witness)


@dataclass(frozen=True)
class PaillierKeyPair:
    """Party one's Paillier key pair and the encryption of its secret share."""

    ek: EncryptionKey
    dk: DecryptionKey = field(repr=False)
    encrypted_share: int
    randomness: int = field(repr=False)

    @classmethod
    def generate_keypair_and_encrypted_share(cls, keygen: EcKeyPair) -> PaillierKeyPair:
        """Generate a fresh Paillier key and encrypt the secret share under it."""
        ek, dk = generate_keypair()
        return cls.generate_encrypted_share_from_fixed_paillier_keypair(ek, dk, keygen)

    @classmethod
    def generate_encrypted_share_from_fixed_paillier_keypair(
        cls, ek: EncryptionKey, dk: DecryptionKey, keygen: EcKeyPair
    ) -> PaillierKeyPair:
        """Encrypt the secret share under an existing Paillier key."""
        randomness = sample_randomness(ek)
        encrypted_share = encrypt_with_randomness(ek, int(keygen.secret_share), randomness)
        return cls(ek=ek, dk=dk, encrypted_share=encrypted_share, randomness=randomness)

    def generate_ni_proof_correct_key(self) -> NiCorrectKeyProof:
        """Prove that the Paillier key is well formed."""
        return NiCorrectKeyProof.prove(self.dk, None)

    def pdl_proof(
        self, party1_private: Party1Private
    ) -> tuple[PDLwSlackStatement, PDLwSlackProof, CompositeDLogProof]:
        """Prove that the encrypted share is the discrete log of party one's public share."""
        n_tilde, h1, h2, xhi = generate_h1_h2_n_tilde()
        dlog_statement = DLogStatement(n=n_tilde, g=h1, ni=h2)
        composite_dlog_proof = CompositeDLogProof.prove(dlog_statement, xhi)

        statement = PDLwSlackStatement(
            ciphertext=self.encrypted_share,
            ek=self.ek,
            q_point=Point.generator() * party1_private.x1,
            g_point=Point.generator(),
            h1=dlog_statement.g,
            h2=dlog_statement.ni,
            n_tilde=dlog_statement.n,
        )
        witness = PDLwSlackWitness(x=party1_private.x1, r=party1_private.c_key_randomness)
        proof = PDLwSlackProof.prove(witness, statement)
        return statement, proof, composite_dlog_proof


@dataclass(frozen=True)
class RefreshedKey:
    """Everything produced when party one rotates its share onto a new Paillier key."""

    ek: EncryptionKey
    encrypted_share: int
    private: Party1Private
    correct_key_proof: NiCorrectKeyProof
    pdl_statement: PDLwSlackStatement
    pdl_proof: PDLwSlackProof
    composite_dlog_proof: CompositeDLogProof


@dataclass(frozen=True)
class Party1Private:
    """Party one's private material: key share, Paillier key and encryption randomness."""

    x1: Scalar = field(repr=False)
    paillier_priv: DecryptionKey = field(repr=False)
    c_key_randomness: int = field(repr=False)

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair, paillier_key: PaillierKeyPair) -> Party1Private:
        """Collect the private parts of the key pair and the Paillier key."""
        return cls(
            x1=ec_key.secret_share,
            paillier_priv=paillier_key.dk,
            c_key_randomness=paillier_key.randomness,
        )

    def refresh_private_key(self, factor: int) -> RefreshedKey:
        """Multiply the share by ``factor`` and re-encrypt it under a fresh Paillier key."""
        ek_new, dk_new = generate_keypair()
        randomness = sample_randomness(ek_new)
        x1_new = self.x1 * Scalar(factor)
        c_key_new = encrypt_with_randomness(ek_new, int(x1_new), randomness)
        correct_key_proof = NiCorrectKeyProof.prove(dk_new, None)

        paillier_key_pair = PaillierKeyPair(
            ek=ek_new, dk=dk_new, encrypted_share=c_key_new, randomness=randomness
        )
        private_new = Party1Private(x1=x1_new, paillier_priv=dk_new, c_key_randomness=randomness)
        statement, proof, composite_dlog_proof = paillier_key_pair.pdl_proof(private_new)
        return RefreshedKey(
            ek=ek_new,
            encrypted_share=c_key_new,
            private=private_new,
            correct_key_proof=correct_key_proof,
            pdl_statement=statement,
            pdl_proof=proof,
            composite_dlog_proof=composite_dlog_proof,
        )

    def to_mta_message_b(self, message_b: MessageB) -> tuple[Scalar, int]:
        """Finish an MtA run on this share; raise :class:`InvalidKey` if it fails."""
        return message_b.verify_proofs_get_alpha(self.paillier_priv, self.x1)


def compute_pubkey(party_one_private: Party1Private, other_share_public_share: Point) -> Point:
    """The joint public key ``x1 * (x2 * G)``."""
    return other_share_public_share * party_one_private.x1


@dataclass(frozen=True)
class EphEcKeyPair:
    """Party one's ephemeral share for one signature."""

    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class EphKeyGenFirstMsg:
    """Party one's ephemeral public share with a DDH proof against the second base."""

    d_log_proof: ECDDHProof
    public_share: Point
    c: Point

    @classmethod
    def create(cls) -> tuple[EphKeyGenFirstMsg, EphEcKeyPair]:
        """Pick an ephemeral share and prove it against both bases."""
        generator = Point.generator()
        h = Point.base_point2()
        secret_share = Scalar.random()
        public_share = generator * secret_share
        c = h * secret_share
        delta = ECDDHStatement(g1=generator, h1=public_share, g2=h, h2=c)
        d_log_proof = ECDDHProof.prove(secret_share, delta)
        return (
            cls(d_log_proof=d_log_proof, public_share=public_share, c=c),
            EphEcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class EphKeyGenSecondMsg:
    """Party one's acknowledgement of party two's ephemeral decommitment."""

    @classmethod
    def verify_commitments_and_dlog_proof(
        cls,
        party_two_first_message: Party2EphKeyGenFirstMsg,
        party_two_second_message: Party2EphKeyGenSecondMsg,
    ) -> EphKeyGenSecondMsg:
        """Check party two's commitments and DDH proof; raise :class:`ProofError` if wrong."""
        witness = party_two_second_message.comm_witness
        proof = witness.d_log_proof
        pk_ok = party_two_first_message.pk_commitment == create_commitment(
            _point_int(witness.public_share), witness.pk_commitment_blind_factor
        )
        zk_ok = party_two_first_message.zk_pok_commitment == create_commitment(
            hash_points(proof.a1, proof.a2), witness.zk_pok_blind_factor
        )
        if not (pk_ok and zk_ok):
            raise ProofError("party two commitments do not open")
        delta = ECDDHStatement(
            g1=Point.generator(),
            h1=witness.public_share,
            g2=Point.base_point2(),
            h2=witness.c,
        )
        proof.verify(delta)
        return cls()


@dataclass(frozen=True)
class SignatureRecid:
    """An ECDSA signature with its public key recovery id."""

    s: int
    r: int
    recid: int


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature ``(r, s)`` with low ``s``."""

    s: int
    r: int

    @staticmethod
    def _s_tag_tag(
        party_one_private: Party1Private,
        partial_sig_c3: int,
        ephemeral_local_share: EphEcKeyPair,
    ) -> int:
        k1_inv = ephemeral_local_share.secret_share.invert()
        if k1_inv is None:
            raise ValueError("ephemeral secret share is zero")
        s_tag = decrypt(party_one_private.paillier_priv, partial_sig_c3)
        return int(Scalar(s_tag) * k1_inv)

    @staticmethod
    def _nonce_point(ephemeral_local_share: EphEcKeyPair, other: Point) -> Point:
        r = other * ephemeral_local_share.secret_share
        if r.x is None:
            raise ValueError("ephemeral point is at infinity")
        return r

    @classmethod
    def compute(
        cls,
        party_one_private: Party1Private,
        partial_sig_c3: int,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
    ) -> Signature:
        """Decrypt party two's partial signature and finish ``s``."""
        q = CURVE_ORDER
        r = cls._nonce_point(ephemeral_local_share, ephemeral_other_public_share)
        s_tag_tag = cls._s_tag_tag(party_one_private, partial_sig_c3, ephemeral_local_share)
        return cls(s=min(s_tag_tag, q - s_tag_tag), r=r.x % q)

    @classmethod
    def compute_with_recid(
        cls,
        party_one_private: Party1Private,
        partial_sig_c3: int,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
    ) -> SignatureRecid:
        """Like :meth:`compute`, also returning the recovery id.

        The id is the parity of ``R.y``, flipped when ``s`` had to be negated.
        """
        q = CURVE_ORDER
        r = cls._nonce_point(ephemeral_local_share, ephemeral_other_public_share)
        rx = r.x % q
        ry = r.y % q
        s_tag_tag = cls._s_tag_tag(party_one_private, partial_sig_c3, ephemeral_local_share)
        s = min(s_tag_tag, q - s_tag_tag)
        recid = ry & 1
        if s_tag_tag > q - s_tag_tag:
            recid ^= 1
        return SignatureRecid(s=s, r=rx, recid=recid)


def verify(signature: Signature, pubkey: Point, message: int) -> None:
    """Raise :class:`InvalidSig` unless ``signature`` is a low-s signature of ``message``."""
    q = CURVE_ORDER
    s_inv = Scalar(signature.s).invert()
    if s_inv is None:
        raise InvalidSig("s is not invertible")
    e = Scalar(message % q)
    u1 = Point.generator() * (e * s_inv)
    u2 = pubkey * (Scalar(signature.r) * s_inv)
    total = u1 + u2
    if total.x is None:
        raise InvalidSig("signature yields the point at infinity")
    same_r = hmac.compare_digest(int_to_bytes(signature.r), int_to_bytes(total.x))
    # the second condition guards against malleability
    if not (same_r and signature.s < q - signature.s):
        raise InvalidSig("signature does not verify")


def generate_h1_h2_n_tilde() -> tuple[int, int, int, int]:
    """Return ``(N_tilde, h1, h2, xhi)`` with ``h2 = h1^(-xhi) mod N_tilde``."""
    ek_tilde, dk_tilde = generate_keypair()
    n = ek_tilde.n
    phi = (dk_tilde.p - 1) * (dk_tilde.q - 1)
    while True:
        h1 = sample_below(phi)
        h1_inv = mod_inv(h1, n)
        if h1_inv is not None:
            break
    xhi = sample_below(1 << 256)
    h2 = pow(h1_inv, xhi, n)
    return n, h1, h2, xhi