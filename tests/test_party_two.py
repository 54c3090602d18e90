import dataclasses
import math
from types import SimpleNamespace

import pytest

from mpecdsa.arith import int_from_bytes, sample_below, sample_bits
from mpecdsa.curve import CURVE_ORDER, Point, Scalar
from mpecdsa.errors import IncorrectProof, ProofError
from mpecdsa.hashing import create_commitment, hash_points
from mpecdsa.lindell_2017.party_two import (
    EphKeyGenFirstMsg,
    EphKeyGenSecondMsg,
    KeyGenFirstMsg,
    KeyGenSecondMsg,
    PaillierPublic,
    PartialSig,
    Party2Private,
    PartyTwoError,
    compute_pubkey,
)
from mpecdsa.mta import MessageB
from mpecdsa.paillier import (
    decrypt,
    encrypt,
    encrypt_with_randomness,
    generate_keypair,
    sample_randomness,
)
from mpecdsa.sigma import DLogProof, ECDDHProof, ECDDHStatement
from mpecdsa.zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement, PDLwSlackWitness
from mpecdsa.zkproofs import CompositeDLogProof, DLogStatement, NiCorrectKeyProof


@pytest.fixture(scope="module")
def keypair():
    return generate_keypair(1024)


def _point_int(point):
    return int_from_bytes(point.to_bytes(True))


def _party_one_keygen(secret=None, proof=None):
    secret = Scalar.random() if secret is None else secret
    public = Point.generator() * secret
    proof = DLogProof.prove(secret) if proof is None else proof
    pk_blind = sample_bits(256)
    zk_blind = sample_bits(256)
    first = SimpleNamespace(
        pk_commitment=create_commitment(_point_int(public), pk_blind),
        zk_pok_commitment=create_commitment(_point_int(proof.pk_t_rand_commitment), zk_blind),
    )
    witness = SimpleNamespace(
        pk_commitment_blind_factor=pk_blind,
        zk_pok_blind_factor=zk_blind,
        public_share=public,
        d_log_proof=proof,
    )
    return first, SimpleNamespace(comm_witness=witness), secret


def _party_one_eph(secret=None):
    secret = Scalar.random() if secret is None else secret
    g, h = Point.generator(), Point.base_point2()
    public = g * secret
    c = h * secret
    proof = ECDDHProof.prove(secret, ECDDHStatement(g1=g, h1=public, g2=h, h2=c))
    return SimpleNamespace(d_log_proof=proof, public_share=public, c=c), secret


def test_key_gen_first_message():
    first, ec_key = KeyGenFirstMsg.create_with_fixed_secret_share(Scalar(10))
    assert first.public_share == Point.generator() * 10
    assert ec_key.public_share == first.public_share
    assert first.d_log_proof.pk == first.public_share


def test_d_log_proof_party_two_party_one():
    p1_first, p1_second, x1 = _party_one_keygen()
    p2_first, ec_key2 = KeyGenFirstMsg.create()
    result = KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_first, p1_second)
    assert result == KeyGenSecondMsg()
    pubkey = compute_pubkey(ec_key2, p1_second.comm_witness.public_share)
    assert pubkey == p2_first.public_share * x1


def test_commitment_mismatch_raises():
    p1_first, p1_second, _ = _party_one_keygen()
    p1_second.comm_witness.pk_commitment_blind_factor += 1
    with pytest.raises(ProofError):
        KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_first, p1_second)


def test_zk_pok_commitment_mismatch_raises():
    p1_first, p1_second, _ = _party_one_keygen()
    p1_second.comm_witness.zk_pok_blind_factor += 1
    with pytest.raises(ProofError):
        KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_first, p1_second)


def test_bad_dlog_proof_raises():
    secret = Scalar.random()
    proof = DLogProof.prove(secret)
    bad = dataclasses.replace(proof, challenge_response=proof.challenge_response + 1)
    p1_first, p1_second, _ = _party_one_keygen(secret, bad)
    with pytest.raises(ProofError):
        KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_first, p1_second)


def test_update_private_key():
    _, ec_key = KeyGenFirstMsg.create()
    private = Party2Private.set_private_key(ec_key)
    updated = private.update_private_key(3)
    assert updated.x2 == ec_key.secret_share * 3
    assert private.x2 == ec_key.secret_share


def test_to_mta_message_b(keypair):
    ek, dk = keypair
    _, ec_key = KeyGenFirstMsg.create()
    private = Party2Private.set_private_key(ec_key)
    a = Scalar.random()
    message_b, beta = private.to_mta_message_b(ek, encrypt(ek, int(a)))
    alpha, _ = message_b.verify_proofs_get_alpha(dk, a)
    assert alpha + beta == a * ec_key.secret_share
    assert MessageB.verify_b_against_public(ec_key.public_share, message_b.b_proof.pk)


def test_eph_commitments_open():
    first, witness, eph_key = EphKeyGenFirstMsg.create_commitments()
    assert first.pk_commitment == create_commitment(
        _point_int(witness.public_share), witness.pk_commitment_blind_factor
    )
    assert first.zk_pok_commitment == create_commitment(
        hash_points(witness.d_log_proof.a1, witness.d_log_proof.a2), witness.zk_pok_blind_factor
    )
    assert witness.c == Point.base_point2() * eph_key.secret_share
    assert witness.public_share == Point.generator() * eph_key.secret_share


def test_eph_verify_and_decommit():
    _, witness, _ = EphKeyGenFirstMsg.create_commitments()
    p1_first, _ = _party_one_eph()
    second = EphKeyGenSecondMsg.verify_and_decommit(witness, p1_first)
    assert second.comm_witness == witness


def test_eph_verify_rejects_bad_ddh():
    _, witness, _ = EphKeyGenFirstMsg.create_commitments()
    p1_first, _ = _party_one_eph()
    p1_first.c = p1_first.c + Point.generator()
    with pytest.raises(ProofError):
        EphKeyGenSecondMsg.verify_and_decommit(witness, p1_first)


def test_two_party_sign(keypair):
    ek, dk = keypair
    x1 = Scalar(int(Scalar.random()) // 3)
    encrypted_share = encrypt(ek, int(x1))
    p2_first, ec_key2 = KeyGenFirstMsg.create()
    _, _, eph_key2 = EphKeyGenFirstMsg.create_commitments()
    p1_eph_first, k1 = _party_one_eph()

    message = 1234
    partial = PartialSig.compute(
        ek,
        encrypted_share,
        Party2Private.set_private_key(ec_key2),
        eph_key2,
        p1_eph_first.public_share,
        message,
    )

    r_point = eph_key2.public_share * k1
    rx = r_point.x % CURVE_ORDER
    s = Scalar(decrypt(dk, partial.c3)) * k1.invert()
    pubkey = p2_first.public_share * x1

    w = s.invert()
    check = Point.generator() * (Scalar(message) * w) + pubkey * (Scalar(rx) * w)
    assert check.x % CURVE_ORDER == rx


def _pdl_setup(keypair):
    ek_tilde, dk_tilde = generate_keypair(1024)
    n_tilde = ek_tilde.n
    while True:
        h1 = sample_below(dk_tilde.phi)
        if math.gcd(h1, n_tilde) == 1:
            break
    xhi = sample_below(2**256)
    h2 = pow(pow(h1, -1, n_tilde), xhi, n_tilde)
    composite = CompositeDLogProof.prove(DLogStatement(n=n_tilde, g=h1, ni=h2), xhi)

    ek, _ = keypair
    randomness = sample_randomness(ek)
    x = Scalar.random()
    q1 = Point.generator() * x
    c = encrypt_with_randomness(ek, int(x), randomness)
    statement = PDLwSlackStatement(
        ciphertext=c,
        ek=ek,
        q_point=q1,
        g_point=Point.generator(),
        h1=h1,
        h2=h2,
        n_tilde=n_tilde,
    )
    proof = PDLwSlackProof.prove(PDLwSlackWitness(x=x, r=randomness), statement)
    return composite, statement, proof, PaillierPublic(ek=ek, encrypted_secret_share=c), q1


@pytest.fixture(scope="module")
def pdl_setup(keypair):
    return _pdl_setup(keypair)


def test_pdl_verify(pdl_setup):
    composite, statement, proof, paillier_public, q1 = pdl_setup
    assert paillier_public.pdl_verify(composite, statement, proof, q1) is None
    with pytest.raises(PartyTwoError):
        paillier_public.pdl_verify(composite, statement, proof, q1 + Point.generator())


def test_pdl_verify_rejects_other_ciphertext(pdl_setup):
    composite, statement, proof, paillier_public, q1 = pdl_setup
    other = dataclasses.replace(
        paillier_public, encrypted_secret_share=paillier_public.encrypted_secret_share + 1
    )
    with pytest.raises(PartyTwoError):
        other.pdl_verify(composite, statement, proof, q1)


def test_pdl_verify_rejects_bad_proof(pdl_setup):
    composite, statement, proof, paillier_public, q1 = pdl_setup
    bad = dataclasses.replace(proof, s3=proof.s3 + 1)
    with pytest.raises(PartyTwoError):
        paillier_public.pdl_verify(composite, statement, bad, q1)


def test_correct_key_proof_rejects_short_key(keypair):
    ek, dk = keypair
    proof = NiCorrectKeyProof.prove(dk)
    with pytest.raises(IncorrectProof):
        PaillierPublic.verify_ni_proof_correct_key(proof, ek)


def test_correct_key_proof_full_size():
    ek, dk = generate_keypair(2048)
    proof = NiCorrectKeyProof.prove(dk)
    assert PaillierPublic.verify_ni_proof_correct_key(proof, ek) is None
    tampered = NiCorrectKeyProof(sigma=(proof.sigma[0] + 1,) + proof.sigma[1:])
    with pytest.raises(IncorrectProof):
        PaillierPublic.verify_ni_proof_correct_key(tampered, ek)