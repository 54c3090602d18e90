import dataclasses

import pytest

from mpecdsa.arith import mod_inv, sample_below
from mpecdsa.curve import Point, Scalar
from mpecdsa.paillier import encrypt_with_randomness, generate_keypair, sample_randomness
from mpecdsa.zk_pdl_with_slack import (
    PDLwSlackProof,
    PDLwSlackStatement,
    PDLwSlackWitness,
    ZkPdlWithSlackError,
    commitment_unknown_order,
)
from mpecdsa.zkproofs import CompositeDLogProof, DLogStatement

KEY_BITS = 1024


@pytest.fixture(scope="module")
def setup():
    setup_ek, setup_dk = generate_keypair(KEY_BITS)
    order = (setup_dk.p - 1) * (setup_dk.q - 1)
    generator, generator_inv = 0, None
    while generator_inv is None:
        generator = sample_below(order)
        generator_inv = mod_inv(generator, setup_ek.n)
    secret_exp = sample_below(2**256)
    ring = DLogStatement(
        n=setup_ek.n, g=generator, ni=pow(generator_inv, secret_exp, setup_ek.n)
    )
    composite_proof = CompositeDLogProof.prove(ring, secret_exp)
    paillier_ek, _ = generate_keypair(KEY_BITS)
    return ring, composite_proof, paillier_ek


def _statement(setup, plaintext_offset=0):
    ring, _, ek = setup
    randomness = sample_randomness(ek)
    x = Scalar.random()
    statement = PDLwSlackStatement(
        ciphertext=encrypt_with_randomness(ek, int(x) + plaintext_offset, randomness),
        ek=ek,
        q_point=Point.generator() * x,
        g_point=Point.generator(),
        h1=ring.g,
        h2=ring.ni,
        n_tilde=ring.n,
    )
    return statement, PDLwSlackWitness(x=x, r=randomness)


def _proved(setup, plaintext_offset=0):
    statement, witness = _statement(setup, plaintext_offset)
    return PDLwSlackProof.prove(witness, statement), statement


def test_zk_pdl_with_slack(setup):
    ring, composite_proof, _ = setup
    proof, statement = _proved(setup)
    assert composite_proof.verify(ring) is None
    assert proof.verify(statement) is None


def test_zk_pdl_with_slack_soundness(setup):
    ring, composite_proof, _ = setup
    proof, statement = _proved(setup, plaintext_offset=1)
    assert composite_proof.verify(ring) is None
    with pytest.raises(ZkPdlWithSlackError):
        proof.verify(statement)


TAMPERS = {
    "s1": lambda p, s: (dataclasses.replace(p, s1=p.s1 + 1), s),
    "s3": lambda p, s: (dataclasses.replace(p, s3=p.s3 + 1), s),
    "public_point": lambda p, s: (
        p,
        dataclasses.replace(s, q_point=s.q_point + Point.generator()),
    ),
}


@pytest.mark.parametrize("tamper", TAMPERS.values(), ids=list(TAMPERS))
def test_tampered_proof_rejected(setup, tamper):
    proof, statement = tamper(*_proved(setup))
    with pytest.raises(ZkPdlWithSlackError):
        proof.verify(statement)


@pytest.mark.parametrize(
    "x, r, expected",
    [
        (1, 1, 6),
        (3, 2, 72 % 11),
        # 3^-1 mod 11 is 4, so 2 * 4 = 8
        (1, -1, 8),
        (0, -2, 16 % 11),
    ],
)
def test_commitment_values(x, r, expected):
    assert commitment_unknown_order(2, 3, 11, x, r) == expected


def test_commitment_negative_exponent_without_inverse():
    with pytest.raises(ValueError):
        commitment_unknown_order(3, 2, 4, 1, -1)