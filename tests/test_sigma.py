import dataclasses

import pytest

from mpecdsa.curve import Point, Scalar
from mpecdsa.errors import ProofError
from mpecdsa.sigma import DLogProof, ECDDHProof, ECDDHStatement


def _ddh_statement(secret, second_secret=None):
    if second_secret is None:
        second_secret = secret
    g1 = Point.generator()
    g2 = Point.base_point2()
    return ECDDHStatement(g1=g1, h1=g1 * secret, g2=g2, h2=g2 * second_secret)


@pytest.mark.parametrize(
    "make_secret", [lambda: Scalar(10), Scalar.random], ids=["fixed", "random"]
)
def test_dlog_proof_round_trip(make_secret):
    secret = make_secret()
    proof = DLogProof.prove(secret)
    assert proof.pk == Point.generator() * secret
    assert proof.pk == secret * Point.generator()
    assert proof.verify() is None


def test_dlog_proofs_use_fresh_nonces():
    secret = Scalar.random()
    first, second = DLogProof.prove(secret), DLogProof.prove(secret)
    assert first.pk == second.pk
    assert first.pk_t_rand_commitment != second.pk_t_rand_commitment


DLOG_TAMPERS = {
    "response": lambda p: {"challenge_response": p.challenge_response + 1},
    "public_key": lambda p: {"pk": p.pk + Point.generator()},
}


@pytest.mark.parametrize("tamper", DLOG_TAMPERS.values(), ids=list(DLOG_TAMPERS))
def test_dlog_proof_tampered_rejected(tamper):
    proof = DLogProof.prove(Scalar.random())
    bad = dataclasses.replace(proof, **tamper(proof))
    with pytest.raises(ProofError):
        bad.verify()


def test_ddh_proof_round_trip():
    secret = Scalar.random()
    statement = _ddh_statement(secret)
    proof = ECDDHProof.prove(secret, statement)
    assert proof.verify(statement) is None
    assert proof.a1 != proof.a2


def _unequal_logs(secret):
    statement = _ddh_statement(secret, secret + 1)
    return ECDDHProof.prove(secret, statement), statement


def _other_statement(secret):
    proof = ECDDHProof.prove(secret, _ddh_statement(secret))
    return proof, _ddh_statement(secret + 1)


def _tampered_response(secret):
    statement = _ddh_statement(secret)
    proof = ECDDHProof.prove(secret, statement)
    return dataclasses.replace(proof, z=proof.z + 1), statement


@pytest.mark.parametrize("case", [_unequal_logs, _other_statement, _tampered_response])
def test_ddh_proof_rejected(case):
    proof, statement = case(Scalar.random())
    with pytest.raises(ProofError):
        proof.verify(statement)