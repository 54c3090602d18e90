import dataclasses
from typing import Any

import pytest

from mpecdsa.curve import Point, Scalar
from mpecdsa.paillier import encrypt_with_randomness, generate_keypair, sample_randomness
from mpecdsa.zk_pdl import (
    PDLStatement,
    PDLWitness,
    Prover,
    Verifier,
    ZkPdlError,
)


@pytest.fixture(scope="module")
def keypair():
    return generate_keypair(1024)


def _setup(keypair):
    ek, dk = keypair
    randomness = sample_randomness(ek)
    x = Scalar(int(Scalar.random()) // 3)
    statement = PDLStatement(
        ciphertext=encrypt_with_randomness(ek, int(x), randomness),
        ek=ek,
        q_point=Point.generator() * x,
        g_point=Point.generator(),
    )
    return statement, PDLWitness(x=x, r=randomness, dk=dk)


@dataclasses.dataclass
class _Exchange:
    statement: Any
    witness: Any
    verifier_message1: Any
    verifier_state: Any
    prover_message1: Any
    prover_state: Any
    verifier_message2: Any = None
    prover_message2: Any = None


def _exchange(keypair, steps=4):
    """Run the protocol up to the given number of messages."""
    statement, witness = _setup(keypair)
    v1, v_state = Verifier.message1(statement)
    p1, p_state = Prover.message1(witness, statement, v1)
    run = _Exchange(statement, witness, v1, v_state, p1, p_state)
    if steps >= 3:
        run.verifier_message2 = Verifier.message2(p1, statement, v_state)
    if steps >= 4:
        run.prover_message2 = Prover.message2(v1, run.verifier_message2, witness, p_state)
    return run


def test_zk_pdl(keypair):
    run = _exchange(keypair)
    state = run.verifier_state
    assert Verifier.finalize(run.prover_message1, run.prover_message2, state) is None
    assert state.c_hat == run.prover_message1.c_hat
    assert run.prover_state.alpha == state.a * int(run.witness.x) + state.b
    assert run.prover_message2.decommit.q_hat == state.q_tag


def _wrong_witness(run):
    return run.verifier_message2, dataclasses.replace(run.witness, x=run.witness.x + 1)


def _bad_verifier_opening(run):
    message = run.verifier_message2
    return dataclasses.replace(message, blindness=message.blindness + 1), run.witness


@pytest.mark.parametrize("tamper", [_wrong_witness, _bad_verifier_opening])
def test_prover_message2_rejected(keypair, tamper):
    run = _exchange(keypair, steps=3)
    verifier_message2, witness = tamper(run)
    with pytest.raises(ZkPdlError):
        Prover.message2(run.verifier_message1, verifier_message2, witness, run.prover_state)


def _bad_prover_opening(run):
    decommit = run.prover_message2.decommit
    bad = dataclasses.replace(decommit, blindness=decommit.blindness + 1)
    return dataclasses.replace(run.prover_message2, decommit=bad), run.verifier_state


def _wrong_point(run):
    state = run.verifier_state
    return run.prover_message2, dataclasses.replace(
        state, q_tag=state.q_tag + Point.generator()
    )


@pytest.mark.parametrize("tamper", [_bad_prover_opening, _wrong_point])
def test_finalize_rejected(keypair, tamper):
    run = _exchange(keypair)
    prover_message2, state = tamper(run)
    with pytest.raises(ZkPdlError):
        Verifier.finalize(run.prover_message1, prover_message2, state)


def test_verifier_rejects_range_proof_for_other_ciphertext(keypair):
    run = _exchange(keypair, steps=2)
    other_statement, _ = _setup(keypair)
    with pytest.raises(ZkPdlError):
        Verifier.message2(run.prover_message1, other_statement, run.verifier_state)
    assert run.verifier_state.c_hat == run.prover_message1.c_hat