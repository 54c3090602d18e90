# mpecdsa

Two-party ECDSA signing over secp256k1 in the style of Lindell (2017), with
the building blocks it uses. Only the Python standard library is needed.

This is research code. Do not use it to protect real funds.

## Modules

- `mpecdsa.arith`: random sampling (`sample_below`, `sample_range`,
  `sample_bits`, `sample_coprime`), `mod_inv`, Miller-Rabin
  (`is_probable_prime`), `generate_prime`, and big-endian
  `int_to_bytes` / `int_from_bytes`.
- `mpecdsa.curve`: `Scalar` (integers modulo the group order) and `Point`
  (affine points with `+`, `-` and scalar `*`). It also provides
  `Point.generator()`, a second base `Point.base_point2()`,
  `Point.infinity()`, and SEC1 `to_bytes` / `from_bytes`.
- `mpecdsa.hashing`: SHA-256 over integers (`hash_ints`) or points
  (`hash_points`), and the hash commitment `create_commitment`.
- `mpecdsa.paillier`: `EncryptionKey`, `DecryptionKey`, `generate_keypair`
  (2048-bit modulus by default), `encrypt`, `encrypt_with_randomness`,
  `decrypt`, homomorphic `add` and `mul`, and `sample_randomness`.
- `mpecdsa.sigma`: Schnorr `DLogProof` and the equal-discrete-log
  `ECDDHProof` over an `ECDDHStatement`.
- `mpecdsa.zkproofs`: `DLogStatement`, `CompositeDLogProof`,
  `NiCorrectKeyProof` (the Paillier modulus is coprime to phi(N)), and
  `RangeProofNi` (a Paillier ciphertext encrypts a small value).
- `mpecdsa.range_proofs`: `AliceProof`, `BobProof`, `BobCheck` and
  `BobProofExt` for MtA, plus `sample_from_paillier_key`.
- `mpecdsa.mta`: multiplicative-to-additive conversion with `MessageA` and
  `MessageB`. The outputs satisfy `alpha + beta = a * b` modulo the group order.
- `mpecdsa.zk_pdl`: the interactive `Prover` / `Verifier` proof that a
  ciphertext encrypts the discrete log of a point. It is sound for
  `x < q / 3`.
- `mpecdsa.zk_pdl_with_slack`: the non-interactive `PDLwSlackProof`,
  together with `commitment_unknown_order`.
- `mpecdsa.lindell_2017.party_one` and `mpecdsa.lindell_2017.party_two`:
  the two sides of key generation, Paillier setup checks, ephemeral key
  exchange and signing.
- `mpecdsa.errors`: the exceptions raised on failure.

## Signing with two parties

```python
from mpecdsa.lindell_2017 import party_one, party_two

# Key generation
p1_msg1, comm_witness, p1_keys = party_one.KeyGenFirstMsg.create_commitments()
p2_msg1, p2_keys = party_two.KeyGenFirstMsg.create()
p1_msg2 = party_one.KeyGenSecondMsg.verify_and_decommit(comm_witness, p2_msg1.d_log_proof)
party_two.KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_msg1, p1_msg2)

paillier_pair = party_one.PaillierKeyPair.generate_keypair_and_encrypted_share(p1_keys)
p1_private = party_one.Party1Private.set_private_key(p1_keys, paillier_pair)
p2_private = party_two.Party2Private.set_private_key(p2_keys)

# Party two checks party one's Paillier key and encrypted share
p2_paillier = party_two.PaillierPublic(
    ek=paillier_pair.ek, encrypted_secret_share=paillier_pair.encrypted_share
)
party_two.PaillierPublic.verify_ni_proof_correct_key(
    paillier_pair.generate_ni_proof_correct_key(), p2_paillier.ek
)
statement, proof, composite_dlog_proof = paillier_pair.pdl_proof(p1_private)
p2_paillier.pdl_verify(composite_dlog_proof, statement, proof, p1_msg2.comm_witness.public_share)

# Ephemeral keys
eph_p2_msg1, eph_witness, eph_p2_keys = party_two.EphKeyGenFirstMsg.create_commitments()
eph_p1_msg1, eph_p1_keys = party_one.EphKeyGenFirstMsg.create()
eph_p2_msg2 = party_two.EphKeyGenSecondMsg.verify_and_decommit(eph_witness, eph_p1_msg1)
party_one.EphKeyGenSecondMsg.verify_commitments_and_dlog_proof(eph_p2_msg1, eph_p2_msg2)

# Signing
message = 1234
partial = party_two.PartialSig.compute(
    paillier_pair.ek, paillier_pair.encrypted_share, p2_private,
    eph_p2_keys, eph_p1_msg1.public_share, message,
)
signature = party_one.Signature.compute(
    p1_private, partial.c3, eph_p1_keys, eph_p2_msg2.comm_witness.public_share,
)
pubkey = party_one.compute_pubkey(p1_private, p2_msg1.public_share)
party_one.verify(signature, pubkey, message)  # raises InvalidSig on failure
```

Signatures always use the low `s`.
`Signature.compute_with_recid` returns a `SignatureRecid` that also carries
the recovery id.

`Party1Private.refresh_private_key(factor)` multiplies party one's share by
`factor`. It re-encrypts the share under a fresh Paillier key and returns a
`RefreshedKey` that holds the new key, the ciphertext, the new private part
and the proofs for party two. Party two matches it with
`Party2Private.update_private_key(factor)`.

## Multiplicative to additive

```python
from mpecdsa.curve import Scalar
from mpecdsa.mta import MessageA, MessageB
from mpecdsa.paillier import generate_keypair

ek, dk = generate_keypair()
a, b = Scalar.random(), Scalar.random()
m_a, _ = MessageA.a(a, ek, [])          # pass DLogStatements to add range proofs
m_b, beta, _, _ = MessageB.b(b, ek, m_a, [])
alpha, _ = m_b.verify_proofs_get_alpha(dk, a)
assert alpha + beta == a * b
```

## Errors

A failed check raises an exception. Nothing returns a status value, with
two exceptions: `AliceProof.verify`, `BobProof.verify` and
`BobProofExt.verify` return a `bool`, and so does
`MessageB.verify_b_against_public`. All package exceptions derive from
`mpecdsa.errors.ProtocolError`:

- `InvalidKey`
- `InvalidSig`
- `ProofError`
- `IncorrectProof`
- `mpecdsa.zk_pdl.ZkPdlError`
- `mpecdsa.zk_pdl_with_slack.ZkPdlWithSlackError`
- `mpecdsa.lindell_2017.party_two.PartyTwoError`

## What it does not do

- It is a library. It has no command line, no server and no network
  transport. Messages are plain dataclasses that the caller moves between
  the parties.
- It has no serialization format and no storage for keys or messages.
- It does not encrypt key shares in segments for verifiable backup or
  recovery.
- The N-tilde setup in `generate_h1_h2_n_tilde` uses ordinary primes,
  not safe primes.

## Installing and testing

```
pip install .
pip install ".[test]"   # adds pytest
pytest
```

Paillier keys are built from fresh 1024-bit primes in pure Python, so key
generation and the tests that use it take a few seconds.