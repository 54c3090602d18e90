from mpecdsa.arith import int_from_bytes
from mpecdsa.curve import Point
from mpecdsa.hashing import create_commitment, hash_ints, hash_points

EMPTY_SHA256 = int("e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855", 16)


def test_empty_hash():
    assert hash_ints() == EMPTY_SHA256
    assert hash_points() == EMPTY_SHA256


def test_zero_encodes_as_nothing():
    assert hash_ints(0) == EMPTY_SHA256


def test_order_matters():
    assert hash_ints(1, 2) == hash_ints(1, 2)
    assert hash_ints(1, 2) != hash_ints(2, 1)
    assert hash_ints(1, 2).bit_length() <= 256


def test_points_hash_uncompressed_encoding():
    g = Point.generator()
    assert hash_points(g) == hash_ints(int_from_bytes(g.to_bytes(False)))


def test_points_order_matters():
    g, h = Point.generator(), Point.base_point2()
    assert hash_points(g, h) == hash_points(g, h)
    assert hash_points(g, h) != hash_points(h, g)


def test_commitment_binds_message_and_blinding():
    commitment = create_commitment(1234, 5678)
    assert commitment == hash_ints(1234, 5678)
    assert create_commitment(1234, 5679) != commitment
    assert create_commitment(1235, 5678) != commitment