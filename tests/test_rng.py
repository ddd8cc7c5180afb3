import pytest

from deadcity.core.rng import RNG, SequenceRNG


def test_rng_determinism_same_seed() -> None:
    rng_a = RNG(12345)
    rng_b = RNG(12345)

    ints_a = [rng_a.randint(1, 100) for _ in range(5)]
    ints_b = [rng_b.randint(1, 100) for _ in range(5)]
    floats_a = [rng_a.random() for _ in range(5)]
    floats_b = [rng_b.random() for _ in range(5)]
    choices_a = [rng_a.choice(["a", "b", "c"]) for _ in range(5)]
    choices_b = [rng_b.choice(["a", "b", "c"]) for _ in range(5)]

    assert ints_a == ints_b
    assert floats_a == floats_b
    assert choices_a == choices_b


def test_rng_different_seed() -> None:
    rng_a = RNG(11111)
    rng_b = RNG(22222)

    draws_a = [rng_a.randint(1, 100) for _ in range(5)]
    draws_b = [rng_b.randint(1, 100) for _ in range(5)]

    assert draws_a != draws_b


def test_rng_export_restore_continues_stream() -> None:
    rng = RNG(7)
    rng.random()
    snapshot = rng.export_state()
    expected = [rng.random() for _ in range(3)]

    other = RNG(999)
    other.restore_state(snapshot)

    assert [other.random() for _ in range(3)] == expected
    assert other.seed == 7


def test_rng_restore_rejects_malformed_payload() -> None:
    rng = RNG(1)
    with pytest.raises(ValueError):
        rng.restore_state({"version": 3})


def test_rng_reseed_restarts_stream() -> None:
    rng = RNG(5)
    first = [rng.random() for _ in range(2)]
    rng.reseed(5)
    assert [rng.random() for _ in range(2)] == first
    rng.reseed(6)
    assert rng.seed == 6


def test_rng_choice_empty_sequence_raises() -> None:
    with pytest.raises(ValueError):
        RNG(1).choice([])


def test_sequence_rng_maps_floats_to_ranges() -> None:
    rng = SequenceRNG([0.0, 0.99, 0.5, 0.34])
    assert rng.randint(1, 10) == 1
    assert rng.randint(1, 10) == 10
    assert rng.choice(["a", "b", "c"]) == "b"
    assert rng.random() == 0.34
    assert rng.remaining == 0


def test_sequence_rng_exhaustion_raises() -> None:
    rng = SequenceRNG([0.1])
    rng.random()
    with pytest.raises(IndexError):
        rng.random()
