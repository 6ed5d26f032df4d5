"""Unit tests for the injectable random sources."""

import pytest

from src.bank_common.random_source import SequenceRandomSource, SystemRandomSource


def test_system_source_respects_range() -> None:
    rng = SystemRandomSource()
    for _ in range(50):
        assert 100 <= rng.randint(100, 999) <= 999


def test_system_source_choice() -> None:
    assert SystemRandomSource().choice((1, 2, 3)) in (1, 2, 3)


def test_sequence_replays_in_order() -> None:
    rng = SequenceRandomSource([500, -25])
    assert rng.randint(100, 999) == 500
    assert rng.choice((50, -25, 100)) == -25


def test_push_appends() -> None:
    rng = SequenceRandomSource()
    rng.push(1, 2)
    assert rng.randint(0, 5) == 1
    assert rng.randint(0, 5) == 2


def test_exhausted_raises() -> None:
    with pytest.raises(LookupError):
        SequenceRandomSource().randint(0, 1)


def test_out_of_range_rejected() -> None:
    with pytest.raises(ValueError):
        SequenceRandomSource([5000]).randint(100, 999)


def test_choice_must_be_an_option() -> None:
    with pytest.raises(ValueError):
        SequenceRandomSource([7]).choice((1, 2, 3))
