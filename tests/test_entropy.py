"""Tests for factual.entropy — the seeded Entropy adapter.

Coverage:
    - Same seed, same sequence of draws (reproducibility)
    - int_in_range / float_in_range bounds and invalid ranges
    - choose: single option, empty options
    - arbitrary: shape preservation for scalars, enums, collections,
      dataclasses and namedtuples; TypeError for unsupported shapes
    - random_entropy: generated seed is exposed for replay
"""

from __future__ import annotations

import enum

import pytest

from factual.entropy import (
    INT_MAX,
    INT_MIN,
    MAX_COLLECTION_LEN,
    SeededEntropy,
    random_entropy,
)
from factual.interfaces import Entropy
from conftest import Pair, User, _entropy


class Colour(enum.Enum):
    RED = "red"
    GREEN = "green"


class TestReproducibility:
    def test_same_seed_same_draws(self) -> None:
        a, b = _entropy(7), _entropy(7)
        assert [a.int_in_range(0, 1000) for _ in range(20)] == [
            b.int_in_range(0, 1000) for _ in range(20)
        ]

    def test_same_seed_same_arbitrary_record(self) -> None:
        like = {"id": 0, "name": "", "tags": [""]}
        assert _entropy(3).arbitrary(like) == _entropy(3).arbitrary(like)

    def test_seed_is_exposed(self) -> None:
        assert SeededEntropy(99).seed == 99
        assert repr(SeededEntropy(99)) == "SeededEntropy(seed=99)"

    def test_random_entropy_can_be_replayed(self) -> None:
        e = random_entropy()
        replay = SeededEntropy(e.seed)
        assert e.int_in_range(0, 10**6) == replay.int_in_range(0, 10**6)

    def test_satisfies_entropy_protocol(self) -> None:
        assert isinstance(SeededEntropy(1), Entropy)


class TestRanges:
    def test_int_in_range_inclusive(self, entropy: SeededEntropy) -> None:
        draws = {entropy.int_in_range(1, 3) for _ in range(200)}
        assert draws == {1, 2, 3}

    def test_degenerate_range(self, entropy: SeededEntropy) -> None:
        assert entropy.int_in_range(5, 5) == 5

    def test_float_in_range(self, entropy: SeededEntropy) -> None:
        for _ in range(50):
            assert 0.0 <= entropy.float_in_range(0.0, 1.0) <= 1.0

    @pytest.mark.parametrize("method", ["int_in_range", "float_in_range"])
    def test_invalid_range_raises(self, entropy: SeededEntropy, method: str) -> None:
        with pytest.raises(ValueError, match="invalid range"):
            getattr(entropy, method)(2, 1)


class TestChoose:
    def test_single_option(self, entropy: SeededEntropy) -> None:
        assert entropy.choose(["only"]) == "only"

    def test_empty_options_raise(self, entropy: SeededEntropy) -> None:
        with pytest.raises(ValueError, match="empty"):
            entropy.choose([])

    def test_every_option_reachable(self, entropy: SeededEntropy) -> None:
        assert {entropy.choose("abc") for _ in range(200)} == {"a", "b", "c"}


class TestArbitrary:
    @pytest.mark.parametrize("like", [0, 1.5, "", b"", True])
    def test_scalar_type_preserved(self, entropy: SeededEntropy, like: object) -> None:
        assert type(entropy.arbitrary(like)) is type(like)

    def test_int_within_default_bounds(self, entropy: SeededEntropy) -> None:
        for _ in range(50):
            assert INT_MIN <= entropy.arbitrary(0) <= INT_MAX

    def test_none_stays_none(self, entropy: SeededEntropy) -> None:
        assert entropy.arbitrary(None) is None

    def test_enum_member(self, entropy: SeededEntropy) -> None:
        assert isinstance(entropy.arbitrary(Colour.RED), Colour)

    def test_dict_keeps_keys(self, entropy: SeededEntropy) -> None:
        value = entropy.arbitrary({"x": 0, "name": ""})
        assert set(value) == {"x", "name"}
        assert isinstance(value["x"], int)
        assert isinstance(value["name"], str)

    def test_list_is_homogeneous_and_bounded(self, entropy: SeededEntropy) -> None:
        for _ in range(20):
            value = entropy.arbitrary([0])
            assert len(value) <= MAX_COLLECTION_LEN
            assert all(isinstance(v, int) for v in value)

    def test_empty_list_stays_empty(self, entropy: SeededEntropy) -> None:
        assert entropy.arbitrary([]) == []

    def test_tuple_elementwise(self, entropy: SeededEntropy) -> None:
        value = entropy.arbitrary((0, ""))
        assert isinstance(value, tuple)
        assert isinstance(value[0], int) and isinstance(value[1], str)

    def test_namedtuple_type_preserved(self, entropy: SeededEntropy) -> None:
        assert isinstance(entropy.arbitrary(Pair(0, 0)), Pair)

    def test_dataclass_fieldwise(self, entropy: SeededEntropy) -> None:
        value = entropy.arbitrary(User())
        assert isinstance(value, User)
        assert isinstance(value.age, int)
        assert value.email is None

    def test_unsupported_shape_raises_type_error(self, entropy: SeededEntropy) -> None:
        with pytest.raises(TypeError, match="object"):
            entropy.arbitrary(object())
