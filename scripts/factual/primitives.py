"""Leaf facts: constraints on a value that do not wrap other facts.

Factories:
    always()                 — every value passes
    never(reason)            — no value passes; mutate raises MutationExhausted
    eq(value) / ne(value)    — equality / inequality with a reference value
    in_set(options)          — membership in a finite collection
    in_range(low, high)      — inclusive numeric range, either bound optional
    same() / different()     — the two items of a pair are equal / differ
    consecutive_int(start)   — stateful: start, start+1, start+2, ...
    distinct()               — stateful: no value may repeat

Every mutate() leaves an already-satisfying value untouched, so that
conjunctions of independent facts converge in a single pass.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Collection, Sequence

from factual.check import CheckResult
from factual.entropy import FLOAT_SPAN, INT_MAX, INT_MIN
from factual.errors import MutationExhausted
from factual.fact import Fact
from factual.interfaces import Entropy
from factual.limits import BRUTE_ATTEMPTS

Generate = Callable[[Entropy], Any]


def _draw(like: Any, entropy: Entropy, generate: Generate | None, fact: Fact) -> Any:
    """Draw one candidate value, via generate if given, else entropy.arbitrary."""
    if generate is not None:
        return generate(entropy)
    try:
        return entropy.arbitrary(like)
    except TypeError as err:
        raise MutationExhausted(fact.describe(), str(err)) from err


# ─── Constant facts ───────────────────────────────────────────────────────────


class AlwaysFact(Fact[Any]):
    def check(self, obj: Any) -> CheckResult:
        return CheckResult.passing()

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        return obj

    def structure(self) -> str:
        return "always"

    def complement(self) -> Fact[Any]:
        return NeverFact("negation of always")


class NeverFact(Fact[Any]):
    def __init__(self, reason: str) -> None:
        self.reason = reason

    def check(self, obj: Any) -> CheckResult:
        return CheckResult.fail(f"never: {self.reason}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        raise MutationExhausted(self.describe(), "never() cannot be satisfied")

    def structure(self) -> str:
        return f"never({self.reason})"

    def complement(self) -> Fact[Any]:
        return AlwaysFact()


def always() -> AlwaysFact:
    """A constraint which every value meets."""
    return AlwaysFact()


def never(reason: str) -> NeverFact:
    """A constraint which no value meets."""
    return NeverFact(reason)


# ─── Equality ─────────────────────────────────────────────────────────────────


class EqFact(Fact[Any]):
    """Equality (equal=True) or inequality (equal=False) with a reference value.

    Inequality mutation draws candidates from `generate(entropy)` if given,
    otherwise from entropy.arbitrary(value), until one differs.
    """

    def __init__(
        self,
        value: Any,
        equal: bool = True,
        generate: Generate | None = None,
        attempts: int = BRUTE_ATTEMPTS,
    ) -> None:
        self.value = value
        self.equal = equal
        self.generate = generate
        self.attempts = attempts

    def check(self, obj: Any) -> CheckResult:
        if self.equal:
            return CheckResult.single(obj == self.value, lambda: f"expected {obj!r} == {self.value!r}")
        return CheckResult.single(obj != self.value, lambda: f"expected {obj!r} != {self.value!r}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if self.equal:
            return self.value
        for _ in range(self.attempts):
            if obj != self.value:
                return obj
            obj = _draw(self.value, entropy, self.generate, self)
        if obj != self.value:
            return obj
        raise MutationExhausted(
            self.describe(),
            f"no value different from {self.value!r} found in {self.attempts} draw(s)",
        )

    def structure(self) -> str:
        return f"{'eq' if self.equal else 'ne'}({self.value!r})"

    def complement(self) -> Fact[Any]:
        return EqFact(self.value, not self.equal, self.generate, self.attempts)


def eq(value: Any) -> EqFact:
    """The value must equal `value`. Mutation sets it to `value`."""
    return EqFact(value, equal=True)


def ne(
    value: Any,
    generate: Generate | None = None,
    attempts: int = BRUTE_ATTEMPTS,
) -> EqFact:
    """The value must differ from `value`.

    Mutation leaves a differing value alone; otherwise it draws new values
    (from generate(entropy), or entropy.arbitrary) until one differs, and
    raises MutationExhausted after `attempts` draws.
    """
    return EqFact(value, equal=False, generate=generate, attempts=attempts)


# ─── Membership ───────────────────────────────────────────────────────────────


def _ordered(options: Collection[Any]) -> tuple[Any, ...]:
    # Sets iterate in hash order, which varies between processes for str;
    # sort them so that choose() is reproducible for a given seed.
    if isinstance(options, (set, frozenset)):
        try:
            return tuple(sorted(options))
        except TypeError:
            return tuple(sorted(options, key=repr))
    return tuple(options)


class InSetFact(Fact[Any]):
    def __init__(self, options: Collection[Any]) -> None:
        self.options: tuple[Any, ...] = _ordered(options)

    def check(self, obj: Any) -> CheckResult:
        return CheckResult.single(
            obj in self.options,
            lambda: f"expected {obj!r} to be one of {list(self.options)!r}",
        )

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if obj in self.options:
            return obj
        if not self.options:
            raise MutationExhausted(self.describe(), "no options to choose from")
        return entropy.choose(self.options)

    def structure(self) -> str:
        return f"in_set({list(self.options)!r})"


def in_set(options: Collection[Any]) -> InSetFact:
    """The value must be one of `options`.

    Mutation chooses uniformly among the options via the entropy source and
    raises MutationExhausted if there are none. Sets are sorted first so the
    choice is reproducible for a given seed.
    """
    return InSetFact(options)


# ─── Ranges ───────────────────────────────────────────────────────────────────


def _is_float(*values: Any) -> bool:
    return any(isinstance(v, float) for v in values)


def _fill_bounds(low: Any, high: Any, floating: bool) -> tuple[Any, Any]:
    """Replace missing bounds with a finite span around the present one."""
    if floating:
        default_low, default_high, span = -FLOAT_SPAN, FLOAT_SPAN, 2 * FLOAT_SPAN
    else:
        default_low, default_high, span = INT_MIN, INT_MAX, INT_MAX - INT_MIN
    if low is None and high is None:
        return default_low, default_high
    if low is None:
        return high - span, high
    if high is None:
        return low, low + span
    return low, high


class InRangeFact(Fact[Any]):
    """low <= value <= high, where a None bound is unbounded."""

    def __init__(self, low: Any = None, high: Any = None) -> None:
        self.low = low
        self.high = high

    def contains(self, obj: Any) -> bool:
        # NaN compares false against both bounds; it lies in no range
        if obj != obj:
            return False
        if self.low is not None and obj < self.low:
            return False
        if self.high is not None and obj > self.high:
            return False
        return True

    def check(self, obj: Any) -> CheckResult:
        try:
            inside = self.contains(obj)
        except TypeError:
            return CheckResult.fail(f"expected a number within {self._span()}, got {obj!r}")
        return CheckResult.single(inside, lambda: f"expected {obj!r} to be within {self._span()}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if self.low is not None and self.high is not None and self.low > self.high:
            raise MutationExhausted(self.describe(), f"empty range {self._span()}")
        if self.check(obj).ok:
            return obj
        floating = _is_float(self.low, self.high, obj)
        low, high = _fill_bounds(self.low, self.high, floating)
        if floating:
            return entropy.float_in_range(float(low), float(high))
        return entropy.int_in_range(low, high)

    def _span(self) -> str:
        low = "" if self.low is None else repr(self.low)
        high = "" if self.high is None else repr(self.high)
        return f"{low}..{high}"

    def structure(self) -> str:
        return f"in_range({self._span()})"

    def complement(self) -> Fact[Any]:
        return OutsideRangeFact(self.low, self.high)


class OutsideRangeFact(Fact[Any]):
    """value < low or value > high. The complement of InRangeFact."""

    def __init__(self, low: Any = None, high: Any = None) -> None:
        self.low = low
        self.high = high

    def check(self, obj: Any) -> CheckResult:
        inner = InRangeFact(self.low, self.high)
        try:
            inside = inner.contains(obj)
        except TypeError:
            return CheckResult.fail(f"expected a number outside {inner._span()}, got {obj!r}")
        return CheckResult.single(not inside, lambda: f"expected {obj!r} to be outside {inner._span()}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if self.check(obj).ok:
            return obj
        floating = _is_float(self.low, self.high, obj)
        sides: list[tuple[Any, Any]] = []
        if self.low is not None:
            below = math.nextafter(self.low, -math.inf) if floating else self.low - 1
            sides.append((None, below))
        if self.high is not None:
            above = math.nextafter(self.high, math.inf) if floating else self.high + 1
            sides.append((above, None))
        if not sides:
            raise MutationExhausted(self.describe(), "nothing lies outside an unbounded range")
        low, high = _fill_bounds(*entropy.choose(sides), floating)
        if floating:
            return entropy.float_in_range(float(low), float(high))
        return entropy.int_in_range(low, high)

    def structure(self) -> str:
        return f"outside({InRangeFact(self.low, self.high)._span()})"

    def complement(self) -> Fact[Any]:
        return InRangeFact(self.low, self.high)


def in_range(low: Any = None, high: Any = None) -> InRangeFact:
    """The value must lie in the inclusive range [low, high].

    Either bound may be None for an unbounded side. Integer bounds produce
    integers; a float bound (or float value) produces floats. Mutating
    against an empty range (low > high) raises MutationExhausted.
    """
    return InRangeFact(low, high)


# ─── Pairs ────────────────────────────────────────────────────────────────────


class SameFact(Fact[Sequence[Any]]):
    """The two items of a pair are equal (equal=True) or differ."""

    def __init__(
        self,
        equal: bool = True,
        generate: Generate | None = None,
        attempts: int = BRUTE_ATTEMPTS,
    ) -> None:
        self.equal = equal
        self.generate = generate
        self.attempts = attempts

    def check(self, obj: Sequence[Any]) -> CheckResult:
        a, b = obj
        if self.equal:
            return CheckResult.single(a == b, lambda: f"expected {a!r} == {b!r}")
        return CheckResult.single(a != b, lambda: f"expected {a!r} != {b!r}")

    def mutate(self, obj: Sequence[Any], entropy: Entropy) -> Sequence[Any]:
        a, b = obj
        if self.equal:
            a = b
        else:
            for _ in range(self.attempts):
                if a != b:
                    break
                a = _draw(b, entropy, self.generate, self)
            if a == b:
                raise MutationExhausted(
                    self.describe(), f"no value different from {b!r} found in {self.attempts} draw(s)"
                )
        if isinstance(obj, list):
            obj[0] = a
            return obj
        if hasattr(obj, "_fields"):
            return type(obj)(a, b)
        return (a, b)

    def structure(self) -> str:
        return "same" if self.equal else "different"

    def complement(self) -> Fact[Sequence[Any]]:
        return SameFact(not self.equal, self.generate, self.attempts)


def same() -> SameFact:
    """Both items of a pair must be equal. Mutation copies the second into the first."""
    return SameFact(equal=True)


def different(generate: Generate | None = None) -> SameFact:
    """Both items of a pair must differ. Mutation redraws the first item."""
    return SameFact(equal=False, generate=generate)


# ─── Stateful facts ───────────────────────────────────────────────────────────


class ConsecutiveIntFact(Fact[int]):
    """Expects initial, initial + 1, ... on successive check/mutate calls.

    Both check() and mutate() advance the counter, so the same instance must
    not be used to check a sequence it has just built: use a fresh instance
    (or a snapshot taken before building).
    """

    stateful = True

    def __init__(self, initial: int = 0) -> None:
        self.initial = initial
        self.counter = initial

    def check(self, obj: int) -> CheckResult:
        expected = self.counter
        self.counter += 1
        return CheckResult.single(
            obj == expected,
            lambda: f"expected {expected!r} (consecutive from {self.initial}), got {obj!r}",
        )

    def mutate(self, obj: int, entropy: Entropy) -> int:
        expected = self.counter
        self.counter += 1
        return expected

    def structure(self) -> str:
        return f"consecutive_int({self.initial})"


class DistinctFact(Fact[Any]):
    """Every value checked or mutated must differ from all earlier ones."""

    stateful = True

    def __init__(self, generate: Generate | None = None, attempts: int = BRUTE_ATTEMPTS) -> None:
        self.generate = generate
        self.attempts = attempts
        self.seen: list[Any] = []

    def check(self, obj: Any) -> CheckResult:
        repeated = obj in self.seen
        self.seen.append(obj)
        return CheckResult.single(not repeated, lambda: f"expected {obj!r} not to repeat an earlier value")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        for _ in range(self.attempts):
            if obj not in self.seen:
                break
            obj = _draw(obj, entropy, self.generate, self)
        if obj in self.seen:
            raise MutationExhausted(self.describe(), f"no unseen value found in {self.attempts} draw(s)")
        self.seen.append(obj)
        return obj

    def structure(self) -> str:
        return "distinct"


def consecutive_int(initial: int = 0) -> ConsecutiveIntFact:
    """Stateful: successive values must be initial, initial + 1, ..."""
    return ConsecutiveIntFact(initial)


def distinct(generate: Generate | None = None, attempts: int = BRUTE_ATTEMPTS) -> DistinctFact:
    """Stateful: every value must differ from every value seen before it."""
    return DistinctFact(generate, attempts)
