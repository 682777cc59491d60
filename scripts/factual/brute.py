"""Brute-force helpers: finding satisfying values by search.

Two flavours:
    first_satisfying(candidates, fact) — deterministic scan of an explicit,
        finite candidate sequence; returns the first candidate that passes.
    brute(label, fn)                   — a predicate fact whose mutation is a
        bounded random search over entropy.arbitrary(value).

choice_of(candidates, fact) builds a membership fact on top of
first_satisfying, so that picking a member also respects another fact that
has already been composed (e.g. "one of these users, and active").
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence

from factual.check import CheckResult
from factual.errors import MutationExhausted
from factual.fact import Fact, describe, is_stateful, snapshot
from factual.interfaces import Entropy, FactProtocol
from factual.limits import BRUTE_ATTEMPTS
from factual.primitives import Generate

logger = logging.getLogger(__name__)


def first_satisfying(candidates: Iterable[Any], fact: FactProtocol) -> Any:
    """Return the first candidate, in order, for which fact.check() passes.

    Stateful facts are checked through a fresh snapshot per candidate, so
    rejected candidates do not advance their state.

    Raises MutationExhausted if no candidate passes.
    """
    stateful = is_stateful(fact)
    scanned = 0
    for candidate in candidates:
        scanned += 1
        probe = snapshot(fact) if stateful else fact
        if probe.check(candidate).ok:
            logger.debug("%s: candidate #%d accepted", describe(fact), scanned)
            return candidate
    raise MutationExhausted(
        describe(fact), f"none of {scanned} candidate(s) satisfied the fact"
    )


class ChoiceFact(Fact[Any]):
    """The value is one of `candidates` and also satisfies `fact`.

    Mutation leaves a passing value alone; otherwise it takes the first
    candidate that satisfies `fact`, then runs `fact.mutate` on it once so
    that stateful facts advance exactly as they would for any other value.
    """

    def __init__(self, candidates: Sequence[Any], fact: FactProtocol | None = None) -> None:
        self.candidates: tuple[Any, ...] = tuple(candidates)
        self.fact = fact
        self.stateful = fact is not None and is_stateful(fact)

    def check(self, obj: Any) -> CheckResult:
        result = CheckResult.single(
            obj in self.candidates,
            lambda: f"expected {obj!r} to be one of {len(self.candidates)} candidate(s)",
        )
        if self.fact is not None:
            result = result + self.fact.check(obj)
        return result

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        probe = snapshot(self) if self.stateful else self
        if probe.check(obj).ok:
            if self.fact is not None:
                return self.fact.mutate(obj, entropy)
            return obj
        if self.fact is None:
            if not self.candidates:
                raise MutationExhausted(self.describe(), "no candidates")
            return self.candidates[0]
        found = first_satisfying(self.candidates, self.fact)
        return self.fact.mutate(found, entropy)

    def structure(self) -> str:
        if self.fact is None:
            return f"choice_of({len(self.candidates)})"
        return f"choice_of({len(self.candidates)}, {describe(self.fact)})"


def choice_of(candidates: Sequence[Any], fact: FactProtocol | None = None) -> ChoiceFact:
    """The value must be one of `candidates` (and satisfy `fact`, if given).

    Unlike in_set(), mutation is deterministic: candidates are scanned in
    order and the first acceptable one is used.
    """
    return ChoiceFact(candidates, fact)


class BruteFact(Fact[Any]):
    """A predicate fact that mutates by random search.

    Appropriate when a random value satisfies the predicate with reasonable
    probability (e.g. "is even"). Place it early in a conjunction: its
    mutation replaces the whole value and may undo earlier facts.
    """

    def __init__(
        self,
        name: str,
        fn: Callable[[Any], bool],
        generate: Generate | None = None,
        attempts: int = BRUTE_ATTEMPTS,
    ) -> None:
        self.name = name
        self.fn = fn
        self.generate = generate
        self.attempts = attempts

    def check(self, obj: Any) -> CheckResult:
        return CheckResult.single(bool(self.fn(obj)), lambda: f"{self.name}: not satisfied by {obj!r}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if self.fn(obj):
            return obj
        for _ in range(self.attempts):
            if self.generate is not None:
                candidate = self.generate(entropy)
            else:
                try:
                    candidate = entropy.arbitrary(obj)
                except TypeError as err:
                    raise MutationExhausted(self.describe(), str(err)) from err
            if self.fn(candidate):
                return candidate
        raise MutationExhausted(
            self.describe(), f"no satisfying value found in {self.attempts} draw(s)"
        )

    def structure(self) -> str:
        return f"brute({self.name})"


def brute(
    name: str,
    fn: Callable[[Any], bool],
    generate: Generate | None = None,
    attempts: int = BRUTE_ATTEMPTS,
) -> BruteFact:
    """A constraint defined by a predicate, satisfied by random search.

    Raises MutationExhausted after `attempts` unsuccessful draws.
    """
    return BruteFact(name, fn, generate=generate, attempts=attempts)
