"""Check results: the diagnostics returned by every Fact.check() call.

A check never raises for an unmet constraint. It returns a CheckResult, which
is either passing (no violations) or an ordered, non-empty tuple of
Violations. Results compose by concatenation, so a conjunction of facts
reports every violation of every sub-fact in a single pass.

Key types:
    Violation    — frozen dataclass: message + provenance path
    CheckResult  — frozen dataclass: ordered tuple of Violations (empty = pass)
    combine()    — associative concatenation of any number of results
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from factual.errors import CheckFailed


# ─── Violation ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Violation:
    """A single unmet constraint.

    message is the innermost human-readable description produced by the fact
    that rejected the value (e.g. "expected 0 == 7").
    path records provenance, outermost first: every label or structural tag
    (e.g. "and[1]", "lens(x)", "[3]") the violation passed through on its way
    up the fact tree.
    """

    message: str
    path: tuple[str, ...] = field(default_factory=tuple)

    def prefixed(self, segment: str) -> Violation:
        return Violation(message=self.message, path=(segment, *self.path))

    def __str__(self) -> str:
        return " > ".join((*self.path, self.message))


# ─── CheckResult ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckResult:
    """The outcome of checking one value against one fact.

    An empty violations tuple means the value passed. Results are immutable:
    every transformation (prefixed, map, +) returns a new CheckResult.
    """

    violations: tuple[Violation, ...] = ()

    @classmethod
    def passing(cls) -> CheckResult:
        """Construct a result with no violations."""
        return cls()

    @classmethod
    def fail(cls, message: str) -> CheckResult:
        """Construct a result with exactly one violation."""
        return cls((Violation(message),))

    @classmethod
    def single(cls, ok: bool, message: str | Callable[[], str]) -> CheckResult:
        """Pass if ok, otherwise fail with message.

        message may be a zero-argument callable so that expensive formatting
        only happens on failure.
        """
        if ok:
            return cls.passing()
        return cls.fail(message() if callable(message) else message)

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        """Rendered violation strings, in order, with provenance prefixes."""
        return [str(v) for v in self.violations]

    def prefixed(self, segment: str) -> CheckResult:
        """Prepend a provenance segment to every violation."""
        if self.ok:
            return self
        return CheckResult(tuple(v.prefixed(segment) for v in self.violations))

    def map(self, fn: Callable[[str], str]) -> CheckResult:
        """Rewrite every violation message, keeping provenance paths."""
        return CheckResult(
            tuple(Violation(fn(v.message), v.path) for v in self.violations)
        )

    def unwrap(self) -> None:
        """Raise CheckFailed if there are any violations.

        Intended for test code: `fact.check(value).unwrap()` reads as an
        assertion.
        """
        if not self.ok:
            raise CheckFailed(self.messages)

    def __add__(self, other: CheckResult) -> CheckResult:
        if not isinstance(other, CheckResult):
            return NotImplemented
        return CheckResult(self.violations + other.violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)


def combine(*results: CheckResult | Iterable[CheckResult]) -> CheckResult:
    """Concatenate results in order.

    Accepts results as positional arguments or a single iterable of results.
    The combined result passes iff every input passed.
    """
    if len(results) == 1 and not isinstance(results[0], CheckResult):
        results = tuple(results[0])
    violations: list[Violation] = []
    for r in results:
        violations.extend(r.violations)  # type: ignore[union-attr]
    return CheckResult(tuple(violations))
