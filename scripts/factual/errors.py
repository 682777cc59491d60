"""Exception taxonomy for factual.

Unmet constraints are never raised: they are returned as CheckResult data.
Exceptions are reserved for the cases where no usable value can be produced.

Key types:
    FactError          — base class for every exception raised by factual
    MutationExhausted  — a fact could not produce a satisfying value within its
                         own bounded search; always propagates immediately
    SatisfyFailed      — the satisfy loop ran out of attempts; carries the last
                         CheckResult for diagnosis
    CheckFailed        — raised by CheckResult.unwrap() (an AssertionError, so
                         test runners report it as a failed assertion)
    FactSchemaError    — a declarative fact document is malformed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from factual.check import CheckResult


class FactError(Exception):
    """Base class for all factual exceptions."""


class MutationExhausted(FactError):
    """Raised when a fact's mutate() cannot produce a satisfying value.

    fact is the describe() string of the fact that gave up.
    reason is a human-readable explanation (e.g. "empty range 5..4").
    last_check, when present, is the most recent check of the partially
    mutated value (set by conjunctions that failed to reach a fixed point).
    """

    def __init__(
        self,
        fact: str,
        reason: str,
        last_check: CheckResult | None = None,
    ) -> None:
        self.fact: str = fact
        self.reason: str = reason
        self.last_check: CheckResult | None = last_check
        super().__init__(f"{fact}: {reason}")


class SatisfyFailed(FactError):
    """Raised when satisfy() exhausts its attempt budget.

    last_check is the CheckResult of the final attempt and is always failing;
    the exception message lists its violations so that the still-violated
    labeled sub-facts are visible in a traceback.
    """

    def __init__(self, attempts: int, last_check: CheckResult) -> None:
        self.attempts: int = attempts
        self.last_check: CheckResult = last_check
        detail = "; ".join(last_check.messages) or "no violations recorded"
        super().__init__(
            f"could not satisfy constraint after {attempts} attempt(s): {detail}"
        )

    @property
    def violations(self) -> list[str]:
        return self.last_check.messages


class CheckFailed(FactError, AssertionError):
    """Raised by CheckResult.unwrap() when a check has violations.

    violations is the list of rendered violation strings. Always non-empty.
    """

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations: list[str] = list(violations)
        if len(self.violations) == 1:
            msg = f"Check failed: {self.violations[0]}"
        else:
            msg = "Check failed:\n" + "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(msg)


class FactSchemaError(FactError, ValueError):
    """Raised when a declarative fact document cannot be turned into a fact.

    path locates the offending node, e.g. "fact.and[2].attr".
    """

    def __init__(self, path: str, message: str) -> None:
        self.path: str = path
        super().__init__(f"{path}: {message}")
