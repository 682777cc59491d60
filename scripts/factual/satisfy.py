"""Entry points: check, mutate, satisfy, and sequence helpers.

satisfy() is the bounded loop that reconciles facts whose single mutate()
pass is not guaranteed to converge:

    repeat up to `attempts` times:
        mutate the value with a trial copy of the fact
        check it against the fact's pre-attempt state
        pass  -> commit the trial state, return the value
        fail  -> record the violations, try again
    raise SatisfyFailed(attempts, last_check)

A MutationExhausted raised inside an attempt ends that attempt only.
SatisfyFailed is the one hard error surfaced to callers; its last_check
names the sub-facts that were still violated.

Trial copies exist for stateful facts (see factual.fact): a failed attempt
must not leave the fact's state advanced. Stateless facts are used directly.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from factual.check import CheckResult, combine
from factual.errors import MutationExhausted, SatisfyFailed
from factual.fact import adopt_state, is_stateful, snapshot
from factual.interfaces import Entropy, FactProtocol
from factual.limits import SATISFY_ATTEMPTS

logger = logging.getLogger(__name__)


def check(fact: FactProtocol, value: Any) -> CheckResult:
    """Check value against fact. Never modifies value."""
    return fact.check(value)


def mutate(fact: FactProtocol, value: Any, entropy: Entropy) -> Any:
    """Run a single mutate() pass. May raise MutationExhausted."""
    return fact.mutate(value, entropy)


def _verify(fact: FactProtocol, value: Any, stateful: bool) -> CheckResult:
    probe = snapshot(fact) if stateful else fact
    return probe.check(value)


def satisfy(
    fact: FactProtocol,
    value: Any,
    entropy: Entropy,
    attempts: int | None = None,
) -> Any:
    """Mutate value until it passes fact.check(), within a retry budget.

    Args:
        fact: The constraint to satisfy.
        value: Starting value. Mutable values may be updated in place.
        entropy: Randomness source for mutation.
        attempts: Maximum mutate-then-check attempts (default SATISFY_ATTEMPTS).

    Returns:
        A value that passes fact.check().

    Raises:
        SatisfyFailed: every attempt ended with violations or exhaustion.
        ValueError: attempts < 1.
    """
    budget = SATISFY_ATTEMPTS if attempts is None else attempts
    if budget < 1:
        raise ValueError(f"attempts must be >= 1, got {budget}")

    stateful = is_stateful(fact)
    last = CheckResult.passing()

    for attempt in range(1, budget + 1):
        trial = snapshot(fact) if stateful else fact
        try:
            value = trial.mutate(value, entropy)
        except MutationExhausted as err:
            last = err.last_check if err.last_check is not None else _verify(fact, value, stateful)
            if last.ok:
                last = CheckResult.fail(f"mutation exhausted: {err}")
            logger.debug("satisfy attempt %d/%d exhausted: %s", attempt, budget, err)
            continue

        last = _verify(fact, value, stateful)
        if last.ok:
            if stateful:
                adopt_state(fact, trial)
            if attempt > 1:
                logger.debug("satisfy succeeded on attempt %d/%d", attempt, budget)
            return value
        logger.debug(
            "satisfy attempt %d/%d left %d violation(s): %s",
            attempt,
            budget,
            len(last),
            "; ".join(last.messages),
        )

    logger.warning(
        "satisfy gave up after %d attempt(s): %s", budget, "; ".join(last.messages)
    )
    raise SatisfyFailed(budget, last)


def build(
    fact: FactProtocol,
    like: Any,
    entropy: Entropy,
    attempts: int | None = None,
) -> Any:
    """Generate a value shaped like `like` that satisfies fact.

    The starting point is entropy.arbitrary(like); `like` itself is never
    modified.
    """
    return satisfy(fact, entropy.arbitrary(like), entropy, attempts=attempts)


def build_seq(
    fact: FactProtocol,
    like: Any,
    count: int,
    entropy: Entropy,
    attempts: int | None = None,
) -> list[Any]:
    """Build `count` values in order with the same fact.

    Stateful facts advance once per value, so consecutive_int(0) yields
    0, 1, 2, ...
    """
    return [build(fact, like, entropy, attempts=attempts) for _ in range(count)]


def check_seq(fact: FactProtocol, values: Iterable[Any]) -> CheckResult:
    """Check values in order with the same fact, tagging each with "item i".

    Stateful facts advance once per value. Use a fresh fact (not the one that
    built the values) when verifying a built sequence.
    """
    return combine(fact.check(v).prefixed(f"item {i}") for i, v in enumerate(values))
