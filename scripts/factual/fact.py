"""The Fact abstraction: one constraint definition, two operating modes.

A Fact can *check* a value (read-only, returns a CheckResult) and *mutate* a
value (returns a value that passes check, or raises MutationExhausted).
Concrete facts implement exactly those two methods; everything else here is
derived behaviour.

Key types:
    Fact         — abstract base class implementing FactProtocol
    LabeledFact  — wrapper attaching a provenance label without changing logic

Helpers:
    describe(fact)     — label if set, otherwise a structural description
    is_stateful(fact)  — True if the fact (or any sub-fact) carries state
    snapshot(fact)     — deep copy, used to trial stateful facts
    adopt_state(a, b)  — commit a trialled snapshot b back into a

## Stateful facts

Some facts own mutable state that changes on every check() and mutate() call
(e.g. consecutive_int expects 0, then 1, then 2...). Call order is therefore
significant for them. They advertise this with `stateful = True`; loops that
may retry (the satisfy loop, conjunction fixed-points, brute-force scans)
work on snapshots and only commit the state of a successful attempt.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from factual.check import CheckResult
from factual.interfaces import Entropy, FactProtocol

T = TypeVar("T")


class Fact(ABC, Generic[T]):
    """Base class for constraints over values of type T.

    Subclasses implement check() and mutate(). Set the class attribute
    `stateful = True` if check/mutate update internal state, and override
    structure() to give a readable description for diagnostics.
    """

    stateful: bool = False

    @property
    def label(self) -> str | None:
        return None

    @abstractmethod
    def check(self, obj: T) -> CheckResult:
        """Return the violations of this constraint for obj. Never modifies obj."""

    @abstractmethod
    def mutate(self, obj: T, entropy: Entropy) -> T:
        """Return obj, changed if necessary so that it satisfies this constraint.

        Raises MutationExhausted if no satisfying value can be produced.
        Mutable containers may be updated in place; the return value is
        always the value to use.
        """

    def structure(self) -> str:
        """Structural description used when no label is set."""
        return type(self).__name__

    def describe(self) -> str:
        return self.label or self.structure()

    def complement(self) -> Fact[T] | None:
        """Return a fact that passes exactly when this one fails, if known.

        Used by not_() as its mutation strategy. Returns None when no
        explicit complement exists.
        """
        return None

    def labeled(self, name: str) -> LabeledFact[T]:
        """Return a wrapper around this fact carrying the given label."""
        return LabeledFact(self, name)

    # ── Convenience entry points ──────────────────────────────────────────────

    def satisfy(self, obj: T, entropy: Entropy, attempts: int | None = None) -> T:
        """Mutate obj until it passes check; see factual.satisfy.satisfy()."""
        from factual.satisfy import satisfy

        return satisfy(self, obj, entropy, attempts=attempts)

    def build(self, like: T, entropy: Entropy, attempts: int | None = None) -> T:
        """Generate a new value shaped like `like` which satisfies this fact."""
        from factual.satisfy import build

        return build(self, like, entropy, attempts=attempts)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class LabeledFact(Fact[T]):
    """A fact with a label attached.

    Behaves exactly like the wrapped fact, except that every violation it
    reports is prefixed with the label. Relabeling a LabeledFact replaces the
    label rather than nesting.
    """

    def __init__(self, inner: FactProtocol, name: str) -> None:
        if not name:
            raise ValueError("label must be a non-empty string")
        if isinstance(inner, LabeledFact):
            inner = inner.inner
        self.inner: FactProtocol = inner
        self._name: str = name
        self.stateful = is_stateful(inner)

    @property
    def label(self) -> str | None:
        return self._name

    def check(self, obj: T) -> CheckResult:
        return self.inner.check(obj).prefixed(self._name)

    def mutate(self, obj: T, entropy: Entropy) -> T:
        return self.inner.mutate(obj, entropy)

    def structure(self) -> str:
        return structure(self.inner)

    def complement(self) -> Fact[T] | None:
        comp = complement(self.inner)
        if comp is None:
            return None
        return LabeledFact(comp, f"not({self._name})")


# ─── Helpers for any FactProtocol implementation ──────────────────────────────


def structure(fact: FactProtocol) -> str:
    fn = getattr(fact, "structure", None)
    if callable(fn):
        return str(fn())
    return type(fact).__name__


def describe(fact: FactProtocol) -> str:
    """Return the fact's label, or its structural description if unlabeled."""
    return fact.label or structure(fact)


def complement(fact: FactProtocol) -> FactProtocol | None:
    fn = getattr(fact, "complement", None)
    if callable(fn):
        return fn()
    return None


def is_stateful(fact: Any) -> bool:
    return bool(getattr(fact, "stateful", False))


def snapshot(fact: FactProtocol) -> Any:
    """Deep-copy a fact, including any internal state."""
    return copy.deepcopy(fact)


def _attributes(obj: Any) -> dict[str, Any]:
    """Instance attributes of obj, from its __dict__ and any __slots__."""
    found = dict(getattr(obj, "__dict__", {}))
    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name not in ("__dict__", "__weakref__") and hasattr(obj, name):
                found[name] = getattr(obj, name)
    return found


def _is_fact(obj: Any) -> bool:
    return isinstance(obj, FactProtocol)


def adopt_state(target: Any, source: Any) -> None:
    """Make target carry the state of source (a snapshot of target).

    Sub-facts, including those held in lists and tuples, are updated in place
    rather than replaced by their copies. A stateful fact that is also
    referenced from elsewhere (another tree, or a variable kept by the caller)
    therefore keeps tracking state. Every other attribute is rebound.
    """
    if target is source:
        return
    current = _attributes(target)
    for name, value in _attributes(source).items():
        mine = current.get(name)
        if _is_fact(mine) and type(mine) is type(value):
            adopt_state(mine, value)
        elif _same_fact_sequence(mine, value):
            for original, trialled in zip(mine, value):
                adopt_state(original, trialled)
        else:
            setattr(target, name, value)


def _same_fact_sequence(mine: Any, value: Any) -> bool:
    if not isinstance(mine, (list, tuple)) or type(mine) is not type(value):
        return False
    if len(mine) != len(value) or not any(_is_fact(f) for f in mine):
        return False
    return all(type(a) is type(b) for a, b in zip(mine, value))
