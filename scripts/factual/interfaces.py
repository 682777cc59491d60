"""Structural interfaces for facts and entropy sources.

This module defines Protocol interfaces (@runtime_checkable) so that code
outside this package can participate without inheriting from any base class:

    FactProtocol — the {check, mutate, label} capability every constraint has
    Entropy      — the randomness capability consumed by mutate()

factual.fact.Fact is the in-package base class that satisfies FactProtocol;
factual.entropy.SeededEntropy is the default Entropy implementation.
Combinators accept anything satisfying FactProtocol.

## Runtime checking limitations

isinstance() against a @runtime_checkable Protocol only verifies that the
object has attributes with the right *names*, not that their signatures
match. A class with ``def check(self) -> None`` passes
``isinstance(obj, FactProtocol)``. Static type checkers enforce the full
signatures; isinstance() is a convenience check only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from factual.check import CheckResult


T = TypeVar("T")


@runtime_checkable
class Entropy(Protocol):
    """A source of randomness consumed (never owned) by mutate().

    Implementations must be deterministic for a given seed: the same seed
    yields the same sequence of derived choices, so a failing build can be
    replayed exactly.
    """

    def int_in_range(self, low: int, high: int) -> int:
        """Return an integer in the inclusive range [low, high]."""
        ...

    def float_in_range(self, low: float, high: float) -> float:
        """Return a float in the inclusive range [low, high]."""
        ...

    def choose(self, options: Sequence[T]) -> T:
        """Return one element of a non-empty sequence, uniformly."""
        ...

    def boolean(self) -> bool:
        """Return True or False with equal probability."""
        ...

    def arbitrary(self, like: Any) -> Any:
        """Return an arbitrary value with the same shape as `like`.

        Raises TypeError if values of that shape cannot be generated.
        """
        ...


@runtime_checkable
class FactProtocol(Protocol):
    """Any constraint must implement this.

    check() is read-only and returns diagnostics as data.
    mutate() returns a value that passes check(), or raises
    factual.errors.MutationExhausted.
    label is an optional human-readable name used for provenance.
    """

    @property
    def label(self) -> str | None:
        ...

    def check(self, obj: Any) -> CheckResult:
        ...

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        ...
