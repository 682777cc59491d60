"""Combinators: facts built from other facts.

Factories:
    and_(f1, f2, ...)          — all sub-facts hold
    or_(a, b)                  — at least one of two facts holds
    not_(f)                    — f does not hold
    lens(accessor, f)          — f holds for a sub-part of the value
    prism(accessor, f)         — f holds for a sub-part, when that part exists
    seq(f)                     — f holds for every element of a sequence
    vec_len(n) / vec_of_length — sequence length constraints
    mapped(label, fn)          — the fact to apply is chosen from the value
    predicate(name, fn)        — check-only fact around a read-only predicate

Accessors (read/write pairs stored as data):
    Accessor, attr(name), item(key), optional_attr(name), variant(cls), ABSENT

Provenance:
    Violations from sub-facts are prefixed with a structural tag:
    "and[i]" (only for unlabeled sub-facts; labeled facts prefix themselves),
    "or[i]", "lens(name)", "prism(name)", "[i]", "mapped(label)".

## Conjunction ordering hazard

and_ applies its sub-facts in order. A later sub-fact's mutation may break a
constraint an earlier one already established, so and_ repeats the whole
pass until a full re-check succeeds (a fixed point) or `rounds` passes have
been tried. Facts composed with and_ should constrain independent parts of
the value; where they overlap, put the most specific fact last. The same
facts in a different order may produce different (equally valid) values.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from factual.check import CheckResult, combine
from factual.errors import MutationExhausted
from factual.fact import Fact, adopt_state, complement, describe, is_stateful, snapshot
from factual.interfaces import Entropy, FactProtocol
from factual.limits import AND_ROUNDS, BRUTE_ATTEMPTS
from factual.primitives import Generate

logger = logging.getLogger(__name__)


def _reraise_with(segment: str, err: MutationExhausted) -> MutationExhausted:
    """Return a copy of err whose fact description is prefixed with segment."""
    last = err.last_check.prefixed(segment) if err.last_check is not None else None
    return MutationExhausted(f"{segment} > {err.fact}", err.reason, last)


# ─── Conjunction ──────────────────────────────────────────────────────────────


class AndFact(Fact[Any]):
    """All sub-facts must hold. See the module docstring for ordering."""

    def __init__(self, facts: Sequence[FactProtocol], rounds: int = AND_ROUNDS) -> None:
        if rounds < 1:
            raise ValueError(f"rounds must be >= 1, got {rounds}")
        self.facts: list[FactProtocol] = list(facts)
        self.rounds = rounds
        self.stateful = any(is_stateful(f) for f in self.facts)

    @staticmethod
    def _check_all(facts: Sequence[FactProtocol], obj: Any) -> CheckResult:
        results = []
        for i, f in enumerate(facts):
            r = f.check(obj)
            if f.label is None:
                r = r.prefixed(f"and[{i}]")
            results.append(r)
        return combine(results)

    def check(self, obj: Any) -> CheckResult:
        return self._check_all(self.facts, obj)

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        last = CheckResult.passing()
        for round_no in range(1, self.rounds + 1):
            trial = snapshot(self.facts) if self.stateful else self.facts
            for f in trial:
                obj = f.mutate(obj, entropy)
            probe = snapshot(self.facts) if self.stateful else self.facts
            last = self._check_all(probe, obj)
            if last.ok:
                if self.stateful:
                    for original, trialled in zip(self.facts, trial):
                        adopt_state(original, trialled)
                return obj
            logger.debug(
                "%s: round %d/%d left %d violation(s)",
                self.describe(),
                round_no,
                self.rounds,
                len(last),
            )
        raise MutationExhausted(
            self.describe(),
            f"no fixed point after {self.rounds} round(s)",
            last,
        )

    def structure(self) -> str:
        return f"and({', '.join(describe(f) for f in self.facts)})"


def and_(*facts: FactProtocol, rounds: int = AND_ROUNDS) -> AndFact:
    """Combine facts so that all of them must hold.

    check() reports every violation of every sub-fact (no short-circuit).
    mutate() applies the sub-facts in order and repeats until the whole
    conjunction passes, raising MutationExhausted after `rounds` passes.
    """
    return AndFact(facts, rounds=rounds)


# ─── Disjunction ──────────────────────────────────────────────────────────────


class OrFact(Fact[Any]):
    def __init__(self, a: FactProtocol, b: FactProtocol) -> None:
        self.a = a
        self.b = b
        self.stateful = is_stateful(a) or is_stateful(b)

    def _probe(self, fact: FactProtocol, obj: Any) -> CheckResult:
        return (snapshot(fact) if self.stateful else fact).check(obj)

    def check(self, obj: Any) -> CheckResult:
        ra = self.a.check(obj)
        rb = self.b.check(obj)
        if ra.ok or rb.ok:
            return CheckResult.passing()
        return ra.prefixed("or[0]") + rb.prefixed("or[1]")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        if self._probe(self.a, obj).ok or self._probe(self.b, obj).ok:
            return obj
        branch = self.a if entropy.boolean() else self.b
        return branch.mutate(obj, entropy)

    def structure(self) -> str:
        return f"or({describe(self.a)}, {describe(self.b)})"


def or_(a: FactProtocol, b: FactProtocol) -> OrFact:
    """At least one of a and b must hold.

    Mutation leaves a value that already satisfies either fact untouched;
    otherwise it picks one branch via entropy.boolean() and mutates with it.
    """
    return OrFact(a, b)


# ─── Negation ─────────────────────────────────────────────────────────────────


class NotFact(Fact[Any]):
    """Passes exactly when the wrapped fact fails.

    Mutation strategy, in order:
    1. a value that already fails the wrapped fact is left unchanged;
    2. the wrapped fact's complement(), when it has one;
    3. random search with entropy.arbitrary(value), bounded by `attempts`.
    """

    def __init__(self, fact: FactProtocol, attempts: int = BRUTE_ATTEMPTS) -> None:
        if is_stateful(fact) and complement(fact) is None:
            raise ValueError(
                f"cannot negate stateful fact {describe(fact)!r} without an explicit complement()"
            )
        self.fact = fact
        self.attempts = attempts
        self.stateful = is_stateful(fact)

    def check(self, obj: Any) -> CheckResult:
        inner = self.fact.check(obj)
        return CheckResult.single(
            not inner.ok,
            lambda: f"{self.structure()}: {obj!r} satisfies the negated fact",
        )

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        probe = snapshot(self.fact) if self.stateful else self.fact
        if not probe.check(obj).ok:
            return obj
        comp = complement(self.fact)
        if comp is not None:
            return comp.mutate(obj, entropy)
        for _ in range(self.attempts):
            try:
                candidate = entropy.arbitrary(obj)
            except TypeError as err:
                raise MutationExhausted(self.describe(), str(err)) from err
            if not self.fact.check(candidate).ok:
                return candidate
        raise MutationExhausted(
            self.describe(),
            f"no value violating {describe(self.fact)} found in {self.attempts} draw(s)",
        )

    def structure(self) -> str:
        return f"not({describe(self.fact)})"

    def complement(self) -> FactProtocol:
        return self.fact


def not_(fact: FactProtocol, attempts: int = BRUTE_ATTEMPTS) -> NotFact:
    """Negate a fact.

    Raises ValueError if `fact` is stateful and offers no complement().
    """
    return NotFact(fact, attempts=attempts)


# ─── Accessors ────────────────────────────────────────────────────────────────


class _Absent:
    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()
"""Returned by a prism accessor's get() when the focused part does not exist."""

LOOKUP_ERRORS = (KeyError, IndexError, AttributeError)
"""Raised by an accessor's get() when the focused part is missing."""


@dataclass(frozen=True)
class Accessor:
    """A read/write pair focusing on one part of a larger value.

    get(parent) returns the part (or ABSENT, for prisms).
    set(parent, part) stores the part and returns the parent to use from
    then on: the same object for in-place updates, or a new object for
    immutable parents.
    """

    name: str
    get: Callable[[Any], Any]
    set: Callable[[Any, Any], Any]


def _is_frozen_dataclass(obj: Any) -> bool:
    return dataclasses.is_dataclass(obj) and obj.__dataclass_params__.frozen  # type: ignore[union-attr]


def _get_attr(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def _set_attr(obj: Any, name: str, value: Any) -> Any:
    if isinstance(obj, Mapping):
        return _set_item(obj, name, value)
    if _is_frozen_dataclass(obj):
        return dataclasses.replace(obj, **{name: value})
    if isinstance(obj, tuple) and hasattr(obj, "_replace"):
        return obj._replace(**{name: value})
    setattr(obj, name, value)
    return obj


def _set_item(obj: Any, key: Any, value: Any) -> Any:
    if isinstance(obj, tuple):
        items = list(obj)
        items[key] = value
        return type(obj)(*items) if hasattr(obj, "_fields") else tuple(items)
    obj[key] = value
    return obj


def attr(name: str) -> Accessor:
    """Accessor for attribute `name`.

    Mappings are read and written by key, so the same accessor serves a
    record decoded from JSON or YAML. Frozen dataclasses and namedtuples are
    updated by building a new object; anything else is updated in place with
    setattr.
    """
    return Accessor(
        name=name,
        get=lambda obj: _get_attr(obj, name),
        set=lambda obj, value: _set_attr(obj, name, value),
    )


def item(key: Any) -> Accessor:
    """Accessor for obj[key] (mappings, lists, tuples)."""
    return Accessor(
        name=repr(key) if not isinstance(key, str) else key,
        get=lambda obj: obj[key],
        set=lambda obj, value: _set_item(obj, key, value),
    )


def optional_attr(name: str) -> Accessor:
    """Prism accessor for attribute (or mapping key) `name`, absent while it is None."""

    def get(obj: Any) -> Any:
        value = obj.get(name) if isinstance(obj, Mapping) else getattr(obj, name, None)
        return ABSENT if value is None else value

    return Accessor(name=name, get=get, set=lambda obj, value: _set_attr(obj, name, value))


def variant(cls: type) -> Accessor:
    """Prism accessor focusing on the whole value when it is an instance of cls.

    The Python counterpart of matching one variant of a sum type.
    """
    return Accessor(
        name=cls.__name__,
        get=lambda obj: obj if isinstance(obj, cls) else ABSENT,
        set=lambda obj, value: value,
    )


def _as_accessor(accessor: Accessor | str) -> Accessor:
    if isinstance(accessor, str):
        return attr(accessor)
    return accessor


# ─── Projections ──────────────────────────────────────────────────────────────


class LensFact(Fact[Any]):
    """Applies a fact to the part of a value reached through an Accessor."""

    def __init__(self, accessor: Accessor, fact: FactProtocol) -> None:
        self.accessor = accessor
        self.fact = fact
        self.stateful = is_stateful(fact)

    @property
    def tag(self) -> str:
        return f"lens({self.accessor.name})"

    def check(self, obj: Any) -> CheckResult:
        try:
            part = self.accessor.get(obj)
        except LOOKUP_ERRORS:
            return CheckResult.fail(f"missing {self.accessor.name}").prefixed(self.tag)
        return self.fact.check(part).prefixed(self.tag)

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        try:
            part = self.accessor.get(obj)
        except LOOKUP_ERRORS as err:
            raise MutationExhausted(
                self.describe(), f"missing {self.accessor.name} in {obj!r}"
            ) from err
        try:
            part = self.fact.mutate(part, entropy)
        except MutationExhausted as err:
            raise _reraise_with(self.tag, err) from err
        return self.accessor.set(obj, part)

    def structure(self) -> str:
        return f"{self.tag} > {describe(self.fact)}"

    def complement(self) -> Fact[Any] | None:
        comp = complement(self.fact)
        return LensFact(self.accessor, comp) if comp is not None else None


class PrismFact(Fact[Any]):
    """Like LensFact, but the focused part may be ABSENT.

    A part whose lookup fails (missing key, index or attribute) also counts
    as absent. When absent, check passes and mutate leaves the value
    unchanged; the wrapped fact is not consulted, so stateful facts do not
    advance.
    """

    def __init__(self, accessor: Accessor, fact: FactProtocol) -> None:
        self.accessor = accessor
        self.fact = fact
        self.stateful = is_stateful(fact)

    @property
    def tag(self) -> str:
        return f"prism({self.accessor.name})"

    def _focus(self, obj: Any) -> Any:
        try:
            return self.accessor.get(obj)
        except LOOKUP_ERRORS:
            return ABSENT

    def check(self, obj: Any) -> CheckResult:
        part = self._focus(obj)
        if part is ABSENT:
            return CheckResult.passing()
        return self.fact.check(part).prefixed(self.tag)

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        part = self._focus(obj)
        if part is ABSENT:
            return obj
        try:
            part = self.fact.mutate(part, entropy)
        except MutationExhausted as err:
            raise _reraise_with(self.tag, err) from err
        return self.accessor.set(obj, part)

    def structure(self) -> str:
        return f"{self.tag} > {describe(self.fact)}"


def lens(accessor: Accessor | str, fact: FactProtocol) -> LensFact:
    """Lift a fact about a part into a fact about the whole.

    accessor is an Accessor, or an attribute name as shorthand for attr(name).
    """
    return LensFact(_as_accessor(accessor), fact)


def prism(accessor: Accessor | str, fact: FactProtocol) -> PrismFact:
    """Lift a fact about an optional part into a fact about the whole.

    A string accessor is shorthand for optional_attr(name).
    """
    if isinstance(accessor, str):
        accessor = optional_attr(accessor)
    return PrismFact(accessor, fact)


# ─── Sequences ────────────────────────────────────────────────────────────────


def _rebuild(fact: Fact[Any], obj: Sequence[Any], items: list[Any]) -> Sequence[Any]:
    """Return a sequence of obj's type holding exactly `items`.

    Lists are updated in place and str is joined. Other types are called with
    the items (namedtuples positionally). Raises MutationExhausted when the
    type cannot hold these items, e.g. a str built from non-characters.
    """
    if isinstance(obj, list):
        obj[:] = items
        return obj
    kind = type(obj).__name__
    try:
        if isinstance(obj, str):
            rebuilt: Any = "".join(items)
        elif hasattr(obj, "_fields"):
            rebuilt = type(obj)(*items)
        else:
            rebuilt = type(obj)(items)  # type: ignore[call-arg]
    except (TypeError, ValueError) as err:
        raise MutationExhausted(fact.describe(), f"cannot rebuild {kind}: {err}") from err
    if list(rebuilt) != items:
        raise MutationExhausted(fact.describe(), f"cannot rebuild {kind} from {items!r}")
    return rebuilt


class SeqFact(Fact[Sequence[Any]]):
    """Applies a fact to every element, in index order."""

    def __init__(self, fact: FactProtocol) -> None:
        self.fact = fact
        self.stateful = is_stateful(fact)

    def check(self, obj: Sequence[Any]) -> CheckResult:
        return combine(self.fact.check(x).prefixed(f"[{i}]") for i, x in enumerate(obj))

    def mutate(self, obj: Sequence[Any], entropy: Entropy) -> Sequence[Any]:
        items = []
        for i, x in enumerate(obj):
            try:
                items.append(self.fact.mutate(x, entropy))
            except MutationExhausted as err:
                raise _reraise_with(f"[{i}]", err) from err
        return _rebuild(self, obj, items)

    def structure(self) -> str:
        return f"seq({describe(self.fact)})"


def seq(fact: FactProtocol) -> SeqFact:
    """The fact must hold for every element. An empty sequence passes.

    Violations are tagged with their index ("[2] > expected 0 == 1").
    Stateful facts see the elements in index order.
    """
    return SeqFact(fact)


class VecLenFact(Fact[Sequence[Any]]):
    """The sequence must have exactly `length` elements.

    Mutation truncates long sequences and extends short ones with values
    drawn from generate(entropy), or entropy.arbitrary(template) where the
    template is `like` or the first existing element. A str is extended with
    characters chosen from `like` or from the string itself.
    """

    def __init__(self, length: int, like: Any = None, generate: Generate | None = None) -> None:
        if length < 0:
            raise ValueError(f"length must be >= 0, got {length}")
        self.length = length
        self.like = like
        self.generate = generate

    def check(self, obj: Sequence[Any]) -> CheckResult:
        return CheckResult.single(
            len(obj) == self.length,
            lambda: f"expected length {self.length}, got {len(obj)}",
        )

    def _draw(self, obj: Sequence[Any], entropy: Entropy) -> Any:
        if self.generate is not None:
            return self.generate(entropy)
        if isinstance(obj, str):
            alphabet = self.like if isinstance(self.like, str) and self.like else obj
            if not alphabet:
                raise MutationExhausted(
                    self.describe(), "cannot extend an empty str without `like` or `generate`"
                )
            return entropy.choose(alphabet)
        template = self.like if self.like is not None else (obj[0] if obj else None)
        if template is None:
            raise MutationExhausted(
                self.describe(), "cannot extend an empty sequence without `like` or `generate`"
            )
        try:
            return entropy.arbitrary(template)
        except TypeError as err:
            raise MutationExhausted(self.describe(), str(err)) from err

    def mutate(self, obj: Sequence[Any], entropy: Entropy) -> Sequence[Any]:
        items = list(obj[: self.length])
        while len(items) < self.length:
            items.append(self._draw(obj, entropy))
        return _rebuild(self, obj, items)

    def structure(self) -> str:
        return f"vec_len({self.length})"


def vec_len(length: int, like: Any = None, generate: Generate | None = None) -> VecLenFact:
    """The sequence must contain exactly `length` elements."""
    return VecLenFact(length, like=like, generate=generate)


def vec_of_length(
    length: int,
    fact: FactProtocol,
    like: Any = None,
    generate: Generate | None = None,
) -> AndFact:
    """A sequence of exactly `length` elements, each satisfying `fact`."""
    return and_(vec_len(length, like=like, generate=generate), seq(fact))


# ─── Data-dependent and check-only facts ──────────────────────────────────────


class MappedFact(Fact[Any]):
    """Chooses the fact to apply by looking at the value itself.

    fn is called afresh on every check/mutate, so the facts it returns must
    be stateless: state would not carry over between calls.
    """

    def __init__(self, name: str, fn: Callable[[Any], FactProtocol]) -> None:
        self.name = name
        self.fn = fn

    @property
    def tag(self) -> str:
        return f"mapped({self.name})"

    def check(self, obj: Any) -> CheckResult:
        return self.fn(obj).check(obj).prefixed(self.tag)

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        try:
            return self.fn(obj).mutate(obj, entropy)
        except MutationExhausted as err:
            raise _reraise_with(self.tag, err) from err

    def structure(self) -> str:
        return self.tag


def mapped(name: str, fn: Callable[[Any], FactProtocol]) -> MappedFact:
    """A fact chosen from the data it is applied to.

    Useful for piecewise constraints, e.g. "if x is even then y is divisible
    by 3, otherwise y is divisible by 4".
    """
    return MappedFact(name, fn)


class PredicateFact(Fact[Any]):
    """Check-only fact around a read-only predicate. Cannot mutate."""

    def __init__(self, name: str, fn: Callable[[Any], bool]) -> None:
        self.name = name
        self.fn = fn

    def check(self, obj: Any) -> CheckResult:
        return CheckResult.single(bool(self.fn(obj)), lambda: f"{self.name}: not satisfied by {obj!r}")

    def mutate(self, obj: Any, entropy: Entropy) -> Any:
        raise MutationExhausted(self.describe(), "check-only predicate has no mutation strategy")

    def structure(self) -> str:
        return f"predicate({self.name})"


def predicate(name: str, fn: Callable[[Any], bool]) -> PredicateFact:
    """Wrap a read-only predicate as a check-only fact.

    mutate() always raises MutationExhausted; use brute() for a predicate
    that should also drive generation by random search.
    """
    return PredicateFact(name, fn)
