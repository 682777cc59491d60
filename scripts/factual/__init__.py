"""factual — composable constraints that can both check and generate values.

A fact is one constraint definition with two operating modes: check(value)
returns diagnostics without touching the value, and mutate(value, entropy)
returns a value that passes check (or raises MutationExhausted). Facts are
composed with combinators into trees describing whole data structures.

Public API (re-exported from submodules):

Core types:
    Fact                — abstract base class for constraints
    LabeledFact         — label wrapper; violations are prefixed with the label
    FactProtocol        — runtime-checkable protocol satisfied by every fact
    Entropy             — runtime-checkable protocol for randomness sources
    SeededEntropy       — reproducible Entropy over random.Random(seed)
    CheckResult         — ordered violations returned by check (empty = pass)
    Violation           — one unmet constraint: message + provenance path

Leaf facts:
    always, never, eq, ne, in_set, in_range, same, different,
    consecutive_int, distinct, predicate, brute, choice_of

Combinators:
    and_, or_, not_, lens, prism, seq, vec_len, vec_of_length, mapped

Accessors:
    Accessor, attr, item, optional_attr, variant, ABSENT

Entry points:
    check(fact, value)                          — diagnostics, never raises
    mutate(fact, value, entropy)                — single mutation pass
    satisfy(fact, value, entropy, attempts)     — bounded mutate/check loop
    build(fact, like, entropy)                  — generate from a template
    build_seq / check_seq                       — ordered sequences
    first_satisfying(candidates, fact)          — deterministic scan

Declarative (YAML) facts:
    FactDocument, load_fact, load_fact_document, load_fact_file

Errors:
    FactError, MutationExhausted, SatisfyFailed, CheckFailed, FactSchemaError

Default bounds:
    SATISFY_ATTEMPTS, AND_ROUNDS, BRUTE_ATTEMPTS
"""

from factual.brute import BruteFact, ChoiceFact, brute, choice_of, first_satisfying
from factual.check import CheckResult, Violation, combine
from factual.combinators import (
    ABSENT,
    Accessor,
    AndFact,
    LensFact,
    MappedFact,
    NotFact,
    OrFact,
    PredicateFact,
    PrismFact,
    SeqFact,
    VecLenFact,
    and_,
    attr,
    item,
    lens,
    mapped,
    not_,
    optional_attr,
    or_,
    predicate,
    prism,
    seq,
    variant,
    vec_len,
    vec_of_length,
)
from factual.declarative import (
    FactDocument,
    load_fact,
    load_fact_document,
    load_fact_file,
)
from factual.entropy import SeededEntropy, random_entropy
from factual.errors import (
    CheckFailed,
    FactError,
    FactSchemaError,
    MutationExhausted,
    SatisfyFailed,
)
from factual.fact import Fact, LabeledFact, describe, snapshot
from factual.interfaces import Entropy, FactProtocol
from factual.limits import AND_ROUNDS, BRUTE_ATTEMPTS, SATISFY_ATTEMPTS
from factual.primitives import (
    always,
    consecutive_int,
    different,
    distinct,
    eq,
    in_range,
    in_set,
    ne,
    never,
    same,
)
from factual.satisfy import build, build_seq, check, check_seq, mutate, satisfy

__all__ = [
    # Core types
    "Fact",
    "LabeledFact",
    "FactProtocol",
    "Entropy",
    "SeededEntropy",
    "random_entropy",
    "CheckResult",
    "Violation",
    "combine",
    "describe",
    "snapshot",
    # Leaf facts
    "always",
    "never",
    "eq",
    "ne",
    "in_set",
    "in_range",
    "same",
    "different",
    "consecutive_int",
    "distinct",
    "predicate",
    "brute",
    "choice_of",
    # Combinators
    "and_",
    "or_",
    "not_",
    "lens",
    "prism",
    "seq",
    "vec_len",
    "vec_of_length",
    "mapped",
    # Fact classes
    "AndFact",
    "OrFact",
    "NotFact",
    "LensFact",
    "PrismFact",
    "SeqFact",
    "VecLenFact",
    "MappedFact",
    "PredicateFact",
    "BruteFact",
    "ChoiceFact",
    # Accessors
    "Accessor",
    "attr",
    "item",
    "optional_attr",
    "variant",
    "ABSENT",
    # Entry points
    "check",
    "mutate",
    "satisfy",
    "build",
    "build_seq",
    "check_seq",
    "first_satisfying",
    # Declarative
    "FactDocument",
    "load_fact",
    "load_fact_document",
    "load_fact_file",
    # Errors
    "FactError",
    "MutationExhausted",
    "SatisfyFailed",
    "CheckFailed",
    "FactSchemaError",
    # Bounds
    "SATISFY_ATTEMPTS",
    "AND_ROUNDS",
    "BRUTE_ATTEMPTS",
]
