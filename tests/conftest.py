"""Shared pytest fixtures and helpers for the factual test suite.

Provides:
- Module-level sample record types (Point, User, Pair) used across test modules.
- Module-level helper _entropy(seed) for tests that need several independent
  entropy sources.
- Module-level _FACT_FIXTURE singleton for YAML-driven scenario tests.

Module-level helpers (import directly):
    Point, User, Pair       — mutable dataclass, frozen dataclass, namedtuple
    _entropy(seed)          — fresh SeededEntropy
    _FACT_FIXTURE           — FactFixture singleton (loaded once, shared across tests)

pytest fixtures:
    entropy         — SeededEntropy(42), fresh per test.
    point           — Point(0, 0), fresh per test.
    user            — User with default field values.
    fact_fixture    — FactFixture singleton (YAML-driven test data).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import pytest

from factual.entropy import SeededEntropy

# Import after production imports so PYTHONPATH=scripts:tests resolves fixtures/
from fixtures.fixture_loader import FactFixture


# ─── Fact Fixture Singleton ───────────────────────────────────────────────────
# Loaded once at module import time; import _FACT_FIXTURE directly in
# parametrize decorators (module-level eval).

_FACT_FIXTURE = FactFixture()


# ─── Sample Record Types ──────────────────────────────────────────────────────


@dataclass
class Point:
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class User:
    id: int = 0
    name: str = ""
    age: int = 0
    email: str | None = None


class Pair(NamedTuple):
    left: int
    right: int


# ─── Module-Level Helpers ─────────────────────────────────────────────────────


def _entropy(seed: int = 42) -> SeededEntropy:
    """Return a fresh, seeded entropy source."""
    return SeededEntropy(seed)


# ─── pytest Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def entropy() -> SeededEntropy:
    return _entropy(42)


@pytest.fixture
def point() -> Point:
    return Point()


@pytest.fixture
def user() -> User:
    return User()


@pytest.fixture
def fact_fixture() -> FactFixture:
    return _FACT_FIXTURE
