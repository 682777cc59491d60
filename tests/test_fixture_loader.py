"""Tests for tests/fixtures/fixture_loader.py.

Validates the FactFixture loader itself: file loading, property access and
generator correctness. These are unit tests of the fixture infrastructure;
they verify that the fixture contract is stable so that the scenario tests
built on top of it can be trusted.

Test classes:
    TestFactFixtureInit       — fixture loads default and custom paths
    TestFactFixtureProperties — axes are present and non-empty
    TestGenerators            — generated cases are well-formed with unique ids
"""

from __future__ import annotations

from pathlib import Path

import pytest

from factual.interfaces import FactProtocol
from fixtures.fixture_loader import (
    CheckTestCase,
    FactFixture,
    SatisfyTestCase,
    SchemaErrorTestCase,
)

_FIXTURE_PATH = Path(__file__).parent / "fixtures" / "facts.yaml"


class TestFactFixtureInit:
    def test_default_path_loads_successfully(self) -> None:
        assert FactFixture().check_cases

    def test_custom_path_loads_successfully(self) -> None:
        assert FactFixture(str(_FIXTURE_PATH)).check_cases

    def test_custom_pathlib_path_loads_successfully(self) -> None:
        assert FactFixture(_FIXTURE_PATH).satisfy_cases

    def test_missing_file_raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FactFixture(tmp_path / "missing.yaml")

    def test_missing_axes_default_to_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("check_cases: {}\n")
        fixture = FactFixture(path)
        assert fixture.satisfy_cases == {}
        assert list(fixture.generate_schema_error_cases()) == []


class TestFactFixtureProperties:
    @pytest.mark.parametrize("axis", ["check_cases", "satisfy_cases", "schema_errors"])
    def test_axis_is_non_empty_mapping(self, axis: str) -> None:
        value = getattr(FactFixture(), axis)
        assert isinstance(value, dict)
        assert value


class TestGenerators:
    def test_check_cases(self) -> None:
        cases = list(FactFixture().generate_check_cases())
        assert all(isinstance(tc, CheckTestCase) for tc in cases)
        assert len({tc.id for tc in cases}) == len(cases)
        assert all(tc.id.startswith("check:") for tc in cases)

    def test_check_case_without_violations_expects_pass(self) -> None:
        cases = {tc.name: tc for tc in FactFixture().generate_check_cases()}
        assert cases["eq_pass"].violations == ()
        assert cases["eq_fail"].violations == ("expected 0 == 7",)

    def test_check_case_builds_fresh_facts(self) -> None:
        tc = next(iter(FactFixture().generate_check_cases()))
        first, second = tc.fact(), tc.fact()
        assert isinstance(first, FactProtocol)
        assert first is not second

    def test_satisfy_cases_default_seed(self) -> None:
        cases = {tc.name: tc for tc in FactFixture().generate_satisfy_cases()}
        assert all(isinstance(tc, SatisfyTestCase) for tc in cases.values())
        assert cases["eq_on_field"].seed == 42
        assert cases["either_branch"].seed == 7

    def test_schema_error_cases(self) -> None:
        cases = list(FactFixture().generate_schema_error_cases())
        assert all(isinstance(tc, SchemaErrorTestCase) for tc in cases)
        assert all(tc.path.startswith("fact") for tc in cases)
