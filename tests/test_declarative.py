"""Tests for factual.declarative — YAML fact documents.

BDD Acceptance Criteria:
    AC-D1: Given a declarative node, when loaded, then the resulting fact
           reports exactly the violations listed in facts.yaml.
    AC-D2: Given a malformed node, when loaded, then FactSchemaError names
           the path of the offending node.
    AC-D3: Given a YAML document with fact/like/description, when loaded,
           then a FactDocument is returned whose fact builds from `like`.

Coverage:
    - load_fact: every constructor key (via facts.yaml check_cases), labels,
      attr with optional=true, vec_len with like
    - load_fact_document: YAML syntax errors, missing/unknown top-level keys
    - load_fact_file: reads from disk, missing file
"""

from __future__ import annotations

from pathlib import Path

import pytest

from factual.declarative import (
    CONSTRUCTOR_KEYS,
    FactDocument,
    load_fact,
    load_fact_document,
    load_fact_file,
)
from factual.errors import FactSchemaError
from factual.satisfy import build, build_seq, check_seq
from conftest import _FACT_FIXTURE, User, _entropy
from fixtures.fixture_loader import CheckTestCase, SchemaErrorTestCase


_USER_DOCUMENT = """\
description: A registered user
like: {id: 0, role: "", age: 0}
fact:
  and:
    - item: {key: id, fact: {consecutive_int: 1}}
      label: id
    - item: {key: role, fact: {in_set: [admin, member]}}
    - item: {key: age, fact: {in_range: [18, 99]}}
"""


# ─── YAML-driven scenarios ────────────────────────────────────────────────────


class TestCheckScenarios:
    @pytest.mark.parametrize(
        "tc",
        [pytest.param(tc, id=tc.id) for tc in _FACT_FIXTURE.generate_check_cases()],
    )
    def test_violations_match(self, tc: CheckTestCase) -> None:
        """AC-D1"""
        assert tuple(tc.fact().check(tc.value).messages) == tc.violations

    @pytest.mark.parametrize(
        "tc",
        [pytest.param(tc, id=tc.id) for tc in _FACT_FIXTURE.generate_check_cases()],
    )
    def test_check_is_idempotent(self, tc: CheckTestCase) -> None:
        fact = tc.fact()
        assert fact.check(tc.value) == fact.check(tc.value)


class TestSchemaErrors:
    @pytest.mark.parametrize(
        "tc",
        [pytest.param(tc, id=tc.id) for tc in _FACT_FIXTURE.generate_schema_error_cases()],
    )
    def test_error_names_path(self, tc: SchemaErrorTestCase) -> None:
        """AC-D2"""
        with pytest.raises(FactSchemaError) as exc_info:
            load_fact(tc.node)
        assert exc_info.value.path == tc.path
        assert str(exc_info.value).startswith(f"{tc.path}: ")

    def test_unknown_constructor_lists_alternatives(self) -> None:
        with pytest.raises(FactSchemaError, match="Fix: use one of"):
            load_fact({"bogus": 1})

    def test_schema_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            load_fact({"eq": 1, "ne": 2})


# ─── load_fact details ────────────────────────────────────────────────────────


class TestLoadFact:
    def test_label(self) -> None:
        fact = load_fact({"eq": 1, "label": "one"})
        assert fact.label == "one"

    def test_attr_lens(self) -> None:
        fact = load_fact({"attr": {"name": "age", "fact": {"in_range": [18, 65]}}})
        assert fact.check(User(age=3)).messages == ["lens(age) > expected 3 to be within 18..65"]

    def test_optional_attr_prism(self) -> None:
        fact = load_fact({"attr": {"name": "email", "optional": True, "fact": {"ne": ""}}})
        assert fact.check(User()).ok
        assert fact.check(User(email="")).messages == ["prism(email) > expected '' != ''"]

    def test_attr_unknown_key(self) -> None:
        with pytest.raises(FactSchemaError, match="unknown key"):
            load_fact({"attr": {"name": "x", "fact": {"eq": 1}, "extra": 1}})

    def test_item_rejects_optional(self) -> None:
        with pytest.raises(FactSchemaError) as exc_info:
            load_fact({"item": {"key": "x", "fact": {"eq": 1}, "optional": True}})
        assert exc_info.value.path == "fact.item"

    def test_vec_len_with_like(self) -> None:
        fact = load_fact({"vec_len": {"length": 3, "like": ""}})
        value = fact.mutate([], _entropy())
        assert len(value) == 3 and all(isinstance(v, str) for v in value)

    def test_vec_len_mapping_requires_length(self) -> None:
        with pytest.raises(FactSchemaError, match="missing 'length'"):
            load_fact({"vec_len": {"like": 0}})

    def test_consecutive_int_default_start(self) -> None:
        assert load_fact({"consecutive_int": None}).mutate(9, _entropy()) == 0

    def test_never_without_reason(self) -> None:
        assert load_fact({"never": None}).check(0).messages == ["never: declared never"]

    def test_every_constructor_key_is_known(self) -> None:
        assert CONSTRUCTOR_KEYS == {
            "always", "never", "eq", "ne", "in_set", "in_range", "not", "and",
            "or", "attr", "item", "seq", "vec_len", "consecutive_int",
            "distinct", "same", "different",
        }


# ─── Documents ────────────────────────────────────────────────────────────────


class TestLoadFactDocument:
    def test_document_fields(self) -> None:
        """AC-D3"""
        doc = load_fact_document(_USER_DOCUMENT)
        assert isinstance(doc, FactDocument)
        assert doc.description == "A registered user"
        assert doc.like == {"id": 0, "role": "", "age": 0}

    def test_document_builds_valid_records(self) -> None:
        doc = load_fact_document(_USER_DOCUMENT)
        users = build_seq(doc.fact, doc.like, 4, _entropy(11))
        assert [u["id"] for u in users] == [1, 2, 3, 4]
        assert check_seq(load_fact_document(_USER_DOCUMENT).fact, users).ok

    def test_labeled_violation(self) -> None:
        doc = load_fact_document(_USER_DOCUMENT)
        result = doc.fact.check({"id": 5, "role": "admin", "age": 30})
        assert result.messages == ["id > lens(id) > expected 1 (consecutive from 1), got 5"]

    def test_minimal_document(self) -> None:
        doc = load_fact_document("fact: {eq: 3}")
        assert doc.like is None
        assert doc.description == ""
        assert build(doc.fact, doc.like, _entropy()) == 3

    def test_yaml_syntax_error(self) -> None:
        with pytest.raises(FactSchemaError, match="YAML parse error") as exc_info:
            load_fact_document("fact: {eq: [1, 2")
        assert exc_info.value.path == "document"

    def test_missing_fact(self) -> None:
        with pytest.raises(FactSchemaError, match="missing required 'fact'"):
            load_fact_document("like: 0")

    def test_unknown_top_level_key(self) -> None:
        with pytest.raises(FactSchemaError, match="unknown key"):
            load_fact_document("fact: {eq: 1}\nfacts: {eq: 2}")

    def test_document_must_be_mapping(self) -> None:
        with pytest.raises(FactSchemaError) as exc_info:
            load_fact_document("- eq: 1")
        assert exc_info.value.path == "document"

    def test_nested_error_path(self) -> None:
        with pytest.raises(FactSchemaError) as exc_info:
            load_fact_document(_USER_DOCUMENT.replace("[18, 99]", "[18]"))
        assert exc_info.value.path == "fact.and[2].item.fact.in_range"


class TestLoadFactFile:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "user.yaml"
        path.write_text(_USER_DOCUMENT)
        assert load_fact_file(path).description == "A registered user"
        assert load_fact_file(str(path)).like == {"id": 0, "role": "", "age": 0}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FactSchemaError, match="not found"):
            load_fact_file(tmp_path / "absent.yaml")
