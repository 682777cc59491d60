"""Declarative fact documents: fact trees described as YAML or plain mappings.

Public API:
    FactDocument        — parsed document: fact, optional `like` template, description
    load_fact(node)     — build a fact from one mapping node
    load_fact_document(text) → FactDocument
    load_fact_file(path)     → FactDocument

A node is a mapping with exactly one constructor key plus an optional
`label`:

    always: null                  never: "reason"
    eq: 7                         ne: 0
    in_set: [1, 2, 3]             in_range: [0, 10]  (or {low: 0, high: 10})
    not: <node>                   and: [<node>, ...]
    or: [<node>, <node>]          seq: <node>
    attr: {name: x, fact: <node>, optional: false}
    item: {key: k, fact: <node>}
    vec_len: 3  (or {length: 3, like: 0})
    consecutive_int: 0
    distinct: null                same: null          different: null

A document is a mapping with a required `fact` node and optional `like`
(the template passed to build()) and `description`.

Design notes:
- Raises FactSchemaError on any structural problem; the error names the
  path of the offending node (e.g. "fact.and[2].attr.fact") and how to fix it.
- Never silently ignores unknown keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

from factual.combinators import and_, attr, item, lens, not_, optional_attr, or_, prism, seq, vec_len
from factual.errors import FactSchemaError
from factual.fact import LabeledFact
from factual.interfaces import FactProtocol
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


# ─── Document ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FactDocument:
    """A loaded fact document.

    Fields:
        fact: The fact tree described by the document's `fact` node.
        like: Template value for build(); None if the document has none.
        description: Free-text description; empty if absent.
    """

    fact: FactProtocol
    like: Any = None
    description: str = ""


# ─── Internal helpers ─────────────────────────────────────────────────────────


def _mapping(node: Any, path: str) -> dict:
    if not isinstance(node, dict):
        raise FactSchemaError(
            path,
            f"expected a mapping, got {type(node).__name__}. "
            f"Fix: write the node as '<constructor>: <argument>'.",
        )
    return node


def _list(arg: Any, path: str) -> list:
    if not isinstance(arg, list):
        raise FactSchemaError(path, f"expected a list, got {type(arg).__name__}.")
    return arg


def _int(arg: Any, path: str) -> int:
    if isinstance(arg, bool) or not isinstance(arg, int):
        raise FactSchemaError(path, f"expected an integer, got {arg!r}.")
    return arg


def _number(arg: Any, path: str) -> Any:
    if arg is not None and (isinstance(arg, bool) or not isinstance(arg, (int, float))):
        raise FactSchemaError(path, f"expected a number or null, got {arg!r}.")
    return arg


def _only_keys(node: dict, allowed: set[str], path: str) -> None:
    unknown = sorted(set(node) - allowed)
    if unknown:
        raise FactSchemaError(
            path,
            f"unknown key(s) {unknown}. Allowed keys: {sorted(allowed)}.",
        )


def _range(arg: Any, path: str) -> FactProtocol:
    if isinstance(arg, list):
        if len(arg) != 2:
            raise FactSchemaError(path, f"expected [low, high], got {len(arg)} item(s).")
        low, high = arg
    elif isinstance(arg, dict):
        _only_keys(arg, {"low", "high"}, path)
        low, high = arg.get("low"), arg.get("high")
    else:
        raise FactSchemaError(
            path, "expected [low, high] or {low: ..., high: ...}."
        )
    return in_range(_number(low, f"{path}.low"), _number(high, f"{path}.high"))


def _projection(arg: Any, path: str, key_field: str) -> FactProtocol:
    spec = _mapping(arg, path)
    allowed = {key_field, "fact"} | ({"optional"} if key_field == "name" else set())
    _only_keys(spec, allowed, path)
    if key_field not in spec or "fact" not in spec:
        raise FactSchemaError(
            path,
            f"missing '{key_field}' or 'fact'. "
            f"Fix: write '{{{key_field}: ..., fact: <node>}}'.",
        )
    inner = load_fact(spec["fact"], f"{path}.fact")
    if key_field == "key":
        return lens(item(spec["key"]), inner)
    name = spec["name"]
    if not isinstance(name, str) or not name:
        raise FactSchemaError(f"{path}.name", "expected a non-empty attribute name.")
    if spec.get("optional", False):
        return prism(optional_attr(name), inner)
    return lens(attr(name), inner)


def _sub_facts(arg: Any, path: str) -> list[FactProtocol]:
    return [load_fact(n, f"{path}[{i}]") for i, n in enumerate(_list(arg, path))]


def _build_and(arg: Any, path: str) -> FactProtocol:
    return and_(*_sub_facts(arg, path))


def _build_or(arg: Any, path: str) -> FactProtocol:
    facts = _sub_facts(arg, path)
    if len(facts) != 2:
        raise FactSchemaError(path, f"or takes exactly 2 facts, got {len(facts)}.")
    return or_(*facts)


def _build_not(arg: Any, path: str) -> FactProtocol:
    inner = load_fact(arg, path)
    try:
        return not_(inner)
    except ValueError as err:
        raise FactSchemaError(path, str(err)) from err


def _build_in_set(arg: Any, path: str) -> FactProtocol:
    return in_set(_list(arg, path))


def _build_consecutive(arg: Any, path: str) -> FactProtocol:
    return consecutive_int(0 if arg is None else _int(arg, path))


def _build_vec_len(arg: Any, path: str) -> FactProtocol:
    like = None
    if isinstance(arg, dict):
        _only_keys(arg, {"length", "like"}, path)
        if "length" not in arg:
            raise FactSchemaError(path, "missing 'length'. Fix: write '{length: n, like: <value>}'.")
        arg, like = arg["length"], arg.get("like")
        path = f"{path}.length"
    length = _int(arg, path)
    if length < 0:
        raise FactSchemaError(path, f"length must be >= 0, got {length}.")
    return vec_len(length, like=like)


_CONSTRUCTORS: dict[str, Callable[[Any, str], FactProtocol]] = {
    "always": lambda arg, path: always(),
    "never": lambda arg, path: never(str(arg) if arg is not None else "declared never"),
    "eq": lambda arg, path: eq(arg),
    "ne": lambda arg, path: ne(arg),
    "in_set": _build_in_set,
    "in_range": _range,
    "not": _build_not,
    "and": _build_and,
    "or": _build_or,
    "attr": lambda arg, path: _projection(arg, path, "name"),
    "item": lambda arg, path: _projection(arg, path, "key"),
    "seq": lambda arg, path: seq(load_fact(arg, path)),
    "vec_len": _build_vec_len,
    "consecutive_int": _build_consecutive,
    "distinct": lambda arg, path: distinct(),
    "same": lambda arg, path: same(),
    "different": lambda arg, path: different(),
}

CONSTRUCTOR_KEYS: frozenset[str] = frozenset(_CONSTRUCTORS)


# ─── Public API ───────────────────────────────────────────────────────────────


def load_fact(node: Any, path: str = "fact") -> FactProtocol:
    """Build a fact from a single declarative node.

    Args:
        node: Mapping with exactly one constructor key and an optional label.
        path: Location of the node, used in error messages.

    Raises:
        FactSchemaError: If the node is not a mapping, has no constructor key,
            more than one, unknown keys, or a malformed argument.
    """
    spec = _mapping(node, path)
    keys = [k for k in spec if k != "label"]
    constructors = [k for k in keys if k in _CONSTRUCTORS]
    unknown = [k for k in keys if k not in _CONSTRUCTORS]
    if unknown:
        raise FactSchemaError(
            path,
            f"unknown constructor(s) {sorted(map(str, unknown))}. "
            f"Fix: use one of {sorted(_CONSTRUCTORS)}.",
        )
    if len(constructors) != 1:
        raise FactSchemaError(
            path,
            f"expected exactly one constructor key, got {len(constructors)}. "
            f"Fix: nest additional constraints under 'and'.",
        )
    key = constructors[0]
    fact = _CONSTRUCTORS[key](spec[key], f"{path}.{key}")

    label = spec.get("label")
    if label is not None:
        if not isinstance(label, str) or not label:
            raise FactSchemaError(f"{path}.label", "expected a non-empty string.")
        fact = LabeledFact(fact, label)
    return fact


def load_fact_document(text: str) -> FactDocument:
    """Parse a YAML fact document.

    Raises:
        FactSchemaError: If the text is not valid YAML, is not a mapping, has
            no `fact` node, or any node is malformed.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise FactSchemaError(
            "document",
            f"YAML parse error: {e}. Fix: correct the syntax at the reported line/column.",
        ) from e

    doc = _mapping(data, "document")
    _only_keys(doc, {"fact", "like", "description"}, "document")
    if "fact" not in doc:
        raise FactSchemaError(
            "document", "missing required 'fact' node. Fix: add a top-level 'fact:' key."
        )
    description = doc.get("description") or ""
    if not isinstance(description, str):
        raise FactSchemaError("description", "expected a string.")
    return FactDocument(
        fact=load_fact(doc["fact"], "fact"),
        like=doc.get("like"),
        description=description,
    )


def load_fact_file(path: str | Path) -> FactDocument:
    """Read and parse a YAML fact document from disk.

    Raises:
        FactSchemaError: If the file does not exist or the document is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FactSchemaError(str(path), "fact document not found.")
    return load_fact_document(path.read_text(encoding="utf-8"))
