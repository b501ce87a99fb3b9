"""
Serialization helpers for Schema objects.

Provides JSON/YAML round-trip via an intermediate dict representation, so an
inferred schema can be saved as a variable template and passed back to the
schema-given import. Offsets are written for readability only; loading
recomputes them from column order.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from tabstore.errors import InvalidSchemaError
from tabstore.model import Schema, Variable, VarKind, VarRole


def variable_to_dict(v: Variable) -> Dict[str, Any]:
    return {
        "name": v.name,
        "role": v.role.value,
        "kind": v.kind.value,
        "width": v.width,
        "offset": v.offset,
    }


def variable_from_dict(d: Dict[str, Any]) -> Variable:
    try:
        return Variable(
            name=d["name"],
            kind=VarKind(d["kind"]),
            width=int(d["width"]),
            role=VarRole(d.get("role", VarRole.EXPLANATORY.value)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSchemaError(f"Invalid variable definition {d!r}: {e}") from e


def schema_to_dict(s: Schema) -> Dict[str, Any]:
    return {
        "row_width": s.row_width(),
        "variables": [variable_to_dict(v) for v in s],
    }


def schema_from_dict(d: Dict[str, Any]) -> Schema:
    if not isinstance(d, dict):
        raise InvalidSchemaError(f"Schema definition must be a mapping, got {type(d).__name__}")
    return Schema(variable_from_dict(v) for v in d.get("variables") or [])


def schema_to_json(s: Schema) -> str:
    return json.dumps(schema_to_dict(s), sort_keys=True)


def schema_from_json(s: str) -> Schema:
    d = json.loads(s)
    return schema_from_dict(d)


def schema_to_yaml(s: Schema) -> str:
    return yaml.safe_dump(schema_to_dict(s), sort_keys=False)


def schema_from_yaml(s: str) -> Schema:
    d = yaml.safe_load(s)
    return schema_from_dict(d)
