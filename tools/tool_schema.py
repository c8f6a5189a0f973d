# tools/tool_schema.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# JSON-Schema primitive type names → Python predicate
_TYPE_CHECKS = {
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
    "string": lambda v: isinstance(v, str),
    "boolean": lambda v: isinstance(v, bool),
    "null": lambda v: v is None,
    # bool is an int subclass in Python; JSON treats them as distinct
    "integer": lambda v: (isinstance(v, int) and not isinstance(v, bool))
    or (isinstance(v, float) and v.is_integer()),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
}

ROOT_PATH = "(root)"


@dataclass(frozen=True)
class ToolDescriptor:
    """Static metadata the model sees when planning."""
    name: str
    description: str
    schema: Dict[str, Any] = field(default_factory=dict)


def _join(path: str, key: Any) -> str:
    if path == ROOT_PATH or not path:
        return str(key)
    return f"{path}/{key}"


def _type_ok(expected: Any, value: Any) -> bool:
    names = expected if isinstance(expected, list) else [expected]
    for n in names:
        check = _TYPE_CHECKS.get(n)
        if check is None or check(value):
            return True
    return False


def _validate(schema: Dict[str, Any], value: Any, path: str, errors: Dict[str, str]) -> None:
    expected = schema.get("type")
    if expected is not None and not _type_ok(expected, value):
        shown = " or ".join(expected) if isinstance(expected, list) else expected
        errors[path] = f"must be {shown}"
        return  # nested checks make no sense on the wrong type

    enum = schema.get("enum")
    if enum is not None and value not in enum:
        errors[path] = "must be one of " + ", ".join(json.dumps(e) for e in enum)
        return

    if isinstance(value, str) and "minLength" in schema and len(value) < schema["minLength"]:
        errors[path] = f"must NOT have fewer than {schema['minLength']} characters"
        return

    if isinstance(value, list):
        min_items = schema.get("minItems")
        if min_items is not None and len(value) < min_items:
            errors[path] = f"must NOT have fewer than {min_items} items"
            return
        items = schema.get("items")
        if isinstance(items, dict):
            for i, item in enumerate(value):
                _validate(items, item, _join(path, i), errors)
        return

    if isinstance(value, dict):
        props: Dict[str, Any] = schema.get("properties") or {}
        for req in schema.get("required") or []:
            if req not in value:
                errors[_join(path, req)] = "is required"
        for key, sub in props.items():
            if key in value:
                _validate(sub, value[key], _join(path, key), errors)
        if schema.get("additionalProperties") is False:
            for key in value:
                if key not in props:
                    errors[_join(path, key)] = "is not an allowed property"


def validate_schema(schema: Dict[str, Any], value: Any) -> Dict[str, str]:
    """
    Check `value` against a JSON-Schema-like `schema`.

    Supported keywords: type, required, properties, enum, items, minItems,
    minLength, additionalProperties (false only).
    Returns {property_path: reason}; empty dict means valid.
    """
    errors: Dict[str, str] = {}
    _validate(schema or {}, value, ROOT_PATH, errors)
    return errors


def format_schema_errors(errors: Dict[str, str]) -> Optional[str]:
    if not errors:
        return None
    return ", ".join(f"{p}: {reason}" for p, reason in errors.items())


def to_openai_tool(descriptor: ToolDescriptor) -> Dict[str, Any]:
    """Function-calling envelope for /chat/completions."""
    return {
        "type": "function",
        "function": {
            "name": descriptor.name,
            "description": descriptor.description,
            "parameters": descriptor.schema,
        },
    }


def to_openai_tools(descriptors: List[ToolDescriptor]) -> List[Dict[str, Any]]:
    return [to_openai_tool(d) for d in descriptors]
