"""CloudFormation intrinsic function builders.

Each helper returns the plain JSON structure CloudFormation expects, so
resource properties stay ordinary dicts that serialise with ``json.dumps``.
"""

from __future__ import annotations

from typing import Any


def ref(logical_id: str) -> dict[str, Any]:
    """Build ``{"Ref": logical_id}``."""
    return {"Ref": logical_id}


def get_att(logical_id: str, attribute: str) -> dict[str, Any]:
    """Build ``{"Fn::GetAtt": [logical_id, attribute]}``."""
    return {"Fn::GetAtt": [logical_id, attribute]}


def sub(template: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build ``{"Fn::Sub": [template, variables]}``."""
    return {"Fn::Sub": [template, dict(variables or {})]}


def join(delimiter: str, values: list[Any]) -> dict[str, Any]:
    """Build ``{"Fn::Join": [delimiter, values]}``."""
    return {"Fn::Join": [delimiter, list(values)]}


def if_(condition: str, when_true: Any, when_false: Any) -> dict[str, Any]:
    """Build ``{"Fn::If": [condition, when_true, when_false]}``."""
    return {"Fn::If": [condition, when_true, when_false]}


def referenced_ids(value: Any) -> set[str]:
    """Collect logical ids referenced through ``Ref`` and ``Fn::GetAtt``.

    Pseudo parameters (``AWS::Region`` and friends) are skipped.

    Args:
        value: Any property value (nested dicts/lists allowed)

    Returns:
        Set of referenced logical ids
    """
    found: set[str] = set()
    if isinstance(value, dict):
        for key, inner in value.items():
            if key == "Ref" and isinstance(inner, str):
                if not inner.startswith("AWS::"):
                    found.add(inner)
            elif key == "Fn::GetAtt" and isinstance(inner, list) and inner:
                found.add(str(inner[0]))
            else:
                found |= referenced_ids(inner)
    elif isinstance(value, list):
        for item in value:
            found |= referenced_ids(item)
    return found
