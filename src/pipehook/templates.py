"""AppSync mapping templates emitted by the compiler.

A tiny node model renders Velocity (VTL) mapping templates:

    Str     "value"
    Ref     $value
    QRef    $util.qr(value)
    Raw     value, verbatim
    Obj     { "key": node, ... }
    If      #if( predicate ) ... #end
    Compound  nodes joined by newlines
    Block   ## [Start] name. ** ... ## [End] name. **

The context stash is the per-invocation scratch space shared by all functions
of a pipeline resolver. The resolver's own request template writes the
operation identity into it before any function runs; hook functions read it
back so a single Lambda can branch by entity and operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Str:
    value: str


@dataclass(frozen=True)
class Ref:
    value: str


@dataclass(frozen=True)
class QRef:
    value: str


@dataclass(frozen=True)
class Raw:
    value: str


@dataclass(frozen=True)
class Obj:
    attributes: dict[str, Node] = field(default_factory=dict)


@dataclass(frozen=True)
class If:
    predicate: Node
    expression: Node


@dataclass(frozen=True)
class Compound:
    expressions: list[Node]


@dataclass(frozen=True)
class Block:
    name: str
    expression: Node


Node = Union[Str, Ref, QRef, Raw, Obj, If, Compound, Block]


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def render(node: Node, indent: int = 0) -> str:
    """Render a node to template text.

    Args:
        node: Root node
        indent: Current indentation (used for nested objects)

    Returns:
        Template text
    """
    if isinstance(node, Str):
        return f'"{node.value}"'
    if isinstance(node, Ref):
        return f"${node.value}"
    if isinstance(node, QRef):
        return f"$util.qr({node.value})"
    if isinstance(node, Raw):
        return node.value
    if isinstance(node, Obj):
        if not node.attributes:
            return "{}"
        pad = " " * indent
        inner = " " * (indent + 2)
        members = ",\n".join(f'{inner}"{key}": {render(value, indent + 2)}' for key, value in node.attributes.items())
        return f"{{\n{members}\n{pad}}}"
    if isinstance(node, If):
        return f"#if( {render(node.predicate)} )\n{_indent(render(node.expression), '  ')}\n#end"
    if isinstance(node, Compound):
        return "\n".join(render(expr, indent) for expr in node.expressions)
    if isinstance(node, Block):
        return f"## [Start] {node.name}. **\n{render(node.expression, indent)}\n## [End] {node.name}. **"
    raise TypeError(f"Unsupported template node: {type(node).__name__}")


class ContextStash:
    """Keys and accessors of the per-invocation context stash."""

    TYPE_NAME = "typeName"
    FIELD_NAME = "fieldName"
    KEYS = (TYPE_NAME, FIELD_NAME)

    @staticmethod
    def put(key: str, value: str) -> QRef:
        return QRef(f'$ctx.stash.put("{key}", "{value}")')

    @staticmethod
    def get(key: str) -> Str:
        return Str(f'$ctx.stash.get("{key}")')


PASSTHROUGH_RESPONSE_TEMPLATE = "$util.toJson($ctx.result)"


def stash_request_template(type_name: str, field_name: str) -> str:
    """Request template of a pipeline resolver: stash the operation identity, emit an empty payload."""
    return render(
        Block(
            "Stash resolver specific context",
            Compound(
                [
                    ContextStash.put(ContextStash.TYPE_NAME, type_name),
                    ContextStash.put(ContextStash.FIELD_NAME, field_name),
                    Obj({}),
                ]
            ),
        )
    )


def hook_request_template(data_source_name: str, stage: str, entity: str, version: str) -> str:
    """Request template invoking a hook Lambda with the full invocation context."""
    payload = Obj(
        {
            "typeName": ContextStash.get(ContextStash.TYPE_NAME),
            "fieldName": ContextStash.get(ContextStash.FIELD_NAME),
            "arguments": Ref("util.toJson($ctx.arguments)"),
            "identity": Ref("util.toJson($ctx.identity)"),
            "source": Ref("util.toJson($ctx.source)"),
            "request": Ref("util.toJson($ctx.request)"),
            "prev": Ref("util.toJson($ctx.prev)"),
            "stage": Str(stage),
            "model": Str(entity),
        }
    )
    return render(
        Block(
            f"Invoke AWS Lambda data source: {data_source_name}",
            Obj({"version": Str(version), "operation": Str("Invoke"), "payload": payload}),
        )
    )


def hook_response_template() -> str:
    """Response template surfacing a step error to the caller, otherwise forwarding the result."""
    return render(
        Block(
            "Handle error or return result",
            Compound(
                [
                    If(Ref("ctx.error"), Raw("$util.error($ctx.error.message, $ctx.error.type)")),
                    Raw(PASSTHROUGH_RESPONSE_TEMPLATE),
                ]
            ),
        )
    )


def prepend_content(content: str, template: str) -> str:
    """Place hoisted content on the lines before an existing template."""
    return "\n".join([content, template])
