"""Tests for mapping template rendering."""

import pytest

from pipehook.templates import (
    PASSTHROUGH_RESPONSE_TEMPLATE,
    Block,
    Compound,
    ContextStash,
    If,
    Obj,
    QRef,
    Raw,
    Ref,
    Str,
    hook_request_template,
    hook_response_template,
    prepend_content,
    render,
    stash_request_template,
)


class TestRender:
    """Test rendering of individual nodes."""

    def test_scalars(self) -> None:
        """Test string, reference, quiet reference and raw nodes."""
        assert render(Str("Invoke")) == '"Invoke"'
        assert render(Ref("ctx.error")) == "$ctx.error"
        assert render(QRef("$ctx.stash.put(1)")) == "$util.qr($ctx.stash.put(1))"
        assert render(Raw("#return")) == "#return"

    def test_empty_object(self) -> None:
        """Test that an empty object renders inline."""
        assert render(Obj({})) == "{}"

    def test_nested_object_indentation(self) -> None:
        """Test two-space indentation per nesting level."""
        node = Obj({"a": Str("x"), "b": Obj({"c": Ref("d")})})
        assert render(node) == '{\n  "a": "x",\n  "b": {\n    "c": $d\n  }\n}'

    def test_if(self) -> None:
        """Test conditional rendering."""
        assert render(If(Ref("ok"), Raw("yes"))) == "#if( $ok )\n  yes\n#end"

    def test_block(self) -> None:
        """Test start/end markers around a compound body."""
        rendered = render(Block("Name", Compound([Raw("one"), Raw("two")])))
        assert rendered == "## [Start] Name. **\none\ntwo\n## [End] Name. **"

    def test_unknown_node(self) -> None:
        """Test that unsupported nodes are rejected."""
        with pytest.raises(TypeError):
            render("plain string")  # type: ignore[arg-type]


class TestContextStash:
    """Test stash accessors."""

    def test_keys(self) -> None:
        """Test the stash keys written by every pipeline resolver."""
        assert ContextStash.KEYS == ("typeName", "fieldName")

    def test_put_and_get(self) -> None:
        """Test writer and reader expressions."""
        assert render(ContextStash.put("typeName", "Mutation")) == '$util.qr($ctx.stash.put("typeName", "Mutation"))'
        assert render(ContextStash.get("fieldName")) == '"$ctx.stash.get("fieldName")"'


class TestTemplates:
    """Test the complete templates the compiler emits."""

    def test_stash_request_template(self) -> None:
        """Test that the pipeline request template stashes operation identity."""
        assert stash_request_template("Mutation", "createTodo") == (
            "## [Start] Stash resolver specific context. **\n"
            '$util.qr($ctx.stash.put("typeName", "Mutation"))\n'
            '$util.qr($ctx.stash.put("fieldName", "createTodo"))\n'
            "{}\n"
            "## [End] Stash resolver specific context. **"
        )

    def test_hook_request_template(self) -> None:
        """Test the Lambda invocation payload."""
        template = hook_request_template("AuditLambdaDataSource", "before", "Todo", "2018-05-29")
        lines = template.splitlines()

        assert lines[0] == "## [Start] Invoke AWS Lambda data source: AuditLambdaDataSource. **"
        assert lines[-1] == "## [End] Invoke AWS Lambda data source: AuditLambdaDataSource. **"
        assert '  "version": "2018-05-29",' in lines
        assert '  "operation": "Invoke",' in lines
        assert '    "typeName": "$ctx.stash.get("typeName")",' in lines
        assert '    "fieldName": "$ctx.stash.get("fieldName")",' in lines
        assert '    "arguments": $util.toJson($ctx.arguments),' in lines
        assert '    "prev": $util.toJson($ctx.prev),' in lines
        assert '    "stage": "before",' in lines
        assert '    "model": "Todo"' in lines

    def test_hook_response_template(self) -> None:
        """Test that errors surface and results pass through."""
        assert hook_response_template() == (
            "## [Start] Handle error or return result. **\n"
            "#if( $ctx.error )\n"
            "  $util.error($ctx.error.message, $ctx.error.type)\n"
            "#end\n"
            "$util.toJson($ctx.result)\n"
            "## [End] Handle error or return result. **"
        )

    def test_passthrough_response(self) -> None:
        """Test the pipeline resolver response template."""
        assert PASSTHROUGH_RESPONSE_TEMPLATE == "$util.toJson($ctx.result)"

    def test_prepend_content(self) -> None:
        """Test that hoisted content precedes the original template."""
        assert prepend_content("#set( $id = $util.autoId() )", "{}") == "#set( $id = $util.autoId() )\n{}"
