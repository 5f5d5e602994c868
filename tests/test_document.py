"""Tests for compile request and compiled output documents."""

import json
from pathlib import Path

import pytest
import yaml

from pipehook.document import CompileRequest, dump_graph, load_graph, load_request
from pipehook.errors import DocumentError
from pipehook.resources.graph import Resource, ResourceGraph

REQUEST = {
    "template": {
        "Resources": {
            "CreateTodoResolver": {
                "Type": "AWS::AppSync::Resolver",
                "Properties": {"RequestMappingTemplate": "{}"},
            }
        }
    },
    "stack_mapping": {"CreateTodoResolver": "Todo"},
    "hoisted": {"CreateTodoResolver": "INJECTED"},
    "entities": [
        {"name": "Todo", "directives": {"model": {}, "hook": {"name": "auditlog", "before": {"create": True}}}}
    ],
}


class TestLoadRequest:
    """Test reading compile requests."""

    def test_yaml(self, tmp_path: Path) -> None:
        """Test a YAML request and its arena."""
        path = tmp_path / "request.yaml"
        path.write_text(yaml.safe_dump(REQUEST))

        request = load_request(path)
        assert request.entities[0].name == "Todo"
        assert request.entities[0].hook().before.create

        arena = request.to_arena()
        assert "CreateTodoResolver" in arena.graph
        assert arena.graph.group_of("CreateTodoResolver") == "Todo"
        assert arena.hoisted.consume("CreateTodoResolver") == "INJECTED"

    def test_json(self, tmp_path: Path) -> None:
        """Test that JSON input is accepted too."""
        path = tmp_path / "request.json"
        path.write_text(json.dumps(REQUEST))
        assert load_request(path).stack_mapping == {"CreateTodoResolver": "Todo"}

    def test_defaults(self) -> None:
        """Test an empty request."""
        request = CompileRequest()
        assert request.entities == []
        assert len(request.to_arena().graph) == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that an unreadable file raises DocumentError."""
        with pytest.raises(DocumentError, match="Cannot read"):
            load_request(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that a syntax error raises DocumentError."""
        path = tmp_path / "broken.yaml"
        path.write_text("entities: [\n")
        with pytest.raises(DocumentError, match="Cannot parse"):
            load_request(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """Test that a top-level list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(DocumentError, match="must contain a mapping"):
            load_request(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        """Test that schema violations raise DocumentError."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"entities": [{"directives": {}}]}))
        with pytest.raises(DocumentError, match="Invalid compile request"):
            load_request(path)


class TestCompiledOutput:
    """Test writing and reading compiled output."""

    def test_dump_and_load(self, tmp_path: Path) -> None:
        """Test that output carries resources and stack mapping."""
        graph = ResourceGraph()
        graph.set("Role", Resource(type="AWS::IAM::Role"))
        graph.set("DataSource", Resource(type="AWS::AppSync::DataSource", depends_on=["Role"]))
        graph.assign_group("Hooks", "Role")
        graph.assign_group("Hooks", "DataSource")

        output = dump_graph(graph)
        data = json.loads(output)
        assert set(data) == {"Resources", "StackMapping"}
        assert data["StackMapping"] == {"Role": "Hooks", "DataSource": "Hooks"}

        path = tmp_path / "compiled.json"
        path.write_text(output)
        loaded = load_graph(path)
        assert loaded.deployment_order() == ["Role", "DataSource"]
        assert loaded.group_of("DataSource") == "Hooks"

    def test_load_graph_not_a_mapping(self, tmp_path: Path) -> None:
        """Test that non-mapping output is rejected."""
        path = tmp_path / "compiled.json"
        path.write_text("[]")
        with pytest.raises(DocumentError):
            load_graph(path)
