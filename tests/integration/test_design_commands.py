"""Integration tests for design and registry commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from studio_cli.app import app
from studio_cli.models.component import ComponentInstance, DesignDocument

runner = CliRunner()


@pytest.fixture
def design(tmp_path: Path) -> Path:
    path = tmp_path / "home.json"
    result = runner.invoke(app, ["design", "new", str(path), "--name", "Home"])
    assert result.exit_code == 0, result.output
    return path


def _doc(path: Path) -> DesignDocument:
    return DesignDocument.model_validate_json(path.read_text())


def _insert(path: Path, parent: str, type_name: str, *extra: str) -> str:
    before = set(_doc(path).instances)
    result = runner.invoke(app, ["design", "insert", str(path), parent, type_name, *extra])
    assert result.exit_code == 0, result.output
    [new_id] = set(_doc(path).instances) - before
    return new_id


class TestDesignCommands:
    def test_new(self, design: Path):
        doc = _doc(design)
        assert doc.name == "Home"
        assert doc.breakpoints == "tailwind"
        assert doc.instances[doc.root_id].type == "container"

    def test_new_refuses_overwrite(self, design: Path):
        result = runner.invoke(app, ["design", "new", str(design)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_new_with_designer_breakpoints(self, tmp_path: Path):
        path = tmp_path / "d.json"
        result = runner.invoke(app, ["design", "new", str(path), "--breakpoints", "designer"])
        assert result.exit_code == 0
        assert _doc(path).breakpoints == "designer"

    def test_insert_and_tree(self, design: Path):
        root = _doc(design).root_id
        row = _insert(design, root, "row")
        _insert(design, row, "col", "--props", '{"span": 6}')
        doc = _doc(design)
        [col] = [i for i in doc.instances.values() if i.type == "col"]
        assert col.props["span"] == 6
        assert col.depth == 2

        result = runner.invoke(app, ["design", "tree", str(design)])
        assert result.exit_code == 0
        assert "Home" in result.output
        assert col.id in result.output

    def test_insert_rejected(self, design: Path):
        root = _doc(design).root_id
        row = _insert(design, root, "row")
        result = runner.invoke(app, ["design", "insert", str(design), row, "button"])
        assert result.exit_code == 9
        assert "not allowed" in result.output

    def test_insert_bad_json(self, design: Path):
        root = _doc(design).root_id
        result = runner.invoke(app, ["design", "insert", str(design), root, "text", "--props", "{oops"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_move_and_remove(self, design: Path):
        root = _doc(design).root_id
        a = _insert(design, root, "container")
        b = _insert(design, root, "container")
        text = _insert(design, a, "text")

        result = runner.invoke(app, ["design", "move", str(design), text, b])
        assert result.exit_code == 0
        assert _doc(design).instances[b].children == [text]

        result = runner.invoke(app, ["design", "move", str(design), a, a])
        assert result.exit_code == 9

        result = runner.invoke(app, ["design", "remove", str(design), b])
        assert result.exit_code == 0
        assert "Removed 2" in result.output
        assert set(_doc(design).instances) == {root, a}

    def test_set_and_resolve(self, design: Path):
        root = _doc(design).root_id
        text = _insert(design, root, "text")
        result = runner.invoke(app, ["design", "set", str(design), text, "--styles", '{"width": "100%"}'])
        assert result.exit_code == 0
        result = runner.invoke(
            app, ["design", "responsive", str(design), text, "md", "--json", '{"styles": {"width": "50%"}}'],
        )
        assert result.exit_code == 0

        result = runner.invoke(
            app, ["design", "resolve", str(design), text, "--breakpoint", "lg", "--format", "json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["styles"]["width"] == "50%"

        result = runner.invoke(
            app, ["design", "resolve", str(design), text, "-b", "lg", "--desktop-first", "--format", "json"],
        )
        assert json.loads(result.stdout)["styles"]["width"] == "100%"

        result = runner.invoke(app, ["design", "responsive", str(design), text, "md", "--clear"])
        assert result.exit_code == 0
        assert _doc(design).instances[text].responsive == {}

    def test_resolve_unknown_breakpoint(self, design: Path):
        root = _doc(design).root_id
        result = runner.invoke(app, ["design", "resolve", str(design), root, "-b", "tablet"])
        assert result.exit_code == 1
        assert "Unknown breakpoint" in result.output

    def test_set_requires_values(self, design: Path):
        root = _doc(design).root_id
        result = runner.invoke(app, ["design", "set", str(design), root])
        assert result.exit_code == 1

    def test_validate_clean(self, design: Path):
        result = runner.invoke(app, ["design", "validate", str(design)])
        assert result.exit_code == 0
        assert "Design is valid" in result.output

    def test_validate_broken(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        doc = DesignDocument(
            root_id="root",
            instances={
                "root": ComponentInstance(id="root", type="container", children=["ghost"]),
            },
        )
        path.write_text(doc.model_dump_json())
        result = runner.invoke(app, ["design", "validate", str(path), "--format", "json"])
        assert result.exit_code == 9
        assert json.loads(result.stdout)[0]["code"] == "dangling_child"

        # Editing commands refuse the broken document
        result = runner.invoke(app, ["design", "tree", str(path)])
        assert result.exit_code == 9

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["design", "tree", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_check_grid_overflow(self, design: Path):
        root = _doc(design).root_id
        row = _insert(design, root, "row")
        a = _insert(design, row, "col")
        b = _insert(design, row, "col")
        for col, span in ((a, 8), (b, 6)):
            runner.invoke(
                app, ["design", "responsive", str(design), col, "md", "--json", json.dumps({"props": {"span": span}})],
            )
        result = runner.invoke(app, ["design", "check", str(design), a, "--format", "json"])
        assert result.exit_code == 1
        [conflict] = json.loads(result.stdout)
        assert conflict["type"] == "layout_conflict"
        assert conflict["breakpoints"] == ["md"]

    def test_check_whole_design_reports_row_once(self, design: Path):
        root = _doc(design).root_id
        row = _insert(design, root, "row")
        cols = [_insert(design, row, "col") for _ in range(3)]
        for col in cols:
            runner.invoke(
                app, ["design", "responsive", str(design), col, "md", "--json", '{"props": {"span": 6}}'],
            )
        result = runner.invoke(app, ["design", "check", str(design), "--format", "json"])
        assert result.exit_code == 1
        [conflict] = json.loads(result.stdout)
        assert conflict["breakpoints"] == ["md"]

    def test_duplicate(self, design: Path):
        root = _doc(design).root_id
        box = _insert(design, root, "container")
        _insert(design, box, "text")
        result = runner.invoke(app, ["design", "duplicate", str(design), box])
        assert result.exit_code == 0, result.output
        assert "2 instance(s)" in result.output
        doc = _doc(design)
        assert len(doc.instances) == 5
        assert doc.instances[root].children[0] == box
        assert len(doc.instances[root].children) == 2

    def test_duplicate_root_rejected(self, design: Path):
        root = _doc(design).root_id
        result = runner.invoke(app, ["design", "duplicate", str(design), root])
        assert result.exit_code == 9

    def test_check_clean(self, design: Path):
        result = runner.invoke(app, ["design", "check", str(design)])
        assert result.exit_code == 0
        assert "No responsive conflicts" in result.output


class TestRegistryCommands:
    def test_list(self):
        result = runner.invoke(app, ["registry", "list"])
        assert result.exit_code == 0
        for type_name in ("container", "row", "col", "button"):
            assert type_name in result.output

    def test_list_by_category_json(self):
        result = runner.invoke(app, ["registry", "list", "--category", "layout", "--format", "json"])
        assert result.exit_code == 0
        assert [d["type"] for d in json.loads(result.stdout)] == ["col", "container", "row"]

    def test_show(self):
        result = runner.invoke(app, ["registry", "show", "row"])
        assert result.exit_code == 0
        assert "allowed children" in result.output
        assert "col" in result.output

    def test_show_unknown(self):
        result = runner.invoke(app, ["registry", "show", "slider"])
        assert result.exit_code == 9
