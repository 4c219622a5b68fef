"""Tests for loading notebooks and test-case files."""

import json

import nbformat
import pytest
from nbformat.v4 import new_code_cell, new_markdown_cell, new_notebook, new_output

from autograder.evaluator import evaluate
from autograder.notebook_loader import load_notebook_cells, load_test_cases_file


@pytest.fixture
def notebook_path(tmp_path):
    notebook = new_notebook(cells=[
        new_markdown_cell("# Warm up"),
        new_code_cell(
            "print('Hello')",
            outputs=[new_output("stream", name="stdout", text="Hello\n")],
        ),
        new_code_cell(
            "def add(a, b):\n    return a + b\nadd(2, 3)",
            outputs=[new_output("execute_result", data={"text/plain": "5"}, execution_count=2)],
        ),
        new_code_cell(
            "1 / 0",
            outputs=[new_output("error", ename="ZeroDivisionError", evalue="division by zero", traceback=[])],
        ),
        new_code_cell("x = 1"),
    ])
    path = tmp_path / "homework.ipynb"
    nbformat.write(notebook, str(path))
    return path


def test_load_notebook_cells_code_only(notebook_path):
    """Markdown cells are skipped and outputs are flattened to text."""
    cells = load_notebook_cells(notebook_path)

    assert len(cells) == 4
    assert cells[0].content == "print('Hello')"
    assert cells[0].output == "Hello\n"
    assert cells[1].output == "5\n"
    assert cells[2].output == "ZeroDivisionError: division by zero\n"
    assert cells[3].output == ""


def test_load_notebook_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_notebook_cells(tmp_path / "missing.ipynb")


def test_load_test_cases_yaml(tmp_path):
    """YAML files may wrap the list in a test_cases key; ids are generated."""
    path = tmp_path / "tests.yml"
    path.write_text(
        "test_cases:\n"
        "  - cell_index: 1\n"
        "    test_type: function_exists\n"
        "    test_config: {function_name: add}\n"
        "    points: 3\n"
        "  - cell_index: 0\n"
        "    test_type: output_match\n"
        "    test_config: {expected_output: Hello, exact_match: true}\n"
        "    is_hidden: true\n"
    )

    test_cases = load_test_cases_file(path)

    assert [tc.cell_index for tc in test_cases] == [0, 1]
    assert [tc.id for tc in test_cases] == ["tests-2", "tests-1"]
    assert test_cases[0].is_hidden
    assert test_cases[1].points == 3


def test_load_test_cases_json_list(tmp_path):
    path = tmp_path / "tests.json"
    path.write_text(json.dumps([
        {"id": "a", "cell_index": 0, "test_type": "code_contains", "test_config": {"contains": "print"}},
    ]))
    assert [tc.id for tc in load_test_cases_file(path)] == ["a"]


def test_load_test_cases_unsupported_type(tmp_path):
    path = tmp_path / "tests.txt"
    path.write_text("[]")
    with pytest.raises(ValueError):
        load_test_cases_file(path)


def test_load_test_cases_bad_structure(tmp_path):
    path = tmp_path / "tests.yml"
    path.write_text("just a string\n")
    with pytest.raises(ValueError):
        load_test_cases_file(path)


def test_grade_loaded_notebook(notebook_path, tmp_path):
    path = tmp_path / "tests.yml"
    path.write_text(
        "- {cell_index: 0, test_type: output_match, test_config: {expected_output: hello}, points: 1}\n"
        "- {cell_index: 1, test_type: function_exists, test_config: {function_name: add}, points: 2}\n"
        "- {cell_index: 9, test_type: code_contains, test_config: {contains: import}, points: 1}\n"
    )

    result = evaluate(load_notebook_cells(notebook_path), load_test_cases_file(path))

    assert result.total_score == 3
    assert result.max_score == 4
    assert result.percentage == 75
