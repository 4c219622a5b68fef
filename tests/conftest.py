"""Shared fixtures for auto-grader tests."""

import pytest

from autograder.models import NotebookAssignment, Submission, SubmissionCell, TestCase
from autograder.store import GradingStore


@pytest.fixture
def cells():
    """A small submitted notebook."""
    return [
        SubmissionCell(content="print('Hello')", output="Hello\n"),
        SubmissionCell(content="def add(a, b):\n    return a + b\nprint(add(2, 3))", output="5\n"),
        SubmissionCell(content="total = 10\nprint('total =', total)", output="total = 10\n"),
    ]


@pytest.fixture
def test_cases():
    """Test cases covering every test type, one of them hidden."""
    return [
        TestCase(
            id="t1",
            cell_index=0,
            test_type="output_match",
            test_config={"expected_output": "Hello", "exact_match": True},
            points=2,
        ),
        TestCase(
            id="t2",
            cell_index=1,
            test_type="function_exists",
            test_config={"function_name": "add"},
            points=3,
        ),
        TestCase(
            id="t3",
            cell_index=1,
            test_type="code_contains",
            test_config={"contains": "while"},
            points=1,
        ),
        TestCase(
            id="t4",
            cell_index=2,
            test_type="variable_value",
            test_config={"variable_name": "total", "expected_value": 10},
            points=4,
            is_hidden=True,
        ),
    ]


@pytest.fixture
def store(tmp_path, cells, test_cases):
    """A store holding one assignment, its test cases and one submission."""
    grading_store = GradingStore(tmp_path / "data")
    grading_store.save_assignment(NotebookAssignment(id="a1", notebook_id="nb1", title="Loops"))
    for test_case in test_cases:
        grading_store.add_test_case("nb1", test_case)
    grading_store.save_submission(
        Submission(id="s1", assignment_id="a1", student_id="alice", submitted_content=cells)
    )
    return grading_store
